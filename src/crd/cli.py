"""
Command line entry point.

    crd schema.yaml                      Python source on stdout
    crd schema.yaml -o models.py         Python source to a file
    crd schema.yaml -f dot               Conversion graph
    crd schema.yaml -f json --strict     Structured output, strict checks

Any derivation error aborts with a single diagnostic on stderr and exit
status 1; no output is written for a failed derivation.
"""

import argparse
import logging
import sys
from typing import List, Optional

from crd.backends import DotMode, PythonMode, generate_dot, generate_python
from crd.derivation import derive
from crd.errors import DerivationError
from crd.model import DerivedFamily
from crd.schema_parser import parse_schema_file
from crd.serialization import family_to_json, family_to_yaml

logger = logging.getLogger(__name__)

FORMATS = ("python", "records", "json", "yaml", "dot", "dot-detailed")


def render(family: DerivedFamily, fmt: str) -> str:
    if fmt == "python":
        return generate_python(family, mode=PythonMode.FULL)
    if fmt == "records":
        return generate_python(family, mode=PythonMode.RECORDS)
    if fmt == "json":
        return family_to_json(family) + "\n"
    if fmt == "yaml":
        return family_to_yaml(family)
    if fmt == "dot":
        return generate_dot(family, mode=DotMode.SIMPLE) + "\n"
    if fmt == "dot-detailed":
        return generate_dot(family, mode=DotMode.DETAILED) + "\n"
    raise ValueError(f"Unknown output format: {fmt}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="crd",
        description="Derive record variants and conversions from a canonical record schema",
    )
    parser.add_argument("schema", help="Path to schema file (.yaml, .yml or .json)")
    parser.add_argument("-o", "--output", help="Output file (defaults to stdout)")
    parser.add_argument("-f", "--format", choices=FORMATS, default="python", help="Output format")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject duplicate variant declarations and generated name collisions",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log derivation steps")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        record, options = parse_schema_file(args.schema)
        if args.strict:
            options.strict_variants = True
            options.strict_names = True
        family = derive(record, options)
        output = render(family, args.format)
    except (DerivationError, OSError) as e:
        print(f"crd: error: {e}", file=sys.stderr)
        return 1

    if args.output:
        try:
            with open(args.output, 'w', encoding='utf-8') as f:
                f.write(output)
        except OSError as e:
            print(f"crd: error: cannot write `{args.output}`: {e.strerror or e}", file=sys.stderr)
            return 1
        logger.info("wrote %s", args.output)
    else:
        sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
