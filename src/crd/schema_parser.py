"""
Schema Parser (Raw Input → CanonicalRecord).

Reads a schema description file, YAML or JSON, into a CanonicalRecord
and its DerivationOptions.

Schema Format:
    name: Article
    docstring: A published article.
    imports:
      - from datetime import datetime
    variants:
      - Draft
    annotations:
      - attr_for("Draft", "@dataclass(frozen=True)")
    fields:
      - name: title
        type: str
      - name: published_at
        type: datetime
        annotations:
          - not_in("Draft")
    options:
      strict_variants: false
      fallbacks:
        datetime: datetime.min

Syntax Notes:
    - `annotations` may be a single string or a list
    - directive arguments contain commas, so write them as block list
      items rather than inside a YAML flow list [...]
"""

import json
import logging
import os
from typing import Any, Dict, Optional, Tuple

import yaml

from crd.config import DerivationOptions, options_from_dict
from crd.errors import SchemaParseError, UnnamedField
from crd.model import CanonicalRecord
from crd.serialization import record_from_dict

logger = logging.getLogger(__name__)

_FORMATS_BY_EXTENSION = {
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
}


def _load(content: str, fmt: str) -> Any:
    if fmt == "json":
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise SchemaParseError(f"Invalid JSON schema: {e}")
    if fmt == "yaml":
        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise SchemaParseError(f"Invalid YAML schema: {e}")
    raise SchemaParseError(f"Unsupported schema format: {fmt}")


def _check_structure(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise SchemaParseError("Schema must be a mapping at the top level")

    if not data.get("name"):
        raise SchemaParseError("Schema is missing the canonical record `name`")

    for key in ("variants", "fields"):
        value = data.get(key)
        if value is not None and not isinstance(value, list):
            raise SchemaParseError(f"`{key}` must be a list")

    for key in ("annotations", "imports"):
        value = data.get(key)
        if value is not None and not isinstance(value, (list, str)):
            raise SchemaParseError(f"`{key}` must be a string or a list")

    options = data.get("options")
    if options is not None and not isinstance(options, dict):
        raise SchemaParseError("`options` must be a mapping")

    docstring = data.get("docstring")
    if docstring is not None and not isinstance(docstring, str):
        raise SchemaParseError("`docstring` must be a string")

    for position, entry in enumerate(data.get("fields") or [], start=1):
        if not isinstance(entry, dict):
            raise SchemaParseError(f"Field #{position} must be a mapping")
        if not entry.get("name"):
            raise UnnamedField(f"Field #{position} has no name; named fields are required")
        if not entry.get("type"):
            raise SchemaParseError(f"Field `{entry['name']}` has no type")

    return data


def parse_schema_dict(data: Any) -> Tuple[CanonicalRecord, DerivationOptions]:
    """
    Build a CanonicalRecord and options from an already-loaded mapping.

    Raises:
        SchemaParseError: If the structure is wrong
        UnnamedField: If a field has no name
    """
    data = _check_structure(data)
    record = record_from_dict(data)
    options = options_from_dict(data.get("options"))
    logger.debug("parsed schema %s with %d fields", record.name, len(record.fields))
    return record, options


def parse_schema_string(content: str, fmt: str = "yaml") -> Tuple[CanonicalRecord, DerivationOptions]:
    """
    Parse schema text into a CanonicalRecord.

    Args:
        content: Schema text
        fmt: "yaml" or "json"

    Returns:
        (CanonicalRecord, DerivationOptions)

    Raises:
        SchemaParseError: If parsing fails
    """
    if not content or not content.strip():
        raise SchemaParseError("Schema is empty")
    return parse_schema_dict(_load(content, fmt))


def parse_schema_file(filepath: str, fmt: Optional[str] = None) -> Tuple[CanonicalRecord, DerivationOptions]:
    """
    Parse a schema file into a CanonicalRecord.

    Args:
        filepath: Path to a .yaml, .yml or .json file
        fmt: Optional explicit format (defaults to the file extension)

    Returns:
        (CanonicalRecord, DerivationOptions)

    Raises:
        FileNotFoundError: If file doesn't exist
        SchemaParseError: If the file cannot be read or decoded, or parsing fails
    """
    if fmt is None:
        extension = os.path.splitext(filepath)[1].lower()
        fmt = _FORMATS_BY_EXTENSION.get(extension)
        if fmt is None:
            raise SchemaParseError(f"Cannot infer schema format from `{filepath}`")

    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
    except FileNotFoundError:
        raise FileNotFoundError(f"Schema file not found: {filepath}")
    except UnicodeDecodeError as e:
        raise SchemaParseError(f"Schema file `{filepath}` is not valid UTF-8: {e}")
    except OSError as e:
        raise SchemaParseError(f"Cannot read schema file `{filepath}`: {e.strerror or e}")

    return parse_schema_string(content, fmt=fmt)


__all__ = [
    "parse_schema_dict",
    "parse_schema_string",
    "parse_schema_file",
    "SchemaParseError",
]
