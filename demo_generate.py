#!/usr/bin/env python3
"""
Demo: Derive a record family and render it.

Shows the generated Python module plus both graph modes (SIMPLE, DETAILED).
"""

from crd.derivation import derive
from crd.examples import build_example_article_record
from crd.backends import DotMode, PythonMode, generate_python, save_dot_file, save_python_file


def main():
    family = derive(build_example_article_record())

    print("=" * 80)
    print("RECORD FAMILY DEMO")
    print("=" * 80)

    print(f"\nVariants: {[v.name for v in family.variants]}")
    print(f"Interfaces: {[i.name for i in family.interfaces]}")
    print(f"Conversions: {len(family.conversions)}")

    print("\nGENERATED MODULE:")
    print("-" * 80)
    print(generate_python(family, mode=PythonMode.FULL))

    save_python_file(family, "article_records.py")
    print("Saved to: article_records.py")

    for mode in [DotMode.SIMPLE, DotMode.DETAILED]:
        filename = f"article_{mode.value}.dot"
        save_dot_file(family, filename, mode=mode)
        print(f"Saved to: {filename}")

    print("\n" + "=" * 80)
    print("To visualize the conversion graph:")
    print("  dot -Tpng article_simple.dot -o article_simple.png")
    print("  dot -Tpng article_detailed.dot -o article_detailed.png")
    print("=" * 80)


if __name__ == "__main__":
    main()
