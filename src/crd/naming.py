"""
Deterministic naming of generated members.

Every generated name is a pure function of a field or variant name.
No uniqueness check happens here; collisions are reported separately
by find_member_collisions().
"""

import keyword
from collections import Counter
from typing import Any, Iterable, List


def is_valid_name(name: Any) -> bool:
    """A name usable as a Python class or attribute: an identifier, not a keyword."""
    return isinstance(name, str) and name.isidentifier() and not keyword.iskeyword(name)


def pascal_to_snake(s: str) -> str:
    """
    Lower-case a PascalCase name, inserting '_' before each upper-case letter.

    The first character never gets a separator. There is no acronym
    handling: "HTTPRequest" becomes "h_t_t_p_request".
    """
    out = []
    for i, c in enumerate(s):
        if i > 0 and c.isupper():
            out.append("_")
        out.append(c.lower())
    return "".join(out)


def snake_to_pascal(s: str) -> str:
    """Capitalize after every '_' and drop the separators."""
    out = []
    capitalize = True
    for c in s:
        if c == "_":
            capitalize = True
        elif capitalize:
            out.append(c.upper())
            capitalize = False
        else:
            out.append(c)
    return "".join(out)


def capability_name(field_name: str) -> str:
    return f"Has{snake_to_pascal(field_name)}"


def absence_name(field_name: str) -> str:
    return f"HasNo{snake_to_pascal(field_name)}"


def getter_name(field_name: str) -> str:
    return f"get_{field_name}"


def setter_name(field_name: str) -> str:
    return f"set_{field_name}"


def from_name(source: str) -> str:
    """Zero-argument conversion, generated on the target."""
    return f"from_{pascal_to_snake(source)}"


def into_name(target: str) -> str:
    """Required-arguments conversion, generated on the source."""
    return pascal_to_snake(f"into{target}")


def into_defaults_name(target: str) -> str:
    """Defaults-favoring conversion, generated on the source."""
    return pascal_to_snake(f"into{target}_defaults")


def find_member_collisions(names: Iterable[str]) -> List[str]:
    """Return every name that occurs more than once, in first-seen order."""
    names = list(names)
    counts = Counter(names)
    seen = []
    for name in names:
        if counts[name] > 1 and name not in seen:
            seen.append(name)
    return seen


__all__ = [
    "pascal_to_snake",
    "snake_to_pascal",
    "capability_name",
    "absence_name",
    "getter_name",
    "setter_name",
    "from_name",
    "into_name",
    "into_defaults_name",
    "find_member_collisions",
]
