"""
Safe navigation over untyped JSON documents.

Character exports are loosely structured: any level of nesting may be
missing, null, or of an unexpected type. Every read in the normalizer goes
through these helpers so that each default is explicit at the call site.
"""
import math
import re
from typing import Any, Iterable, List, Mapping, Optional


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def dig(data: Any, *path: Any, default: Any = None) -> Any:
    """
    Walk ``path`` through nested mappings/lists and return the value found.

    Returns ``default`` when a step is missing, when a value on the way is
    ``None``, or when a step cannot be applied to the current value (for
    example a string key against a list).

    Example:
        dig(raw, "system", "details", "xp", "value", default=0)
    """
    current = data
    for key in path:
        if isinstance(current, Mapping):
            if key not in current:
                return default
            current = current[key]
        elif isinstance(current, list) and isinstance(key, int):
            if not -len(current) <= key < len(current):
                return default
            current = current[key]
        else:
            return default
        if current is None:
            return default
    return current


def as_mapping(value: Any) -> Mapping[str, Any]:
    """Return ``value`` if it is a mapping, otherwise an empty dict."""
    return value if isinstance(value, Mapping) else {}


def as_list(value: Any) -> List[Any]:
    """Return ``value`` if it is a list, otherwise an empty list."""
    return value if isinstance(value, list) else []


def as_text(value: Any, default: str = "") -> str:
    """Coerce a scalar to a string. Mappings, lists, booleans and falsy values give ``default``."""
    if value is None or isinstance(value, (Mapping, list, bool)):
        return default
    if value == "" or value == 0:
        return default
    return str(value)


def as_bool(value: Any) -> bool:
    """Strict boolean read: only ``True`` (or a non-zero number) counts as set."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return False


def as_int(value: Any, default: Optional[int] = 0) -> Optional[int]:
    """
    Coerce a JSON number (or numeric string) to ``int``.

    Floats are floored; booleans, NaN and anything unparseable give ``default``.
    """
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return default
        return math.floor(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            return int(match.group(1))
    return default


def as_number(value: Any) -> Optional[float]:
    """Return ``value`` as int/float when it is a real number, else ``None``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return None
        return value
    return None


def string_list(value: Any) -> List[str]:
    """Keep only the string entries of a list-like value."""
    return [str(entry) for entry in as_list(value) if isinstance(entry, (str, int, float)) and not isinstance(entry, bool)]


def first_match(entries: Iterable[Mapping[str, Any]], predicate) -> Optional[Mapping[str, Any]]:
    """Return the first entry satisfying ``predicate`` in iteration order."""
    for entry in entries:
        if predicate(entry):
            return entry
    return None
