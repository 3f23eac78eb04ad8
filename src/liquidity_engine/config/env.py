"""
Environment variable references in configuration values.

`${VAR}` is replaced by the value of VAR and `${VAR:default}` falls back to
`default` when VAR is not set.
"""

import os
import re
from typing import Any, Callable

ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")

_TRUE_WORDS = ("true", "yes", "on")
_FALSE_WORDS = ("false", "no", "off")


def expand_env(value: str, keep_unresolved: bool = False) -> str:
    """
    Replace every reference in `value`.

    A reference to an unset variable without a default becomes an empty
    string, or stays verbatim when `keep_unresolved` is True.

    Example:
        >>> expand_env("${HOME_DOES_NOT_EXIST:/tmp}/engine.log")
        '/tmp/engine.log'
    """

    def replace(match: re.Match) -> str:
        name, default = match.groups()
        resolved = os.environ.get(name, default)
        if resolved is None:
            return match.group(0) if keep_unresolved else ""
        return resolved

    return ENV_VAR_PATTERN.sub(replace, value)


def coerce_scalar(value: str) -> Any:
    """Turn "true"/"off"/"42"/"0.5" into bool/int/float, else return the string."""
    lowered = value.lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False
    try:
        number = float(value)
    except ValueError:
        return value
    if number.is_integer() and "." not in value and "e" not in lowered:
        return int(number)
    return number


def resolve_value(value: str) -> Any:
    """
    Expand a YAML string value.

    A value that is exactly one reference is typed with `coerce_scalar`;
    references inside longer strings are interpolated as text. Unresolvable
    references are left as written.
    """
    if ENV_VAR_PATTERN.fullmatch(value):
        expanded = expand_env(value, keep_unresolved=True)
        if expanded == value:
            return value
        return coerce_scalar(expanded)
    return expand_env(value, keep_unresolved=True)


def walk(data: Any, transform: Callable[[str], Any]) -> Any:
    """Apply `transform` to every string inside nested dicts and lists."""
    if isinstance(data, dict):
        return {key: walk(item, transform) for key, item in data.items()}
    if isinstance(data, list):
        return [walk(item, transform) for item in data]
    if isinstance(data, str):
        return transform(data)
    return data
