"""Helpers for reading values out of configuration databases."""

from typing import Any, Callable, List, Mapping, TypeVar

from ..exceptions import ConfigurationError

T = TypeVar("T")

_MISSING = object()


def to_vector(value: Any, cast: Callable[[Any], T]) -> List[T]:
    """
    Converts a list or a comma separated string ("1,6") into a typed list.

    Raises:
        ConfigurationError: If an entry cannot be converted.
    """
    if isinstance(value, str):
        items = [item.strip() for item in value.split(",") if item.strip()]
    elif isinstance(value, (int, float)):
        items = [value]
    else:
        items = list(value)
    try:
        return [cast(item) for item in items]
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Cannot convert {value!r} to a vector: {e}") from e


def get_required(database: Mapping[str, Any], key: str, cast: Callable[[Any], T]) -> T:
    """Returns ``database[key]`` converted with ``cast``; fails loudly if absent."""
    value = database.get(key, _MISSING)
    if value is _MISSING:
        raise ConfigurationError(f"Missing required configuration entry '{key}'.")
    try:
        return cast(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid value {value!r} for configuration entry '{key}': {e}"
        ) from e


def get_child(database: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    """Returns the nested section ``key`` of the database."""
    child = database.get(key)
    if not isinstance(child, Mapping):
        raise ConfigurationError(f"Missing configuration section '{key}'.")
    return child


def as_is(value: Any) -> Any:
    """Cast that keeps the raw value, for entries converted later."""
    return value
