"""Built-in functions over strings, lists and named groups."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from prpad.pull_request import Env


class GroupNotFoundError(LookupError):
    """No group is registered under the requested name."""

    def __init__(self, name: str, registers: dict[str, Any]) -> None:
        super().__init__(f"getGroup: no group with name {name} in state {registers!r}")
        self.name = name


def append_string(env: Env, left: Sequence[str], right: Sequence[str]) -> list[str]:
    """Concatenate two lists of strings."""
    return [*left, *right]


def contains(env: Env, text: str, substring: str) -> bool:
    """Whether ``substring`` occurs in ``text``."""
    return substring in text


def filter_values(env: Env, items: Sequence[Any], predicate: Callable[[Any], bool]) -> list[Any]:
    """Keep the items for which ``predicate`` holds, in order."""
    return [item for item in items if predicate(item)]


def is_element_of(env: Env, member: str, group: Sequence[Any]) -> bool:
    """Whether ``member`` is one of the values in ``group``."""
    return any(type(item) is type(member) and item == member for item in group)


def length(env: Env, items: Sequence[Any]) -> int:
    """Number of items in a list."""
    return len(items)


def starts_with(env: Env, text: str, prefix: str) -> bool:
    """Whether ``text`` begins with ``prefix``."""
    return text.startswith(prefix)


def group(env: Env, name: str) -> Any:
    """Members of the group registered under ``name``."""
    try:
        return env.registers[name]
    except KeyError:
        raise GroupNotFoundError(name, env.registers) from None