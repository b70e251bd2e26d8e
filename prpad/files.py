"""Built-in functions over the set of files a pull request changes."""

from __future__ import annotations

import re
from collections.abc import Iterable
from functools import lru_cache

from prpad.pull_request import Env
from prpad.util import file_ext


class PatternError(ValueError):
    """A file pattern is malformed."""

    def __init__(self, pattern: str) -> None:
        super().__init__("syntax error in pattern")
        self.pattern = pattern


def _class_char(char: str) -> str:
    return "\\" + char if char in "\\[]^" else char


def _find_brace_end(pattern: str, start: int) -> int:
    depth = 0
    index = start
    while index < len(pattern):
        char = pattern[index]
        if char == "\\":
            index += 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    raise PatternError(pattern)


def _split_alternatives(body: str) -> Iterable[str]:
    depth = 0
    current: list[str] = []
    index = 0
    while index < len(body):
        char = body[index]
        if char == "\\" and index + 1 < len(body):
            current.append(body[index : index + 2])
            index += 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        if char == "," and depth == 0:
            yield "".join(current)
            current = []
        else:
            current.append(char)
        index += 1
    yield "".join(current)


def _translate(pattern: str) -> str:
    out: list[str] = []
    index = 0
    size = len(pattern)
    while index < size:
        char = pattern[index]
        if char == "/" and pattern[index:] == "/**":
            out.append("(?:/.*)?")
            break
        if char == "*":
            if pattern.startswith("**", index) and (index == 0 or pattern[index - 1] == "/"):
                end = index + 2
                if end == size:
                    out.append(".*")
                    break
                if pattern[end] == "/":
                    out.append("(?:.*/)?")
                    index = end + 1
                    continue
            while index < size and pattern[index] == "*":
                index += 1
            out.append("[^/]*")
            continue
        if char == "?":
            out.append("[^/]")
        elif char == "[":
            index = _translate_class(pattern, index, out)
            continue
        elif char == "{":
            end = _find_brace_end(pattern, index)
            alternatives = (_translate(alt) for alt in _split_alternatives(pattern[index + 1 : end]))
            out.append("(?:" + "|".join(alternatives) + ")")
            index = end + 1
            continue
        elif char == "\\":
            if index + 1 >= size:
                raise PatternError(pattern)
            out.append(re.escape(pattern[index + 1]))
            index += 2
            continue
        else:
            out.append(re.escape(char))
        index += 1
    return "".join(out)


def _translate_class(pattern: str, start: int, out: list[str]) -> int:
    index = start + 1
    negated = index < len(pattern) and pattern[index] in "!^"
    if negated:
        index += 1
    parts: list[str] = []
    while index < len(pattern):
        char = pattern[index]
        if char == "\\":
            if index + 1 >= len(pattern):
                raise PatternError(pattern)
            parts.append(_class_char(pattern[index + 1]))
            index += 2
            continue
        if char == "]":
            if not parts:
                raise PatternError(pattern)
            out.append("[" + ("^" if negated else "") + "".join(parts) + "]")
            return index + 1
        parts.append("-" if char == "-" else _class_char(char))
        index += 1
    raise PatternError(pattern)


@lru_cache(maxsize=256)
def _compile(pattern: str) -> re.Pattern[str]:
    try:
        return re.compile(_translate(pattern), re.DOTALL)
    except re.error:
        raise PatternError(pattern) from None


def match_pattern(pattern: str, path: str) -> bool:
    """Match ``path`` against a glob where ``**`` spans directories.

    Supports ``*``, ``?``, ``[...]`` classes, ``{a,b}`` alternatives and
    backslash escapes. Raises :class:`PatternError` for malformed patterns.
    """
    return _compile(pattern).fullmatch(path) is not None


def file_count(env: Env) -> int:
    """Number of files the pull request changes."""
    return len(env.patch)


def has_file_extensions(env: Env, extensions: Iterable[str]) -> bool:
    """Whether every changed file has one of ``extensions`` (case-insensitive)."""
    allowed = {extension.lower() for extension in extensions}
    return all(file_ext(path).lower() in allowed for path in env.patch)


def has_file_name(env: Env, name: str) -> bool:
    """Whether the pull request changes the file at exactly ``name``."""
    return name in env.patch


def has_file_pattern(env: Env, pattern: str) -> bool:
    """Whether any changed file matches ``pattern``."""
    return any(match_pattern(pattern, path) for path in env.patch)