"""Built-in functions that read attributes of the pull request under review."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from prpad.github import GitHubClient

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ZERO_TIME_UNIX = -62135596800
_TIMESTAMP_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[T ](\d{2}):(\d{2}):(\d{2})(?:\.\d+)?"
    r"\s*(Z|[+-]\d{2}:?\d{2})?(?:\s+\w+)?"
)


@dataclass
class Env:
    """Everything a built-in function may consult while it is evaluated."""

    pull_request: dict[str, Any]
    client: GitHubClient | None = None
    patch: dict[str, Any] = field(default_factory=dict)
    registers: dict[str, Any] = field(default_factory=dict)
    event_payload: Any = None


def _field(data: Any, *keys: str, default: Any = "") -> Any:
    for key in keys:
        if not isinstance(data, Mapping) or data.get(key) is None:
            return default
        data = data[key]
    return data


def _required(env: Env, key: str) -> Any:
    value = env.pull_request.get(key)
    if value is None:
        raise ValueError(f"pull request has no {key!r} field")
    return value


def _unix_seconds(value: Any) -> int:
    if value is None:
        return _ZERO_TIME_UNIX
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        moment = moment.replace(microsecond=0)
        return int((moment - _EPOCH).total_seconds())
    match = _TIMESTAMP_RE.fullmatch(str(value).strip())
    if match is None:
        raise ValueError(f"cannot parse timestamp {value!r}")
    year, month, day, hour, minute, second = (int(part) for part in match.groups()[:6])
    offset = match.group(7)
    tz = timezone.utc
    if offset and offset != "Z":
        digits = offset[1:].replace(":", "")
        delta = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
        tz = timezone(delta if offset[0] == "+" else -delta)
    moment = datetime(year, month, day, hour, minute, second, tzinfo=tz)
    return int((moment - _EPOCH).total_seconds())


def assignees(env: Env) -> list[str]:
    """Logins of the users assigned to the pull request."""
    return [_field(user, "login") for user in env.pull_request.get("assignees") or []]


def author(env: Env) -> str:
    """Login of the pull request's author."""
    return _field(env.pull_request, "user", "login")


def base(env: Env) -> str:
    """Name of the branch the pull request targets."""
    return _field(env.pull_request, "base", "ref")


def comment_count(env: Env) -> int:
    """Number of comments on the pull request."""
    return _required(env, "comments")


def commit_count(env: Env) -> int:
    """Number of commits in the pull request."""
    return _required(env, "commits")


def created_at(env: Env) -> int:
    """Creation time of the pull request in seconds since the Unix epoch."""
    return _unix_seconds(env.pull_request.get("created_at"))


def description(env: Env) -> str:
    """Body text of the pull request."""
    return _field(env.pull_request, "body")


def head(env: Env) -> str:
    """Name of the branch the pull request comes from."""
    return _field(env.pull_request, "head", "ref")


def is_draft(env: Env) -> bool:
    """Whether the pull request is a draft."""
    return bool(env.pull_request.get("draft"))


def labels(env: Env) -> list[str]:
    """Names of the labels on the pull request."""
    return [_field(label, "name") for label in env.pull_request.get("labels") or []]


def milestone(env: Env) -> str:
    """Title of the pull request's milestone, or an empty string."""
    return _field(env.pull_request, "milestone", "title")


def reviewers(env: Env) -> list[str]:
    """Requested reviewers: user logins first, then team slugs."""
    users = [_field(user, "login") for user in env.pull_request.get("requested_reviewers") or []]
    teams = [_field(team, "slug") for team in env.pull_request.get("requested_teams") or []]
    return users + teams


def size(env: Env) -> int:
    """Number of added plus deleted lines."""
    return _field(env.pull_request, "additions", default=0) + _field(
        env.pull_request, "deletions", default=0
    )


def title(env: Env) -> str:
    """Title of the pull request."""
    return _field(env.pull_request, "title")