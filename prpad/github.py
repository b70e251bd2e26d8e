"""GitHub REST and GraphQL access with collection of paginated listings."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, TypeVar
from urllib.parse import parse_qs, urlsplit

import requests

MAX_PER_PAGE = 100
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_GRAPHQL_URL = "https://api.github.com/graphql"

_LINK_RE = re.compile(r"<([^>]*)>([^<]*)")
_INT_RE = re.compile(r"[+-]?[0-9]+")

T = TypeVar("T")


class GitHubError(Exception):
    """A request to GitHub failed."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


@dataclass
class Page:
    """One page of a listing together with its pagination details."""

    data: Any
    headers: Mapping[str, str] = field(default_factory=dict)
    next_page: int = 0


def _parse_links(link: str) -> Iterator[tuple[str, list[str]]]:
    for match in _LINK_RE.finditer(link):
        url, params = match.groups()
        rels: list[str] = []
        for param in params.split(";"):
            key, sep, value = param.strip().strip(",").partition("=")
            if sep and key.strip().lower() == "rel":
                rels.extend(value.strip().strip('"').split())
        yield url, rels


def _page_for_rel(link: str, rel: str) -> int:
    url = next((url for url, rels in _parse_links(link) if rel in rels), None)
    if url is None:
        return 0
    try:
        query = urlsplit(url).query
    except ValueError:
        return 0
    values = parse_qs(query, keep_blank_values=True).get("page")
    if not values or not _INT_RE.fullmatch(values[0]):
        return 0
    number = int(values[0])
    if not -(2**31) <= number < 2**31:
        return 0
    return number


def _header(headers: Mapping[str, str], name: str) -> str:
    wanted = name.lower()
    return next((value for key, value in headers.items() if key.lower() == wanted), "")


def parse_num_pages_from_link(link: str) -> int:
    """Return the page number of the ``last`` relation in a Link header, or 0."""
    return _page_for_rel(link, "last")


def parse_num_pages(headers: Mapping[str, str]) -> int:
    """Return the total number of pages announced by response headers, or 0."""
    link = _header(headers, "Link")
    if not link.strip(" "):
        return 0
    return parse_num_pages_from_link(link)


def paginated_request(
    init: Callable[[], T],
    request: Callable[[T, int], tuple[T, Page | None]],
) -> T:
    """Accumulate a listing page by page.

    ``request`` receives the accumulated result and a page number and returns
    the new accumulated result with the page it fetched. Errors propagate.
    """
    page = 1
    result, response = request(init(), page)
    num_pages = parse_num_pages(response.headers) if response is not None else 0
    page += 1
    while response is not None and page <= num_pages and response.next_page >= page:
        result, response = request(result, page)
        page += 1
    return result


def _raise_for_status(response: requests.Response) -> None:
    if response.ok:
        return
    message = ""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = str(body.get("message", ""))
    raise GitHubError(response.status_code, message or response.text or str(response.reason))


class GitHubClient:
    """A thin client for the GitHub API."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str = DEFAULT_API_URL,
        graphql_url: str = DEFAULT_GRAPHQL_URL,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.graphql_url = graphql_url
        self.session = session if session is not None else requests.Session()
        self._headers = {"Accept": "application/vnd.github+json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def get(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        """GET ``path`` and return the decoded JSON body."""
        return self.get_page(path, params).data

    def get_page(self, path: str, params: Mapping[str, Any] | None = None) -> Page:
        """GET ``path`` and return the body with its pagination details."""
        response = self.session.get(self._url(path), params=params, headers=self._headers)
        _raise_for_status(response)
        link = response.headers.get("Link", "")
        return Page(
            data=response.json() if response.content else None,
            headers=response.headers,
            next_page=_page_for_rel(link, "next") if link.strip() else 0,
        )

    def graphql(self, query: str, variables: Mapping[str, Any] | None = None) -> Any:
        """Run a GraphQL query and return its ``data`` member."""
        response = self.session.post(
            self.graphql_url,
            json={"query": query, "variables": dict(variables or {})},
            headers=self._headers,
        )
        _raise_for_status(response)
        body = response.json()
        errors = body.get("errors")
        if errors:
            message = "; ".join(str(error.get("message", "")) for error in errors)
            raise GitHubError(response.status_code, message)
        return body.get("data")


def _dig(data: Any, *keys: str, default: Any = "") -> Any:
    for key in keys:
        if not isinstance(data, Mapping) or data.get(key) is None:
            return default
        data = data[key]
    return data


def head_owner_name(pull_request: Mapping[str, Any]) -> str:
    return _dig(pull_request, "head", "repo", "owner", "login")


def head_repo_name(pull_request: Mapping[str, Any]) -> str:
    return _dig(pull_request, "head", "repo", "name")


def base_owner_name(pull_request: Mapping[str, Any]) -> str:
    return _dig(pull_request, "base", "repo", "owner", "login")


def base_repo_name(pull_request: Mapping[str, Any]) -> str:
    return _dig(pull_request, "base", "repo", "name")


def pull_request_number(pull_request: Mapping[str, Any]) -> int:
    return _dig(pull_request, "number", default=0)


def _collect(
    client: GitHubClient, path: str, params: Mapping[str, Any] | None = None
) -> list[Any]:
    def request(collected: list[Any], page: int) -> tuple[list[Any], Page]:
        fetched = client.get_page(
            path, {**(params or {}), "page": page, "per_page": MAX_PER_PAGE}
        )
        return collected + list(fetched.data or []), fetched

    return paginated_request(list, request)


def get_pull_request_comments(
    client: GitHubClient,
    owner: str,
    repo: str,
    number: int,
    sort: str | None = None,
    direction: str | None = None,
    since: datetime | str | None = None,
) -> list[dict[str, Any]]:
    """All comments of a pull request's conversation."""
    params: dict[str, Any] = {}
    if sort:
        params["sort"] = sort
    if direction:
        params["direction"] = direction
    if since is not None:
        params["since"] = since.isoformat() if isinstance(since, datetime) else since
    return _collect(client, f"repos/{owner}/{repo}/issues/{number}/comments", params)


def get_pull_request_files(
    client: GitHubClient, owner: str, repo: str, number: int
) -> list[dict[str, Any]]:
    """All files changed by a pull request."""
    return _collect(client, f"repos/{owner}/{repo}/pulls/{number}/files")


def get_pull_request_reviewers(
    client: GitHubClient, owner: str, repo: str, number: int
) -> dict[str, list[dict[str, Any]]]:
    """Users and teams requested to review a pull request."""
    path = f"repos/{owner}/{repo}/pulls/{number}/requested_reviewers"

    def request(
        collected: dict[str, list[Any]], page: int
    ) -> tuple[dict[str, list[Any]], Page]:
        fetched = client.get_page(path, {"page": page, "per_page": MAX_PER_PAGE})
        data = fetched.data or {}
        return {
            "users": collected["users"] + list(data.get("users") or []),
            "teams": collected["teams"] + list(data.get("teams") or []),
        }, fetched

    return paginated_request(lambda: {"users": [], "teams": []}, request)


def get_repo_collaborators(client: GitHubClient, owner: str, repo: str) -> list[dict[str, Any]]:
    """All collaborators of a repository."""
    return _collect(client, f"repos/{owner}/{repo}/collaborators")


def get_issues_available_assignees(
    client: GitHubClient, owner: str, repo: str
) -> list[dict[str, Any]]:
    """All users that issues of a repository can be assigned to."""
    return _collect(client, f"repos/{owner}/{repo}/assignees")


def get_pull_request_commits(
    client: GitHubClient, owner: str, repo: str, number: int
) -> list[dict[str, Any]]:
    """All commits of a pull request."""
    return _collect(client, f"repos/{owner}/{repo}/pulls/{number}/commits")


def get_pull_request_reviews(
    client: GitHubClient, owner: str, repo: str, number: int
) -> list[dict[str, Any]]:
    """All reviews of a pull request."""
    return _collect(client, f"repos/{owner}/{repo}/pulls/{number}/reviews")


def get_pull_requests(client: GitHubClient, owner: str, repo: str) -> list[dict[str, Any]]:
    """All pull requests of a repository."""
    return _collect(client, f"repos/{owner}/{repo}/pulls")