"""Built-in functions that query GitHub about the pull request under review."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from prpad import files, listops, pull_request
from prpad.github import (
    GitHubClient,
    base_owner_name,
    base_repo_name,
    get_pull_request_comments,
    get_pull_request_commits,
    get_pull_request_reviews,
    head_owner_name,
    pull_request_number,
)
from prpad.pull_request import Env

_LINKED_ISSUES_QUERY = (
    "query($pullRequestNumber:Int!$repositoryName:String!$repositoryOwner:String!)"
    "{repository(owner: $repositoryOwner, name: $repositoryName)"
    "{pullRequest(number: $pullRequestNumber){closingIssuesReferences{totalCount}}}}"
)


def _client(env: Env) -> GitHubClient:
    if env.client is None:
        raise ValueError("no GitHub client configured")
    return env.client


def _coordinates(env: Env) -> tuple[str, str, int]:
    pr = env.pull_request
    return base_owner_name(pr), base_repo_name(pr), pull_request_number(pr)


def _login(user: Any) -> str:
    return (user or {}).get("login") or ""


def comments(env: Env) -> list[str]:
    """Bodies of all comments on the pull request."""
    owner, repo, number = _coordinates(env)
    found = get_pull_request_comments(_client(env), owner, repo, number)
    return [comment.get("body") or "" for comment in found]


def commits(env: Env) -> list[str]:
    """Messages of all commits in the pull request."""
    owner, repo, number = _coordinates(env)
    found = get_pull_request_commits(_client(env), owner, repo, number)
    return [(commit.get("commit") or {}).get("message") or "" for commit in found]


def has_linear_history(env: Env) -> bool:
    """Whether no commit of the pull request is a merge commit."""
    owner, repo, number = _coordinates(env)
    found = _client(env).get(f"repos/{owner}/{repo}/pulls/{number}/commits") or []
    return not any(len(commit.get("parents") or []) > 1 for commit in found)


def has_linked_issues(env: Env) -> bool:
    """Whether the pull request is linked to issues it closes."""
    owner, repo, number = _coordinates(env)
    data = _client(env).graphql(
        _LINKED_ISSUES_QUERY,
        {
            "pullRequestNumber": number,
            "repositoryName": repo,
            "repositoryOwner": owner,
        },
    )
    total = (
        ((((data or {}).get("repository") or {}).get("pullRequest") or {})
         .get("closingIssuesReferences") or {})
        .get("totalCount")
        or 0
    )
    return total > 0


def organization(env: Env) -> list[str]:
    """Logins of the members of the organization owning the head repository."""
    org = head_owner_name(env.pull_request)
    members = _client(env).get(f"orgs/{org}/members") or []
    return [_login(member) for member in members]


def reviewer_status(env: Env, login: str) -> str:
    """Latest review decision of ``login``, or ``COMMENTED``, or an empty string.

    Approvals and change requests outrank comments: a later comment does not
    hide an earlier decision.
    """
    owner, repo, number = _coordinates(env)
    status = ""
    has_decision = False
    for review in get_pull_request_reviews(_client(env), owner, repo, number):
        user, state = review.get("user"), review.get("state")
        if user is None or state is None or user.get("login") != login:
            continue
        if state == "COMMENTED":
            if not has_decision:
                status = state
        else:
            status = state
            has_decision = True
    return status


def team(env: Env, slug: str) -> list[str]:
    """Logins of the members of team ``slug`` in the head repository's organization."""
    org = head_owner_name(env.pull_request)
    members = _client(env).get(f"orgs/{org}/teams/{slug}/members") or []
    return [_login(member) for member in members]


def total_created_pull_requests(env: Env, creator: str) -> int:
    """Number of pull requests ``creator`` has opened in the base repository."""
    owner, repo, _ = _coordinates(env)
    issues = _client(env).get(
        f"repos/{owner}/{repo}/issues", {"creator": creator, "state": "all"}
    ) or []
    return sum(1 for issue in issues if issue.get("pull_request") is not None)


def workflow_status(env: Env, workflow_name: str) -> str:
    """Status of a check run for the workflow run that triggered evaluation.

    Returns the conclusion of a completed check, the status of one still in
    progress, and an empty string when the event is not a workflow run or no
    check of that name exists.
    """
    name = workflow_name.lower()
    payload = env.event_payload
    if not isinstance(payload, Mapping) or "workflow_run" not in payload:
        return ""
    run = payload["workflow_run"]
    if run is None:
        return ""
    head_sha = run.get("head_sha") or ""
    owner, repo, _ = _coordinates(env)
    result = _client(env).get(f"repos/{owner}/{repo}/commits/{head_sha}/check-runs") or {}
    for check in result.get("check_runs") or []:
        if check.get("name") == name:
            status = check.get("status") or ""
            if status == "completed":
                return check.get("conclusion") or ""
            return status
    return ""


def plugin_builtins() -> dict[str, Callable[..., Any]]:
    """All built-in functions, keyed by the name rules refer to them by."""
    return {
        "append": listops.append_string,
        "assignees": pull_request.assignees,
        "author": pull_request.author,
        "base": pull_request.base,
        "commentCount": pull_request.comment_count,
        "comments": comments,
        "commitCount": pull_request.commit_count,
        "commits": commits,
        "contains": listops.contains,
        "createdAt": pull_request.created_at,
        "description": pull_request.description,
        "fileCount": files.file_count,
        "filter": listops.filter_values,
        "group": listops.group,
        "hasFileExtensions": files.has_file_extensions,
        "hasFileName": files.has_file_name,
        "hasFilePattern": files.has_file_pattern,
        "hasLinearHistory": has_linear_history,
        "hasLinkedIssues": has_linked_issues,
        "head": pull_request.head,
        "isDraft": pull_request.is_draft,
        "isElementOf": listops.is_element_of,
        "labels": pull_request.labels,
        "length": listops.length,
        "milestone": pull_request.milestone,
        "organization": organization,
        "reviewerStatus": reviewer_status,
        "reviewers": pull_request.reviewers,
        "size": pull_request.size,
        "startsWith": listops.starts_with,
        "team": team,
        "title": pull_request.title,
        "totalCreatedPullRequests": total_created_pull_requests,
        "workflowStatus": workflow_status,
    }