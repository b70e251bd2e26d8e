import pytest
import responses
from responses import matchers

from prpad.github import (
    GitHubClient,
    GitHubError,
    Page,
    base_owner_name,
    base_repo_name,
    get_issues_available_assignees,
    get_pull_request_comments,
    get_pull_request_commits,
    get_pull_request_files,
    get_pull_request_reviewers,
    get_pull_request_reviews,
    get_pull_requests,
    get_repo_collaborators,
    head_owner_name,
    head_repo_name,
    paginated_request,
    parse_num_pages,
    parse_num_pages_from_link,
    pull_request_number,
)

API = "https://api.example.com"
GRAPHQL = "https://api.example.com/graphql"
LAST_PAGE_LINK = f'<{API}/user/58276/repos?page=3>; rel="last"'

PULL_REQUEST = {
    "number": 6,
    "user": {"login": "john"},
    "head": {"repo": {"owner": {"login": "reviewpad"}, "name": "mocks-test"}},
    "base": {"repo": {"owner": {"login": "foobar"}, "name": "default-mock-repo"}},
}
PULLS = f"{API}/repos/foobar/default-mock-repo/pulls/6"


@pytest.fixture
def mocked():
    with responses.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def client():
    return GitHubClient(token="token", base_url=API, graphql_url=GRAPHQL)


def test_head_owner_name():
    assert head_owner_name(PULL_REQUEST) == "reviewpad"


def test_head_repo_name():
    assert head_repo_name(PULL_REQUEST) == "mocks-test"


def test_base_owner_name():
    assert base_owner_name(PULL_REQUEST) == "foobar"


def test_base_repo_name():
    assert base_repo_name(PULL_REQUEST) == "default-mock-repo"


def test_pull_request_number():
    assert pull_request_number(PULL_REQUEST) == 6


def test_names_of_missing_parts_are_empty():
    assert head_owner_name({"head": {"repo": {"owner": None}}}) == ""
    assert pull_request_number({}) == 0


def test_paginated_request_when_first_request_fails():
    def request(collected, page):
        raise RuntimeError("PaginatedRequestFail")

    with pytest.raises(RuntimeError, match="PaginatedRequestFail"):
        paginated_request(dict, request)


def test_paginated_request_when_further_requests_fail():
    def request(collected, page):
        if page == 1:
            return {"page_num": 1}, Page(None, {"Link": LAST_PAGE_LINK}, next_page=3)
        raise RuntimeError("PaginatedRequestFail")

    with pytest.raises(RuntimeError, match="PaginatedRequestFail"):
        paginated_request(lambda: {"page_num": 1}, request)


def test_paginated_request():
    pages_requested = []

    def request(collected, page):
        pages_requested.append(page)
        if page == 1:
            return collected, Page(None, {"Link": LAST_PAGE_LINK})
        return collected, None

    result = paginated_request(lambda: [{"page_num": 1}], request)

    assert result == [{"page_num": 1}]
    assert pages_requested == [1]


def test_paginated_request_follows_pages_to_the_last():
    def request(collected, page):
        next_page = page + 1 if page < 3 else 0
        return collected + [page], Page(None, {"Link": LAST_PAGE_LINK}, next_page)

    assert paginated_request(list, request) == [1, 2, 3]


def test_parse_num_pages_from_link_when_no_rel():
    assert parse_num_pages_from_link(f"<{API}/user/58276/repos?page=1>") == 0


def test_parse_num_pages_from_link_when_invalid():
    assert parse_num_pages_from_link('<invalid%+url>; rel="last"') == 0


def test_parse_num_pages_from_link_when_no_page_param():
    assert parse_num_pages_from_link(f'<{API}/user/58276/repos>; rel="last"') == 0


def test_parse_num_pages_from_link_when_page_param_invalid():
    assert parse_num_pages_from_link(f'<{API}/user/58276/repos?page=7B316>; rel="last"') == 0


def test_parse_num_pages_from_link():
    assert parse_num_pages_from_link(LAST_PAGE_LINK) == 3


def test_parse_num_pages_from_link_with_several_relations():
    link = (
        f'<{API}/user/58276/repos?page=2>; rel="next", '
        f'<{API}/user/58276/repos?page=9>; rel="last"'
    )
    assert parse_num_pages_from_link(link) == 9


def test_parse_num_pages_when_link_not_provided():
    assert parse_num_pages({"Link": " "}) == 0
    assert parse_num_pages({}) == 0


def test_parse_num_pages():
    assert parse_num_pages({"Link": LAST_PAGE_LINK}) == 3


def test_parse_num_pages_header_name_is_case_insensitive():
    assert parse_num_pages({"link": LAST_PAGE_LINK}) == 3


def _fail(mocked, url, message):
    mocked.add(responses.GET, url, json={"message": message}, status=500)


def test_get_pull_request_comments_when_request_fails(mocked, client):
    _fail(mocked, f"{API}/repos/foobar/default-mock-repo/issues/6/comments", "ListCommentsRequestFail")
    with pytest.raises(GitHubError) as excinfo:
        get_pull_request_comments(client, "foobar", "default-mock-repo", 6)
    assert excinfo.value.message == "ListCommentsRequestFail"
    assert excinfo.value.status_code == 500


def test_get_pull_request_comments(mocked, client):
    want = [{"body": "Lorem Ipsum"}]
    mocked.add(
        responses.GET,
        f"{API}/repos/foobar/default-mock-repo/issues/6/comments",
        json=want,
        match=[matchers.query_param_matcher({"sort": "created", "page": "1", "per_page": "100"})],
    )
    got = get_pull_request_comments(client, "foobar", "default-mock-repo", 6, sort="created")
    assert got == want


def test_get_pull_request_files(mocked, client):
    want = [{"filename": "default-mock-repo/file1.ts", "patch": None}]
    mocked.add(responses.GET, f"{PULLS}/files", json=want)
    assert get_pull_request_files(client, "foobar", "default-mock-repo", 6) == want


def test_get_pull_request_files_collects_every_page(mocked, client):
    link = f'<{PULLS}/files?page=2>; rel="next", <{PULLS}/files?page=2>; rel="last"'
    mocked.add(
        responses.GET,
        f"{PULLS}/files",
        json=[{"filename": "a.go"}],
        headers={"Link": link},
        match=[matchers.query_param_matcher({"page": "1", "per_page": "100"})],
    )
    mocked.add(
        responses.GET,
        f"{PULLS}/files",
        json=[{"filename": "b.go"}],
        match=[matchers.query_param_matcher({"page": "2", "per_page": "100"})],
    )
    got = get_pull_request_files(client, "foobar", "default-mock-repo", 6)
    assert got == [{"filename": "a.go"}, {"filename": "b.go"}]


def test_get_pull_request_reviewers_when_request_fails(mocked, client):
    _fail(mocked, f"{PULLS}/requested_reviewers", "ListReviewersRequestFail")
    with pytest.raises(GitHubError) as excinfo:
        get_pull_request_reviewers(client, "foobar", "default-mock-repo", 6)
    assert excinfo.value.message == "ListReviewersRequestFail"


def test_get_pull_request_reviewers(mocked, client):
    want = {"users": [{"login": "mary"}], "teams": [{"slug": "reviewpad-team"}]}
    mocked.add(responses.GET, f"{PULLS}/requested_reviewers", json=want)
    assert get_pull_request_reviewers(client, "foobar", "default-mock-repo", 6) == want


def test_get_repo_collaborators_when_request_fails(mocked, client):
    _fail(mocked, f"{API}/repos/foobar/default-mock-repo/collaborators", "ListCollaboratorsRequestFail")
    with pytest.raises(GitHubError) as excinfo:
        get_repo_collaborators(client, "foobar", "default-mock-repo")
    assert excinfo.value.message == "ListCollaboratorsRequestFail"


def test_get_repo_collaborators(mocked, client):
    want = [{"login": "mary"}]
    mocked.add(responses.GET, f"{API}/repos/foobar/default-mock-repo/collaborators", json=want)
    assert get_repo_collaborators(client, "foobar", "default-mock-repo") == want


def test_get_issues_available_assignees_when_request_fails(mocked, client):
    _fail(mocked, f"{API}/repos/john/default-mock-repo/assignees", "ListAssigneesRequestFail")
    with pytest.raises(GitHubError) as excinfo:
        get_issues_available_assignees(client, "john", "default-mock-repo")
    assert excinfo.value.message == "ListAssigneesRequestFail"


def test_get_issues_available_assignees(mocked, client):
    want = [{"login": "jane"}]
    mocked.add(responses.GET, f"{API}/repos/john/default-mock-repo/assignees", json=want)
    assert get_issues_available_assignees(client, "john", "default-mock-repo") == want


def test_get_pull_request_commits_when_request_fails(mocked, client):
    _fail(mocked, f"{API}/repos/john/default-mock-repo/pulls/6/commits", "ListCommitsRequestFail")
    with pytest.raises(GitHubError) as excinfo:
        get_pull_request_commits(client, "john", "default-mock-repo", 6)
    assert excinfo.value.message == "ListCommitsRequestFail"


def test_get_pull_request_commits(mocked, client):
    want = [{"commit": {"message": "Lorem Ipsum"}}]
    mocked.add(responses.GET, f"{API}/repos/john/default-mock-repo/pulls/6/commits", json=want)
    assert get_pull_request_commits(client, "john", "default-mock-repo", 6) == want


def test_get_pull_request_reviews(mocked, client):
    want = [{"state": "COMMENTED"}, {"state": "COMMENTED"}]
    mocked.add(responses.GET, f"{API}/repos/john/default-mock-repo/pulls/6/reviews", json=want)
    assert get_pull_request_reviews(client, "john", "default-mock-repo", 6) == want


def test_get_pull_request_reviews_when_request_fails(mocked, client):
    _fail(mocked, f"{API}/repos/john/default-mock-repo/pulls/6/reviews", "ListPullRequestReviewsFail")
    with pytest.raises(GitHubError) as excinfo:
        get_pull_request_reviews(client, "john", "default-mock-repo", 6)
    assert excinfo.value.message == "ListPullRequestReviewsFail"


def test_get_pull_requests(mocked, client):
    mocked.add(responses.GET, f"{API}/repos/testOrg/testRepo/pulls", json=[])
    assert get_pull_requests(client, "testOrg", "testRepo") == []


def test_get_pull_requests_when_request_fails(mocked, client):
    _fail(mocked, f"{API}/repos/testOrg/testRepo/pulls", "ListPullRequests")
    with pytest.raises(GitHubError) as excinfo:
        get_pull_requests(client, "testOrg", "testRepo")
    assert excinfo.value.message == "ListPullRequests"


def test_client_sends_authorization(mocked, client):
    mocked.add(
        responses.GET,
        f"{API}/repos/o/r",
        json={"name": "r"},
        match=[matchers.header_matcher({"Authorization": "Bearer token"})],
    )
    assert client.get("/repos/o/r") == {"name": "r"}


def test_graphql_returns_data(mocked, client):
    variables = {"pullRequestNumber": 6}
    mocked.add(
        responses.POST,
        GRAPHQL,
        json={"data": {"repository": {"pullRequest": {"closingIssuesReferences": {"totalCount": 3}}}}},
        match=[matchers.json_params_matcher({"query": "query{x}", "variables": variables})],
    )
    data = client.graphql("query{x}", variables)
    assert data["repository"]["pullRequest"]["closingIssuesReferences"]["totalCount"] == 3


def test_graphql_raises_on_errors(mocked, client):
    mocked.add(responses.POST, GRAPHQL, json={"errors": [{"message": "bad query"}]})
    with pytest.raises(GitHubError, match="bad query"):
        client.graphql("query{x}")


def test_graphql_raises_on_http_failure(mocked, client):
    mocked.add(responses.POST, GRAPHQL, body="404 Not Found", status=404)
    with pytest.raises(GitHubError) as excinfo:
        client.graphql("query{x}")
    assert excinfo.value.status_code == 404