# prpad

Helpers for inspecting GitHub pull requests, and a set of built-in functions
that review rules can call to ask questions about a pull request.

## What it provides

- `prpad.github`: a small `GitHubClient` for the REST API (`get`,
  `get_page`) and the GraphQL API (`graphql`); failed requests raise
  `GitHubError`, which carries `status_code` and `message`.
  `paginated_request` accumulates a listing page by page, using the
  Link header (`parse_num_pages_from_link`, `parse_num_pages`) to know how
  many pages there are. Paginated listings built on it:
  `get_pull_request_comments`, `get_pull_request_files`,
  `get_pull_request_reviewers`, `get_repo_collaborators`,
  `get_issues_available_assignees`, `get_pull_request_commits`,
  `get_pull_request_reviews`, `get_pull_requests`. Accessors for a pull
  request's JSON: `head_owner_name`, `head_repo_name`, `base_owner_name`,
  `base_repo_name`, `pull_request_number`.
- `prpad.pull_request`: `Env`, a dataclass holding the pull request under
  review (as GitHub's JSON), an optional client, the changed files
  (`patch`, keyed by path), named `registers` and the triggering
  `event_payload`; plus facts read from the pull request: `author`,
  `assignees`, `base`, `head`, `title`, `description`, `labels`,
  `milestone`, `reviewers`, `size`, `is_draft`, `created_at` (Unix
  seconds), `comment_count`, `commit_count`.
- `prpad.files`: checks on the changed files: `file_count`,
  `has_file_name`, `has_file_extensions` (case-insensitive), and
  `has_file_pattern`, backed by `match_pattern`, a glob matcher supporting
  `**`, `*`, `?`, `[...]`, `{a,b}` and backslash escapes. Malformed patterns
  raise `PatternError`.
- `prpad.listops`: list and string built-ins: `append_string`, `contains`,
  `starts_with`, `is_element_of`, `length`, `filter_values`, and `group`,
  which looks a name up in `Env.registers` and raises `GroupNotFoundError`
  when it is absent.
- `prpad.remote`: built-ins that query GitHub through `Env.client`:
  `comments`, `commits`, `has_linear_history`, `has_linked_issues`,
  `organization`, `team`, `reviewer_status`, `total_created_pull_requests`,
  `workflow_status`; and `plugin_builtins()`, a table from the names rules
  use (such as `"author"` or `"hasFilePattern"`) to these functions.
- `prpad.util`: `element_of`, `file_ext`, `generate_random`, `abs_int32`.

## Example

```python
from prpad.github import GitHubClient, get_pull_request_files

client = GitHubClient(token="token")
files = get_pull_request_files(client, "octo-org", "octo-repo", 42)
print([f["filename"] for f in files])
```

Evaluating built-ins against a pull request:

```python
from prpad.pull_request import Env
from prpad.remote import plugin_builtins

env = Env(
    pull_request={"user": {"login": "jane"}, "title": "Add docs"},
    patch={"docs/guide.md": None},
)
builtins = plugin_builtins()
print(builtins["author"](env))                       # jane
print(builtins["hasFilePattern"](env, "docs/**"))    # True
```

## What it does not do

prpad supplies the built-in functions and GitHub access only. It has no
command-line program, does not read or check rule configuration files, has
no parser or evaluator for rule expressions, and does not carry out actions
on a pull request (labelling, commenting, merging). The caller builds the
`Env` and calls the functions directly.

## Installing

```
pip install prpad
```

For running the tests:

```
pip install "prpad[test]"
pytest
```