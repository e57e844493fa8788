"""One-line digests of GitHub webhook events."""

import json
from typing import Any

FALLBACK_JSON_LIMIT = 2048
INVALID_JSON_EXCERPT = 512
COMMENT_EXCERPT = 120
COMMIT_PREVIEW = 5


def _dig(obj: Any, *path: str) -> Any:
    """Follow dict keys, returning None when any step is missing."""
    for key in path:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def _first(*values: Any, default: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return default


def _login(payload: Any, *path: str) -> str:
    """Actor login from path, falling back to sender.login."""
    own = _dig(payload, *path) if path else None
    return _first(own, _dig(payload, "sender", "login"), default="someone")


def _summarize_push(repo: str, payload: Any) -> str:
    branch = (_dig(payload, "ref") or "").replace("refs/heads/", "")
    commits = _dig(payload, "commits") or []
    who = _first(_dig(payload, "pusher", "name"), default="someone")

    lines = [f"[{repo}] {who} pushed {len(commits)} commit(s) to {branch}"]
    for commit in commits[:COMMIT_PREVIEW]:
        message = _dig(commit, "message")
        first_line = message.split("\n")[0] if isinstance(message, str) else "(no message)"
        lines.append(f"  - {first_line}")
    if len(commits) > COMMIT_PREVIEW:
        lines.append(f"  ... and {len(commits) - COMMIT_PREVIEW} more")
    return "\n".join(lines)


def _summarize_fallback(event: str, payload: Any) -> str:
    dumped = json.dumps(payload, indent=2, ensure_ascii=False)
    if len(dumped) > FALLBACK_JSON_LIMIT:
        dumped = dumped[:FALLBACK_JSON_LIMIT] + "\n... (truncated)"
    return f"[{event}] {dumped}"


def summarize(event: str, payload: Any) -> str:
    """Render a GitHub event payload as a short human-readable digest.

    Args:
        event: Value of the X-GitHub-Event header
        payload: Parsed JSON body

    Returns:
        Digest text; unknown events fall back to truncated pretty JSON
    """
    repo = _first(
        _dig(payload, "repository", "full_name"),
        _dig(payload, "organization", "login"),
        default="unknown",
    )
    action = _dig(payload, "action")

    if event == "push":
        return _summarize_push(repo, payload)

    if event == "pull_request":
        pr = _dig(payload, "pull_request") or {}
        who = _login(payload, "pull_request", "user", "login")
        return (
            f"[{repo}] {who} {action or 'updated'} PR "
            f"#{_dig(pr, 'number')}: {_dig(pr, 'title')}"
        )

    if event == "issues":
        issue = _dig(payload, "issue") or {}
        who = _login(payload, "issue", "user", "login")
        return (
            f"[{repo}] {who} {action or 'updated'} issue "
            f"#{_dig(issue, 'number')}: {_dig(issue, 'title')}"
        )

    if event == "issue_comment":
        who = _login(payload, "comment", "user", "login")
        excerpt = (_dig(payload, "comment", "body") or "")[:COMMENT_EXCERPT]
        return f"[{repo}] {who} commented on #{_dig(payload, 'issue', 'number')}: {excerpt}"

    if event == "star":
        who = _login(payload)
        if (action or "created") == "created":
            return f"[{repo}] {who} starred the repo"
        return f"[{repo}] {who} unstarred the repo"

    if event == "release":
        who = _login(payload, "release", "author", "login")
        tag = _first(_dig(payload, "release", "tag_name"), default="unknown")
        return f"[{repo}] {who} {action or 'published'} release {tag}"

    if event == "ping":
        events = _dig(payload, "hook", "events") or []
        return f"Webhook configured for {repo} (events: [{', '.join(map(str, events))}])"

    if event in ("create", "delete"):
        ref_type = _first(_dig(payload, "ref_type"), default="branch")
        ref = _first(_dig(payload, "ref"), default="unknown")
        verb = "created" if event == "create" else "deleted"
        return f"[{repo}] {_login(payload)} {verb} {ref_type}: {ref}"

    if event == "workflow_run":
        name = _first(_dig(payload, "workflow_run", "name"), default="workflow")
        conclusion = _dig(payload, "workflow_run", "conclusion")
        suffix = f" ({conclusion})" if conclusion else ""
        return f"[{repo}] {name} {action or 'completed'}{suffix}"

    return _summarize_fallback(event, payload)


def digest_body(event: str, raw: str) -> str:
    """Parse a raw body and summarize it, tolerating invalid JSON."""
    try:
        payload = json.loads(raw)
    except ValueError:
        return f"[{event}] (invalid JSON) {raw[:INVALID_JSON_EXCERPT]}"
    return summarize(event, payload)
