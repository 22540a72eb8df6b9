"""
Document Formatter
Renders one Jira issue into the plain-text document stored in Dust.

Every field line is always present, in a fixed order. Missing values are
replaced by placeholders ("Unassigned", "Unresolved", "N/A" or an empty
string) so the formatter never fails on sparse issues.
"""

from typing import Any, Dict, List, Optional

from .models import Document, JiraIssue

NOT_AVAILABLE = "N/A"
UNASSIGNED = "Unassigned"
UNRESOLVED = "Unresolved"


def _leaf_text(node: Any) -> str:
    """Concatenate every text run below an ADF node."""
    if not isinstance(node, dict):
        return ""
    text = node.get("text")
    if isinstance(text, str):
        return text
    return "".join(_leaf_text(child) for child in node.get("content") or [])


def flatten_rich_text(body: Any) -> str:
    """
    Flatten an Atlassian Document Format body to plain text.

    Each top-level block becomes one line; marks and attributes are dropped.

    Args:
        body: ADF document, plain string or None

    Returns:
        Plain text, empty when the body is missing
    """
    if body is None:
        return ""
    if isinstance(body, str):
        return body
    if not isinstance(body, dict):
        return ""
    return "\n".join(_leaf_text(block) for block in body.get("content") or [])


def _name(value: Optional[Dict[str, Any]], default: str = NOT_AVAILABLE) -> str:
    if not value:
        return default
    return value.get("name") or default


def _person(value: Optional[Dict[str, Any]], default: str = NOT_AVAILABLE) -> str:
    if not value:
        return default
    return f"{value.get('displayName', '')} ({value.get('emailAddress', '')})"


def _or_na(value: Any) -> Any:
    # Zero estimates render as N/A too
    return value if value else NOT_AVAILABLE


def _names(items: Optional[List[Dict[str, Any]]]) -> str:
    return ", ".join(item.get("name", "") for item in items or [])


def _linked_summary(issue: Dict[str, Any]) -> str:
    summary = (issue.get("fields") or {}).get("summary", "")
    return f"{issue.get('key', '')}: {summary}"


def format_subtasks(subtasks: Optional[List[Dict[str, Any]]]) -> str:
    return ", ".join(_linked_summary(subtask) for subtask in subtasks or [])


def format_issue_links(links: Optional[List[Dict[str, Any]]]) -> str:
    """Render issue links as '<type> KEY: summary', skipping dangling links."""
    rendered = []
    for link in links or []:
        linked = link.get("inwardIssue") or link.get("outwardIssue")
        if not linked:
            continue
        link_type = (link.get("type") or {}).get("name", "")
        rendered.append(f"{link_type} {_linked_summary(linked)}")
    return ", ".join(rendered)


def format_comments(comments: Optional[List[Dict[str, Any]]]) -> str:
    """Render the comment thread, oldest first as returned by Jira."""
    rendered = []
    for comment in comments or []:
        author = comment.get("author") or {}
        rendered.append(
            f"\n[{comment.get('created', '')}] Author: "
            f"{author.get('displayName', NOT_AVAILABLE)} "
            f"({author.get('emailAddress', '')})\n"
            f"{flatten_rich_text(comment.get('body'))}\n"
        )
    return "\n".join(rendered)


def format_issue(issue: JiraIssue) -> str:
    """
    Render the full document text for an issue.

    Args:
        issue: Issue to render

    Returns:
        Document text with every section in its fixed position
    """
    fields = issue.fields
    votes = (fields.get("votes") or {}).get("votes", 0)
    watches = (fields.get("watches") or {}).get("watchCount", 0)
    project = fields.get("project")
    project_line = (
        f"{project.get('name', '')} ({project.get('key', '')})" if project else NOT_AVAILABLE
    )
    comments = (fields.get("comment") or {}).get("comments")

    lines = [
        f"Issue Key: {issue.key}",
        f"ID: {issue.id}",
        f"URL: {issue.self_url}",
        f"Summary: {fields.get('summary') or ''}",
        "Description:",
        flatten_rich_text(fields.get("description")),
        "",
        f"Issue Type: {_name(fields.get('issuetype'))}",
        f"Status: {_name(fields.get('status'))}",
        f"Priority: {_name(fields.get('priority'))}",
        f"Assignee: {_person(fields.get('assignee'), UNASSIGNED)}",
        f"Reporter: {_person(fields.get('reporter'))}",
        f"Project: {project_line}",
        f"Created: {fields.get('created') or ''}",
        f"Updated: {fields.get('updated') or ''}",
        f"Resolution: {_name(fields.get('resolution'), UNRESOLVED)}",
        f"Resolution Date: {_or_na(fields.get('resolutiondate'))}",
        f"Labels: {', '.join(fields.get('labels') or [])}",
        f"Components: {_names(fields.get('components'))}",
        f"Sprint: {_name(fields.get('sprint'))}",
        f"Epic: {_name(fields.get('epic'))}",
        "Time Tracking:",
        f"  Original Estimate: {_or_na(fields.get('timeoriginalestimate'))}",
        f"  Remaining Estimate: {_or_na(fields.get('timeestimate'))}",
        f"  Time Spent: {_or_na(fields.get('timespent'))}",
        f"Votes: {votes}",
        f"Watches: {watches}",
        f"Fix Versions: {_names(fields.get('fixVersions'))}",
        f"Affected Versions: {_names(fields.get('versions'))}",
        f"Subtasks: {format_subtasks(fields.get('subtasks'))}",
        f"Issue Links: {format_issue_links(fields.get('issuelinks'))}",
        f"Attachments: {', '.join(a.get('filename', '') for a in fields.get('attachment') or [])}",
        "",
        "Comments:",
        format_comments(comments),
    ]
    return "\n".join(lines).strip()


def build_document(issue: JiraIssue) -> Document:
    """Create the Dust document for an issue."""
    return Document(
        document_id=issue.document_id,
        text=format_issue(issue),
        issue_key=issue.key,
    )
