"""Helper functions for UI - Signal API client and pure view builders."""

from datetime import datetime
from typing import Any

import httpx

INPUT_TYPES = ["note", "concern", "evidence", "assumption", "question", "link"]
REVIEW_TYPE_ORDER = ["evidence", "assumption", "concern", "question", "link", "note"]
MAX_SUGGESTED_INPUT_CHARS = 240

TYPE_BADGES = {
    "note": "🔵",
    "concern": "🟠",
    "evidence": "🟢",
    "assumption": "🟣",
    "question": "🔴",
    "link": "🔗",
    "file": "📄",
}

CONFIDENCE_COLORS = {"high": "green", "medium": "orange", "low": "gray"}


class SignalAPI:
    """Thin httpx client for the Signal backend."""

    def __init__(self, backend_url: str, timeout: float = 90.0) -> None:
        self._base = backend_url.rstrip("/")
        self._timeout = timeout

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        response = httpx.request(method, f"{self._base}{path}", timeout=self._timeout, **kwargs)
        response.raise_for_status()
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def list_decisions(self, status: str | None = None) -> list[dict[str, Any]]:
        params = {"status": status} if status else None
        result: list[dict[str, Any]] = self._request("GET", "/decisions", params=params)["decisions"]
        return result

    def create_decision(self, title: str, context: str, owner: str, deadline: str) -> dict[str, Any]:
        return self._request(
            "POST",
            "/decisions",
            json={"title": title, "context": context, "owner": owner, "deadline": deadline},
        )

    def get_view(self, decision_id: str) -> dict[str, Any]:
        return self._request("GET", f"/decisions/{decision_id}")

    def set_status(self, decision_id: str, status: str) -> dict[str, Any]:
        return self._request(
            "PATCH", f"/decisions/{decision_id}/status", json={"status": status}
        )

    def add_input(self, decision_id: str, input_type: str, content: str, author: str) -> dict[str, Any]:
        return self._request(
            "POST",
            f"/decisions/{decision_id}/inputs",
            json={"type": input_type, "content": content, "author": author},
        )

    def request_confirm(self, decision_id: str, item_id: str) -> None:
        self._request("POST", f"/decisions/{decision_id}/entries/{item_id}/confirm-delete")

    def dismiss_confirm(self, decision_id: str, item_id: str) -> None:
        self._request("DELETE", f"/decisions/{decision_id}/entries/{item_id}/confirm-delete")

    def delete_entry(self, decision_id: str, item_id: str) -> dict[str, Any]:
        return self._request("POST", f"/decisions/{decision_id}/entries/{item_id}/delete")

    def undo_delete(self, decision_id: str, item_id: str) -> bool:
        return bool(self._request("POST", f"/decisions/{decision_id}/entries/{item_id}/undo")["undone"])

    def upload(self, decision_id: str, file_name: str, raw_text: str) -> dict[str, Any]:
        return self._request(
            "POST",
            f"/decisions/{decision_id}/uploads",
            json={"file_name": file_name, "raw_text": raw_text},
        )

    def update_candidate(
        self, decision_id: str, index: int, content: str | None = None, input_type: str | None = None
    ) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if content is not None:
            body["content"] = content
        if input_type is not None:
            body["type"] = input_type
        return self._request(
            "PATCH", f"/decisions/{decision_id}/review/candidates/{index}", json=body
        )

    def remove_candidate(self, decision_id: str, index: int) -> None:
        self._request("DELETE", f"/decisions/{decision_id}/review/candidates/{index}")

    def confirm_review(self, decision_id: str) -> dict[str, Any]:
        return self._request("POST", f"/decisions/{decision_id}/review/confirm")

    def cancel_review(self, decision_id: str) -> None:
        self._request("DELETE", f"/decisions/{decision_id}/review")

    def run_analysis(self, decision_id: str) -> dict[str, Any]:
        return self._request("POST", f"/decisions/{decision_id}/analysis")


def error_message(exc: Exception) -> str:
    """User-facing message for a failed API call."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            return f"Request failed ({exc.response.status_code})"
        if isinstance(body, dict):
            return str(body.get("message") or body.get("detail") or body)
    if isinstance(exc, httpx.TransportError):
        return "Could not reach the Signal backend"
    return str(exc)


def split_by_status(decisions: list[dict[str, Any]]) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Partition decisions into (active, completed), preserving order."""
    active = [d for d in decisions if d.get("status") == "active"]
    completed = [d for d in decisions if d.get("status") == "completed"]
    return active, completed


def format_timestamp(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%b %d, %H:%M")


def build_timeline_rows(view: dict[str, Any]) -> list[dict[str, Any]]:
    """Flatten a decision view's timeline into display rows.

    Each row carries its id, badge, headline, body, and deletion state
    ("visible", "confirming" or "pending").
    """
    pending = {p["item_id"] for p in view.get("pending_deletions", [])}
    confirming = view.get("confirming_deletion")
    rows: list[dict[str, Any]] = []

    for entry in view.get("timeline", []):
        item = entry["item"]
        if entry["kind"] == "file":
            label = "file"
            headline = item["file_name"]
            body = "Source document processed."
            reference = None
        else:
            label = item["type"]
            headline = item["author"]
            body = item["content"]
            reference = item.get("source_reference")

        if item["id"] in pending:
            state = "pending"
        elif item["id"] == confirming:
            state = "confirming"
        else:
            state = "visible"

        rows.append(
            {
                "id": item["id"],
                "kind": entry["kind"],
                "label": label.upper(),
                "badge": TYPE_BADGES.get(label, "⚪"),
                "headline": headline,
                "body": body,
                "reference": reference,
                "when": format_timestamp(item["timestamp"]),
                "state": state,
            }
        )
    return rows


def analysis_sections(analysis: dict[str, Any] | None) -> list[tuple[str, list[str]]]:
    """Ordered (heading, bullet list) pairs for the analysis tab; empty lists are skipped."""
    if not analysis:
        return []
    sections = [
        ("Forces", analysis.get("forces", [])),
        ("Constraints", analysis.get("constraints", [])),
        ("Hidden Assumptions", analysis.get("hiddenAssumptions", [])),
        ("Crucial Unknowns", analysis.get("unknowns", [])),
    ]
    return [(heading, items) for heading, items in sections if items]


def analyze_button_label(view: dict[str, Any]) -> str:
    if view.get("analyzing"):
        return "Sensemaking..."
    return "Refresh Analysis" if view["decision"].get("aiAnalysis") else "Run Signal Analysis"


def char_counter(content: str) -> str:
    return f"{len(content)}/{MAX_SUGGESTED_INPUT_CHARS}"
