"""Readable failure text for storefront API responses.

Locust only records a status code for a failed request. These helpers turn
the storefront's error bodies into a one-line description:

- request validation (422): {"detail": [{"loc": [...], "msg": "..."}]}
- domain rules (422) and refused transitions (409): {"error": {"status": ["..."]}}
- missing orders (404) and storage failures (500): {"error": "..."}
- gateway refusal on checkout (502): {"error": "...", "reason": "...", "order_id": "ORD-..."}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response

MAX_TEXT = 300


def _body(response: Response):
    try:
        return response.json()
    except ValueError:
        return None


def _field_messages(errors: dict) -> str:
    parts = []
    for field, messages in errors.items():
        if isinstance(messages, (list, tuple)):
            messages = "; ".join(str(m) for m in messages)
        parts.append(f"{field}: {messages}")
    return " | ".join(parts)


def describe_failure(response: Response) -> str:
    """One-line description of an error response, for failure messages and logs."""
    body = _body(response)
    if not isinstance(body, dict):
        text = getattr(response, "text", "") or ""
        return text[:MAX_TEXT] or "(empty response body)"

    if isinstance(body.get("detail"), list):
        parts = []
        for err in body["detail"]:
            loc = ".".join(str(p) for p in err.get("loc", []) if p != "body")
            msg = err.get("msg", str(err))
            parts.append(f"{loc}: {msg}" if loc else msg)
        return " | ".join(parts)

    error = body.get("error")
    if isinstance(error, dict):
        return _field_messages(error)
    if error is not None:
        if body.get("reason"):
            order = f" [{body['order_id']}]" if body.get("order_id") else ""
            return f"{error}: {body['reason']}{order}"
        return str(error)

    return str(body)[:MAX_TEXT]


def is_transition_conflict(response: Response) -> bool:
    """True for a 409 refusing a status change.

    Concurrent admin users race on the same orders, so a refused transition
    is an expected outcome rather than a failure.
    """
    if response.status_code != 409:
        return False
    body = _body(response)
    return isinstance(body, dict) and isinstance(body.get("error"), dict) and "status" in body["error"]
