"""Action classification for POST requests."""

from __future__ import annotations

from micropress.domain.normalize import get_field
from micropress.domain.requests import Action, RequestBody

_ACTIONS: dict[str, Action] = {
    "delete": Action.DELETE,
    "undelete": Action.UNDELETE,
}


def classify(body: RequestBody | None) -> Action:
    """Decide which action a POST body asks for.

    Only the exact strings ``delete`` and ``undelete`` select those
    actions. A missing ``action`` field, or any other value, is a create.
    """
    action = get_field(body, "action")
    if action is None:
        return Action.CREATE
    return _ACTIONS.get(action, Action.CREATE)
