"""Pure helpers for a document's routing map and workflow-status map.

Both maps are stored as JSON on the document row. The helpers never mutate
their input; they return the next map for the caller to assign.
"""
import json
import re
from typing import Any

ORDINAL_POSITIONS = ["first", "second", "third", "fourth", "fifth"]

_NUMERIC_SUFFIX = re.compile(r"(\d+)$")


def parse_workflow_status(value: Any) -> dict[str, dict]:
    """Normalise whatever was stored into ``{key: entry_dict}``; junk becomes ``{}``."""
    if not value:
        return {}
    if isinstance(value, str):
        try:
            return parse_workflow_status(json.loads(value))
        except ValueError:
            return {}
    if isinstance(value, list):
        return {
            f"entry_{i}": dict(entry) if isinstance(entry, dict) else {"status": "unknown"}
            for i, entry in enumerate(value, start=1)
        }
    if isinstance(value, dict):
        return {k: dict(v) for k, v in value.items() if isinstance(v, dict)}
    return {}


def parse_route(value: Any) -> dict[str, str]:
    if not value:
        return {}
    if isinstance(value, str):
        try:
            return parse_route(json.loads(value))
        except ValueError:
            return {}
    if isinstance(value, list):
        return {_position_for_index(i): dept for i, dept in enumerate(value) if dept}
    if isinstance(value, dict):
        return {k: v for k, v in value.items() if isinstance(v, str)}
    return {}


def route_departments(route: dict[str, str]) -> list[str]:
    return [route[key] for key in sorted(route, key=_position_index)]


def _position_for_index(index: int) -> str:
    if index < len(ORDINAL_POSITIONS):
        return ORDINAL_POSITIONS[index]
    return f"step{index + 1}"


def _position_index(key: str) -> int:
    if key in ORDINAL_POSITIONS:
        return ORDINAL_POSITIONS.index(key)
    match = _NUMERIC_SUFFIX.search(key)
    if match:
        return int(match.group(1)) - 1
    return len(ORDINAL_POSITIONS) + 1000


def next_route_position(route: dict[str, str]) -> str:
    if not route:
        return "first"
    highest = max(_position_index(key) for key in route)
    return _position_for_index(max(highest + 1, len(route)))


def add_route_department(route: dict[str, str], department_id: str) -> dict[str, str]:
    """Append ``department_id`` to the route unless it is already on it."""
    if department_id in route.values():
        return dict(route)
    updated = dict(route)
    updated[next_route_position(route)] = department_id
    return updated


def _count_prefixed(current: dict, prefix: str) -> int:
    return sum(1 for key in current if key.startswith(prefix))


def _suffix_number(key: str) -> int:
    match = _NUMERIC_SUFFIX.search(key)
    return int(match.group(1)) if match else 0


def record_creation(current: dict, *, at: str, department_id: str | None,
                    user_id: str | None, status: str = "dispatch") -> dict:
    if "created" in current:
        return dict(current)
    updated = dict(current)
    updated["created"] = {
        "status": status,
        "at": at,
        "department_id": department_id,
        "user_id": user_id,
        "action": "created",
    }
    return updated


def record_release(current: dict, *, at: str, from_department_id: str | None,
                   to_department_id: str, user_id: str,
                   request_action: str | None = None, remarks: str | None = None) -> dict:
    key = f"released_{_count_prefixed(current, 'released_') + 1}"
    updated = dict(current)
    updated[key] = {
        "status": "intransit",
        "at": at,
        "from_department_id": from_department_id,
        "to_department_id": to_department_id,
        "released_by": user_id,
        "request_action": request_action,
        "remarks": remarks,
    }
    return updated


def pending_release_for(current: dict, department_id: str) -> str | None:
    """Key of the newest release to ``department_id`` that nobody received yet."""
    releases = sorted(
        (key for key in current if key.startswith("released_")),
        key=_suffix_number,
    )
    for key in reversed(releases):
        entry = current[key]
        target = entry.get("to_department_id") or entry.get("toDepartmentId")
        received = entry.get("received_at") or entry.get("receivedAt")
        if target == department_id and not received:
            return key
    return None


def record_receive(current: dict, *, at: str, department_id: str, user_id: str) -> dict:
    updated = dict(current)
    key = pending_release_for(current, department_id)
    if key is not None:
        updated[key] = {
            **current[key],
            "status": "received",
            "received_at": at,
            "received_by": user_id,
            "received_department_id": department_id,
        }
        return updated

    receive_key = f"received_{_count_prefixed(current, 'received_') + 1}"
    updated[receive_key] = {
        "status": "received",
        "at": at,
        "department_id": department_id,
        "received_by": user_id,
    }
    return updated


def record_completion(current: dict, *, at: str, user_id: str) -> dict:
    updated = dict(current)
    updated["completed"] = {"status": "completed", "at": at, "completed_by": user_id}
    return updated


def latest_release(current: dict) -> dict | None:
    releases = sorted(
        (key for key in current if key.startswith("released_")),
        key=_suffix_number,
    )
    return current[releases[-1]] if releases else None
