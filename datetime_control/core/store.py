"""
In-memory stand-ins for the host's field storage and portal subsystem.

Used by the HTTP app and the test suite. The real host supplies its own
implementations of the FieldStore and PortalSystem interfaces.
"""

import threading
from typing import Any

from datetime_control.core.fields import (
    CURRENT_RECORD_SCOPE,
    OPTIONS_SCOPE,
    USER_SCOPE_PREFIX,
    ScopeId,
)
from datetime_control.core.schema import FieldContext


def parse_scope(scope: str) -> ScopeId:
    """Convert a textual scope into a field-store scope id.

    Accepts "post" (the current record), "option", "user_<id>", or a
    numeric record id.

    Raises:
        ValueError: If the scope is not recognized.
    """
    if scope == FieldContext.CURRENT_RECORD.value:
        return CURRENT_RECORD_SCOPE
    if scope == OPTIONS_SCOPE:
        return OPTIONS_SCOPE
    if scope.startswith(USER_SCOPE_PREFIX) and scope[len(USER_SCOPE_PREFIX):].isdigit():
        return scope
    if scope.isdigit():
        return int(scope)
    raise ValueError(f"Unknown scope '{scope}'")


class InMemoryFieldStore:
    """Thread-safe in-memory field storage keyed by (scope, field key)."""

    def __init__(self):
        self._fields: dict[tuple[ScopeId, str], dict[str, Any]] = {}
        self._record_status: dict[int, str] = {}
        self._lock = threading.RLock()

    def set_field(
        self,
        field_key: str,
        scope_id: ScopeId,
        field_type: str,
        value: Any = None,
        label: str | None = None,
    ) -> None:
        """Store a field definition and its raw value for a scope."""
        with self._lock:
            self._fields[(scope_id, field_key)] = {
                "type": field_type,
                "label": label or field_key,
                "value": value,
            }

    def delete_field(self, field_key: str, scope_id: ScopeId) -> bool:
        with self._lock:
            return self._fields.pop((scope_id, field_key), None) is not None

    def set_record_status(self, record_id: int, status: str) -> None:
        with self._lock:
            self._record_status[record_id] = status

    def get_field_meta(self, field_key: str, scope_id: ScopeId) -> dict[str, Any] | None:
        with self._lock:
            stored = self._fields.get((scope_id, field_key))
            if stored is None:
                return None
            return {"type": stored["type"], "label": stored["label"]}

    def get_field_raw_value(self, field_key: str, scope_id: ScopeId) -> Any:
        with self._lock:
            stored = self._fields.get((scope_id, field_key))
            return stored["value"] if stored else None

    def get_record_status(self, record_id: int) -> str | None:
        with self._lock:
            return self._record_status.get(record_id)

    def get_field_groups(self) -> list[dict[str, Any]]:
        """Return every known field key as a single field group."""
        with self._lock:
            fields: dict[str, dict[str, Any]] = {}
            for (_, field_key), stored in self._fields.items():
                fields.setdefault(field_key, {
                    "key": field_key,
                    "label": stored["label"],
                    "type": stored["type"],
                })
        return [{"key": "stored_fields", "title": "Stored fields", "fields": list(fields.values())}]

    def count(self) -> int:
        with self._lock:
            return len(self._fields)


class StaticPortalSystem:
    """Portal subsystem with a fixed current portal and portal map."""

    def __init__(self, current_portal_id: Any = None, portal_map: dict[Any, int] | None = None):
        self.current_portal_id = current_portal_id
        self.portal_map: dict[Any, int] = dict(portal_map or {})

    def get_current_portal_id(self) -> Any:
        return self.current_portal_id

    def get_portal_record_map(self) -> dict[Any, int]:
        return dict(self.portal_map)


def parse_portal_map(value: str | None) -> dict[str, int]:
    """Parse "portal_id:record_id" pairs separated by commas.

    Example: "north:42,south:43" -> {"north": 42, "south": 43}

    Raises:
        ValueError: If a pair is malformed or a record id is not numeric.
    """
    portal_map: dict[str, int] = {}
    if not value:
        return portal_map
    for pair in value.split(","):
        if not pair.strip():
            continue
        portal_id, sep, record_id = pair.partition(":")
        if not sep or not portal_id.strip():
            raise ValueError(f"Malformed portal map entry '{pair}'")
        portal_map[portal_id.strip()] = int(record_id.strip())
    return portal_map
