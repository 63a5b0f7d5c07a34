"""
Field resolution against the host's field storage.

Given a field reference and a context (current record, current user,
options store, current portal), look up the field's type and its RAW
stored value. Formatted values are never used: display formats depend
on locale and field settings and would not match the fixed parse formats.
"""

import logging
from typing import Any, Protocol

from datetime_control.core.schema import DateGranularity, FieldContext, ResolvedField

logger = logging.getLogger(__name__)

# Scope ids understood by the field store
CURRENT_RECORD_SCOPE = None
OPTIONS_SCOPE = "option"
USER_SCOPE_PREFIX = "user_"

PUBLISHED_STATUS = "publish"

ScopeId = str | int | None


def user_scope(user_id: int) -> str:
    """Build the scope id for a user's fields (e.g. "user_7")."""
    return f"{USER_SCOPE_PREFIX}{user_id}"


def is_empty_value(value: Any) -> bool:
    """Match the host's notion of an empty stored value.

    None, False, 0, "" and "0" all count as empty.
    """
    return not value or value == "0"


# --- Host interfaces ---


class FieldStore(Protocol):
    """Field-access interface provided by the host CMS."""

    def get_field_meta(self, field_key: str, scope_id: ScopeId) -> dict[str, Any] | None:
        """Return ``{"type": ..., "label": ...}`` or None if the field is unknown."""
        ...

    def get_field_raw_value(self, field_key: str, scope_id: ScopeId) -> Any:
        """Return the unformatted stored value, or None."""
        ...

    def get_record_status(self, record_id: int) -> str | None:
        """Return the publication status of a record, or None if it does not exist."""
        ...


class PortalSystem(Protocol):
    """Optional secondary addressing subsystem."""

    def get_current_portal_id(self) -> Any:
        ...

    def get_portal_record_map(self) -> dict[Any, int]:
        ...


# --- Resolver ---


class FieldResolver:
    """Resolves field references to raw values in a given context.

    Args:
        store: The host field store.
        portal_system: Optional portal subsystem. When None, the portal
            context never resolves.
    """

    def __init__(self, store: FieldStore, portal_system: PortalSystem | None = None):
        self.store = store
        self.portal_system = portal_system

    @property
    def has_portal_system(self) -> bool:
        return self.portal_system is not None

    def resolve(
        self,
        field_reference: str,
        context: FieldContext,
        current_user_id: int | None = None,
    ) -> ResolvedField | None:
        """Resolve a field reference to its raw value and granularity.

        Args:
            field_reference: Key of the field in the host registry.
            context: The record scope to read from.
            current_user_id: Id of the authenticated user, if any.

        Returns:
            A ResolvedField, or None if the scope, the field, or its value
            is absent.
        """
        found, scope_id = self._get_scope_id(context, current_user_id)
        if not found:
            return None

        meta = self.store.get_field_meta(field_reference, scope_id)
        if not meta:
            logger.debug("Field '%s' not found in scope %r", field_reference, scope_id)
            return None

        raw_value = self.store.get_field_raw_value(field_reference, scope_id)
        if is_empty_value(raw_value):
            logger.debug("Field '%s' has no value in scope %r", field_reference, scope_id)
            return None

        return ResolvedField(
            granularity=DateGranularity.from_field_type(meta.get("type")),
            raw_value=str(raw_value),
            label=str(meta["label"]) if meta.get("label") is not None else None,
        )

    def get_portal_record_id(self) -> int | None:
        """Map the current portal to its published record id.

        Returns None if the portal system is unavailable, no portal is
        active, the portal is unmapped, or its record is missing or not
        published.
        """
        if self.portal_system is None:
            return None

        portal_id = self.portal_system.get_current_portal_id()
        if not portal_id:
            return None

        record_id = self.portal_system.get_portal_record_map().get(portal_id)
        if not record_id:
            return None

        try:
            record_id = int(record_id)
        except (TypeError, ValueError):
            logger.debug("Portal '%s' maps to invalid record id %r", portal_id, record_id)
            return None

        if self.store.get_record_status(record_id) != PUBLISHED_STATUS:
            return None

        return record_id

    def _get_scope_id(
        self,
        context: FieldContext,
        current_user_id: int | None,
    ) -> tuple[bool, ScopeId]:
        """Return (found, scope_id) for a context.

        The current-record scope id is None, so a separate flag signals
        whether a scope could be determined at all.
        """
        match context:
            case FieldContext.CURRENT_USER:
                if not current_user_id:
                    return False, None
                return True, user_scope(current_user_id)

            case FieldContext.OPTIONS_STORE:
                return True, OPTIONS_SCOPE

            case FieldContext.CURRENT_PORTAL:
                record_id = self.get_portal_record_id()
                if record_id is None:
                    return False, None
                return True, record_id

        return True, CURRENT_RECORD_SCOPE
