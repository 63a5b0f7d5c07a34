"""
Configuration handed to the block editor's control UI.

The editor component itself lives outside this package; it only needs
the operator choices, the context choices, and the list of date fields
it can offer.
"""

from typing import Any

from datetime_control.core.fields import PortalSystem
from datetime_control.core.schema import OPERATOR_LABELS, DateGranularity, FieldContext
from datetime_control.core.settings import CONTROL_SLUG

FIELD_TYPE_LABELS: dict[str, str] = {
    DateGranularity.DATE_ONLY.value: "Date Picker",
    DateGranularity.DATE_TIME.value: "Date Time Picker",
}


def get_operators() -> list[dict[str, str]]:
    """Return operator choices in display order."""
    return [
        {"value": operator.value, "label": label}
        for operator, label in OPERATOR_LABELS.items()
    ]


def get_context_options(has_portal_system: bool) -> list[dict[str, str]]:
    """Return context choices; the portal entry only appears when available."""
    options = [{"label": "The current post", "value": FieldContext.CURRENT_RECORD.value}]

    if has_portal_system:
        options.append({"label": "The current portal", "value": FieldContext.CURRENT_PORTAL.value})

    options.extend([
        {"label": "The current user", "value": FieldContext.CURRENT_USER.value},
        {"label": "An options page", "value": FieldContext.OPTIONS_STORE.value},
    ])
    return options


def filter_date_fields(field_groups: list[dict[str, Any]]) -> tuple[list[dict], list[dict]]:
    """Keep only date and date-time fields, preserving group structure.

    Args:
        field_groups: Host field groups, each with ``key``, ``title`` and
            a ``fields`` list of ``{key, label, type}`` dicts.

    Returns:
        A tuple of (groups, flat_fields). Groups without date fields are
        dropped. Flat fields carry ``groupTitle`` and ``groupKey``.
    """
    groups: list[dict] = []
    flat_fields: list[dict] = []

    for group in field_groups:
        date_fields = []
        for field in group.get("fields") or []:
            if DateGranularity.from_field_type(field.get("type")) is None:
                continue
            field_with_group = {
                **field,
                "groupTitle": group.get("title"),
                "groupKey": group.get("key"),
            }
            date_fields.append(field_with_group)
            flat_fields.append(field_with_group)

        if date_fields:
            groups.append({
                "key": group.get("key"),
                "title": group.get("title"),
                "fields": date_fields,
            })

    return groups, flat_fields


def get_grouped_field_options(groups: list[dict]) -> list[dict]:
    """Convert filtered groups into grouped select options."""
    return [
        {
            "label": group["title"],
            "options": [
                {"value": field["key"], "label": field["label"]}
                for field in group["fields"]
            ],
        }
        for group in groups
    ]


def get_field_type_label(field_type: str) -> str:
    return FIELD_TYPE_LABELS.get(field_type, field_type)


def find_field_by_key(flat_fields: list[dict], field_key: str) -> dict | None:
    for field in flat_fields:
        if field.get("key") == field_key:
            return field
    return None


def build_editor_config(portal_system: PortalSystem | None = None) -> dict[str, Any]:
    """Build the configuration object passed to the editor script."""
    has_portal_system = portal_system is not None
    return {
        "controlSlug": CONTROL_SLUG,
        "operators": get_operators(),
        "hasPortalSystem": has_portal_system,
        "contextOptions": get_context_options(has_portal_system),
    }
