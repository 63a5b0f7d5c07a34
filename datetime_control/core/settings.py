"""
Registration of the control in the host framework's settings.

The host keeps a JSON-schema-like description of its settings and a
defaults tree. This control adds an ``acf_date_time`` entry to both.
"""

from typing import Any

CONTROL_SETTINGS_KEY = "acf_date_time"
CONTROL_SLUG = "acfDateTime"


def register_settings_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Add the control's ``enable`` flag to the settings schema."""
    controls = schema.setdefault("visibility_controls", {})
    properties = controls.setdefault("properties", {})
    properties[CONTROL_SETTINGS_KEY] = {
        "type": "object",
        "properties": {
            "enable": {"type": "boolean"},
        },
    }
    return schema


def register_settings_defaults(defaults: dict[str, Any]) -> dict[str, Any]:
    """The control is enabled by default."""
    controls = defaults.setdefault("visibility_controls", {})
    controls[CONTROL_SETTINGS_KEY] = {"enable": True}
    return defaults


def is_control_enabled(settings: dict[str, Any] | None, control: str = CONTROL_SETTINGS_KEY) -> bool:
    """Check the host settings for a control's enable flag.

    A control with no stored flag counts as enabled.
    """
    if not isinstance(settings, dict):
        return True
    controls = settings.get("visibility_controls")
    if not isinstance(controls, dict):
        return True
    control_settings = controls.get(control)
    if not isinstance(control_settings, dict) or "enable" not in control_settings:
        return True
    return bool(control_settings["enable"])
