"""
Unit tests for the editor configuration and settings registration.

Tests cover:
- Operator choices and their order
- Context choices with and without a portal system
- Filtering host field groups down to date fields
- Grouped field options and field type labels
- Settings schema, defaults and the enable check
"""

from datetime_control.core.editor import (
    build_editor_config,
    filter_date_fields,
    find_field_by_key,
    get_context_options,
    get_field_type_label,
    get_grouped_field_options,
    get_operators,
)
from datetime_control.core.settings import (
    is_control_enabled,
    register_settings_defaults,
    register_settings_schema,
)
from datetime_control.core.store import StaticPortalSystem

FIELD_GROUPS = [
    {
        "key": "group_event",
        "title": "Event",
        "fields": [
            {"key": "field_start", "label": "Start", "type": "date_time_picker"},
            {"key": "field_day", "label": "Day", "type": "date_picker"},
            {"key": "field_venue", "label": "Venue", "type": "text"},
        ],
    },
    {
        "key": "group_seo",
        "title": "SEO",
        "fields": [{"key": "field_title", "label": "Title", "type": "text"}],
    },
    {"key": "group_empty", "title": "Empty"},
]


class TestOperators:

    def test_order_and_labels(self):
        assert get_operators() == [
            {"value": "before", "label": "Before"},
            {"value": "beforeOrOn", "label": "On or before"},
            {"value": "onOrAfter", "label": "On or after"},
            {"value": "after", "label": "After"},
        ]


class TestContextOptions:

    def test_without_portal(self):
        values = [option["value"] for option in get_context_options(False)]
        assert values == ["post", "user", "option"]

    def test_portal_is_second(self):
        values = [option["value"] for option in get_context_options(True)]
        assert values == ["post", "portal", "user", "option"]


class TestFieldFiltering:

    def test_keeps_only_date_fields(self):
        groups, flat = filter_date_fields(FIELD_GROUPS)
        assert [g["key"] for g in groups] == ["group_event"]
        assert [f["key"] for f in flat] == ["field_start", "field_day"]

    def test_flat_fields_carry_group(self):
        _, flat = filter_date_fields(FIELD_GROUPS)
        assert flat[0]["groupTitle"] == "Event"
        assert flat[0]["groupKey"] == "group_event"

    def test_grouped_options(self):
        groups, _ = filter_date_fields(FIELD_GROUPS)
        assert get_grouped_field_options(groups) == [
            {
                "label": "Event",
                "options": [
                    {"value": "field_start", "label": "Start"},
                    {"value": "field_day", "label": "Day"},
                ],
            }
        ]

    def test_find_field_by_key(self):
        _, flat = filter_date_fields(FIELD_GROUPS)
        assert find_field_by_key(flat, "field_day")["label"] == "Day"
        assert find_field_by_key(flat, "field_venue") is None

    def test_field_type_labels(self):
        assert get_field_type_label("date_picker") == "Date Picker"
        assert get_field_type_label("date_time_picker") == "Date Time Picker"
        assert get_field_type_label("time_picker") == "time_picker"


class TestEditorConfig:

    def test_without_portal_system(self):
        config = build_editor_config()
        assert config["controlSlug"] == "acfDateTime"
        assert config["hasPortalSystem"] is False
        assert len(config["operators"]) == 4

    def test_with_portal_system(self):
        config = build_editor_config(StaticPortalSystem())
        assert config["hasPortalSystem"] is True
        assert {"label": "The current portal", "value": "portal"} in config["contextOptions"]


class TestSettingsRegistration:

    def test_schema(self):
        schema = register_settings_schema({"visibility_controls": {"properties": {"date_time": {}}}})
        properties = schema["visibility_controls"]["properties"]
        assert "date_time" in properties
        assert properties["acf_date_time"]["properties"]["enable"] == {"type": "boolean"}

    def test_defaults(self):
        defaults = register_settings_defaults({})
        assert defaults["visibility_controls"]["acf_date_time"] == {"enable": True}

    def test_enabled_by_default(self):
        assert is_control_enabled({}) is True
        assert is_control_enabled(None) is True
        assert is_control_enabled({"visibility_controls": {"acf_date_time": {}}}) is True

    def test_disabled(self):
        assert is_control_enabled({"visibility_controls": {"acf_date_time": {"enable": False}}}) is False
