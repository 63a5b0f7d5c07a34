"""
Rule-set definitions for the date/time visibility control.

These Pydantic models mirror the block attributes stored by the host
visibility framework. The engine only reads them; the host owns and
persists the structure.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# --- Enums ---


class ComparisonOperator(str, Enum):
    """Supported comparisons between "now" and a stored field instant."""

    BEFORE = "before"
    BEFORE_OR_ON = "beforeOrOn"
    ON_OR_AFTER = "onOrAfter"
    AFTER = "after"


OPERATOR_LABELS: dict[ComparisonOperator, str] = {
    ComparisonOperator.BEFORE: "Before",
    ComparisonOperator.BEFORE_OR_ON: "On or before",
    ComparisonOperator.ON_OR_AFTER: "On or after",
    ComparisonOperator.AFTER: "After",
}


class FieldContext(str, Enum):
    """The record scope a field reference is resolved against."""

    CURRENT_RECORD = "post"
    CURRENT_USER = "user"
    OPTIONS_STORE = "option"
    CURRENT_PORTAL = "portal"

    @classmethod
    def decode(cls, value: Any) -> "FieldContext":
        """Decode a stored context value, honoring legacy aliases.

        Anything unrecognized falls back to the current record.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            value = "true" if value else ""
        if isinstance(value, str):
            value = LEGACY_CONTEXT_ALIASES.get(value, value)
            try:
                return cls(value)
            except ValueError:
                pass
        return cls.CURRENT_RECORD


# Historical values written by older editor releases
LEGACY_CONTEXT_ALIASES: dict[str, str] = {
    "true": FieldContext.CURRENT_RECORD.value,
}


class DateGranularity(str, Enum):
    """Declared granularity of a stored date field."""

    DATE_ONLY = "date_picker"
    DATE_TIME = "date_time_picker"

    @classmethod
    def from_field_type(cls, field_type: str | None) -> "DateGranularity | None":
        """Map a host field type tag to a granularity, or None if not a date field."""
        try:
            return cls(field_type)
        except ValueError:
            return None


class RuleOutcome(str, Enum):
    """Result of evaluating a rule or a rule set."""

    VISIBLE = "visible"
    HIDDEN = "hidden"
    EXCLUDED = "excluded"

    def inverted(self) -> "RuleOutcome":
        if self is RuleOutcome.VISIBLE:
            return RuleOutcome.HIDDEN
        if self is RuleOutcome.HIDDEN:
            return RuleOutcome.VISIBLE
        return self


# --- Rule Models ---


class DateTimeRule(BaseModel):
    """A single date comparison rule.

    A rule without a field or operator is allowed; it simply passes.
    The operator is kept as a raw string so unknown values survive
    loading and can be treated conservatively during evaluation.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    field_reference: str | None = Field(
        default=None,
        alias="field",
        description="Key of the date/datetime field in the host field registry",
    )
    operator: str | None = Field(
        default=None,
        description="One of before, beforeOrOn, onOrAfter, after",
    )
    context: FieldContext = Field(
        default=FieldContext.CURRENT_RECORD,
        alias="subField",
        description="Record scope the field is read from",
    )

    @model_validator(mode="before")
    @classmethod
    def non_mapping_is_empty_rule(cls, data: Any) -> Any:
        """A null or non-object rule is read as a rule with nothing set."""
        if isinstance(data, dict) or isinstance(data, BaseModel):
            return data
        return {}

    @field_validator("field_reference", "operator", mode="before")
    @classmethod
    def loose_scalar_to_str(cls, value: Any) -> str | None:
        """Unset selects are stored as empty strings; numbers are read as text.

        Anything that is not a string or number counts as unset, so only
        this rule fails open instead of the whole control being rejected.
        """
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return str(value)
        if not isinstance(value, str) or value == "":
            return None
        return value

    @field_validator("context", mode="before")
    @classmethod
    def decode_context(cls, value: Any) -> FieldContext:
        return FieldContext.decode(value)

    def get_operator(self) -> ComparisonOperator | None:
        """Return the operator as an enum member, or None if unrecognized."""
        try:
            return ComparisonOperator(self.operator)
        except ValueError:
            return None


class RuleSet(BaseModel):
    """An AND-group of rules. Disabled sets take no part in evaluation."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    enabled: bool = Field(default=True, alias="enable")
    rules: list[DateTimeRule] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def non_mapping_is_empty_set(cls, data: Any) -> Any:
        if isinstance(data, dict) or isinstance(data, BaseModel):
            return data
        return {}

    @field_validator("enabled", mode="before")
    @classmethod
    def null_enable_is_true(cls, value: Any) -> Any:
        return True if value is None else value

    @field_validator("rules", mode="before")
    @classmethod
    def null_rules_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class DateTimeControl(BaseModel):
    """The control's block attributes: OR-combined rule sets plus the invert flag.

    Null values are read as unset and fall back to the defaults.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    rule_sets: list[RuleSet] = Field(default_factory=list, alias="ruleSets")
    hide_on_rule_sets: bool = Field(default=False, alias="hideOnRuleSets")

    @field_validator("rule_sets", mode="before")
    @classmethod
    def null_rule_sets_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("hide_on_rule_sets", mode="before")
    @classmethod
    def null_hide_is_false(cls, value: Any) -> Any:
        return False if value is None else value


def default_rule_set() -> dict[str, Any]:
    """The rule set the editor inserts when a new group is added."""
    return {"enable": True, "rules": [{}]}


# --- Resolution Result ---


class ResolvedField(BaseModel):
    """A field's raw stored value together with its declared granularity.

    ``granularity`` is None when the host reports a non-date field type.
    """

    granularity: DateGranularity | None
    raw_value: str | None = None
    label: str | None = None
