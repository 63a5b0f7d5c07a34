"""
Date/time visibility control for block visibility rule sets.

Evaluates whether the current date/time is before or after dates stored
in custom fields, combining rules with AND within a rule set and OR
across rule sets.
"""

from datetime_control.core.fields import FieldResolver
from datetime_control.core.pipeline import FilterPipeline, register_filter
from datetime_control.core.schema import DateTimeControl, DateTimeRule, RuleSet
from datetime_control.core.visibility import VisibilityEngine

__all__ = [
    "DateTimeControl",
    "DateTimeRule",
    "RuleSet",
    "FieldResolver",
    "VisibilityEngine",
    "FilterPipeline",
    "register_filter",
]
