"""
Deterministic date/time visibility evaluator for content blocks.

Evaluates the control's rule sets against the current date/time:
- rules inside a rule set are combined with AND logic
- rule sets are combined with OR logic
- ``hide_on_rule_sets`` inverts each rule set's result before combining

Missing data never hides a block: a rule whose field, operator, value
or parse result is missing passes. An unknown operator or a non-date
field type fails the rule instead.
"""

import logging
from datetime import datetime, tzinfo
from typing import Any, Callable

from pydantic import ValidationError

from datetime_control.core.fields import FieldResolver
from datetime_control.core.schema import (
    ComparisonOperator,
    DateTimeControl,
    DateTimeRule,
    RuleOutcome,
    RuleSet,
)
from datetime_control.core.settings import CONTROL_SETTINGS_KEY, CONTROL_SLUG, is_control_enabled
from datetime_control.core.utils import current_instant, get_reference_timezone, parse_field_value

NowProvider = Callable[[], datetime]


def _null_logger() -> logging.Logger:
    """A detached logger that discards everything."""
    null = logging.Logger("datetime_control.null")
    null.addHandler(logging.NullHandler())
    null.disabled = True
    return null


def compare_instants(now: datetime, field_instant: datetime, operator: ComparisonOperator | None) -> bool:
    """Check "is now [operator] the field instant?".

    Returns False for an unknown operator.
    """
    match operator:
        case ComparisonOperator.BEFORE:
            return now < field_instant
        case ComparisonOperator.BEFORE_OR_ON:
            return now <= field_instant
        case ComparisonOperator.ON_OR_AFTER:
            return now >= field_instant
        case ComparisonOperator.AFTER:
            return now > field_instant

    return False


class VisibilityEngine:
    """Evaluates date/time rule sets for one render pass.

    Args:
        resolver: Field resolver bound to the host's field store. When
            None the host field API is considered unavailable and the
            engine never changes the incoming visibility.
        timezone: Reference timezone for both stored values and "now".
        now_provider: Clock returning the current datetime.
        current_user_provider: Returns the authenticated user's id, or None.
        logger: Receives diagnostics. Defaults to a silent logger.
    """

    def __init__(
        self,
        resolver: FieldResolver | None,
        timezone: tzinfo | None = None,
        now_provider: NowProvider | None = None,
        current_user_provider: Callable[[], int | None] | None = None,
        logger: logging.Logger | None = None,
    ):
        self.resolver = resolver
        self.timezone = timezone or get_reference_timezone()
        self.now_provider = now_provider
        self.current_user_provider = current_user_provider
        self.logger = logger or _null_logger()

    # -----------------------------------------------------------------
    # Rule level
    # -----------------------------------------------------------------

    def evaluate_rule(self, rule: DateTimeRule, current_user_id: int | None = None) -> RuleOutcome:
        """Evaluate one rule against the current date/time.

        Args:
            rule: The rule to evaluate.
            current_user_id: Id of the authenticated user, if any.

        Returns:
            RuleOutcome.VISIBLE or RuleOutcome.HIDDEN.
        """
        log = self.logger
        log.debug("Rule: field=%s operator=%s context=%s", rule.field_reference, rule.operator, rule.context.value)

        if not rule.field_reference or not rule.operator:
            log.debug("Rule result: visible (missing field or operator)")
            return RuleOutcome.VISIBLE

        if self.resolver is None:
            log.debug("Rule result: visible (no field store)")
            return RuleOutcome.VISIBLE

        resolved = self.resolver.resolve(rule.field_reference, rule.context, current_user_id)
        if resolved is None or not resolved.raw_value:
            log.debug("Rule result: visible (field not found or empty)")
            return RuleOutcome.VISIBLE

        if resolved.granularity is None:
            log.debug("Rule result: hidden (field '%s' is not a date field)", rule.field_reference)
            return RuleOutcome.HIDDEN

        field_instant = parse_field_value(resolved.raw_value, resolved.granularity, self.timezone)
        if field_instant is None:
            log.debug("Rule result: visible (could not parse '%s')", resolved.raw_value)
            return RuleOutcome.VISIBLE

        now = current_instant(self.timezone, resolved.granularity, self.now_provider)
        operator = rule.get_operator()
        passes = compare_instants(now, field_instant, operator)

        log.debug(
            "Compare: now=%s field=%s operator=%s -> %s",
            now.isoformat(),
            field_instant.isoformat(),
            rule.operator,
            "PASS" if passes else "FAIL",
        )
        return RuleOutcome.VISIBLE if passes else RuleOutcome.HIDDEN

    # -----------------------------------------------------------------
    # Rule set level
    # -----------------------------------------------------------------

    def evaluate_rule_set(self, rule_set: RuleSet, current_user_id: int | None = None) -> RuleOutcome:
        """Combine a rule set's rules with AND logic.

        Disabled or empty rule sets are excluded. Every rule is evaluated,
        even after one has failed, so diagnostics cover the whole set.
        """
        if not rule_set.enabled or not rule_set.rules:
            self.logger.debug("Skipping rule set (disabled or no rules)")
            return RuleOutcome.EXCLUDED

        results = [self.evaluate_rule(rule, current_user_id) for rule in rule_set.rules]

        if RuleOutcome.HIDDEN in results:
            return RuleOutcome.HIDDEN
        return RuleOutcome.VISIBLE

    # -----------------------------------------------------------------
    # Control level
    # -----------------------------------------------------------------

    def evaluate(
        self,
        rule_sets: list[RuleSet],
        hide_on_rule_sets: bool = False,
        incoming_visible: bool = True,
        current_user_id: int | None = None,
        control_enabled: bool = True,
    ) -> bool:
        """Combine rule sets with OR logic and apply the invert flag.

        Args:
            rule_sets: The control's rule sets, in order.
            hide_on_rule_sets: Hide the block when rules apply instead of
                showing it.
            incoming_visible: Visibility decided by earlier pipeline stages.
            current_user_id: Id of the authenticated user, if any.
            control_enabled: Whether the control is enabled in settings.

        Returns:
            True if the block should be visible.
        """
        if not incoming_visible:
            self.logger.debug("Returning early: block already hidden")
            return False

        if not control_enabled or not rule_sets:
            return True

        results: list[RuleOutcome] = []
        for index, rule_set in enumerate(rule_sets):
            self.logger.debug("Processing rule set %d", index)
            outcome = self.evaluate_rule_set(rule_set, current_user_id)
            if outcome is RuleOutcome.EXCLUDED:
                continue
            if hide_on_rule_sets:
                outcome = outcome.inverted()
            self.logger.debug("Rule set %d result: %s", index, outcome.value)
            results.append(outcome)

        if not hide_on_rule_sets:
            # With every set excluded there is no opinion to give
            final = not results or RuleOutcome.VISIBLE in results
        else:
            final = RuleOutcome.HIDDEN not in results

        self.logger.debug("Final visibility result: %s", "VISIBLE" if final else "HIDDEN")
        return final

    def control_set_filter(
        self,
        is_visible: bool,
        settings: dict[str, Any] | None,
        controls: dict[str, Any] | None,
    ) -> bool:
        """Filter callback for the host's control-set visibility pipeline.

        Args:
            is_visible: Visibility decided by earlier callbacks.
            settings: Host plugin settings.
            controls: The block's control-set attributes.

        Returns:
            True if the block should be visible.
        """
        self.logger.debug("Filter called: is_visible=%s", is_visible)

        if not is_visible:
            return False

        if self.resolver is None:
            self.logger.debug("Returning early: field store not available")
            return is_visible

        if not is_control_enabled(settings, CONTROL_SETTINGS_KEY):
            return True

        control_atts = (controls or {}).get(CONTROL_SLUG)
        if not control_atts:
            return True

        try:
            control = DateTimeControl.model_validate(control_atts)
        except ValidationError as e:
            self.logger.debug("Ignoring malformed control attributes: %s", e)
            return True

        current_user_id = self.current_user_provider() if self.current_user_provider else None

        return self.evaluate(
            control.rule_sets,
            hide_on_rule_sets=control.hide_on_rule_sets,
            incoming_visible=is_visible,
            current_user_id=current_user_id,
        )
