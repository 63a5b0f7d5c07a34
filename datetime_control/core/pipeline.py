"""
Minimal filter pipeline modeled on the host framework's hook system.

Callbacks registered for a hook run in ascending priority; within one
priority they run in registration order. Each callback receives the
current value plus the extra arguments and returns the new value.
"""

from typing import Any, Callable

from datetime_control.core.visibility import VisibilityEngine

CONTROL_SET_VISIBILITY_HOOK = "block_visibility_control_set_is_block_visible"

# The host runs its own controls at priority 10
FILTER_PRIORITY = 15


class FilterPipeline:
    """Ordered registry of filter callbacks per hook name."""

    def __init__(self):
        self._filters: dict[str, list[tuple[int, int, Callable[..., Any]]]] = {}
        self._counter = 0

    def add_filter(self, hook: str, callback: Callable[..., Any], priority: int = 10) -> None:
        self._filters.setdefault(hook, []).append((priority, self._counter, callback))
        self._counter += 1

    def has_filter(self, hook: str) -> bool:
        return bool(self._filters.get(hook))

    def apply_filters(self, hook: str, value: Any, *args: Any) -> Any:
        """Run every callback for ``hook`` and return the final value."""
        for _, _, callback in sorted(self._filters.get(hook, []), key=lambda entry: entry[:2]):
            value = callback(value, *args)
        return value


def register_filter(pipeline: FilterPipeline, engine: VisibilityEngine) -> None:
    """Hook the engine into the control-set visibility filter."""
    pipeline.add_filter(CONTROL_SET_VISIBILITY_HOOK, engine.control_set_filter, FILTER_PRIORITY)
