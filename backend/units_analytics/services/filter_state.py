"""
Filter state container for the analytics dashboard.
Pure state: no network or async behaviour lives here.
"""
import logging
from typing import Callable, List, Optional

from units_analytics.models import FilterState

logger = logging.getLogger(__name__)

# listener(new_state, previous_state)
FilterListener = Callable[[FilterState, FilterState], None]


class FilterStore:
    """
    Owns the active FilterState.

    One logical writer (the filter UI) calls update()/reset(); readers either
    poll `current` or subscribe to transitions.
    """

    def __init__(self, initial: Optional[FilterState] = None):
        self._state = initial or FilterState()
        self._listeners: List[FilterListener] = []

    @property
    def current(self) -> FilterState:
        return self._state

    def subscribe(self, listener: FilterListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, partial: Optional[dict] = None, **changes) -> FilterState:
        """
        Apply a partial change and return the new state.

        A new organization_id clears property_id in the same transition, unless
        the same update also names the property to select.
        """
        changes = {**(partial or {}), **changes}
        unknown = set(changes) - set(FilterState.model_fields)
        if unknown:
            raise ValueError(f"Unknown filter field(s): {', '.join(sorted(unknown))}")

        previous = self._state
        state = FilterState(**{**previous.model_dump(), **changes})
        if state.organization_id != previous.organization_id and "property_id" not in changes:
            state = state.model_copy(update={"property_id": None})

        return self._commit(state, previous)

    def reset(self) -> FilterState:
        """Clear every scope field, keeping the view and chart selection."""
        previous = self._state
        state = FilterState(view_mode=previous.view_mode, chart_type=previous.chart_type)
        return self._commit(state, previous)

    def _commit(self, state: FilterState, previous: FilterState) -> FilterState:
        if state == previous:
            return state
        self._state = state
        logger.info(f"[FILTERS] {previous.model_dump(mode='json')} -> {state.model_dump(mode='json')}")
        for listener in list(self._listeners):
            listener(state, previous)
        return state
