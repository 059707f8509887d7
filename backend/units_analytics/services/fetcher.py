"""
Aggregation Fetcher - issues the four statistics fetches for the current scope.

Each fetch family keeps its own loading/error/data triple, so one failing
endpoint never blocks or clears the others. Scope changes are debounced, and
every scope change or manual refresh starts a new generation: a response is
applied only if its generation is still the latest when it arrives.
"""
import asyncio
import logging
from typing import Dict, Iterable, Optional, Set

from units_analytics.clients.source_interface import AnalyticsSource
from units_analytics.config import get_settings
from units_analytics.models import FetchFamily, FetchState, QueryParams

logger = logging.getLogger(__name__)


class AggregationFetcher:
    """Debounced, generation-guarded fan-out over the statistics endpoints."""

    def __init__(
        self,
        source: AnalyticsSource,
        debounce_seconds: Optional[float] = None,
        families: Iterable[FetchFamily] = tuple(FetchFamily),
        initial_params: Optional[QueryParams] = None,
    ):
        self.source = source
        if debounce_seconds is None:
            debounce_seconds = get_settings().refetch_debounce_seconds
        self.debounce_seconds = debounce_seconds
        self.families = tuple(families)
        self._states: Dict[FetchFamily, FetchState] = {f: FetchState(family=f) for f in self.families}
        self._generation = 0
        self._params: Optional[QueryParams] = initial_params
        self._cycles_started = 0
        self._pending: Optional[asyncio.Task] = None
        self._cycles: Set[asyncio.Task] = set()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def params(self) -> Optional[QueryParams]:
        return self._params

    @property
    def states(self) -> Dict[FetchFamily, FetchState]:
        return dict(self._states)

    def state(self, family: FetchFamily) -> FetchState:
        return self._states[family]

    @property
    def has_started(self) -> bool:
        """True once any fetch cycle has been issued."""
        return self._cycles_started > 0

    @property
    def loading(self) -> bool:
        return any(s.loading for s in self._states.values())

    def schedule(self, params: QueryParams) -> bool:
        """
        Queue a debounced cycle for `params`.

        Unchanged params are ignored. A call landing inside the quiet period of
        an earlier one replaces it, so only the final params are fetched.
        Returns True when a cycle was queued.
        """
        if params == self._params:
            return False
        self._params = params
        self._cancel_pending()
        self._generation += 1
        self._pending = asyncio.get_running_loop().create_task(
            self._debounced_cycle(self._generation, params)
        )
        return True

    async def refresh(self, params: Optional[QueryParams] = None) -> None:
        """Run a cycle now, bypassing the debounce, and wait for it."""
        if params is not None:
            self._params = params
        if self._params is None:
            self._params = QueryParams()
        self._cancel_pending()
        self._generation += 1
        await self._start_cycle(self._generation, self._params)

    async def wait_idle(self) -> None:
        """Wait until no refetch is pending and no cycle is in flight."""
        while True:
            tasks = [t for t in (self._pending, *self._cycles) if t is not None and not t.done()]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)

    async def close(self) -> None:
        self._cancel_pending()
        for task in list(self._cycles):
            task.cancel()
        await self.wait_idle()

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
            logger.debug(f"[FETCHER] Pending refetch for generation {self._generation} superseded")
        self._pending = None

    async def _debounced_cycle(self, generation: int, params: QueryParams) -> None:
        await asyncio.sleep(self.debounce_seconds)
        if generation != self._generation:
            return
        # Not awaited: superseding the timer must not cancel an issued cycle
        self._start_cycle(generation, params)

    def _start_cycle(self, generation: int, params: QueryParams) -> asyncio.Task:
        logger.info(f"[FETCHER] Cycle {generation}: fetching {len(self.families)} families for {params.to_query()}")
        self._cycles_started += 1
        for family in self.families:
            self._states[family] = self._states[family].model_copy(update={"loading": True})
        task = asyncio.get_running_loop().create_task(self._run_cycle(generation, params))
        self._cycles.add(task)
        task.add_done_callback(self._cycles.discard)
        return task

    async def _run_cycle(self, generation: int, params: QueryParams) -> None:
        await asyncio.gather(*(self._fetch_family(f, generation, params) for f in self.families))

    async def _fetch_family(self, family: FetchFamily, generation: int, params: QueryParams) -> None:
        try:
            data = await self.source.fetch(family, params)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if self._is_stale(family, generation):
                return
            logger.warning(f"[FETCHER] {family.value} failed for generation {generation}: {e!r}")
            self._states[family] = FetchState(
                family=family,
                loading=False,
                error=str(e) or type(e).__name__,
                generation=generation,
            )
            return

        if self._is_stale(family, generation):
            return
        self._states[family] = FetchState(family=family, data=data, loading=False, generation=generation)

    def _is_stale(self, family: FetchFamily, generation: int) -> bool:
        if generation == self._generation:
            return False
        logger.debug(
            f"[FETCHER] Discarding {family.value} response from generation {generation} "
            f"(current {self._generation})"
        )
        return True
