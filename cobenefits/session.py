"""
Dashboard session (single user, single dataset)
===============================================

Owns the current ``DatasetIndex`` and ``SelectionState`` and decides when the
view is recomputed:

- ``reload()`` fetches and indexes the dataset, swaps the new index in with a
  single assignment, then recomputes exactly once.
- While a load is in flight ``loading`` is True and recompute requests are
  rejected; selection changes are still recorded and picked up by the
  recompute that follows the load.
- Selection changes are coalesced: each one restarts a short timer and only
  the last one in the window triggers a recompute.

Everything runs on one asyncio event loop; there are no threads or locks
besides the worker thread used by the transport for blocking I/O.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from cobenefits.config import DATA_SOURCE, DEBOUNCE_MS
from cobenefits.data import DatasetIndex, index_from_text
from cobenefits.errors import CoBenefitsError, DatasetLoading
from cobenefits.filters import SelectionState
from cobenefits.metrics_charts import ChartType, compute_charts
from cobenefits.metrics_overview import compute_overview
from cobenefits.transport import Source, load_text

logger = logging.getLogger(__name__)

Loader = Callable[[Source], Awaitable[str]]
ViewCallback = Callable[[Dict[str, Any]], None]


class Debouncer:
    """Run ``callback`` once, ``delay`` seconds after the last ``schedule()``."""

    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self._callback = callback
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self) -> None:
        loop = asyncio.get_running_loop()
        self.cancel()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()


class DashboardSession:
    def __init__(
        self,
        source: Source = DATA_SOURCE,
        *,
        loader: Loader = load_text,
        debounce_ms: int = DEBOUNCE_MS,
        on_recompute: Optional[ViewCallback] = None,
        selection: Optional[SelectionState] = None,
        chart_type: ChartType = "bar",
    ) -> None:
        self.source = source
        self._loader = loader
        self._on_recompute = on_recompute
        self._debouncer = Debouncer(debounce_ms / 1000.0, self._debounced_recompute)

        self.index: Optional[DatasetIndex] = None
        self.loading = False
        self.selection = selection or SelectionState()
        self.chart_type: ChartType = chart_type
        self.view: Optional[Dict[str, Any]] = None
        self.last_error: Optional[str] = None
        self.recompute_count = 0

    # ---------------- Loading ----------------
    async def reload(self) -> DatasetIndex:
        """Fetch, parse and index the source, then recompute once.

        On failure the previous index (if any) stays in place and the error
        propagates to the caller.
        """
        if self.loading:
            raise DatasetLoading("A dataset load is already in progress.")
        self.loading = True
        self._debouncer.cancel()
        logger.info("Reloading dataset from %s", self.source)
        try:
            text = await self._loader(self.source)
            index = index_from_text(text)
        except CoBenefitsError as exc:
            self.last_error = str(exc)
            logger.exception("Dataset load failed")
            raise
        finally:
            self.loading = False

        self.index = index
        self.last_error = None
        logger.info("Dataset loaded: %d rows", index.meta.rows)
        self.recompute()
        return index

    def set_index(self, index: DatasetIndex) -> None:
        """Install an already built index and recompute."""
        self._debouncer.cancel()
        self.index = index
        self.last_error = None
        self.recompute()

    def require_index(self) -> DatasetIndex:
        if self.loading:
            raise DatasetLoading("Dataset is still loading.")
        if self.index is None:
            raise DatasetLoading("No dataset has been loaded yet.")
        return self.index

    # ---------------- Selection ----------------
    def update_selection(self, selection: SelectionState, chart_type: Optional[ChartType] = None) -> bool:
        """Record the new selection and schedule a coalesced recompute.

        Returns False when the request was rejected because no usable index
        is available yet.
        """
        self.selection = selection
        if chart_type is not None:
            self.chart_type = chart_type
        return self.request_recompute()

    def request_recompute(self) -> bool:
        if self.loading or self.index is None:
            logger.warning("Recompute rejected: dataset %s", "loading" if self.loading else "not loaded")
            return False
        self._debouncer.schedule()
        return True

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def flush(self) -> Dict[str, Any]:
        """Run any pending recompute now."""
        self._debouncer.cancel()
        return self.recompute()

    # ---------------- Recompute ----------------
    def _debounced_recompute(self) -> None:
        if self.loading or self.index is None:
            return
        # runs from the event loop, there is no caller to hand the error to
        try:
            self.recompute()
        except Exception as exc:
            self.last_error = str(exc)
            logger.exception("Debounced recompute failed")

    def recompute(self) -> Dict[str, Any]:
        index = self.require_index()
        selection = self.selection
        view = {
            "overview": compute_overview(selection, index),
            "charts": compute_charts(selection, index, chart_type=self.chart_type),
        }
        self.view = view
        self.recompute_count += 1
        if self._on_recompute is not None:
            self._on_recompute(view)
        return view
