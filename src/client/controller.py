"""
Client Data Controller for the globe view.

Owns the marker loading lifecycle::

    IDLE -> LOADING -> SUCCESS
                    -> ERROR
    SUCCESS/ERROR --refetch--> LOADING

Each load is tagged with a monotonically increasing sequence number. Only the
most recent load may commit its outcome, so a slow earlier request that
resolves late can never overwrite a newer state.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from src.client.arcs import Arc, build_arcs
from src.client.errors import DomainFailure, MarkerPipelineError, ParseFailure
from src.client.sources import MarkerSource
from src.core.aggregator import calculate_statistics
from src.core.store import Marker, Statistics

logger = logging.getLogger(__name__)

DEFAULT_DOMAIN_ERROR = "Error loading markers"

Listener = Callable[["MarkersState"], None]


class LoadState(str, Enum):
    """Lifecycle of a marker load."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class MarkersState:
    """
    Immutable view of the controller at one point in time.

    ``error`` is only ever set in the ERROR state. Data from the last
    successful load is kept while a new load is in flight and after a
    failed one.
    """

    status: LoadState = LoadState.IDLE
    markers: Tuple[Marker, ...] = ()
    arcs: Tuple[Arc, ...] = ()
    statistics: Optional[Statistics] = None
    error: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.status is LoadState.LOADING


def parse_envelope(payload: Any) -> Tuple[Tuple[Marker, ...], Statistics]:
    """
    Interpret a marker envelope.

    Parameters
    ----------
    payload : Any
        Decoded JSON body

    Returns
    -------
    tuple
        ``(markers, statistics)``; statistics are calculated from the
        markers when the envelope carries none

    Raises
    ------
    DomainFailure
        If the envelope reports ``success: false``
    ParseFailure
        If the envelope is not shaped as expected
    """
    if not isinstance(payload, dict):
        raise ParseFailure("Response is not a JSON object")

    if not payload.get("success"):
        raise DomainFailure(payload.get("message") or DEFAULT_DOMAIN_ERROR)

    data = payload.get("data")
    if not isinstance(data, dict) or not isinstance(data.get("markers"), list):
        raise ParseFailure("Response has no data.markers list")

    try:
        markers = tuple(Marker.from_dict(m) for m in data["markers"])
        raw_statistics = data.get("statistics")
        if isinstance(raw_statistics, dict):
            statistics = Statistics.from_dict(raw_statistics)
        else:
            statistics = calculate_statistics(markers)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ParseFailure(f"Malformed marker data: {e}") from e

    return markers, statistics


class MarkerDataController:
    """
    Load markers from a source and expose markers, arcs and statistics.

    Parameters
    ----------
    source : MarkerSource
        Where to load the marker envelope from (API or static file)

    Examples
    --------
    >>> async with MarkerDataController(FileMarkerSource(path)) as controller:
    ...     controller.arcs
    """

    def __init__(self, source: MarkerSource):
        self.source = source
        self._state = MarkersState()
        self._sequence = 0
        self._listeners: List[Listener] = []

    async def __aenter__(self) -> "MarkerDataController":
        await self.mount()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.unmount()

    @property
    def state(self) -> MarkersState:
        return self._state

    @property
    def markers(self) -> Tuple[Marker, ...]:
        return self._state.markers

    @property
    def arcs(self) -> Tuple[Arc, ...]:
        return self._state.arcs

    @property
    def statistics(self) -> Optional[Statistics]:
        return self._state.statistics

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    @property
    def loading(self) -> bool:
        return self._state.loading

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback for every committed state transition.

        Returns
        -------
        Callable
            Call it to unsubscribe
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def mount(self) -> MarkersState:
        """Start the first load."""
        return await self.refetch()

    async def unmount(self) -> None:
        """Drop all state, ignore in-flight loads and release the source."""
        self._sequence += 1
        self._state = MarkersState()
        self._listeners.clear()
        await self.source.aclose()

    async def refetch(self) -> MarkersState:
        """
        Load markers again.

        Enters LOADING immediately, then commits SUCCESS or ERROR unless a
        newer load was started in the meantime, in which case this result
        is discarded.

        Returns
        -------
        MarkersState
            The controller state after this call finished
        """
        self._sequence += 1
        sequence = self._sequence
        self._commit(replace(self._state, status=LoadState.LOADING, error=None))
        logger.info(f"Loading markers (request #{sequence})")

        try:
            payload = await self.source.fetch()
            markers, statistics = parse_envelope(payload)
            arcs = build_arcs(markers)
        except MarkerPipelineError as e:
            return self._fail(sequence, str(e) or DEFAULT_DOMAIN_ERROR, e)
        except Exception as e:
            return self._fail(sequence, f"Unknown error: {e}", e)

        if sequence != self._sequence:
            logger.info(f"Discarding stale marker load #{sequence}")
            return self._state

        self._commit(
            MarkersState(
                status=LoadState.SUCCESS,
                markers=markers,
                arcs=arcs,
                statistics=statistics,
            )
        )
        logger.info(
            f"Loaded {len(markers)} markers and {len(arcs)} arcs (request #{sequence})"
        )
        return self._state

    def _fail(self, sequence: int, message: str, cause: Exception) -> MarkersState:
        if sequence != self._sequence:
            logger.info(f"Discarding stale marker failure #{sequence}: {message}")
            return self._state

        logger.error(f"Error loading markers: {message}", exc_info=cause)
        self._commit(replace(self._state, status=LoadState.ERROR, error=message))
        return self._state

    def _commit(self, state: MarkersState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"Marker state listener failed: {e}", exc_info=True)

    def snapshot(self) -> Dict[str, Any]:
        """JSON-serializable form of the current state."""
        state = self._state
        return {
            "status": state.status.value,
            "loading": state.loading,
            "error": state.error,
            "markers": [m.to_dict() for m in state.markers],
            "arcs": [a.to_dict() for a in state.arcs],
            "statistics": state.statistics.to_dict() if state.statistics else None,
        }
