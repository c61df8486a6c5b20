"""
Marker Query Engine.

Pure functions that filter the marker set and recompute statistics over the
filtered result. The aggregator:
1. Filters markers by region substring (case-insensitive) and exact type
2. Truncates to the first ``limit`` markers when a positive limit is given
3. Recalculates statistics over the final subset

Nothing here mutates the dataset or raises for string/number inputs; a
malformed limit is simply ignored.
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple, Union

from src.core.store import Marker, Statistics

logger = logging.getLogger(__name__)

# Leading integer, the way query strings such as "10", " 3", "2.9" or "4abc"
# are read by the browser-side clients of this API.
_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")


@dataclass(frozen=True)
class QueryResult:
    """
    Filtered markers together with statistics computed from them.

    Parameters
    ----------
    markers : Tuple[Marker, ...]
        Markers that passed all filters, in original order
    statistics : Statistics
        Aggregates over exactly ``markers``
    """

    markers: Tuple[Marker, ...]
    statistics: Statistics


def parse_limit(limit: Union[str, int, float, None]) -> Optional[int]:
    """
    Parse a limit parameter into a positive integer.

    Parameters
    ----------
    limit : str, int, float or None
        Raw limit as received from the wire

    Returns
    -------
    Optional[int]
        The limit, or None when absent, non-numeric or not positive
    """
    if limit is None or isinstance(limit, bool):
        return None

    if isinstance(limit, (int, float)):
        if limit != limit or limit in (float("inf"), float("-inf")):
            return None
        value = int(limit)
    else:
        match = _LEADING_INT.match(str(limit))
        if not match:
            return None
        value = int(match.group(1))

    return value if value > 0 else None


def calculate_statistics(markers: Iterable[Marker]) -> Statistics:
    """Calculate statistics over exactly the given markers."""
    markers = list(markers)
    regions: Counter = Counter()
    types: Counter = Counter()
    total_connections = 0

    for marker in markers:
        regions[marker.region] += 1
        types[marker.type] += 1
        total_connections += len(marker.connections)

    return Statistics(
        total_markers=len(markers),
        total_connections=total_connections,
        regions=dict(regions),
        types=dict(types),
    )


def filter_markers(
    markers: Sequence[Marker],
    region: Optional[str] = None,
    type: Optional[str] = None,
) -> Tuple[Marker, ...]:
    """
    Apply the region and type filters, preserving order.

    Parameters
    ----------
    markers : Sequence[Marker]
        Markers to filter
    region : Optional[str]
        Case-insensitive substring of the marker region (empty = no filter)
    type : Optional[str]
        Exact marker type (empty = no filter)

    Returns
    -------
    Tuple[Marker, ...]
        Markers matching both filters
    """
    filtered: Iterable[Marker] = markers

    if region:
        needle = str(region).lower()
        filtered = [m for m in filtered if needle in m.region.lower()]

    if type:
        filtered = [m for m in filtered if m.type == type]

    return tuple(filtered)


def query(
    markers: Sequence[Marker],
    region: Optional[str] = None,
    type: Optional[str] = None,
    limit: Union[str, int, None] = None,
) -> QueryResult:
    """
    Filter markers and recompute statistics over the result.

    Filters compose as logical AND. The limit is applied after filtering and
    statistics are always computed from the post-limit set.

    Parameters
    ----------
    markers : Sequence[Marker]
        Full marker set (never modified)
    region : Optional[str]
        Region substring filter
    type : Optional[str]
        Marker type filter
    limit : str, int or None
        Maximum number of markers to keep; ignored unless it parses to a
        positive integer

    Returns
    -------
    QueryResult
        Filtered markers and their statistics
    """
    filtered = filter_markers(markers, region=region, type=type)

    max_markers = parse_limit(limit)
    if max_markers is not None:
        filtered = filtered[:max_markers]

    logger.debug(
        f"Query region={region!r} type={type!r} limit={limit!r}: "
        f"{len(filtered)}/{len(markers)} markers"
    )

    return QueryResult(markers=filtered, statistics=calculate_statistics(filtered))
