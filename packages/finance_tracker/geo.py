"""Deterministic spatial deduplication of map markers.

Transactions recorded at the exact same coordinate would render as a single
pin. :func:`offset` separates them along a golden-angle spiral: within each
group of identical ``(lat, lng)`` values the first record keeps its position
and occurrence ``k`` is moved ``k * UNIT_OFFSET`` degrees away at a bearing of
``k * 137.5`` degrees (mod 360).

Markers from different groups never share a coordinate either: a marker whose
position is already taken by an earlier marker moves on to the next spiral step
until it lands on a free one. Such collisions need a displaced marker to hit
another group's exact float coordinate, so in practice every marker sits at its
own occurrence step.

Output is order-sensitive by contract: occurrence indices follow input order
and the same input in the same order always yields the same markers.
"""

from __future__ import annotations

import math

from .filters import is_geo_tagged
from .logging_setup import get_logger
from .models import MapView, OffsetMarker, Transactions

UNIT_OFFSET: float = 0.0002
"""Radius step per duplicate, in decimal degrees (about 20 meters)."""

GOLDEN_ANGLE_DEG: float = 137.5

DEFAULT_CENTER: tuple[float, float] = (20.5937, 78.9629)
FOCUSED_ZOOM: int = 12
OVERVIEW_ZOOM: int = 5

_logger = get_logger("finance_tracker.geo")


def spiral_offset(occurrence: int) -> tuple[float, float]:
    """Return ``(lat_offset, lng_offset)`` for the given occurrence index.

    Occurrence ``0`` is the group anchor and is never displaced.
    """

    if occurrence <= 0:
        return 0.0, 0.0
    radius = occurrence * UNIT_OFFSET
    angle = math.radians((occurrence * GOLDEN_ANGLE_DEG) % 360.0)
    return math.cos(angle) * radius, math.sin(angle) * radius


def offset(transactions: Transactions) -> list[OffsetMarker]:
    """Build render-ready markers for every geo-tagged transaction.

    Records are grouped by their exact coordinate (no rounding or tolerance).
    The occurrence counter and the set of taken coordinates are local to this
    call.
    """

    seen: dict[tuple[float, float], int] = {}
    taken: set[tuple[float, float]] = set()
    markers: list[OffsetMarker] = []
    for tx in transactions:
        if not is_geo_tagged(tx) or tx.location is None:
            continue
        key = (tx.location.lat, tx.location.lng)
        occurrence = seen.get(key, 0)
        seen[key] = occurrence + 1

        step = occurrence
        while True:
            d_lat, d_lng = spiral_offset(step)
            position = (tx.location.lat + d_lat, tx.location.lng + d_lng)
            if position not in taken:
                break
            step += 1
        taken.add(position)
        markers.append(
            OffsetMarker(
                id=tx.id,
                lat=position[0],
                lng=position[1],
                original_lat=tx.location.lat,
                original_lng=tx.location.lng,
                occurrence=occurrence,
                category=tx.category,
                description=tx.description,
                amount=tx.amount,
                type=tx.type,
            )
        )

    shifted = sum(1 for m in markers if (m.lat, m.lng) != (m.original_lat, m.original_lng))
    if shifted:
        _logger.debug(
            "offset: %d marker(s) in %d coordinate group(s), %d displaced",
            len(markers),
            len(seen),
            shifted,
        )
    return markers


def map_view(transactions: Transactions) -> MapView:
    """Return markers plus the center/zoom policy for a map view.

    The center is the first geo-tagged record's original coordinate; without
    one the view falls back to :data:`DEFAULT_CENTER` at an overview zoom.
    """

    markers = tuple(offset(transactions))
    if markers:
        first = markers[0]
        return MapView(
            markers=markers,
            center=(first.original_lat, first.original_lng),
            zoom_hint=FOCUSED_ZOOM,
            has_center=True,
        )
    return MapView(
        markers=markers, center=DEFAULT_CENTER, zoom_hint=OVERVIEW_ZOOM, has_center=False
    )


__all__ = [
    "DEFAULT_CENTER",
    "FOCUSED_ZOOM",
    "GOLDEN_ANGLE_DEG",
    "OVERVIEW_ZOOM",
    "UNIT_OFFSET",
    "map_view",
    "offset",
    "spiral_offset",
]
