"""Expanding ring search around a point the registry could not resolve."""
from __future__ import annotations

import logging
import math
from typing import Iterator, Sequence

from catastro.models import (
    Exhausted,
    Found,
    ProjectedPoint,
    RingHit,
    RingResult,
    SearchProbe,
    TransportError,
    UpstreamError,
)

LOG = logging.getLogger(__name__)

RING_RADII_METERS = (5.0, 10.0, 25.0, 50.0, 100.0)
RING_ANGLES_RADIANS = tuple(math.radians(degrees) for degrees in range(0, 360, 45))
PROBE_BUDGET = len(RING_RADII_METERS) * len(RING_ANGLES_RADIANS)


def iter_probes(
    origin: ProjectedPoint,
    radii: Sequence[float] = RING_RADII_METERS,
    angles: Sequence[float] = RING_ANGLES_RADIANS,
) -> Iterator[SearchProbe]:
    """Yield probes radius-ascending, then by angle; call again to restart."""
    for radius in radii:
        for angle in angles:
            point = origin.offset(radius * math.cos(angle), radius * math.sin(angle))
            yield SearchProbe(radius_meters=radius, angle_radians=angle, point=point)


class RingSearchExpander:
    """Probes the fixed lattice sequentially and stops at the first hit.

    Radii are tried in ascending order, so the first hit is also the one at the
    smallest radius. A failing probe is a miss, never a reason to abort.
    """

    def __init__(self, locator) -> None:
        self.locator = locator

    def expand(self, origin: ProjectedPoint) -> RingResult:
        LOG.info("Starting ring search around %.2f,%.2f", origin.x, origin.y)
        tried = 0
        failures = 0
        for probe in iter_probes(origin):
            tried += 1
            result = self.locator.locate(probe.point)
            if isinstance(result, Found):
                LOG.info(
                    "Ring search hit %s at radius %gm (%.0f deg)",
                    result.first.reference,
                    probe.radius_meters,
                    probe.angle_degrees,
                )
                return RingHit(candidate=result.first, radius_meters=probe.radius_meters, probe=probe)
            if isinstance(result, (UpstreamError, TransportError)):
                failures += 1
                LOG.warning(
                    "Ring probe %gm/%.0f deg at %.2f,%.2f failed: %s",
                    probe.radius_meters,
                    probe.angle_degrees,
                    probe.point.x,
                    probe.point.y,
                    result.describe(),
                )
            else:
                LOG.debug("Ring probe %gm/%.0f deg empty", probe.radius_meters, probe.angle_degrees)

        LOG.info("Ring search exhausted around %.2f,%.2f after %d probes", origin.x, origin.y, tried)
        return Exhausted(
            min_radius_meters=RING_RADII_METERS[0],
            max_radius_meters=RING_RADII_METERS[-1],
            probes_tried=tried,
            failures=failures,
        )
