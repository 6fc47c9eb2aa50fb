"""Top-level entry point: point in, best-effort parcel outcome out."""
from __future__ import annotations

import logging
from typing import List, Optional

from catastro.client import CatastroClient
from catastro.details import ParcelDetailFetcher
from catastro.errors import InternalFault
from catastro.locator import NearestParcelLocator
from catastro.models import (
    Detailed,
    DetailedEmpty,
    Exhausted,
    Found,
    ParcelCandidate,
    ProjectedPoint,
    ResolutionOutcome,
    TransportError,
    UpstreamError,
)
from catastro.ring_search import RingSearchExpander

LOG = logging.getLogger(__name__)

NOTE_SEPARATOR = "; "


class ResolutionCoordinator:
    """Exact point first, ring search as fallback, then detail for whatever was found.

    ``resolve`` always returns a :class:`ResolutionOutcome`; upstream trouble
    ends up as diagnostic text. Only :class:`InternalFault` is raised.
    """

    def __init__(
        self,
        client: Optional[CatastroClient] = None,
        *,
        locator=None,
        expander=None,
        fetcher=None,
    ) -> None:
        client = client or CatastroClient()
        self.locator = locator or NearestParcelLocator(client)
        self.expander = expander or RingSearchExpander(self.locator)
        self.fetcher = fetcher or ParcelDetailFetcher(client)

    def resolve(self, point: ProjectedPoint) -> ResolutionOutcome:
        try:
            return self._resolve(point)
        except InternalFault:
            raise
        except Exception as exc:  # noqa: BLE001
            LOG.exception("Resolution crashed for %s", point)
            raise InternalFault(
                f"Unexpected failure while resolving point: {exc}",
                {"x": point.x, "y": point.y, "srs": point.reference_system_id},
            ) from exc

    def _resolve(self, point: ProjectedPoint) -> ResolutionOutcome:
        notes: List[str] = []
        LOG.info("Resolving parcel at %.2f,%.2f (%s)", point.x, point.y, point.reference_system_id)

        exact = self.locator.locate(point)
        if isinstance(exact, Found):
            candidate = exact.first
        else:
            if isinstance(exact, UpstreamError):
                notes.append(f"exact-point lookup failed: {exact.describe()}")
            elif isinstance(exact, TransportError):
                notes.append(f"exact-point lookup unavailable: {exact.describe()}")
            ring = self.expander.expand(point)
            if isinstance(ring, Exhausted):
                notes.append(_exhausted_note(ring))
                return ResolutionOutcome(diagnostic=NOTE_SEPARATOR.join(notes))
            candidate = ring.candidate
            notes.append(f"resolved via expanded search, radius {ring.radius_meters:g}m")

        return self._with_detail(candidate, notes)

    def _with_detail(self, candidate: ParcelCandidate, notes: List[str]) -> ResolutionOutcome:
        result = self.fetcher.fetch_detail(candidate.reference, candidate.location_label)
        detail = None
        if isinstance(result, Detailed):
            detail = result.detail
            notes.extend(result.notes)
        elif isinstance(result, DetailedEmpty):
            notes.extend(result.notes)
            notes.append("detail fetch returned no descriptive fields")
        elif isinstance(result, UpstreamError):
            notes.append(f"detail fetch failed for {candidate.reference}: {result.describe()}")
        elif isinstance(result, TransportError):
            notes.append(f"detail fetch unavailable for {candidate.reference}: {result.describe()}")

        return ResolutionOutcome(
            reference=candidate.reference,
            location_label=candidate.location_label,
            distance_meters=candidate.distance_meters,
            detail=detail,
            diagnostic=NOTE_SEPARATOR.join(notes) or None,
        )


def _exhausted_note(ring: Exhausted) -> str:
    note = (
        f"no parcel found at the exact point or within {ring.min_radius_meters:g}-"
        f"{ring.max_radius_meters:g}m of it ({ring.probes_tried} expanded probes"
    )
    if ring.failures:
        note += f", {ring.failures} failed upstream"
    return note + ")"
