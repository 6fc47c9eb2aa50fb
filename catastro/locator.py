"""Nearest-parcel lookup at a single projected point."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping

from catastro.client import (
    DISTANCE_ENVELOPES,
    CatastroClient,
    describe_upstream_message,
    raise_for_functional_error,
    unwrap_envelope,
)
from catastro.errors import ParcelNotFound, UpstreamFunctionalError, UpstreamTransportError
from catastro.extract import extract_float, extract_list, extract_text
from catastro.models import (
    Empty,
    Found,
    LocateResult,
    NotFound,
    ParcelCandidate,
    ProjectedPoint,
    TransportError,
    UpstreamError,
    make_reference,
)

LOG = logging.getLogger(__name__)


def flatten_parcel_records(result: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Every ``lpcd`` record across every ``coordd`` sibling, in upstream order."""
    records: List[Dict[str, Any]] = []
    for group in extract_list(result, "coordenadas_distancias.coordd"):
        for record in extract_list(group, "lpcd"):
            if isinstance(record, dict):
                records.append(record)
    return records


def to_candidates(records: Iterable[Mapping[str, Any]]) -> List[ParcelCandidate]:
    candidates: List[ParcelCandidate] = []
    for record in records:
        reference = make_reference(extract_text(record, "pc.pc1"), extract_text(record, "pc.pc2"))
        if reference is None:
            LOG.debug("Skipping candidate without full reference: %s", record)
            continue
        candidates.append(
            ParcelCandidate(
                reference=reference,
                location_label=extract_text(record, "ldt"),
                distance_meters=extract_float(record, "dis"),
            )
        )
    return candidates


class NearestParcelLocator:
    """Issues one distance-search query and classifies the answer.

    Candidates keep the order the service returns them in (nearest first).
    No retries happen here.
    """

    def __init__(self, client: CatastroClient) -> None:
        self.client = client

    def locate(self, point: ProjectedPoint) -> LocateResult:
        try:
            payload = self.client.distance_search(point.x, point.y, point.reference_system_id)
        except ParcelNotFound:
            return NotFound()
        except UpstreamTransportError as exc:
            return TransportError(str(exc))

        result = unwrap_envelope(payload, DISTANCE_ENVELOPES)
        if result is None:
            message = describe_upstream_message(payload)
            if message:
                return UpstreamError(None, message)
            LOG.warning("Distance search answer without result envelope at %.2f,%.2f", point.x, point.y)
            return Empty("response carried no result envelope")

        try:
            raise_for_functional_error(result)
        except UpstreamFunctionalError as exc:
            return UpstreamError(exc.code, exc.description)

        candidates = to_candidates(flatten_parcel_records(result))
        if not candidates:
            return Empty()
        return Found(tuple(candidates))
