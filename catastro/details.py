"""Descriptive attributes for a resolved parcel reference.

The detail document has come in several shapes. Each known shape is a named
strategy that reads the whole document on its own; strategies are tried in
``DETAIL_STRATEGIES`` order and the first one producing any field wins, so
fields from two different shapes are never stitched together.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, List, Mapping, NamedTuple, Optional

from catastro.client import (
    DETAIL_ENVELOPES,
    CatastroClient,
    describe_upstream_message,
    raise_for_functional_error,
    unwrap_envelope,
)
from catastro.errors import ParcelNotFound, UpstreamFunctionalError, UpstreamTransportError
from catastro.extract import dig, extract, extract_int, extract_list, extract_text
from catastro.models import (
    DetailResult,
    Detailed,
    DetailedEmpty,
    ParcelDetail,
    TransportError,
    UpstreamError,
)

LOG = logging.getLogger(__name__)


def assemble_address(
    *,
    street_type: Optional[str] = None,
    street_name: Optional[str] = None,
    number: Optional[str] = None,
    secondary_number: Optional[str] = None,
    block: Optional[str] = None,
    stair: Optional[str] = None,
    floor: Optional[str] = None,
    door: Optional[str] = None,
    postal_code: Optional[str] = None,
    municipality: Optional[str] = None,
    province: Optional[str] = None,
) -> Optional[str]:
    """Join address fragments in fixed order, skipping the absent ones."""
    if secondary_number == "0":
        secondary_number = None
    parts = [
        street_type,
        street_name,
        f"Nº {number}" if number else None,
        f"Nº {secondary_number}" if secondary_number else None,
        f"Bl:{block}" if block else None,
        f"Es:{stair}" if stair else None,
        f"Pl:{floor}" if floor else None,
        f"Pt:{door}" if door else None,
        postal_code,
        municipality,
        f"({province})" if province else None,
    ]
    text = " ".join(part for part in parts if part).strip()
    return text or None


def _building_detail(building: Mapping[str, Any], constructions: Any = None) -> ParcelDetail:
    urban = dig(building, "dt.locs.lous.lourb")
    address = assemble_address(
        street_type=extract_text(urban, "dir.tv"),
        street_name=extract_text(urban, "dir.nv"),
        number=extract_text(urban, "dir.pnp"),
        secondary_number=extract_text(urban, "dir.snp"),
        block=extract_text(urban, "loint.bq"),
        stair=extract_text(urban, "loint.es"),
        floor=extract_text(urban, "loint.pt"),
        door=extract_text(urban, "loint.pu"),
        postal_code=extract_text(urban, "dp"),
        municipality=extract_text(building, "dt.nm"),
        province=extract_text(building, "dt.np"),
    )
    return ParcelDetail(
        full_address=address or extract_text(building, "ldt"),
        primary_use=extract_text(building, "debi.luso"),
        area_description=extract_text(building, "debi.sfc"),
        construction_age=extract_text(building, "debi.ant") or extract_text(constructions, "dfcons.ant"),
        assessed_value=extract_text(building, "debi.vcat", "debi.vc"),
    )


def rich_shape(result: Mapping[str, Any]) -> Optional[ParcelDetail]:
    """Current shape: a ``bico`` aggregate holding the building record ``bi``."""
    aggregate = extract(result, "bico")
    building = extract(aggregate, "bi")
    if not isinstance(building, Mapping):
        return None
    constructions = extract(aggregate, "lcons.cons", "lcons") or extract(result, "lcons.cons", "lcons")
    return _building_detail(building, constructions)


def flat_shape(result: Mapping[str, Any]) -> Optional[ParcelDetail]:
    """Older shape with shallow, spelled-out field names."""
    address = dig(result, "dt.loc.dir")
    detail = ParcelDetail(
        full_address=assemble_address(
            street_type=extract_text(address, "tv"),
            street_name=extract_text(address, "nv"),
            number=extract_text(address, "pnp"),
            secondary_number=extract_text(address, "snp"),
            block=extract_text(address, "bloque"),
            stair=extract_text(address, "escalera"),
            floor=extract_text(address, "planta"),
            door=extract_text(address, "puerta"),
            postal_code=extract_text(address, "dp"),
            municipality=extract_text(address, "nm"),
            province=extract_text(address, "np"),
        ),
        primary_use=extract_text(result, "usoPrincipal"),
        area_description=extract_text(result, "superficie"),
        construction_age=extract_text(result, "antiguedad", "lcons.dfcons.ant"),
        assessed_value=extract_text(result, "valorCatastral"),
    )
    return None if detail.is_empty() else detail


def listing_shape(result: Mapping[str, Any]) -> Optional[ParcelDetail]:
    """Multi-property answer; the first listed property is described."""
    entry = extract(result, "lrcdnp.rcdnp")
    if not isinstance(entry, Mapping):
        return None
    return _building_detail(entry)


class DetailStrategy(NamedTuple):
    name: str
    extract: Callable[[Mapping[str, Any]], Optional[ParcelDetail]]


DETAIL_STRATEGIES = (
    DetailStrategy("rich", rich_shape),
    DetailStrategy("flat", flat_shape),
    DetailStrategy("listing", listing_shape),
)


class ParcelDetailFetcher:
    def __init__(self, client: CatastroClient, strategies=DETAIL_STRATEGIES) -> None:
        self.client = client
        self.strategies = tuple(strategies)

    def fetch_detail(self, reference: str, location_label: Optional[str] = None) -> DetailResult:
        """Fetch and normalise the detail document for ``reference``.

        ``location_label`` (from the distance search) stands in for the address
        when the document carries no usable address fragments.
        """
        try:
            payload = self.client.parcel_detail(reference)
        except ParcelNotFound as exc:
            return UpstreamError(None, str(exc))
        except UpstreamTransportError as exc:
            return TransportError(str(exc))

        result = unwrap_envelope(payload, DETAIL_ENVELOPES)
        if result is None:
            message = describe_upstream_message(payload)
            if message:
                return UpstreamError(None, message)
            LOG.warning("Detail answer for %s carried no result envelope", reference)
            note = "detail response carried no result envelope" if payload else "empty detail response"
            return DetailedEmpty((note,))

        listing = extract_list(result, "lrcdnp.rcdnp")
        try:
            raise_for_functional_error(result)
        except UpstreamFunctionalError as exc:
            if not listing:
                return UpstreamError(exc.code, exc.description)
            LOG.info("Detail lookup for %s reported %s alongside a listing; continuing", reference, exc)

        notes: List[str] = []
        matches = max(extract_int(result, "control.cudnp") or 0, len(listing))
        if matches > 1:
            notes.append(f"detail lookup matched {matches} properties, showing the first")

        for strategy in self.strategies:
            detail = strategy.extract(result)
            if detail is None or detail.is_empty():
                continue
            LOG.debug("Detail for %s extracted with the %s shape", reference, strategy.name)
            if detail.full_address is None and location_label:
                detail = replace(detail, full_address=location_label)
            return Detailed(detail=detail, strategy=strategy.name, notes=tuple(notes))
        return DetailedEmpty(tuple(notes))
