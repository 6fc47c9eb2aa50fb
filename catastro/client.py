"""HTTP access to the two read operations of the cadastral registry web service."""
from __future__ import annotations

import logging
import os
from typing import Any, Dict, Iterable, Mapping, Optional, Union

import requests

from catastro.errors import ParcelNotFound, UpstreamFunctionalError, UpstreamTransportError
from catastro.extract import extract, extract_int, extract_text

LOG = logging.getLogger(__name__)

CATASTRO_BASE_URL = os.getenv(
    "CATASTRO_BASE_URL", "https://ovc.catastro.meh.es/OVCServWeb/OVCWcfCallejero"
).rstrip("/")
DISTANCE_ENDPOINT = "COVCCoordenadas.svc/json/Consulta_RCCOOR_Distancia"
DETAIL_ENDPOINT = "COVCCallejero.svc/json/Consulta_DNPRC"
REQUEST_TIMEOUT = float(os.getenv("CATASTRO_TIMEOUT", "10"))
BASE_HEADERS = {
    "Accept": "application/json",
    "User-Agent": os.getenv("CATASTRO_USER_AGENT", "catastro-resolver/0.1"),
}

# The service changed the casing of its envelopes at least once.
DISTANCE_ENVELOPES = ("Consulta_RCCOOR_DistanciaResult", "consulta_rccoor_distanciaResult")
DETAIL_ENVELOPES = ("Consulta_DNPRCResult", "consulta_dnprcResult")


class CatastroClient:
    """Thin wrapper over ``requests`` for the distance-search and detail operations.

    ``session`` may be any object with a ``requests``-style ``get``; by default
    the module-level ``requests.get`` is used so concurrent callers share no
    connection state.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        session: Any = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = (base_url or CATASTRO_BASE_URL).rstrip("/")
        self.timeout = REQUEST_TIMEOUT if timeout is None else timeout
        self._http = session if session is not None else requests

    def distance_search(self, x: float, y: float, srs: str) -> Dict[str, Any]:
        params = {"CoorX": f"{x:.2f}", "CoorY": f"{y:.2f}", "SRS": srs}
        return self._get(DISTANCE_ENDPOINT, params)

    def parcel_detail(self, reference: str) -> Dict[str, Any]:
        return self._get(DETAIL_ENDPOINT, {"RefCat": reference})

    def _get(self, endpoint: str, params: Mapping[str, Union[str, float]]) -> Dict[str, Any]:
        url = f"{self.base_url}/{endpoint}"
        LOG.debug("Catastro request %s params=%s", url, dict(params))
        try:
            response = self._http.get(url, params=dict(params), headers=BASE_HEADERS, timeout=self.timeout)
        except requests.RequestException as exc:
            raise UpstreamTransportError(f"Request to {endpoint} failed: {exc}", {"url": url}) from exc

        if response.status_code == 404:
            raise ParcelNotFound(f"{endpoint} returned 404.", {"url": url, "params": dict(params)})
        if not 200 <= response.status_code < 300:
            raise UpstreamTransportError(
                f"{endpoint} answered with HTTP {response.status_code}.",
                {"url": url, "status": response.status_code},
            )
        try:
            payload = response.json()
        except ValueError as exc:
            body = (getattr(response, "text", "") or "")[:200]
            raise UpstreamTransportError(
                f"{endpoint} did not return valid JSON.", {"url": url, "body": body}
            ) from exc
        if not isinstance(payload, dict):
            raise UpstreamTransportError(f"{endpoint} returned a non-object JSON body.", {"url": url})
        return payload


def unwrap_envelope(payload: Mapping[str, Any], names: Iterable[str]) -> Optional[Dict[str, Any]]:
    """Return the result envelope under the first matching name, if any."""
    for name in names:
        value = payload.get(name)
        if isinstance(value, dict):
            return value
    return None


def describe_upstream_message(payload: Mapping[str, Any]) -> Optional[str]:
    """Human-readable text the service attaches to an answer, if any."""
    return extract_text(payload, "lerr.err.des", "mensaje", "control.des")


def raise_for_functional_error(result: Mapping[str, Any]) -> None:
    """Raise :class:`UpstreamFunctionalError` when the envelope carries a non-zero status."""
    raw_status = extract(result, "control.cuerr")
    if raw_status is None:
        return
    status = extract_int(result, "control.cuerr")
    if status == 0:
        return
    code = extract_int(result, "lerr.err.cod")
    if code is None:
        code = status
    description = describe_upstream_message(result) or "Unknown registry error"
    raise UpstreamFunctionalError(code, description, {"cuerr": raw_status})
