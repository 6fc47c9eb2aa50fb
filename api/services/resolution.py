"""Shared resolution engine for the HTTP layer."""
from __future__ import annotations

import logging
from threading import Lock

from catastro.client import CatastroClient
from catastro.resolver import ResolutionCoordinator

LOG = logging.getLogger(__name__)
_COORDINATOR: ResolutionCoordinator | None = None
_LOCK = Lock()


def get_coordinator() -> ResolutionCoordinator:
    """Return the process-wide coordinator, building it on first use."""
    global _COORDINATOR
    with _LOCK:
        if _COORDINATOR is None:
            client = CatastroClient()
            LOG.info("Creating resolution engine against %s", client.base_url)
            _COORDINATOR = ResolutionCoordinator(client)
        return _COORDINATOR


def describe_upstream() -> dict[str, object]:
    client = CatastroClient()
    return {"base_url": client.base_url, "timeout_seconds": client.timeout}
