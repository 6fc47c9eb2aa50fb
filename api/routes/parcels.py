from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from api import models
from api.services.resolution import get_coordinator
from catastro.errors import InputValidationError, InternalFault
from catastro.models import ProjectedPoint
from catastro.resolver import ResolutionCoordinator

LOG = logging.getLogger(__name__)
router = APIRouter()


@router.post("/resolve", response_model=models.ResolutionResponse)
def resolve_parcel(
    payload: models.ResolveRequest,
    coordinator: ResolutionCoordinator = Depends(get_coordinator),
) -> models.ResolutionResponse:
    """Resolve a projected point to the best matching cadastral parcel.

    Partial and empty results still answer 200 with an explanatory message.
    """
    try:
        point = ProjectedPoint(payload.x, payload.y, payload.referenceSystemId)
    except InputValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    try:
        outcome = coordinator.resolve(point)
    except InternalFault as exc:
        LOG.exception("Parcel resolution failed for %s,%s: %s", payload.x, payload.y, exc)
        raise HTTPException(status_code=500, detail="Internal error while resolving the parcel.") from exc
    return models.ResolutionResponse.model_validate(outcome.to_dict())
