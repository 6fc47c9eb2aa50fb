from __future__ import annotations

from fastapi import APIRouter, HTTPException

from api import models
from catastro.errors import InputValidationError
from catastro.models import ProjectedPoint
from catastro.ring_search import iter_probes

router = APIRouter()


@router.get("/probes", response_model=models.ProbePlan)
async def read_probe_plan(x: float, y: float, srs: str) -> models.ProbePlan:
    """Return the ordered ring-search lattice for a point without querying the registry."""
    try:
        origin = ProjectedPoint(x, y, srs)
    except InputValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    probes = [
        models.SearchProbeModel(
            radiusMeters=probe.radius_meters,
            angleDegrees=round(probe.angle_degrees, 6),
            x=probe.point.x,
            y=probe.point.y,
        )
        for probe in iter_probes(origin)
    ]
    return models.ProbePlan(referenceSystemId=origin.reference_system_id, probes=probes)
