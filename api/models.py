from typing import Annotated, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictStr

# JSON numbers only: strings such as "440000" are rejected instead of coerced.
Coordinate = Annotated[float, Field(strict=True, allow_inf_nan=False)]


class ResolveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    x: Coordinate = Field(
        ...,
        validation_alias=AliasChoices("x", "utmX"),
        description="Projected easting in the reference system given by referenceSystemId",
    )
    y: Coordinate = Field(
        ...,
        validation_alias=AliasChoices("y", "utmY"),
        description="Projected northing in the reference system given by referenceSystemId",
    )
    referenceSystemId: StrictStr = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("referenceSystemId", "srs"),
        description="SRS code understood by the registry, e.g. EPSG:25830",
    )


class ParcelDetailModel(BaseModel):
    fullAddress: Optional[str] = None
    primaryUse: Optional[str] = None
    areaDescription: Optional[str] = None
    constructionAge: Optional[str] = None
    assessedValue: Optional[str] = None


class ResolutionResponse(BaseModel):
    referenceOriginal: Optional[str] = None
    locationLabel: Optional[str] = None
    distanceMeters: Optional[float] = None
    detail: Optional[ParcelDetailModel] = None
    message: Optional[str] = None


class SearchProbeModel(BaseModel):
    radiusMeters: float
    angleDegrees: float
    x: float
    y: float


class ProbePlan(BaseModel):
    referenceSystemId: str
    probes: List[SearchProbeModel] = Field(default_factory=list)
