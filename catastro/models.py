"""Value types shared by the resolution stages.

Everything here is request scoped: created for one resolution call and
discarded with it.
"""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Dict, Optional, Tuple, Union

from catastro.errors import InputValidationError


@dataclass(frozen=True)
class ProjectedPoint:
    """Projected coordinate pair plus the SRS it is expressed in."""

    x: float
    y: float
    reference_system_id: str

    def __post_init__(self) -> None:
        for name in ("x", "y"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InputValidationError(f"{name} must be a number.", {name: value})
            if not math.isfinite(value):
                raise InputValidationError(f"{name} must be finite.", {name: value})
        if not isinstance(self.reference_system_id, str) or not self.reference_system_id.strip():
            raise InputValidationError(
                "referenceSystemId must be a non-empty string.",
                {"referenceSystemId": self.reference_system_id},
            )

    def offset(self, dx: float, dy: float) -> "ProjectedPoint":
        return ProjectedPoint(self.x + dx, self.y + dy, self.reference_system_id)


def make_reference(part1: object, part2: object) -> Optional[str]:
    """Join the two fixed-width reference components, or None if either is missing."""
    first = str(part1).strip() if part1 is not None else ""
    second = str(part2).strip() if part2 is not None else ""
    if not first or not second:
        return None
    return f"{first}{second}"


@dataclass(frozen=True)
class ParcelCandidate:
    reference: str
    location_label: Optional[str]
    distance_meters: Optional[float]


@dataclass(frozen=True)
class SearchProbe:
    """One offset attempt around the original point."""

    radius_meters: float
    angle_radians: float
    point: ProjectedPoint

    @property
    def angle_degrees(self) -> float:
        return math.degrees(self.angle_radians)


@dataclass(frozen=True)
class ParcelDetail:
    full_address: Optional[str] = None
    primary_use: Optional[str] = None
    area_description: Optional[str] = None
    construction_age: Optional[str] = None
    assessed_value: Optional[str] = None

    def is_empty(self) -> bool:
        return not any(asdict(self).values())

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "fullAddress": self.full_address,
            "primaryUse": self.primary_use,
            "areaDescription": self.area_description,
            "constructionAge": self.construction_age,
            "assessedValue": self.assessed_value,
        }


@dataclass(frozen=True)
class ResolutionOutcome:
    """Externally observable result of a resolution; absence is data, not failure."""

    reference: Optional[str] = None
    location_label: Optional[str] = None
    distance_meters: Optional[float] = None
    detail: Optional[ParcelDetail] = None
    diagnostic: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "referenceOriginal": self.reference,
            "locationLabel": self.location_label,
            "distanceMeters": self.distance_meters,
            "detail": self.detail.to_dict() if self.detail is not None else None,
            "message": self.diagnostic,
        }


# Result variants. The locator answers with one of Found / Empty / NotFound /
# UpstreamError / TransportError; the detail fetcher reuses the two error
# variants next to Detailed / DetailedEmpty.


@dataclass(frozen=True)
class Found:
    candidates: Tuple[ParcelCandidate, ...]

    @property
    def first(self) -> ParcelCandidate:
        return self.candidates[0]


@dataclass(frozen=True)
class Empty:
    reason: str = "no candidates"


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class UpstreamError:
    code: Optional[int]
    description: str

    def describe(self) -> str:
        code = self.code if self.code is not None else "N/A"
        return f"{self.description} (code {code})"


@dataclass(frozen=True)
class TransportError:
    detail: str

    def describe(self) -> str:
        return self.detail


@dataclass(frozen=True)
class Detailed:
    detail: ParcelDetail
    strategy: str
    notes: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DetailedEmpty:
    notes: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RingHit:
    candidate: ParcelCandidate
    radius_meters: float
    probe: SearchProbe


@dataclass(frozen=True)
class Exhausted:
    min_radius_meters: float
    max_radius_meters: float
    probes_tried: int
    failures: int = 0


LocateResult = Union[Found, Empty, NotFound, UpstreamError, TransportError]
DetailResult = Union[Detailed, DetailedEmpty, UpstreamError, TransportError]
RingResult = Union[RingHit, Exhausted]
