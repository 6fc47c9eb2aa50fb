import math

from catastro.models import Empty, Exhausted, Found, NotFound, ParcelCandidate, RingHit, TransportError, UpstreamError
from catastro.ring_search import PROBE_BUDGET, RING_RADII_METERS, RingSearchExpander, iter_probes


class LatticeLocator:
    """Answers Found only where ``hits`` says so, keyed by (radius, angle in degrees)."""

    def __init__(self, origin, hits=None, miss=Empty()):
        self.origin = origin
        self.hits = hits or {}
        self.miss = miss
        self.calls = []

    def locate(self, point):
        dx, dy = point.x - self.origin.x, point.y - self.origin.y
        key = (round(math.hypot(dx, dy)), round(math.degrees(math.atan2(dy, dx))) % 360)
        self.calls.append(key)
        reference = self.hits.get(key)
        if reference is None:
            return self.miss
        return Found((ParcelCandidate(reference, f"label {reference}", float(key[0])),))


def test_probe_lattice_is_radius_ascending_then_angle_ordered(origin):
    probes = list(iter_probes(origin))
    assert len(probes) == PROBE_BUDGET == 40
    assert [p.radius_meters for p in probes[:9]] == [5.0] * 8 + [10.0]
    assert [round(p.angle_degrees) for p in probes[:8]] == [0, 45, 90, 135, 180, 225, 270, 315]
    assert probes[0].point.x == origin.x + 5.0
    assert probes[0].point.y == origin.y
    assert math.isclose(probes[1].point.x, origin.x + 5 * math.cos(math.pi / 4))
    assert probes[-1].radius_meters == 100.0
    assert all(p.point.reference_system_id == origin.reference_system_id for p in probes)


def test_probe_sequence_is_lazy_and_restartable(origin):
    first_pass = iter_probes(origin)
    assert next(first_pass).radius_meters == 5.0
    assert next(iter_probes(origin)).angle_radians == 0.0


def test_smallest_successful_radius_wins(origin):
    locator = LatticeLocator(origin, hits={(25, 90): "FIRST25", (25, 180): "SECOND25", (50, 0): "FIFTY"})
    result = RingSearchExpander(locator).expand(origin)
    assert isinstance(result, RingHit)
    assert result.radius_meters == 25.0
    assert result.candidate.reference == "FIRST25"
    assert len(locator.calls) == 16 + 3
    assert all(radius in (5, 10) for radius, _ in locator.calls[:16])


def test_first_candidate_of_the_winning_probe_is_reported(origin):
    class TwoCandidates:
        def locate(self, point):
            return Found((ParcelCandidate("A", None, 1.0), ParcelCandidate("B", None, 0.5)))

    result = RingSearchExpander(TwoCandidates()).expand(origin)
    assert result.candidate.reference == "A"
    assert result.radius_meters == 5.0


def test_failing_probes_do_not_abort_the_search(origin):
    answers = iter([TransportError("timeout"), UpstreamError(5, "boom"), NotFound()])

    class Flaky:
        calls = 0

        def locate(self, point):
            Flaky.calls += 1
            return next(answers, Found((ParcelCandidate("LATE", None, None),)))

    result = RingSearchExpander(Flaky()).expand(origin)
    assert isinstance(result, RingHit)
    assert result.candidate.reference == "LATE"
    assert Flaky.calls == 4


def test_exhaustion_after_full_budget(origin):
    locator = LatticeLocator(origin, miss=TransportError("down"))
    result = RingSearchExpander(locator).expand(origin)
    assert result == Exhausted(
        min_radius_meters=RING_RADII_METERS[0],
        max_radius_meters=RING_RADII_METERS[-1],
        probes_tried=40,
        failures=40,
    )
    assert len(locator.calls) == 40
