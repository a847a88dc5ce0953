"""
Compatibility scoring between one animal and one adopter preference.

Six sub-scores are combined as a weighted average. A dimension only takes
part when the adopter actually constrained it, so leaving a preference
blank never counts against a candidate:

    score = Σ (w_i × s_i) / Σ w_i        over applicable dimensions i
    score = 0.5                          when nothing applies
"""
from __future__ import annotations

from ..catalog.models import Animal, Coordinate
from ..errors import InternalError
from ..geo import haversine_km
from ..preferences.models import Preference
from .config import DEFAULT_SCORING_WEIGHTS, ScoringWeights

SIZE_ORDER = ["extra_small", "small", "medium", "large", "extra_large"]

NEUTRAL_SCORE = 0.5
DEFAULT_REASON = "good overall compatibility"


def _size_distance(a: str, b: str) -> int | None:
    """Return how many ladder steps apart two size classes are."""
    try:
        return abs(SIZE_ORDER.index(a.lower()) - SIZE_ORDER.index(b.lower()))
    except ValueError:
        return None


def _tags_overlap(a: str, b: str) -> bool:
    a, b = a.casefold(), b.casefold()
    return a in b or b in a


def _age_bounds(preference: Preference) -> tuple[int, int]:
    age_min, age_max = preference.age_min, preference.age_max
    if age_min and age_max and age_min > age_max:
        age_min, age_max = age_max, age_min
    return age_min, age_max


def _age_in_range(age: int, age_min: int, age_max: int) -> bool:
    return (age_min == 0 or age >= age_min) and (age_max == 0 or age <= age_max)


def species_score(species: str, accepted: list[str]) -> float:
    wanted = {s.casefold() for s in accepted}
    return 1.0 if species.casefold() in wanted else 0.0


def age_score(age: int, age_min: int, age_max: int) -> float:
    if age_min == 0 and age_max == 0:
        return 0.7

    if _age_in_range(age, age_min, age_max):
        return 1.0

    if age_min > 0 and age < age_min:
        distance = age_min - age
    else:
        distance = age - age_max

    # Within two months of the range still earns partial credit
    if distance <= 2:
        return 1.0 - distance * 0.3
    return 0.1


def size_score(size: str, accepted: list[str]) -> float:
    if any(size.casefold() == wanted.casefold() for wanted in accepted):
        return 1.0

    best = None
    for wanted in accepted:
        distance = _size_distance(size, wanted)
        if distance is None:
            continue
        if distance == 1:
            score = 0.7
        elif distance == 2:
            score = 0.4
        else:
            score = 0.1
        best = score if best is None else max(best, score)

    if best is None:
        # Off-ladder size on the animal or on every accepted size
        return 0.5
    return best


def location_score(
    location: Coordinate | None,
    origin: Coordinate | None,
    max_radius: float,
) -> float:
    if origin is None or not max_radius:
        return 0.7
    if location is None:
        return 0.5

    distance = haversine_km(
        origin.latitude, origin.longitude, location.latitude, location.longitude
    )
    if distance <= max_radius:
        return max(1.0 - (distance / max_radius) * 0.5, 0.5)
    if distance <= max_radius * 1.5:
        return 0.2
    return 0.0


def personality_score(tags: list[str], desired: list[str]) -> float:
    wanted = [d for d in desired if d.strip()]
    if not wanted:
        return 0.7
    have = [t for t in tags if t.strip()]
    matched = sum(1 for want in wanted if any(_tags_overlap(want, tag) for tag in have))
    return matched / len(wanted)


def special_score(animal: Animal, preference: Preference) -> float:
    score = 1.0

    for required, flag in (
        (preference.good_with_kids, animal.good_with_kids),
        (preference.good_with_pets, animal.good_with_pets),
    ):
        if not required:
            continue
        if flag is None:
            score *= 0.7
        elif not flag:
            score *= 0.3

    if preference.special_needs is False and animal.has_special_needs:
        score *= 0.5

    return score


def _join_reasons(reasons: list[str]) -> str:
    if not reasons:
        return DEFAULT_REASON
    if len(reasons) == 1:
        return reasons[0]
    return ", ".join(reasons[:-1]) + " and " + reasons[-1]


class ScoringEngine:
    def __init__(self, weights: ScoringWeights = DEFAULT_SCORING_WEIGHTS) -> None:
        self._weights = weights

    def score(
        self,
        animal: Animal,
        preference: Preference | None,
        requester_location: Coordinate | None = None,
    ) -> tuple[float, str]:
        """Return ``(score, reason)`` for one candidate. Pure; reads only its inputs."""
        if preference is None:
            return NEUTRAL_SCORE, DEFAULT_REASON

        w = self._weights
        origin = requester_location or preference.location
        age_min, age_max = _age_bounds(preference)

        parts: list[tuple[float, float]] = []

        if preference.species:
            parts.append((w.species, species_score(animal.species, preference.species)))

        if (age_min or age_max) and animal.age_months is not None:
            parts.append((w.age, age_score(animal.age_months, age_min, age_max)))

        if preference.sizes and animal.size:
            parts.append((w.size, size_score(animal.size, preference.sizes)))

        if preference.max_radius or origin is not None:
            parts.append(
                (w.location, location_score(animal.location, origin, preference.max_radius))
            )

        if preference.personalities:
            parts.append(
                (w.personality, personality_score(animal.personality, preference.personalities))
            )

        if (
            preference.good_with_kids
            or preference.good_with_pets
            or preference.special_needs is False
        ):
            parts.append((w.special, special_score(animal, preference)))

        total_weight = sum(weight for weight, _ in parts)
        if total_weight == 0:
            score = NEUTRAL_SCORE
        else:
            score = sum(weight * value for weight, value in parts) / total_weight

        if not -1e-9 <= score <= 1.0 + 1e-9:
            raise InternalError(f"Compatibility score {score!r} out of range for animal {animal.id}")
        score = min(max(score, 0.0), 1.0)

        return score, self.reason(animal, preference)

    def reason(self, animal: Animal, preference: Preference) -> str:
        reasons: list[str] = []

        if preference.species and species_score(animal.species, preference.species) == 1.0:
            reasons.append("perfect species match")

        age_min, age_max = _age_bounds(preference)
        if (
            (age_min or age_max)
            and animal.age_months is not None
            and _age_in_range(animal.age_months, age_min, age_max)
        ):
            reasons.append("age preference match")

        if animal.size and any(animal.size.casefold() == s.casefold() for s in preference.sizes):
            reasons.append("ideal size")

        if any(
            _tags_overlap(want, tag)
            for want in preference.personalities
            if want.strip()
            for tag in animal.personality
            if tag.strip()
        ):
            reasons.append("personality compatibility")

        return _join_reasons(reasons)
