"""Desirability heuristic for candidate slots."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable

from .slots import Slot


BASE_SCORE = 100
MORNING_BONUS = 10
MIDWEEK_BONUS = 5
MIDWEEK_DAYS = frozenset({1, 3})  # Tuesday, Thursday

# (sessions already booked that week above which the penalty applies, penalty)
WEEKLY_LOAD_PENALTIES: tuple[tuple[int, int], ...] = ((3, 10), (5, 15), (7, 20))

# (distance to the module start in days strictly below which the bonus applies, bonus)
PROXIMITY_BONUSES: tuple[tuple[int, int], ...] = ((7, 15), (14, 10))

STRONGLY_RECOMMENDED = "strongly recommended"
RECOMMENDED = "recommended"
ACCEPTABLE = "acceptable"
DISCOURAGED = "discouraged"

RECOMMENDATION_TIERS: tuple[tuple[int, str], ...] = (
    (90, STRONGLY_RECOMMENDED),
    (75, RECOMMENDED),
    (50, ACCEPTABLE),
)


@dataclass
class ScoredSlot:
    slot: Slot
    score: int
    recommendation: str

    def as_dict(self) -> dict[str, object]:
        payload = self.slot.as_dict()
        payload.update(
            {
                "disponibilite": "LIBRE",
                "score": self.score,
                "recommendation": self.recommendation,
            }
        )
        return payload


def weekly_load_penalty(sessions_in_week: int) -> int:
    return sum(penalty for threshold, penalty in WEEKLY_LOAD_PENALTIES if sessions_in_week > threshold)


def proximity_bonus(day: date, module_start: date | None) -> int:
    if module_start is None:
        return 0
    distance = abs((day - module_start).days)
    for threshold, bonus in PROXIMITY_BONUSES:
        if distance < threshold:
            return bonus
    return 0


def score_slot(slot: Slot, *, sessions_in_week: int, module_start: date | None) -> int:
    score = BASE_SCORE
    if slot.is_morning:
        score += MORNING_BONUS
    if slot.date.weekday() in MIDWEEK_DAYS:
        score += MIDWEEK_BONUS
    score -= weekly_load_penalty(sessions_in_week)
    score += proximity_bonus(slot.date, module_start)
    return max(0, min(100, score))


def recommendation_for(score: int) -> str:
    for threshold, label in RECOMMENDATION_TIERS:
        if score >= threshold:
            return label
    return DISCOURAGED


def rank_slots(
    slots: list[Slot], load_by_slot: Callable[[Slot], int], module_start: date | None
) -> list[ScoredSlot]:
    """Score ``slots`` and sort them by descending score.

    ``load_by_slot`` returns the instructor's weekly session count for a slot.
    The sort is stable so equal scores keep their chronological order.
    """

    scored = []
    for slot in slots:
        score = score_slot(slot, sessions_in_week=load_by_slot(slot), module_start=module_start)
        scored.append(ScoredSlot(slot=slot, score=score, recommendation=recommendation_for(score)))
    scored.sort(key=lambda item: item.score, reverse=True)
    return scored
