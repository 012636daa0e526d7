import unittest
from datetime import date

from planif.scoring import (
    ACCEPTABLE,
    DISCOURAGED,
    RECOMMENDED,
    STRONGLY_RECOMMENDED,
    proximity_bonus,
    rank_slots,
    recommendation_for,
    score_slot,
    weekly_load_penalty,
)
from planif.slots import AFTERNOON, MORNING, Slot


MONDAY = date(2024, 3, 4)
TUESDAY = date(2024, 3, 5)


def slot(day, start="14:00", period=AFTERNOON):
    return Slot(date=day, start=start, end="16:00", duration=120, period=period)


class SlotScoreTestCase(unittest.TestCase):
    def test_weekly_penalties_accumulate(self) -> None:
        self.assertEqual(weekly_load_penalty(3), 0)
        self.assertEqual(weekly_load_penalty(4), 10)
        self.assertEqual(weekly_load_penalty(6), 25)
        self.assertEqual(weekly_load_penalty(8), 45)

    def test_proximity_thresholds_are_strict(self) -> None:
        start = date(2024, 3, 1)
        self.assertEqual(proximity_bonus(date(2024, 3, 7), start), 15)
        self.assertEqual(proximity_bonus(date(2024, 3, 8), start), 10)
        self.assertEqual(proximity_bonus(date(2024, 3, 14), start), 10)
        self.assertEqual(proximity_bonus(date(2024, 3, 15), start), 0)
        self.assertEqual(proximity_bonus(date(2024, 2, 25), start), 15)
        self.assertEqual(proximity_bonus(date(2024, 3, 15), None), 0)

    def test_score_is_clamped(self) -> None:
        morning_tuesday = slot(TUESDAY, start="08:00", period=MORNING)
        self.assertEqual(score_slot(morning_tuesday, sessions_in_week=0, module_start=TUESDAY), 100)
        for load in range(0, 12):
            with self.subTest(load=load):
                score = score_slot(slot(MONDAY), sessions_in_week=load, module_start=None)
                self.assertGreaterEqual(score, 0)
                self.assertLessEqual(score, 100)

    def test_loaded_week_lowers_the_score(self) -> None:
        self.assertEqual(score_slot(slot(MONDAY), sessions_in_week=0, module_start=None), 100)
        self.assertEqual(score_slot(slot(MONDAY), sessions_in_week=4, module_start=None), 90)
        self.assertEqual(score_slot(slot(MONDAY), sessions_in_week=6, module_start=None), 75)
        self.assertEqual(score_slot(slot(MONDAY), sessions_in_week=8, module_start=None), 55)

    def test_recommendation_tiers(self) -> None:
        self.assertEqual(recommendation_for(100), STRONGLY_RECOMMENDED)
        self.assertEqual(recommendation_for(90), STRONGLY_RECOMMENDED)
        self.assertEqual(recommendation_for(89), RECOMMENDED)
        self.assertEqual(recommendation_for(75), RECOMMENDED)
        self.assertEqual(recommendation_for(74), ACCEPTABLE)
        self.assertEqual(recommendation_for(50), ACCEPTABLE)
        self.assertEqual(recommendation_for(49), DISCOURAGED)


class RankSlotsTestCase(unittest.TestCase):
    def test_sorted_by_descending_score_and_stable(self) -> None:
        candidates = [slot(MONDAY), slot(TUESDAY), slot(date(2024, 3, 11))]
        loads = {MONDAY: 6, TUESDAY: 6, date(2024, 3, 11): 0}
        ranked = rank_slots(candidates, lambda candidate: loads[candidate.date], None)
        self.assertEqual(
            [(item.slot.date, item.score) for item in ranked],
            [(date(2024, 3, 11), 100), (TUESDAY, 80), (MONDAY, 75)],
        )
        self.assertEqual(ranked[0].as_dict()["disponibilite"], "LIBRE")
        self.assertEqual(ranked[-1].recommendation, RECOMMENDED)

    def test_equal_scores_keep_chronological_order(self) -> None:
        candidates = [slot(MONDAY), slot(date(2024, 3, 11)), slot(date(2024, 3, 18))]
        ranked = rank_slots(candidates, lambda candidate: 0, None)
        self.assertEqual([item.slot.date for item in ranked], [candidate.date for candidate in candidates])


if __name__ == "__main__":
    unittest.main()
