"""
Weekly score calculator - pure domain logic, no database access.
"""
import math
from collections import Counter
from datetime import date
from fractions import Fraction
from typing import Sequence

from habit_tracker.shared.constants import DAYS_PER_WEEK
from habit_tracker.shared.date_utils import get_week_end
from .schemas import ScoreCalculationResult


class ScoreCalculator:
    """Calculates a 0-100 weekly completion score from habits and their completions"""

    @staticmethod
    def calculate(
        habits: Sequence,
        completions: Sequence,
        week_start: date
    ) -> ScoreCalculationResult:
        """
        Calculate the weekly score.

        Formula:
            Expected = min(frequency, 7)
            Actual = completed records for the habit inside the week
            HabitScore = Actual / Expected × 100
            Score = round_half_up(mean(HabitScore))

        HabitScore is not capped: a habit done more often than its
        frequency contributes more than 100 to the mean.

        Args:
            habits: Active habits (objects with id and frequency)
            completions: Completion records (objects with habit_id, date, completed)
            week_start: Monday of the week being scored

        Returns:
            ScoreCalculationResult with score, completed and expected totals
        """
        if not habits:
            return ScoreCalculationResult(score=0, completed_habits=0, total_habits=0)

        week_end = get_week_end(week_start)
        actual_by_habit = Counter(
            c.habit_id
            for c in completions
            if c.completed and week_start <= c.date <= week_end
        )

        total_score = Fraction(0)
        total_expected = 0
        total_actual = 0

        for habit in habits:
            expected = ScoreCalculator.expected_completions(habit.frequency)
            actual = actual_by_habit.get(habit.id, 0)

            total_expected += expected
            total_actual += actual
            total_score += ScoreCalculator.habit_score(actual, expected)

        return ScoreCalculationResult(
            score=ScoreCalculator.round_half_up(total_score / len(habits)),
            completed_habits=total_actual,
            total_habits=total_expected
        )

    @staticmethod
    def expected_completions(frequency: int) -> int:
        """A week has at most 7 days"""
        return min(frequency, DAYS_PER_WEEK)

    @staticmethod
    def habit_score(actual: int, expected: int) -> Fraction:
        """Per-habit percentage as an exact fraction"""
        if expected <= 0:
            return Fraction(0)
        return Fraction(actual * 100, expected)

    @staticmethod
    def round_half_up(value: Fraction) -> int:
        """Round to nearest integer, .5 rounds up"""
        return math.floor(value + Fraction(1, 2))
