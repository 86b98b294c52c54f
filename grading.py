"""
Quiz Simulator - Grading
Maps a percentage score to a qualitative tier with pass/fail semantics.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Any

from quiz_errors import DegenerateModule

PASS_THRESHOLD = 50
CERTIFICATE_THRESHOLD = 75

TIER_NOT_PASSING = 'not passing'
TIER_PRACTITIONER = 'practitioner'
TIER_ADVANCED = 'advanced'
TIER_EXPERT = 'expert'

# Ordered by lower bound, highest first
GRADE_TIERS = [
    {
        'min': 80,
        'tier': TIER_EXPERT,
        'advisory': 'Outstanding performance that reflects deep mastery of the educational '
                    'standards. Congratulations on this achievement.'
    },
    {
        'min': 70,
        'tier': TIER_ADVANCED,
        'advisory': 'Great performance! You have a strong knowledge base, and with a little '
                    'more focus you will reach the expert level.'
    },
    {
        'min': PASS_THRESHOLD,
        'tier': TIER_PRACTITIONER,
        'advisory': 'A good start, but you need a deeper understanding of the specialised '
                    'areas to move up to the higher levels.'
    },
    {
        'min': 0,
        'tier': TIER_NOT_PASSING,
        'advisory': 'Your current level needs urgent attention. Revisit the standards and '
                    'spend more time on practical application.'
    }
]


@dataclass(frozen=True)
class Grade:
    tier: str
    is_passing: bool
    advisory: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def grade(percentage: int) -> Grade:
    """Grade a 0-100 percentage score"""
    if isinstance(percentage, bool) or not isinstance(percentage, int):
        raise TypeError(f"Percentage must be an integer, got {percentage!r}")
    if percentage < 0 or percentage > 100:
        raise ValueError(f"Percentage must be between 0 and 100, got {percentage}")

    for band in GRADE_TIERS:
        if percentage >= band['min']:
            return Grade(
                tier=band['tier'],
                is_passing=percentage >= PASS_THRESHOLD,
                advisory=band['advisory']
            )
    raise AssertionError('unreachable: lowest tier starts at 0')


def score_percentage(correct: int, total: int) -> int:
    """
    Whole-number percentage of correct answers, rounding halves up.
    A zero-question total cannot be scored and raises DegenerateModule.
    """
    if total <= 0:
        raise DegenerateModule()
    if correct < 0 or correct > total:
        raise ValueError(f"Correct count {correct} outside 0-{total}")
    return (correct * 200 + total) // (total * 2)


def is_certificate_eligible(percentage: int) -> bool:
    return percentage >= CERTIFICATE_THRESHOLD
