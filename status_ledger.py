"""
Quiz Simulator - Question Status Ledger
Fixed-size record of how each question in the active module was resolved.
"""

from typing import List, Optional, Tuple

from quiz_errors import IndexOutOfRange
from quiz_models import QuestionStatus


class QuestionLedger:
    """
    One status per question index, starting pending.
    Each index resolves at most once; later writes are refused.
    """

    def __init__(self, size: int):
        if size <= 0:
            raise ValueError(f"Ledger size must be positive, got {size}")
        self._statuses: List[QuestionStatus] = [QuestionStatus.PENDING] * size
        self._chosen: List[Optional[str]] = [None] * size

    def __len__(self) -> int:
        return len(self._statuses)

    def _check(self, index: int) -> None:
        if not 0 <= index < len(self._statuses):
            raise IndexOutOfRange(index, len(self._statuses))

    def status(self, index: int) -> QuestionStatus:
        self._check(index)
        return self._statuses[index]

    def is_pending(self, index: int) -> bool:
        return self.status(index) is QuestionStatus.PENDING

    def chosen_option(self, index: int) -> Optional[str]:
        """Option picked at this index, None if unanswered or skipped"""
        self._check(index)
        return self._chosen[index]

    def resolve(self, index: int, status: QuestionStatus, option: Optional[str] = None) -> bool:
        """Record the outcome; returns False if the index was already resolved"""
        self._check(index)
        if not status.is_terminal:
            raise ValueError('Cannot resolve a question back to pending')
        if self._statuses[index].is_terminal:
            return False
        self._statuses[index] = status
        self._chosen[index] = option
        return True

    def count(self, status: QuestionStatus) -> int:
        return self._statuses.count(status)

    @property
    def resolved_count(self) -> int:
        return len(self._statuses) - self.count(QuestionStatus.PENDING)

    def snapshot(self) -> Tuple[QuestionStatus, ...]:
        return tuple(self._statuses)
