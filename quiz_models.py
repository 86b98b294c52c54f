"""
Quiz Simulator - Data Models
Static question content plus the value objects exchanged between the session
engine, the aggregator and the presentation layer.
"""

from dataclasses import dataclass, asdict, field
from enum import Enum
from typing import Dict, Optional, Any, Tuple

from grading import Grade, grade, score_percentage


class QuestionStatus(str, Enum):
    PENDING = 'pending'
    CORRECT = 'correct'
    INCORRECT = 'incorrect'
    SKIPPED = 'skipped'

    @property
    def is_terminal(self) -> bool:
        return self is not QuestionStatus.PENDING


class SessionPhase(str, Enum):
    IDLE = 'idle'
    QUESTION = 'question'
    FEEDBACK = 'feedback'
    REVIEW = 'review'  # read-only view of an already resolved question
    FINISHED = 'finished'


@dataclass(frozen=True)
class Question:
    text: str
    options: Tuple[str, ...]
    correct_answer: str
    feedback: str

    def to_dict(self, reveal: bool = False) -> Dict[str, Any]:
        """Serialize for rendering; the answer and feedback stay hidden unless revealed"""
        data = {'text': self.text, 'options': list(self.options)}
        if reveal:
            data['correct_answer'] = self.correct_answer
            data['feedback'] = self.feedback
        return data


@dataclass(frozen=True)
class Module:
    id: str
    title: str
    description: str
    questions: Tuple[Question, ...]

    @property
    def question_count(self) -> int:
        return len(self.questions)

    def summary(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'question_count': self.question_count
        }


@dataclass
class SessionStats:
    correct: int = 0
    incorrect: int = 0
    skipped: int = 0
    total_elapsed_seconds: int = 0

    @property
    def resolved(self) -> int:
        return self.correct + self.incorrect + self.skipped

    def copy(self) -> 'SessionStats':
        return SessionStats(**asdict(self))

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class ModuleResult:
    """Finalized outcome of one module attempt"""
    module_id: str
    stats: SessionStats
    total_questions: int

    @property
    def percentage(self) -> int:
        return score_percentage(self.stats.correct, self.total_questions)

    @property
    def grade(self) -> Grade:
        return grade(self.percentage)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'module_id': self.module_id,
            'stats': self.stats.to_dict(),
            'total_questions': self.total_questions,
            'percentage': self.percentage,
            'grade': self.grade.to_dict()
        }


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session engine after a transition"""
    module_id: Optional[str]
    phase: SessionPhase
    current_index: int
    statuses: Tuple[QuestionStatus, ...]
    stats: SessionStats
    is_answered: bool
    selected_option: Optional[str]
    is_feedback_visible: bool
    question: Optional[Question] = None
    recorded_option: Optional[str] = None
    question_seconds_left: Optional[int] = None
    feedback_seconds_left: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'module_id': self.module_id,
            'phase': self.phase.value,
            'current_index': self.current_index,
            'statuses': [status.value for status in self.statuses],
            'stats': self.stats.to_dict(),
            'is_answered': self.is_answered,
            'selected_option': self.selected_option,
            'recorded_option': self.recorded_option,
            'is_feedback_visible': self.is_feedback_visible,
            'question': self.question.to_dict(reveal=self.is_answered) if self.question else None,
            'question_seconds_left': self.question_seconds_left,
            'feedback_seconds_left': self.feedback_seconds_left
        }


@dataclass(frozen=True)
class AggregateSnapshot:
    completed_module_ids: frozenset
    results_by_module_id: Dict[str, ModuleResult] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'completed_module_ids': sorted(self.completed_module_ids),
            'results': {module_id: result.to_dict()
                        for module_id, result in self.results_by_module_id.items()}
        }
