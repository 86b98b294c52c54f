"""
Quiz Simulator - Session Engine
State machine for one module attempt: question pointer, countdowns, answer
submission, timeouts, navigation and finalization.
"""

import logging
from typing import Callable, Dict, Optional

from quiz_errors import DegenerateModule, IndexOutOfRange, InvalidOption, InvalidTransition, UnknownModuleId
from quiz_models import Module, ModuleResult, Question, QuestionStatus, SessionPhase, SessionSnapshot, SessionStats
from session_clock import TickScheduler, TimerHandle, TimerKind
from status_ledger import QuestionLedger

logger = logging.getLogger(__name__)

QUESTION_TICKS = 60
FEEDBACK_TICKS = 15

ACTIVE_PHASES = (SessionPhase.QUESTION, SessionPhase.FEEDBACK, SessionPhase.REVIEW)


class SessionEngine:
    """
    Sole owner of the session state for the active module.

    Phases: idle -> question <-> feedback -> ... -> finished. Jumping or
    advancing onto an already resolved question shows it read-only (review)
    without a countdown. Every transition that leaves a phase cancels the
    countdown belonging to it before touching state.
    """

    def __init__(self, modules: Dict[str, Module], scheduler: TickScheduler,
                 question_ticks: int = QUESTION_TICKS, feedback_ticks: int = FEEDBACK_TICKS,
                 seconds_per_tick: float = 1.0,
                 on_finished: Optional[Callable[[ModuleResult], None]] = None):
        self.modules = modules
        self.scheduler = scheduler
        self.question_ticks = question_ticks
        self.feedback_ticks = feedback_ticks
        self.seconds_per_tick = seconds_per_tick
        self.on_finished = on_finished

        self.phase = SessionPhase.IDLE
        self.module: Optional[Module] = None
        self.ledger: Optional[QuestionLedger] = None
        self.stats = SessionStats()
        self.current_index = 0
        self.selected_option: Optional[str] = None
        self.result: Optional[ModuleResult] = None
        self._elapsed_ticks = 0

        self._total_timer: Optional[TimerHandle] = None
        self._question_timer: Optional[TimerHandle] = None
        self._feedback_timer: Optional[TimerHandle] = None

    # Derived state
    @property
    def current_question(self) -> Optional[Question]:
        if self.module is None:
            return None
        return self.module.questions[self.current_index]

    @property
    def is_answered(self) -> bool:
        if self.ledger is None:
            return False
        return not self.ledger.is_pending(self.current_index)

    @property
    def is_feedback_visible(self) -> bool:
        return self.phase is SessionPhase.FEEDBACK

    @property
    def is_active(self) -> bool:
        return self.phase in ACTIVE_PHASES

    # Intents
    def start(self, module_id: str) -> None:
        """Begin a fresh attempt, tearing down any attempt still in progress"""
        module = self.modules.get(module_id)
        if module is None:
            raise UnknownModuleId(module_id)
        if not module.questions:
            raise DegenerateModule(module_id)

        if self.is_active:
            logger.info(f"Abandoning module {self.module.id} to start {module_id}")
        self._cancel_all_timers()

        self.module = module
        self.ledger = QuestionLedger(module.question_count)
        self.stats = SessionStats()
        self.result = None
        self._elapsed_ticks = 0
        self._total_timer = self.scheduler.start_timer(
            TimerKind.TOTAL, None, on_tick=self._on_elapsed_tick
        )
        self._show_question(0)
        logger.info(f"Started module {module_id} with {module.question_count} questions")

    def select_option(self, option: str) -> QuestionStatus:
        """Answer the current question; the first resolution of an index wins"""
        if self.phase is not SessionPhase.QUESTION:
            raise InvalidTransition('select an option', self.phase.value,
                                    'question already answered' if self.is_answered else '')
        question = self.current_question
        if option not in question.options:
            raise InvalidOption(option)

        self._cancel_question_timer()
        is_correct = option == question.correct_answer
        status = QuestionStatus.CORRECT if is_correct else QuestionStatus.INCORRECT
        self.ledger.resolve(self.current_index, status, option)
        if is_correct:
            self.stats.correct += 1
        else:
            self.stats.incorrect += 1
        self.selected_option = option

        logger.debug(f"Question {self.current_index} of {self.module.id} answered: {status.value}")
        self._show_feedback()
        return status

    def timeout(self) -> bool:
        """Mark the current question skipped; no-op once it has been resolved"""
        if self.phase is not SessionPhase.QUESTION or not self.ledger.is_pending(self.current_index):
            logger.debug(f"Ignoring timeout while {self.phase.value}")
            return False

        self._cancel_question_timer()
        self.ledger.resolve(self.current_index, QuestionStatus.SKIPPED)
        self.stats.skipped += 1
        self.selected_option = None

        logger.debug(f"Question {self.current_index} of {self.module.id} timed out")
        self._show_feedback()
        return True

    def advance(self) -> Optional[ModuleResult]:
        """Leave feedback for the next question, or finish after the last one"""
        if self.phase is not SessionPhase.FEEDBACK:
            raise InvalidTransition('advance', self.phase.value)

        self._cancel_feedback_timer()
        if self.current_index >= len(self.ledger) - 1:
            return self.finish()
        self._show_question(self.current_index + 1)
        return None

    def jump_to(self, index: int) -> None:
        if not self.is_active:
            raise InvalidTransition('jump to a question', self.phase.value)
        if not 0 <= index < len(self.ledger):
            raise IndexOutOfRange(index, len(self.ledger))

        self._cancel_question_timer()
        self._cancel_feedback_timer()
        self._show_question(index)
        logger.debug(f"Jumped to question {index} ({self.phase.value})")

    def finish(self) -> ModuleResult:
        """Finalize the attempt and emit its result; repeated calls return the same result"""
        if self.phase is SessionPhase.FINISHED:
            return self.result
        if self.phase is SessionPhase.IDLE:
            raise InvalidTransition('finish', self.phase.value)

        self._cancel_all_timers()
        self.phase = SessionPhase.FINISHED
        self.selected_option = None
        self.result = ModuleResult(
            module_id=self.module.id,
            stats=self.stats.copy(),
            total_questions=self.module.question_count
        )
        logger.info(f"Finished module {self.module.id}: {self.stats.correct} correct, "
                    f"{self.stats.incorrect} incorrect, {self.stats.skipped} skipped "
                    f"in {self.stats.total_elapsed_seconds}s")
        if self.on_finished:
            self.on_finished(self.result)
        return self.result

    def abandon(self) -> None:
        """Stop every countdown and drop the attempt without recording a result"""
        self._cancel_all_timers()
        if self.is_active:
            logger.info(f"Abandoned module {self.module.id} at question {self.current_index}")
        self.phase = SessionPhase.IDLE
        self.module = None
        self.ledger = None
        self.stats = SessionStats()
        self.current_index = 0
        self.selected_option = None
        self.result = None

    def snapshot(self) -> SessionSnapshot:
        has_ledger = self.ledger is not None
        return SessionSnapshot(
            module_id=self.module.id if self.module else None,
            phase=self.phase,
            current_index=self.current_index,
            statuses=self.ledger.snapshot() if has_ledger else (),
            stats=self.stats.copy(),
            is_answered=self.is_answered,
            selected_option=self.selected_option,
            is_feedback_visible=self.is_feedback_visible,
            question=self.current_question,
            recorded_option=self.ledger.chosen_option(self.current_index) if has_ledger else None,
            question_seconds_left=self.scheduler.remaining(TimerKind.QUESTION)
            if self.phase is SessionPhase.QUESTION else None,
            feedback_seconds_left=self.scheduler.remaining(TimerKind.FEEDBACK)
            if self.phase is SessionPhase.FEEDBACK else None
        )

    # Internal transitions
    def _show_question(self, index: int) -> None:
        self.current_index = index
        self.selected_option = None
        if self.ledger.is_pending(index):
            self.phase = SessionPhase.QUESTION
            self._question_timer = self.scheduler.start_timer(
                TimerKind.QUESTION, self.question_ticks, on_expire=self._on_question_expired
            )
        else:
            self.phase = SessionPhase.REVIEW

    def _show_feedback(self) -> None:
        self.phase = SessionPhase.FEEDBACK
        self._feedback_timer = self.scheduler.start_timer(
            TimerKind.FEEDBACK, self.feedback_ticks, on_expire=self._on_feedback_expired
        )

    def _on_elapsed_tick(self, _remaining: Optional[int]) -> None:
        self._elapsed_ticks += 1
        self.stats.total_elapsed_seconds = int(self._elapsed_ticks * self.seconds_per_tick)

    def _on_question_expired(self) -> None:
        self._question_timer = None
        self.timeout()

    def _on_feedback_expired(self) -> None:
        self._feedback_timer = None
        if self.phase is SessionPhase.FEEDBACK:
            self.advance()

    def _cancel_question_timer(self) -> None:
        self.scheduler.cancel_timer(self._question_timer)
        self._question_timer = None

    def _cancel_feedback_timer(self) -> None:
        self.scheduler.cancel_timer(self._feedback_timer)
        self._feedback_timer = None

    def _cancel_all_timers(self) -> None:
        self._cancel_question_timer()
        self._cancel_feedback_timer()
        self.scheduler.cancel_timer(self._total_timer)
        self._total_timer = None
