"""
Quiz Simulator - Application Controller
Routes presentation intents to the session engine and aggregator and tracks
which view (home, quiz, results, certificate) is on screen.
"""

import logging
from enum import Enum
from typing import Dict, Optional, Any

from aggregator import AggregateResult, Aggregator
from question_bank import QuestionBank
from quiz_errors import InvalidTransition
from quiz_models import ModuleResult, QuestionStatus
from session_clock import TickScheduler
from session_engine import FEEDBACK_TICKS, QUESTION_TICKS, SessionEngine

logger = logging.getLogger(__name__)


class AppView(str, Enum):
    HOME = 'home'
    QUIZ = 'quiz'
    RESULTS = 'results'
    CERTIFICATE = 'certificate'


class QuizSimulator:
    """Owns one engine, one aggregator and the scheduler that drives them"""

    def __init__(self, bank: QuestionBank, scheduler: Optional[TickScheduler] = None,
                 question_ticks: int = QUESTION_TICKS, feedback_ticks: int = FEEDBACK_TICKS,
                 seconds_per_tick: float = 1.0):
        self.bank = bank
        self.scheduler = scheduler or TickScheduler()
        self.aggregator = Aggregator(bank.modules)
        self.engine = SessionEngine(
            bank.modules,
            self.scheduler,
            question_ticks=question_ticks,
            feedback_ticks=feedback_ticks,
            seconds_per_tick=seconds_per_tick,
            on_finished=self._on_module_finished
        )
        self.view = AppView.HOME
        self.active_module_id: Optional[str] = None

    def _require_view(self, intent: str, *views: AppView) -> None:
        if self.view not in views:
            raise InvalidTransition(intent, f"on the {self.view.value} view")

    # Intents
    def start_module(self, module_id: str) -> None:
        self.engine.start(module_id)
        self.active_module_id = module_id
        self.view = AppView.QUIZ

    def select_option(self, value: str) -> QuestionStatus:
        self._require_view('select an option', AppView.QUIZ)
        return self.engine.select_option(value)

    def jump_to_question(self, index: int) -> None:
        self._require_view('jump to a question', AppView.QUIZ)
        self.engine.jump_to(index)

    def skip_feedback(self) -> None:
        self._require_view('skip feedback', AppView.QUIZ)
        self.engine.advance()

    def finish_module(self) -> ModuleResult:
        self._require_view('finish the module', AppView.QUIZ)
        return self.engine.finish()

    def return_home(self) -> None:
        self.engine.abandon()
        self.active_module_id = None
        self.view = AppView.HOME

    def go_to_next_module(self) -> None:
        """Start the next module in the sequence, or show the final result after the last one"""
        self._require_view('go to the next module', AppView.RESULTS)
        next_module_id = self.bank.next_in_sequence(self.active_module_id)
        if next_module_id is None:
            self.view_certificate()
        else:
            self.start_module(next_module_id)

    def view_certificate(self) -> AggregateResult:
        self._require_view('view the certificate', AppView.HOME, AppView.RESULTS, AppView.CERTIFICATE)
        if not self.aggregator.is_sequence_complete(self.bank.sequence):
            missing = [module_id for module_id in self.bank.sequence
                       if self.aggregator.result_for(module_id) is None]
            raise InvalidTransition('view the certificate', f"on the {self.view.value} view",
                                    f"modules not completed: {', '.join(missing)}")

        self.engine.abandon()
        self.active_module_id = None
        self.view = AppView.CERTIFICATE
        return self.aggregate()

    def restart_sequence(self) -> None:
        """Drop every recorded result and go back home for a full re-run"""
        self.aggregator.reset()
        self.return_home()

    def tick(self, count: int = 1) -> None:
        self.scheduler.advance(count)

    def aggregate(self) -> AggregateResult:
        return self.aggregator.compute_aggregate(self.bank.sequence)

    def _on_module_finished(self, result: ModuleResult) -> None:
        self.aggregator.record_module_result(result.module_id, result.stats)
        self.view = AppView.RESULTS

    # Snapshots
    def snapshot(self) -> Dict[str, Any]:
        completed = self.aggregator.completed_module_ids
        sequence_complete = self.aggregator.is_sequence_complete(self.bank.sequence)
        data = {
            'view': self.view.value,
            'sequence': list(self.bank.sequence),
            'completed_module_ids': [module_id for module_id in self.bank.modules if module_id in completed],
            'active_module_id': self.active_module_id,
            'aggregate_state': self.aggregator.snapshot().to_dict()
        }

        if self.view is AppView.HOME:
            data['modules'] = [
                dict(module.summary(), completed=module.id in completed)
                for module in self.bank.modules.values()
            ]
            data['can_view_certificate'] = sequence_complete
        elif self.view is AppView.QUIZ:
            data['module'] = self.bank.module(self.active_module_id).summary()
            data['session'] = self.engine.snapshot().to_dict()
        elif self.view is AppView.RESULTS:
            has_next = self.bank.next_in_sequence(self.active_module_id) is not None
            data['module'] = self.bank.module(self.active_module_id).summary()
            data['session'] = self.engine.snapshot().to_dict()
            data['result'] = self.engine.result.to_dict()
            data['has_next_module'] = has_next
            data['can_view_certificate'] = not has_next and sequence_complete
        else:
            data['aggregate'] = self.aggregate().to_dict()
        return data
