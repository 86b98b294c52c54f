"""
Quiz Simulator - Aggregator
Collects one finalized result per module and combines them into the final
score, tier and certificate decision for the module sequence.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Any, Sequence, Tuple

from grading import Grade, grade, score_percentage, is_certificate_eligible
from quiz_errors import UnknownModuleId
from quiz_models import AggregateSnapshot, Module, ModuleResult, SessionStats

logger = logging.getLogger(__name__)

# Modules scoring below this are flagged for review in the remediation report
REVIEW_THRESHOLD = 60

VIEW_CERTIFICATE = 'certificate'
VIEW_REPORT = 'report'


@dataclass(frozen=True)
class ModuleBreakdown:
    module_id: str
    title: str
    total_questions: int
    result: Optional[ModuleResult]

    @property
    def completed(self) -> bool:
        return self.result is not None

    @property
    def percentage(self) -> Optional[int]:
        return self.result.percentage if self.result else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'module_id': self.module_id,
            'title': self.title,
            'total_questions': self.total_questions,
            'completed': self.completed,
            'correct': self.result.stats.correct if self.result else 0,
            'percentage': self.percentage,
            'tier': self.result.grade.tier if self.result else None
        }


@dataclass(frozen=True)
class AggregateResult:
    correct: int
    skipped: int
    total_questions: int
    percentage: int
    grade: Grade
    is_complete: bool
    breakdown: Tuple[ModuleBreakdown, ...]

    @property
    def certificate_eligible(self) -> bool:
        return self.is_complete and is_certificate_eligible(self.percentage)

    @property
    def view(self) -> str:
        return VIEW_CERTIFICATE if self.certificate_eligible else VIEW_REPORT

    @property
    def modules_needing_review(self) -> List[ModuleBreakdown]:
        return [entry for entry in self.breakdown
                if entry.completed and entry.percentage < REVIEW_THRESHOLD]

    def recommendations(self) -> List[str]:
        """Study advice for the remediation report"""
        advice = []
        weak = self.modules_needing_review
        if weak:
            titles = ', '.join(entry.title for entry in weak)
            advice.append(f"Review the modules where you scored below {REVIEW_THRESHOLD}%: {titles}.")
        advice.append('Focus on understanding the core concepts (validity, reliability, '
                      'learning theories) rather than memorising answers.')
        if self.skipped:
            advice.append(f"Work on time management to reduce skipped questions "
                          f"({self.skipped} skipped this time).")
        advice.append('Retake the simulation to build exam stamina.')
        return advice

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'correct': self.correct,
            'total_questions': self.total_questions,
            'percentage': self.percentage,
            'grade': self.grade.to_dict(),
            'is_complete': self.is_complete,
            'certificate_eligible': self.certificate_eligible,
            'view': self.view,
            'modules': [entry.to_dict() for entry in self.breakdown]
        }
        if self.view == VIEW_REPORT:
            data['recommendations'] = self.recommendations()
        return data


class Aggregator:
    """Sole owner of the per-module results for the current run"""

    def __init__(self, modules: Dict[str, Module]):
        self.modules = modules
        self._results: Dict[str, ModuleResult] = {}

    @property
    def completed_module_ids(self) -> frozenset:
        return frozenset(self._results)

    def result_for(self, module_id: str) -> Optional[ModuleResult]:
        return self._results.get(module_id)

    def record_module_result(self, module_id: str, stats: SessionStats) -> ModuleResult:
        """Store a module's final stats, replacing any earlier attempt"""
        module = self.modules.get(module_id)
        if module is None:
            raise UnknownModuleId(module_id)
        if stats.resolved > module.question_count:
            raise ValueError(f"Stats for {module_id} resolve {stats.resolved} of "
                             f"{module.question_count} questions")

        if module_id in self._results:
            logger.info(f"Replacing earlier result for module {module_id}")
        result = ModuleResult(module_id=module_id, stats=stats.copy(),
                              total_questions=module.question_count)
        self._results[module_id] = result
        return result

    def is_sequence_complete(self, sequence: Sequence[str]) -> bool:
        return all(module_id in self._results for module_id in sequence)

    def compute_aggregate(self, sequence: Sequence[str]) -> AggregateResult:
        """
        Sum correct answers over the sequence and divide by every sequence
        module's question count, completed or not. The score is only final
        once is_complete is true.
        """
        correct = 0
        skipped = 0
        total = 0
        breakdown = []
        for module_id in sequence:
            module = self.modules.get(module_id)
            if module is None:
                raise UnknownModuleId(module_id)
            result = self._results.get(module_id)
            total += module.question_count
            if result:
                correct += result.stats.correct
                skipped += result.stats.skipped
            breakdown.append(ModuleBreakdown(
                module_id=module_id,
                title=module.title,
                total_questions=module.question_count,
                result=result
            ))

        percentage = score_percentage(correct, total)
        aggregate = AggregateResult(
            correct=correct,
            skipped=skipped,
            total_questions=total,
            percentage=percentage,
            grade=grade(percentage),
            is_complete=self.is_sequence_complete(sequence),
            breakdown=tuple(breakdown)
        )
        logger.info(f"Aggregate {correct}/{total} ({percentage}%): {aggregate.grade.tier}, "
                    f"view={aggregate.view}")
        return aggregate

    def reset(self) -> None:
        """Discard every result for a full re-run"""
        self._results.clear()
        logger.info('Cleared all module results')

    def snapshot(self) -> AggregateSnapshot:
        return AggregateSnapshot(
            completed_module_ids=self.completed_module_ids,
            results_by_module_id=dict(self._results)
        )
