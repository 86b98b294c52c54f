"""
Quiz Simulator - Question Bank
Loads the static module definitions and the module sequence from JSON and
validates them once at startup.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Any

from quiz_errors import DegenerateModule, QuestionBankError, UnknownModuleId
from quiz_models import Module, Question

logger = logging.getLogger(__name__)

DEFAULT_BANK_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data', 'question_bank.json')


@dataclass(frozen=True)
class QuestionBank:
    modules: Dict[str, Module]
    sequence: List[str]

    def module(self, module_id: str) -> Module:
        try:
            return self.modules[module_id]
        except KeyError:
            raise UnknownModuleId(module_id) from None

    def next_in_sequence(self, module_id: str) -> Optional[str]:
        """Module id that follows module_id in the sequence, or None at the end"""
        if module_id not in self.sequence:
            return None
        position = self.sequence.index(module_id)
        if position + 1 < len(self.sequence):
            return self.sequence[position + 1]
        return None

    @property
    def total_questions(self) -> int:
        return sum(self.modules[module_id].question_count for module_id in self.sequence)


def _require(raw: Dict[str, Any], key: str, where: str) -> Any:
    value = raw.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise QuestionBankError(f"{where} is missing '{key}'")
    return value


def _question_from_dict(module_id: str, position: int, raw: Dict[str, Any]) -> Question:
    where = f"Question {position} of module '{module_id}'"
    text = str(_require(raw, 'text', where)).strip()
    raw_options = _require(raw, 'options', where)
    if not isinstance(raw_options, list) or len(raw_options) < 2:
        raise QuestionBankError(f"{where} needs at least two options")

    options = tuple(str(option) for option in raw_options)
    if len(set(options)) != len(options):
        raise QuestionBankError(f"{where} has duplicate options")

    correct_answer = str(_require(raw, 'correct_answer', where))
    if correct_answer not in options:
        raise QuestionBankError(f"{where}: correct answer '{correct_answer}' is not one of its options")

    return Question(
        text=text,
        options=options,
        correct_answer=correct_answer,
        feedback=str(raw.get('feedback', '')).strip()
    )


def _module_from_dict(raw: Dict[str, Any]) -> Module:
    module_id = str(_require(raw, 'id', 'Module')).strip()
    questions = tuple(
        _question_from_dict(module_id, position, item)
        for position, item in enumerate(raw.get('questions') or [], start=1)
    )
    if not questions:
        raise DegenerateModule(module_id)
    return Module(
        id=module_id,
        title=str(raw.get('title') or module_id),
        description=str(raw.get('description', '')),
        questions=questions
    )


def parse_question_bank(raw: Dict[str, Any]) -> QuestionBank:
    """Build a validated question bank from decoded JSON"""
    if not isinstance(raw, dict):
        raise QuestionBankError('Question bank must be a JSON object')

    modules: Dict[str, Module] = {}
    for item in raw.get('modules') or []:
        module = _module_from_dict(item)
        if module.id in modules:
            raise QuestionBankError(f"Duplicate module id: {module.id}")
        modules[module.id] = module
    if not modules:
        raise QuestionBankError('Question bank defines no modules')

    sequence = [str(module_id) for module_id in raw.get('sequence') or modules.keys()]
    for module_id in sequence:
        if module_id not in modules:
            raise QuestionBankError(f"Sequence references unknown module '{module_id}'")
    if len(set(sequence)) != len(sequence):
        raise QuestionBankError('Sequence lists a module more than once')

    return QuestionBank(modules=modules, sequence=sequence)


def load_question_bank(path: str = DEFAULT_BANK_PATH) -> QuestionBank:
    """Load and validate the question bank file"""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except FileNotFoundError:
        logger.error(f"Question bank {path} not found")
        raise
    except json.JSONDecodeError as e:
        logger.error(f"Question bank {path} is not valid JSON: {e}")
        raise QuestionBankError(f"Invalid JSON in {path}: {e}") from e

    try:
        bank = parse_question_bank(raw)
    except QuestionBankError as e:
        logger.error(f"Question bank {path} failed validation: {e}")
        raise

    logger.info(f"Loaded {len(bank.modules)} modules ({bank.total_questions} questions) from {path}")
    return bank
