import os, sys

# Make sure Python can see the repo root (the folder that contains app.py)
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

import pytest

from question_bank import QuestionBank
from quiz_models import Module, Question
from session_clock import TickScheduler
from session_engine import SessionEngine

RIGHT = 'right'
WRONG = 'wrong'


def make_module(module_id, count, title=None):
    questions = tuple(
        Question(
            text=f"{module_id} question {i}",
            options=(WRONG, RIGHT, 'other'),
            correct_answer=RIGHT,
            feedback=f"Explanation {i}"
        )
        for i in range(count)
    )
    return Module(id=module_id, title=title or module_id.title(), description='', questions=questions)


def make_bank(*sizes):
    """Bank with modules m1..mN holding the given question counts, in sequence order"""
    modules = {}
    for position, size in enumerate(sizes, start=1):
        module = make_module(f"m{position}", size)
        modules[module.id] = module
    return QuestionBank(modules=modules, sequence=list(modules))


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def module_factory():
    return make_module


@pytest.fixture
def bank_factory():
    return make_bank


@pytest.fixture
def modules():
    return {
        'trio': make_module('trio', 3),
        'pair': make_module('pair', 2),
        'solo': make_module('solo', 1),
    }


@pytest.fixture
def scheduler():
    return TickScheduler()


@pytest.fixture
def finished():
    return []


@pytest.fixture
def engine(modules, scheduler, finished):
    return SessionEngine(modules, scheduler, question_ticks=60, feedback_ticks=15,
                         on_finished=finished.append)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def client(fake_clock):
    from app import app, init_simulator

    app.config['TESTING'] = True
    init_simulator(app, bank=make_bank(3, 2, 2), time_source=fake_clock)
    return app.test_client()
