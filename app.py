#!/usr/bin/env python3
"""
Quiz Simulator - Flask Application
JSON interface over the quiz simulator: renders state snapshots and forwards
learner intents (start module, answer, jump, skip feedback, navigation).
"""

import os
import logging
import secrets
import threading
import time
from functools import wraps
from datetime import datetime as dt
from typing import Callable, Optional

# Flask and Extensions
from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException

from question_bank import DEFAULT_BANK_PATH, QuestionBank, load_question_bank
from quiz_errors import IndexOutOfRange, InvalidTransition, QuizError, UnknownModuleId
from session_clock import TickScheduler, WallClockTicker
from simulator import AppView, QuizSimulator


# Configuration Class
class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'quiz-simulator-' + secrets.token_hex(32))
    QUESTION_TIME_LIMIT = int(os.environ.get('QUESTION_TIME_LIMIT', 60))  # ticks per question
    FEEDBACK_DURATION = int(os.environ.get('FEEDBACK_DURATION', 15))  # ticks of feedback
    TICK_INTERVAL = float(os.environ.get('TICK_INTERVAL', 1.0))  # seconds per tick
    QUESTION_BANK_PATH = os.environ.get('QUESTION_BANK_PATH', DEFAULT_BANK_PATH)
    LOG_FILE = os.environ.get('LOG_FILE', 'quiz_simulator.log')


# Initialize Flask App
app = Flask(__name__)
app.config.from_object(Config)

# Logging Configuration
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(Config.LOG_FILE),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)


# Security Headers Middleware
@app.after_request
def add_security_headers(response):
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['Cache-Control'] = 'no-store'
    response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"
    return response


# Simulator Wiring
# One learner per process: every request goes through this lock, and clock
# ticks are only delivered while it is held.
simulator_lock = threading.Lock()


def init_simulator(flask_app: Flask, bank: Optional[QuestionBank] = None,
                   time_source: Callable[[], float] = time.monotonic) -> QuizSimulator:
    """Build a fresh simulator and wall-clock ticker for the app"""
    if bank is None:
        bank = load_question_bank(flask_app.config['QUESTION_BANK_PATH'])
    scheduler = TickScheduler()
    simulator = QuizSimulator(
        bank,
        scheduler,
        question_ticks=flask_app.config['QUESTION_TIME_LIMIT'],
        feedback_ticks=flask_app.config['FEEDBACK_DURATION'],
        seconds_per_tick=flask_app.config['TICK_INTERVAL']
    )
    with simulator_lock:
        flask_app.extensions['quiz_simulator'] = simulator
        flask_app.extensions['quiz_ticker'] = WallClockTicker(
            scheduler, interval=flask_app.config['TICK_INTERVAL'], time_source=time_source
        )
    logger.info(f"Simulator ready with modules: {', '.join(bank.sequence)}")
    return simulator


def get_simulator() -> QuizSimulator:
    return app.extensions['quiz_simulator']


def with_simulator(f):
    """Run the view under the simulator lock after catching the clock up"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        with simulator_lock:
            app.extensions['quiz_ticker'].sync()
            return f(get_simulator(), *args, **kwargs)
    return decorated_function


def restart_ticker() -> None:
    """Line the tick phase up with a countdown that was just started"""
    app.extensions['quiz_ticker'].reset()


def state_response(simulator: QuizSimulator, status: int = 200, **extra):
    payload = {'state': simulator.snapshot()}
    payload.update(extra)
    return jsonify(payload), status


# Error Handlers
def _error_status(error: QuizError) -> int:
    if isinstance(error, (UnknownModuleId, IndexOutOfRange)):
        return 404
    if isinstance(error, InvalidTransition):
        return 409
    return 400


@app.errorhandler(QuizError)
def handle_quiz_error(error):
    """Rejected intents leave the state unchanged; report it alongside the error"""
    logger.warning(f"Rejected {request.method} {request.path}: {error}")
    with simulator_lock:
        state = get_simulator().snapshot()
    return jsonify({
        'error': str(error),
        'type': type(error).__name__,
        'state': state
    }), _error_status(error)


@app.errorhandler(HTTPException)
def handle_http_error(error):
    return jsonify({'error': error.description}), error.code


# Health Check Routes
@app.route('/health')
@app.route('/healthz')
@app.route('/ready')
def health_check():
    """Health check endpoint for deployment"""
    return jsonify({
        'status': 'healthy',
        'timestamp': dt.now().isoformat(),
        'service': 'Quiz Simulator'
    })


# Read Routes
@app.route('/api/modules')
@with_simulator
def list_modules(simulator):
    completed = simulator.aggregator.completed_module_ids
    return jsonify({
        'sequence': list(simulator.bank.sequence),
        'modules': [dict(module.summary(), completed=module.id in completed)
                    for module in simulator.bank.modules.values()]
    })


@app.route('/api/state')
@with_simulator
def get_state(simulator):
    return state_response(simulator)


@app.route('/api/certificate')
@with_simulator
def preview_certificate(simulator):
    """Aggregate score so far; only final once the sequence is complete"""
    return jsonify(simulator.aggregate().to_dict())


# Quiz Intent Routes
@app.route('/api/modules/<module_id>/start', methods=['POST'])
@with_simulator
def start_module(simulator, module_id):
    simulator.start_module(module_id)
    restart_ticker()
    logger.info(f"Learner started module {module_id}")
    return state_response(simulator)


@app.route('/api/answer', methods=['POST'])
@with_simulator
def submit_answer(simulator):
    data = request.get_json(silent=True) or {}
    option = data.get('option')

    if not isinstance(option, str):
        return state_response(simulator, 400, error='Option required')

    status = simulator.select_option(option)
    return state_response(simulator, result=status.value)


@app.route('/api/questions/<int(signed=True):index>/jump', methods=['POST'])
@with_simulator
def jump_to_question(simulator, index):
    simulator.jump_to_question(index)
    return state_response(simulator)


@app.route('/api/feedback/skip', methods=['POST'])
@with_simulator
def skip_feedback(simulator):
    simulator.skip_feedback()
    return state_response(simulator)


@app.route('/api/finish', methods=['POST'])
@with_simulator
def finish_module(simulator):
    simulator.finish_module()
    return state_response(simulator)


# Navigation Routes
@app.route('/api/home', methods=['POST'])
@with_simulator
def return_home(simulator):
    simulator.return_home()
    return state_response(simulator)


@app.route('/api/next-module', methods=['POST'])
@with_simulator
def next_module(simulator):
    simulator.go_to_next_module()
    if simulator.view is AppView.QUIZ:
        restart_ticker()
    return state_response(simulator)


@app.route('/api/certificate', methods=['POST'])
@with_simulator
def view_certificate(simulator):
    aggregate = simulator.view_certificate()
    logger.info(f"Final result {aggregate.percentage}% ({aggregate.grade.tier}), showing {aggregate.view}")
    return state_response(simulator)


@app.route('/api/restart', methods=['POST'])
@with_simulator
def restart(simulator):
    simulator.restart_sequence()
    logger.info('Learner restarted the full simulation')
    return state_response(simulator)


init_simulator(app)


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    app.run(host='0.0.0.0', port=port, threaded=False)
