#!/usr/bin/env python3
"""
Multiplication Master - Terminal Drill
======================================
Times-table drill: a random problem from the 1-12 tables, one answer at a
time, a running score and a newest-first history of every answer.

The QuizEngine in this module is shared with the Textual front end
(drill_gui.py); the rest of the file is the plain terminal front end.

Usage:
    python drill.py
    python drill.py --delay 0.5
    python drill.py --seed 42 --log-file drill.log
"""

from __future__ import annotations

import argparse
import enum
import io
import logging
import os
import random
import re
import signal
import sys
import time
from dataclasses import dataclass, field
from logging.handlers import RotatingFileHandler
from typing import Any, Callable, List, Optional, Tuple

# Fix Windows console encoding for the multiplication sign and check marks
if sys.platform == "win32":
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    else:
        sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")

logger = logging.getLogger("drill")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MIN_OPERAND = 1
MAX_OPERAND = 12

# Seconds the result stays on screen before the next problem
FEEDBACK_DELAY = 1.2

CORRECT_MESSAGE = "CORRECT!"
INCORRECT_TEMPLATE = "NICE TRY! The answer was {answer}."

TIMES = "×"

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

# ANSI color codes
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
CYAN = "\033[96m"
BOLD = "\033[1m"
DIM = "\033[2m"
RESET = "\033[0m"

_INT_PREFIX = re.compile(r"([+-]?)([0-9]+)")

# Longer digit runs are far outside any answer and are not converted
_MAX_DIGITS = 18

# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Score:
    correct: int = 0
    incorrect: int = 0

    @property
    def total(self) -> int:
        return self.correct + self.incorrect


@dataclass(frozen=True)
class Problem:
    """A single times-table problem. ``answer`` is derived from the operands."""

    operand1: int
    operand2: int
    answer: int = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "answer", self.operand1 * self.operand2)

    @property
    def label(self) -> str:
        return f"{self.operand1} {TIMES} {self.operand2}"


@dataclass(frozen=True)
class HistoryEntry:
    problem: str
    user_answer: str
    correct_answer: int
    is_correct: bool


class LockState(enum.Enum):
    NONE = "none"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class Feedback:
    message: str
    is_correct: bool


@dataclass(frozen=True)
class QuizState:
    """Read-only snapshot of the engine handed to the views."""

    problem: Optional[Problem]
    score: Score
    lock: LockState
    feedback: Optional[Feedback]
    history: Tuple[HistoryEntry, ...]
    input_value: str
    pending: bool


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def parse_int(text):
    """
    Parse *text* the way a lenient decimal integer parser does.

    Leading whitespace is skipped, an optional sign is accepted and digits are
    read up to the first non-digit ("12abc" -> 12, "12.9" -> 12). Returns None
    when no digits are found, or when there are more significant digits than
    any answer could have; None never equals a valid answer.
    """
    match = _INT_PREFIX.match(text.lstrip())
    if match is None:
        return None
    sign, digits = match.groups()
    digits = digits.lstrip("0") or "0"
    if len(digits) > _MAX_DIGITS:
        return None
    return int(sign + digits)


def format_feedback(is_correct, answer):
    """Return the feedback line shown after an answer."""
    if is_correct:
        return CORRECT_MESSAGE
    return INCORRECT_TEMPLATE.format(answer=answer)


def summarize(score):
    """Return accuracy as a whole percentage, 0 when nothing was answered."""
    if score.total == 0:
        return 0
    return int(score.correct / score.total * 100 + 0.5)


def setup_logging(level="WARNING", log_file=None):
    """
    Configure the ``drill`` logger.

    Records go to a rotating file when *log_file* is given; front ends attach
    their own console handler.
    """
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    if log_file:
        log_dir = os.path.dirname(os.path.abspath(log_file))
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=5_000_000, backupCount=3)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)
    return logger


# ---------------------------------------------------------------------------
# Quiz engine
# ---------------------------------------------------------------------------


class QuizEngine:
    """Owns the current problem, score, history and answer lock.

    After an answer is evaluated the engine stays locked for ``delay``
    seconds so the result can be shown, then generates the next problem.
    The wait is driven by ``schedule(delay, callback)``, which must return a
    handle with a ``stop()`` method (a Textual ``set_timer`` fits). Without a
    scheduler the transition waits until :meth:`complete_transition` is
    called by the host.
    """

    def __init__(
        self,
        delay: float = FEEDBACK_DELAY,
        *,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        schedule: Optional[Callable[[float, Callable[[], None]], Any]] = None,
    ) -> None:
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self.delay = float(delay)
        self.rng = rng if rng is not None else random.Random(seed)
        self.schedule = schedule
        self.problem: Optional[Problem] = None
        self.score = Score()
        self.lock = LockState.NONE
        self.feedback: Optional[Feedback] = None
        self.history: List[HistoryEntry] = []
        self.input_value = ""
        self._listeners: List[Callable[[Problem], None]] = []
        self._timer: Any = None
        self._pending = False
        self._active = True
        self.new_problem()

    # -- listeners ---------------------------------------------------------

    def add_listener(self, callback: Callable[[Problem], None]) -> None:
        """Call *callback* with every new problem (focus the answer field)."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[Problem], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    # -- operations --------------------------------------------------------

    def new_problem(self) -> Problem:
        operand1 = self.rng.randint(MIN_OPERAND, MAX_OPERAND)
        operand2 = self.rng.randint(MIN_OPERAND, MAX_OPERAND)
        self.problem = Problem(operand1, operand2)
        self.input_value = ""
        self.lock = LockState.NONE
        logger.debug("New problem %s", self.problem.label)
        for callback in list(self._listeners):
            callback(self.problem)
        return self.problem

    def update_input(self, text: str) -> None:
        self.input_value = text

    def submit_answer(self, raw_input: Optional[str] = None) -> Optional[Feedback]:
        """Evaluate an answer for the current problem.

        Returns the feedback, or None when the submission was ignored (blank
        input, no problem, a result still on display, or a closed engine).
        """
        raw = self.input_value if raw_input is None else raw_input
        if not self._active or self.problem is None:
            return None
        if not raw.strip():
            logger.debug("Ignored blank submission")
            return None
        if self.lock is not LockState.NONE:
            logger.debug("Ignored submission %r while locked", raw)
            return None

        problem = self.problem
        is_correct = parse_int(raw) == problem.answer
        if is_correct:
            self.score = Score(self.score.correct + 1, self.score.incorrect)
            self.lock = LockState.CORRECT
        else:
            self.score = Score(self.score.correct, self.score.incorrect + 1)
            self.lock = LockState.INCORRECT

        self.history.insert(0, HistoryEntry(
            problem=problem.label,
            user_answer=raw,
            correct_answer=problem.answer,
            is_correct=is_correct,
        ))
        self.feedback = Feedback(format_feedback(is_correct, problem.answer), is_correct)
        logger.info(
            "%s = %s, answered %r (%s)",
            problem.label, problem.answer, raw, "correct" if is_correct else "incorrect",
        )

        self._pending = True
        if self.schedule is not None:
            self._timer = self.schedule(self.delay, self.complete_transition)
        return self.feedback

    def complete_transition(self) -> None:
        """Generate the next problem once the result has been shown."""
        if not self._active or not self._pending:
            return
        self._pending = False
        self._timer = None
        self.new_problem()

    def get_state(self) -> QuizState:
        return QuizState(
            problem=self.problem,
            score=self.score,
            lock=self.lock,
            feedback=self.feedback,
            history=tuple(self.history),
            input_value=self.input_value,
            pending=self._pending,
        )

    def close(self) -> None:
        """Stop the pending timer; late callbacks become no-ops."""
        self._active = False
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
        self._listeners.clear()
        logger.debug("Engine closed")

    @property
    def active(self) -> bool:
        return self._active


# ---------------------------------------------------------------------------
# Terminal front end
# ---------------------------------------------------------------------------

_current_engine = None


def _signal_handler(sig, frame):
    """Handle Ctrl+C gracefully -- print the session summary before exit."""
    print()
    if _current_engine is not None:
        print_summary(_current_engine.score)
    print(f"{CYAN}Goodbye!{RESET}\n")
    sys.exit(0)


def print_header(title):
    """Print a formatted section header."""
    width = 60
    print()
    print(f"{BOLD}{CYAN}{'=' * width}{RESET}")
    print(f"{BOLD}{CYAN}  {title}{RESET}")
    print(f"{BOLD}{CYAN}{'=' * width}{RESET}")
    print()


def print_divider():
    """Print a thin divider line."""
    print(f"{DIM}{'─' * 60}{RESET}")


def get_input(prompt=""):
    """Get user input, return None on EOF."""
    try:
        return input(prompt)
    except EOFError:
        return None


def format_history_line(entry):
    """One line of the detailed history, without color."""
    if entry.is_correct:
        return f"✔ {entry.problem}   You said: {entry.user_answer}"
    return (
        f"✘ {entry.problem}   You said: {entry.user_answer}"
        f"   Correct: {entry.correct_answer}"
    )


def print_history(history):
    """Print every answer of the session, newest first."""
    print_header("History")
    if not history:
        print(f"  {DIM}No answers yet. Solve a problem to start your history.{RESET}\n")
        return
    for entry in history:
        color = GREEN if entry.is_correct else RED
        print(f"  {color}{format_history_line(entry)}{RESET}")
    print()


def print_summary(score):
    pct = summarize(score)
    color = GREEN if pct >= 80 else (YELLOW if pct >= 50 else RED)
    print_divider()
    print(f"  {GREEN}Correct: {score.correct}{RESET}   {RED}Incorrect: {score.incorrect}{RESET}")
    if score.total:
        print(f"  Accuracy: {color}{pct}%{RESET}")
    print()


def run_drill(engine, delay=None):
    """
    Interactive loop for the terminal front end.

    Returns the final Score. 'h' prints the history, 'q' or EOF ends the
    session.
    """
    global _current_engine
    _current_engine = engine
    delay = engine.delay if delay is None else delay

    while True:
        state = engine.get_state()
        print_divider()
        print(f"\n  {GREEN}Correct: {state.score.correct}{RESET}   "
              f"{RED}Incorrect: {state.score.incorrect}{RESET}\n")
        print(f"  {BOLD}{CYAN}{state.problem.label}{RESET} = ?\n")

        raw = get_input(f"  {BOLD}Your answer: {RESET}")
        if raw is None:
            break
        command = raw.strip().lower()
        if command == "q":
            break
        if command == "h":
            print_history(state.history)
            continue

        engine.update_input(raw)
        feedback = engine.submit_answer()
        if feedback is None:
            continue

        color = GREEN if feedback.is_correct else RED
        icon = "✔" if feedback.is_correct else "✘"
        print(f"\n  {color}{BOLD}{icon} {feedback.message}{RESET}\n")

        if delay:
            time.sleep(delay)
        engine.complete_transition()

    print_summary(engine.score)
    return engine.score


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------


def _non_negative_float(value):
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}")
    if seconds < 0:
        raise argparse.ArgumentTypeError("delay must be 0 or more seconds")
    return seconds


def build_parser(description="Multiplication Master -- times-table drill"):
    """Argument parser shared by the terminal and Textual front ends."""
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--delay",
        type=_non_negative_float,
        default=FEEDBACK_DELAY,
        help=f"Seconds the result is shown before the next problem (default {FEEDBACK_DELAY})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for a reproducible sequence of problems",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Logging level (default WARNING)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Write log records to this file (rotated at 5 MB)",
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    signal.signal(signal.SIGINT, _signal_handler)

    engine = QuizEngine(args.delay, seed=args.seed)

    print_header(f"Multiplication Master -- {MIN_OPERAND} to {MAX_OPERAND} tables")
    print("  Type your answer and press Enter.")
    print(f"  Type {BOLD}'h'{RESET} for history, {BOLD}'q'{RESET} to quit.\n")

    run_drill(engine, args.delay)
    engine.close()


if __name__ == "__main__":
    main()
