"""Practice session state machine.

The session moves between three modes::

    SETTINGS --start--> PRACTICE --advance (last question)--> RESULTS
       ^                   |                                    |
       +------abort--------+                                    |
       +---------------back_to_settings-------------------------+
                           ^-------------restart----------------+

The host drives it with discrete events: ``submit`` for a typed answer,
``tick`` for the question timer and ``advance`` once the feedback delay has
passed. Nothing here sleeps or spawns threads.
"""
import logging
import random
import re
from enum import Enum

from tafel_trainer import mastery as mastery_store
from tafel_trainer import settings as settings_store
from tafel_trainer.generator import generate_exercise
from tafel_trainer.models import Exercise, HistoryEntry, Operation, SessionStats
from tafel_trainer.results import record_session_result

logger = logging.getLogger(__name__)

QUESTION_SECONDS = 15.0
TICK_SECONDS = 0.05
FEEDBACK_DELAY_SECONDS = 1.0

NO_TABLES_MESSAGE = "Choose at least one table to practise first!"
NO_EXERCISE_MESSAGE = "Could not come up with a new exercise. Try selecting more tables."


class Mode(Enum):
    SETTINGS = "settings"
    PRACTICE = "practice"
    RESULTS = "results"


class Feedback(Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"


class SessionError(Exception):
    """Recoverable problem the user should be told about."""


class NoTablesSelectedError(SessionError):
    def __init__(self, message: str = NO_TABLES_MESSAGE):
        super().__init__(message)


class NoExerciseAvailableError(SessionError):
    def __init__(self, message: str = NO_EXERCISE_MESSAGE):
        super().__init__(message)


class InvalidTransitionError(SessionError):
    pass


class QuestionTimer:
    """Countdown for a single question, advanced by explicit ticks."""

    def __init__(self, duration: float = QUESTION_SECONDS):
        self.duration = duration
        self.time_left = duration
        self.running = False

    def start(self) -> None:
        self.time_left = self.duration
        self.running = True

    def stop(self) -> None:
        self.running = False

    def tick(self, dt: float = TICK_SECONDS) -> bool:
        """Advance the countdown. Returns True on the tick that runs it out."""
        if not self.running:
            return False
        if self.time_left - dt <= 1e-9:
            self.time_left = 0.0
            self.running = False
            return True
        self.time_left -= dt
        return False

    @property
    def fraction_left(self) -> float:
        return self.time_left / self.duration if self.duration else 0.0


LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_answer(answer: str | None) -> int | None:
    """Read the leading integer of the typed answer, so "12abc" and "7.0" give 12 and 7."""
    if answer is None:
        return None
    match = LEADING_INT.match(answer)
    return int(match.group(1)) if match else None


class PracticeSession:
    def __init__(self, db_path: str, rng: random.Random | None = None,
                 question_seconds: float = QUESTION_SECONDS):
        self.db_path = db_path
        self.rng = rng
        self.settings = settings_store.load_settings(db_path)
        self.mastery = mastery_store.load_mastery(db_path)
        self.timer = QuestionTimer(question_seconds)
        self.mode = Mode.SETTINGS
        self.length = 0
        self._clear()

    def _clear(self) -> None:
        self.stats = SessionStats()
        self.history: list[HistoryEntry] = []
        self.current_exercise: Exercise | None = None
        self.feedback: Feedback | None = None
        self.answer = ""

    def _require(self, *modes: Mode) -> None:
        if self.mode not in modes:
            raise InvalidTransitionError(
                f"Not allowed in {self.mode.value} mode"
            )

    # Settings edits

    def toggle_table(self, op: Operation, table: int) -> None:
        self._require(Mode.SETTINGS)
        self.settings = settings_store.toggle_table(self.db_path, op, table)

    def set_exercise_count(self, count) -> None:
        self._require(Mode.SETTINGS)
        self.settings = settings_store.set_exercise_count(self.db_path, count)

    def set_player_name(self, name: str) -> None:
        self._require(Mode.SETTINGS)
        self.settings = settings_store.set_player_name(self.db_path, name)

    # Transitions

    def start(self) -> Exercise:
        self._require(Mode.SETTINGS, Mode.RESULTS)
        self.settings = settings_store.load_settings(self.db_path)
        if not self.settings.has_tables:
            raise NoTablesSelectedError()
        first = generate_exercise(self.settings, self.mastery, rng=self.rng)
        if first is None:
            raise NoExerciseAvailableError()
        self.timer.stop()
        self._clear()
        self.length = settings_store.session_length(self.settings)
        self.current_exercise = first
        self.mode = Mode.PRACTICE
        self.timer.start()
        logger.debug("Session started: %d questions, first %s", self.length, first.text)
        return first

    def restart(self) -> Exercise:
        self._require(Mode.RESULTS)
        return self.start()

    def submit(self, answer: str | None) -> bool | None:
        """Score an answer; None stands for a timeout.

        Returns whether it was correct, or None when the submission is ignored
        because there is no open question.
        """
        if self.mode is not Mode.PRACTICE or self.current_exercise is None or self.feedback:
            return None
        self.timer.stop()
        exercise = self.current_exercise
        self.answer = answer or ""
        correct = parse_answer(answer) == exercise.result
        self.feedback = Feedback.CORRECT if correct else Feedback.INCORRECT
        self.mastery = mastery_store.record_answer(
            self.db_path, exercise, correct, self.settings.multiplication_tables,
        )
        self.stats.total += 1
        if correct:
            self.stats.correct += 1
        self.history.append(HistoryEntry(exercise=exercise, correct=correct))
        return correct

    def tick(self, dt: float = TICK_SECONDS) -> bool:
        """Advance the question timer; a timeout submits an empty answer."""
        if self.mode is not Mode.PRACTICE:
            return False
        if self.timer.tick(dt):
            logger.debug("Timed out on %s", self.current_exercise.text)
            self.submit(None)
            return True
        return False

    def advance(self) -> Exercise | None:
        """Move past the feedback: next question, or the results screen."""
        self._require(Mode.PRACTICE)
        if self.feedback is None:
            raise InvalidTransitionError("No answer to advance from")
        if self.stats.total >= self.length:
            self._finish()
            return None
        next_exercise = generate_exercise(
            self.settings, self.mastery, previous=self.current_exercise, rng=self.rng,
        )
        if next_exercise is None:
            logger.warning("Ending session early after %d questions", self.stats.total)
            self._finish()
            return None
        self.current_exercise = next_exercise
        self.feedback = None
        self.answer = ""
        self.timer.start()
        return next_exercise

    def _finish(self) -> None:
        self.timer.stop()
        self.current_exercise = None
        self.mode = Mode.RESULTS
        record_session_result(
            self.db_path, self.settings.player_name, self.stats.correct, self.stats.total,
        )
        logger.debug("Session finished: %d/%d", self.stats.correct, self.stats.total)

    def abort(self) -> None:
        self._require(Mode.PRACTICE)
        self.timer.stop()
        self._clear()
        self.mode = Mode.SETTINGS

    def back_to_settings(self) -> None:
        self._require(Mode.RESULTS)
        self._clear()
        self.mode = Mode.SETTINGS

    def close(self) -> None:
        self.timer.stop()
