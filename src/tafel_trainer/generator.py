"""Adaptive exercise generation.

Tables are picked with probability proportional to ``11 - score`` so weak
tables come up more often, and the score decides the difficulty band:

* below 3 the other operand is restricted to easy numbers,
* above 8 half of the questions are challenges (operands 11-15, or a
  two-step ``(t × b) + c`` expression for multiplication),
* anything else draws the other operand from 0-10.
"""
import logging
import random

from tafel_trainer.mastery import get_score, table_weight
from tafel_trainer.models import Exercise, Operation, UserSettings

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 20
CHALLENGE_THRESHOLD = 8
SIMPLE_THRESHOLD = 3
SIMPLE_MULTIPLIERS = (0, 1, 2, 5, 10)
SIMPLE_QUOTIENTS = (1, 2, 5, 10)
CHALLENGE_RANGE = (11, 15)

_random = random.Random()


def weighted_choice(candidates: list, weights: list, rng: random.Random):
    """Walk the cumulative weights until the drawn value is used up."""
    remainder = rng.random() * sum(weights)
    for candidate, weight in zip(candidates, weights):
        remainder -= weight
        if remainder <= 0:
            return candidate
    return candidates[0]


def _coin_flip(rng: random.Random) -> bool:
    return rng.random() < 0.5


def _is_challenge(score: int, rng: random.Random) -> bool:
    return score > CHALLENGE_THRESHOLD and _coin_flip(rng)


def build_multiplication(table: int, score: int, rng: random.Random) -> Exercise:
    op = Operation.MULTIPLICATION
    if _is_challenge(score, rng):
        if _coin_flip(rng):
            other = rng.randint(*CHALLENGE_RANGE)
            return Exercise(a=table, b=other, op=op, result=table * other, is_challenge=True)
        b = rng.randint(0, 10)
        c = rng.randint(1, 10)
        return Exercise(
            a=table, b=b, op=op,
            result=table * b + c,
            display=f"({table} × {b}) + {c}",
            is_challenge=True,
        )
    if score < SIMPLE_THRESHOLD:
        other = rng.choice(SIMPLE_MULTIPLIERS)
    else:
        other = rng.randint(0, 10)
    a, b = (table, other) if _coin_flip(rng) else (other, table)
    return Exercise(a=a, b=b, op=op, result=a * b)


def build_division(table: int, score: int, rng: random.Random) -> Exercise:
    op = Operation.DIVISION
    if _is_challenge(score, rng):
        quotient = rng.randint(*CHALLENGE_RANGE)
        return Exercise(a=table * quotient, b=table, op=op, result=quotient, is_challenge=True)
    if score < SIMPLE_THRESHOLD:
        quotient = rng.choice(SIMPLE_QUOTIENTS)
    else:
        quotient = rng.randint(0, 10)
    return Exercise(a=table * quotient, b=table, op=op, result=quotient)


def is_distinct(candidate: Exercise, previous: Exercise | None) -> bool:
    """True unless a, b and result all repeat the previous exercise."""
    if previous is None:
        return True
    return (candidate.a != previous.a
            or candidate.b != previous.b
            or candidate.result != previous.result)


def generate_exercise(settings: UserSettings, mastery: dict,
                      previous: Exercise | None = None,
                      rng: random.Random | None = None) -> Exercise | None:
    """Pick a table weighted by weakness and build one exercise for it.

    Returns None when no tables are selected or when MAX_ATTEMPTS candidates
    all repeat ``previous``.
    """
    rng = rng or _random
    available = [op for op in Operation if settings.tables_for(op)]
    if not available:
        return None

    for _ in range(MAX_ATTEMPTS):
        op = rng.choice(available)
        tables = settings.tables_for(op)
        weights = [table_weight(get_score(mastery, op, t)) for t in tables]
        table = weighted_choice(tables, weights, rng)
        score = get_score(mastery, op, table)
        if op is Operation.MULTIPLICATION:
            candidate = build_multiplication(table, score, rng)
        else:
            candidate = build_division(table, score, rng)
        if is_distinct(candidate, previous):
            return candidate

    logger.warning("No distinct exercise after %d attempts (previous: %s)",
                   MAX_ATTEMPTS, previous.text if previous else None)
    return None
