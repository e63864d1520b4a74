"""Log of finished practice sessions."""
import logging
import time
import uuid

from tafel_trainer.db import RESULTS_KEY, load_json, save_json
from tafel_trainer.models import SessionResult

logger = logging.getLogger(__name__)


def _load_results(db_path: str) -> list[SessionResult]:
    results = []
    for entry in load_json(db_path, RESULTS_KEY, []):
        try:
            results.append(SessionResult.from_dict(entry))
        except (KeyError, TypeError, ValueError):
            logger.warning("Skipping malformed session result %r", entry)
    return results


def record_session_result(db_path: str, player_name: str, correct: int, total: int) -> SessionResult:
    result = SessionResult(
        id=uuid.uuid4().hex,
        player_name=player_name,
        correct=correct,
        total=total,
        timestamp=int(time.time() * 1000),
    )
    results = _load_results(db_path)
    results.append(result)
    save_json(db_path, RESULTS_KEY, [r.to_dict() for r in results])
    return result


def get_session_results(db_path: str, limit: int | None = None) -> list[SessionResult]:
    """Finished sessions, newest first."""
    results = sorted(_load_results(db_path), key=lambda r: r.timestamp, reverse=True)
    return results[:limit] if limit is not None else results


def get_best_results(db_path: str, limit: int = 5) -> list[SessionResult]:
    results = sorted(_load_results(db_path), key=lambda r: (r.percentage, r.total), reverse=True)
    return results[:limit]


def get_result_summary(db_path: str) -> dict:
    results = _load_results(db_path)
    answered = sum(r.total for r in results)
    correct = sum(r.correct for r in results)
    avg = round(correct / answered * 100, 1) if answered else 0.0
    return {
        "sessions": len(results),
        "questions_answered": answered,
        "avg_score": avg,
    }
