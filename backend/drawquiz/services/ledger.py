"""Score ledger: the single writer for scores and everything derived from them.

One submission updates the score record, the drawing's leaderboard, the
user's quiz history and the player aggregates (global and, when a
community is given, community-scoped) in one database transaction.

Concurrency is optimistic. The read phase loads every versioned row the
write phase will touch (score, leaderboard head, player stats); the
mapper's version counter turns each UPDATE into a compare-and-swap, and
concurrent first inserts collide on unique constraints. A conflict rolls
the whole transaction back and the submission is replayed from the read
phase, with a linear backoff, up to ``SCORE_SUBMIT_MAX_RETRIES`` attempts.
"""
from typing import Dict, NamedTuple, Optional

from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from drawquiz import db, socketio
from drawquiz.models import (
    GLOBAL_SCOPE,
    Leaderboard,
    LeaderboardEntry,
    PlayerStats,
    QuizHistoryEntry,
    Score,
    now_ms,
)
from .leaderboards import LEADERBOARD_ORDER, invalidate_ranking_cache

# Lost races (version mismatch, duplicate first insert) and transient
# storage failures such as a locked database
RETRYABLE_ERRORS = (StaleDataError, IntegrityError, OperationalError)


class ScoreSubmissionError(Exception):
    """The score could not be stored within the retry budget; nothing was written."""


class _LedgerState(NamedTuple):
    existing: Optional[Score]
    leaderboard: Optional[Leaderboard]
    stats: Dict[str, Optional[PlayerStats]]


def answered_drawing_ids(user_id: str):
    """Selectable of drawing ids the user already holds a score on."""
    return select(Score.drawing_id).where(Score.user_id == user_id)


def submit_score(score: dict, community_name: Optional[str] = None) -> int:
    """Record a guess score and return the id of the stored best score.

    ``score`` carries ``drawing_id``, ``user_id``, ``score``, ``base_score``,
    ``time_bonus``, ``elapsed_time``, ``viewed_strokes`` and optionally
    ``submitted_at`` (ms). A score that does not beat the stored best is a
    no-op returning the existing record's id.
    """
    cfg = current_app.config
    max_retries = max(1, int(cfg.get('SCORE_SUBMIT_MAX_RETRIES', 3)))
    backoff = float(cfg.get('SCORE_RETRY_BACKOFF_SEC', 0.01))
    scopes = [GLOBAL_SCOPE] + ([community_name] if community_name else [])
    drawing_id, user_id = score['drawing_id'], score['user_id']

    last_error = None
    for attempt in range(1, max_retries + 1):
        try:
            state = _read_state(drawing_id, user_id, scopes)
            if state.existing is not None and score['score'] <= state.existing.score:
                current_app.logger.info(
                    f"[score-skip] drawing={drawing_id} user={user_id} score={score['score']} best={state.existing.score}"
                )
                return state.existing.id
            score_id = _write_state(score, state, community_name)
            db.session.commit()
        except RETRYABLE_ERRORS as exc:
            db.session.rollback()
            last_error = exc
            current_app.logger.warning(
                f"[score-conflict] drawing={drawing_id} user={user_id} attempt={attempt}/{max_retries} error={type(exc).__name__}"
            )
            if attempt < max_retries:
                socketio.sleep(backoff * attempt)
            continue
        except SQLAlchemyError:
            db.session.rollback()
            raise

        invalidate_ranking_cache(community_name)
        current_app.logger.info(
            f"[score-saved] drawing={drawing_id} user={user_id} score={score['score']} attempt={attempt} subreddit={community_name}"
        )
        socketio.emit('leaderboard_update', {'drawingId': drawing_id}, to=f"drawing:{drawing_id}", namespace='/ws')
        return score_id

    current_app.logger.error(
        f"[score-failed] drawing={drawing_id} user={user_id} gave up after {max_retries} attempts"
    )
    raise ScoreSubmissionError(
        f'Failed to save score for drawing {drawing_id} after {max_retries} attempts'
    ) from last_error


def _read_state(drawing_id, user_id, scopes) -> _LedgerState:
    # populate_existing: versions must reflect the database now, not an
    # earlier load in this session
    existing = (
        Score.query.filter_by(drawing_id=drawing_id, user_id=user_id)
        .populate_existing()
        .first()
    )
    leaderboard = db.session.get(Leaderboard, drawing_id, populate_existing=True)
    stats = {
        scope: PlayerStats.query.filter_by(community=scope, user_id=user_id).populate_existing().first()
        for scope in scopes
    }
    return _LedgerState(existing, leaderboard, stats)


def _write_state(score: dict, state: _LedgerState, community_name: Optional[str]) -> int:
    drawing_id, user_id = score['drawing_id'], score['user_id']
    submitted_at = score.get('submitted_at') or now_ms()
    first_time = state.existing is None
    delta = score['score'] - (0 if first_time else state.existing.score)

    record = state.existing or Score(drawing_id=drawing_id, user_id=user_id)
    record.score = score['score']
    record.base_score = score['base_score']
    record.time_bonus = score['time_bonus']
    record.elapsed_time = float(score.get('elapsed_time') or 0)
    record.viewed_strokes = float(score.get('viewed_strokes') or 0)
    record.submitted_at = submitted_at
    db.session.add(record)

    leaderboard = state.leaderboard or Leaderboard(drawing_id=drawing_id, submissions=0)
    leaderboard.submissions = (leaderboard.submissions or 0) + 1
    db.session.add(leaderboard)

    entry = LeaderboardEntry.query.filter_by(drawing_id=drawing_id, user_id=user_id).first()
    if entry is None:
        entry = LeaderboardEntry(drawing_id=drawing_id, user_id=user_id)
        db.session.add(entry)
    entry.score = score['score']
    entry.submitted_at = submitted_at
    _trim_leaderboard(drawing_id)

    db.session.add(QuizHistoryEntry(
        user_id=user_id,
        drawing_id=drawing_id,
        score=score['score'],
        base_score=score['base_score'],
        time_bonus=score['time_bonus'],
        submitted_at=submitted_at,
        community=community_name or None,
    ))

    updated_at = now_ms()
    for scope, stats in state.stats.items():
        if stats is None:
            stats = PlayerStats(community=scope, user_id=user_id, total_score=0, quiz_count=0)
            db.session.add(stats)
        stats.total_score = (stats.total_score or 0) + delta
        if first_time:
            stats.quiz_count = (stats.quiz_count or 0) + 1
        stats.last_updated = updated_at

    db.session.flush()
    return record.id


def _trim_leaderboard(drawing_id) -> None:
    size = int(current_app.config.get('LEADERBOARD_SIZE', 5))
    overflow = (
        LeaderboardEntry.query.filter_by(drawing_id=drawing_id)
        .order_by(*LEADERBOARD_ORDER)
        .offset(size)
        .all()
    )
    for entry in overflow:
        db.session.delete(entry)
