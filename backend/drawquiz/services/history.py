from drawquiz.models import QuizHistoryEntry
from .leaderboards import get_drawing_ranks


def get_quiz_history(user_id: str, page: int = 1, limit: int = 10) -> dict:
    """Most-recent-first page of a user's quiz log.

    Ranks are not stored with the log; each entry's rank is read from the
    drawing's live leaderboard and is ``None`` once the user drops out of it.
    """
    page = max(1, page)
    query = QuizHistoryEntry.query.filter_by(user_id=user_id)
    total = query.count()
    rows = (
        query.order_by(QuizHistoryEntry.submitted_at.desc(), QuizHistoryEntry.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    ranks = get_drawing_ranks({row.drawing_id for row in rows}, user_id)
    entries = []
    for row in rows:
        entries.append({
            'drawingId': row.drawing_id,
            'drawingAnswer': row.drawing.answer if row.drawing else None,
            'score': row.score,
            'baseScore': row.base_score,
            'timeBonus': row.time_bonus,
            'submittedAt': row.submitted_at,
            'rank': ranks.get(row.drawing_id),
            'subredditName': row.community,
        })
    return {'entries': entries, 'total': total}
