import random
from typing import Optional

from flask import current_app

from drawquiz import db
from drawquiz.models import Drawing, DrawingStrokes, Leaderboard, now_ms
from .compression import compress_strokes, decompress_strokes
from .ledger import answered_drawing_ids
from .validation import sanitize_text


def save_drawing(data: dict, created_by: str, subreddit_name: Optional[str] = None) -> int:
    """Persist a validated drawing and return its id.

    Metadata and the compressed stroke payload go to separate tables; the
    drawing's (empty) leaderboard head is created alongside so score
    submissions only ever update it.
    """
    strokes = data.get('strokes') or []
    hint = sanitize_text(data.get('hint')) or None
    drawing = Drawing(
        created_by=created_by,
        created_at=data.get('createdAt') or now_ms(),
        answer=sanitize_text(data.get('answer')),
        hint=hint,
        total_strokes=len(strokes),
        subreddit_name=subreddit_name or None,
    )
    drawing.strokes_payload = DrawingStrokes(payload=compress_strokes(strokes))
    db.session.add(drawing)
    db.session.flush()
    db.session.add(Leaderboard(drawing_id=drawing.id, submissions=0))
    db.session.commit()
    current_app.logger.info(
        f"[drawing-saved] drawing={drawing.id} by={created_by} strokes={drawing.total_strokes} subreddit={subreddit_name}"
    )
    return drawing.id


def get_drawing_record(drawing_id) -> Optional[Drawing]:
    try:
        drawing_id = int(drawing_id)
    except (TypeError, ValueError):
        return None
    return db.session.get(Drawing, drawing_id)


def load_drawing(drawing: Drawing) -> dict:
    payload = drawing.strokes_payload.payload if drawing.strokes_payload else '[]'
    return drawing.to_dict(strokes=decompress_strokes(payload))


def get_drawing(drawing_id) -> Optional[dict]:
    drawing = get_drawing_record(drawing_id)
    if drawing is None:
        return None
    return load_drawing(drawing)


def get_random_drawing(exclude_answered_by: Optional[str] = None) -> Optional[dict]:
    """Uniformly pick a drawing, skipping ones the given user already scored on."""
    query = db.session.query(Drawing.id)
    if exclude_answered_by:
        query = query.filter(Drawing.id.not_in(answered_drawing_ids(exclude_answered_by)))
    candidates = [row.id for row in query.all()]
    if not candidates:
        return None
    return get_drawing(random.choice(candidates))


def list_community_drawings(subreddit_name: str, page: int = 1, limit: int = 20) -> dict:
    query = Drawing.query.filter_by(subreddit_name=subreddit_name)
    total = query.count()
    drawings = (
        query.order_by(Drawing.created_at.desc(), Drawing.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {'quizzes': [d.to_summary() for d in drawings], 'total': total}
