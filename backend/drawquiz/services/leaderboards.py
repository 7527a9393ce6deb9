import time
from typing import Dict, Iterable, List, Optional, Tuple

from flask import current_app
from sqlalchemy import and_, or_

from drawquiz import db
from drawquiz.models import GLOBAL_SCOPE, LeaderboardEntry, PlayerStats, Score

# Highest score first; the earlier submission wins a tie
LEADERBOARD_ORDER = (LeaderboardEntry.score.desc(), LeaderboardEntry.submitted_at.asc(), LeaderboardEntry.user_id.asc())
RANKING_ORDER = (PlayerStats.total_score.desc(), PlayerStats.last_updated.asc(), PlayerStats.user_id.asc())

# (community, limit) -> (stored_at, generation, snapshot); runtime-only
_ranking_cache: Dict[Tuple[str, int], Tuple[float, int, dict]] = {}
# community -> bumped by every invalidation
_ranking_generations: Dict[str, int] = {}


def get_scores_by_drawing(drawing_id) -> List[Score]:
    """Full score records for the users retained on a drawing's leaderboard, best first."""
    rows = (
        db.session.query(Score)
        .join(LeaderboardEntry, and_(
            LeaderboardEntry.drawing_id == Score.drawing_id,
            LeaderboardEntry.user_id == Score.user_id,
        ))
        .filter(LeaderboardEntry.drawing_id == drawing_id)
        .order_by(*LEADERBOARD_ORDER)
        .all()
    )
    return rows


def get_top_scores(drawing_id, limit: int = 5) -> List[Score]:
    return get_scores_by_drawing(drawing_id)[:max(0, limit)]


def get_drawing_ranks(drawing_ids: Iterable[int], user_id: str) -> Dict[int, int]:
    """Current 1-based leaderboard position of ``user_id`` per drawing.

    Drawings where the user is not among the retained entries are absent
    from the result.
    """
    drawing_ids = set(drawing_ids)
    if not drawing_ids:
        return {}
    entries = (
        LeaderboardEntry.query.filter(LeaderboardEntry.drawing_id.in_(drawing_ids))
        .order_by(LeaderboardEntry.drawing_id, *LEADERBOARD_ORDER)
        .all()
    )
    ranks: Dict[int, int] = {}
    position: Dict[int, int] = {}
    for entry in entries:
        position[entry.drawing_id] = position.get(entry.drawing_id, 0) + 1
        if entry.user_id == user_id:
            ranks[entry.drawing_id] = position[entry.drawing_id]
    return ranks


def _scope(community: Optional[str]) -> str:
    return community or GLOBAL_SCOPE


def get_ranking(community: Optional[str] = None, limit: int = 50, current_user_id: Optional[str] = None) -> dict:
    """Players of a scope ordered by total score.

    Returns ``{'entries': [...], 'total': n}`` plus ``currentUserRank`` when
    ``current_user_id`` has stats in the scope. The rank is looked up over
    the whole scope, not only the returned page.
    """
    scope = _scope(community)
    snapshot = _cached_snapshot(scope, limit)
    if snapshot is None:
        generation = _ranking_generations.get(scope, 0)
        query = PlayerStats.query.filter_by(community=scope)
        rows = query.order_by(*RANKING_ORDER).limit(max(0, limit)).all()
        snapshot = {
            'entries': [row.to_dict(rank=i) for i, row in enumerate(rows, start=1)],
            'total': query.count(),
        }
        _store_snapshot(scope, limit, generation, snapshot)

    result = {'entries': [dict(e) for e in snapshot['entries']], 'total': snapshot['total']}
    if current_user_id:
        rank = get_user_rank(current_user_id, community)
        if rank is not None:
            result['currentUserRank'] = rank
    return result


def get_user_rank(user_id: str, community: Optional[str] = None) -> Optional[int]:
    scope = _scope(community)
    mine = PlayerStats.query.filter_by(community=scope, user_id=user_id).first()
    if mine is None:
        return None
    ahead = PlayerStats.query.filter(
        PlayerStats.community == scope,
        or_(
            PlayerStats.total_score > mine.total_score,
            and_(PlayerStats.total_score == mine.total_score, PlayerStats.last_updated < mine.last_updated),
            and_(
                PlayerStats.total_score == mine.total_score,
                PlayerStats.last_updated == mine.last_updated,
                PlayerStats.user_id < mine.user_id,
            ),
        ),
    ).count()
    return ahead + 1


def _cached_snapshot(scope: str, limit: int) -> Optional[dict]:
    ttl = int(current_app.config.get('RANKING_CACHE_TTL_SEC', 0))
    cached = _ranking_cache.get((scope, limit))
    if not ttl or cached is None:
        return None
    stored_at, generation, snapshot = cached
    if generation != _ranking_generations.get(scope, 0) or time.time() - stored_at > ttl:
        _ranking_cache.pop((scope, limit), None)
        return None
    current_app.logger.debug(f"[ranking-cache-hit] scope={scope or 'global'} limit={limit}")
    return snapshot


def _store_snapshot(scope: str, limit: int, generation: int, snapshot: dict) -> None:
    if not int(current_app.config.get('RANKING_CACHE_TTL_SEC', 0)):
        return
    # A score landed while the snapshot was being built
    if generation != _ranking_generations.get(scope, 0):
        return
    _ranking_cache[(scope, limit)] = (time.time(), generation, snapshot)


def invalidate_ranking_cache(community: Optional[str] = None) -> None:
    """Drop cached global snapshots, and the community's when one is given.

    Bumping the generation also discards snapshots that readers are
    building right now from rows read before the change.
    """
    scopes = {GLOBAL_SCOPE, _scope(community)}
    for scope in scopes:
        _ranking_generations[scope] = _ranking_generations.get(scope, 0) + 1
    for key in [k for k in _ranking_cache if k[0] in scopes]:
        _ranking_cache.pop(key, None)


def clear_ranking_cache() -> None:
    _ranking_cache.clear()
    _ranking_generations.clear()
