from typing import Dict, Iterable

from drawquiz.models import User


def _fallback_profile(user_id: str) -> dict:
    return {'userId': user_id, 'displayName': f'u/{user_id}'}


def get_user_profile(user_id: str) -> dict:
    return get_user_profiles([user_id])[user_id]


def get_user_profiles(user_ids: Iterable[str]) -> Dict[str, dict]:
    """Display metadata per user id; unknown users get a name-only profile."""
    user_ids = list(dict.fromkeys(user_ids))
    if not user_ids:
        return {}
    users = {u.id: u for u in User.query.filter(User.id.in_(user_ids)).all()}
    return {
        uid: users[uid].to_profile() if uid in users else _fallback_profile(uid)
        for uid in user_ids
    }


def with_avatars(entries, key: str = 'userId'):
    """Attach ``avatarUrl`` to ranking/leaderboard rows in place."""
    profiles = get_user_profiles(e[key] for e in entries)
    for entry in entries:
        avatar = profiles.get(entry[key], {}).get('avatarUrl')
        if avatar:
            entry['avatarUrl'] = avatar
    return entries
