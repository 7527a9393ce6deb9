from drawquiz import db
from flask_login import UserMixin
from sqlalchemy.exc import IntegrityError
import time

# Community value used for the global player_stats scope
GLOBAL_SCOPE = ''


def now_ms() -> int:
    return int(time.time() * 1000)


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    # Platform username; the host supplies it, we never mint ids
    id = db.Column(db.String(64), primary_key=True)
    avatar_url = db.Column(db.String(512), nullable=True)
    created_at = db.Column(db.BigInteger, nullable=False, default=now_ms)

    @classmethod
    def get_or_create(cls, user_id, avatar_url=None):
        user = db.session.get(cls, user_id)
        if user:
            if avatar_url and user.avatar_url != avatar_url:
                user.avatar_url = avatar_url
                db.session.commit()
            return user
        user = cls(id=user_id, avatar_url=avatar_url or None)
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError:
            # Another request registered the same user first
            db.session.rollback()
            user = db.session.get(cls, user_id)
        return user

    def to_profile(self):
        profile = {
            'userId': self.id,
            'displayName': f'u/{self.id}',
        }
        if self.avatar_url:
            profile['avatarUrl'] = self.avatar_url
        return profile


class Drawing(db.Model):
    __tablename__ = 'drawing'
    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    created_by = db.Column(db.String(64), nullable=False, index=True)
    created_at = db.Column(db.BigInteger, nullable=False, default=now_ms, index=True)
    answer = db.Column(db.String(64), nullable=False)
    hint = db.Column(db.String(128), nullable=True)
    total_strokes = db.Column(db.Integer, nullable=False)
    subreddit_name = db.Column(db.String(64), nullable=True, index=True)
    # Stroke payload lives in its own table so listings never load it
    strokes_payload = db.relationship('DrawingStrokes', uselist=False, lazy='select',
                                      back_populates='drawing')

    def to_dict(self, strokes=None):
        data = {
            'id': self.id,
            'createdBy': self.created_by,
            'createdAt': self.created_at,
            'answer': self.answer,
            'strokes': strokes if strokes is not None else [],
            'totalStrokes': self.total_strokes,
        }
        if self.hint:
            data['hint'] = self.hint
        return data

    def to_summary(self):
        return {
            'drawingId': self.id,
            'createdBy': self.created_by,
            'postedAt': self.created_at,
        }


class DrawingStrokes(db.Model):
    __tablename__ = 'drawing_strokes'
    drawing_id = db.Column(db.Integer, db.ForeignKey('drawing.id'), primary_key=True)
    payload = db.Column(db.Text, nullable=False)
    drawing = db.relationship('Drawing', back_populates='strokes_payload')


class Score(db.Model):
    """Best score a user reached on one drawing."""
    __tablename__ = 'score'
    __table_args__ = (db.UniqueConstraint('drawing_id', 'user_id', name='uq_score_drawing_user'),)
    id = db.Column(db.Integer, primary_key=True)
    drawing_id = db.Column(db.Integer, db.ForeignKey('drawing.id'), nullable=False, index=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    score = db.Column(db.Integer, nullable=False)
    base_score = db.Column(db.Integer, nullable=False)
    time_bonus = db.Column(db.Integer, nullable=False)
    elapsed_time = db.Column(db.Float, nullable=False)
    viewed_strokes = db.Column(db.Float, nullable=False)
    submitted_at = db.Column(db.BigInteger, nullable=False)
    version_id = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {'version_id_col': version_id}

    def to_dict(self):
        return {
            'id': self.id,
            'drawingId': self.drawing_id,
            'userId': self.user_id,
            'score': self.score,
            'baseScore': self.base_score,
            'timeBonus': self.time_bonus,
            'elapsedTime': self.elapsed_time,
            'viewedStrokes': self.viewed_strokes,
            'submittedAt': self.submitted_at,
        }


class Leaderboard(db.Model):
    """Per-drawing leaderboard head.

    Every write to a drawing's entries bumps ``submissions`` so the
    version check aborts writers that raced on the same drawing.
    """
    __tablename__ = 'leaderboard'
    drawing_id = db.Column(db.Integer, db.ForeignKey('drawing.id'), primary_key=True)
    submissions = db.Column(db.Integer, nullable=False, default=0)
    version_id = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {'version_id_col': version_id}


class LeaderboardEntry(db.Model):
    __tablename__ = 'leaderboard_entry'
    __table_args__ = (db.UniqueConstraint('drawing_id', 'user_id', name='uq_leaderboard_drawing_user'),)
    id = db.Column(db.Integer, primary_key=True)
    drawing_id = db.Column(db.Integer, db.ForeignKey('leaderboard.drawing_id'), nullable=False, index=True)
    user_id = db.Column(db.String(64), nullable=False)
    score = db.Column(db.Integer, nullable=False)
    submitted_at = db.Column(db.BigInteger, nullable=False)


class QuizHistoryEntry(db.Model):
    __tablename__ = 'quiz_history_entry'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    drawing_id = db.Column(db.Integer, db.ForeignKey('drawing.id'), nullable=False)
    score = db.Column(db.Integer, nullable=False)
    base_score = db.Column(db.Integer, nullable=False)
    time_bonus = db.Column(db.Integer, nullable=False)
    submitted_at = db.Column(db.BigInteger, nullable=False, index=True)
    community = db.Column(db.String(64), nullable=True)
    drawing = db.relationship('Drawing')


class PlayerStats(db.Model):
    """Running totals for one user in one scope (global or a community)."""
    __tablename__ = 'player_stats'
    __table_args__ = (db.UniqueConstraint('community', 'user_id', name='uq_player_stats_scope_user'),)
    id = db.Column(db.Integer, primary_key=True)
    community = db.Column(db.String(64), nullable=False, default=GLOBAL_SCOPE, index=True)
    user_id = db.Column(db.String(64), nullable=False)
    total_score = db.Column(db.Integer, nullable=False, default=0, index=True)
    quiz_count = db.Column(db.Integer, nullable=False, default=0)
    last_updated = db.Column(db.BigInteger, nullable=False, default=now_ms)
    version_id = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {'version_id_col': version_id}

    def to_dict(self, rank=None):
        return {
            'userId': self.user_id,
            'totalScore': self.total_score,
            'quizCount': self.quiz_count,
            'lastUpdated': self.last_updated,
            'rank': rank,
        }
