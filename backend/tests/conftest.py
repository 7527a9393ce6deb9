import os
import sys
import pytest
from flask import g

# Ensure the backend root (containing the `drawquiz` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from drawquiz import create_app, db, socketio
from drawquiz.services.leaderboards import clear_ranking_cache


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = ['http://localhost:5173']
    SCORE_SUBMIT_MAX_RETRIES = 3
    SCORE_RETRY_BACKOFF_SEC = 0
    LEADERBOARD_SIZE = 5
    RANKING_CACHE_TTL_SEC = 30
    RANKING_DEFAULT_LIMIT = 50
    RANKING_MAX_LIMIT = 100
    HISTORY_DEFAULT_LIMIT = 10
    HISTORY_MAX_LIMIT = 50
    QUIZ_BROWSE_DEFAULT_LIMIT = 20


def _make_app(config_class):
    application = create_app(config_class)
    clear_ranking_cache()
    with application.app_context():
        # Ensure models are imported so tables are created
        import drawquiz.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()
    clear_ranking_cache()


@pytest.fixture()
def flask_app():
    yield from _make_app(TestConfig)


@pytest.fixture()
def file_app(tmp_path):
    """App on a file-backed SQLite database.

    Each app context gets its own session and connection, which lets a
    test interleave two real submissions.
    """
    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'race.db'}"

    yield from _make_app(FileConfig)


@pytest.fixture()
def client(flask_app):
    # Requests reuse the fixture's app context, so g outlives a request;
    # drop the user Flask-Login cached there by the previous one
    @flask_app.before_request
    def forget_previous_user():
        g.pop('_login_user', None)

    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


def make_strokes(count, x=10, y=10):
    return [
        {
            'points': [{'x': x, 'y': y}, {'x': x + 5, 'y': y + 5}],
            'color': '#000000',
            'width': 3,
            'timestamp': i * 100,
        }
        for i in range(count)
    ]


@pytest.fixture()
def make_drawing(flask_app):
    from drawquiz.services.drawings import save_drawing

    def _make(answer='cat', strokes=10, created_by='artist', subreddit_name=None, hint=None):
        return save_drawing(
            {'answer': answer, 'hint': hint, 'strokes': make_strokes(strokes)},
            created_by=created_by,
            subreddit_name=subreddit_name,
        )
    return _make


def score_payload(drawing_id, user_id, score, submitted_at=None, base_score=None, time_bonus=0):
    return {
        'drawing_id': drawing_id,
        'user_id': user_id,
        'score': score,
        'base_score': score - time_bonus if base_score is None else base_score,
        'time_bonus': time_bonus,
        'elapsed_time': 30.0,
        'viewed_strokes': 2.5,
        'submitted_at': submitted_at,
    }
