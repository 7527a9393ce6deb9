import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///drawquiz.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = [o for o in os.environ.get('CORS_ORIGINS', '').split(',') if o] or [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    # Score ledger: attempts per submission and linear backoff unit (seconds)
    SCORE_SUBMIT_MAX_RETRIES = int(os.environ.get('SCORE_SUBMIT_MAX_RETRIES', '3'))
    SCORE_RETRY_BACKOFF_SEC = float(os.environ.get('SCORE_RETRY_BACKOFF_SEC', '0.01'))
    # Entries kept per drawing leaderboard
    LEADERBOARD_SIZE = int(os.environ.get('LEADERBOARD_SIZE', '5'))
    # Ranking snapshot cache (seconds). 0 disables.
    RANKING_CACHE_TTL_SEC = int(os.environ.get('RANKING_CACHE_TTL_SEC', '30'))
    RANKING_DEFAULT_LIMIT = int(os.environ.get('RANKING_DEFAULT_LIMIT', '50'))
    RANKING_MAX_LIMIT = int(os.environ.get('RANKING_MAX_LIMIT', '100'))
    HISTORY_DEFAULT_LIMIT = int(os.environ.get('HISTORY_DEFAULT_LIMIT', '10'))
    HISTORY_MAX_LIMIT = int(os.environ.get('HISTORY_MAX_LIMIT', '50'))
    QUIZ_BROWSE_DEFAULT_LIMIT = int(os.environ.get('QUIZ_BROWSE_DEFAULT_LIMIT', '20'))
