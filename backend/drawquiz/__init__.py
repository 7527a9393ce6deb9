from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from drawquiz.main import main
    flask_app.register_blueprint(main)

    from drawquiz.api.quiz import quiz
    # Mount quiz routes under /api to match the game client
    flask_app.register_blueprint(quiz, url_prefix='/api')

    from drawquiz.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    # Platform identity arrives as request headers; there is no password login
    from drawquiz.models import User

    @login_manager.request_loader
    def load_user_from_request(req):
        user_id = (req.headers.get('X-User-Id') or '').strip()
        if not user_id or user_id == 'anonymous':
            return None
        return User.get_or_create(user_id, avatar_url=req.headers.get('X-User-Avatar'))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'error': 'Login required'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from drawquiz.services.drawings import save_drawing
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed a few one-stroke drawings so the quiz has something to serve
            samples = [('cat', 'A common pet'), ('sun', None), ('tree', 'It has leaves')]
            for answer, hint in samples:
                strokes = [{
                    'points': [{'x': 40, 'y': 40}, {'x': 180, 'y': 180}, {'x': 320, 'y': 40}],
                    'color': '#000000',
                    'width': 4,
                    'timestamp': 0,
                }]
                save_drawing({'answer': answer, 'hint': hint, 'strokes': strokes}, created_by='seed')

            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
