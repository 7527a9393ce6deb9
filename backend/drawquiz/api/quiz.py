from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user

from drawquiz.services.drawings import (
    get_drawing,
    get_drawing_record,
    get_random_drawing,
    list_community_drawings,
    save_drawing,
)
from drawquiz.services.history import get_quiz_history
from drawquiz.services.leaderboards import get_ranking, get_top_scores
from drawquiz.services.ledger import ScoreSubmissionError, submit_score
from drawquiz.services.profiles import get_user_profile, get_user_profiles, with_avatars
from drawquiz.services.scoring import is_correct_guess, score_guess
from drawquiz.services.validation import sanitize_text, validate_drawing


quiz = Blueprint('quiz', __name__)


def _int_arg(name: str, default: int, maximum: int = None) -> int:
    try:
        value = int(request.args.get(name, default))
    except (TypeError, ValueError):
        value = default
    value = max(1, value)
    if maximum is not None:
        value = min(value, maximum)
    return value


def _number(value):
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


def _community_context(default=None):
    name = (request.headers.get('X-Subreddit-Name') or '').strip()
    return name or default


def _current_user_id():
    return current_user.id if current_user.is_authenticated else None


@quiz.route('/drawing', methods=['GET'])
def fetch_drawing():
    drawing_id = request.args.get('drawingId')
    if drawing_id:
        drawing = get_drawing(drawing_id)
        if drawing is None:
            return jsonify({'error': 'Drawing not found'}), 404
    else:
        drawing = get_random_drawing(exclude_answered_by=_current_user_id())
    return jsonify({'type': 'getDrawing', 'drawing': drawing})


@quiz.route('/drawing', methods=['POST'])
@login_required
def create_drawing():
    data = request.get_json(silent=True) or {}
    drawing = data.get('drawing')
    errors = validate_drawing(drawing)
    if errors:
        return jsonify({'error': 'Invalid drawing', 'details': errors}), 400

    # Authorship and timing come from the server, never the payload
    fields = {'answer': drawing.get('answer'), 'hint': drawing.get('hint'), 'strokes': drawing['strokes']}
    drawing_id = save_drawing(fields, created_by=current_user.id, subreddit_name=_community_context())
    return jsonify({'type': 'saveDrawing', 'drawingId': drawing_id, 'success': True}), 201


@quiz.route('/guess', methods=['POST'])
@login_required
def submit_guess():
    data = request.get_json(silent=True) or {}
    guess = data.get('guess')
    elapsed_time = _number(data.get('elapsedTime'))
    viewed_strokes = _number(data.get('viewedStrokes'))
    if not isinstance(guess, str) or data.get('drawingId') is None or elapsed_time is None or viewed_strokes is None:
        return jsonify({'error': 'guess, drawingId, elapsedTime and viewedStrokes are required'}), 400

    drawing = get_drawing_record(data.get('drawingId'))
    if drawing is None:
        return jsonify({'error': 'Drawing not found'}), 404

    correct = is_correct_guess(sanitize_text(guess), drawing.answer)
    result = score_guess(correct, drawing.total_strokes, viewed_strokes, elapsed_time)
    if result.correct:
        try:
            submit_score({
                'drawing_id': drawing.id,
                'user_id': current_user.id,
                'score': result.score,
                'base_score': result.base_score,
                'time_bonus': result.time_bonus,
                'elapsed_time': elapsed_time,
                'viewed_strokes': viewed_strokes,
            }, community_name=_community_context(drawing.subreddit_name))
        except ScoreSubmissionError as exc:
            current_app.logger.error(f"[guess] drawing={drawing.id} user={current_user.id} {exc}")
            return jsonify({'error': 'Could not record your score, please try again'}), 503

    return jsonify({
        'type': 'submitGuess',
        'correct': result.correct,
        'answer': drawing.answer,
        'score': result.score,
        'baseScore': result.base_score,
        'timeBonus': result.time_bonus,
    })


@quiz.route('/leaderboard/<int:drawing_id>', methods=['GET'])
def drawing_leaderboard(drawing_id):
    if get_drawing_record(drawing_id) is None:
        return jsonify({'error': 'Drawing not found'}), 404
    scores = get_top_scores(drawing_id, limit=current_app.config.get('LEADERBOARD_SIZE', 5))
    profiles = get_user_profiles(s.user_id for s in scores)
    rows = []
    for s in scores:
        row = {
            'username': s.user_id,
            'score': s.score,
            'baseScore': s.base_score,
            'timeBonus': s.time_bonus,
            'timestamp': s.submitted_at,
        }
        avatar = profiles.get(s.user_id, {}).get('avatarUrl')
        if avatar:
            row['avatarUrl'] = avatar
        rows.append(row)
    return jsonify({'type': 'getLeaderboard', 'scores': rows})


@quiz.route('/leaderboard/global', methods=['GET'])
def global_leaderboard():
    cfg = current_app.config
    limit = _int_arg('limit', cfg.get('RANKING_DEFAULT_LIMIT', 50), cfg.get('RANKING_MAX_LIMIT', 100))
    ranking = get_ranking(limit=limit, current_user_id=_current_user_id())
    with_avatars(ranking['entries'])
    return jsonify({'type': 'getGlobalLeaderboard', **ranking})


@quiz.route('/subreddit/<string:name>/ranking', methods=['GET'])
def subreddit_ranking(name):
    cfg = current_app.config
    limit = _int_arg('limit', cfg.get('RANKING_DEFAULT_LIMIT', 50), cfg.get('RANKING_MAX_LIMIT', 100))
    ranking = get_ranking(community=name, limit=limit, current_user_id=_current_user_id())
    with_avatars(ranking['entries'])
    return jsonify({'type': 'getSubredditRanking', 'subredditName': name, **ranking})


@quiz.route('/subreddit/<string:name>/quizzes', methods=['GET'])
def subreddit_quizzes(name):
    cfg = current_app.config
    page = _int_arg('page', 1)
    limit = _int_arg('limit', cfg.get('QUIZ_BROWSE_DEFAULT_LIMIT', 20), cfg.get('RANKING_MAX_LIMIT', 100))
    listing = list_community_drawings(name, page=page, limit=limit)
    return jsonify({'type': 'getSubredditQuizzes', 'subredditName': name, 'page': page, 'limit': limit, **listing})


@quiz.route('/user/<string:user_id>/quiz-history', methods=['GET'])
def quiz_history(user_id):
    cfg = current_app.config
    page = _int_arg('page', 1)
    limit = _int_arg('limit', cfg.get('HISTORY_DEFAULT_LIMIT', 10), cfg.get('HISTORY_MAX_LIMIT', 50))
    history = get_quiz_history(user_id, page=page, limit=limit)
    return jsonify({'type': 'getQuizHistory', 'page': page, 'limit': limit, **history})


@quiz.route('/user/<string:user_id>/profile', methods=['GET'])
def user_profile(user_id):
    return jsonify(get_user_profile(user_id))
