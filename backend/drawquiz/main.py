from flask import Blueprint, jsonify, request
from flask_login import current_user

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the drawing quiz server!'})

@main.route('/api/init')
def init():
    post_id = request.headers.get('X-Post-Id')
    if not post_id:
        return jsonify({'status': 'error', 'message': 'postId is required but missing from context'}), 400
    return jsonify({
        'type': 'init',
        'postId': post_id,
        'gameState': 'menu',
        'userId': current_user.id if current_user.is_authenticated else 'anonymous',
    })
