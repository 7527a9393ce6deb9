from flask_socketio import join_room, leave_room, emit
from drawquiz import socketio


def _drawing_room(data):
    drawing_id = (data or {}).get('drawingId')
    if drawing_id is None or str(drawing_id).strip() == '':
        return None
    return f"drawing:{drawing_id}"


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_drawing(data):
    """Subscribe to leaderboard_update events for one drawing."""
    room = _drawing_room(data)
    if not room:
        emit('error', {'message': 'drawingId is required'})
        return
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_drawing(data):
    room = _drawing_room(data)
    if not room:
        emit('error', {'message': 'drawingId is required'})
        return
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('join_drawing', handle_join_drawing, namespace='/ws')
    socketio.on_event('leave_drawing', handle_leave_drawing, namespace='/ws')
    socketio.on_event('ping', handle_ping, namespace='/ws')

    if testing:
        socketio.on_event('connect', handle_connect, namespace='/')
        socketio.on_event('join_drawing', handle_join_drawing, namespace='/')
        socketio.on_event('leave_drawing', handle_leave_drawing, namespace='/')
        socketio.on_event('ping', handle_ping, namespace='/')
