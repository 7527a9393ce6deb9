import re
from typing import List

MIN_STROKES = 1
MAX_STROKES = 1000
MIN_COORDINATE = 0
MAX_COORDINATE = 360
MIN_ANSWER_LENGTH = 1
MAX_ANSWER_LENGTH = 50
MAX_HINT_LENGTH = 100

_TAG_RE = re.compile(r'<[^>]*>')


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def sanitize_text(text) -> str:
    """Trim and strip HTML tags from user supplied text."""
    return _TAG_RE.sub('', (text or '').strip())


def validate_stroke_count(count: int) -> List[str]:
    errors = []
    if count < MIN_STROKES:
        errors.append(f'Drawing must have at least {MIN_STROKES} stroke')
    if count > MAX_STROKES:
        errors.append(f'Drawing cannot exceed {MAX_STROKES} strokes')
    return errors


def validate_point(point) -> List[str]:
    if not isinstance(point, dict) or not _is_number(point.get('x')) or not _is_number(point.get('y')):
        return ['Point must have numeric x and y']
    errors = []
    if not MIN_COORDINATE <= point['x'] <= MAX_COORDINATE:
        errors.append(f'X coordinate must be between {MIN_COORDINATE} and {MAX_COORDINATE}')
    if not MIN_COORDINATE <= point['y'] <= MAX_COORDINATE:
        errors.append(f'Y coordinate must be between {MIN_COORDINATE} and {MAX_COORDINATE}')
    return errors


def validate_stroke(stroke) -> List[str]:
    if not isinstance(stroke, dict):
        return ['Stroke must be an object']
    errors = []
    points = stroke.get('points')
    if not isinstance(points, list) or not points:
        errors.append('Stroke must contain at least one point')
        points = []
    for i, point in enumerate(points):
        point_errors = validate_point(point)
        if point_errors:
            errors.append(f"Point {i}: {', '.join(point_errors)}")
    color = stroke.get('color')
    if not color or not isinstance(color, str):
        errors.append('Stroke must have a valid color')
    width = stroke.get('width')
    if not _is_number(width) or width <= 0:
        errors.append('Stroke must have a valid width')
    timestamp = stroke.get('timestamp')
    if not _is_number(timestamp) or timestamp < 0:
        errors.append('Stroke must have a valid timestamp')
    return errors


def validate_answer(answer) -> List[str]:
    # Measure what gets stored, after tags are stripped
    trimmed = sanitize_text(answer) if isinstance(answer, str) else ''
    errors = []
    if len(trimmed) < MIN_ANSWER_LENGTH:
        errors.append(f'Answer must be at least {MIN_ANSWER_LENGTH} character')
    if len(trimmed) > MAX_ANSWER_LENGTH:
        errors.append(f'Answer cannot exceed {MAX_ANSWER_LENGTH} characters')
    return errors


def validate_hint(hint) -> List[str]:
    if not isinstance(hint, str):
        return ['Hint must be text']
    if len(sanitize_text(hint)) > MAX_HINT_LENGTH:
        return [f'Hint cannot exceed {MAX_HINT_LENGTH} characters']
    return []


def validate_drawing(drawing) -> List[str]:
    """Return every problem found in a drawing payload; empty means valid."""
    if not isinstance(drawing, dict):
        return ['Drawing must be an object']
    strokes = drawing.get('strokes')
    if not isinstance(strokes, list):
        return ['Drawing must contain strokes array']

    errors = validate_stroke_count(len(strokes))
    for i, stroke in enumerate(strokes):
        stroke_errors = validate_stroke(stroke)
        if stroke_errors:
            errors.append(f"Stroke {i}: {', '.join(stroke_errors)}")

    errors.extend(validate_answer(drawing.get('answer')))
    hint = drawing.get('hint')
    if hint:
        errors.extend(validate_hint(hint))
    return errors
