"""Compact JSON encoding for stroke payloads.

Strokes are stored with one-letter keys (``p`` points, ``c`` color,
``w`` width, ``t`` timestamp) and coordinates rounded to one decimal.
"""
import json


def round_coordinate(value) -> float:
    return round(float(value) * 10) / 10


def compress_stroke(stroke: dict) -> dict:
    return {
        'p': [{'x': round_coordinate(pt['x']), 'y': round_coordinate(pt['y'])} for pt in stroke['points']],
        'c': stroke['color'],
        'w': stroke['width'],
        't': stroke['timestamp'],
    }


def decompress_stroke(compressed: dict) -> dict:
    return {
        'points': [{'x': pt['x'], 'y': pt['y']} for pt in compressed['p']],
        'color': compressed['c'],
        'width': compressed['w'],
        'timestamp': compressed['t'],
    }


def compress_strokes(strokes) -> str:
    return json.dumps([compress_stroke(s) for s in strokes], separators=(',', ':'))


def decompress_strokes(payload: str) -> list:
    return [decompress_stroke(s) for s in json.loads(payload or '[]')]
