# medreminder/helpers.py
import time

from flask import current_app, jsonify


def api_response(success, message, data=None, status_code=200):
    return jsonify({
        "success": success,
        "message": message,
        "data": data
    }), status_code


def now_millis() -> int:
    return int(time.time() * 1000)


def get_store():
    return current_app.extensions["medreminder.store"]


def get_identity():
    return current_app.extensions["medreminder.identity"]


def get_sessions():
    return current_app.extensions["medreminder.sessions"]


def get_state_store():
    return current_app.extensions["medreminder.state"]
