from functools import wraps
from flask import abort, jsonify, request
from flask_login import current_user

def _deny(status: int):
    if request.path.startswith("/api/"):
        return jsonify({"error": "forbidden", "message": "Sem permissão."}), status
    abort(status)

def require_active(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if getattr(current_user, "status", None) != "active":
            return _deny(403)
        return f(*args, **kwargs)
    return wrapper
