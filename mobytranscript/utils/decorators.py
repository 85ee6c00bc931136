from functools import wraps
from flask import jsonify, request


def json_object_required(view):
    """Reject bodies that are not a JSON object before any form reads them."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not isinstance(request.get_json(silent=True), dict):
            return jsonify({"error": "Request body must be a JSON object"}), 400
        return view(*args, **kwargs)
    return wrapped
