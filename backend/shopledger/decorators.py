# Overview: Request decorators for API routes.

from functools import wraps

from flask import current_app, jsonify, request

from .errors import LedgerError, PersistenceFailure, ValidationError


def json_errors(action: str):
    """
    Translate service errors into JSON responses.

    - LedgerError subclasses -> their status_code with {"error", "code", "details"}
    - PersistenceFailure     -> 500 generic notice, logged
    - anything else          -> 500 "Internal server error", logged
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except PersistenceFailure:
                current_app.logger.exception("Storage failure while trying to %s", action)
                return jsonify({"error": "Operation failed", "code": "PersistenceFailure"}), 500
            except LedgerError as e:
                return jsonify(e.to_dict()), e.status_code
            except Exception:
                current_app.logger.exception("Failed to %s", action)
                return jsonify({"error": "Internal server error"}), 500

        return decorated_function

    return decorator


def json_body() -> dict:
    """Request JSON object; a missing body is treated as {}."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
