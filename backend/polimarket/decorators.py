# Overview: Request decorators for API routes.

from functools import wraps
from flask import current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from .errors import ApiError, DatabaseError


def handle_api_errors(action: str):
    """
    Map core errors to stable JSON responses.

    - ApiError -> {"error", "code"} with the error's HTTP status
    - SQLAlchemyError escaping a read -> generic DatabaseError (500)
    - anything else -> logged with traceback, generic 500

    action is a short phrase used in the log line ("register movement").
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except ApiError as e:
                if e.status >= 500:
                    current_app.logger.error("Failed to %s: %s", action, e.message)
                body, status = e.to_response()
                return jsonify(body), status
            except SQLAlchemyError:
                current_app.logger.exception("Failed to %s", action)
                body, status = DatabaseError().to_response()
                return jsonify(body), status
            except Exception:
                current_app.logger.exception("Failed to %s", action)
                body, status = ApiError().to_response()
                return jsonify(body), status

        return decorated_function
    return decorator
