from functools import wraps

from flask import jsonify

from ..exceptions import (
    BookingValidationError,
    InvalidRateError,
    ScheduleUnavailableError,
    VehicleNotFoundError,
)


def error_response(message: str, status: int, **extra):
    body = {"success": False, "error": message}
    body.update(extra)
    return jsonify(body), status


def json_errors(fn):
    """Turn booking exceptions raised by a view into JSON error responses."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except VehicleNotFoundError as e:
            return error_response(e.message, 404)
        except ScheduleUnavailableError as e:
            return error_response(e.message, 503)
        except BookingValidationError as e:
            return error_response(e.message, 400, code=e.code, field=getattr(e, "field", None))
        except InvalidRateError as e:
            return error_response(e.message, 400)

    return wrapper
