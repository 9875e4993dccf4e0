from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, Optional

from flask import jsonify, request

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    Cancelled,
    DomainError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"
USER_ROLE_HEADER = "X-User-Role"

# Most specific first.
_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (Cancelled, 409),
    (StorageError, 503),
)


def json_ok(data: Any = None, status: int = 200):
    return jsonify({"ok": True, "data": data}), status


def json_error(message: str, status: int):
    return jsonify({"ok": False, "message": message}), status


def handle_errors(view: Callable):
    """Map domain errors to JSON responses; anything unexpected is a logged 500."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            for error_type, status in _STATUS_BY_ERROR:
                if isinstance(e, error_type):
                    if status >= 500:
                        logger.error("Storage failure in %s: %s", view.__name__, e)
                    else:
                        logger.warning("%s in %s: %s", type(e).__name__, view.__name__, e)
                    return json_error(str(e), status)
            logger.warning("Unmapped domain error in %s: %s", view.__name__, e)
            return json_error(str(e), 400)
        except Exception:
            logger.exception("Unexpected error in %s", view.__name__)
            return json_error("Internal server error", 500)

    return wrapper


def current_uid() -> str:
    uid = (request.headers.get(USER_ID_HEADER) or "").strip()
    if not uid:
        raise AuthenticationError("Unauthorized")
    return uid


def current_role() -> Role:
    raw = (request.headers.get(USER_ROLE_HEADER) or Role.STUDENT.value).strip().lower()
    try:
        return Role(raw)
    except ValueError:
        raise AuthorizationError(f"Unknown role {raw!r}")


def json_body() -> dict[str, Any]:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Expected a JSON object body")
    return body


def parse_document(factory: Callable[[dict[str, Any]], Any], doc: Any, what: str):
    """Build a model from a request document; malformed shapes are a 400."""
    if not isinstance(doc, dict):
        raise ValidationError(f"{what} must be an object")
    try:
        return factory(doc)
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Malformed {what}: {e}") from e


def query_arg(name: str, default: Optional[str] = None) -> Optional[str]:
    value = request.args.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip()
