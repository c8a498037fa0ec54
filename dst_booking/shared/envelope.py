"""Result envelopes and the error taxonomy shared by workflows and controllers"""

import enum
import functools
import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ErrorCode(str, enum.Enum):
    # Authorization
    UNAUTHORIZED = "UNAUTHORIZED"
    # Invalid input
    INVALID_DATA = "INVALID_DATA"
    # Not found
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    APPLICATION_NOT_FOUND = "APPLICATION_NOT_FOUND"
    OFFER_NOT_FOUND = "OFFER_NOT_FOUND"
    # Invalid state
    INVALID_STATUS = "INVALID_STATUS"
    SESSION_NOT_AVAILABLE = "SESSION_NOT_AVAILABLE"
    ALREADY_APPLIED = "ALREADY_APPLIED"
    # Persistence
    SESSION_UPDATE_FAILED = "SESSION_UPDATE_FAILED"
    SESSION_DELETE_FAILED = "SESSION_DELETE_FAILED"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    # Anything else
    INTERNAL_ERROR = "INTERNAL_ERROR"


class WorkflowError(Exception):
    """A terminal rejection of the current request"""

    def __init__(self, code: ErrorCode, details: str = ""):
        super().__init__(details or code.value)
        self.code = code
        self.details = details


def ok(**payload: Any) -> dict:
    return {"success": True, **payload}


def fail(code: ErrorCode, details: Optional[str] = None) -> dict:
    return {"success": False, "error": code.value, "details": details or ""}


def envelope(func):
    """
    Wrap a workflow or controller method so that it always returns an envelope.

    The wrapped method returns its payload as a dict (or raises WorkflowError).
    Database errors roll back the owner's session and become PERSISTENCE_ERROR;
    anything else is logged and becomes INTERNAL_ERROR.
    """

    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            result = func(self, *args, **kwargs)
        except WorkflowError as e:
            logger.warning(f"⚠️ {func.__qualname__} rejected: {e.code.value} {e.details}")
            return fail(e.code, e.details)
        except SQLAlchemyError as e:
            db = getattr(self, "db", None)
            if db is not None:
                db.rollback()
            logger.error(f"❌ {func.__qualname__} database error: {e}")
            return fail(ErrorCode.PERSISTENCE_ERROR, str(e))
        except Exception as e:
            logger.exception(f"❌ {func.__qualname__} failed unexpectedly")
            return fail(ErrorCode.INTERNAL_ERROR, str(e))

        if isinstance(result, dict) and "success" in result:
            return result
        return ok(**(result or {}))

    return wrapper


# HTTP status for each error code, used by the routers
HTTP_STATUS = {
    ErrorCode.UNAUTHORIZED: 403,
    ErrorCode.INVALID_DATA: 422,
    ErrorCode.SESSION_NOT_FOUND: 404,
    ErrorCode.APPLICATION_NOT_FOUND: 404,
    ErrorCode.OFFER_NOT_FOUND: 404,
    ErrorCode.INVALID_STATUS: 409,
    ErrorCode.SESSION_NOT_AVAILABLE: 409,
    ErrorCode.ALREADY_APPLIED: 409,
    ErrorCode.SESSION_UPDATE_FAILED: 500,
    ErrorCode.SESSION_DELETE_FAILED: 500,
    ErrorCode.PERSISTENCE_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}


def http_status_for(result: dict, success_status: int = 200) -> int:
    if result.get("success"):
        return success_status
    try:
        return HTTP_STATUS[ErrorCode(result.get("error"))]
    except ValueError:
        return 500
