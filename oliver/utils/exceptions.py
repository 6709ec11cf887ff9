"""Error taxonomy for backend calls and its mapping onto our own HTTP responses."""
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from loguru import logger


AUTH_FAILED_MESSAGE = "认证失败，请重新登录"
FORBIDDEN_MESSAGE = "权限不足，无法执行此操作"
RATE_LIMITED_MESSAGE = "请求过于频繁，请稍后重试"
UNAVAILABLE_MESSAGE = "服务暂时不可用，请稍后重试"
SERVER_ERROR_MESSAGE = "服务器内部错误，请稍后重试"
BAD_REQUEST_MESSAGE = "请求参数错误，请检查后重试"
INVALID_BODY_MESSAGE = "服务器返回了无效的响应格式"

STATUS_MESSAGES: Dict[int, str] = {
    401: AUTH_FAILED_MESSAGE,
    403: FORBIDDEN_MESSAGE,
    429: RATE_LIMITED_MESSAGE,
    503: UNAVAILABLE_MESSAGE,
}


class OliverClientException(Exception):
    """Root of every error raised by the review client.

    ``message`` is user-facing text; ``details`` carries the structured
    context (offending field, backend status) echoed back to API callers.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = dict(details) if details else {}


class ApiError(OliverClientException):
    """Backend call failed; ``status`` is 0 when no HTTP response was received."""

    def __init__(self, message: str, status: int, response: Any = None):
        super().__init__(message, {"status": status})
        self.status = status
        self.response = response

    @property
    def is_network_error(self) -> bool:
        return self.status == 0


class ValidationError(OliverClientException):
    """A review view was asked for a filter or page it cannot show."""
    pass


class AllSourcesFailedError(OliverClientException):
    """Every source of an aggregated view failed."""
    pass


def fallback_message(status_code: int) -> str:
    """Return the generic message used when the error body carries none."""
    if status_code >= 500:
        return SERVER_ERROR_MESSAGE
    if status_code >= 400:
        return BAD_REQUEST_MESSAGE
    return f"HTTP {status_code}"


def handle_api_error(error: ApiError) -> HTTPException:
    """Translate a backend failure into the response sent to our own callers."""
    if error.is_network_error:
        logger.error(f"Backend unreachable: {error.message}")
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=error.message)
    logger.warning(f"Backend error {error.status}: {error.message}")
    return HTTPException(status_code=error.status, detail=error.message)


def handle_validation_error(error: ValidationError) -> HTTPException:
    """Reject a filter or page input before any backend call is made."""
    logger.warning("Rejected review view input: {message}", message=error.message, invalid=error.details)
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"message": error.message, "details": error.details},
    )


def handle_all_sources_failed(error: AllSourcesFailedError) -> HTTPException:
    """Handle an aggregated view with nothing to show."""
    logger.error(f"All sources failed: {error.message}")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=error.message
    )
