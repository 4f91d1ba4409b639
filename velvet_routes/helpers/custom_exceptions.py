import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class CustomError:
    class Forbidden(APIException):
        status_code = status.HTTP_403_FORBIDDEN
        default_code = "forbidden"
        default_detail = "You do not have permission to perform this action."

    class BadRequest(APIException):
        status_code = status.HTTP_400_BAD_REQUEST
        default_code = "bad_request"
        default_detail = "Bad request."

    class NotFound(APIException):
        status_code = status.HTTP_404_NOT_FOUND
        default_code = "not_found"
        default_detail = "Resource not found."

    class UnAuthorized(APIException):
        status_code = status.HTTP_401_UNAUTHORIZED
        default_code = "unauthorized"
        default_detail = "Unauthorized."

    class Conflict(APIException):
        status_code = status.HTTP_409_CONFLICT
        default_code = "conflict"
        default_detail = "Conflict."

    class InternalServerError(APIException):
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        default_code = "internal_server_error"
        default_detail = "Internal server error."

    @classmethod
    def raise_error(
        cls,
        message: str,
        exception: str = "BadRequest",
    ):
        e: APIException = getattr(cls, exception)
        raise e(message)

    error_responses = [
        "Forbidden",
        "BadRequest",
        "NotFound",
        "UnAuthorized",
        "Conflict",
    ]

    @classmethod
    def DEFAULT_ERROR_SCHEMA(cls):  # noqa: N802
        return {
            getattr(cls, error).status_code: {
                "type": "object",
                "properties": {
                    "detail": {
                        "type": "string",
                        "example": getattr(cls, error).default_detail,
                    },
                },
            }
            for error in cls.error_responses
        }


# Domain errors. Each one maps to a single HTTP status so views can let them
# propagate to the exception handler untouched.


class ConflictError(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_code = "conflict"
    default_detail = "The request conflicts with the current state of the resource."


class DuplicateEmail(ConflictError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "duplicate_email"
    default_detail = "User already exists."


class ItemUnavailable(ConflictError):
    default_code = "item_unavailable"
    default_detail = "The requested item is not available."


class AmountMismatch(ConflictError):
    default_code = "amount_mismatch"
    default_detail = "The paid amount does not match the booking total."

    def __init__(self, expected_cents: int, actual_cents: int):
        self.expected_cents = expected_cents
        self.actual_cents = actual_cents
        super().__init__(
            f"Expected {expected_cents} cents but the payment covers {actual_cents} cents."
        )


class PaymentNotCompleted(ConflictError):
    default_code = "payment_not_completed"
    default_detail = "The payment has not been completed."


class AuthError(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "auth_error"
    default_detail = "Authentication failed."


class InvalidCredentials(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "invalid_credentials"
    default_detail = "Invalid credentials"


class NotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "not_found"
    default_detail = "Resource not found."


class StorageError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "storage_error"
    default_detail = "A storage error occurred."


class BookingFailed(StorageError):
    default_code = "booking_failed"
    default_detail = "The booking could not be saved. No changes were made."


class UpstreamError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "upstream_error"
    default_detail = "A third-party service failed to respond."


def custom_exception_handler(exc, context):
    # Call REST framework's default exception handler first,
    # to get the standard error response.
    response = exception_handler(exc, context)

    if response is None:
        return None

    if response.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        view = context.get("view")
        logger.error(
            f"{type(exc).__name__} in {type(view).__name__ if view else 'unknown view'}: {exc}",
            exc_info=exc,
        )

    # Every error body carries a machine readable code next to the message.
    if isinstance(response.data, dict) and "detail" in response.data:
        codes = exc.get_codes() if isinstance(exc, APIException) else None
        response.data["code"] = codes if isinstance(codes, str) else "error"
    return response
