"""Queue service error taxonomy.

Every failure the SQS client reports is one of three kinds:

  TransientError - network trouble, timeouts, throttling; retrying may help
  DeniedError    - missing/invalid credentials or insufficient permissions
  NotFoundError  - the queue no longer exists

The dashboard never treats these as fatal; they only become status text.
"""

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    NoCredentialsError,
    PartialCredentialsError,
)

DENIED_CODES = frozenset({
    "AccessDenied",
    "AccessDeniedException",
    "InvalidClientTokenId",
    "SignatureDoesNotMatch",
    "UnrecognizedClientException",
    "ExpiredToken",
    "ExpiredTokenException",
    "InvalidSecurity",
})

NOT_FOUND_CODES = frozenset({
    "AWS.SimpleQueueService.NonExistentQueue",
    "QueueDoesNotExist",
    "NonExistentQueue",
})


class QueueServiceError(Exception):
    """Base class for failures reported by the queue service client."""

    kind = "error"


class TransientError(QueueServiceError):
    kind = "transient"


class DeniedError(QueueServiceError):
    kind = "denied"


class NotFoundError(QueueServiceError):
    kind = "not_found"


def error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


def classify_error(exc: Exception, queue_name: str = "") -> QueueServiceError:
    """Map a botocore exception onto the queue service taxonomy."""
    if isinstance(exc, QueueServiceError):
        return exc
    if isinstance(exc, (NoCredentialsError, PartialCredentialsError)):
        return DeniedError(f"AWS credentials unavailable: {exc}")
    if isinstance(exc, ClientError):
        code = error_code(exc)
        message = exc.response.get("Error", {}).get("Message") or str(exc)
        if code in DENIED_CODES:
            return DeniedError(f"{code}: {message}")
        if code in NOT_FOUND_CODES:
            target = f"'{queue_name}' " if queue_name else ""
            return NotFoundError(f"Queue {target}does not exist")
        return TransientError(f"{code or 'ClientError'}: {message}")
    if isinstance(exc, BotoCoreError):
        return TransientError(str(exc))
    return TransientError(f"{type(exc).__name__}: {exc}")
