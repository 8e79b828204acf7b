import asyncio
import json
import aiohttp
import kopf
import kubernetes_asyncio

_ALREADY_EXISTS = "alreadyexists"
_CONFLICT = "conflict"


class ReconcileError(Exception):
    """Base class for errors surfaced by a reconciliation pass."""


class ConflictError(ReconcileError):
    """The object changed between read and write (stale resourceVersion).

    The whole pass must be retried starting from the read step.
    """


class TransientAPIError(ReconcileError):
    """Any control plane failure other than not-found and conflict."""

    status: int

    def __init__(self, message: str, status: int = None):
        super().__init__(message)
        self.status = status


def _reason(ex: kubernetes_asyncio.client.ApiException) -> str:
    try:
        err = json.loads(ex.body) if ex.body else {}
    except (json.JSONDecodeError, TypeError):
        return ""
    if not isinstance(err, dict):
        return ""
    return (err.get("reason") or "").lower()


def not_found_error(ex: kubernetes_asyncio.client.ApiException) -> bool:
    if not isinstance(ex, kubernetes_asyncio.client.ApiException):
        return False
    return ex.status == 404


def already_exists_error(ex: kubernetes_asyncio.client.ApiException) -> bool:
    if not isinstance(ex, kubernetes_asyncio.client.ApiException):
        return False
    return ex.status == 409 and _reason(ex) == _ALREADY_EXISTS


def conflict_error(ex: kubernetes_asyncio.client.ApiException) -> bool:
    if not isinstance(ex, kubernetes_asyncio.client.ApiException):
        return False
    return ex.status == 409 and _reason(ex) != _ALREADY_EXISTS


def describe_api_exception(ex: kubernetes_asyncio.client.ApiException) -> str:
    error_msg = f"Kubernetes API error ({ex.status}): {ex.reason}"
    try:
        if ex.body:
            body = json.loads(ex.body)
            if isinstance(body, dict) and "message" in body:
                error_msg = f"{error_msg} - {body['message']}"
    except (json.JSONDecodeError, TypeError):
        pass
    return error_msg


#: Failures below the HTTP layer: connection resets, DNS, client timeouts.
TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


def classify_transport_error(ex: BaseException) -> TransientAPIError:
    return TransientAPIError(f"Kubernetes API unreachable: {ex.__class__.__name__}: {ex}")


def classify_api_exception(ex: kubernetes_asyncio.client.ApiException) -> ReconcileError:
    """Map an ApiException onto the reconcile error taxonomy.

    Not-found is handled by callers before reaching here. Conflicts become
    ConflictError, everything else (5xx, 429, timeouts, other 4xx) is
    TransientAPIError.
    """
    if conflict_error(ex):
        return ConflictError(describe_api_exception(ex))
    return TransientAPIError(describe_api_exception(ex), status=ex.status)


def convert_reconcile_error(
    ex: Exception, conflict_delay: float, transient_delay: float
) -> kopf.TemporaryError:
    """Convert a reconcile error to a Kopf-friendly retry.

    No reconcile failure is permanent. Conflicts are retried quickly, every
    other failure after the transient backoff.
    """
    if isinstance(ex, ConflictError):
        return kopf.TemporaryError(f"Conflict, retrying pass: {ex}", delay=conflict_delay)
    if isinstance(ex, kubernetes_asyncio.client.ApiException):
        ex = classify_api_exception(ex)
        if isinstance(ex, ConflictError):
            return kopf.TemporaryError(
                f"Conflict, retrying pass: {ex}", delay=conflict_delay
            )
    return kopf.TemporaryError(str(ex), delay=transient_delay)
