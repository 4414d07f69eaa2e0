"""
Request/response boundary for AssignScore.

Transport is left to the caller: a web handler decodes the request body,
forwards the authorization header, and serializes the returned
``(status_code, body)`` pair.
"""

from __future__ import annotations

import logging
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Dict, Optional, Tuple

from .core.evaluator import SubmissionEvaluator
from .utils.exceptions import (
    AlreadyEvaluatedError,
    AssignScoreError,
    EvaluationWriteError,
    NotFoundError,
    ProcessingError,
    StoreError,
    UnauthorizedError,
    ValidationError,
    log_exception,
)
from .utils.validators import InputValidator


log = logging.getLogger(__name__)


Response = Tuple[int, Dict[str, Any]]


def error_response(status: int, message: str, **extra: Any) -> Response:
    body: Dict[str, Any] = {"error": message}
    body.update(extra)
    return status, body


def handle_evaluate_request(evaluator: SubmissionEvaluator, payload: Any,
                            authorization: Optional[str] = None,
                            timeout: Optional[float] = None) -> Response:
    """
    Handle one evaluation request.

    The credential is only checked for presence; validating it is the job
    of the upstream authentication layer. The evaluation runs on the
    evaluator's worker pool and is abandoned after ``timeout`` seconds;
    a write that was already issued is not rolled back.

    Args:
        evaluator: Evaluator bound to a content store
        payload: Decoded request body, ``{"submission_id": "..."}``
        authorization: Forwarded authorization header
        timeout: Seconds to wait; defaults to ``evaluation.timeout_seconds``

    Returns:
        ``(status_code, body)``
    """
    try:
        InputValidator.validate_authorization(authorization)
        submission_id = InputValidator.validate_request_payload(payload)
    except UnauthorizedError as e:
        log_exception(log, e, "Rejected evaluation request")
        return error_response(401, e.message)
    except ValidationError as e:
        log_exception(log, e, "Rejected evaluation request")
        return error_response(400, e.message)

    wait = evaluator.timeout_seconds if timeout is None else timeout
    future = evaluator.submit(submission_id)
    try:
        result = future.result(timeout=wait)
    except FutureTimeoutError:
        future.cancel()
        log.error(f"Evaluation of {submission_id} exceeded {wait}s; abandoning")
        return error_response(504, "Evaluation timed out")
    except NotFoundError as e:
        return error_response(404, e.message)
    except AlreadyEvaluatedError as e:
        return error_response(409, e.message)
    except ValidationError as e:
        return error_response(400, e.message)
    except EvaluationWriteError as e:
        # the result was computed; the status update may or may not have happened
        return error_response(502, str(e), evaluation=e.result.to_response())
    except StoreError as e:
        log_exception(log, e, f"Submission {submission_id}")
        return error_response(502, e.message)
    except ProcessingError as e:
        log_exception(log, e, f"Submission {submission_id}")
        return error_response(500, e.message)
    except AssignScoreError as e:
        log_exception(log, e, f"Submission {submission_id}")
        return error_response(500, e.message)

    return 200, result.to_response()
