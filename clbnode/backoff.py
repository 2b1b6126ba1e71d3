from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from enum import Enum
from typing import TypeVar

import tenacity

from .errors import RETRYABLE_STATUS_CODES

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Retryability(str, Enum):
    RETRYABLE = "retryable"
    TERMINAL = "terminal"


def classify(exc: BaseException) -> Retryability:
    """Decide whether a failed operation is worth repeating.

    Only the ``status_code`` attribute is consulted, so any client whose
    errors carry an HTTP status can be plugged in.
    """
    status = getattr(exc, "status_code", None)
    if status in RETRYABLE_STATUS_CODES:
        return Retryability.RETRYABLE
    return Retryability.TERMINAL


def jittered_delay(interval_s: float, rand: Callable[[], float] = random.random) -> float:
    """interval_s perturbed uniformly within [-1s, +1s), never negative."""
    return max(0.0, interval_s - 1.0 + 2.0 * rand())


def with_retry(
    interval_s: float,
    operation: Callable[[], T],
    *,
    sleep: Callable[[float], None] = time.sleep,
    rand: Callable[[], float] = random.random,
) -> T:
    """Run ``operation`` until it succeeds or fails with a non-retryable error.

    Immutable-entity and rate-limit failures sleep roughly ``interval_s`` and
    try again, with no upper bound on attempts. Wrap the call in an external
    timeout if a deadline is needed.
    """
    retrying = tenacity.Retrying(
        retry=tenacity.retry_if_exception(lambda e: classify(e) is Retryability.RETRYABLE),
        wait=lambda retry_state: jittered_delay(interval_s, rand),
        stop=tenacity.stop_never,
        reraise=True,
        sleep=sleep,
        before_sleep=tenacity.before_sleep_log(logger, logging.INFO),
    )
    return retrying(operation)
