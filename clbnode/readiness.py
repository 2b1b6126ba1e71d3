from __future__ import annotations

import logging
import time
from collections.abc import Callable

from .client import CloudLoadBalancerClient
from .errors import TransientRemoteError

logger = logging.getLogger(__name__)


def wait_until_ready(
    client: CloudLoadBalancerClient,
    load_balancer_id: int,
    timeout_s: float,
    poll_s: float,
    *,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> bool:
    """Poll the load balancer until its status is ACTIVE.

    Best effort: returns False after ``timeout_s`` instead of failing, so the
    caller goes ahead and lets the retry wrapper absorb any 422s.
    Returns (is_ready).
    """
    if timeout_s <= 0:
        return True

    deadline = clock() + timeout_s
    while True:
        try:
            lb = client.get_load_balancer(load_balancer_id)
            status = lb.status
            if lb.is_ready:
                return True
        except TransientRemoteError as exc:
            status = f"unavailable ({exc})"

        remaining = deadline - clock()
        if remaining <= 0:
            logger.warning(
                "Load balancer %s still %s after %ss; proceeding anyway", load_balancer_id, status, timeout_s
            )
            return False
        logger.info("Load balancer %s is %s, waiting for ACTIVE", load_balancer_id, status)
        sleep(min(poll_s, remaining))
