from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from typing import TypeVar

from .api_models import Condition, Node
from .backoff import with_retry
from .client import CloudLoadBalancerClient
from .errors import UnexpectedCreateResult
from .locator import locate_node
from .readiness import wait_until_ready
from .runtime import DesiredState, Endpoint, NodeState, ReconcileResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Reconciler:
    """Drives one endpoint on one load balancer to its desired state."""

    def __init__(
        self,
        client: CloudLoadBalancerClient,
        interval_s: float = 5,
        ready_timeout_s: float = 120,
        ready_poll_s: float = 5,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        rand: Callable[[], float] = random.random,
    ):
        self.client = client
        self.interval_s = interval_s
        self.ready_timeout_s = ready_timeout_s
        self.ready_poll_s = ready_poll_s
        self._sleep = sleep
        self._clock = clock
        self._rand = rand

    def reconcile(self, load_balancer_id: int, endpoint: Endpoint, desired: DesiredState) -> ReconcileResult:
        node = locate_node(self.client, load_balancer_id, endpoint.address, endpoint.port)

        if desired.delete:
            if node is None:
                logger.info("Node is already gone; nothing to delete")
                return ReconcileResult(NodeState.DELETED, None, "noop")
            self._delete(load_balancer_id, node)
            return ReconcileResult(NodeState.DELETED, None, "deleted")

        if node is not None:
            self._update(load_balancer_id, node, desired.condition)
            node_id, action = node.id, "updated"
        else:
            created = self._create(load_balancer_id, endpoint, desired.condition)
            node_id, action = created.id, "created"

        # Re-fetch the authoritative record.
        final = self.client.get_node(load_balancer_id, node_id)
        return ReconcileResult(NodeState.EXISTING, final, action)

    # --- transitions ---

    def _update(self, load_balancer_id: int, node: Node, condition: Condition) -> None:
        logger.info("Updating existing %s to %s", node, condition.value)
        self._wait_ready(load_balancer_id)
        self._retry(lambda: self.client.update_node(load_balancer_id, node.id, condition))
        self._wait_ready(load_balancer_id)

    def _create(self, load_balancer_id: int, endpoint: Endpoint, condition: Condition) -> Node:
        logger.info("Creating new node %s as %s", endpoint, condition.value)
        self._wait_ready(load_balancer_id)
        created = self._retry(
            lambda: self.client.create_node(load_balancer_id, endpoint.address, endpoint.port, condition)
        )
        if len(created) != 1:
            raise UnexpectedCreateResult(
                f"Expected exactly one node from create on load balancer {load_balancer_id}, got {len(created)}: {created!r}"
            )
        self._wait_ready(load_balancer_id)
        return created[0]

    def _delete(self, load_balancer_id: int, node: Node) -> None:
        logger.info("Deleting existing %s", node)
        self._wait_ready(load_balancer_id)
        self._retry(lambda: self.client.delete_node(load_balancer_id, node.id))
        self._wait_ready(load_balancer_id)

    # --- helpers ---

    def _retry(self, operation: Callable[[], T]) -> T:
        return with_retry(self.interval_s, operation, sleep=self._sleep, rand=self._rand)

    def _wait_ready(self, load_balancer_id: int) -> bool:
        return wait_until_ready(
            self.client,
            load_balancer_id,
            self.ready_timeout_s,
            self.ready_poll_s,
            sleep=self._sleep,
            clock=self._clock,
        )
