from __future__ import annotations

import logging

from .api_models import Node
from .client import CloudLoadBalancerClient
from .errors import NodeListingError, RemoteError

logger = logging.getLogger(__name__)


def locate_node(client: CloudLoadBalancerClient, load_balancer_id: int, address: str, port: int) -> Node | None:
    """Find the load balancer node for address:port.

    The first match is authoritative and stops paging. None means the whole
    listing was walked without a match; a failed page raises instead.
    """
    pages = 0
    try:
        for page in client.iter_node_pages(load_balancer_id):
            pages += 1
            for node in page.nodes:
                if node.matches(address, port):
                    logger.info("Found %s after %d page(s)", node, pages)
                    return node
    except RemoteError as exc:
        raise NodeListingError(f"Error while paging load balancer nodes: {exc}") from exc

    logger.info("No node for %s:%s on load balancer %s (%d page(s) scanned)", address, port, load_balancer_id, pages)
    return None
