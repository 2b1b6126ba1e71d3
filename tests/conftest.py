import os
import sys

import pytest

# Ensure project root is importable (so `import cli` / `import clbnode` work without installing)
_project_root = os.path.dirname(os.path.dirname(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from clbnode.api_models import Condition, LoadBalancer, Node, NodePage
from clbnode.settings import Settings


class FakeClient:
    """In-memory stand-in for CloudLoadBalancerClient that records every call.

    ``pages`` is a list of node lists (or exceptions to raise for that page).
    ``create_results`` / ``update_results`` / ``delete_results`` are consumed
    per call; an exception item is raised, anything else is returned.
    """

    def __init__(self, pages=None, create_results=None, update_results=None, delete_results=None, lb_statuses=None):
        self.pages = list(pages or [[]])
        self.create_results = list(create_results or [])
        self.update_results = list(update_results or [])
        self.delete_results = list(delete_results or [])
        self.lb_statuses = list(lb_statuses or [])
        self.nodes: dict[int, Node] = {n.id: n for page in self.pages if isinstance(page, list) for n in page}
        self.calls: list[tuple] = []

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]

    def _next(self, queue, default):
        if not queue:
            return default
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def iter_node_pages(self, load_balancer_id):
        for i, page in enumerate(self.pages):
            self.calls.append(("list_page", load_balancer_id, i))
            if isinstance(page, Exception):
                raise page
            yield NodePage(nodes=page)

    def create_node(self, load_balancer_id, address, port, condition):
        self.calls.append(("create", load_balancer_id, address, port, condition))
        default = [Node(id=1001, address=address, port=port, condition=condition, status="ONLINE")]
        created = self._next(self.create_results, default)
        for n in created:
            self.nodes[n.id] = n
        return created

    def update_node(self, load_balancer_id, node_id, condition):
        self.calls.append(("update", load_balancer_id, node_id, condition))
        self._next(self.update_results, None)
        self.nodes[node_id] = self.nodes[node_id].model_copy(update={"condition": condition})

    def delete_node(self, load_balancer_id, node_id):
        self.calls.append(("delete", load_balancer_id, node_id))
        self._next(self.delete_results, None)
        self.nodes.pop(node_id, None)

    def get_node(self, load_balancer_id, node_id):
        self.calls.append(("get", load_balancer_id, node_id))
        return self.nodes[node_id]

    def get_load_balancer(self, load_balancer_id):
        self.calls.append(("get_lb", load_balancer_id))
        status = self._next(self.lb_statuses, "ACTIVE")
        return LoadBalancer(id=load_balancer_id, status=status)


@pytest.fixture
def fake_client():
    return FakeClient


@pytest.fixture
def make_node():
    def _make(id=99, address="10.0.0.5", port=80, condition=Condition.ENABLED):
        return Node(id=id, address=address, port=port, condition=condition, status="ONLINE")

    return _make


@pytest.fixture
def base_env():
    return {
        "OS_USERNAME": "deployer",
        "OS_PASSWORD": "s3cr3t-api-key",
        "OS_REGION_NAME": "ORD",
        "LOAD_BALANCER_ID": "4242",
    }


@pytest.fixture
def settings(base_env):
    return Settings.from_env(base_env)

