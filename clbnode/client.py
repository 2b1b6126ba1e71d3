from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import httpx

from .api_models import Condition, LoadBalancer, Node, NodePage
from .errors import ConfigurationError, NodeListingError, TerminalRemoteError, remote_error
from .settings import Settings

logger = logging.getLogger(__name__)

LB_SERVICE_TYPE = "rax:load-balancer"
USER_AGENT = "clbnode/0.1"


def _error_message(resp: httpx.Response) -> str:
    """Pull the human message out of a CLB/identity error body.

    Bodies look like {"message": ..., "code": 422} or are wrapped one level
    deep, e.g. {"overLimit": {"message": ..., "code": 413}}.
    """
    try:
        body = resp.json()
    except ValueError:
        return resp.text.strip()[:200] or resp.reason_phrase
    if isinstance(body, dict):
        if isinstance(body.get("message"), str):
            return body["message"]
        for value in body.values():
            if isinstance(value, dict) and isinstance(value.get("message"), str):
                return value["message"]
    return str(body)[:200]


def _lb_endpoint(catalog: list[dict[str, Any]], region: str) -> str:
    for service in catalog:
        if service.get("type") != LB_SERVICE_TYPE:
            continue
        for ep in service.get("endpoints", []):
            if str(ep.get("region", "")).upper() == region.upper() and ep.get("publicURL"):
                return ep["publicURL"]
    raise ConfigurationError(f"No load balancer endpoint in region {region!r} in the service catalog")


class CloudLoadBalancerClient:
    """Thin synchronous client for the Cloud Load Balancers v1.0 API.

    Every non-2xx response is raised as a RemoteError subclass; callers decide
    what to retry via ``backoff.classify``.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout_s: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self._http = httpx.Client(
            base_url=base_url,
            headers={"X-Auth-Token": token, "Accept": "application/json", "User-Agent": USER_AGENT},
            timeout=timeout_s,
            follow_redirects=False,
            transport=transport,
        )

    @classmethod
    def authenticate(cls, settings: Settings, transport: httpx.BaseTransport | None = None) -> "CloudLoadBalancerClient":
        """Exchange username + API key for a token and the regional LB endpoint."""
        url = settings.auth_url.rstrip("/") + "/tokens"
        payload = {
            "auth": {
                "RAX-KSKEY:apiKeyCredentials": {
                    "username": settings.username,
                    "apiKey": settings.api_key,
                }
            }
        }
        try:
            with httpx.Client(timeout=settings.http_timeout_s, transport=transport) as http:
                resp = http.post(url, json=payload, headers={"Accept": "application/json", "User-Agent": USER_AGENT})
        except httpx.HTTPError as exc:
            raise TerminalRemoteError(f"Trouble authenticating: {type(exc).__name__}: {exc}") from exc
        if resp.status_code >= 400:
            raise TerminalRemoteError(f"Trouble authenticating: {_error_message(resp)}", resp.status_code)

        try:
            access = resp.json()["access"]
            token = access["token"]["id"]
            catalog = access["serviceCatalog"]
        except (ValueError, KeyError, TypeError) as exc:
            raise TerminalRemoteError(f"Malformed identity response: {exc!r}") from exc

        base_url = _lb_endpoint(catalog, settings.region)
        logger.debug("Using load balancer endpoint %s", base_url)
        return cls(base_url, token, timeout_s=settings.http_timeout_s, transport=transport)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "CloudLoadBalancerClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --- transport ---

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise TerminalRemoteError(f"{method} {url} failed: {type(exc).__name__}: {exc}") from exc
        if resp.status_code >= 400:
            raise remote_error(_error_message(resp), resp.status_code)
        return resp

    def _json(self, resp: httpx.Response, key: str) -> Any:
        try:
            return resp.json()[key]
        except (ValueError, KeyError, TypeError) as exc:
            raise TerminalRemoteError(f"Malformed response from {resp.request.url}: missing {key!r}") from exc

    # --- verbs ---

    def iter_node_pages(self, load_balancer_id: int) -> Iterator[NodePage]:
        """Yield node pages lazily, following ``next`` links."""
        url: str | None = f"/loadbalancers/{load_balancer_id}/nodes"
        seen: set[str] = set()
        while url and url not in seen:
            seen.add(url)
            resp = self._request("GET", url)
            try:
                page = NodePage.model_validate(resp.json())
            except ValueError as exc:
                raise NodeListingError(f"Error while paging load balancer nodes: {exc}") from exc
            yield page
            url = page.next_href

    def create_node(self, load_balancer_id: int, address: str, port: int, condition: Condition) -> list[Node]:
        body = {"nodes": [{"address": address, "port": port, "condition": condition.value}]}
        resp = self._request("POST", f"/loadbalancers/{load_balancer_id}/nodes", json=body)
        try:
            return NodePage.model_validate(resp.json()).nodes
        except ValueError as exc:
            raise TerminalRemoteError(f"Malformed create response: {exc}") from exc

    def update_node(self, load_balancer_id: int, node_id: int, condition: Condition) -> None:
        body = {"node": {"condition": condition.value}}
        self._request("PUT", f"/loadbalancers/{load_balancer_id}/nodes/{node_id}", json=body)

    def delete_node(self, load_balancer_id: int, node_id: int) -> None:
        self._request("DELETE", f"/loadbalancers/{load_balancer_id}/nodes/{node_id}")

    def get_node(self, load_balancer_id: int, node_id: int) -> Node:
        resp = self._request("GET", f"/loadbalancers/{load_balancer_id}/nodes/{node_id}")
        try:
            return Node.model_validate(self._json(resp, "node"))
        except ValueError as exc:
            raise TerminalRemoteError(f"Malformed node {node_id}: {exc}") from exc

    def get_load_balancer(self, load_balancer_id: int) -> LoadBalancer:
        resp = self._request("GET", f"/loadbalancers/{load_balancer_id}")
        try:
            return LoadBalancer.model_validate(self._json(resp, "loadBalancer"))
        except ValueError as exc:
            raise TerminalRemoteError(f"Malformed load balancer {load_balancer_id}: {exc}") from exc
