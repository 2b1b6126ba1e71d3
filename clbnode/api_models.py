from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Condition(str, Enum):
    ENABLED = "ENABLED"  # receives traffic
    DISABLED = "DISABLED"  # pulled from rotation immediately
    DRAINING = "DRAINING"  # no new connections, existing ones left alone


class _Resource(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Node(_Resource):
    id: int = Field(..., description="Node id assigned by the load balancer")
    address: str
    port: int = Field(..., ge=1, le=65535)
    condition: Condition
    status: str | None = Field(None, description="ONLINE|OFFLINE|DRAINING as reported by the LB")
    weight: int | None = None
    type: str | None = Field(None, description="PRIMARY|SECONDARY")

    def matches(self, address: str, port: int) -> bool:
        return self.address == address and self.port == port

    def __str__(self) -> str:
        return f"node {self.id} {self.address}:{self.port} condition={self.condition.value} status={self.status}"


class LoadBalancer(_Resource):
    id: int
    status: str
    name: str | None = None

    @property
    def is_ready(self) -> bool:
        return self.status == "ACTIVE"


class Link(_Resource):
    href: str
    rel: str


class NodePage(_Resource):
    nodes: list[Node] = Field(default_factory=list)
    links: list[Link] = Field(default_factory=list)

    @property
    def next_href(self) -> str | None:
        for link in self.links:
            if link.rel == "next":
                return link.href
        return None
