from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .api_models import Condition, Node


@dataclass(frozen=True)
class Endpoint:
    address: str
    port: int

    def __str__(self) -> str:
        return f"{self.address}:{self.port}"


@dataclass(frozen=True)
class DesiredState:
    """Either upsert-with-condition or delete; never both."""

    delete: bool
    condition: Condition | None = None

    def __post_init__(self) -> None:
        if self.delete == (self.condition is not None):
            raise ValueError("DesiredState is either delete or upsert with a condition")

    @classmethod
    def upsert(cls, condition: Condition) -> "DesiredState":
        return cls(delete=False, condition=condition)

    @classmethod
    def remove(cls) -> "DesiredState":
        return cls(delete=True)

    @classmethod
    def from_flags(cls, disable: bool = False, drain: bool = False, delete: bool = False) -> "DesiredState":
        if delete:
            return cls.remove()
        if disable:
            return cls.upsert(Condition.DISABLED)
        if drain:
            return cls.upsert(Condition.DRAINING)
        return cls.upsert(Condition.ENABLED)

    def __str__(self) -> str:
        return "DELETED" if self.delete else self.condition.value


class NodeState(str, Enum):
    EXISTING = "existing"
    DELETED = "deleted"


@dataclass(frozen=True)
class ReconcileResult:
    state: NodeState
    node: Node | None
    action: str  # created|updated|deleted|noop

    def describe(self) -> str:
        if self.state is NodeState.DELETED:
            return "Deleted" if self.action == "deleted" else "Deleted (node was already gone)"
        return str(self.node)
