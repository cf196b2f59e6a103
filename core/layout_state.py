# /core/layout_state.py

from dataclasses import dataclass, field
from typing import List, Union

from core.models import NodeKind

@dataclass(frozen=True)
class Free:
    """The node moves under the forces."""


@dataclass(frozen=True)
class PinnedAt:
    """The node is held at exactly (x, y)."""
    x: float
    y: float


Pin = Union[Free, PinnedAt]
FREE = Free()


@dataclass
class LayoutNode:
    """Mutable layout fields of one graph node, owned by the layout engine."""
    index: int
    id: str
    kind: NodeKind
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    pin: Pin = FREE

    @property
    def is_pinned(self) -> bool:
        return isinstance(self.pin, PinnedAt)


@dataclass(frozen=True)
class LayoutEdge:
    """A snapshot edge resolved to node indices."""
    source: int
    target: int
    weight: float


@dataclass
class DisplacementBuffer:
    """
    Per-tick accumulator shared by all forces.

    vx/vy are velocity deltas per node; shift_x/shift_y is a translation
    applied to every free node after integration.
    """
    size: int
    vx: List[float] = field(init=False)
    vy: List[float] = field(init=False)
    shift_x: float = 0.0
    shift_y: float = 0.0

    def __post_init__(self):
        self.vx = [0.0] * self.size
        self.vy = [0.0] * self.size

    def add(self, dvx: List[float], dvy: List[float]) -> None:
        for i in range(self.size):
            self.vx[i] += dvx[i]
            self.vy[i] += dvy[i]
