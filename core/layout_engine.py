# /core/layout_engine.py

import math
import random
from enum import Enum
from typing import Dict, List, Optional, Sequence

from core.config import Settings, settings as default_settings
from core.exceptions import DanglingEdgeError, InvalidStepError, LayoutError, UnknownNodeError
from core.forces import Force, default_forces
from core.layout_state import FREE, DisplacementBuffer, LayoutEdge, LayoutNode, Pin, PinnedAt
from core.logger import get_logger
from core.models import GraphNode, GraphSnapshot, Position, ViewTransform

logger = get_logger(__name__)

# Phyllotaxis placement of fresh nodes around the canvas center.
INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))

def _finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0

class SimulationState(str, Enum):
    INITIALIZING = "initializing"
    RUNNING = "running"
    REHEATED = "reheated"
    CONVERGED = "converged"


class LayoutEngine:
    """
    Force-directed layout over one immutable GraphSnapshot.

    The engine is the only writer of node positions, velocities and pins.
    Readers get copies through `step()` / `positions()`; interaction handlers
    go through `pin`, `unpin`, `reheat`, `select` and `set_view_transform`.
    All calls are expected on one thread, between ticks.
    """

    def __init__(self, snapshot: GraphSnapshot, config: Optional[Settings] = None,
                 seed: Optional[int] = None, forces: Optional[List[Force]] = None):
        self.config = config or default_settings
        self.snapshot = snapshot
        self._rng = random.Random(self.config.LAYOUT_SEED if seed is None else seed)
        self._graph_nodes: Dict[str, GraphNode] = {}
        self._index: Dict[str, int] = {}
        self._nodes: List[LayoutNode] = []
        self._place_nodes(snapshot.nodes)
        self._edges = self._resolve_edges(snapshot)

        self._forces = forces if forces is not None else default_forces(self.config)
        for force in self._forces:
            force.initialize(self._nodes, self._edges, self._jiggle)

        self._view = ViewTransform()
        self._selected: Optional[str] = None
        self.tick_count = 0

        if self._nodes:
            self.alpha = self.config.ALPHA_START
            self.state = SimulationState.INITIALIZING
        else:
            self.alpha = 0.0
            self.state = SimulationState.CONVERGED
        logger.info("Layout engine created", extra={
            "nodes": len(self._nodes), "edges": len(self._edges), "state": self.state.value,
        })

    # --- Construction ---

    def _place_nodes(self, graph_nodes: Sequence[GraphNode]) -> None:
        cx = self.config.CANVAS_WIDTH / 2
        cy = self.config.CANVAS_HEIGHT / 2
        for i, node in enumerate(graph_nodes):
            if node.id in self._graph_nodes:
                raise LayoutError(f"Duplicate node id '{node.id}' in snapshot.")
            radius = INITIAL_RADIUS * math.sqrt(0.5 + i)
            angle = i * INITIAL_ANGLE
            self._graph_nodes[node.id] = node
            self._index[node.id] = i
            self._nodes.append(LayoutNode(
                index=i,
                id=node.id,
                kind=node.kind,
                x=cx + radius * math.cos(angle),
                y=cy + radius * math.sin(angle),
            ))

    def _resolve_edges(self, snapshot: GraphSnapshot) -> List[LayoutEdge]:
        resolved = []
        for edge in snapshot.edges:
            for endpoint in (edge.source, edge.target):
                if endpoint not in self._index:
                    raise DanglingEdgeError(edge.source, edge.target, endpoint)
            resolved.append(LayoutEdge(self._index[edge.source], self._index[edge.target], edge.weight))
        return resolved

    def _jiggle(self) -> float:
        return (self._rng.random() - 0.5) * 1e-6 or 1e-6

    def _node(self, node_id: str) -> LayoutNode:
        index = self._index.get(node_id)
        if index is None:
            raise UnknownNodeError(node_id)
        return self._nodes[index]

    # --- Simulation ---

    @property
    def is_converged(self) -> bool:
        return self.state == SimulationState.CONVERGED

    def step(self, dt: float = 1.0) -> Dict[str, Position]:
        """
        Advances the simulation by one tick and returns the position map.
        Once converged, the positions are returned unchanged.
        """
        if not math.isfinite(dt) or dt <= 0:
            raise InvalidStepError(f"dt must be a positive number, got {dt}.")
        if self.is_converged:
            return self.positions()

        buffer = DisplacementBuffer(len(self._nodes))
        for force in self._forces:
            force.apply(self._nodes, self._edges, self.alpha, buffer)
        self._integrate(buffer, dt)

        self.alpha *= 1 - self.config.ALPHA_DECAY
        self.tick_count += 1
        if self.alpha < self.config.ALPHA_MIN:
            self.state = SimulationState.CONVERGED
            logger.info("Layout converged", extra={"ticks": self.tick_count, "alpha": self.alpha})
        else:
            self.state = SimulationState.RUNNING
        return self.positions()

    def _integrate(self, buffer: DisplacementBuffer, dt: float) -> None:
        friction = 1 - self.config.VELOCITY_DECAY
        # Pins far out on the plane can overflow a force term; such terms are dropped.
        shift_x = _finite_or_zero(buffer.shift_x)
        shift_y = _finite_or_zero(buffer.shift_y)
        for node in self._nodes:
            if isinstance(node.pin, PinnedAt):
                node.x, node.y = node.pin.x, node.pin.y
                node.vx = node.vy = 0.0
                continue
            node.vx = (node.vx + _finite_or_zero(buffer.vx[node.index])) * friction
            node.vy = (node.vy + _finite_or_zero(buffer.vy[node.index])) * friction
            node.x += node.vx * dt + shift_x
            node.y += node.vy * dt + shift_y

    def run(self, max_ticks: Optional[int] = None) -> Dict[str, Position]:
        """Steps until converged, or until max_ticks ticks have run."""
        ticks = 0
        while not self.is_converged and (max_ticks is None or ticks < max_ticks):
            self.step()
            ticks += 1
        return self.positions()

    def reheat(self, alpha: Optional[float] = None) -> float:
        """
        Raises alpha so the layout moves again. Positions and velocities are kept.
        Returns the resulting alpha.
        """
        alpha = self.config.REHEAT_ALPHA if alpha is None else alpha
        if not math.isfinite(alpha) or not 0 < alpha <= 1:
            raise InvalidStepError(f"alpha must be in (0, 1], got {alpha}.")
        if not self._nodes:
            return self.alpha
        if alpha <= self.alpha:
            return self.alpha
        self.alpha = alpha
        if self.alpha >= self.config.ALPHA_MIN:
            self.state = SimulationState.REHEATED
        logger.debug("Layout reheated", extra={"alpha": self.alpha})
        return self.alpha

    # --- Reads ---

    def positions(self) -> Dict[str, Position]:
        return {node.id: Position(node.x, node.y) for node in self._nodes}

    def position_of(self, node_id: str) -> Position:
        node = self._node(node_id)
        return Position(node.x, node.y)

    def velocity_of(self, node_id: str) -> Position:
        node = self._node(node_id)
        return Position(node.vx, node.vy)

    def pin_of(self, node_id: str) -> Pin:
        return self._node(node_id).pin

    # --- Interaction ---

    def pin(self, node_id: str, x: float, y: float) -> None:
        """Holds the node at exactly (x, y) until unpinned."""
        node = self._node(node_id)
        if not all(math.isfinite(v) for v in (x, y)):
            raise LayoutError(f"Pin coordinates must be finite numbers, got ({x}, {y}).")
        node.pin = PinnedAt(float(x), float(y))
        node.x, node.y = node.pin.x, node.pin.y
        node.vx = node.vy = 0.0
        logger.debug("Node pinned", extra={"node_id": node_id, "x": x, "y": y})

    def unpin(self, node_id: str) -> None:
        node = self._node(node_id)
        node.pin = FREE
        logger.debug("Node unpinned", extra={"node_id": node_id})

    def select(self, node_id: str) -> GraphNode:
        """Marks a node as selected. Does not touch layout state."""
        self._node(node_id)
        self._selected = node_id
        return self._graph_nodes[node_id]

    def clear_selection(self) -> None:
        self._selected = None

    @property
    def selected_node(self) -> Optional[GraphNode]:
        if self._selected is None:
            return None
        return self._graph_nodes[self._selected]

    # --- View ---

    @property
    def view_transform(self) -> ViewTransform:
        return self._view

    def set_view_transform(self, scale: float, translate_x: float, translate_y: float) -> ViewTransform:
        """Sets the pan/zoom transform; scale is clamped to the configured extent."""
        if not all(math.isfinite(v) for v in (scale, translate_x, translate_y)):
            raise LayoutError("View transform values must be finite numbers.")
        scale = max(self.config.SCALE_MIN, min(self.config.SCALE_MAX, scale))
        self._view = ViewTransform(scale=scale, translate_x=translate_x, translate_y=translate_y)
        return self._view
