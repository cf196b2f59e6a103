# /core/forces.py
"""
Layout forces.

Each force is a strategy object. The engine calls `initialize` once when a
snapshot is loaded and `apply` once per tick. Forces only read the node state
from the start of the tick and write their contribution into the shared
DisplacementBuffer, so the order of the force list does not change the result.
Every contribution is scaled by the current alpha.
"""

import math
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Sequence

from core.config import Settings
from core.layout_state import DisplacementBuffer, LayoutEdge, LayoutNode
from core.models import NODE_RADII, NodeKind
from core.quadtree import Quad, QuadTree

Jiggle = Callable[[], float]

class Force(ABC):
    """Abstract base class for a layout force."""
    name: str = "force"

    def initialize(self, nodes: Sequence[LayoutNode], edges: Sequence[LayoutEdge], jiggle: Jiggle) -> None:
        self._jiggle = jiggle

    @abstractmethod
    def apply(self, nodes: Sequence[LayoutNode], edges: Sequence[LayoutEdge], alpha: float,
              buffer: DisplacementBuffer) -> None:
        pass


class LinkForce(Force):
    """
    Springs along edges, relaxed iteratively toward `distance`.

    Stiffness grows with the square root of the edge weight and is divided by
    the smaller endpoint degree so hubs are not pulled apart. The bias moves
    the lower-degree endpoint more.
    """
    name = "link"

    def __init__(self, distance: float = 100.0, iterations: int = 1):
        self.distance = distance
        self.iterations = iterations
        self.strengths: List[float] = []
        self.biases: List[float] = []

    def initialize(self, nodes, edges, jiggle):
        super().initialize(nodes, edges, jiggle)
        degree = [0] * len(nodes)
        for edge in edges:
            degree[edge.source] += 1
            degree[edge.target] += 1
        self.strengths = [
            min(1.0, math.sqrt(edge.weight) / min(degree[edge.source], degree[edge.target]))
            for edge in edges
        ]
        self.biases = [
            degree[edge.source] / (degree[edge.source] + degree[edge.target])
            for edge in edges
        ]

    def apply(self, nodes, edges, alpha, buffer):
        dvx = [0.0] * len(nodes)
        dvy = [0.0] * len(nodes)
        for _ in range(self.iterations):
            for edge, strength, bias in zip(edges, self.strengths, self.biases):
                s = nodes[edge.source]
                t = nodes[edge.target]
                x = (t.x + t.vx + dvx[t.index]) - (s.x + s.vx + dvx[s.index])
                y = (t.y + t.vy + dvy[t.index]) - (s.y + s.vy + dvy[s.index])
                x = x or self._jiggle()
                y = y or self._jiggle()
                length = math.sqrt(x * x + y * y)
                if not math.isfinite(length):
                    continue
                k = (length - self.distance) / length * alpha * strength
                x *= k
                y *= k
                dvx[t.index] -= x * bias
                dvy[t.index] -= y * bias
                dvx[s.index] += x * (1 - bias)
                dvy[s.index] += y * (1 - bias)
        buffer.add(dvx, dvy)


class ManyBodyForce(Force):
    """
    Mutual repulsion (negative strength) between all nodes.

    Distant groups of nodes are approximated by their aggregate charge using
    a Barnes-Hut quad-tree; a cell is treated as a single body when its width
    divided by the distance is below theta.
    """
    name = "charge"

    def __init__(self, strength: float = -300.0, theta: float = 0.9, distance_min: float = 1.0):
        self.strength = strength
        self.theta2 = theta * theta
        self.distance_min2 = distance_min * distance_min

    def apply(self, nodes, edges, alpha, buffer):
        if len(nodes) < 2:
            return
        tree = QuadTree([(node.x, node.y) for node in nodes])
        strengths = [self.strength] * len(nodes)
        tree.accumulate_charge(strengths)

        dvx = [0.0] * len(nodes)
        dvy = [0.0] * len(nodes)
        for node in nodes:
            fx, fy = self._accumulate(tree, node, strengths, alpha)
            dvx[node.index] = fx
            dvy[node.index] = fy
        buffer.add(dvx, dvy)

    def _accumulate(self, tree: QuadTree, node: LayoutNode, strengths: Sequence[float], alpha: float):
        fx = fy = 0.0
        stack = [tree.root]
        while stack:
            quad = stack.pop()
            if not quad.value:
                continue
            x = quad.cx - node.x
            y = quad.cy - node.y
            w = quad.width
            dist2 = x * x + y * y

            # Far enough away: treat the whole cell as one body.
            # Overflowed aggregates are never approximated; the cell is opened instead.
            if math.isfinite(dist2) and w * w / self.theta2 < dist2:
                if dist2 < self.distance_min2:
                    dist2 = math.sqrt(self.distance_min2 * dist2)
                fx += x * quad.value * alpha / dist2
                fy += y * quad.value * alpha / dist2
                continue

            if not quad.is_leaf:
                stack.extend(quad.children)
                continue

            for j in quad.points:
                if j == node.index:
                    continue
                x = tree.xs[j] - node.x
                y = tree.ys[j] - node.y
                if x == 0:
                    x = self._jiggle()
                if y == 0:
                    y = self._jiggle()
                dist2 = x * x + y * y
                if not math.isfinite(dist2):
                    continue
                if dist2 < self.distance_min2:
                    dist2 = math.sqrt(self.distance_min2 * dist2)
                k = strengths[j] * alpha / dist2
                fx += x * k
                fy += y * k
        return fx, fy


class CenterForce(Force):
    """Weak pull of the node-set centroid toward (x, y)."""
    name = "center"

    def __init__(self, x: float = 0.0, y: float = 0.0, strength: float = 0.1):
        self.x = x
        self.y = y
        self.strength = strength

    def apply(self, nodes, edges, alpha, buffer):
        if not nodes:
            return
        sx = sum(node.x for node in nodes) / len(nodes)
        sy = sum(node.y for node in nodes) / len(nodes)
        buffer.shift_x += (self.x - sx) * self.strength * alpha
        buffer.shift_y += (self.y - sy) * self.strength * alpha


class CollideForce(Force):
    """
    Keeps node circles from overlapping.

    Positions are predicted one step ahead (position + velocity) and every
    overlapping pair is pushed apart by `strength` of the overlap, larger
    nodes moving less. Candidate pairs come from a quad-tree whose cells
    carry the largest radius they contain.
    """
    name = "collide"

    def __init__(self, margin: float = 18.0, strength: float = 0.7, iterations: int = 1,
                 radii: Optional[Dict[NodeKind, float]] = None):
        self.margin = margin
        self.strength = strength
        self.iterations = iterations
        self.kind_radii = radii or NODE_RADII
        self.radii: List[float] = []

    def initialize(self, nodes, edges, jiggle):
        super().initialize(nodes, edges, jiggle)
        self.radii = [self.kind_radii[node.kind] + self.margin for node in nodes]

    def apply(self, nodes, edges, alpha, buffer):
        n = len(nodes)
        if n < 2:
            return
        dvx = [0.0] * n
        dvy = [0.0] * n
        strength = self.strength * alpha
        for _ in range(self.iterations):
            px = [node.x + node.vx + dvx[node.index] for node in nodes]
            py = [node.y + node.vy + dvy[node.index] for node in nodes]
            tree = QuadTree(list(zip(px, py)))
            tree.accumulate_radius(self.radii)
            for i in range(n):
                self._resolve(tree, i, px, py, dvx, dvy, strength)
        buffer.add(dvx, dvy)

    def _resolve(self, tree: QuadTree, i: int, px, py, dvx, dvy, strength: float) -> None:
        ri = self.radii[i]
        ri2 = ri * ri
        xi = px[i]
        yi = py[i]

        def visit(quad: Quad) -> bool:
            reach = ri + quad.radius
            if not quad.is_leaf:
                return (quad.x0 > xi + reach or quad.x1 < xi - reach
                        or quad.y0 > yi + reach or quad.y1 < yi - reach)
            for j in quad.points:
                if j <= i:
                    continue
                rj = self.radii[j]
                r = ri + rj
                x = xi - px[j]
                y = yi - py[j]
                dist2 = x * x + y * y
                if dist2 >= r * r:
                    continue
                if x == 0:
                    x = self._jiggle()
                    dist2 += x * x
                if y == 0:
                    y = self._jiggle()
                    dist2 += y * y
                dist = math.sqrt(dist2)
                k = (r - dist) / dist * strength
                x *= k
                y *= k
                share = rj * rj / (ri2 + rj * rj)
                self._nudge(i, x * share, y * share, px, py, dvx, dvy)
                self._nudge(j, -x * (1 - share), -y * (1 - share), px, py, dvx, dvy)
            return True

        tree.visit(visit)

    @staticmethod
    def _nudge(index: int, dx: float, dy: float, px, py, dvx, dvy) -> None:
        # Keep predicted positions live so later pairs in the pass see the push.
        dvx[index] += dx
        dvy[index] += dy
        px[index] += dx
        py[index] += dy


def default_forces(config: Settings) -> List[Force]:
    """The fixed, ordered force list used by the layout engine."""
    return [
        LinkForce(distance=config.LINK_DISTANCE, iterations=config.LINK_ITERATIONS),
        ManyBodyForce(strength=config.CHARGE_STRENGTH, theta=config.CHARGE_THETA,
                      distance_min=config.CHARGE_DISTANCE_MIN),
        CenterForce(x=config.CANVAS_WIDTH / 2, y=config.CANVAS_HEIGHT / 2, strength=config.CENTER_STRENGTH),
        CollideForce(margin=config.COLLISION_MARGIN, strength=config.COLLISION_STRENGTH,
                     iterations=config.COLLISION_ITERATIONS),
    ]
