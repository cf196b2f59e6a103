# /core/quadtree.py

from typing import Callable, List, Optional, Sequence, Tuple

MAX_DEPTH = 32

class Quad:
    """A square cell of the tree. Leaves hold indices of points sharing one location."""
    __slots__ = ("x0", "y0", "x1", "y1", "children", "points", "value", "cx", "cy", "radius")

    def __init__(self, x0: float, y0: float, x1: float, y1: float):
        self.x0 = x0
        self.y0 = y0
        self.x1 = x1
        self.y1 = y1
        self.children: Optional[List["Quad"]] = None
        self.points: List[int] = []
        # Aggregates filled by QuadTree.accumulate_*
        self.value = 0.0
        self.cx = (x0 + x1) / 2
        self.cy = (y0 + y1) / 2
        self.radius = 0.0

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def is_leaf(self) -> bool:
        return self.children is None


class QuadTree:
    """
    Point region quad-tree over a fixed set of 2D points.

    Used for Barnes-Hut approximation of the many-body force (charge aggregates)
    and for neighbour search in collision resolution (radius aggregates).
    """

    def __init__(self, points: Sequence[Tuple[float, float]]):
        self.xs = [p[0] for p in points]
        self.ys = [p[1] for p in points]
        self.root = self._cover()
        for index in range(len(self.xs)):
            self._insert(self.root, index, 0)

    def __len__(self) -> int:
        return len(self.xs)

    def _cover(self) -> Quad:
        if not self.xs:
            return Quad(0.0, 0.0, 1.0, 1.0)
        x0, x1 = min(self.xs), max(self.xs)
        y0, y1 = min(self.ys), max(self.ys)
        # Square extent, at least one unit wide.
        size = max(x1 - x0, y1 - y0, 1.0)
        return Quad(x0, y0, x0 + size, y0 + size)

    def _coincident(self, a: int, b: int) -> bool:
        return self.xs[a] == self.xs[b] and self.ys[a] == self.ys[b]

    def _child_for(self, quad: Quad, index: int) -> Quad:
        mx = (quad.x0 + quad.x1) / 2
        my = (quad.y0 + quad.y1) / 2
        slot = (1 if self.xs[index] >= mx else 0) | (2 if self.ys[index] >= my else 0)
        return quad.children[slot]

    def _split(self, quad: Quad) -> None:
        mx = (quad.x0 + quad.x1) / 2
        my = (quad.y0 + quad.y1) / 2
        quad.children = [
            Quad(quad.x0, quad.y0, mx, my),
            Quad(mx, quad.y0, quad.x1, my),
            Quad(quad.x0, my, mx, quad.y1),
            Quad(mx, my, quad.x1, quad.y1),
        ]
        points, quad.points = quad.points, []
        for index in points:
            self._child_for(quad, index).points.append(index)

    def _insert(self, quad: Quad, index: int, depth: int) -> None:
        while True:
            if quad.is_leaf:
                if not quad.points or depth >= MAX_DEPTH or self._coincident(quad.points[0], index):
                    quad.points.append(index)
                    return
                self._split(quad)
            quad = self._child_for(quad, index)
            depth += 1

    def visit(self, callback: Callable[[Quad], bool]) -> None:
        """Pre-order traversal; children are skipped when the callback returns True."""
        stack = [self.root]
        while stack:
            quad = stack.pop()
            if callback(quad) or quad.is_leaf:
                continue
            stack.extend(reversed(quad.children))

    def _post_order(self) -> List[Quad]:
        order = []
        stack = [self.root]
        while stack:
            quad = stack.pop()
            order.append(quad)
            if not quad.is_leaf:
                stack.extend(quad.children)
        order.reverse()
        return order

    def accumulate_charge(self, strengths: Sequence[float]) -> None:
        """Total strength per quad, located at the strength-weighted centroid."""
        for quad in self._post_order():
            if quad.is_leaf:
                if quad.points:
                    first = quad.points[0]
                    quad.value = sum(strengths[i] for i in quad.points)
                    quad.cx, quad.cy = self.xs[first], self.ys[first]
                continue
            value = weight = sx = sy = 0.0
            for child in quad.children:
                if not child.value:
                    continue
                w = abs(child.value)
                value += child.value
                weight += w
                sx += w * child.cx
                sy += w * child.cy
            quad.value = value
            if weight:
                quad.cx, quad.cy = sx / weight, sy / weight

    def accumulate_radius(self, radii: Sequence[float]) -> None:
        """Largest radius of any point inside each quad."""
        for quad in self._post_order():
            if quad.is_leaf:
                quad.radius = max((radii[i] for i in quad.points), default=0.0)
            else:
                quad.radius = max(child.radius for child in quad.children)
