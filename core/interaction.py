# /core/interaction.py

from typing import Optional, Set

from core.exceptions import LayoutError
from core.layout_engine import LayoutEngine
from core.models import Position

class DragController:
    """
    Translates pointer drag gestures into engine calls.

    start: reheat and pin the node where it currently is.
    move:  pin the node under the pointer, every pointer-move event.
    end:   release the pin; the layout then cools down on its own.

    move and end are only accepted for a node whose drag was started.
    """

    def __init__(self, engine: LayoutEngine, reheat_alpha: Optional[float] = None):
        self.engine = engine
        self.reheat_alpha = engine.config.REHEAT_ALPHA if reheat_alpha is None else reheat_alpha
        self.active: Set[str] = set()

    def _require_active(self, node_id: str) -> None:
        # Unknown ids still surface as UnknownNodeError.
        self.engine.pin_of(node_id)
        if node_id not in self.active:
            raise LayoutError(f"No drag in progress for node '{node_id}'.")

    def start(self, node_id: str) -> Position:
        position = self.engine.position_of(node_id)
        self.engine.reheat(self.reheat_alpha)
        self.engine.pin(node_id, position.x, position.y)
        self.active.add(node_id)
        return position

    def move(self, node_id: str, x: float, y: float) -> None:
        """Pins the node at world coordinates (x, y)."""
        self._require_active(node_id)
        self.engine.pin(node_id, x, y)

    def move_on_screen(self, node_id: str, screen_x: float, screen_y: float) -> Position:
        """Pins the node under a pointer given in screen coordinates."""
        self._require_active(node_id)
        world = self.engine.view_transform.invert(screen_x, screen_y)
        self.engine.pin(node_id, world.x, world.y)
        return world

    def end(self, node_id: str) -> None:
        self._require_active(node_id)
        self.engine.unpin(node_id)
        self.active.discard(node_id)
