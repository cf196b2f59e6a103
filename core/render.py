# /core/render.py

import math
from typing import List
from pydantic import BaseModel, Field

from core.layout_engine import LayoutEngine
from core.layout_state import PinnedAt
from core.models import NODE_RADII, EdgeCategory, NodeKind, ViewTransform

NODE_COLORS = {
    NodeKind.REGION: "hsl(220, 85%, 45%)",
    NodeKind.PARAMETER: "hsl(185, 70%, 45%)",
    NodeKind.BIOLOGY: "hsl(15, 85%, 60%)",
    NodeKind.TIME: "hsl(45, 85%, 55%)",
}

EDGE_COLORS = {
    EdgeCategory.PARAMETER: "hsl(185, 70%, 45%)",
    EdgeCategory.BIOLOGY: "hsl(15, 85%, 60%)",
    EdgeCategory.TEMPORAL: "hsl(45, 85%, 55%)",
}

class NodeGlyph(BaseModel):
    id: str
    label: str
    kind: NodeKind
    group: int
    x: float
    y: float
    radius: float
    color: str
    pinned: bool = False
    selected: bool = False

class LinkSegment(BaseModel):
    source: str
    target: str
    category: EdgeCategory
    x1: float
    y1: float
    x2: float
    y2: float
    width: float = Field(description="Stroke width, 2 * sqrt(weight).")
    color: str

class RenderFrame(BaseModel):
    """Everything a drawing layer needs for one tick, in world coordinates."""
    tick: int
    alpha: float
    state: str
    transform: ViewTransform
    nodes: List[NodeGlyph]
    links: List[LinkSegment]

def build_frame(engine: LayoutEngine) -> RenderFrame:
    positions = engine.positions()
    selected = engine.selected_node
    nodes = [
        NodeGlyph(
            id=node.id,
            label=node.label,
            kind=node.kind,
            group=node.group,
            x=positions[node.id].x,
            y=positions[node.id].y,
            radius=NODE_RADII[node.kind],
            color=NODE_COLORS[node.kind],
            pinned=isinstance(engine.pin_of(node.id), PinnedAt),
            selected=selected is not None and selected.id == node.id,
        )
        for node in engine.snapshot.nodes
    ]
    links = [
        LinkSegment(
            source=edge.source,
            target=edge.target,
            category=edge.category,
            x1=positions[edge.source].x,
            y1=positions[edge.source].y,
            x2=positions[edge.target].x,
            y2=positions[edge.target].y,
            width=math.sqrt(edge.weight) * 2,
            color=EDGE_COLORS[edge.category],
        )
        for edge in engine.snapshot.edges
    ]
    return RenderFrame(
        tick=engine.tick_count,
        alpha=engine.alpha,
        state=engine.state.value,
        transform=engine.view_transform,
        nodes=nodes,
        links=links,
    )
