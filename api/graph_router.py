from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Any, Dict

from api.request_models import DragMoveRequest, PinRequest, RecordsRequest, ReheatRequest, ViewTransformRequest
from api.streaming_logic import stream_layout
from core.exceptions import LayoutError, NoGraphLoadedError, StreamInProgressError, UnknownNodeError
from core.graph_builder import snapshot_summary
from core.logger import get_logger
from core.session import GraphSession

logger = get_logger(__name__)

router = APIRouter(
    prefix="/graph",
    tags=["Knowledge Graph"]
)

# Every endpoint is async so that ticks and interaction calls run one at a
# time on the event loop.
_session = GraphSession()

def get_session() -> GraphSession:
    return _session

def _to_http(exc: Exception) -> HTTPException:
    if isinstance(exc, UnknownNodeError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, (NoGraphLoadedError, StreamInProgressError)):
        return HTTPException(status_code=409, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))

def _positions_payload(positions) -> Dict[str, Dict[str, float]]:
    return {node_id: {"x": p.x, "y": p.y} for node_id, p in positions.items()}

def _engine_payload(session: GraphSession) -> Dict[str, Any]:
    engine = session.engine
    return {
        "state": engine.state.value,
        "alpha": engine.alpha,
        "tick": engine.tick_count,
        "positions": _positions_payload(engine.positions()),
    }


# --- Dataset ---

@router.post("/records")
async def load_records(request: RecordsRequest, session: GraphSession = Depends(get_session)):
    """Builds a new graph from the records, discarding the previous one."""
    snapshot = session.load(request.records)
    logger.info(f"Loaded {len(request.records)} records into a new graph.")
    return {"message": "Graph built.", "summary": snapshot_summary(snapshot)}

@router.post("/regenerate")
async def regenerate(session: GraphSession = Depends(get_session)):
    """Rebuilds the graph from the current records and restarts the layout."""
    try:
        snapshot = session.regenerate()
    except NoGraphLoadedError as e:
        raise _to_http(e)
    return {"message": "Graph regenerated.", "summary": snapshot_summary(snapshot)}

@router.get("/")
async def get_graph(session: GraphSession = Depends(get_session)):
    """Returns the node/edge structure of the current snapshot."""
    try:
        return session.snapshot.to_export_dict()
    except NoGraphLoadedError as e:
        raise _to_http(e)

@router.get("/summary")
async def get_summary(session: GraphSession = Depends(get_session)):
    try:
        return snapshot_summary(session.snapshot)
    except NoGraphLoadedError as e:
        raise _to_http(e)


# --- Simulation ---

@router.get("/positions")
async def get_positions(session: GraphSession = Depends(get_session)):
    try:
        return _engine_payload(session)
    except NoGraphLoadedError as e:
        raise _to_http(e)

@router.post("/step")
async def step(dt: float = Query(1.0), session: GraphSession = Depends(get_session)):
    """Advances the layout by one tick. Refused while a stream is advancing it."""
    try:
        session.ensure_not_streaming()
        session.engine.step(dt)
        return _engine_payload(session)
    except (NoGraphLoadedError, StreamInProgressError, LayoutError) as e:
        raise _to_http(e)

@router.post("/reheat")
async def reheat(request: ReheatRequest, session: GraphSession = Depends(get_session)):
    try:
        alpha = session.engine.reheat(request.alpha)
    except (NoGraphLoadedError, LayoutError) as e:
        raise _to_http(e)
    return {"alpha": alpha, "state": session.engine.state.value}

@router.get("/stream")
async def stream(max_ticks: int = Query(None, gt=0), session: GraphSession = Depends(get_session)):
    """Streams render frames (Server-Sent Events) until the layout converges. One stream at a time."""
    try:
        return stream_layout(session, max_ticks=max_ticks)
    except (NoGraphLoadedError, StreamInProgressError) as e:
        raise _to_http(e)


# --- Interaction ---

@router.put("/nodes/{node_id}/pin")
async def pin_node(node_id: str, request: PinRequest, session: GraphSession = Depends(get_session)):
    try:
        session.engine.pin(node_id, request.x, request.y)
    except (NoGraphLoadedError, LayoutError) as e:
        raise _to_http(e)
    return {"node_id": node_id, "x": request.x, "y": request.y}

@router.delete("/nodes/{node_id}/pin")
async def unpin_node(node_id: str, session: GraphSession = Depends(get_session)):
    try:
        session.engine.unpin(node_id)
    except (NoGraphLoadedError, LayoutError) as e:
        raise _to_http(e)
    return {"node_id": node_id, "pinned": False}

@router.post("/nodes/{node_id}/drag/start")
async def drag_start(node_id: str, session: GraphSession = Depends(get_session)):
    try:
        position = session.drag.start(node_id)
    except (NoGraphLoadedError, LayoutError) as e:
        raise _to_http(e)
    return {"node_id": node_id, "x": position.x, "y": position.y, "alpha": session.engine.alpha}

@router.post("/nodes/{node_id}/drag/move")
async def drag_move(node_id: str, request: DragMoveRequest, session: GraphSession = Depends(get_session)):
    try:
        if request.screen:
            position = session.drag.move_on_screen(node_id, request.x, request.y)
        else:
            session.drag.move(node_id, request.x, request.y)
            position = session.engine.position_of(node_id)
    except (NoGraphLoadedError, LayoutError) as e:
        raise _to_http(e)
    return {"node_id": node_id, "x": position.x, "y": position.y}

@router.post("/nodes/{node_id}/drag/end")
async def drag_end(node_id: str, session: GraphSession = Depends(get_session)):
    try:
        session.drag.end(node_id)
    except (NoGraphLoadedError, LayoutError) as e:
        raise _to_http(e)
    return {"node_id": node_id, "pinned": False}

@router.post("/nodes/{node_id}/select")
async def select_node(node_id: str, session: GraphSession = Depends(get_session)):
    try:
        node = session.engine.select(node_id)
    except (NoGraphLoadedError, LayoutError) as e:
        raise _to_http(e)
    return node.model_dump(mode="json")

@router.get("/selected")
async def get_selected(session: GraphSession = Depends(get_session)):
    try:
        node = session.engine.selected_node
    except NoGraphLoadedError as e:
        raise _to_http(e)
    return {"selected": node.model_dump(mode="json") if node else None}

@router.delete("/selected")
async def clear_selected(session: GraphSession = Depends(get_session)):
    try:
        session.engine.clear_selection()
    except NoGraphLoadedError as e:
        raise _to_http(e)
    return {"selected": None}


# --- View ---

@router.put("/view")
async def set_view(request: ViewTransformRequest, session: GraphSession = Depends(get_session)):
    """Sets pan/zoom. Scale is clamped; node positions are untouched."""
    try:
        transform = session.engine.set_view_transform(request.scale, request.translate_x, request.translate_y)
    except (NoGraphLoadedError, LayoutError) as e:
        raise _to_http(e)
    return transform.model_dump()
