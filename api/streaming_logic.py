import json
import asyncio
from fastapi.responses import StreamingResponse

from core.config import settings
from core.layout_engine import LayoutEngine
from core.logger import get_logger
from core.render import build_frame
from core.session import GraphSession

logger = get_logger(__name__)

async def stream_layout_logic(session: GraphSession, engine: LayoutEngine, max_ticks: int, interval: float):
    """
    Steps the simulation and streams one render frame per tick until it converges.
    Stops early if a new dataset replaces the engine mid-stream.
    The engine must have been claimed with `session.claim_stream()`; it is released when the stream ends.
    """
    try:
        for _ in range(max_ticks):
            if session.engine is not engine:
                data = {"type": "replaced", "content": "A new graph was loaded."}
                yield f"data: {json.dumps(data)}\n\n"
                return

            engine.step()
            data = {"type": "tick", "content": build_frame(engine).model_dump(mode="json")}
            yield f"data: {json.dumps(data)}\n\n"

            if engine.is_converged:
                data = {"type": "converged", "content": {"ticks": engine.tick_count}}
                yield f"data: {json.dumps(data)}\n\n"
                return

            await asyncio.sleep(interval)
        logger.info("Layout stream reached its tick limit", extra={"max_ticks": max_ticks})
    finally:
        session.release_stream(engine)

def stream_layout(session: GraphSession, max_ticks: int = None, interval: float = None):
    engine = session.claim_stream()
    return StreamingResponse(
        stream_layout_logic(
            session,
            engine,
            max_ticks if max_ticks is not None else settings.STREAM_MAX_TICKS,
            interval if interval is not None else settings.STREAM_TICK_INTERVAL,
        ),
        media_type="text/event-stream"
    )
