# /core/session.py

from typing import List, Optional, Sequence

from core.config import Settings, settings as default_settings
from core.exceptions import NoGraphLoadedError, StreamInProgressError
from core.graph_builder import build
from core.interaction import DragController
from core.layout_engine import LayoutEngine
from core.logger import get_logger
from core.models import GraphSnapshot, MeasurementRecord

logger = get_logger(__name__)

class GraphSession:
    """
    Holds the current dataset, its snapshot and the simulation running on it.

    Loading a dataset or regenerating discards the previous snapshot and
    simulation wholesale.

    At most one stream advances the current engine. While it runs, other
    streams and manual steps are refused.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings
        self._records: Optional[List[MeasurementRecord]] = None
        self._snapshot: Optional[GraphSnapshot] = None
        self._engine: Optional[LayoutEngine] = None
        self._drag: Optional[DragController] = None
        self._streamed_engine: Optional[LayoutEngine] = None

    @property
    def is_loaded(self) -> bool:
        return self._records is not None

    @property
    def is_streaming(self) -> bool:
        return self._engine is not None and self._streamed_engine is self._engine

    def claim_stream(self) -> LayoutEngine:
        """Reserves the current engine for one stream and returns it."""
        engine = self.engine
        if self.is_streaming:
            raise StreamInProgressError("The layout is already being streamed.")
        self._streamed_engine = engine
        return engine

    def release_stream(self, engine: LayoutEngine) -> None:
        if self._streamed_engine is engine:
            self._streamed_engine = None

    def ensure_not_streaming(self) -> None:
        if self.is_streaming:
            raise StreamInProgressError("The layout is being advanced by a stream.")

    def load(self, records: Sequence[MeasurementRecord]) -> GraphSnapshot:
        self._records = list(records)
        return self.regenerate()

    def regenerate(self) -> GraphSnapshot:
        if self._records is None:
            raise NoGraphLoadedError("No dataset has been loaded.")
        self._snapshot = build(self._records, self.config)
        self._engine = LayoutEngine(self._snapshot, self.config)
        self._drag = DragController(self._engine)
        logger.info("Session graph regenerated", extra={"records": len(self._records)})
        return self._snapshot

    @property
    def records(self) -> List[MeasurementRecord]:
        if self._records is None:
            raise NoGraphLoadedError("No dataset has been loaded.")
        return list(self._records)

    @property
    def snapshot(self) -> GraphSnapshot:
        if self._snapshot is None:
            raise NoGraphLoadedError("No dataset has been loaded.")
        return self._snapshot

    @property
    def engine(self) -> LayoutEngine:
        if self._engine is None:
            raise NoGraphLoadedError("No dataset has been loaded.")
        return self._engine

    @property
    def drag(self) -> DragController:
        if self._drag is None:
            raise NoGraphLoadedError("No dataset has been loaded.")
        return self._drag
