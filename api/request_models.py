from typing import List
from pydantic import BaseModel, Field

from core.models import MeasurementRecord

class RecordsRequest(BaseModel):
    records: List[MeasurementRecord] = Field(description="Validated measurement rows to build the graph from.")

class PinRequest(BaseModel):
    x: float
    y: float

class DragMoveRequest(BaseModel):
    x: float
    y: float
    screen: bool = Field(False, description="True when x/y are pointer coordinates before the view transform.")

class ReheatRequest(BaseModel):
    alpha: float = Field(0.3, gt=0, le=1, description="Alpha to raise the simulation to.")

class ViewTransformRequest(BaseModel):
    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0
