# /core/models.py

import re
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Set, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator

# This file holds all the shared Pydantic data structures.

YEAR_MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])")

PARAMETER_FIELDS = ["salinity", "temperature", "ph", "dissolved_oxygen", "depth"]
BIOLOGY_FIELDS = ["fish_population", "plankton", "coral_coverage"]
NUMERIC_FIELDS = ["depth", "salinity", "temperature", "ph", "dissolved_oxygen",
                  "fish_population", "plankton", "coral_coverage"]

class MeasurementRecord(BaseModel):
    """A single validated row of environmental measurements."""
    model_config = ConfigDict(frozen=True)

    region: str = Field(min_length=1, description="Name of the region the sample was taken in.")
    date: str = Field(description="Calendar date; the first 7 characters must be a YYYY-MM token.")
    depth: float
    salinity: float
    temperature: float
    ph: float
    dissolved_oxygen: float
    fish_population: float
    plankton: float
    coral_coverage: float
    latitude: Optional[float] = Field(default=None, description="Sampling latitude, not used by the graph.")
    longitude: Optional[float] = Field(default=None, description="Sampling longitude, not used by the graph.")
    timestamp: Optional[str] = Field(default=None, description="Raw timestamp from the source file.")

    @field_validator("date")
    @classmethod
    def date_starts_with_year_month(cls, value: str) -> str:
        if not YEAR_MONTH_PATTERN.match(value):
            raise ValueError(f"date '{value}' does not start with a YYYY-MM token")
        return value

    @property
    def year_month(self) -> str:
        return self.date[:7]


class NodeKind(str, Enum):
    REGION = "region"
    PARAMETER = "parameter"
    BIOLOGY = "biology"
    TIME = "time"


class EdgeCategory(str, Enum):
    PARAMETER = "parameter"
    BIOLOGY = "biology"
    TEMPORAL = "temporal"


# Styling group per kind.
NODE_GROUPS = {
    NodeKind.REGION: 1,
    NodeKind.PARAMETER: 2,
    NodeKind.BIOLOGY: 3,
    NodeKind.TIME: 4,
}

# Drawn radius per kind; collision adds a shared margin on top.
NODE_RADII = {
    NodeKind.REGION: 12.0,
    NodeKind.PARAMETER: 10.0,
    NodeKind.BIOLOGY: 8.0,
    NodeKind.TIME: 6.0,
}


class GraphNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Globally unique id derived from kind and label, e.g. 'region:Pacific'.")
    kind: NodeKind = Field(description="What the node stands for.")
    label: str = Field(description="Display value: region name, field name or YYYY-MM period.")
    group: int = Field(ge=1, le=4, description="Styling group, one per kind.")


class GraphEdge(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: str = Field(description="The ID of the source (context) node.")
    target: str = Field(description="The ID of the target (attribute) node.")
    weight: float = Field(description="Link strength; drives spring stiffness and stroke width.")
    category: EdgeCategory = Field(description="Which relation the edge encodes.")


class GraphSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    nodes: Tuple[GraphNode, ...] = Field(default_factory=tuple)
    edges: Tuple[GraphEdge, ...] = Field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def node_ids(self) -> Set[str]:
        return {node.id for node in self.nodes}

    def nodes_of_kind(self, kind: NodeKind) -> List[GraphNode]:
        return [node for node in self.nodes if node.kind == kind]

    def edges_of_category(self, category: EdgeCategory) -> List[GraphEdge]:
        return [edge for edge in self.edges if edge.category == category]

    def to_export_dict(self) -> Dict[str, Any]:
        """Plain node/edge structure handed to export collaborators."""
        return self.model_dump(mode="json")


class Position(NamedTuple):
    x: float
    y: float


class ViewTransform(BaseModel):
    """Pan/zoom affine mapping applied at render time only."""
    model_config = ConfigDict(frozen=True)

    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0

    def apply(self, x: float, y: float) -> Position:
        """World coordinates -> screen coordinates."""
        return Position(x * self.scale + self.translate_x, y * self.scale + self.translate_y)

    def invert(self, x: float, y: float) -> Position:
        """Screen coordinates -> world coordinates."""
        return Position((x - self.translate_x) / self.scale, (y - self.translate_y) / self.scale)
