# /core/graph_builder.py
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core.models import (
    BIOLOGY_FIELDS,
    NODE_GROUPS,
    NUMERIC_FIELDS,
    PARAMETER_FIELDS,
    EdgeCategory,
    GraphEdge,
    GraphNode,
    GraphSnapshot,
    MeasurementRecord,
    NodeKind,
)
from core.config import Settings, settings as default_settings
from core.logger import get_logger

logger = get_logger(__name__)

TEMPORAL_WEIGHT = 1.0

def node_id(kind: NodeKind, label: str) -> str:
    """Deterministic id for a (kind, label) pair, e.g. 'region:Pacific'."""
    return f"{kind.value}:{label}"

def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))

def _distinct(values: Iterable) -> List:
    """Distinct values in order of first occurrence."""
    return list(dict.fromkeys(values))

def _make_node(kind: NodeKind, label: str) -> GraphNode:
    return GraphNode(id=node_id(kind, label), kind=kind, label=label, group=NODE_GROUPS[kind])

def region_means(records: Sequence[MeasurementRecord]) -> Dict[str, Dict[str, float]]:
    """
    Arithmetic mean of every numeric field, per region.
    Regions appear in order of first occurrence.
    """
    sums: Dict[str, Dict[str, float]] = {}
    counts: Dict[str, int] = {}
    for record in records:
        totals = sums.setdefault(record.region, {field: 0.0 for field in NUMERIC_FIELDS})
        for field in NUMERIC_FIELDS:
            totals[field] += getattr(record, field)
        counts[record.region] = counts.get(record.region, 0) + 1

    return {
        region: {field: total / counts[region] for field, total in totals.items()}
        for region, totals in sums.items()
    }

def build(records: Sequence[MeasurementRecord], config: Optional[Settings] = None) -> GraphSnapshot:
    """
    Builds the knowledge graph snapshot for a sequence of validated records.

    Nodes are created before edges, so every edge endpoint exists by construction.
    An empty record sequence yields an empty snapshot.
    """
    config = config or default_settings
    if not records:
        logger.info("No records supplied, returning an empty snapshot.")
        return GraphSnapshot()

    # --- Nodes ---
    regions = _distinct(record.region for record in records)
    periods = _distinct(record.year_month for record in records)

    nodes: List[GraphNode] = []
    nodes.extend(_make_node(NodeKind.REGION, region) for region in regions)
    nodes.extend(_make_node(NodeKind.PARAMETER, field) for field in PARAMETER_FIELDS)
    nodes.extend(_make_node(NodeKind.BIOLOGY, field) for field in BIOLOGY_FIELDS)
    nodes.extend(_make_node(NodeKind.TIME, period) for period in periods)

    # --- Region -> attribute edges ---
    edges: List[GraphEdge] = []
    for region, means in region_means(records).items():
        source = node_id(NodeKind.REGION, region)
        for field in PARAMETER_FIELDS:
            edges.append(GraphEdge(
                source=source,
                target=node_id(NodeKind.PARAMETER, field),
                weight=clamp(means[field] / config.PARAMETER_WEIGHT_SCALE, config.MIN_EDGE_WEIGHT, config.MAX_EDGE_WEIGHT),
                category=EdgeCategory.PARAMETER,
            ))
        for field in BIOLOGY_FIELDS:
            edges.append(GraphEdge(
                source=source,
                target=node_id(NodeKind.BIOLOGY, field),
                weight=clamp(means[field] / config.BIOLOGY_WEIGHT_SCALE, config.MIN_EDGE_WEIGHT, config.MAX_EDGE_WEIGHT),
                category=EdgeCategory.BIOLOGY,
            ))

    # --- Temporal edges, one per distinct (period, region) pair ---
    pairs: List[Tuple[str, str]] = _distinct((record.year_month, record.region) for record in records)
    for period, region in pairs:
        edges.append(GraphEdge(
            source=node_id(NodeKind.TIME, period),
            target=node_id(NodeKind.REGION, region),
            weight=TEMPORAL_WEIGHT,
            category=EdgeCategory.TEMPORAL,
        ))

    snapshot = GraphSnapshot(nodes=nodes, edges=edges)
    logger.info("Knowledge graph built", extra={"records": len(records), **snapshot_summary(snapshot)})
    return snapshot

def snapshot_summary(snapshot: GraphSnapshot) -> Dict[str, int]:
    """Node and edge counts per kind and category."""
    summary = {"nodes": len(snapshot.nodes), "edges": len(snapshot.edges)}
    for kind in NodeKind:
        summary[f"{kind.value}_nodes"] = len(snapshot.nodes_of_kind(kind))
    for category in EdgeCategory:
        summary[f"{category.value}_edges"] = len(snapshot.edges_of_category(category))
    return summary

if __name__ == '__main__':
    sample_records = [
        MeasurementRecord(region="Pacific", date="2025-01-15", depth=120, salinity=34.5, temperature=18.2,
                          ph=8.1, dissolved_oxygen=6.8, fish_population=540, plankton=1200, coral_coverage=35),
        MeasurementRecord(region="Atlantic", date="2025-02-20", depth=80, salinity=35.1, temperature=15.4,
                          ph=8.0, dissolved_oxygen=7.2, fish_population=310, plankton=950, coral_coverage=12),
    ]
    graph = build(sample_records)
    print(f"Nodes: {len(graph.nodes)}, Edges: {len(graph.edges)}")
    for edge in graph.edges:
        print(f"  {edge.source} -> {edge.target} ({edge.category.value}, {edge.weight:.2f})")
