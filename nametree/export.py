"""Export a generated tree for external renderers."""

from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING, Any, Dict, List

import networkx as nx

from .details import person_details
from .graph import build_person_graph
from .layout import edge_smoothing
from .resolver import search_records
from .schemas import DESCENT, UNION
from .utils import console

if TYPE_CHECKING:  # pragma: no cover
    from .api import TreeResult

EDGE_STYLES = {
    UNION: {"dashes": True, "width": 2, "arrows": None},
    DESCENT: {"dashes": False, "width": 1, "arrows": "to"},
}


def _is_scalar(value: object) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))


def sanitize_graph_for_graphml(graph: nx.MultiDiGraph) -> nx.MultiDiGraph:
    """Return a copy whose attributes are all GraphML-safe scalars.

    Lists (children, spouses, parents) are JSON-encoded and ``None`` values
    dropped, since the GraphML writer rejects both.
    """

    def _sanitize(data: Dict[str, Any]) -> Dict[str, Any]:
        clean: Dict[str, Any] = {}
        for key, value in data.items():
            if value is None:
                continue
            clean[key] = value if _is_scalar(value) else json.dumps(value, ensure_ascii=False)
        return clean

    safe = graph.__class__()
    for node, data in graph.nodes(data=True):
        safe.add_node(node, **_sanitize(data))
    for u, v, data in graph.edges(data=True):
        safe.add_edge(u, v, **_sanitize(data))
    return safe


def node_records(result: "TreeResult") -> List[Dict[str, Any]]:
    records = []
    for node in result.forest.nodes:
        position = result.positions.get(node.id)
        if position is None:
            continue
        records.append(
            {
                "id": node.id,
                "fullName": node.full_name,
                "label": node.label,
                "level": node.level,
                "group": node.group,
                "color": node.color,
                "x": position.x,
                "y": position.y,
            }
        )
    return records


def edge_records(result: "TreeResult") -> List[Dict[str, Any]]:
    placed = result.positions
    return [
        {"source": edge.source, "target": edge.target, "kind": edge.kind, "color": edge.color}
        for edge in result.forest.edges
        if edge.source in placed and edge.target in placed
    ]


def build_legend(result: "TreeResult") -> Dict[str, Any]:
    families: Dict[str, str] = {}
    for node in result.forest.nodes:
        families.setdefault(node.group, node.color)
    orientation = result.config.orientation
    return {
        "families": families,
        "edges": EDGE_STYLES,
        "orientation": orientation.value,
        "edge_smoothing": edge_smoothing(orientation),
    }


def _write_json(path: str, payload: Any) -> None:
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2, ensure_ascii=False)


def export_tree(result: "TreeResult", out_dir: str) -> Dict[str, str]:
    os.makedirs(out_dir, exist_ok=True)
    paths = {
        "people": os.path.join(out_dir, "people.json"),
        "nodes": os.path.join(out_dir, "nodes.json"),
        "edges": os.path.join(out_dir, "edges.json"),
        "search_index": os.path.join(out_dir, "search_index.json"),
        "legend": os.path.join(out_dir, "legend.json"),
        "graphml": os.path.join(out_dir, "graph.graphml"),
    }
    people = result.resolution.people
    _write_json(
        paths["people"],
        [dict(person.dict(), details=person_details(person)) for person in people.values()],
    )
    _write_json(paths["nodes"], node_records(result))
    _write_json(paths["edges"], edge_records(result))
    _write_json(paths["search_index"], search_records(people))
    _write_json(paths["legend"], build_legend(result))
    nx.write_graphml(sanitize_graph_for_graphml(build_person_graph(people)), paths["graphml"])
    console.log("Export ready", out_dir)
    return paths


__all__ = ["export_tree", "sanitize_graph_for_graphml", "EDGE_STYLES", "node_records", "edge_records", "build_legend"]
