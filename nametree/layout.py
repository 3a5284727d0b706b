"""Deterministic 2D layout for family forests.

Spouses joined by union edges collapse into one *spouse group* that is drawn
on a single row. Descent edges between people become descent edges between
groups, which turns the forest into a tree of groups. Widths are measured
bottom-up and positions assigned top-down, so sibling subtrees never share
horizontal space. Independent trees are placed side by side and the whole
composite is centered on ``x = 0``.

Every traversal follows list order fixed by the forest builder (group members
in node order, child groups in edge order), so the same input always gives
the same coordinates.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .errors import LayoutCycleGuardTripped
from .schemas import LayoutEdge, LayoutNode, Position
from .utils import logger

BASE_GROUP_WIDTH = 100
TREE_GAP = 200
LABEL_CHAR_WIDTH = 8
SPOUSE_OFFSET_FACTOR = 1.5

DEFAULT_VERTICAL_SPACING = 300
DEFAULT_HORIZONTAL_GAP = 50


class Orientation(str, Enum):
    UP_TO_DOWN = "up-to-down"
    DOWN_TO_UP = "down-to-up"
    LEFT_TO_RIGHT = "left-to-right"
    RIGHT_TO_LEFT = "right-to-left"

    @property
    def angle(self) -> float:
        return _ANGLES[self]

    @property
    def matrix(self) -> Tuple[int, int]:
        """Exact ``(cos, sin)`` of the quarter-turn angle."""
        return _MATRICES[self]

    @property
    def is_vertical(self) -> bool:
        return self in (Orientation.UP_TO_DOWN, Orientation.DOWN_TO_UP)

    def next(self) -> "Orientation":
        members = list(Orientation)
        return members[(members.index(self) + 1) % len(members)]

    @classmethod
    def parse(cls, value: "str | Orientation") -> "Orientation":
        if isinstance(value, Orientation):
            return value
        normalized = value.strip().lower().replace("_", "-")
        for member in cls:
            if normalized in (member.value, member.name.lower().replace("_", "-")):
                return member
        raise ValueError(f"Unknown orientation '{value}'; expected one of {[m.value for m in cls]}")


_ANGLES = {
    Orientation.UP_TO_DOWN: 0.0,
    Orientation.DOWN_TO_UP: math.pi,
    Orientation.LEFT_TO_RIGHT: math.pi / 2,
    Orientation.RIGHT_TO_LEFT: -math.pi / 2,
}

_MATRICES = {
    Orientation.UP_TO_DOWN: (1, 0),
    Orientation.DOWN_TO_UP: (-1, 0),
    Orientation.LEFT_TO_RIGHT: (0, 1),
    Orientation.RIGHT_TO_LEFT: (0, -1),
}


@dataclass
class LayoutConfig:
    vertical_spacing: float = DEFAULT_VERTICAL_SPACING
    horizontal_gap: float = DEFAULT_HORIZONTAL_GAP
    orientation: Orientation = Orientation.UP_TO_DOWN

    def __post_init__(self) -> None:
        self.orientation = Orientation.parse(self.orientation)


class DisjointSet:
    """Union-find over node ids. The first argument's root wins a union."""

    def __init__(self, items: Iterable[str] = ()) -> None:
        self._parent: Dict[str, str] = {}
        for item in items:
            self.find(item)

    def __contains__(self, item: str) -> bool:
        return item in self._parent

    def find(self, item: str) -> str:
        if item not in self._parent:
            self._parent[item] = item
            return item
        root = item
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[item] != root:
            self._parent[item], item = root, self._parent[item]
        return root

    def union(self, left: str, right: str) -> str:
        left_root, right_root = self.find(left), self.find(right)
        if left_root != right_root:
            self._parent[right_root] = left_root
        return left_root


@dataclass
class LayoutPlan:
    """Intermediate results of one layout run, kept for inspection."""

    groups: Dict[str, List[str]]
    group_of: Dict[str, str]
    descent: Dict[str, Dict[str, None]]
    roots: List[str]
    cycles: List[Tuple[str, ...]] = field(default_factory=list)
    widths: Dict[str, float] = field(default_factory=dict)
    spans: Dict[str, Tuple[float, float]] = field(default_factory=dict)
    depths: Dict[str, int] = field(default_factory=dict)
    positions: Dict[str, Position] = field(default_factory=dict)


def group_spouses(nodes: Sequence[LayoutNode], edges: Iterable[LayoutEdge]) -> Tuple[Dict[str, str], Dict[str, List[str]]]:
    """Collapse union-connected nodes into spouse groups.

    Returns ``(group_of, groups)``: each node's group representative and the
    members of each group in node order.
    """

    components = DisjointSet(node.id for node in nodes)
    for edge in edges:
        if not edge.is_union:
            continue
        for endpoint in (edge.source, edge.target):
            if endpoint not in components:
                raise ValueError(f"Union edge {edge.source!r} - {edge.target!r} references unknown node {endpoint!r}")
        components.union(edge.source, edge.target)
    group_of = {node.id: components.find(node.id) for node in nodes}
    groups: Dict[str, List[str]] = {}
    for node in nodes:
        groups.setdefault(group_of[node.id], []).append(node.id)
    return group_of, groups


def descent_map(group_of: Mapping[str, str], edges: Iterable[LayoutEdge]) -> Dict[str, Dict[str, None]]:
    """Lift person-level descent edges to group level, dropping self-loops."""

    descent: Dict[str, Dict[str, None]] = {}
    for edge in edges:
        if edge.is_union:
            continue
        try:
            parent_group, child_group = group_of[edge.source], group_of[edge.target]
        except KeyError as exc:
            raise ValueError(f"Descent edge {edge.source!r} -> {edge.target!r} references unknown node {exc}") from exc
        if parent_group == child_group:
            continue
        descent.setdefault(parent_group, {})[child_group] = None
    return descent


def root_groups(groups: Mapping[str, List[str]], descent: Mapping[str, Mapping[str, None]]) -> List[str]:
    children = {child for targets in descent.values() for child in targets}
    return [rep for rep in groups if rep not in children]


def _cycle(path: Tuple[str, ...], rep: str) -> Tuple[str, ...]:
    start = path.index(rep)
    return path[start:] + (rep,)


def subtree_widths(
    roots: Iterable[str],
    descent: Mapping[str, Mapping[str, None]],
    horizontal_gap: float,
    base_width: float = BASE_GROUP_WIDTH,
    cycles: Optional[List[Tuple[str, ...]]] = None,
) -> Dict[str, float]:
    """Measure the horizontal footprint each group's subtree needs.

    A child group already on the current path closes a cycle. That branch is
    left out of the parent's width and the cycle is appended to ``cycles``.
    """

    widths: Dict[str, float] = {}

    def measure(rep: str, path: Tuple[str, ...]) -> float:
        path = path + (rep,)
        counted: List[float] = []
        for child in descent.get(rep, ()):
            if child in path:
                if cycles is not None:
                    cycles.append(_cycle(path, child))
                continue
            counted.append(measure(child, path))
        total = sum(counted) + horizontal_gap * max(len(counted) - 1, 0)
        width = max(base_width, total) if counted else base_width
        widths[rep] = width
        return width

    for rep in roots:
        measure(rep, ())
    return widths


def _label_width(node: LayoutNode) -> float:
    return len(node.label) * LABEL_CHAR_WIDTH * SPOUSE_OFFSET_FACTOR


def plan_layout(
    nodes: Sequence[LayoutNode],
    edges: Sequence[LayoutEdge],
    vertical_spacing: float = DEFAULT_VERTICAL_SPACING,
    horizontal_gap: float = DEFAULT_HORIZONTAL_GAP,
) -> LayoutPlan:
    group_of, groups = group_spouses(nodes, edges)
    descent = descent_map(group_of, edges)
    roots = root_groups(groups, descent)
    plan = LayoutPlan(groups=groups, group_of=group_of, descent=descent, roots=roots)
    plan.widths = subtree_widths(roots, descent, horizontal_gap, cycles=plan.cycles)

    node_index = {node.id: node for node in nodes}
    parents = {edge.source for edge in edges if not edge.is_union}
    positions = plan.positions

    def place(rep: str, x_start: float, depth: int, path: Tuple[str, ...]) -> None:
        width = plan.widths[rep]
        base_x = x_start + width / 2
        y = depth * vertical_spacing
        members = groups[rep]
        anchor = next((member for member in members if member in parents), members[0])
        positions[anchor] = Position(base_x, y)
        for member in members:
            if member == anchor:
                continue
            offset = _label_width(node_index[member])
            if member not in parents:
                positions[member] = Position(base_x + offset, y)
            else:
                anchor_position = positions[anchor]
                anchor_position.x -= offset / 2
                positions[member] = Position(anchor_position.x + offset, y)
        plan.spans[rep] = (x_start, x_start + width)
        plan.depths[rep] = depth
        path = path + (rep,)
        current_x = x_start
        for child in descent.get(rep, ()):
            if child in path:
                continue
            place(child, current_x, depth + 1, path)
            current_x += plan.widths[child] + horizontal_gap

    offset_x = 0.0
    for rep in roots:
        place(rep, offset_x, 0, ())
        offset_x += plan.widths[rep] + TREE_GAP
    total_width = offset_x - TREE_GAP
    center_offset = -total_width / 2
    for position in positions.values():
        position.x += center_offset
    plan.spans = {rep: (start + center_offset, end + center_offset) for rep, (start, end) in plan.spans.items()}

    missing = [node.id for node in nodes if node.id not in positions]
    if plan.cycles or missing:
        group_ids = [rep for cycle in plan.cycles for rep in cycle]
        group_ids.extend(dict.fromkeys(group_of[node_id] for node_id in missing))
        raise LayoutCycleGuardTripped(group_ids, positions=positions, unplaced=missing)
    logger.debug("Laid out %d nodes in %d groups across %d trees", len(positions), len(groups), len(roots))
    return plan


def compute_layout(
    nodes: Sequence[LayoutNode],
    edges: Sequence[LayoutEdge],
    vertical_spacing: float = DEFAULT_VERTICAL_SPACING,
    horizontal_gap: float = DEFAULT_HORIZONTAL_GAP,
) -> Dict[str, Position]:
    """Return canonical (unrotated) positions keyed by node id."""

    return plan_layout(nodes, edges, vertical_spacing, horizontal_gap).positions


def rotate(positions: Mapping[str, Position], orientation: "Orientation | str") -> Dict[str, Position]:
    """Rotate canonical positions and recenter them horizontally.

    Always pass the unrotated layout; rotations do not compose.
    """

    cos, sin = Orientation.parse(orientation).matrix
    rotated = {
        node_id: Position(pos.x * cos - pos.y * sin, pos.x * sin + pos.y * cos)
        for node_id, pos in positions.items()
    }
    if not rotated:
        return rotated
    xs = [pos.x for pos in rotated.values()]
    center_offset = -((min(xs) + max(xs)) / 2)
    for pos in rotated.values():
        pos.x += center_offset
    return rotated


def edge_smoothing(orientation: "Orientation | str") -> str:
    """Curve hint for renderers: edges bend across the flow direction."""

    return "horizontal" if Orientation.parse(orientation).is_vertical else "vertical"


def layout_forest(nodes: Sequence[LayoutNode], edges: Sequence[LayoutEdge], config: Optional[LayoutConfig] = None) -> Dict[str, Position]:
    config = config or LayoutConfig()
    canonical = compute_layout(nodes, edges, config.vertical_spacing, config.horizontal_gap)
    return rotate(canonical, config.orientation)


__all__ = [
    "BASE_GROUP_WIDTH",
    "TREE_GAP",
    "DisjointSet",
    "LayoutConfig",
    "LayoutPlan",
    "Orientation",
    "compute_layout",
    "descent_map",
    "edge_smoothing",
    "group_spouses",
    "layout_forest",
    "plan_layout",
    "root_groups",
    "rotate",
    "subtree_widths",
]
