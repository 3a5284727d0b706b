"""High-level API helpers for nametree."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .errors import LayoutCycleGuardTripped
from .export import export_tree
from .forest import Forest, build_forest
from .http import HTTPClient
from .layout import LayoutConfig, Orientation, compute_layout, rotate
from .resolver import ResolveResult, merge_metadata, resolve
from .schemas import Person, Position
from .sheets import SheetClient, is_sheet_url
from .utils import logger

Metadata = Mapping[str, Mapping[str, Optional[str]]]


@dataclass
class TreeResult:
    """Everything one submission produced. ``positions`` are rotated."""

    resolution: ResolveResult
    forest: Forest
    canonical_positions: Dict[str, Position]
    config: LayoutConfig
    layout_error: Optional[LayoutCycleGuardTripped] = None
    positions: Dict[str, Position] = field(init=False)

    def __post_init__(self) -> None:
        self.positions = rotate(self.canonical_positions, self.config.orientation)

    @property
    def people(self) -> Dict[str, Person]:
        return self.resolution.people

    def rotated(self, orientation: Union[Orientation, str]) -> Dict[str, Position]:
        return rotate(self.canonical_positions, orientation)

    def skipped_summary(self) -> List[str]:
        return [str(error) for error in self.resolution.errors]

    @property
    def unplaced(self) -> List[str]:
        """Node ids left out of the layout by a cut descent cycle."""
        return [node.id for node in self.forest.nodes if node.id not in self.canonical_positions]


def generate_tree(
    source: Union[str, Iterable[str]],
    config: Optional[LayoutConfig] = None,
    metadata: Optional[Metadata] = None,
) -> TreeResult:
    """Resolve, group and lay out one submission from scratch.

    A descent cycle between spouse groups does not lose the run: the trees
    that could be placed are kept and the error is attached to the result.
    """

    config = replace(config) if config else LayoutConfig()
    lines = source.splitlines() if isinstance(source, str) else list(source)
    resolution = resolve(lines)
    if metadata:
        merge_metadata(resolution.people, metadata)
    forest = build_forest(resolution.people)
    layout_error = None
    try:
        canonical = compute_layout(forest.nodes, forest.edges, config.vertical_spacing, config.horizontal_gap)
    except LayoutCycleGuardTripped as exc:
        logger.error("Layout cut short, %d node(s) left unplaced: %s", len(exc.unplaced), exc)
        canonical = exc.positions
        layout_error = exc
    return TreeResult(
        resolution=resolution,
        forest=forest,
        canonical_positions=canonical,
        config=config,
        layout_error=layout_error,
    )


class TreeSession:
    """Holds the latest tree; results of superseded submissions are dropped."""

    def __init__(self, config: Optional[LayoutConfig] = None) -> None:
        self.config = replace(config) if config else LayoutConfig()
        self.result: Optional[TreeResult] = None
        self._lock = threading.Lock()
        self._issued = 0

    def begin(self) -> int:
        with self._lock:
            self._issued += 1
            return self._issued

    def apply(self, ticket: int, result: TreeResult) -> bool:
        with self._lock:
            if ticket != self._issued:
                logger.debug("Dropping stale result %d (latest %d)", ticket, self._issued)
                return False
            self.result = result
            return True

    def submit(self, source: Union[str, Iterable[str]], metadata: Optional[Metadata] = None) -> Optional[TreeResult]:
        ticket = self.begin()
        result = generate_tree(source, self.config, metadata)
        return result if self.apply(ticket, result) else None

    def toggle_orientation(self) -> Optional[Dict[str, Position]]:
        """Advance to the next orientation and rotate the current tree."""

        with self._lock:
            self.config.orientation = self.config.orientation.next()
            if self.result is None:
                return None
            self.result.config.orientation = self.config.orientation
            self.result.positions = self.result.rotated(self.config.orientation)
            return self.result.positions

    def clear(self) -> None:
        with self._lock:
            self._issued += 1
            self.result = None


def load_source(source: str, sheet_client: Optional[SheetClient] = None) -> Tuple[str, Optional[Metadata]]:
    """Return ``(text, metadata)`` for raw input text or a sheet URL."""

    if not is_sheet_url(source):
        return source, None
    client = sheet_client or SheetClient(HTTPClient())
    sheet = client.fetch(source.strip())
    return sheet.text, sheet.metadata()


def run_pipeline(
    *,
    source: str,
    out_dir: str,
    config: Optional[LayoutConfig] = None,
    sheet_client: Optional[SheetClient] = None,
) -> TreeResult:
    """End-to-end helper that mirrors ``nametree build``."""

    text, metadata = load_source(source, sheet_client)
    result = generate_tree(text, config, metadata)
    export_tree(result, out_dir)
    return result


__all__ = ["TreeResult", "TreeSession", "generate_tree", "load_source", "run_pipeline"]
