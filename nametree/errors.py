"""Error types raised across nametree."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional


class NametreeError(RuntimeError):
    pass


class MalformedUnionError(NametreeError):
    """A union line that does not split into exactly two non-empty names."""

    def __init__(self, line: str, line_number: Optional[int] = None, reason: str = "expected exactly one '+'") -> None:
        self.line = line
        self.line_number = line_number
        self.reason = reason
        where = f"line {line_number}" if line_number is not None else "line"
        super().__init__(f"Malformed union on {where}: {line!r} ({reason})")


class MissingDataSourceError(NametreeError):
    """An external data source (spreadsheet, CSV export) could not be read."""

    def __init__(self, source: str, reason: str) -> None:
        self.source = source
        self.reason = reason
        super().__init__(f"Data source unavailable: {source} ({reason})")


class LayoutCycleGuardTripped(NametreeError):
    """The layout met a descent cycle between spouse groups.

    ``positions`` holds whatever was placed before the offending branches were
    cut off, and ``unplaced`` the node ids that never received a position.
    """

    def __init__(
        self,
        group_ids: Iterable[str],
        positions: Optional[Dict[str, Any]] = None,
        unplaced: Iterable[str] = (),
    ) -> None:
        self.group_ids = list(group_ids)
        self.positions = dict(positions or {})
        self.unplaced = list(unplaced)
        preview = ", ".join(self.group_ids[:5])
        super().__init__(f"Descent cycle or unreachable groups in layout: {preview}")


__all__ = [
    "NametreeError",
    "MalformedUnionError",
    "MissingDataSourceError",
    "LayoutCycleGuardTripped",
]
