"""Records shared by the resolver, the forest builder and the layout."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

UNION = "union"
DESCENT = "descent"


def display_name_for(full_name: str) -> str:
    return " ".join(full_name.split(" ")[:2])


def surname_of(full_name: str) -> str:
    return full_name.split(" ")[-1]


@dataclass
class Person:
    """One named individual.

    ``full_name`` lists the given name first and the parent's full name after
    it, so ``"Sarah John Smith"`` is the child of ``"John Smith"``.
    ``children`` and ``spouses`` are kept as insertion-ordered, duplicate-free
    lists; the layout depends on that order.
    """

    full_name: str
    display_name: str = ""
    parents: List[str] = field(default_factory=list)
    children: List[str] = field(default_factory=list)
    spouses: List[str] = field(default_factory=list)
    root_full_name: str = ""
    birth_date: Optional[str] = None
    end_date: Optional[str] = None
    picture_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.display_name:
            self.display_name = display_name_for(self.full_name)
        if not self.root_full_name:
            self.root_full_name = self.full_name

    @property
    def surname(self) -> str:
        return surname_of(self.full_name)

    def add_parent(self, name: str) -> None:
        if name not in self.parents:
            self.parents.append(name)

    def add_child(self, name: str) -> None:
        if name not in self.children:
            self.children.append(name)

    def add_spouse(self, name: str) -> None:
        if name not in self.spouses:
            self.spouses.append(name)

    def dict(self) -> Dict[str, Any]:
        return {
            "fullName": self.full_name,
            "displayName": self.display_name,
            "parents": list(self.parents),
            "children": list(self.children),
            "spouses": list(self.spouses),
            "rootFullName": self.root_full_name,
            "birthDate": self.birth_date,
            "endDate": self.end_date,
            "pictureUrl": self.picture_url,
        }


@dataclass
class LayoutNode:
    id: str
    full_name: str
    label: str
    level: int
    group: str
    color: str = ""

    def dict(self) -> Dict[str, Any]:  # pragma: no cover - convenience
        return asdict(self)


@dataclass
class LayoutEdge:
    source: str
    target: str
    kind: str
    color: str = ""

    @property
    def is_union(self) -> bool:
        return self.kind == UNION

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Position:
    x: float
    y: float

    def dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


__all__ = [
    "Person",
    "LayoutNode",
    "LayoutEdge",
    "Position",
    "UNION",
    "DESCENT",
    "display_name_for",
    "surname_of",
]
