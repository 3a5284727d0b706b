"""Project the person graph into per-surname family trees.

Each surname gets its own tree whose node ids are ``"<full name>@<surname>"``,
so a person married into another family shows up once in every tree that
reaches them. Descent edges follow the name structure only: a child hangs
under the parent whose full name it ends with. Spouses sit on their
partner's row and are linked with union edges.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Set

from .resolver import parent_name_of
from .schemas import DESCENT, UNION, LayoutEdge, LayoutNode, Person, surname_of
from .utils import family_color, logger

GROUP_DELIMITER = "@"


@dataclass
class Forest:
    """Layout-ready nodes and edges, in the order they were discovered."""

    nodes: List[LayoutNode] = field(default_factory=list)
    edges: List[LayoutEdge] = field(default_factory=list)
    _node_index: Dict[str, LayoutNode] = field(default_factory=dict, repr=False)
    _edge_keys: Set[str] = field(default_factory=set, repr=False)

    def node(self, node_id: str) -> LayoutNode:
        return self._node_index[node_id]

    def add_node(self, person: Person, level: int, surname: str) -> str:
        node_id = node_id_for(person.full_name, surname)
        if node_id not in self._node_index:
            node = LayoutNode(
                id=node_id,
                full_name=person.full_name,
                label=person.display_name,
                level=level,
                group=surname,
                color=family_color(surname),
            )
            self._node_index[node_id] = node
            self.nodes.append(node)
        return node_id

    def add_union_edge(self, source: str, target: str) -> None:
        key = "+".join(sorted((source, target)))
        if key in self._edge_keys:
            return
        self._edge_keys.add(key)
        self.edges.append(LayoutEdge(source, target, UNION, self.node(source).color))

    def add_descent_edge(self, source: str, target: str) -> None:
        key = f"{source}->{target}"
        if key in self._edge_keys:
            return
        self._edge_keys.add(key)
        self.edges.append(LayoutEdge(source, target, DESCENT, self.node(source).color))


def node_id_for(full_name: str, surname: str) -> str:
    return f"{full_name}{GROUP_DELIMITER}{surname}"


def group_of(node_id: str) -> str:
    return node_id.rsplit(GROUP_DELIMITER, 1)[1]


def full_name_of(node_id: str) -> str:
    return node_id.rsplit(GROUP_DELIMITER, 1)[0]


def family_surnames(people: Mapping[str, Person]) -> List[str]:
    return list(dict.fromkeys(surname_of(name) for name in people))


def family_roots(people: Mapping[str, Person], surname: str) -> List[Person]:
    roots = [p for p in people.values() if not p.parents and p.surname == surname]
    return sorted(roots, key=lambda p: p.full_name)


def is_named_parent(parent: Person, child: Person) -> bool:
    return parent_name_of(child.full_name) == parent.full_name


def add_person_network(
    forest: Forest,
    people: Mapping[str, Person],
    person: Person,
    surname: str,
    level: int,
    processed: Set[str],
    lineage: FrozenSet[str] = frozenset(),
) -> None:
    """Add ``person``, their named children and their spouses to ``forest``.

    ``processed`` holds everyone already visited on this spouse chain; it is
    shared with spouses and replaced by a fresh set for each child subtree.
    ``lineage`` holds everyone whose children are being expanded above this
    call, so a union with one's own ancestor cannot recurse forever.
    """

    if person.full_name in processed:
        return
    processed.add(person.full_name)
    lineage = lineage | {person.full_name}
    node_id = forest.add_node(person, level, surname)

    for child_name in person.children:
        child = people[child_name]
        if not is_named_parent(person, child):
            continue
        if child.full_name in lineage:
            logger.debug("Not re-expanding %s under %s", child.full_name, surname)
            continue
        child_id = forest.add_node(child, level + 1, surname)
        forest.add_descent_edge(node_id, child_id)
        add_person_network(forest, people, child, surname, level + 1, set(), lineage)

    for spouse_name in person.spouses:
        spouse = people[spouse_name]
        spouse_id = forest.add_node(spouse, level, surname)
        forest.add_union_edge(node_id, spouse_id)
        add_person_network(forest, people, spouse, surname, level, processed, lineage)


def build_forest(people: Mapping[str, Person]) -> Forest:
    forest = Forest()
    for surname in family_surnames(people):
        for root in family_roots(people, surname):
            add_person_network(forest, people, root, surname, 0, set())
    return forest


__all__ = [
    "Forest",
    "GROUP_DELIMITER",
    "build_forest",
    "family_roots",
    "family_surnames",
    "full_name_of",
    "group_of",
    "node_id_for",
]
