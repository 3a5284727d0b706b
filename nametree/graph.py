"""networkx projection of a resolved person graph."""

from __future__ import annotations

import json
import os
from collections import deque
from typing import Dict, Mapping

import networkx as nx

from .schemas import Person


def build_person_graph(people: Mapping[str, Person]) -> nx.MultiDiGraph:
    """One node per person, ``child`` edges parent->child, one ``spouse`` edge per pair."""

    graph = nx.MultiDiGraph()
    for name, person in people.items():
        record = person.dict()
        record.pop("fullName")
        graph.add_node(name, label=person.display_name, surname=person.surname, **record)
    seen_unions = set()
    for name, person in people.items():
        for child in person.children:
            graph.add_edge(name, child, relation="child")
        for spouse in person.spouses:
            key = tuple(sorted((name, spouse)))
            if key in seen_unions:
                continue
            seen_unions.add(key)
            graph.add_edge(name, spouse, relation="spouse")
    annotate_generations(graph)
    return graph


def annotate_generations(graph: nx.MultiDiGraph) -> Dict[str, int]:
    """Attach ``generation`` to each node from its recorded parents.

    Roots sit at generation 0; a child sits one below its deepest parent.
    Spouse links do not move anyone.
    """

    parents: Dict[str, list] = {node: [] for node in graph.nodes}
    children: Dict[str, list] = {node: [] for node in graph.nodes}
    for u, v, data in graph.edges(data=True):
        if data.get("relation") == "child":
            parents[v].append(u)
            children[u].append(v)

    remaining = {node: len(set(ups)) for node, ups in parents.items()}
    levels: Dict[str, int] = {}
    queue = deque(node for node, count in remaining.items() if count == 0)
    for node in queue:
        levels[node] = 0
    while queue:
        node = queue.popleft()
        for child in dict.fromkeys(children[node]):
            levels[child] = max(levels.get(child, 0), levels[node] + 1)
            remaining[child] -= 1
            if remaining[child] == 0:
                queue.append(child)
    for node in graph.nodes:
        graph.nodes[node]["generation"] = levels.get(node, 0)
    return levels


def load_graph(path: str) -> nx.MultiDiGraph:
    """Rebuild a person graph from an exported ``people.json``."""

    graph = nx.MultiDiGraph()
    people_path = os.path.join(path, "people.json")
    if not os.path.exists(people_path):
        return graph
    with open(people_path, "r", encoding="utf-8") as fh:
        records = json.load(fh)
    people: Dict[str, Person] = {}
    for record in records:
        people[record["fullName"]] = Person(
            full_name=record["fullName"],
            display_name=record.get("displayName", ""),
            parents=list(record.get("parents", [])),
            children=list(record.get("children", [])),
            spouses=list(record.get("spouses", [])),
            root_full_name=record.get("rootFullName", ""),
            birth_date=record.get("birthDate"),
            end_date=record.get("endDate"),
            picture_url=record.get("pictureUrl"),
        )
    return build_person_graph(people)


__all__ = ["build_person_graph", "annotate_generations", "load_graph"]
