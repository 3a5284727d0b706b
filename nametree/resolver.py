"""Resolve name-structured input lines into a person graph.

Every line is either a union (``"John Smith + Mary Jones"``) or a single
full name (``"Sarah John Smith"``). A full name carries its own ancestry:
dropping the first token yields the parent's full name, so each person
pulls in the whole chain of implicit ancestors the first time it is seen.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from .errors import MalformedUnionError
from .schemas import Person
from .utils import logger

UNION_SEPARATOR = "+"


@dataclass
class ResolveResult:
    """Return value for :func:`resolve`. Owned by the caller for one run."""

    people: Dict[str, Person] = field(default_factory=dict)
    union_keys: Set[str] = field(default_factory=set)
    second_spouses: Set[str] = field(default_factory=set)
    errors: List[MalformedUnionError] = field(default_factory=list)

    def skipped_lines(self) -> List[str]:
        return [error.line for error in self.errors]


def normalize_name(raw: str) -> str:
    return " ".join(raw.split())


def parse_line(raw: str, line_number: Optional[int] = None) -> Optional[Tuple[str, ...]]:
    """Classify one input line.

    Returns ``None`` for blank lines, ``(left, right)`` for a union and
    ``(name,)`` for a descent line.
    """

    line = raw.strip()
    if not line:
        return None
    if UNION_SEPARATOR not in line:
        return (normalize_name(line),)
    parts = line.split(UNION_SEPARATOR)
    if len(parts) != 2:
        raise MalformedUnionError(line, line_number)
    left, right = (normalize_name(part) for part in parts)
    if not left or not right:
        raise MalformedUnionError(line, line_number, reason="both sides need a name")
    return (left, right)


def parent_name_of(name: str) -> Optional[str]:
    """Strip the leading given name; ``None`` once only one token is left."""

    return " ".join(name.split(" ")[1:]) or None


def union_key(left: str, right: str) -> str:
    return UNION_SEPARATOR.join(sorted((left, right)))


def link_parent_child(people: Mapping[str, Person], parent: str, child: str) -> None:
    people[child].add_parent(parent)
    people[parent].add_child(child)


def build_ancestry_chain(people: Dict[str, Person], name: str) -> str:
    """Materialize and link every implicit ancestor of ``name``.

    Returns the most distant ancestor reached, which is ``name`` itself for a
    single-token name.
    """

    created: List[str] = [name]
    current = name
    root = name
    while True:
        parent = parent_name_of(current)
        if parent is None:
            break
        if parent not in people:
            people[parent] = Person(parent)
            created.append(parent)
        link_parent_child(people, parent, current)
        current = parent
        root = parent
    for member in created:
        people[member].root_full_name = root
    return root


def ensure_person(people: Dict[str, Person], name: str) -> Person:
    """Idempotent lookup that synthesizes the ancestry chain on first sight."""

    if name not in people:
        people[name] = Person(name)
        build_ancestry_chain(people, name)
    return people[name]


def find_primary_parent(people: Mapping[str, Person], child: str, second_spouses: Set[str]) -> Optional[str]:
    # Heuristic: a parent seen on the right-hand side of a union wins.
    parents = people[child].parents
    if not parents:
        return None
    for parent in parents:
        if parent in second_spouses:
            return parent
    return parents[0]


def add_union(result: ResolveResult, left: str, right: str) -> None:
    ensure_person(result.people, left)
    ensure_person(result.people, right)
    key = union_key(left, right)
    if key in result.union_keys:
        return
    result.people[left].add_spouse(right)
    result.people[right].add_spouse(left)
    result.union_keys.add(key)
    result.second_spouses.add(right)


def add_descent(result: ResolveResult, child: str) -> None:
    ensure_person(result.people, child)
    parent = find_primary_parent(result.people, child, result.second_spouses)
    if parent:
        link_parent_child(result.people, parent, child)


def inherit_spouse_children(people: Mapping[str, Person]) -> None:
    """Give every spouse of a parent that parent's children.

    Runs once, one hop deep. People are visited in insertion order and see
    children added by earlier people in the same pass.
    """

    for person in people.values():
        for child in list(person.children):
            for spouse_name in list(person.spouses):
                spouse = people.get(spouse_name)
                if spouse is not None:
                    spouse.add_child(child)


def resolve(lines: Iterable[str]) -> ResolveResult:
    """Build a fresh person graph from ``lines``.

    Malformed union lines are recorded in ``errors`` and skipped; every other
    line still resolves.
    """

    result = ResolveResult()
    for line_number, raw in enumerate(lines, start=1):
        try:
            parsed = parse_line(raw, line_number)
        except MalformedUnionError as exc:
            logger.warning("Skipping %s", exc)
            result.errors.append(exc)
            continue
        if parsed is None:
            continue
        if len(parsed) == 2:
            add_union(result, parsed[0], parsed[1])
        else:
            add_descent(result, parsed[0])
    inherit_spouse_children(result.people)
    logger.debug(
        "Resolved %d people, %d unions, %d skipped lines",
        len(result.people),
        len(result.union_keys),
        len(result.errors),
    )
    return result


def resolve_text(text: str) -> ResolveResult:
    return resolve(text.splitlines())


def merge_metadata(people: Mapping[str, Person], metadata: Mapping[str, Mapping[str, Optional[str]]]) -> int:
    """Attach externally sourced dates and pictures keyed by full name.

    Returns the number of people updated.
    """

    updated = 0
    for name, data in metadata.items():
        person = people.get(name)
        if person is None:
            logger.debug("No person named %r for metadata", name)
            continue
        person.birth_date = data.get("birth_date")
        person.end_date = data.get("end_date")
        person.picture_url = data.get("picture_url")
        updated += 1
    return updated


def search_records(people: Mapping[str, Person]) -> List[Dict[str, str]]:
    """Flat ``{name, displayName}`` list for an external fuzzy search index."""

    return [{"name": person.full_name, "displayName": person.display_name} for person in people.values()]


__all__ = [
    "ResolveResult",
    "UNION_SEPARATOR",
    "parse_line",
    "parent_name_of",
    "union_key",
    "build_ancestry_chain",
    "ensure_person",
    "find_primary_parent",
    "inherit_spouse_children",
    "resolve",
    "resolve_text",
    "merge_metadata",
    "search_records",
]
