from nametree.forest import build_forest, family_surnames, full_name_of, group_of
from nametree.resolver import resolve
from nametree.utils import family_color


def _forest(lines):
    return build_forest(resolve(lines).people)


def test_forest_nodes_for_smith_jones():
    forest = _forest(["John Smith + Mary Jones", "Sarah John Smith"])
    levels = {node.id: node.level for node in forest.nodes}
    assert levels == {
        "Smith@Smith": 0,
        "John Smith@Smith": 1,
        "Sarah John Smith@Smith": 2,
        "Mary Jones@Smith": 1,
        "Jones@Jones": 0,
        "Mary Jones@Jones": 1,
        "John Smith@Jones": 1,
        "Sarah John Smith@Jones": 2,
    }
    assert [node.id for node in forest.nodes][:4] == [
        "Smith@Smith",
        "John Smith@Smith",
        "Sarah John Smith@Smith",
        "Mary Jones@Smith",
    ]


def test_forest_edges_follow_named_parents_only():
    forest = _forest(["John Smith + Mary Jones", "Sarah John Smith"])
    descent = [(e.source, e.target) for e in forest.edges if not e.is_union]
    unions = [(e.source, e.target) for e in forest.edges if e.is_union]
    assert ("John Smith@Smith", "Sarah John Smith@Smith") in descent
    assert ("Mary Jones@Smith", "Sarah John Smith@Smith") not in descent
    assert unions == [
        ("John Smith@Smith", "Mary Jones@Smith"),
        ("Mary Jones@Jones", "John Smith@Jones"),
    ]


def test_forest_colors_follow_surname():
    forest = _forest(["John Smith + Mary Jones"])
    for node in forest.nodes:
        assert node.color == family_color(node.group)
    for edge in forest.edges:
        assert edge.color == family_color(group_of(edge.source))


def test_family_surnames_keep_first_seen_order():
    people = resolve(["Ann Lee", "Bo Kim", "Cy Lee"]).people
    assert family_surnames(people) == ["Lee", "Kim"]


def test_union_with_own_ancestor_terminates():
    forest = _forest(["A B + B"])
    ids = [node.id for node in forest.nodes]
    assert ids == ["B@B", "A B@B"]
    assert len(forest.edges) == 2


def test_node_id_helpers():
    assert group_of("Sarah John Smith@Smith") == "Smith"
    assert full_name_of("Sarah John Smith@Smith") == "Sarah John Smith"
