from nametree.api import generate_tree
from nametree.export import export_tree
from nametree.graph import build_person_graph, load_graph
from nametree.resolver import resolve

SMITH_JONES = ["John Smith + Mary Jones", "Sarah John Smith"]


def test_person_graph_nodes_and_edges():
    graph = build_person_graph(resolve(SMITH_JONES).people)
    assert graph.number_of_nodes() == 5
    relations = [data["relation"] for _, _, data in graph.edges(data=True)]
    assert relations.count("child") == 4
    assert relations.count("spouse") == 1
    assert graph.nodes["Sarah John Smith"]["label"] == "Sarah John"
    assert graph.nodes["Mary Jones"]["surname"] == "Jones"


def test_generations_follow_deepest_parent():
    graph = build_person_graph(resolve(SMITH_JONES + ["Tom Sarah John Smith"]).people)
    generations = {node: data["generation"] for node, data in graph.nodes(data=True)}
    assert generations == {
        "John Smith": 1,
        "Smith": 0,
        "Mary Jones": 1,
        "Jones": 0,
        "Sarah John Smith": 2,
        "Tom Sarah John Smith": 3,
    }


def test_load_graph_from_export(tmp_path):
    export_tree(generate_tree(SMITH_JONES), str(tmp_path))
    graph = load_graph(str(tmp_path))
    assert set(graph.nodes) == {"John Smith", "Smith", "Mary Jones", "Jones", "Sarah John Smith"}
    assert graph.nodes["Sarah John Smith"]["rootFullName"] == "Smith"


def test_load_graph_without_export_is_empty(tmp_path):
    assert load_graph(str(tmp_path)).number_of_nodes() == 0
