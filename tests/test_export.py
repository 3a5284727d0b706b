import json
import os

import networkx as nx

from nametree.api import generate_tree
from nametree.details import DEFAULT_PICTURE_URL
from nametree.export import export_tree, sanitize_graph_for_graphml


def test_export_creates_files(tmp_path):
    result = generate_tree("John Smith + Mary Jones\nSarah John Smith")
    paths = export_tree(result, str(tmp_path))
    for key in ("people", "nodes", "edges", "search_index", "legend", "graphml"):
        assert (tmp_path / os.path.basename(paths[key])).exists()

    with open(paths["nodes"], "r", encoding="utf-8") as fh:
        nodes = json.load(fh)
    assert len(nodes) == 8
    smith = next(node for node in nodes if node["id"] == "Smith@Smith")
    assert (smith["x"], smith["y"]) == (-210, 0)
    assert smith["color"].startswith("hsl(")

    with open(paths["edges"], "r", encoding="utf-8") as fh:
        edges = json.load(fh)
    assert sum(1 for edge in edges if edge["kind"] == "union") == 2

    with open(paths["people"], "r", encoding="utf-8") as fh:
        people = json.load(fh)
    sarah = next(person for person in people if person["fullName"] == "Sarah John Smith")
    assert sarah["details"]["age"] == "N/A"
    assert sarah["details"]["picture"] == DEFAULT_PICTURE_URL

    with open(paths["legend"], "r", encoding="utf-8") as fh:
        legend = json.load(fh)
    assert set(legend["families"]) == {"Smith", "Jones"}
    assert legend["orientation"] == "up-to-down"
    assert legend["edge_smoothing"] == "horizontal"

    graph = nx.read_graphml(paths["graphml"])
    assert graph.number_of_nodes() == 5


def test_export_uses_rotated_positions(tmp_path):
    result = generate_tree(["John Smith + Mary Jones", "Sarah John Smith"])
    result.positions = result.rotated("left-to-right")
    paths = export_tree(result, str(tmp_path))
    with open(paths["nodes"], "r", encoding="utf-8") as fh:
        nodes = {node["id"]: node for node in json.load(fh)}
    assert (nodes["Smith@Smith"]["x"], nodes["Smith@Smith"]["y"]) == (300, -150)


def test_graphml_sanitization_encodes_lists_and_drops_none(tmp_path):
    graph = nx.MultiDiGraph()
    graph.add_node("John Smith", children=["Sarah John Smith"], birthDate=None, label="John Smith")
    graph.add_node("Sarah John Smith", label="Sarah John")
    graph.add_edge("John Smith", "Sarah John Smith", relation="child")

    sanitized = sanitize_graph_for_graphml(graph)
    assert sanitized.nodes["John Smith"]["children"] == '["Sarah John Smith"]'
    assert "birthDate" not in sanitized.nodes["John Smith"]
    nx.write_graphml(sanitized, tmp_path / "graph.graphml")
    assert graph.nodes["John Smith"]["children"] == ["Sarah John Smith"]


def test_export_skips_nodes_left_out_of_the_layout(tmp_path):
    result = generate_tree(["X + B Y", "Y + A X", "John Smith + Mary Jones", "Sarah John Smith"])
    paths = export_tree(result, str(tmp_path))
    with open(paths["nodes"], "r", encoding="utf-8") as fh:
        node_ids = {node["id"] for node in json.load(fh)}
    with open(paths["edges"], "r", encoding="utf-8") as fh:
        edges = json.load(fh)
    assert node_ids == set(result.canonical_positions)
    assert len(node_ids) == 8
    assert all(edge["source"] in node_ids and edge["target"] in node_ids for edge in edges)
    assert len(edges) == 6
