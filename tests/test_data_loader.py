import json

import pytest

from evidence_map.data_loader import load_map_file
from evidence_map.graph_builder import GraphDataError, build_graph


def test_loads_elements_and_connections(tmp_path):
    path = tmp_path / "map.json"
    path.write_text(json.dumps({
        "elements": [{"_id": "e1", "attributes": {"label": "One", "element type": "Democracy"}},
                     {"_id": "e2", "attributes": {"label": "Two"}}],
        "connections": [{"_id": "c1", "from": "e1", "to": "e2"}],
        "maps": [{"name": "ignored"}],
    }), encoding="utf-8")

    data = load_map_file(path)

    assert set(data) == {"elements", "connections"}
    graph = build_graph(data).graph
    assert graph.node("e1").color == "#143cff"


def test_missing_file_raises(tmp_path):
    with pytest.raises(GraphDataError):
        load_map_file(tmp_path / "nope.json")


def test_invalid_json_raises(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{", encoding="utf-8")

    with pytest.raises(GraphDataError):
        load_map_file(path)


def test_non_object_raises(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[]", encoding="utf-8")

    with pytest.raises(GraphDataError):
        load_map_file(path)


def test_file_without_connections_fails_graph_build(tmp_path):
    path = tmp_path / "partial.json"
    path.write_text(json.dumps({"elements": []}), encoding="utf-8")

    with pytest.raises(GraphDataError):
        build_graph(load_map_file(path))
