"""Tests for hammock.server.negotiation: return value to Response."""

import json
from dataclasses import dataclass
from xml.etree import ElementTree

import pytest

from hammock.data import Field, Model
from hammock.http.response import Response
from hammock.server.negotiation import negotiate


class Tag(Model):
    fields = (Field("name", "string"),)


@dataclass(frozen=True, slots=True)
class Point:
    x: int
    y: int


class TestNegotiate:
    def test_response_passthrough(self) -> None:
        response = Response("custom", status=201, content_type="text/plain")
        assert negotiate(response) is response

    def test_none_is_empty_html(self) -> None:
        response = negotiate(None)
        assert response.status == 200
        assert response.body == ""
        assert response.content_type == "text/html"

    def test_string_is_html(self) -> None:
        response = negotiate("<p>hi</p>")
        assert response.body == "<p>hi</p>"
        assert response.content_type == "text/html"

    def test_empty_string(self) -> None:
        assert negotiate("").body == ""

    def test_dict_is_pretty_json(self) -> None:
        response = negotiate({"b": 1, "a": 2})
        assert response.content_type == "application/json"
        assert response.text == '{\n    "b": 1,\n    "a": 2\n}'

    def test_json_keeps_insertion_order(self) -> None:
        keys = ["zeta", "alpha", "mid"]
        response = negotiate(dict.fromkeys(keys, 0))
        assert list(json.loads(response.text)) == keys

    def test_list(self) -> None:
        response = negotiate([1, 2])
        assert response.content_type == "application/json"
        assert response.json() == [1, 2]

    @pytest.mark.parametrize("value", [0, 3.5, True, False])
    def test_scalars_are_json(self, value: object) -> None:
        response = negotiate(value)
        assert response.content_type == "application/json"
        assert response.json() == value

    def test_model(self) -> None:
        response = negotiate(Tag({"id": 3, "name": "python"}))
        assert response.json() == {"id": 3, "name": "python"}

    def test_nested_models(self) -> None:
        response = negotiate({"tags": [Tag({"name": "a"}), Tag({"name": "b"})]})
        assert response.json() == {"tags": [{"name": "a"}, {"name": "b"}]}

    def test_dataclass(self) -> None:
        assert negotiate(Point(1, 2)).json() == {"x": 1, "y": 2}

    def test_unserializable(self) -> None:
        with pytest.raises(TypeError, match="object"):
            negotiate(object())

    def test_element_is_xml(self) -> None:
        root = ElementTree.Element("items")
        ElementTree.SubElement(root, "item", id="1").text = "first"
        response = negotiate(root)
        assert response.content_type == "application/xml"
        assert response.text.startswith('<?xml version="1.0" encoding="utf-8"?>\n')
        assert '<items><item id="1">first</item></items>' in response.text

    def test_element_tree_is_xml(self) -> None:
        tree = ElementTree.ElementTree(ElementTree.Element("empty"))
        response = negotiate(tree)
        assert response.content_type == "application/xml"
        assert response.text.endswith("<empty />")
