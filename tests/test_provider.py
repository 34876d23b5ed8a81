"""Tests for the REST and snapshot providers."""

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from errors import ProviderError
from provider import (
    FIGMA_API_URL,
    PLUGIN_NAMESPACE,
    RestApiProvider,
    SnapshotProvider,
    legacy_component_sets,
    read_component_set_settings,
)


def response(json_data=None, text=""):
    res = MagicMock()
    res.json.return_value = json_data
    res.text = text
    return res


def with_settings(component_set, settings):
    node = dict(component_set)
    node["sharedPluginData"] = {PLUGIN_NAMESPACE: {f"node_{node['id']}_settings": json.dumps(settings)}}
    return node


class TestReadComponentSetSettings:
    def test_exposed(self, button_component_set, button_settings):
        node = with_settings(button_component_set, button_settings)
        assert read_component_set_settings(node)["name"] == "Button"

    def test_not_exposed(self, button_component_set, button_settings):
        node = with_settings(button_component_set, {**button_settings, "exposed": False})
        assert read_component_set_settings(node) is None

    def test_invalid_json(self, button_component_set):
        node = dict(button_component_set, sharedPluginData={PLUGIN_NAMESPACE: {"node_1:1_settings": "{"}})
        assert read_component_set_settings(node) is None


class TestRestApiProvider:
    @pytest.fixture
    def provider(self):
        return RestApiProvider("KEY", "token")

    def test_sends_token_header(self, provider):
        with patch("provider.requests.get", return_value=response({"meta": {"styles": []}})) as mock_get:
            assert provider.get_local_styles() == []
        mock_get.assert_called_once()
        assert mock_get.call_args.kwargs["headers"] == {"X-Figma-Token": "token"}
        assert mock_get.call_args.args[0] == f"{FIGMA_API_URL}/files/KEY/styles"

    def test_local_styles_sorted_and_filtered(self, provider):
        styles = {"meta": {"styles": [{"node_id": "2:1", "sort_position": "b"}, {"node_id": "1:1", "sort_position": "a"}]}}
        nodes = {
            "nodes": {
                "1:1": {"document": {"type": "RECTANGLE", "id": "1:1"}},
                "2:1": {"document": {"type": "TEXT", "id": "2:1"}},
                "3:1": None,
                "4:1": {"document": {"type": "FRAME", "id": "4:1"}},
            }
        }
        with patch("provider.requests.get", side_effect=[response(styles), response(nodes)]) as mock_get:
            result = provider.get_local_styles()
        assert [node["id"] for node in result] == ["1:1", "2:1"]
        assert mock_get.call_args.kwargs["params"] == {"ids": "1:1,2:1"}

    def test_components(self, provider, button_component_set, button_settings):
        exposed = with_settings(button_component_set, button_settings)
        hidden = dict(exposed, id="7:1", sharedPluginData={})
        component_sets = {"meta": {"component_sets": [{"node_id": "1:1"}, {"node_id": "7:1"}]}}
        nodes = {
            "nodes": {
                "1:1": {"document": exposed, "components": {"1:2": {"description": "Large"}}},
                "7:1": {"document": hidden, "components": {}},
            }
        }
        with patch("provider.requests.get", side_effect=[response(component_sets), response(nodes)]) as mock_get:
            snapshots = provider.get_components()
        assert [s.name for s in snapshots] == ["button"]
        assert snapshots[0].components_metadata["1:2"]["description"] == "Large"
        assert mock_get.call_args.kwargs["params"]["plugin_data"] == "shared"

    def test_no_published_components(self, provider):
        with patch("provider.requests.get", return_value=response({"meta": {"component_sets": []}})):
            assert provider.get_components() == []

    def test_assets(self, provider):
        components = {
            "meta": {
                "components": [
                    {"node_id": "5:2", "name": "Arrow", "description": "d", "containing_frame": {"name": "Icons"}},
                    {"node_id": "5:1", "name": "Brand", "containing_frame": {"name": "Logo"}},
                ]
            }
        }
        images = {"images": {"5:2": "https://cdn.example/arrow.svg"}}
        with patch(
            "provider.requests.get",
            side_effect=[response(components), response(images), response(text="<svg/>")],
        ) as mock_get:
            assets = provider.get_assets("Icons")
        assert assets == [{"name": "Arrow", "description": "d", "data": "<svg/>", "extension": "svg"}]
        assert mock_get.call_args_list[1].kwargs["params"] == {"ids": "5:2", "format": "svg"}

    def test_request_errors_become_provider_errors(self, provider):
        with patch("provider.requests.get", side_effect=requests.ConnectionError("offline")):
            with pytest.raises(ProviderError):
                provider.get_local_styles()

    def test_http_errors_become_provider_errors(self, provider):
        res = response({})
        res.raise_for_status.side_effect = requests.HTTPError("403")
        with patch("provider.requests.get", return_value=res):
            with pytest.raises(ProviderError):
                provider.get_components()

    def test_legacy_definitions(self, button_component_set):
        legacy = {
            "id": "button",
            "options": {"exporter": {"search": "Button", "supportedVariantProps": {"design": ["Size", "State"]}}},
            "parts": [{"id": "$", "tokens": [{"from": "$", "export": ["BORDER"]}]}],
        }
        provider = RestApiProvider("KEY", "token", legacy_definitions=[legacy, {"id": "broken", "options": {}}])
        component_sets = {"meta": {"component_sets": [{"node_id": "1:1", "containing_frame": {"nodeId": "0:1"}}]}}
        nodes = {"nodes": {"1:1": {"document": button_component_set, "components": {}}}}
        with patch("provider.requests.get", side_effect=[response(component_sets), response(nodes)]):
            snapshots = provider.get_components()
        assert [s.name for s in snapshots] == ["button"]
        assert snapshots[0].definition.legacy_layout_properties == ()


class TestLegacyComponentSets:
    def test_sets_in_same_frame(self):
        sets = [{"id": "1", "name": "Button"}, {"id": "2", "name": "Button Icon"}, {"id": "3", "name": "Card"}]
        metadata = [
            {"node_id": "1", "containing_frame": {"nodeId": "f1"}},
            {"node_id": "2", "containing_frame": {"nodeId": "f1"}},
            {"node_id": "3", "containing_frame": {"nodeId": "f2"}},
        ]
        assert [s["id"] for s in legacy_component_sets(sets, metadata, "Button")] == ["1", "2"]

    def test_missing_set(self):
        assert legacy_component_sets([], [], "Button") == []


class TestSnapshotProvider:
    def test_from_dict(self, snapshot):
        provider = SnapshotProvider(snapshot)
        assert len(provider.get_local_styles()) == 3
        assert provider.get_assets("Icons")[0]["name"] == "Arrow Right"
        assert provider.get_assets("Missing") == []
        assert [s.name for s in provider.get_components()] == ["button"]

    def test_from_file(self, snapshot, tmp_path):
        path = tmp_path / "snapshot.json"
        path.write_text(json.dumps(snapshot))
        assert [s.name for s in SnapshotProvider(str(path)).get_components()] == ["button"]

    def test_plugin_data_on_node(self, snapshot, button_settings):
        entry = snapshot["componentSets"][0]
        entry["node"] = with_settings(entry.pop("node"), button_settings)
        del entry["settings"]
        assert [s.name for s in SnapshotProvider(snapshot).get_components()] == ["button"]

    def test_unreadable_snapshot(self, tmp_path):
        with pytest.raises(ProviderError):
            SnapshotProvider(tmp_path / "missing.json")
        with pytest.raises(ProviderError):
            SnapshotProvider(["not", "a", "dict"])
