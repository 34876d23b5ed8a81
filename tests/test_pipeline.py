"""End-to-end tests from a snapshot to rendered outputs."""

import json
from unittest.mock import MagicMock

import pytest

from config import normalize_config
from errors import ProviderError
from pipeline import extract, render, write_outputs
from provider import SnapshotProvider


@pytest.fixture
def config():
    return normalize_config({"useVariables": False, "options": {"*": {"defaults": {"State": "Default"}}}})


class TestExtract:
    def test_documentation_object(self, snapshot, config):
        document = extract(SnapshotProvider(snapshot), config)
        assert document.timestamp
        assert [c.name for c in document.local_styles.color] == ["Blue 500"]
        assert "S:1" in document.design_map.colors
        assert [a.name for a in document.assets["icons"]] == ["arrow-right"]
        assert document.assets["logos"] == []
        assert len(document.components["button"].instances) == 3

    def test_categories_fail_independently(self, snapshot):
        provider = MagicMock(wraps=SnapshotProvider(snapshot))
        provider.get_local_styles.side_effect = ProviderError("styles unavailable")
        provider.get_assets.side_effect = ProviderError("assets unavailable")
        document = extract(provider)
        assert document.local_styles.color == []
        assert document.assets == {"icons": [], "logos": []}
        assert len(document.components["button"].instances) == 2


class TestRender:
    def test_css_border_tokens(self, snapshot, config):
        css = render(extract(SnapshotProvider(snapshot), config), "css", config)["components"]["button"]
        assert "\t--button-large-border-width: 2px;" in css
        assert "\t--button-large-border-radius: 4px;" in css
        assert "\t--button-large-border-color: #000000;" in css
        assert "\t--button-large-border-style: solid;" in css
        assert "\t--button-large-hover-border-width: 3px;" in css

    def test_references_with_variables(self, snapshot):
        config = normalize_config({"useVariables": True})
        rendered = render(extract(SnapshotProvider(snapshot), config), "css", config)
        css = rendered["components"]["button"]
        assert "\t--button-large-default-border-color: var(--color-primary-blue-500);" in css
        assert "\t--button-small-default-border-color: #000000;" in css
        assert "--color-primary-blue-500: #0000ff;" in rendered["design"]["colors"]

    def test_output_is_deterministic(self, snapshot, config):
        first = render(extract(SnapshotProvider(snapshot), config), "sd", config)
        second = render(extract(SnapshotProvider(snapshot), config), "sd", config)
        assert first == second


class TestWriteOutputs:
    def test_writes_every_format(self, snapshot, config, tmp_path):
        document = extract(SnapshotProvider(snapshot), config)
        written = write_outputs(document, tmp_path, config)

        assert (tmp_path / "tokens" / "css" / "components" / "button.css").exists()
        assert (tmp_path / "tokens" / "scss-types" / "components" / "button.scss").exists()
        assert (tmp_path / "tokens" / "sd" / "design" / "colors.tokens.json").exists()
        assert (tmp_path / "assets" / "icons" / "arrow-right.svg").read_text() == "<svg><path/></svg>"
        assert json.loads((tmp_path / "assets" / "icons.json").read_text()) == {
            "arrow-right": "assets/icons/arrow-right.svg"
        }
        saved = json.loads((tmp_path / "tokens.json").read_text())
        assert len(saved["components"]["button"]["instances"]) == 3
        assert tmp_path / "tokens.json" in written

    def test_selected_formats(self, snapshot, tmp_path):
        document = extract(SnapshotProvider(snapshot))
        write_outputs(document, tmp_path, formats=["json"])
        assert (tmp_path / "tokens" / "json" / "components" / "button.json").exists()
        assert not (tmp_path / "tokens" / "css").exists()
