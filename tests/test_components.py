"""Tests for variant identity, instance extraction and shared variants."""

from structlog.testing import capture_logs

from config import ComponentOptions, normalize_config
from components import (
    build_component_definition,
    build_legacy_component_definition,
    extract_component_instances,
    extract_components,
    extract_variant_properties,
    generate_component_id,
    get_variant_name_part,
    normalize_name_part,
    parse_legacy_variant_property,
)
from models import ComponentDefinition, ComponentSetSnapshot
from naming import start_case


def children_of(component_set):
    return [{"node": child, "metadata": {}} for child in component_set["children"]]


class TestVariantNames:
    def test_name_part(self):
        assert get_variant_name_part("Size=Large, State=Default", "State") == "Default"
        assert get_variant_name_part("Size=Large, State=Default", "state") == "Default"
        assert get_variant_name_part("Size=Large", "Theme") is None

    def test_normalize_name_part(self):
        assert normalize_name_part(" Extra Large! ") == "extra-large"
        assert normalize_name_part(None) == ""

    def test_extract_variant_properties_follows_declared_order(self):
        props = extract_variant_properties("State=Hover, Size=Small", ["Size", "State", "Theme"])
        assert list(props.items()) == [("Size", "small"), ("State", "hover"), ("Theme", "")]

    def test_component_id_uses_declared_order(self):
        first = generate_component_id({"State": "hover", "Size": "small"}, ["Size", "State"])
        second = generate_component_id({"Size": "small", "State": "hover"}, ["Size", "State"])
        assert first == second == "Size-small-State-hover"


class TestBuildDefinition:
    def test_from_settings(self, button_component_set, button_settings):
        definition = build_component_definition(button_component_set, button_settings)
        assert definition.name == "button"
        assert definition.variant_properties == ("Size", "State")
        assert definition.parts[0].id == "$"
        assert definition.parts[0].tokens[0].exports == ("BORDER",)
        assert definition.shared_component_variants[0].component_id == "1:4"

    def test_without_property_definitions(self, button_settings):
        assert build_component_definition({"id": "9:9"}, button_settings) is None


class TestExtractComponentInstances:
    def test_donors_are_not_emitted_without_defaults(self, button_component_set, button_settings):
        definition = build_component_definition(button_component_set, button_settings)
        instances = extract_component_instances(children_of(button_component_set), definition)
        assert [i.id for i in instances] == ["Size-large-State-default", "Size-small-State-default"]

    def test_shared_variant_merge(self, button_component_set, button_settings):
        definition = build_component_definition(button_component_set, button_settings)
        options = ComponentOptions(defaults={"state": "default"})
        instances = extract_component_instances(children_of(button_component_set), definition, options)

        assert [i.id for i in instances] == [
            "Size-large-State-default",
            "Size-large-State-hover",
            "Size-small-State-default",
        ]
        merged = instances[1]
        assert merged.variant_map() == {"Size": "large", "State": "hover"}
        assert merged.parts["$"][0].weight == 3

    def test_donor_order_does_not_matter(self, button_component_set, button_settings):
        button_component_set["children"].reverse()
        definition = build_component_definition(button_component_set, button_settings)
        options = ComponentOptions(defaults={"state": "default"})
        ids = {i.id for i in extract_component_instances(children_of(button_component_set), definition, options)}
        assert "Size-large-State-hover" in ids

    def test_duplicates_keep_first(self, button_component_set, button_settings):
        button_settings["sharedVariants"] = []
        duplicate = dict(button_component_set["children"][0], id="1:9", strokeWeight=9)
        button_component_set["children"].append(duplicate)
        definition = build_component_definition(button_component_set, button_settings)
        instances = extract_component_instances(children_of(button_component_set), definition)
        large_default = [i for i in instances if i.id == "Size-large-State-default"]
        assert len(large_default) == 1
        assert large_default[0].parts["$"][0].weight == 2

    def test_no_parts_yields_nothing(self, button_component_set):
        definition = ComponentDefinition(id="1:1", name="button", variant_properties=("Size",))
        assert extract_component_instances(children_of(button_component_set), definition) == []

    def test_instances_are_immutable_snapshots(self, button_component_set, button_settings):
        definition = build_component_definition(button_component_set, button_settings)
        instance = extract_component_instances(children_of(button_component_set), definition)[0]
        assert isinstance(instance.parts["$"], tuple)


class TestExtractComponents:
    def test_keyed_by_component_name(self, button_component_set, button_settings):
        definition = build_component_definition(button_component_set, button_settings)
        snapshot = ComponentSetSnapshot(
            name=definition.name,
            node=button_component_set,
            components_metadata={"1:2": {"description": "Large button"}},
            definition=definition,
        )
        config = normalize_config({"options": {"*": {"defaults": {"State": "Default"}}}})
        components = extract_components([snapshot], config=config)
        assert list(components) == ["button"]
        instances = components["button"].instances
        assert len(instances) == 3
        assert instances[0].description == "Large button"

    def test_logs_use_display_names(self, button_component_set, button_settings):
        definition = build_component_definition(button_component_set, button_settings)
        snapshot = ComponentSetSnapshot(
            name=definition.name, node=button_component_set, components_metadata={}, definition=definition
        )
        with capture_logs() as logs:
            extract_components([snapshot])
        exported = [log for log in logs if log["event"] == "component_exported"]
        assert exported[0]["component"] == "Button"
        assert exported[0]["instances"] == 2

    def test_start_case(self):
        assert start_case("button-group") == "Button Group"
        assert start_case("iconButton_small") == "Icon Button Small"


class TestLegacyDefinitions:
    def test_parse_property(self):
        assert parse_legacy_variant_property("State(:disabled/Theme,Size)") == (
            "State",
            [("disabled", "Theme,Size")],
        )
        assert parse_legacy_variant_property("Size") == ("Size", [])

    def test_build_legacy_definition(self, button_component_set):
        legacy = {
            "id": "button",
            "group": "Buttons",
            "options": {
                "exporter": {
                    "search": "Button",
                    "supportedVariantProps": {"design": ["State(:hover/Size)"], "layout": ["Size"]},
                }
            },
            "parts": [{"id": "$", "tokens": [{"from": "$", "export": ["BORDER"]}]}],
        }
        definition = build_legacy_component_definition(button_component_set, legacy)
        assert definition.name == "button"
        assert definition.group == "Buttons"
        assert definition.variant_properties == ("Size", "State")
        assert definition.legacy_layout_properties == ("Size",)
        shared = definition.shared_component_variants
        assert [(s.component_id, s.shared_variant_property) for s in shared] == [("1:4", "State")]
        assert shared[0].distinctive_variant_properties == ("Size",)

    def test_legacy_layout_reads_nested_instance(self):
        component_set = {
            "children": [
                {
                    "id": "2:1",
                    "type": "COMPONENT",
                    "name": "Theme=Light",
                    "opacity": 1,
                    "children": [{"type": "INSTANCE", "name": "Inner", "opacity": 0.4}],
                },
                {"id": "2:2", "type": "COMPONENT", "name": "Theme=Dark", "children": []},
            ]
        }
        definition = ComponentDefinition(
            id="2:0",
            name="card",
            variant_properties=("Theme",),
            parts=build_component_definition(
                {"componentPropertyDefinitions": {"Theme": {"type": "VARIANT"}}},
                {"name": "card", "parts": [{"name": "$", "definitions": [{"from": "$", "export": ["OPACITY"]}]}]},
            ).parts,
            legacy_layout_properties=("Layout",),
        )
        instances = extract_component_instances(children_of(component_set), definition)
        assert [i.id for i in instances] == ["Theme-light"]
        assert instances[0].parts["$"][0].opacity == 0.4
