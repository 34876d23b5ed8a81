"""Component variants: identity, token extraction and shared-variant merging."""

import re
from typing import Optional

import structlog

from config import ComponentOptions, TokenConfig
from errors import MissingDefinitionError, TokenExportError
from models import (
    ComponentDefinition,
    ComponentInstance,
    ComponentPart,
    ComponentSetSnapshot,
    DesignMap,
    ExportDefinition,
    FileComponentObject,
    SharedComponentVariant,
)
from naming import slugify, start_case
from node_path import find_node
from transform import extract_part_token_sets

logger = structlog.get_logger(__name__)

LEGACY_PROPERTY_PATTERN = re.compile(r"^([^:]+?)\s*(?:\(([^)]+)\))?$")


def normalize_name_part(value: Optional[str]) -> str:
    value = re.sub(r"[^a-z0-9]+", "-", value or "", flags=re.IGNORECASE)
    return re.sub(r"^-|-$", "", value).lower()


def get_variant_name_part(component_name: str, key: str) -> Optional[str]:
    """Value of ``key`` in a ``Key=Value, Other=Value`` component name."""
    for part in component_name.split(","):
        name, sep, value = part.strip().partition("=")
        if sep and name.strip().lower() == key.lower():
            return value.split("=")[0].strip()
    return None


def extract_variant_properties(component_name: str, variant_properties) -> dict:
    return {
        prop: normalize_name_part(get_variant_name_part(component_name, prop))
        for prop in variant_properties
    }


def generate_component_id(variant_properties: dict, order=None) -> str:
    """Canonical instance id, e.g. ``Size-large-State-default``.

    Pairs are emitted in ``order`` (the declared property order) when given,
    so two maps holding the same pairs always yield the same id.
    """
    if order is None:
        keys = list(variant_properties)
    else:
        keys = [k for k in order if k in variant_properties]
        keys += [k for k in variant_properties if k not in keys]
    return "-".join(f"{key}-{variant_properties[key]}" for key in keys)


def unique_by_id(instances: list) -> list:
    seen = set()
    result = []
    for instance in instances:
        if instance.id in seen:
            continue
        seen.add(instance.id)
        result.append(instance)
    return result


def _instance_root(node: dict, variant_properties: dict, definition: ComponentDefinition) -> dict:
    if definition.legacy_layout_properties is None:
        return node

    is_layout_component = any(variant_properties.get(p) for p in definition.legacy_layout_properties)
    if is_layout_component:
        return node

    root = find_node(node, "INSTANCE")
    if root is None:
        raise MissingDefinitionError(f"No instance node found for component {node.get('name')}")
    return root


def _donor_applies(
    primary: ComponentInstance,
    donor: ComponentInstance,
    declaration: SharedComponentVariant,
    options: Optional[ComponentOptions],
) -> bool:
    shared_property = declaration.shared_variant_property
    if not shared_property:
        return False

    defaults = options.defaults if options else {}
    default = defaults.get(shared_property.lower())
    primary_properties = primary.variant_map()
    if default is None or primary_properties.get(shared_property) != default:
        return False

    donor_properties = donor.variant_map()
    return all(
        primary_properties.get(prop) == donor_properties.get(prop)
        for prop in declaration.distinctive_variant_properties
    )


def extract_component_instances(
    components: list,
    definition: ComponentDefinition,
    options: Optional[ComponentOptions] = None,
    design_map: Optional[DesignMap] = None,
) -> list:
    """Build the instances of one component set.

    ``components`` holds ``{"node": ..., "metadata": ...}`` entries, one per
    child of the set. Children registered as shared variants are not emitted
    on their own; their token sets are copied onto every primary whose
    shared property has the configured default value and whose distinctive
    properties match.
    """
    if not definition.parts:
        logger.warning("component_has_no_parts", component=definition.name)
        return []

    declared = list(definition.variant_properties)
    shared = {s.component_id: s for s in definition.shared_component_variants}
    name = slugify(definition.name)

    primaries = []
    donors = []

    for component in components:
        node = component["node"]
        metadata = component.get("metadata") or {}
        variant_properties = extract_variant_properties(node.get("name", ""), declared)

        try:
            root = _instance_root(node, variant_properties, definition)
        except MissingDefinitionError as e:
            logger.error("component_variant_skipped", component=definition.name, reason=str(e))
            continue

        parts = {
            part.id or "$": extract_part_token_sets(root, part, variant_properties, design_map)
            for part in definition.parts
        }

        instance = ComponentInstance(
            id=generate_component_id(variant_properties, declared),
            name=name,
            description=metadata.get("description") or "",
            variant_properties=tuple(variant_properties.items()),
            parts=parts,
        )

        if node.get("id") in shared:
            donors.append((instance, shared[node["id"]]))
        else:
            primaries.append(instance)

    instances = []
    for primary in primaries:
        instances.append(primary)

        for donor, declaration in donors:
            if not _donor_applies(primary, donor, declaration, options):
                continue

            merged = primary.variant_map()
            merged[declaration.shared_variant_property] = donor.variant_map().get(
                declaration.shared_variant_property
            )
            instances.append(
                ComponentInstance(
                    id=generate_component_id(merged, declared),
                    name=donor.name,
                    description=donor.description,
                    variant_properties=tuple(merged.items()),
                    parts=donor.parts,
                )
            )

    return unique_by_id(instances)


def extract_components(
    component_sets: list,
    design_map: Optional[DesignMap] = None,
    config: Optional[TokenConfig] = None,
) -> dict:
    """Instances of every component set, keyed by component name."""
    result = {}

    for component_set in component_sets:
        definition = component_set.definition
        children = (component_set.node or {}).get("children") or []
        components = [
            {"node": child, "metadata": component_set.components_metadata.get(child.get("id"))}
            for child in children
        ]
        options = config.component_options(definition.name) if config else None

        try:
            instances = extract_component_instances(components, definition, options, design_map)
        except TokenExportError as e:
            logger.error("component_set_skipped", component=definition.name, reason=str(e))
            instances = []

        result.setdefault(definition.name, FileComponentObject())
        result[definition.name].instances.extend(instances)

    for name, component in result.items():
        if component.instances:
            logger.info("component_exported", component=start_case(name), instances=len(component.instances))
        else:
            logger.error(
                "component_skipped",
                component=start_case(name),
                reason="No matching component instances were found",
            )

    return result


# Definitions -------------------------------------------------------------


def _node_variant_properties(component_set: dict) -> list:
    definitions = component_set.get("componentPropertyDefinitions") or {}
    return [name for name, prop in definitions.items() if prop.get("type") == "VARIANT"]


def _parts_from_settings(parts: list) -> tuple:
    return tuple(
        ComponentPart(
            id=slugify(part.get("name", "")),
            tokens=tuple(ExportDefinition.from_dict(d) for d in part.get("definitions") or []),
        )
        for part in parts or []
    )


def build_component_definition(component_set: dict, settings: dict) -> Optional[ComponentDefinition]:
    """Definition of a component set from its exporter settings.

    Returns None when the set declares no component properties.
    """
    if not component_set.get("componentPropertyDefinitions"):
        return None

    return ComponentDefinition(
        id=component_set.get("id", ""),
        name=slugify(settings.get("name") or component_set.get("name", "")),
        variant_properties=tuple(_node_variant_properties(component_set)),
        parts=_parts_from_settings(settings.get("parts")),
        shared_component_variants=tuple(
            SharedComponentVariant.from_dict(s) for s in settings.get("sharedVariants") or []
        ),
    )


def parse_legacy_variant_property(value: str) -> Optional[tuple]:
    """Split ``State(:disabled/Theme,Size)`` into ``("State", [("disabled",
    "Theme,Size")])``. Returns None for malformed input."""
    match = LEGACY_PROPERTY_PATTERN.match(value.strip())
    if not match:
        return None

    params = []
    if match.group(2):
        for param in match.group(2).strip()[1:].split(":"):
            search, _, distinctive = param.partition("/")
            params.append((search, distinctive))
    return match.group(1).strip(), params


def build_legacy_component_definition(component_set: dict, legacy: dict) -> ComponentDefinition:
    exporter = (legacy.get("options") or {}).get("exporter") or {}
    supported = exporter.get("supportedVariantProps") or {}
    declared = list(supported.get("design") or []) + list(supported.get("layout") or [])

    parsed = [p for p in (parse_legacy_variant_property(v) for v in declared) if p]
    supported_names = [name for name, _ in parsed]
    variant_properties = [
        name for name in _node_variant_properties(component_set) if name in supported_names
    ]

    shared = []
    for variant_property, params in parsed:
        for search, distinctive in params:
            for child in component_set.get("children") or []:
                value = get_variant_name_part(child.get("name", ""), variant_property) or ""
                if slugify(value) == slugify(search):
                    shared.append(
                        SharedComponentVariant(
                            component_id=child.get("id", ""),
                            shared_variant_property=variant_property,
                            distinctive_variant_properties=tuple(
                                p for p in distinctive.split(",") if p
                            ),
                        )
                    )

    layout = [
        p[0] for p in (parse_legacy_variant_property(v) for v in supported.get("layout") or []) if p
    ]

    return ComponentDefinition(
        id=component_set.get("id", ""),
        name=legacy.get("id", ""),
        group=legacy.get("group") or "",
        variant_properties=tuple(variant_properties),
        parts=tuple(
            ComponentPart(
                id=part.get("id", ""),
                tokens=tuple(ExportDefinition.from_dict(t) for t in part.get("tokens") or []),
            )
            for part in legacy.get("parts") or []
        ),
        shared_component_variants=tuple(shared),
        legacy_layout_properties=tuple(layout),
    )
