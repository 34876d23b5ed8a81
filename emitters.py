"""Output formats. Each transformer renders component instances and local
styles into one textual format."""

import json
from typing import Optional

from config import ComponentOptions, TokenConfig
from models import DocumentationObject, FileComponentObject
from naming import slugify
from tokens import (
    CSS,
    JSON,
    SCSS,
    format_token_value,
    format_typography_token_name,
    get_component_comment_block,
    get_component_instance_tokens,
    process_value_with_rules,
)


def _effect_value(effect) -> str:
    return ", ".join(e["value"] for e in effect.effects) or "none"


def _valid_effects(effects: list) -> list:
    return [effect for effect in effects or [] if effect.effects]


def _line_height(typography) -> str:
    values = typography.values
    return f"{values['lineHeightPx'] / values['fontSize']:.1f}"


def _paragraph_spacing(typography) -> int:
    return int(typography.values.get("paragraphSpacing") or 0) | 20


def _typography_lines(prefix: str, typography) -> list:
    name = f"{prefix}typography-{format_typography_token_name(typography)}"
    values = typography.values
    return [
        f"{name}-font-family: '{values['fontFamily']}';",
        f"{name}-font-size: {values['fontSize']}px;",
        f"{name}-font-weight: {values['fontWeight']};",
        f"{name}-line-height: {_line_height(typography)};",
        f"{name}-letter-spacing: {values['letterSpacing']}px;",
        f"{name}-paragraph-spacing: {_paragraph_spacing(typography)}px;",
    ]


def _dumps(data) -> str:
    return json.dumps(data, indent=2)


class CssTransformer:
    def __init__(self, use_variables: bool = False):
        self.use_variables = use_variables

    def component(
        self, component_id: str, component: FileComponentObject, options: Optional[ComponentOptions] = None
    ) -> str:
        css_class = (options.css_root_class if options else None) or component_id
        blocks = [f".{css_class} {{"]
        for instance in component.instances:
            lines = [f"\t{get_component_comment_block(instance, '/**/')}"]
            lines += [
                f"\t{token.name}: {format_token_value(token, CSS, self.use_variables)};"
                for token in get_component_instance_tokens(CSS, instance, options)
            ]
            blocks.append("\n".join(lines))
        return "\n\n".join(blocks) + "\n}\n"

    def colors(self, colors: list) -> str:
        lines = [f"\t--color-{c.group}-{c.machine_name}: {c.value};" for c in colors]
        return ":root {\n" + "\n".join(lines) + "\n}\n"

    def effects(self, effects: list) -> str:
        lines = [
            f"\t--effect-{e.group}-{e.machine_name}: {_effect_value(e)};"
            for e in _valid_effects(effects)
        ]
        return ":root {\n" + "\n".join(lines) + "\n}\n"

    def types(self, types: list) -> str:
        lines = ["\n".join("\t" + line for line in _typography_lines("--", t)) for t in types]
        families = list(dict.fromkeys(t.values["fontFamily"] for t in types))
        for family in families:
            lines.insert(0, f"\t--font-family-{family.replace(' ', '-').lower()}: '{family}';")
        return ":root {\n" + "\n".join(lines) + "\n}\n"


class ScssTransformer:
    def __init__(self, use_variables: bool = False):
        self.use_variables = use_variables

    def component(
        self, component_id: str, component: FileComponentObject, options: Optional[ComponentOptions] = None
    ) -> str:
        blocks = []
        for instance in component.instances:
            lines = [get_component_comment_block(instance, "//")]
            lines += [
                f"\t{token.name}: {format_token_value(token, SCSS, self.use_variables)};"
                for token in get_component_instance_tokens(SCSS, instance, options)
            ]
            blocks.append("\n".join(lines))
        return "\n\n".join(blocks)

    def colors(self, colors: list) -> str:
        return "\n".join(f"$color-{c.group}-{c.machine_name}: {c.value};" for c in colors)

    def effects(self, effects: list) -> str:
        return "\n".join(
            f"$effect-{e.group}-{e.machine_name}: {_effect_value(e)};" for e in _valid_effects(effects)
        )

    def types(self, types: list) -> str:
        return "\n".join("\n".join(_typography_lines("$", t)) for t in types)


class ScssTypesTransformer:
    """SCSS lists of the variant values each component supports and of the
    local style names."""

    def __init__(self, use_variables: bool = False):
        self.use_variables = use_variables

    def component(
        self, component_id: str, component: FileComponentObject, options: Optional[ComponentOptions] = None
    ) -> str:
        values = {}
        for instance in component.instances:
            for prop, value in instance.variant_properties:
                if value:
                    values.setdefault(prop, {})[
                        process_value_with_rules(prop, value, options, self.use_variables)
                    ] = None

        maps = [
            "${}-{}-map: ( {} );".format(
                component_id, slugify(prop), ", ".join(f'"{v}"' for v in prop_values)
            )
            for prop, prop_values in values.items()
        ]
        return "\n\n".join(maps) + "\n"

    def colors(self, colors: list) -> str:
        groups = dict.fromkeys(f'"{c.group}"' for c in colors)
        names = (f'"{c.group}-{c.machine_name}"' for c in colors)
        return f"$color-groups: ( {', '.join(groups)} );\n$color-names: ( {', '.join(names)} );\n"

    def effects(self, effects: list) -> str:
        names = (f'"{e.group}-{e.machine_name}"' for e in _valid_effects(effects))
        return f"$effects: ( {', '.join(names)} );\n"

    def types(self, types: list) -> str:
        names = (f'"{format_typography_token_name(t)}"' for t in types)
        return f"$type-sizes: ( {', '.join(names)} );"


class MapTransformer:
    def __init__(self, use_variables: bool = False):
        self.use_variables = use_variables

    def component(
        self, component_id: str, component: FileComponentObject, options: Optional[ComponentOptions] = None
    ) -> str:
        result = {}
        for instance in component.instances:
            for token in get_component_instance_tokens(JSON, instance, options):
                result[token.name] = token.value
        return _dumps(result)

    def colors(self, colors: list) -> str:
        return _dumps({f"color-{c.group}-{c.machine_name}": f"{c.value}" for c in colors})

    def effects(self, effects: list) -> str:
        return _dumps(
            {f"effect-{e.group}-{e.machine_name}": _effect_value(e) for e in _valid_effects(effects)}
        )

    def types(self, types: list) -> str:
        result = {}
        for t in types:
            name = f"typography-{format_typography_token_name(t)}"
            result[f"{name}-font-family"] = f"{t.values['fontFamily']}"
            result[f"{name}-font-size"] = f"{t.values['fontSize']}px"
            result[f"{name}-font-weight"] = f"{t.values['fontWeight']}"
            result[f"{name}-line-height"] = _line_height(t)
            result[f"{name}-letter-spacing"] = f"{t.values['letterSpacing']}px"
            result[f"{name}-paragraph-spacing"] = f"{_paragraph_spacing(t)}px"
        return _dumps(result)


class StyleDictionaryTransformer:
    def __init__(self, use_variables: bool = False):
        self.use_variables = use_variables

    def component(
        self, component_id: str, component: FileComponentObject, options: Optional[ComponentOptions] = None
    ) -> str:
        tree = {}
        for instance in component.instances:
            for token in get_component_instance_tokens(JSON, instance, options):
                segments = list(token.metadata.name_segments)
                node = tree
                for segment in segments[:-1]:
                    node = node.setdefault(segment, {})
                for piece in (segments[-1] if segments else "").split("-"):
                    node = node.setdefault(piece, {})
                node["value"] = format_token_value(token, JSON, self.use_variables)
        return _dumps(tree)

    def colors(self, colors: list) -> str:
        tree = {}
        for c in colors:
            tree.setdefault(c.group, {})[c.machine_name] = {"value": c.value}
        return _dumps({"color": tree})

    def effects(self, effects: list) -> str:
        tree = {}
        for e in _valid_effects(effects):
            tree.setdefault(e.group, {})[e.machine_name] = {"value": _effect_value(e)}
        return _dumps({"effect": tree})

    def types(self, types: list) -> str:
        tree = {}
        for t in types:
            tree[format_typography_token_name(t)] = {
                "font": {
                    "family": {"value": t.values["fontFamily"]},
                    "size": {"value": f"{t.values['fontSize']}px"},
                    "weight": {"value": t.values["fontWeight"]},
                },
                "line": {"height": {"value": _line_height(t)}},
                "letter": {"spacing": {"value": f"{t.values['letterSpacing']}px"}},
                "paragraph": {"spacing": {"value": f"{_paragraph_spacing(t)}px"}},
            }
        return _dumps({"typography": tree})


TRANSFORMERS = {
    "css": CssTransformer,
    "scss": ScssTransformer,
    "scss-types": ScssTypesTransformer,
    "json": MapTransformer,
    "sd": StyleDictionaryTransformer,
}


def get_transformer(name: str, use_variables: bool = False):
    try:
        return TRANSFORMERS[name](use_variables=use_variables)
    except KeyError:
        raise ValueError(
            f"Unknown output format '{name}'. Expected one of: {', '.join(TRANSFORMERS)}"
        ) from None


def transform(transformer, document: DocumentationObject, config: Optional[TokenConfig] = None) -> dict:
    """Render every component and the local styles of ``document``."""
    components = {
        component_id: transformer.component(
            component_id,
            component,
            config.component_options(component_id) if config else None,
        )
        for component_id, component in document.components.items()
    }
    styles = document.local_styles
    return {
        "components": components,
        "design": {
            "colors": transformer.colors(styles.color),
            "effects": transformer.effects(styles.effect),
            "typography": transformer.types(styles.typography),
        },
    }
