"""Turn component instances into named, formatted tokens."""

from typing import Optional

from config import ComponentOptions
from models import (
    BackgroundTokenSet,
    BorderTokenSet,
    ComponentInstance,
    EffectTokenSet,
    Exportable,
    FillTokenSet,
    OpacityTokenSet,
    SizeTokenSet,
    SpacingTokenSet,
    Token,
    TokenMetadata,
    TokenSet,
    TypographyObject,
    TypographyTokenSet,
)
from naming import capitalize, to_sd_machine_name
from node_path import interpolate_tokens
from paints import effect_to_box_shadow, fills_to_css, format_number_for_css

CSS, SCSS, JSON = "css", "scss", "json"

# Values Figma data cannot express as a local style reference.
NON_TOKENIZABLE_PROPERTIES = {
    "border-width",
    "border-radius",
    "border-style",
    "text-align",
    "text-decoration",
    "text-transform",
}

# Properties whose reference is the local style itself, without a suffix.
UNSUFFIXED_REFERENCE_PROPERTIES = {"box-shadow", "background", "color", "border-color"}

SD_TYPOGRAPHY_PATHS = {
    "font-size": "font.size",
    "font-weight": "font.weight",
    "font-family": "font.family",
    "line-height": "line.height",
    "letter-spacing": "letter.spacing",
}


def _px(value) -> str:
    return f"{format_number_for_css(value)}px"


def _unsupported(value: str) -> tuple:
    return value, False


def text_align_to_css(text_align: str) -> str:
    value = (text_align or "").lower()
    return value if value in ("left", "center", "right", "justify") else "left"


def text_decoration_to_css(text_decoration: str) -> str:
    return {"UNDERLINE": "underline", "STRIKETHROUGH": "line-through"}.get(text_decoration, "none")


def text_case_to_css(text_case: str) -> str:
    return {"UPPER": "uppercase", "LOWER": "lowercase", "TITLE": "capitalize"}.get(
        text_case, "none"
    )


def background_tokens(token_set: BackgroundTokenSet) -> dict:
    return {"background": fills_to_css(token_set.background)["color"]}


def spacing_tokens(token_set: SpacingTokenSet) -> dict:
    padding = token_set.padding
    return {
        "padding-y": _unsupported(_px((padding["TOP"] + padding["BOTTOM"]) / 2)),
        "padding-x": _unsupported(_px((padding["LEFT"] + padding["RIGHT"]) / 2)),
        "padding-top": _px(padding["TOP"]),
        "padding-right": _px(padding["RIGHT"]),
        "padding-bottom": _px(padding["BOTTOM"]),
        "padding-left": _unsupported(_px(padding["LEFT"])),
        "padding-start": _unsupported(_px(padding["LEFT"])),
        "padding-end": _px(padding["RIGHT"]),
        "spacing": _unsupported(_px(token_set.spacing)),
    }


def border_tokens(token_set: BorderTokenSet) -> dict:
    dashes = token_set.dashes or [0]
    return {
        "border-width": _px(token_set.weight),
        "border-radius": _px(token_set.radius),
        "border-color": fills_to_css(token_set.strokes, True)["color"],
        "border-style": "solid" if (dashes[0] or 0) == 0 else "dashed",
    }


def typography_tokens(token_set: TypographyTokenSet) -> dict:
    return {
        "font-family": f"'{token_set.font_family}'",
        "font-size": _px(token_set.font_size),
        "font-weight": format_number_for_css(token_set.font_weight),
        "line-height": format_number_for_css(token_set.line_height),
        "letter-spacing": _px(token_set.letter_spacing),
        "text-align": text_align_to_css(token_set.text_align_horizontal),
        "text-decoration": text_decoration_to_css(token_set.text_decoration),
        "text-transform": text_case_to_css(token_set.text_case),
    }


def fill_tokens(token_set: FillTokenSet) -> dict:
    return {"color": fills_to_css(token_set.color, True)["color"]}


def effect_tokens(token_set: EffectTokenSet) -> dict:
    shadows = [effect_to_box_shadow(effect) for effect in token_set.effect]
    return {"box-shadow": ", ".join(s for s in shadows if s) or "none"}


def opacity_tokens(token_set: OpacityTokenSet) -> dict:
    return {"opacity": format_number_for_css(token_set.opacity)}


def size_tokens(token_set: SizeTokenSet) -> dict:
    width = format_number_for_css(token_set.width or 0)
    height = format_number_for_css(token_set.height or 0)
    return {
        "width": f"{width}px",
        "width-raw": _unsupported(width),
        "height": f"{height}px",
        "height-raw": _unsupported(height),
    }


TOKEN_SET_PROPERTIES = {
    Exportable.BACKGROUND: background_tokens,
    Exportable.SPACING: spacing_tokens,
    Exportable.BORDER: border_tokens,
    Exportable.TYPOGRAPHY: typography_tokens,
    Exportable.FILL: fill_tokens,
    Exportable.EFFECT: effect_tokens,
    Exportable.OPACITY: opacity_tokens,
    Exportable.SIZE: size_tokens,
}


def get_token_set_tokens(token_set: TokenSet) -> dict:
    """``{css_property: (value, is_supported_css_property)}`` for a token set."""
    properties = TOKEN_SET_PROPERTIES[token_set.kind](token_set)
    return {
        prop: value if isinstance(value, tuple) else (value, True)
        for prop, value in properties.items()
    }


def process_value_with_rules(
    key: str,
    value: Optional[str],
    options: Optional[ComponentOptions] = None,
    preserve_defaults: bool = False,
) -> str:
    """Apply the ``replace`` table, else blank out configured default values."""
    key = key.lower()
    value = value.lower() if value else value
    replace = options.replace if options else {}
    defaults = options.defaults if options else {}

    if key in replace and value and value in (replace.get(key) or {}):
        return replace[key][value] or ""

    if not preserve_defaults and key in defaults and value == (defaults[key] or ""):
        return ""

    return value or ""


def normalize_part_name(part: str) -> str:
    if part == "$":
        return ""
    return "".join("-" + c.lower() if c.isupper() else c for c in part)


def get_token_name_segments(
    component_name: str,
    variant_properties,
    part: str,
    css_property: str,
    options: Optional[ComponentOptions] = None,
) -> list:
    variant_properties = list(variant_properties)

    if options and options.token_name_segments:
        segments = []
        base_values = {
            "component": component_name,
            "part": normalize_part_name(part),
            "property": css_property,
        }
        variant_values = {f"variant.{k}".lower(): (v or "").lower() for k, v in variant_properties}
        plain_variant_values = {k.lower(): (v or "").lower() for k, v in variant_properties}

        for template in options.token_name_segments:
            # Unknown placeholders survive this pass for the variant pass.
            segment = interpolate_tokens(
                template, base_values, lambda token, _, value: token if value == "" else value
            )
            segment = interpolate_tokens(
                segment,
                variant_values,
                lambda _, key, value: process_value_with_rules(
                    key.replace("variant.", "", 1), value, options
                ),
            )
            if segment == "":
                # Older templates refer to variant properties without the prefix.
                segment = interpolate_tokens(
                    template,
                    plain_variant_values,
                    lambda _, key, value: process_value_with_rules(key, value, options),
                )
            segments.append(segment)

        return [s for s in segments if s != ""]

    segments = [component_name, normalize_part_name(part)]
    segments += [process_value_with_rules(k, v, options) for k, v in variant_properties]
    segments.append(css_property)
    return [s for s in segments if s != ""]


def format_token_name(token_type: str, segments: list) -> str:
    prefix = {CSS: "--", SCSS: "$"}.get(token_type, "")
    return prefix + "-".join(segments)


def get_component_instance_tokens(
    token_type: str, instance: ComponentInstance, options: Optional[ComponentOptions] = None
) -> list:
    tokens = []
    for part, token_sets in instance.parts.items():
        for token_set in token_sets or ():
            for css_property, (value, supported) in get_token_set_tokens(token_set).items():
                segments = get_token_name_segments(
                    instance.name, instance.variant_properties, part, css_property, options
                )
                tokens.append(
                    Token(
                        name=format_token_name(token_type, segments),
                        value=value,
                        metadata=TokenMetadata(
                            part=part,
                            css_property=css_property,
                            reference=token_set.reference,
                            is_supported_css_property=supported,
                            name_segments=tuple(segments),
                        ),
                    )
                )
    return tokens


def _style_dictionary_reference(token: Token) -> Optional[str]:
    reference = token.metadata.reference
    machine_name = to_sd_machine_name(reference.name)

    if reference.type in ("color", "effect"):
        return f"{reference.type}.{reference.group}.{machine_name}"
    if reference.type == "typography" and token.metadata.css_property in SD_TYPOGRAPHY_PATHS:
        return f"typography.{machine_name}.{SD_TYPOGRAPHY_PATHS[token.metadata.css_property]}"
    return None


def format_token_value(token: Token, format_type: str, use_variables: bool = False) -> str:
    """Literal value, or a pointer to the referenced local style when
    ``use_variables`` is on and the property can carry one."""
    if not use_variables or token.metadata.reference is None:
        return token.value

    if format_type == JSON:
        reference = _style_dictionary_reference(token)
        return f"{{{reference}}}" if reference else token.value

    css_property = token.metadata.css_property
    if css_property in NON_TOKENIZABLE_PROPERTIES:
        return token.value

    reference = token.metadata.reference.reference
    if css_property not in UNSUFFIXED_REFERENCE_PROPERTIES:
        reference += f"-{css_property}"

    return f"var(--{reference})" if format_type == CSS else f"${reference}"


def get_component_comment_block(instance: ComponentInstance, comment_format: str = "/**/") -> str:
    parts = [capitalize(instance.name)]
    parts += [f"{prop.lower()}: {value}" for prop, value in instance.variant_properties]
    text = ", ".join(parts)
    return f"/* {text} */" if comment_format == "/**/" else f"// {text}"


def format_typography_token_name(typography: TypographyObject) -> str:
    if typography.group:
        return f"{typography.group}-{typography.machine_name}"
    return typography.machine_name
