"""Document-level color, effect and typography styles, and the lookup that
lets component tokens point back at them."""

import structlog

from models import (
    ColorObject,
    DesignMap,
    EffectObject,
    LocalStyles,
    ReferenceObject,
    TypographyObject,
)
from naming import to_machine_name
from paints import (
    color_to_hex,
    effect_to_box_shadow,
    fills_to_css,
    is_gradient_paint_type,
    is_shadow_effect_type,
    resolve_paint,
)

logger = structlog.get_logger(__name__)


def field_data(name: str) -> dict:
    """Split a ``Group/Name`` style name into display and machine names."""
    parts = name.split("/")
    if len(parts) > 1 and parts[1]:
        return {
            "name": parts[1],
            "machine_name": to_machine_name(parts[1]),
            "group": to_machine_name(parts[0]),
            "group_label": parts[0],
        }
    return {
        "name": parts[0],
        "machine_name": to_machine_name(parts[0]),
        "group": "",
        "group_label": "",
    }


def _visible_effects(effects: list) -> list:
    return [
        {
            "type": effect.get("type"),
            "value": effect_to_box_shadow({"spread": 0, **effect}),
        }
        for effect in effects or []
        if is_shadow_effect_type(effect.get("type")) and effect.get("visible", True)
    ]


def _color_object(style: dict, fields: dict, css: dict) -> ColorObject:
    group, machine_name = fields["group"], fields["machine_name"]
    return ColorObject(
        id=style.get("id", ""),
        name=fields["name"],
        machine_name=machine_name,
        value=css["color"],
        blend=css["blend"],
        group=group,
        group_label=fields["group_label"],
        sass=f"$color-{group}-{machine_name}",
        reference=f"color-{group}-{machine_name}",
    )


def _effect_object(style: dict, fields: dict, effects: list) -> EffectObject:
    return EffectObject(
        id=style.get("id", ""),
        name=fields["name"],
        machine_name=fields["machine_name"],
        group=fields["group"],
        group_label=fields["group_label"],
        effects=_visible_effects(effects),
        reference=f"effect-{fields['group']}-{fields['machine_name']}",
    )


def _text_style_values(style: dict) -> dict:
    font_size = style["fontSize"]
    line_height = style.get("lineHeight") or {"unit": "AUTO"}
    unit = line_height.get("unit")
    value = line_height.get("value", 0)

    if unit == "PIXELS":
        css_line_height, line_height_px, line_height_pct = f"{value}px", value, value / font_size * 100
    elif unit == "PERCENT":
        css_line_height, line_height_px, line_height_pct = f"{value}%", value / 100 * font_size, value
    else:
        css_line_height, line_height_px, line_height_pct = 1.5, 1.25 * font_size, 125

    letter_spacing = style.get("letterSpacing") or {"unit": "PIXELS", "value": 0}
    if letter_spacing.get("unit") == "PERCENT":
        letter_spacing_value = f"{letter_spacing['value'] / 100 * font_size}"
    else:
        letter_spacing_value = f"{letter_spacing.get('value', 0)}"

    font_name = style.get("fontName") or {}
    return {
        "fontSize": font_size,
        "fontFamily": font_name.get("family", ""),
        "fontWeight": font_name.get("style", ""),
        "lineHeight": css_line_height,
        "lineHeightPx": round(line_height_px),
        "lineHeightPct": round(line_height_pct),
        "letterSpacing": letter_spacing_value,
        "textDecoration": style.get("textDecoration"),
        "textCase": style.get("textCase"),
    }


def _typography_object(style: dict, fields: dict, name: str, values: dict) -> TypographyObject:
    return TypographyObject(
        id=style.get("id", ""),
        name=name,
        machine_name=fields["machine_name"],
        group=fields["group"],
        group_label=fields["group_label"],
        values=values,
        reference=f"typography-{fields['group']}-{fields['machine_name']}",
    )


def _extract_style(style: dict, data: LocalStyles) -> None:
    style_type = style.get("type")
    fields = field_data(style.get("name", ""))

    if style_type == "RECTANGLE":
        fills = style.get("fills")
        if style.get("effects"):
            data.effect.append(_effect_object(style, fields, style["effects"]))
        elif fills and (fills[0].get("type") == "SOLID" or is_gradient_paint_type(fills[0].get("type"))):
            data.color.append(_color_object(style, fields, fills_to_css(resolve_paint(fills))))

    elif style_type == "EFFECT":
        data.effect.append(_effect_object(style, fields, style.get("effects")))

    elif style_type == "PAINT":
        data.color.append(_color_object(style, fields, fills_to_css(resolve_paint(style.get("paints")))))

    elif style_type == "TEXT" and "fontName" in style:
        data.typography.append(
            _typography_object(style, fields, fields["name"], _text_style_values(style))
        )

    elif style_type == "TEXT":
        fills = style.get("fills") or []
        color = None
        if fills and fills[0].get("type") == "SOLID" and fills[0].get("color"):
            color = color_to_hex(fills[0]["color"])
        data.typography.append(
            _typography_object(
                style, fields, style.get("name", ""), {**(style.get("style") or {}), "color": color}
            )
        )

    else:
        logger.debug("local_style_ignored", style=style.get("name"), type=style_type)


def build_design_map(data: LocalStyles) -> DesignMap:
    return DesignMap(
        colors={
            c.id: ReferenceObject(reference=c.reference, type="color", name=c.name, group=c.group)
            for c in data.color
        },
        effects={
            e.id: ReferenceObject(reference=e.reference, type="effect", name=e.name, group=e.group)
            for e in data.effect
        },
        typography={
            t.id: ReferenceObject(
                reference=t.reference, type="typography", name=t.name, group=t.group
            )
            for t in data.typography
        },
    )


def extract_local_styles(styles: list) -> tuple:
    """Return ``(LocalStyles, DesignMap)`` for the given style nodes.

    A style that cannot be read is logged and left out.
    """
    data = LocalStyles()
    for style in styles or []:
        try:
            _extract_style(style, data)
        except (KeyError, TypeError, ValueError, ZeroDivisionError) as e:
            logger.warning("local_style_skipped", style=style.get("name"), error=str(e))

    logger.info(
        "local_styles_extracted",
        colors=len(data.color),
        effects=len(data.effect),
        typography=len(data.typography),
    )
    return data, build_design_map(data)
