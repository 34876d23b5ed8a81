"""Figma paints, colors and effects rendered as CSS values."""

import math
from typing import Optional

import structlog

from errors import GeometryError, SingularMatrixError
from geometry import (
    gradient_angle,
    linear_gradient_handles,
    linear_gradient_params,
    point,
    radial_gradient_handles,
    radial_gradient_params,
)
from models import GradientObject

logger = structlog.get_logger(__name__)

GRADIENT_PAINT_TYPES = ("GRADIENT_LINEAR", "GRADIENT_RADIAL", "GRADIENT_DIAMOND")
SHADOW_EFFECT_TYPES = ("DROP_SHADOW", "INNER_SHADOW")


def is_gradient_paint_type(paint_type: str) -> bool:
    return paint_type in GRADIENT_PAINT_TYPES


def is_shadow_effect_type(effect_type: str) -> bool:
    return effect_type in SHADOW_EFFECT_TYPES


def _half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _plain_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_number_for_css(value: float) -> str:
    """Compact CSS rendering of a number.

    >>> format_number_for_css(42), format_number_for_css(0.5), format_number_for_css(-0.1)
    ('42', '.5', '-.1')
    """
    if float(value).is_integer():
        return str(int(value))

    rounded = round(value, 3)
    if rounded == 0:
        return "0"

    text = f"{rounded:.3f}".rstrip("0").rstrip(".")
    if abs(rounded) < 1:
        return "-" + text[2:] if rounded < 0 else text[1:]
    return text


def color_to_web_rgb(color: dict) -> list:
    """Figma 0-1 channels to 0-255 ints; alpha is appended only when it is not 1."""
    rgb = [
        _half_up(color.get("r", 0) * 255),
        _half_up(color.get("g", 0) * 255),
        _half_up(color.get("b", 0) * 255),
    ]
    if "a" in color and color["a"] != 1:
        rgb.append(_half_up(color["a"] * 100) / 100)
    return rgb


def color_to_hex(color: dict) -> str:
    rgb = color_to_web_rgb(color)
    result = "#{:02x}{:02x}{:02x}".format(*rgb[:3])
    if len(rgb) == 4:
        alpha = format(_half_up(rgb[3] * 255), "x")
        if len(alpha) == 1:
            result += "0" + alpha
        elif alpha != "ff":
            result += alpha
    return result


def color_to_css(color: dict) -> str:
    alpha = color.get("a", 1)
    if alpha == 1:
        return color_to_hex(color)
    return "rgba({}, {}, {}, {})".format(
        format_number_for_css(color.get("r", 0) * 255),
        format_number_for_css(color.get("g", 0) * 255),
        format_number_for_css(color.get("b", 0) * 255),
        format_number_for_css(alpha),
    )


def _stop_rgba(color: dict) -> str:
    return "rgba({})".format(", ".join(format_number_for_css(v) for v in color_to_web_rgb(color)))


def resolve_paint(paints: list) -> list:
    """Normalise paints so every gradient carries ``gradientHandlePositions``.

    Paints captured from the plugin API only hold a ``gradientTransform``;
    handles are derived from it. A transform that cannot be inverted leaves
    the handles empty, which later renders that layer as nothing.
    """
    resolved = []
    for paint in paints or []:
        paint = dict(paint)
        if paint.get("type") == "SOLID" and paint.get("color") is not None:
            paint["color"] = {"a": 1, **paint["color"]}
        elif is_gradient_paint_type(paint.get("type")) and not paint.get("gradientHandlePositions"):
            transform = paint.get("gradientTransform")
            if transform:
                to_handles = (
                    linear_gradient_handles
                    if paint["type"] == "GRADIENT_LINEAR"
                    else radial_gradient_handles
                )
                try:
                    paint["gradientHandlePositions"] = to_handles(transform)
                except SingularMatrixError as e:
                    logger.warning("gradient_transform_not_invertible", error=str(e))
                    paint["gradientHandlePositions"] = []
        resolved.append(paint)
    return resolved


def paint_to_gradient(paint: dict) -> Optional[GradientObject]:
    paint_type = paint.get("type")

    if paint_type == "SOLID":
        color = paint.get("color")
        if color and paint.get("opacity"):
            color = {**color, "a": paint["opacity"]}
        return GradientObject(
            blend=paint.get("blendMode"),
            handles=[point(0, 0), point(0, 0), point(1, 0)],
            stops=[{"color": color, "position": None}, {"color": color, "position": None}],
        )

    if is_gradient_paint_type(paint_type):
        return GradientObject(
            blend=paint.get("blendMode"),
            handles=list(paint.get("gradientHandlePositions") or []),
            stops=list(paint.get("gradientStops") or []),
        )

    return None


def gradient_to_css(gradient: GradientObject, paint_type: str = "GRADIENT_LINEAR") -> str:
    """Render a gradient object as a CSS gradient function.

    Raises GeometryError (or ValueError for missing handles) when the
    handles do not describe a drawable gradient.
    """
    if paint_type == "SOLID":
        # A flat color in a gradient slot: both stops share the color.
        angle = gradient_angle(gradient.handles)
        colors = ", ".join(_stop_rgba(stop["color"]) for stop in gradient.stops)
        return f"linear-gradient({_plain_number(angle)}deg, {colors})"

    if paint_type == "GRADIENT_LINEAR":
        params = linear_gradient_params(gradient)
        colors = ", ".join(
            f"{_stop_rgba(stop['color'])} {_plain_number(params[i + 1])}%"
            for i, stop in enumerate(gradient.stops)
        )
        return f"linear-gradient({_plain_number(params[0])}deg, {colors})"

    if paint_type in ("GRADIENT_RADIAL", "GRADIENT_DIAMOND"):
        params = radial_gradient_params(gradient)
        colors = ", ".join(
            "{} {}%".format(
                _stop_rgba(stop["color"]),
                format_number_for_css(round(stop.get("position") or 0, 4) * 100),
            )
            for stop in gradient.stops
        )
        return "radial-gradient({}% {}% at {}% {}%, {})".format(
            *(format_number_for_css(p) for p in params), colors
        )

    return ""


def paint_to_css(paint: dict, as_linear_gradient: bool = False) -> Optional[str]:
    if paint.get("type") == "SOLID" and not as_linear_gradient:
        color = paint.get("color")
        if not color:
            return None
        return color_to_css({**color, "a": color.get("a", 1) * paint.get("opacity", 1)})

    gradient = paint_to_gradient(paint)
    if gradient is None:
        return None

    try:
        return gradient_to_css(gradient, paint.get("type"))
    except (GeometryError, ValueError) as e:
        logger.warning("gradient_not_rendered", paint_type=paint.get("type"), error=str(e))
        return None


def blend_colors(colors: list) -> dict:
    """Composite colors bottom-to-top with the "over" operator."""
    base = [0, 0, 0, 0]
    for color in colors:
        added = color_to_web_rgb(color)
        if len(added) == 3:
            added.append(1)

        if base[3] and added[3]:
            alpha = 1 - (1 - added[3]) * (1 - base[3])
            base = [
                _half_up(
                    added[i] * added[3] / alpha + base[i] * base[3] * (1 - added[3]) / alpha
                )
                for i in range(3)
            ] + [alpha]
        elif added[3]:
            base = added

    return {"r": base[0] / 255, "g": base[1] / 255, "b": base[2] / 255, "a": base[3]}


def fills_to_css(fills: list, force_flatten: bool = False) -> dict:
    """Render a paint stack as one CSS value plus its blend modes.

    Solid-only stacks are flattened into one color when ``force_flatten`` is
    set. Otherwise layers are listed topmost first, as CSS
    ``background-image`` expects.
    """
    fills = list(fills or [])
    count = len(fills)
    color_value = "transparent"
    blend_value = "normal"

    if count:
        all_solid = all(fill.get("type") == "SOLID" for fill in fills)
        if force_flatten and all_solid and count > 1:
            color_value = color_to_css(
                blend_colors(
                    [
                        {
                            **fill["color"],
                            "a": fill["color"].get("a", 1) * fill.get("opacity", 1),
                        }
                        for fill in fills
                    ]
                )
            )
        else:
            layers = list(reversed(fills))
            color_value = ", ".join(
                filter(
                    None,
                    (
                        paint_to_css(fill, count > 1 and i != count - 1)
                        for i, fill in enumerate(layers)
                    ),
                )
            )
            blend_value = ", ".join(
                filter(
                    None,
                    (fill.get("blendMode", "NORMAL").lower().replace("_", "-") for fill in layers),
                )
            )

    return {"color": color_value, "blend": blend_value}


def effect_to_box_shadow(effect: dict) -> str:
    if not effect.get("visible", True):
        return ""

    effect_type = effect.get("type")
    color = effect.get("color")
    offset = effect.get("offset")
    if not (is_shadow_effect_type(effect_type) and color and offset):
        return ""

    spread = effect.get("spread")
    return "{}px {}px {}px {}{}{}".format(
        _plain_number(offset.get("x", 0)),
        _plain_number(offset.get("y", 0)),
        _plain_number(effect.get("radius") or 0),
        f"{_plain_number(spread)}px " if spread else "",
        color_to_css(color),
        " inset" if effect_type == "INNER_SHADOW" else "",
    )
