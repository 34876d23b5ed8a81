"""Extract typed token sets from design nodes."""

from dataclasses import fields, replace
from typing import Optional

import structlog

from models import (
    BackgroundTokenSet,
    BorderTokenSet,
    ComponentPart,
    DesignMap,
    EffectTokenSet,
    Exportable,
    ExportDefinition,
    FillTokenSet,
    OpacityTokenSet,
    ReferenceObject,
    SizeTokenSet,
    SpacingTokenSet,
    TokenSet,
    TypographyTokenSet,
)
from node_path import resolve_node_from_path
from paints import resolve_paint

logger = structlog.get_logger(__name__)


def extract_node_background(node: dict) -> BackgroundTokenSet:
    background = node.get("background")
    if background is None:
        background = node.get("backgrounds")
    return BackgroundTokenSet(background=resolve_paint(background or []))


def extract_node_fill(node: dict) -> FillTokenSet:
    return FillTokenSet(color=resolve_paint(node.get("fills") or []))


def extract_node_border(node: dict) -> BorderTokenSet:
    dashes = node.get("strokeDashes")
    if dashes is None:
        dashes = node.get("dashPattern")
    return BorderTokenSet(
        weight=node.get("strokeWeight") or 0,
        radius=node.get("cornerRadius") or 0,
        strokes=resolve_paint(node.get("strokes") or []),
        dashes=list(dashes) if dashes is not None else [0, 0],
    )


def extract_node_spacing(node: dict) -> SpacingTokenSet:
    return SpacingTokenSet(
        padding={
            "TOP": node.get("paddingTop") or 0,
            "RIGHT": node.get("paddingRight") or 0,
            "BOTTOM": node.get("paddingBottom") or 0,
            "LEFT": node.get("paddingLeft") or 0,
        },
        spacing=node.get("itemSpacing") or 0,
    )


def extract_node_typography(node: dict) -> TypographyTokenSet:
    # Mixed or missing text data falls back to 16px / weight 100.
    style = node.get("style")
    if not isinstance(style, dict):
        return TypographyTokenSet(characters=node.get("characters") or "")

    line_height_percent = style.get("lineHeightPercentFontSize")
    return TypographyTokenSet(
        font_family=style.get("fontFamily", ""),
        font_size=style.get("fontSize", 16),
        font_weight=style.get("fontWeight", 100),
        line_height=(line_height_percent if line_height_percent is not None else 100) / 100,
        letter_spacing=style.get("letterSpacing", 0),
        text_align_horizontal=style.get("textAlignHorizontal") or "LEFT",
        text_decoration=style.get("textDecoration") or "NONE",
        text_case=style.get("textCase") or "ORIGINAL",
        characters=node.get("characters") or "",
    )


def extract_node_effect(node: dict) -> EffectTokenSet:
    return EffectTokenSet(
        effect=[{"spread": 0, **effect} for effect in node.get("effects") or []]
    )


def extract_node_opacity(node: dict) -> OpacityTokenSet:
    opacity = node.get("opacity")
    return OpacityTokenSet(opacity=1 if opacity is None else opacity)


def extract_node_size(node: dict) -> SizeTokenSet:
    box = node.get("absoluteBoundingBox") or {}
    return SizeTokenSet(width=box.get("width") or 0, height=box.get("height") or 0)


EXTRACTORS = {
    Exportable.BACKGROUND: extract_node_background,
    Exportable.FILL: extract_node_fill,
    Exportable.BORDER: extract_node_border,
    Exportable.SPACING: extract_node_spacing,
    Exportable.TYPOGRAPHY: extract_node_typography,
    Exportable.EFFECT: extract_node_effect,
    Exportable.OPACITY: extract_node_opacity,
    Exportable.SIZE: extract_node_size,
}


def extract_node_exportable(node: dict, exportable: Exportable) -> Optional[TokenSet]:
    extractor = EXTRACTORS.get(exportable)
    return extractor(node) if extractor else None


# Style keys on a node that may point at a local style, per token set kind.
REFERENCE_STYLE_KEYS = {
    Exportable.BACKGROUND: ("colors", ("fills", "fill")),
    Exportable.FILL: ("colors", ("fills", "fill")),
    Exportable.BORDER: ("colors", ("strokes", "stroke")),
    Exportable.TYPOGRAPHY: ("typography", ("text",)),
    Exportable.EFFECT: ("effects", ("effect",)),
}


def get_reference_from_map(
    node: dict, token_set: TokenSet, design_map: Optional[DesignMap]
) -> Optional[ReferenceObject]:
    styles = node.get("styles")
    if not styles or design_map is None or token_set.kind not in REFERENCE_STYLE_KEYS:
        return None

    lookup_name, style_keys = REFERENCE_STYLE_KEYS[token_set.kind]
    lookup = getattr(design_map, lookup_name)
    for key in style_keys:
        if styles.get(key):
            return lookup.get(styles[key])
    return None


def _merge_dicts(first: dict, second: dict) -> dict:
    merged = dict(first)
    for key, value in second.items():
        if value is None:
            continue
        if isinstance(value, dict):
            existing = merged.get(key)
            merged[key] = _merge_dicts(existing if isinstance(existing, dict) else {}, value)
        else:
            merged[key] = value
    return merged


def merge_token_sets(first: TokenSet, second: TokenSet) -> TokenSet:
    """Deep-merge two token sets of the same kind; non-None values of
    ``second`` win, lists are replaced whole."""
    if first.kind != second.kind:
        raise ValueError(f"Cannot merge {first.kind.value} with {second.kind.value}")

    changes = {}
    for f in fields(second):
        if not f.init:
            continue
        value = getattr(second, f.name)
        current = getattr(first, f.name)
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(current, dict):
            value = _merge_dicts(current, value)
        changes[f.name] = value
    return replace(first, **changes)


def _fold_token_set(token_sets: tuple, token_set: TokenSet) -> tuple:
    for i, existing in enumerate(token_sets):
        if existing.kind == token_set.kind:
            return token_sets[:i] + (merge_token_sets(existing, token_set),) + token_sets[i + 1 :]
    return token_sets + (token_set,)


def extract_part_token_sets(
    root: dict,
    part: ComponentPart,
    variant_properties: dict,
    design_map: Optional[DesignMap] = None,
) -> tuple:
    """Token sets of one component part, at most one per kind."""
    token_sets = ()

    for definition in part.tokens:
        if isinstance(definition, dict):
            definition = ExportDefinition.from_dict(definition)
        if not definition.source or not definition.exports:
            continue

        node = resolve_node_from_path(root, definition.source, variant_properties)
        if node is None:
            logger.debug("export_path_not_found", part=part.id, path=definition.source)
            continue

        for exportable in definition.exports:
            kind = Exportable.parse(exportable)
            if kind is None:
                logger.warning("unknown_exportable", part=part.id, exportable=exportable)
                continue

            token_set = extract_node_exportable(node, kind)
            if token_set is None:
                continue

            reference = get_reference_from_map(node, token_set, design_map)
            if reference is not None:
                token_set = replace(token_set, reference=reference)

            token_sets = _fold_token_set(token_sets, token_set)

    return token_sets
