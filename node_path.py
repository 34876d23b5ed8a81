"""Resolve schema paths such as ``FRAME > INSTANCE[name=${Icon}]`` against
a design node tree."""

import re
from typing import Callable, Optional

import structlog

from errors import PathResolutionError

logger = structlog.get_logger(__name__)

NODE_TYPES = {
    "DOCUMENT",
    "CANVAS",
    "FRAME",
    "GROUP",
    "VECTOR",
    "BOOLEAN_OPERATION",
    "STAR",
    "LINE",
    "ELLIPSE",
    "REGULAR_POLYGON",
    "RECTANGLE",
    "TEXT",
    "SLICE",
    "COMPONENT",
    "COMPONENT_SET",
    "INSTANCE",
}

TOKEN_PATTERN = re.compile(r"\$\{(.*?)\}")
SELECTOR_PATTERN = re.compile(r"\[(.*?)\]")


def interpolate_tokens(
    text: str, values: dict, pipe: Optional[Callable[[str, str, str], str]] = None
) -> str:
    """Replace ``${key}`` placeholders (case-insensitive) with ``values[key]``.

    Unknown keys become an empty string. ``pipe(token, key, value)`` may
    rewrite each replacement.
    """
    lookup = {str(k).lower(): v for k, v in values.items()}

    def replace(match):
        token = match.group(0)
        key = match.group(1).lower()
        value = lookup.get(key, "")
        return pipe(token, key, value) if pipe else value

    return TOKEN_PATTERN.sub(replace, text)


def parse_path_segment(segment: str) -> tuple:
    """Split ``TYPE[key=value,...]`` into the node type (or None when it is
    not a known node type) and its selectors."""
    node_type = segment.split("[")[0].strip()
    selectors = {}

    match = SELECTOR_PATTERN.search(segment)
    if match:
        for selector in match.group(1).split(","):
            key, _, value = selector.partition("=")
            key = key.strip()
            if not (key and value):
                continue
            selectors[key] = value.strip().replace("'", "").replace('"', "")

    return (node_type if node_type in NODE_TYPES else None), selectors


def find_node(node: dict, node_type: str, name: Optional[str] = None) -> Optional[dict]:
    """Depth-first pre-order search starting at ``node`` itself."""
    if node.get("type") == node_type and (
        name is None or str(node.get("name", "")).lower() == name.lower()
    ):
        return node

    for child in node.get("children") or []:
        found = find_node(child, node_type, name)
        if found is not None:
            return found

    return None


def _walk(root: dict, path: str, variant_properties: dict):
    current = root
    for segment in (part.strip() for part in path.split(">")):
        if segment in ("$", ""):
            continue

        node_type, selectors = parse_path_segment(segment)
        if node_type is None:
            logger.debug("path_segment_ignored", path=path, segment=segment)
            continue

        name = selectors.get("name")
        if name is not None:
            name = interpolate_tokens(name, variant_properties)

        current = find_node(current, node_type, name)
        if current is None:
            return None, segment

    return current, None


def resolve_node_from_path(root: dict, path: str, variant_properties: dict = None) -> Optional[dict]:
    """Return the node ``path`` points at, or None when a segment has no match."""
    node, _ = _walk(root, path, variant_properties or {})
    return node


def resolve_node_from_path_strict(root: dict, path: str, variant_properties: dict = None) -> dict:
    node, failed_segment = _walk(root, path, variant_properties or {})
    if node is None:
        raise PathResolutionError(path, failed_segment)
    return node
