"""Sources of design data.

A provider hands the pipeline three things: local style nodes, component
sets with their definitions, and asset files for a named category. The REST
provider reads them from the Figma HTTP API, the snapshot provider from an
already-fetched JSON document.
"""

import json
from pathlib import Path
from typing import Optional, Union

import requests
import structlog

from components import build_component_definition, build_legacy_component_definition
from errors import ProviderError
from models import ComponentSetSnapshot

logger = structlog.get_logger(__name__)

FIGMA_API_URL = "https://api.figma.com/v1"
PLUGIN_NAMESPACE = "convertiv_handoff_app"
DEFAULT_ASSET_EXTENSION = "svg"
LOCAL_STYLE_NODE_TYPES = ("RECTANGLE", "TEXT")


def read_component_set_settings(component_set: dict) -> Optional[dict]:
    """Exporter settings stored on a component set by the plugin, or None
    when the set is missing them or is not marked as exposed."""
    plugin_data = (component_set.get("sharedPluginData") or {}).get(PLUGIN_NAMESPACE) or {}
    raw = plugin_data.get(f"node_{component_set.get('id')}_settings")
    if not raw:
        return None
    try:
        settings = json.loads(raw)
    except (TypeError, ValueError):
        return None
    return settings if isinstance(settings, dict) and settings.get("exposed") else None


def _component_set_snapshots(component_sets: list, components_metadata: dict) -> list:
    snapshots = []
    for component_set in component_sets:
        settings = read_component_set_settings(component_set)
        if settings is None:
            continue
        definition = build_component_definition(component_set, settings)
        if definition is None:
            logger.warning("component_set_without_properties", component_set=component_set.get("name"))
            continue
        snapshots.append(
            ComponentSetSnapshot(
                name=definition.name,
                node=component_set,
                components_metadata=components_metadata,
                definition=definition,
            )
        )
    return snapshots


def _asset_sort_key(node_id: str) -> int:
    parts = node_id.split(":")
    if len(parts) > 1 and parts[1]:
        return int(parts[0]) + int(parts[1])
    return 0


class RestApiProvider:
    """Figma REST API provider.

    With ``legacy_definitions`` the component sets are chosen and described
    by those definitions instead of the plugin settings on each set.
    """

    def __init__(
        self,
        file_key: str,
        access_token: str,
        legacy_definitions: Optional[list] = None,
        timeout: float = 30,
    ):
        self.file_key = file_key
        self.access_token = access_token
        self.legacy_definitions = legacy_definitions
        self.timeout = timeout

    def figma_api_get(self, path: str, params: dict = None) -> dict:
        headers = {"X-Figma-Token": self.access_token}
        url = f"{FIGMA_API_URL}{path}"
        try:
            res = requests.get(url, headers=headers, params=params, timeout=self.timeout)
            res.raise_for_status()
            return res.json()
        except requests.RequestException as e:
            raise ProviderError(f"Figma API request to {path} failed: {e}") from e
        except ValueError as e:
            raise ProviderError(f"Figma API returned invalid JSON for {path}: {e}") from e

    def _get_nodes(self, node_ids: list, plugin_data: bool = False) -> dict:
        params = {"ids": ",".join(node_ids)}
        if plugin_data:
            params["plugin_data"] = "shared"
        return self.figma_api_get(f"/files/{self.file_key}/nodes", params=params).get("nodes") or {}

    def get_local_styles(self) -> list:
        styles = self.figma_api_get(f"/files/{self.file_key}/styles").get("meta", {}).get("styles") or []
        node_ids = [
            style["node_id"]
            for style in sorted(styles, key=lambda style: style.get("sort_position") or "")
        ]
        if not node_ids:
            return []

        nodes = []
        for node in self._get_nodes(node_ids).values():
            document = (node or {}).get("document") or {}
            if document.get("type") in LOCAL_STYLE_NODE_TYPES:
                nodes.append(document)
        logger.info("local_styles_fetched", count=len(nodes))
        return nodes

    def get_assets(self, category: str) -> list:
        components = (
            self.figma_api_get(f"/files/{self.file_key}/components").get("meta", {}).get("components")
            or []
        )
        matching = [
            c
            for c in components
            if category in ((c.get("containing_frame") or {}).get("name") or "")
        ]
        if not matching:
            return []

        node_ids = [c["node_id"] for c in sorted(matching, key=lambda c: _asset_sort_key(c["node_id"]))]
        images = self.figma_api_get(
            f"/images/{self.file_key}",
            params={"ids": ",".join(node_ids), "format": DEFAULT_ASSET_EXTENSION},
        ).get("images") or {}

        by_id = {c["node_id"]: c for c in matching}
        assets = []
        for node_id, image_url in images.items():
            component = by_id.get(node_id)
            if component is None or not image_url:
                continue
            try:
                res = requests.get(image_url, timeout=self.timeout)
                res.raise_for_status()
            except requests.RequestException as e:
                raise ProviderError(f"Failed to download asset {node_id}: {e}") from e
            assets.append(
                {
                    "name": component.get("name", ""),
                    "description": component.get("description", ""),
                    "data": res.text,
                    "extension": DEFAULT_ASSET_EXTENSION,
                }
            )
        logger.info("assets_fetched", category=category, count=len(assets))
        return assets

    def get_components(self) -> list:
        metadata = (
            self.figma_api_get(f"/files/{self.file_key}/component_sets")
            .get("meta", {})
            .get("component_sets")
            or []
        )
        if not metadata:
            logger.error("no_published_components", file_key=self.file_key)
            return []

        nodes = self._get_nodes([m["node_id"] for m in metadata], plugin_data=True)
        components_metadata = {}
        for node in nodes.values():
            components_metadata.update((node or {}).get("components") or {})
        component_sets = [
            (node or {}).get("document")
            for node in nodes.values()
            if ((node or {}).get("document") or {}).get("type") == "COMPONENT_SET"
        ]

        if self.legacy_definitions is not None:
            return self._legacy_component_set_snapshots(component_sets, metadata, components_metadata)
        return _component_set_snapshots(component_sets, components_metadata)

    def _legacy_component_set_snapshots(
        self, component_sets: list, metadata: list, components_metadata: dict
    ) -> list:
        logger.warning("legacy_definitions_in_use")
        snapshots = []

        for legacy in self.legacy_definitions:
            search = ((legacy.get("options") or {}).get("exporter") or {}).get("search")
            if not legacy.get("id") or not search:
                logger.error("legacy_definition_invalid", definition=legacy.get("id"))
                continue

            for component_set in legacy_component_sets(component_sets, metadata, search):
                definition = build_legacy_component_definition(component_set, legacy)
                snapshots.append(
                    ComponentSetSnapshot(
                        name=definition.name,
                        node=component_set,
                        components_metadata=components_metadata,
                        definition=definition,
                    )
                )
        return snapshots


def legacy_component_sets(component_sets: list, metadata: list, search: str) -> list:
    """The set named ``search`` and every other set in the same frame."""
    primary = next((s for s in component_sets if s.get("name") == search), None)
    if primary is None:
        logger.error("legacy_component_set_not_found", search=search)
        return []

    primary_meta = next((m for m in metadata if m.get("node_id") == primary.get("id")), None)
    if primary_meta is None:
        return [primary]

    frame_id = (primary_meta.get("containing_frame") or {}).get("nodeId")
    by_id = {s.get("id"): s for s in component_sets}
    related = [
        by_id[m["node_id"]]
        for m in metadata
        if m.get("node_id") != primary_meta.get("node_id")
        and (m.get("containing_frame") or {}).get("nodeId") == frame_id
        and m.get("node_id") in by_id
    ]
    return [primary] + related


class SnapshotProvider:
    """Serve design data from an already-fetched snapshot document::

        {
          "localStyles": [...],
          "componentSets": [
            {"node": {...}, "components": {...}, "settings": {...}}
          ],
          "assets": {"Icons": [...], "Logo": [...]}
        }

    A component set may give its exporter ``settings`` inline, a
    ``legacyDefinition``, or neither, in which case the plugin data stored on
    the node is read.
    """

    def __init__(self, snapshot: Union[dict, str, Path]):
        if isinstance(snapshot, (str, Path)):
            try:
                snapshot = json.loads(Path(snapshot).read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                raise ProviderError(f"Could not read snapshot '{snapshot}': {e}") from e
        if not isinstance(snapshot, dict):
            raise ProviderError("Snapshot must be a JSON object")
        self.snapshot = snapshot

    def get_local_styles(self) -> list:
        return list(self.snapshot.get("localStyles") or [])

    def get_assets(self, category: str) -> list:
        return list((self.snapshot.get("assets") or {}).get(category) or [])

    def get_components(self) -> list:
        snapshots = []
        for entry in self.snapshot.get("componentSets") or []:
            node = entry.get("node") or {}
            components_metadata = entry.get("components") or {}

            if entry.get("legacyDefinition"):
                definition = build_legacy_component_definition(node, entry["legacyDefinition"])
            else:
                settings = entry.get("settings") or read_component_set_settings(node)
                if settings is None:
                    continue
                definition = build_component_definition(node, settings)

            if definition is None:
                logger.warning("component_set_without_properties", component_set=node.get("name"))
                continue

            snapshots.append(
                ComponentSetSnapshot(
                    name=definition.name,
                    node=node,
                    components_metadata=components_metadata,
                    definition=definition,
                )
            )
        return snapshots
