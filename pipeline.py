"""Run a provider through extraction, then render and write the results."""

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import structlog

from assets import extract_assets
from components import extract_components
from config import TokenConfig
from emitters import TRANSFORMERS, get_transformer, transform
from errors import ProviderError
from local_styles import extract_local_styles
from models import DesignMap, DocumentationObject, LocalStyles

logger = structlog.get_logger(__name__)

ASSET_CATEGORIES = {"icons": "Icons", "logos": "Logo"}

FILE_EXTENSIONS = {
    "css": "css",
    "scss": "scss",
    "scss-types": "scss",
    "json": "json",
    "sd": "tokens.json",
}


def extract(provider, config: Optional[TokenConfig] = None) -> DocumentationObject:
    """Collect local styles, assets and components from ``provider``.

    Each category is fetched on its own; a provider failure in one is
    logged and leaves that category empty.
    """
    local_styles, design_map = LocalStyles(), DesignMap()
    try:
        local_styles, design_map = extract_local_styles(provider.get_local_styles())
    except ProviderError as e:
        logger.error("local_styles_failed", error=str(e))

    assets = {}
    for key, category in ASSET_CATEGORIES.items():
        try:
            assets[key] = extract_assets(provider.get_assets(category))
        except ProviderError as e:
            logger.error("assets_failed", category=category, error=str(e))
            assets[key] = []
        logger.info("assets_exported", category=category, count=len(assets[key]))

    components = {}
    try:
        components = extract_components(provider.get_components(), design_map, config)
    except ProviderError as e:
        logger.error("components_failed", error=str(e))

    return DocumentationObject(
        timestamp=datetime.now(timezone.utc).isoformat(),
        local_styles=local_styles,
        design_map=design_map,
        components=components,
        assets=assets,
    )


def render(document: DocumentationObject, output_format: str, config: Optional[TokenConfig] = None) -> dict:
    config = config or TokenConfig()
    transformer = get_transformer(output_format, use_variables=config.use_variables)
    return transform(transformer, document, config)


def write_outputs(
    document: DocumentationObject,
    output_dir,
    config: Optional[TokenConfig] = None,
    formats=None,
) -> list:
    """Write every rendered format, the assets and the documentation object
    under ``output_dir``. Returns the written paths."""
    output_dir = Path(output_dir)
    written = []

    def write(path: Path, content: str):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        written.append(path)

    for output_format in formats or list(TRANSFORMERS):
        rendered = render(document, output_format, config)
        extension = FILE_EXTENSIONS[output_format]
        base = output_dir / "tokens" / output_format
        for component_id, content in rendered["components"].items():
            write(base / "components" / f"{component_id}.{extension}", content)
        for name, content in rendered["design"].items():
            if content:
                write(base / "design" / f"{name}.{extension}", content)

    for category, assets in document.assets.items():
        for asset in assets:
            write(output_dir / "assets" / category / asset.path, asset.data)
        manifest = {asset.name: f"assets/{category}/{asset.path}" for asset in assets}
        write(output_dir / "assets" / f"{category}.json", json.dumps(manifest, indent=2))

    write(output_dir / "tokens.json", json.dumps(asdict(document), indent=2))

    logger.info("outputs_written", output_dir=str(output_dir), files=len(written))
    return written
