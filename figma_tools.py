from pathlib import Path

import structlog

from config import get_figma_api_key, get_figma_file_key, load_config
from mcp_server import mcp
from pipeline import extract, render, write_outputs
from provider import RestApiProvider, SnapshotProvider

logger = structlog.get_logger(__name__)


def rest_provider(file_key: str = None) -> RestApiProvider:
    return RestApiProvider(get_figma_file_key(file_key), get_figma_api_key())


def extract_tokens(file_key: str = None, output_format: str = "css", use_variables: bool = None, config_path: str = None) -> dict:
    config = load_config(config_path)
    if use_variables is not None:
        config.use_variables = use_variables
    document = extract(rest_provider(file_key), config)
    return {"timestamp": document.timestamp, "format": output_format, **render(document, output_format, config)}


def render_snapshot(snapshot_path: str, output_format: str = "css", config_path: str = None) -> dict:
    config = load_config(config_path)
    document = extract(SnapshotProvider(snapshot_path), config)
    return {"timestamp": document.timestamp, "format": output_format, **render(document, output_format, config)}


def export_tokens(file_key: str = None, output_dir: str = "exported", config_path: str = None, snapshot_path: str = None) -> dict:
    config = load_config(config_path)
    provider = SnapshotProvider(snapshot_path) if snapshot_path else rest_provider(file_key)
    document = extract(provider, config)
    written = write_outputs(document, Path(output_dir), config)
    return {
        "message": f"Successfully wrote {len(written)} files",
        "outputDir": str(output_dir),
        "files": [str(path) for path in written],
        "components": {name: len(c.instances) for name, c in document.components.items()},
    }


@mcp.tool(
    name="extract_design_tokens",
    description="""
    Fetches a Figma file and converts its component sets and local styles into design tokens.

    `format` is one of css, scss, scss-types, json or sd. When `useVariables` is true,
    component tokens point at the local style tokens they came from.
    """
)
def extract_design_tokens(fileKey: str = None, format: str = "css", useVariables: bool = None, configPath: str = None):
    try:
        return extract_tokens(fileKey, format, useVariables, configPath)
    except Exception as e:
        logger.error("extract_design_tokens_failed", error=str(e))
        return {"error": f"Failed to extract design tokens: {e}"}


@mcp.tool(
    name="render_snapshot_tokens",
    description="""
    Renders design tokens from a previously saved Figma snapshot JSON file, without calling the API.
    """
)
def render_snapshot_tokens(snapshotPath: str, format: str = "css", configPath: str = None):
    try:
        return render_snapshot(snapshotPath, format, configPath)
    except Exception as e:
        logger.error("render_snapshot_tokens_failed", error=str(e))
        return {"error": f"Failed to render snapshot tokens: {e}"}


@mcp.tool(
    name="export_design_tokens",
    description="""
    Exports design tokens in every format, plus icon and logo assets, into an output directory.
    """
)
def export_design_tokens(fileKey: str = None, outputDir: str = "exported", configPath: str = None, snapshotPath: str = None):
    try:
        return export_tokens(fileKey, outputDir, configPath, snapshotPath)
    except Exception as e:
        logger.error("export_design_tokens_failed", error=str(e))
        return {"error": f"Failed to export design tokens: {e}"}


def main():
    mcp.run()


if __name__ == "__main__":
    main()
