import re

from models import AssetObject
from naming import slugify


def extract_assets(files: list) -> list:
    """Turn fetched asset files (``name``, ``description``, ``data``,
    ``extension``) into asset records."""
    assets = []
    for asset in files or []:
        name = slugify(asset.get("name") or "")
        data = asset.get("data") or ""
        assets.append(
            AssetObject(
                path=f"{name}.{asset.get('extension', 'svg')}",
                name=name,
                icon=name,
                description=asset.get("description") or "",
                index=re.sub(r"[\W_]+", " ", name.lower()),
                size=len(data),
                data=re.sub(r"\r\n|\n|\r", "", data),
            )
        )
    return assets
