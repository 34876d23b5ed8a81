"""Environment and token naming configuration.

A configuration document looks like::

    {
      "useVariables": true,
      "options": {
        "*": {"defaults": {"Size": "Medium"}},
        "button": {"cssRootClass": "btn", "tokenNameSegments": ["${component}", "${property}"]}
      }
    }

Wildcard (``*``) settings are merged into every component entry, the
component's own values winning.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from errors import ConfigurationError

load_dotenv()

WILDCARD = "*"


def get_figma_api_key() -> str:
    api_key = os.getenv("FIGMA_API_KEY")
    if not api_key:
        raise ConfigurationError("Missing FIGMA_API_KEY in environment or .env")
    return api_key


def get_figma_file_key(file_key: str = None) -> str:
    file_key = file_key or os.getenv("FIGMA_FILE_KEY")
    if not file_key:
        raise ConfigurationError("No Figma file key given and FIGMA_FILE_KEY is not set")
    return file_key


def lower_keys_and_values(obj: dict) -> dict:
    lowered = {}
    for key, value in obj.items():
        if isinstance(value, str):
            value = value.lower()
        elif isinstance(value, dict):
            value = lower_keys_and_values(value)
        lowered[str(key).lower()] = value
    return lowered


class ComponentOptions(BaseModel):
    """Naming options for one component, or for every component under ``*``."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    css_root_class: Optional[str] = Field(default=None, alias="cssRootClass")
    token_name_segments: Optional[List[str]] = Field(default=None, alias="tokenNameSegments")
    defaults: Dict[str, Any] = Field(default_factory=dict)
    replace: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("defaults", "replace", mode="before")
    @classmethod
    def empty_when_missing(cls, v):
        return {} if v is None else v

    @field_validator("defaults", "replace")
    @classmethod
    def lower_case(cls, v: dict) -> dict:
        return lower_keys_and_values(v)

    def merged_over(self, wildcard: "ComponentOptions") -> "ComponentOptions":
        return ComponentOptions(
            css_root_class=self.css_root_class or wildcard.css_root_class or None,
            token_name_segments=self.token_name_segments or wildcard.token_name_segments or None,
            defaults={**wildcard.defaults, **self.defaults},
            replace={**wildcard.replace, **self.replace},
        )


class TokenConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    use_variables: bool = Field(default=False, alias="useVariables")
    options: Dict[str, ComponentOptions] = Field(default_factory=dict)

    @field_validator("options", mode="before")
    @classmethod
    def empty_entries(cls, v):
        if v is None:
            return {}
        if isinstance(v, dict):
            return {key: {} if entry is None else entry for key, entry in v.items()}
        return v

    @field_validator("options")
    @classmethod
    def merge_wildcard(cls, options: dict) -> dict:
        wildcard = options.get(WILDCARD)
        if wildcard is None:
            return options
        return {key: entry.merged_over(wildcard) for key, entry in options.items()}

    def component_options(self, component_id: str) -> Optional[ComponentOptions]:
        return self.options.get(component_id) or self.options.get(WILDCARD)


def normalize_config(raw: dict = None) -> TokenConfig:
    try:
        return TokenConfig.model_validate({} if raw is None else raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid token configuration: {e}") from e


def load_config(path: str = None) -> TokenConfig:
    if not path:
        return TokenConfig()

    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read configuration '{path}': {e}") from e

    return normalize_config(raw)
