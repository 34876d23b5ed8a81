"""Typed records passed between the extraction and transformation stages.

Design nodes themselves stay plain dictionaries in Figma REST shape; only
what the pipeline produces is modelled here.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class Exportable(str, Enum):
    BACKGROUND = "BACKGROUND"
    FILL = "FILL"
    BORDER = "BORDER"
    SPACING = "SPACING"
    TYPOGRAPHY = "TYPOGRAPHY"
    EFFECT = "EFFECT"
    OPACITY = "OPACITY"
    SIZE = "SIZE"

    @classmethod
    def parse(cls, value) -> Optional["Exportable"]:
        try:
            return cls(str(value).upper())
        except ValueError:
            return None


@dataclass(frozen=True)
class ReferenceObject:
    """Pointer from a component token to a local style token."""

    reference: str
    type: str
    name: str
    group: str


# Token sets ---------------------------------------------------------------


@dataclass(frozen=True)
class BackgroundTokenSet:
    background: list = field(default_factory=list)
    reference: Optional[ReferenceObject] = None
    kind: Exportable = field(default=Exportable.BACKGROUND, init=False)


@dataclass(frozen=True)
class FillTokenSet:
    color: list = field(default_factory=list)
    reference: Optional[ReferenceObject] = None
    kind: Exportable = field(default=Exportable.FILL, init=False)


@dataclass(frozen=True)
class BorderTokenSet:
    weight: float = 0
    radius: float = 0
    strokes: list = field(default_factory=list)
    dashes: list = field(default_factory=lambda: [0, 0])
    reference: Optional[ReferenceObject] = None
    kind: Exportable = field(default=Exportable.BORDER, init=False)


@dataclass(frozen=True)
class SpacingTokenSet:
    padding: dict = field(
        default_factory=lambda: {"TOP": 0, "RIGHT": 0, "BOTTOM": 0, "LEFT": 0}
    )
    spacing: float = 0
    reference: Optional[ReferenceObject] = None
    kind: Exportable = field(default=Exportable.SPACING, init=False)


@dataclass(frozen=True)
class TypographyTokenSet:
    font_family: str = ""
    font_size: float = 16
    font_weight: float = 100
    line_height: float = 1
    letter_spacing: float = 0
    text_align_horizontal: str = "LEFT"
    text_decoration: str = "NONE"
    text_case: str = "ORIGINAL"
    characters: str = ""
    reference: Optional[ReferenceObject] = None
    kind: Exportable = field(default=Exportable.TYPOGRAPHY, init=False)


@dataclass(frozen=True)
class EffectTokenSet:
    effect: list = field(default_factory=list)
    reference: Optional[ReferenceObject] = None
    kind: Exportable = field(default=Exportable.EFFECT, init=False)


@dataclass(frozen=True)
class OpacityTokenSet:
    opacity: float = 1
    reference: Optional[ReferenceObject] = None
    kind: Exportable = field(default=Exportable.OPACITY, init=False)


@dataclass(frozen=True)
class SizeTokenSet:
    width: float = 0
    height: float = 0
    reference: Optional[ReferenceObject] = None
    kind: Exportable = field(default=Exportable.SIZE, init=False)


TokenSet = Union[
    BackgroundTokenSet,
    FillTokenSet,
    BorderTokenSet,
    SpacingTokenSet,
    TypographyTokenSet,
    EffectTokenSet,
    OpacityTokenSet,
    SizeTokenSet,
]


# Component definitions ----------------------------------------------------


@dataclass(frozen=True)
class ExportDefinition:
    source: str
    exports: tuple

    @classmethod
    def from_dict(cls, data: dict) -> "ExportDefinition":
        return cls(source=data.get("from", ""), exports=tuple(data.get("export") or ()))


@dataclass(frozen=True)
class ComponentPart:
    id: str
    tokens: tuple = ()


@dataclass(frozen=True)
class SharedComponentVariant:
    component_id: str
    shared_variant_property: str = ""
    distinctive_variant_properties: tuple = ()

    @classmethod
    def from_dict(cls, data: dict) -> "SharedComponentVariant":
        return cls(
            component_id=data.get("componentId", ""),
            shared_variant_property=data.get("sharedVariantProperty") or "",
            distinctive_variant_properties=tuple(data.get("distinctiveVariantProperties") or ()),
        )


@dataclass(frozen=True)
class ComponentDefinition:
    id: str
    name: str
    variant_properties: tuple = ()
    parts: tuple = ()
    shared_component_variants: tuple = ()
    group: str = ""
    # Legacy definitions name variant properties that mark a "layout" child;
    # every other child is read from its first nested instance.
    legacy_layout_properties: Optional[tuple] = None


@dataclass(frozen=True)
class ComponentInstance:
    id: str
    name: str
    description: str = ""
    variant_properties: tuple = ()
    parts: dict = field(default_factory=dict)

    def variant_map(self) -> dict:
        return dict(self.variant_properties)


@dataclass
class FileComponentObject:
    instances: list = field(default_factory=list)


@dataclass
class ComponentSetSnapshot:
    """One component set as handed over by a provider."""

    name: str
    node: dict
    components_metadata: dict
    definition: ComponentDefinition


# Local styles -------------------------------------------------------------


@dataclass
class ColorObject:
    id: str
    name: str
    machine_name: str
    value: Optional[str]
    blend: Optional[str]
    group: str
    group_label: str
    sass: str
    reference: str


@dataclass
class EffectObject:
    id: str
    name: str
    machine_name: str
    group: str
    group_label: str
    effects: list
    reference: str


@dataclass
class TypographyObject:
    id: str
    name: str
    machine_name: str
    group: str
    group_label: str
    values: dict
    reference: str


@dataclass
class LocalStyles:
    color: list = field(default_factory=list)
    effect: list = field(default_factory=list)
    typography: list = field(default_factory=list)


@dataclass
class DesignMap:
    colors: dict = field(default_factory=dict)
    effects: dict = field(default_factory=dict)
    typography: dict = field(default_factory=dict)


# Output -------------------------------------------------------------------


@dataclass(frozen=True)
class TokenMetadata:
    part: str
    css_property: str
    reference: Optional[ReferenceObject]
    is_supported_css_property: bool
    name_segments: tuple


@dataclass(frozen=True)
class Token:
    name: str
    value: str
    metadata: TokenMetadata


@dataclass
class AssetObject:
    path: str
    name: str
    icon: str
    index: str
    size: int
    data: str
    description: str = ""


@dataclass
class DocumentationObject:
    timestamp: str = ""
    local_styles: LocalStyles = field(default_factory=LocalStyles)
    design_map: DesignMap = field(default_factory=DesignMap)
    components: dict = field(default_factory=dict)
    assets: dict = field(default_factory=lambda: {"icons": [], "logos": []})


@dataclass
class GradientObject:
    blend: Optional[str]
    handles: list
    stops: list
