"""Shared fixtures: a small Button component set and a few local styles."""

import copy

import pytest

BLACK = {"r": 0, "g": 0, "b": 0, "a": 1}


def solid(color, **extra):
    return {"type": "SOLID", "blendMode": "NORMAL", "color": dict(color), **extra}


@pytest.fixture
def button_component_set():
    return {
        "id": "1:1",
        "type": "COMPONENT_SET",
        "name": "Button",
        "componentPropertyDefinitions": {
            "Size": {"type": "VARIANT", "defaultValue": "Large"},
            "State": {"type": "VARIANT", "defaultValue": "Default"},
            "Label": {"type": "TEXT", "defaultValue": "Click"},
        },
        "children": [
            {
                "id": "1:2",
                "type": "COMPONENT",
                "name": "Size=Large, State=Default",
                "strokeWeight": 2,
                "cornerRadius": 4,
                "strokes": [solid(BLACK)],
                "styles": {"strokes": "S:1"},
                "children": [],
            },
            {
                "id": "1:3",
                "type": "COMPONENT",
                "name": "Size=Small, State=Default",
                "strokeWeight": 1,
                "cornerRadius": 2,
                "strokes": [solid(BLACK)],
                "children": [],
            },
            {
                "id": "1:4",
                "type": "COMPONENT",
                "name": "Size=Large, State=Hover",
                "strokeWeight": 3,
                "cornerRadius": 4,
                "strokes": [solid(BLACK)],
                "children": [],
            },
        ],
    }


@pytest.fixture
def button_settings():
    return {
        "name": "Button",
        "exposed": True,
        "parts": [{"name": "$", "definitions": [{"from": "$", "export": ["BORDER"]}]}],
        "sharedVariants": [
            {
                "componentId": "1:4",
                "sharedVariantProperty": "State",
                "distinctiveVariantProperties": ["Size"],
            }
        ],
    }


@pytest.fixture
def paint_style():
    return {
        "type": "PAINT",
        "id": "S:1",
        "name": "Primary/Blue 500",
        "paints": [{"type": "SOLID", "color": {"r": 0, "g": 0, "b": 1}}],
    }


@pytest.fixture
def effect_style():
    return {
        "type": "EFFECT",
        "id": "S:2",
        "name": "Shadow/Small",
        "effects": [
            {
                "type": "DROP_SHADOW",
                "visible": True,
                "color": {"r": 0, "g": 0, "b": 0, "a": 0.25},
                "offset": {"x": 0, "y": 4},
                "radius": 8,
            }
        ],
    }


@pytest.fixture
def text_proxy_style():
    return {
        "type": "TEXT",
        "id": "S:3",
        "name": "Body/Regular",
        "style": {
            "fontFamily": "Inter",
            "fontSize": 16,
            "fontWeight": 400,
            "lineHeightPx": 24,
            "letterSpacing": 0,
        },
        "fills": [solid(BLACK)],
    }


@pytest.fixture
def local_styles(paint_style, effect_style, text_proxy_style):
    return [paint_style, effect_style, text_proxy_style]


@pytest.fixture
def snapshot(button_component_set, button_settings, local_styles):
    return {
        "localStyles": copy.deepcopy(local_styles),
        "componentSets": [
            {
                "node": copy.deepcopy(button_component_set),
                "components": {"1:2": {"description": "Large button"}},
                "settings": copy.deepcopy(button_settings),
            }
        ],
        "assets": {
            "Icons": [
                {
                    "name": "Arrow Right",
                    "description": "Arrow",
                    "data": "<svg>\n<path/>\n</svg>",
                    "extension": "svg",
                }
            ],
            "Logo": [],
        },
    }
