from __future__ import annotations

import os
from collections.abc import Generator
from typing import Any

import pytest

from app.config import AppSettings, RenderSettings
from domain.geometry import Rectangle


def _clear_archer_env() -> None:
    for key in list(os.environ):
        if key.startswith("ARCHER_"):
            os.environ.pop(key, None)


_clear_archer_env()


@pytest.fixture(autouse=True)
def clear_archer_env() -> Generator[None, None, None]:
    _clear_archer_env()
    yield
    _clear_archer_env()


@pytest.fixture
def render_settings() -> RenderSettings:
    return RenderSettings(
        title="Test Archer",
        container_id="arrow",
        stroke_color="#f00",
        stroke_width=2,
        line_style="curve",
        arrow_length=10,
        arrow_thickness=6,
    )


@pytest.fixture
def app_settings(render_settings: RenderSettings) -> AppSettings:
    return AppSettings(render=render_settings)


@pytest.fixture
def rects() -> dict[str, Rectangle]:
    return {
        "a": Rectangle(0, 0, 100, 50),
        "b": Rectangle(200, 100, 100, 50),
        "c": Rectangle(0, 200, 100, 50),
    }


@pytest.fixture
def scene_payload() -> dict[str, Any]:
    return {
        "width": 400,
        "height": 300,
        "elements": [
            {
                "id": "a",
                "x": 0,
                "y": 0,
                "width": 100,
                "height": 50,
                "relations": [
                    {
                        "targetId": "b",
                        "sourceAnchor": "right",
                        "targetAnchor": "left",
                        "label": "calls",
                    }
                ],
            },
            {"id": "b", "x": 200, "y": 100, "width": 100, "height": 50},
        ],
    }
