from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends, FastAPI, Request
from fastapi.responses import ORJSONResponse, Response

from adapters.svg.renderer import SvgArrowRenderer
from app.config import AppSettings, load_settings
from domain.models import SceneDocument
from domain.services.compute_scene_arrows import ComputeSceneArrows

logger = logging.getLogger(__name__)

SVG_MEDIA_TYPE = "image/svg+xml"


@dataclass(frozen=True)
class RenderContext:
    settings: AppSettings
    computer: ComputeSceneArrows
    renderer: SvgArrowRenderer


def create_app(settings: AppSettings) -> FastAPI:
    app = FastAPI(title=settings.render.title)
    context = RenderContext(
        settings=settings,
        computer=ComputeSceneArrows(
            base_style=settings.render.to_arrow_style(),
            container_id=settings.render.container_id,
        ),
        renderer=SvgArrowRenderer(),
    )
    app.state.render_context = context

    def get_context(request: Request) -> RenderContext:
        return request.app.state.render_context

    @app.get("/health")
    def health() -> ORJSONResponse:
        return ORJSONResponse({"status": "ok"})

    @app.post("/api/arrows")
    def api_arrows(
        scene: SceneDocument,
        context: RenderContext = Depends(get_context),
    ) -> ORJSONResponse:
        arrows = context.computer.compute(scene)
        logger.debug("Computed %d arrows for %d elements.", len(arrows), len(scene.elements))
        return ORJSONResponse(
            {
                "width": scene.width,
                "height": scene.height,
                "arrows": [arrow.to_dict() for arrow in arrows],
            }
        )

    @app.post("/api/svg")
    def api_svg(
        scene: SceneDocument,
        context: RenderContext = Depends(get_context),
    ) -> Response:
        arrows = context.computer.compute(scene)
        svg = context.renderer.render(arrows, scene.width, scene.height)
        return Response(content=svg, media_type=SVG_MEDIA_TYPE)

    return app


app = create_app(load_settings())
