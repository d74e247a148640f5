"""Demo HTTP server: renders the configured page and shows the comparison."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response

from initial_rendering.models.config import RenderingConfig, ServerConfig
from initial_rendering.models.report import RenderingReport
from initial_rendering.orchestrator import Orchestrator
from initial_rendering.reporter.html_report import build_html_report

logger = logging.getLogger(__name__)

Renderer = Callable[[RenderingConfig], Awaitable[RenderingReport]]


async def _render(config: RenderingConfig) -> RenderingReport:
    return await Orchestrator(config).render()


def get_renderer() -> Renderer:
    """FastAPI dependency returning the function that performs a rendering run."""
    return _render


RendererDep = Depends(get_renderer)

router = APIRouter()


@router.get("/favicon.ico")
async def favicon() -> Response:
    return Response(status_code=204)


@router.get("/", response_class=HTMLResponse)
async def rendering_page(request: Request, renderer: Renderer = RendererDep) -> Response:
    """Render the configured URL and return the HTML comparison page."""
    config: RenderingConfig = request.app.state.config.rendering
    try:
        report = await renderer(config)
    except Exception as e:
        logger.error("Rendering of %s failed: %s", config.url, e)
        return JSONResponse(status_code=400, content={"error": str(e)})
    return HTMLResponse(build_html_report(report))


def create_app(config: Optional[ServerConfig] = None) -> FastAPI:
    app = FastAPI(title="Initial Rendering Demo")
    app.state.config = config or ServerConfig()
    app.include_router(router)
    return app


app = create_app()
