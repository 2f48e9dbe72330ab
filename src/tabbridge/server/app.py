"""FastAPI application exposing open tabs, outlines and edit proposals."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Literal

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel, ConfigDict

from ..core.positions import Range
from ..editor.patches import EditRequest, apply_edit
from ..errors import RangeError, SymbolFormatError, TabBridgeError, TabNotFoundError
from ..outline import flatten, outline_to_payload, render
from ..services.backend import EditorBackend
from ..services.settings import Settings
from ..utils.logging import ACCESS_LOGGER_NAME

_LOGGER = logging.getLogger(__name__)
_ACCESS_LOGGER = logging.getLogger(ACCESS_LOGGER_NAME)

ASSET_PATHS: tuple[str, ...] = ("/.well-known/ai-plugin.json", "/openapi.yaml", "/logo.jpg")


def _to_camel(string: str) -> str:
    parts = string.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


class CamelModel(BaseModel):
    """Base model accepting camelCase JSON."""

    model_config = ConfigDict(alias_generator=_to_camel, populate_by_name=True)


class ModifyRequest(CamelModel):
    tab_name: str
    start_line: int
    start_character: int
    end_line: int
    end_character: int
    new_text: str = ""

    def to_edit(self) -> EditRequest:
        edit_range = Range.from_positions(self.start_line, self.start_character, self.end_line, self.end_character)
        return EditRequest(range=edit_range, replacement_text=self.new_text)


def create_app(backend: EditorBackend, settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application serving ``backend``."""

    settings = settings or Settings()
    app = FastAPI(title="tabbridge", description="Open editor tabs over HTTP", version="0.1.0")
    app.state.backend = backend
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=list(settings.cors_methods),
        allow_headers=list(settings.cors_headers),
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Any) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        client = request.client.host if request.client else "-"
        _ACCESS_LOGGER.info(
            '%s "%s %s" %s %.1fms',
            client,
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    _register_error_handlers(app)
    _register_routes(app, backend, settings)
    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(TabNotFoundError)
    async def tab_not_found(_request: Request, exc: TabNotFoundError) -> JSONResponse:
        return JSONResponse(exc.to_dict(), status_code=404)

    @app.exception_handler(RangeError)
    async def range_error(_request: Request, exc: RangeError) -> JSONResponse:
        return JSONResponse(exc.to_dict(), status_code=400)

    @app.exception_handler(SymbolFormatError)
    async def symbol_format_error(_request: Request, exc: SymbolFormatError) -> JSONResponse:
        _LOGGER.warning("Backend returned a malformed symbol tree: %s", exc)
        return JSONResponse(exc.to_dict(), status_code=502)


def _register_routes(app: FastAPI, backend: EditorBackend, settings: Settings) -> None:
    assets_dir = Path(settings.assets_dir).expanduser() if settings.assets_dir else None

    @app.get("/", response_class=PlainTextResponse)
    def index() -> str:
        return "tabbridge is running"

    def serve_asset(request: Request) -> Response:
        if assets_dir is None:
            return PlainTextResponse("Not found", status_code=404)
        target = assets_dir / request.url.path.lstrip("/")
        if not target.is_file():
            return PlainTextResponse("Not found", status_code=404)
        return FileResponse(target)

    for asset_path in ASSET_PATHS:
        app.add_api_route(asset_path, serve_asset, methods=["GET"], include_in_schema=False)

    @app.get("/tabs")
    def list_tabs() -> Any:
        try:
            return backend.list_documents()
        except TabBridgeError:
            raise
        except Exception:
            _LOGGER.exception("Failed to list tabs")
            return PlainTextResponse("Failed to get tabs", status_code=500)

    @app.get("/tabs/{tab_name}", response_class=PlainTextResponse)
    def read_tab(tab_name: str) -> Any:
        try:
            return backend.resolve_document(tab_name).text
        except TabBridgeError:
            raise
        except Exception:
            _LOGGER.exception("Failed to read tab %s", tab_name)
            return PlainTextResponse("Failed to read file", status_code=500)

    @app.get("/tabs/{tab_name}/symbols")
    def tab_symbols(
        tab_name: str,
        output_format: Literal["text", "json"] = Query("text", alias="format"),
    ) -> Any:
        try:
            nodes = flatten(backend.resolve_symbols(tab_name), max_depth=settings.max_symbol_depth)
        except TabBridgeError:
            raise
        except Exception:
            _LOGGER.exception("Failed to resolve symbols for %s", tab_name)
            return PlainTextResponse("Failed to get symbols", status_code=500)
        if output_format == "json":
            return JSONResponse(outline_to_payload(nodes))
        return PlainTextResponse(render(nodes))

    @app.post("/tabs/modify")
    def modify_tab(body: ModifyRequest) -> Any:
        try:
            snapshot = backend.resolve_document(body.tab_name)
            proposed = apply_edit(snapshot.text, body.to_edit())
            preview = backend.present_diff(snapshot.text, proposed, label=snapshot.label)
        except TabBridgeError:
            raise
        except Exception:
            _LOGGER.exception("Failed to propose changes for %s", body.tab_name)
            return PlainTextResponse("Failed to propose changes", status_code=500)
        return {
            "message": "Diff view opened successfully",
            "diff": preview.diff,
            "summary": preview.summary,
            "proposedPath": str(preview.proposed_path) if preview.proposed_path else None,
        }


__all__ = ["ASSET_PATHS", "ModifyRequest", "create_app"]
