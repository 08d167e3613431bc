from __future__ import annotations

from typing import Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from fastapi.middleware.cors import CORSMiddleware

from guildlog.client import Gw2Client
from guildlog_tool.core.runner import ClientFactory, run_command
from guildlog_tool.core.response import envelope, problem

app = FastAPI(title="GW2 Guild Log API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://127.0.0.1:8000", "http://localhost:8000"],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["X-GW2-Api-Key"],
)


def get_client_factory() -> ClientFactory:
    return Gw2Client


def _api_error(request: Request, code: str, message: str, hint: str, details: str | None = None, status: int = 400):
    params = {"path": request.url.path, "query": dict(request.query_params)}
    payload = envelope("api", params, error=problem(code, message, hint=hint, details=details))
    return JSONResponse(payload, status_code=status)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return _api_error(request, "INTERNAL", "Request failed.", "See /docs for the available routes.", str(exc.detail), status=exc.status_code)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    return _api_error(request, "INTERNAL", "Unexpected server error.", "Check server logs and retry.", str(exc), status=500)


@app.get("/health")
async def health():
    return {"ok": True}


@app.get("/guilds")
async def guilds(
    api_key: Optional[str] = Header(default=None, alias="X-GW2-Api-Key"),
    client_factory: ClientFactory = Depends(get_client_factory),
):
    return await run_command("guilds", {"api_key": api_key}, client_factory=client_factory)


@app.get("/guilds/{guild_id}/log")
async def guild_log(
    guild_id: str,
    api_key: Optional[str] = Header(default=None, alias="X-GW2-Api-Key"),
    client_factory: ClientFactory = Depends(get_client_factory),
):
    return await run_command("logs", {"guild_id": guild_id, "api_key": api_key}, client_factory=client_factory)
