from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agent_hub.routes.agent_hub import error_response, router as agent_hub_router
from agent_hub.services.config import get_settings
from agent_hub.services.database import DataStoreError
from agent_hub.services.llm import LLMError, llm_enabled
from agent_hub.services.tool_registry import build_registry

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Agent Hub API", version="0.1.0")
app.state.registry = build_registry()

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url, "http://127.0.0.1:5173", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(agent_hub_router)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}" for error in exc.errors()
    )
    return error_response(400, f"Invalid request: {details}")


@app.exception_handler(LLMError)
async def llm_error(request: Request, exc: LLMError) -> JSONResponse:
    logger.error("LLM call failed: %s", exc)
    return error_response(500, str(exc))


@app.exception_handler(DataStoreError)
async def data_store_error(request: Request, exc: DataStoreError) -> JSONResponse:
    logger.error("Data store failure: %s", exc)
    return error_response(500, str(exc))


@app.get("/api/health")
async def health() -> dict[str, Any]:
    return {
        "status": "ok",
        "real_llm_enabled": llm_enabled(),
        "tools": len(app.state.registry),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("agent_hub.main:app", host="0.0.0.0", port=settings.api_port, reload=False)
