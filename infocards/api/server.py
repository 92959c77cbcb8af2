"""
Tagging HTTP Endpoint

POST /api/ai-tag?trace=1&force=1

Status codes:
- 200: a TagResult, also when the model failed and the heuristic was used
- 400: invalid body, or title + note too short
- 413: title or note too large

Remote failures are never turned into 5xx here: the agent already converts
them into a fallback result and the client decides whether to accept it.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from infocards import __version__
from infocards.agents import TagAgent
from infocards.audit import get_logger
from infocards.config import get_settings, validate_all_settings
from infocards.errors import InputValidationError, InvalidBodyError
from infocards.models.item import Draft

logger = get_logger(__name__)

NO_STORE = {"Cache-Control": "no-store"}


def _flag(request: Request, name: str) -> bool:
    return request.query_params.get(name) == "1"


def _error_response(error: InputValidationError) -> JSONResponse:
    return JSONResponse(
        {"error": error.public_message},
        status_code=error.status_code,
        headers=NO_STORE,
    )


async def _read_draft(request: Request) -> Draft:
    try:
        raw = await request.json()
    except ValueError as e:
        raise InvalidBodyError("request body is not JSON") from e
    if not isinstance(raw, dict):
        raise InvalidBodyError("request body is not an object")
    try:
        return Draft.model_validate(raw)
    except ValidationError as e:
        raise InvalidBodyError(str(e)) from e


def create_app(tag_agent: Optional[TagAgent] = None) -> FastAPI:
    """Build the FastAPI application."""
    settings = get_settings().app
    app = FastAPI(title="Info Cards", version=__version__)
    app.state.tag_agent = tag_agent or TagAgent()

    @app.post(settings.tag_endpoint_path)
    async def ai_tag(request: Request) -> JSONResponse:
        trace = _flag(request, "trace")
        force = _flag(request, "force")

        try:
            draft = await _read_draft(request)
            result = await request.app.state.tag_agent.generate(
                draft, trace=trace, force_heuristic=force
            )
        except InputValidationError as e:
            logger.info(
                "tag_request_rejected",
                reason=type(e).__name__,
                status_code=e.status_code,
            )
            return _error_response(e)

        return JSONResponse(result.to_response(), headers=NO_STORE)

    @app.get("/api/health")
    async def health() -> dict:
        return {
            "status": "healthy",
            "version": __version__,
            "settings": validate_all_settings(),
        }

    return app
