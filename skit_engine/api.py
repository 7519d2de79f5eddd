"""FastAPI endpoints under /api.

  GET  /api/health               liveness
  POST /api/script/parse         parse supplied scene text
  POST /api/script/generate      generate with the configured LLM, then parse
  POST /api/requests/parse       parse one [REQUEST: ...] tag
  POST /api/requests/evaluate    check a request against a world snapshot
"""

from __future__ import annotations

from dataclasses import dataclass

from dotenv import load_dotenv
from fastapi import APIRouter, Depends, FastAPI, HTTPException
from fastapi import Request as HTTPRequest
from pydantic import BaseModel, Field

from skit_engine.config import EngineConfig, build_llm, load_config
from skit_engine.llm import LLM
from skit_engine.models import Request, ScriptResult, WorldState
from skit_engine.pipeline import generate_script
from skit_engine.requests import can_fulfill, parse_request_tag
from skit_engine.script import parse_script

router = APIRouter()


# ---------------------------------------------------------------------------
# Bodies
# ---------------------------------------------------------------------------

class ParseScriptBody(BaseModel):
    text: str
    world: WorldState = Field(default_factory=WorldState)
    location_id: str = ""


class GenerateScriptBody(BaseModel):
    prompt: str
    world: WorldState = Field(default_factory=WorldState)
    location_id: str = ""


class ParseRequestBody(BaseModel):
    tag: str


class EvaluateRequestBody(BaseModel):
    request: Request
    world: WorldState


@dataclass
class Engine:
    config: EngineConfig
    llm: LLM


def get_engine(http_request: HTTPRequest) -> Engine:
    return http_request.app.state.engine


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.post("/script/parse", response_model=ScriptResult)
async def parse_script_text(body: ParseScriptBody):
    """Parse scene text against the participants present at a location."""
    world = body.world
    return parse_script(
        body.text,
        world.present_at(body.location_id),
        roster=world.participants.values(),
        factions=world.factions,
    )


@router.post("/script/generate", response_model=ScriptResult)
async def generate_script_text(body: GenerateScriptBody, engine: Engine = Depends(get_engine)):
    """Generate a scene with retries; an empty result means every attempt failed."""
    settings = engine.config.script
    return await generate_script(
        engine.llm,
        settings.prompt(body.prompt),
        body.world,
        body.location_id,
        max_attempts=settings.max_attempts,
    )


@router.post("/requests/parse", response_model=Request)
async def parse_request(body: ParseRequestBody):
    request = parse_request_tag(body.tag)
    if request is None:
        raise HTTPException(422, "Not a valid REQUEST tag")
    return request


@router.post("/requests/evaluate")
async def evaluate_request(body: EvaluateRequestBody):
    """Whether the world snapshot currently satisfies the request's requirement."""
    return {"can_fulfill": can_fulfill(body.request.requirement, body.world)}


def create_app(config: EngineConfig | None = None, llm: LLM | None = None) -> FastAPI:
    load_dotenv()
    resolved = config or load_config()

    app = FastAPI(title="Skit Engine")
    app.state.engine = Engine(config=resolved, llm=llm or build_llm(resolved))
    app.include_router(router, prefix="/api")
    return app
