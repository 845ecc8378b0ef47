"""HTTP surface: FastAPI app exposing the engine.

Routes:
  POST /api/recommendations/analyze   flat result contract
  POST /api/recommendations/generate  legacy ``{ok, data}`` envelope
  POST /api/recommendations/improve   profile clean-up
  GET  /healthz                       runtime limits and cache state
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from marketfit.core.config import Settings
from marketfit.core.errors import RecommendationError
from marketfit.core.schemas import RecommendOptions
from marketfit.pipeline.orchestrator import RecommendationEngine
from marketfit.profile.improver import improve_profile
from marketfit.profile.schema import Profile

logger = logging.getLogger(__name__)


class RecommendRequest(BaseModel):
    """Request body shared by analyze and generate."""

    model_config = ConfigDict(populate_by_name=True)

    profile: dict[str, Any] = Field(default_factory=dict)
    area_id: str | int | None = Field(default=None, alias="areaId")
    language: str = "ru"
    focus_role: str | None = Field(default=None, alias="focusRole")
    seed_skills: list[str] = Field(default_factory=list, alias="seedSkills")

    def options(self) -> RecommendOptions:
        return RecommendOptions(
            area_id=self.area_id,
            language=self.language,
            focus_role=self.focus_role,
            seed_skills=self.seed_skills,
        )


class ImproveRequest(BaseModel):
    profile: dict[str, Any] = Field(default_factory=dict)


def create_app(
    settings: Settings | None = None,
    engine: RecommendationEngine | None = None,
) -> FastAPI:
    """Build the app; the engine is started and stopped with the app lifespan."""
    resolved = engine or RecommendationEngine(settings or Settings.from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.engine = resolved
        await resolved.start()
        try:
            yield
        finally:
            await resolved.stop()

    app = FastAPI(title="Market Fit Engine", version="1.0.0", lifespan=lifespan)

    async def _run(request: Request, body: RecommendRequest) -> dict[str, Any]:
        engine: RecommendationEngine = request.app.state.engine
        try:
            profile = Profile.model_validate(body.profile)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False)) from e
        try:
            result = await engine.generate(profile, body.options())
        except RecommendationError as e:
            logger.error("Recommendation failed: %s", e)
            raise HTTPException(status_code=503, detail=str(e)) from e
        return result.to_wire()

    @app.post("/api/recommendations/analyze")
    async def analyze(request: Request, body: RecommendRequest) -> dict[str, Any]:
        return await _run(request, body)

    @app.post("/api/recommendations/generate")
    async def generate(request: Request, body: RecommendRequest) -> dict[str, Any]:
        return {"ok": True, "data": await _run(request, body)}

    @app.post("/api/recommendations/improve")
    async def improve(body: ImproveRequest) -> dict[str, Any]:
        return {"ok": True, **improve_profile(body.profile)}

    @app.get("/healthz")
    async def healthz(request: Request) -> dict[str, Any]:
        engine: RecommendationEngine = request.app.state.engine
        return engine.health().model_dump(mode="json", by_alias=True)

    return app
