"""FastAPI application exposing scoring, adaptation and disambiguation."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..adapters import AdaptContext, RuleAdapter, UnknownPlatformError
from ..disambiguation import disambiguate
from ..models import CandidateDocument, Confidence, ContentType, DetectedIntegration, StandardizedRule
from ..scoring import RelevanceScorer
from ..selection import TemplateSelector
from ..signature import extract_signature


class SignaturePayload(BaseModel):
    languages: List[str] = Field(default_factory=list)
    frameworks: List[str] = Field(default_factory=list)
    libraries: List[str] = Field(default_factory=list)
    test_frameworks: List[str] = Field(default_factory=list)
    build_tools: List[str] = Field(default_factory=list)
    project_size: Optional[str] = None
    complexity: Optional[str] = None
    file_count: int = 0

    def to_analysis(self) -> Dict[str, Any]:
        analysis: Dict[str, Any] = {
            "techStack": {
                "primaryLanguages": self.languages,
                "frameworks": self.frameworks,
                "libraries": self.libraries,
                "testingFrameworks": self.test_frameworks,
                "buildTools": self.build_tools,
            },
            "projectStructure": {"fileCount": self.file_count},
        }
        if self.project_size:
            analysis["projectSize"] = self.project_size
        if self.complexity:
            analysis["complexity"] = self.complexity
        return analysis


class CandidatePayload(BaseModel):
    name: str
    path: str
    content_type: str = "rule"
    category: Optional[str] = None


class ScoreRequest(BaseModel):
    signature: SignaturePayload = Field(default_factory=SignaturePayload)
    candidates: List[CandidatePayload]


class ScoredItem(BaseModel):
    name: str
    path: str
    content_type: str
    relevance_score: float
    excluded: bool
    reasons: List[str]


class ScoreResponse(BaseModel):
    scored: List[ScoredItem]
    selected: Dict[str, List[str]]


class RulePayload(BaseModel):
    name: str
    path: str
    content: str
    frontmatter: Dict[str, Any] = Field(default_factory=dict)


class AdaptRequest(BaseModel):
    platform: str
    rules: List[RulePayload]
    project_root: str = "."
    home_dir: str = "~"
    project_name: Optional[str] = None
    signature: SignaturePayload = Field(default_factory=SignaturePayload)
    platform_config: Dict[str, Any] = Field(default_factory=dict)


class ArtifactItem(BaseModel):
    path: str
    content: str
    type: str
    scope: str
    character_count: int
    truncated: bool
    priority: Optional[float] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class AdaptResponse(BaseModel):
    platform: str
    artifacts: List[ArtifactItem]
    generated: int
    skipped: int
    truncated: int
    reason: Optional[str] = None


class DetectionPayload(BaseModel):
    platform_id: str
    confidence: str
    indicator_files: List[str] = Field(default_factory=list)
    indicators: List[str] = Field(default_factory=list)


class DisambiguateRequest(BaseModel):
    detected: List[DetectionPayload]
    explicit_override: Optional[str] = None


class DisambiguateResponse(BaseModel):
    platform_id: Optional[str] = None
    ambiguous: bool
    reason: str


class HealthResponse(BaseModel):
    status: str


def create_app(
    adapter_factory: Callable[[], RuleAdapter] = RuleAdapter,
    scorer_factory: Callable[[], RelevanceScorer] = RelevanceScorer,
) -> FastAPI:
    """Create the FastAPI application; every request works on in-memory payloads."""

    app = FastAPI(title="RuleForge Service", version="1.0.0")

    async def get_adapter() -> RuleAdapter:
        return adapter_factory()

    async def get_scorer() -> RelevanceScorer:
        return scorer_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/score", response_model=ScoreResponse)
    async def score(
        payload: ScoreRequest,
        scorer: RelevanceScorer = Depends(get_scorer),
    ) -> ScoreResponse:
        signature = extract_signature(payload.signature.to_analysis())
        candidates = [
            CandidateDocument(
                name=item.name,
                path=item.path,
                content_type=ContentType.parse(item.content_type),
                category=item.category,
            )
            for item in payload.candidates
        ]
        scored = await _in_executor(lambda: scorer.score_all(candidates, signature))
        selector = TemplateSelector()
        present = []
        for candidate in candidates:
            if candidate.content_type not in present:
                present.append(candidate.content_type)
        selected = {
            content_type.value: selector.select(scored, content_type).paths for content_type in present
        }
        return ScoreResponse(
            scored=[
                ScoredItem(
                    name=item.name,
                    path=item.path,
                    content_type=item.candidate.content_type.value,
                    relevance_score=item.relevance_score,
                    excluded=item.excluded,
                    reasons=list(item.reasons),
                )
                for item in scored
            ],
            selected=selected,
        )

    @app.post("/adapt", response_model=AdaptResponse)
    async def adapt(
        payload: AdaptRequest,
        adapter: RuleAdapter = Depends(get_adapter),
    ) -> AdaptResponse:
        context = AdaptContext(
            project_root=Path(payload.project_root),
            home_dir=Path(payload.home_dir),
            signature=extract_signature(payload.signature.to_analysis()),
            project_name=payload.project_name,
        )
        rules = [
            StandardizedRule(
                name=item.name,
                path=item.path,
                content=item.content,
                frontmatter=dict(item.frontmatter),
            )
            for item in payload.rules
        ]
        result = await _in_executor(
            lambda: adapter.adapt(rules, payload.platform, context, payload.platform_config)
        )
        return AdaptResponse(
            platform=result.platform_id,
            artifacts=[
                ArtifactItem(
                    path=artifact.path.as_posix(),
                    content=artifact.content,
                    type=artifact.type,
                    scope=artifact.scope.value,
                    character_count=artifact.character_count,
                    truncated=artifact.truncated,
                    priority=artifact.priority,
                    metadata=dict(artifact.metadata),
                )
                for artifact in result.artifacts
            ],
            generated=result.summary.generated,
            skipped=result.summary.skipped,
            truncated=result.summary.truncated,
            reason=result.summary.reason,
        )

    @app.post("/disambiguate", response_model=DisambiguateResponse)
    async def choose_platform(payload: DisambiguateRequest) -> DisambiguateResponse:
        detected = []
        for item in payload.detected:
            try:
                confidence = Confidence(item.confidence.lower())
            except ValueError as exc:
                raise RuntimeError(f"Unknown confidence '{item.confidence}'") from exc
            detected.append(
                DetectedIntegration(
                    platform_id=item.platform_id,
                    confidence=confidence,
                    indicator_files=tuple(item.indicator_files),
                    indicators=tuple(item.indicators),
                )
            )
        choice = disambiguate(detected, payload.explicit_override)
        return DisambiguateResponse(
            platform_id=choice.platform_id, ambiguous=choice.ambiguous, reason=choice.reason
        )

    @app.exception_handler(UnknownPlatformError)
    async def unknown_platform_handler(
        _: Any, exc: UnknownPlatformError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(_: Any, exc: RuntimeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


async def _in_executor(func: Callable[[], Any]) -> Any:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func)


def run_service(host: str = "0.0.0.0", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["create_app", "run_service"]
