"""FastAPI entrypoint for health/ingest/ask/platform/trace endpoints."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from grounded_qa.agent.fallback import ExtractiveGenerator, PassthroughVerifier, StaticRouter
from grounded_qa.agent.generator import AnswerGenerator
from grounded_qa.agent.orchestrator import MasterPipeline
from grounded_qa.agent.router import AgentRouter
from grounded_qa.agent.verifier import FactCheckVerifier
from grounded_qa.config import (
    ChunkingConfig,
    PipelineConfig,
    RetrievalConfig,
    Settings,
    get_settings,
)
from grounded_qa.errors import ConfigError
from grounded_qa.ingest.chunker import SlidingWindowChunker
from grounded_qa.ingest.embedder import Embedder, HashingEmbedder, OpenAIEmbedder
from grounded_qa.ingest.parser import ParserRegistry
from grounded_qa.ingest.pipeline import IngestPipeline
from grounded_qa.llm import create_openai_chat_service
from grounded_qa.memory import InMemoryMemoryStore, MemoryStore
from grounded_qa.obs.tracing import TraceStore
from grounded_qa.platform.kakao import KakaoSkillAdapter
from grounded_qa.retrieval.retriever import HybridRetriever
from grounded_qa.retrieval.store import DocumentStore, InMemoryDocumentStore

logger = logging.getLogger(__name__)

# Headroom for multipart boundaries and the namespace/title form fields.
FORM_OVERHEAD_BYTES = 64 * 1024


class AskRequest(BaseModel):
    question: str | None = None
    userId: str | None = None


@dataclass(slots=True)
class Components:
    """Wired collaborators shared by all requests of one app instance."""

    pipeline: MasterPipeline
    ingest_pipeline: IngestPipeline
    trace_store: TraceStore
    mode: str


def build_components(
    settings: Settings,
    *,
    store: DocumentStore | None = None,
    memory: MemoryStore | None = None,
    embedder: Embedder | None = None,
    chat: Any | None = None,
    pipeline_config: PipelineConfig | None = None,
) -> Components:
    """Wire the pipeline; without an API key or chat service, run offline."""

    store = store if store is not None else InMemoryDocumentStore()
    memory = memory if memory is not None else InMemoryMemoryStore()
    config = pipeline_config or PipelineConfig()

    if chat is None and settings.llm_configured:
        chat = create_openai_chat_service(settings.openai_model, settings.openai_api_key or "")
    if embedder is None:
        embedder = (
            OpenAIEmbedder(settings.embedding_model, api_key=settings.openai_api_key)
            if settings.llm_configured
            else HashingEmbedder()
        )

    if chat is not None:
        mode = "llm"
        router: Any = AgentRouter(chat, temperature=config.router_temperature)
        generator: Any = AnswerGenerator(
            chat, temperature=config.answer_temperature, language=config.response_language
        )
        verifier: Any = FactCheckVerifier(
            chat, temperature=config.verify_temperature, language=config.response_language
        )
    else:
        mode = "deterministic"
        router = StaticRouter()
        generator = ExtractiveGenerator()
        verifier = PassthroughVerifier()

    trace_store = TraceStore()
    pipeline = MasterPipeline(
        router=router,
        generator=generator,
        verifier=verifier,
        retriever=HybridRetriever(store, embedder, RetrievalConfig()),
        memory=memory,
        config=config,
        trace_store=trace_store,
    )
    ingest_pipeline = IngestPipeline(
        ParserRegistry(),
        SlidingWindowChunker(ChunkingConfig()),
        embedder,
        store,
    )
    return Components(
        pipeline=pipeline,
        ingest_pipeline=ingest_pipeline,
        trace_store=trace_store,
        mode=mode,
    )


def create_app(
    settings: Settings | None = None,
    components: Components | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    components = components or build_components(settings)
    kakao = KakaoSkillAdapter(
        components.pipeline, max_message_chars=settings.platform_max_message_chars
    )
    max_upload_bytes = settings.max_upload_mb * 1024 * 1024

    app = FastAPI(title=settings.system_name, version="0.1.0")

    @app.exception_handler(ConfigError)
    async def _config_error(request: Request, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": exc.message, "status": 400})

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": _validation_message(exc), "status": 400},
        )

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail), "status": exc.status_code},
        )

    @app.middleware("http")
    async def _limit_upload_size(request: Request, call_next):
        if request.url.path == "/ingest" and request.method == "POST":
            length = request.headers.get("content-length", "")
            if length.isdigit() and int(length) > max_upload_bytes + FORM_OVERHEAD_BYTES:
                return _upload_too_large(settings.max_upload_mb)
        return await call_next(request)

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"ok": True, "name": settings.system_name, "mode": components.mode}

    @app.post("/ingest")
    async def ingest(
        namespace: str | None = Form(default=None),
        title: str | None = Form(default=None),
        file: UploadFile | None = File(default=None),
    ) -> dict[str, Any]:
        if not namespace or file is None:
            raise ConfigError("namespace and file required")
        raw = await _read_limited(file, max_upload_bytes)
        if raw is None:
            raise HTTPException(
                status_code=413,
                detail=f"file exceeds {settings.max_upload_mb} MB upload limit",
            )
        try:
            count = await components.ingest_pipeline.ingest(
                namespace, raw, title=title, filename=file.filename or ""
            )
        except ConfigError:
            raise
        except Exception as exc:
            logger.exception("Ingest into %s failed", namespace)
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return {"ok": True, "chunks": count}

    @app.post("/ask")
    async def ask(request: AskRequest) -> dict[str, Any]:
        try:
            result = await components.pipeline.ask(
                request.question or "", request.userId or "anon"
            )
        except ConfigError:
            raise
        except Exception as exc:
            logger.exception("Ask failed")
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return {"answer": result.text}

    @app.post("/kakao/skill")
    async def kakao_skill(request: Request) -> dict[str, Any]:
        try:
            payload = await request.json()
        except ValueError:
            payload = None
        return await kakao.handle(payload)

    @app.get("/traces")
    def traces(limit: int = 20) -> dict[str, Any]:
        records = [asdict(record) for record in components.trace_store.list_recent(limit=limit)]
        return {"items": records}

    @app.get("/traces/{trace_id}")
    def trace_detail(trace_id: str) -> dict[str, Any]:
        try:
            record = components.trace_store.get(trace_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return asdict(record)

    @app.get("/metrics")
    def metrics() -> dict[str, Any]:
        return components.trace_store.summary()

    return app


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "invalid request"


def _upload_too_large(limit_mb: int) -> JSONResponse:
    return JSONResponse(
        status_code=413,
        content={"error": f"file exceeds {limit_mb} MB upload limit", "status": 413},
    )


async def _read_limited(file: UploadFile, limit: int) -> bytes | None:
    """Read an upload in 1 MB blocks; None once it grows past `limit` bytes."""
    buffer = bytearray()
    while True:
        block = await file.read(1024 * 1024)
        if not block:
            break
        buffer.extend(block)
        if len(buffer) > limit:
            return None
    return bytes(buffer)


app = create_app()


def serve() -> None:
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)


if __name__ == "__main__":
    serve()
