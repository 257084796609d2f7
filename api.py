import asyncio
from contextlib import asynccontextmanager
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel, Field

from voicerag.application.rag_service import RAGService, build_rag_service
from voicerag.application.search_tool import SEARCH_DOCUMENTS_TOOL, format_response_with_sources
from voicerag.config import Settings, get_settings
from voicerag.domain.models import RawDocument
from voicerag.infrastructure.asset_source import DirectorySource
from voicerag.infrastructure.logging_setup import configure_logging
from voicerag.infrastructure.text_extractor import is_supported

MEDIA_TYPES = {
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".doc": "application/msword",
}


# ── API Models ───────────────────────────────────────────────────────────────
class SearchRequest(BaseModel):
    query: str
    top_k: Optional[int] = Field(default=None, description="Defaults to the configured top_k")


class DocumentSchema(BaseModel):
    file_name: str
    file_type: str
    chunk_count: int
    content_preview: str
    processed_at: str


class UploadResponse(BaseModel):
    message: str
    accepted: List[str]
    rejected: List[str]
    stats: dict


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[RAGService] = None,
    assets_source: Optional[DirectorySource] = None,
) -> FastAPI:
    """
    Build the HTTP surface around one RAGService.

    The same assets folder is served as /assets-manifest + /assets/{name} and
    used as the service's document source, so the server never has to call
    itself during startup.
    """
    settings = settings or get_settings()
    assets_source = assets_source or DirectorySource(settings.assets_directory)
    service = service or build_rag_service(settings, source=assets_source)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Warm the index in the background; early searches await the same run.
        warmup = asyncio.ensure_future(service.initialize())
        yield
        await warmup

    app = FastAPI(
        title="Voice RAG Document API",
        description="Keyword retrieval over user-supplied documents for a voice assistant.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.rag_service = service

    # ── CORS Middleware ──────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Endpoints ────────────────────────────────────────────────────────────
    @app.get("/")
    def read_root():
        stats = service.get_stats()
        return {
            "message": "Voice RAG document API is running.",
            "status": "ready" if service.is_ready() else "no_documents",
            "chunks_indexed": stats.total_chunks,
        }

    @app.get("/status")
    def get_status():
        """Readiness of the retrieval engine and indexing statistics."""
        return {
            "is_initialized": service.is_initialized,
            "is_ready": service.is_ready(),
            "stats": service.get_stats().to_dict(),
        }

    @app.get("/documents", response_model=List[DocumentSchema])
    def get_documents():
        """Indexed documents with their chunk counts and previews."""
        return [
            DocumentSchema(
                file_name=record.file_name,
                file_type=record.file_type.value,
                chunk_count=record.chunk_count,
                content_preview=record.content_preview,
                processed_at=record.processed_at.isoformat(),
            )
            for record in service.engine.registry.list_documents()
        ]

    @app.get("/tools/search_documents")
    def get_search_tool():
        """Tool definition to register with the realtime conversation client."""
        return SEARCH_DOCUMENTS_TOOL

    @app.post("/search")
    async def search(request: SearchRequest):
        """Tool-invocation boundary: the status field carries the outcome."""
        top_k = request.top_k if request.top_k is not None else settings.default_top_k
        outcome = await service.search_documents(request.query, top_k)
        return outcome.to_payload()

    @app.post("/answer")
    async def answer(request: SearchRequest):
        """Plain-text answer with numbered citations, for callers without tool support."""
        top_k = request.top_k if request.top_k is not None else settings.default_top_k
        try:
            results = await service.search(request.query, top_k)
        except ValueError as error:
            raise HTTPException(status_code=422, detail=str(error))
        return format_response_with_sources(results)

    @app.post("/upload", response_model=UploadResponse)
    async def upload_files(files: List[UploadFile] = File(...)):
        """Ingest uploaded documents directly, bypassing discovery."""
        raw_documents = []
        accepted, rejected = [], []
        for file in files:
            name = file.filename or ""
            if not is_supported(name):
                rejected.append(name)
                continue
            raw_documents.append(RawDocument(file_name=name, content=await file.read()))
            accepted.append(name)

        stats = await service.ingest_uploads(raw_documents)
        return UploadResponse(
            message=f"Processed {len(accepted)} of {len(files)} uploaded files.",
            accepted=accepted,
            rejected=rejected,
            stats=stats.to_dict(),
        )

    @app.post("/reindex")
    async def trigger_reindex():
        """Clear the index and ingest the assets folder again."""
        stats = await service.reinitialize()
        return {"message": "Re-indexing complete.", "stats": stats.to_dict()}

    @app.get("/assets-manifest")
    def get_assets_manifest():
        """JSON array of the files available for ingestion."""
        try:
            return assets_source.list_files()
        except OSError:
            return JSONResponse(status_code=500, content={"error": "Failed to read assets directory"})

    @app.get("/assets/{filename}")
    def get_asset(filename: str):
        """Serve a file from the assets folder."""
        file_path = assets_source.resolve(filename)
        if file_path is None:
            raise HTTPException(status_code=404, detail="File not found")

        return FileResponse(
            path=file_path,
            media_type=MEDIA_TYPES.get(file_path.suffix.lower(), "application/octet-stream"),
            filename=filename,
        )

    return app


if __name__ == "__main__":
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.api_host, port=settings.api_port)
