"""
changelog-kit — FastAPI service

Endpoints:
  POST /v1/detect    — Changelog text → dialect name
  POST /v1/import    — Changelog text → canonical documents + warnings
  POST /v1/validate  — Documents → validation report
  POST /v1/merge     — Changelog files → one merged document
  GET  /health       — Health check
"""

import time
import uuid
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from changelog_kit.core.config import settings
from changelog_kit.dialects.detect import detect_format
from changelog_kit.errors import ChangelogKitError
from changelog_kit.models.changelog import ChangelogDocument
from changelog_kit.models.results import ImportFormat, ImportOptions, MergeOptions, MergeSource
from changelog_kit.pipeline.importer import import_text
from changelog_kit.pipeline.merge import default_merge_options, merge
from changelog_kit.pipeline.validate import validate
from changelog_kit.utils.logging import logger

SERVICE_VERSION = "1.0.0"

app = FastAPI(
    title="changelog-kit API",
    description=(
        "Normalise Keep a Changelog, Conventional Changelog, plain Markdown "
        "and JSON changelogs into one document model, and merge them."
    ),
    version=SERVICE_VERSION,
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def _startup_banner():
    merge_defaults = settings.merge
    logger.info("")
    logger.info("╔══════════════════════════════════════════════════╗")
    logger.info("║          changelog-kit  ·  API Server v1         ║")
    logger.info("╠══════════════════════════════════════════════════╣")
    logger.info("║  POST /v1/detect    → Text → dialect             ║")
    logger.info("║  POST /v1/import    → Text → documents           ║")
    logger.info("║  POST /v1/validate  → Documents → report         ║")
    logger.info("║  POST /v1/merge     → Files → merged document    ║")
    logger.info("║  GET  /health       → Health check               ║")
    logger.info("╠══════════════════════════════════════════════════╣")
    logger.info("║  Listen      : %-34s║", f"{settings.host}:{settings.port}")
    logger.info("║  Merge       : %-34s║", f"{merge_defaults.strategy}, dedup={merge_defaults.deduplicate_key}")
    logger.info("║  Max source  : %-34s║", f"{settings.max_source_bytes} bytes")
    logger.info("╚══════════════════════════════════════════════════╝")
    logger.info("")


def _default_import_options() -> ImportOptions:
    return ImportOptions(version_prefix=settings.version_prefix)


# ──────────────────────────────────────────────────────────
# Request models
# ──────────────────────────────────────────────────────────

class DetectRequest(BaseModel):
    text: str = Field(..., description="Raw changelog text")


class ImportRequest(BaseModel):
    text: str = Field(..., description="Raw changelog text")
    format: ImportFormat = Field(default="auto", description="Dialect, or 'auto' to detect")
    options: ImportOptions = Field(default_factory=_default_import_options)
    validate_result: bool = Field(default=True, description="Attach a validation report")


class ValidateRequest(BaseModel):
    documents: list[ChangelogDocument] = Field(..., description="Canonical documents (camelCase)")


class MergeRequest(BaseModel):
    sources: list[MergeSource] = Field(..., min_length=1, description="Changelog files, in precedence order")
    options: MergeOptions | None = Field(default=None, description="Defaults come from the environment")


# ──────────────────────────────────────────────────────────
# Endpoints
# ──────────────────────────────────────────────────────────

@app.get("/health")
async def health():
    return {"status": "ok", "service": "changelog-kit", "version": SERVICE_VERSION}


@app.post("/v1/detect")
async def detect(req: DetectRequest):
    return {"format": detect_format(req.text)}


@app.post("/v1/import")
async def import_changelog(req: ImportRequest) -> dict[str, Any]:
    """
    Parse changelog text into canonical documents.

    An import that finds no version entries still returns 200 with
    ``success: false``; the warnings explain why.
    """
    request_id = uuid.uuid4().hex[:12]
    logger.info("[%s] POST /v1/import — %d chars, format=%s", request_id, len(req.text), req.format)

    result = import_text(req.text, req.format, req.options)
    body: dict[str, Any] = {
        "success": result.success,
        "format": result.format,
        "entries": [doc.to_wire() for doc in result.entries],
        "errors": [issue.model_dump(exclude_none=True) for issue in result.errors],
        "warnings": result.warnings,
    }
    if req.validate_result:
        body["validation"] = validate(result).model_dump()
    return body


@app.post("/v1/validate")
async def validate_documents(req: ValidateRequest):
    return validate(req.documents).model_dump()


@app.post("/v1/merge")
async def merge_changelogs(req: MergeRequest):
    """Merge changelog files; any unreadable source fails the whole request."""
    request_id = uuid.uuid4().hex[:12]
    start = time.perf_counter()
    options = req.options or default_merge_options()
    logger.info(
        "[%s] POST /v1/merge — %d sources, strategy=%s dedup=%s/%s",
        request_id, len(req.sources), options.strategy,
        options.deduplicate, options.deduplicate_key,
    )

    try:
        merged = await merge(req.sources, options)
    except ChangelogKitError as exc:
        logger.warning("[%s] changelog-kit error: %s", request_id, exc.code)
        raise HTTPException(status_code=422, detail=exc.to_dict())
    except Exception as exc:
        logger.exception("[%s] Merge failed", request_id)
        raise HTTPException(status_code=500, detail=str(exc))

    logger.info(
        "[%s] Complete — %d commits in %.0f ms",
        request_id, len(merged.commits), (time.perf_counter() - start) * 1000,
    )
    return merged.to_wire()
