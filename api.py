"""scanlens FastAPI backend — edge detection for the image viewer."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from scanlens.edges.canny import detect_edges
from scanlens.errors import ComputationError, InvalidInputError, PixelAccessError
from scanlens.hysteresis.link import ThresholdPolicy, thresholds_from_config
from scanlens.jobs.runner import EdgeJobRunner, JobStatus
from scanlens.types import EdgeDetectionResult
from scanlens.utils import decode_raster, encode_png_base64, load_config, setup_logger

logger = setup_logger("api")

app = FastAPI(title="scanlens API", version="0.1.0")

# ---------------------------------------------------------------------------
# CORS: the viewer is served from a different origin during development
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Config and job runner
# ---------------------------------------------------------------------------

CONFIG = load_config()
DEFAULT_THRESHOLDS = thresholds_from_config(CONFIG)

_runner = EdgeJobRunner(thresholds=DEFAULT_THRESHOLDS)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class BoundingBoxModel(BaseModel):
    minX: int
    minY: int
    maxX: int
    maxY: int


class AnchorModel(BaseModel):
    id: str
    x: float
    y: float
    colorTag: str
    label: str
    description: str


class EdgeResponse(BaseModel):
    width: int
    height: int
    edge_pixels: int
    bounding_box: Optional[BoundingBoxModel] = None
    anchors: list[AnchorModel] = []
    thresholds: dict[str, Any]
    mask_png: Optional[str] = None      # base64 PNG, 0 = not-edge, 255 = edge


class JobResponse(BaseModel):
    job_id: str
    generation: int
    status: str
    error: Optional[str] = None
    result: Optional[EdgeResponse] = None


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

@app.exception_handler(InvalidInputError)
@app.exception_handler(PixelAccessError)
async def _unprocessable(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc), "error": type(exc).__name__})


@app.exception_handler(ComputationError)
async def _computation_failed(request: Request, exc: ComputationError) -> JSONResponse:
    logger.error(f"Computation failed: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc), "error": "ComputationError"})


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _policy(name: str | None) -> ThresholdPolicy:
    if not name:
        return DEFAULT_THRESHOLDS
    try:
        return thresholds_from_config({"thresholds": {**CONFIG["thresholds"], "policy": name}})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _to_response(result: EdgeDetectionResult, thresholds: ThresholdPolicy, include_mask: bool) -> EdgeResponse:
    payload = result.to_dict()
    return EdgeResponse(
        **payload,
        thresholds=thresholds.to_dict(),
        mask_png=encode_png_base64(result.mask.copy()) if include_mask else None,
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "generation": _runner.current_generation}


@app.post("/api/edges", response_model=EdgeResponse)
async def edges(
    file: UploadFile = File(...),
    policy: Optional[str] = None,
    include_mask: bool = True,
) -> EdgeResponse:
    """Decode an uploaded image and run the pipeline on a worker thread."""
    thresholds = _policy(policy)
    raster = decode_raster(await file.read())
    result = await asyncio.to_thread(detect_edges, raster, thresholds=thresholds)
    logger.info(f"{file.filename}: {result.edge_count} edge px, {len(result.anchors)} anchors")
    return _to_response(result, thresholds, include_mask)


@app.post("/api/jobs", response_model=JobResponse)
async def submit_job(file: UploadFile = File(...)) -> JobResponse:
    """Start a background job; older pending jobs become stale."""
    raster = decode_raster(await file.read())
    job = _runner.submit(raster)
    return JobResponse(**job.to_dict())


@app.get("/api/jobs/{job_id}", response_model=JobResponse)
async def job_status(job_id: str, include_mask: bool = False) -> JobResponse:
    try:
        job = _runner.get(job_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found")

    response = JobResponse(**job.to_dict())
    if job.status == JobStatus.COMPLETE and job.result is not None:
        response.result = _to_response(job.result, _runner.thresholds or DEFAULT_THRESHOLDS, include_mask)
    return response


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api:app", host="0.0.0.0", port=8000, reload=True)
