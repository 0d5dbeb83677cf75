# service_api/main.py

from typing import Any, Dict, List

from fastapi import Body, FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from water_potability.config import PotabilityConfig, config_from_env
from water_potability.models import (
    DatasetUpload,
    EmptyDatasetError,
    ManualEntry,
    ParseError,
    ResultPayload,
    ValidationError,
)
from water_potability.runner import run_validation
from water_potability.scoring import available_scorers
from water_potability.tabular_io import accept_file, default_dataset, export_filename, to_csv

app = FastAPI()


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _build_config() -> PotabilityConfig:
    """Build config from environment variables; latency only applies to interactive sessions."""
    cfg = config_from_env()
    cfg.latency_seconds = 0.0
    return cfg


def _outcome_response(outcome) -> JSONResponse:
    if isinstance(outcome, ResultPayload):
        return JSONResponse(content=outcome.to_dict())
    if isinstance(outcome, ValidationError):
        raise HTTPException(
            status_code=422,
            detail={"message": outcome.message, "violations": outcome.to_records()},
        )
    if isinstance(outcome, EmptyDatasetError):
        raise HTTPException(status_code=400, detail=outcome.message)
    raise HTTPException(status_code=500, detail=f"Unexpected outcome: {type(outcome).__name__}")


@app.get("/")
def root():
    return {"service": "water-potability-api", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/config")
def show_config():
    cfg = _build_config()
    return {
        "scorer": cfg.scorer_name,
        "available_scorers": available_scorers(),
        "csv_parser": cfg.csv_parser,
        "good_min_score": cfg.good_min_score,
        "moderate_min_score": cfg.moderate_min_score,
    }


@app.get("/demo_dataset")
def demo_dataset():
    return default_dataset()


@app.post("/validate")
def validate_form(fields: Dict[str, Any] = Body(...)):
    cfg = _build_config()
    return _outcome_response(run_validation(ManualEntry(fields), cfg))


@app.post("/validate_file")
async def validate_file(file: UploadFile = File(...)):
    if not file.filename:
        raise HTTPException(status_code=400, detail="Missing filename")

    cfg = _build_config()
    try:
        content = await file.read()
    finally:
        await file.close()

    parsed = accept_file(content, file.filename, cfg)
    if isinstance(parsed, ParseError):
        raise HTTPException(status_code=400, detail=parsed.message)

    return _outcome_response(run_validation(DatasetUpload(parsed, file.filename), cfg))


@app.post("/validate_demo")
def validate_demo():
    cfg = _build_config()
    return _outcome_response(run_validation(DatasetUpload(default_dataset(), "default"), cfg))


@app.post("/export_csv")
def export_csv(records: List[Dict[str, Any]] = Body(...), label: str = "water_quality_data"):
    filename = export_filename(label)
    return Response(
        content=to_csv(records),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
