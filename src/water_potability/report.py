# src/water_potability/report.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pandas as pd
from openpyxl import load_workbook
from openpyxl.styles import PatternFill

from .config import PotabilityConfig
from .models import CriterionStatus, Dataset, ResultPayload, ScoreResult
from .scoring import Band


log = logging.getLogger(__name__)


RED_FILL = PatternFill(start_color="FFFF0000", end_color="FFFF0000", fill_type="solid")
YELLOW_FILL = PatternFill(start_color="FFFFFF00", end_color="FFFFFF00", fill_type="solid")

CRITERIA_COLS = ["field", "value", "status", "points", "max_points", "optimal_band", "acceptable_band"]

CRITERIA_SHEET = "Criteria"


def criteria_frame(result: ScoreResult, cfg: Optional[PotabilityConfig] = None) -> pd.DataFrame:
    """One row per parameter: value, band status and points earned."""
    cfg = cfg or PotabilityConfig()
    if not result.criteria:
        return pd.DataFrame(columns=CRITERIA_COLS)

    rows = []
    for c in result.criteria:
        optimal = cfg.optimal_bands.get(c.field_name)
        acceptable = cfg.acceptable_bands.get(c.field_name)
        rows.append({
            "field": c.field_name,
            "value": c.value,
            "status": c.status.value,
            "points": c.points,
            "max_points": c.max_points,
            "optimal_band": Band.from_spec(optimal).describe() if optimal else "",
            "acceptable_band": Band.from_spec(acceptable).describe() if acceptable else "",
        })
    return pd.DataFrame(rows, columns=CRITERIA_COLS)


def dataset_frame(records: Optional[Dataset]) -> pd.DataFrame:
    """Dataset as a table for display; column order follows first appearance."""
    if not records:
        return pd.DataFrame()
    return pd.DataFrame.from_records(records).fillna("")


def result_frame(payload: ResultPayload) -> pd.DataFrame:
    rows = [
        {"item": "prediction", "value": payload.category.value},
        {"item": "score", "value": payload.score},
        {"item": "mode", "value": payload.mode},
    ]
    if payload.table_data is not None:
        rows.append({"item": "rows", "value": len(payload.table_data)})
        rows.append({"item": "classified_row", "value": 1})
    return pd.DataFrame(rows)


def apply_status_highlights(output_xlsx_path: str | Path, criteria_df: pd.DataFrame) -> None:
    """Fill the status cell of out-of-band criteria red, acceptable-band ones yellow."""
    if criteria_df is None or len(criteria_df) == 0:
        return

    wb = load_workbook(output_xlsx_path)
    if CRITERIA_SHEET not in wb.sheetnames:
        return
    ws = wb[CRITERIA_SHEET]

    status_col = CRITERIA_COLS.index("status") + 1
    for offset, status in enumerate(criteria_df["status"].tolist()):
        # row 1 is the header
        cell = ws.cell(row=offset + 2, column=status_col)
        if status == CriterionStatus.OUTSIDE.value:
            cell.fill = RED_FILL
        elif status == CriterionStatus.ACCEPTABLE.value:
            cell.fill = YELLOW_FILL

    wb.save(output_xlsx_path)


def write_excel_report(
    output_path: str | Path,
    payload: ResultPayload,
    result: ScoreResult,
    cfg: Optional[PotabilityConfig] = None,
) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    criteria_df = criteria_frame(result, cfg)

    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        result_frame(payload).to_excel(writer, sheet_name="Result", index=False)
        criteria_df.to_excel(writer, sheet_name=CRITERIA_SHEET, index=False)
        if payload.table_data is not None:
            dataset_frame(payload.table_data).to_excel(writer, sheet_name="Dataset", index=False)
        elif payload.form_data is not None:
            pd.DataFrame([payload.form_data]).to_excel(writer, sheet_name="Input", index=False)

    apply_status_highlights(output_path, criteria_df)
    log.info("Report saved to %s", output_path)
    return output_path
