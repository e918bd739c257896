# src/ranchgrowth/io/export.py
from __future__ import annotations
import io
import json
import zipfile
from pathlib import Path
from typing import Optional, Dict, Any, Sequence

import numpy as np
import pandas as pd

from ranchgrowth.modeling.types import GrowthObservation, ModelingConfig, ModelingReport, ModelResult
from .html_report import render_report_html

PREDICTION_COLUMNS = ["time_point", "predicted_length", "confidence_lower", "confidence_upper"]


def predictions_to_frame(model: ModelResult) -> pd.DataFrame:
    """Flatten a model's forecast into time_point,predicted_length,confidence_lower,confidence_upper."""
    rows = [
        (p.time_point, p.predicted_length, p.confidence_interval[0], p.confidence_interval[1])
        for p in model.predictions
    ]
    return pd.DataFrame(rows, columns=PREDICTION_COLUMNS)


def export_predictions_csv(model: ModelResult, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    predictions_to_frame(model).to_csv(path, index=False)
    return path


def _json_safe(obj: Any) -> Any:
    # NaN/inf from degenerate fits become null so the output stays valid JSON
    if isinstance(obj, dict):
        return {k: _json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_json_safe(v) for v in obj]
    if isinstance(obj, (float, np.floating)):
        v = float(obj)
        return v if np.isfinite(v) else None
    return obj


def report_to_json(
    report: ModelingReport,
    species_name: Optional[str] = None,
    cfg: Optional[ModelingConfig] = None,
    indent: int = 2,
) -> str:
    payload = report.to_dict()
    if cfg is not None:
        payload["config"] = cfg.to_dict()
    if species_name is not None:
        payload = {"species_name": species_name, **payload}
    return json.dumps(_json_safe(payload), ensure_ascii=False, indent=indent)


def export_report_bundle(
    *,
    report: ModelingReport,
    observations: Sequence[GrowthObservation],
    species_name: str,
    out_dir: Path,
    zip_name: str = "growth_model_outputs.zip",
    cleanup: bool = False,
    cfg: Optional[ModelingConfig] = None,
) -> Dict[str, Any]:
    """
    Write the report outputs and a ZIP containing them.
    Files written:
      - predictions.csv (best model forecast)
      - report.json (with the modeling config when cfg is given)
      - report.html
      - <zip_name>
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    csv_path = export_predictions_csv(report.best_model, out_dir / "predictions.csv")
    json_path = out_dir / "report.json"
    json_path.write_text(report_to_json(report, species_name, cfg), encoding="utf-8")
    html_path = out_dir / "report.html"
    html_path.write_text(render_report_html(report, observations, species_name), encoding="utf-8")
    paths = [csv_path, json_path, html_path]

    bio = io.BytesIO()
    with zipfile.ZipFile(bio, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for p in paths:
            zf.write(p, arcname=p.name)
    zip_bytes = bio.getvalue()

    zip_path = out_dir / zip_name
    zip_path.write_bytes(zip_bytes)

    if cleanup:
        for p in paths:
            p.unlink(missing_ok=True)

    return {
        "zip_bytes": zip_bytes,
        "zip_path": zip_path,
        "files": [] if cleanup else paths,
    }
