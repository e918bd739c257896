# src/ranchgrowth/io/html_report.py
from __future__ import annotations
from datetime import datetime
from html import escape
from typing import Optional, Sequence

from ranchgrowth.modeling.types import GrowthObservation, ModelingReport

_STYLE = """
    body { font-family: Arial, sans-serif; margin: 20px; }
    .header { text-align: center; margin-bottom: 30px; }
    .section { margin-bottom: 25px; }
    .model-result { background: #f5f5f5; padding: 15px; margin: 10px 0; border-radius: 5px; }
    .best-model { background: #e8f5e9; border-left: 4px solid #4caf50; }
    .data-quality { background: #fff3e0; padding: 15px; border-radius: 5px; }
    .recommendations { background: #e3f2fd; padding: 15px; border-radius: 5px; }
    table { width: 100%; border-collapse: collapse; margin: 10px 0; }
    th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
    th { background-color: #f2f2f2; }
"""


def render_report_html(
    report: ModelingReport,
    observations: Sequence[GrowthObservation],
    species_name: str,
    generated_at: Optional[datetime] = None,
    n_prediction_rows: int = 10,
) -> str:
    """Standalone HTML document for download."""
    ts = (generated_at or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
    title = f"{escape(species_name)} body length growth modeling report"
    q = report.data_quality

    model_blocks = []
    for m in report.models:
        is_best = m is report.best_model
        model_blocks.append(
            f'<div class="model-result{" best-model" if is_best else ""}">'
            f"<h3>{escape(m.name)}{' (best model)' if is_best else ''}</h3>"
            f"<p><strong>Equation:</strong> {escape(m.equation)}</p>"
            f"<p><strong>Goodness of fit (R²):</strong> {m.r_squared * 100:.1f}%</p>"
            f"<p><strong>Analysis:</strong> {escape(m.analysis)}</p>"
            "</div>"
        )

    pred_rows = []
    for p in report.best_model.predictions[:n_prediction_rows]:
        lo, hi = p.confidence_interval
        pred_rows.append(
            f"<tr><td>{p.time_point:g}</td><td>{p.predicted_length:.2f}</td>"
            f"<td>[{lo:.2f}, {hi:.2f}]</td></tr>"
        )

    obs_rows = "".join(
        f"<tr><td>{o.time_point:g}</td><td>{o.length:.2f}</td></tr>" for o in observations
    )
    recs = "".join(f"<p>&bull; {escape(r)}</p>" for r in report.recommendations) or "<p>None.</p>"

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <title>{title}</title>
  <style>{_STYLE}</style>
</head>
<body>
  <div class="header">
    <h1>{title}</h1>
    <p>Generated: {ts}</p>
  </div>

  <div class="section">
    <h2>Data overview</h2>
    <div class="data-quality">
      <p><strong>Sample size:</strong> {q.sample_size} data points</p>
      <p><strong>Time span:</strong> {q.time_span:.1f} days</p>
      <p><strong>Average growth rate:</strong> {q.growth_rate:.3f} cm/day</p>
      <p><strong>Coefficient of variation:</strong> {q.variability * 100:.1f}%</p>
    </div>
  </div>

  <div class="section">
    <h2>Model comparison</h2>
    {''.join(model_blocks)}
  </div>

  <div class="section">
    <h2>Predictions</h2>
    <table>
      <thead><tr><th>Time point (days)</th><th>Predicted length (cm)</th><th>Confidence interval (cm)</th></tr></thead>
      <tbody>{''.join(pred_rows)}</tbody>
    </table>
  </div>

  <div class="section">
    <h2>Observations</h2>
    <table>
      <thead><tr><th>Time point (days)</th><th>Length (cm)</th></tr></thead>
      <tbody>{obs_rows}</tbody>
    </table>
  </div>

  <div class="section">
    <h2>Recommendations</h2>
    <div class="recommendations">{recs}</div>
  </div>
</body>
</html>
"""
