"""Write generated reports as JSON and plain-text artifacts."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from psicoapp.domain.models import ReportResult


def report_payload(report: ReportResult) -> dict[str, Any]:
    """Serializable view of a report; appointments are summarized by count."""
    return {
        "period": {
            "start": report.period.start.isoformat(),
            "end": report.period.end.isoformat(),
        },
        "appointment_count": len(report.appointments),
        "basic_kpis": asdict(report.basic_kpis) if report.basic_kpis else None,
        "revenue_by_price_type": (
            asdict(report.revenue_by_price_type) if report.revenue_by_price_type else None
        ),
        "patients": [asdict(aggregate) for aggregate in report.patients],
    }


def write_report_outputs(
    *,
    artifacts_dir: str | Path,
    report: ReportResult,
    text: str,
) -> tuple[Path, Path]:
    """Write JSON and text report files named after the report period."""
    out_dir = Path(artifacts_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    slug = f"{report.period.start.date().isoformat()}_{report.period.end.date().isoformat()}"
    json_path = out_dir / f"relatorio_{slug}.json"
    txt_path = out_dir / f"relatorio_{slug}.txt"

    json_path.write_text(
        json.dumps(report_payload(report), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    txt_path.write_text(text + "\n", encoding="utf-8")
    return json_path, txt_path
