from __future__ import annotations

from typing import Any, Dict, Optional

import altair as alt
import pandas as pd

from core.models import JobStatus

alt.data_transformers.disable_max_rows()

STATUS_COLORS = {
    JobStatus.PENDING.value: "#6b7280",
    JobStatus.IN_PROGRESS.value: "#2563eb",
    JobStatus.COMPLETED.value: "#16a34a",
    JobStatus.DELIVERED.value: "#9333ea",
    JobStatus.UNKNOWN.value: "#9ca3af",
}


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def jobs_by_status_chart(jobs: pd.DataFrame) -> Optional[alt.Chart]:
    if jobs.empty or "status" not in jobs.columns:
        return None
    counts = jobs.groupby("status").size().reset_index(name="jobs")
    counts["label"] = counts["status"].map(lambda s: JobStatus.parse(s).label)
    return (
        alt.Chart(counts)
        .mark_bar()
        .encode(
            x=alt.X("label:N", title="Status", sort=[s.label for s in JobStatus]),
            y=alt.Y("jobs:Q", title="Jobs", axis=alt.Axis(format="d")),
            color=alt.Color(
                "status:N",
                scale=alt.Scale(domain=list(STATUS_COLORS), range=list(STATUS_COLORS.values())),
                legend=None,
            ),
            tooltip=["label", alt.Tooltip("jobs:Q", title="Jobs")],
        )
    )
