"""
Status Renderer

Architectural Intent:
- Turns project records into the lines shown in the status message
- Pure functions over already-snapshotted values; the caller holds the
  Deployment lock while these run
- Colors follow Slack attachment conventions (hex strings)
"""

from __future__ import annotations
from datetime import datetime, timedelta
from typing import Iterable, Union

from deploy_notifier.domain.entities.project import Project, Stage
from deploy_notifier.domain.value_objects.status_report import StatusLine, StatusReport

FAILED_COLOR = "#ff4500"

STAGE_COLORS = {
    Stage.NOT_DEPLOYING: "#aaa",
    Stage.BUILDING: "#ffa500",
    Stage.DEPLOYING: "#ffa500",
    Stage.SUCCEEDED: "#0b0",
}


def format_duration(duration: Union[timedelta, float]) -> str:
    """Format a duration as MM:SS. Sub-second parts are truncated."""
    if isinstance(duration, timedelta):
        duration = duration.total_seconds()
    seconds = max(int(duration), 0)
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def project_color(project: Project) -> str:
    if project.failed:
        return FAILED_COLOR
    return STAGE_COLORS.get(project.stage, "")


def project_text(project: Project, now: datetime) -> str:
    status = ""
    if project.stage is Stage.NOT_DEPLOYING:
        status = " is not deploying (no changes)"
    elif project.stage in (Stage.BUILDING, Stage.DEPLOYING):
        elapsed = format_duration(now - project.start_time)
        status = f" {project.stage.value} ({elapsed})"
    elif project.stage is Stage.SUCCEEDED:
        took = format_duration(project.end_time - project.start_time)
        status = f" succeeded (took {took})"

    if project.failed:
        return f"{project.display_name} FAILED{status}"
    return project.display_name + status


def summary_line(
    projects: list[Project], started_at: datetime, now: datetime
) -> StatusLine:
    took = format_duration(now - started_at)
    summary_id = max((p.id for p in projects), default=-1) + 1
    if all(p.is_successful for p in projects):
        return StatusLine(
            color=STAGE_COLORS[Stage.SUCCEEDED],
            text=f"Succeeded (took {took})",
            id=summary_id,
        )
    return StatusLine(color=FAILED_COLOR, text=f"Failed (took {took})", id=summary_id)


def render_status(
    projects: Iterable[Project],
    done: bool,
    started_at: datetime,
    now: datetime,
    header: str = "",
) -> StatusReport:
    """Render projects in id order, plus a summary line once the deployment is done.

    Returns an empty report when there are no projects yet.
    """
    ordered = sorted(projects, key=lambda p: p.id)
    if not ordered:
        return StatusReport(text=header)

    lines = [
        StatusLine(color=project_color(p), text=project_text(p, now), id=p.id)
        for p in ordered
    ]
    if done:
        lines.append(summary_line(ordered, started_at, now))

    return StatusReport(
        text=header,
        lines=tuple(lines),
        project_count=len(ordered),
        failed_count=sum(1 for p in ordered if p.failed),
    )


def build_header(
    header: str = "", tenant: str = "", run_id: str = "", repo_url: str = ""
) -> str:
    """Header text for the status message.

    An explicit header wins. Otherwise one is built from the run information,
    linking to the pipeline run when both repo URL and run id are known.
    """
    if header:
        return header

    title = f"Deploying {tenant}" if tenant else "Deploying"
    if repo_url and run_id:
        run_url = f"{repo_url.rstrip('/')}/actions/runs/{run_id}"
        return f"{title} (<{run_url}|run {run_id}>)"
    if run_id:
        return f"{title} (run {run_id})"
    return title
