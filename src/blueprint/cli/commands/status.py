"""Status command rendered with rich."""

from __future__ import annotations

import argparse

from rich.console import Console
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from blueprint.cli.context import open_session_or_error
from blueprint.models.journey import STATE_ORDER, JourneyState
from blueprint.models.validation import deliverables_gaps
from blueprint.orchestration import IdeationStep
from blueprint.session import WorkflowSession

SEGMENT_STYLES = {
    "journey": "cyan",
    "deliver": "magenta",
    "complete": "green",
}


def _state_line(session: WorkflowSession, state: JourneyState) -> Text:
    machine = session.machine
    if state is machine.state:
        return Text(f"> {state.value}", style="bold")
    if state in machine.skipped:
        return Text(f"  {state.value} (skipped)", style="dim")
    if STATE_ORDER.index(state) <= STATE_ORDER.index(machine.furthest_state):
        return Text(f"  {state.value}", style="green")
    return Text(f"  {state.value}", style="dim")


def render_status(session: WorkflowSession, console: Console) -> None:
    machine = session.machine
    progress = machine.progress()
    context = machine.get_stage_context()
    style = SEGMENT_STYLES[progress.segment]

    console.print(Text(session.project_id, style="bold"))
    header = Text()
    header.append(f"{context.title}", style=f"bold {style}")
    header.append(f"  step {progress.current} of {progress.total}")
    header.append(f"  {progress.percentage}%")
    if machine.edit_mode:
        header.append("  [editing]", style="yellow")
    console.print(header)
    console.print(ProgressBar(total=100, completed=progress.percentage, width=40))

    stage = session.flow_stage
    if isinstance(stage, IdeationStep):
        console.print(Text(f"Capturing: {stage.value}", style="yellow"))

    table = Table(show_header=True, header_style="bold")
    table.add_column("Captured")
    table.add_column("Count", justify="right")
    data = machine.data
    rows = (
        ("Phases", len(data.phases)),
        ("Activities", len(data.activities)),
        ("Resources", len(data.resources)),
        ("Milestones", len(data.deliverables.milestones)),
        ("Rubric criteria", len(data.deliverables.rubric.criteria)),
        ("Reflections", len(data.reflections)),
    )
    for label, count in rows:
        table.add_row(label, str(count))
    console.print(table)

    for state in STATE_ORDER:
        console.print(_state_line(session, state))

    console.print()
    console.print(context.description)
    for tip in context.tips:
        console.print(f"  - {tip}")

    if machine.policy.strict:
        for gap in deliverables_gaps(data, machine.policy, machine.skipped):
            console.print(Text(f"Missing: {gap}", style="red"))


def cmd_status(args: argparse.Namespace) -> int:
    """Show the stage, progress and captured data for a project."""
    session = open_session_or_error(args)
    if session is None:
        return 1
    render_status(session, Console(highlight=False))
    return 0
