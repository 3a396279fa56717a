"""Progress display for environment runs using the Rich library.

In interactive terminals a progress bar advances through the components
while each component's result line is printed above it. In
non-interactive terminals (CI, redirected output) the current component
is logged instead of drawing a bar. The final summary table is printed in
both cases.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Iterator, Optional, Sequence

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from prakasa_env.environment.models import ComponentResult, EnvironmentResult, InstallationStatus

if TYPE_CHECKING:
    from logging import Logger

ResultCallback = Callable[[ComponentResult], None]

STATUS_TAGS = {
    InstallationStatus.SUCCESS: ("[OK]", "green"),
    InstallationStatus.SKIPPED: ("[OK]", "green"),
    InstallationStatus.WARNING: ("[WARN]", "yellow"),
    InstallationStatus.FAILED: ("[FAIL]", "red"),
    InstallationStatus.IN_PROGRESS: ("[..]", "cyan"),
}


def is_interactive_terminal(console: Optional[Console] = None) -> bool:
    """Detect if running in an interactive terminal.

    Returns:
        True if output is to an interactive terminal, False otherwise.
    """
    console = console or Console()
    return console.is_terminal


def format_result_line(result: ComponentResult) -> Text:
    """One line per component, e.g. '[OK] OS Version: Windows 10.0.22631 (supported)'."""
    tag, style = STATUS_TAGS[result.status]
    line = Text.assemble((tag, f"bold {style}"), " ", (result.kind.display_name, "bold"))
    if result.message:
        line.append(f": {result.message}")
    if result.reboot_required:
        line.append(" (restart required)", style="yellow")
    return line


@contextmanager
def component_progress(
    component_names: Sequence[str],
    logger: Optional["Logger"] = None,
    console: Optional[Console] = None,
    enabled: bool = True,
    transient: bool = True,
) -> Iterator[ResultCallback]:
    """Context manager yielding the callback an orchestrator run reports to.

    Each call prints the component's result line and moves on to the next
    component name.

    Args:
        component_names: Display names in the order the results arrive.
        logger: Logger for the per-component status lines in non-interactive mode.
        console: Console to print to. Defaults to a new stdout console.
        enabled: If False, no progress bar is drawn even in a terminal.
        transient: If True, the bar is cleared when complete (default True).

    Yields:
        report(result) function to pass as the orchestrator callback.

    Example:
        >>> names = [c.name for c in orchestrator.components]
        >>> with component_progress(names, logger=logger) as report:
        ...     result = orchestrator.check_environment(report)
    """
    console = console or Console()
    total = len(component_names)
    current_idx = 0

    def next_name() -> Optional[str]:
        return component_names[current_idx] if current_idx < total else None

    if not enabled or not total or not is_interactive_terminal(console):
        if logger is not None and total:
            logger.status(f"Component 1/{total}: {component_names[0]}...")

        def report_plain(result: ComponentResult) -> None:
            nonlocal current_idx
            console.print(format_result_line(result))
            current_idx += 1
            name = next_name()
            if logger is not None and name is not None:
                logger.status(f"Component {current_idx + 1}/{total}: {name}...")

        yield report_plain
        return

    columns = [
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
    ]

    progress = Progress(*columns, console=console, transient=transient)
    task_id: TaskID = TaskID(0)

    try:
        progress.start()
        task_id = progress.add_task(component_names[0], total=total)

        def report_interactive(result: ComponentResult) -> None:
            nonlocal current_idx
            progress.console.print(format_result_line(result))
            current_idx += 1
            progress.update(task_id, advance=1, description=next_name() or "Done")

        yield report_interactive
    finally:
        progress.stop()


def render_summary(result: EnvironmentResult, console: Optional[Console] = None, title: str = "Environment") -> None:
    """Print a table of every component result followed by the overall message."""
    console = console or Console()

    table = Table(title=title, show_lines=False)
    table.add_column("Component", style="bold")
    table.add_column("Status")
    table.add_column("Code", justify="right")
    table.add_column("Message", overflow="fold")

    for component_result in result.component_results:
        _, style = STATUS_TAGS[component_result.status]
        table.add_row(
            component_result.kind.display_name,
            Text(component_result.status.value, style=style),
            "" if component_result.error_code is None else str(component_result.error_code),
            Text(component_result.message),
        )

    console.print(table)
    if result.reboot_required:
        overall_style = "bold yellow"
    elif result.has_failures:
        overall_style = "bold red"
    elif result.has_warnings:
        overall_style = "yellow"
    else:
        overall_style = "bold green"
    console.print(Text(result.overall_message, style=overall_style))


__all__ = [
    "is_interactive_terminal",
    "format_result_line",
    "component_progress",
    "render_summary",
    "STATUS_TAGS",
]
