# cli.py
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click

from wireflow import __version__
from wireflow.core.engine import Engine, RequestBuilderExecutor
from wireflow.core.errors import exception_to_error
from wireflow.core.exceptions import OutputNotFoundError, WireflowException
from wireflow.core.project import Project, discover_project, init_project, new_workflow
from wireflow.ui.console import Console, get_console, set_console


def _project(ctx: click.Context) -> Project:
    start = ctx.obj.get("project_dir")
    return discover_project(Path(start) if start else None)


def _fail(exc: WireflowException) -> None:
    get_console().print_payload(exception_to_error(exc))
    sys.exit(1)


def collect_overrides(**flags: Any) -> Dict[str, Any]:
    """
    Map CLI flags to config keys, dropping flags that were not given.

    Multi-value flags (`--system`, `--depends-on`, `--input-file`,
    `--context-file`) are dropped when empty so they pass through to lower
    tiers.
    """
    overrides: Dict[str, Any] = {}
    for key, value in flags.items():
        if value is None:
            continue
        if isinstance(value, tuple):
            if not value:
                continue
            value = list(value)
        overrides[key] = value
    return overrides


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show error details and debug events)",
)
@click.option(
    "--project",
    "project_dir",
    default=None,
    type=click.Path(file_okay=False),
    help="Start project discovery here instead of the current directory",
)
@click.version_option(__version__, prog_name="wireflow")
@click.pass_context
def cli(ctx, debug, project_dir):
    """WireFlow — reproducible AI workflows with cascading configuration."""
    console = Console(debug=debug)
    set_console(console)
    logging.basicConfig(level=logging.DEBUG if debug else logging.ERROR, format="%(name)s: %(message)s")
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["project_dir"] = project_dir


@cli.command()
@click.argument("path", default=".", type=click.Path(file_okay=False))
def init(path):
    """Initialize a WireFlow project in PATH."""
    project = init_project(Path(path))
    get_console().print_info(f"Initialized WireFlow project: {project.root}")


@cli.command()
@click.argument("name")
@click.option("--task", default="", help="Initial task text")
@click.pass_context
def new(ctx, name, task):
    """Create a new workflow NAME."""
    try:
        project = _project(ctx)
        wf_dir = new_workflow(project, name, task)
    except WireflowException as e:
        _fail(e)
    get_console().print_info(f"Created workflow '{name}': {wf_dir}")


@cli.command()
@click.argument("name")
@click.option("--no-auto-deps", is_flag=True, default=False, help="Fail instead of executing stale dependencies")
@click.option("--force", is_flag=True, default=False, help="Re-execute the target even if fresh")
@click.option("--force-all", is_flag=True, default=False, help="Re-execute every workflow in the graph")
@click.option("--dry-run", is_flag=True, default=False, help="Only build request.json for stale workflows; record nothing")
@click.option("--model", default=None, help="Explicit model (overrides profile)")
@click.option("--profile", type=click.Choice(["fast", "balanced", "deep"]), default=None)
@click.option("--temperature", type=float, default=None)
@click.option("--max-tokens", type=int, default=None)
@click.option("--format", "output_format", default=None, help="Output file extension")
@click.option("--system", "system_prompts", multiple=True, help="System prompt name (repeatable)")
@click.option("--depends-on", multiple=True, help="Dependency workflow (repeatable)")
@click.option("--input-file", "input_files", multiple=True, help="Input file (repeatable)")
@click.option("--input-pattern", default=None, help="Input glob pattern(s), space separated")
@click.option("--context-file", "context_files", multiple=True, help="Context file (repeatable)")
@click.option("--context-pattern", default=None, help="Context glob pattern(s), space separated")
@click.option("--export-file", default=None, help="Copy the output to this path (relative to the project root)")
@click.option("--enable-citations/--disable-citations", default=None)
@click.option("--enable-thinking/--disable-thinking", default=None)
@click.option("--thinking-budget", type=int, default=None)
@click.option("--effort", type=click.Choice(["low", "medium", "high"]), default=None)
@click.option(
    "--prompts-dir",
    envvar="WIREFLOW_PROMPT_PREFIX",
    default=None,
    type=click.Path(file_okay=False),
    help="Directory with <name>.txt system prompts",
)
@click.pass_context
def run(ctx, name, no_auto_deps, force, force_all, dry_run, prompts_dir, **flags):
    """Run workflow NAME, executing stale dependencies first.

    Without a model backend (`transport` in the click context object) only
    `--dry-run` succeeds: requests are built and nothing is recorded.
    """
    console = get_console()
    overrides = collect_overrides(**flags)

    try:
        project = _project(ctx)
    except WireflowException as e:
        _fail(e)

    engine = Engine(
        project,
        executor=RequestBuilderExecutor(
            transport=ctx.obj.get("transport"),
            prompts_dir=Path(prompts_dir) if prompts_dir else None,
            dry_run=dry_run,
        ),
        on_event=console.print_event,
    )
    result = engine.run(
        name,
        auto_deps=not no_auto_deps,
        force=force,
        force_all=force_all,
        cli_overrides=overrides,
    )

    if not result.ok:
        console.print_payload(result.error)
        sys.exit(result.exit_code)

    console.print_results(result.execution.executed, result.execution.skipped, result.execution.dry_run)


@cli.command(name="list")
@click.pass_context
def list_workflows(ctx):
    """List workflows with their status: pending, fresh or stale."""
    try:
        project = _project(ctx)
    except WireflowException as e:
        _fail(e)

    engine = Engine(project)
    console = get_console()
    console.print_header(f"Workflows in {project.root}")
    console.print_statuses((s.workflow, s.label) for s in engine.status())


@cli.command()
@click.argument("name", required=False)
@click.pass_context
def config(ctx, name: Optional[str]):
    """Show effective configuration (of workflow NAME, or the project)."""
    console = get_console()
    try:
        project = _project(ctx)
        view = Engine(project).show_config(name)
    except WireflowException as e:
        _fail(e)

    console.print_header(f"Configuration: {name or 'project'}")
    console.print_config(view.rows(), effective_model=view.effective_model)
    for src in view.sources:
        for w in src.warnings:
            console.print_warning(w)


@cli.command(name="cat")
@click.argument("name")
@click.pass_context
def cat_output(ctx, name):
    """Print the published output of workflow NAME."""
    try:
        project = _project(ctx)
        output = project.published_output(name)
        if output is None:
            raise OutputNotFoundError(
                message=f"No output found for '{name}'",
                details={"workflow": name, "output_dir": str(project.output_dir)},
                hint=f"Execute o workflow antes: wireflow run {name}",
            )
    except WireflowException as e:
        _fail(e)

    click.echo(output.read_text(encoding="utf-8"), nl=False)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
