"""CLI interface for spawner-skills using Typer."""

from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from spawnerskills.cli.server import server_command
from spawnerskills.core.catalog import SkillCatalog
from spawnerskills.core.exceptions import SkillError, SkillNotFoundError
from spawnerskills.core.skill_def import LoadReport, Severity
from spawnerskills.core.skill_parser import render_skill
from spawnerskills.utils.config import Config
from spawnerskills.utils.logging import setup_logging

app = typer.Typer(
    name="spawner-skills",
    help="Spawner Skills: load, search and route skill documents",
    no_args_is_help=True,
    add_completion=True,
)

console = Console()

SEVERITY_STYLES = {
    Severity.LOW: "green",
    Severity.MEDIUM: "yellow",
    Severity.HIGH: "red",
    Severity.CRITICAL: "bold red",
}


# Global config option callback
def load_config_callback(ctx: typer.Context, workspace: str):
    """Load configuration and store it in the context."""
    if ctx.resilient_parsing:
        return workspace

    try:
        cfg = Config.load(Path(workspace))
        setup_logging(cfg)
        ctx.ensure_object(dict)
        ctx.obj["config"] = cfg
    except (ValueError, yaml.YAMLError, OSError) as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        raise typer.Exit(1)
    return workspace


def _catalog(ctx: typer.Context) -> SkillCatalog:
    """Load the catalog once per invocation."""
    if "catalog" not in ctx.obj:
        try:
            ctx.obj["catalog"] = SkillCatalog.from_config(ctx.obj["config"])
        except SkillError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
    return ctx.obj["catalog"]


def _read_code(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        console.print(f"[red]Cannot read {path}: not valid UTF-8[/red]")
        raise typer.Exit(1)
    except OSError as e:
        console.print(f"[red]Cannot read {path}: {e}[/red]")
        raise typer.Exit(1)


def _print_report(report: LoadReport) -> None:
    for issue in report.issues:
        color = "red" if issue.level == "error" else "yellow"
        console.print(f"[{color}]{issue.level.upper()}[/{color}] {issue}")


@app.callback()
def main(
    ctx: typer.Context,
    workspace: str = typer.Option(
        ".",
        "--workspace",
        "-w",
        help="Path to workspace directory",
        callback=load_config_callback,
    ),
) -> None:
    """
    Spawner Skills: load, search and route skill documents.

    Configuration is loaded from config.user.yaml in the workspace.
    Use --workspace to specify a custom workspace directory.
    """
    # Config is loaded via callback, nothing to do here
    pass


@app.command("list")
def list_command(
    ctx: typer.Context,
    category: Annotated[
        str | None, typer.Option("--category", "-c", help="Only this category")
    ] = None,
) -> None:
    """List all available skills."""
    skills = _catalog(ctx).list_skills(category)

    table = Table(title=f"Available Skills: {len(skills)}")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Category")
    table.add_column("Summary")
    for skill in skills:
        table.add_row(skill.name, skill.category, skill.summary)
    console.print(table)


@app.command()
def show(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Skill name or keyword"),
    raw: bool = typer.Option(False, "--raw", help="Print markdown source"),
) -> None:
    """Show a skill document."""
    catalog = _catalog(ctx)
    try:
        skill = catalog.find_skill(name)
    except SkillNotFoundError:
        console.print(f"[red]Skill not found: {name}[/red]")
        console.print("\nAvailable skills:")
        for s in catalog.list_skills():
            console.print(f"  - {s.name}")
        raise typer.Exit(1)

    text = render_skill(skill)
    if raw:
        console.print(text, markup=False, highlight=False)
    else:
        console.print(Markdown(text))


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Words to search for"),
    category: Annotated[
        str | None, typer.Option("--category", "-c", help="Only this category")
    ] = None,
) -> None:
    """Search skills by name, title, summary, category or tags."""
    results = _catalog(ctx).search_skills(query, category)
    if not results:
        console.print(f"[yellow]No skills match '{query}'[/yellow]")
        return
    for skill in results:
        console.print(f"[bold cyan]{skill.name}[/bold cyan] ({skill.category})")
        if skill.summary:
            console.print(f"  {skill.summary}")


@app.command()
def route(
    ctx: typer.Context,
    task: str = typer.Argument(..., help="Task description"),
    from_skill: Annotated[
        str | None,
        typer.Option("--from", "-f", help="Only follow this skill's hand-offs"),
    ] = None,
    limit: Annotated[
        int | None, typer.Option("--limit", "-n", min=1, help="Maximum results")
    ] = None,
) -> None:
    """Select the skills that should handle a task."""
    config: Config = ctx.obj["config"]
    try:
        routes = _catalog(ctx).route_task(
            task,
            from_skill,
            limit=limit if limit is not None else config.routing.limit,
        )
    except SkillNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not routes:
        console.print("[yellow]No skill matched this task[/yellow]")
        return

    table = Table()
    table.add_column("#", justify="right")
    table.add_column("Skill", style="cyan")
    table.add_column("Keyword")
    table.add_column("From")
    table.add_column("Context")
    for index, match in enumerate(routes, start=1):
        table.add_row(
            str(index),
            match.skill.name,
            match.matched_keyword,
            match.source,
            match.context,
        )
    console.print(table)


@app.command()
def collaborators(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Skill name"),
) -> None:
    """Show who a skill works with."""
    try:
        info = _catalog(ctx).get_collaborators(name)
    except SkillNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    console.print(f"[bold cyan]{info.name}[/bold cyan]")
    for label, names in (
        ("Hands off to", info.handoff_targets),
        ("Receives work from", info.receives_from),
        ("Works well with", info.works_well_with),
        ("Upstream", info.upstream),
        ("Downstream", info.downstream),
        ("Hand-off chain", info.chain),
    ):
        console.print(f"  {label}: {', '.join(names) if names else '-'}")


@app.command("watch-out")
def watch_out(
    ctx: typer.Context,
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Code file"),
    skill: Annotated[
        str | None, typer.Option("--skill", "-s", help="Only this skill's edges")
    ] = None,
) -> None:
    """Scan a code file for documented sharp edges."""
    code = _read_code(path)
    try:
        hits = _catalog(ctx).watch_out(code, skill)
    except SkillNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not hits:
        console.print("[green]No sharp edges detected[/green]")
        return
    for hit in hits:
        style = SEVERITY_STYLES[hit.edge.severity]
        console.print(
            f"[{style}][{hit.edge.severity.name}][/{style}] "
            f"{hit.edge.title} [dim]({hit.skill})[/dim]"
        )
        if hit.edge.solution:
            console.print(f"  {hit.edge.solution}", markup=False)


@app.command()
def check(
    ctx: typer.Context,
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Code file"),
    skill: Annotated[
        str | None, typer.Option("--skill", "-s", help="Only this skill's rules")
    ] = None,
) -> None:
    """Run skill validation rules against a code file."""
    code = _read_code(path)
    try:
        hits = _catalog(ctx).validate_code(code, skill)
    except SkillNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if not hits:
        console.print("[green]No validation issues found[/green]")
        return
    for hit in hits:
        style = SEVERITY_STYLES[hit.rule.severity]
        console.print(
            f"[{style}][{hit.rule.severity.name}][/{style}] "
            f"{hit.rule.id} [dim]({hit.skill})[/dim]"
        )
        console.print(f"  {hit.rule.message}", markup=False)
        if hit.rule.fix_action:
            console.print(f"  Fix: {hit.rule.fix_action}", markup=False)


@app.command()
def validate(ctx: typer.Context) -> None:
    """Load every skill and report all problems at once."""
    report = _catalog(ctx).report
    _print_report(report)
    console.print(
        f"{report.loaded} skill(s) loaded, {len(report.errors)} error(s), "
        f"{len(report.warnings)} warning(s)"
    )
    if not report.ok:
        raise typer.Exit(1)


@app.command("serve")
def serve(
    ctx: typer.Context,
    host: Annotated[str | None, typer.Option("--host", help="Bind host")] = None,
    port: Annotated[int | None, typer.Option("--port", help="Bind port")] = None,
) -> None:
    """Start the read-only HTTP API."""
    server_command(ctx, host=host, port=port)


if __name__ == "__main__":
    app()
