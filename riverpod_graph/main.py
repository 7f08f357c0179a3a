"""riverpod-graph CLI - Provider dependency graphs for Riverpod-style code."""
from pathlib import Path
from typing import Optional
import typer
from rich.table import Table
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    TaskProgressColumn,
    TimeElapsedColumn,
)
from rich.markup import escape

from riverpod_graph.utils.safe_console import SafeConsole
from riverpod_graph.config import Config, __version__
from riverpod_graph.analyzer.graph_builder import ProviderGraphBuilder
from riverpod_graph.analyzer.provider_graph import ProviderGraph
from riverpod_graph.analyzer.reference_resolver import UnsupportedExpressionError
from riverpod_graph.renderer.mermaid import MermaidRenderer

app = typer.Typer(
    name="riverpod-graph",
    help="Static provider dependency graphs for Riverpod-style code",
    add_completion=False
)
# Diagnostics go to stderr, the diagram to stdout
console = SafeConsole(stderr=True)


def _load_config(env_file: Optional[Path]) -> Config:
    try:
        return Config(env_file)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


def analyze_project(project_path: Path, config: Config, show_progress: bool = True) -> ProviderGraph:
    """Shared analysis logic for all commands.

    Exits with status 1 when a provider access cannot be resolved.
    """
    if not project_path.exists():
        console.print(f"[bold red]Error:[/bold red] Project path does not exist: {escape(str(project_path))}")
        raise typer.Exit(1)

    console.print(f"[bold blue]Analyzing[/bold blue] {escape(str(project_path))} ...")

    builder = ProviderGraphBuilder(project_path, config=config)

    try:
        if show_progress:
            with Progress(
                SpinnerColumn(),
                TextColumn("[bold blue]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                TimeElapsedColumn(),
                console=console,
                transient=True
            ) as progress:
                task = progress.add_task("[cyan]Indexing sources...", total=None)

                def on_file(unit):
                    # One step per file, total known once indexing is done
                    progress.update(task, total=len(builder.units()),
                                    description=f"[cyan]{escape(unit.module or unit.path.name)}")
                    progress.advance(task)

                builder.build_graph(on_file=on_file)
        else:
            builder.build_graph()
    except UnsupportedExpressionError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    return builder.graph


@app.command()
def graph(
    project_path: str = typer.Argument(".", help="Project root path to analyze"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the diagram to this file instead of stdout"),
    env_file: Optional[Path] = typer.Option(None, "--env-file", help="Load settings from this .env file"),
    no_progress: bool = typer.Option(False, "--no-progress", help="Disable the progress bar"),
):
    """Analyze a project and print its provider graph as a Mermaid flowchart."""
    config = _load_config(env_file)
    provider_graph = analyze_project(Path(project_path).resolve(), config, show_progress=not no_progress)

    diagram = MermaidRenderer(provider_graph).render()

    if output is not None:
        output.write_text(diagram, encoding='utf-8')
        console.print(f"[green]✓ Diagram written to {escape(str(output))}[/green]")
    else:
        typer.echo(diagram, nl=False)


@app.command()
def stats(
    project_path: str = typer.Argument(".", help="Project root path to analyze"),
    env_file: Optional[Path] = typer.Option(None, "--env-file", help="Load settings from this .env file"),
):
    """Display provider graph statistics and dependency cycles."""
    config = _load_config(env_file)
    provider_graph = analyze_project(Path(project_path).resolve(), config, show_progress=False)

    table = Table(title="Provider Graph", show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right", style="green")

    table.add_row("Providers", str(len(provider_graph.providers)))
    table.add_row("Consumer Widgets", str(len(provider_graph.consumer_widgets)))
    table.add_row("Dependencies", str(provider_graph.edge_count()))

    console.print(table)

    cycles = provider_graph.find_cycles()
    if cycles:
        console.print(f"\n[bold yellow]↻ {len(cycles)} dependency cycle(s):[/bold yellow]")
        for cycle in cycles:
            console.print(f"  {escape(' → '.join(cycle + cycle[:1]))}")
    else:
        console.print("\n[bold green]No dependency cycles found![/bold green]")


@app.command()
def version():
    """Print the riverpod-graph version."""
    typer.echo(__version__)


@app.callback()
def main():
    """riverpod-graph - Static provider dependency graphs for Riverpod-style code."""
    pass


if __name__ == "__main__":
    app()
