from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.filesystem.scene_repository import FileSystemSceneRepository
from adapters.svg.renderer import SvgArrowRenderer
from app.config import load_settings
from domain.models import SceneDocument
from domain.services.compute_scene_arrows import ComputeSceneArrows

app = typer.Typer(no_args_is_help=True)
console = Console()


def _build_computer(config: Path | None) -> ComputeSceneArrows:
    settings = load_settings(config)
    return ComputeSceneArrows(
        base_style=settings.render.to_arrow_style(),
        container_id=settings.render.container_id,
    )


def _load_scene(scene_path: Path) -> SceneDocument:
    if not scene_path.exists():
        console.print(f"[red]File not found:[/] {scene_path}")
        raise typer.Exit(code=1)
    try:
        return FileSystemSceneRepository().load(scene_path)
    except ValueError as exc:
        console.print(f"[red]Validation failed:[/] {exc}")
        raise typer.Exit(code=1) from exc


@app.command("render")
def render(
    scene_path: Path = typer.Argument(..., help="Scene JSON with elements and relations."),
    output: Path | None = typer.Option(None, "--output", "-o", help="SVG file to write."),
    config: Path | None = typer.Option(None, help="YAML settings file."),
) -> None:
    scene = _load_scene(scene_path)
    arrows = _build_computer(config).compute(scene)
    renderer = SvgArrowRenderer()
    if output is None:
        typer.echo(renderer.render(arrows, scene.width, scene.height))
        return
    renderer.save(arrows, scene.width, scene.height, output)
    console.print(f"[green]Wrote[/] {output} ({len(arrows)} arrows)")


@app.command("paths")
def paths(
    scene_path: Path = typer.Argument(..., help="Scene JSON with elements and relations."),
    config: Path | None = typer.Option(None, help="YAML settings file."),
) -> None:
    scene = _load_scene(scene_path)
    arrows = _build_computer(config).compute(scene)
    if not arrows:
        console.print(f"[yellow]No arrows in {scene_path}[/]")
        raise typer.Exit(code=0)

    table = Table(title=str(scene_path))
    table.add_column("source")
    table.add_column("target")
    table.add_column("style")
    table.add_column("d", overflow="fold")
    for arrow in arrows:
        table.add_row(arrow.source_id, arrow.target_id, arrow.path.line_style, arrow.path.d)
    console.print(table)


@app.command("validate")
def validate(scene_path: Path = typer.Argument(..., help="Scene file to validate.")) -> None:
    scene = _load_scene(scene_path)
    relation_count = sum(len(element.relations) for element in scene.elements)
    console.print(
        f"[green]Valid scene[/] ({len(scene.elements)} elements, {relation_count} relations): "
        f"{scene_path}"
    )


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(8080, help="Port to listen on."),
    config: Path | None = typer.Option(None, help="YAML settings file."),
) -> None:
    import uvicorn

    from app.web_main import create_app

    settings = load_settings(config)
    console.print(f"[green]Serving[/] {settings.render.title} on http://{host}:{port}")
    uvicorn.run(create_app(settings), host=host, port=port)


if __name__ == "__main__":
    app()
