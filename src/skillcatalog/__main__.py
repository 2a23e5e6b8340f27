"""CLI entry point: load a skill-plugin catalog and print it with Rich."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from .core.config import Config, load_config
from .core.errors import CatalogError
from .plugins import load_catalog, load_marketplace, reconcile, validate_plugin
from .plugins.models import LoadResult
from .skills.loader import skill_context
from .tui import render_catalog, render_marketplace, render_plugin, render_rejections, render_skill

console = Console()
err_console = Console(stderr=True)


def _load(config: Config) -> LoadResult:
    try:
        return load_catalog(config.root, config, verbose=config.verbose)
    except CatalogError as e:
        err_console.print(f"error: {escape(str(e))}", style="bold")
        sys.exit(1)


def _finish(config: Config, result: LoadResult) -> None:
    """Report rejections; under --strict any rejection is a failure."""
    if not config.verbose:
        # verbose loads already printed each rejection as it happened
        render_rejections(result.rejections, out=err_console)
    if config.strict and not result.ok:
        sys.exit(1)


@click.group()
@click.option(
    "--root",
    "-r",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Catalog root directory (default: $SKILLCATALOG_ROOT or cwd)",
)
@click.option("--strict", is_flag=True, help="Exit non-zero if any entry is rejected")
@click.option("--verbose", "-v", is_flag=True, help="Print rejections as they happen")
@click.pass_context
def cli(ctx: click.Context, root: Path | None, strict: bool, verbose: bool):
    """skillcatalog: inspect skill-plugin catalogs."""
    try:
        ctx.obj = load_config(root=root, strict=True if strict else None, verbose=verbose)
    except CatalogError as e:
        err_console.print(f"error: {escape(str(e))}", style="bold")
        sys.exit(1)


@cli.command("list")
@click.pass_obj
def list_cmd(config: Config):
    """List plugins with their versions, authors and skill counts."""
    result = _load(config)
    render_catalog(result.catalog, out=console)
    _finish(config, result)


@cli.command()
@click.argument("plugin")
@click.argument("skill", required=False, default=None)
@click.option("--full", is_flag=True, help="Print the whole skill body")
@click.pass_obj
def show(config: Config, plugin: str, skill: str | None, full: bool):
    """Show one plugin, or one skill of a plugin."""
    result = _load(config)
    p = result.catalog.get(plugin)
    if p is None:
        err_console.print(f"plugin not found: {plugin}", style="bold")
        sys.exit(1)
    if skill is None:
        render_plugin(p, out=console)
    else:
        s = p.get_skill(skill)
        if s is None:
            err_console.print(f"skill not found: {plugin}:{skill}", style="bold")
            sys.exit(1)
        render_skill(p, s, out=console, full=full)
    _finish(config, result)


@cli.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.pass_obj
def validate(config: Config, path: Path):
    """Validate a single plugin directory."""
    errors = validate_plugin(path, config)
    if errors:
        for e in errors:
            console.print(f"  [red]error:[/red] {escape(e)}")
        sys.exit(1)
    console.print("[green]plugin is valid[/green]")


@cli.command()
@click.option("--indent", default=2, show_default=True, help="JSON indent")
@click.pass_obj
def export(config: Config, indent: int):
    """Print the catalog as JSON."""
    result = _load(config)
    data = result.catalog.to_dict()
    data["rejections"] = [
        {"path": str(r.path), "kind": r.kind.value, "reason": r.reason} for r in result.rejections
    ]
    click.echo(json.dumps(data, indent=indent))
    if config.strict and not result.ok:
        sys.exit(1)


@cli.command()
@click.pass_obj
def context(config: Config):
    """Print the skill index handed to an agent's prompt."""
    result = _load(config)
    click.echo("\n\n".join(skill_context(result.catalog)))
    _finish(config, result)


@cli.command()
@click.pass_obj
def marketplace(config: Config):
    """Show the marketplace index and compare it with the catalog."""
    result = _load(config)
    try:
        market = load_marketplace(config.root)
    except (CatalogError, OSError) as e:
        err_console.print(f"error: {escape(str(e))}", style="bold")
        sys.exit(1)
    if market is None:
        console.print(f"no marketplace.json in {config.root}", style="dim")
        _finish(config, result)
        return
    problems = reconcile(market, result.catalog)
    render_marketplace(market, problems, out=console)
    _finish(config, result)
    if config.strict and problems:
        sys.exit(1)


def main():
    cli()


if __name__ == "__main__":
    main()
