"""Rich-based rendering of catalogs, plugins, skills and rejections."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.table import Table

from skillcatalog.core.utils import short_path, truncate

if TYPE_CHECKING:
    from skillcatalog.core.errors import Rejection
    from skillcatalog.plugins.marketplace import Marketplace
    from skillcatalog.plugins.models import Catalog, Plugin, Skill

console = Console()


def _tags(skill: Skill) -> str:
    return ", ".join(sorted(skill.tags))


def render_catalog(catalog: Catalog, out: Console | None = None) -> None:
    out = out or console
    if not len(catalog):
        out.print("no plugins found", style="dim")
        return
    table = Table(box=None, pad_edge=False, header_style="bold")
    table.add_column("plugin")
    table.add_column("version")
    table.add_column("author")
    table.add_column("skills", justify="right")
    for plugin in catalog:
        table.add_row(plugin.name, plugin.version, plugin.author, str(len(plugin.skills)))
    out.print(table)


def render_plugin(plugin: Plugin, out: Console | None = None) -> None:
    out = out or console
    out.print(f"[bold]{plugin.name}[/bold]  v{plugin.version}  [dim]by {plugin.author}[/dim]")
    if plugin.description:
        out.print(f"  {plugin.description}", style="dim")
    if plugin.root:
        out.print(f"  {short_path(plugin.root)}", style="dim")
    if not plugin.skills:
        out.print("  no skills", style="dim")
        return
    out.print()
    for skill in plugin.skills:
        tags = f"  [cyan]{_tags(skill)}[/cyan]" if skill.tags else ""
        out.print(f"  [bold]{skill.name}[/bold]{tags}")
        out.print(f"    {skill.description}", style="dim")


def render_skill(plugin: Plugin, skill: Skill, out: Console | None = None, full: bool = False) -> None:
    out = out or console
    out.print(f"[bold]{plugin.name}:{skill.name}[/bold]")
    out.print(f"  {skill.description}")
    out.print(f"  license  {skill.license}", style="dim")
    out.print(f"  author   {skill.metadata.author}", style="dim")
    out.print(f"  version  {skill.metadata.version}", style="dim")
    if skill.tags:
        out.print(f"  tags     [cyan]{_tags(skill)}[/cyan]")
    if skill.references:
        refs = ", ".join(r.name for r in skill.references)
        out.print(f"  refs     {refs}", style="dim")
    if skill.body.strip():
        out.print()
        out.print(Markdown(skill.body if full else truncate(skill.body)))


def render_rejections(rejections: Sequence[Rejection], out: Console | None = None) -> None:
    out = out or console
    if not rejections:
        return
    out.print()
    out.print(f"[yellow]{len(rejections)} rejected entr{'y' if len(rejections) == 1 else 'ies'}[/yellow]")
    for r in rejections:
        out.print(f"  [yellow]{r.kind.value}[/yellow]  {escape(short_path(r.path))}  [dim]{escape(r.reason)}[/dim]")


def render_marketplace(marketplace: Marketplace, problems: list[str], out: Console | None = None) -> None:
    out = out or console
    owner = f"  [dim]by {marketplace.owner}[/dim]" if marketplace.owner else ""
    out.print(f"[bold]{marketplace.name}[/bold]{owner}")
    if marketplace.description:
        out.print(f"  {marketplace.description}", style="dim")
    for entry in marketplace.plugins:
        ver = f"v{entry.version}" if entry.version else ""
        source = entry.source if isinstance(entry.source, str) else entry.source.get("source", "")
        out.print(f"  [bold]{entry.name}[/bold]  {ver}  [dim]{source}[/dim]")
    if problems:
        out.print()
        for p in problems:
            out.print(f"  [yellow]warning:[/yellow] {escape(p)}")
    else:
        out.print()
        out.print("[green]index matches catalog[/green]")
