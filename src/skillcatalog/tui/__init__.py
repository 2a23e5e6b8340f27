"""Public API for the skillcatalog rendering package."""

from .renderer import (
    render_catalog,
    render_marketplace,
    render_plugin,
    render_rejections,
    render_skill,
)

__all__ = [
    "render_catalog",
    "render_marketplace",
    "render_plugin",
    "render_rejections",
    "render_skill",
]
