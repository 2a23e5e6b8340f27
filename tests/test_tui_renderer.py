"""Tests for the Rich renderer: catalog table, plugin/skill detail, rejections, marketplace."""

import io
from pathlib import Path

from rich.console import Console

from skillcatalog.core.errors import Rejection, RejectionKind
from skillcatalog.plugins.marketplace import Marketplace, PluginEntry
from skillcatalog.plugins.models import Catalog, Plugin, Skill, SkillMetadata
from skillcatalog.tui import (
    render_catalog,
    render_marketplace,
    render_plugin,
    render_rejections,
    render_skill,
)


def _console():
    return Console(file=io.StringIO(), width=120, color_system=None)


def _text(console):
    return console.file.getvalue()


SKILL = Skill(
    name="git-commit-messages",
    description="Write conventional commit messages",
    license="MIT",
    metadata=SkillMetadata(author="aa89227", version="1.0", tags=frozenset({"git", "commit"})),
    body="Use the imperative mood.\n" + "x" * 5000,
)
PLUGIN = Plugin(name="git-operations", version="1.0", author="aa89227", skills=(SKILL,))


class TestRenderCatalog:
    def test_table(self):
        out = _console()
        render_catalog(Catalog.from_plugins([PLUGIN]), out=out)
        text = _text(out)
        assert "git-operations" in text
        assert "aa89227" in text

    def test_empty(self):
        out = _console()
        render_catalog(Catalog(), out=out)
        assert "no plugins found" in _text(out)


class TestRenderPlugin:
    def test_lists_skills_with_sorted_tags(self):
        out = _console()
        render_plugin(PLUGIN, out=out)
        text = _text(out)
        assert "git-commit-messages" in text
        assert "commit, git" in text

    def test_no_skills(self):
        out = _console()
        render_plugin(Plugin(name="bare", version="1", author="me"), out=out)
        assert "no skills" in _text(out)


class TestRenderSkill:
    def test_preview_is_truncated(self):
        out = _console()
        render_skill(PLUGIN, SKILL, out=out)
        text = _text(out)
        assert "git-operations:git-commit-messages" in text
        assert "MIT" in text
        assert "truncated" in text

    def test_full_body(self):
        out = _console()
        render_skill(PLUGIN, SKILL, out=out, full=True)
        assert "truncated" not in _text(out)


class TestRenderRejections:
    def test_nothing_for_no_rejections(self):
        out = _console()
        render_rejections([], out=out)
        assert _text(out) == ""

    def test_reason_with_brackets_is_not_markup(self):
        out = _console()
        r = Rejection(Path("p/plugin.json"), RejectionKind.UNREADABLE_PATH, "bad [bold] value")
        render_rejections([r], out=out)
        text = _text(out)
        assert "1 rejected entry" in text
        assert "UnreadablePath" in text
        assert "bad [bold] value" in text


class TestRenderMarketplace:
    def test_problems(self):
        out = _console()
        m = Marketplace(name="aa-skills", plugins=(PluginEntry(name="csharp", source="./csharp"),))
        render_marketplace(m, ["listed in aa-skills but not loaded: csharp"], out=out)
        text = _text(out)
        assert "aa-skills" in text
        assert "./csharp" in text
        assert "not loaded: csharp" in text

    def test_clean(self):
        out = _console()
        render_marketplace(Marketplace(name="m"), [], out=out)
        assert "index matches catalog" in _text(out)
