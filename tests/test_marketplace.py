"""Tests for the marketplace index: parsing, local sources, discovery, reconciliation."""

import json

import pytest

from skillcatalog.core.config import Config
from skillcatalog.plugins import CatalogError, RejectionKind, load_catalog, load_marketplace, reconcile
from skillcatalog.plugins.marketplace import find_marketplace_json, parse_marketplace_json


def _write_index(root, data, rel=".claude-plugin/marketplace.json"):
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data) if isinstance(data, dict) else data)
    return path


def _write_plugin(plugin_dir, name, version="1.0"):
    (plugin_dir / ".claude-plugin").mkdir(parents=True)
    (plugin_dir / ".claude-plugin" / "plugin.json").write_text(
        json.dumps({"name": name, "version": version, "author": "aa89227"})
    )


INDEX = {
    "name": "aa-skills",
    "owner": {"name": "aa89227"},
    "metadata": {"description": "Coding guidance skills"},
    "plugins": [
        {"name": "git-operations", "source": "./plugins/git-operations", "version": "1.0"},
        {"name": "csharp", "source": "./plugins/csharp", "description": "C# conventions"},
        {"name": "remote", "source": {"source": "github", "repo": "acme/remote"}},
        {"source": "./nameless"},
        "not-a-dict",
    ],
}


class TestParseMarketplace:
    def test_fields(self, tmp_path):
        m = parse_marketplace_json(_write_index(tmp_path, INDEX))
        assert m.name == "aa-skills"
        assert m.owner == "aa89227"
        assert m.description == "Coding guidance skills"
        assert [p.name for p in m.plugins] == ["git-operations", "csharp", "remote"]
        assert m.get("csharp").description == "C# conventions"
        assert m.get("nope") is None

    def test_local_flag(self, tmp_path):
        m = parse_marketplace_json(_write_index(tmp_path, INDEX))
        assert m.get("git-operations").is_local
        assert not m.get("remote").is_local

    def test_missing_name(self, tmp_path):
        with pytest.raises(CatalogError, match="'name'"):
            parse_marketplace_json(_write_index(tmp_path, {"plugins": []}))

    def test_invalid_json(self, tmp_path):
        with pytest.raises(CatalogError):
            parse_marketplace_json(_write_index(tmp_path, "{oops"))

    def test_plugins_must_be_a_list(self, tmp_path):
        with pytest.raises(CatalogError, match="must be a list"):
            parse_marketplace_json(_write_index(tmp_path, {"name": "m", "plugins": {"p": {}}}))

    def test_wrong_typed_entry_fields(self, tmp_path):
        m = parse_marketplace_json(
            _write_index(
                tmp_path,
                {
                    "name": "m",
                    "plugins": [
                        {"name": ["x"], "source": "./x"},
                        {"name": 7},
                        {
                            "name": "p",
                            "source": 3,
                            "description": ["d"],
                            "version": None,
                            "keywords": ["git", 1],
                            "category": {},
                        },
                    ],
                },
            )
        )
        [entry] = m.plugins
        assert entry.name == "p"
        assert entry.source == ""
        assert entry.description == ""
        assert entry.version == ""
        assert entry.keywords == ("git",)
        assert entry.category == ""
        assert not entry.is_local


class TestFindMarketplace:
    def test_prefers_claude_plugin_dir(self, tmp_path):
        a = _write_index(tmp_path, INDEX)
        _write_index(tmp_path, INDEX, rel="marketplace.json")
        assert find_marketplace_json(tmp_path) == a

    def test_root_fallback(self, tmp_path):
        b = _write_index(tmp_path, INDEX, rel="marketplace.json")
        assert find_marketplace_json(tmp_path) == b

    def test_none(self, tmp_path):
        assert find_marketplace_json(tmp_path) is None
        assert load_marketplace(tmp_path) is None


class TestLocalSources:
    def test_existing_dirs_inside_root(self, tmp_path):
        (tmp_path / "plugins" / "git-operations").mkdir(parents=True)
        m = parse_marketplace_json(_write_index(tmp_path, INDEX))
        assert m.local_sources(tmp_path) == [tmp_path / "plugins" / "git-operations"]

    def test_escaping_sources_dropped(self, tmp_path):
        root = tmp_path / "root"
        root.mkdir()
        (tmp_path / "outside").mkdir()
        m = parse_marketplace_json(
            _write_index(root, {"name": "m", "plugins": [{"name": "x", "source": "./../outside"}]})
        )
        assert m.local_sources(root) == []


class TestDiscoveryThroughIndex:
    def test_nested_sources_are_loaded(self, tmp_path):
        _write_plugin(tmp_path / "plugins" / "git-operations", "git-operations")
        _write_plugin(tmp_path / "plugins" / "csharp", "csharp")
        _write_index(tmp_path, INDEX)
        result = load_catalog(tmp_path)
        assert result.catalog.plugin_names == ["csharp", "git-operations"]
        assert result.ok

    def test_index_can_be_disabled(self, tmp_path):
        _write_plugin(tmp_path / "plugins" / "csharp", "csharp")
        _write_index(tmp_path, INDEX)
        config = Config(root=tmp_path, use_marketplace=False)
        assert load_catalog(tmp_path, config).catalog.plugin_names == []

    def test_source_that_is_also_a_subdir_loaded_once(self, tmp_path):
        _write_plugin(tmp_path / "csharp", "csharp")
        _write_index(tmp_path, {"name": "m", "plugins": [{"name": "csharp", "source": "./csharp"}]})
        result = load_catalog(tmp_path)
        assert result.catalog.plugin_names == ["csharp"]
        assert result.ok

    def test_broken_index_is_a_rejection_not_a_failure(self, tmp_path):
        _write_plugin(tmp_path / "p", "p")
        index = _write_index(tmp_path, "{oops")
        result = load_catalog(tmp_path)
        assert result.catalog.plugin_names == ["p"]
        [rej] = result.rejections
        assert rej.kind == RejectionKind.UNREADABLE_PATH
        assert rej.path == index

    def test_plugins_not_a_list_is_a_rejection(self, tmp_path):
        _write_plugin(tmp_path / "p", "p")
        index = _write_index(tmp_path, {"name": "m", "plugins": 5})
        result = load_catalog(tmp_path)
        assert result.catalog.plugin_names == ["p"]
        [rej] = result.rejections
        assert rej.kind == RejectionKind.UNREADABLE_PATH
        assert rej.path == index
        assert "must be a list" in rej.reason


class TestReconcile:
    def test_reports_differences(self, tmp_path):
        _write_plugin(tmp_path / "plugins" / "git-operations", "git-operations", version="1.1")
        _write_plugin(tmp_path / "extra", "extra")
        _write_index(tmp_path, INDEX)
        catalog = load_catalog(tmp_path).catalog
        problems = reconcile(load_marketplace(tmp_path), catalog)
        assert "version mismatch for git-operations: index says 1.0, manifest says 1.1" in problems
        assert "listed in aa-skills but not loaded: csharp" in problems
        assert "listed in aa-skills but not loaded: remote" in problems
        assert "loaded but not listed in aa-skills: extra" in problems
        assert len(problems) == 4

    def test_clean(self, tmp_path):
        _write_plugin(tmp_path / "p", "p")
        _write_index(tmp_path, {"name": "m", "plugins": [{"name": "p", "source": "./p"}]})
        assert reconcile(load_marketplace(tmp_path), load_catalog(tmp_path).catalog) == []

    def test_index_with_wrong_typed_entries(self, tmp_path):
        _write_plugin(tmp_path / "p", "p")
        _write_index(tmp_path, {"name": "m", "plugins": [{"name": ["x"], "source": 3}, {"name": "q", "source": 3}]})
        problems = reconcile(load_marketplace(tmp_path), load_catalog(tmp_path).catalog)
        assert problems == ["listed in m but not loaded: q", "loaded but not listed in m: p"]
