"""Tests for @export / @use / @import resolution and the export loader."""

import os

import pytest

from tailnest.model import DiagnosticCollector, ExportBlock, Severity
from tailnest.parser import parse
from tailnest.resolver import (
    ExportLoader,
    ResolverState,
    clone_rule,
    resolve,
    resolve_with_dependencies,
)


def _no_files(path):
    return []


def _resolve(source: str, file_path: str = "/project/comp.vue", load_exports=_no_files):
    collector = DiagnosticCollector()
    result = parse(source, file_path, warn=collector)
    rules = resolve(result, file_path, load_exports, warn=collector)
    return rules, collector


@pytest.fixture
def state():
    return ResolverState()


# ---------------------------------------------------------------------------
# Local exports
# ---------------------------------------------------------------------------


class TestLocalUse:
    def test_use_inlines_classes(self):
        source = """
        @export btn {
          px-4 rounded
        }
        & {
          button {
            @use btn
          }
        }
        """
        rules, collector = _resolve(source)
        button = rules[0].children[0]
        assert button.classes == ["px-4", "rounded"]
        assert button.uses == []
        assert len(collector) == 0

    def test_use_appends_after_own_classes(self):
        source = "@export a {\n  x y\n}\n& {\n  first\n  @use a\n  last\n}"
        rules, _ = _resolve(source)
        assert rules[0].classes == ["first", "last", "x", "y"]

    def test_use_inlines_declarations_and_children(self):
        source = "@export card {\n  p-4\n  color: red;\n  > span {\n    italic\n  }\n}\n& {\n  @use card\n}"
        rules, _ = _resolve(source)
        rule = rules[0]
        assert rule.classes == ["p-4"]
        assert rule.declarations == ["color: red;"]
        assert [c.selector for c in rule.children] == ["> span"]

    def test_inlined_children_are_copies(self):
        source = "@export card {\n  > span { italic }\n}\ndiv {\n  @use card\n}\np {\n  @use card\n}"
        rules, _ = _resolve(source)
        first, second = rules[0].children[0], rules[1].children[0]
        assert first == second
        assert first is not second
        first.classes.append("mutated")
        assert second.classes == ["italic"]

    def test_exports_compose(self):
        source = "@export base {\n  rounded\n}\n@export btn {\n  @use base\n  px-4\n}\n& {\n  @use btn\n}"
        rules, collector = _resolve(source)
        assert rules[0].classes == ["px-4", "rounded"]
        assert len(collector) == 0

    def test_export_used_before_definition(self):
        source = "& {\n  @use late\n}\n@export late {\n  underline\n}"
        rules, _ = _resolve(source)
        assert rules[0].classes == ["underline"]

    def test_resolve_is_idempotent(self):
        source = "@export btn {\n  px-4\n}\n& {\n  @use btn\n  button { @use btn }\n}"
        collector = DiagnosticCollector()
        result = parse(source, warn=collector)
        first = resolve(result, "/project/comp.vue", _no_files, warn=collector)
        snapshot = [clone_rule(r) for r in first]
        second = resolve(result, "/project/comp.vue", _no_files, warn=collector)
        assert second == snapshot
        assert all(not r.uses for top in second for r in top.walk())


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


class TestResolutionDiagnostics:
    def test_unknown_use(self):
        rules, collector = _resolve("& {\n  flex\n  @use nope\n}")
        [diagnostic] = collector.by_rule("unknown-use")
        assert diagnostic.severity is Severity.ERROR
        assert diagnostic.message == (
            '@use: name "nope" is not defined. Did you forget an @export or @import?'
        )
        assert rules[0].classes == ["flex"]
        assert rules[0].uses == []

    def test_unknown_use_inside_export(self):
        _, collector = _resolve("@export a {\n  @use ghost\n}\n& { @use a }")
        [diagnostic] = collector.by_rule("unknown-use")
        assert diagnostic.message.startswith('@use in @export "a": name "ghost" is not defined.')

    def test_duplicate_export_last_wins(self):
        source = "@export btn {\n  old\n}\n@export btn {\n  new\n}\n& {\n  @use btn\n}"
        rules, collector = _resolve(source)
        [diagnostic] = collector.by_rule("duplicate-export")
        assert diagnostic.severity is Severity.WARNING
        assert diagnostic.message == 'Duplicate @export name "btn". The later definition will be used.'
        assert rules[0].classes == ["new"]

    def test_self_use_is_circular(self):
        rules, collector = _resolve("@export a {\n  x\n  @use a\n}\n& {\n  @use a\n}")
        assert len(collector.by_rule("circular-use")) >= 1
        assert rules[0].classes == ["x"]

    def test_mutual_cycle(self):
        source = "@export a {\n  ca\n  @use b\n}\n@export b {\n  cb\n  @use a\n}\n& {\n  @use a\n}"
        rules, collector = _resolve(source)
        assert len(collector.by_rule("circular-use")) >= 1
        assert set(rules[0].classes) == {"ca", "cb"}

    def test_long_cycle_terminates(self):
        size = 250
        parts = [
            f"@export e{i} {{\n  c{i}\n  @use e{(i + 1) % size}\n}}" for i in range(size)
        ]
        parts.append("& {\n  @use e0\n}")
        rules, collector = _resolve("\n".join(parts))
        assert len(collector.by_rule("circular-use")) >= 1
        assert len(rules[0].classes) == size

    def test_cycle_deeper_than_recursion_limit(self):
        size = 1200
        parts = [
            f"@export e{i} {{\n  c{i}\n  @use e{(i + 1) % size}\n}}" for i in range(size)
        ]
        parts.append("& {\n  @use e0\n}")
        rules, collector = _resolve("\n".join(parts))
        [diagnostic] = collector.by_rule("circular-use")
        assert '"e0"' in diagnostic.message
        assert rules[0].classes == [f"c{i}" for i in range(size)]
        assert rules[0].uses == []

    def test_long_chain_keeps_order(self):
        size = 250
        parts = [f"@export e{i} {{\n  c{i}\n  @use e{i + 1}\n}}" for i in range(size - 1)]
        parts.append(f"@export e{size - 1} {{\n  c{size - 1}\n}}")
        parts.append("& {\n  @use e0\n}")
        rules, collector = _resolve("\n".join(parts))
        assert len(collector) == 0
        assert rules[0].classes == [f"c{i}" for i in range(size)]


# ---------------------------------------------------------------------------
# Cross-file imports
# ---------------------------------------------------------------------------


class TestImports:
    def _write(self, directory, name, text):
        path = directory / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    def test_import_and_use(self, tmp_path, state):
        shared = self._write(tmp_path, "shared.tw", "@export card {\n  rounded shadow\n}")
        consumer = str(tmp_path / "comp.vue")
        collector = DiagnosticCollector()
        loader = ExportLoader(state, warn=collector)

        result = parse("@import card from './shared.tw'\n& {\n  @use card\n}", consumer)
        rules, deps = resolve_with_dependencies(result, consumer, loader, state, warn=collector)

        assert rules[0].classes == ["rounded", "shadow"]
        assert deps == {os.path.abspath(shared)}
        assert state.get_import_dependents(shared) == [os.path.abspath(consumer)]
        assert len(collector) == 0

    def test_use_from_path(self, tmp_path, state):
        self._write(tmp_path, "shared.tw", "@export pill {\n  rounded-full\n}")
        consumer = str(tmp_path / "comp.vue")
        loader = ExportLoader(state, warn=DiagnosticCollector())
        result = parse("& {\n  @use pill from './shared.tw'\n}", consumer)
        rules = resolve(result, consumer, loader, state)
        assert rules[0].classes == ["rounded-full"]

    def test_provider_exports_are_pre_resolved(self, tmp_path, state):
        self._write(tmp_path, "shared.tw", "@export base {\n  rounded\n}\n@export btn {\n  @use base\n  px-4\n}")
        consumer = str(tmp_path / "comp.vue")
        loader = ExportLoader(state, warn=DiagnosticCollector())
        result = parse("@import btn from './shared.tw'\n& {\n  @use btn\n}", consumer)
        rules = resolve(result, consumer, loader, state)
        assert rules[0].classes == ["px-4", "rounded"]

    def test_name_not_found_lists_available(self, tmp_path, state):
        self._write(tmp_path, "shared.tw", "@export a {\n  x\n}\n@export b {\n  y\n}")
        consumer = str(tmp_path / "comp.vue")
        collector = DiagnosticCollector()
        loader = ExportLoader(state, warn=collector)
        result = parse("@import zzz from './shared.tw'\n& { flex }", consumer)
        resolve(result, consumer, loader, state, warn=collector)
        [diagnostic] = collector.by_rule("import-name-not-found")
        assert diagnostic.message == '@import: name "zzz" not found in ./shared.tw (available: a, b)'

    def test_missing_file(self, tmp_path, state):
        consumer = str(tmp_path / "comp.vue")
        collector = DiagnosticCollector()
        loader = ExportLoader(state, warn=collector)
        result = parse("@import card from './missing.tw'\n& {\n  flex\n  @use card\n}", consumer)
        rules = resolve(result, consumer, loader, state, warn=collector)

        assert len(collector.by_rule("missing-file")) == 1
        assert len(collector.by_rule("import-name-not-found")) == 1
        assert len(collector.by_rule("unknown-use")) == 1
        assert rules[0].classes == ["flex"]
        assert state.cached_exports(str(tmp_path / "missing.tw")) is None

    def test_loader_caches_until_cleared(self, tmp_path, state):
        shared = self._write(tmp_path, "shared.tw", "@export a {\n  one\n}")
        loader = ExportLoader(state, warn=DiagnosticCollector())

        first = loader(shared)
        assert loader(shared) is first

        self._write(tmp_path, "shared.tw", "@export a {\n  two\n}")
        assert loader(shared)[0].classes == ["one"]

        state.clear_exports_cache(shared)
        assert loader(shared)[0].classes == ["two"]

    def test_clear_entire_cache(self, tmp_path, state):
        shared = self._write(tmp_path, "shared.tw", "@export a {\n  one\n}")
        ExportLoader(state, warn=DiagnosticCollector())(shared)
        assert state.exports_cache
        state.clear_exports_cache()
        assert state.exports_cache == {}

    def test_extract_hook(self, tmp_path, state):
        host = self._write(
            tmp_path,
            "Card.vue",
            "<template><div/></template>\n<style tw>\n@export card {\n  rounded\n}\n</style>",
        )
        plain = self._write(tmp_path, "Plain.vue", "<template><div/></template>")

        def extract(text):
            start = text.find("<style tw>")
            if start == -1:
                return None
            return text[start + len("<style tw>"):text.find("</style>")]

        loader = ExportLoader(state, extract=extract, warn=DiagnosticCollector())
        assert [e.name for e in loader(host)] == ["card"]
        assert loader(plain) == []
        assert state.cached_exports(plain) == []

    def test_file_cycle_terminates(self, tmp_path, state):
        self._write(tmp_path, "a.tw", "@import y from './b.tw'\n@export x {\n  @use y\n}")
        self._write(tmp_path, "b.tw", "@import x from './a.tw'\n@export y {\n  @use x\n}")
        collector = DiagnosticCollector()
        loader = ExportLoader(state, warn=collector)
        exports = loader(str(tmp_path / "a.tw"))
        assert [e.name for e in exports] == ["x"]
        assert len(collector.by_rule("circular-use")) >= 1

    def test_independent_states_do_not_share_cache(self, tmp_path):
        shared = self._write(tmp_path, "shared.tw", "@export a {\n  one\n}")
        server, client = ResolverState(), ResolverState()
        ExportLoader(server, warn=DiagnosticCollector())(shared)
        assert server.cached_exports(shared) is not None
        assert client.cached_exports(shared) is None


# ---------------------------------------------------------------------------
# ResolverState
# ---------------------------------------------------------------------------


class TestResolverState:
    def test_record_and_query_dependents(self, state):
        state.record_dependencies("/p/a.vue", {"/p/shared.tw"})
        state.record_dependencies("/p/b.vue", {"/p/shared.tw", "/p/other.tw"})
        assert sorted(state.get_import_dependents("/p/shared.tw")) == ["/p/a.vue", "/p/b.vue"]
        assert state.get_import_dependents("/p/other.tw") == ["/p/b.vue"]

    def test_empty_dependencies_remove_entry(self, state):
        state.record_dependencies("/p/a.vue", {"/p/shared.tw"})
        state.record_dependencies("/p/a.vue", set())
        assert state.get_import_dependents("/p/shared.tw") == []

    def test_store_and_clear(self, state):
        state.store_exports("/p/x.tw", [ExportBlock(name="x")])
        assert state.cached_exports("/p/x.tw")[0].name == "x"
        state.clear_exports_cache("/p/x.tw")
        assert state.cached_exports("/p/x.tw") is None
