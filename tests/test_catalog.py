"""
tests/test_catalog.py

Rule Catalog Builder: discovery, parse failures, batch compilation.
"""

import pytest

from ccheck.core.canonical import sources_digest
from ccheck.core.exceptions import (
    CatalogNotBuiltError,
    PolicyCompileError,
    PolicyParseError,
    PolicySourceError,
)
from ccheck.engine.base import Diagnostic
from ccheck.policy.catalog import RuleCatalog, build_rule_set


class TestDiscovery:

    def test_directory_only_rego_files_sorted(self, tmp_path, make_engine):
        (tmp_path / "b.rego").write_text("package main")
        (tmp_path / "a.rego").write_text("package main")
        (tmp_path / "notes.md").write_text("# not a policy")
        (tmp_path / "sub.rego").mkdir()
        found = RuleCatalog(str(tmp_path), make_engine()).discover()
        assert [name for name, _ in found] == ["a.rego", "b.rego"]

    def test_single_file_regardless_of_suffix(self, tmp_path, make_engine):
        p = tmp_path / "policy.txt"
        p.write_text("package main")
        found = RuleCatalog(str(p), make_engine()).discover()
        assert found == [("policy.txt", str(p))]

    def test_missing_path(self, tmp_path, make_engine):
        with pytest.raises(PolicySourceError) as exc:
            RuleCatalog(str(tmp_path / "missing"), make_engine()).build()
        assert "missing" in str(exc.value)


class TestBuild:

    def test_all_modules_compiled_in_one_batch(self, tmp_path, make_engine):
        for name in ("one.rego", "two.rego", "three.rego"):
            (tmp_path / name).write_text("package main")
        engine = make_engine()
        rule_set = RuleCatalog(str(tmp_path), engine).build()
        assert engine.compiled == [["one.rego", "three.rego", "two.rego"]]
        assert [m.name for m in rule_set.modules] == ["one.rego", "three.rego", "two.rego"]

    def test_parse_error_names_file_and_skips_compile(self, tmp_path, make_engine):
        (tmp_path / "a.rego").write_text("package main")
        (tmp_path / "b.rego").write_text("package main\nsyntax error here")
        engine = make_engine()
        with pytest.raises(PolicyParseError) as exc:
            RuleCatalog(str(tmp_path), engine).build()
        assert exc.value.file == "b.rego"
        assert "b.rego" in str(exc.value)
        assert engine.compiled == []

    def test_compile_error_keeps_every_diagnostic(self, policy_dir, make_engine):
        diagnostics = [
            Diagnostic("var x is unsafe", "rego_unsafe_var_error", "k8s.rego", 4, 2),
            Diagnostic("undefined function foo", "rego_type_error", "k8s.rego", 9, 5),
        ]
        with pytest.raises(PolicyCompileError) as exc:
            build_rule_set(str(policy_dir), make_engine(compile_errors=diagnostics))
        assert exc.value.diagnostics == diagnostics
        text = str(exc.value)
        assert "2 error(s)" in text
        assert "k8s.rego:4:2: rego_unsafe_var_error: var x is unsafe" in text
        assert "undefined function foo" in text

    def test_empty_directory_builds_empty_rule_set(self, tmp_path, make_engine):
        rule_set = RuleCatalog(str(tmp_path), make_engine()).build()
        assert rule_set.modules == ()
        assert rule_set.rule_names == []

    def test_rule_set_before_build(self, policy_dir, make_engine):
        catalog = RuleCatalog(str(policy_dir), make_engine())
        with pytest.raises(CatalogNotBuiltError):
            catalog.rule_set
        catalog.build()
        assert catalog.rule_set.namespaces == ["main"]

    def test_digest_is_order_independent(self, tmp_path, make_engine):
        (tmp_path / "a.rego").write_text("package main\n# a")
        (tmp_path / "b.rego").write_text("package main\n# b")
        rule_set = build_rule_set(str(tmp_path), make_engine())
        assert rule_set.digest == sources_digest({
            "b.rego": "package main\n# b",
            "a.rego": "package main\n# a",
        })
        assert len(rule_set.digest) == 64


class TestSourcesDigest:

    def test_source_change_changes_digest(self):
        before = sources_digest({"k8s.rego": "package main"})
        after  = sources_digest({"k8s.rego": "package main\n"})
        assert before != after

    def test_rename_changes_digest(self):
        assert sources_digest({"a.rego": "x"}) != sources_digest({"b.rego": "x"})

    def test_empty_rule_set_has_a_digest(self):
        assert len(sources_digest({})) == 64
