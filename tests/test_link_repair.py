"""
Tests for dynamic-library reference repair.
"""

from pathlib import Path

from sdrbuild.core.models.manifest import LibraryReference, LinkToolSettings, ProjectSpec
from sdrbuild.core.services.installer.execution.link_repair import (
    _render,
    repair_links,
    repair_reference,
)

OLD = "@rpath/libacars-2.2.dylib"
NEW = "/usr/local/lib/libacars-2.2.dylib"


def _installed(tmp_path: Path, name: str = "acarsdec") -> str:
    binary = tmp_path / "bin" / name
    binary.parent.mkdir(parents=True, exist_ok=True)
    binary.touch()
    return str(binary)


class TestRender:
    def test_substitutes_placeholders(self):
        ref = LibraryReference(binary="/usr/local/bin/acarsdec", old=OLD, new=NEW)
        cmd = _render(LinkToolSettings().rewrite_command, ref)
        assert cmd == ["install_name_tool", "-change", OLD, NEW, "/usr/local/bin/acarsdec"]


class TestLibraryReferences:
    def test_artifacts_times_rules(self):
        p = ProjectSpec(
            name="libacars",
            url="u",
            artifacts=["/usr/local/bin/a", "/usr/local/bin/b"],
            link_references=[{"old": OLD, "new": NEW}],
        )
        refs = p.library_references()
        assert [r.binary for r in refs] == ["/usr/local/bin/a", "/usr/local/bin/b"]
        assert {r.old for r in refs} == {OLD}


class TestRepairReference:
    def test_rewrites_with_sudo(self, tmp_path: Path, fake_host):
        ref = LibraryReference(binary=_installed(tmp_path), old=OLD, new=NEW)

        r = repair_reference(ref)

        assert r.ok
        assert r.metadata["inspected"] is True
        rewrite = [c for c in fake_host.calls if c["cmd"][0] == "install_name_tool"]
        assert len(rewrite) == 1
        assert rewrite[0]["needs_sudo"] is True

    def test_second_run_is_skipped(self, tmp_path: Path, fake_host):
        ref = LibraryReference(binary=_installed(tmp_path), old=OLD, new=NEW)

        first = repair_reference(ref)
        second = repair_reference(ref)

        assert first.ok
        assert second.skipped
        assert len(fake_host.commands("install_name_tool")) == 1

    def test_reference_listed_before_long_dependency_list(self, tmp_path: Path, fake_host):
        fake_host.linked_libraries = [
            f"/opt/homebrew/opt/dep{i}/lib/libdep{i}.{i}.dylib (compatibility version {i}.0.0, current version {i}.4.2)"
            for i in range(40)
        ]
        ref = LibraryReference(binary=_installed(tmp_path), old=OLD, new=NEW)

        r = repair_reference(ref)

        assert r.ok
        assert len(fake_host.commands("install_name_tool")) == 1
        assert fake_host.commands("otool")
        assert all(not c["tail"] for c in fake_host.calls if c["cmd"][0] == "otool")

    def test_missing_binary_skipped(self, tmp_path: Path, fake_host):
        ref = LibraryReference(binary=str(tmp_path / "bin" / "nope"), old=OLD, new=NEW)
        r = repair_reference(ref)
        assert r.skipped
        assert fake_host.calls == []

    def test_rewrite_failure_is_a_warning(self, tmp_path: Path, fake_host):
        fake_host.fail("install_name_tool", stderr="not permitted")
        ref = LibraryReference(binary=_installed(tmp_path), old=OLD, new=NEW)

        r = repair_reference(ref)

        assert r.failed
        assert r.fatal is False
        assert not r.aborts
        assert r.error == "LinkRepairWarning"
        assert r.hint.startswith("Run manually: install_name_tool -change")

    def test_without_inspect_tool_rewrites_unconditionally(self, tmp_path: Path, fake_host):
        fake_host.on_path.discard("otool")
        ref = LibraryReference(binary=_installed(tmp_path), old=OLD, new=NEW)

        r = repair_reference(ref)

        assert r.ok
        assert r.metadata["inspected"] is False
        assert fake_host.commands("otool") == []


class TestRepairLinks:
    def test_every_reference_attempted(self, tmp_path: Path, fake_host):
        fake_host.fail("install_name_tool", "first")
        refs = [
            LibraryReference(binary=_installed(tmp_path, "first"), old=OLD, new=NEW),
            LibraryReference(binary=_installed(tmp_path, "second"), old=OLD, new=NEW),
        ]
        results = repair_links(refs)
        assert [r.outcome for r in results] == ["failed", "success"]

    def test_no_references(self, fake_host):
        assert repair_links([]) == []
