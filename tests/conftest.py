"""
Shared test fixtures and configuration.

``fake_host`` stands in for the machine the installer drives: it
answers every ``_run_subprocess`` call, ``shutil.which`` lookup,
package query and OS probe the pipeline makes, and mutates a small
simulated filesystem the way the real tools would. Captured output is
cut the same way the real runner cuts it.
"""

from __future__ import annotations

import shutil
import textwrap
from pathlib import Path
from typing import Any

import pytest

import sdrbuild.core.services.installer.detection.environment as environment_mod
import sdrbuild.core.services.installer.execution.build_helpers as build_mod
import sdrbuild.core.services.installer.execution.dependencies as deps_mod
import sdrbuild.core.services.installer.execution.link_repair as link_mod
import sdrbuild.core.services.installer.execution.source as source_mod
import sdrbuild.core.services.installer.execution.verify as verify_mod
from sdrbuild.core.models.manifest import InstallerManifest, PackageSpec
from sdrbuild.core.services.installer.execution.subprocess_runner import _tail

OLD_REF = "@rpath/libacars-2.2.dylib"

UPSTREAM_CMAKELISTS = textwrap.dedent("""\
    cmake_minimum_required(VERSION 3.2)
    project(acarsdec C)
    find_package(ALSA)
    if(ALSA_FOUND)
      target_link_libraries(acarsdec ${ALSA_LIBRARIES})
    endif()
    install(TARGETS acarsdec DESTINATION bin)
""")


def _manifest_data(tmp_path: Path) -> dict:
    prefix = tmp_path / "prefix"
    new_ref = str(prefix / "lib" / "libacars-2.2.dylib")
    return {
        "name": "acars-sdr-tools",
        "description": "ACARS SDR Tools",
        "platform": "darwin",
        "prefix": str(prefix),
        "workspace": str(tmp_path / "workspace"),
        "prerequisites": [
            {"name": "Homebrew", "command": "brew", "hint": "Install Homebrew from: https://brew.sh"},
            {"name": "Git", "command": "git"},
            {"name": "CMake", "command": "cmake", "hint": "Install with: brew install cmake"},
        ],
        "packages": [
            {"name": "libsndfile"},
            {"name": "librtlsdr"},
        ],
        "projects": [
            {
                "name": "libacars",
                "url": "https://github.com/szpajder/libacars.git",
                "options": {"CMAKE_INSTALL_RPATH_USE_LINK_PATH": True},
                "artifacts": [str(prefix / "bin" / "decode_acars_apps")],
                "link_references": [{"old": OLD_REF, "new": new_ref}],
            },
            {
                "name": "acarsdec",
                "url": "https://github.com/TLeconte/acarsdec.git",
                "patch": {
                    "target": "CMakeLists.txt",
                    "reason": "ALSA is Linux-only",
                    "transforms": [{"start": 3, "end": 6, "expect": "ALSA"}],
                },
                "options": {"CMAKE_POLICY_VERSION_MINIMUM": 3.5},
                "artifacts": [str(prefix / "bin" / "acarsdec")],
                "link_references": [{"old": OLD_REF, "new": new_ref}],
            },
        ],
        "verify": {"tools": ["decode_acars_apps", "acarsdec"]},
        "usage": [{"title": "ACARS Decoding:", "lines": ["acarsdec -r 0 131.550"]}],
        "notes": ["ALSA support is disabled (not needed on macOS)"],
    }


@pytest.fixture
def make_manifest(tmp_path: Path):
    """Factory: a small two-project manifest rooted in ``tmp_path``."""

    def _make(**overrides: Any) -> InstallerManifest:
        data = _manifest_data(tmp_path)
        data.update(overrides)
        return InstallerManifest.model_validate(data)

    return _make


@pytest.fixture
def manifest(make_manifest) -> InstallerManifest:
    return make_manifest()


class FakeHost:
    """Simulated macOS host with Homebrew, git, cmake and otool."""

    def __init__(self, manifest: InstallerManifest) -> None:
        self.platform = "darwin"
        self.upstream = UPSTREAM_CMAKELISTS
        self.on_path: set[str] = {"brew", "git", "cmake", "otool", "install_name_tool"}
        self.installed: set[str] = set()
        self.relinked: set[str] = set()
        self.calls: list[dict] = []
        self.configured: dict[str, str] = {}
        self.failures: list[tuple[tuple[str, ...], dict]] = []
        self.artifacts = {p.name: list(p.artifacts) for p in manifest.projects}
        self.linked_libraries: list[str] = []

    # ── Scripting ──

    def fail(self, *fragments: str, **result: Any) -> None:
        """Make every command containing all ``fragments`` fail."""
        self.failures.append((fragments, result))

    def commands(self, *fragments: str) -> list[list[str]]:
        return [
            c["cmd"] for c in self.calls
            if all(f in " ".join(c["cmd"]) for f in fragments)
        ]

    # ── Replacements ──

    def which(self, name: str) -> str | None:
        return f"/fake/bin/{name}" if name in self.on_path else None

    def is_installed(self, spec: PackageSpec, timeout: int = 30) -> bool:
        return spec.name in self.installed

    def run(
        self,
        cmd: list[str],
        *,
        needs_sudo: bool = False,
        timeout: int = 120,
        env_overrides: dict[str, str] | None = None,
        cwd: str | None = None,
        stdin_text: str | None = None,
        tail: bool = True,
    ) -> dict[str, Any]:
        cmd = list(cmd)
        self.calls.append({
            "cmd": cmd,
            "needs_sudo": needs_sudo,
            "cwd": cwd,
            "timeout": timeout,
            "stdin_text": stdin_text,
            "tail": tail,
        })
        result = self._answer(cmd)
        for stream in ("stdout", "stderr"):
            if stream in result:
                result[stream] = _tail(result[stream], tail)
        return result

    def _answer(self, cmd: list[str]) -> dict[str, Any]:
        line = " ".join(cmd)

        for fragments, result in self.failures:
            if all(f in line for f in fragments):
                return {
                    "ok": False,
                    "returncode": 1,
                    "error": f"Command failed (exit 1): {line}",
                    "stdout": "",
                    "stderr": "",
                    **result,
                }

        ok: dict[str, Any] = {"ok": True, "returncode": 0, "stdout": "", "stderr": "", "elapsed_ms": 1}

        if cmd[:2] == ["git", "clone"]:
            dest = Path(cmd[-1])
            dest.mkdir(parents=True)
            (dest / "CMakeLists.txt").write_text(self.upstream)
        elif cmd[:2] == ["cmake", "-S"]:
            src = Path(cmd[2])
            cmakelists = src / "CMakeLists.txt"
            self.configured[src.name] = cmakelists.read_text() if cmakelists.exists() else ""
        elif cmd[:2] == ["cmake", "--install"]:
            project = Path(cmd[2]).parent.name
            for artifact in self.artifacts.get(project, []):
                path = Path(artifact)
                path.parent.mkdir(parents=True, exist_ok=True)
                path.touch()
                self.on_path.add(path.name)
        elif cmd[:2] == ["brew", "install"]:
            self.installed.add(cmd[2])
        elif cmd[0] == "otool":
            ref = "" if cmd[-1] in self.relinked else f"\t{OLD_REF} (compatibility version 2.0.0)\n"
            extra = "".join(f"\t{lib}\n" for lib in self.linked_libraries)
            ok["stdout"] = f"{cmd[-1]}:\n{ref}{extra}\t/usr/lib/libSystem.B.dylib\n"
        elif cmd[0] == "install_name_tool":
            self.relinked.add(cmd[-1])

        return ok


@pytest.fixture
def fake_host(manifest: InstallerManifest, monkeypatch: pytest.MonkeyPatch) -> FakeHost:
    host = FakeHost(manifest)
    for mod in (source_mod, deps_mod, build_mod, link_mod, verify_mod):
        monkeypatch.setattr(mod, "_run_subprocess", host.run)
    monkeypatch.setattr(deps_mod, "is_package_installed", host.is_installed)
    monkeypatch.setattr(environment_mod, "host_platform", lambda: host.platform)
    monkeypatch.setattr(shutil, "which", host.which)
    return host
