"""
Manifest models — what the installer builds and where.

Loaded from a YAML manifest (``core/data/acars.yml`` by default), these
are the declarations the pipeline acts on: host prerequisites, system
packages, source projects with their patches, and the tools expected
on ``PATH`` afterwards.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_PREFIX = "/usr/local"


class PrerequisiteSpec(BaseModel):
    """A host command that must exist before anything is mutated."""

    name: str
    command: str                    # looked up on PATH, never executed
    hint: str = ""                  # remediation shown when missing


class PackageSpec(BaseModel):
    """A system package satisfied through the host package manager.

    The installed predicate and the install action default to the
    package manager's own query/install commands; either can be
    replaced by an explicit argv list.
    """

    name: str
    manager: str = "brew"
    description: str = ""
    check_command: list[str] | None = None
    install_command: list[str] | None = None
    hint: str = ""

    def install_argv(self) -> list[str]:
        """Command that installs this package."""
        if self.install_command:
            return list(self.install_command)
        if self.manager == "apt":
            return ["apt-get", "install", "-y", self.name]
        if self.manager in ("dnf", "yum", "zypper"):
            return [self.manager, "install", "-y", self.name]
        if self.manager == "pacman":
            return ["pacman", "-S", "--noconfirm", self.name]
        if self.manager == "apk":
            return ["apk", "add", self.name]
        return [self.manager, "install", self.name]

    @property
    def install_needs_sudo(self) -> bool:
        # Homebrew refuses to run as root
        return self.install_command is None and self.manager != "brew"

    def remediation(self) -> str:
        return self.hint or f"Install manually: {' '.join(self.install_argv())}"


class LineRangeTransform(BaseModel):
    """Neutralise a contiguous, 1-based inclusive range of lines.

    ``comment`` prefixes every line in the range with ``marker``.
    Lines are never removed, so the file keeps its line count.
    """

    start: int = Field(ge=1)
    end: int = Field(ge=1)
    action: Literal["comment"] = "comment"
    marker: str = "#"
    expect: str | None = None       # text that must occur inside the range

    @model_validator(mode="after")
    def _check_range(self) -> LineRangeTransform:
        if self.end < self.start:
            raise ValueError(f"line range {self.start}-{self.end} is reversed")
        if not self.marker:
            raise ValueError("comment marker must not be empty")
        return self


class PatchDescriptor(BaseModel):
    """A reversible source patch: target file + ordered transforms."""

    target: str                     # relative to the project workspace
    transforms: list[LineRangeTransform] = Field(min_length=1)
    backup_suffix: str = ".backup"
    reason: str = ""

    def target_path(self, workspace: Path) -> Path:
        return workspace / self.target

    def backup_path(self, workspace: Path) -> Path:
        return workspace / f"{self.target}{self.backup_suffix}"


class LinkReferenceRule(BaseModel):
    """An embedded library reference to rewrite in every project artifact."""

    old: str                        # e.g. @rpath/libacars-2.2.dylib
    new: str                        # absolute installed path


class LibraryReference(BaseModel):
    """One rewrite of one reference inside one installed binary."""

    binary: str
    old: str
    new: str


class ProjectSpec(BaseModel):
    """A source project fetched, patched, built and installed by the pipeline."""

    name: str
    url: str
    branch: str | None = None
    depth: int | None = None
    description: str = ""
    patch: PatchDescriptor | None = None
    options: dict[str, str] = Field(default_factory=dict)
    parallelism: int | None = Field(default=None, ge=1)
    build_size: Literal["small", "medium", "large", "huge"] = "medium"
    artifacts: list[str] = Field(default_factory=list)
    link_references: list[LinkReferenceRule] = Field(default_factory=list)

    @field_validator("options", mode="before")
    @classmethod
    def _stringify_options(cls, value: object) -> object:
        # YAML turns TRUE/3.5 into bool/float; cmake wants the literal text
        if isinstance(value, dict):
            return {
                str(k): ("TRUE" if v is True else "FALSE" if v is False else str(v))
                for k, v in value.items()
            }
        return value

    def workspace(self, root: Path) -> Path:
        return root / self.name

    def library_references(self) -> list[LibraryReference]:
        """Expand artifacts × link rules into concrete rewrites."""
        return [
            LibraryReference(binary=artifact, old=rule.old, new=rule.new)
            for artifact in self.artifacts
            for rule in self.link_references
        ]


class LinkToolSettings(BaseModel):
    """Commands used to inspect and rewrite embedded library references.

    ``{binary}``, ``{old}`` and ``{new}`` are substituted per reference.
    """

    inspect_command: list[str] = Field(
        default_factory=lambda: ["otool", "-L", "{binary}"],
    )
    rewrite_command: list[str] = Field(
        default_factory=lambda: ["install_name_tool", "-change", "{old}", "{new}", "{binary}"],
    )
    needs_sudo: bool = True


class VerifySettings(BaseModel):
    """Liveness probe for installed tools."""

    tools: list[str] = Field(default_factory=list)
    help_flags: list[str] = Field(default_factory=lambda: ["--help", "-h"])
    usage_pattern: str = "usage"
    accepted_exit_codes: list[int] = Field(default_factory=lambda: [1])


class Timeouts(BaseModel):
    """Seconds allowed per external invocation."""

    package_check: int = 30
    package_install: int = 1800
    fetch: int = 600
    configure: int = 120
    install: int = 300
    link: int = 30
    verify: int = 10


class UsageSection(BaseModel):
    """One block of the post-install usage guide."""

    title: str
    lines: list[str] = Field(default_factory=list)


class InstallerManifest(BaseModel):
    """Root manifest — everything one installer run needs to know."""

    version: int = 1
    name: str
    description: str = ""
    platform: str = "darwin"
    prefix: str = DEFAULT_PREFIX
    workspace: str = "~/acars_sdr_build"

    prerequisites: list[PrerequisiteSpec] = Field(default_factory=list)
    packages: list[PackageSpec] = Field(default_factory=list)
    projects: list[ProjectSpec] = Field(default_factory=list)

    link_tool: LinkToolSettings = Field(default_factory=LinkToolSettings)
    verify: VerifySettings = Field(default_factory=VerifySettings)
    timeouts: Timeouts = Field(default_factory=Timeouts)

    usage: list[UsageSection] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_projects(self) -> InstallerManifest:
        names = [p.name for p in self.projects]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"duplicate project names: {', '.join(dupes)}")
        return self

    @property
    def workspace_root(self) -> Path:
        return Path(self.workspace).expanduser()

    @property
    def library_dir(self) -> str:
        return f"{self.prefix.rstrip('/')}/lib"
