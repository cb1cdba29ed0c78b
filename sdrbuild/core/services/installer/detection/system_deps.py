"""
L3 Detection — System dependency checking.

Read-only probes for package availability.
Uses subprocess for package manager queries.
"""

from __future__ import annotations

import logging
import subprocess

from sdrbuild.core.models.manifest import PackageSpec

logger = logging.getLogger(__name__)


def _is_pkg_installed(pkg: str, pkg_manager: str, timeout: int = 30) -> bool:
    """Check if a single system package is installed.

    Uses the appropriate checker for the given package manager:
      brew   → brew ls --versions PKG
      apt    → dpkg-query -W -f='${Status}' PKG
      dnf    → rpm -q PKG
      yum    → rpm -q PKG
      zypper → rpm -q PKG
      apk    → apk info -e PKG
      pacman → pacman -Q PKG

    Args:
        pkg: Exact package name (must match the manager's naming).
        pkg_manager: One of: brew, apt, dnf, yum, zypper, apk, pacman.
        timeout: Seconds allowed for the query.

    Returns:
        True if installed, False if not installed or check failed.
    """
    try:
        if pkg_manager == "brew":
            r = subprocess.run(
                ["brew", "ls", "--versions", pkg],
                capture_output=True, text=True, timeout=timeout,
            )
            # brew exits 0 with empty output for some casks/aliases
            return r.returncode == 0 and bool(r.stdout.strip())

        if pkg_manager == "apt":
            r = subprocess.run(
                ["dpkg-query", "-W", "-f=${Status}", pkg],
                capture_output=True, text=True, timeout=timeout,
            )
            return "install ok installed" in r.stdout

        if pkg_manager in ("dnf", "yum", "zypper"):
            r = subprocess.run(
                ["rpm", "-q", pkg],
                capture_output=True, timeout=timeout,
            )
            return r.returncode == 0

        if pkg_manager == "apk":
            r = subprocess.run(
                ["apk", "info", "-e", pkg],
                capture_output=True, timeout=timeout,
            )
            return r.returncode == 0

        if pkg_manager == "pacman":
            r = subprocess.run(
                ["pacman", "-Q", pkg],
                capture_output=True, timeout=timeout,
            )
            return r.returncode == 0

        logger.warning("Unknown package manager '%s' (checking %s)", pkg_manager, pkg)

    except FileNotFoundError:
        # Checker binary not on PATH (e.g. dpkg-query on macOS)
        logger.warning(
            "Package checker not found for pm=%s (checking %s)",
            pkg_manager, pkg,
        )
    except subprocess.TimeoutExpired:
        logger.warning(
            "Timeout checking package %s with pm=%s",
            pkg, pkg_manager,
        )
    except OSError as exc:
        logger.warning(
            "OS error checking package %s with pm=%s: %s",
            pkg, pkg_manager, exc,
        )

    return False


def is_package_installed(spec: PackageSpec, timeout: int = 30) -> bool:
    """Evaluate a PackageSpec's already-installed predicate.

    An explicit ``check_command`` wins: exit status 0 means installed.
    Otherwise the package manager is queried.
    """
    if spec.check_command:
        try:
            r = subprocess.run(
                spec.check_command,
                capture_output=True, timeout=timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.warning("Check command for %s failed: %s", spec.name, exc)
            return False
        return r.returncode == 0
    return _is_pkg_installed(spec.name, spec.manager, timeout=timeout)
