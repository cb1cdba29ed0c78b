"""
L1 Domain — Build failure analysis (pure).

Parses stderr output from failed configure/compile/install steps for
known error patterns and suggests remediation. No I/O, no subprocess.
"""

from __future__ import annotations

import re


def _analyse_build_failure(
    project: str,
    stderr: str,
    phase: str = "",
) -> dict | None:
    """Analyse a build failure's stderr for common patterns.

    Returns a remediation dict with ``cause`` and ``suggestion``,
    or ``None`` if the error is unrecognized.

    Args:
        project: Project being built.
        stderr: stderr output from the failed step.
        phase: ``configure``, ``compile`` or ``install``.

    Returns:
        ``{"cause": "...", "suggestion": "...", "confidence": "high|medium|low"}``
    """
    if not stderr:
        return None

    s = stderr.lower()

    # CMake refuses an old cmake_minimum_required()
    if "compatibility with cmake < 3.5" in s or "cmake_policy_version_minimum" in s:
        return {
            "cause": f"{project} declares a CMake minimum version the installed CMake no longer supports",
            "suggestion": "Pass -DCMAKE_POLICY_VERSION_MINIMUM=3.5 in the project's options",
            "confidence": "high",
        }

    # CMake: package / module not found
    m = re.search(r"could not find (?:a package configuration file provided by )?\"?([\w.+-]+)", s)
    if m and phase in ("", "configure"):
        pkg = m.group(1)
        return {
            "cause": f"CMake package not found: {pkg}",
            "suggestion": f"Install it with: brew install {pkg.lower()} (or set CMAKE_PREFIX_PATH)",
            "confidence": "medium",
        }

    # Missing header files
    if "fatal error:" in s and ".h" in s:
        m = re.search(r"fatal error:\s*'?([^':]+\.h)'?(?::)?\s*(?:file not found|no such file)", s)
        header = m.group(1) if m else "unknown"
        return {
            "cause": f"Missing header file: {header}",
            "suggestion": f"Install the package that provides {header} and re-run the installer",
            "confidence": "high",
        }

    # Missing library at link time
    m = re.search(r"(?:cannot find -l|library not found for -l)(\S+)", s)
    if m:
        lib = m.group(1).strip("'\"")
        return {
            "cause": f"Missing library: lib{lib}",
            "suggestion": f"Install lib{lib} (brew install {lib}) and re-run the installer",
            "confidence": "high",
        }

    # Compiler not found
    if "no cmake_c_compiler could be found" in s or "cc: not found" in s:
        return {
            "cause": "C compiler not found",
            "suggestion": "Install the Xcode command line tools: xcode-select --install",
            "confidence": "high",
        }

    # Privileged install refused
    if "permission denied" in s or "a password is required" in s:
        return {
            "cause": f"Permission denied during {phase or 'build'}",
            "suggestion": "The install step needs sudo; run the installer from an account with sudo rights",
            "confidence": "medium",
        }

    return None
