"""
L1 Domain — Line-range patch interpreter (pure).

Applies ``LineRangeTransform`` lists to file contents. Works on
bytes so line endings and encodings pass through untouched.
No I/O, no subprocess.
"""

from __future__ import annotations

from sdrbuild.core.models.manifest import LineRangeTransform


class TransformError(ValueError):
    """A transform does not fit the file it is applied to."""


def _comment(line: bytes, marker: bytes) -> bytes:
    return marker + line


def apply_transform(lines: list[bytes], transform: LineRangeTransform) -> list[bytes]:
    """Return a new line list with one transform applied.

    Args:
        lines: File contents split with ``keepends=True``.
        transform: Range and action to apply (1-based, inclusive).

    Raises:
        TransformError: If the range runs past the end of the file, or
            the ``expect`` text is not inside the range.
    """
    if transform.end > len(lines):
        raise TransformError(
            f"lines {transform.start}-{transform.end} out of range "
            f"(file has {len(lines)} lines)"
        )

    lo, hi = transform.start - 1, transform.end
    block = lines[lo:hi]

    if transform.expect is not None:
        if not any(transform.expect.encode() in line for line in block):
            raise TransformError(
                f"expected {transform.expect!r} within lines "
                f"{transform.start}-{transform.end}"
            )

    marker = transform.marker.encode()
    patched = [_comment(line, marker) for line in block]
    return lines[:lo] + patched + lines[hi:]


def apply_transforms(data: bytes, transforms: list[LineRangeTransform]) -> bytes:
    """Apply transforms in order and return the patched contents."""
    lines = data.splitlines(keepends=True)
    for transform in transforms:
        lines = apply_transform(lines, transform)
    return b"".join(lines)
