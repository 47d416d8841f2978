"""Repo-root entry point for `android_device`.

The package sources live in `android-device/src/android_device/`. This stub
lets `python -m android_device.cli.lower_device ...` work from a plain
checkout, before the project is installed, by adding that directory to the
package's submodule search path.
"""

from __future__ import annotations

from pathlib import Path

_SRC_PKG = Path(__file__).resolve().parents[1] / "android-device" / "src" / "android_device"
if _SRC_PKG.is_dir():
    __path__.append(str(_SRC_PKG))  # type: ignore[name-defined]

__all__ = [
    "artifacts",
    "cli",
    "rules",
    "spec",
]
