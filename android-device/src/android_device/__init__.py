"""android-device: lowering of `android_device` declarations.

Provides:
- device attribute validation (bounds on resolution, memory, density)
- resolution of the system image and emulator tool dependencies
- the launcher stub script (runfiles paths)
- the boot action descriptor (exec paths + resource estimate)
"""

__all__ = [
    "artifacts",
    "cli",
    "rules",
    "spec",
]
