"""Launcher (stub) script generation.

The stub script runs after the build (`run`, `bin/` or as part of a test), from
inside the runfiles tree of the target, so every artifact is referenced by its
runfiles path. Nothing is executed here; the result is a deterministic text
expansion that the build graph writes out as an executable file.
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from android_device.artifacts import ArtifactRef, join_runfiles_paths
from android_device.rules.dependencies import DeviceDependencies

STUB_TEMPLATE_NAME = "android_device_stub_template.txt"


class TemplateExpansionError(RuntimeError):
    """Raised when a template and its substitutions do not line up."""


class Placeholder(str, Enum):
    WORKSPACE = "%workspace%"
    UNIFIED_LAUNCHER = "%unified_launcher%"
    ADB = "%adb%"
    ADB_STATIC = "%adb_static%"
    EMULATOR_X86 = "%emulator_x86%"
    EMULATOR_ARM = "%emulator_arm%"
    MKSDCARD = "%mksdcard%"
    EMPTY_SNAPSHOT_FS = "%empty_snapshot_fs%"
    SYSTEM_IMAGES = "%system_images%"
    BIOS_FILES = "%bios_files%"
    SOURCE_PROPERTIES_FILE = "%source_properties_file%"
    IMAGE_INPUT_FILE = "%image_input_file%"
    EMULATOR_METADATA_PATH = "%emulator_metadata_path%"
    ANDROID_RUNTEST = "%android_runtest%"
    TESTING_SHBASE = "%testing_shbase%"
    SDK_PATH = "%sdk_path%"


_BY_TOKEN = {p.value: p for p in Placeholder}

# Only known placeholder names are tokens; any other `%...%` text is left alone.
_PLACEHOLDER_RE = re.compile("|".join(re.escape(p.value) for p in Placeholder))


def templates_dir() -> Path:
    # android_device/rules/* -> android_device/templates/
    return Path(__file__).resolve().parents[1] / "templates"


@lru_cache(maxsize=None)
def _read_template(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def load_stub_template(path: Optional[Path] = None) -> str:
    return _read_template(path or templates_dir() / STUB_TEMPLATE_NAME)


def check_substitutions(template: str, substitutions: Mapping[Placeholder, str]) -> None:
    """Every placeholder bound, every binding substituted exactly once."""

    problems: list[str] = []

    missing = [p.value for p in Placeholder if p not in substitutions]
    if missing:
        problems.append(f"no value bound for: {', '.join(missing)}")

    # Count with the same scan the expansion uses so adjacent tokens agree.
    found = Counter(m.group(0) for m in _PLACEHOLDER_RE.finditer(template))
    for placeholder in substitutions:
        occurrences = found[placeholder.value]
        if occurrences != 1:
            problems.append(
                f"{placeholder.value} must appear exactly once in the template "
                f"(found {occurrences})"
            )

    if problems:
        raise TemplateExpansionError("stub template mismatch: " + "; ".join(problems))


def expand_template(template: str, substitutions: Mapping[Placeholder, str]) -> str:
    check_substitutions(template, substitutions)

    def _replace(match: re.Match) -> str:
        return substitutions[_BY_TOKEN[match.group(0)]]

    # Single pass so substituted values are never re-scanned.
    return _PLACEHOLDER_RE.sub(_replace, template)


@dataclass(frozen=True)
class TemplateExpansion:
    output: ArtifactRef
    template: str
    substitutions: Tuple[Tuple[Placeholder, str], ...]
    executable: bool = True

    def substitution_map(self) -> Dict[Placeholder, str]:
        return dict(self.substitutions)

    def expand(self) -> str:
        return expand_template(self.template, self.substitution_map())


def stub_substitutions(
    *,
    workspace_name: str,
    deps: DeviceDependencies,
    metadata: ArtifactRef,
    images: ArtifactRef,
) -> Dict[Placeholder, str]:
    tools = deps.tools
    return {
        Placeholder.WORKSPACE: workspace_name,
        Placeholder.UNIFIED_LAUNCHER: tools.unified_launcher.executable.runfiles_path,
        Placeholder.ADB: tools.adb.runfiles_path,
        Placeholder.ADB_STATIC: tools.adb_static.runfiles_path,
        Placeholder.EMULATOR_X86: tools.emulator_x86.runfiles_path,
        Placeholder.EMULATOR_ARM: tools.emulator_arm.runfiles_path,
        Placeholder.MKSDCARD: tools.mksdcard.runfiles_path,
        Placeholder.EMPTY_SNAPSHOT_FS: tools.empty_snapshot_fs.runfiles_path,
        Placeholder.SYSTEM_IMAGES: join_runfiles_paths(" ", deps.system_images),
        Placeholder.BIOS_FILES: join_runfiles_paths(" ", tools.emulator_x86_bios),
        Placeholder.SOURCE_PROPERTIES_FILE: deps.source_properties_file.runfiles_path,
        Placeholder.IMAGE_INPUT_FILE: images.runfiles_path,
        Placeholder.EMULATOR_METADATA_PATH: metadata.runfiles_path,
        Placeholder.ANDROID_RUNTEST: deps.android_runtest.runfiles_path,
        Placeholder.TESTING_SHBASE: deps.testing_shbase.runfiles_path,
        Placeholder.SDK_PATH: tools.sdk_path.runfiles_path,
    }


def create_stub_script(
    *,
    workspace_name: str,
    deps: DeviceDependencies,
    metadata: ArtifactRef,
    images: ArtifactRef,
    executable: ArtifactRef,
    template: Optional[str] = None,
) -> TemplateExpansion:
    text = load_stub_template() if template is None else template
    substitutions = stub_substitutions(
        workspace_name=workspace_name, deps=deps, metadata=metadata, images=images
    )
    check_substitutions(text, substitutions)
    return TemplateExpansion(
        output=executable,
        template=text,
        substitutions=tuple((p, substitutions[p]) for p in Placeholder),
        executable=True,
    )
