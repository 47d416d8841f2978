"""Resolution of the system image and the emulator tool dependencies."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from android_device.artifacts import ArtifactRef, ExecutableBundle, FileGroup
from android_device.rules.selection import Ambiguous, Found, NotFound, select_single
from android_device.spec.attributes import AttributeIssue

logger = logging.getLogger(__name__)

SOURCE_PROPERTIES = "source.properties"
TESTING_SHBASE_NAME = "googletest.sh"


class ToolchainContractError(RuntimeError):
    """Raised when a fixed tool dependency does not have the expected shape."""


@dataclass(frozen=True)
class ToolSet:
    adb: ArtifactRef
    adb_static: ArtifactRef
    emulator_arm: ArtifactRef
    emulator_x86: ArtifactRef
    emulator_x86_bios: Tuple[ArtifactRef, ...]
    mksdcard: ArtifactRef
    empty_snapshot_fs: ArtifactRef
    unified_launcher: ExecutableBundle
    android_runtest_deps: Tuple[ArtifactRef, ...]
    testing_shbase_deps: Tuple[ArtifactRef, ...]
    sdk_path: ArtifactRef
    xvfb_support: Tuple[ArtifactRef, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SystemImageBundle:
    label: str
    source_properties_file: ArtifactRef
    system_images: Tuple[ArtifactRef, ...]


@dataclass(frozen=True)
class DeviceDependencies:
    """Everything the stub script and the boot action refer to."""

    tools: ToolSet
    system_image: SystemImageBundle
    android_runtest: ArtifactRef
    testing_shbase: ArtifactRef
    platform_apks: Tuple[ArtifactRef, ...]
    common: Tuple[ArtifactRef, ...]

    @property
    def source_properties_file(self) -> ArtifactRef:
        return self.system_image.source_properties_file

    @property
    def system_images(self) -> Tuple[ArtifactRef, ...]:
        return self.system_image.system_images


def _is_source_properties(artifact: ArtifactRef) -> bool:
    return artifact.basename == SOURCE_PROPERTIES


def system_image_issues(group: FileGroup) -> List[AttributeIssue]:
    """Report a missing or duplicated source.properties in a system image filegroup."""

    issues: List[AttributeIssue] = []
    count = sum(1 for f in group.files if _is_source_properties(f))
    if count == 0:
        issues.append(
            AttributeIssue(
                "system_image",
                f"No source.properties files exist in this filegroup ({group.label})",
            )
        )
    if count > 1:
        issues.append(
            AttributeIssue(
                "system_image",
                f"Multiple source.properties files exist in this filegroup ({group.label})",
            )
        )
    return issues


def resolve_system_image(group: FileGroup) -> Optional[SystemImageBundle]:
    """Split a filegroup into its source.properties file and the image files.

    Returns None when the filegroup does not hold exactly one source.properties;
    `system_image_issues` describes why.
    """
    selection = select_single(group.files, _is_source_properties)
    if not isinstance(selection, Found):
        return None
    images = tuple(f for f in group.files if not _is_source_properties(f))
    return SystemImageBundle(
        label=group.label,
        source_properties_file=selection.item,
        system_images=images,
    )


def _require_single(selection, *, what: str, bundle: Tuple[ArtifactRef, ...]) -> ArtifactRef:
    if isinstance(selection, Found):
        return selection.item
    paths = ", ".join(a.exec_path for a in bundle) or "<empty>"
    if isinstance(selection, NotFound):
        raise ToolchainContractError(f"no {what} found among: {paths}")
    if isinstance(selection, Ambiguous):
        raise ToolchainContractError(
            f"expected exactly one {what}, found {selection.count} among: {paths}"
        )
    raise TypeError(f"unexpected selection result: {selection!r}")


def select_android_runtest(deps: Tuple[ArtifactRef, ...]) -> ArtifactRef:
    return _require_single(
        select_single(deps, lambda a: a.is_source),
        what="android_runtest source file",
        bundle=deps,
    )


def select_testing_shbase(deps: Tuple[ArtifactRef, ...]) -> ArtifactRef:
    return _require_single(
        select_single(deps, lambda a: a.basename == TESTING_SHBASE_NAME),
        what=TESTING_SHBASE_NAME,
        bundle=deps,
    )


def common_dependencies(
    tools: ToolSet,
    system_image: SystemImageBundle,
    platform_apks: Tuple[ArtifactRef, ...] = (),
) -> Tuple[ArtifactRef, ...]:
    return (
        tools.adb,
        system_image.source_properties_file,
        *system_image.system_images,
        tools.emulator_arm,
        tools.emulator_x86,
        tools.adb_static,
        *tools.emulator_x86_bios,
        *tools.xvfb_support,
        tools.mksdcard,
        tools.empty_snapshot_fs,
        *tools.unified_launcher.files_to_run,
        *tools.android_runtest_deps,
        *tools.testing_shbase_deps,
        *platform_apks,
    )


def collect_dependencies(
    tools: ToolSet,
    system_image: SystemImageBundle,
    *,
    platform_apks: Tuple[ArtifactRef, ...] = (),
) -> DeviceDependencies:
    android_runtest = select_android_runtest(tools.android_runtest_deps)
    testing_shbase = select_testing_shbase(tools.testing_shbase_deps)
    common = common_dependencies(tools, system_image, tuple(platform_apks))
    logger.debug(
        "collected %d common dependencies for %s (%d system images)",
        len(common),
        system_image.label,
        len(system_image.system_images),
    )
    return DeviceDependencies(
        tools=tools,
        system_image=system_image,
        android_runtest=android_runtest,
        testing_shbase=testing_shbase,
        platform_apks=tuple(platform_apks),
        common=common,
    )
