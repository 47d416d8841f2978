"""Analysis of a single `android_device` target.

Validates the declaration, resolves dependencies and wires the stub script and
the boot action together. Any configuration issue aborts before either output
is created.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import List, Mapping, Optional, Sequence, Tuple

from android_device.artifacts import ArtifactRef, FileGroup, stable_unique
from android_device.rules.boot_action import BootActionSpec, create_boot_action
from android_device.rules.dependencies import (
    ToolSet,
    collect_dependencies,
    resolve_system_image,
    system_image_issues,
)
from android_device.rules.stub_script import TemplateExpansion, create_stub_script
from android_device.spec.attributes import (
    AttributeIssue,
    DeviceConfigurationError,
    DeviceSpec,
    validate_device_spec,
)

logger = logging.getLogger(__name__)

DEVICE_BROKER_TYPE = "WRAPPED_EMULATOR"

EMULATOR_METADATA_NAME = "emulator-meta-data.pb"
USERDATA_IMAGES_NAME = "userdata_images.dat"

DEFAULT_BIN_ROOT = "bazel-out/k8-fastbuild/bin"
DEFAULT_WORKSPACE_NAME = "__main__"


@dataclass(frozen=True)
class DeviceOutputs:
    executable: ArtifactRef
    metadata: ArtifactRef
    images: ArtifactRef

    @classmethod
    def for_target(cls, name: str, *, package: str = "", bin_root: str = DEFAULT_BIN_ROOT):
        base = PurePosixPath(package) if package else PurePosixPath()
        images_dir = base / f"{name}_images"
        return cls(
            executable=ArtifactRef.derived(bin_root, str(base / name)),
            metadata=ArtifactRef.derived(bin_root, str(images_dir / EMULATOR_METADATA_NAME)),
            images=ArtifactRef.derived(bin_root, str(images_dir / USERDATA_IMAGES_NAME)),
        )

    def files_to_build(self) -> Tuple[ArtifactRef, ...]:
        return (self.executable, self.metadata, self.images)


@dataclass(frozen=True)
class DeviceTarget:
    label: str
    outputs: DeviceOutputs
    stub_script: TemplateExpansion
    boot_action: BootActionSpec
    runfiles: Tuple[ArtifactRef, ...]
    execution_info: Mapping[str, str] = field(default_factory=dict)
    device_broker_type: str = DEVICE_BROKER_TYPE

    @property
    def files_to_build(self) -> Tuple[ArtifactRef, ...]:
        return self.outputs.files_to_build()


def configuration_issues(spec: DeviceSpec, system_image: FileGroup) -> List[AttributeIssue]:
    return [*validate_device_spec(spec), *system_image_issues(system_image)]


def assemble_device_target(
    *,
    label: str,
    spec: DeviceSpec,
    system_image: FileGroup,
    tools: ToolSet,
    outputs: DeviceOutputs,
    workspace_name: str = DEFAULT_WORKSPACE_NAME,
    default_properties: Optional[ArtifactRef] = None,
    platform_apks: Sequence[ArtifactRef] = (),
    execution_info: Optional[Mapping[str, str]] = None,
    template: Optional[str] = None,
) -> DeviceTarget:
    issues = configuration_issues(spec, system_image)
    if issues:
        raise DeviceConfigurationError(issues, target=label)

    bundle = resolve_system_image(system_image)
    if bundle is None:
        # system_image_issues reports every way this can fail.
        raise RuntimeError(f"unresolvable system image: {system_image.label}")

    deps = collect_dependencies(tools, bundle, platform_apks=tuple(platform_apks))
    info = dict(execution_info or {})

    stub = create_stub_script(
        workspace_name=workspace_name,
        deps=deps,
        metadata=outputs.metadata,
        images=outputs.images,
        executable=outputs.executable,
        template=template,
    )
    boot = create_boot_action(
        spec,
        deps,
        metadata=outputs.metadata,
        images=outputs.images,
        default_properties=default_properties,
        execution_info=info,
    )

    runfiles = stable_unique(
        (
            *outputs.files_to_build(),
            *deps.common,
            tools.unified_launcher.executable,
            *tools.unified_launcher.files_to_run,
        )
    )
    logger.info("configured %s (%d runfiles)", label, len(runfiles))
    return DeviceTarget(
        label=label,
        outputs=outputs,
        stub_script=stub,
        boot_action=boot,
        runfiles=runfiles,
        execution_info=info,
    )
