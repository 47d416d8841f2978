"""The boot action: runs the unified launcher during the build.

The boot action executes inside the execution root, where no runfiles tree
exists, so every artifact is referenced by its exec path.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from android_device.artifacts import ArtifactRef, join_exec_paths
from android_device.rules.dependencies import DeviceDependencies
from android_device.spec.attributes import DeviceSpec

logger = logging.getLogger(__name__)

BOOT_MNEMONIC = "AndroidDeviceBoot"
BOOT_PROGRESS_MESSAGE = "creating android images..."


@dataclass(frozen=True)
class ResourceSet:
    cpu: float
    ram_mb: int
    io: float

    def to_dict(self) -> Dict[str, Any]:
        return {"cpu": self.cpu, "ram": self.ram_mb, "io": self.io}


def estimate_boot_resources(spec: DeviceSpec) -> ResourceSet:
    # CPU: the emulator pegs a single core while booting.
    # RAM: the emulator uses what the device asked for; qemu's own overhead is negligible.
    # IO: light until the booted images are flushed at the very end.
    return ResourceSet(cpu=1.0, ram_mb=spec.ram, io=0.0)


@dataclass(frozen=True)
class BootActionSpec:
    executable: ArtifactRef
    outputs: Tuple[ArtifactRef, ...]
    inputs: Tuple[ArtifactRef, ...]
    arguments: Tuple[str, ...]
    resources: ResourceSet
    execution_info: Mapping[str, str] = field(default_factory=dict)
    mnemonic: str = BOOT_MNEMONIC
    progress_message: str = BOOT_PROGRESS_MESSAGE

    def argv(self) -> List[str]:
        return [self.executable.exec_path, *self.arguments]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mnemonic": self.mnemonic,
            "progress_message": self.progress_message,
            "executable": self.executable.exec_path,
            "arguments": list(self.arguments),
            "inputs": [a.exec_path for a in self.inputs],
            "outputs": [a.exec_path for a in self.outputs],
            "resources": self.resources.to_dict(),
            "execution_info": dict(self.execution_info),
        }


def boot_arguments(
    spec: DeviceSpec,
    deps: DeviceDependencies,
    *,
    images: ArtifactRef,
    default_properties: Optional[ArtifactRef] = None,
) -> Tuple[str, ...]:
    tools = deps.tools
    # The launcher parses these positionally-sensitive flags; keep the order.
    args = [
        "--action=boot",
        f"--density={spec.screen_density}",
        f"--memory={spec.ram}",
        f"--cache={spec.cache}",
        f"--vm_size={spec.vm_heap}",
        f"--generate_output_dir={images.exec_dir}",
        f"--skin={spec.screen_size}",
        f"--source_properties_file={deps.source_properties_file.exec_path}",
        f"--system_images={join_exec_paths(' ', deps.system_images)}",
        "--flag_configured_android_tools",
        f"--adb={tools.adb.exec_path}",
        f"--emulator_x86={tools.emulator_x86.exec_path}",
        f"--emulator_arm={tools.emulator_arm.exec_path}",
        f"--adb_static={tools.adb_static.exec_path}",
        f"--mksdcard={tools.mksdcard.exec_path}",
        f"--empty_snapshot_fs={tools.empty_snapshot_fs.exec_path}",
        f"--bios_files={join_exec_paths(',', tools.emulator_x86_bios)}",
        "--nocopy_system_images",
        "--single_image_file",
        f"--android_sdk_path={tools.sdk_path.exec_path}",
        f"--platform_apks={join_exec_paths(',', deps.platform_apks)}",
    ]
    if default_properties is not None:
        args.append(f"--default_properties_file={default_properties.exec_path}")
    return tuple(args)


def create_boot_action(
    spec: DeviceSpec,
    deps: DeviceDependencies,
    *,
    metadata: ArtifactRef,
    images: ArtifactRef,
    default_properties: Optional[ArtifactRef] = None,
    execution_info: Optional[Mapping[str, str]] = None,
) -> BootActionSpec:
    inputs = deps.common
    if default_properties is not None:
        inputs = (*inputs, default_properties)

    action = BootActionSpec(
        executable=deps.tools.unified_launcher.executable,
        outputs=(metadata, images),
        inputs=inputs,
        arguments=boot_arguments(
            spec, deps, images=images, default_properties=default_properties
        ),
        resources=estimate_boot_resources(spec),
        execution_info=MappingProxyType(dict(execution_info or {})),
    )
    logger.debug(
        "boot action for %s: %d inputs, %d arguments",
        images.exec_path,
        len(action.inputs),
        len(action.arguments),
    )
    return action
