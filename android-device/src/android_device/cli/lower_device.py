from __future__ import annotations

import argparse
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Sequence

from android_device.rules.dependencies import ToolchainContractError
from android_device.rules.device_target import (
    DEFAULT_BIN_ROOT,
    DEFAULT_WORKSPACE_NAME,
    DeviceOutputs,
    DeviceTarget,
    assemble_device_target,
)
from android_device.rules.stub_script import TemplateExpansionError
from android_device.spec.attributes import DeviceConfigurationError
from android_device.spec.declaration import load_device_declaration, load_toolchain
from android_device.spec.spec_loader import SpecValidationError

logger = logging.getLogger(__name__)


def _target_label(package: str, name: str) -> str:
    return f"//{package}:{name}"


def boot_descriptor(target: DeviceTarget) -> dict:
    return {
        "label": target.label,
        "device_broker_type": target.device_broker_type,
        "files_to_build": [a.exec_path for a in target.files_to_build],
        "runfiles": [a.runfiles_path for a in target.runfiles],
        "boot_action": target.boot_action.to_dict(),
    }


def _stage(out_dir: Path, text: str, *, mode: int = 0o644) -> Path:
    tmp = tempfile.NamedTemporaryFile(
        mode="w", encoding="utf-8", dir=out_dir, suffix=".tmp", delete=False
    )
    with tmp:
        tmp.write(text)
    staged = Path(tmp.name)
    staged.chmod(mode)
    return staged


def write_outputs(target: DeviceTarget, out_dir: Path, *, name: str) -> tuple[Path, Path]:
    """Write the stub script and the boot descriptor as one set.

    Both files are staged next to their final names and renamed into place.
    On any failure neither file is left behind.
    """

    script_text = target.stub_script.expand()
    descriptor_text = json.dumps(boot_descriptor(target), indent=2, ensure_ascii=False) + "\n"

    out_dir.mkdir(parents=True, exist_ok=True)
    script_path = out_dir / name
    action_path = out_dir / f"{name}_boot_action.json"

    written: list[Path] = []
    try:
        staged_script = _stage(
            out_dir, script_text, mode=0o755 if target.stub_script.executable else 0o644
        )
        written.append(staged_script)
        staged_action = _stage(out_dir, descriptor_text)
        written.append(staged_action)

        os.replace(staged_script, script_path)
        written.append(script_path)
        os.replace(staged_action, action_path)
    except OSError:
        for path in written:
            path.unlink(missing_ok=True)
        raise
    return script_path, action_path


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Lower an android_device declaration into its stub script and boot action."
    )
    parser.add_argument(
        "--device", type=Path, required=True, help="Device declaration (YAML or JSON)."
    )
    parser.add_argument(
        "--toolchain",
        type=Path,
        required=True,
        help="Emulator toolchain manifest (YAML or JSON).",
    )
    parser.add_argument(
        "--output", type=Path, required=True, help="Directory for the generated files."
    )
    parser.add_argument(
        "--package",
        type=str,
        default="",
        help="Package path of the target (default: workspace root).",
    )
    parser.add_argument(
        "--workspace",
        type=str,
        default=os.environ.get("ANDROID_DEVICE_WORKSPACE", DEFAULT_WORKSPACE_NAME),
        help=f"Workspace name used by the stub script (default: {DEFAULT_WORKSPACE_NAME}).",
    )
    parser.add_argument(
        "--bin_root",
        type=str,
        default=os.environ.get("ANDROID_DEVICE_BIN_ROOT", DEFAULT_BIN_ROOT),
        help=f"Output root of generated artifacts (default: {DEFAULT_BIN_ROOT}).",
    )
    parser.add_argument(
        "--template",
        type=Path,
        default=None,
        help="Optional override for the stub script template.",
    )
    parser.add_argument(
        "--log_level",
        type=str,
        default=os.environ.get("ANDROID_DEVICE_LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO).",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    try:
        decl = load_device_declaration(args.device)
        tools = load_toolchain(args.toolchain)
        template = (
            args.template.read_text(encoding="utf-8") if args.template is not None else None
        )
    except (FileNotFoundError, SpecValidationError, ValueError) as e:
        raise SystemExit(f"Unable to load inputs:\n{e}")

    label = _target_label(args.package, decl.name)
    try:
        target = assemble_device_target(
            label=label,
            spec=decl.spec,
            system_image=decl.system_image,
            tools=tools,
            outputs=DeviceOutputs.for_target(
                decl.name, package=args.package, bin_root=args.bin_root
            ),
            workspace_name=args.workspace,
            default_properties=decl.default_properties,
            platform_apks=decl.platform_apks,
            execution_info=decl.execution_info,
            template=template,
        )
    except DeviceConfigurationError as e:
        for issue in e.issues:
            print(f"ERROR: {issue.format()}")
        return 1
    except (ToolchainContractError, TemplateExpansionError) as e:
        logger.error("internal error while lowering %s: %s", label, e)
        return 2

    script_path, action_path = write_outputs(target, args.output, name=decl.name)
    print(f"OK: {label}")
    print(f"  stub script: {script_path}")
    print(f"  boot action: {action_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
