from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from android_device.rules.device_target import configuration_issues
from android_device.spec.declaration import load_device_declaration
from android_device.spec.spec_loader import SpecValidationError


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Validate an android_device declaration (attribute bounds + system image)."
    )
    parser.add_argument(
        "--device",
        type=Path,
        required=True,
        help="Device declaration (YAML or JSON).",
    )
    parser.add_argument(
        "--log_level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING).",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    try:
        decl = load_device_declaration(args.device)
    except (FileNotFoundError, SpecValidationError, ValueError) as e:
        raise SystemExit(f"Device declaration invalid: {args.device}:\n{e}")

    issues = configuration_issues(decl.spec, decl.system_image)
    if issues:
        for issue in issues:
            print(f"ERROR: {issue.format()}")
        return 1

    print(f"OK: {decl.name} ({args.device})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
