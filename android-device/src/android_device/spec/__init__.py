"""Device declaration validation (attribute bounds + schemas)."""

from __future__ import annotations

from android_device.spec.attributes import (
    AttributeIssue,
    DeviceConfigurationError,
    DeviceSpec,
    validate_device_spec,
)
from android_device.spec.spec_loader import SpecValidationError, load_yaml_or_json

__all__ = [
    "AttributeIssue",
    "DeviceConfigurationError",
    "DeviceSpec",
    "SpecValidationError",
    "load_yaml_or_json",
    "validate_device_spec",
]
