from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping

MIN_HORIZONTAL = 240
MIN_VERTICAL = 240

MIN_RAM = 64
MAX_RAM = 4096
MIN_VM_HEAP = 16
MIN_CACHE = 16

# Far below the pixel density of even the oldest phones.
MIN_LCD_DENSITY = 30

DEVICE_ATTRIBUTE_FIELDS = (
    "horizontal_resolution",
    "vertical_resolution",
    "ram",
    "screen_density",
    "cache",
    "vm_heap",
)


@dataclass(frozen=True)
class DeviceSpec:
    horizontal_resolution: int
    vertical_resolution: int
    ram: int
    cache: int
    vm_heap: int
    screen_density: int

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DeviceSpec":
        return cls(**{name: int(data[name]) for name in DEVICE_ATTRIBUTE_FIELDS})

    @property
    def screen_size(self) -> str:
        return f"{self.horizontal_resolution}x{self.vertical_resolution}"


@dataclass(frozen=True)
class AttributeIssue:
    field: str
    message: str

    def format(self) -> str:
        return f"{self.field}: {self.message}"


class DeviceConfigurationError(RuntimeError):
    """Raised when a device target cannot be configured from its attributes."""

    def __init__(self, issues: Iterable[AttributeIssue], *, target: str = "") -> None:
        self.issues: List[AttributeIssue] = list(issues)
        self.target = target
        where = f" for {target}" if target else ""
        lines = [f"- {issue.format()}" for issue in self.issues]
        super().__init__(f"invalid android_device{where}:\n" + "\n".join(lines))


def validate_device_spec(spec: DeviceSpec) -> List[AttributeIssue]:
    """Check every attribute bound and return one issue per violated rule."""

    issues: List[AttributeIssue] = []

    if spec.horizontal_resolution < MIN_HORIZONTAL:
        issues.append(
            AttributeIssue("horizontal_resolution", f"horizontal must be at least: {MIN_HORIZONTAL}")
        )
    if spec.vertical_resolution < MIN_VERTICAL:
        issues.append(
            AttributeIssue("vertical_resolution", f"vertical must be at least: {MIN_VERTICAL}")
        )
    if spec.ram < MIN_RAM:
        issues.append(AttributeIssue("ram", f"ram must be at least: {MIN_RAM}"))
    if spec.ram > MAX_RAM:
        issues.append(AttributeIssue("ram", f"ram cannot be greater than: {MAX_RAM}"))
    if spec.screen_density < MIN_LCD_DENSITY:
        issues.append(
            AttributeIssue("screen_density", f"density must be at least: {MIN_LCD_DENSITY}")
        )
    if spec.cache < MIN_CACHE:
        issues.append(AttributeIssue("cache", f"cache must be at least: {MIN_CACHE}"))
    if spec.vm_heap < MIN_VM_HEAP:
        issues.append(AttributeIssue("vm_heap", f"vm heap must be at least: {MIN_VM_HEAP}"))

    return issues
