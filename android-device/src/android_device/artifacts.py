"""Artifact references used while lowering a device target.

An artifact has two path conventions:

* the *exec path*, relative to the execution root, used by actions that run
  during the build (e.g. `bazel-out/k8-fastbuild/bin/tools/adb`);
* the *runfiles path*, relative to the runfiles tree of an executable, used by
  scripts that run later (e.g. `tools/adb`).

Source artifacts share both paths; generated artifacts live under an output
root that only appears in the exec path.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Iterable, Tuple


@dataclass(frozen=True)
class ArtifactRef:
    exec_path: str
    runfiles_path: str
    is_source: bool = True

    @classmethod
    def source(cls, path: str) -> "ArtifactRef":
        path = str(PurePosixPath(path))
        return cls(exec_path=path, runfiles_path=path, is_source=True)

    @classmethod
    def derived(cls, root: str, path: str) -> "ArtifactRef":
        rel = PurePosixPath(path)
        return cls(
            exec_path=str(PurePosixPath(root) / rel),
            runfiles_path=str(rel),
            is_source=False,
        )

    @property
    def basename(self) -> str:
        return PurePosixPath(self.exec_path).name

    @property
    def exec_dir(self) -> str:
        return str(PurePosixPath(self.exec_path).parent)


@dataclass(frozen=True)
class FileGroup:
    """A labelled, ordered group of files (e.g. a system image filegroup)."""

    label: str
    files: Tuple[ArtifactRef, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ExecutableBundle:
    """An executable plus everything it needs at run time."""

    executable: ArtifactRef
    files_to_run: Tuple[ArtifactRef, ...] = field(default_factory=tuple)


def join_exec_paths(delimiter: str, artifacts: Iterable[ArtifactRef]) -> str:
    return delimiter.join(a.exec_path for a in artifacts)


def join_runfiles_paths(delimiter: str, artifacts: Iterable[ArtifactRef]) -> str:
    return delimiter.join(a.runfiles_path for a in artifacts)


def stable_unique(artifacts: Iterable[ArtifactRef]) -> Tuple[ArtifactRef, ...]:
    """Drop repeated artifacts, keeping the first occurrence."""

    seen: set[ArtifactRef] = set()
    out: list[ArtifactRef] = []
    for artifact in artifacts:
        if artifact in seen:
            continue
        seen.add(artifact)
        out.append(artifact)
    return tuple(out)
