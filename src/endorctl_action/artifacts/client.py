"""Artifact storage clients."""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol

from endorctl_action.core.environment import ExecutionEnvironment

ARTIFACT_DIR_ENV = "ENDOR_ARTIFACT_DIR"


class ArtifactError(Exception):
    """An artifact could not be stored."""

    pass


@dataclass(frozen=True)
class UploadResult:
    """Identifier and total size of an uploaded artifact."""

    id: str
    size: int


class ArtifactClient(Protocol):
    """Storage for job artifacts."""

    def exists(self, name: str) -> bool:
        """Whether an artifact with this name already exists."""
        ...

    def upload(self, name: str, files: List[Path], root_directory: Path) -> UploadResult:
        """Store files under an artifact name.

        Raises:
            ArtifactError: If any file could not be stored.
        """
        ...


class DirectoryArtifactClient:
    """Artifact client storing each artifact as a directory.

    Files keep their path relative to the upload root directory.
    """

    def __init__(self, root: Path) -> None:
        self._root = root

    @classmethod
    def for_environment(
        cls, env: ExecutionEnvironment, artifact_dir: Optional[str] = None
    ) -> "DirectoryArtifactClient":
        """Client rooted at ENDOR_ARTIFACT_DIR or ``{temp_dir}/artifacts``."""
        configured = artifact_dir if artifact_dir is not None else os.environ.get(ARTIFACT_DIR_ENV)
        root = Path(configured) if configured else env.temp_dir / "artifacts"
        return cls(root)

    @property
    def root(self) -> Path:
        return self._root

    def exists(self, name: str) -> bool:
        return (self._root / name).exists()

    def upload(self, name: str, files: List[Path], root_directory: Path) -> UploadResult:
        destination = self._root / name
        size = 0
        try:
            destination.mkdir(parents=True, exist_ok=False)
            for file in files:
                relative = file.resolve().relative_to(root_directory.resolve())
                target = destination / relative
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(file, target)
                size += target.stat().st_size
        except (OSError, ValueError) as e:
            raise ArtifactError(f"Failed to store artifact {name}: {e}") from e
        return UploadResult(id=name, size=size)
