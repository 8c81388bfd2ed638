"""Scan result artifacts."""

from endorctl_action.artifacts.client import (
    ArtifactClient,
    ArtifactError,
    DirectoryArtifactClient,
    UploadResult,
)
from endorctl_action.artifacts.exporter import ArtifactExporter

__all__ = [
    "ArtifactClient",
    "ArtifactError",
    "ArtifactExporter",
    "DirectoryArtifactClient",
    "UploadResult",
]
