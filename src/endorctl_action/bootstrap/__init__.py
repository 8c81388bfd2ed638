"""
Bootstrap module for endorctl binary management.

This module handles:
- Platform resolution (runner OS + architecture → endorctl build)
- Latest version and checksum lookup
- Download, checksum verification and installation on PATH
"""

from endorctl_action.bootstrap.checksums import select_checksum, sha256_file
from endorctl_action.bootstrap.platform import PlatformInfo, get_platform_info, resolve_platform
from endorctl_action.bootstrap.provisioner import (
    BinaryProvisioner,
    ChecksumMismatchError,
    ProvisioningError,
    SetupSpec,
    UnsupportedPlatformError,
)
from endorctl_action.bootstrap.versions import MetadataError, VersionMetadata, VersionMetadataClient

__all__ = [
    "BinaryProvisioner",
    "ChecksumMismatchError",
    "MetadataError",
    "PlatformInfo",
    "ProvisioningError",
    "SetupSpec",
    "UnsupportedPlatformError",
    "VersionMetadata",
    "VersionMetadataClient",
    "get_platform_info",
    "resolve_platform",
    "select_checksum",
    "sha256_file",
]
