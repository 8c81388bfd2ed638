"""Latest endorctl version lookup.

Queries the Endor Labs API ``/meta/version`` endpoint for the current
endorctl release and its per-platform checksums.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from urllib.error import HTTPError

from endorctl_action.bootstrap.download import secure_urlopen
from endorctl_action.core.logging import get_logger

LOGGER = get_logger(__name__)


class MetadataError(Exception):
    """Error fetching or validating version metadata."""

    pass


class MetadataNetworkError(MetadataError):
    """The version endpoint could not be reached."""

    pass


class MetadataParseError(MetadataError):
    """The version endpoint returned a body that is not JSON."""

    pass


class MetadataValidationError(MetadataError):
    """The version endpoint returned JSON of the wrong shape."""

    pass


@dataclass
class VersionMetadata:
    """Version information published by the Endor Labs API.

    Attributes:
        service_version: Version of the API service.
        service_sha: Commit of the API service.
        client_version: Recommended endorctl version.
        client_checksums: SHA-256 digests keyed by ARCH_TYPE_* platform key.
    """

    service_version: str
    service_sha: str = ""
    client_version: str = ""
    client_checksums: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VersionMetadata":
        """Create from a validated API response.

        An empty ClientVersion falls back to the service version.
        """
        service = data["Service"]
        service_version = str(service.get("Version") or "")
        client_version = str(data.get("ClientVersion") or "") or service_version
        return cls(
            service_version=service_version,
            service_sha=str(service.get("SHA") or ""),
            client_version=client_version,
            client_checksums={
                str(key): str(value)
                for key, value in data["ClientChecksums"].items()
                if isinstance(value, str)
            },
        )


def is_version_response(value: Any) -> bool:
    """Check the structural shape of a version response."""
    return (
        isinstance(value, dict)
        and isinstance(value.get("Service"), dict)
        and isinstance(value.get("ClientChecksums"), dict)
    )


class VersionMetadataClient:
    """Client for the ``/meta/version`` endpoint of the Endor Labs API."""

    def __init__(
        self,
        api: str,
        timeout: float = 30.0,
        opener: Optional[Callable[..., Any]] = None,
    ) -> None:
        self._api = api.rstrip("/")
        self._timeout = timeout
        self._opener = opener or secure_urlopen

    @property
    def url(self) -> str:
        return f"{self._api}/meta/version"

    def fetch_latest(self) -> VersionMetadata:
        """Fetch the latest endorctl version and checksums.

        Makes a single request, without retries.

        Raises:
            MetadataNetworkError: If the API is unreachable.
            MetadataParseError: If the body is not valid JSON.
            MetadataValidationError: If the body lacks Service or ClientChecksums.
        """
        body = self._read_body()

        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise MetadataParseError(f"Invalid response from Endor Labs API: `{body}`") from e

        if not is_version_response(data):
            raise MetadataValidationError(f"Invalid response from Endor Labs API: `{body}`")

        metadata = VersionMetadata.from_dict(data)
        LOGGER.debug(
            f"Latest endorctl version {metadata.client_version} "
            f"(service {metadata.service_version})"
        )
        return metadata

    def _read_body(self) -> str:
        LOGGER.debug(f"Fetching {self.url}")
        try:
            with self._opener(self.url, timeout=self._timeout) as response:
                raw = response.read()
        except HTTPError as e:
            # An error status still carries a body; validation reports it.
            raw = e.read() if e.fp is not None else b""
        except (OSError, ValueError) as e:
            raise MetadataNetworkError(
                f"Failed to fetch latest version of endorctl from Endor Labs API: {e}"
            ) from e
        return raw.decode("utf-8", errors="replace")
