"""Secure download utilities with SSL certificate handling.

HTTPS requests verify against certifi's CA bundle so downloads behave the
same on self-hosted runners whose system certificate store is incomplete.
"""

from __future__ import annotations

import shutil
import ssl
import uuid
from pathlib import Path
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

import certifi

from endorctl_action import __version__
from endorctl_action.core.logging import get_logger

LOGGER = get_logger(__name__)

USER_AGENT = f"endorctl-action/{__version__}"


class DownloadError(Exception):
    """Error downloading a file."""

    pass


def get_ssl_context() -> ssl.SSLContext:
    """Get an SSL context that uses certifi's CA bundle."""
    return ssl.create_default_context(cafile=certifi.where())


def secure_urlopen(url: str, timeout: Optional[float] = 30.0):
    """Open a URL with proper SSL certificate verification.

    Args:
        url: The URL to open.
        timeout: Connection timeout in seconds.

    Returns:
        A file-like object for reading the response.

    Raises:
        URLError: If the URL cannot be opened.
        HTTPError: If the server answers with an error status.
        ValueError: If the URL is not HTTPS.
    """
    if not url.startswith("https://"):
        raise ValueError(
            f"Only HTTPS URLs are supported: {url}. "
            "Set the `api` input to an https:// Endor Labs API URL"
        )

    request = Request(url, headers={"User-Agent": USER_AGENT})
    return urlopen(request, timeout=timeout, context=get_ssl_context())  # nosec B310


def download_tool(url: str, dest_dir: Path, timeout: Optional[float] = 300.0) -> Path:
    """Download a file into a uniquely named file under dest_dir.

    The response is streamed to disk so large binaries are never held in
    memory.

    Args:
        url: The URL to download from.
        dest_dir: Directory that receives the downloaded file.
        timeout: Connection timeout in seconds.

    Returns:
        Path to the downloaded file.

    Raises:
        DownloadError: If the download fails.
    """
    dest_dir.mkdir(parents=True, exist_ok=True)
    dest_path = dest_dir / str(uuid.uuid4())
    LOGGER.debug(f"Downloading {url} to {dest_path}")

    try:
        with secure_urlopen(url, timeout=timeout) as response:
            total_size = response.getheader("Content-Length")
            if total_size:
                LOGGER.debug(f"Download size: {int(total_size) / 1024 / 1024:.1f} MB")
            with open(dest_path, "wb") as f:
                shutil.copyfileobj(response, f)
    except HTTPError as e:
        dest_path.unlink(missing_ok=True)
        raise DownloadError(f"Failed to download {url}: HTTP {e.code} - {e.reason}") from e
    except URLError as e:
        dest_path.unlink(missing_ok=True)
        raise DownloadError(
            f"Failed to download {url}: {e.reason}. Check your network connection."
        ) from e
    except (OSError, ValueError) as e:
        dest_path.unlink(missing_ok=True)
        raise DownloadError(f"Failed to download {url}: {e}") from e

    return dest_path
