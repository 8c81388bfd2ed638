"""endorctl-action - provisions and runs the Endor Labs endorctl CLI in CI jobs."""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "1.1.0"
