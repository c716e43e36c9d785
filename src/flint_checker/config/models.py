"""Pydantic models for Flint configuration.

These models validate and type the JSON configuration file that sets
check timeouts, validator switches and where policy filters live.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, RootModel


# ---------------------------------------------------------------------------
# Timeouts
# ---------------------------------------------------------------------------


class TimeoutSettings(BaseModel):
    """Per-task timeouts in whole seconds."""

    wellformedness_seconds: int = Field(default=30, ge=1)
    drm_seconds: int = Field(default=30, ge=1)
    policy_seconds: int = Field(default=60, ge=1)


# ---------------------------------------------------------------------------
# Format specific switches
# ---------------------------------------------------------------------------


class PdfSettings(BaseModel):
    """Switches for the PDF checker."""

    enable_pdfplumber: bool = Field(
        default=True,
        description="Run the pdfplumber parse as part of the well-formedness check.",
    )


class EpubSettings(BaseModel):
    """Switches for the EPUB checker."""

    font_obfuscation_is_drm: bool = Field(
        default=False,
        description="Treat IDPF/Adobe font obfuscation in encryption.xml as DRM.",
    )


class PolicySettings(BaseModel):
    """Where per-format pattern filters are read from."""

    policy_dir: Optional[Path] = Field(
        default=None,
        description="Directory holding <FORMAT>-policy.json filter files.",
    )


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class FlintConfig(BaseModel):
    """Root configuration model."""

    timeouts: TimeoutSettings = Field(default_factory=TimeoutSettings)
    pdf: PdfSettings = Field(default_factory=PdfSettings)
    epub: EpubSettings = Field(default_factory=EpubSettings)
    policy: PolicySettings = Field(default_factory=PolicySettings)


class PolicyFilterFile(RootModel[dict[str, bool]]):
    """Contents of a ``<FORMAT>-policy.json`` file: pattern name → enabled."""

    def enabled_patterns(self) -> list[str]:
        return [name for name, enabled in self.root.items() if enabled]

    def disabled_patterns(self) -> list[str]:
        return [name for name, enabled in self.root.items() if not enabled]
