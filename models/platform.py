"""
Platform definitions shared by the prompt builder and the response shaper.
"""

from enum import Enum
from dataclasses import dataclass


class Platform(Enum):
    """Supported social media platforms."""

    LINKEDIN = "linkedin"
    X = "x"
    INSTAGRAM = "instagram"


@dataclass(frozen=True)
class PlatformConfig:
    """Platform-specific configuration."""

    name: str
    max_length: int
    max_tokens: int
    tag: str


PLATFORM_CONFIGS = {
    Platform.LINKEDIN: PlatformConfig(
        name="LinkedIn",
        max_length=3000,
        max_tokens=700,
        tag="LINKEDIN",
    ),
    Platform.X: PlatformConfig(
        name="X",
        max_length=280,
        max_tokens=120,
        tag="X",
    ),
    Platform.INSTAGRAM: PlatformConfig(
        name="Instagram",
        max_length=2200,
        max_tokens=500,
        tag="INSTAGRAM",
    ),
}

# Order used whenever several platforms are listed or rendered together
PLATFORM_ORDER = (Platform.LINKEDIN, Platform.X, Platform.INSTAGRAM)

DUAL_PLATFORMS = (Platform.LINKEDIN, Platform.X)
ALL_PLATFORMS = PLATFORM_ORDER
