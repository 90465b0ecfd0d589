"""
Models package.

Request-scoped value objects and platform definitions. Nothing in Nashr is
persisted; ``models.generation`` holds the request/response types and is
imported directly to keep this package free of helper imports.
"""

from .platform import Platform, PlatformConfig, PLATFORM_CONFIGS

# Define __all__ to explicitly state what's available when importing from models
__all__ = ["Platform", "PlatformConfig", "PLATFORM_CONFIGS"]
