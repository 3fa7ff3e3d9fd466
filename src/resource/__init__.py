"""Resource and metadata types for build artifacts.

A Resource pairs an artifact payload with string metadata fields. The
dependency graph does not depend on these types; the build pipeline attaches
them to the artifacts it tracks.
"""

from src.resource.metadata import Metadata, Resource, get_data, get_metadata

__all__ = ["Metadata", "Resource", "get_data", "get_metadata"]
