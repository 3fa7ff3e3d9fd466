"""Build pipeline components driven by the artifact dependency graph.

This module contains the manifest loader, the DependencyAnalyzer used to
validate the configuration and compute out-of-date artifacts, and the
BuildScheduler that hands out artifacts in dependency order.
"""

from src.pipeline.dependency_analyzer import CycleDetectedError, DependencyAnalyzer
from src.pipeline.manifest import ArtifactSpec, BuildManifest
from src.pipeline.scheduler import BuildScheduler

__all__ = [
    "ArtifactSpec",
    "BuildManifest",
    "BuildScheduler",
    "CycleDetectedError",
    "DependencyAnalyzer",
]
