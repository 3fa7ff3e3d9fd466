"""Build manifest parsing with Pydantic.

A manifest declares the artifacts of a build, the artifacts each of them
depends on, and free-form string metadata. It is loaded from YAML or JSON
and turned into the dependency graph used by the rest of the pipeline.

Example manifest:

    artifacts:
      - id: templates/default.html
      - id: posts/hello.md
        dependencies: [templates/default.html]
        metadata:
          title: Hello
"""

from pathlib import Path

import structlog
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from src.graph.directed_graph import DirectedGraph
from src.resource.metadata import Metadata, Resource

logger = structlog.get_logger(__name__)


class ArtifactSpec(BaseModel):
    """Declaration of a single build artifact.

    Attributes:
        id: Unique artifact identifier (typically a path)
        dependencies: IDs of the artifacts this artifact depends on
        metadata: String metadata attached to the artifact
    """

    id: str = Field(description="Artifact identifier", min_length=1)
    dependencies: set[str] = Field(
        default_factory=set,
        description="Artifacts this artifact depends on",
    )
    metadata: dict[str, str] = Field(
        default_factory=dict,
        description="Metadata fields",
    )

    @field_validator("dependencies")
    @classmethod
    def validate_dependencies(cls, v: set[str]) -> set[str]:
        """Reject empty dependency identifiers.

        Args:
            v: The dependency IDs to validate

        Returns:
            The validated dependency IDs

        Raises:
            ValueError: If a dependency ID is empty
        """
        if any(not dep for dep in v):
            msg = "Dependency identifiers must not be empty"
            raise ValueError(msg)
        return v

    model_config = {"str_strip_whitespace": True}

    def to_resource(self) -> Resource["ArtifactSpec"]:
        """Wrap this declaration in a Resource carrying its metadata."""
        return Resource(Metadata(self.metadata), self)


class BuildManifest(BaseModel):
    """All artifacts of a build.

    Attributes:
        artifacts: Artifact declarations, IDs must be unique
    """

    artifacts: list[ArtifactSpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_ids(self) -> "BuildManifest":
        """Ensure no artifact is declared twice."""
        seen: set[str] = set()
        duplicates: set[str] = set()
        for artifact in self.artifacts:
            if artifact.id in seen:
                duplicates.add(artifact.id)
            seen.add(artifact.id)

        if duplicates:
            msg = f"Duplicate artifact IDs: {', '.join(sorted(duplicates))}"
            raise ValueError(msg)
        return self

    @classmethod
    def from_yaml(cls, path: str | Path) -> "BuildManifest":
        """Load a manifest from a YAML (or JSON) file.

        Args:
            path: Path to the manifest file

        Returns:
            Parsed and validated BuildManifest

        Raises:
            FileNotFoundError: If the manifest file doesn't exist
            ValueError: If the manifest is empty, malformed or invalid
        """
        manifest_path = Path(path)

        if not manifest_path.exists():
            msg = f"Manifest file not found: {manifest_path}"
            raise FileNotFoundError(msg)

        logger.info("loading_manifest", path=str(manifest_path))

        try:
            with manifest_path.open() as f:
                manifest_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.exception("yaml_parse_error", error=str(e), path=str(manifest_path))
            msg = f"Invalid YAML in manifest file: {e}"
            raise ValueError(msg) from e

        if not manifest_data:
            msg = "Manifest file is empty"
            raise ValueError(msg)

        if not isinstance(manifest_data, dict):
            msg = "Manifest must be a mapping with an 'artifacts' list"
            raise ValueError(msg)

        manifest = cls(**manifest_data)

        logger.info("manifest_loaded", artifact_count=len(manifest.artifacts))

        return manifest

    def to_graph(self) -> DirectedGraph[str]:
        """Build the artifact -> dependencies graph."""
        return DirectedGraph.from_list(
            (artifact.id, artifact.dependencies) for artifact in self.artifacts
        )

    def to_resources(self) -> dict[str, Resource[ArtifactSpec]]:
        """Map every artifact ID to a Resource wrapping its declaration."""
        return {artifact.id: artifact.to_resource() for artifact in self.artifacts}
