"""Unit tests for build manifest parsing."""

import json
from pathlib import Path
from typing import Any

import pytest
import yaml
from pydantic import ValidationError

from src.pipeline.manifest import ArtifactSpec, BuildManifest
from src.resource.metadata import get_data, get_metadata


@pytest.fixture
def manifest_dict() -> dict[str, Any]:
    """Fixture providing a valid manifest dictionary."""
    return {
        "artifacts": [
            {"id": "templates/base.html"},
            {
                "id": "posts/hello.html",
                "dependencies": ["posts/hello.md", "templates/base.html"],
                "metadata": {"title": "Hello", "author": "Ada"},
            },
            {"id": "posts/hello.md"},
        ],
    }


@pytest.fixture
def manifest_file(tmp_path: Path, manifest_dict: dict[str, Any]) -> Path:
    """Fixture providing a temporary YAML manifest file."""
    path = tmp_path / "build.yaml"
    with path.open("w") as f:
        yaml.dump(manifest_dict, f)
    return path


class TestArtifactSpec:
    """Tests for ArtifactSpec model."""

    def test_defaults(self):
        """Test that dependencies and metadata default to empty."""
        spec = ArtifactSpec(id="a")

        assert spec.dependencies == set()
        assert spec.metadata == {}

    def test_dependencies_are_deduplicated(self):
        """Test that repeated dependencies collapse into a set."""
        spec = ArtifactSpec(id="a", dependencies=["b", "b", "c"])

        assert spec.dependencies == {"b", "c"}

    def test_whitespace_is_stripped(self):
        """Test that IDs are normalized."""
        spec = ArtifactSpec(id="  a  ", dependencies=[" b "])

        assert spec.id == "a"
        assert spec.dependencies == {"b"}

    def test_empty_id_rejected(self):
        """Test that an artifact needs an ID."""
        with pytest.raises(ValidationError):
            ArtifactSpec(id="")

    def test_empty_dependency_rejected(self):
        """Test that empty dependency IDs are rejected."""
        with pytest.raises(ValidationError, match="must not be empty"):
            ArtifactSpec(id="a", dependencies=["b", "  "])

    def test_to_resource(self):
        """Test wrapping a declaration in a Resource."""
        spec = ArtifactSpec(id="a", metadata={"title": "A"})

        resource = spec.to_resource()

        assert get_data(resource) is spec
        assert get_metadata("title", resource) == "A"


class TestBuildManifest:
    """Tests for BuildManifest model."""

    def test_duplicate_ids_rejected(self):
        """Test that each artifact may be declared once."""
        with pytest.raises(ValidationError, match="Duplicate artifact IDs: a"):
            BuildManifest(artifacts=[{"id": "a"}, {"id": "a"}, {"id": "b"}])

    def test_to_graph(self, manifest_dict):
        """Test converting the manifest into a dependency graph."""
        graph = BuildManifest(**manifest_dict).to_graph()

        assert graph.neighbours("posts/hello.html") == frozenset(
            {"posts/hello.md", "templates/base.html"},
        )
        assert graph.member("posts/hello.md")
        assert len(graph) == 3

    def test_to_resources(self, manifest_dict):
        """Test mapping artifacts to resources with metadata."""
        resources = BuildManifest(**manifest_dict).to_resources()

        assert sorted(resources) == ["posts/hello.html", "posts/hello.md", "templates/base.html"]
        assert get_metadata("author", resources["posts/hello.html"]) == "Ada"
        assert get_metadata("author", resources["posts/hello.md"]) is None


class TestLoading:
    """Tests for loading manifests from files."""

    def test_from_yaml(self, manifest_file):
        """Test loading a YAML manifest."""
        manifest = BuildManifest.from_yaml(manifest_file)

        assert [a.id for a in manifest.artifacts] == [
            "templates/base.html",
            "posts/hello.html",
            "posts/hello.md",
        ]

    def test_from_json(self, tmp_path, manifest_dict):
        """Test that JSON manifests are accepted."""
        path = tmp_path / "build.json"
        path.write_text(json.dumps(manifest_dict))

        manifest = BuildManifest.from_yaml(path)

        assert len(manifest.artifacts) == 3

    def test_missing_file(self, tmp_path):
        """Test that a missing manifest raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Manifest file not found"):
            BuildManifest.from_yaml(tmp_path / "missing.yaml")

    def test_empty_file(self, tmp_path):
        """Test that an empty manifest is rejected."""
        path = tmp_path / "build.yaml"
        path.write_text("")

        with pytest.raises(ValueError, match="empty"):
            BuildManifest.from_yaml(path)

    def test_invalid_yaml(self, tmp_path):
        """Test that malformed YAML is reported as ValueError."""
        path = tmp_path / "build.yaml"
        path.write_text("artifacts: [unclosed")

        with pytest.raises(ValueError, match="Invalid YAML"):
            BuildManifest.from_yaml(path)

    def test_top_level_list_rejected(self, tmp_path):
        """Test that the manifest must be a mapping."""
        path = tmp_path / "build.yaml"
        path.write_text("- id: a\n")

        with pytest.raises(ValueError, match="must be a mapping"):
            BuildManifest.from_yaml(path)
