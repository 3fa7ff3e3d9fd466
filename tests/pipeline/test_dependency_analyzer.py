"""Unit tests for DependencyAnalyzer.

Tests cover:
- Cycle checks escalated to CycleDetectedError
- Transitive dependencies and dependents
- Out-of-date computation for incremental builds
"""

import pytest

from src.graph.directed_graph import DirectedGraph
from src.pipeline.dependency_analyzer import CycleDetectedError, DependencyAnalyzer


@pytest.fixture
def site_analyzer() -> DependencyAnalyzer:
    """Fixture providing a small static site dependency graph."""
    return DependencyAnalyzer.from_dependencies(
        {
            "index.html": {"posts/a.html", "posts/b.html", "templates/index.html"},
            "posts/a.html": {"posts/a.md", "templates/post.html"},
            "posts/b.html": {"posts/b.md", "templates/post.html"},
            "templates/post.html": {"templates/base.html"},
            "templates/index.html": {"templates/base.html"},
            "posts/a.md": set(),
            "posts/b.md": set(),
            "templates/base.html": set(),
        },
    )


class TestCycleCheck:
    """Test escalation of cycles."""

    def test_check_passes_for_acyclic_graph(self, site_analyzer):
        """Test that an acyclic graph passes the check."""
        site_analyzer.check()

        assert site_analyzer.find_cycle() is None

    def test_check_raises_on_cycle(self):
        """Test that a cycle is reported as a fatal error."""
        analyzer = DependencyAnalyzer.from_dependencies({"a": {"b"}, "b": {"a"}})

        with pytest.raises(CycleDetectedError) as exc_info:
            analyzer.check()

        assert exc_info.value.cycle == ["a", "b"]
        assert "Cycle detected in dependency graph: a -> b -> a" in str(exc_info.value)

    def test_check_raises_on_self_dependency(self):
        """Test that an artifact depending on itself is rejected."""
        analyzer = DependencyAnalyzer.from_dependencies({"a": {"a"}})

        with pytest.raises(CycleDetectedError, match="a -> a"):
            analyzer.check()


class TestTransitiveQueries:
    """Test dependency and dependent lookups."""

    def test_dependencies_of(self, site_analyzer):
        """Test transitive dependencies of an artifact."""
        assert site_analyzer.dependencies_of("posts/a.html") == frozenset(
            {"posts/a.md", "templates/post.html", "templates/base.html"},
        )

    def test_dependencies_of_leaf(self, site_analyzer):
        """Test that a source artifact has no dependencies."""
        assert site_analyzer.dependencies_of("posts/a.md") == frozenset()

    def test_dependents_of(self, site_analyzer):
        """Test transitive dependents of an artifact."""
        assert site_analyzer.dependents_of("templates/post.html") == frozenset(
            {"posts/a.html", "posts/b.html", "index.html"},
        )

    def test_dependents_of_unknown_artifact(self, site_analyzer):
        """Test that unknown artifacts have no dependents."""
        assert site_analyzer.dependents_of("unknown") == frozenset()

    def test_dependents_graph_is_reversed(self):
        """Test that the dependents graph flips every edge."""
        analyzer = DependencyAnalyzer(DirectedGraph.from_list([("page", {"template"})]))

        assert analyzer.dependents.to_list() == [("template", frozenset({"page"}))]


class TestOutOfDate:
    """Test incremental rebuild computation."""

    def test_changed_source_invalidates_dependents(self, site_analyzer):
        """Test that changing a post rebuilds its page and the index."""
        assert site_analyzer.out_of_date({"posts/a.md"}) == frozenset(
            {"posts/a.md", "posts/a.html", "index.html"},
        )

    def test_changed_base_template_invalidates_everything_built_on_it(self, site_analyzer):
        """Test that a shared template invalidates all pages."""
        stale = site_analyzer.out_of_date({"templates/base.html"})

        assert stale == frozenset(
            {
                "templates/base.html",
                "templates/post.html",
                "templates/index.html",
                "posts/a.html",
                "posts/b.html",
                "index.html",
            },
        )

    def test_modified_artifacts_always_included(self, site_analyzer):
        """Test that modified artifacts are out of date even without dependents."""
        assert site_analyzer.out_of_date({"index.html"}) == frozenset({"index.html"})

    def test_nothing_modified(self, site_analyzer):
        """Test that no changes mean nothing to rebuild."""
        assert site_analyzer.out_of_date([]) == frozenset()

    def test_accepts_any_iterable(self, site_analyzer):
        """Test that modified artifacts can be given as a generator."""
        stale = site_analyzer.out_of_date(name for name in ["posts/b.md"])

        assert "posts/b.html" in stale
