"""Tests for concurrency level computation."""

from stepgraph.core.graph import compute_levels, topological_sort


class TestComputeLevels:
    """Test suite for compute_levels."""

    def test_diamond(self, diamond_graph):
        """Test the diamond yields [{a}], [{b, c}], [{d}]."""
        levels = compute_levels(diamond_graph, topological_sort(diamond_graph))
        assert [set(level) for level in levels] == [{"a"}, {"b", "c"}, {"d"}]

    def test_levels_keep_order(self, diamond_graph):
        """Test steps within a level keep their topological order."""
        levels = compute_levels(diamond_graph, topological_sort(diamond_graph))
        assert levels[1] == ["b", "c"]

    def test_independent_steps_share_level(self):
        """Test steps without dependencies all land on level 0."""
        graph = {"a": [], "b": [], "c": []}
        assert compute_levels(graph, topological_sort(graph)) == [["a", "b", "c"]]

    def test_level_is_longest_path(self):
        """Test a step waits for its deepest dependency."""
        graph = {"a": [], "b": ["a"], "c": ["b"], "d": ["a", "c"], "e": []}
        levels = compute_levels(graph, topological_sort(graph))
        assert levels == [["a", "e"], ["b"], ["c"], ["d"]]

    def test_no_dependency_within_level(self):
        """Test no two steps of a level depend on each other."""
        graph = {
            "source": [],
            "config": [],
            "reader": ["source", "config"],
            "parser": ["reader"],
            "stats": ["reader"],
            "report": ["stats", "parser", "config"],
        }
        levels = compute_levels(graph, topological_sort(graph))
        level_of = {step: i for i, level in enumerate(levels) for step in level}
        for step, deps in graph.items():
            for dep in deps:
                assert level_of[dep] < level_of[step]
        assert sum(len(level) for level in levels) == len(graph)

    def test_empty(self):
        """Test an empty graph has no levels."""
        assert compute_levels({}, []) == []
