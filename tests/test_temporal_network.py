"""
Test cases for temporal_network.py module
"""

import itertools

import pandas as pd
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from topicnet.association import associate
from topicnet.dataframe_schema import CentralitySchema, EdgeSchema, TopologySchema
from topicnet.exceptions import EmptyResult, InvalidArgument
from topicnet.temporal_network import build_temporal_network, process_window, topic_prevalence

TOPICS = ["topic_0", "topic_1", "topic_2", "topic_3"]


def edge_frame(rows):
    return pd.DataFrame(rows, columns=EdgeSchema.all_colnames())


def prevalence_frame(windows, topics=TOPICS, value=1.0):
    return pd.DataFrame(
        [{"time_window": w, "topic": t, "prevalence": value} for w in windows for t in topics]
    )


@pytest.fixture
def edges():
    """Window 1 is a complete graph on four topics, window 2 a two-edge path, window 3 has no edges."""
    complete = [(a, b, 0.8, 1) for a, b in itertools.combinations(TOPICS, 2)]
    path = [("topic_0", "topic_1", 0.6, 2), ("topic_1", "topic_2", -0.7, 2)]
    return edge_frame(complete + path)


@pytest.fixture
def prevalence():
    return prevalence_frame([1, 2, 3])


class TestTopicPrevalence:
    """Test per-window prevalence sums"""

    def test_sums(self):
        table = pd.DataFrame({
            "time_rank": [1, 1, 2],
            "topic_0": [0.2, 0.4, 0.9],
            "topic_1": [0.8, 0.6, 0.1],
        })
        long = topic_prevalence(table, "time_rank", ["topic_0", "topic_1"])
        assert long.columns.tolist() == ["time_window", "topic", "prevalence"]
        assert len(long) == 4
        values = long.set_index(["time_window", "topic"])["prevalence"]
        assert values[(1, "topic_0")] == pytest.approx(0.6)
        assert values[(1, "topic_1")] == pytest.approx(1.4)
        assert values[(2, "topic_0")] == pytest.approx(0.9)

    def test_missing_column(self):
        with pytest.raises(InvalidArgument):
            topic_prevalence(pd.DataFrame({"time_rank": [1]}), "time_rank", ["topic_0"])


class TestProcessWindow:

    def test_empty_window_raises(self):
        with pytest.raises(EmptyResult):
            process_window(5, edge_frame([]), {})

    def test_self_loop_only_window_is_empty(self):
        with pytest.raises(EmptyResult):
            process_window(1, edge_frame([("topic_0", "topic_0", 1.0, 1)]), {"topic_0": 1.0})


class TestBuildTemporalNetwork:
    """Test the longitudinal centrality and topology tables"""

    def test_table_columns(self, prevalence, edges):
        centrality, topology = build_temporal_network(prevalence, edges)
        assert centrality.columns.tolist() == CentralitySchema.all_colnames()
        assert topology.columns.tolist() == TopologySchema.all_colnames()

    def test_windows_without_edges_contribute_no_rows(self, prevalence, edges):
        centrality, topology = build_temporal_network(prevalence, edges)
        assert topology["time_window"].tolist() == [1, 2]
        assert 3 not in set(centrality["time_window"])

    def test_only_edge_endpoints_are_nodes(self, prevalence, edges):
        centrality, topology = build_temporal_network(prevalence, edges)
        window_2 = centrality[centrality["time_window"] == 2]
        assert window_2["topic"].tolist() == ["topic_0", "topic_1", "topic_2"]
        assert topology.set_index("time_window").loc[2, "nodes"] == 3

    def test_complete_window_metrics(self, prevalence, edges):
        _, topology = build_temporal_network(prevalence, edges)
        window_1 = topology.set_index("time_window").loc[1]
        assert window_1["density"] == pytest.approx(1.0)
        assert window_1["edges"] == 6
        assert window_1["diameter"] == 1
        assert window_1["transitivity"] == pytest.approx(1.0)

    def test_path_window_metrics(self, prevalence, edges):
        centrality, topology = build_temporal_network(prevalence, edges)
        window_2 = topology.set_index("time_window").loc[2]
        assert window_2["diameter"] == 2
        assert window_2["radius"] == 1
        assert window_2["mean_distance"] == pytest.approx(8 / 6)
        middle = centrality[(centrality["time_window"] == 2) & (centrality["topic"] == "topic_1")].iloc[0]
        assert middle["degree"] == 2
        assert middle["strength"] == pytest.approx(1.3)

    def test_every_node_has_a_community(self, prevalence, edges):
        centrality, topology = build_temporal_network(prevalence, edges)
        assert not centrality["community"].isna().any()
        for window, rows in centrality.groupby("time_window"):
            assert rows["community"].nunique() == topology.set_index("time_window").loc[window, "communities"]

    def test_no_edges_gives_empty_tables(self, prevalence):
        centrality, topology = build_temporal_network(prevalence, edge_frame([]))
        assert centrality.empty and topology.empty
        assert centrality.columns.tolist() == CentralitySchema.all_colnames()
        assert topology.columns.tolist() == TopologySchema.all_colnames()

    def test_zero_correlation_window_contributes_no_rows(self):
        table = pd.DataFrame({"w": [1] * 4 + [2] * 4,
                              "A": [1, 2, 3, 4, 1, 2, 3, 4],
                              "B": [2, 4, 1, 3, 1, 2, 3, 4]})
        edges = associate(table, "w", ["A", "B"], min_assoc=0.0)
        assert edges.set_index("time_window").loc[1, "correlation"] == pytest.approx(0.0)

        centrality, topology = build_temporal_network(topic_prevalence(table, "w", ["A", "B"]), edges)
        assert topology["time_window"].tolist() == [2]
        assert set(centrality["time_window"]) == {2}

    def test_idempotent(self, prevalence, edges):
        first = build_temporal_network(prevalence, edges)
        second = build_temporal_network(prevalence, edges)
        pd.testing.assert_frame_equal(first[0], second[0])
        pd.testing.assert_frame_equal(first[1], second[1])

    def test_edge_order_does_not_matter(self, prevalence, edges):
        shuffled = edges.sample(frac=1.0, random_state=7).reset_index(drop=True)
        first = build_temporal_network(prevalence, edges)
        second = build_temporal_network(prevalence, shuffled)
        pd.testing.assert_frame_equal(first[0], second[0])
        pd.testing.assert_frame_equal(first[1], second[1])

    def test_missing_prevalence_is_tolerated(self, edges):
        centrality, _ = build_temporal_network(prevalence_frame([1]), edges)
        assert set(centrality["time_window"]) == {1, 2}

    def test_missing_edge_column(self, prevalence):
        with pytest.raises(InvalidArgument):
            build_temporal_network(prevalence, pd.DataFrame({"topic_a": [], "topic_b": []}))
