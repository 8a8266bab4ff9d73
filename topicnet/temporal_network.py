"""
Temporal topic network construction.

Each time window is processed independently: the window's association edges become a weighted topic
graph, Infomap assigns communities, and node centrality plus whole-graph topology metrics are computed.
Window results are then concatenated into two longitudinal tables. Row order follows the time window
for readability only; content does not depend on processing order.
"""

import logging
from typing import Dict, Sequence, Tuple

import pandas as pd

from ._graph_driver import (
    assign_infomap_communities,
    build_topic_graph,
    centrality_suite,
    communities_from_labels,
    topology_suite,
)
from .dataframe_schema import (
    CentralitySchema,
    EdgeSchema,
    PrevalenceSchema,
    TopologySchema,
    frame_from_records,
)
from .exceptions import EmptyResult, InvalidArgument

logger = logging.getLogger(__name__)


def topic_prevalence(doc_topic_table: pd.DataFrame,
                     time_window_col: str,
                     topic_cols: Sequence[str]) -> pd.DataFrame:
    """
    Summed topic probability mass per time window, one row per (time_window, topic).

    Args:
        doc_topic_table: One row per document with a time window column and topic probability columns
        time_window_col: Name of the time window column
        topic_cols: Topic probability columns

    Returns:
        DataFrame with columns time_window, topic, prevalence
    """
    topic_cols = list(topic_cols)
    missing = [c for c in [time_window_col] + topic_cols if c not in doc_topic_table.columns]
    if missing:
        raise InvalidArgument(f"Missing column(s) in document-topic table: {missing}")

    sums = doc_topic_table.groupby(time_window_col, sort=True)[topic_cols].sum()
    long = sums.reset_index().melt(
        id_vars=time_window_col,
        value_vars=topic_cols,
        var_name=PrevalenceSchema.TOPIC.colname,
        value_name=PrevalenceSchema.PREVALENCE.colname,
    ).rename(columns={time_window_col: PrevalenceSchema.TIME_WINDOW.colname})
    return long[PrevalenceSchema.all_colnames()]


def _prevalence_by_window(prevalence_table: pd.DataFrame) -> Dict[object, Dict[object, float]]:
    missing = [c for c in PrevalenceSchema.all_colnames() if c not in prevalence_table.columns]
    if missing:
        raise InvalidArgument(f"Missing column(s) in prevalence table: {missing}")
    # Duplicate (window, topic) rows are summed into one canonical record
    grouped = prevalence_table.groupby(
        [PrevalenceSchema.TIME_WINDOW.colname, PrevalenceSchema.TOPIC.colname], sort=True
    )[PrevalenceSchema.PREVALENCE.colname].sum()
    by_window = {}
    for (time_window, topic), value in grouped.items():
        by_window.setdefault(time_window, {})[topic] = float(value)
    return by_window


def process_window(time_window,
                   window_edges: pd.DataFrame,
                   prevalence: Dict[object, float],
                   infomap_trials: int = 10,
                   random_state: int = 42) -> Tuple[list, dict]:
    """
    Build and analyse the topic graph of one time window.

    Returns:
        (centrality records, topology record) as dicts keyed by schema column names

    Raises:
        EmptyResult: the window has no retained edges
    """
    triples = window_edges[[
        EdgeSchema.TOPIC_A.colname, EdgeSchema.TOPIC_B.colname, EdgeSchema.CORRELATION.colname
    ]].itertuples(index=False, name=None)
    G = build_topic_graph(triples, prevalence)
    if G.number_of_edges() == 0:
        raise EmptyResult(time_window)

    labels = assign_infomap_communities(G, trials=infomap_trials, random_state=random_state)
    centrality = centrality_suite(G)
    topology = topology_suite(G, communities_from_labels(labels))

    centrality_records = [
        {
            CentralitySchema.TIME_WINDOW.colname: time_window,
            CentralitySchema.TOPIC.colname: node,
            CentralitySchema.COMMUNITY.colname: labels[node],
            **scores,
        }
        for node, scores in centrality.items()
    ]
    topology_record = {TopologySchema.TIME_WINDOW.colname: time_window, **topology}
    return centrality_records, topology_record


def build_temporal_network(prevalence_table: pd.DataFrame,
                           edges: pd.DataFrame,
                           infomap_trials: int = 10,
                           random_state: int = 42) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Per-window topic graphs aggregated into centrality and topology histories.

    Args:
        prevalence_table: Long prevalence table (time_window, topic, prevalence), see topic_prevalence()
        edges: Edge table from associate()
        infomap_trials: Infomap attempts per window
        random_state: Seed for community detection

    Returns:
        (centrality_table, topology_table). Windows without edges contribute no rows.
    """
    missing = [c for c in EdgeSchema.all_colnames() if c not in edges.columns]
    if missing:
        raise InvalidArgument(f"Missing column(s) in edge table: {missing}")
    prevalence = _prevalence_by_window(prevalence_table)

    centrality_records = []
    topology_records = []
    for time_window, window_edges in edges.groupby(EdgeSchema.TIME_WINDOW.colname, sort=True):
        try:
            window_centrality, window_topology = process_window(
                time_window, window_edges, prevalence.get(time_window, {}),
                infomap_trials=infomap_trials, random_state=random_state,
            )
        except EmptyResult as e:
            logger.debug(str(e))
            continue
        logger.info(
            f"Time window {time_window!r}: {window_topology['nodes']} topics, "
            f"{window_topology['edges']} edges, {window_topology['communities']} communities"
        )
        centrality_records.extend(window_centrality)
        topology_records.append(window_topology)

    centrality_table = frame_from_records(centrality_records, CentralitySchema)
    topology_table = frame_from_records(topology_records, TopologySchema)
    if len(centrality_table):
        centrality_table = centrality_table.sort_values(
            [CentralitySchema.TIME_WINDOW.colname, CentralitySchema.TOPIC.colname], kind='mergesort'
        ).reset_index(drop=True)
    return centrality_table, topology_table
