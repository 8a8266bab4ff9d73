"""
Topic association within time windows.

For every time window the rank (Spearman) correlation between topic-probability columns is computed on
that window's documents only, and each unordered topic pair whose correlation magnitude reaches the
threshold is kept as an edge tagged with the window.
"""

import logging
from typing import FrozenSet, NamedTuple, Sequence

import numpy as np
import pandas as pd

from .dataframe_schema import EdgeSchema, empty_frame, frame_from_records
from .exceptions import EmptyResult, InvalidArgument
from .utils import validate_threshold

logger = logging.getLogger(__name__)


class TopicAssociationEdge(NamedTuple):
    topic_a: object
    topic_b: object
    correlation: float
    time_window: object


def rank_correlation(frame: pd.DataFrame) -> pd.DataFrame:
    """Topic-by-topic Spearman correlation matrix. Constant columns yield NaN entries."""
    return frame.corr(method='spearman')


def _window_edges(time_window, window_df, topic_cols, min_assoc, min_documents):
    """Edges of a single window. Raises EmptyResult when the window cannot or does not produce any."""
    if len(topic_cols) < 2:
        raise EmptyResult(time_window, "fewer than two topics")
    if len(window_df) < min_documents:
        raise EmptyResult(time_window, f"{len(window_df)} document(s), need {min_documents}")

    corr = rank_correlation(window_df[list(topic_cols)]).to_numpy()
    rows, cols = np.triu_indices(len(topic_cols), k=1)
    values = corr[rows, cols]
    keep = ~np.isnan(values) & (np.abs(values) >= min_assoc)
    if not keep.any():
        raise EmptyResult(time_window)

    return [
        {
            EdgeSchema.TOPIC_A.colname: topic_cols[i],
            EdgeSchema.TOPIC_B.colname: topic_cols[j],
            EdgeSchema.CORRELATION.colname: float(value),
            EdgeSchema.TIME_WINDOW.colname: time_window,
        }
        for i, j, value in zip(rows[keep], cols[keep], values[keep])
    ]


def associate(prevalence_table: pd.DataFrame,
              time_window_col: str,
              topic_cols: Sequence[str],
              min_assoc: float = 0.5,
              min_documents: int = 3) -> pd.DataFrame:
    """
    Per-window topic association edges.

    Args:
        prevalence_table: One row per document, a time window column and one probability column per topic
        time_window_col: Name of the time window column
        topic_cols: Topic columns; their order fixes topic_a < topic_b in the output
        min_assoc: Minimum absolute correlation for an edge to be kept
        min_documents: Windows with fewer documents yield no edges

    Returns:
        DataFrame with columns topic_a, topic_b, correlation, time_window (possibly empty)

    Raises:
        InvalidArgument: missing columns, duplicate topic columns, or negative/NaN min_assoc
    """
    min_assoc = validate_threshold(min_assoc)
    topic_cols = list(topic_cols)
    missing = [c for c in [time_window_col] + topic_cols if c not in prevalence_table.columns]
    if missing:
        raise InvalidArgument(f"Missing column(s) in prevalence table: {missing}")
    if len(set(topic_cols)) != len(topic_cols):
        raise InvalidArgument("Topic columns must be unique")
    if min_assoc > 1.0:
        logger.warning(f"min_assoc={min_assoc} exceeds 1, no correlation can qualify")

    records = []
    for time_window, window_df in prevalence_table.groupby(time_window_col, sort=True):
        try:
            window_records = _window_edges(time_window, window_df, topic_cols, min_assoc, min_documents)
        except EmptyResult as e:
            logger.debug(str(e))
            continue
        logger.debug(f"Time window {time_window!r}: {len(window_records)} edge(s)")
        records.extend(window_records)

    if not records:
        logger.info("No topic associations met the threshold in any time window")
        return empty_frame(EdgeSchema)

    edges = frame_from_records(records, EdgeSchema)
    logger.info(
        f"Retained {len(edges)} topic association(s) across "
        f"{edges[EdgeSchema.TIME_WINDOW.colname].nunique()} time window(s)"
    )
    return edges


def as_edge_set(edges: pd.DataFrame) -> FrozenSet[TopicAssociationEdge]:
    """Convert an edge table into a set of TopicAssociationEdge tuples."""
    return frozenset(
        TopicAssociationEdge(*row)
        for row in edges[EdgeSchema.all_colnames()].itertuples(index=False, name=None)
    )
