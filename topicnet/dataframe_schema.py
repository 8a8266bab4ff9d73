"""
dataframe_schema.py

Defines schemas (column formats) for the pandas dataframes flowing through topicnet
"""

from enum import Enum
from collections import namedtuple
import datetime as dt

import pandas as pd

# Each document column/field needs to defined in this format, with an extractor method
# The extractor method should perform basic minimal processing of the field
FieldDef = namedtuple("FieldDef", ["column_name", "extractor", "type"])

# Columns of derived tables carry no extractor, only a name and a dtype
ColumnDef = namedtuple("ColumnDef", ["column_name", "dtype"])


class _SchemaMixin:
    @property
    def colname(self):
        return self.value.column_name

    @classmethod
    def all_colnames(cls):
        return [field.colname for field in cls]

    @classmethod
    def all_fields(cls):
        return list(cls)


class DocumentSchema(_SchemaMixin, Enum):
    """
    Defines the document table handed over by the tokenizer
    """
    DOC_ID = FieldDef(
        "doc_id",
        lambda entry: str(entry.get("doc_id", entry.get("id", ""))).strip(),
        str
    )
    DATE = FieldDef(
        "date",
        lambda entry: (
            entry["date"] if isinstance(entry.get("date"), dt.date) else
            dt.date.fromisoformat(str(entry["date"])[:10]) if entry.get("date") else None
        ),
        dt.date
    )
    TIME_RANK = FieldDef("time_rank", lambda entry: None, int)
    TOKENS = FieldDef(
        "tokens",
        lambda entry: (
            tuple(entry.get("tokens", ()))
            if isinstance(entry.get("tokens"), (list, tuple)) else
            tuple(str(entry.get("tokens", "")).split())
        ),
        tuple
    )

    def get_extractor(self):
        return self.value.extractor


class EdgeSchema(_SchemaMixin, Enum):
    """Topic association edges, one row per retained unordered topic pair and time window"""
    TOPIC_A = ColumnDef("topic_a", "object")
    TOPIC_B = ColumnDef("topic_b", "object")
    CORRELATION = ColumnDef("correlation", "float64")
    TIME_WINDOW = ColumnDef("time_window", "object")


class PrevalenceSchema(_SchemaMixin, Enum):
    """Summed topic mass per time window"""
    TIME_WINDOW = ColumnDef("time_window", "object")
    TOPIC = ColumnDef("topic", "object")
    PREVALENCE = ColumnDef("prevalence", "float64")


class CentralitySchema(_SchemaMixin, Enum):
    """Per (time window, topic) community label and centrality scores"""
    TIME_WINDOW = ColumnDef("time_window", "object")
    TOPIC = ColumnDef("topic", "object")
    COMMUNITY = ColumnDef("community", "int64")
    DEGREE = ColumnDef("degree", "int64")
    STRENGTH = ColumnDef("strength", "float64")
    BETWEENNESS = ColumnDef("betweenness", "float64")
    CLOSENESS = ColumnDef("closeness", "float64")
    PAGERANK = ColumnDef("pagerank", "float64")


class TopologySchema(_SchemaMixin, Enum):
    """Whole-graph metrics, one row per time window"""
    TIME_WINDOW = ColumnDef("time_window", "object")
    EDGES = ColumnDef("edges", "int64")
    NODES = ColumnDef("nodes", "int64")
    DIAMETER = ColumnDef("diameter", "int64")
    RADIUS = ColumnDef("radius", "int64")
    MEAN_DISTANCE = ColumnDef("mean_distance", "float64")
    MODULARITY = ColumnDef("modularity", "float64")
    TRANSITIVITY = ColumnDef("transitivity", "float64")
    DENSITY = ColumnDef("density", "float64")
    COMMUNITIES = ColumnDef("communities", "int64")
    COMPONENTS = ColumnDef("components", "int64")


def empty_frame(schema):
    """Zero-row dataframe with the columns and dtypes of a derived-table schema."""
    return pd.DataFrame({field.colname: pd.Series(dtype=field.value.dtype) for field in schema})


def frame_from_records(records, schema):
    """Build a dataframe with schema column order from a list of dict records."""
    if not records:
        return empty_frame(schema)
    df = pd.DataFrame.from_records(records, columns=schema.all_colnames())
    return df.astype({field.colname: field.value.dtype for field in schema})
