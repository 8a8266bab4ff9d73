"""
Test cases for dataframe_schema.py module
"""

import datetime as dt

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from topicnet.dataframe_schema import (
    CentralitySchema,
    DocumentSchema,
    EdgeSchema,
    TopologySchema,
    empty_frame,
    frame_from_records,
)


class TestDocumentSchema:

    def test_colnames(self):
        assert DocumentSchema.all_colnames() == ["doc_id", "date", "time_rank", "tokens"]

    def test_extractors(self):
        entry = {"id": " 17 ", "date": "2020-03-04T12:00:00", "tokens": "alpha beta"}
        assert DocumentSchema.DOC_ID.get_extractor()(entry) == "17"
        assert DocumentSchema.DATE.get_extractor()(entry) == dt.date(2020, 3, 4)
        assert DocumentSchema.TOKENS.get_extractor()(entry) == ("alpha", "beta")

    def test_token_list_kept(self):
        assert DocumentSchema.TOKENS.get_extractor()({"tokens": ["a", "b"]}) == ("a", "b")

    def test_missing_date(self):
        assert DocumentSchema.DATE.get_extractor()({"doc_id": "x"}) is None


class TestDerivedTables:

    def test_empty_frame_keeps_columns_and_dtypes(self):
        df = empty_frame(TopologySchema)
        assert df.empty
        assert df.columns.tolist() == TopologySchema.all_colnames()
        assert str(df["diameter"].dtype) == "int64"
        assert str(df["density"].dtype) == "float64"

    def test_frame_from_records(self):
        records = [{"topic_b": "t1", "topic_a": "t0", "correlation": 0.5, "time_window": 2}]
        df = frame_from_records(records, EdgeSchema)
        assert df.columns.tolist() == ["topic_a", "topic_b", "correlation", "time_window"]
        assert df.iloc[0]["topic_a"] == "t0"

    def test_frame_from_no_records(self):
        df = frame_from_records([], CentralitySchema)
        assert df.empty
        assert df.columns.tolist() == CentralitySchema.all_colnames()
