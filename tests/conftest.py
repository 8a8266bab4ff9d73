"""
Shared fixtures: a small synthetic corpus with three vocabulary themes spread over three years
"""

import datetime as dt

import numpy as np
import pandas as pd
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from topicnet.corpus import Corpus

THEMES = [
    ["network", "graph", "node", "edge", "path", "cluster", "degree", "walk"],
    ["protein", "cell", "gene", "enzyme", "tissue", "membrane", "dna", "virus"],
    ["market", "price", "trade", "stock", "bond", "yield", "credit", "bank"],
]


def make_documents_df(n_docs=30, years=(2019, 2020, 2021), seed=0):
    """Documents alternate between themes; each borrows a few words from the next theme."""
    rng = np.random.RandomState(seed)
    rows = []
    for i in range(n_docs):
        theme = THEMES[i % len(THEMES)]
        other = THEMES[(i + 1) % len(THEMES)]
        tokens = [str(t) for t in rng.choice(theme, size=12)] + [str(t) for t in rng.choice(other, size=3)]
        year = years[i * len(years) // n_docs]
        rows.append({
            "doc_id": f"d{i:02d}",
            "date": dt.date(year, 1 + (i % 12), 1),
            "tokens": tokens,
        })
    return pd.DataFrame(rows)


@pytest.fixture
def documents_df():
    return make_documents_df()


@pytest.fixture
def corpus(documents_df):
    return Corpus.from_dataframe(documents_df)


@pytest.fixture
def small_corpus():
    """Ten documents, enough for K=2 and K=5 but not K=50"""
    return Corpus.from_dataframe(make_documents_df(n_docs=10))
