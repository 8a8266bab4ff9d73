"""
Corpus interface for topicnet.

Holds tokenized, time-stamped documents together with the gensim dictionary and bag-of-words
representation consumed by the topic fitting capability. Tokenization and text cleaning happen
upstream; this module only ranks document dates into time windows and (optionally) prunes the
vocabulary by document frequency.
"""

import logging
from typing import List, NamedTuple, Optional, Sequence, Tuple

import pandas as pd
from gensim import corpora
from gensim.matutils import corpus2csc

from .dataframe_schema import DocumentSchema
from .exceptions import InvalidArgument

logger = logging.getLogger(__name__)

# Window frequency -> pandas period alias
WINDOW_FREQUENCIES = {
    'year': 'Y',
    'quarter': 'Q',
    'month': 'M',
    'day': 'D',
}


class Document(NamedTuple):
    """Single tokenized document. Immutable once handed to the trainer."""
    doc_id: str
    time_rank: int
    tokens: Tuple[str, ...]


def dense_time_rank(dates, window_frequency: str = 'year') -> pd.Series:
    """
    Bucket dates at the requested frequency and dense-rank the buckets, starting at 1.

    Documents sharing a bucket share a rank, and consecutive non-empty buckets get consecutive ranks.
    """
    if window_frequency not in WINDOW_FREQUENCIES:
        raise InvalidArgument(
            f"Unknown window frequency '{window_frequency}'. "
            f"Legal values: {sorted(WINDOW_FREQUENCIES)}"
        )
    dates = pd.to_datetime(pd.Series(dates))
    if dates.isna().any():
        raise InvalidArgument(f"{int(dates.isna().sum())} document(s) have no parsable date")
    periods = dates.dt.to_period(WINDOW_FREQUENCIES[window_frequency])
    ordinals = periods.map(lambda p: p.ordinal)
    return ordinals.rank(method='dense').astype(int)


class Corpus:
    """
    Ordered collection of tokenized documents with a gensim dictionary and BOW corpus.

    Vocabulary pruning follows gensim's Dictionary.filter_extremes; pass no_below / no_above / keep_n
    to enable it, leave them as None to keep every token.
    """

    def __init__(self,
                 documents: Sequence[Document],
                 dates: Optional[Sequence] = None,
                 no_below: Optional[int] = None,
                 no_above: Optional[float] = None,
                 keep_n: Optional[int] = None):
        if not documents:
            raise InvalidArgument("Corpus needs at least one document")
        self.documents: Tuple[Document, ...] = tuple(
            doc if isinstance(doc, Document) else Document(*doc) for doc in documents
        )
        doc_ids = [doc.doc_id for doc in self.documents]
        if len(set(doc_ids)) != len(doc_ids):
            raise InvalidArgument("Document ids must be unique")
        self.dates = None if dates is None else list(dates)

        self.dictionary = corpora.Dictionary(self.texts)
        self.stats_log = {'vocab_initial': len(self.dictionary)}
        if any(arg is not None for arg in (no_below, no_above, keep_n)):
            self.dictionary.filter_extremes(
                no_below=no_below if no_below is not None else 1,
                no_above=no_above if no_above is not None else 1.0,
                keep_n=keep_n,
            )
            logger.info(
                f"Vocabulary pruned from {self.stats_log['vocab_initial']} to {len(self.dictionary)} tokens"
            )
        self.stats_log['vocab_filtered'] = len(self.dictionary)
        self.bow = [self.dictionary.doc2bow(list(doc.tokens)) for doc in self.documents]

    @classmethod
    def from_dataframe(cls,
                       df: pd.DataFrame,
                       id_col: str = DocumentSchema.DOC_ID.colname,
                       date_col: str = DocumentSchema.DATE.colname,
                       tokens_col: str = DocumentSchema.TOKENS.colname,
                       window_frequency: str = 'year',
                       **prune_kwargs) -> 'Corpus':
        """Build a corpus from a dataframe with id, date and token-list columns."""
        missing = [col for col in (id_col, date_col, tokens_col) if col not in df.columns]
        if missing:
            raise InvalidArgument(f"Missing document column(s): {missing}")
        ranks = dense_time_rank(df[date_col].reset_index(drop=True), window_frequency)
        documents = [
            Document(str(doc_id), int(rank), tuple(tokens))
            for doc_id, rank, tokens in zip(df[id_col], ranks, df[tokens_col])
        ]
        return cls(documents, dates=pd.to_datetime(df[date_col]).tolist(), **prune_kwargs)

    @classmethod
    def from_records(cls, entries, window_frequency: str = 'year', **prune_kwargs) -> 'Corpus':
        """Build a corpus from raw dict entries using the DocumentSchema extractors."""
        fields = (DocumentSchema.DOC_ID, DocumentSchema.DATE, DocumentSchema.TOKENS)
        df = pd.DataFrame([
            {field.colname: field.get_extractor()(entry) for field in fields}
            for entry in entries
        ])
        return cls.from_dataframe(df, window_frequency=window_frequency, **prune_kwargs)

    def __len__(self):
        return len(self.documents)

    def __iter__(self):
        return iter(self.documents)

    @property
    def doc_ids(self) -> List[str]:
        return [doc.doc_id for doc in self.documents]

    @property
    def time_ranks(self) -> List[int]:
        return [doc.time_rank for doc in self.documents]

    @property
    def texts(self) -> List[List[str]]:
        return [list(doc.tokens) for doc in self.documents]

    @property
    def vocabulary(self) -> List[str]:
        return [self.dictionary[i] for i in range(len(self.dictionary))]

    def document_term_matrix(self):
        """Sparse (n_documents, n_terms) count matrix."""
        return corpus2csc(self.bow, num_terms=len(self.dictionary)).T.tocsr()

    def to_frame(self) -> pd.DataFrame:
        """Document metadata table (doc_id, time_rank and date when known)."""
        df = pd.DataFrame({
            DocumentSchema.DOC_ID.colname: self.doc_ids,
            DocumentSchema.TIME_RANK.colname: self.time_ranks,
        })
        if self.dates is not None:
            df[DocumentSchema.DATE.colname] = pd.to_datetime(pd.Series(self.dates))
        return df

    def window_table(self) -> pd.DataFrame:
        """
        One canonical row per time window.

        The representative document of a window is the earliest one by date, ties broken by the
        smallest doc_id. Columns: time_rank, doc_id (representative), date (when known), n_documents.
        """
        df = self.to_frame()
        rank_col = DocumentSchema.TIME_RANK.colname
        sort_cols = [rank_col]
        if DocumentSchema.DATE.colname in df.columns:
            sort_cols.append(DocumentSchema.DATE.colname)
        sort_cols.append(DocumentSchema.DOC_ID.colname)

        ordered = df.sort_values(sort_cols, kind='mergesort')
        representatives = ordered.groupby(rank_col, sort=True).head(1).set_index(rank_col)
        representatives['n_documents'] = df.groupby(rank_col).size()
        return representatives.reset_index()
