"""
Distribution extraction for fitted topic models.

Reads the document-topic or topic-word probability matrix of a selected model and reshapes it into a
long table. Also builds the wide document-topic table that feeds topic association.
"""

from enum import Enum

import numpy as np
import pandas as pd

from .dataframe_schema import DocumentSchema
from .exceptions import InvalidArgument


class DistributionKind(Enum):
    DOCUMENT_TOPIC = 'document-topic'
    TOPIC_WORD = 'topic-word'

    @classmethod
    def parse(cls, value) -> 'DistributionKind':
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            legal = " or ".join(f"'{m.value}'" for m in cls)
            raise InvalidArgument(f"Unknown distribution kind {value!r}, expected {legal}") from None


def _long_document_topic(model) -> pd.DataFrame:
    theta = model.get_document_topic_distributions()
    n_docs, k = theta.shape
    return pd.DataFrame({
        'document': np.repeat(np.asarray(model.doc_ids, dtype=object), k),
        'topic': np.tile(np.arange(k), n_docs),
        'probability': theta.ravel(),
    })


def _long_topic_word(model) -> pd.DataFrame:
    phi = model.get_topic_word_distributions()
    k, n_terms = phi.shape
    return pd.DataFrame({
        'topic': np.repeat(np.arange(k), n_terms),
        'word': np.tile(np.asarray(model.vocabulary, dtype=object), k),
        'probability': phi.ravel(),
    })


_EXTRACTORS = {
    DistributionKind.DOCUMENT_TOPIC: _long_document_topic,
    DistributionKind.TOPIC_WORD: _long_topic_word,
}
if set(_EXTRACTORS) != set(DistributionKind):
    raise RuntimeError(f"No extractor for {set(DistributionKind) - set(_EXTRACTORS)}")


def extract(model, kind) -> pd.DataFrame:
    """
    Long-form probability table of a fitted model.

    Args:
        model: TopicModel
        kind: DistributionKind, or its value 'document-topic' / 'topic-word'

    Returns:
        DataFrame with columns (document, topic, probability) or (topic, word, probability)

    Raises:
        InvalidArgument: kind is neither 'document-topic' nor 'topic-word'
    """
    return _EXTRACTORS[DistributionKind.parse(kind)](model)


def topic_columns(k: int, prefix: str = 'topic_'):
    return [f"{prefix}{i}" for i in range(k)]


def document_topic_frame(model, corpus, prefix: str = 'topic_') -> pd.DataFrame:
    """
    Wide document-topic table: doc_id, time_rank, then one probability column per topic.

    The model must have been fitted on this corpus (same documents, same order).
    """
    if tuple(model.doc_ids) != tuple(corpus.doc_ids):
        raise InvalidArgument("Model and corpus documents differ; fit the model on this corpus")
    theta = model.get_document_topic_distributions()
    df = pd.DataFrame(theta, columns=topic_columns(model.get_num_topics(), prefix))
    df.insert(0, DocumentSchema.TIME_RANK.colname, corpus.time_ranks)
    df.insert(0, DocumentSchema.DOC_ID.colname, corpus.doc_ids)
    return df
