"""
Topic model fitting functions and utilities for topicnet.

This module wraps the statistical topic fitting capability (Gensim LDA) behind a small, immutable
TopicModel record, and provides the initialization strategies available to the trainer.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from gensim.models import LdaModel
from sklearn.decomposition import TruncatedSVD

from .exceptions import FitFailure, InvalidArgument

logger = logging.getLogger(__name__)


# ============================================================================
# Enums and Classes
# ============================================================================

class Initialization(Enum):
    """Initialization strategies for the topic-word distributions
    SPECTRAL: topic-word prior seeded from a truncated SVD of the document-term matrix.
    RANDOM: symmetric prior, topics drawn from the seeded random state."""
    SPECTRAL = 'spectral'
    RANDOM = 'random'

    @classmethod
    def parse(cls, value) -> 'Initialization':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidArgument(
                f"Unknown initialization '{value}'. Legal values: {[m.value for m in cls]}"
            ) from None


class TopicModel:
    """
    Fitted topic model for a single topic count K.

    Owns a document-topic matrix (n_documents, K) and a topic-word matrix (K, n_terms), both
    row-stochastic and read-only. Instances are created once by the trainer and never mutated.
    """

    def __init__(self,
                 k: int,
                 document_topic: np.ndarray,
                 topic_word: np.ndarray,
                 doc_ids: Sequence[str],
                 vocabulary: Sequence[str],
                 params: Optional[Dict[str, Any]] = None,
                 model: Optional[LdaModel] = None):
        document_topic = np.array(document_topic, dtype=np.float64)
        topic_word = np.array(topic_word, dtype=np.float64)
        if document_topic.shape != (len(doc_ids), k):
            raise ValueError(f"document_topic shape {document_topic.shape} != ({len(doc_ids)}, {k})")
        if topic_word.shape != (k, len(vocabulary)):
            raise ValueError(f"topic_word shape {topic_word.shape} != ({k}, {len(vocabulary)})")
        document_topic.setflags(write=False)
        topic_word.setflags(write=False)

        self._k = int(k)
        self._document_topic = document_topic
        self._topic_word = topic_word
        self._doc_ids = tuple(doc_ids)
        self._vocabulary = tuple(vocabulary)
        self._params = dict(params or {})
        self._model = model

    def __repr__(self):
        return f"TopicModel(k={self._k}, documents={len(self._doc_ids)}, terms={len(self._vocabulary)})"

    @property
    def k(self) -> int:
        return self._k

    def get_num_topics(self) -> int:
        return self._k

    @property
    def doc_ids(self):
        return self._doc_ids

    @property
    def vocabulary(self):
        return self._vocabulary

    @property
    def model(self) -> Optional[LdaModel]:
        """Underlying Gensim model, if the record was produced by fit_topic_model."""
        return self._model

    def get_document_topic_distributions(self) -> np.ndarray:
        """Array of shape (n_documents, n_topics) with document-topic probabilities"""
        return self._document_topic

    def get_topic_word_distributions(self) -> np.ndarray:
        """Array of shape (n_topics, n_words) with topic-word probabilities"""
        return self._topic_word

    def get_model_params(self) -> Dict[str, Any]:
        return {'n_topics': self._k, **self._params}

    def get_topic_terms(self, topic_id: int, topn: int = 10) -> List[tuple]:
        """
        Get top terms for a specific topic.

        Args:
            topic_id: Topic index
            topn: Number of top terms to return

        Returns:
            List of (term, probability) tuples
        """
        row = self._topic_word[topic_id]
        top = np.argsort(-row, kind='stable')[:topn]
        return [(self._vocabulary[i], float(row[i])) for i in top]


# ============================================================================
# Fitting
# ============================================================================

def normalize_rows(matrix: np.ndarray) -> np.ndarray:
    """Rescale each row to sum to 1. All-zero rows become uniform."""
    matrix = np.asarray(matrix, dtype=np.float64)
    sums = matrix.sum(axis=1, keepdims=True)
    uniform = np.full_like(matrix, 1.0 / matrix.shape[1]) if matrix.shape[1] else matrix
    with np.errstate(invalid='ignore', divide='ignore'):
        normalized = matrix / sums
    return np.where(sums > 0, normalized, uniform)


def spectral_topic_word_prior(doc_term_matrix, k: int, random_state: int = 42) -> np.ndarray:
    """
    Seed a (K, n_terms) Dirichlet prior for the topic-word distributions from a truncated SVD.

    The absolute loadings of the first K singular vectors are normalized per topic and spread over a
    symmetric base of 1/K, so the prior keeps mean mass 2/K per term and concentrates the extra mass on
    the terms each singular direction loads on.
    """
    n_terms = doc_term_matrix.shape[1]
    svd = TruncatedSVD(n_components=k, algorithm='randomized', random_state=random_state)
    svd.fit(doc_term_matrix.astype(np.float64))
    loadings = normalize_rows(np.abs(svd.components_))
    base = 1.0 / k
    return base * (1.0 + n_terms * loadings)


def fit_topic_model(corpus,
                    k: int,
                    em_iterations: int = 75,
                    initialization=Initialization.SPECTRAL,
                    passes: int = 1,
                    random_state: int = 42) -> TopicModel:
    """
    Fit one LDA model with k topics on the corpus.

    Each call builds its own Gensim model and prior, so calls for different k share no mutable state
    and can run concurrently.

    Raises:
        FitFailure: k is degenerate for the corpus, or the fit produced non-finite distributions.
    """
    initialization = Initialization.parse(initialization)
    n_docs = len(corpus)
    n_terms = len(corpus.dictionary)

    if k >= n_docs:
        raise FitFailure(k, f"K={k} must be smaller than the number of documents ({n_docs})")
    if n_terms == 0:
        raise FitFailure(k, "corpus vocabulary is empty")

    if initialization is Initialization.SPECTRAL:
        if k >= n_terms:
            raise FitFailure(k, f"spectral initialization needs K < vocabulary size ({n_terms})")
        eta = spectral_topic_word_prior(corpus.document_term_matrix(), k, random_state)
    else:
        eta = None

    logger.debug(f"Fitting LDA with K={k} ({initialization.value} init, {em_iterations} iterations)")
    lda = LdaModel(
        corpus=corpus.bow,
        id2word=corpus.dictionary,
        num_topics=k,
        iterations=em_iterations,
        passes=passes,
        alpha='symmetric',
        eta=eta,
        random_state=random_state,
    )

    # Extract topic-word distributions φ(k)
    topic_word = normalize_rows(lda.get_topics())

    # Extract document-topic distributions θ(d)
    document_topic = np.zeros((n_docs, k))
    for doc_idx, doc_bow in enumerate(corpus.bow):
        for topic_id, prob in lda.get_document_topics(doc_bow, minimum_probability=0.0):
            document_topic[doc_idx, topic_id] = prob
    document_topic = normalize_rows(document_topic)

    if not (np.isfinite(topic_word).all() and np.isfinite(document_topic).all()):
        raise FitFailure(k, "fit produced non-finite distributions")

    params = {
        'model_type': 'LDA_Gensim',
        'em_iterations': em_iterations,
        'initialization': initialization.value,
        'passes': passes,
        'random_state': random_state,
    }
    return TopicModel(k, document_topic, topic_word, corpus.doc_ids, corpus.vocabulary,
                      params=params, model=lda)
