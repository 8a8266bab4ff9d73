"""
model_evaluation.py

Implements the per-topic quality signals used to compare candidate topic models fitted with different
numbers of topics: exclusivity and semantic coherence.

Exclusivity rewards topics whose most probable words are distinctive to that topic rather than shared
with other topics. It is computed in the FREX manner: each word is ranked within a topic both by its
share of the word's total mass across topics (exclusivity) and by its in-topic probability (frequency),
and the two empirical ranks are combined with a weighted harmonic mean.

Semantic coherence rewards topics whose top words co-occur in the same documents. We use the UMass
measure, which only needs document co-occurrence counts from the corpus the model was fitted on, so
coherence must always be computed against the fitting corpus.

Picking K usually means trading the two off: larger K tends to raise exclusivity and lower coherence.
"""
# ==============================================================================
# Imports
# ==============================================================================
import numpy as np
import pandas as pd
from gensim.models import CoherenceModel
from scipy.stats import rankdata


EPSILON = 1e-10

# ==============================================================================
# Primary Functions
# ==============================================================================
def top_word_ids(topic_word, num_words=10):
    """Indices of the num_words most probable words per topic, most probable first.

    :param topic_word: numpy ndarray size (K, V)
    :return: int ndarray size (K, min(num_words, V))
    """
    topic_word = np.asarray(topic_word)
    num_words = min(num_words, topic_word.shape[1])
    return np.argsort(-topic_word, axis=1, kind='stable')[:, :num_words]


def exclusivity(topic_word, num_words=10, frex_weight=0.7):
    """FREX-style exclusivity of each topic.

    For topic k and word w, with beta the topic-word matrix:
        ex(k, w)   = rank of beta[k, w] / sum_j beta[j, w] among all words of topic k, divided by V
        freq(k, w) = rank of beta[k, w] among all words of topic k, divided by V
        frex(k, w) = 1 / (frex_weight / ex(k, w) + (1 - frex_weight) / freq(k, w))
    and the exclusivity of topic k is the sum of frex(k, w) over its num_words top words.

    :param topic_word: numpy ndarray size (K, V), rows are word distributions
    :param num_words: number of top words per topic entering the score
    :param frex_weight: weight of the exclusivity rank in the harmonic mean, in [0, 1]
    :return: numpy ndarray of length K
    """
    if not 0.0 <= frex_weight <= 1.0:
        raise ValueError(f"frex_weight {frex_weight} is not a legal input")
    beta = np.asarray(topic_word, dtype=np.float64)
    n_terms = beta.shape[1]

    word_share = beta / np.maximum(beta.sum(axis=0, keepdims=True), EPSILON)
    ex = rankdata(word_share, axis=1) / n_terms
    freq = rankdata(beta, axis=1) / n_terms
    frex = 1.0 / (frex_weight / ex + (1.0 - frex_weight) / freq)

    top = top_word_ids(beta, num_words)
    return np.take_along_axis(frex, top, axis=1).sum(axis=1)


def semantic_coherence(model, corpus, num_words=10):
    """UMass semantic coherence of each topic against the corpus the model was fitted on.

    :param model: TopicModel exposing get_topic_terms
    :param corpus: topicnet Corpus, providing the dictionary and bag-of-words documents
    :param num_words: number of top words per topic entering the score
    :return: numpy ndarray of length K
    """
    num_words = min(num_words, len(corpus.dictionary))
    topics = [
        [term for term, _ in model.get_topic_terms(topic_id, topn=num_words)]
        for topic_id in range(model.get_num_topics())
    ]
    coherence_model = CoherenceModel(
        topics=topics,
        corpus=corpus.bow,
        dictionary=corpus.dictionary,
        coherence='u_mass',
        topn=num_words,
    )
    return np.asarray(coherence_model.get_coherence_per_topic(), dtype=np.float64)


def summarize_scores(candidates):
    """One row per evaluated topic count with the mean exclusivity and mean semantic coherence.

    :param candidates: evaluated ModelCandidateSet
    :return: DataFrame with columns k, mean_exclusivity, mean_semantic_coherence
    """
    rows = []
    for k, _ in candidates:
        if k not in candidates.exclusivity:
            continue
        rows.append({
            'k': k,
            'mean_exclusivity': float(np.mean(candidates.exclusivity[k])),
            'mean_semantic_coherence': float(np.mean(candidates.semantic_coherence[k])),
        })
    return pd.DataFrame(rows, columns=['k', 'mean_exclusivity', 'mean_semantic_coherence'])
