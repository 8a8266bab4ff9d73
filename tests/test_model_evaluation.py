"""
Test cases for model_evaluation.py module
"""

import numpy as np
import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from topicnet._topic_model_driver import TopicModel
from topicnet.corpus import Corpus, Document
from topicnet.model_evaluation import (
    EPSILON,
    exclusivity,
    semantic_coherence,
    summarize_scores,
    top_word_ids,
)
from topicnet.model_selection import ModelCandidateSet


class TestConstants:
    """Test cases for module constants"""

    def test_epsilon_constant(self):
        assert isinstance(EPSILON, float)
        assert 0 < EPSILON < 1e-5


class TestModelEvaluationModule:

    def test_module_docstring(self):
        from topicnet import model_evaluation
        doc = model_evaluation.__doc__.lower()
        assert "exclusivity" in doc
        assert "semantic coherence" in doc


class TestTopWordIds:

    def test_order_and_clamp(self):
        beta = np.array([[0.1, 0.6, 0.3], [0.5, 0.2, 0.3]])
        np.testing.assert_array_equal(top_word_ids(beta, 2), [[1, 2], [0, 2]])
        assert top_word_ids(beta, 10).shape == (2, 3)


class TestExclusivity:
    """Test FREX-style exclusivity"""

    @pytest.fixture
    def beta(self):
        return np.array([
            [0.45, 0.45, 0.05, 0.05],
            [0.25, 0.25, 0.25, 0.25],
        ])

    def test_known_values(self, beta):
        scores = exclusivity(beta, num_words=2, frex_weight=0.7)
        # Topic 0: both top words rank 3.5/4 on share and on frequency
        assert scores[0] == pytest.approx(2 * 0.875)
        # Topic 1: top words share rank 1.5/4, frequency rank 2.5/4
        expected = 2.0 / (0.7 / 0.375 + 0.3 / 0.625)
        assert scores[1] == pytest.approx(expected)

    def test_distinctive_topic_scores_higher(self, beta):
        scores = exclusivity(beta, num_words=2)
        assert scores[0] > scores[1]

    def test_one_score_per_topic(self):
        rng = np.random.RandomState(0)
        beta = rng.dirichlet(np.ones(30), size=5)
        assert exclusivity(beta, num_words=10).shape == (5,)

    def test_invalid_weight(self, beta):
        with pytest.raises(ValueError):
            exclusivity(beta, frex_weight=1.5)


class TestSemanticCoherence:
    """Test UMass coherence against the fitting corpus"""

    @pytest.fixture
    def cooccurrence_corpus(self):
        docs = (
            [Document(f"ab{i}", 1, ("a", "b")) for i in range(3)]
            + [Document(f"c{i}", 1, ("c",)) for i in range(3)]
            + [Document(f"d{i}", 1, ("d",)) for i in range(3)]
        )
        return Corpus(docs)

    def _model(self, corpus, topic_words):
        vocab = corpus.vocabulary
        phi = np.full((len(topic_words), len(vocab)), 0.01)
        for topic_id, words in enumerate(topic_words):
            for word in words:
                phi[topic_id, vocab.index(word)] = 1.0
        phi /= phi.sum(axis=1, keepdims=True)
        theta = np.full((len(corpus), len(topic_words)), 1.0 / len(topic_words))
        return TopicModel(len(topic_words), theta, phi, corpus.doc_ids, vocab)

    def test_cooccurring_words_are_more_coherent(self, cooccurrence_corpus):
        model = self._model(cooccurrence_corpus, [["a", "b"], ["c", "d"]])
        scores = semantic_coherence(model, cooccurrence_corpus, num_words=2)
        assert scores.shape == (2,)
        assert np.isfinite(scores).all()
        assert scores[0] > scores[1]


class TestSummarizeScores:

    def test_summary_rows(self):
        theta = np.array([[0.5, 0.5], [0.5, 0.5]])
        phi = np.array([[0.5, 0.5], [0.5, 0.5]])
        candidates = ModelCandidateSet([TopicModel(2, theta, phi, ["x", "y"], ["u", "v"])])
        candidates.exclusivity[2] = np.array([1.0, 3.0])
        candidates.semantic_coherence[2] = np.array([-2.0, -4.0])

        summary = summarize_scores(candidates)
        assert summary.columns.tolist() == ["k", "mean_exclusivity", "mean_semantic_coherence"]
        assert summary.iloc[0].to_dict() == {"k": 2, "mean_exclusivity": 2.0, "mean_semantic_coherence": -3.0}

    def test_unevaluated_candidates_give_empty_summary(self):
        assert summarize_scores(ModelCandidateSet()).empty
