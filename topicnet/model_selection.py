"""
Model training, evaluation and selection for topicnet.

train() fits one topic model per requested topic count K, evaluate() attaches per-topic exclusivity and
semantic coherence, and select() performs a strict lookup of the model for a given K.
"""

import logging
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from ._topic_model_driver import Initialization, TopicModel, fit_topic_model
from .exceptions import FitFailure, InvalidArgument, NotFoundError
from .model_evaluation import exclusivity, semantic_coherence
from .utils import validate_topic_count

logger = logging.getLogger(__name__)


class ModelCandidateSet:
    """
    Ordered collection of (K, TopicModel) pairs, exactly one model per distinct K.

    Failed fits are kept in `failures` (K -> FitFailure) so callers can report them next to the
    successful ones. After evaluation, `exclusivity` and `semantic_coherence` map each K to a score
    vector with one entry per topic.
    """

    def __init__(self, models: Optional[Sequence[TopicModel]] = None):
        self._models: "OrderedDict[int, TopicModel]" = OrderedDict()
        self.failures: Dict[int, FitFailure] = OrderedDict()
        self.exclusivity: Dict[int, np.ndarray] = {}
        self.semantic_coherence: Dict[int, np.ndarray] = {}
        for model in models or []:
            self.add(model)

    def add(self, model: TopicModel) -> None:
        if model.k in self._models:
            raise InvalidArgument(f"Candidate set already holds a model with K={model.k}")
        self._models[model.k] = model

    def add_failure(self, failure: FitFailure) -> None:
        self.failures[failure.k] = failure

    def __len__(self):
        return len(self._models)

    def __iter__(self) -> Iterator[Tuple[int, TopicModel]]:
        return iter(self._models.items())

    def __contains__(self, k):
        return k in self._models

    def __repr__(self):
        return f"ModelCandidateSet(ks={self.ks}, failed={list(self.failures)})"

    @property
    def ks(self) -> List[int]:
        return list(self._models.keys())

    @property
    def is_evaluated(self) -> bool:
        return bool(self._models) and all(k in self.exclusivity for k in self._models)

    def get(self, k: int) -> TopicModel:
        """Strict lookup by topic count. See select()."""
        return select(self, k)

    def copy(self) -> 'ModelCandidateSet':
        """Shallow copy: models are immutable and shared, score dicts are copied."""
        other = ModelCandidateSet(self._models.values())
        other.failures = OrderedDict(self.failures)
        other.exclusivity = dict(self.exclusivity)
        other.semantic_coherence = dict(self.semantic_coherence)
        return other


def _unique_topic_counts(seq_k) -> List[int]:
    ks = []
    for k in seq_k:
        k = validate_topic_count(k)
        if k in ks:
            logger.warning(f"Duplicate topic count K={k} requested, fitting it once")
            continue
        ks.append(k)
    return ks


def train(seq_k: Sequence[int],
          corpus,
          em_iterations: int = 75,
          initialization=Initialization.SPECTRAL,
          passes: int = 1,
          random_state: int = 42,
          max_workers: int = 1,
          show_progress: bool = False) -> ModelCandidateSet:
    """
    Fit one topic model per distinct topic count in seq_k.

    Args:
        seq_k: Topic counts to fit, positive integers (need not be contiguous)
        corpus: topicnet Corpus
        em_iterations: Maximum inference iterations per fit
        initialization: Initialization member or its string value
        passes: Passes through the corpus per fit
        random_state: Seed shared by all fits
        max_workers: Number of fits running concurrently
        show_progress: Display a tqdm progress bar

    Returns:
        ModelCandidateSet ordered as seq_k, with failed fits recorded in `failures`

    Raises:
        InvalidArgument: a topic count is not a positive integer, or the initialization is unknown
    """
    ks = _unique_topic_counts(seq_k)
    initialization = Initialization.parse(initialization)
    logger.info(f"Training {len(ks)} candidate model(s) for K in {ks} with {max_workers} worker(s)")

    fitted: Dict[int, TopicModel] = {}
    failed: Dict[int, FitFailure] = {}

    with ThreadPoolExecutor(max_workers=max(1, int(max_workers))) as executor:
        futures = {
            executor.submit(fit_topic_model, corpus, k, em_iterations, initialization, passes, random_state): k
            for k in ks
        }
        completed = as_completed(futures)
        if show_progress:
            completed = tqdm(completed, total=len(futures), desc="Fitting topic models")
        for future in completed:
            k = futures[future]
            try:
                fitted[k] = future.result()
            except FitFailure as e:
                failed[k] = e
            except Exception as e:
                # Any library error is isolated to this fit
                failed[k] = FitFailure(k, f"{type(e).__name__}: {e}")
            if k in failed:
                logger.warning(str(failed[k]))
            else:
                logger.info(f"Fitted model with K={k}")

    candidates = ModelCandidateSet()
    for k in ks:
        if k in fitted:
            candidates.add(fitted[k])
        else:
            candidates.add_failure(failed[k])

    logger.info(f"Training complete: {len(candidates)} fitted, {len(candidates.failures)} failed")
    return candidates


def evaluate(candidates: ModelCandidateSet,
             corpus,
             num_words: int = 10,
             frex_weight: float = 0.7) -> ModelCandidateSet:
    """
    Score every model in the candidate set. Returns an enriched copy, the input is left untouched.

    Args:
        candidates: Output of train()
        corpus: The corpus the candidates were fitted on (needed for co-occurrence counts)
        num_words: Top words per topic entering both scores
        frex_weight: Weight of exclusivity vs. frequency in the FREX mixture

    Returns:
        Copy of candidates with `exclusivity` and `semantic_coherence` filled for every K
    """
    evaluated = candidates.copy()
    for k, model in evaluated:
        evaluated.exclusivity[k] = exclusivity(model.get_topic_word_distributions(), num_words, frex_weight)
        evaluated.semantic_coherence[k] = semantic_coherence(model, corpus, num_words)
        logger.info(
            f"K={k}: mean exclusivity {np.mean(evaluated.exclusivity[k]):.3f}, "
            f"mean semantic coherence {np.mean(evaluated.semantic_coherence[k]):.3f}"
        )
    return evaluated


def select(candidates: ModelCandidateSet, k: int) -> TopicModel:
    """
    Return the model whose topic count equals k.

    Raises:
        InvalidArgument: k is not a positive integer
        NotFoundError: no model with this K in the candidate set (failed fits included)
    """
    k = validate_topic_count(k)
    if k not in candidates:
        reason = " (fit failed)" if k in candidates.failures else ""
        raise NotFoundError(f"No model with K={k}{reason}. Available: {candidates.ks}")
    return candidates._models[k]
