"""
Core topicnet functionality.

This module provides the user-facing orchestrator that chains the pipeline stages: candidate topic
model training, evaluation and selection, per-window topic association, and temporal topic network
construction. The stage functions themselves live in their own modules and can be used directly.
"""

import logging
from typing import Optional, Sequence

import pandas as pd

from ._topic_model_driver import Initialization, TopicModel
from .association import associate
from .corpus import Corpus
from .dataframe_schema import DocumentSchema
from .distributions import DistributionKind, document_topic_frame, extract, topic_columns
from .model_evaluation import summarize_scores
from .model_selection import ModelCandidateSet, evaluate, select, train
from .temporal_network import build_temporal_network, topic_prevalence
from .utils import load_default_config, log_print, merge_config, setup_logger


"""============================================================================
class TopicNetworkOrchestrator

Primary user interface for topicnet
============================================================================"""
class TopicNetworkOrchestrator:
    """
    This class chains the topicnet stages on one corpus and keeps every intermediate result.

    High-level functionality includes:
    1. Training one candidate topic model per requested topic count K.
    2. Scoring candidates by exclusivity and semantic coherence, and strict selection by K.
    3. Extraction of document-topic and topic-word tables from the selected model.
    4. Per-time-window rank correlation between topics, thresholded into association edges.
    5. Per-window topic graphs with Infomap communities, centrality and topology metrics,
       aggregated into centrality and topology histories.

    Every stage receives its inputs from the orchestrator state explicitly; nothing is read from
    enclosing scope.

    Example Usage:
        corpus = Corpus.from_dataframe(df, id_col="doc_id", date_col="date", tokens_col="tokens")
        orchestrator = TopicNetworkOrchestrator(corpus)
        orchestrator.train_models(seq_k=[5, 10, 15]).evaluate_models()
        print(orchestrator.score_summary)
        orchestrator.select_model(10).compute_associations(min_assoc=0.5).build_network()
        orchestrator.centrality_table, orchestrator.topology_table
    """
    def __init__(self,
                 corpus: Corpus,
                 config: Optional[dict] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the orchestrator.

        Args:
            corpus: Prepared corpus (tokenized documents with time ranks)
            config: Partial configuration dict, deep-merged over the packaged config.yaml defaults
            logger: Custom logger, creates default if None
        """
        self.config = merge_config(load_default_config(), config)
        self.logger = logger or setup_logger(self.config.get('logging', {}).get('level', 'INFO'))
        self.corpus = corpus

        # Initialize experiment parameters for tracking
        self.experiment_params = {'steps': {}}

        # Model candidates
        self.candidates: Optional[ModelCandidateSet] = None
        self.score_summary: Optional[pd.DataFrame] = None
        self.selected_model: Optional[TopicModel] = None

        # Temporal network components
        self.document_topics: Optional[pd.DataFrame] = None
        self.topic_cols = []
        self.prevalence_table: Optional[pd.DataFrame] = None
        self.edges: Optional[pd.DataFrame] = None
        self.centrality_table: Optional[pd.DataFrame] = None
        self.topology_table: Optional[pd.DataFrame] = None

        self.logger.info(f"TopicNetworkOrchestrator initialized with {len(corpus)} documents")

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, config: Optional[dict] = None, **column_kwargs):
        """Build the corpus from a document dataframe using the corpus section of the config."""
        corpus_config = merge_config(load_default_config(), config).get('corpus', {})
        corpus = Corpus.from_dataframe(
            df,
            window_frequency=corpus_config.get('window_frequency', 'year'),
            no_below=corpus_config.get('no_below'),
            no_above=corpus_config.get('no_above'),
            keep_n=corpus_config.get('keep_n'),
            **column_kwargs,
        )
        return cls(corpus, config=config)

    def _track_step_params(self, step_name: str, params: dict):
        """Track hyperparameters for a processing step."""
        self.experiment_params['steps'][step_name] = {
            'timestamp': pd.Timestamp.now().isoformat(timespec='seconds'),
            'parameters': dict(params),
        }

    # ============================================================================
    # 1. MODEL CANDIDATES
    # ============================================================================
    def train_models(self,
                     seq_k: Optional[Sequence[int]] = None,
                     em_iterations: Optional[int] = None,
                     initialization=None,
                     max_workers: Optional[int] = None) -> 'TopicNetworkOrchestrator':
        """
        Fit one candidate model per topic count.

        Args:
            seq_k: Topic counts to fit (overrides config)
            em_iterations: Maximum inference iterations per fit (overrides config)
            initialization: 'spectral' or 'random' (overrides config)
            max_workers: Concurrent fits (overrides config)

        Returns:
            Self for method chaining
        """
        topic_config = self.config['topic_model']
        params = {
            'seq_k': list(seq_k if seq_k is not None else topic_config['seq_k']),
            'em_iterations': em_iterations if em_iterations is not None else topic_config['em_iterations'],
            'initialization': Initialization.parse(
                initialization if initialization is not None else topic_config['initialization']
            ),
            'passes': topic_config.get('passes', 1),
            'random_state': topic_config.get('random_state', 42),
            'max_workers': max_workers if max_workers is not None else topic_config.get('max_workers', 1),
            'show_progress': topic_config.get('show_progress', False),
        }
        self._track_step_params('train_models', {**params, 'initialization': params['initialization'].value})

        self.candidates = train(corpus=self.corpus, **params)
        for k, failure in self.candidates.failures.items():
            log_print(f"Candidate K={k} excluded: {failure.reason}", level="warning",
                      logger=self.logger, also_print=False)
        self.score_summary = None
        self.selected_model = None
        return self

    def evaluate_models(self,
                        num_words: Optional[int] = None,
                        frex_weight: Optional[float] = None) -> 'TopicNetworkOrchestrator':
        """Attach exclusivity and semantic coherence to every candidate and build the score summary."""
        if self.candidates is None:
            raise ValueError("No candidate models. Call train_models() first.")
        eval_config = self.config['evaluation']
        num_words = num_words if num_words is not None else eval_config['num_words']
        frex_weight = frex_weight if frex_weight is not None else eval_config['frex_weight']
        self._track_step_params('evaluate_models', {'num_words': num_words, 'frex_weight': frex_weight})

        self.candidates = evaluate(self.candidates, self.corpus, num_words=num_words, frex_weight=frex_weight)
        self.score_summary = summarize_scores(self.candidates)
        return self

    def select_model(self, k: int) -> 'TopicNetworkOrchestrator':
        """Select the candidate with exactly k topics. Raises NotFoundError if absent."""
        if self.candidates is None:
            raise ValueError("No candidate models. Call train_models() first.")
        self.selected_model = select(self.candidates, k)
        self._track_step_params('select_model', {'k': k})
        self.logger.info(f"Selected model with K={k}")

        self.topic_cols = topic_columns(self.selected_model.get_num_topics())
        self.document_topics = document_topic_frame(self.selected_model, self.corpus)
        self.edges = None
        self.centrality_table = None
        self.topology_table = None
        return self

    def get_distribution(self, kind=DistributionKind.DOCUMENT_TOPIC) -> pd.DataFrame:
        """Long-form document-topic or topic-word table of the selected model."""
        if self.selected_model is None:
            raise ValueError("No model selected. Call select_model() first.")
        return extract(self.selected_model, kind)

    # ============================================================================
    # 2. TEMPORAL TOPIC NETWORK
    # ============================================================================
    def compute_associations(self,
                             min_assoc: Optional[float] = None,
                             min_documents: Optional[int] = None) -> 'TopicNetworkOrchestrator':
        """Per-window topic association edges of the selected model."""
        if self.document_topics is None:
            raise ValueError("No model selected. Call select_model() first.")
        assoc_config = self.config['association']
        min_assoc = min_assoc if min_assoc is not None else assoc_config['min_assoc']
        min_documents = min_documents if min_documents is not None else assoc_config['min_documents']
        self._track_step_params('compute_associations', {'min_assoc': min_assoc, 'min_documents': min_documents})

        time_col = DocumentSchema.TIME_RANK.colname
        self.edges = associate(self.document_topics, time_col, self.topic_cols,
                               min_assoc=min_assoc, min_documents=min_documents)
        self.prevalence_table = topic_prevalence(self.document_topics, time_col, self.topic_cols)
        return self

    def build_network(self,
                      infomap_trials: Optional[int] = None,
                      random_state: Optional[int] = None) -> 'TopicNetworkOrchestrator':
        """Build per-window topic graphs and aggregate centrality and topology histories."""
        if self.edges is None or self.prevalence_table is None:
            raise ValueError("No association edges. Call compute_associations() first.")
        network_config = self.config['network']
        infomap_trials = infomap_trials if infomap_trials is not None else network_config['infomap_trials']
        random_state = random_state if random_state is not None else network_config['random_state']
        self._track_step_params('build_network', {'infomap_trials': infomap_trials, 'random_state': random_state})

        self.centrality_table, self.topology_table = build_temporal_network(
            self.prevalence_table, self.edges, infomap_trials=infomap_trials, random_state=random_state
        )
        self.logger.info(
            f"Temporal network built: {len(self.topology_table)} time window(s), "
            f"{len(self.centrality_table)} topic record(s)"
        )
        return self

    def run(self, k: int, seq_k: Optional[Sequence[int]] = None) -> 'TopicNetworkOrchestrator':
        """Full chain: train, evaluate, select k, associate, build network."""
        return (self.train_models(seq_k=seq_k)
                .evaluate_models()
                .select_model(k)
                .compute_associations()
                .build_network())

    # ========================================================================================
    # 3. UTILITY METHODS
    # ========================================================================================
    def get_status(self) -> dict:
        """Get current status of orchestrator components."""
        return {
            'num_documents': len(self.corpus),
            'num_time_windows': len(set(self.corpus.time_ranks)),
            'models_trained': self.candidates is not None,
            'candidate_ks': self.candidates.ks if self.candidates is not None else [],
            'failed_ks': list(self.candidates.failures) if self.candidates is not None else [],
            'models_evaluated': self.candidates is not None and self.candidates.is_evaluated,
            'selected_k': self.selected_model.k if self.selected_model is not None else None,
            'num_edges': len(self.edges) if self.edges is not None else 0,
            'network_built': self.topology_table is not None,
        }
