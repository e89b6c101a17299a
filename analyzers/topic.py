import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from tqdm import tqdm
from gensim.corpora import Dictionary
from gensim.matutils import corpus2csc
from gensim.models import CoherenceModel, LdaModel

from config import (
    MIN_TOPICS,
    MAX_TOPICS,
    TOPIC_STEP,
    SWEEP_ITERATIONS,
    SWEEP_PASSES,
    FINAL_ITERATIONS,
    FINAL_PASSES,
    RANDOM_SEED,
    COHERENCE_MEASURE
)
from configs.topic_config import TOPIC_CONFIG, rate_coherence
from errors import EmptyCorpusError, NoValidTopicCountError
from utils.corpus import Document, drop_empty

@dataclass
class DocumentTermMatrix:
    """
    Bag-of-words view of the active documents.

    `doc_ids`, `texts` and `corpus` are index-aligned on documents; column j
    of `matrix` is the term `dictionary[j]`.
    """
    doc_ids: List[str]
    texts: List[List[str]]
    dictionary: Dictionary
    corpus: List[List[Tuple[int, int]]]

    @property
    def shape(self) -> Tuple[int, int]:
        return len(self.corpus), len(self.dictionary)

    @property
    def matrix(self):
        """Sparse count matrix, rows = documents, columns = vocabulary terms."""
        num_docs, num_terms = self.shape
        return corpus2csc(self.corpus, num_terms=num_terms, num_docs=num_docs, dtype=np.int64).T.tocsr()

    @property
    def vocabulary(self) -> List[str]:
        return [self.dictionary[term_id] for term_id in range(len(self.dictionary))]

    @property
    def doc_lengths(self) -> np.ndarray:
        return np.asarray(self.matrix.sum(axis=1)).ravel()

    @property
    def term_frequencies(self) -> np.ndarray:
        return np.asarray(self.matrix.sum(axis=0)).ravel()

def build_document_term_matrix(documents: Iterable[Document],
                               no_below: Optional[int] = None,
                               no_above: Optional[float] = None) -> DocumentTermMatrix:
    """
    Build the document-term matrix of cleaned documents.

    Steps:
      1. Drop documents whose cleaned text is empty.
      2. Build the vocabulary; optionally filter it by document frequency.
      3. Drop documents that have no term left in the vocabulary.
      4. Drop vocabulary terms no surviving document uses.

    Args:
        documents: Cleaned documents, tokens separated by whitespace.
        no_below: Keep terms appearing in at least this many documents.
        no_above: Keep terms appearing in at most this fraction of documents.

    Raises:
        EmptyCorpusError: If no document or no term survives.
    """
    records = drop_empty(documents)
    if not records:
        raise EmptyCorpusError("every document is empty")

    texts = [document.text.split() for document in records]
    dictionary = Dictionary(texts)
    if no_below is not None or no_above is not None:
        dictionary.filter_extremes(
            no_below=no_below if no_below is not None else 1,
            no_above=no_above if no_above is not None else 1.0,
            keep_n=None
        )

    kept = []
    for document, tokens in zip(records, texts):
        bow = dictionary.doc2bow(tokens)
        if bow:
            kept.append((document.doc_id, tokens))
        else:
            logging.info(f"Dropping {document.doc_id}: no terms left in the vocabulary")

    used_ids = {term_id for _, tokens in kept for term_id in dictionary.doc2idx(tokens) if term_id >= 0}
    dictionary.filter_tokens(good_ids=used_ids)
    dictionary.compactify()

    if not kept or len(dictionary) == 0:
        raise EmptyCorpusError(f"{len(kept)} documents and {len(dictionary)} terms after filtering")

    doc_ids = [doc_id for doc_id, _ in kept]
    texts = [[token for token in tokens if token in dictionary.token2id] for _, tokens in kept]
    corpus = [dictionary.doc2bow(tokens) for tokens in texts]

    logging.info(f"Document-term matrix: {len(corpus)} documents x {len(dictionary)} terms")
    return DocumentTermMatrix(doc_ids=doc_ids, texts=texts, dictionary=dictionary, corpus=corpus)

def candidate_topic_counts(min_topics: int = MIN_TOPICS, max_topics: int = MAX_TOPICS,
                           step: int = TOPIC_STEP) -> List[int]:
    """Inclusive range of topic counts to try, ascending."""
    if step <= 0:
        raise ValueError("step must be positive")
    if min_topics < 1 or min_topics > max_topics:
        raise ValueError(f"Invalid topic range: {min_topics}..{max_topics}")
    return list(range(min_topics, max_topics + 1, step))

def aggregate_coherence(per_topic: Sequence[float]) -> Optional[float]:
    """
    Average per-topic coherence, ignoring undefined (NaN) topics.

    Returns None when no topic has a defined coherence, so the candidate
    carries no information rather than a score of zero.
    """
    values = np.asarray(per_topic, dtype=float)
    if values.size == 0 or np.all(np.isnan(values)):
        return None
    return float(np.nanmean(values))

def _is_missing(score: Optional[float]) -> bool:
    return score is None or math.isnan(score)

def _scores_tie(a: float, b: float) -> bool:
    # Equal up to float rounding
    return math.isclose(a, b, rel_tol=1e-9, abs_tol=1e-12)

def select_topic_count(topic_counts: Sequence[int], scores: Sequence[Optional[float]]) -> int:
    """
    Pick the topic count with the highest coherence.

    Missing scores are skipped; on a tie (equal up to float rounding) the
    smallest topic count wins.

    Raises:
        NoValidTopicCountError: If every score is missing.
    """
    if len(topic_counts) != len(scores):
        raise ValueError("topic_counts and scores must have the same length")

    best_k, best_score = None, None
    for k, score in zip(topic_counts, scores):
        if _is_missing(score):
            continue
        if best_score is None or (score > best_score and not _scores_tie(score, best_score)):
            best_k, best_score = k, score

    if best_k is None:
        raise NoValidTopicCountError(topic_counts)
    return best_k

@dataclass
class CoherenceSweep:
    """Coherence score per candidate topic count; None marks a failed candidate."""
    topic_counts: List[int]
    scores: List[Optional[float]]

    def __iter__(self):
        return iter(zip(self.topic_counts, self.scores))

    def __len__(self) -> int:
        return len(self.topic_counts)

    @property
    def valid(self) -> List[Tuple[int, float]]:
        return [(k, score) for k, score in self if not _is_missing(score)]

    def best_topic_count(self) -> int:
        return select_topic_count(self.topic_counts, self.scores)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            'num_topics': self.topic_counts,
            'coherence': [np.nan if _is_missing(score) else score for score in self.scores]
        })

@dataclass
class TopicModelArtifact:
    """
    Parameters of the selected model, in the layout an LDAvis renderer expects.

    phi is topics x terms, theta is documents x topics; `vocabulary` and
    `term_frequencies` follow phi's columns, `doc_lengths` and `doc_ids`
    follow theta's rows.
    """
    phi: np.ndarray
    theta: np.ndarray
    doc_lengths: np.ndarray
    vocabulary: List[str]
    term_frequencies: np.ndarray
    doc_ids: List[str] = field(default_factory=list)
    model: Any = None

    @property
    def num_topics(self) -> int:
        return self.phi.shape[0]

    def validate(self, tolerance: float = 1e-6) -> None:
        """Raise ValueError unless the distributions and alignments are consistent."""
        num_topics, num_terms = self.phi.shape
        num_docs = self.theta.shape[0]

        if self.theta.shape[1] != num_topics:
            raise ValueError(f"theta has {self.theta.shape[1]} topics, phi has {num_topics}")
        if len(self.doc_lengths) != num_docs:
            raise ValueError(f"{len(self.doc_lengths)} document lengths for {num_docs} documents")
        if self.doc_ids and len(self.doc_ids) != num_docs:
            raise ValueError(f"{len(self.doc_ids)} document ids for {num_docs} documents")
        if len(self.vocabulary) != num_terms or len(self.term_frequencies) != num_terms:
            raise ValueError(
                f"vocabulary ({len(self.vocabulary)}) and term frequencies "
                f"({len(self.term_frequencies)}) must match phi's {num_terms} terms"
            )
        if not np.allclose(self.phi.sum(axis=1), 1.0, atol=tolerance):
            raise ValueError("phi rows must each sum to 1")
        if not np.allclose(self.theta.sum(axis=1), 1.0, atol=tolerance):
            raise ValueError("theta rows must each sum to 1")

    def topic_terms(self, topn: int = 10) -> List[List[Tuple[str, float]]]:
        """Top `topn` (term, probability) pairs of each topic."""
        topics = []
        for row in self.phi:
            order = np.argsort(row)[::-1][:topn]
            topics.append([(self.vocabulary[i], float(row[i])) for i in order])
        return topics

@dataclass
class TopicModelResult:
    dtm: DocumentTermMatrix
    sweep: CoherenceSweep
    num_topics: int
    artifact: TopicModelArtifact

def _normalize_rows(matrix: np.ndarray) -> np.ndarray:
    matrix = np.asarray(matrix, dtype=np.float64)
    totals = matrix.sum(axis=1, keepdims=True)
    return matrix / totals

class TopicModelSelector:
    """
    Chooses the number of LDA topics by coherence and fits the final model.

    Each candidate topic count is fit with a short inference budget and scored
    by topic coherence; the best count is then refit from scratch with the
    final budget.

    Args:
        min_topics: Smallest candidate number of topics.
        max_topics: Largest candidate number of topics (inclusive).
        step: Spacing between candidates.
        sweep_iterations: Inference iterations for each candidate fit.
        sweep_passes: Corpus passes for each candidate fit.
        final_iterations: Inference iterations for the selected model.
        final_passes: Corpus passes for the selected model.
        random_seed: Seeds the sweep once, and the final model.
        coherence: gensim coherence measure ('c_v', 'u_mass', 'c_npmi', ...).
        verbose: If True, shows a progress bar over the sweep.

    References:
        - "Latent Dirichlet Allocation" (Blei, Ng & Jordan, 2003)
        - "Exploring the Space of Topic Coherence Measures" (Röder et al., 2015)
    """

    def __init__(self, min_topics=MIN_TOPICS, max_topics=MAX_TOPICS, step=TOPIC_STEP,
                 sweep_iterations=SWEEP_ITERATIONS, sweep_passes=SWEEP_PASSES,
                 final_iterations=FINAL_ITERATIONS, final_passes=FINAL_PASSES,
                 random_seed=RANDOM_SEED, coherence=COHERENCE_MEASURE, verbose=False):
        self.topic_counts = candidate_topic_counts(min_topics, max_topics, step)
        self.sweep_iterations = sweep_iterations
        self.sweep_passes = sweep_passes
        self.final_iterations = final_iterations
        self.final_passes = final_passes
        self.random_seed = random_seed
        self.coherence = coherence
        self.verbose = verbose

    def _train(self, dtm: DocumentTermMatrix, num_topics: int, iterations: int,
               passes: int, random_state) -> LdaModel:
        return LdaModel(
            corpus=dtm.corpus,
            id2word=dtm.dictionary,
            num_topics=num_topics,
            iterations=iterations,
            passes=passes,
            chunksize=TOPIC_CONFIG['chunksize'],
            alpha=TOPIC_CONFIG['alpha'],
            eta=TOPIC_CONFIG['eta'],
            eval_every=None,
            random_state=random_state,
            dtype=np.float64
        )

    def score_model(self, model: LdaModel, dtm: DocumentTermMatrix) -> Optional[float]:
        """Mean per-topic coherence of `model`, or None if no topic is defined."""
        coherence_model = CoherenceModel(
            model=model,
            texts=dtm.texts,
            corpus=dtm.corpus,
            dictionary=dtm.dictionary,
            coherence=self.coherence,
            topn=min(TOPIC_CONFIG['coherence_topn'], len(dtm.dictionary)),
            processes=1
        )
        return aggregate_coherence(coherence_model.get_coherence_per_topic())

    def search_topic_counts(self, dtm: DocumentTermMatrix) -> CoherenceSweep:
        """
        Fit and score one model per candidate topic count, in ascending order.

        A single RandomState seeded with `random_seed` drives the whole sweep.
        A candidate that raises, or whose topics all have undefined coherence,
        is recorded as None and the sweep moves on.
        """
        random_state = np.random.RandomState(self.random_seed)
        scores = []

        for k in tqdm(self.topic_counts, desc="Topic-count sweep", disable=not self.verbose):
            logging.info(f"Training model with {k} topics...")
            try:
                model = self._train(dtm, k, self.sweep_iterations, self.sweep_passes, random_state)
                score = self.score_model(model, dtm)
            except Exception as e:
                logging.warning(f"Model with {k} topics failed: {e}")
                score = None
            else:
                if score is None:
                    logging.warning(f"Model with {k} topics has no defined {self.coherence} coherence")
                else:
                    logging.info(f"{k} topics: {self.coherence} coherence {score:.4f}")
            # Candidate models are not kept past their score
            model = None
            scores.append(score)

        return CoherenceSweep(topic_counts=list(self.topic_counts), scores=scores)

    def fit_final_model(self, dtm: DocumentTermMatrix, num_topics: int) -> TopicModelArtifact:
        """
        Train a fresh model with `num_topics` topics and extract its parameters.

        Returns:
            A validated TopicModelArtifact whose phi and theta rows sum to 1.
        """
        logging.info(f"Training final model with {num_topics} topics "
                     f"({self.final_passes} passes, {self.final_iterations} iterations)...")
        model = self._train(dtm, num_topics, self.final_iterations, self.final_passes, self.random_seed)

        phi = _normalize_rows(model.get_topics())
        gamma, _ = model.inference(dtm.corpus)
        theta = _normalize_rows(gamma)

        artifact = TopicModelArtifact(
            phi=phi,
            theta=theta,
            doc_lengths=dtm.doc_lengths,
            vocabulary=dtm.vocabulary,
            term_frequencies=dtm.term_frequencies,
            doc_ids=list(dtm.doc_ids),
            model=model
        )
        artifact.validate()
        return artifact

    def run(self, documents: Iterable[Document]) -> TopicModelResult:
        """
        Full topic stage: document-term matrix, coherence sweep, selection, final fit.

        Raises:
            EmptyCorpusError: If the corpus yields no usable documents or terms.
            NoValidTopicCountError: If every candidate failed.
        """
        dtm = build_document_term_matrix(documents)
        sweep = self.search_topic_counts(dtm)
        num_topics = sweep.best_topic_count()

        best_score = dict(sweep.valid)[num_topics]
        rating = rate_coherence(best_score, self.coherence)
        quality = f", {rating}" if rating else ""
        logging.info(f"The optimal number of topics with the highest '{self.coherence}' "
                     f"coherence score is: {num_topics} ({best_score:.4f}{quality})")

        artifact = self.fit_final_model(dtm, num_topics)
        for topic_id, terms in enumerate(artifact.topic_terms()):
            logging.info(f"Topic {topic_id}: {', '.join(term for term, _ in terms)}")

        return TopicModelResult(dtm=dtm, sweep=sweep, num_topics=num_topics, artifact=artifact)
