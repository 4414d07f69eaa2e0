"""
Similarity engine for AssignScore.

This module implements the vector-space model used to estimate how
closely a submission matches any single peer submission of the same
assignment: TF-IDF weighting over a per-call corpus and cosine
similarity between the resulting vectors.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np
from sklearn.feature_extraction import DictVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from .tokenizer import tokenize
from ..models.document import Corpus, Document
from ..models.evaluation import PlagiarismAssessment
from ..utils.config import Config
from ..utils.numbers import round_half_up


log = logging.getLogger(__name__)


TfidfVector = Dict[str, float]


def build_tfidf(corpus: Sequence[str]) -> Dict[int, TfidfVector]:
    """
    Build TF-IDF vectors for every document of a corpus.

    Document frequencies are computed over the whole corpus, so vectors are
    only comparable with vectors from the same call. A document without
    tokens maps to an empty vector. With a single document every weight is
    ``ln(1/1) == 0``.

    Args:
        corpus: Raw document texts in corpus order

    Returns:
        Mapping from corpus index to ``{token: weight}``
    """
    tokenized = [tokenize(text) for text in corpus]
    doc_count = len(tokenized)

    df: Counter = Counter()
    for tokens in tokenized:
        df.update(set(tokens))

    vectors: Dict[int, TfidfVector] = {}
    for idx, tokens in enumerate(tokenized):
        length = len(tokens)
        if length == 0:
            vectors[idx] = {}
            continue
        counts = Counter(tokens)
        vectors[idx] = {
            token: (count / length) * math.log(doc_count / df[token])
            for token, count in counts.items()
        }

    return vectors


def cosine(vec_a: Mapping[str, float], vec_b: Mapping[str, float]) -> float:
    """
    Cosine similarity of two sparse vectors.

    Returns 0.0 when either vector has zero magnitude (for instance the
    vector of an empty submission).
    """
    keys = sorted(set(vec_a) | set(vec_b))
    if not keys:
        return 0.0
    a = np.fromiter((vec_a.get(k, 0.0) for k in keys), dtype=float, count=len(keys))
    b = np.fromiter((vec_b.get(k, 0.0) for k in keys), dtype=float, count=len(keys))
    mag_a = np.linalg.norm(a)
    mag_b = np.linalg.norm(b)
    if mag_a == 0 or mag_b == 0:
        return 0.0
    return float(np.dot(a, b) / (mag_a * mag_b))


def _target_similarities(vectors: Dict[int, TfidfVector]) -> np.ndarray:
    """Cosine similarity of the last vector against every other one."""
    ordered = [vectors[idx] for idx in range(len(vectors))]
    vectorizer = DictVectorizer(sparse=True)
    matrix = vectorizer.fit_transform(ordered)
    if matrix.shape[1] == 0:
        # no tokens anywhere in the corpus
        return np.zeros(len(ordered) - 1)
    return cosine_similarity(matrix[-1], matrix[:-1])[0]


def plagiarism_risk(target_text: str, peer_texts: Sequence[str]) -> float:
    """
    Estimate the plagiarism risk of a text against its peers.

    The risk is the highest cosine similarity to any single peer, as a
    percentage capped at 100. With no peers there is nothing to compare
    against and the risk is 0.

    Args:
        target_text: Text being evaluated
        peer_texts: Other submissions of the same assignment

    Returns:
        Risk in [0, 100], unrounded
    """
    if not peer_texts:
        return 0.0
    vectors = build_tfidf(list(peer_texts) + [target_text])
    similarities = _target_similarities(vectors)
    return min(100.0, 100.0 * float(similarities.max()))


class SimilarityEngine:
    """
    Plagiarism-risk engine.

    Wraps the pure functions of this module with configuration and
    reports which peer was the closest match.
    """

    DEFAULT_RISK_DECIMALS = 2

    def __init__(self, config: Optional[Config] = None) -> None:
        """
        Initialize the similarity engine.

        Args:
            config: Optional configuration object
        """
        self.config = config
        self.risk_decimals = self.DEFAULT_RISK_DECIMALS
        if self.config is not None:
            self.risk_decimals = int(self.config.get_similarity_config().get(
                "risk_decimals", self.DEFAULT_RISK_DECIMALS))

    def assess(self, target: Document, peers: Sequence[Document]) -> PlagiarismAssessment:
        """
        Assess a target document against its peer documents.

        Args:
            target: Document being evaluated
            peers: Peer documents of the same assignment

        Returns:
            PlagiarismAssessment with raw and rounded risk
        """
        if not peers:
            log.debug(f"No peers for {target.document_id}; plagiarism risk is 0")
            return PlagiarismAssessment(risk=0.0, rounded_risk=0.0)

        corpus = Corpus.for_target(target, peers)
        vectors = build_tfidf(corpus.texts)
        similarities = _target_similarities(vectors)

        best = int(np.argmax(similarities))
        risk = min(100.0, 100.0 * float(similarities[best]))
        closest = corpus.peers[best].document_id if similarities[best] > 0 else None

        log.debug(f"Compared {target.document_id} against {len(peers)} peers; "
                  f"max similarity {similarities[best]:.4f}")

        return PlagiarismAssessment(
            risk=risk,
            rounded_risk=round_half_up(risk, self.risk_decimals),
            closest_document_id=closest,
            similarities={
                doc.document_id: round(float(sim), 4)
                for doc, sim in zip(corpus.peers, similarities)
            },
        )

    def compare(self, text_a: str, text_b: str, background: Sequence[str] = ()) -> float:
        """
        Cosine similarity of two texts within one corpus.

        Args:
            text_a: First text
            text_b: Second text
            background: Extra documents that only contribute document frequencies

        Returns:
            Similarity in [0, 1]
        """
        vectors = build_tfidf([text_a, text_b] + list(background))
        return cosine(vectors[0], vectors[1])
