"""BM25 lexical index over a single candidate set.

The index is built fresh for every ranking pass and discarded afterwards;
corpora differ per category and time window, so there is no incremental
update path.
"""

import math
import re
from collections import Counter
from collections.abc import Iterable, Sequence

import structlog

from curator.ranker.constants import BM25_B, BM25_K1, MIN_TOKEN_LENGTH
from curator.store.models import CandidateItem


logger = structlog.get_logger()

_TOKEN_PATTERN = re.compile(r"\b\w+\b")


def tokenize(text: str, min_length: int = MIN_TOKEN_LENGTH) -> list[str]:
    """Lowercase ``text`` and split it on word boundaries.

    Args:
        text: Text to tokenize.
        min_length: Shortest token kept.

    Returns:
        Tokens in order of appearance.
    """
    return [t for t in _TOKEN_PATTERN.findall(text.lower()) if len(t) >= min_length]


def document_text(item: CandidateItem) -> str:
    """Searchable text of an item: title, summary, source and category tags."""
    parts = [item.title, item.summary, item.source_name, " ".join(item.categories)]
    return " ".join(p for p in parts if p)


class LexicalIndex:
    """Inverted index scoring documents with Okapi BM25.

    ``score(d, q) = sum over t in q of
    IDF(t) * tf * (k1 + 1) / (tf + k1 * (1 - b + b * |d| / avgdl))``
    with ``IDF(t) = ln((N - df + 0.5) / (df + 0.5) + 1)``.
    """

    def __init__(
        self,
        k1: float = BM25_K1,
        b: float = BM25_B,
        min_token_length: int = MIN_TOKEN_LENGTH,
    ) -> None:
        self._k1 = k1
        self._b = b
        self._min_token_length = min_token_length
        self._term_freqs: dict[str, Counter[str]] = {}
        self._doc_lengths: dict[str, int] = {}
        self._postings: dict[str, list[str]] = {}
        self._avg_doc_length = 0.0

    @property
    def document_count(self) -> int:
        """Number of indexed documents."""
        return len(self._doc_lengths)

    @property
    def avg_doc_length(self) -> float:
        """Average document length in tokens."""
        return self._avg_doc_length

    def build(self, items: Sequence[CandidateItem]) -> "LexicalIndex":
        """Index a fresh corpus, replacing anything indexed before.

        Args:
            items: Corpus, in the order used for tie-breaking.

        Returns:
            The index, for chaining.
        """
        self._term_freqs = {}
        self._doc_lengths = {}
        self._postings = {}

        for item in items:
            tokens = tokenize(document_text(item), self._min_token_length)
            freqs = Counter(tokens)
            self._term_freqs[item.id] = freqs
            self._doc_lengths[item.id] = len(tokens)
            for term in freqs:
                self._postings.setdefault(term, []).append(item.id)

        total_length = sum(self._doc_lengths.values())
        self._avg_doc_length = total_length / max(len(self._doc_lengths), 1)

        logger.debug(
            "lexical_index_built",
            documents=self.document_count,
            vocabulary=len(self._postings),
            avg_doc_length=round(self._avg_doc_length, 2),
        )
        return self

    def document_frequency(self, term: str) -> int:
        """Number of documents containing ``term``."""
        return len(self._postings.get(term.lower(), ()))

    def idf(self, term: str) -> float:
        """Inverse document frequency of ``term``."""
        n = self.document_count
        df = self.document_frequency(term)
        return math.log((n - df + 0.5) / (df + 0.5) + 1)

    def query_tokens(self, query_terms: Iterable[str]) -> list[str]:
        """Tokenize query terms the same way documents are tokenized."""
        tokens: list[str] = []
        for term in query_terms:
            tokens.extend(tokenize(term, self._min_token_length))
        return tokens

    def score(self, query_terms: Iterable[str]) -> dict[str, float]:
        """Raw BM25 score of every indexed document.

        Documents containing no query term score 0. Repeated query terms
        contribute once per occurrence.

        Args:
            query_terms: Query terms or phrases.

        Returns:
            Mapping of item id to raw score, in corpus order.
        """
        scores = dict.fromkeys(self._doc_lengths, 0.0)
        if self._avg_doc_length == 0:
            return scores

        for term in self.query_tokens(query_terms):
            doc_ids = self._postings.get(term)
            if not doc_ids:
                continue
            idf = self.idf(term)
            for doc_id in doc_ids:
                tf = self._term_freqs[doc_id][term]
                length_norm = 1 - self._b + self._b * (
                    self._doc_lengths[doc_id] / self._avg_doc_length
                )
                scores[doc_id] += (
                    idf * (tf * (self._k1 + 1)) / (tf + self._k1 * length_norm)
                )

        return scores

    @staticmethod
    def normalize(scores: dict[str, float]) -> dict[str, float]:
        """Scale scores into [0, 1] by the maximum score.

        When every score is 0 the divisor is 1, so all normalize to 0.

        Args:
            scores: Raw scores.

        Returns:
            Normalized scores, same key order.
        """
        max_score = max(scores.values(), default=0.0)
        divisor = max_score if max_score > 0 else 1.0
        return {doc_id: min(s / divisor, 1.0) for doc_id, s in scores.items()}

    def rank(self, query_terms: Iterable[str]) -> list[tuple[str, float]]:
        """Normalized scores sorted descending, ties kept in corpus order."""
        normalized = self.normalize(self.score(query_terms))
        return sorted(normalized.items(), key=lambda kv: kv[1], reverse=True)
