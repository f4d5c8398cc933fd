"""
TF-IDF vectorizer over words and character bigrams.
"""
from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np
from scipy import sparse
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.utils.validation import check_is_fitted

from langident.features.tokenizer import tokenize


class CharBigramTfidfVectorizer(BaseEstimator, TransformerMixin):
    """
    Build a token vocabulary with IDF weights and encode texts as sparse rows.

    Tokens get indices in first-seen order. Once more than ``max_vocab``
    tokens are known the scan stops and the remaining documents take no part
    in the document frequencies, so the vocabulary may end up slightly
    larger than ``max_vocab``.

    Each encoded weight is ``(count / total in-vocabulary tokens) * idf``
    with ``idf = ln(N / (1 + df))``.
    """

    def __init__(self, max_vocab: int = 5_000):
        self.max_vocab = max_vocab

    def fit(self, X: Iterable[str], y=None):
        vocabulary: Dict[str, int] = {}
        term_counts: List[Counter] = []
        for doc in X:
            counts: Counter = Counter()
            for token in tokenize(doc):
                index = vocabulary.setdefault(token, len(vocabulary))
                counts[index] += 1
            term_counts.append(counts)
            if len(vocabulary) > self.max_vocab:
                break

        n_documents = len(term_counts)
        document_frequency = np.zeros(len(vocabulary), dtype=np.int64)
        for counts in term_counts:
            present = np.fromiter(counts.keys(), dtype=np.intp, count=len(counts))
            document_frequency[present] += 1

        if n_documents:
            idf = np.log(n_documents / (1.0 + document_frequency))
        else:
            idf = np.zeros(0, dtype=float)

        self.vocabulary_ = vocabulary
        self.document_frequency_ = document_frequency
        self.idf_ = idf
        self.n_documents_ = n_documents
        return self

    @property
    def vocab_size(self) -> int:
        check_is_fitted(self, "vocabulary_")
        return len(self.vocabulary_)

    def _weights(self, text: Optional[str]) -> Tuple[np.ndarray, np.ndarray]:
        counts: Counter = Counter()
        for token in tokenize(text):
            index = self.vocabulary_.get(token)
            if index is not None:
                counts[index] += 1
        total = sum(counts.values())
        if total == 0:
            return np.zeros(0, dtype=np.int32), np.zeros(0, dtype=float)

        indices = np.array(sorted(counts), dtype=np.int32)
        local = np.array([counts[i] for i in indices], dtype=float)
        return indices, (local / total) * self.idf_[indices]

    def encode(self, text: Optional[str]) -> sparse.csr_matrix:
        """
        Encode one text as a 1 x vocab_size CSR row.
        """
        return self.transform([text])

    def transform(self, X: Iterable[Optional[str]]) -> sparse.csr_matrix:
        check_is_fitted(self, "vocabulary_")
        data: List[np.ndarray] = []
        indices: List[np.ndarray] = []
        indptr = [0]
        for text in X:
            cols, weights = self._weights(text)
            indices.append(cols)
            data.append(weights)
            indptr.append(indptr[-1] + len(cols))

        n_rows = len(indptr) - 1
        return sparse.csr_matrix(
            (
                np.concatenate(data) if data else np.zeros(0, dtype=float),
                np.concatenate(indices) if indices else np.zeros(0, dtype=np.int32),
                np.asarray(indptr, dtype=np.int32),
            ),
            shape=(n_rows, len(self.vocabulary_)),
        )


def build_char_vectorizer(max_vocab: int = 5_000) -> CharBigramTfidfVectorizer:
    """
    Create the word + bigram TF-IDF vectorizer used by the network.
    """
    return CharBigramTfidfVectorizer(max_vocab=max_vocab)


__all__ = ["CharBigramTfidfVectorizer", "build_char_vectorizer"]
