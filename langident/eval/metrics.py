"""
Evaluation helpers for language identification models.
"""
from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np
from sklearn.metrics import accuracy_score, classification_report, confusion_matrix


def accuracy(correct: int, total: int) -> float:
    return correct / total if total else 0.0


def classification_summary(y_true, y_pred) -> dict:
    if len(y_true) == 0:
        return {"accuracy": 0.0}
    payload = classification_report(
        y_true, y_pred, output_dict=True, zero_division=0
    )
    payload["accuracy"] = accuracy_score(y_true, y_pred)
    return payload


def probability_matrix(model, texts: Iterable[str]) -> np.ndarray:
    """
    Stack softmax outputs for each text, one row per text.
    """
    rows = model.vectorizer.transform(list(texts))
    network = model.network
    if rows.shape[0] == 0:
        return np.zeros((0, network.output_dim))
    return np.vstack([network.predict_probs(rows[i]) for i in range(rows.shape[0])])


def top_k_accuracy(
    model,
    texts: Iterable[str],
    labels: Sequence[str],
    k: int = 3,
) -> float:
    scores = probability_matrix(model, texts)
    classes = np.asarray(model.labels)
    indices = np.argsort(-scores, axis=1, kind="stable")[:, :k]
    predicted = classes[indices]
    total = len(labels)
    hits = sum(true in pred_row for true, pred_row in zip(labels, predicted))
    return hits / total if total else 0.0


def compute_confusion(y_true, y_pred, labels) -> np.ndarray:
    return confusion_matrix(y_true, y_pred, labels=labels)


__all__ = [
    "accuracy",
    "classification_summary",
    "top_k_accuracy",
    "compute_confusion",
    "probability_matrix",
]
