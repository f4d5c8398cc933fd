"""
Inference helpers for the language identification model.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from langident.config.settings import LANGUAGE_METADATA, TrainingConfig
from langident.features.text_vectorizer import CharBigramTfidfVectorizer
from langident.models.network import NeuralNetwork


@dataclass(frozen=True)
class EpochRecord:
    epoch: int
    accuracy: float
    loss: float


@dataclass
class TrainingMetrics:
    total_examples: int
    train_size: int
    test_size: int
    input_dim: int
    hidden_dim: int
    output_dim: int
    classes: Tuple[str, ...]
    epochs_run: int = 0
    train_accuracy: float = 0.0
    test_accuracy: float = 0.0
    history: List[EpochRecord] = field(default_factory=list)

    def as_dict(self) -> dict:
        payload = asdict(self)
        payload["classes"] = list(self.classes)
        return payload


@dataclass
class TrainedModel:
    """
    Everything produced by one training run.

    Weights and vocabulary are only mutated while training; afterwards the
    model is read by ``classify`` / ``predict_language`` / ``stats``.
    """

    vectorizer: CharBigramTfidfVectorizer
    network: NeuralNetwork
    labels: Tuple[str, ...]
    config: TrainingConfig
    metrics: TrainingMetrics


def _clip(text, max_chars: int) -> str:
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)
    return text.strip()[:max_chars]


def _probabilities(model: TrainedModel, text) -> np.ndarray:
    features = model.vectorizer.encode(_clip(text, model.config.max_input_chars))
    return model.network.predict_probs(features)


def classify(model: TrainedModel, text: Optional[str]) -> Tuple[str, float]:
    """
    Return the most likely language and its probability.

    Text without any known token still gets a (low-confidence) answer.
    """
    probs = _probabilities(model, text)
    best = int(np.argmax(probs))
    return model.labels[best], float(probs[best])


def predict_language(text: Optional[str], model: TrainedModel) -> dict:
    """
    Run inference on an input string and return ranked probabilities.
    """
    probs = _probabilities(model, text)
    order = sorted(range(len(probs)), key=lambda k: (-probs[k], k))
    ranked = [
        {
            "language": model.labels[k],
            "name": LANGUAGE_METADATA.get(model.labels[k], {}).get(
                "name", model.labels[k]
            ),
            "probability": float(probs[k]),
        }
        for k in order
    ]
    return {
        "top_language": ranked[0]["language"],
        "top_probability": ranked[0]["probability"],
        "ranked": ranked,
    }


def stats(model: TrainedModel) -> dict:
    """
    Snapshot of the training metrics and the label ordering.
    """
    return model.metrics.as_dict()


__all__ = [
    "EpochRecord",
    "TrainedModel",
    "TrainingMetrics",
    "classify",
    "predict_language",
    "stats",
]
