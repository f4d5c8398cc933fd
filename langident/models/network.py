"""
Single hidden layer classifier over sparse TF-IDF rows.

The hidden layer uses tanh, the output layer softmax with cross-entropy
loss. Only the input columns present in a row are touched on the way in and
on the way back, so the first-layer gradient is carried as a column subset.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from scipy import sparse

from langident.models.optim import Adam

LOG_FLOOR = 1e-15


def softmax(logits: np.ndarray) -> np.ndarray:
    shifted = np.exp(logits - logits.max())
    return shifted / shifted.sum()


@dataclass
class Gradients:
    """Per-example gradients; ``w1_block[:, k]`` belongs to column ``w1_columns[k]``."""

    w1_columns: np.ndarray
    w1_block: np.ndarray
    b1: np.ndarray
    w2: np.ndarray
    b2: np.ndarray

    def dense_w1(self, input_dim: int) -> np.ndarray:
        dense = np.zeros((self.w1_block.shape[0], input_dim), dtype=float)
        dense[:, self.w1_columns] = self.w1_block
        return dense


@dataclass
class ForwardResult:
    gradients: Gradients
    loss: float
    prediction: int


class NeuralNetwork:
    """
    tanh hidden layer + softmax output, trained with one Adam per tensor.
    """

    def __init__(
        self,
        input_dim: int,
        hidden_dim: int,
        output_dim: int,
        learning_rate: float = 0.001,
        seed: int = 123,
        beta1: float = 0.9,
        beta2: float = 0.999,
        epsilon: float = 1e-8,
    ):
        if input_dim < 0 or hidden_dim < 1 or output_dim < 1:
            raise ValueError(
                "Network needs input_dim >= 0, hidden_dim >= 1 and output_dim >= 1; "
                f"got {input_dim}, {hidden_dim}, {output_dim}."
            )
        self.input_dim = input_dim
        self.hidden_dim = hidden_dim
        self.output_dim = output_dim

        # Xavier: N(0, 1) scaled by sqrt(2 / (fan_in + fan_out)).
        rng = np.random.default_rng(seed)
        self.W1 = rng.standard_normal((hidden_dim, input_dim)) * np.sqrt(
            2.0 / (input_dim + hidden_dim)
        )
        self.b1 = np.zeros(hidden_dim, dtype=float)
        self.W2 = rng.standard_normal((output_dim, hidden_dim)) * np.sqrt(
            2.0 / (hidden_dim + output_dim)
        )
        self.b2 = np.zeros(output_dim, dtype=float)

        def bound(tensor: np.ndarray) -> Adam:
            return Adam(tensor.shape, learning_rate, beta1, beta2, epsilon)

        self.opt_W1 = bound(self.W1)
        self.opt_b1 = bound(self.b1)
        self.opt_W2 = bound(self.W2)
        self.opt_b2 = bound(self.b2)

    def _columns(self, x: sparse.spmatrix) -> Tuple[np.ndarray, np.ndarray]:
        if x.shape != (1, self.input_dim):
            raise ValueError(
                f"Expected a 1 x {self.input_dim} row, got shape {x.shape}."
            )
        row = sparse.csr_matrix(x)
        return row.indices, row.data

    def _forward(self, columns: np.ndarray, values: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        hidden = np.tanh(self.b1 + self.W1[:, columns] @ values)
        logits = self.b2 + self.W2 @ hidden
        return hidden, logits

    def forward_backward(self, x: sparse.spmatrix, label: int) -> ForwardResult:
        """
        Run one example forward and return its gradients, loss and prediction.
        """
        if not 0 <= label < self.output_dim:
            raise ValueError(f"Label {label} outside [0, {self.output_dim}).")
        columns, values = self._columns(x)
        hidden, logits = self._forward(columns, values)
        probs = softmax(logits)

        loss = float(-np.log(probs[label] + LOG_FLOOR))
        if not np.isfinite(loss):
            raise FloatingPointError(f"Non-finite loss {loss} for label {label}.")
        prediction = int(np.argmax(probs))

        delta2 = probs.copy()
        delta2[label] -= 1.0
        delta1 = (1.0 - hidden * hidden) * (self.W2.T @ delta2)

        gradients = Gradients(
            w1_columns=columns.copy(),
            w1_block=np.outer(delta1, values),
            b1=delta1,
            w2=np.outer(delta2, hidden),
            b2=delta2,
        )
        return ForwardResult(gradients=gradients, loss=loss, prediction=prediction)

    def apply_adam(
        self,
        grad_W1: np.ndarray,
        grad_b1: np.ndarray,
        grad_W2: np.ndarray,
        grad_b2: np.ndarray,
    ) -> None:
        self.opt_W1.update(self.W1, grad_W1)
        self.opt_b1.update(self.b1, grad_b1)
        self.opt_W2.update(self.W2, grad_W2)
        self.opt_b2.update(self.b2, grad_b2)

    def predict(self, x: sparse.spmatrix) -> int:
        _, logits = self._forward(*self._columns(x))
        return int(np.argmax(logits))

    def predict_probs(self, x: sparse.spmatrix) -> np.ndarray:
        _, logits = self._forward(*self._columns(x))
        return softmax(logits)


class GradientAccumulator:
    """
    Sums per-example gradients for one mini-batch.

    First-layer gradients are scattered into the touched columns only.
    """

    def __init__(self, network: NeuralNetwork):
        self.W1 = np.zeros_like(network.W1)
        self.b1 = np.zeros_like(network.b1)
        self.W2 = np.zeros_like(network.W2)
        self.b2 = np.zeros_like(network.b2)
        self.count = 0

    def add(self, gradients: Gradients) -> None:
        self.W1[:, gradients.w1_columns] += gradients.w1_block
        self.b1 += gradients.b1
        self.W2 += gradients.w2
        self.b2 += gradients.b2
        self.count += 1

    def averaged(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        if self.count == 0:
            raise ValueError("Cannot average an empty batch.")
        return (
            self.W1 / self.count,
            self.b1 / self.count,
            self.W2 / self.count,
            self.b2 / self.count,
        )


__all__ = [
    "ForwardResult",
    "GradientAccumulator",
    "Gradients",
    "NeuralNetwork",
    "softmax",
]
