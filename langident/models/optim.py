"""
Adam optimizer bound to a single parameter tensor.
"""
from __future__ import annotations

from typing import Tuple, Union

import numpy as np

Shape = Union[int, Tuple[int, ...]]


class Adam:
    """
    Bias-corrected Adam updates for one tensor of a fixed shape.

    The step counter belongs to the instance, so each parameter tensor needs
    its own optimizer.
    """

    def __init__(
        self,
        shape: Shape,
        learning_rate: float = 0.001,
        beta1: float = 0.9,
        beta2: float = 0.999,
        epsilon: float = 1e-8,
    ):
        self.shape = tuple(np.atleast_1d(np.asarray(shape, dtype=int)).tolist())
        self.learning_rate = learning_rate
        self.beta1 = beta1
        self.beta2 = beta2
        self.epsilon = epsilon
        self.m = np.zeros(self.shape, dtype=float)
        self.v = np.zeros(self.shape, dtype=float)
        self.t = 0

    def update(self, parameters: np.ndarray, gradients: np.ndarray) -> None:
        """
        Apply one step to ``parameters`` in place.
        """
        if parameters.shape != self.shape or gradients.shape != self.shape:
            raise ValueError(
                f"Adam bound to shape {self.shape} received parameters "
                f"{parameters.shape} and gradients {gradients.shape}."
            )
        self.t += 1
        self.m = self.beta1 * self.m + (1 - self.beta1) * gradients
        self.v = self.beta2 * self.v + (1 - self.beta2) * gradients * gradients
        m_hat = self.m / (1 - self.beta1 ** self.t)
        v_hat = self.v / (1 - self.beta2 ** self.t)
        parameters -= self.learning_rate * m_hat / (np.sqrt(v_hat) + self.epsilon)


__all__ = ["Adam"]
