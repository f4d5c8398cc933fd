"""
Persist evaluation artifacts such as JSON metrics, confusion matrices and
training curves.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import List, Sequence

import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns


def _to_builtin(value):
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def save_metrics_json(path: Path, payload: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, default=_to_builtin), encoding="utf-8")
    return path


def save_confusion_plot(
    matrix,
    labels: List[str],
    path: Path,
) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    plt.figure(figsize=(8, 6))
    sns.heatmap(
        matrix,
        annot=True,
        fmt="d",
        cmap="Purples",
        xticklabels=labels,
        yticklabels=labels,
    )
    plt.xlabel("Predicted")
    plt.ylabel("True")
    plt.title("Language Confusion Matrix")
    plt.tight_layout()
    plt.savefig(path)
    plt.close()
    return path


def save_training_curve(history: Sequence[dict], path: Path) -> Path:
    """
    Plot per-epoch training accuracy and mean loss side by side.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    epochs = [entry["epoch"] for entry in history]
    fig, (acc_ax, loss_ax) = plt.subplots(1, 2, figsize=(10, 4))
    acc_ax.plot(epochs, [entry["accuracy"] for entry in history], marker="o", color="purple")
    acc_ax.set_xlabel("Epoch")
    acc_ax.set_ylabel("Train accuracy")
    acc_ax.set_ylim(0, 1.05)
    loss_ax.plot(epochs, [entry["loss"] for entry in history], marker="o", color="teal")
    loss_ax.set_xlabel("Epoch")
    loss_ax.set_ylabel("Mean loss")
    fig.suptitle("Training Progress")
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)
    return path


__all__ = ["save_metrics_json", "save_confusion_plot", "save_training_curve"]
