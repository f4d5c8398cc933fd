"""
Training pipeline for the neural language identification model.
"""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import numpy as np
import pandas as pd
import typer
from rich import print as rprint
from rich.table import Table

from langident.config.settings import (
    ARTIFACTS_DIR,
    SAMPLE_CONFIG,
    SAMPLE_DATA,
    TARGET_LANGUAGES,
    TrainingConfig,
)
from langident.eval.metrics import (
    accuracy,
    classification_summary,
    compute_confusion,
    top_k_accuracy,
)
from langident.eval.reporting import (
    save_confusion_plot,
    save_metrics_json,
    save_training_curve,
)
from langident.features.text_vectorizer import build_char_vectorizer
from langident.models.inference import (
    EpochRecord,
    TrainedModel,
    TrainingMetrics,
    predict_language,
    stats,
)
from langident.models.network import GradientAccumulator, NeuralNetwork

app = typer.Typer(help="Train and evaluate the neural language identifier.")

REQUIRED_COLUMNS = {"text", "language"}


def _strip_quotes(values: pd.Series) -> pd.Series:
    return values.str.strip().str.replace(r'^"|"$', "", regex=True).str.strip()


def load_dataset(
    csv_path: Path,
    languages: Optional[Iterable[str]] = None,
) -> pd.DataFrame:
    """
    Load a CSV file containing `text` and `language` columns.

    Fields are trimmed, labels lower-cased, rows with an empty field dropped
    and repeated texts keep only their first occurrence.
    """
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Dataset not found at {csv_path}.")
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    if not REQUIRED_COLUMNS.issubset(df.columns):
        raise ValueError(f"Dataset must include columns: {REQUIRED_COLUMNS}")

    df = pd.DataFrame(
        {
            "text": _strip_quotes(df["text"]),
            "language": _strip_quotes(df["language"]).str.lower(),
        }
    )
    df = df[(df["text"] != "") & (df["language"] != "")]
    df = df.drop_duplicates(subset="text", keep="first")

    if languages:
        df = df[df["language"].isin(list(languages))]

    if df.empty:
        raise ValueError("Dataset is empty after filtering; check language list.")
    return df.reset_index(drop=True)


def _check_corpus(corpus: pd.DataFrame) -> Tuple[List[str], List[str]]:
    if not REQUIRED_COLUMNS.issubset(corpus.columns):
        raise ValueError(f"Corpus must include columns: {REQUIRED_COLUMNS}")
    if corpus.empty:
        raise ValueError("Corpus is empty; nothing to train on.")
    if corpus["text"].isna().any() or corpus["language"].isna().any():
        raise ValueError("Corpus contains missing text or language values.")
    return (
        [str(text) for text in corpus["text"]],
        [str(label) for label in corpus["language"]],
    )


def split_indices(n_examples: int, config: TrainingConfig) -> Tuple[np.ndarray, np.ndarray]:
    """
    Shuffle example indices with the split seed; the first
    ``floor(train_fraction * n)`` go to training, the rest to testing.
    """
    order = np.random.default_rng(config.split_seed).permutation(n_examples)
    train_size = int(config.train_fraction * n_examples)
    return order[:train_size], order[train_size:]


def _train_epochs(
    network: NeuralNetwork,
    rows: list,
    targets: np.ndarray,
    config: TrainingConfig,
    verbose: bool,
) -> List[EpochRecord]:
    train_size = len(rows)
    n_batches = -(-train_size // config.batch_size)
    order = np.arange(train_size)
    history: List[EpochRecord] = []

    for epoch in range(1, config.max_epochs + 1):
        order = order[np.random.default_rng(config.split_seed + epoch).permutation(train_size)]
        epoch_loss = 0.0
        epoch_correct = 0

        for batch_number, start in enumerate(range(0, train_size, config.batch_size), 1):
            batch = order[start : start + config.batch_size]
            accumulator = GradientAccumulator(network)
            batch_loss = 0.0
            batch_correct = 0
            for index in batch:
                result = network.forward_backward(rows[index], targets[index])
                batch_loss += result.loss
                batch_correct += int(result.prediction == targets[index])
                accumulator.add(result.gradients)
            network.apply_adam(*accumulator.averaged())

            epoch_loss += batch_loss
            epoch_correct += batch_correct
            batch_accuracy = batch_correct / len(batch)
            if verbose and batch_accuracy < config.low_batch_accuracy:
                rprint(
                    f"[dim]Epoch {epoch}, batch {batch_number}/{n_batches} | "
                    f"batch accuracy {batch_accuracy:.2%} | "
                    f"batch loss {batch_loss / len(batch):.4f}"
                )

        record = EpochRecord(
            epoch=epoch,
            accuracy=accuracy(epoch_correct, train_size),
            loss=epoch_loss / train_size if train_size else 0.0,
        )
        history.append(record)
        if verbose:
            rprint(
                f"[cyan]Epoch {epoch}/{config.max_epochs} | "
                f"train accuracy {record.accuracy:.2%} | mean loss {record.loss:.4f}"
            )
        if record.accuracy >= 1.0:
            break
    return history


def fit(
    corpus: pd.DataFrame,
    config: Optional[TrainingConfig] = None,
    verbose: bool = False,
) -> TrainedModel:
    """
    Fit the vectorizer and train the network on a cleaned corpus.

    Labels are indexed in order of first appearance. Given the same corpus
    and config the resulting weights and metrics are identical.
    """
    config = config or TrainingConfig()
    texts, languages = _check_corpus(corpus)
    labels = tuple(dict.fromkeys(languages))
    label_index = {label: i for i, label in enumerate(labels)}
    targets = np.array([label_index[lang] for lang in languages], dtype=int)

    vectorizer = build_char_vectorizer(max_vocab=config.max_vocab).fit(texts)
    features = vectorizer.transform(texts)
    train_idx, test_idx = split_indices(len(texts), config)

    network = NeuralNetwork(
        input_dim=vectorizer.vocab_size,
        hidden_dim=config.hidden_dim,
        output_dim=len(labels),
        learning_rate=config.learning_rate,
        seed=config.init_seed,
    )
    metrics = TrainingMetrics(
        total_examples=len(texts),
        train_size=len(train_idx),
        test_size=len(test_idx),
        input_dim=network.input_dim,
        hidden_dim=network.hidden_dim,
        output_dim=network.output_dim,
        classes=labels,
    )
    if verbose:
        rprint(
            f"[bold]Train examples: {metrics.train_size} | "
            f"test examples: {metrics.test_size} | classes: {len(labels)}"
        )

    history = _train_epochs(
        network,
        [features[i] for i in train_idx],
        targets[train_idx],
        config,
        verbose,
    )
    test_correct = sum(
        int(network.predict(features[i]) == targets[i]) for i in test_idx
    )

    metrics.history = history
    metrics.epochs_run = len(history)
    metrics.train_accuracy = history[-1].accuracy if history else 0.0
    metrics.test_accuracy = accuracy(test_correct, len(test_idx))
    if verbose:
        rprint(f"[bold green]Test accuracy: {metrics.test_accuracy:.2%}")

    return TrainedModel(
        vectorizer=vectorizer,
        network=network,
        labels=labels,
        config=config,
        metrics=metrics,
    )


def train_and_eval(
    df: pd.DataFrame,
    config: TrainingConfig,
    verbose: bool = False,
) -> tuple[TrainedModel, dict, dict]:
    """
    Train the model and return it along with evaluation metrics on the
    held-out split.
    """
    model = fit(df, config, verbose=verbose)
    _, test_idx = split_indices(len(df), config)
    test_texts = [str(df["text"].iloc[i]) for i in test_idx]
    y_test = [str(df["language"].iloc[i]) for i in test_idx]

    features = model.vectorizer.transform(test_texts)
    y_pred = [
        model.labels[model.network.predict(features[i])] for i in range(len(test_texts))
    ]
    summary = classification_summary(y_test, y_pred)
    topk = top_k_accuracy(model, test_texts, y_test, k=config.top_k)
    conf = compute_confusion(y_test, y_pred, labels=list(model.labels))
    metrics = {
        "stats": stats(model),
        "summary": summary,
        "top_k": {"k": config.top_k, "accuracy": topk},
        "config": config.as_dict(),
    }
    return model, metrics, {"confusion": conf, "y_true": y_test, "y_pred": y_pred}


def _persist_evaluation_artifacts(
    output_path: Path,
    metrics: dict,
    confusion_payload: dict,
) -> Tuple[Path, Path, Path]:
    metrics_path = output_path.with_suffix(".metrics.json")
    conf_path = output_path.with_suffix(".confusion.png")
    curve_path = output_path.with_suffix(".curve.png")

    save_metrics_json(metrics_path, metrics)
    save_confusion_plot(
        confusion_payload["confusion"],
        labels=metrics["stats"]["classes"],
        path=conf_path,
    )
    save_training_curve(metrics["stats"]["history"], curve_path)
    return metrics_path, conf_path, curve_path


def _load_config(config_path: Optional[Path], epochs: Optional[int]) -> TrainingConfig:
    overrides = {"max_epochs": epochs} if epochs else {}
    if config_path is not None:
        return TrainingConfig.from_yaml(config_path, **overrides)
    return TrainingConfig(**overrides)


def _train_and_report(
    df: pd.DataFrame,
    config: TrainingConfig,
    output_dir: Path,
    name: str,
    quiet: bool,
) -> None:
    _, metrics, confusion = train_and_eval(df, config, verbose=not quiet)
    paths = _persist_evaluation_artifacts(output_dir / name, metrics, confusion)
    metrics_path, conf_path, curve_path = paths
    rprint(
        f"[bold green]Train accuracy {metrics['stats']['train_accuracy']:.2%}, "
        f"test accuracy {metrics['stats']['test_accuracy']:.2%}"
    )
    rprint(f"[cyan]Metrics JSON → {metrics_path}")
    rprint(f"[cyan]Confusion matrix → {conf_path}")
    rprint(f"[cyan]Training curve → {curve_path}")
    rprint("Top-k accuracy:", metrics["top_k"])


@app.command()
def sample(
    output_dir: Path = typer.Option(ARTIFACTS_DIR, help="Where to write evaluation artifacts."),
    name: str = typer.Option("sample_language_mlp", help="Base name for the artifacts."),
    config_path: Path = typer.Option(
        SAMPLE_CONFIG, "--config", help="YAML file of training options."
    ),
    epochs: Optional[int] = typer.Option(None, "--epochs", "-e", help="Override max epochs."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Hide per-epoch progress."),
) -> None:
    """
    Train using the bundled miniature dataset for quick experiments.
    """
    config = _load_config(config_path, epochs)
    df = load_dataset(SAMPLE_DATA, TARGET_LANGUAGES)
    _train_and_report(df, config, output_dir, name, quiet)


@app.command()
def custom(
    dataset_path: Path = typer.Argument(..., help="CSV with text/language columns."),
    output_dir: Path = typer.Option(ARTIFACTS_DIR, help="Where to write evaluation artifacts."),
    name: str = typer.Option("custom_language_mlp", help="Base name for the artifacts."),
    languages: Optional[List[str]] = typer.Option(
        None, help="Subset of language labels to keep."
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="YAML file of training options."
    ),
    epochs: Optional[int] = typer.Option(None, "--epochs", "-e", help="Override max epochs."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Hide per-epoch progress."),
) -> None:
    """
    Train on an arbitrary dataset of labelled sentences.
    """
    config = _load_config(config_path, epochs)
    df = load_dataset(dataset_path, languages or None)
    _train_and_report(df, config, output_dir, name, quiet)


@app.command("classify")
def classify_command(
    texts: List[str] = typer.Argument(..., help="Texts to identify."),
    dataset_path: Path = typer.Option(SAMPLE_DATA, help="CSV dataset to train on first."),
    config_path: Path = typer.Option(
        SAMPLE_CONFIG, "--config", help="YAML file of training options."
    ),
    epochs: Optional[int] = typer.Option(None, "--epochs", "-e", help="Override max epochs."),
    top: int = typer.Option(3, help="How many ranked languages to show."),
) -> None:
    """
    Train on a dataset, then identify the language of each TEXT.
    """
    config = _load_config(config_path, epochs)
    model = fit(load_dataset(dataset_path), config)
    rprint(
        f"[dim]Trained on {model.metrics.total_examples} sentences, "
        f"test accuracy {model.metrics.test_accuracy:.2%}"
    )
    for text in texts:
        result = predict_language(text, model)
        table = Table(title=text[:60])
        table.add_column("Language")
        table.add_column("Name")
        table.add_column("Probability", justify="right")
        for entry in result["ranked"][:top]:
            table.add_row(entry["language"], entry["name"], f"{entry['probability']:.2%}")
        rprint(table)


if __name__ == "__main__":
    app()
