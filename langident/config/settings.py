"""
Global configuration for the neural language identification project.
"""
from pathlib import Path
from typing import Dict, List

import yaml

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DATA_DIR = PROJECT_ROOT / "data"
SAMPLE_DATA = DATA_DIR / "sample" / "sample_sentences.csv"
# The bundled sample is tiny, so it trains with more epochs than the defaults.
SAMPLE_CONFIG = DATA_DIR / "sample" / "training.yaml"
ARTIFACTS_DIR = PROJECT_ROOT / "artifacts"

LANGUAGE_CONFIG_PATH = Path(__file__).resolve().parent / "languages.yaml"
with LANGUAGE_CONFIG_PATH.open("r", encoding="utf-8") as f:
    _lang_payload = yaml.safe_load(f) or {}
_language_entries = _lang_payload.get("languages", [])
TARGET_LANGUAGES: List[str] = [entry["code"] for entry in _language_entries]
LANGUAGE_METADATA: Dict[str, dict] = {
    entry["code"]: entry for entry in _language_entries
}


class TrainingConfig:
    """Hyperparameters used for network training."""

    max_vocab = 5_000
    hidden_dim = 64
    learning_rate = 0.001
    max_epochs = 2
    batch_size = 32
    train_fraction = 0.8
    split_seed = 12345
    init_seed = 123
    max_input_chars = 500
    top_k = 3
    # Batches scoring below this are echoed when training verbosely.
    low_batch_accuracy = 0.7

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if key.startswith("_") or not hasattr(type(self), key):
                raise ValueError(f"Unknown training option: {key!r}")
            setattr(self, key, value)
        self._validate()

    def _validate(self) -> None:
        for name in ("max_vocab", "hidden_dim", "max_epochs", "batch_size"):
            if int(getattr(self, name)) < 1:
                raise ValueError(f"{name} must be at least 1.")
        if self.learning_rate <= 0:
            raise ValueError("learning_rate must be positive.")
        if not 0 < self.train_fraction <= 1:
            raise ValueError("train_fraction must lie in (0, 1].")
        if int(self.max_input_chars) < 1:
            raise ValueError("max_input_chars must be at least 1.")

    @classmethod
    def from_yaml(cls, path: Path, **overrides) -> "TrainingConfig":
        """
        Build a config from a YAML mapping of option names to values.
        Explicit keyword overrides win over the file.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Training config not found at {path}.")
        payload = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(payload, dict):
            raise ValueError(f"{path} must contain a mapping of training options.")
        payload.update(overrides)
        return cls(**payload)

    def as_dict(self) -> dict:
        return {
            name: getattr(self, name)
            for name in dir(type(self))
            if not name.startswith("_")
            and not callable(getattr(type(self), name))
        }


__all__ = [
    "PROJECT_ROOT",
    "DATA_DIR",
    "SAMPLE_DATA",
    "SAMPLE_CONFIG",
    "ARTIFACTS_DIR",
    "LANGUAGE_CONFIG_PATH",
    "TARGET_LANGUAGES",
    "LANGUAGE_METADATA",
    "TrainingConfig",
]
