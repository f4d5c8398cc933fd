import json

import numpy as np

from langident.eval.reporting import save_metrics_json, save_training_curve


def test_metrics_json_converts_numpy_values(tmp_path):
    path = save_metrics_json(
        tmp_path / "out" / "model.metrics.json",
        {"accuracy": np.float64(0.5), "support": np.int64(3), "matrix": np.eye(2)},
    )
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload == {"accuracy": 0.5, "support": 3, "matrix": [[1.0, 0.0], [0.0, 1.0]]}


def test_training_curve_written(tmp_path):
    history = [
        {"epoch": 1, "accuracy": 0.5, "loss": 0.7},
        {"epoch": 2, "accuracy": 0.9, "loss": 0.3},
    ]
    path = save_training_curve(history, tmp_path / "model.curve.png")
    assert path.exists()
    assert path.stat().st_size > 0
