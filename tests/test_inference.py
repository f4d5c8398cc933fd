import pytest

from langident.models.inference import classify, predict_language, stats


def test_classify_held_out_sentence(trained_model):
    label, confidence = classify(trained_model, "the dog is sleeping in the garden")
    assert label == "en"
    assert 0.5 < confidence <= 1.0

    label, confidence = classify(trained_model, "le chien dort dans le jardin")
    assert label == "fr"
    assert 0.5 < confidence <= 1.0


def test_classify_never_fails_on_odd_input(trained_model):
    for text in ("", "   ", None, "12345 !!!", "zzzz qqqq", 42, "a" * 5000):
        label, confidence = classify(trained_model, text)
        assert label in trained_model.labels
        assert 0.0 <= confidence <= 1.0


def test_classify_caps_input_length(trained_model):
    prefix = "the cat is sleeping " * 25
    assert len(prefix) == 500
    assert classify(trained_model, prefix) == classify(trained_model, prefix + "le chat dort " * 40)


def test_predict_language_returns_ranked_probabilities(trained_model):
    result = predict_language("Hello, we are testing the classifier.", trained_model)
    ranked = result["ranked"]
    assert [entry["language"] for entry in ranked] in (["en", "fr"], ["fr", "en"])
    assert ranked[0]["probability"] >= ranked[1]["probability"]
    assert sum(entry["probability"] for entry in ranked) == pytest.approx(1.0)
    assert result["top_language"] == ranked[0]["language"]
    names = {entry["language"]: entry["name"] for entry in ranked}
    assert names == {"en": "English", "fr": "French"}


def test_stats_is_a_detached_snapshot(trained_model):
    snapshot = stats(trained_model)
    assert snapshot["classes"] == ["en", "fr"]
    assert snapshot["total_examples"] == 40
    assert snapshot["history"][0]["epoch"] == 1
    snapshot["classes"].append("xx")
    snapshot["history"].clear()
    again = stats(trained_model)
    assert again["classes"] == ["en", "fr"]
    assert len(again["history"]) == trained_model.metrics.epochs_run
