import numpy as np
import pytest
from sklearn.exceptions import NotFittedError

from langident.features.text_vectorizer import (
    CharBigramTfidfVectorizer,
    build_char_vectorizer,
)
from langident.features.tokenizer import tokenize


def test_tokenize_folds_accents_and_emits_bigrams():
    assert tokenize("Café") == ["cafe", "ca", "af", "fe"]


def test_tokenize_empty_and_missing_text():
    assert tokenize("") == []
    assert tokenize(None) == []
    assert tokenize("  123 !? ") == []


def test_tokenize_splits_on_punctuation_and_keeps_duplicates():
    assert tokenize("Oh, oh!") == ["oh", "oh", "oh", "oh"]
    assert tokenize("l'été  A") == ["l", "ete", "et", "te", "a"]


def test_tokenize_keeps_non_latin_letters():
    assert tokenize("Привет") == ["привет", "пр", "ри", "ив", "ве", "ет"]


def test_vocabulary_uses_first_seen_order():
    vectorizer = build_char_vectorizer().fit(["ab cd", "cd ef"])
    assert vectorizer.vocabulary_ == {"ab": 0, "cd": 1, "ef": 2}
    assert vectorizer.vocab_size == 3
    assert vectorizer.n_documents_ == 2


def test_shared_token_gets_lower_idf():
    vectorizer = build_char_vectorizer().fit(["hello world", "hello there"])
    shared = vectorizer.vocabulary_["hello"]
    single = vectorizer.vocabulary_["world"]
    assert vectorizer.idf_[shared] < vectorizer.idf_[single]
    assert vectorizer.idf_[shared] == pytest.approx(np.log(2 / 3))
    assert vectorizer.idf_[single] == pytest.approx(0.0)


def test_vocabulary_cutoff_excludes_later_documents():
    vectorizer = CharBigramTfidfVectorizer(max_vocab=3).fit(["abc", "abd", "xyz"])
    # "abc" adds three tokens (not over the limit); "abd" pushes the count
    # to five, so "xyz" is never read.
    assert vectorizer.n_documents_ == 2
    assert "xyz" not in vectorizer.vocabulary_
    assert vectorizer.vocab_size == 5
    vocab = vectorizer.vocabulary_
    assert vectorizer.document_frequency_[vocab["ab"]] == 2
    assert vectorizer.document_frequency_[vocab["abd"]] == 1
    assert vectorizer.idf_[vocab["ab"]] == pytest.approx(np.log(2 / 3))
    assert vectorizer.idf_[vocab["bd"]] == pytest.approx(np.log(2 / 2))


def test_encode_weights_are_length_normalised_tf_times_idf():
    vectorizer = build_char_vectorizer().fit(["aa b", "c", "d"])
    row = vectorizer.encode("aa aa b zz")
    vocab = vectorizer.vocabulary_
    # tokens: aa, aa, aa, aa, b  (zz unknown) -> 5 counted tokens
    weights = dict(zip(row.indices.tolist(), row.data.tolist()))
    assert weights[vocab["aa"]] == pytest.approx(4 / 5 * np.log(3 / 2))
    assert weights[vocab["b"]] == pytest.approx(1 / 5 * np.log(3 / 2))
    assert row.shape == (1, vectorizer.vocab_size)


def test_encode_unknown_text_gives_empty_vector():
    vectorizer = build_char_vectorizer().fit(["bonjour", "hello"])
    assert vectorizer.encode("zzz qqq").nnz == 0
    assert vectorizer.encode("").nnz == 0
    assert vectorizer.encode(None).nnz == 0


def test_encode_is_bit_identical_for_same_text():
    vectorizer = build_char_vectorizer().fit(["hola mundo", "hello world"])
    first = vectorizer.encode("hola world")
    second = vectorizer.encode("hola world")
    assert np.array_equal(first.indices, second.indices)
    assert np.array_equal(first.data, second.data)


def test_empty_corpus_yields_empty_vocabulary():
    vectorizer = build_char_vectorizer().fit([])
    assert vectorizer.vocab_size == 0
    assert vectorizer.n_documents_ == 0
    assert vectorizer.encode("anything").nnz == 0


def test_transform_stacks_rows():
    vectorizer = build_char_vectorizer(max_vocab=100)
    X = vectorizer.fit_transform(["hello", "bonjour", "!!!"])
    assert X.shape == (3, vectorizer.vocab_size)
    assert X[2].nnz == 0


def test_encode_before_fit_raises():
    with pytest.raises(NotFittedError):
        CharBigramTfidfVectorizer().encode("hello")
