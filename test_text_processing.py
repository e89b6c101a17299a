import logging

import pytest

from utils.corpus import Document
from utils.text_processing import (
    TextCleaner,
    build_stopword_set,
    clean_text,
    load_stopwords_file,
    remove_noise,
    remove_stopwords,
    sanitize_text,
    strip_punctuation,
)

BASE_STOPWORDS = {'the', 'in', 'of', 'and', 'a', 'is'}

def test_remove_noise_strips_numbers_symbols_and_artifacts():
    text = "The 2nd Figure shows α-values ∑ et al. in 3.5kW Forecasting·models"
    assert remove_noise(text) == "the figure shows -values . in forecastingmodels"

def test_remove_noise_repairs_letter_spaced_headers():
    assert remove_noise("A B S T R A C T This paper") == "abstract this paper"
    assert remove_noise("A R T I C L E I N F O Keywords") == "keywords"

def test_remove_noise_keeps_words_containing_et_al():
    assert remove_noise("budget also matters") == "budget also matters"

def test_small_helpers():
    assert clean_text("  one\r\ntwo \t three  ") == "one two three"
    assert sanitize_text("café") == "cafe"
    assert strip_punctuation("grid-level, (storage)!") == "gridlevel storage"
    assert remove_stopwords("the grid of the future", {'the', 'of'}) == "grid future"

def test_missing_stopwords_file_is_a_warning(tmp_path, caplog):
    missing = tmp_path / "nope.txt"
    with caplog.at_level(logging.WARNING):
        assert load_stopwords_file(missing) == set()
    assert "not found" in caplog.text
    assert str(missing) in caplog.text

def test_stopwords_file_is_whitespace_separated(tmp_path):
    path = tmp_path / "stop_words_english.txt"
    path.write_text("Wiley elsevier\nsupplementary\n\n  doi ", encoding="utf-8")
    assert load_stopwords_file(path) == {'wiley', 'elsevier', 'supplementary', 'doi'}

def test_build_stopword_set_layers_sources(tmp_path, caplog):
    path = tmp_path / "extra.txt"
    path.write_text("doi", encoding="utf-8")

    combined = build_stopword_set(custom=['Fig', 'table'], stopwords_file=path, base=BASE_STOPWORDS)
    assert combined == BASE_STOPWORDS | {'fig', 'table', 'doi'}

    with caplog.at_level(logging.WARNING):
        without_file = build_stopword_set(custom=['fig'], stopwords_file=tmp_path / "gone.txt",
                                          base=BASE_STOPWORDS)
    assert without_file == BASE_STOPWORDS | {'fig'}
    assert "not found" in caplog.text

def test_cleaner_pipeline(blank_nlp):
    cleaner = TextCleaner(BASE_STOPWORDS | {'shows'}, nlp=blank_nlp)
    tokens = cleaner.tokenize("The 2nd Figure shows α-values et al. in Forecasting models! A x")
    assert tokens == ['figure', 'values', 'forecasting', 'models']

def test_cleaner_min_token_length(blank_nlp):
    cleaner = TextCleaner(set(), nlp=blank_nlp, min_token_length=4)
    assert cleaner.clean("big grid power line") == "grid power line"

def test_cleaner_drops_documents_emptied_by_cleaning(blank_nlp, caplog):
    cleaner = TextCleaner(BASE_STOPWORDS, nlp=blank_nlp)
    documents = [
        Document("keep.txt", "Battery storage in the grid"),
        Document("stop.txt", "the of and a 42 3.14"),
        Document("also.txt", "Wind turbines"),
    ]
    with caplog.at_level(logging.WARNING):
        cleaned = cleaner.clean_documents(documents)

    assert [d.doc_id for d in cleaned] == ["keep.txt", "also.txt"]
    assert cleaned[0].text == "battery storage grid"
    assert "stop.txt" in caplog.text

def test_cleaner_uses_lemmas_when_available():
    class LemmaToken:
        def __init__(self, text):
            self.text = text
            self.lemma_ = {'models': 'model', 'forecasts': 'forecast'}.get(text, text)
            self.is_space = False

    class FakeNlp:
        max_length = 1000000

        def __call__(self, text):
            return [LemmaToken(word) for word in text.split()]

    cleaner = TextCleaner(set(), nlp=FakeNlp())
    assert cleaner.clean("Models Forecasts grids") == "model forecast grids"

@pytest.mark.parametrize("text", ["", "   ", "12 34 5.6"])
def test_cleaner_returns_empty_string_for_noise(blank_nlp, text):
    assert TextCleaner(set(), nlp=blank_nlp).clean(text) == ""
