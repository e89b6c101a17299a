import json
import logging

import pytest

import paper_analysis
from analyzers.topic import TopicModelSelector
from errors import CorpusConfigurationError, ExportError
from utils.text_processing import TextCleaner

ENERGY = "Solar panels and wind turbines feed the power grid; battery storage smooths the load."
FINANCE = "Stock market prices move with trading volume, portfolio risk and expected return."

@pytest.fixture
def raw_corpus(tmp_path):
    text_dir = tmp_path / "txt"
    text_dir.mkdir()
    for i in range(6):
        body = (ENERGY if i % 2 == 0 else FINANCE) + " 2021 Fig. 3 et al."
        (text_dir / f"paper_{i}.txt").write_text(body * 3, encoding="utf-8")
    return text_dir

@pytest.fixture
def quick_selector():
    return TopicModelSelector(min_topics=2, max_topics=3, sweep_iterations=20,
                              final_iterations=50, final_passes=5, coherence='u_mass')

def test_topics_stage_writes_all_artifacts(tmp_path, raw_corpus, blank_nlp, quick_selector):
    cleaner = TextCleaner({'and', 'the', 'with', 'fig'}, nlp=blank_nlp)
    result = paper_analysis.run_topics(
        text_folder=raw_corpus,
        vis_folder=tmp_path / "lda_vis",
        plot_path=tmp_path / "Coherence_Score.png",
        table_path=tmp_path / "Coherence_Score.csv",
        open_browser=False,
        cleaner=cleaner,
        selector=quick_selector,
    )

    assert result.sweep.topic_counts == [2, 3]
    assert result.num_topics in (2, 3)
    assert len(result.dtm.doc_ids) == 6
    assert "fig" not in result.dtm.vocabulary
    assert (tmp_path / "Coherence_Score.png").exists()
    assert (tmp_path / "Coherence_Score.csv").exists()
    payload = json.loads((tmp_path / "lda_vis" / "lda.json").read_text(encoding="utf-8"))
    assert len(payload["mdsDat"]["topics"]) == result.num_topics

def test_topics_stage_with_missing_stopwords_file(tmp_path, raw_corpus, blank_nlp,
                                                  quick_selector, monkeypatch, caplog):
    monkeypatch.setattr(paper_analysis, "TextCleaner",
                        lambda stop_words: TextCleaner(stop_words, nlp=blank_nlp))
    monkeypatch.setattr("utils.text_processing.english_stopwords", lambda: {'and', 'the', 'with'})

    with caplog.at_level(logging.WARNING):
        result = paper_analysis.run_topics(
            text_folder=raw_corpus,
            stopwords_file=tmp_path / "missing_stop_words.txt",
            vis_folder=tmp_path / "lda_vis",
            plot_path=tmp_path / "plot.png",
            table_path=tmp_path / "table.csv",
            open_browser=False,
            selector=quick_selector,
        )

    assert "not found" in caplog.text
    # inline topic-modeling stopwords still applied
    assert "fig" not in result.dtm.vocabulary
    assert (tmp_path / "lda_vis" / "index.html").exists()

def test_topics_stage_empty_directory_fails_before_modeling(tmp_path, quick_selector, monkeypatch):
    empty = tmp_path / "txt"
    empty.mkdir()

    def unexpected(*args, **kwargs):
        raise AssertionError("document-term matrix should not be built")

    monkeypatch.setattr("analyzers.topic.build_document_term_matrix", unexpected)
    with pytest.raises(CorpusConfigurationError):
        paper_analysis.run_topics(text_folder=empty, open_browser=False,
                                  cleaner=object(), selector=quick_selector)

def test_topics_stage_blocked_plot_path_leaves_no_output(tmp_path, raw_corpus, blank_nlp, quick_selector):
    blocked = tmp_path / "blocked"
    blocked.write_text("", encoding="utf-8")
    cleaner = TextCleaner({'and', 'the', 'with', 'fig'}, nlp=blank_nlp)

    with pytest.raises(ExportError) as excinfo:
        paper_analysis.run_topics(
            text_folder=raw_corpus,
            vis_folder=tmp_path / "lda_vis",
            plot_path=blocked / "sub" / "Coherence_Score.png",
            table_path=tmp_path / "Coherence_Score.csv",
            open_browser=False,
            cleaner=cleaner,
            selector=quick_selector,
        )

    assert str(blocked) in str(excinfo.value)
    assert not (tmp_path / "lda_vis").exists()
    assert not (tmp_path / "Coherence_Score.csv").exists()

def test_topics_stage_serves_the_exported_payload(tmp_path, raw_corpus, blank_nlp, quick_selector, monkeypatch):
    prepared, served = [], []
    real_build = paper_analysis.build_vis_payload

    def counting_build(*args, **kwargs):
        payload = real_build(*args, **kwargs)
        prepared.append(payload)
        return payload

    monkeypatch.setattr(paper_analysis, "build_vis_payload", counting_build)
    monkeypatch.setattr("utils.model_export.pyLDAvis.show", lambda payload, **kwargs: served.append(kwargs))
    cleaner = TextCleaner({'and', 'the', 'with', 'fig'}, nlp=blank_nlp)

    paper_analysis.run_topics(
        text_folder=raw_corpus,
        vis_folder=tmp_path / "lda_vis",
        plot_path=tmp_path / "Coherence_Score.png",
        table_path=tmp_path / "Coherence_Score.csv",
        open_browser=True,
        cleaner=cleaner,
        selector=quick_selector,
    )

    assert len(prepared) == 1
    assert served == [{'local': True, 'open_browser': True}]
    assert (tmp_path / "lda_vis" / "lda.json").exists()

def test_cleaning_and_frequency_stages(tmp_path, raw_corpus, blank_nlp):
    clean_dir = tmp_path / "clean"
    cleaner = TextCleaner({'and', 'the', 'with'}, nlp=blank_nlp)
    written = paper_analysis.run_cleaning(raw_corpus, clean_dir, cleaner=cleaner)
    assert len(written) == 6

    chart = paper_analysis.run_frequency(clean_folder=clean_dir, output_path=tmp_path / "freq.png")
    assert chart.endswith("freq.png")

def test_frequency_stage_for_domain(tmp_path, raw_corpus):
    domain_dir = tmp_path / "domains"
    (domain_dir / "Electricity_Forecasting").mkdir(parents=True)
    (domain_dir / "Electricity_Forecasting" / "a.txt").write_text("load forecast grid grid model",
                                                                   encoding="utf-8")

    chart = paper_analysis.run_frequency("Electricity_Forecasting", domain_folder=domain_dir,
                                         output_path=tmp_path / "domain.png")
    assert (tmp_path / "domain.png").exists()
    assert chart.endswith("domain.png")

def test_tfidf_stage(tmp_path, raw_corpus, monkeypatch):
    monkeypatch.setattr("utils.visualization.WORDCLOUD_SIZE", 400)
    monkeypatch.setattr("utils.visualization.WORDCLOUD_DPI", 100)
    chart = paper_analysis.run_tfidf(clean_folder=raw_corpus, output_path=tmp_path / "cloud.png",
                                     base_stopwords={'and', 'the', 'with'})
    assert (tmp_path / "cloud.png").exists()
    assert chart.endswith("cloud.png")

def test_main_exits_on_missing_corpus(tmp_path, monkeypatch):
    monkeypatch.setattr(paper_analysis, "OUTPUT_FOLDER", str(tmp_path / "out"))
    monkeypatch.setattr(paper_analysis, "validate_config", lambda: None)
    monkeypatch.setattr(paper_analysis, "initialize_nltk", lambda: None)
    monkeypatch.setattr(paper_analysis, "run_frequency",
                        lambda domain: paper_analysis.load_documents(tmp_path / "nowhere"))

    with pytest.raises(SystemExit) as excinfo:
        paper_analysis.main(["frequency"])
    assert excinfo.value.code == 1
