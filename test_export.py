import json

import matplotlib.image as mpimg
import numpy as np
import pandas as pd
import pytest

import utils.visualization as visualization
from analyzers.topic import CoherenceSweep, TopicModelArtifact
from errors import ExportError
from utils.model_export import export_topic_model, save_coherence_table
from utils.visualization import VisualizationGenerator

@pytest.fixture
def artifact():
    return TopicModelArtifact(
        phi=np.array([[0.4, 0.3, 0.2, 0.1], [0.1, 0.1, 0.3, 0.5]]),
        theta=np.array([[0.9, 0.1], [0.2, 0.8], [0.5, 0.5]]),
        doc_lengths=np.array([10, 12, 8]),
        vocabulary=["solar", "grid", "market", "price"],
        term_frequencies=np.array([9, 8, 7, 6]),
        doc_ids=["a.txt", "b.txt", "c.txt"],
    )

def test_export_writes_payload_page_and_assets(tmp_path, artifact):
    out = tmp_path / "lda_vis"
    export_topic_model(artifact, out, relevance_terms=30)

    assert sorted(p.name for p in out.iterdir()) == [
        "d3.v5.min.js", "index.html", "lda.json", "ldavis.v1.0.0.css", "ldavis.v3.0.0.js"
    ]
    payload = json.loads((out / "lda.json").read_text(encoding="utf-8"))
    assert {"mdsDat", "tinfo", "token.table", "R"} <= set(payload)
    assert payload["R"] <= 30
    assert set(payload["tinfo"]["Term"]) == set(artifact.vocabulary)

    page = (out / "index.html").read_text(encoding="utf-8")
    assert "ldavis.v3.0.0.js" in page
    assert "cdn.jsdelivr.net" not in page
    assert "d3js.org" not in page

def test_export_rejects_invalid_artifact(tmp_path, artifact):
    artifact.theta = np.array([[0.9, 0.3], [0.2, 0.8], [0.5, 0.5]])
    with pytest.raises(ValueError):
        export_topic_model(artifact, tmp_path / "lda_vis")
    assert not (tmp_path / "lda_vis").exists()

def test_export_error_names_target(tmp_path, artifact):
    blocker = tmp_path / "taken"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(ExportError) as excinfo:
        export_topic_model(artifact, blocker)
    assert str(blocker) in str(excinfo.value)

def test_coherence_table_keeps_failed_candidates(tmp_path):
    sweep = CoherenceSweep(topic_counts=[2, 3, 4], scores=[0.41, None, 0.38])
    path = save_coherence_table(sweep, tmp_path / "coherence.csv")

    frame = pd.read_csv(path)
    assert frame["num_topics"].tolist() == [2, 3, 4]
    assert frame["coherence"].isna().tolist() == [False, True, False]

def test_coherence_plot_has_fixed_geometry(tmp_path):
    with VisualizationGenerator(tmp_path) as viz:
        path = viz.generate_coherence_plot([2, 3, 4, 5], [0.3, None, 0.5, 0.4])

    image = mpimg.imread(path)
    assert image.shape[:2] == (800, 1000)

def test_frequency_chart_is_written(tmp_path):
    with VisualizationGenerator(tmp_path) as viz:
        path = viz.generate_frequency_chart([("grid", 5), ("solar", 3)], "Electricity Forecasting",
                                            tmp_path / "charts" / "freq.png")
    assert path.endswith("freq.png")
    assert (tmp_path / "charts" / "freq.png").stat().st_size > 0

def test_tfidf_wordcloud_is_written(tmp_path, monkeypatch):
    monkeypatch.setattr(visualization, "WORDCLOUD_SIZE", 400)
    monkeypatch.setattr(visualization, "WORDCLOUD_DPI", 100)
    with VisualizationGenerator(tmp_path) as viz:
        path = viz.generate_tfidf_wordcloud([("grid", 0.4), ("solar", 0.2), ("wind", 0.1)])
    assert mpimg.imread(path).shape[0] > 0

def test_plot_into_blocked_folder_raises_export_error(tmp_path):
    blocker = tmp_path / "taken"
    blocker.write_text("", encoding="utf-8")
    with VisualizationGenerator(tmp_path) as viz:
        with pytest.raises(ExportError) as excinfo:
            viz.generate_coherence_plot([2, 3], [0.3, 0.4], blocker / "sub" / "coherence.png")
    assert str(blocker) in str(excinfo.value)
