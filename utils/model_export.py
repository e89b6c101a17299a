import logging
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import pyLDAvis
from pyLDAvis.urls import D3_LOCAL, LDAVIS_LOCAL, LDAVIS_CSS_LOCAL

from config import RELEVANCE_TERMS
from errors import ExportError

# Renderer assets shipped with pyLDAvis, copied next to index.html
VIS_ASSETS = (D3_LOCAL, LDAVIS_LOCAL, LDAVIS_CSS_LOCAL)

@contextmanager
def managed_temp_directory(parent: Optional[Path] = None):
    temp_dir = Path(tempfile.mkdtemp(dir=parent))
    try:
        yield temp_dir
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

def build_vis_payload(artifact, relevance_terms: int = RELEVANCE_TERMS):
    """
    Prepare the LDAvis payload of a fitted topic model.

    Topic order is kept as fitted so topic ids match the rest of the
    pipeline's logs and tables.
    """
    artifact.validate()
    return pyLDAvis.prepare(
        topic_term_dists=artifact.phi,
        doc_topic_dists=artifact.theta,
        doc_lengths=artifact.doc_lengths,
        vocab=artifact.vocabulary,
        term_frequency=artifact.term_frequencies,
        R=relevance_terms,
        sort_topics=False,
        n_jobs=1
    )

def write_vis_files(payload, directory: Path) -> Path:
    """Write `lda.json`, `index.html` and the renderer assets it loads into `directory`."""
    directory.mkdir(parents=True, exist_ok=True)
    for asset in VIS_ASSETS:
        shutil.copy(asset, directory / Path(asset).name)

    with open(directory / "lda.json", "w", encoding="utf-8") as f:
        pyLDAvis.save_json(payload, f)
    with open(directory / "index.html", "w", encoding="utf-8") as f:
        pyLDAvis.save_html(
            payload, f,
            d3_url=Path(D3_LOCAL).name,
            ldavis_url=Path(LDAVIS_LOCAL).name,
            ldavis_css_url=Path(LDAVIS_CSS_LOCAL).name
        )
    return directory

def publish_outputs(staged: Sequence[Tuple[Path, Path]]) -> None:
    """
    Move staged files onto their targets.

    Every target folder is created before the first move, so a blocked
    target fails the whole batch without publishing anything.

    Raises:
        ExportError: Naming the target that could not be created or written.
    """
    for _, target in staged:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logging.error(f"Cannot create output folder for {target}: {e}")
            raise ExportError(target, e) from e

    for source, target in staged:
        try:
            shutil.move(str(source), str(target))
        except OSError as e:
            logging.error(f"Failed to write {target}: {e}")
            raise ExportError(target, e) from e
        logging.info(f"Save Complete: {target}")

def export_topic_model(artifact, output_dir: Union[str, Path],
                       relevance_terms: int = RELEVANCE_TERMS,
                       open_browser: bool = False):
    """
    Write the interactive topic visualization to `output_dir`.

    The directory receives `lda.json` (phi, theta, document lengths,
    vocabulary, term frequencies and R as prepared by LDAvis), `index.html`
    and the JavaScript and CSS it loads, so the page renders offline. Files
    are rendered into a scratch directory first, so a failure leaves no
    partial output behind.

    Args:
        artifact: A TopicModelArtifact from TopicModelSelector.
        output_dir: Target directory, created if needed.
        relevance_terms: Terms listed per topic (R).
        open_browser: Serve the page locally and open it once written.

    Returns:
        The prepared LDAvis payload, reusable with `serve_payload`.

    Raises:
        ExportError: If the directory or any file cannot be written.
    """
    output_dir = Path(output_dir)
    payload = build_vis_payload(artifact, relevance_terms)

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        with managed_temp_directory(output_dir) as temp_dir:
            write_vis_files(payload, temp_dir)
            for staged in sorted(temp_dir.iterdir()):
                shutil.move(str(staged), str(output_dir / staged.name))
    except OSError as e:
        logging.error(f"Failed to export topic model to {output_dir}: {e}")
        raise ExportError(output_dir, e) from e

    logging.info(f"Save Complete: {output_dir}")

    if open_browser:
        serve_payload(payload)

    return payload

def serve_payload(payload):
    """Serve the visualization with its bundled assets from a local web server; blocks until interrupted."""
    pyLDAvis.show(payload, local=True, open_browser=True)

def save_coherence_table(sweep, path: Union[str, Path]) -> Path:
    """Write the (num_topics, coherence) sweep as CSV; failed candidates are empty cells."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        sweep.to_frame().to_csv(path, index=False)
    except OSError as e:
        raise ExportError(path, e) from e

    logging.info(f"Save Complete: {path}")
    return path
