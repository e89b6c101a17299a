import matplotlib
matplotlib.use('Agg')

import pytest
import spacy

from utils.corpus import Document

@pytest.fixture
def blank_nlp():
    """Tokenizer-only English pipeline; no model download needed."""
    return spacy.blank('en')

@pytest.fixture
def alpha_corpus():
    """Five documents over the same three terms with varying frequencies."""
    bodies = [
        "alpha alpha alpha beta gamma",
        "alpha beta beta beta gamma",
        "alpha beta gamma gamma gamma",
        "alpha alpha beta beta gamma",
        "beta gamma gamma alpha alpha alpha",
    ]
    return [Document(doc_id=f"paper_{i}.txt", text=body) for i, body in enumerate(bodies)]

@pytest.fixture
def themed_corpus():
    """Two clearly separated vocabularies, so topic models have something to find."""
    energy = "solar wind turbine grid battery storage power"
    finance = "market price stock trading portfolio risk return"
    bodies = []
    for i in range(6):
        words = (energy if i % 2 == 0 else finance).split()
        rotated = words[i % len(words):] + words[:i % len(words)]
        bodies.append(" ".join(rotated * 3))
    return [Document(doc_id=f"doc_{i}.txt", text=body) for i, body in enumerate(bodies)]
