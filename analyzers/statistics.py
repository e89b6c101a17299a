import logging
from collections import Counter
from typing import Dict, Iterable, List, Tuple

import numpy as np
from sklearn.feature_extraction.text import TfidfVectorizer

from config import MIN_TOKEN_LENGTH
from utils.corpus import Document

def count_term_frequencies(token_lists: Iterable[List[str]],
                           stop_words: Iterable[str] = (),
                           min_length: int = MIN_TOKEN_LENGTH) -> Counter:
    """
    Fold per-document token lists into a single term -> count mapping.

    Tokens in `stop_words` or shorter than `min_length` are not counted.
    """
    excluded = set(stop_words)
    frequencies = Counter()
    for tokens in token_lists:
        frequencies.update(
            token for token in tokens
            if len(token) >= min_length and token not in excluded
        )
    return frequencies

def top_terms(frequencies: Dict[str, float], n: int) -> List[Tuple[str, float]]:
    """The `n` highest-valued terms, descending; ties are broken alphabetically."""
    return sorted(frequencies.items(), key=lambda item: (-item[1], item[0]))[:n]

class StatisticalAnalyzer:
    """
    Corpus-level word statistics for the frequency and word cloud stages:
      1. Raw word frequencies over lowercased, whitespace-split documents.
      2. Mean TF-IDF weight per term across documents.
    """

    def __init__(self, min_token_length: int = MIN_TOKEN_LENGTH):
        self.min_token_length = min_token_length

    def word_frequencies(self, documents: List[Document], top_n: int,
                         stop_words: Iterable[str] = ()) -> List[Tuple[str, int]]:
        """
        Count word occurrences across `documents` and return the top `top_n`.

        Args:
            documents: Cleaned documents (whole corpus or a domain subset).
            top_n: Number of (word, count) pairs to return.
            stop_words: Extra words to exclude from the count.
        """
        logging.info(f"Counting word frequencies over {len(documents)} documents...")
        token_lists = (document.text.lower().split() for document in documents)
        frequencies = count_term_frequencies(token_lists, stop_words, self.min_token_length)
        logging.info(f"Found {len(frequencies)} distinct words")
        return top_terms(frequencies, top_n)

    def tfidf_scores(self, documents: List[Document], stop_words: Iterable[str] = (),
                     top_n: int = 100) -> List[Tuple[str, float]]:
        """
        Compute the mean TF-IDF weight of each term across documents.

        Steps:
          1. Build a document-term matrix with TfidfVectorizer (lowercased,
             punctuation and digits excluded by the token pattern).
          2. Average each column over all documents.
          3. Return the `top_n` terms by mean weight.

        Returns:
            A list of (term, mean_weight) pairs, descending.
        """
        logging.info(f"Starting TF-IDF analysis with {len(documents)} documents...")
        vectorizer = TfidfVectorizer(
            lowercase=True,
            stop_words=sorted(set(stop_words)) or None,
            token_pattern=r"(?u)\b[^\W\d_]{%d,}\b" % self.min_token_length
        )

        try:
            tfidf_matrix = vectorizer.fit_transform([document.text for document in documents])
        except ValueError as e:
            # Raised when every document is empty or only stopwords
            logging.error(f"Error in TF-IDF analysis: {str(e)}")
            raise

        mean_scores = np.asarray(tfidf_matrix.mean(axis=0)).ravel()
        scores = dict(zip(vectorizer.get_feature_names_out(), mean_scores.tolist()))
        return top_terms(scores, top_n)
