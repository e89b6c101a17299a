import logging
import re
import unicodedata
from pathlib import Path
from typing import Iterable, List, Optional, Set, Union

import nltk
import spacy
from nltk.corpus import stopwords

from config import LANGUAGE_MODEL, MIN_TOKEN_LENGTH
from utils.corpus import Document

# Numbers, including decimals and anything glued to them (units, "2nd", "10/20")
NUMBER_PATTERN = re.compile(r"\b\d*\.?\d+[\w/]*\b")
# Greek and Coptic, Mathematical Operators
SYMBOL_PATTERN = re.compile(r"[\u0370-\u03FF\u2200-\u22FF]+")
ARTIFACT_PATTERN = re.compile(r"[·〠ð]|\bet al\b")
PUNCTUATION_PATTERN = re.compile(r"[^\w\s]|_")
WORD_PATTERN = re.compile(r"\w+")

def sanitize_text(text: str) -> str:
    """
    Sanitize text by removing non-ASCII characters and normalizing Unicode.

    Args:
        text (str): Input text to sanitize

    Returns:
        str: Sanitized text
    """
    normalized = unicodedata.normalize('NFKD', text)
    return normalized.encode('ascii', 'ignore').decode('ascii')

def clean_text(text: str) -> str:
    """
    Clean text by removing extra whitespace and normalizing line endings.

    Args:
        text (str): Input text to clean

    Returns:
        str: Cleaned text
    """
    text = text.replace('\r\n', '\n').replace('\r', '\n')
    text = re.sub(r'\s+', ' ', text)
    return text.strip()

def remove_noise(text: str) -> str:
    """
    Lowercase and strip the noise patterns typical of extracted papers.

    Removes numbers (with attached alphanumerics), Greek letters and math
    symbols, stray glyphs and "et al", and repairs the letter-spaced
    "a b s t r a c t" / "a r t i c l e i n f o" headers publishers emit.
    """
    text = text.lower()
    text = NUMBER_PATTERN.sub("", text)
    text = SYMBOL_PATTERN.sub("", text)
    text = ARTIFACT_PATTERN.sub("", text)
    text = text.replace("a b s t r a c t", "abstract ")
    text = text.replace("a r t i c l e i n f o", "")
    return clean_text(text)

def strip_punctuation(text: str) -> str:
    return PUNCTUATION_PATTERN.sub("", text)

def remove_stopwords(text: str, stop_words: Set[str]) -> str:
    """Drop words found in `stop_words`, ignoring punctuation attached to them ("fig." matches "fig")."""
    return " ".join(word for word in text.split() if strip_punctuation(word) not in stop_words)

def english_stopwords() -> Set[str]:
    """NLTK's English stopword list, downloading the corpus on first use."""
    try:
        return set(stopwords.words('english'))
    except LookupError:
        nltk.download('stopwords', quiet=True)
        return set(stopwords.words('english'))

def load_stopwords_file(path: Optional[Union[str, Path]]) -> Set[str]:
    """
    Read a whitespace/newline separated stopword file.

    A missing file is tolerated: a warning is logged and an empty set returned,
    so callers continue with the built-in and inline lists only.
    """
    if path is None:
        return set()

    path = Path(path)
    try:
        content = path.read_text(encoding='utf-8')
    except FileNotFoundError:
        logging.warning(f"Custom stopwords file not found at {path}; continuing with built-in stopwords only")
        return set()

    words = {word.lower() for word in content.split()}
    logging.info(f"Loaded {len(words)} stopwords from {path}")
    return words

def build_stopword_set(custom: Iterable[str] = (),
                       stopwords_file: Optional[Union[str, Path]] = None,
                       base: Optional[Iterable[str]] = None) -> Set[str]:
    """
    Combine the built-in English list, an inline custom list and an optional file.

    Args:
        custom: Inline domain-specific stopwords.
        stopwords_file: Optional external list; its absence is only a warning.
        base: Replaces the NLTK English list when given.
    """
    combined = set(base) if base is not None else english_stopwords()
    combined.update(word.lower() for word in custom)
    combined.update(load_stopwords_file(stopwords_file))
    return combined

class TextCleaner:
    """
    Turns raw paper text into a space-joined string of lemmatized tokens.

    Steps, in order: lowercase and noise removal, stopword removal,
    punctuation removal, lemmatization (spaCy), tokenization, and dropping
    tokens shorter than `min_token_length`.

    Args:
        stop_words: Words removed before lemmatization.
        nlp: A spaCy pipeline; defaults to LANGUAGE_MODEL with parser and ner
            disabled. Pipelines without a lemmatizer keep the surface form.
        min_token_length: Shortest token kept.
    """

    def __init__(self, stop_words: Set[str], nlp=None, min_token_length: int = MIN_TOKEN_LENGTH):
        self.stop_words = set(stop_words)
        self.nlp = nlp if nlp is not None else spacy.load(LANGUAGE_MODEL, disable=['parser', 'ner'])
        self.min_token_length = min_token_length
        # Papers easily exceed spaCy's default 1M character guard
        self.nlp.max_length = max(self.nlp.max_length, 5_000_000)

    def lemmatize(self, text: str) -> str:
        doc = self.nlp(text)
        return " ".join((token.lemma_ or token.text).lower() for token in doc if not token.is_space)

    def tokenize(self, text: str) -> List[str]:
        text = remove_noise(text)
        text = remove_stopwords(text, self.stop_words)
        text = strip_punctuation(text)
        text = self.lemmatize(text)
        return [word for word in WORD_PATTERN.findall(text) if len(word) >= self.min_token_length]

    def clean(self, text: str) -> str:
        return " ".join(self.tokenize(text))

    def clean_documents(self, documents: Iterable[Document]) -> List[Document]:
        """
        Clean every document; documents left with no tokens are dropped.

        Identifier and text travel together in one record, so filtering
        cannot misalign them.
        """
        cleaned = []
        for document in documents:
            text = self.clean(document.text)
            if text:
                cleaned.append(Document(doc_id=document.doc_id, text=text))
            else:
                logging.warning(f"Document {document.doc_id} is empty after cleaning and was removed")
        logging.info(f"Cleaned {len(cleaned)} documents")
        return cleaned
