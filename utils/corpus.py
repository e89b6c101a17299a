import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Union

from errors import CorpusConfigurationError, ExportError

@dataclass(frozen=True)
class Document:
    """One paper: its source file name and its current body of text."""
    doc_id: str
    text: str

def load_documents(directory: Union[str, Path], pattern: str = '*.txt') -> List[Document]:
    """
    Read every matching file in a directory as a Document, sorted by name.

    Raises:
        CorpusConfigurationError: If the directory does not exist or holds no
            file matching the pattern.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise CorpusConfigurationError(directory, "input directory not found")

    files = sorted(p for p in directory.glob(pattern) if p.is_file())
    if not files:
        raise CorpusConfigurationError(directory, f"no '{pattern}' files found")

    documents = []
    for file_path in files:
        text = file_path.read_text(encoding='utf-8', errors='replace')
        documents.append(Document(doc_id=file_path.name, text=text))

    logging.info(f"Loaded {len(documents)} documents from {directory}")
    return documents

def save_documents(documents: Iterable[Document], directory: Union[str, Path]) -> List[Path]:
    """Write each document to `directory/doc_id`, one file per document."""
    directory = Path(directory)
    written = []
    try:
        directory.mkdir(parents=True, exist_ok=True)
        for document in documents:
            target = directory / document.doc_id
            target.write_text(document.text, encoding='utf-8')
            written.append(target)
    except OSError as e:
        raise ExportError(directory, e) from e

    logging.info(f"Saved {len(written)} documents to {directory}")
    return written

def drop_empty(documents: Iterable[Document]) -> List[Document]:
    """Keep documents whose text has any non-whitespace content."""
    kept = []
    for document in documents:
        if document.text.strip():
            kept.append(document)
        else:
            logging.info(f"Dropping empty document: {document.doc_id}")
    return kept
