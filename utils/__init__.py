from .corpus import Document, load_documents, save_documents
from .text_processing import sanitize_text, clean_text, remove_noise, TextCleaner, build_stopword_set

__all__ = [
    'Document',
    'load_documents',
    'save_documents',
    'sanitize_text',
    'clean_text',
    'remove_noise',
    'TextCleaner',
    'build_stopword_set'
]

# Note: model_export and visualization are imported by clients directly to keep plotting libraries out of light imports
