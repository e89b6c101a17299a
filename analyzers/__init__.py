from .statistics import StatisticalAnalyzer
from .topic import TopicModelSelector, build_document_term_matrix, select_topic_count

__all__ = [
    'StatisticalAnalyzer',
    'TopicModelSelector',
    'build_document_term_matrix',
    'select_topic_count'
]
