from typing import Dict, FrozenSet

class StopwordConfig:
    """Inline stopword lists layered on top of the built-in English list"""

    # Too common across the corpus to discriminate between topics
    TOPIC_MODELING = frozenset({
        'fig', 'table', 'example', 'figure', 'energy', 'forecasting',
        'prediction', 'performance', 'forecast', 'set', 'model', 'data',
        'time', 'method', 'base', 'variable', 'study', 'parameter', 'al',
        'value', 'input', 'series', 'approach', 'predict', 'propose'
    })

    # Citation and publisher residue that dominates TF-IDF weights
    TFIDF = frozenset({'al', 'wiley'})

    # Whole-corpus frequency chart; grows as the chart surfaces noise
    FREQUENCY = frozenset()

    DOMAINS: Dict[str, FrozenSet[str]] = {
        'Electricity_Forecasting': frozenset({
            'model', 'data', 'energy', 'forecast', 'time', 'prediction',
            'method', 'base', 'variable', 'set', 'study', 'parameter', 'al',
            'value', 'performance', 'input', 'series', 'approach',
            'forecasting', 'predict', 'propose', 'dataset'
        })
    }

    @classmethod
    def for_domain(cls, domain: str) -> FrozenSet[str]:
        """Stopwords for a domain subset; unknown domains fall back to the corpus list."""
        return cls.DOMAINS.get(domain, cls.FREQUENCY)
