import matplotlib.pyplot as plt
import seaborn as sns
from wordcloud import WordCloud
import numpy as np
from typing import List, Tuple, Union
from pathlib import Path

from config import (
    COHERENCE_PLOT_WIDTH,
    COHERENCE_PLOT_HEIGHT,
    COHERENCE_PLOT_DPI,
    FREQUENCY_PLOT_DPI,
    WORDCLOUD_SIZE,
    WORDCLOUD_DPI,
    WORDCLOUD_SEED
)
from errors import ExportError

class VisualizationGenerator:
    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)
        # Set matplotlib to use Agg backend for better memory management
        plt.switch_backend('Agg')

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        plt.close('all')  # Ensure all figures are closed

    def _resolve(self, output_path, default_name: str) -> Path:
        return Path(output_path) if output_path else self.output_dir / default_name

    def _save(self, fig, path: Path, dpi: int, **kwargs) -> str:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fig.savefig(path, dpi=dpi, **kwargs)
        except OSError as e:
            raise ExportError(path, e) from e
        return str(path)

    def generate_frequency_chart(self, frequencies: List[Tuple[str, int]], title: str,
                                 output_path=None) -> str:
        """Horizontal bar chart of (word, count) pairs, most frequent on top"""
        path = self._resolve(output_path, "frequency.png")

        try:
            plt.close('all')

            words = [word for word, _ in frequencies]
            counts = [count for _, count in frequencies]

            fig, ax = plt.subplots(figsize=(8, max(4, 0.25 * len(words) + 1)))
            sns.barplot(x=counts, y=words, color='steelblue', orient='h', ax=ax)
            ax.set_title(title)
            ax.set_xlabel('Frequency')
            ax.set_ylabel('Word')
            sns.despine(ax=ax)

            plt.tight_layout()
            return self._save(fig, path, FREQUENCY_PLOT_DPI, bbox_inches='tight')

        finally:
            plt.close('all')

    def generate_tfidf_wordcloud(self, scores: List[Tuple[str, float]], output_path=None) -> str:
        """Word cloud sized by TF-IDF weight, largest terms placed first"""
        path = self._resolve(output_path, "wordcloud.png")

        try:
            plt.close('all')

            wordcloud = WordCloud(
                width=WORDCLOUD_SIZE,
                height=WORDCLOUD_SIZE,
                background_color='white',
                max_words=len(scores) or 1,
                prefer_horizontal=1.0,
                colormap='Dark2',
                random_state=WORDCLOUD_SEED
            ).generate_from_frequencies(dict(scores))

            inches = WORDCLOUD_SIZE / WORDCLOUD_DPI
            fig = plt.figure(figsize=(inches, inches))
            plt.imshow(wordcloud, interpolation='bilinear')
            plt.axis('off')
            return self._save(fig, path, WORDCLOUD_DPI, bbox_inches='tight')

        finally:
            plt.close('all')

    def generate_coherence_plot(self, topic_counts: List[int], scores: List[float],
                                output_path=None, measure: str = 'c_v') -> str:
        """
        Coherence score against number of topics.

        Failed candidates (None) are drawn as gaps in the line. The image is
        exactly COHERENCE_PLOT_WIDTH x COHERENCE_PLOT_HEIGHT pixels.
        """
        path = self._resolve(output_path, "coherence.png")

        try:
            plt.close('all')

            values = np.array([np.nan if s is None else s for s in scores], dtype=float)
            fig, ax = plt.subplots(figsize=(COHERENCE_PLOT_WIDTH / COHERENCE_PLOT_DPI,
                                            COHERENCE_PLOT_HEIGHT / COHERENCE_PLOT_DPI))
            ax.plot(topic_counts, values, marker='o', color='#4a90e2')
            ax.set_xticks(topic_counts)
            ax.set_xlabel('Number of Topics (k)')
            ax.set_ylabel(f"Coherence ('{measure}') score")
            ax.set_title('Coherence Score vs. Number of Topics')

            return self._save(fig, path, COHERENCE_PLOT_DPI)

        finally:
            plt.close('all')
