import os
import logging
from typing import Dict, Any

# Folder Configuration
DATA_FOLDER = os.environ.get("DATA_FOLDER", "data")
PDF_FOLDER = os.environ.get("PDF_FOLDER", os.path.join(DATA_FOLDER, "pdf"))
TEXT_FOLDER = os.environ.get("TEXT_FOLDER", os.path.join(DATA_FOLDER, "txt"))
CLEAN_TEXT_FOLDER = os.environ.get("CLEAN_TEXT_FOLDER", os.path.join(DATA_FOLDER, "txt_clean"))
DOMAIN_TEXT_FOLDER = os.environ.get("DOMAIN_TEXT_FOLDER", os.path.join(DATA_FOLDER, "txt_domain"))
STOPWORDS_FILE = os.environ.get("STOPWORDS_FILE", os.path.join(DATA_FOLDER, "stop_words_english.txt"))
OUTPUT_FOLDER = os.environ.get("OUTPUT_FOLDER", "Output")

# Output Artifacts
LDA_VIS_FOLDER = os.environ.get("LDA_VIS_FOLDER", os.path.join(OUTPUT_FOLDER, "lda_vis"))
COHERENCE_PLOT_PATH = os.environ.get("COHERENCE_PLOT_PATH", os.path.join(OUTPUT_FOLDER, "Coherence_Score.png"))
COHERENCE_TABLE_PATH = os.environ.get("COHERENCE_TABLE_PATH", os.path.join(OUTPUT_FOLDER, "Coherence_Score.csv"))
FREQUENCY_PLOT_PATH = os.environ.get("FREQUENCY_PLOT_PATH", os.path.join(OUTPUT_FOLDER, "All_Documents_Frequency.png"))
WORDCLOUD_PATH = os.environ.get("WORDCLOUD_PATH", os.path.join(OUTPUT_FOLDER, "Wordcloud_All.png"))

# Reproducibility
RANDOM_SEED = 3  # Seeds the whole topic-count sweep and the final fit
WORDCLOUD_SEED = 42  # Word cloud layout

# Topic Analysis Configuration
MIN_TOPICS = 2  # Smallest candidate number of topics
MAX_TOPICS = 15  # Largest candidate number of topics (inclusive)
TOPIC_STEP = 1
SWEEP_ITERATIONS = 50  # Inference iterations for each candidate fit
SWEEP_PASSES = 1
FINAL_ITERATIONS = 400  # Inference iterations for the selected model
FINAL_PASSES = 20
COHERENCE_MEASURE = 'c_v'
RELEVANCE_TERMS = 30  # Terms shown per topic in the interactive view (R)

# Language Processing
MIN_TOKEN_LENGTH = 2  # Tokens shorter than this are dropped
LANGUAGE_MODEL = 'en_core_web_sm'  # spaCy model used for lemmatization

# Frequency / TF-IDF Configuration
TOP_N_WORDS = 50  # Bars in the whole-corpus frequency chart
TOP_N_DOMAIN_WORDS = 20  # Bars in a domain-subset frequency chart
TOP_N_TFIDF = 100  # Terms in the TF-IDF word cloud

# Plot Configuration
COHERENCE_PLOT_WIDTH = 1000  # Pixels
COHERENCE_PLOT_HEIGHT = 800  # Pixels
COHERENCE_PLOT_DPI = 100
FREQUENCY_PLOT_DPI = 300
WORDCLOUD_SIZE = 4000  # Pixels, square
WORDCLOUD_DPI = 1000

def setup_folders() -> None:
    """Create necessary folders if they don't exist"""
    folders = [OUTPUT_FOLDER, LDA_VIS_FOLDER]
    for folder in folders:
        try:
            os.makedirs(folder, exist_ok=True)
            logging.info(f"Ensured folder exists: {folder}")
        except Exception as e:
            logging.error(f"Failed to create folder {folder}: {str(e)}")
            raise

def validate_topic_settings() -> None:
    """Validate topic analysis settings"""
    if MIN_TOPICS < 1:
        raise ValueError("MIN_TOPICS must be at least 1")

    if MIN_TOPICS > MAX_TOPICS:
        raise ValueError("MIN_TOPICS must not exceed MAX_TOPICS")

    if TOPIC_STEP <= 0:
        raise ValueError("TOPIC_STEP must be positive")

    if SWEEP_ITERATIONS <= 0 or FINAL_ITERATIONS <= 0:
        raise ValueError("SWEEP_ITERATIONS and FINAL_ITERATIONS must be positive")

    if SWEEP_PASSES <= 0 or FINAL_PASSES <= 0:
        raise ValueError("SWEEP_PASSES and FINAL_PASSES must be positive")

    if RELEVANCE_TERMS <= 0:
        raise ValueError("RELEVANCE_TERMS must be positive")

def validate_text_limits() -> None:
    """Validate text processing limits"""
    if MIN_TOKEN_LENGTH <= 0:
        raise ValueError("MIN_TOKEN_LENGTH must be positive")

    for value, name in [(TOP_N_WORDS, "TOP_N_WORDS"),
                        (TOP_N_DOMAIN_WORDS, "TOP_N_DOMAIN_WORDS"),
                        (TOP_N_TFIDF, "TOP_N_TFIDF")]:
        if value <= 0:
            raise ValueError(f"{name} must be positive")

def validate_plot_settings() -> None:
    """Validate image geometry"""
    plot_checks = [
        (COHERENCE_PLOT_WIDTH, "COHERENCE_PLOT_WIDTH"),
        (COHERENCE_PLOT_HEIGHT, "COHERENCE_PLOT_HEIGHT"),
        (COHERENCE_PLOT_DPI, "COHERENCE_PLOT_DPI"),
        (FREQUENCY_PLOT_DPI, "FREQUENCY_PLOT_DPI"),
        (WORDCLOUD_SIZE, "WORDCLOUD_SIZE"),
        (WORDCLOUD_DPI, "WORDCLOUD_DPI")
    ]

    for value, name in plot_checks:
        if value <= 0:
            raise ValueError(f"{name} must be positive")

def validate_config() -> None:
    """
    Validate all configuration settings.
    Raises ValueError if any validation fails.
    """
    try:
        setup_folders()
        validate_topic_settings()
        validate_text_limits()
        validate_plot_settings()
        logging.info("Configuration validated successfully")
    except Exception as e:
        logging.error(f"Configuration validation failed: {str(e)}")
        raise

def get_config() -> Dict[str, Any]:
    """
    Get configuration as a dictionary.
    Validates configuration before returning.
    """
    validate_config()
    return {
        # Folders
        'pdf_folder': PDF_FOLDER,
        'text_folder': TEXT_FOLDER,
        'clean_text_folder': CLEAN_TEXT_FOLDER,
        'domain_text_folder': DOMAIN_TEXT_FOLDER,
        'stopwords_file': STOPWORDS_FILE,
        'output_folder': OUTPUT_FOLDER,

        # Output Artifacts
        'lda_vis_folder': LDA_VIS_FOLDER,
        'coherence_plot_path': COHERENCE_PLOT_PATH,
        'coherence_table_path': COHERENCE_TABLE_PATH,
        'frequency_plot_path': FREQUENCY_PLOT_PATH,
        'wordcloud_path': WORDCLOUD_PATH,

        # Reproducibility
        'random_seed': RANDOM_SEED,
        'wordcloud_seed': WORDCLOUD_SEED,

        # Topic Analysis
        'min_topics': MIN_TOPICS,
        'max_topics': MAX_TOPICS,
        'topic_step': TOPIC_STEP,
        'sweep_iterations': SWEEP_ITERATIONS,
        'sweep_passes': SWEEP_PASSES,
        'final_iterations': FINAL_ITERATIONS,
        'final_passes': FINAL_PASSES,
        'coherence_measure': COHERENCE_MEASURE,
        'relevance_terms': RELEVANCE_TERMS,

        # Language Processing
        'min_token_length': MIN_TOKEN_LENGTH,
        'language_model': LANGUAGE_MODEL,

        # Frequency / TF-IDF
        'top_n_words': TOP_N_WORDS,
        'top_n_domain_words': TOP_N_DOMAIN_WORDS,
        'top_n_tfidf': TOP_N_TFIDF,

        # Plots
        'coherence_plot_size': (COHERENCE_PLOT_WIDTH, COHERENCE_PLOT_HEIGHT),
        'coherence_plot_dpi': COHERENCE_PLOT_DPI,
        'frequency_plot_dpi': FREQUENCY_PLOT_DPI,
        'wordcloud_size': WORDCLOUD_SIZE,
        'wordcloud_dpi': WORDCLOUD_DPI
    }

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    validate_config()
