import argparse
import os
import sys
import logging
from pathlib import Path
from typing import Optional

import nltk

from analyzers.statistics import StatisticalAnalyzer
from analyzers.topic import TopicModelSelector, TopicModelResult
from configs.stopwords import StopwordConfig
from config import (
    PDF_FOLDER,
    TEXT_FOLDER,
    CLEAN_TEXT_FOLDER,
    DOMAIN_TEXT_FOLDER,
    STOPWORDS_FILE,
    OUTPUT_FOLDER,
    LDA_VIS_FOLDER,
    COHERENCE_PLOT_PATH,
    COHERENCE_TABLE_PATH,
    FREQUENCY_PLOT_PATH,
    WORDCLOUD_PATH,
    RELEVANCE_TERMS,
    TOP_N_WORDS,
    TOP_N_DOMAIN_WORDS,
    TOP_N_TFIDF,
    validate_config
)
from errors import ExportError, PipelineError
from utils.corpus import load_documents, save_documents
from utils.model_export import (
    build_vis_payload,
    managed_temp_directory,
    publish_outputs,
    save_coherence_table,
    serve_payload,
    write_vis_files
)
from utils.pdf_extraction import PDFExtractor
from utils.text_processing import TextCleaner, build_stopword_set
from utils.visualization import VisualizationGenerator

STAGES = ['extract', 'clean', 'frequency', 'tfidf', 'topics']

def initialize_nltk():
    """
    Initialize NLTK resources once at startup, downloading the stopword
    corpus if it is missing.
    """
    try:
        nltk.data.find('corpora/stopwords')
    except LookupError:
        nltk.download('stopwords', quiet=True)

def parse_arguments(argv=None):
    """
    Parse command line arguments for the paper analysis pipeline.

    Returns:
        An argparse.Namespace with the parsed arguments.
    """
    parser = argparse.ArgumentParser(description='Research Paper Text Mining Pipeline')
    parser.add_argument('stage',
                        choices=STAGES + ['all'],
                        help='Pipeline stage to run')
    parser.add_argument('-d', '--domain',
                        type=str,
                        help='Frequency stage: analyze only this subfolder of the domain text folder')
    parser.add_argument('--no-browser',
                        action='store_true',
                        help='Do not serve and open the interactive topic view')
    return parser.parse_args(argv)

def run_extraction(pdf_folder=PDF_FOLDER, text_folder=TEXT_FOLDER):
    """Stage 1: one raw text file per PDF."""
    return PDFExtractor.extract_directory(pdf_folder, text_folder)

def run_cleaning(text_folder=TEXT_FOLDER, clean_folder=CLEAN_TEXT_FOLDER,
                 stopwords_file=STOPWORDS_FILE, cleaner: Optional[TextCleaner] = None):
    """Stage 2: cleaned, lemmatized copy of every raw text file."""
    documents = load_documents(text_folder)
    if cleaner is None:
        cleaner = TextCleaner(build_stopword_set(stopwords_file=stopwords_file))
    return save_documents(cleaner.clean_documents(documents), clean_folder)

def run_frequency(domain: Optional[str] = None, clean_folder=CLEAN_TEXT_FOLDER,
                  domain_folder=DOMAIN_TEXT_FOLDER, output_path=None) -> str:
    """
    Stage 3: bar chart of the most frequent words.

    The whole corpus shows the top TOP_N_WORDS words; a domain subset shows
    TOP_N_DOMAIN_WORDS after removing that domain's own stopwords.
    """
    if domain:
        documents = load_documents(Path(domain_folder) / domain)
        stop_words, top_n, title = StopwordConfig.for_domain(domain), TOP_N_DOMAIN_WORDS, domain.replace('_', ' ')
        output_path = output_path or Path(OUTPUT_FOLDER) / f"Freq_Chart_{domain}.png"
    else:
        documents = load_documents(clean_folder)
        stop_words, top_n, title = StopwordConfig.FREQUENCY, TOP_N_WORDS, "All documents frequency"
        output_path = output_path or FREQUENCY_PLOT_PATH

    frequencies = StatisticalAnalyzer().word_frequencies(documents, top_n, stop_words)
    with VisualizationGenerator(OUTPUT_FOLDER) as viz:
        saved = viz.generate_frequency_chart(frequencies, title, output_path)
    logging.info(f"Save Complete: {saved}")
    return saved

def run_tfidf(clean_folder=CLEAN_TEXT_FOLDER, output_path=WORDCLOUD_PATH,
              base_stopwords=None) -> str:
    """Stage 4: word cloud of the terms with the highest mean TF-IDF weight."""
    documents = load_documents(clean_folder)
    stop_words = build_stopword_set(custom=StopwordConfig.TFIDF, base=base_stopwords)

    scores = StatisticalAnalyzer().tfidf_scores(documents, stop_words, top_n=TOP_N_TFIDF)
    with VisualizationGenerator(OUTPUT_FOLDER) as viz:
        saved = viz.generate_tfidf_wordcloud(scores, output_path)
    logging.info(f"Save Complete: {saved}")
    return saved

def run_topics(text_folder=TEXT_FOLDER, stopwords_file=STOPWORDS_FILE,
               vis_folder=LDA_VIS_FOLDER, plot_path=COHERENCE_PLOT_PATH,
               table_path=COHERENCE_TABLE_PATH, open_browser: bool = True,
               cleaner: Optional[TextCleaner] = None,
               selector: Optional[TopicModelSelector] = None) -> TopicModelResult:
    """
    Stage 5: choose the number of topics by coherence and export the final model.

    Raw text is cleaned with the built-in, inline topic-modeling and file
    stopwords before the document-term matrix is built.
    """
    documents = load_documents(text_folder)
    if cleaner is None:
        stop_words = build_stopword_set(custom=StopwordConfig.TOPIC_MODELING, stopwords_file=stopwords_file)
        cleaner = TextCleaner(stop_words)
    if selector is None:
        selector = TopicModelSelector(verbose=True)

    result = selector.run(cleaner.clean_documents(documents))
    payload = build_vis_payload(result.artifact, RELEVANCE_TERMS)

    # Stage every artifact first; nothing reaches the output folders unless all of them render
    with managed_temp_directory() as staging:
        with VisualizationGenerator(staging) as viz:
            staged_plot = viz.generate_coherence_plot(result.sweep.topic_counts, result.sweep.scores,
                                                      staging / "coherence.png", selector.coherence)
        staged_table = save_coherence_table(result.sweep, staging / "coherence.csv")
        try:
            staged_vis = write_vis_files(payload, staging / "lda_vis")
        except OSError as e:
            raise ExportError(vis_folder, e) from e

        outputs = [(Path(staged_plot), Path(plot_path)), (staged_table, Path(table_path))]
        outputs += [(f, Path(vis_folder) / f.name) for f in sorted(staged_vis.iterdir())]
        publish_outputs(outputs)

    if open_browser:
        serve_payload(payload)
    return result

def main(argv=None):
    """
    Main entry point for the command-line usage.
    Performs:
      1. Argument parsing
      2. Configuration validation and output folder setup
      3. NLTK initialization
      4. The requested stage, or every stage in order for 'all'
    """
    args = parse_arguments(argv)

    # Ensure output folder exists before the log file handler opens
    os.makedirs(OUTPUT_FOLDER, exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(os.path.join(OUTPUT_FOLDER, 'analysis.log'))
        ]
    )

    stages = STAGES if args.stage == 'all' else [args.stage]

    try:
        validate_config()
        initialize_nltk()

        for stage in stages:
            logging.info(f"Running stage: {stage}")
            if stage == 'extract':
                run_extraction()
            elif stage == 'clean':
                run_cleaning()
            elif stage == 'frequency':
                run_frequency(args.domain)
            elif stage == 'tfidf':
                run_tfidf()
            elif stage == 'topics':
                run_topics(open_browser=not args.no_browser)

        logging.info(f"\nProcessing complete. {len(stages)} stage(s) run.")

    except PipelineError as e:
        logging.error(f"Stage failed: {e}")
        sys.exit(1)
    except Exception as e:
        logging.error(f"Error in main execution: {str(e)}", exc_info=True)
        sys.exit(1)

if __name__ == "__main__":
    main()
