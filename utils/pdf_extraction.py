import logging
from pathlib import Path
from typing import List, Union

import pymupdf
from tqdm import tqdm

from errors import CorpusConfigurationError
from utils.text_processing import clean_text

class PDFExtractor:
    """Converts PDF papers to plain text, one output file per input."""

    @staticmethod
    def extract_text(pdf_path: Union[str, Path]) -> str:
        """
        Extract the text layer of every page of a PDF.

        Page-number lines (bare integers below 1000) are dropped; the rest of
        the page text is kept line by line.

        Raises:
            FileNotFoundError: If the PDF file does not exist.
            RuntimeError: If the PDF cannot be opened or read.
        """
        pdf_path = Path(pdf_path)
        if not pdf_path.exists():
            logging.error(f"PDF file not found: {pdf_path}")
            raise FileNotFoundError(f"PDF file not found: {pdf_path}")

        try:
            with pymupdf.open(str(pdf_path)) as doc:
                pages = [page.get_text("text") for page in doc]
        except Exception as e:
            logging.error(f"Error extracting text from {pdf_path}: {e}")
            raise RuntimeError(f"Error extracting text from {pdf_path}: {e}") from e

        lines = []
        for page_text in pages:
            for line in page_text.splitlines():
                line = line.strip()
                if line and not PDFExtractor._is_page_number(line):
                    lines.append(line)
        return clean_text('\n'.join(lines))

    @staticmethod
    def _is_page_number(line: str) -> bool:
        return line.isdigit() and int(line) < 1000

    @classmethod
    def extract_directory(cls, input_dir: Union[str, Path], output_dir: Union[str, Path]) -> List[Path]:
        """
        Extract every PDF in `input_dir` to `output_dir/<stem>.txt`.

        A PDF that fails to extract is logged and skipped.

        Raises:
            CorpusConfigurationError: If `input_dir` is missing or holds no PDFs.
        """
        input_dir = Path(input_dir)
        output_dir = Path(output_dir)
        if not input_dir.is_dir():
            raise CorpusConfigurationError(input_dir, "PDF directory not found")

        pdf_files = sorted(p for p in input_dir.iterdir() if p.suffix.lower() == '.pdf')
        if not pdf_files:
            raise CorpusConfigurationError(input_dir, "no PDF files found")

        output_dir.mkdir(parents=True, exist_ok=True)
        written = []
        for pdf_path in tqdm(pdf_files, desc="Extracting PDFs"):
            try:
                text = cls.extract_text(pdf_path)
            except RuntimeError as e:
                logging.warning(f"Skipping {pdf_path.name}: {e}")
                continue

            target = output_dir / f"{pdf_path.stem}.txt"
            target.write_text(text, encoding='utf-8')
            written.append(target)

        logging.info(f"Extracted {len(written)} of {len(pdf_files)} PDFs to {output_dir}")
        return written
