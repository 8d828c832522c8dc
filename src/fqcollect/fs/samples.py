"""Reading, cleaning and persisting sample lists."""
import os
import logging
from pathlib import Path
from typing import List, Union

from ..errors import InputNotFound, OutputNotWritable

logger = logging.getLogger(__name__)

SAMPLE_LIST_ARTIFACT = "samples.txt"
# Undecodable bytes survive a read/write cycle unchanged
SAMPLE_LIST_ENCODING = "utf-8"
SAMPLE_LIST_ERRORS = "surrogateescape"


def normalize_sample_text(text: str) -> List[str]:
    """Turn raw sample-list text into an ordered list of sample identifiers.

    Carriage returns become line breaks (so Windows and old Mac line endings
    both work), blank lines are dropped and all whitespace inside a line is
    removed. Duplicates and input order are kept as they are.
    """
    text = text.replace("\r", "\n")
    if not text.endswith("\n"):
        text += "\n"
    samples = []
    for line in text.split("\n"):
        sample = "".join(line.split())
        if sample:
            samples.append(sample)
    return samples


def read_sample_list(path: Union[str, Path]) -> List[str]:
    """Read and normalize a sample list file.

    Raises:
        InputNotFound: if the file does not exist or has zero size
    """
    path = Path(path)
    if not path.is_file() or path.stat().st_size == 0:
        raise InputNotFound(f"File '{path}' does not exist or is empty")
    # newline='' keeps \r visible to normalize_sample_text
    with open(path, "r", encoding=SAMPLE_LIST_ENCODING, errors=SAMPLE_LIST_ERRORS, newline="") as f:
        samples = normalize_sample_text(f.read())
    logger.info(f"Read {len(samples)} sample(s) from {path}")
    return samples


def write_sample_list(samples: List[str], output_dir: Union[str, Path]) -> Path:
    """Write the normalized list to <output_dir>/samples.txt, one sample per line."""
    target = Path(output_dir) / SAMPLE_LIST_ARTIFACT
    try:
        with open(target, "w", encoding=SAMPLE_LIST_ENCODING, errors=SAMPLE_LIST_ERRORS) as f:
            for sample in samples:
                f.write(f"{sample}\n")
    except OSError as e:
        raise OutputNotWritable(f"Could not write '{target}': {e}") from e
    logger.debug(f"Normalized sample list written to {target}")
    return target


def ensure_output_dir(output_dir: Union[str, Path]) -> Path:
    """Create the output directory (and parents) if needed."""
    output_dir = Path(output_dir)
    try:
        os.makedirs(output_dir, exist_ok=True)
    except OSError as e:
        raise OutputNotWritable(f"Could not create output directory '{output_dir}': {e}") from e
    return output_dir


def printable_text(text: str) -> str:
    """Text safe to print: undecodable bytes (from the sample list or file names) become U+FFFD."""
    return text.encode(SAMPLE_LIST_ENCODING, SAMPLE_LIST_ERRORS).decode(SAMPLE_LIST_ENCODING, "replace")
