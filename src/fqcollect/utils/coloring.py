import os
from rich.text import Text

from ..fs.locator import SampleResult
from ..fs.samples import printable_text

# --- File Coloring Logic ---
COLOR_MAP = {
    # Sequences (Raw)
    ".fastq": "bright_cyan", ".fq": "bright_cyan",
    # Sequences (Reference/Assembly)
    ".fasta": "cyan", ".fa": "cyan", ".fna": "cyan",
    # Sample lists
    ".txt": "yellow", ".csv": "yellow", ".tsv": "yellow",
    # Compressed
    ".gz": "grey50", ".bz2": "grey50", ".xz": "grey50", ".zip": "grey50",
}
COMPRESSION_EXTENSIONS = {".gz", ".bz2", ".xz"}


def colorize_filename(filename: str, is_dir: bool = False) -> Text:
    """Applies semantic coloring to a filename using Rich Text."""
    if is_dir:
        return Text(filename, style="bold blue")
    base, ext = os.path.splitext(filename)
    ext_lower = ext.lower()
    style = COLOR_MAP.get(ext_lower)
    # Double extensions like .fastq.gz take the colour of the inner extension
    if ext_lower in COMPRESSION_EXTENSIONS:
        _base2, ext2 = os.path.splitext(base)
        style = COLOR_MAP.get(ext2.lower(), style)
    return Text(filename, style=style or "default")


def colorize_path(path: str) -> Text:
    """Dim directory part, coloured basename."""
    dirname, basename = os.path.split(printable_text(path))
    prefix = dirname + os.path.sep if dirname else ""
    return Text.assemble((prefix, "dim"), colorize_filename(basename))


def format_result(result: SampleResult) -> Text:
    """One report line, with the count in green (found) or red (missing)."""
    action = "found and copied" if result.copied else "found"
    return Text.assemble(
        f"({result.index}/{result.total}) ",
        (printable_text(result.sample), "bold"),
        ":  ",
        (str(result.count), "found" if result.found else "missing"),
        f" file(s) {action}",
    )

# --- End File Coloring Logic ---
