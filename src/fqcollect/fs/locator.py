"""Sample-driven FASTQ discovery and copy.

The locator searches a directory tree once per sample identifier, optionally
copies the matches into one flat output directory, and builds a report with a
match count per sample. Samples are processed strictly one after another.
"""
import os
import shutil
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .explorer import BioDataExplorer
from .samples import ensure_output_dir, printable_text, write_sample_list

logger = logging.getLogger(__name__)


@dataclass
class LocatorSettings:
    """Where to search, where to copy to, and how to match"""
    search_root: str
    output_dir: str
    separator: str = "_"
    copy_files: bool = True


@dataclass
class SampleResult:
    """Outcome for a single sample"""
    index: int
    total: int
    sample: str
    files: List[str] = field(default_factory=list)
    copied: bool = False

    @property
    def count(self) -> int:
        return len(self.files)

    @property
    def found(self) -> bool:
        return self.count > 0

    def status_line(self) -> str:
        action = "found and copied" if self.copied else "found"
        return f"({self.index}/{self.total}) {printable_text(self.sample)}:  {self.count} file(s) {action}"


@dataclass
class SearchReport:
    """Append-only collection of per-sample results"""
    results: List[SampleResult] = field(default_factory=list)
    not_found: int = 0

    def add(self, result: SampleResult) -> None:
        self.results.append(result)
        if not result.found:
            self.not_found += 1

    @property
    def counts(self) -> List[int]:
        return [result.count for result in self.results]

    @property
    def all_found(self) -> bool:
        return self.not_found == 0

    def summary_line(self) -> str:
        if self.not_found:
            return f"{self.not_found} sample(s) couldn't be found"
        return "All samples were found"


class SampleFileLocator:
    """Finds (and optionally copies) the FASTQ files of each sample in a list"""

    def __init__(self, settings: LocatorSettings):
        """Validate the search root and prepare the output directory.

        Args:
            settings: search root, output directory, separator and copy mode

        Raises:
            SearchRootNotFound: if the search root is not a directory
            OutputNotWritable: if the output directory cannot be created
        """
        self.settings = settings
        self.explorer = BioDataExplorer(settings.search_root)
        self.output_dir = ensure_output_dir(settings.output_dir)

    def header_lines(self, samples: Sequence[str]) -> List[str]:
        lines = [f"Searching for {len(samples)} sample(s) in {self.settings.search_root}..."]
        if self.settings.copy_files:
            lines.append(f"Copying files into {os.path.realpath(self.output_dir)}")
        return lines

    def locate(self, sample: str, index: int, total: int) -> SampleResult:
        """Search for one sample and copy its files when copy mode is on."""
        files = self.explorer.find_sample_files(sample, self.settings.separator)
        if self.settings.copy_files:
            for source in files:
                self._copy(source)
        return SampleResult(index=index, total=total, sample=sample,
                            files=files, copied=self.settings.copy_files)

    def _copy(self, source: str) -> None:
        destination = self.output_dir / os.path.basename(source)
        if destination.exists() and os.path.samefile(source, destination):
            logger.debug(f"Skipping copy of {source}: already in the output directory")
            return
        # Flat copy; an existing file with the same name is overwritten
        shutil.copy(source, destination)
        logger.debug(f"Copied {source} -> {destination}")

    def run(self, samples: Sequence[str],
            on_result: Optional[Callable[[SampleResult], None]] = None) -> SearchReport:
        """Process every sample in order and return the report.

        The normalized sample list is written to the output directory first.
        `on_result` is called after each sample so callers can print progress
        while the run is still going.
        """
        write_sample_list(list(samples), self.output_dir)
        report = SearchReport()
        total = len(samples)
        for index, sample in enumerate(samples, start=1):
            result = self.locate(sample, index, total)
            report.add(result)
            logger.info(f"Sample {printable_text(sample)}: {result.count} file(s)")
            if on_result is not None:
                on_result(result)
        return report
