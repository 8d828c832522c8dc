import os
import glob
import fnmatch
from typing import Iterator, List
import logging

from ..errors import SearchRootNotFound

logger = logging.getLogger(__name__)

# Matches FASTQ-family names: .fastq, .fq, .fastq.gz, .fq.bz2, ...
FASTQ_SUFFIX_PATTERN = "*.f*q*"


def sample_pattern(sample: str, separator: str = "_") -> str:
    """Build the filename glob for a sample: *<sample><separator>*.f*q*

    The sample and separator are taken literally; any glob characters in them
    are escaped. The sample may appear anywhere in the name.
    """
    return f"*{glob.escape(sample)}{glob.escape(separator)}{FASTQ_SUFFIX_PATTERN}"


class BioDataExplorer:
    """File system explorer for sequencing data"""

    def __init__(self, root_path: str = '.'):
        if not os.path.isdir(root_path):
            raise SearchRootNotFound(f"Directory '{root_path}' does not exist")
        self.root = root_path
        logger.info(f"BioDataExplorer initialized with root: {self.root}")

    def walk_files(self) -> Iterator[str]:
        """Yield every regular file below the root, in sorted order.

        Symlinks (to files or directories) are neither returned nor followed.
        """
        for root, dirs, files in os.walk(self.root):
            dirs.sort()
            for name in sorted(files):
                full_path = os.path.join(root, name)
                if os.path.islink(full_path) or not os.path.isfile(full_path):
                    continue
                yield full_path

    def find_matching_files(self, pattern: str) -> List[str]:
        """Find regular files whose basename matches a glob pattern (case-sensitive)"""
        matches = [
            path for path in self.walk_files()
            if fnmatch.fnmatchcase(os.path.basename(path), pattern)
        ]
        logger.debug(f"Pattern '{pattern}' matched {len(matches)} file(s) under {self.root}")
        return matches

    def find_sample_files(self, sample: str, separator: str = "_") -> List[str]:
        """Find the FASTQ files belonging to one sample"""
        return self.find_matching_files(sample_pattern(sample, separator))
