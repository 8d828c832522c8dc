"""File system tools for sequencing data.

This package provides functionality for:
- Reading and cleaning sample lists
- Finding FASTQ files for a sample anywhere below a directory
- Copying the matches of a whole sample list into one folder
"""
from .samples import normalize_sample_text, read_sample_list, write_sample_list
from .explorer import BioDataExplorer, sample_pattern
from .locator import LocatorSettings, SampleFileLocator, SampleResult, SearchReport

__all__ = [
    'normalize_sample_text',
    'read_sample_list',
    'write_sample_list',
    'BioDataExplorer',
    'sample_pattern',
    'LocatorSettings',
    'SampleFileLocator',
    'SampleResult',
    'SearchReport',
]
