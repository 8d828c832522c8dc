"""fqcollect: sequencing-lab housekeeping tools.

This package provides functionality for:
- Locating FASTQ files for a list of sample identifiers and copying them
- Installing the Singularity container runtime on Debian/Ubuntu hosts
- Persistent INI configuration for both
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
