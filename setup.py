from setuptools import setup, find_packages

setup(
    name="fqcollect",
    version="0.1.0",
    description="Find and copy FASTQ files by sample ID, and install Singularity",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        "click>=8.0",
        "rich>=12.0",
        "gitpython>=3.1.0",   # Cloning the pinned Singularity release
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "fqcollect=fqcollect.cli.main:cli",
            "find-copy-fastq=fqcollect.cli.main:find_fastq",
        ],
    },
)
