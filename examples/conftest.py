import pytest

from fqcollect.config import reset_config


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point every test at its own config file."""
    config_path = tmp_path / "config" / "fqcollect.cfg"
    monkeypatch.setenv("FQCOLLECT_CONFIG_PATH", str(config_path))
    reset_config()
    yield config_path
    reset_config()


@pytest.fixture
def fastq_tree(tmp_path):
    """A small sequencing-run layout:

    runs/run1/A_R1.fastq.gz
    runs/run2/A_R2.fastq.gz
    runs/B.fq
    """
    root = tmp_path / "runs"
    (root / "run1").mkdir(parents=True)
    (root / "run2").mkdir()
    (root / "run1" / "A_R1.fastq.gz").write_text("@read1\nACGT\n+\nIIII\n")
    (root / "run2" / "A_R2.fastq.gz").write_text("@read1\nTGCA\n+\nIIII\n")
    (root / "B.fq").write_text("@read1\nAAAA\n+\nIIII\n")
    return root
