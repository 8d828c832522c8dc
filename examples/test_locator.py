import os

import pytest

from fqcollect.errors import OutputNotWritable, SearchRootNotFound
from fqcollect.fs.locator import LocatorSettings, SampleFileLocator, SampleResult, SearchReport


def snapshot(root):
    """Relative path -> (size, mtime) for every file below root."""
    state = {}
    for dirpath, _, files in os.walk(root):
        for name in files:
            path = os.path.join(dirpath, name)
            stat = os.stat(path)
            state[os.path.relpath(path, root)] = (stat.st_size, stat.st_mtime_ns)
    return state


def make_locator(root, out, copy_files=True, separator="_"):
    return SampleFileLocator(LocatorSettings(
        search_root=str(root), output_dir=str(out), separator=separator, copy_files=copy_files,
    ))


def test_report_only_counts(fastq_tree, tmp_path):
    out = tmp_path / "fastq"
    report = make_locator(fastq_tree, out, copy_files=False).run(["A", "B"])
    assert report.counts == [2, 0]
    assert report.not_found == 1
    assert report.summary_line() == "1 sample(s) couldn't be found"
    assert report.results[0].status_line() == "(1/2) A:  2 file(s) found"
    assert report.results[1].status_line() == "(2/2) B:  0 file(s) found"


def test_report_only_touches_nothing_but_the_sample_list(fastq_tree, tmp_path):
    out = tmp_path / "fastq"
    before = snapshot(fastq_tree)
    make_locator(fastq_tree, out, copy_files=False).run(["A", "B"])
    assert snapshot(fastq_tree) == before
    assert sorted(os.listdir(out)) == ["samples.txt"]


def test_copy_mode(fastq_tree, tmp_path):
    out = tmp_path / "fastq"
    report = make_locator(fastq_tree, out).run(["A", "B"])
    assert report.counts == [2, 0]
    assert report.results[0].status_line() == "(1/2) A:  2 file(s) found and copied"
    assert sorted(os.listdir(out)) == ["A_R1.fastq.gz", "A_R2.fastq.gz", "samples.txt"]
    assert (out / "A_R1.fastq.gz").read_text() == (fastq_tree / "run1" / "A_R1.fastq.gz").read_text()


def test_copy_mode_is_idempotent(fastq_tree, tmp_path):
    out = tmp_path / "fastq"
    make_locator(fastq_tree, out).run(["A", "B"])
    first = sorted(os.listdir(out))
    make_locator(fastq_tree, out).run(["A", "B"])
    assert sorted(os.listdir(out)) == first


def test_name_collisions_overwrite(tmp_path):
    root = tmp_path / "runs"
    (root / "old").mkdir(parents=True)
    (root / "new").mkdir()
    (root / "new" / "A_R1.fastq").write_text("new")
    (root / "old" / "A_R1.fastq").write_text("old")
    out = tmp_path / "fastq"
    report = make_locator(root, out).run(["A"])
    assert report.counts == [2]
    # Sorted walk: new/ before old/, so the last copy wins
    assert (out / "A_R1.fastq").read_text() == "old"


def test_output_inside_search_root(fastq_tree):
    out = fastq_tree / "collected"
    make_locator(fastq_tree, out).run(["A"])
    # The copies from the first run are found again and not copied onto themselves
    report = make_locator(fastq_tree, out).run(["A"])
    assert report.counts == [4]
    assert sorted(os.listdir(out)) == ["A_R1.fastq.gz", "A_R2.fastq.gz", "samples.txt"]


def test_duplicate_samples_are_searched_twice(fastq_tree, tmp_path):
    report = make_locator(fastq_tree, tmp_path / "fastq", copy_files=False).run(["A", "A"])
    assert [r.status_line() for r in report.results] == [
        "(1/2) A:  2 file(s) found",
        "(2/2) A:  2 file(s) found",
    ]


def test_sample_list_artifact_written(fastq_tree, tmp_path):
    out = tmp_path / "fastq"
    make_locator(fastq_tree, out, copy_files=False).run(["B", "A"])
    assert (out / "samples.txt").read_text() == "B\nA\n"


def test_progress_callback_sees_each_result_in_order(fastq_tree, tmp_path):
    seen = []
    make_locator(fastq_tree, tmp_path / "fastq", copy_files=False).run(["B", "A"], on_result=seen.append)
    assert [(r.index, r.sample, r.count) for r in seen] == [(1, "B", 0), (2, "A", 2)]


def test_all_found(fastq_tree, tmp_path):
    report = make_locator(fastq_tree, tmp_path / "fastq", copy_files=False).run(["A"])
    assert report.all_found
    assert report.summary_line() == "All samples were found"


def test_header_lines(fastq_tree, tmp_path):
    out = tmp_path / "fastq"
    locator = make_locator(fastq_tree, out)
    assert locator.header_lines(["A", "B"]) == [
        f"Searching for 2 sample(s) in {fastq_tree}...",
        f"Copying files into {os.path.realpath(out)}",
    ]
    assert len(make_locator(fastq_tree, out, copy_files=False).header_lines(["A"])) == 1


def test_missing_search_root(tmp_path):
    with pytest.raises(SearchRootNotFound):
        make_locator(tmp_path / "missing", tmp_path / "fastq")
    assert not (tmp_path / "fastq").exists()


def test_output_not_writable(fastq_tree, tmp_path):
    blocker = tmp_path / "fastq"
    blocker.write_text("")
    with pytest.raises(OutputNotWritable):
        make_locator(fastq_tree, blocker)


def test_report_is_append_only():
    report = SearchReport()
    report.add(SampleResult(index=1, total=2, sample="A", files=["a"]))
    report.add(SampleResult(index=2, total=2, sample="B"))
    assert report.counts == [1, 0]
    assert report.not_found == 1


def test_coloured_line_matches_plain_status():
    from fqcollect.utils.coloring import format_result
    result = SampleResult(index=3, total=5, sample="S7", files=["x", "y"], copied=True)
    assert format_result(result).plain == result.status_line()
