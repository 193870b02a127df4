"""Unit tests for scan orchestration."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ValidationError
from kmerscan.scanner import build_targets, count_paths, scan
from kmerscan.schemas import RootTotal, ScanReport, ScanTarget


@pytest.fixture
def tree(tmp_path: Path, fasta) -> dict[str, Path]:
    """Three roots: a directory, a single file, and a missing path."""
    (tmp_path / "dir" / "nested").mkdir(parents=True)
    (tmp_path / "dir" / "nested" / "x.fa").write_bytes(fasta({"x": "A" * 10}))
    (tmp_path / "dir" / "y.fa").write_bytes(fasta({"y": "C" * 4}))
    (tmp_path / "single.fa").write_bytes(fasta({"s": "G" * 20}))
    return {
        "dir": tmp_path / "dir",
        "single": tmp_path / "single.fa",
        "missing": tmp_path / "missing",
    }


@pytest.mark.unit
class TestBuildTargets:
    def test_builds_one_target_per_path(self, tree: dict[str, Path]) -> None:
        targets = build_targets([tree["dir"], str(tree["single"])], 5)
        assert [t.path for t in targets] == [str(tree["dir"]), str(tree["single"])]
        assert all(t.k == 5 for t in targets)

    def test_rejects_non_positive_k(self, tree: dict[str, Path]) -> None:
        with pytest.raises(ValidationError) as excinfo:
            build_targets([tree["dir"]], 0)
        assert excinfo.value.context["k"] == 0
        assert excinfo.value.error_code == "VALIDATION_ERROR"

    def test_rejects_empty_path(self) -> None:
        with pytest.raises(ValidationError):
            build_targets([""], 3)

    def test_target_is_immutable(self) -> None:
        target = ScanTarget(path="/data", k=3)
        with pytest.raises(PydanticValidationError):
            target.k = 4  # type: ignore[misc]


@pytest.mark.unit
class TestScan:
    def test_report_keeps_root_order(self, tree: dict[str, Path]) -> None:
        targets = build_targets([tree["single"], tree["missing"], tree["dir"]], 4)
        report = asyncio.run(scan(targets))

        assert [root.path for root in report.roots] == [
            str(tree["single"]),
            str(tree["missing"]),
            str(tree["dir"]),
        ]
        assert [root.total for root in report.roots] == [17, 0, 7 + 1]
        assert report.total == 25

    def test_concurrent_roots_give_same_total(self, tree: dict[str, Path], scan_env) -> None:
        paths = [tree["single"], tree["missing"], tree["dir"]]
        sequential = asyncio.run(count_paths(paths, 4))

        scan_env(KMER_MAX_CONCURRENT_SCANS=3)
        concurrent = asyncio.run(count_paths(paths, 4))

        assert sequential == concurrent == 25

    def test_no_paths(self) -> None:
        assert asyncio.run(count_paths([], 4)) == 0

    def test_report_total(self) -> None:
        report = ScanReport(roots=[RootTotal(path="a", total=3), RootTotal(path="b", total=4)])
        assert report.total == 7
        assert ScanReport().total == 0
