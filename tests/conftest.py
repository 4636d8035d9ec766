"""Shared pytest fixtures for all test modules."""

import gzip
from pathlib import Path

import pytest

VCF_HEADER = [
    "##fileformat=VCFv4.2",
    '##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">',
    '##FORMAT=<ID=DP,Number=1,Type=Integer,Description="Read Depth">',
    '##FORMAT=<ID=AO,Number=A,Type=Integer,Description="Alternate allele observation count">',
    "\t".join(
        ["#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO", "FORMAT", "S1", "S2", "S3"]
    ),
]

VCF_RECORDS = [
    # Plain biallelic site
    ["chr1", "100", ".", "A", "T", "50", "PASS", ".", "GT:DP:AO", "0/1:30:9", "0/1:32:10", "0/1:40:22"],
    # FORMAT order swapped; S3 fully missing
    ["chr1", "200", ".", "C", "G", "50", "PASS", ".", "GT:AO:DP", "0/0:1:50", "0/0:2:48", "./.:.:."],
    # Multi-allelic: AO is per ALT allele
    ["chr1", "300", ".", "G", "A,C", "50", "PASS", ".", "GT:DP:AO", "1/2:40:10,12", "0/1:35:0,3", "0/0:20:0,0"],
    # No AO field
    ["chr2", "400", ".", "T", "C", "50", "PASS", ".", "GT:DP", "0/0:20", "0/0:25", "0/0:30"],
    # AO > DP for S1
    ["chr2", "500", ".", "A", "G", "50", "PASS", ".", "GT:DP:AO", "0/1:10:12", "0/1:20:3", "0/1:30:4"],
    # No usable samples: missing, zero depth, truncated column
    ["chr3", "600", ".", "C", "T", "50", "PASS", ".", "GT:DP:AO", "./.:.:.", "./.:0:0", "./."],
]


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast unit tests of a single module")


def _vcf_text() -> str:
    lines = VCF_HEADER + ["\t".join(record) for record in VCF_RECORDS]
    return "\n".join(lines) + "\n"


@pytest.fixture
def panel_vcf(tmp_path: Path) -> Path:
    """Small three-sample panel VCF covering the extractor edge cases."""
    path = tmp_path / "panel.vcf"
    path.write_text(_vcf_text(), encoding="utf-8")
    return path


@pytest.fixture
def panel_vcf_gz(tmp_path: Path) -> Path:
    """Gzip-compressed copy of the panel VCF."""
    path = tmp_path / "panel.vcf.gz"
    with gzip.open(path, "wt", encoding="utf-8") as fh:
        fh.write(_vcf_text())
    return path


@pytest.fixture
def golden_counts() -> dict:
    """Ten-sample regression case for Tarone's Z."""
    return {
        "trials": [30, 32, 40, 28, 29, 35, 30, 34, 31, 39],
        "successes": [9, 10, 22, 15, 8, 19, 16, 19, 15, 10],
    }
