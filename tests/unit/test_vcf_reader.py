"""Tests for the VCF locus extractor."""

import pytest

from taronez.errors import MalformedRecordError
from taronez.vcf_reader import (
    LocusExtractor,
    ObservationSet,
    iter_vcf_records,
    parse_header_samples,
    parse_record,
    read_vcf_samples,
)

SAMPLES = ["S1", "S2", "S3"]
HEADER = "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tS1\tS2\tS3\n"


def _record(fmt: str, *sample_columns: str, alt: str = "T", pos: str = "100"):
    line = "\t".join(["chr1", pos, ".", "A", alt, "50", "PASS", ".", fmt, *sample_columns])
    return parse_record(line + "\n", SAMPLES)


@pytest.mark.unit
class TestParseHeader:
    """Tests for parse_header_samples()."""

    def test_samples_in_column_order(self):
        assert parse_header_samples(HEADER) == SAMPLES

    def test_sites_only_header(self):
        line = "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n"
        assert parse_header_samples(line) == []

    def test_invalid_header(self):
        with pytest.raises(MalformedRecordError):
            parse_header_samples("#CHROM\tPOSITION\tID\n")

    def test_duplicate_samples(self):
        line = "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tS1\tS1\n"
        with pytest.raises(MalformedRecordError, match="Duplicate sample IDs"):
            parse_header_samples(line)


@pytest.mark.unit
class TestParseRecord:
    """Tests for parse_record()."""

    def test_fields(self):
        record = _record("GT:DP:AO", "0/1:30:9", "0/1:32:10", "0/0:40:0", alt="T,G")
        assert record.chrom == "chr1"
        assert record.pos == 100
        assert record.alts == ["T", "G"]
        assert record.format_keys == ["GT", "DP", "AO"]
        assert record.samples["S2"] == "0/1:32:10"
        assert record.variant_key == "chr1:100:A>T,G"

    def test_column_count_mismatch(self):
        with pytest.raises(MalformedRecordError, match="columns"):
            _record("GT:DP:AO", "0/1:30:9", "0/1:32:10")

    def test_non_integer_pos(self):
        with pytest.raises(MalformedRecordError, match="POS"):
            _record("GT:DP:AO", "0/1:30:9", "0/1:32:10", "0/0:40:0", pos="1e5")

    def test_sample_value_missing_markers(self):
        record = _record("GT:DP:AO", "./.:.:.", "0/1:32:", "./.")
        assert record.sample_value("S1", "DP") is None
        assert record.sample_value("S2", "AO") is None
        assert record.sample_value("S3", "DP") is None
        assert record.sample_value("S2", "DP") == "32"
        assert record.sample_value("S2", "XX") is None


@pytest.mark.unit
class TestLocusExtractor:
    """Tests for LocusExtractor.extract() and extract_all()."""

    def test_extract_basic(self):
        record = _record("GT:DP:AO", "0/1:30:9", "0/1:32:10", "0/1:40:22")
        obs = LocusExtractor().extract(record)
        assert isinstance(obs, ObservationSet)
        assert obs.locus_id == "chr1:100:A>T"
        assert obs.samples == SAMPLES
        assert obs.trials == [30, 32, 40]
        assert obs.successes == [9, 10, 22]
        assert len(obs) == 3

    def test_field_lookup_by_name(self):
        """FORMAT order differs between callers; fields are found by name."""
        record = _record("AO:GT:DP", "9:0/1:30", "10:0/1:32", "22:0/1:40")
        obs = LocusExtractor().extract(record)
        assert obs.trials == [30, 32, 40]
        assert obs.successes == [9, 10, 22]

    def test_missing_values_excluded_not_zeroed(self):
        record = _record("GT:DP:AO", "0/1:30:9", "./.:.:.", "0/1:40:.")
        obs = LocusExtractor().extract(record)
        assert obs.samples == ["S1"]
        assert obs.trials == [30]

    def test_truncated_sample_column_excluded(self):
        record = _record("GT:DP:AO", "0/1:30:9", "./.", "0/1:40:5")
        obs = LocusExtractor().extract(record)
        assert obs.samples == ["S1", "S3"]

    def test_zero_depth_excluded(self):
        record = _record("GT:DP:AO", "0/1:30:9", "./.:0:0", "0/1:40:5")
        obs = LocusExtractor().extract(record)
        assert obs.samples == ["S1", "S3"]

    def test_custom_missing_value(self):
        record = _record("GT:DP:AO", "0/1:30:9", "0/1:NA:3", "0/1:40:5")
        obs = LocusExtractor(missing_value="NA").extract(record)
        assert obs.samples == ["S1", "S3"]

    def test_whole_valued_float_accepted(self):
        record = _record("GT:DP:AO", "0/1:30.0:9", "0/1:32:10", "0/1:40:22")
        assert LocusExtractor().extract(record).trials == [30, 32, 40]

    def test_sample_subset_and_order(self):
        record = _record("GT:DP:AO", "0/1:30:9", "0/1:32:10", "0/1:40:22")
        obs = LocusExtractor().extract(record, sample_ids=["S3", "S1"])
        assert obs.samples == ["S3", "S1"]
        assert obs.trials == [40, 30]

    def test_unknown_sample(self):
        record = _record("GT:DP:AO", "0/1:30:9", "0/1:32:10", "0/1:40:22")
        with pytest.raises(MalformedRecordError) as exc_info:
            LocusExtractor().extract(record, sample_ids=["S9"])
        assert exc_info.value.sample == "S9"

    def test_missing_format_field(self):
        record = _record("GT:DP", "0/0:20", "0/0:25", "0/0:30")
        with pytest.raises(MalformedRecordError, match="no AO field"):
            LocusExtractor().extract(record)

    def test_alt_exceeds_depth(self):
        record = _record("GT:DP:AO", "0/1:10:12", "0/1:32:10", "0/1:40:22")
        with pytest.raises(MalformedRecordError, match="AO=12 exceeds DP=10") as exc_info:
            LocusExtractor().extract(record)
        assert exc_info.value.sample == "S1"
        assert exc_info.value.locus == "chr1:100:A>T"

    @pytest.mark.parametrize("bad", ["abc", "2.5", "-1", "1e3", "+5", "inf", "nan", "0x1F"])
    def test_non_integer_counts(self, bad):
        record = _record("GT:DP:AO", f"0/1:30:{bad}", "0/1:32:10", "0/1:40:22")
        with pytest.raises(MalformedRecordError):
            LocusExtractor().extract(record)

    def test_custom_field_names(self):
        record = _record("GT:RD:VD", "0/1:30:9", "0/1:32:10", "0/1:40:22")
        obs = LocusExtractor(depth_field="RD", alt_count_field="VD").extract(record)
        assert obs.trials == [30, 32, 40]

    def test_multiallelic_extract_all(self):
        record = _record("GT:DP:AO", "1/2:40:10,12", "0/1:35:0,3", "0/0:20:0,0", alt="T,G")
        loci = LocusExtractor().extract_all(record)
        assert [obs.alt for obs in loci] == ["T", "G"]
        assert loci[0].successes == [10, 0, 0]
        assert loci[1].successes == [12, 3, 0]
        assert loci[1].trials == [40, 35, 20]

    def test_multiallelic_partial_missing(self):
        record = _record("GT:DP:AO", "1/2:40:10,.", "0/1:35:0,3", "0/0:20:0,0", alt="T,G")
        loci = LocusExtractor().extract_all(record)
        assert loci[0].samples == SAMPLES
        assert loci[1].samples == ["S2", "S3"]

    def test_allele_count_length_mismatch(self):
        record = _record("GT:DP:AO", "1/2:40:10,12,1", "0/1:35:0,3", "0/0:20:0,0", alt="T,G")
        with pytest.raises(MalformedRecordError, match="3 values for 2 alternate alleles"):
            LocusExtractor().extract(record)

    def test_alt_index_out_of_range(self):
        record = _record("GT:DP:AO", "0/1:30:9", "0/1:32:10", "0/1:40:22")
        with pytest.raises(MalformedRecordError):
            LocusExtractor().extract(record, alt_index=1)

    def test_no_alt_allele(self):
        record = _record("GT:DP:AO", "0/0:30:0", "0/0:32:0", "0/0:40:0", alt=".")
        assert LocusExtractor().extract_all(record) == []


@pytest.mark.unit
class TestIterVcfRecords:
    """Tests for streaming records from disk."""

    def test_plain_vcf(self, panel_vcf):
        records = list(iter_vcf_records(str(panel_vcf)))
        assert len(records) == 6
        assert records[0].sample_ids == SAMPLES
        assert records[2].alts == ["A", "C"]

    def test_gzip_vcf(self, panel_vcf_gz):
        records = list(iter_vcf_records(str(panel_vcf_gz)))
        assert [r.pos for r in records] == [100, 200, 300, 400, 500, 600]

    def test_data_before_header(self, tmp_path):
        path = tmp_path / "bad.vcf"
        path.write_text("chr1\t1\t.\tA\tT\t.\t.\t.\n", encoding="utf-8")
        with pytest.raises(MalformedRecordError, match="before '#CHROM' header"):
            list(iter_vcf_records(str(path)))

    def test_skip_malformed(self, tmp_path, caplog):
        path = tmp_path / "short.vcf"
        path.write_text(
            HEADER
            + "chr1\t100\t.\tA\tT\t50\tPASS\t.\tGT:DP:AO\t0/1:30:9\n"
            + "chr1\t200\t.\tA\tT\t50\tPASS\t.\tGT:DP:AO\t0/1:30:9\t0/1:32:10\t0/1:40:22\n",
            encoding="utf-8",
        )
        with pytest.raises(MalformedRecordError):
            list(iter_vcf_records(str(path)))
        records = list(iter_vcf_records(str(path), skip_malformed=True))
        assert [r.pos for r in records] == [200]
        assert "Skipping line" in caplog.text


@pytest.mark.unit
class TestReadVcfSamples:
    """Tests for reading only the sample IDs of a VCF."""

    def test_plain_and_gzip(self, panel_vcf, panel_vcf_gz):
        assert read_vcf_samples(str(panel_vcf)) == SAMPLES
        assert read_vcf_samples(str(panel_vcf_gz)) == SAMPLES

    def test_data_before_header(self, tmp_path):
        path = tmp_path / "bad.vcf"
        path.write_text("##fileformat=VCFv4.2\nchr1\t1\t.\tA\tT\t.\t.\t.\n", encoding="utf-8")
        with pytest.raises(MalformedRecordError, match="before '#CHROM' header"):
            read_vcf_samples(str(path))

    def test_no_header(self, tmp_path):
        path = tmp_path / "meta_only.vcf"
        path.write_text("##fileformat=VCFv4.2\n", encoding="utf-8")
        with pytest.raises(MalformedRecordError, match="no '#CHROM' header line"):
            read_vcf_samples(str(path))
