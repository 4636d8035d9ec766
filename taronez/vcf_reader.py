"""
VCF locus extractor for overdispersion testing.

This module turns multi-sample VCF records into per-sample
(depth, alternate-count) observations. Fields are located by name through
each record's FORMAT column, since variant callers order per-sample fields
differently. Missing values never become zero: a sample whose depth or
alternate count is missing is left out of the locus entirely.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from .errors import MalformedRecordError
from .utils import smart_open

logger = logging.getLogger("taronez")

FIXED_COLUMNS = ["#CHROM", "POS", "ID", "REF", "ALT", "QUAL", "FILTER", "INFO"]
N_FIXED = len(FIXED_COLUMNS)
COUNT_PATTERN = re.compile(r"^(\d+)(?:\.0*)?$", re.ASCII)


@dataclass(frozen=True)
class Observation:
    """One sample's counts at one locus."""

    sample: str
    trials: int
    successes: int


@dataclass(frozen=True)
class ObservationSet:
    """All usable observations for one ALT allele of one record."""

    chrom: str
    pos: int
    ref: str
    alt: str
    observations: tuple[Observation, ...] = ()

    @property
    def locus_id(self) -> str:
        """Compact locus representation: chrom:pos:ref>alt."""
        return f"{self.chrom}:{self.pos}:{self.ref}>{self.alt}"

    @property
    def samples(self) -> list[str]:
        return [obs.sample for obs in self.observations]

    @property
    def trials(self) -> list[int]:
        return [obs.trials for obs in self.observations]

    @property
    def successes(self) -> list[int]:
        return [obs.successes for obs in self.observations]

    def __len__(self) -> int:
        return len(self.observations)


@dataclass
class VariantRecord:
    """A single VCF data line with its per-sample columns keyed by sample ID."""

    chrom: str
    pos: int
    id: str
    ref: str
    alts: list[str]
    format_keys: list[str]
    samples: dict[str, str] = field(default_factory=dict)

    @property
    def variant_key(self) -> str:
        return f"{self.chrom}:{self.pos}:{self.ref}>{','.join(self.alts)}"

    @property
    def sample_ids(self) -> list[str]:
        return list(self.samples)

    def format_index(self) -> dict[str, int]:
        """Map each FORMAT key to its position within a sample column."""
        return {key: i for i, key in enumerate(self.format_keys)}

    def sample_value(self, sample: str, key: str, missing_value: str = ".") -> str | None:
        """
        Return the raw value of FORMAT ``key`` for ``sample``.

        Returns None when the key is absent from FORMAT, when the sample
        column is shorter than FORMAT (trailing fields may be dropped), or
        when the value is empty or equals ``missing_value``.
        """
        index = self.format_index().get(key)
        if index is None:
            return None
        values = self.samples[sample].split(":")
        if index >= len(values):
            return None
        value = values[index].strip()
        if value == "" or value == missing_value:
            return None
        return value


def parse_header_samples(header_line: str) -> list[str]:
    """
    Return the sample IDs named by a '#CHROM' header line.

    Parameters
    ----------
    header_line : str
        The tab-separated column header line of a VCF.

    Returns
    -------
    list of str
        Sample IDs in column order (empty for a sites-only VCF).

    Raises
    ------
    MalformedRecordError
        If the line is not a valid column header.
    """
    columns = header_line.rstrip("\r\n").split("\t")
    if columns[:N_FIXED] != FIXED_COLUMNS:
        raise MalformedRecordError(f"Invalid VCF column header: {header_line.strip()!r}")
    if len(columns) == N_FIXED:
        return []
    if columns[N_FIXED] != "FORMAT":
        raise MalformedRecordError(
            f"Expected FORMAT as column {N_FIXED + 1} of the VCF header, got {columns[N_FIXED]!r}"
        )
    samples = columns[N_FIXED + 1 :]
    duplicates = sorted({s for s in samples if samples.count(s) > 1})
    if duplicates:
        raise MalformedRecordError(f"Duplicate sample IDs in VCF header: {', '.join(duplicates)}")
    return samples


def parse_record(line: str, samples: Sequence[str]) -> VariantRecord:
    """
    Parse one VCF data line.

    Parameters
    ----------
    line : str
        Tab-separated VCF data line.
    samples : sequence of str
        Sample IDs from the header, in column order.

    Returns
    -------
    VariantRecord

    Raises
    ------
    MalformedRecordError
        If the column count does not match the header or POS is not an integer.
    """
    parts = line.rstrip("\r\n").split("\t")
    expected = N_FIXED + 1 + len(samples) if samples else N_FIXED
    if len(parts) < N_FIXED:
        raise MalformedRecordError(f"VCF line has {len(parts)} columns, expected {expected}")

    chrom, pos_str, var_id, ref, alt = parts[:5]
    locus = f"{chrom}:{pos_str}"
    if samples and len(parts) != expected:
        raise MalformedRecordError(
            f"record has {len(parts)} columns, expected {expected}", locus=locus
        )
    try:
        pos = int(pos_str)
    except ValueError:
        raise MalformedRecordError(f"POS {pos_str!r} is not an integer", locus=locus)

    format_keys = parts[N_FIXED].split(":") if samples else []
    alts = [] if alt in (".", "") else alt.split(",")
    return VariantRecord(
        chrom=chrom,
        pos=pos,
        id=var_id,
        ref=ref,
        alts=alts,
        format_keys=format_keys,
        samples=dict(zip(samples, parts[N_FIXED + 1 :])),
    )


def read_vcf_samples(vcf_file: str) -> list[str]:
    """
    Return the sample IDs of a VCF without reading its records.

    Raises
    ------
    MalformedRecordError
        If a data line appears before the '#CHROM' header or the file has
        no header at all.
    """
    with smart_open(vcf_file, "r") as fh:
        for line_number, line in enumerate(fh, start=1):
            if line.startswith("##") or not line.strip():
                continue
            if line.startswith("#"):
                return parse_header_samples(line)
            raise MalformedRecordError(
                f"{vcf_file} line {line_number}: data line before '#CHROM' header"
            )
    raise MalformedRecordError(f"{vcf_file} has no '#CHROM' header line")


def iter_vcf_records(vcf_file: str, skip_malformed: bool = False) -> Iterator[VariantRecord]:
    """
    Stream records from a plain or gzip-compressed VCF.

    Parameters
    ----------
    vcf_file : str
        Path to the VCF file.
    skip_malformed : bool
        Log and skip data lines that cannot be parsed instead of raising.

    Yields
    ------
    VariantRecord

    Raises
    ------
    MalformedRecordError
        If a data line appears before the '#CHROM' header, or a line
        cannot be parsed.
    """
    samples: list[str] | None = None
    with smart_open(vcf_file, "r") as fh:
        for line_number, line in enumerate(fh, start=1):
            if line.startswith("##") or not line.strip():
                continue
            if line.startswith("#"):
                samples = parse_header_samples(line)
                logger.debug(f"VCF header lists {len(samples)} samples")
                continue
            if samples is None:
                raise MalformedRecordError(
                    f"{vcf_file} line {line_number}: data line before '#CHROM' header"
                )
            try:
                record = parse_record(line, samples)
            except MalformedRecordError as e:
                if not skip_malformed:
                    raise
                logger.warning(f"Skipping line {line_number}: {e}")
                continue
            yield record


class LocusExtractor:
    """
    Pull (trials, successes) observations out of VCF records.

    Parameters
    ----------
    depth_field : str
        FORMAT key holding the total read depth. Default: "DP".
    alt_count_field : str
        FORMAT key holding the alternate-allele read count. Default: "AO".
        Per-allele lists (e.g. "4,2" on a multi-allelic record) are
        indexed by ALT allele.
    missing_value : str
        Placeholder for a missing per-sample value. Default: ".".
    """

    def __init__(
        self,
        depth_field: str = "DP",
        alt_count_field: str = "AO",
        missing_value: str = ".",
    ) -> None:
        self.depth_field = depth_field
        self.alt_count_field = alt_count_field
        self.missing_value = missing_value

    @classmethod
    def from_config(cls, config: Any) -> LocusExtractor:
        """Build an extractor from an OverdispersionConfig."""
        return cls(
            depth_field=config.depth_field,
            alt_count_field=config.alt_count_field,
            missing_value=config.missing_value,
        )

    def extract(
        self,
        record: VariantRecord,
        sample_ids: Sequence[str] | None = None,
        alt_index: int = 0,
    ) -> ObservationSet:
        """
        Build the ObservationSet for one ALT allele of ``record``.

        Parameters
        ----------
        record : VariantRecord
            Parsed multi-sample record.
        sample_ids : sequence of str, optional
            Samples to include, in output order. Defaults to every sample
            in the record.
        alt_index : int
            Which ALT allele to read alternate counts for. Default: 0.

        Returns
        -------
        ObservationSet
            One Observation per sample with usable data. Samples with a
            missing depth or alternate count, or a recorded depth of 0,
            are left out.

        Raises
        ------
        MalformedRecordError
            If FORMAT lacks either field, a sample is unknown, a value is
            not a non-negative integer, or alternate count exceeds depth.
        """
        if not 0 <= alt_index < len(record.alts):
            raise MalformedRecordError(
                f"ALT index {alt_index} out of range for {len(record.alts)} alternate alleles",
                locus=record.variant_key,
            )
        alt = record.alts[alt_index]
        locus = f"{record.chrom}:{record.pos}:{record.ref}>{alt}"

        format_index = record.format_index()
        for key in (self.depth_field, self.alt_count_field):
            if key not in format_index:
                raise MalformedRecordError(
                    f"FORMAT {':'.join(record.format_keys)!r} has no {key} field", locus=locus
                )

        observations: list[Observation] = []
        for sample in sample_ids if sample_ids is not None else record.sample_ids:
            if sample not in record.samples:
                raise MalformedRecordError("unknown sample", locus=locus, sample=sample)

            raw_depth = record.sample_value(sample, self.depth_field, self.missing_value)
            raw_alt = self._alt_value(record, sample, alt_index, locus)
            if raw_depth is None or raw_alt is None:
                logger.debug(f"{locus}: sample {sample} has missing data, excluded")
                continue

            depth = self._parse_count(raw_depth, self.depth_field, locus, sample)
            alt_count = self._parse_count(raw_alt, self.alt_count_field, locus, sample)
            if depth == 0:
                logger.debug(f"{locus}: sample {sample} has zero depth, excluded")
                continue
            if alt_count > depth:
                raise MalformedRecordError(
                    f"{self.alt_count_field}={alt_count} exceeds {self.depth_field}={depth}",
                    locus=locus,
                    sample=sample,
                )
            observations.append(Observation(sample=sample, trials=depth, successes=alt_count))

        return ObservationSet(
            chrom=record.chrom,
            pos=record.pos,
            ref=record.ref,
            alt=alt,
            observations=tuple(observations),
        )

    def extract_all(
        self, record: VariantRecord, sample_ids: Sequence[str] | None = None
    ) -> list[ObservationSet]:
        """Return one ObservationSet per ALT allele of ``record``."""
        return [self.extract(record, sample_ids, alt_index=i) for i in range(len(record.alts))]

    def _alt_value(
        self, record: VariantRecord, sample: str, alt_index: int, locus: str
    ) -> str | None:
        raw = record.sample_value(sample, self.alt_count_field, self.missing_value)
        if raw is None:
            return None
        values = raw.split(",")
        if len(values) == 1 and alt_index == 0:
            return raw
        if len(values) != len(record.alts):
            raise MalformedRecordError(
                f"{self.alt_count_field} has {len(values)} values for "
                f"{len(record.alts)} alternate alleles",
                locus=locus,
                sample=sample,
            )
        value = values[alt_index].strip()
        if value == "" or value == self.missing_value:
            return None
        return value

    @staticmethod
    def _parse_count(raw: str, field_name: str, locus: str, sample: str) -> int:
        # Plain digits, optionally with a zero fraction ("30.0") as some
        # callers write Integer fields; no sign, exponent or inf/nan.
        match = COUNT_PATTERN.match(raw)
        if match is None:
            raise MalformedRecordError(
                f"{field_name}={raw!r} is not a non-negative integer", locus=locus, sample=sample
            )
        return int(match.group(1))
