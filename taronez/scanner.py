"""
Per-locus overdispersion scan over a multi-sample VCF.

Walks the VCF once, extracts every ALT allele as its own locus, runs the
configured overdispersion test on it and collects one result row per
locus. Records are processed strictly one at a time.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence

import pandas as pd

from .errors import EmptyInputError, MalformedRecordError
from .overdispersion import OverdispersionConfig, OverdispersionTest, get_test, is_overdispersed
from .vcf_reader import LocusExtractor, iter_vcf_records, read_vcf_samples

logger = logging.getLogger("taronez")

RESULT_COLUMNS = [
    "CHROM",
    "POS",
    "REF",
    "ALT",
    "n_samples",
    "total_depth",
    "total_alt",
    "pooled_proportion",
    "z_statistic",
    "p_value",
    "overdispersed",
]


def scan_vcf(
    vcf_file: str,
    config: OverdispersionConfig,
    samples: Sequence[str] | None = None,
    test: OverdispersionTest | None = None,
) -> pd.DataFrame:
    """
    Test every locus of a VCF for overdispersion.

    Parameters
    ----------
    vcf_file : str
        Path to a plain or gzip-compressed multi-sample VCF.
    config : OverdispersionConfig
        FORMAT keys, missing placeholder and Z threshold.
    samples : sequence of str, optional
        Restrict the test to these samples. Defaults to all samples.
    test : OverdispersionTest, optional
        Test to apply. Defaults to Tarone's Z test.

    Returns
    -------
    pd.DataFrame
        One row per tested locus with columns RESULT_COLUMNS, in VCF order.
        Malformed records and loci without usable samples are skipped.

    Raises
    ------
    MalformedRecordError
        If ``samples`` names a sample missing from the VCF header, or the
        header itself is missing.
    """
    test = test or get_test("tarone")
    extractor = LocusExtractor.from_config(config)

    if samples is not None:
        vcf_samples = set(read_vcf_samples(vcf_file))
        unknown = [s for s in samples if s not in vcf_samples]
        if unknown:
            raise MalformedRecordError(
                f"Samples not found in the VCF header of {vcf_file}: {', '.join(unknown)}"
            )

    rows: list[dict] = []
    n_records = 0
    n_malformed = 0
    n_empty = 0

    for record in iter_vcf_records(vcf_file, skip_malformed=True):
        n_records += 1
        try:
            loci = extractor.extract_all(record, samples)
        except MalformedRecordError as e:
            n_malformed += 1
            logger.warning(f"Skipping malformed record: {e}")
            continue

        for obs_set in loci:
            try:
                result = test.run(obs_set.trials, obs_set.successes, locus=obs_set.locus_id)
            except EmptyInputError:
                n_empty += 1
                logger.debug(f"{obs_set.locus_id}: no samples with usable data, skipped")
                continue

            rows.append(
                {
                    "CHROM": obs_set.chrom,
                    "POS": obs_set.pos,
                    "REF": obs_set.ref,
                    "ALT": obs_set.alt,
                    "n_samples": result.n_samples,
                    "total_depth": result.total_trials,
                    "total_alt": result.total_successes,
                    "pooled_proportion": result.pooled_proportion,
                    "z_statistic": result.z_statistic,
                    "p_value": result.p_value,
                    "overdispersed": is_overdispersed(result, config.z_threshold),
                }
            )
            logger.debug(
                f"{obs_set.locus_id} | {test.name}: z={result.z_statistic}, p={result.p_value}"
            )

    results_df = pd.DataFrame(rows, columns=RESULT_COLUMNS)
    n_hits = int(results_df["overdispersed"].sum()) if not results_df.empty else 0
    logger.info(
        f"Scanned {n_records} records: {len(results_df)} loci tested, "
        f"{n_hits} overdispersed (z > {config.z_threshold}), "
        f"{n_malformed} malformed records skipped, {n_empty} loci without data"
    )
    return results_df


def write_results(results_df: pd.DataFrame, output_file: str) -> None:
    """
    Write scan results as TSV.

    Parameters
    ----------
    results_df : pd.DataFrame
        Output of :func:`scan_vcf`.
    output_file : str
        Destination path ('.gz' compresses) or 'stdout'/'-' for standard output.
    """
    if output_file in ("stdout", "-"):
        results_df.to_csv(sys.stdout, sep="\t", index=False, na_rep="NA")
        return
    results_df.to_csv(output_file, sep="\t", index=False, na_rep="NA", compression="infer")
    logger.info(f"Results written to {output_file}")
