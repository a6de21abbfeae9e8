#!/usr/bin/env python3

"""
Readers for the caller inputs: breakend and SV call VCFs, assembled contig
alignments, evidence links, copy ratios, copy ratio segments and BED masks.
All coordinates are converted to 1-based starts with exclusive ends.
"""

import gzip
import logging

import pysam

from depthsv.breakpoints import BreakpointRecord
from depthsv.caller import ExistingCall
from depthsv.copy_ratio import CopyRatioCollection, CopyRatioSegment, SegmentCall
from depthsv.errors import BadInputError
from depthsv.evidence import AlignedContig, EvidenceTargetLink, StrandedInterval
from depthsv.intervals import SVInterval, SequenceDictionary

logger = logging.getLogger()

SEGMENT_CALLS = {"0": SegmentCall.NEUTRAL, "-": SegmentCall.DELETION, "+": SegmentCall.AMPLIFICATION}


def _open_text(path):
    if path.endswith(".gz"):
        return gzip.open(path, "rt")
    return open(path)


def _info_list(record, key):
    if key not in record.info:
        return []
    value = record.info[key]
    if isinstance(value, (tuple, list)):
        return [str(v) for v in value]
    return [str(value)]


def read_dictionary_from_alignments(alignment_file):
    with pysam.AlignmentFile(alignment_file) as a:
        ref_lengths = dict(zip(a.references, a.lengths))
    return SequenceDictionary.from_ref_lengths(ref_lengths)


def read_breakpoints(vcf_file):
    breakpoints = []
    with pysam.VariantFile(vcf_file) as vcf:
        for var in vcf:
            mate_ids = _info_list(var, "MATEID")
            mate_id = mate_ids[0] if mate_ids else None
            breakpoints.append(BreakpointRecord(var.id, mate_id, var.chrom, var.pos,
                                                _info_list(var, "CTG_NAMES")))
    logger.info(f"\tRead {len(breakpoints)} breakpoint records")
    return breakpoints


def read_sv_calls(vcf_file):
    calls = []
    with pysam.VariantFile(vcf_file) as vcf:
        for var in vcf:
            sv_type = var.info["SVTYPE"] if "SVTYPE" in var.info else ""
            calls.append(ExistingCall(var.id, sv_type, var.chrom, var.pos, var.stop))
    logger.info(f"\tRead {len(calls)} existing SV calls")
    return calls


def read_assembled_contigs(alignment_file):
    contigs = []
    with pysam.AlignmentFile(alignment_file) as a:
        for read in a.fetch(until_eof=True):
            if read.is_unmapped:
                contigs.append(AlignedContig(read.query_name, None, 0, 0, is_unmapped=True))
                continue
            contigs.append(AlignedContig(read.query_name, read.reference_name,
                                         read.reference_start + 1, read.reference_end + 1))
    logger.info(f"\tRead {len(contigs)} assembled contig alignments")
    return contigs


def _parse_fields(path, line_num, fields, converters):
    try:
        return [conv(f) for conv, f in zip(converters, fields)]
    except ValueError as e:
        raise BadInputError(f"{path}:{line_num}: {e}")


def read_evidence_links(links_file, dictionary):
    """
    Tab separated: contig1 start1 end1 contig2 start2 end2 strand1 strand2
    split_reads read_pairs, with BED coordinates
    """
    links = []
    with _open_text(links_file) as f:
        for line_num, line in enumerate(f, 1):
            if not line.strip() or line.startswith("#"):
                continue
            fields = line.rstrip("\n").split("\t")
            if len(fields) < 10:
                raise BadInputError(f"{links_file}:{line_num}: expected 10 columns, found {len(fields)}")
            ctg_1, ctg_2 = fields[0], fields[3]
            start_1, end_1, start_2, end_2, split_reads, read_pairs = \
                _parse_fields(links_file, line_num, fields[1:3] + fields[4:6] + fields[8:10], [int] * 6)
            contig_1 = dictionary.index(ctg_1)
            contig_2 = dictionary.index(ctg_2)
            if contig_1 == -1 or contig_2 == -1:
                raise BadInputError(f"{links_file}:{line_num}: contig not in sequence dictionary")
            left = StrandedInterval(SVInterval(contig_1, start_1 + 1, end_1 + 1), fields[6] == "+")
            right = StrandedInterval(SVInterval(contig_2, start_2 + 1, end_2 + 1), fields[7] == "+")
            if (right.interval.contig, right.interval.start) < (left.interval.contig, left.interval.start):
                left, right = right, left
            links.append(EvidenceTargetLink(left, right, split_reads, read_pairs))
    logger.info(f"\tRead {len(links)} evidence links")
    return links


def _read_tsv_with_header(path):
    """
    GATK style tables: '@' header lines, then a column header, then records
    """
    sequences = []
    columns = None
    rows = []
    with _open_text(path) as f:
        for line_num, line in enumerate(f, 1):
            line = line.rstrip("\n")
            if not line:
                continue
            if line.startswith("@"):
                if line.startswith("@SQ"):
                    tags = dict(t.split(":", 1) for t in line.split("\t")[1:] if ":" in t)
                    sequences.append((tags["SN"], int(tags["LN"])))
                continue
            fields = line.split("\t")
            if columns is None:
                columns = {name: i for i, name in enumerate(fields)}
                continue
            rows.append((line_num, fields))
    return sequences, columns, rows


def _get_columns(path, columns, names):
    try:
        return [columns[n] for n in names]
    except (KeyError, TypeError):
        raise BadInputError(f"{path}: missing one of the columns {', '.join(names)}")


def read_copy_ratios(copy_ratio_file):
    sequences, columns, rows = _read_tsv_with_header(copy_ratio_file)
    i_ctg, i_start, i_end, i_val = _get_columns(copy_ratio_file, columns,
                                                ["CONTIG", "START", "END", "LOG2_COPY_RATIO"])
    records = []
    for line_num, fields in rows:
        start, end, log2_ratio = _parse_fields(copy_ratio_file, line_num,
                                               [fields[i_start], fields[i_end], fields[i_val]], [int, int, float])
        records.append((fields[i_ctg], start, end + 1, log2_ratio))
    logger.info(f"\tRead {len(records)} copy ratio bins")
    return CopyRatioCollection(SequenceDictionary(sequences), records)


def read_copy_ratio_segments(segment_file, dictionary):
    _, columns, rows = _read_tsv_with_header(segment_file)
    i_ctg, i_start, i_end, i_num, i_mean, i_call = _get_columns(
        segment_file, columns, ["CONTIG", "START", "END", "NUM_POINTS_COPY_RATIO", "MEAN_LOG2_COPY_RATIO", "CALL"])
    segments = []
    for line_num, fields in rows:
        start, end, num_points, mean = _parse_fields(
            segment_file, line_num, [fields[i_start], fields[i_end], fields[i_num], fields[i_mean]],
            [int, int, int, float])
        contig = dictionary.index(fields[i_ctg])
        if contig == -1:
            raise BadInputError(f"{segment_file}:{line_num}: contig {fields[i_ctg]} not in sequence dictionary")
        if fields[i_call] not in SEGMENT_CALLS:
            raise BadInputError(f"{segment_file}:{line_num}: unknown segment call {fields[i_call]}")
        segments.append(CopyRatioSegment(SVInterval(contig, start, end + 1), num_points, mean,
                                         SEGMENT_CALLS[fields[i_call]]))
    logger.info(f"\tRead {len(segments)} copy ratio segments")
    return segments


def read_bed_intervals(bed_file, dictionary):
    intervals = []
    with _open_text(bed_file) as f:
        for line in f:
            if not line.strip() or line.startswith(("#", "track", "browser")):
                continue
            fields = line.strip().split()
            contig = dictionary.index(fields[0])
            if contig == -1:
                logger.debug(f"Skipping interval on unknown contig {fields[0]}")
                continue
            intervals.append(SVInterval(contig, int(fields[1]) + 1, int(fields[2]) + 1))
    return intervals
