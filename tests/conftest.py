import math

import pytest

from depthsv.breakpoints import BreakpointRecord
from depthsv.caller import ExistingCall
from depthsv.copy_ratio import CopyRatioCollection, CopyRatioSegment, SegmentCall
from depthsv.evidence import AlignedContig, EvidenceTargetLink, StrandedInterval
from depthsv.intervals import SVInterval, SequenceDictionary

CHR1_LEN = 100000
DUP_LOG2 = math.log2(1.5)


def make_link(start_1, end_1, strand_1, start_2, end_2, strand_2, split_reads=0, read_pairs=0, contig=0):
    return EvidenceTargetLink(StrandedInterval(SVInterval(contig, start_1, end_1), strand_1),
                              StrandedInterval(SVInterval(contig, start_2, end_2), strand_2),
                              split_reads, read_pairs)


def bin_log2(start):
    if 10000 <= start < 20000:
        return -1.0
    if 30000 <= start < 40000:
        return DUP_LOG2
    return 0.0


@pytest.fixture
def dictionary():
    return SequenceDictionary([("chr1", CHR1_LEN)])


@pytest.fixture
def copy_ratios():
    records = [("chr1", k * 1000 + 1, (k + 1) * 1000 + 1, bin_log2(k * 1000 + 1)) for k in range(100)]
    return CopyRatioCollection(SequenceDictionary([("chr1", CHR1_LEN)]), records)


@pytest.fixture
def segments():
    return [CopyRatioSegment(SVInterval(0, 1, 10100), 10, 0.0, SegmentCall.NEUTRAL),
            CopyRatioSegment(SVInterval(0, 10100, 20000), 10, -1.0, SegmentCall.DELETION),
            CopyRatioSegment(SVInterval(0, 20000, 30000), 10, 0.0, SegmentCall.NEUTRAL),
            CopyRatioSegment(SVInterval(0, 30000, 40000), 10, DUP_LOG2, SegmentCall.AMPLIFICATION),
            CopyRatioSegment(SVInterval(0, 40000, CHR1_LEN + 1), 60, 0.0, SegmentCall.NEUTRAL)]


@pytest.fixture
def caller_inputs(dictionary, copy_ratios, segments):
    """
    A deletion at chr1:10100-20000 supported by an existing call and a
    read pair link, a tandem duplication at chr1:30000-40000 supported by a
    breakpoint pair, an assembled contig and a link, and a duplication link
    inside the deletion
    """
    breakpoints = [BreakpointRecord("bnd_1", "bnd_2", "chr1", 30000, ["asm1"]),
                   BreakpointRecord("bnd_2", "bnd_1", "chr1", 40000, ["asm1"])]
    sv_calls = [ExistingCall("del_1", "DEL", "chr1", 10100, 20000),
                ExistingCall("del_2", "DEL", "chrUn", 10100, 20000)]
    contigs = [AlignedContig("asm1", "chr1", 29501, 30501),
               AlignedContig("asm2", None, 0, 0, is_unmapped=True)]
    links = [make_link(10000, 10100, True, 20000, 20100, False, split_reads=2, read_pairs=5),
             make_link(29950, 30000, False, 40000, 40050, True, read_pairs=6),
             make_link(12000, 12050, False, 15000, 15050, True, read_pairs=4)]
    return dict(breakpoints=breakpoints, structural_variant_calls=sv_calls, assembled_contigs=contigs,
                evidence_target_links=links, copy_ratios=copy_ratios, copy_ratio_segments=segments,
                high_coverage_intervals=[], dictionary=dictionary)
