import logging

import pytest

from depthsv.breakpoints import BreakpointRecord, get_intrachromosomal_breakpoint_pairs
from depthsv.errors import BadInputError, BreakpointMateError
from depthsv.intervals import SequenceDictionary


@pytest.fixture
def two_contigs():
    return SequenceDictionary([("chr1", 100000), ("chr2", 50000)])


def test_pairs_are_ordered_and_reported_once(two_contigs):
    breakpoints = [BreakpointRecord("a", "b", "chr1", 5000, ["ctg1"]),
                   BreakpointRecord("c", "d", "chr2", 100),
                   BreakpointRecord("b", "a", "chr1", 1000, ["ctg2"]),
                   BreakpointRecord("d", "c", "chr2", 900)]
    pairs = get_intrachromosomal_breakpoint_pairs(breakpoints, two_contigs)
    assert [(p.contig, p.start, p.end) for p in pairs] == [(0, 1000, 5000), (1, 100, 900)]
    assert pairs[0].left_contig_names == ["ctg2"]
    assert pairs[0].right_contig_names == ["ctg1"]
    assert pairs[0].contig_names() == {"ctg1", "ctg2"}


def test_interchromosomal_pairs_are_dropped(two_contigs):
    breakpoints = [BreakpointRecord("a", "b", "chr1", 5000),
                   BreakpointRecord("b", "a", "chr2", 1000)]
    assert get_intrachromosomal_breakpoint_pairs(breakpoints, two_contigs) == []


def test_mate_mismatch_raises(two_contigs):
    breakpoints = [BreakpointRecord("x", "y", "chr1", 5000),
                   BreakpointRecord("w", "x", "chr1", 1000)]
    with pytest.raises(BreakpointMateError):
        get_intrachromosomal_breakpoint_pairs(breakpoints, two_contigs)


def test_unknown_contig_raises(two_contigs):
    breakpoints = [BreakpointRecord("a", "b", "chrUn", 5000),
                   BreakpointRecord("b", "a", "chrUn", 1000)]
    with pytest.raises(BadInputError):
        get_intrachromosomal_breakpoint_pairs(breakpoints, two_contigs)


def test_unpaired_breakpoints_warn(two_contigs, caplog):
    breakpoints = [BreakpointRecord("a", "b", "chr1", 5000),
                   BreakpointRecord("e", None, "chr1", 7000)]
    with caplog.at_level(logging.WARNING):
        pairs = get_intrachromosomal_breakpoint_pairs(breakpoints, two_contigs)
    assert pairs == []
    assert "1 unpaired breakpoint" in caplog.text
