#!/usr/bin/env python3

"""
Binned copy ratios and called copy ratio segments
"""

import logging
from enum import Enum

from depthsv.errors import BadInputError, IncompatibleDictionaryError
from depthsv.intervals import SVInterval, IntervalIndex, get_padded_interval, merge_intervals

logger = logging.getLogger()

MAX_COPY_RATIO_EVENT_SIZE = 100000


class SegmentCall(Enum):
    NEUTRAL = "0"
    DELETION = "-"
    AMPLIFICATION = "+"


class CopyRatio(object):
    __slots__ = ("interval", "log2_ratio")
    def __init__(self, interval, log2_ratio):
        self.interval = interval
        self.log2_ratio = log2_ratio

    @property
    def start(self):
        return self.interval.start

    @property
    def end(self):
        return self.interval.end


class CopyRatioCollection(object):
    """
    Copy ratio records as read from disk, with contig names and the
    dictionary of the file they came from
    """
    def __init__(self, dictionary, records):
        self.dictionary = dictionary
        self.records = records

    def __len__(self):
        return len(self.records)


class CopyRatioSegment(object):
    __slots__ = ("interval", "num_points", "mean_log2_ratio", "call")
    def __init__(self, interval, num_points, mean_log2_ratio, call):
        self.interval = interval
        self.num_points = num_points
        self.mean_log2_ratio = mean_log2_ratio
        self.call = call

    def copy_number(self):
        return pow(2.0, self.mean_log2_ratio) * 2

    def __repr__(self):
        iv = self.interval
        return f"CopyRatioSegment({iv.contig}:{iv.start}-{iv.end}, {self.mean_log2_ratio:.3f}, {self.call.name})"


def fill_segment_gaps(segments):
    """
    Adds a neutral, zero-signal segment between consecutive segments of the
    same contig that leave a gap
    """
    segments = sorted(segments, key=lambda s: s.interval.key())
    empty_segments = []
    for current, nxt in zip(segments[:-1], segments[1:]):
        if current.interval.contig == nxt.interval.contig and current.interval.end < nxt.interval.start:
            gap = SVInterval(current.interval.contig, current.interval.end, nxt.interval.start)
            empty_segments.append(CopyRatioSegment(gap, 0, 0.0, SegmentCall.NEUTRAL))
    return segments + empty_segments


def build_segment_tree(segments):
    tree = IntervalIndex()
    for seg in segments:
        tree.insert(seg.interval, seg)
    return tree


def partition_copy_ratios(copy_ratios, dictionary):
    """
    Splits copy ratio bins by contig index. copy_ratios is a
    CopyRatioCollection whose records are (contig name, start, end, log2 ratio)
    """
    if not dictionary.is_same_dictionary(copy_ratios.dictionary):
        raise IncompatibleDictionaryError("Copy ratio dictionary does not match sequence dictionary",
                                          "copy ratio", copy_ratios.dictionary, "master", dictionary)
    by_contig = [[] for _ in range(len(dictionary))]
    for contig_name, start, end, log2_ratio in copy_ratios.records:
        contig_id = dictionary.index(contig_name)
        if contig_id == -1:
            raise BadInputError("Copy ratio and master sequence dictionaries matched, but encountered a "
                                f"copy ratio with contig {contig_name} with no record")
        by_contig[contig_id].append(CopyRatio(SVInterval(contig_id, start, end), log2_ratio))
    for bins in by_contig:
        bins.sort(key=lambda b: b.start)
    return by_contig


def build_copy_ratio_tree(bins):
    tree = IntervalIndex()
    for cr in bins:
        tree.insert(cr.interval, cr.log2_ratio)
    return tree


def get_copy_ratios_on_interval(interval, copy_ratio_tree, bins_to_trim):
    """
    Bins overlapping the interval ordered by start, with bins_to_trim
    removed from each side
    """
    if interval.length == 0:
        return []
    bins = [CopyRatio(iv, val) for iv, val in copy_ratio_tree.overlappers(interval)]
    if len(bins) <= 2 * bins_to_trim:
        return []
    bins.sort(key=lambda b: b.start)
    return bins[bins_to_trim:len(bins) - bins_to_trim]


def fraction_empty(interval, bins):
    return 1.0 - sum(b.interval.length for b in bins) / float(interval.length)


def get_minimal_copy_ratios(copy_ratios, links, paired_breakpoints, dictionary, min_size, max_size,
                            breakpoint_padding, link_padding):
    """
    Keeps only the copy ratio records overlapping evidence of a plausible
    event size. Returns a new CopyRatioCollection.
    """
    intervals = []
    for pair in paired_breakpoints:
        if min_size <= pair.interval.length <= max_size:
            intervals.append(get_padded_interval(pair.interval, breakpoint_padding, dictionary))
    for link in links:
        if not link.is_intrachromosomal():
            continue
        outer = link.outer_interval()
        if min_size <= outer.length <= max_size:
            intervals.append(get_padded_interval(outer, link_padding, dictionary))

    evidence_tree = IntervalIndex()
    for iv in merge_intervals(intervals):
        evidence_tree.insert(iv, None)

    kept = []
    for record in copy_ratios.records:
        contig_name, start, end, _ = record
        contig_id = dictionary.index(contig_name)
        if contig_id == -1:
            continue
        if evidence_tree.has_overlapper(SVInterval(contig_id, start, end)):
            kept.append(record)
    kept.sort(key=lambda r: (dictionary.index(r[0]), r[1]))
    logger.info(f"\tKept {len(kept)} of {len(copy_ratios)} copy ratio bins near evidence")
    return CopyRatioCollection(copy_ratios.dictionary, kept)
