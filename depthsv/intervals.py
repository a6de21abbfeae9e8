#!/usr/bin/env python3

"""
Genome intervals, the sequence dictionary and the interval index
used to look up every kind of evidence by position.

Intervals use 1-based starts and exclusive ends, so the length of an
interval is end - start. A zero-length interval marks a single position.
"""

import logging
from collections import defaultdict

from intervaltree import IntervalTree

logger = logging.getLogger()


class SVInterval(object):
    __slots__ = ("contig", "start", "end")
    def __init__(self, contig, start, end):
        if start > end:
            raise ValueError(f"Interval start {start} is after end {end}")
        self.contig = contig
        self.start = start
        self.end = end

    @classmethod
    def point(cls, contig, position):
        return cls(contig, position, position)

    @property
    def length(self):
        return self.end - self.start

    def _query_end(self):
        return max(self.end, self.start + 1)

    def overlaps(self, other):
        return (self.contig == other.contig and self.start < other._query_end()
                and other.start < self._query_end())

    def overlap_len(self, other):
        if self.contig != other.contig:
            return 0
        return max(0, min(self.end, other.end) - max(self.start, other.start))

    def contains(self, other):
        return self.contig == other.contig and self.start <= other.start and other.end <= self.end

    def key(self):
        return (self.contig, self.start, self.end)

    def __eq__(self, other):
        return isinstance(other, SVInterval) and self.key() == other.key()

    def __hash__(self):
        return hash(self.key())

    def __lt__(self, other):
        return self.key() < other.key()

    def __repr__(self):
        return f"SVInterval({self.contig}, {self.start}, {self.end})"


class SequenceDictionary(object):
    """
    Ordered list of (contig name, contig length)
    """
    def __init__(self, sequences):
        self.names = [name for name, _ in sequences]
        self.lengths = [length for _, length in sequences]
        self._index = {name: i for i, name in enumerate(self.names)}

    @classmethod
    def from_ref_lengths(cls, ref_lengths):
        return cls(list(ref_lengths.items()))

    def __len__(self):
        return len(self.names)

    def index(self, name):
        return self._index.get(name, -1)

    def name(self, contig_index):
        return self.names[contig_index]

    def length(self, contig_index):
        return self.lengths[contig_index]

    @property
    def reference_length(self):
        return sum(self.lengths)

    def items(self):
        return zip(self.names, self.lengths)

    def is_same_dictionary(self, other):
        return other is not None and self.names == other.names and self.lengths == other.lengths

    def to_string(self, interval):
        return f"{self.names[interval.contig]}:{interval.start}-{interval.end}"


class IntervalIndex(object):
    """
    Interval -> value map with overlap queries. Equal intervals may hold
    distinct values. Iteration is ordered by contig, start, end and then
    insertion order.
    """
    def __init__(self):
        self._trees = defaultdict(IntervalTree)
        self._serial = 0

    def insert(self, interval, value):
        # the serial number keeps entries with equal coordinates distinct and ordered
        self._trees[interval.contig].addi(interval.start, interval._query_end(),
                                          (self._serial, interval, value))
        self._serial += 1

    def overlappers(self, interval):
        tree = self._trees.get(interval.contig)
        if tree is None:
            return iter([])
        hits = sorted(tree.overlap(interval.start, interval._query_end()))
        return ((iv.data[1], iv.data[2]) for iv in hits)

    def overlapping_values(self, interval):
        return [value for _, value in self.overlappers(interval)]

    def has_overlapper(self, interval):
        tree = self._trees.get(interval.contig)
        return tree is not None and tree.overlaps(interval.start, interval._query_end())

    def __iter__(self):
        for contig in sorted(self._trees):
            for iv in sorted(self._trees[contig]):
                yield iv.data[1], iv.data[2]

    def values(self):
        return [value for _, value in self]

    def __len__(self):
        return sum(len(t) for t in self._trees.values())


def get_padded_interval(interval, padding, dictionary):
    start = max(1, interval.start - padding)
    end = min(dictionary.length(interval.contig) + 1, interval.end + padding)
    return SVInterval(interval.contig, start, max(start, end))


def has_reciprocal_overlap(a, b, fraction):
    overlap = a.overlap_len(b)
    if overlap == 0:
        return False
    return overlap >= fraction * a.length and overlap >= fraction * b.length


def merge_intervals(intervals):
    """
    Merges overlapping and adjacent intervals, returns them sorted
    """
    merged = []
    for iv in sorted(intervals):
        if merged and merged[-1].contig == iv.contig and iv.start <= merged[-1].end:
            if iv.end > merged[-1].end:
                merged[-1] = SVInterval(iv.contig, merged[-1].start, iv.end)
        else:
            merged.append(iv)
    return merged
