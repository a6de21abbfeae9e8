#!/usr/bin/env python3

"""
Pairs mate-linked breakend records into intrachromosomal breakpoint pairs
"""

import logging

from depthsv.errors import BadInputError, BreakpointMateError
from depthsv.intervals import SVInterval

logger = logging.getLogger()


class BreakpointRecord(object):
    __slots__ = ("id", "mate_id", "contig", "start", "contig_names")
    def __init__(self, id, mate_id, contig, start, contig_names=()):
        self.id = id
        self.mate_id = mate_id
        self.contig = contig
        self.start = start
        self.contig_names = list(contig_names)

    def __str__(self):
        return f"{self.id}\t{self.contig}:{self.start}\tMATEID={self.mate_id}"


class IntrachromosomalBreakpointPair(object):
    __slots__ = ("contig", "interval", "left_contig_names", "right_contig_names")
    def __init__(self, contig, start, end, left_contig_names, right_contig_names):
        self.contig = contig
        self.interval = SVInterval(contig, start, end)
        self.left_contig_names = list(left_contig_names)
        self.right_contig_names = list(right_contig_names)

    @property
    def start(self):
        return self.interval.start

    @property
    def end(self):
        return self.interval.end

    def contig_names(self):
        return set(self.left_contig_names) | set(self.right_contig_names)

    def __repr__(self):
        return f"IntrachromosomalBreakpointPair({self.contig}, {self.start}, {self.end})"


def is_breakpoint_pair(bnd_1, bnd_2):
    return (bnd_1.mate_id is not None and bnd_1.mate_id == bnd_2.id
            and bnd_2.mate_id == bnd_1.id)


def get_intrachromosomal_breakpoint_pairs(breakpoints, dictionary):
    """
    Single pass over the breakends, keeping unmatched ones by id until
    their mate shows up. Pairs on different contigs are dropped.
    """
    unpaired = {}
    paired_breakpoints = []
    for bnd_1 in breakpoints:
        if bnd_1.mate_id is None:
            continue
        if bnd_1.mate_id in unpaired:
            bnd_2 = unpaired.pop(bnd_1.mate_id)
            if not is_breakpoint_pair(bnd_1, bnd_2):
                raise BreakpointMateError(f"Breakpoint mate attributes did not match: {bnd_1}\t{bnd_2}")
            if bnd_1.contig != bnd_2.contig:
                continue
            first, second = (bnd_1, bnd_2) if bnd_1.start < bnd_2.start else (bnd_2, bnd_1)
            contig = dictionary.index(first.contig)
            if contig == -1:
                raise BadInputError(f"Breakpoint contig {first.contig} is not in the sequence dictionary")
            paired_breakpoints.append(IntrachromosomalBreakpointPair(contig, first.start, second.start,
                                                                     first.contig_names, second.contig_names))
        else:
            unpaired[bnd_1.id] = bnd_1

    if unpaired:
        logger.warning(f"There were {len(unpaired)} unpaired breakpoint variants with a MATEID attribute")
    return paired_breakpoints
