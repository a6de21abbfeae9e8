#!/usr/bin/env python3

"""
Event factories turn a locus (left breakpoint window, right breakpoint
window, call interval) into a scored candidate call of one type
"""

import logging

from depthsv.intervals import get_padded_interval
from depthsv.sv_calls import LargeSimpleSV, SVType

logger = logging.getLogger()


class EventFactory(object):
    sv_type = None

    def call(self, left_interval, right_interval, call_interval, breakpoints, evidence_padding):
        """
        Returns a LargeSimpleSV or None. The caller guarantees that both
        windows are on the same contig and the call is long enough.
        """
        raise NotImplementedError


class LargeSimpleSVFactory(EventFactory):
    """
    Collects evidence links connecting the two breakpoint windows. Links
    with the orientation of the event type support it, links with the
    opposite orientation and interchromosomal links at either breakpoint
    count against it. Assembled contigs named by the breakpoint pair add
    split read support.
    """
    left_strand = None
    right_strand = None
    channel = 0

    def __init__(self, intrachromosomal_link_tree, interchromosomal_link_tree, structural_variant_call_tree,
                 contig_tree, args, dictionary):
        self.intrachromosomal_link_tree = intrachromosomal_link_tree
        self.interchromosomal_link_tree = interchromosomal_link_tree
        self.structural_variant_call_tree = structural_variant_call_tree
        self.contig_tree = contig_tree
        self.args = args
        self.dictionary = dictionary

    def _links_between(self, left_window, right_window):
        span = left_window if left_window.start <= right_window.start else right_window
        links = []
        seen = set()
        for link in self.intrachromosomal_link_tree.overlapping_values(span):
            if link.link_id in seen:
                continue
            seen.add(link.link_id)
            if link.left.interval.overlaps(left_window) and link.right.interval.overlaps(right_window):
                links.append(link)
        return links

    def _interchromosomal_links(self, left_window, right_window):
        links = {}
        for window in (left_window, right_window):
            for link in self.interchromosomal_link_tree.overlapping_values(window):
                links[link.link_id] = link
        return list(links.values())

    def _contig_support(self, left_window, right_window, breakpoints):
        if breakpoints is None:
            return 0
        names = breakpoints.contig_names()
        supporting = set()
        for window in (left_window, right_window):
            for ctg in self.contig_tree.overlapping_values(window):
                if ctg.name in names:
                    supporting.add(ctg.name)
        return len(supporting)

    def call(self, left_interval, right_interval, call_interval, breakpoints, evidence_padding):
        left_window = get_padded_interval(left_interval, evidence_padding, self.dictionary)
        right_window = get_padded_interval(right_interval, evidence_padding, self.dictionary)

        supporting = []
        opposing = []
        for link in self._links_between(left_window, right_window):
            if link.has_orientation(self.left_strand, self.right_strand):
                supporting.append(link)
            elif link.has_orientation(self.right_strand, self.left_strand):
                opposing.append(link)
        opposing += self._interchromosomal_links(left_window, right_window)

        read_pair_evidence = sum(link.read_pairs for link in supporting)
        split_read_evidence = sum(link.split_reads for link in supporting)
        split_read_evidence += self._contig_support(left_window, right_window, breakpoints)
        if read_pair_evidence + split_read_evidence == 0:
            return None

        return LargeSimpleSV(self.sv_type, call_interval,
                             evidence_ids=[link.link_id for link in supporting],
                             read_pair_evidence=read_pair_evidence,
                             split_read_evidence=split_read_evidence,
                             read_pair_counter_evidence=sum(link.read_pairs for link in opposing),
                             split_read_counter_evidence=sum(link.split_reads for link in opposing),
                             breakpoints=breakpoints, channel=self.channel)


class LargeDeletionFactory(LargeSimpleSVFactory):
    sv_type = SVType.DEL
    left_strand = True
    right_strand = False


class LargeTandemDuplicationFactory(LargeSimpleSVFactory):
    sv_type = SVType.DUP_TAND
    left_strand = False
    right_strand = True
