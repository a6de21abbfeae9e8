#!/usr/bin/env python3

"""
Clustered read evidence (evidence target links) and assembled contig
alignments, indexed by genomic position
"""

import logging

from depthsv.intervals import SVInterval, IntervalIndex, get_padded_interval

logger = logging.getLogger()


class StrandedInterval(object):
    __slots__ = ("interval", "strand")
    def __init__(self, interval, strand):
        self.interval = interval
        self.strand = strand

    def sign(self):
        return '+' if self.strand else '-'


class EvidenceTargetLink(object):
    """
    Paired-read and split-read support connecting two loci. link_id is
    assigned once when the links are indexed and is what calls use to
    recognise shared evidence.
    """
    __slots__ = ("left", "right", "split_reads", "read_pairs", "link_id")
    def __init__(self, left, right, split_reads=0, read_pairs=0, link_id=None):
        self.left = left
        self.right = right
        self.split_reads = split_reads
        self.read_pairs = read_pairs
        self.link_id = link_id

    def is_intrachromosomal(self):
        return self.left.interval.contig == self.right.interval.contig

    def has_orientation(self, left_strand, right_strand):
        return self.left.strand == left_strand and self.right.strand == right_strand

    def outer_interval(self):
        return SVInterval(self.left.interval.contig, self.left.interval.start, self.right.interval.end)

    def __repr__(self):
        l, r = self.left.interval, self.right.interval
        return (f"EvidenceTargetLink({l.contig}:{l.start}-{l.end}{self.left.sign()} "
                f"{r.contig}:{r.start}-{r.end}{self.right.sign()} SR={self.split_reads} RP={self.read_pairs})")


class AlignedContig(object):
    __slots__ = ("name", "contig", "start", "end", "is_unmapped")
    def __init__(self, name, contig, start, end, is_unmapped=False):
        self.name = name
        self.contig = contig
        self.start = start
        self.end = end
        self.is_unmapped = is_unmapped


def intern_evidence_links(links):
    for i, link in enumerate(links):
        link.link_id = i
    return links


def get_intrachromosomal_links(links):
    return [link for link in links if link.is_intrachromosomal()]


def get_interchromosomal_links(links):
    return [link for link in links if not link.is_intrachromosomal()]


def build_evidence_interval_tree(links, padding, separate_left_right, dictionary):
    """
    Either indexes each link by its left and right intervals separately, or
    (intrachromosomal links only) by the span from the start of the left to
    the end of the right interval
    """
    link_tree = IntervalIndex()
    for link in links:
        left = link.left.interval
        right = link.right.interval
        if separate_left_right:
            link_tree.insert(get_padded_interval(left, padding, dictionary), link)
            link_tree.insert(get_padded_interval(right, padding, dictionary), link)
        elif left.contig == right.contig:
            link_tree.insert(get_padded_interval(link.outer_interval(), padding, dictionary), link)
    return link_tree


def build_contig_interval_tree(contigs, dictionary):
    """
    Index of the mapped assembled contigs
    """
    tree = IntervalIndex()
    for ctg in contigs:
        if ctg.is_unmapped:
            continue
        contig_id = dictionary.index(ctg.contig)
        if contig_id == -1:
            continue
        tree.insert(SVInterval(contig_id, ctg.start, ctg.end), ctg)
    return tree
