#!/usr/bin/env python3

import logging
from enum import Enum

logger = logging.getLogger()


class SVType(Enum):
    DEL = "DEL"
    DUP_TAND = "DUP_TAND"
    DISPERSED_DUP = "DISPERSED_DUP"

    def vcf_alt(self):
        return "<DEL>" if self is SVType.DEL else "<DUP>"

    def copy_number_sign(self):
        return -1 if self is SVType.DEL else 1


class LargeSimpleSV(object):
    """
    Candidate event produced by an event factory. The interval, type and
    evidence do not change after creation; annotations made while modeling
    read depth live in ModeledCall.
    """
    __slots__ = ("sv_type", "interval", "channel", "evidence_ids", "read_pair_evidence",
                 "split_read_evidence", "read_pair_counter_evidence", "split_read_counter_evidence",
                 "breakpoints")
    def __init__(self, sv_type, interval, evidence_ids=(), read_pair_evidence=0, split_read_evidence=0,
                 read_pair_counter_evidence=0, split_read_counter_evidence=0, breakpoints=None, channel=0):
        self.sv_type = sv_type
        self.interval = interval
        self.channel = channel
        self.evidence_ids = frozenset(evidence_ids)
        self.read_pair_evidence = read_pair_evidence
        self.split_read_evidence = split_read_evidence
        self.read_pair_counter_evidence = read_pair_counter_evidence
        self.split_read_counter_evidence = split_read_counter_evidence
        self.breakpoints = breakpoints

    @property
    def contig(self):
        return self.interval.contig

    @property
    def start(self):
        return self.interval.start

    @property
    def end(self):
        return self.interval.end

    @property
    def size(self):
        return self.interval.length

    def shares_evidence(self, other):
        return not self.evidence_ids.isdisjoint(other.evidence_ids)

    def get_score(self, counter_evidence_pseudocount):
        evidence = self.read_pair_evidence + self.split_read_evidence
        counter_evidence = self.read_pair_counter_evidence + self.split_read_counter_evidence
        denominator = counter_evidence + counter_evidence_pseudocount
        if denominator == 0:
            return float("inf") if evidence else 0.0
        return evidence / denominator

    def __repr__(self):
        return (f"LargeSimpleSV({self.sv_type.name}, {self.contig}:{self.start}-{self.end}, "
                f"RP={self.read_pair_evidence}/{self.read_pair_counter_evidence}, "
                f"SR={self.split_read_evidence}/{self.split_read_counter_evidence})")


class ModeledCall(object):
    """
    A final call with its read depth model annotations
    """
    __slots__ = ("call", "cluster_id", "model_id", "copy_number_support", "read_depth_support")
    def __init__(self, call, cluster_id, model_id, copy_number_support):
        self.call = call
        self.cluster_id = cluster_id
        self.model_id = model_id
        self.copy_number_support = copy_number_support
        self.read_depth_support = str(copy_number_support)

    @property
    def sv_type(self):
        return self.call.sv_type

    @property
    def interval(self):
        return self.call.interval
