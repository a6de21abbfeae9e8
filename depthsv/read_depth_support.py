#!/usr/bin/env python3

"""
Checks calls against read depth on their own: called segments first,
then an HMM over the copy ratio bins for short events, then a rescue
rule for well supported deletions lying in uncovered regions
"""

import logging

from depthsv.copy_ratio import SegmentCall, build_copy_ratio_tree, fraction_empty, get_copy_ratios_on_interval
from depthsv.hmm import CopyNumberHMM, viterbi
from depthsv.intervals import SVInterval, has_reciprocal_overlap
from depthsv.progress import NullProgressMeter
from depthsv.sv_calls import SVType

logger = logging.getLogger()

MAX_ENDPOINT_DISTANCE = 10000
MAX_HMM_EVENT_SIZE = 10000
SEGMENT_RECIPROCAL_OVERLAP = 0.5
MAX_HIGH_COVERAGE_FRACTION = 0.5
MIN_RESCUE_EVIDENCE = 3
MIN_RESCUE_EMPTY_FRACTION = 0.8

EXPECTED_SEGMENT_CALLS = {SVType.DEL: SegmentCall.DELETION,
                          SVType.DUP_TAND: SegmentCall.AMPLIFICATION}


def valid_hmm_states(hmm_max_states):
    return {SVType.DEL: set(range(0, 2)),
            SVType.DUP_TAND: set(range(3, hmm_max_states))}


class ReadDepthSupportTester(object):
    def __init__(self, copy_ratios, segment_tree, high_coverage_tree, dictionary, args):
        self.copy_ratios = copy_ratios
        self.segment_tree = segment_tree
        self.high_coverage_tree = high_coverage_tree
        self.dictionary = dictionary
        self.args = args
        self.valid_states = valid_hmm_states(args.hmm_max_states)

    def test_read_depth(self, calls, progress=None):
        """
        Returns (call, support type) for every call supported by read depth
        """
        logger.info("Evaluating calls for read depth")
        calls = list(calls)
        supported = []
        for contig in range(len(self.dictionary)):
            supported += self.test_read_depth_on_contig(calls, contig, progress)
        return supported

    def in_high_coverage_region(self, interval):
        left_end = SVInterval.point(interval.contig, interval.start)
        right_end = SVInterval.point(interval.contig, interval.end)
        if self.high_coverage_tree.has_overlapper(left_end) or self.high_coverage_tree.has_overlapper(right_end):
            return True
        high_coverage_length = sum(iv.overlap_len(interval) for iv, _ in self.high_coverage_tree.overlappers(interval))
        return high_coverage_length > MAX_HIGH_COVERAGE_FRACTION * interval.length

    def test_read_depth_on_contig(self, calls, contig, progress=None):
        if contig < 0 or contig >= len(self.dictionary):
            raise ValueError(f"Could not find contig with index {contig} in dictionary")
        progress = progress or NullProgressMeter()
        copy_ratio_tree = build_copy_ratio_tree(self.copy_ratios[contig])

        supported = []
        for call in calls:
            if call.contig != contig:
                continue
            interval = call.interval
            if self.in_high_coverage_region(interval):
                continue

            support = None
            expected_call = EXPECTED_SEGMENT_CALLS.get(call.sv_type)
            supporting_segments = [seg for seg in self.segment_tree.overlapping_values(interval)
                                   if seg.call == expected_call
                                   and has_reciprocal_overlap(seg.interval, interval, SEGMENT_RECIPROCAL_OVERLAP)
                                   and abs(seg.interval.start - interval.start) < MAX_ENDPOINT_DISTANCE
                                   and abs(seg.interval.end - interval.end) < MAX_ENDPOINT_DISTANCE]
            if expected_call is not None and supporting_segments:
                support = "SEGMENTS"
            elif interval.length < MAX_HMM_EVENT_SIZE:
                bins = get_copy_ratios_on_interval(interval, copy_ratio_tree, self.args.copy_ratio_bin_trimming)
                if call.sv_type in self.valid_states and self.supported_by_hmm(bins, self.valid_states[call.sv_type]):
                    support = "HMM"
            elif call.sv_type == SVType.DEL and len(call.evidence_ids) >= MIN_RESCUE_EVIDENCE:
                bins = get_copy_ratios_on_interval(interval, copy_ratio_tree, self.args.copy_ratio_bin_trimming)
                if fraction_empty(interval, bins) > MIN_RESCUE_EMPTY_FRACTION:
                    support = "DEL_RESCUE"

            if support is not None:
                supported.append((call, support))
            progress.set_record_label(f"{self.dictionary.to_string(interval)}:{call.sv_type.name}")
        return supported

    def supported_by_hmm(self, copy_ratio_bins, valid_states):
        if not copy_ratio_bins:
            return False
        copy_ratios = [pow(2.0, b.log2_ratio) for b in copy_ratio_bins]
        hmm = CopyNumberHMM.for_copy_ratios(copy_ratios, self.args.hmm_max_states, self.args.hmm_transition_prob)
        states = viterbi(hmm, copy_ratios)
        return self.test_hmm_state(states, valid_states)

    def test_hmm_state(self, states, valid_states):
        num_valid = sum(1 for s in states if s in valid_states)
        return num_valid >= self.args.hmm_valid_states_min_fraction * len(states)
