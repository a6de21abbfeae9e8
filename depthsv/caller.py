#!/usr/bin/env python3

"""
Searches for large deletions and tandem duplications using assembled
breakpoint pairs, clustered read pair evidence, binned copy ratios and
copy ratio segments. Candidates are generated around existing calls,
breakpoint pairs and evidence links, de-duplicated, clustered by overlap
and scored with a read depth model.
"""

import logging

import networkx as nx

from depthsv.breakpoints import get_intrachromosomal_breakpoint_pairs
from depthsv.copy_ratio import fill_segment_gaps, build_segment_tree, partition_copy_ratios
from depthsv.event_factories import LargeDeletionFactory, LargeTandemDuplicationFactory
from depthsv.evidence import (build_contig_interval_tree, build_evidence_interval_tree, get_interchromosomal_links,
                              get_intrachromosomal_links, intern_evidence_links)
from depthsv.intervals import SVInterval, IntervalIndex, has_reciprocal_overlap
from depthsv.progress import NullProgressMeter
from depthsv.read_depth_model import ReadDepthModel, ReadDepthModelParams
from depthsv.read_depth_support import ReadDepthSupportTester
from depthsv.sv_calls import SVType

logger = logging.getLogger()


class CallerArguments(object):
    __slots__ = ("min_event_size", "breakpoint_padding", "evidence_target_link_padding", "hmm_padding",
                 "max_call_reciprocal_overlap", "counter_evidence_pseudocount", "copy_ratio_bin_trimming",
                 "hmm_max_states", "hmm_transition_prob", "hmm_valid_states_min_fraction", "call_channels")
    def __init__(self, min_event_size=500, breakpoint_padding=1000, evidence_target_link_padding=100,
                 hmm_padding=1000, max_call_reciprocal_overlap=0.8, counter_evidence_pseudocount=1.0,
                 copy_ratio_bin_trimming=0, hmm_max_states=10, hmm_transition_prob=0.01,
                 hmm_valid_states_min_fraction=0.5, call_channels=(0,)):
        self.min_event_size = min_event_size
        self.breakpoint_padding = breakpoint_padding
        self.evidence_target_link_padding = evidence_target_link_padding
        self.hmm_padding = hmm_padding
        self.max_call_reciprocal_overlap = max_call_reciprocal_overlap
        self.counter_evidence_pseudocount = counter_evidence_pseudocount
        self.copy_ratio_bin_trimming = copy_ratio_bin_trimming
        self.hmm_max_states = hmm_max_states
        self.hmm_transition_prob = hmm_transition_prob
        self.hmm_valid_states_min_fraction = hmm_valid_states_min_fraction
        self.call_channels = frozenset(call_channels)

    @classmethod
    def from_namespace(cls, args):
        return cls(**{k: getattr(args, k) for k in cls.__slots__ if hasattr(args, k)})


class ExistingCall(object):
    """
    Structural variant call from an upstream caller
    """
    __slots__ = ("id", "sv_type", "contig", "start", "end")
    def __init__(self, id, sv_type, contig, start, end):
        self.id = id
        self.sv_type = sv_type
        self.contig = contig
        self.start = start
        self.end = end


def _require(value, message):
    if value is None:
        raise ValueError(message)


class LargeSimpleSVCaller(object):
    def __init__(self, breakpoints, structural_variant_calls, assembled_contigs, evidence_target_links,
                 copy_ratios, copy_ratio_segments, high_coverage_intervals, dictionary, args,
                 model_params=None):
        _require(breakpoints, "Breakpoint collection cannot be None")
        _require(structural_variant_calls, "Structural variant call collection cannot be None")
        _require(assembled_contigs, "Contig collection cannot be None")
        _require(evidence_target_links, "Evidence target link collection cannot be None")
        _require(copy_ratios, "Copy ratio collection cannot be None")
        _require(copy_ratio_segments, "Copy ratio segments collection cannot be None")
        _require(high_coverage_intervals, "High coverage intervals list cannot be None")
        _require(dictionary, "Dictionary cannot be None")
        _require(args, "Parameter arguments collection cannot be None")

        self.dictionary = dictionary
        self.args = args
        self.model_params = model_params or ReadDepthModelParams()

        logger.info("Building interval trees")
        self.paired_breakpoints = get_intrachromosomal_breakpoint_pairs(breakpoints, dictionary)
        self.structural_variant_call_tree = self._build_variant_tree(structural_variant_calls)
        self.high_coverage_tree = IntervalIndex()
        for iv in high_coverage_intervals:
            self.high_coverage_tree.insert(iv, None)

        links = intern_evidence_links(list(evidence_target_links))
        self.intrachromosomal_link_tree = build_evidence_interval_tree(get_intrachromosomal_links(links), 0,
                                                                       False, dictionary)
        self.interchromosomal_link_tree = build_evidence_interval_tree(get_interchromosomal_links(links), 0,
                                                                       True, dictionary)
        self.contig_tree = build_contig_interval_tree(assembled_contigs, dictionary)

        self.copy_ratio_segments = fill_segment_gaps(copy_ratio_segments)
        self.segment_tree = build_segment_tree(self.copy_ratio_segments)

        logger.info("Partitioning copy ratios by contig")
        self.copy_ratios = partition_copy_ratios(copy_ratios, dictionary)

        logger.info("Initializing event factories")
        factory_args = (self.intrachromosomal_link_tree, self.interchromosomal_link_tree,
                        self.structural_variant_call_tree, self.contig_tree, args, dictionary)
        self.event_factories = [LargeTandemDuplicationFactory(*factory_args),
                                LargeDeletionFactory(*factory_args)]

    def _build_variant_tree(self, calls):
        tree = IntervalIndex()
        for vc in calls:
            contig_id = self.dictionary.index(vc.contig)
            if contig_id == -1:
                logger.debug(f"Skipping call {vc.id} on unknown contig {vc.contig}")
                continue
            tree.insert(SVInterval(contig_id, vc.start, vc.end), vc)
        return tree

    def get_events_on_interval(self, left_interval, right_interval, call_interval, breakpoints, evidence_padding):
        if left_interval.contig != right_interval.contig:
            return []
        if call_interval.length < self.args.min_event_size:
            return []
        events = []
        for factory in self.event_factories:
            event = factory.call(left_interval, right_interval, call_interval, breakpoints, evidence_padding)
            if event is not None:
                events.append(event)
        return events

    def get_highest_scoring_event_on_interval(self, left_interval, right_interval, call_interval, disallowed_tree,
                                              breakpoints, evidence_padding):
        """
        Best scoring event on the interval, or None if the call interval has
        a reciprocal overlap above max_call_reciprocal_overlap with any
        interval in disallowed_tree
        """
        for interval, _ in disallowed_tree.overlappers(call_interval):
            if has_reciprocal_overlap(call_interval, interval, self.args.max_call_reciprocal_overlap):
                return None
        events = self.get_events_on_interval(left_interval, right_interval, call_interval, breakpoints,
                                             evidence_padding)
        if not events:
            return None
        return max(events, key=lambda e: e.get_score(self.args.counter_evidence_pseudocount))

    def _add_duplications(self, called_event_tree, events):
        for event in events:
            if event.sv_type != SVType.DUP_TAND:
                continue
            has_overlapping_deletion = any(other.sv_type == SVType.DEL for other in
                                           called_event_tree.overlapping_values(event.interval))
            if not has_overlapping_deletion:
                called_event_tree.insert(event.interval, event)

    def generate_candidates(self, progress=None):
        """
        Fills a tree with candidate events from existing deletion calls,
        breakpoint pairs and intrachromosomal evidence links
        """
        progress = progress or NullProgressMeter()
        called_event_tree = IntervalIndex()

        for interval, vc in self.structural_variant_call_tree:
            if vc.sv_type != "DEL" or interval.length < self.args.min_event_size:
                continue
            left = SVInterval.point(interval.contig, interval.start)
            right = SVInterval.point(interval.contig, interval.end)
            for event in self.get_events_on_interval(left, right, interval, None, self.args.breakpoint_padding):
                called_event_tree.insert(event.interval, event)
            progress.update(self.dictionary.to_string(interval))

        for pair in self.paired_breakpoints:
            left = SVInterval.point(pair.contig, pair.start)
            right = SVInterval.point(pair.contig, pair.end)
            events = self.get_events_on_interval(left, right, pair.interval, pair, self.args.breakpoint_padding)
            self._add_duplications(called_event_tree, events)
            progress.update(self.dictionary.to_string(pair.interval))

        for _, link in self.intrachromosomal_link_tree:
            left = link.left.interval
            right = link.right.interval
            if left.end >= right.start:
                continue
            call_interval = SVInterval(left.contig, left.end, right.start)
            events = self.get_events_on_interval(left, right, call_interval, None,
                                                 self.args.evidence_target_link_padding)
            self._add_duplications(called_event_tree, events)
            progress.update(self.dictionary.to_string(call_interval))

        logger.info(f"\tGenerated {len(called_event_tree)} candidate events")
        return called_event_tree

    def call_events(self, progress=None):
        """
        Returns the modeled calls and the list of filtered existing calls
        """
        progress = progress or NullProgressMeter()
        progress.set_record_label("intervals")

        called_event_tree = self.generate_candidates(progress)
        calls_to_remove = resolve_conflicts(called_event_tree, self.args.counter_evidence_pseudocount)
        logger.info(f"\tRemoved {len(calls_to_remove)} conflicting events")

        deletion_calls = IntervalIndex()
        duplication_calls = IntervalIndex()
        for interval, event in called_event_tree:
            if event in calls_to_remove or event.channel not in self.args.call_channels:
                continue
            if event.sv_type == SVType.DEL:
                deletion_calls.insert(interval, event)
            elif event.sv_type == SVType.DUP_TAND:
                duplication_calls.insert(interval, event)

        final_result = []
        cluster_offset = 0
        for call_tree in (deletion_calls, duplication_calls):
            modeled = self.cluster_and_model_read_depth(call_tree, cluster_offset)
            if modeled:
                cluster_offset = max(m.cluster_id for m in modeled) + 1
            final_result += modeled
        filtered_calls = []
        return final_result, filtered_calls

    def cluster_and_model_read_depth(self, call_tree, cluster_offset=0):
        result = []
        for i, cluster in enumerate(cluster_calls(call_tree)):
            model = ReadDepthModel(cluster, self.segment_tree, self.model_params)
            result += model.fit(cluster_id=cluster_offset + i)
        return result

    def test_read_depth(self, calls, progress=None):
        """
        Independent read depth check of the calls, see ReadDepthSupportTester
        """
        tester = ReadDepthSupportTester(self.copy_ratios, self.segment_tree, self.high_coverage_tree,
                                        self.dictionary, self.args)
        return tester.test_read_depth(calls, progress)


def resolve_conflicts(called_event_tree, counter_evidence_pseudocount):
    """
    For each call, looks at the overlapping calls sharing evidence with it.
    All but one of the best scoring calls in such a group are removed.
    Returns the set of calls to remove.
    """
    calls_to_remove = set()
    snapshot = list(called_event_tree)
    for interval, event in snapshot:
        conflicting_calls = [other for other in called_event_tree.overlapping_values(interval)
                             if other.shares_evidence(event) and other not in calls_to_remove]
        if len(conflicting_calls) < 2:
            continue
        scores = [c.get_score(counter_evidence_pseudocount) for c in conflicting_calls]
        max_score = max(scores)
        found_max = False
        for conflicting_call, score in zip(conflicting_calls, scores):
            if score < max_score:
                calls_to_remove.add(conflicting_call)
            elif found_max:
                calls_to_remove.add(conflicting_call)
            else:
                found_max = True
    return calls_to_remove


def cluster_calls(call_tree):
    """
    Groups calls into connected components of the interval overlap graph.
    Clusters and their members follow the order of the tree.
    """
    entries = list(call_tree)
    order = {id(event): i for i, (_, event) in enumerate(entries)}
    graph = nx.Graph()
    for i, (interval, event) in enumerate(entries):
        graph.add_node(i)
        for other in call_tree.overlapping_values(interval):
            graph.add_edge(i, order[id(other)])

    clusters = [sorted(cc) for cc in nx.connected_components(graph)]
    clusters.sort(key=lambda cc: cc[0])
    return [[entries[i][1] for i in cc] for cc in clusters]
