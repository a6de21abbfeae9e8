#!/usr/bin/env python3

"""
Estimates how much each call in a cluster of overlapping calls contributes
to the copy number observed in the called copy ratio segments.

Every call i gets a contribution r[i] in [0, r_max]. Over any stretch of a
segment the predicted copy number is 2 plus the contributions of the
duplications and minus those of the deletions spanning it. The fit is a
coordinate-wise gradient descent on the negative log posterior, with each
step projected back into the box and under the ploidy bound wherever more
than two calls stack up.
"""

import logging
import math

import numpy as np

from depthsv.intervals import SVInterval, IntervalIndex
from depthsv.sv_calls import ModeledCall

logger = logging.getLogger()


class ReadDepthModelParams(object):
    __slots__ = ("search_delta", "learning_rate", "absolute_tolerance", "max_iter", "max_step_size",
                 "r_max", "ploidy", "sigma")
    def __init__(self, search_delta=1e-3, learning_rate=1e-3, absolute_tolerance=1e-6, max_iter=50,
                 max_step_size=0.1, r_max=2.0, ploidy=2.0, sigma=0.5):
        self.search_delta = search_delta
        self.learning_rate = learning_rate
        self.absolute_tolerance = absolute_tolerance
        self.max_iter = max_iter
        self.max_step_size = max_step_size
        self.r_max = r_max
        self.ploidy = ploidy
        self.sigma = sigma


class OverlapInfo(object):
    __slots__ = ("ids", "coefficients", "scaling_factor")
    def __init__(self, ids, coefficients, scaling_factor):
        self.ids = ids
        self.coefficients = coefficients
        self.scaling_factor = scaling_factor


def unscaled_log_normal(x, mu, sigma):
    diff = (x - mu) / sigma
    return -0.5 * diff * diff - math.log(sigma)


def get_overlap_info(segment_interval, overlappers):
    """
    Cuts the segment at the start and end of every overlapping call.
    overlappers is a list of (model id, call). For each piece covered by at
    least one call, records the covering ids with their sign (-1 deletion,
    +1 duplication) and the sum over those calls of piece length / call length.
    """
    calls = dict(overlappers)
    by_start = sorted(overlappers, key=lambda x: x[1].start)
    by_end = sorted(overlappers, key=lambda x: x[1].end)
    n = len(overlappers)
    seg_start = segment_interval.start
    seg_end = segment_interval.end

    last_start = seg_start
    start_index = 0
    end_index = 0
    open_events = []
    overlap_info = []
    while start_index < n or end_index < n:
        if start_index < n:
            next_start = by_start[start_index][1].start
            if next_start <= seg_start:
                open_events.append(by_start[start_index][0])
                start_index += 1
                continue
        else:
            next_start = seg_end
        next_end = by_end[end_index][1].end if end_index < n else seg_end

        piece_ids = list(open_events)
        if start_index < n and next_start < next_end:
            piece_length = next_start - last_start
            last_start = next_start
            open_events.append(by_start[start_index][0])
            start_index += 1
        elif next_end >= seg_end:
            piece_length = seg_end - last_start
            last_start = seg_end
        else:
            piece_length = next_end - last_start
            last_start = next_end
            open_events.remove(by_end[end_index][0])
            end_index += 1

        if piece_ids:
            coefficients = [calls[i].sv_type.copy_number_sign() for i in piece_ids]
            scaling_factor = sum(piece_length / float(calls[i].size) for i in piece_ids)
            overlap_info.append(OverlapInfo(piece_ids, coefficients, scaling_factor))
        if last_start == seg_end:
            break
    return overlap_info


def get_ploidy_groups(call_tree, model_ids):
    """
    For each call, the sorted ids of all calls covering its start position
    if there are more than two of them, otherwise an empty group
    """
    groups = []
    for interval, call in call_tree:
        start_point = SVInterval.point(interval.contig, interval.start)
        overlapping = [model_ids[id(c)] for c in call_tree.overlapping_values(start_point)]
        groups.append(tuple(sorted(overlapping)) if len(overlapping) > 2 else ())
    return groups


class ReadDepthModel(object):
    def __init__(self, calls, segment_tree, params):
        self.params = params
        self.call_tree = IntervalIndex()
        for call in calls:
            self.call_tree.insert(call.interval, call)
        self.calls = self.call_tree.values()
        self.model_ids = {id(call): i for i, call in enumerate(self.calls)}
        num_calls = len(self.calls)

        self.ploidy_groups = get_ploidy_groups(self.call_tree, self.model_ids)
        self.groups_by_call = [[] for _ in range(num_calls)]
        for group in set(g for g in self.ploidy_groups if g):
            for i in group:
                self.groups_by_call[i].append(np.array(group))

        coefficient_rows = []
        observed = []
        scaling = []
        for segment in self._overlapping_segments(segment_tree):
            overlappers = [(self.model_ids[id(c)], c) for c in self.call_tree.overlapping_values(segment.interval)]
            copy_number_call = segment.copy_number()
            for info in get_overlap_info(segment.interval, overlappers):
                row = np.zeros(num_calls)
                for i, coefficient in zip(info.ids, info.coefficients):
                    row[i] += coefficient
                coefficient_rows.append(row)
                observed.append(copy_number_call)
                scaling.append(info.scaling_factor)
        self.coefficients = np.array(coefficient_rows).reshape(len(coefficient_rows), num_calls)
        self.observed = np.array(observed, dtype=float)
        self.scaling = np.array(scaling, dtype=float)

        self.r = np.zeros(num_calls)
        self.num_iter = 0
        self.delta = 0.0

    def _overlapping_segments(self, segment_tree):
        segments = {}
        for call in self.calls:
            for seg_interval, segment in segment_tree.overlappers(call.interval):
                segments[id(segment)] = (seg_interval.key(), segment)
        return [seg for _, seg in sorted(segments.values(), key=lambda x: x[0])]

    def log_likelihood(self, r):
        if len(self.observed) == 0:
            return 0.0
        predicted = 2.0 + self.coefficients.dot(r)
        copy_number_ll = np.sum(unscaled_log_normal(self.observed, predicted, self.params.sigma) * self.scaling)
        return float(copy_number_ll) + sum(self.evidence_log_likelihood(i, r) for i in range(len(r)))

    def evidence_log_likelihood(self, call_id, r):
        return 0.0

    def log_prior(self, r):
        return 0.0

    def negative_log_posterior(self, r):
        return -self.log_likelihood(r) - self.log_prior(r)

    def sweep(self):
        """
        Updates every coordinate once in order. Returns the squared
        length of the total move.
        """
        p = self.params
        r = self.r
        moved = 0.0
        for i in range(len(r)):
            r_old = r[i]
            r[i] = r_old + p.search_delta
            posterior_plus = self.negative_log_posterior(r)
            r[i] = r_old - p.search_delta
            posterior_minus = self.negative_log_posterior(r)
            r[i] = r_old

            gradient = (posterior_plus - posterior_minus) / (2 * p.search_delta)
            delta_ri = p.learning_rate * gradient
            if abs(delta_ri) > p.max_step_size:
                delta_ri = math.copysign(p.max_step_size, delta_ri)
            r[i] = min(p.r_max, max(0.0, r[i] - delta_ri))

            for group in self.groups_by_call[i]:
                total = r[group].sum()
                if total > p.ploidy:
                    r[i] = max(0.0, r[i] + (p.ploidy - total))
            moved += (r[i] - r_old) ** 2
        return moved

    def fit(self, cluster_id=0):
        p = self.params
        logger.debug(f"Computing read depth scores on {len(self.calls)} events")
        delta = p.absolute_tolerance * 2
        last_posterior = self.negative_log_posterior(self.r)
        num_iter = 0
        while delta > p.absolute_tolerance and num_iter < p.max_iter:
            moved = self.sweep()
            posterior = self.negative_log_posterior(self.r)
            if moved == 0:
                delta = 0.0
            else:
                delta = abs(last_posterior - posterior) / math.sqrt(moved)
            last_posterior = posterior
            num_iter += 1
        self.num_iter = num_iter
        self.delta = delta
        logger.debug(f"Finished after {num_iter} iterations with log posterior {last_posterior} and delta {delta}")
        return [ModeledCall(call, cluster_id, i, float(self.r[i])) for i, call in enumerate(self.calls)]
