#!/usr/bin/env python3

"""
Copy number HMM over binned copy ratios. States are integer copy numbers.
"""

import math

import numpy as np


class CopyNumberHMM(object):
    def __init__(self, num_states, transition_prob, emission_sigma=0.5):
        self.num_states = num_states
        self.emission_sigma = emission_sigma
        self.log_prior = np.full(num_states, -math.log(num_states))
        if num_states == 1:
            transitions = np.ones((1, 1))
        else:
            transitions = np.full((num_states, num_states), transition_prob / (num_states - 1))
            np.fill_diagonal(transitions, 1.0 - transition_prob)
        with np.errstate(divide="ignore"):
            self.log_transition = np.log(transitions)

    @classmethod
    def for_copy_ratios(cls, copy_ratios, max_states, transition_prob):
        num_states = min(max_states, max(int(2 * cr) for cr in copy_ratios) + 1)
        return cls(max(num_states, 1), transition_prob)

    def log_emission(self, copy_ratios):
        copy_numbers = 2.0 * np.asarray(copy_ratios, dtype=float)[:, None]
        states = np.arange(self.num_states)[None, :]
        diff = (copy_numbers - states) / self.emission_sigma
        return -0.5 * diff * diff - math.log(self.emission_sigma)


def viterbi(hmm, copy_ratios):
    """
    Most likely state path for the observed copy ratios
    """
    if len(copy_ratios) == 0:
        return []
    emission = hmm.log_emission(copy_ratios)
    num_obs = emission.shape[0]
    score = hmm.log_prior + emission[0]
    backpointers = np.zeros((num_obs, hmm.num_states), dtype=int)
    for t in range(1, num_obs):
        candidates = score[:, None] + hmm.log_transition
        backpointers[t] = np.argmax(candidates, axis=0)
        score = candidates[backpointers[t], np.arange(hmm.num_states)] + emission[t]

    path = [int(np.argmax(score))]
    for t in range(num_obs - 1, 0, -1):
        path.append(int(backpointers[t][path[-1]]))
    path.reverse()
    return path
