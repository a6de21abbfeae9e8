import pytest

from depthsv.caller import CallerArguments
from depthsv.copy_ratio import CopyRatioCollection, build_segment_tree, partition_copy_ratios
from depthsv.hmm import CopyNumberHMM, viterbi
from depthsv.intervals import SVInterval, IntervalIndex, SequenceDictionary
from depthsv.read_depth_support import ReadDepthSupportTester, valid_hmm_states
from depthsv.sv_calls import LargeSimpleSV, SVType


def test_hmm_state_count_follows_copy_ratios():
    assert CopyNumberHMM.for_copy_ratios([1.0, 0.5], 10, 0.01).num_states == 3
    assert CopyNumberHMM.for_copy_ratios([1.0, 2.6], 10, 0.01).num_states == 6
    assert CopyNumberHMM.for_copy_ratios([1.0, 20.0], 10, 0.01).num_states == 10


def test_viterbi_finds_deletion():
    copy_ratios = [1.0] * 5 + [0.5] * 10 + [1.0] * 5
    hmm = CopyNumberHMM.for_copy_ratios(copy_ratios, 10, 0.01)
    assert viterbi(hmm, copy_ratios) == [2] * 5 + [1] * 10 + [2] * 5
    assert viterbi(hmm, []) == []


def test_valid_states():
    states = valid_hmm_states(6)
    assert states[SVType.DEL] == {0, 1}
    assert states[SVType.DUP_TAND] == {3, 4, 5}


def make_tester(records, segments=(), high_coverage=()):
    dictionary = SequenceDictionary([("chr1", 100000)])
    copy_ratios = partition_copy_ratios(CopyRatioCollection(dictionary, records), dictionary)
    high_coverage_tree = IntervalIndex()
    for iv in high_coverage:
        high_coverage_tree.insert(iv, None)
    return ReadDepthSupportTester(copy_ratios, build_segment_tree(segments), high_coverage_tree, dictionary,
                                  CallerArguments())


def deletion_bins(start, end):
    return [("chr1", s, s + 500, -1.0 if start <= s < end else 0.0) for s in range(1, 100000, 500)]


def test_segment_support(segments):
    tester = make_tester(deletion_bins(0, 0), segments)
    call = LargeSimpleSV(SVType.DEL, SVInterval(0, 10500, 19500))
    assert tester.test_read_depth([call]) == [(call, "SEGMENTS")]


def test_segment_with_wrong_call_type_does_not_support(segments):
    tester = make_tester(deletion_bins(0, 0), segments)
    call = LargeSimpleSV(SVType.DUP_TAND, SVInterval(0, 10100, 20000))
    assert tester.test_read_depth([call]) == []


def test_hmm_support():
    tester = make_tester(deletion_bins(5001, 8001))
    call = LargeSimpleSV(SVType.DEL, SVInterval(0, 5001, 8001))
    assert tester.test_read_depth([call]) == [(call, "HMM")]
    neutral = LargeSimpleSV(SVType.DEL, SVInterval(0, 50001, 53001))
    assert tester.test_read_depth([neutral]) == []


def test_high_coverage_calls_are_skipped():
    tester = make_tester(deletion_bins(5001, 8001), high_coverage=[SVInterval(0, 4000, 5500)])
    call = LargeSimpleSV(SVType.DEL, SVInterval(0, 5001, 8001))
    assert tester.in_high_coverage_region(call.interval)
    assert tester.test_read_depth([call]) == []


def test_large_deletion_rescue_in_empty_region():
    records = [r for r in deletion_bins(0, 0) if not 20001 <= r[1] < 40001]
    tester = make_tester(records)
    call = LargeSimpleSV(SVType.DEL, SVInterval(0, 20001, 40001), evidence_ids=[1, 2, 3])
    assert tester.test_read_depth([call]) == [(call, "DEL_RESCUE")]
    weak = LargeSimpleSV(SVType.DEL, SVInterval(0, 20001, 40001), evidence_ids=[1])
    assert tester.test_read_depth([weak]) == []


def test_unknown_contig_index():
    tester = make_tester(deletion_bins(0, 0))
    with pytest.raises(ValueError):
        tester.test_read_depth_on_contig([], 3)
