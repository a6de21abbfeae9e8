import pytest

from depthsv.intervals import (SVInterval, SequenceDictionary, IntervalIndex, get_padded_interval,
                               has_reciprocal_overlap, merge_intervals)


def test_interval_rejects_start_after_end():
    with pytest.raises(ValueError):
        SVInterval(0, 200, 100)


def test_point_overlaps_like_single_base():
    iv = SVInterval(0, 100, 200)
    assert SVInterval.point(0, 100).overlaps(iv)
    assert SVInterval.point(0, 199).overlaps(iv)
    assert not SVInterval.point(0, 200).overlaps(iv)
    assert not SVInterval.point(1, 150).overlaps(iv)
    assert SVInterval.point(0, 150).length == 0


def test_half_open_intervals_touching_do_not_overlap():
    assert not SVInterval(0, 100, 200).overlaps(SVInterval(0, 200, 300))
    assert SVInterval(0, 100, 201).overlap_len(SVInterval(0, 200, 300)) == 1


def test_index_keeps_duplicates_in_order():
    tree = IntervalIndex()
    tree.insert(SVInterval(0, 10, 20), "a")
    tree.insert(SVInterval(0, 10, 20), "b")
    tree.insert(SVInterval(0, 5, 30), "c")
    tree.insert(SVInterval(1, 1, 5), "d")
    assert tree.values() == ["c", "a", "b", "d"]
    assert len(tree) == 4
    assert tree.overlapping_values(SVInterval(0, 15, 16)) == ["c", "a", "b"]
    assert tree.overlapping_values(SVInterval(0, 25, 40)) == ["c"]
    assert tree.overlapping_values(SVInterval(2, 1, 100)) == []
    assert tree.has_overlapper(SVInterval.point(0, 29))
    assert not tree.has_overlapper(SVInterval.point(0, 30))


def test_padded_interval_is_clamped_to_contig():
    dictionary = SequenceDictionary([("chr1", 1000)])
    padded = get_padded_interval(SVInterval(0, 50, 990), 100, dictionary)
    assert padded == SVInterval(0, 1, 1001)
    padded = get_padded_interval(SVInterval.point(0, 500), 10, dictionary)
    assert padded == SVInterval(0, 490, 510)


def test_reciprocal_overlap():
    a = SVInterval(0, 100, 200)
    assert has_reciprocal_overlap(a, SVInterval(0, 120, 220), 0.8)
    assert not has_reciprocal_overlap(a, SVInterval(0, 150, 400), 0.5)
    assert not has_reciprocal_overlap(a, SVInterval(0, 300, 400), 0.1)


def test_merge_intervals():
    merged = merge_intervals([SVInterval(0, 50, 120), SVInterval(0, 10, 60), SVInterval(0, 120, 130),
                              SVInterval(0, 200, 210), SVInterval(1, 1, 2)])
    assert merged == [SVInterval(0, 10, 130), SVInterval(0, 200, 210), SVInterval(1, 1, 2)]


def test_sequence_dictionary():
    dictionary = SequenceDictionary.from_ref_lengths({"chr1": 1000, "chr2": 500})
    assert len(dictionary) == 2
    assert dictionary.index("chr2") == 1
    assert dictionary.index("chrX") == -1
    assert dictionary.reference_length == 1500
    assert dictionary.is_same_dictionary(SequenceDictionary([("chr1", 1000), ("chr2", 500)]))
    assert not dictionary.is_same_dictionary(SequenceDictionary([("chr1", 1000)]))
    assert dictionary.to_string(SVInterval(1, 10, 20)) == "chr2:10-20"
