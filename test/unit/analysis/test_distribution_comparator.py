import pytest

from test.pytestutils import before

from sampler_comparison.analysis.distribution_comparator import compare, compare_all, ConfigMismatchException, \
    PercResult
from sampler_comparison.model.store import Store

F1 = b"\x01" * 32
F2 = b"\x02" * 32
F3 = b"\x03" * 32


def store_with(name, fingerprints, max_depth=10):
    store = Store(name, max_depth)
    for timestamp, fingerprint in enumerate(fingerprints):
        store.add("main", timestamp, fingerprint)
    return store


class TestCompare:
    @before
    def before(self):
        # a: F1 50%, F2 50%; b: F1 25%, F3 75%
        self.a = store_with("a", [F1, F2])
        self.b = store_with("b", [F1, F3, F3, F3])

    def test_it_sums_the_mass_not_covered_by_the_other_store(self):
        result = compare(self.a, self.b)

        assert result.summed_diff == pytest.approx(0.75)
        assert result.perc_that_isnt_in_other == pytest.approx(0.5)

    def test_it_is_not_symmetric(self):
        result = compare(self.b, self.a)

        assert result.summed_diff == pytest.approx(0.75)
        assert result.perc_that_isnt_in_other == pytest.approx(0.75)

    def test_a_store_compared_with_itself_has_no_difference(self):
        assert compare(self.a, self.a) == PercResult(0.0, 0.0)

    def test_stores_with_the_same_distribution_have_no_difference(self):
        assert compare(self.a, store_with("a twice", [F2, F1, F1, F2])) == PercResult(0.0, 0.0)

    def test_disjoint_stores_differ_completely(self):
        result = compare(self.a, store_with("c", [F3]))

        assert result.summed_diff == pytest.approx(1.0)
        assert result.perc_that_isnt_in_other == pytest.approx(1.0)

    def test_results_stay_within_zero_and_one(self):
        result = compare(self.a, self.b)

        assert 0 <= result.perc_that_isnt_in_other <= result.summed_diff <= 1

    def test_an_empty_store_has_nothing_to_compare(self):
        assert compare(Store("empty", 10), self.a) == PercResult(0.0, 0.0)

    def test_all_of_a_store_is_missing_from_an_empty_store(self):
        result = compare(self.a, Store("empty", 10))

        assert result.summed_diff == pytest.approx(1.0)
        assert result.perc_that_isnt_in_other == pytest.approx(1.0)

    def test_threads_do_not_matter(self):
        split = Store("split", 10)
        split.add("main", 1, F1)
        split.add("worker", 2, F2)

        assert compare(self.a, split) == PercResult(0.0, 0.0)

    def test_it_refuses_stores_with_different_max_depths(self):
        with pytest.raises(ConfigMismatchException):
            compare(self.a, store_with("deeper", [F1], max_depth=11))


class TestCompareAll:
    def test_it_compares_every_ordered_pair(self):
        a = store_with("a", [F1, F2])
        b = store_with("b", [F1, F3, F3, F3])

        results = compare_all([a, b])

        assert set(results.keys()) == {(0, 0), (0, 1), (1, 0), (1, 1)}
        assert results[(0, 1)] == compare(a, b)
        assert results[(1, 0)] == compare(b, a)
        assert results[(0, 0)] == PercResult(0.0, 0.0)

    def test_it_keeps_stores_with_the_same_name_apart(self):
        first_run = store_with("sys._current_frames", [F1])
        second_run = store_with("sys._current_frames", [F2])

        results = compare_all([first_run, second_run])

        assert len(results) == 4
        assert results[(0, 1)] == PercResult(1.0, 1.0)
        assert results[(1, 0)] == PercResult(1.0, 1.0)
        assert results[(1, 1)] == PercResult(0.0, 0.0)
