"""
Unit Tests for result collection and selection
"""

import pytest

from expressions import Expr, ExprKind
from selector import ResultCollector, SearchResult, ranked_output, select


@pytest.fixture
def lit(dv):
    def _lit(text):
        return Expr.literal(dv(text))
    return _lit


@pytest.fixture
def result(ctx):
    def _result(error, expression):
        return SearchResult(ctx.mpf(error), expression)
    return _result


class TestSelect:

    def test_select_when_equal_error_then_smaller_expression_kept(self, lit, result):
        big = result("0.5", Expr.binary(ExprKind.ADD, lit("1"), lit("2")))
        small = result("0.5", lit("3"))
        assert select([big, small]) == [small]
        assert select([small, big]) == [small]

    def test_select_when_distinct_errors_then_both_survive(self, lit, result):
        a = result("0.5", lit("1"))
        b = result("0.25", lit("2"))
        assert select([a, b]) == [b, a]

    def test_select_when_equal_error_and_size_then_first_kept(self, lit, result):
        first = result("1", lit("1"))
        second = result("1", lit("2"))
        assert select([first, second]) == [first]

    def test_select_when_many_then_sorted_ascending_and_truncated(self, lit, result):
        results = [result(str(err), lit(str(err))) for err in (5, 3, 9, 1, 7, 2)]
        selected = select(results, top_k=3)
        assert [int(r.error) for r in selected] == [1, 2, 3]

    def test_select_when_default_then_thirty_at_most(self, lit, result):
        results = [result(str(i), lit("1")) for i in range(50)]
        assert len(select(results)) == 30

    def test_select_when_empty_then_empty(self):
        assert select([]) == []


class TestRankedOutput:

    def test_ranked_output_when_simplifying_then_original_untouched(self, lit, result, pi_constant):
        expression = Expr.binary(ExprKind.MUL, Expr.constant("pi", pi_constant.value), lit("1"))
        entry = result("0.1", expression)
        assert ranked_output([entry], digits=15) == [("pi", entry.error)]
        assert expression.display() == "(pi * 1)"

    def test_ranked_output_when_not_simplifying_then_as_generated(self, lit, result, pi_constant):
        expression = Expr.binary(ExprKind.MUL, Expr.constant("pi", pi_constant.value), lit("1"))
        output = ranked_output([result("0.1", expression)], digits=15, simplify_output=False)
        assert output[0][0] == "(pi * 1)"


class TestResultCollector:

    def test_results_when_groups_added_out_of_order_then_merged_by_seed(self, lit, result):
        collector = ResultCollector()
        late = result("2", lit("2"))
        early = result("1", lit("1"))
        collector.extend(1, [late])
        collector.extend(0, [early])
        assert collector.results() == [early, late]
        assert len(collector) == 2

    def test_extend_when_same_seed_twice_then_appended(self, lit, result):
        collector = ResultCollector()
        a, b = result("1", lit("1")), result("2", lit("2"))
        collector.extend(0, [a])
        collector.extend(0, iter([b]))
        assert collector.results() == [a, b]
