"""Stage interpreter tests — folding rules and predicate construction."""

import pytest
from sqlglot import exp

from querygraph.core.errors import (
    InvalidInValue,
    MissingTable,
    NoValidFilters,
    UnsupportedFilterValue,
    UnsupportedNodeKind,
)
from querygraph.schemas.graph import (
    AggregationNode,
    FilterCondition,
    FilterNode,
    LimitNode,
    SelectNode,
    SortNode,
    TableNode,
    UnknownNode,
)
from querygraph.services.stage_interpreter import (
    build_predicate,
    condition_to_expression,
    interpret,
    is_empty_value,
    make_literal,
)


def _table(name: str = "users") -> TableNode:
    return TableNode(id="t", type="table", data={"table_name": name})


def _filter(*conditions: dict) -> FilterNode:
    return FilterNode(id="f", type="filter", data={"conditions": list(conditions)})


class TestInterpret:
    def test_table_only_spec(self):
        spec = interpret([_table()])
        assert spec.table == "users"
        assert spec.columns == []
        assert spec.predicate is None
        assert spec.limit is None
        assert spec.group_by == []

    def test_last_table_wins(self):
        spec = interpret([_table("a"), _table("b")])
        assert spec.table == "b"

    def test_last_limit_wins(self):
        spec = interpret(
            [
                _table(),
                LimitNode(id="l1", type="limit", data={"limit": 5}),
                LimitNode(id="l2", type="limit", data={"limit": 7}),
            ]
        )
        assert spec.limit == 7

    def test_limit_without_value_clears_limit(self):
        spec = interpret(
            [
                _table(),
                LimitNode(id="l1", type="limit", data={"limit": 5}),
                LimitNode(id="l2", type="limit", data={}),
            ]
        )
        assert spec.limit is None

    def test_last_sort_wins(self):
        spec = interpret(
            [
                _table(),
                SortNode(id="o1", type="sort", data={"order": [{"column": "a"}]}),
                SortNode(
                    id="o2",
                    type="sort",
                    data={"order": [{"column": "b", "direction": "desc"}]},
                ),
            ]
        )
        assert [(r.column, r.direction) for r in spec.order_by] == [("b", "desc")]

    def test_sort_direction_defaults_to_asc(self):
        spec = interpret(
            [_table(), SortNode(id="o", type="sort", data={"order": [{"column": "a"}]})]
        )
        assert spec.order_by[0].direction == "asc"

    def test_filter_conditions_accumulate(self):
        spec = interpret(
            [
                _table(),
                _filter({"column": "a", "operator": "==", "value": 1}),
                _filter({"column": "b", "operator": "==", "value": 2}),
            ]
        )
        assert [c.column for c in spec.conditions] == ["a", "b"]
        assert isinstance(spec.predicate, exp.And)

    def test_aggregation_sets_group_by(self):
        spec = interpret(
            [
                _table(),
                AggregationNode(
                    id="a",
                    type="aggregation",
                    data={"dimensions": ["city"], "metrics": [{"function": "COUNT(*)"}]},
                ),
            ]
        )
        assert spec.group_by == ["city"]

    def test_select_after_aggregation_leaves_columns_empty(self):
        spec = interpret(
            [
                _table(),
                AggregationNode(id="a", type="aggregation", data={"dimensions": ["city"]}),
                SelectNode(id="s", type="select", data={"columns": ["id"]}),
            ]
        )
        assert spec.columns == []

    def test_all_empty_conditions_give_no_predicate(self):
        spec = interpret([_table(), _filter({"column": "a", "operator": "==", "value": ""})])
        assert spec.predicate is None
        assert len(spec.conditions) == 1

    def test_missing_table(self):
        with pytest.raises(MissingTable):
            interpret([SelectNode(id="s", type="select", data={"columns": ["id"]})])

    def test_empty_table_name_counts_as_missing(self):
        with pytest.raises(MissingTable):
            interpret([_table("")])

    def test_unknown_node_kind(self):
        with pytest.raises(UnsupportedNodeKind) as exc_info:
            interpret([_table(), UnknownNode(id="x", type="join")])
        assert exc_info.value.kind == "join"

    def test_bad_in_value_propagates(self):
        with pytest.raises(InvalidInValue):
            interpret([_table(), _filter({"column": "a", "operator": "in", "value": "x"})])


class TestIsEmptyValue:
    @pytest.mark.parametrize("value", ["", [], ["", ""], ("",)])
    def test_empty(self, value):
        assert is_empty_value(value)

    @pytest.mark.parametrize("value", ["x", 0, False, ["", "a"], 0.0])
    def test_not_empty(self, value):
        assert not is_empty_value(value)


class TestMakeLiteral:
    def test_bool_is_not_a_number(self):
        assert isinstance(make_literal(True), exp.Boolean)

    def test_number(self):
        literal = make_literal(42)
        assert isinstance(literal, exp.Literal)
        assert not literal.is_string

    def test_string(self):
        assert make_literal("Tokyo").is_string

    @pytest.mark.parametrize(
        "value", [None, {"a": 1}, [1], float("nan"), float("inf"), float("-inf")]
    )
    def test_unsupported(self, value):
        with pytest.raises(UnsupportedFilterValue, match="Unsupported value type"):
            make_literal(value)


class TestConditionToExpression:
    def test_in_requires_a_list(self):
        condition = FilterCondition(column="a", operator="in", value="Taro")
        with pytest.raises(InvalidInValue, match="Expected array for 'in' operator"):
            condition_to_expression(condition)

    def test_one_bad_in_element_fails_the_condition(self):
        condition = FilterCondition(column="a", operator="in", value=["x", None])
        with pytest.raises(UnsupportedFilterValue):
            condition_to_expression(condition)

    def test_negate_wraps_in_not(self):
        condition = FilterCondition(column="a", operator="==", value=1, negate=True)
        assert isinstance(condition_to_expression(condition), exp.Not)

    @pytest.mark.parametrize(
        "operator,expected",
        [
            ("==", exp.EQ),
            ("!=", exp.NEQ),
            (">", exp.GT),
            ("<", exp.LT),
            (">=", exp.GTE),
            ("<=", exp.LTE),
        ],
    )
    def test_comparison_operators(self, operator, expected):
        condition = FilterCondition(column="a", operator=operator, value=1)
        assert isinstance(condition_to_expression(condition), expected)


class TestBuildPredicate:
    def test_no_conditions(self):
        with pytest.raises(NoValidFilters):
            build_predicate([])

    def test_all_empty(self):
        conditions = [
            FilterCondition(column="a", operator="==", value=""),
            FilterCondition(column="b", operator="in", value=[]),
        ]
        with pytest.raises(NoValidFilters):
            build_predicate(conditions)

    def test_single_condition_is_not_wrapped(self):
        predicate = build_predicate([FilterCondition(column="a", operator=">", value=1)])
        assert isinstance(predicate, exp.GT)

    def test_conjunction_is_left_nested(self):
        predicate = build_predicate(
            [
                FilterCondition(column="a", operator="==", value=1),
                FilterCondition(column="b", operator="==", value=2),
                FilterCondition(column="c", operator="==", value=3),
            ]
        )
        assert isinstance(predicate, exp.And)
        assert isinstance(predicate.this, exp.And)
        assert predicate.expression.this.name == "c"
