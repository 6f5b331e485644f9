"""Unit tests for conditions, operators and boolean groups."""

from __future__ import annotations

from datetime import date

import pytest

from sqlweave.compile.builder import QueryBuilder
from sqlweave.compile.clauses import SubQuery
from sqlweave.compile.expressions import (
    OPERATOR_TOKENS,
    AndWhere,
    Condition,
    Group,
    GroupKind,
    Having,
    On,
    Operator,
    OrWhere,
    WhereOne,
)
from sqlweave.compile.fields import Field
from sqlweave.compile.values import Like, Param, Range


def test_every_operator_has_a_token():
    assert set(OPERATOR_TOKENS) == set(Operator)
    assert Operator.NEQ.token == "!="
    assert Operator.NOT_IN.token == "NOT IN"


# ---------------------------------------------------------------------------
# Conditions
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("condition", "expected"),
    [
        (Condition("field", Operator.EQ, 123), "( `field` = 123 )"),
        (Condition("field", Operator.EQ, "b"), "( `field` = 'b' )"),
        (Condition("age", Operator.GTE, 18), "( `age` >= 18 )"),
        (Condition("id", Operator.IN, [1, 2, 3]), "( `id` IN (1, 2, 3) )"),
        (Condition("id", Operator.NOT_IN, ["a"]), "( `id` NOT IN ('a') )"),
        (Condition("name", Operator.LIKE, Like("jo", left=False)), "( `name` LIKE 'jo%' )"),
        (
            Condition("d", Operator.BETWEEN, Range(date(2024, 1, 1), date(2024, 2, 1))),
            "( `d` BETWEEN '2024-01-01' AND '2024-02-01' )",
        ),
        (Condition("n", Operator.NOT_BETWEEN, Range(1, 5)), "( `n` NOT BETWEEN 1 AND 5 )"),
        (Condition("deleted_at", Operator.IS_NULL), "( `deleted_at` IS NULL )"),
        (Condition("deleted_at", Operator.IS_NOT_NULL), "( `deleted_at` IS NOT NULL )"),
        (Condition("x", Operator.EQ, Param("p")), "( `x` = {p} )"),
    ],
)
def test_condition_rendering(condition, expected):
    assert condition.render() == expected


def test_field_to_field_comparison():
    c = Condition(Field("table1.field1"), Operator.EQ, Field("table2.field1"))
    assert c.render() == "( table1.`field1` = table2.`field1` )"


def test_explicit_none_on_binary_operator_is_null_literal():
    assert Condition("x", Operator.EQ, None).render() == "( `x` = NULL )"


def test_exists_has_no_left_operand():
    sub = QueryBuilder().select("id").from_("orders")
    c = Condition(None, Operator.EXISTS, SubQuery(sub))
    assert c.render() == "( EXISTS (SELECT `id` FROM `orders`) )"


def test_operator_accepts_enum_value():
    assert Condition("a", "GT", 1).operator is Operator.GT


def test_unknown_operator_rejected():
    with pytest.raises(ValueError):
        Condition("a", "NOPE", 1)


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------


def test_where_one_renders_condition_only():
    w = WhereOne("field1", Operator.EQ, "value")
    assert w.render() == "( `field1` = 'value' )"
    assert w.condition.operator is Operator.EQ


def test_and_group_wraps_every_child():
    g = AndWhere(
        [
            WhereOne("field1", Operator.EQ, "value1"),
            WhereOne("field2", Operator.GT, 10),
        ]
    )
    assert g.render() == "( ( `field1` = 'value1' ) ) AND ( ( `field2` > 10 ) )"


def test_nested_groups():
    g = AndWhere(
        [
            WhereOne("field1", Operator.EQ, "value1"),
            OrWhere(
                [
                    WhereOne("field2", Operator.GT, 10),
                    WhereOne("field3", Operator.LT, 5),
                ]
            ),
        ]
    )
    assert g.render() == (
        "( ( `field1` = 'value1' ) ) AND "
        "( ( ( `field2` > 10 ) ) OR ( ( `field3` < 5 ) ) )"
    )


def test_group_wraps_plain_conditions_too():
    g = OrWhere([Condition("a", Operator.EQ, 1), Condition("b", Operator.EQ, 2)])
    assert g.render() == "( ( `a` = 1 ) ) OR ( ( `b` = 2 ) )"


def test_deep_nesting_is_balanced():
    node = WhereOne("x", Operator.EQ, 0)
    for depth in range(60):
        kind = GroupKind.AND if depth % 2 else GroupKind.OR
        node = Group([node, WhereOne(f"f{depth}", Operator.EQ, depth)], kind)
    sql = node.render()
    assert sql.count("(") == sql.count(")")
    assert sql.count("`x`") == 1


def test_empty_group():
    assert not AndWhere()
    assert AndWhere().render() == ""
    assert AndWhere([WhereOne("a", Operator.EQ, 1)])


def test_on_and_having_are_and_groups():
    assert On([Condition("a", Operator.EQ, 1)]).kind is GroupKind.AND
    assert Having([Condition("a", Operator.EQ, 1)]).render() == "( ( `a` = 1 ) )"


def test_nodes_are_immutable():
    c = Condition("a", Operator.EQ, 1)
    with pytest.raises(AttributeError):
        c.operator = Operator.NEQ  # type: ignore[misc]
