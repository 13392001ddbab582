from __future__ import annotations

import pytest

from mediabox.services.filters import Condition, parse_condition, parse_conditions


def test_two_clauses() -> None:
    assert parse_conditions("a=1&b>=2") == [Condition("a", "=", "1"), Condition("b", ">=", "2")]


def test_two_character_operators_are_not_split_on_equals() -> None:
    assert parse_conditions("a>=1") == [Condition("a", ">=", "1")]
    assert parse_conditions("a<=1") == [Condition("a", "<=", "1")]


def test_strict_operators() -> None:
    assert parse_conditions("size>10&size<20") == [Condition("size", ">", "10"), Condition("size", "<", "20")]


def test_list_input() -> None:
    assert parse_conditions(["width >= 100", " height<50 "]) == [
        Condition("width", ">=", "100"),
        Condition("height", "<", "50"),
    ]


def test_whitespace_and_quotes_are_trimmed() -> None:
    assert parse_conditions(" uploaded_at >= '2024-05-01 10:00:00' ") == [
        Condition("uploaded_at", ">=", "2024-05-01 10:00:00")
    ]
    assert parse_conditions('filename="cat.png"') == [Condition("filename", "=", "cat.png")]


def test_value_may_contain_operator_characters() -> None:
    assert parse_condition("filename=a>b.png") == Condition("filename", "=", "a>b.png")


@pytest.mark.parametrize("filters", ["", None, "garbage", "&&", "=1", ["nothing here"]])
def test_malformed_clauses_are_dropped(filters) -> None:
    assert parse_conditions(filters) == []


def test_malformed_clause_among_valid_ones() -> None:
    assert parse_conditions("a=1&oops&b<2") == [Condition("a", "=", "1"), Condition("b", "<", "2")]


def test_clause_splits_at_first_operator() -> None:
    assert parse_condition("a=x>=y") == Condition("a", "=", "x>=y")
    assert parse_condition("a>b=c") == Condition("a", ">", "b=c")
