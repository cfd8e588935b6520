import pytest

from reskernels.expression import (
    ExpressionSyntaxError,
    Operation,
    OperationPrimitive,
    find_ending_parens,
    resolve_arithmetic,
    resolve_variable,
)


def test_literal_number():
    assert resolve_arithmetic("12", {}).evaluate() == 12


def test_variable_reference():
    tree = resolve_arithmetic("{DATA_SIZE}", {"DATA_SIZE": 4096})
    assert tree.evaluate() == 4096


def test_unknown_variable_is_zero():
    assert resolve_variable("MISSING", {}).evaluate() == 0


def test_empty_expression_is_none():
    assert resolve_arithmetic("", {}) is None


def test_operators_are_right_associative():
    assert resolve_arithmetic("2*3+4", {}).evaluate() == 14


def test_subtraction_wraps_like_unsigned():
    assert resolve_arithmetic("2-3", {}).evaluate() == 2**64 - 1


def test_multiplication_commutes_with_variables():
    variables = {"MPI_SIZE": 6, "MPI_RANK": 7}
    a = resolve_arithmetic("{MPI_SIZE}*{MPI_RANK}", variables).evaluate()
    b = resolve_arithmetic("{MPI_RANK}*{MPI_SIZE}", variables).evaluate()
    assert a == b


def test_parenthesised_group_matches_trailing_group():
    a = resolve_arithmetic("(2+3)*4", {}).evaluate()
    b = resolve_arithmetic("4*(2+3)", {}).evaluate()
    assert a == b


def test_nested_parentheses_equal_flat():
    nested = resolve_arithmetic("((7))", {}).evaluate()
    assert nested == resolve_arithmetic("7", {}).evaluate()


def test_division_by_variable_matches_literal():
    variables = {"DATA_SIZE": 100, "MPI_SIZE": 4}
    a = resolve_arithmetic("{DATA_SIZE}/{MPI_SIZE}", variables).evaluate()
    b = resolve_arithmetic("100/4", {}).evaluate()
    assert a == b


def test_division_by_zero_raises():
    with pytest.raises(ZeroDivisionError):
        resolve_arithmetic("4/0", {}).evaluate()


def test_unclosed_parenthesis_raises():
    with pytest.raises(ExpressionSyntaxError):
        resolve_arithmetic("(2+3", {})


def test_unclosed_variable_raises():
    with pytest.raises(ExpressionSyntaxError):
        resolve_arithmetic("{DATA_SIZE", {"DATA_SIZE": 1})


@pytest.mark.parametrize("text", ["(a)", "((a))", "((a)(b))", "(a(b(c)))"])
def test_find_ending_parens_closes_whole_group(text):
    end = find_ending_parens(text, 1)
    assert end == len(text) - 1
    assert text[end] == ")"


def test_find_ending_parens_stops_at_inner_group_end():
    text = "(a)+(b)"
    end = find_ending_parens(text, 1)
    assert text[: end + 1] == "(a)"


def test_find_ending_parens_missing():
    assert find_ending_parens("(a", 1) < 0


def test_parse_operator_known_symbol():
    left = OperationPrimitive(value=5)
    op = OperationPrimitive.parse_operator("%", left)
    assert op.operation is Operation.MOD
    assert op.left is left


def test_unknown_operator_evaluates_to_zero():
    op = OperationPrimitive.parse_operator("?", OperationPrimitive(value=9))
    op.right = OperationPrimitive(value=3)
    assert op.operation is Operation.INVALID
    assert op.evaluate() == 0


def test_modulo_of_equal_values_is_zero():
    assert resolve_arithmetic("{A}%{A}", {"A": 37}).evaluate() == 0