"""Tests for flattening and unwrapping of composite values."""

from __future__ import annotations

from inkcomb import NOTHING, Nothing, Some, Values, as_values, concat, tuple_of, unwrap


class TestTupleOf:
    def test_single_is_bare(self) -> None:
        assert tuple_of(1) == 1

    def test_many(self) -> None:
        v = tuple_of(1, 2)
        assert isinstance(v, Values)
        assert v == (1, 2)

    def test_none(self) -> None:
        assert tuple_of() == Values()
        assert isinstance(tuple_of(), Values)


class TestAsValues:
    def test_wraps_plain_values(self) -> None:
        assert as_values(1) == (1,)
        assert isinstance(as_values(1), Values)

    def test_plain_tuples_are_single_components(self) -> None:
        assert as_values((1, 2)) == ((1, 2),)

    def test_values_unchanged(self) -> None:
        v = Values((1, 2))
        assert as_values(v) is v


class TestUnwrap:
    def test_single(self) -> None:
        assert unwrap(Values((5,))) == 5

    def test_nested_single(self) -> None:
        assert unwrap(Values((Values((5,)),))) == 5

    def test_leaves_others(self) -> None:
        assert unwrap(Values((1, 2))) == (1, 2)
        assert unwrap(Values()) == Values()
        assert unwrap((5,)) == (5,)


class TestConcat:
    def test_flattens_one_level(self) -> None:
        v = concat(1, Values((2, 3)))
        assert v == (1, 2, 3)
        assert isinstance(v, Values)

    def test_arity_adds_up(self) -> None:
        assert len(concat(Values((1, 2)), Values((3, 4, 5)))) == 5

    def test_empty_disappears(self) -> None:
        assert concat(Values(), 1) == 1
        assert concat(Values(), Values()) == Values()

    def test_plain_tuple_not_flattened(self) -> None:
        v = concat((1, 2), 3)
        assert len(v) == 2
        assert v[0] == (1, 2)

    def test_repr(self) -> None:
        assert repr(Values((1, 2))) == "Values(1, 2)"


class TestOption:
    def test_some(self) -> None:
        assert Some(0)
        assert Some(0) == Some(0)
        assert Some(0) != Some(1)
        assert repr(Some("a")) == "Some('a')"

    def test_nothing(self) -> None:
        assert not NOTHING
        assert Nothing() == NOTHING
        assert Some(None) != NOTHING
