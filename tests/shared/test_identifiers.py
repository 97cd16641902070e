import pytest
from shared.errors import TranslationError
from shared.identifiers import TypedId


class WidgetId(TypedId):
    pass


class GadgetId(TypedId):
    pass


class TestTypedId:
    def test_from_raw_round_trips(self):
        assert WidgetId.from_raw("w-1").raw() == "w-1"

    def test_from_raw_strips_whitespace(self):
        assert WidgetId.from_raw("  w-1 ").raw() == "w-1"

    def test_new_generates_unique_values(self):
        assert WidgetId.new() != WidgetId.new()

    def test_equality_is_by_type_and_value(self):
        assert WidgetId.from_raw("x") == WidgetId.from_raw("x")
        assert WidgetId.from_raw("x") != GadgetId.from_raw("x")
        assert WidgetId.from_raw("x") != "x"

    def test_hashable(self):
        assert len({WidgetId.from_raw("x"), WidgetId.from_raw("x"), GadgetId.from_raw("x")}) == 2

    @pytest.mark.parametrize("raw", [None, "", "  ", 42])
    def test_invalid_raw_values_are_rejected(self, raw):
        with pytest.raises(TranslationError) as exc:
            WidgetId.from_raw(raw)
        assert exc.value.field == "WidgetId"

    def test_str_is_the_raw_value(self):
        assert str(WidgetId.from_raw("w-9")) == "w-9"
