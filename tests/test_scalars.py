"""
Tests for scalar utilities

Every helper is total: these tests pin the fallback for each kind of
unusable input.
"""

from datetime import datetime, timezone

from finplan.normalization import (
    MAX_TIMESTAMP_MS,
    build_default_cycle_keys,
    clamp_int,
    cycle_key_from_ms,
    month_offset_ms,
    normalize_currency_code,
    normalize_cycle_key,
    number_or,
    optional_string,
    parse_json_object,
    resolve,
    resolve_text,
    round_half_up,
    sanitize_locale,
    sort_most_recent_first,
    stringify_json_object,
    timestamp_ms,
    whole_months,
)


def _ms(*args) -> int:
    return int(datetime(*args, tzinfo=timezone.utc).timestamp() * 1000)


class TestNumericCoercion:
    """Tests for number_or, clamp_int and round_half_up."""

    def test_numbers_and_numeric_strings(self):
        """Test that numbers and numeric strings are accepted."""
        assert number_or(42) == 42.0
        assert number_or(" 12.5 ") == 12.5
        assert number_or(True) == 1.0

    def test_unusable_values_fall_back(self):
        """Test None, blanks, garbage and non-finite values."""
        assert number_or(None, 3) == 3
        assert number_or("   ", 4) == 4
        assert number_or("abc", 7) == 7
        assert number_or([1], 8) == 8
        assert number_or(float("nan"), 1) == 1
        assert number_or(float("inf"), 2) == 2

    def test_clamp_truncates_toward_zero(self):
        """Test truncation before clamping."""
        assert clamp_int(12.9, 1, 120) == 12
        assert clamp_int(-0.5, -5, 5) == 0
        assert clamp_int(500, 1, 120) == 120
        assert clamp_int(0, 1, 31) == 1

    def test_clamp_non_finite_gives_minimum(self):
        """Test that NaN and infinity clamp to the minimum."""
        assert clamp_int(float("nan"), 1, 31) == 1
        assert clamp_int(float("inf"), 1, 120) == 1

    def test_round_half_up(self):
        """Test that halves round upward."""
        assert round_half_up(2.5) == 3
        assert round_half_up(40.65) == 41
        assert round_half_up(-2.5) == -2
        assert round_half_up(0.49) == 0


class TestTextAndJson:
    """Tests for string and JSON helpers."""

    def test_optional_string(self):
        """Test trimming and blank handling."""
        assert optional_string("  rent ") == "rent"
        assert optional_string("   ") is None
        assert optional_string(12) is None

    def test_parse_json_object(self):
        """Test that only JSON objects are returned."""
        assert parse_json_object('{"a": 1}') == {"a": 1}
        assert parse_json_object("[1, 2]") is None
        assert parse_json_object("{not json") is None
        assert parse_json_object(5) is None

    def test_parse_json_object_copies_mappings(self):
        """Test that mappings pass through as new dicts."""
        source = {"a": 1}
        parsed = parse_json_object(source)
        assert parsed == source
        assert parsed is not source

    def test_stringify_is_canonical(self):
        """Test sorted, compact output and the failure fallback."""
        assert stringify_json_object({"b": 1, "a": 2}) == '{"a":2,"b":1}'
        assert stringify_json_object({"a": object()}) == "{}"


class TestResolve:
    """Tests for ordered field lookup."""

    def test_row_wins_over_payload(self):
        """Test the primary row takes precedence."""
        assert resolve({"note": "row"}, {"note": "payload"}, "note") == "row"

    def test_none_falls_through_to_payload(self):
        """Test that None counts as absent."""
        assert resolve({"note": None}, {"note": "payload"}, "note") == "payload"

    def test_row_alias_before_payload_key(self):
        """Test alias precedence."""
        row = {"target": 50}
        assert resolve(row, {"targetAmount": 10}, "targetAmount", aliases=("target",)) == 50

    def test_default_when_missing(self):
        """Test the documented default."""
        assert resolve({}, {}, "note", "n/a") == "n/a"

    def test_zero_is_a_value(self):
        """Test that falsy non-None values are kept."""
        assert resolve({"amount": 0}, {"amount": 9}, "amount") == 0

    def test_resolve_text_skips_blanks(self):
        """Test that blank and non-string values count as absent."""
        assert resolve_text({"name": "  "}, {"name": "Plan"}, "name") == "Plan"
        assert resolve_text({"name": 7}, {}, "name", "fallback") == "fallback"


class TestCurrencyAndLocale:
    """Tests for currency codes and locale tags."""

    def test_currency_codes(self):
        """Test upper-casing and fallback."""
        assert normalize_currency_code(" eur ") == "EUR"
        assert normalize_currency_code(None, "gbp") == "GBP"
        assert normalize_currency_code("") == "USD"

    def test_locale_casing(self):
        """Test canonical tag casing."""
        assert sanitize_locale("EN_us") == "en-US"
        assert sanitize_locale("zh-hant-tw") == "zh-Hant-TW"
        assert sanitize_locale("fr") == "fr"
        assert sanitize_locale("es-419") == "es-419"

    def test_locale_fallback(self):
        """Test unusable locales."""
        assert sanitize_locale("not a locale") == "en-US"
        assert sanitize_locale(None, "de-DE") == "de-DE"


class TestCycleKeys:
    """Tests for cycle keys and month arithmetic."""

    def test_normalize_cycle_key(self, now_ms):
        """Test the YYYY-MM format check."""
        assert normalize_cycle_key("2026-03") == "2026-03"
        assert normalize_cycle_key(" 2026-03 ") == "2026-03"
        assert normalize_cycle_key("2026-3") is None
        assert normalize_cycle_key(202603) is None

    def test_cycle_key_from_ms(self, now_ms):
        """Test the UTC month of a timestamp."""
        assert cycle_key_from_ms(now_ms) == "2026-03"
        assert cycle_key_from_ms(_ms(2025, 12, 31, 23, 59)) == "2025-12"

    def test_default_cycle_window(self, now_ms):
        """Test three months back and nine forward, ascending."""
        keys = build_default_cycle_keys(now_ms)
        assert len(keys) == 13
        assert keys[0] == "2025-12"
        assert keys[3] == "2026-03"
        assert keys[-1] == "2026-12"
        assert keys == sorted(keys)

    def test_month_offset_clamps_day(self):
        """Test that the 31st becomes the 28th before advancing."""
        assert month_offset_ms(_ms(2026, 1, 31), 1) == _ms(2026, 2, 28)
        assert month_offset_ms(_ms(2026, 1, 31), 12) == _ms(2027, 1, 28)

    def test_month_offset_keeps_time_and_drops_millis(self, now_ms):
        """Test that time of day survives and milliseconds do not."""
        assert month_offset_ms(now_ms + 123, 10) == _ms(2027, 1, 15, 12)

    def test_month_offset_zero(self, now_ms):
        """Test that a zero offset is the same instant."""
        assert month_offset_ms(now_ms, 0) == now_ms

    def test_dates_beyond_calendar(self, now_ms):
        """Test that timestamps and offsets past year 9999 resolve to None."""
        assert cycle_key_from_ms(9e15) is None
        assert cycle_key_from_ms(-9e15) is None
        assert month_offset_ms(now_ms, 200_000) is None
        assert month_offset_ms(9e15, 1) is None
        assert build_default_cycle_keys(9e15) == []

    def test_default_cycle_window_at_calendar_edge(self):
        """Test that months past the calendar are left out of the window."""
        keys = build_default_cycle_keys(_ms(9999, 6, 1))
        assert keys[0] == "9999-03"
        assert keys[-1] == "9999-12"
        assert len(keys) == 10

    def test_whole_months(self):
        """Test ceiling division and its unreachable cases."""
        assert whole_months(1000, 300) == 4
        assert whole_months(0, 50) == 0
        assert whole_months(1000, 0) is None
        assert whole_months(1e308, 1e-300) is None

    def test_timestamp_ms_clamps(self):
        """Test truncation and clamping of stored timestamps."""
        assert timestamp_ms(1234.9) == 1234
        assert timestamp_ms(1.7e308) == MAX_TIMESTAMP_MS
        assert timestamp_ms(-1.7e308) == -MAX_TIMESTAMP_MS


class TestRecencySort:
    """Tests for most-recent-first ordering."""

    def test_timestamp_precedence(self):
        """Test updatedAt, then createdAt, then _creationTime."""
        rows = [
            {"_id": "a", "_creationTime": 5},
            {"_id": "b", "createdAt": 10},
            {"_id": "c", "updatedAt": 20, "createdAt": 1},
        ]
        assert [row["_id"] for row in sort_most_recent_first(rows)] == ["c", "b", "a"]

    def test_ties_keep_input_order(self):
        """Test stability."""
        rows = [{"_id": "x", "updatedAt": 1}, {"_id": "y", "updatedAt": 1}, {"_id": "z"}]
        assert [row["_id"] for row in sort_most_recent_first(rows)] == ["x", "y", "z"]
