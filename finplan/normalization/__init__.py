"""Record normalization: scalar coercion and per-entity normalizers."""

from finplan.normalization.normalizers import (
    NormalizationContext,
    estimate_goal_due_label,
    group_goal_events_by_goal_id,
    normalize_envelope_budget,
    normalize_finance_state,
    normalize_goal,
    normalize_goal_event,
    normalize_planning_task,
    normalize_planning_version,
    normalize_recurring_scenario,
    record_identity,
)
from finplan.normalization.scalars import (
    MAX_TIMESTAMP_MS,
    build_default_cycle_keys,
    clamp_int,
    cycle_key_from_ms,
    is_record,
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
    timestamp_of,
    whole_months,
)

__all__ = [
    "MAX_TIMESTAMP_MS",
    "NormalizationContext",
    "build_default_cycle_keys",
    "clamp_int",
    "cycle_key_from_ms",
    "estimate_goal_due_label",
    "group_goal_events_by_goal_id",
    "is_record",
    "month_offset_ms",
    "normalize_currency_code",
    "normalize_cycle_key",
    "normalize_envelope_budget",
    "normalize_finance_state",
    "normalize_goal",
    "normalize_goal_event",
    "normalize_planning_task",
    "normalize_planning_version",
    "normalize_recurring_scenario",
    "number_or",
    "optional_string",
    "parse_json_object",
    "record_identity",
    "resolve",
    "resolve_text",
    "round_half_up",
    "sanitize_locale",
    "sort_most_recent_first",
    "stringify_json_object",
    "timestamp_ms",
    "timestamp_of",
    "whole_months",
]
