"""Tests for the validation result accumulator."""

import pytest
from pydantic import ValidationError

from covenant_validator.context import ValidationContext, ValidationRecord


class TestRecording:
    def test_empty_context_has_no_errors(self):
        ctx = ValidationContext()
        assert ctx.has_errors() is False
        assert ctx.checks() == {}
        assert ctx.errors() == {}

    def test_valid_field_renders_field_prefix(self):
        ctx = ValidationContext()
        ctx.record_valid_field("covenant", "label", "valid")
        assert ctx.checks() == {"covenant": ["label: valid"]}
        assert ctx.has_errors() is False

    def test_key_level_message_has_no_prefix(self):
        ctx = ValidationContext()
        ctx.record_invalid("contract_codes", "unknown contract name foo")
        assert ctx.errors() == {"contract_codes": ["unknown contract name foo"]}
        assert ctx.has_errors() is True

    def test_insertion_order_is_kept_per_key(self):
        ctx = ValidationContext()
        ctx.record_valid_field("k", "b", "second-added-first")
        ctx.record_valid_field("other", "x", "y")
        ctx.record_valid_field("k", "a", "added-later")
        assert ctx.checks()["k"] == ["b: second-added-first", "a: added-later"]

    def test_checks_and_errors_are_separate(self):
        ctx = ValidationContext()
        ctx.record_valid_field("k", "a", "ok")
        ctx.record_invalid_field("k", "b", "bad")
        assert ctx.checks() == {"k": ["a: ok"]}
        assert ctx.errors() == {"k": ["b: bad"]}

    def test_expected_and_actual_are_stringified(self):
        ctx = ValidationContext()
        record = ctx.record_invalid_field("contract_codes", "clock_code", "invalid code id", expected=5, actual=6)
        assert record.expected == "5"
        assert record.actual == "6"

    def test_records_are_immutable(self):
        record = ValidationRecord(key="k", valid=True)
        with pytest.raises(ValidationError):
            record.valid = False

    def test_records_returns_a_copy(self):
        ctx = ValidationContext()
        ctx.record_valid("k", "ok")
        ctx.records().clear()
        assert len(ctx.records()) == 1

    def test_records_for_filters_by_key_and_field(self):
        ctx = ValidationContext()
        ctx.record_valid_field("k", "a", "ok")
        ctx.record_invalid_field("k", "b", "bad")
        ctx.record_valid_field("j", "a", "ok")
        assert len(ctx.records_for("k")) == 2
        assert [r.message for r in ctx.records_for("k", "b")] == ["bad"]


class TestSharedChecks:
    def test_verify_equals_match(self):
        ctx = ValidationContext()
        assert ctx.verify_equals("k", "f", "a", "a", "expected {} | actual {}") is True
        assert ctx.checks() == {"k": ["f: verified"]}

    def test_verify_equals_mismatch_formats_template(self):
        ctx = ValidationContext()
        assert ctx.verify_equals(
            "ls_info", "ls_denom", "stuatom", "uatom", "invalid denom: expected {} | actual {}"
        ) is False
        assert ctx.errors() == {"ls_info": ["ls_denom: invalid denom: expected stuatom | actual uatom"]}
        record = ctx.records()[0]
        assert (record.expected, record.actual) == ("stuatom", "uatom")

    def test_required_or_ignored(self):
        ctx = ValidationContext()
        ctx.required_or_ignored("lp_forwarder_config", "addr", "cosmos1abc")
        ctx.required_or_ignored("lp_forwarder_config", "native_denom", "")
        assert ctx.checks() == {"lp_forwarder_config": ["addr: ignored"]}
        assert ctx.errors() == {"lp_forwarder_config": ["native_denom: required"]}


class TestSummary:
    def test_summary_counts(self):
        ctx = ValidationContext()
        ctx.record_valid_field("a", "x", "ok")
        ctx.record_valid_field("a", "y", "drifted", warning=True)
        ctx.record_invalid("b", "bad")
        summary = ctx.summary()
        assert summary.passed is False
        assert summary.checks == 2
        assert summary.errors == 1
        assert summary.warnings == 1
        assert summary.keys == ["a", "b"]

    def test_warning_is_not_an_error(self):
        ctx = ValidationContext()
        ctx.record_valid("pool_price_config", "outside band", warning=True)
        assert ctx.has_errors() is False
        assert ctx.summary().passed is True
