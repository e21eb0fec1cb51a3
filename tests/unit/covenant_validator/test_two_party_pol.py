"""Tests for the two-party POL covenant pipeline."""

import pytest

from covenant_fakes import (
    ATOM_ON_NEUTRON,
    COSMOS_ADDR,
    NANOS,
    NEUTRON_ADDR,
    FakeAstroport,
    FakeReleases,
    pair_doc,
    pool_doc,
)
from covenant_validator.errors import CollaboratorError, InputError
from covenant_validator.context import ValidationContext
from covenant_validator.report import render_markdown_table
from covenant_validator.validations import TwoPartyPolCovenantValidator, build_validator


def run(payload, ctx, services, clock):
    validator = build_validator("valence-covenant-two-party-pol", payload)
    assert isinstance(validator, TwoPartyPolCovenantValidator)
    validator.validate(ctx, services, clock=clock)
    return ctx


def error_fields(ctx, key):
    return [r.field for r in ctx.records_for(key) if not r.valid]


class TestHappyPath:
    def test_consistent_covenant_has_no_errors(self, two_party_payload, two_party_ctx, two_party_services, clock):
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert ctx.errors() == {}

    def test_pipeline_key_order(self, two_party_payload, two_party_ctx, two_party_services, clock):
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert ctx.summary().keys == [
            "covenant",
            "contract_codes",
            "party_shares",
            "deposit_deadline",
            "lockup_config",
            "party_a_config",
            "party_b_config",
            "liquid_pooler_config",
            "pool_price_config",
            "splits",
        ]

    def test_informational_records(self, two_party_payload, two_party_ctx, two_party_services, clock):
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        checks = ctx.checks()["covenant"]
        assert "covenant_type: share" in checks
        assert "ragequit_config: disabled" in checks

    def test_contribution_display(self, two_party_payload, two_party_ctx, two_party_services, clock):
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert "contribution: 5000.00 atom" in ctx.checks()["party_a_config"]
        assert "contribution: 50000.00 ntrn" in ctx.checks()["party_b_config"]

    def test_spread_is_reported_as_percentage(self, two_party_payload, two_party_ctx, two_party_services, clock):
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert "acceptable_price_spread: 10%" in ctx.checks()["pool_price_config"]

    def test_release_tag_is_passed_through(self, two_party_payload, two_party_ctx, two_party_services, clock):
        validator = build_validator("two-party-pol", two_party_payload)
        validator.validate(two_party_ctx, two_party_services, release_tag="v0.1.1", clock=clock)
        assert two_party_services.releases.tags == ["v0.1.1"]


class TestDeadlines:
    def test_past_deadline_and_early_lockup_collect_errors(
        self, two_party_payload, two_party_ctx, two_party_services, clock
    ):
        two_party_payload["deposit_deadline"] = {"at_time": str(1_600_000_000 * NANOS)}
        two_party_payload["lockup_config"] = {"at_time": str(1_500_000_000 * NANOS)}
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)

        assert ctx.has_errors()
        assert error_fields(ctx, "deposit_deadline") == ["deposit_deadline"]
        assert error_fields(ctx, "lockup_config") == ["lockup_config", "lockup_config"]
        assert len(ctx.records()) > 3
        # Later keys still ran.
        assert ctx.records_for("splits")

    def test_lockup_must_follow_deposit_deadline(self, two_party_payload, two_party_ctx, two_party_services, clock):
        two_party_payload["lockup_config"] = {"at_time": str(1_750_000_000 * NANOS)}
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert ctx.errors() == {"lockup_config": ["lockup_config: invalid expiration: should be after deposit_deadline"]}

    def test_height_deadlines_use_block_height(self, two_party_payload, two_party_ctx, two_party_services, clock):
        two_party_payload["deposit_deadline"] = {"at_height": "9000000"}
        two_party_payload["lockup_config"] = {"at_height": "11000000"}
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert error_fields(ctx, "deposit_deadline") == ["deposit_deadline"]
        assert error_fields(ctx, "lockup_config") == []


class TestShares:
    def test_shares_must_sum_to_one(self, two_party_payload, two_party_ctx, two_party_services, clock):
        two_party_payload["party_a_share"] = "0.35"
        two_party_payload["party_b_share"] = "0.649999999999999999"
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert ctx.errors()["party_shares"] == ["party_a_share + party_b_share: invalid share: should sum up to 1"]

    def test_share_out_of_range(self, two_party_payload, two_party_ctx, two_party_services, clock):
        two_party_payload["party_a_share"] = "1.5"
        two_party_payload["party_b_share"] = "0"
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert "party_a_share" in error_fields(ctx, "party_shares")


class TestParties:
    def test_wrong_channel_and_voucher_denom(self, two_party_payload, two_party_ctx, two_party_services, clock):
        party = two_party_payload["party_a_config"]["interchain"]
        party["host_to_party_chain_channel_id"] = "channel-2"
        party["native_denom"] = "ibc/DEADBEEF"
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert error_fields(ctx, "party_a_config") == ["host_to_party_chain_channel_id", "native_denom"]
        record = ctx.records_for("party_a_config", "native_denom")[0]
        assert record.expected == ATOM_ON_NEUTRON

    def test_invalid_receiver_address(self, two_party_payload, two_party_ctx, two_party_services, clock):
        two_party_payload["party_b_config"]["native"]["party_receiver_addr"] = "neutron1bad"
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert ctx.errors()["party_b_config"] == ["party_receiver_addr: invalid Bech32 address"]

    def test_native_config_for_remote_chain(self, two_party_payload, two_party_ctx, two_party_services, clock):
        two_party_payload["party_a_config"] = {
            "native": {
                "party_receiver_addr": COSMOS_ADDR,
                "native_denom": "uatom",
                "addr": COSMOS_ADDR,
                "contribution": {"denom": "uatom", "amount": "1"},
            }
        }
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert "party_config" in error_fields(ctx, "party_a_config")

    def test_unknown_remote_denom(self, two_party_payload, two_party_ctx, two_party_services, clock):
        party = two_party_payload["party_a_config"]["interchain"]
        party["remote_chain_denom"] = "uosmo"
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        record = ctx.records_for("party_a_config", "remote_chain_denom")[0]
        assert not record.valid
        assert "not found on cosmoshub" in record.message

    def test_ambiguous_channel_is_recorded_not_raised(
        self, two_party_payload, two_party_ctx, two_party_services, clock
    ):
        path = two_party_services.registry.paths["_IBC/cosmoshub-neutron.json"]
        doc = path.model_dump()
        doc["channels"].append(
            {"chain_1": {"channel_id": "channel-9", "port_id": "transfer"},
             "chain_2": {"channel_id": "channel-99", "port_id": "transfer"}}
        )
        two_party_services.registry.paths["_IBC/cosmoshub-neutron.json"] = type(path).model_validate(doc)
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        record = ctx.records_for("party_a_config", "ibc_path")[0]
        assert not record.valid
        assert record.message.startswith("ambiguous channel")

    def test_contract_port_flag_is_honored_for_party_a(
        self, two_party_payload, two_party_services, clock
    ):
        ctx = ValidationContext(
            party_a_chain_name="cosmoshub", party_b_chain_name="neutron", party_a_uses_contract_port=True
        )
        run(two_party_payload, ctx, two_party_services, clock)
        assert ctx.records_for("party_a_config", "ibc_path")[0].message.startswith("channel not found")

    def test_missing_party_b_chain(self, two_party_payload, two_party_services, clock):
        ctx = ValidationContext(party_a_chain_name="cosmoshub")
        with pytest.raises(InputError):
            run(two_party_payload, ctx, two_party_services, clock)


class TestLiquidPooler:
    def test_wrong_single_side_limit(self, two_party_payload, two_party_ctx, two_party_services, clock):
        limits = two_party_payload["liquid_pooler_config"]["astroport"]["single_side_lp_limits"]
        limits["asset_a_limit"] = "5000000000"
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        record = ctx.records_for("liquid_pooler_config", "single_side_lp_limits.asset_a_limit")[0]
        assert not record.valid
        assert (record.expected, record.actual) == ("4500000000", "5000000000")

    def test_limit_for_foreign_denom_is_an_error(self, two_party_payload, two_party_ctx, two_party_services, clock):
        two_party_payload["liquid_pooler_config"]["astroport"]["asset_b_denom"] = "uosmo"
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        record = ctx.records_for("liquid_pooler_config", "single_side_lp_limits.asset_b_limit")[0]
        assert not record.valid
        assert not record.warning
        assert record.message == "cannot verify limit: uosmo is not a covenant denom"

    def test_custom_limit_pct(self, two_party_payload, two_party_services, clock):
        ctx = ValidationContext(
            party_a_chain_name="cosmoshub", party_b_chain_name="neutron", single_side_lp_limit_pct=20
        )
        run(two_party_payload, ctx, two_party_services, clock)
        assert error_fields(ctx, "liquid_pooler_config") == [
            "single_side_lp_limits.asset_a_limit",
            "single_side_lp_limits.asset_b_limit",
        ]

    def test_pair_type_mismatch(self, two_party_payload, two_party_ctx, two_party_services, clock):
        two_party_payload["liquid_pooler_config"]["astroport"]["pool_pair_type"] = {"stable": {}}
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert error_fields(ctx, "liquid_pooler_config") == ["pool_pair_type"]

    def test_swapped_asset_order(self, two_party_payload, two_party_ctx, two_party_services, clock):
        astroport = two_party_payload["liquid_pooler_config"]["astroport"]
        astroport["asset_a_denom"], astroport["asset_b_denom"] = "untrn", ATOM_ON_NEUTRON
        astroport["single_side_lp_limits"] = {"asset_a_limit": "45000000000", "asset_b_limit": "4500000000"}
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert error_fields(ctx, "liquid_pooler_config") == ["asset_a_denom", "asset_b_denom"]

    def test_price_outside_band_is_a_warning(self, two_party_payload, two_party_ctx, two_party_services, clock):
        two_party_payload["pool_price_config"]["expected_spot_price"] = "0.12"
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        record = ctx.records_for("pool_price_config", "expected_spot_price")[0]
        assert record.valid and record.warning
        assert not ctx.has_errors()

    def test_price_inside_band_has_no_warning(self, two_party_payload, two_party_ctx, two_party_services, clock):
        two_party_payload["pool_price_config"]["expected_spot_price"] = "0.103"
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        record = ctx.records_for("pool_price_config", "expected_spot_price")[0]
        assert record.valid and not record.warning
        assert record.message == "within 5% range of current pool price"

    def test_osmosis_pooler_is_not_supported(self, two_party_payload, two_party_ctx, two_party_services, clock):
        two_party_payload["liquid_pooler_config"] = {"osmosis": {"pool_id": "1"}}
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert set(ctx.errors()) == {"liquid_pooler_config", "pool_price_config"}

    def test_other_pair_contract(self, two_party_payload, two_party_ctx, two_party_services, clock):
        pair = pair_doc(ATOM_ON_NEUTRON, "untrn", {"xyk": {}})
        pair["contract_addr"] = "neutron1other"
        two_party_services.astroport = FakeAstroport(pair, pool_doc(ATOM_ON_NEUTRON, 1, "untrn", 10))
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert error_fields(ctx, "liquid_pooler_config") == ["pool_address"]


class TestSplitsAndCodes:
    def test_split_missing_party(self, two_party_payload, two_party_ctx, two_party_services, clock):
        two_party_payload["splits"]["untrn"] = {"receivers": {COSMOS_ADDR: "1.0"}}
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert error_fields(ctx, "splits") == ["untrn.receivers"]

    def test_fallback_split_is_checked(self, two_party_payload, two_party_ctx, two_party_services, clock):
        two_party_payload["fallback_split"] = {"receivers": {COSMOS_ADDR: "0.5", NEUTRON_ADDR: "0.4"}}
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert error_fields(ctx, "splits") == ["fallback_split"]

    def test_wrong_code_id(self, two_party_payload, two_party_ctx, two_party_services, clock):
        two_party_payload["contract_codes"]["clock_code"] = 1
        ctx = run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert ctx.errors() == {"contract_codes": ["clock_code: invalid code id"]}

    def test_manifest_failure_aborts(self, two_party_payload, two_party_ctx, two_party_services, clock):
        class BrokenReleases(FakeReleases):
            def get_code_ids(self, tag):
                raise CollaboratorError("HTTP 404 from collaborator", "manifest")

        two_party_services.releases = BrokenReleases()
        with pytest.raises(CollaboratorError):
            run(two_party_payload, two_party_ctx, two_party_services, clock)
        assert two_party_ctx.checks() == {"covenant": ["label: valid"]}


class TestIdempotence:
    def test_same_inputs_same_records(self, two_party_payload, two_party_services, clock, two_party_metadata):
        first = run(two_party_payload, two_party_metadata.to_context(), two_party_services, clock)
        second = run(two_party_payload, two_party_metadata.to_context(), two_party_services, clock)
        assert first.records() == second.records()
        assert render_markdown_table(first) == render_markdown_table(second)
