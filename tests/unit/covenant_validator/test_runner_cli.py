"""Tests for the run orchestration and the command line."""

import contextlib
import functools
import json
from types import SimpleNamespace

import pytest
from click.testing import CliRunner

from covenant_fakes import NANOS
from covenant_validator import __version__, cli, runner
from covenant_validator.errors import InputError
from covenant_validator.report import ERROR_STATUS, TABLE_HEADER
from covenant_validator.runner import validate_covenant

TWO_PARTY_TOML = """\
[covenant]
contract = "valence-covenant-two-party-pol"
party_a_chain_name = "cosmoshub"
party_b_chain_name = "neutron"
"""


class TestValidateCovenant:
    def test_returns_filled_context(self, two_party_metadata, two_party_payload, two_party_services, clock):
        ctx = validate_covenant(two_party_metadata, two_party_payload, two_party_services, clock=clock)
        assert not ctx.has_errors()
        assert ctx.party_b_chain_name == "neutron"
        assert two_party_services.releases.tags == ["v0.1.0"]

    def test_release_tag_is_passed_through(
        self, two_party_metadata, two_party_payload, two_party_services, clock
    ):
        validate_covenant(
            two_party_metadata, two_party_payload, two_party_services, release_tag="v0.1.1", clock=clock
        )
        assert two_party_services.releases.tags == ["v0.1.1"]

    def test_bad_payload_raises_before_any_lookup(self, two_party_metadata, two_party_services):
        with pytest.raises(InputError):
            validate_covenant(two_party_metadata, {"label": "x"}, two_party_services)
        assert two_party_services.registry.calls == []


@pytest.fixture
def cli_env(monkeypatch, tmp_path, two_party_payload, two_party_services, clock):
    """Input files on disk and fake collaborators behind the CLI."""
    seen = []

    def from_config(config):
        seen.append(config)
        return contextlib.nullcontext(two_party_services)

    monkeypatch.setattr(cli, "Collaborators", SimpleNamespace(from_config=from_config))
    monkeypatch.setattr(cli, "validate_covenant", functools.partial(runner.validate_covenant, clock=clock))

    metadata_file = tmp_path / "covenant.toml"
    metadata_file.write_text(TWO_PARTY_TOML)

    def write_payload(payload):
        path = tmp_path / "instantiate.json"
        path.write_text(json.dumps(payload))
        return str(path)

    return SimpleNamespace(
        metadata=str(metadata_file),
        payload=write_payload(two_party_payload),
        write_payload=write_payload,
        services=two_party_services,
        configs=seen,
    )


class TestCli:
    def test_version(self):
        result = CliRunner().invoke(cli.main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_valid_covenant_exits_zero(self, cli_env):
        result = CliRunner().invoke(cli.main, ["validate", cli_env.metadata, cli_env.payload])
        assert result.exit_code == 0, result.output
        assert result.output.startswith(TABLE_HEADER)
        assert ERROR_STATUS not in result.output
        assert len(cli_env.configs) == 1

    def test_failed_checks_exit_one(self, cli_env, two_party_payload):
        two_party_payload["deposit_deadline"] = {"at_time": str(1_600_000_000 * NANOS)}
        payload = cli_env.write_payload(two_party_payload)
        result = CliRunner().invoke(cli.main, ["validate", cli_env.metadata, payload])
        assert result.exit_code == 1
        assert ERROR_STATUS in result.output
        assert "Covenant validation failed" in result.output

    def test_release_option(self, cli_env):
        result = CliRunner().invoke(cli.main, ["validate", cli_env.metadata, cli_env.payload, "-r", "v0.1.1"])
        assert result.exit_code == 0, result.output
        assert cli_env.services.releases.tags == ["v0.1.1"]

    def test_release_from_environment(self, cli_env, monkeypatch):
        monkeypatch.setenv("COVENANT_VALIDATOR_RELEASE_TAG", "v0.2.0")
        result = CliRunner().invoke(cli.main, ["validate", cli_env.metadata, cli_env.payload])
        assert result.exit_code == 0, result.output
        assert cli_env.services.releases.tags == ["v0.2.0"]

    def test_input_error_exits_one(self, cli_env, tmp_path):
        bad = tmp_path / "bad.toml"
        bad.write_text("[covenant]\n")
        result = CliRunner().invoke(cli.main, ["validate", str(bad), cli_env.payload])
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert cli_env.configs == []

    def test_collaborator_failure_exits_one(self, cli_env):
        cli_env.services.registry.paths.clear()
        result = CliRunner().invoke(cli.main, ["validate", cli_env.metadata, cli_env.payload])
        assert result.exit_code == 1
        assert "Error:" in result.output
