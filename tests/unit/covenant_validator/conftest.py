"""Fixtures for covenant validator tests."""

from __future__ import annotations

import copy
import logging
import os
from types import SimpleNamespace

import pytest

from covenant_fakes import (
    ASSETS,
    ATOM_ON_NEUTRON,
    CHAINS,
    COSMOSHUB_STRIDE_PATH,
    HUB_COSMOSHUB_PATH,
    HUB_STRIDE_PATH,
    NOW,
    SINGLE_PARTY_PAYLOAD,
    STATOM_ON_NEUTRON,
    TWO_PARTY_PAYLOAD,
    FakeAstroport,
    FakeRegistry,
    make_services,
    pair_doc,
    pool_doc,
)
from covenant_validator.config import reset_config
from covenant_validator.context import ValidationContext
from covenant_validator.metadata import CovenantMetadata


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Keep host environment and cached settings out of every test."""
    for name in list(os.environ):
        if name.startswith("COVENANT_VALIDATOR_"):
            monkeypatch.delenv(name)
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo handlers and propagation set by configure_logging."""
    logger = logging.getLogger("covenant_validator")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def clock():
    return lambda: float(NOW)


@pytest.fixture
def two_party_payload() -> dict:
    return copy.deepcopy(TWO_PARTY_PAYLOAD)


@pytest.fixture
def single_party_payload() -> dict:
    return copy.deepcopy(SINGLE_PARTY_PAYLOAD)


@pytest.fixture
def two_party_metadata() -> CovenantMetadata:
    return CovenantMetadata(
        contract="valence-covenant-two-party-pol",
        party_a_chain_name="cosmoshub",
        party_b_chain_name="neutron",
    )


@pytest.fixture
def single_party_metadata() -> CovenantMetadata:
    return CovenantMetadata(contract="single-party-pol", party_a_chain_name="cosmoshub")


@pytest.fixture
def two_party_ctx(two_party_metadata) -> ValidationContext:
    return two_party_metadata.to_context()


@pytest.fixture
def single_party_ctx(single_party_metadata) -> ValidationContext:
    return single_party_metadata.to_context()


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry(
        [HUB_COSMOSHUB_PATH, HUB_STRIDE_PATH, COSMOSHUB_STRIDE_PATH],
        copy.deepcopy(ASSETS),
        copy.deepcopy(CHAINS),
    )


@pytest.fixture
def two_party_services(registry) -> SimpleNamespace:
    return make_services(
        registry,
        FakeAstroport(
            pair_doc(ATOM_ON_NEUTRON, "untrn", {"xyk": {}}),
            pool_doc(ATOM_ON_NEUTRON, 1_000_000, "untrn", 10_000_000),
        ),
    )


@pytest.fixture
def single_party_services(registry) -> SimpleNamespace:
    return make_services(
        registry,
        FakeAstroport(
            pair_doc(ATOM_ON_NEUTRON, STATOM_ON_NEUTRON, {"stable": {}}),
            pool_doc(ATOM_ON_NEUTRON, 1_000_000, STATOM_ON_NEUTRON, 1_000_000),
        ),
    )
