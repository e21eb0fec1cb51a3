"""
Exception hierarchy for covenant validation.

Two severities exist and they never mix:

- Infrastructure failures (``CollaboratorError``, ``FixedPointOverflowError``)
  abort the whole run. The caller cannot observe ground truth, so no
  report is produced beyond what was recorded before the abort.
- Input errors (``InputError``) are raised before any pipeline runs.

Domain violations are *not* exceptions: they are recorded on the
``ValidationContext``. ``PathResolutionError`` sits in between: the path
resolver raises it, and validators catch it and record it as a keyed
error so the pipeline keeps going.
"""

from __future__ import annotations

from typing import Optional


class CovenantValidatorError(Exception):
    """Base class for every error raised by this package."""


class InputError(CovenantValidatorError):
    """Metadata or instantiation input is malformed or unsupported."""


class UnsupportedCovenantError(InputError):
    """The declared contract type does not name a known covenant."""

    def __init__(self, contract: str) -> None:
        self.contract = contract
        super().__init__(f"Unsupported covenant contract: {contract!r}")


class CollaboratorError(CovenantValidatorError):
    """A read-only collaborator was unreachable or returned garbage."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        self.url = url
        if url:
            message = f"{message} ({url})"
        super().__init__(message)


class ManifestFormatError(CollaboratorError):
    """The release code-id manifest contains a malformed line."""


class FixedPointOverflowError(CovenantValidatorError):
    """A fixed-point value does not fit the 128-bit atomics range."""


class PathResolutionError(CovenantValidatorError):
    """No single IBC channel could be selected for a chain pair."""

    def __init__(self, message: str, chain_a: str, chain_b: str) -> None:
        self.chain_a = chain_a
        self.chain_b = chain_b
        super().__init__(message)


class ChannelNotFoundError(PathResolutionError):
    """No channel in the path matched the port predicate."""


class AmbiguousChannelError(PathResolutionError):
    """More than one channel matched the port predicate."""

    def __init__(self, message: str, chain_a: str, chain_b: str, channel_ids: list[str]) -> None:
        self.channel_ids = channel_ids
        super().__init__(message, chain_a, chain_b)


class AssetNotFoundError(CovenantValidatorError):
    """The chain asset registry has no entry matching a denom or name."""

    def __init__(self, chain_name: str, asset: str) -> None:
        self.chain_name = chain_name
        self.asset = asset
        super().__init__(f"Asset {asset!r} not found on chain {chain_name!r}")
