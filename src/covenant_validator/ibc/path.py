"""
Bilateral IBC path resolution.

The chain registry stores one path file per unordered chain pair, with
``chain_1``/``chain_2`` in lexicographic order. Covenant messages need
the identifiers oriented from one chain's point of view (usually the
Neutron hub): the connection id on that chain, the channel it sends on,
and the channel the counterpart sends back on.

Channel selection:

1. The resolving chain's port must be exactly ``transfer``.
2. The counterpart port must be ``transfer``, or start with ``wasm.``
   when the counterpart end is a contract port.
3. Exactly one channel may match. Zero matches raises
   ``ChannelNotFoundError``; several raise ``AmbiguousChannelError``
   carrying every candidate, since list order is not a meaningful
   tie-break.

Usage::

    from covenant_validator.ibc.path import resolve_path

    resolved = resolve_path(services.registry, "neutron", "cosmoshub")
    resolved.connection_id      # connection on neutron
    resolved.forward_channel_id # neutron -> cosmoshub
    resolved.reverse_channel_id # cosmoshub -> neutron
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from covenant_validator.clients.registry import ChannelInfo, ChannelPort, IBCPath, PathChainInfo
from covenant_validator.errors import AmbiguousChannelError, ChannelNotFoundError
from covenant_validator.types import TRANSFER_PORT_ID, WASM_PORT_PREFIX

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedPath:
    """Connection and channel ids seen from ``from_chain``."""

    from_chain: str
    to_chain: str
    connection_id: str
    counterpart_connection_id: str
    forward_channel_id: str
    reverse_channel_id: str
    counterpart_port_id: str


def _counterpart_port_matches(port_id: str, contract_port: bool) -> bool:
    if contract_port:
        return port_id.startswith(WASM_PORT_PREFIX)
    return port_id == TRANSFER_PORT_ID


def _sides(path: IBCPath, from_chain: str, to_chain: str) -> tuple[str, str]:
    """Attribute names (``chain_1``/``chain_2``) for the two ends."""
    names = (path.chain_1.chain_name, path.chain_2.chain_name)
    if names == (from_chain, to_chain):
        return "chain_1", "chain_2"
    if names == (to_chain, from_chain):
        return "chain_2", "chain_1"
    raise ChannelNotFoundError(
        f"IBC path {names[0]} <-> {names[1]} does not connect {from_chain} and {to_chain}",
        from_chain,
        to_chain,
    )


def select_channel(
    path: IBCPath,
    from_chain: str,
    to_chain: str,
    counterpart_contract_port: bool = False,
) -> ResolvedPath:
    """Pick the single transfer channel between ``from_chain`` and ``to_chain``."""
    near, far = _sides(path, from_chain, to_chain)

    matches: list[ChannelInfo] = []
    for channel in path.channels:
        near_port: ChannelPort = getattr(channel, near)
        far_port: ChannelPort = getattr(channel, far)
        if near_port.port_id == TRANSFER_PORT_ID and _counterpart_port_matches(
            far_port.port_id, counterpart_contract_port
        ):
            matches.append(channel)

    port_desc = f"{WASM_PORT_PREFIX}*" if counterpart_contract_port else TRANSFER_PORT_ID
    if not matches:
        raise ChannelNotFoundError(
            f"channel not found: no {TRANSFER_PORT_ID} <-> {port_desc} channel "
            f"between {from_chain} and {to_chain}",
            from_chain,
            to_chain,
        )
    if len(matches) > 1:
        candidates = [getattr(c, near).channel_id for c in matches]
        raise AmbiguousChannelError(
            f"ambiguous channel: {len(matches)} {TRANSFER_PORT_ID} <-> {port_desc} channels "
            f"between {from_chain} and {to_chain} ({', '.join(candidates)})",
            from_chain,
            to_chain,
            candidates,
        )

    channel = matches[0]
    near_chain: PathChainInfo = getattr(path, near)
    far_chain: PathChainInfo = getattr(path, far)
    resolved = ResolvedPath(
        from_chain=from_chain,
        to_chain=to_chain,
        connection_id=near_chain.connection_id,
        counterpart_connection_id=far_chain.connection_id,
        forward_channel_id=getattr(channel, near).channel_id,
        reverse_channel_id=getattr(channel, far).channel_id,
        counterpart_port_id=getattr(channel, far).port_id,
    )
    logger.debug(
        "Resolved %s -> %s: %s %s/%s",
        from_chain,
        to_chain,
        resolved.connection_id,
        resolved.forward_channel_id,
        resolved.reverse_channel_id,
    )
    return resolved


def resolve_path(
    registry: Any,
    from_chain: str,
    to_chain: str,
    counterpart_contract_port: bool = False,
) -> ResolvedPath:
    """Fetch the registry path for the pair and orient it from ``from_chain``."""
    path = registry.get_path_info(from_chain, to_chain)
    return select_channel(path, from_chain, to_chain, counterpart_contract_port)
