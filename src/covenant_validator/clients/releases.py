"""
Covenants release manifest: contract file name -> code id.

Each release publishes ``contract_code_ids.txt`` with one
``<file> <code_id>`` pair per line, e.g.
``valence_ibc_forwarder.wasm 1234``. Names are normalised by dropping
the ``valence_`` prefix and ``.wasm`` extension before lookup.
"""

from __future__ import annotations

import logging

from covenant_validator.clients.http import ApiClient, is_uint_string
from covenant_validator.errors import ManifestFormatError

logger = logging.getLogger(__name__)

CONTRACT_PREFIX = "valence_"
CONTRACT_EXTENSION = ".wasm"


def normalize_contract_name(file_name: str) -> str:
    """``valence_ibc_forwarder.wasm`` -> ``ibc_forwarder``."""
    name = file_name.strip()
    name = name.removeprefix(CONTRACT_PREFIX)
    return name.removesuffix(CONTRACT_EXTENSION)


def parse_code_id_manifest(content: str, source: str = "contract_code_ids.txt") -> dict[str, int]:
    """Parse manifest text into a name -> code id map.

    Blank lines are skipped; anything else that is not exactly two
    whitespace-separated columns with an integer id is malformed.
    """
    code_ids: dict[str, int] = {}
    for lineno, line in enumerate(content.splitlines(), start=1):
        if not line.strip():
            continue
        parts = line.split()
        if len(parts) != 2 or not is_uint_string(parts[1]):
            raise ManifestFormatError(
                f"invalid line {lineno} in contract_code_ids.txt: {line!r}", source
            )
        code_ids[normalize_contract_name(parts[0])] = int(parts[1])
    return code_ids


class ReleaseClient:
    def __init__(self, api: ApiClient, manifest_url_template: str) -> None:
        self.api = api
        self.manifest_url_template = manifest_url_template

    def get_code_ids(self, tag: str) -> dict[str, int]:
        url = self.manifest_url_template.format(tag=tag)
        code_ids = parse_code_id_manifest(self.api.get_text(url), url)
        logger.info("Loaded %d code ids for release %s", len(code_ids), tag)
        return code_ids
