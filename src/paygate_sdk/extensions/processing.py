"""
Attaching extension blocks to requests and dispatching response blocks
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from ..exceptions import ErrorCodes, ValidationError
from ..signing.signer import GatewaySigner
from .base import EXTENSION_FIELD, Extension

logger = logging.getLogger(__name__)

EXTENSIONS_FIELD = "extensions"


def attach_extensions(
    payload: Mapping[str, Any],
    extensions: Iterable[Extension],
    signer: GatewaySigner,
) -> Dict[str, Any]:
    """
    Add signed extension blocks to a request payload.

    Extensions without input contribute nothing; when none contributes, the
    payload is returned without an "extensions" field.

    Args:
        payload: Request payload
        extensions: Extensions to send
        signer: Signer holding the merchant private key

    Returns:
        dict: Copy of payload with an "extensions" list
    """
    result = dict(payload)
    blocks: List[Dict[str, Any]] = []

    for extension in extensions:
        block = extension.build_request_block(signer)
        if block is not None:
            blocks.append(block)

    if blocks:
        result[EXTENSIONS_FIELD] = blocks
    return result


def process_response_extensions(
    response: Mapping[str, Any],
    extensions: Iterable[Extension],
    signer: GatewaySigner,
) -> Dict[str, bool]:
    """
    Hand extension blocks of a response to the matching extensions.

    Blocks are matched by their "extension" field. Blocks nobody asked for
    are logged and skipped.

    Args:
        response: Response payload with an optional "extensions" list
        extensions: Extensions expecting response data
        signer: Signer holding the gateway public key

    Returns:
        dict: Verification result per extension ID

    Raises:
        SignatureVerificationError: If a strict extension receives a badly signed block
        ValidationError: If the "extensions" field is not a list of blocks
    """
    blocks = response.get(EXTENSIONS_FIELD) or []
    if not isinstance(blocks, Sequence) or isinstance(blocks, (str, bytes)):
        raise ValidationError(
            "Response extensions must be a list of blocks",
            ErrorCodes.INVALID_EXTENSION_DATA,
            {"type": type(blocks).__name__}
        )

    by_id: Dict[str, Extension] = {}
    for extension in extensions:
        if extension.extension_id in by_id:
            logger.warning(f"Several extensions registered for {extension.extension_id}, using the last one")
        by_id[extension.extension_id] = extension

    results: Dict[str, bool] = {}
    for block in blocks:
        if not isinstance(block, Mapping):
            logger.warning(f"Ignoring malformed extension block of type {type(block).__name__}")
            continue

        extension_id = block.get(EXTENSION_FIELD)
        extension = by_id.get(extension_id)
        if extension is None:
            logger.info(f"Ignoring response block of unexpected extension {extension_id}")
            continue

        results[extension_id] = extension.apply_response(block, signer)

    return results
