"""
EVM Signing Context

Holds the single signing key of the process and exposes the pure signing
operations the wallet-provider adapter needs. All cryptographic operations
are performed in-process using ``eth_account``; no RPC calls are made here.

Exported helpers
----------------
SigningContext
    Address derivation, EIP-191 personal message signing over raw bytes,
    EIP-712 typed-data signing and transaction signing.

message_to_bytes
    Normalise a ``personal_sign`` payload to the exact bytes to be signed.

parse_typed_data
    Decode an ``eth_signTypedData_v4`` document and split it into the
    domain / types / message triple ``eth_account`` expects.
"""

import json
from typing import Any, Dict, Tuple, Union

from eth_account import Account
from eth_account.datastructures import SignedTransaction
from eth_account.messages import encode_defunct
from eth_utils import is_hexstr, to_bytes, to_checksum_address, to_hex

from ...engine.exceptions import InvalidParamsError, MissingSigningKeyError


def message_to_bytes(payload: Union[str, bytes, bytearray]) -> bytes:
    """
    Return the exact bytes a personal-sign request asks to be signed.

    Browser tooling sends the message hex-encoded, so a ``0x`` hex string is
    decoded to its raw bytes rather than signed as text. Raw ``bytes`` pass
    through unchanged; any other string is taken as UTF-8 text.

    Args:
        payload: ``0x`` hex string, raw bytes, or plain text.

    Returns:
        bytes: The bytes to sign.

    Raises:
        InvalidParamsError: If the payload is neither text nor bytes.
    """
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    if isinstance(payload, str):
        if payload.startswith(("0x", "0X")) and is_hexstr(payload):
            return to_bytes(hexstr=payload)
        return payload.encode("utf-8")
    raise InvalidParamsError(f"Unsupported message payload type: {type(payload).__name__}")


def parse_typed_data(document: Union[str, Dict[str, Any]]) -> Tuple[Dict[str, Any], Dict[str, Any], Dict[str, Any]]:
    """
    Split an EIP-712 document into ``(domain, types, message)``.

    The ``EIP712Domain`` entry is removed from ``types``: the signing
    primitive rebuilds the domain type from the ``domain`` values, so the
    declaration must not be duplicated in the type set.

    Args:
        document: JSON string or already-decoded dict with ``types``,
            ``domain`` and ``message`` keys.

    Raises:
        InvalidParamsError: If the document is not valid JSON, lacks keys,
            or names a ``primaryType`` it does not declare.
    """
    if isinstance(document, str):
        try:
            document = json.loads(document)
        except ValueError as e:
            raise InvalidParamsError(f"Typed data is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise InvalidParamsError("Typed data must be a JSON object")

    types = dict(document.get("types") or {})
    types.pop("EIP712Domain", None)
    domain = document.get("domain") or {}
    message = document.get("message")
    if not types or message is None:
        raise InvalidParamsError("Typed data requires 'types' and 'message'")
    primary_type = document.get("primaryType")
    if primary_type is not None and primary_type not in types:
        raise InvalidParamsError(f"primaryType {primary_type!r} is not declared in types")
    return domain, types, message


class SigningContext:
    """
    In-process signer bound to one private key.

    The key never leaves this object; callers only see the derived address
    and the produced signatures.

    Attributes:
        address: Checksum address derived from the key

    Example:
        signer = SigningContext("0x...")
        sig = signer.sign_message(b"hello")
    """

    def __init__(self, private_key: str):
        if not private_key:
            raise MissingSigningKeyError()
        self._account = Account.from_key(private_key)
        self.address = to_checksum_address(self._account.address)

    def sign_message(self, raw: bytes) -> str:
        """
        Sign ``raw`` as an EIP-191 personal message.

        The signature covers exactly the supplied bytes, matching what a
        browser wallet produces for ``personal_sign`` with a hex payload.

        Returns:
            str: 0x-prefixed 65-byte signature.
        """
        signable = encode_defunct(primitive=raw)
        signed = self._account.sign_message(signable)
        return to_hex(signed.signature)

    def sign_typed_data(self, document: Union[str, Dict[str, Any]]) -> str:
        """
        Sign an EIP-712 typed-data document (``eth_signTypedData_v4``).

        Returns:
            str: 0x-prefixed 65-byte signature.
        """
        domain, types, message = parse_typed_data(document)
        signed = Account.sign_typed_data(
            self._account.key,
            domain_data=domain,
            message_types=types,
            message_data=message,
        )
        return to_hex(signed.signature)

    def sign_transaction(self, transaction: Dict[str, Any]) -> SignedTransaction:
        """Sign a fully populated transaction dict."""
        return self._account.sign_transaction(transaction)

    def __repr__(self) -> str:
        return f"SigningContext(address={self.address})"
