"""
EVM Transaction Helpers

Build, sign, broadcast and confirm transactions against an ``AsyncWeb3``
instance, plus the ERC-20 reads and writes the allowance guard performs.

All helpers are stateless: the caller supplies the web3 instance bound to the
right chain and the ``SigningContext`` holding the key. Network errors are not
retried here; they propagate to the caller unchanged.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Union

from web3 import AsyncWeb3
from web3.types import TxReceipt

from ...engine.exceptions import InvalidParamsError, TransactionExecutionError
from .ERC20_ABI import get_allowance_abi, get_approve_abi, get_balance_abi
from .signatures import SigningContext

logger = logging.getLogger(__name__)

#: Gas limit multiplier applied to node estimates.
GAS_ESTIMATE_BUFFER: float = 1.1


def parse_quantity(value: Union[str, int, None], field: str = "value") -> Optional[int]:
    """
    Parse a JSON-RPC quantity (``"0x2105"``, ``"8453"`` or ``8453``) to int.

    Returns:
        The integer value, or None when ``value`` is None or an empty string.

    Raises:
        InvalidParamsError: If the value is not a valid quantity.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise InvalidParamsError(f"Invalid {field}: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith("0x"):
                return int(text, 16)
            return int(text)
        except ValueError:
            pass
    raise InvalidParamsError(f"Invalid {field}: {value!r}")


async def build_fee_params(w3: AsyncWeb3) -> Dict[str, int]:
    """
    Return EIP-1559 fee fields, falling back to a legacy gas price.

    The max fee allows for base fee volatility (2x base + priority).
    """
    try:
        fee_history = await w3.eth.fee_history(1, "latest", [25.0])
        base_fee = fee_history["baseFeePerGas"][-1]
        priority_fee = fee_history["reward"][0][0]
        return {
            "maxPriorityFeePerGas": priority_fee,
            "maxFeePerGas": (base_fee * 2) + priority_fee,
        }
    except Exception as e:
        logger.debug("fee_history unavailable, using legacy gas price: %s", e)
        return {"gasPrice": await w3.eth.gas_price}


async def send_transaction(
    w3: AsyncWeb3,
    signer: SigningContext,
    chain_id: int,
    request: Dict[str, Any],
) -> str:
    """
    Sign and broadcast a wallet-style transaction request.

    Args:
        w3: AsyncWeb3 bound to ``chain_id``.
        signer: Signing context holding the sender key.
        chain_id: Chain the transaction is addressed at.
        request: ``eth_sendTransaction`` payload: ``to``, optional ``value``,
            ``data`` and ``gas`` (quantities as hex strings or ints).

    Returns:
        str: 0x-prefixed transaction hash.
    """
    to = request.get("to")
    tx: Dict[str, Any] = {
        "chainId": chain_id,
        "value": parse_quantity(request.get("value"), "value") or 0,
        "data": request.get("data") or request.get("input") or "0x",
        "nonce": await w3.eth.get_transaction_count(signer.address, "pending"),
    }
    if to:
        tx["to"] = AsyncWeb3.to_checksum_address(to)

    gas = parse_quantity(request.get("gas"), "gas")
    if gas is None:
        estimate = await w3.eth.estimate_gas({**tx, "from": signer.address})
        gas = int(estimate * GAS_ESTIMATE_BUFFER)
    tx["gas"] = gas
    tx.update(await build_fee_params(w3))

    signed = signer.sign_transaction(tx)
    tx_hash = await w3.eth.send_raw_transaction(signed.raw_transaction)
    return AsyncWeb3.to_hex(tx_hash)


async def query_erc20_allowance(w3: AsyncWeb3, token_addr: str, owner: str, spender: str) -> int:
    """
    Read ``allowance(owner, spender)`` from an ERC-20 contract.

    Returns:
        int: The remaining allowance in the token's base units.
    """
    contract = w3.eth.contract(
        address=AsyncWeb3.to_checksum_address(token_addr),
        abi=get_allowance_abi(),
    )
    allowance = await contract.functions.allowance(
        AsyncWeb3.to_checksum_address(owner),
        AsyncWeb3.to_checksum_address(spender),
    ).call()
    return int(allowance)


async def query_erc20_balance(w3: AsyncWeb3, token_addr: str, owner: str) -> int:
    """Read ``balanceOf(owner)`` from an ERC-20 contract."""
    contract = w3.eth.contract(
        address=AsyncWeb3.to_checksum_address(token_addr),
        abi=get_balance_abi(),
    )
    balance = await contract.functions.balanceOf(AsyncWeb3.to_checksum_address(owner)).call()
    return int(balance)


async def approve_erc20(
    w3: AsyncWeb3,
    signer: SigningContext,
    chain_id: int,
    token_addr: str,
    spender: str,
    amount: int,
) -> str:
    """
    Sign and broadcast an ERC-20 ``approve(spender, amount)`` transaction.

    Does not wait for inclusion; pair with :func:`wait_for_confirmations`.

    Returns:
        str: 0x-prefixed transaction hash.
    """
    contract = w3.eth.contract(
        address=AsyncWeb3.to_checksum_address(token_addr),
        abi=get_approve_abi(),
    )
    approve_fn = contract.functions.approve(AsyncWeb3.to_checksum_address(spender), amount)

    tx_params: Dict[str, Any] = {
        "chainId": chain_id,
        "from": signer.address,
        "nonce": await w3.eth.get_transaction_count(signer.address, "pending"),
    }
    gas_estimate = await approve_fn.estimate_gas({"from": signer.address})
    tx_params["gas"] = int(gas_estimate * GAS_ESTIMATE_BUFFER)
    tx_params.update(await build_fee_params(w3))

    transaction = await approve_fn.build_transaction(tx_params)
    transaction.pop("from", None)
    signed = signer.sign_transaction(transaction)
    tx_hash = await w3.eth.send_raw_transaction(signed.raw_transaction)
    return AsyncWeb3.to_hex(tx_hash)


async def wait_for_confirmations(
    w3: AsyncWeb3,
    tx_hash: str,
    confirmations: int = 1,
    timeout: float = 120.0,
    poll_interval: float = 2.0,
) -> TxReceipt:
    """
    Block until ``tx_hash`` is mined and buried under enough blocks.

    A transaction included in block ``n`` has one confirmation while the head
    is ``n``, two once the head reaches ``n + 1``, and so on.

    Args:
        w3: AsyncWeb3 bound to the transaction's chain.
        tx_hash: Hash returned by the broadcast.
        confirmations: Required confirmation count (>= 1).
        timeout: Overall wait budget in seconds.
        poll_interval: Seconds between head polls.

    Returns:
        TxReceipt: The mined receipt.

    Raises:
        TransactionExecutionError: If the transaction reverted or the
            confirmations were not observed within ``timeout``.
        web3.exceptions.TimeExhausted: If no receipt appeared within ``timeout``.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout

    receipt = await w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout, poll_latency=poll_interval)
    if receipt["status"] != 1:
        raise TransactionExecutionError(f"Transaction reverted: {tx_hash}", tx_hash=tx_hash)

    target_block = receipt["blockNumber"] + max(confirmations, 1) - 1
    while True:
        head = await w3.eth.block_number
        if head >= target_block:
            return receipt
        if loop.time() >= deadline:
            raise TransactionExecutionError(
                f"Timed out waiting for {confirmations} confirmations of {tx_hash}",
                tx_hash=tx_hash,
            )
        await asyncio.sleep(poll_interval)
