"""
Allowance Guard

Makes sure the bridging vault on the source chain may pull the tokens about
to be transferred before the engine is invoked. The engine's own approval
path (sponsored permits) is unreliable on some testnet tokens, so the guard
sets an unlimited allowance directly; the engine then finds enough allowance
and skips its permit flow.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..adapters.evm.clients import ChainClients
from ..adapters.evm.constants import MAX_UINT256

logger = logging.getLogger(__name__)


@dataclass
class AllowanceCheck:
    """
    Outcome of one allowance check.

    Attributes:
        current: Allowance read on-chain before any approval (None if skipped)
        required: Threshold that had to be met (``amount * headroom``)
        approved: Whether an approval transaction was sent
        approval_tx_hash: Hash of that approval, if any
        skipped: True when no spender is configured for the chain
    """
    current: Optional[int]
    required: int
    approved: bool = False
    approval_tx_hash: Optional[str] = None
    skipped: bool = False


class AllowanceGuard:
    """
    Pre-approves a spender when the current allowance lacks headroom.

    Attributes:
        clients: Chain clients used for the allowance read and approval
        headroom_multiplier: Approval is skipped while
            ``current >= amount * headroom_multiplier``
        confirmations: Blocks to wait for after an approval
        confirmation_timeout: Seconds allowed for those confirmations
    """

    def __init__(
        self,
        clients: ChainClients,
        headroom_multiplier: int = 2,
        confirmations: int = 2,
        confirmation_timeout: float = 120.0,
    ) -> None:
        if headroom_multiplier < 1:
            raise ValueError("headroom_multiplier must be >= 1")
        if confirmations < 1:
            raise ValueError("confirmations must be >= 1")
        self.clients = clients
        self.headroom_multiplier = headroom_multiplier
        self.confirmations = confirmations
        self.confirmation_timeout = confirmation_timeout

    async def ensure_allowance(
        self,
        chain_id: int,
        token_address: str,
        owner: str,
        spender: Optional[str],
        amount: int,
    ) -> AllowanceCheck:
        """
        Guarantee ``spender`` may pull at least ``amount`` of the token.

        Does not return until any approval it sent has the configured number
        of confirmations.

        Args:
            chain_id: Source chain.
            token_address: ERC-20 contract on that chain.
            owner: Signer address holding the tokens.
            spender: Vault contract; None skips the check entirely.
            amount: Raw transfer amount.

        Raises:
            TransactionExecutionError: If the approval reverted or never
                reached the required confirmations.
        """
        required = amount * self.headroom_multiplier
        if not spender:
            logger.info("No vault configured for chain %d, skipping pre-approval", chain_id)
            return AllowanceCheck(current=None, required=required, skipped=True)

        current = await self.clients.get_allowance(chain_id, token_address, owner, spender)
        if current >= required:
            logger.info("Sufficient allowance already exists (%d) on chain %d", current, chain_id)
            return AllowanceCheck(current=current, required=required)

        logger.info(
            "Pre-approving token %s to vault %s on chain %d (current=%d, required=%d)",
            token_address, spender, chain_id, current, required,
        )
        tx_hash = await self.clients.approve(chain_id, token_address, spender, MAX_UINT256)
        logger.info("Approval tx: %s", tx_hash)

        await self.clients.wait_for_confirmations(
            chain_id,
            tx_hash,
            confirmations=self.confirmations,
            timeout=self.confirmation_timeout,
        )
        logger.info("Approval confirmed (%d confirmations)", self.confirmations)
        return AllowanceCheck(current=current, required=required, approved=True, approval_tx_hash=tx_hash)
