"""
Chain Registry

Mutable mapping from chain id to ``ChainDescriptor``. Seeded from the static
chain tables and extended at runtime when the bridging engine asks the
wallet provider to add a chain it needs.

The registry is additive only: entries are inserted once and never replaced
or removed, so concurrent registrations from several in-flight operations
need no lock beyond the per-entry atomicity of ``dict.setdefault``.
"""

import logging
from typing import Dict, Iterable, List, Optional

from ...schemas.bases import ChainDescriptor
from .constants import get_auth_anchor_chain, get_supported_chains

logger = logging.getLogger(__name__)


class ChainRegistry:
    """
    Chain id -> descriptor store shared by every provider adapter.

    Usage:
        registry = ChainRegistry.for_network(testnet=True)
        registry.register(ChainDescriptor(chain_id=1, display_name="Ethereum"))
        registry.get(84532).display_name  # "Base Sepolia"
    """

    def __init__(self, chains: Optional[Iterable[ChainDescriptor]] = None) -> None:
        self._chains: Dict[int, ChainDescriptor] = {}
        for chain in chains or []:
            self.register(chain)

    @classmethod
    def for_network(cls, testnet: bool, include_auth_anchor: bool = True) -> "ChainRegistry":
        """
        Build a registry seeded with a network mode's bridgeable chains.

        Args:
            testnet: Seed the testnet tables instead of mainnet.
            include_auth_anchor: Also seed the L1 chain the engine uses for
                signature-based login.
        """
        registry = cls(get_supported_chains(testnet))
        if include_auth_anchor:
            registry.register(get_auth_anchor_chain(testnet))
        return registry

    def register(self, descriptor: ChainDescriptor) -> bool:
        """
        Insert ``descriptor`` unless its chain id is already known.

        Registering a known id is a no-op: the existing entry, including its
        RPC endpoint, is left untouched.

        Returns:
            bool: True if the descriptor was inserted.
        """
        stored = self._chains.setdefault(descriptor.chain_id, descriptor)
        inserted = stored is descriptor
        if inserted:
            logger.info(
                "Registered chain %s (%d), rpc=%s",
                descriptor.display_name,
                descriptor.chain_id,
                descriptor.rpc_url or "none",
            )
        return inserted

    def get(self, chain_id: int) -> Optional[ChainDescriptor]:
        """Return the descriptor for ``chain_id``, or None."""
        return self._chains.get(chain_id)

    def require(self, chain_id: int) -> ChainDescriptor:
        """Return the descriptor for ``chain_id``; raise KeyError if unknown."""
        try:
            return self._chains[chain_id]
        except KeyError:
            raise KeyError(f"Chain {chain_id} not configured in registry") from None

    def chain_ids(self) -> List[int]:
        """Registered chain ids in insertion order."""
        return list(self._chains)

    def __contains__(self, chain_id: object) -> bool:
        return chain_id in self._chains

    def __len__(self) -> int:
        return len(self._chains)

    def __repr__(self) -> str:
        return f"ChainRegistry(chains={self.chain_ids()})"
