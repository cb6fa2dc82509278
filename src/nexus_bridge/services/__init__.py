from .balances import get_multi_chain_balances

__all__ = ["get_multi_chain_balances"]
