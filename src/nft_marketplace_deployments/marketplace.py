"""Typed wrapper around the NFTMarketplace contract's listing operations."""

from typing import Any, Optional

from .chain import ContractHandle, PendingTransaction
from .exceptions import TransactionFailure
from .types import Listing, TransactionReceipt


class MarketplaceClient:
    """Lists, buys and reads listings on a deployed NFTMarketplace."""

    def __init__(
        self,
        handle: ContractHandle,
        confirmations: int = 1,
        timeout: Optional[float] = None,
    ):
        self.handle = handle
        self.confirmations = confirmations
        self.timeout = timeout

    @property
    def address(self) -> str:
        return self.handle.address

    def _confirm(self, pending: PendingTransaction) -> TransactionReceipt:
        receipt = pending.wait_for_confirmations(self.confirmations, self.timeout)
        if not receipt.succeeded:
            raise TransactionFailure(
                f"Transaction {receipt.transaction_hash} reverted", receipt.transaction_hash
            )
        return receipt

    def submit_listing(self, nft_address: str, token_id: int, price: int) -> PendingTransaction:
        """Submit listItem without waiting for it to be confirmed."""
        return self.handle.transact("listItem", nft_address, token_id, price)

    def list_item(self, nft_address: str, token_id: int, price: int) -> TransactionReceipt:
        """
        List a token for sale.

        The marketplace must already be approved to transfer the token.

        Args:
            nft_address: Address of the ERC-721 contract
            token_id: Token to list
            price: Price in wei

        Returns:
            Confirmed receipt of the listItem transaction
        """
        return self._confirm(self.submit_listing(nft_address, token_id, price))

    def buy_item(self, nft_address: str, token_id: int, value: int) -> TransactionReceipt:
        """Buy a listed token, paying ``value`` wei."""
        return self._confirm(self.handle.transact("buyItem", nft_address, token_id, value=value))

    def get_listing(self, nft_address: str, token_id: int) -> Listing:
        """
        Read a listing.

        Returns:
            Listing; its price is 0 when the token is not listed
        """
        raw: Any = self.handle.call("getListing", nft_address, token_id)
        if isinstance(raw, dict):
            price, seller = raw["price"], raw["seller"]
        else:
            price, seller = raw

        return Listing(nft_address=nft_address, token_id=token_id, seller=seller, price=int(price))
