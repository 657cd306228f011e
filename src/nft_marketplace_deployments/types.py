"""Data types and dataclasses for nft-marketplace-deployments library."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class DeploymentRecord:
    """Information about a deployed contract."""

    # Required fields
    contract_name: str  # e.g., "NFTMarketplace"
    address: str  # Checksummed address
    constructor_args: List[Any]
    confirmations_waited: int
    network: str  # e.g., "sepolia"
    abi: List[Dict[str, Any]]  # Full contract ABI

    # Optional fields (from hardhat-deploy)
    transaction_hash: Optional[str] = None
    block: Optional[int] = None
    bytecode: Optional[str] = None
    deployed_bytecode: Optional[str] = None
    solc_input_hash: Optional[str] = None
    num_deployments: Optional[int] = None


@dataclass(frozen=True)
class EventLog:
    """A decoded contract event."""

    name: str  # e.g., "Transfer"
    args: Dict[str, Any]
    address: Optional[str] = None
    log_index: Optional[int] = None


@dataclass(frozen=True)
class TransactionReceipt:
    """Outcome of a confirmed transaction."""

    transaction_hash: str
    status: int  # 1 on success, 0 when reverted
    events: List[EventLog] = field(default_factory=list)
    confirmations: int = 0
    block_number: Optional[int] = None
    contract_address: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == 1

    def events_named(self, name: str) -> List[EventLog]:
        """Return decoded events matching ``name`` in log order."""
        return [event for event in self.events if event.name == name]


@dataclass(frozen=True)
class Listing:
    """A marketplace listing as stored by the marketplace contract."""

    nft_address: str
    token_id: int
    seller: str
    price: int  # wei; 0 means not listed

    @property
    def is_listed(self) -> bool:
        return self.price > 0


@dataclass(frozen=True)
class ListingResult:
    """Result of a completed mint, approve and list run."""

    nft_address: str
    marketplace_address: str
    token_id: int
    price: int
    receipts: Dict[str, TransactionReceipt] = field(default_factory=dict)
