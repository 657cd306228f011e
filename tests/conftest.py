"""Shared pytest fixtures for nft-marketplace-deployments tests."""

import itertools
import shutil
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from nft_marketplace_deployments.config import NetworkConfig, WorkflowConfig
from nft_marketplace_deployments.constants import ZERO_ADDRESS
from nft_marketplace_deployments.exceptions import TransactionFailure
from nft_marketplace_deployments.types import DeploymentRecord, EventLog, TransactionReceipt

DEPLOYER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
PLAYER = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
MARKETPLACE_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
BASIC_NFT_ADDRESS = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"

_tx_counter = itertools.count(1)


def next_tx_hash() -> str:
    return "0x" + format(next(_tx_counter), "064x")


class FakePendingTransaction:
    """PendingTransaction returning a canned receipt or raising a canned error."""

    def __init__(
        self,
        events: Optional[List[EventLog]] = None,
        status: int = 1,
        error: Optional[Exception] = None,
        contract_address: Optional[str] = None,
    ):
        self.transaction_hash = next_tx_hash()
        self.events = events or []
        self.status = status
        self.error = error
        self.contract_address = contract_address
        self.waited_for: Optional[Tuple[int, Optional[float]]] = None

    def wait_for_confirmations(self, confirmations: int = 1, timeout: Optional[float] = None):
        self.waited_for = (confirmations, timeout)
        if self.error is not None:
            raise self.error
        return TransactionReceipt(
            transaction_hash=self.transaction_hash,
            status=self.status,
            events=self.events,
            confirmations=confirmations,
            block_number=100,
            contract_address=self.contract_address,
        )


class FakeContractHandle:
    """
    ContractHandle dispatching to per-function handlers.

    Handlers receive (sender, args, value) and return a FakePendingTransaction
    for transact() or a value for call().
    """

    def __init__(self, name: str, address: str, sender: str, journal: List[Tuple[str, str, tuple]]):
        self.name = name
        self.address = address
        self.sender = sender
        self.journal = journal
        self.handlers: Dict[str, Callable[..., Any]] = {}

    def transact(self, function_name: str, *args: Any, value: int = 0):
        self.journal.append((self.name, function_name, args))
        return self.handlers[function_name](self.sender, args, value)

    def call(self, function_name: str, *args: Any):
        return self.handlers[function_name](self.sender, args, 0)


class FakeMarketplace:
    """In-memory stand-in for the NFTMarketplace contract state."""

    def __init__(self):
        self.listings: Dict[Tuple[str, int], Tuple[int, str]] = {}

    def install(self, handle: FakeContractHandle) -> None:
        handle.handlers["listItem"] = self.list_item
        handle.handlers["buyItem"] = self.buy_item
        handle.handlers["getListing"] = self.get_listing

    def list_item(self, sender, args, value):
        nft_address, token_id, price = args
        if price <= 0:
            return FakePendingTransaction(error=TransactionFailure("PriceMustBeAboveZero"))
        self.listings[(nft_address, token_id)] = (price, sender)
        return FakePendingTransaction(
            events=[
                EventLog(
                    "ItemListed",
                    {"seller": sender, "nftAddress": nft_address, "tokenId": token_id, "price": price},
                )
            ]
        )

    def buy_item(self, sender, args, value):
        key = tuple(args)
        price, _ = self.listings.get(key, (0, ZERO_ADDRESS))
        if price == 0:
            return FakePendingTransaction(error=TransactionFailure("NotListed"))
        if value < price:
            return FakePendingTransaction(error=TransactionFailure("PriceNotMet"))
        del self.listings[key]
        return FakePendingTransaction()

    def get_listing(self, sender, args, value):
        return self.listings.get(tuple(args), (0, ZERO_ADDRESS))


class FakeBasicNFT:
    """In-memory stand-in for the BasicNFT contract."""

    def __init__(self):
        self.token_counter = 0
        self.approvals: Dict[int, str] = {}
        self.mint_events: Optional[List[EventLog]] = None

    def install(self, handle: FakeContractHandle) -> None:
        handle.handlers["mintNft"] = self.mint_nft
        handle.handlers["approve"] = self.approve

    def mint_nft(self, sender, args, value):
        token_id = self.token_counter
        self.token_counter += 1
        events = self.mint_events
        if events is None:
            events = [
                EventLog("Transfer", {"from": ZERO_ADDRESS, "to": sender, "tokenId": token_id}, BASIC_NFT_ADDRESS)
            ]
        return FakePendingTransaction(events=events)

    def approve(self, sender, args, value):
        spender, token_id = args
        self.approvals[token_id] = spender
        return FakePendingTransaction(
            events=[EventLog("Approval", {"owner": sender, "approved": spender, "tokenId": token_id})]
        )


class FakeChainClient:
    """ChainClient keeping deployed contracts in memory."""

    def __init__(self, named_accounts: Optional[Dict[str, str]] = None):
        self.named_accounts = {"deployer": DEPLOYER, "player": PLAYER} if named_accounts is None else named_accounts
        self.journal: List[Tuple[str, str, tuple]] = []
        self.deploy_calls: List[Dict[str, Any]] = []
        self.deploy_error: Optional[Exception] = None
        self.marketplace = FakeMarketplace()
        self.basic_nft = FakeBasicNFT()
        self.addresses = {"NFTMarketplace": MARKETPLACE_ADDRESS, "BasicNFT": BASIC_NFT_ADDRESS}

    def get_named_accounts(self) -> Dict[str, str]:
        return dict(self.named_accounts)

    def deploy(self, contract_name, from_account, constructor_args=(), wait_confirmations=1):
        self.deploy_calls.append(
            {
                "contract_name": contract_name,
                "from_account": from_account,
                "constructor_args": list(constructor_args),
                "wait_confirmations": wait_confirmations,
            }
        )
        if self.deploy_error is not None:
            raise self.deploy_error
        return DeploymentRecord(
            contract_name=contract_name,
            address=self.addresses[contract_name],
            constructor_args=list(constructor_args),
            confirmations_waited=wait_confirmations,
            network="sepolia",
            abi=[],
        )

    def get_deployed_contract(self, contract_name, from_account=None):
        handle = FakeContractHandle(
            contract_name,
            self.addresses[contract_name],
            from_account or self.named_accounts["deployer"],
            self.journal,
        )
        if contract_name == "NFTMarketplace":
            self.marketplace.install(handle)
        else:
            self.basic_nft.install(handle)
        return handle


class RecordingVerifier:
    def __init__(self, error: Optional[Exception] = None):
        self.calls: List[Tuple[str, list, str]] = []
        self.error = error

    def verify(self, address, constructor_args, contract_name="NFTMarketplace"):
        self.calls.append((address, list(constructor_args), contract_name))
        if self.error is not None:
            raise self.error


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def hardhat_deploy_sample(fixtures_dir: Path) -> Path:
    """Return path to sample hardhat-deploy JSON file."""
    return fixtures_dir / "hardhat_deploy" / "NFTMarketplace.json"


@pytest.fixture
def hardhat_project(tmp_path: Path, fixtures_dir: Path) -> Path:
    """Create a temporary hardhat project with compiled artifacts."""
    project_root = tmp_path / "project"
    shutil.copytree(fixtures_dir / "artifacts", project_root / "artifacts")
    return project_root


@pytest.fixture
def make_config(tmp_path: Path) -> Callable[..., WorkflowConfig]:
    """Factory for WorkflowConfig objects with an explicit environment."""

    def _make(network: str = "sepolia", env: Optional[Dict[str, str]] = None, **kwargs) -> WorkflowConfig:
        return WorkflowConfig(
            network=NetworkConfig(
                name=network,
                chain_id=11155111 if network == "sepolia" else 31337,
                rpc_url="http://rpc.example.com",
                block_confirmations=kwargs.pop("block_confirmations", 1),
                block_explorer_api_url=kwargs.pop(
                    "block_explorer_api_url", "https://api-sepolia.etherscan.io/api"
                ),
            ),
            project_root=kwargs.pop("project_root", tmp_path),
            env=env or {},
            **kwargs,
        )

    return _make


@pytest.fixture
def chain() -> FakeChainClient:
    return FakeChainClient()
