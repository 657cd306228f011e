"""Chain client for deploying and calling contracts of a hardhat project."""

import time
from typing import Any, Dict, List, Optional, Protocol, Sequence

import requests
import structlog
from eth_account import Account
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3RPCError
from web3.logs import DISCARD

from .config import WorkflowConfig
from .constants import DEVELOPMENT_CHAINS, PRIVATE_KEY_ENV
from .deployments import DeploymentStore
from .exceptions import (
    ConfigurationError,
    ConfirmationTimeout,
    DeploymentFailure,
    TransactionFailure,
)
from .parsers import parse_artifact
from .paths import get_artifact_paths
from .types import DeploymentRecord, EventLog, TransactionReceipt

logger = structlog.get_logger(__name__)


class PendingTransaction(Protocol):
    """A submitted transaction that has not been observed as confirmed yet."""

    transaction_hash: str

    def wait_for_confirmations(
        self, confirmations: int = 1, timeout: Optional[float] = None
    ) -> TransactionReceipt: ...


class ContractHandle(Protocol):
    """A deployed contract bound to a sending account."""

    name: str
    address: str

    def transact(self, function_name: str, *args: Any, value: int = 0) -> PendingTransaction: ...

    def call(self, function_name: str, *args: Any) -> Any: ...


class ChainClient(Protocol):
    """Capabilities the workflows need from the deployment framework."""

    def get_named_accounts(self) -> Dict[str, str]: ...

    def deploy(
        self,
        contract_name: str,
        from_account: str,
        constructor_args: Sequence[Any] = (),
        wait_confirmations: int = 1,
    ) -> DeploymentRecord: ...

    def get_deployed_contract(
        self, contract_name: str, from_account: Optional[str] = None
    ) -> ContractHandle: ...


def decode_receipt_events(contract: Any, receipt: Dict[str, Any]) -> List[EventLog]:
    """
    Decode all logs of a receipt that match events in a contract's ABI.

    Args:
        contract: web3 contract object
        receipt: Raw web3 transaction receipt

    Returns:
        List of EventLog objects sorted by log index
    """
    events: List[EventLog] = []
    seen = set()
    for item in contract.abi:
        if item.get("type") != "event" or item["name"] in seen:
            continue
        seen.add(item["name"])

        event = getattr(contract.events, item["name"])()
        for decoded in event.process_receipt(receipt, errors=DISCARD):
            events.append(
                EventLog(
                    name=decoded["event"],
                    args=dict(decoded["args"]),
                    address=decoded["address"],
                    log_index=decoded["logIndex"],
                )
            )

    events.sort(key=lambda e: e.log_index)
    return events


class Web3PendingTransaction:
    """Polls a node until a transaction has the requested confirmations."""

    def __init__(
        self,
        w3: Web3,
        transaction_hash: str,
        contract: Any = None,
        default_timeout: float = 120.0,
        poll_interval: float = 1.0,
        retries: int = 3,
    ):
        self._w3 = w3
        self._contract = contract
        self._default_timeout = default_timeout
        self._poll_interval = poll_interval
        self._retries = retries
        self._failures = 0
        self.transaction_hash = transaction_hash

    def wait_for_confirmations(
        self, confirmations: int = 1, timeout: Optional[float] = None
    ) -> TransactionReceipt:
        """
        Block until the transaction is included and has enough confirmations.

        The inclusion block counts as the first confirmation. Connection errors
        while polling are retried; the transaction itself is never resubmitted.

        Args:
            confirmations: Number of confirmations to wait for (at least 1)
            timeout: Seconds to wait (defaults to the client's confirmation timeout)

        Returns:
            TransactionReceipt with decoded events

        Raises:
            TransactionFailure: If the transaction reverted or the node stayed unreachable
            ConfirmationTimeout: If the confirmations were not observed in time
        """
        if timeout is None:
            timeout = self._default_timeout
        deadline = time.monotonic() + timeout
        confirmations = max(confirmations, 1)
        self._failures = 0

        raw_receipt = self._wait_for_receipt(deadline, timeout)
        if raw_receipt["status"] != 1:
            raise TransactionFailure(
                f"Transaction {self.transaction_hash} reverted", self.transaction_hash
            )

        seen = 1
        if confirmations > 1:
            seen = self._wait_for_blocks(raw_receipt["blockNumber"], confirmations, deadline, timeout)
        return self._build_receipt(raw_receipt, seen)

    def _wait_for_receipt(self, deadline: float, timeout: float) -> Dict[str, Any]:
        while True:
            try:
                return self._w3.eth.wait_for_transaction_receipt(
                    self.transaction_hash,
                    timeout=max(deadline - time.monotonic(), 0),
                    poll_latency=self._poll_interval,
                )
            except TimeExhausted as e:
                raise self._timed_out(1, timeout) from e
            except (requests.ConnectionError, requests.Timeout) as e:
                self._connection_failed(e)
                if time.monotonic() >= deadline:
                    raise self._timed_out(1, timeout) from e
                time.sleep(self._poll_interval)

    def _wait_for_blocks(
        self, included_block: int, confirmations: int, deadline: float, timeout: float
    ) -> int:
        while True:
            try:
                seen = self._w3.eth.block_number - included_block + 1
            except (requests.ConnectionError, requests.Timeout) as e:
                self._connection_failed(e)
            else:
                if seen >= confirmations:
                    return seen

            if time.monotonic() >= deadline:
                raise self._timed_out(confirmations, timeout)
            time.sleep(self._poll_interval)

    def _connection_failed(self, error: Exception) -> None:
        self._failures += 1
        if self._failures > self._retries:
            raise TransactionFailure(
                f"Node unreachable while waiting for {self.transaction_hash}: {error}",
                self.transaction_hash,
            ) from error
        logger.warning(
            "confirmation_poll_failed",
            transaction_hash=self.transaction_hash,
            attempt=self._failures,
            error=str(error),
        )

    def _timed_out(self, confirmations: int, timeout: float) -> ConfirmationTimeout:
        return ConfirmationTimeout(
            f"Transaction {self.transaction_hash} not confirmed "
            f"{confirmations} time(s) within {timeout}s",
            self.transaction_hash,
        )

    def _build_receipt(self, raw_receipt: Dict[str, Any], confirmations: int) -> TransactionReceipt:
        events = []
        if self._contract is not None:
            events = decode_receipt_events(self._contract, raw_receipt)

        return TransactionReceipt(
            transaction_hash=self.transaction_hash,
            status=raw_receipt["status"],
            events=events,
            confirmations=confirmations,
            block_number=raw_receipt["blockNumber"],
            contract_address=raw_receipt.get("contractAddress"),
        )


class Web3ContractHandle:
    """ContractHandle backed by a web3 contract object."""

    def __init__(self, client: "Web3ChainClient", name: str, contract: Any, sender: str):
        self._client = client
        self._contract = contract
        self.name = name
        self.address = contract.address
        self.sender = sender

    def transact(self, function_name: str, *args: Any, value: int = 0) -> Web3PendingTransaction:
        """
        Submit a state-changing call.

        Raises:
            TransactionFailure: If the node rejects the transaction (e.g. a revert
                                during gas estimation)
        """
        function = getattr(self._contract.functions, function_name)(*args)
        try:
            tx = function.build_transaction({"from": self.sender, "value": value})
        except (ContractLogicError, Web3RPCError, ValueError) as e:
            raise TransactionFailure(f"{self.name}.{function_name} rejected: {e}") from e

        return self._client.send_transaction(tx, self.sender, self._contract)

    def call(self, function_name: str, *args: Any) -> Any:
        """Run a read-only call against the latest block."""
        return getattr(self._contract.functions, function_name)(*args).call()


class Web3ChainClient:
    """
    ChainClient implementation for a hardhat project and a JSON-RPC node.

    Contracts are built from hardhat compiler artifacts and deployments are
    recorded in hardhat-deploy format under deployments/{network}.
    """

    def __init__(self, w3: Web3, config: WorkflowConfig, signer: Any = None):
        """
        Initialize the chain client.

        Args:
            w3: Connected Web3 instance
            config: Workflow configuration
            signer: eth_account LocalAccount used to sign transactions.
                    If None, the node's unlocked accounts are used.
        """
        self._w3 = w3
        self._config = config
        self._signer = signer
        self.store = DeploymentStore(config.network.name, config.project_root)

    def get_named_accounts(self) -> Dict[str, str]:
        """
        Get named accounts.

        Returns:
            Dictionary with "deployer" and, on nodes exposing several unlocked
            accounts, "player"
        """
        if self._signer is not None:
            return {"deployer": self._signer.address}

        accounts = self._w3.eth.accounts
        if not accounts:
            raise ConfigurationError(
                f"No accounts available on network '{self._config.network.name}': "
                f"set ${PRIVATE_KEY_ENV}"
            )
        named = {"deployer": accounts[0]}
        if len(accounts) > 1:
            named["player"] = accounts[1]
        return named

    def _pending(self, transaction_hash: str, contract: Any) -> Web3PendingTransaction:
        return Web3PendingTransaction(
            self._w3,
            transaction_hash,
            contract,
            default_timeout=self._config.confirmation_timeout,
            poll_interval=self._config.poll_interval,
            retries=self._config.confirmation_retries,
        )

    def send_transaction(
        self, tx: Dict[str, Any], sender: str, contract: Any = None
    ) -> Web3PendingTransaction:
        """
        Sign (if a local signer is configured) and submit a transaction.

        Returns:
            Web3PendingTransaction for the submitted transaction
        """
        try:
            if self._signer is not None and sender == self._signer.address:
                tx["nonce"] = self._w3.eth.get_transaction_count(sender, "pending")
                signed = self._signer.sign_transaction(tx)
                tx_hash = self._w3.eth.send_raw_transaction(signed.raw_transaction)
            else:
                tx_hash = self._w3.eth.send_transaction(tx)
        except (Web3RPCError, ValueError) as e:
            raise TransactionFailure(f"Transaction from {sender} rejected: {e}") from e

        transaction_hash = Web3.to_hex(tx_hash)
        logger.debug("transaction_sent", transaction_hash=transaction_hash, sender=sender)
        return self._pending(transaction_hash, contract)

    def deploy(
        self,
        contract_name: str,
        from_account: str,
        constructor_args: Sequence[Any] = (),
        wait_confirmations: int = 1,
    ) -> DeploymentRecord:
        """
        Deploy a contract from its compiler artifact and record the deployment.

        Args:
            contract_name: Contract name (e.g., "NFTMarketplace")
            from_account: Deploying account address
            constructor_args: Constructor arguments
            wait_confirmations: Confirmations to wait for before returning

        Returns:
            DeploymentRecord of the new instance

        Raises:
            ContractNotFoundError: If the compiler artifact is missing
            DeploymentFailure: If the deployment transaction fails
        """
        artifact_path, _ = get_artifact_paths(contract_name, self._config.project_root)
        artifact = parse_artifact(artifact_path)

        factory = self._w3.eth.contract(abi=artifact["abi"], bytecode=artifact["bytecode"])
        try:
            tx = factory.constructor(*constructor_args).build_transaction({"from": from_account})
            pending = self.send_transaction(tx, from_account)
            logger.info(
                "deployment_sent",
                contract=contract_name,
                transaction_hash=pending.transaction_hash,
                confirmations=wait_confirmations,
            )
            receipt = pending.wait_for_confirmations(wait_confirmations)
        except (TransactionFailure, ContractLogicError, Web3RPCError, ValueError) as e:
            raise DeploymentFailure(f"Deployment of {contract_name} failed: {e}") from e

        if not receipt.contract_address:
            raise DeploymentFailure(
                f"Deployment of {contract_name} returned no contract address "
                f"(transaction {receipt.transaction_hash})"
            )

        record = DeploymentRecord(
            contract_name=contract_name,
            address=receipt.contract_address,
            constructor_args=list(constructor_args),
            confirmations_waited=receipt.confirmations,
            network=self._config.network.name,
            abi=artifact["abi"],
            transaction_hash=receipt.transaction_hash,
            block=receipt.block_number,
            bytecode=artifact["bytecode"],
            deployed_bytecode=artifact["deployed_bytecode"],
            num_deployments=self.store.next_deployment_count(contract_name),
        )
        self.store.save(record)
        logger.info(
            "contract_deployed",
            contract=contract_name,
            address=record.address,
            block=record.block,
        )
        return record

    def get_deployed_contract(
        self, contract_name: str, from_account: Optional[str] = None
    ) -> Web3ContractHandle:
        """
        Get a handle to a previously deployed contract.

        Args:
            contract_name: Contract name
            from_account: Sending account (defaults to the deployer)

        Raises:
            ContractNotFoundError: If the contract has no deployment on this network
        """
        record = self.store.get(contract_name)
        contract = self._w3.eth.contract(address=record.address, abi=record.abi)
        if from_account is None:
            from_account = self.get_named_accounts()["deployer"]
        return Web3ContractHandle(self, contract_name, contract, from_account)


def connect(config: WorkflowConfig) -> Web3ChainClient:
    """
    Connect to the configured network.

    A private key from $PRIVATE_KEY is required on non-development networks;
    development networks fall back to the node's unlocked accounts.

    Raises:
        ConfigurationError: If the node is unreachable, reports a different
                            chain id, or no signer is available
    """
    network = config.network
    w3 = Web3(Web3.HTTPProvider(network.rpc_url))
    if not w3.is_connected():
        raise ConfigurationError(f"Could not connect to {network.name} at {network.rpc_url}")

    chain_id = w3.eth.chain_id
    if chain_id != network.chain_id:
        raise ConfigurationError(
            f"RPC endpoint for '{network.name}' reports chain id {chain_id}, "
            f"expected {network.chain_id}"
        )

    signer = None
    private_key = config.env.get(PRIVATE_KEY_ENV)
    if private_key:
        signer = Account.from_key(private_key)
    elif network.name not in DEVELOPMENT_CHAINS:
        raise ConfigurationError(f"${PRIVATE_KEY_ENV} is required on network '{network.name}'")

    return Web3ChainClient(w3, config, signer)
