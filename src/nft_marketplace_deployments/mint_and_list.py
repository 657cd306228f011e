"""Mint a BasicNFT token, approve the marketplace, and list the token for sale."""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

import structlog

from .chain import ChainClient, ContractHandle, PendingTransaction
from .config import WorkflowConfig
from .constants import BASIC_NFT_CONTRACT, LISTING_PRICE_ETHER, MARKETPLACE_CONTRACT, ZERO_ADDRESS
from .exceptions import (
    ConfigurationError,
    EventMissing,
    MarketplaceError,
    TransactionFailure,
    WorkflowCancelled,
)
from .marketplace import MarketplaceClient
from .types import EventLog, ListingResult, TransactionReceipt
from .units import parse_ether

logger = structlog.get_logger(__name__)

# Events other than the ERC-721 Transfer that some sample NFTs emit on mint
MINT_EVENT_NAMES = ("DogMinted", "NftMinted", "Minted")


class WorkflowState(Enum):
    """
    Progress of a mint-and-list run.

    A failure leaves the run in the last state reached; a token in MINTED or
    APPROVED exists on chain but is not listed.
    """

    IDLE = "idle"
    MINTED = "minted"
    APPROVED = "approved"
    LISTED = "listed"


@dataclass
class PipelineContext:
    """Inputs and intermediate results shared by the pipeline stages."""

    nft: ContractHandle
    marketplace: ContractHandle
    price: int  # wei
    confirmations: int = 1
    timeout: Optional[float] = None
    token_id: Optional[int] = None
    receipts: Dict[str, TransactionReceipt] = field(default_factory=dict)


@dataclass(frozen=True)
class Stage:
    name: str
    reaches: WorkflowState
    submit: Callable[[PipelineContext], PendingTransaction]
    on_confirmed: Optional[Callable[[PipelineContext, TransactionReceipt], None]] = None


def extract_token_id(receipt: TransactionReceipt, nft_address: Optional[str] = None) -> int:
    """
    Get the id of the token minted by a transaction.

    Looks for an ERC-721 Transfer from the zero address, then for a
    contract-specific mint event carrying ``tokenId``. When ``nft_address`` is
    given, events emitted by any other contract are ignored.

    Raises:
        EventMissing: If no event in the receipt identifies the minted token
    """

    def emitted(name: str) -> List[EventLog]:
        events = receipt.events_named(name)
        if nft_address is None:
            return events
        return [e for e in events if e.address and e.address.lower() == nft_address.lower()]

    for event in emitted("Transfer"):
        if event.args.get("from") == ZERO_ADDRESS and "tokenId" in event.args:
            return int(event.args["tokenId"])

    for name in MINT_EVENT_NAMES:
        for event in emitted(name):
            if "tokenId" in event.args:
                return int(event.args["tokenId"])

    raise EventMissing(
        f"No mint event with a tokenId in transaction {receipt.transaction_hash} "
        f"(events: {[event.name for event in receipt.events] or 'none'})"
    )


def _mint(ctx: PipelineContext) -> PendingTransaction:
    return ctx.nft.transact("mintNft")


def _record_token_id(ctx: PipelineContext, receipt: TransactionReceipt) -> None:
    ctx.token_id = extract_token_id(receipt, ctx.nft.address)
    logger.info("nft_minted", token_id=ctx.token_id)


def _approve(ctx: PipelineContext) -> PendingTransaction:
    return ctx.nft.transact("approve", ctx.marketplace.address, ctx.token_id)


def _list(ctx: PipelineContext) -> PendingTransaction:
    return MarketplaceClient(ctx.marketplace).submit_listing(ctx.nft.address, ctx.token_id, ctx.price)


MINT_AND_LIST_STAGES = (
    Stage("mint", WorkflowState.MINTED, _mint, _record_token_id),
    Stage("approve", WorkflowState.APPROVED, _approve),
    Stage("list", WorkflowState.LISTED, _list),
)


def run_pipeline(
    ctx: PipelineContext,
    stages: Sequence[Stage] = MINT_AND_LIST_STAGES,
    cancel_event: Optional[threading.Event] = None,
) -> WorkflowState:
    """
    Run stages in order, waiting for each transaction's confirmations.

    Any error raised by a stage carries the last state reached as its
    ``state`` attribute. Nothing is rolled back.

    Args:
        ctx: Pipeline context
        stages: Stages to run
        cancel_event: Checked before each stage; when set the run stops

    Returns:
        State reached by the last stage

    Raises:
        WorkflowCancelled: If cancel_event was set between stages
        TransactionFailure: If a transaction is rejected, reverted or unconfirmed
        EventMissing: If the mint receipt has no token id
    """
    state = WorkflowState.IDLE
    for stage in stages:
        try:
            if cancel_event is not None and cancel_event.is_set():
                raise WorkflowCancelled(f"Cancelled before {stage.name} (state: {state.value})")

            logger.info("stage_started", stage=stage.name)
            pending = stage.submit(ctx)
            receipt = pending.wait_for_confirmations(ctx.confirmations, ctx.timeout)
            if not receipt.succeeded:
                raise TransactionFailure(
                    f"{stage.name} transaction {receipt.transaction_hash} reverted",
                    receipt.transaction_hash,
                )
            ctx.receipts[stage.name] = receipt
            state = stage.reaches
            logger.info("stage_confirmed", stage=stage.name, state=state.value)

            if stage.on_confirmed is not None:
                stage.on_confirmed(ctx, receipt)
        except MarketplaceError as e:
            e.state = state
            raise

    return state


def mint_and_list(
    config: WorkflowConfig,
    client: ChainClient,
    price: Optional[int] = None,
    cancel_event: Optional[threading.Event] = None,
) -> ListingResult:
    """
    Mint a BasicNFT for the deployer and list it on NFTMarketplace.

    Both contracts must already be deployed on the configured network.

    Args:
        config: Workflow configuration
        client: Chain client
        price: Listing price in wei (defaults to 0.1 ether)
        cancel_event: Optional cancellation flag checked between stages

    Returns:
        ListingResult with the token id and all receipts
    """
    if price is None:
        price = parse_ether(LISTING_PRICE_ETHER)

    owner = client.get_named_accounts().get("deployer")
    if not owner:
        raise ConfigurationError(
            f"No deployer account configured for network '{config.network.name}'"
        )

    ctx = PipelineContext(
        nft=client.get_deployed_contract(BASIC_NFT_CONTRACT, owner),
        marketplace=client.get_deployed_contract(MARKETPLACE_CONTRACT, owner),
        price=price,
        timeout=config.confirmation_timeout,
    )
    run_pipeline(ctx, MINT_AND_LIST_STAGES, cancel_event)

    logger.info("nft_listed", token_id=ctx.token_id, price=price, marketplace=ctx.marketplace.address)
    return ListingResult(
        nft_address=ctx.nft.address,
        marketplace_address=ctx.marketplace.address,
        token_id=ctx.token_id,
        price=price,
        receipts=dict(ctx.receipts),
    )
