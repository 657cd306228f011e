"""Unit tests for reading the minted token id from a receipt."""

import pytest

from nft_marketplace_deployments.constants import ZERO_ADDRESS
from nft_marketplace_deployments.exceptions import EventMissing
from nft_marketplace_deployments.mint_and_list import extract_token_id
from nft_marketplace_deployments.types import EventLog, TransactionReceipt

OWNER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
OTHER = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
NFT_ADDRESS = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
OTHER_TOKEN = "0x9fE46736679d2D9a65F0992F2272dE9f3c7fa6e0"


def make_receipt(*events: EventLog) -> TransactionReceipt:
    return TransactionReceipt(transaction_hash="0xmint", status=1, events=list(events), confirmations=1)


class TestExtractTokenId:
    """Test the extract_token_id function."""

    def test_reads_mint_transfer(self):
        receipt = make_receipt(EventLog("Transfer", {"from": ZERO_ADDRESS, "to": OWNER, "tokenId": 7}))
        assert extract_token_id(receipt) == 7

    def test_token_zero_is_a_valid_id(self):
        receipt = make_receipt(EventLog("Transfer", {"from": ZERO_ADDRESS, "to": OWNER, "tokenId": 0}))
        assert extract_token_id(receipt) == 0

    def test_no_events_raises(self):
        """Test that an empty event list fails instead of defaulting to token 0."""
        with pytest.raises(EventMissing):
            extract_token_id(make_receipt())

    def test_ignores_non_mint_transfers(self):
        """Test that a Transfer between two owners is not taken as the mint."""
        receipt = make_receipt(EventLog("Transfer", {"from": OTHER, "to": OWNER, "tokenId": 3}))

        with pytest.raises(EventMissing):
            extract_token_id(receipt)

    def test_does_not_use_first_event_positionally(self):
        """Test that unrelated events before the mint are skipped."""
        receipt = make_receipt(
            EventLog("OwnershipTransferred", {"previousOwner": ZERO_ADDRESS, "newOwner": OWNER}),
            EventLog("Transfer", {"from": ZERO_ADDRESS, "to": OWNER, "tokenId": 12}),
        )
        assert extract_token_id(receipt) == 12

    def test_falls_back_to_mint_event(self):
        receipt = make_receipt(EventLog("DogMinted", {"tokenId": 4}))
        assert extract_token_id(receipt) == 4

    def test_mint_event_without_token_id_raises(self):
        receipt = make_receipt(EventLog("Minted", {"owner": OWNER}))

        with pytest.raises(EventMissing) as exc_info:
            extract_token_id(receipt)

        assert "Minted" in str(exc_info.value)

    def test_ignores_events_from_other_contracts(self):
        """Test that a Transfer emitted by another token contract in the same transaction is skipped."""
        receipt = make_receipt(
            EventLog("Transfer", {"from": ZERO_ADDRESS, "to": OWNER, "tokenId": 999}, OTHER_TOKEN, 0),
            EventLog("Transfer", {"from": ZERO_ADDRESS, "to": OWNER, "tokenId": 7}, NFT_ADDRESS, 1),
        )
        assert extract_token_id(receipt, NFT_ADDRESS) == 7

    def test_address_match_is_case_insensitive(self):
        receipt = make_receipt(
            EventLog("Transfer", {"from": ZERO_ADDRESS, "to": OWNER, "tokenId": 3}, NFT_ADDRESS.lower())
        )
        assert extract_token_id(receipt, NFT_ADDRESS) == 3

    def test_only_foreign_mint_raises(self):
        receipt = make_receipt(
            EventLog("Transfer", {"from": ZERO_ADDRESS, "to": OWNER, "tokenId": 999}, OTHER_TOKEN)
        )

        with pytest.raises(EventMissing):
            extract_token_id(receipt, NFT_ADDRESS)
