"""Custom exception classes for nft-marketplace-deployments library."""

from typing import Optional


class MarketplaceError(Exception):
    """Base exception for deployment and marketplace workflow errors."""

    pass


class ConfigurationError(MarketplaceError, ValueError):
    """Raised when network or workflow configuration is incomplete."""

    pass


class NetworkNotFoundError(ConfigurationError):
    """Raised when requested network is not configured."""

    pass


class ContractNotFoundError(MarketplaceError, LookupError):
    """Raised when a contract has no deployment file or compiler artifact."""

    pass


class DefectiveDeploymentError(MarketplaceError, ValueError):
    """Raised when a hardhat deployment file is missing required fields."""

    pass


class DeploymentFailure(MarketplaceError):
    """Raised when a contract deployment could not be completed."""

    pass


class VerificationFailure(MarketplaceError):
    """Raised when the block explorer rejects a source verification request."""

    pass


class TransactionFailure(MarketplaceError):
    """Raised when a transaction is rejected or reverted."""

    def __init__(self, message: str, transaction_hash: Optional[str] = None):
        super().__init__(message)
        self.transaction_hash = transaction_hash


class ConfirmationTimeout(TransactionFailure, TimeoutError):
    """Raised when a transaction is not confirmed before the deadline."""

    pass


class EventMissing(MarketplaceError, LookupError):
    """Raised when a receipt does not carry the expected event."""

    pass


class WorkflowCancelled(MarketplaceError):
    """Raised when a workflow is cancelled between stages."""

    pass
