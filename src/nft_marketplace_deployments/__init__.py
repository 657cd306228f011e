"""
nft-marketplace-deployments: deployment and listing scripts for an NFT marketplace
"""

from importlib.metadata import PackageNotFoundError, version

from .config import NetworkConfig, WorkflowConfig, load_network_config, load_workflow_config
from .deploy import deploy_marketplace
from .deployments import DeploymentStore
from .exceptions import (
    ConfigurationError,
    ConfirmationTimeout,
    ContractNotFoundError,
    DefectiveDeploymentError,
    DeploymentFailure,
    EventMissing,
    MarketplaceError,
    NetworkNotFoundError,
    TransactionFailure,
    VerificationFailure,
    WorkflowCancelled,
)
from .marketplace import MarketplaceClient
from .mint_and_list import WorkflowState, extract_token_id, mint_and_list
from .types import DeploymentRecord, EventLog, Listing, ListingResult, TransactionReceipt
from .units import parse_ether, parse_units
from .verification import should_verify

try:
    __version__ = version("nft-marketplace-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "deploy_marketplace",
    "mint_and_list",
    "extract_token_id",
    "should_verify",
    "parse_ether",
    "parse_units",
    "load_network_config",
    "load_workflow_config",
    "NetworkConfig",
    "WorkflowConfig",
    "WorkflowState",
    "DeploymentStore",
    "MarketplaceClient",
    "DeploymentRecord",
    "EventLog",
    "Listing",
    "ListingResult",
    "TransactionReceipt",
    "MarketplaceError",
    "ConfigurationError",
    "NetworkNotFoundError",
    "ContractNotFoundError",
    "DefectiveDeploymentError",
    "DeploymentFailure",
    "VerificationFailure",
    "TransactionFailure",
    "ConfirmationTimeout",
    "EventMissing",
    "WorkflowCancelled",
]
