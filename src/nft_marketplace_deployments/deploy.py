"""Deployment workflow for the NFTMarketplace contract."""

from typing import Any, Optional, Protocol, Sequence

import structlog

from .chain import ChainClient
from .config import WorkflowConfig
from .constants import MARKETPLACE_CONTRACT, VERIFICATION_API_KEY_ENV
from .exceptions import (
    ConfigurationError,
    ContractNotFoundError,
    DefectiveDeploymentError,
    DeploymentFailure,
    MarketplaceError,
    VerificationFailure,
)
from .types import DeploymentRecord
from .verification import EtherscanVerifier, should_verify

logger = structlog.get_logger(__name__)


class Verifier(Protocol):
    def verify(
        self, address: str, constructor_args: Sequence[Any], contract_name: str = ...
    ) -> None: ...


def build_verifier(config: WorkflowConfig) -> Optional[EtherscanVerifier]:
    """
    Create a block explorer verifier for the configured network.

    Returns:
        EtherscanVerifier, or None if the network has no explorer API
    """
    api_url = config.network.block_explorer_api_url
    if api_url is None:
        return None
    return EtherscanVerifier(
        api_url=api_url,
        api_key=config.env[VERIFICATION_API_KEY_ENV],
        project_root=config.project_root,
    )


def deploy_marketplace(
    config: WorkflowConfig,
    client: ChainClient,
    verifier: Optional[Verifier] = None,
) -> DeploymentRecord:
    """
    Deploy NFTMarketplace and verify its source where appropriate.

    Verification is best-effort: failures are logged and the deployment record
    is still returned.

    Args:
        config: Workflow configuration
        client: Chain client used to deploy
        verifier: Verifier to use (defaults to an Etherscan verifier for the network)

    Returns:
        DeploymentRecord of the deployed marketplace

    Raises:
        ConfigurationError: If no deployer account is available
        DeploymentFailure: If deployment fails
    """
    network = config.network
    deployer = client.get_named_accounts().get("deployer")
    if not deployer:
        raise ConfigurationError(f"No deployer account configured for network '{network.name}'")

    logger.info("deploying_contract", contract=MARKETPLACE_CONTRACT, network=network.name)

    args: list = []
    try:
        record = client.deploy(
            MARKETPLACE_CONTRACT,
            from_account=deployer,
            constructor_args=args,
            wait_confirmations=network.block_confirmations,
        )
    except MarketplaceError:
        raise
    except Exception as e:
        raise DeploymentFailure(f"Deployment of {MARKETPLACE_CONTRACT} failed: {e}") from e

    if should_verify(network.name, config.env):
        if verifier is None:
            verifier = build_verifier(config)

        if verifier is None:
            logger.warning("verification_unavailable", network=network.name)
        else:
            logger.info("verifying_contract", contract=MARKETPLACE_CONTRACT, network=network.name)
            try:
                verifier.verify(record.address, args, MARKETPLACE_CONTRACT)
            except (VerificationFailure, ContractNotFoundError, DefectiveDeploymentError) as e:
                logger.warning("verification_failed", address=record.address, error=str(e))
            else:
                logger.info("contract_verified", contract=MARKETPLACE_CONTRACT, address=record.address)

    logger.info(
        "deployment_complete",
        contract=MARKETPLACE_CONTRACT,
        address=record.address,
        confirmations=record.confirmations_waited,
    )
    return record
