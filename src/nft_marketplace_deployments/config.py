"""Explicit network and workflow configuration for nft-marketplace-deployments library."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Union

from .constants import (
    BLOCK_CONFIRMATIONS_ENV,
    DEFAULT_BLOCK_CONFIRMATIONS,
    DEFAULT_CONFIRMATION_RETRIES,
    DEFAULT_CONFIRMATION_TIMEOUT,
    DEFAULT_POLL_INTERVAL,
    NETWORK_CONFIG,
)
from .exceptions import ConfigurationError, NetworkNotFoundError


@dataclass(frozen=True)
class NetworkConfig:
    """Connection and confirmation settings for one network."""

    name: str  # e.g., "sepolia"
    chain_id: int
    rpc_url: str
    block_confirmations: int = DEFAULT_BLOCK_CONFIRMATIONS
    block_explorer_url: Optional[str] = None
    block_explorer_api_url: Optional[str] = None


@dataclass(frozen=True)
class WorkflowConfig:
    """Everything a workflow needs, passed in instead of read from globals."""

    network: NetworkConfig
    project_root: Path
    env: Mapping[str, str] = field(default_factory=dict)
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    confirmation_retries: int = DEFAULT_CONFIRMATION_RETRIES


def _parse_confirmations(value: Union[str, int]) -> int:
    try:
        confirmations = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid block confirmation count: {value!r}") from e
    if confirmations < 1:
        raise ConfigurationError(f"Block confirmations must be at least 1, got {confirmations}")
    return confirmations


def load_network_config(
    network: str,
    env: Optional[Mapping[str, str]] = None,
    rpc_url: Optional[str] = None,
    block_confirmations: Optional[int] = None,
) -> NetworkConfig:
    """
    Build the configuration for a named network.

    Precedence for each setting is: explicit argument, environment variable,
    NETWORK_CONFIG default.

    Args:
        network: Network name (a key of NETWORK_CONFIG)
        env: Environment mapping (defaults to os.environ)
        rpc_url: RPC endpoint override
        block_confirmations: Confirmation count override

    Returns:
        NetworkConfig object

    Raises:
        NetworkNotFoundError: If network is unknown
        ConfigurationError: If no RPC URL can be determined or confirmations are invalid
    """
    if env is None:
        env = os.environ

    if network not in NETWORK_CONFIG:
        raise NetworkNotFoundError(
            f"Network '{network}' not configured. Known networks: {', '.join(NETWORK_CONFIG)}"
        )
    settings = NETWORK_CONFIG[network]

    if rpc_url is None:
        rpc_url = env.get(settings["default_rpc_env"]) or settings.get("default_rpc_url")
    if rpc_url is None:
        raise ConfigurationError(
            f"RPC URL required for network '{network}': set ${settings['default_rpc_env']} "
            "or pass rpc_url parameter"
        )

    if block_confirmations is None:
        block_confirmations = env.get(BLOCK_CONFIRMATIONS_ENV) or settings.get(
            "block_confirmations", DEFAULT_BLOCK_CONFIRMATIONS
        )

    return NetworkConfig(
        name=network,
        chain_id=settings["chain_id"],
        rpc_url=rpc_url,
        block_confirmations=_parse_confirmations(block_confirmations),
        block_explorer_url=settings.get("block_explorer_url"),
        block_explorer_api_url=settings.get("block_explorer_api_url"),
    )


def load_workflow_config(
    network: str,
    project_root: Optional[Union[Path, str]] = None,
    env: Optional[Mapping[str, str]] = None,
    rpc_url: Optional[str] = None,
    block_confirmations: Optional[int] = None,
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
) -> WorkflowConfig:
    """
    Build a WorkflowConfig, snapshotting the environment.

    Args:
        network: Network name
        project_root: Hardhat project root (defaults to current directory)
        env: Environment mapping (defaults to a copy of os.environ)
        rpc_url: RPC endpoint override
        block_confirmations: Confirmation count override
        confirmation_timeout: Seconds to wait for each confirmation

    Returns:
        WorkflowConfig object
    """
    if env is None:
        env = dict(os.environ)
    if confirmation_timeout <= 0:
        raise ConfigurationError(f"Confirmation timeout must be positive, got {confirmation_timeout}")

    return WorkflowConfig(
        network=load_network_config(network, env, rpc_url, block_confirmations),
        project_root=Path(project_root).absolute() if project_root is not None else Path.cwd(),
        env=env,
        confirmation_timeout=confirmation_timeout,
    )
