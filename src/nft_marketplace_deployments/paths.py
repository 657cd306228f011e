"""Path management utilities for nft-marketplace-deployments library."""

from pathlib import Path
from typing import Optional, Union


def get_default_project_root() -> Path:
    """
    Get default hardhat project root (current directory).

    Returns:
        Absolute path of the current working directory
    """
    return Path.cwd()


def _resolve_root(project_root: Optional[Union[Path, str]]) -> Path:
    if project_root is None:
        return get_default_project_root()
    return Path(project_root).absolute()


def get_deployments_dir(
    network: str, project_root: Optional[Union[Path, str]] = None
) -> Path:
    """
    Get the hardhat-deploy directory for a network.

    Args:
        network: Network name (e.g., "sepolia")
        project_root: Hardhat project root (defaults to current directory)

    Returns:
        Path to {project_root}/deployments/{network}
    """
    return _resolve_root(project_root) / "deployments" / network


def get_artifact_paths(
    contract_name: str, project_root: Optional[Union[Path, str]] = None
) -> tuple[Path, Path]:
    """
    Get compiler artifact file paths for a contract.

    Assumes the hardhat convention of one contract per source file named
    after the contract.

    Args:
        contract_name: Contract name (e.g., "NFTMarketplace")
        project_root: Hardhat project root (defaults to current directory)

    Returns:
        Tuple of (artifact_path, debug_path)
    """
    artifact_dir = (
        _resolve_root(project_root) / "artifacts" / "contracts" / f"{contract_name}.sol"
    )

    artifact_path = artifact_dir / f"{contract_name}.json"
    debug_path = artifact_dir / f"{contract_name}.dbg.json"

    return (artifact_path, debug_path)
