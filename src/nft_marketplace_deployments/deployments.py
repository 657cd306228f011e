"""Deployment record storage for nft-marketplace-deployments library."""

import json
from pathlib import Path
from typing import List, Optional, Union

from .exceptions import ContractNotFoundError
from .parsers import parse_hardhat_deployment, serialize_hardhat_deployment
from .paths import get_deployments_dir
from .types import DeploymentRecord


class DeploymentStore:
    """Reads and writes hardhat-deploy deployment files for one network."""

    def __init__(self, network: str, project_root: Optional[Union[Path, str]] = None):
        """
        Initialize the deployment store.

        Args:
            network: Network name (e.g., "sepolia")
            project_root: Hardhat project root (defaults to current directory)
        """
        self.network = network
        self.directory = get_deployments_dir(network, project_root)

    def _path(self, contract_name: str) -> Path:
        return self.directory / f"{contract_name}.json"

    def has(self, contract_name: str) -> bool:
        """
        Check if a deployment exists for a contract.

        Args:
            contract_name: Name of contract

        Returns:
            True if a deployment file exists, False otherwise
        """
        return self._path(contract_name).exists()

    def contract_names(self) -> List[str]:
        """Get sorted names of all contracts deployed on this network."""
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json"))

    def get(self, contract_name: str) -> DeploymentRecord:
        """
        Get deployment record for a contract.

        Args:
            contract_name: Name of contract

        Returns:
            DeploymentRecord object

        Raises:
            ContractNotFoundError: If contract has not been deployed on this network
            DefectiveDeploymentError: If the deployment file is malformed
        """
        path = self._path(contract_name)
        if not path.exists():
            raise ContractNotFoundError(
                f"No deployment of '{contract_name}' found for network '{self.network}' "
                f"(looked in {self.directory})"
            )

        data = parse_hardhat_deployment(path)

        return DeploymentRecord(
            contract_name=contract_name,
            address=data["address"],
            constructor_args=data["constructor_args"],
            confirmations_waited=data.get("confirmations", 0),
            network=self.network,
            abi=data["abi"],
            transaction_hash=data.get("transaction_hash"),
            block=data.get("block"),
            bytecode=data.get("bytecode"),
            deployed_bytecode=data.get("deployed_bytecode"),
            solc_input_hash=data.get("solc_input_hash"),
            num_deployments=data.get("num_deployments"),
        )

    def save(self, record: DeploymentRecord) -> Path:
        """
        Save deployment record, replacing any earlier deployment of the contract.

        Creates the network directory if needed.

        Returns:
            Path where the deployment file was written
        """
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(record.contract_name)
        with open(path, "w") as f:
            json.dump(serialize_hardhat_deployment(record), f, indent=2)
        return path

    def next_deployment_count(self, contract_name: str) -> int:
        """Get the numDeployments value for the next deployment of a contract."""
        if not self.has(contract_name):
            return 1
        return (self.get(contract_name).num_deployments or 0) + 1
