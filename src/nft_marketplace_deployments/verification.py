"""Block explorer source verification for nft-marketplace-deployments library."""

import json
import time
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import requests
import structlog
from eth_abi import encode

from .constants import DEVELOPMENT_CHAINS, MARKETPLACE_CONTRACT, VERIFICATION_API_KEY_ENV
from .exceptions import VerificationFailure
from .parsers import parse_artifact, parse_build_info
from .paths import get_artifact_paths

logger = structlog.get_logger(__name__)

ALREADY_VERIFIED = "already verified"


def should_verify(network: str, env: Mapping[str, str]) -> bool:
    """
    Decide whether a deployment should be submitted for source verification.

    Both conditions must hold: the network is not a development chain, and a
    block explorer API key is present in the environment.

    Args:
        network: Network name
        env: Environment mapping

    Returns:
        True if verification should be attempted
    """
    return network not in DEVELOPMENT_CHAINS and bool(env.get(VERIFICATION_API_KEY_ENV))


def encode_constructor_args(abi: List[Dict[str, Any]], constructor_args: Sequence[Any]) -> str:
    """
    ABI-encode constructor arguments as Etherscan expects them (hex, no 0x).

    Returns:
        Hex string, empty when the constructor takes no arguments
    """
    constructor = next((item for item in abi if item.get("type") == "constructor"), None)
    types = [arg["type"] for arg in constructor["inputs"]] if constructor else []

    if len(types) != len(constructor_args):
        raise VerificationFailure(
            f"Constructor expects {len(types)} argument(s), got {len(constructor_args)}"
        )
    if not types:
        return ""
    return encode(types, list(constructor_args)).hex()


class EtherscanVerifier:
    """Submits hardhat build sources to an Etherscan-compatible API."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        project_root: Path,
        poll_interval: float = 5.0,
        max_polls: int = 12,
        session: Optional[requests.Session] = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.project_root = project_root
        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self.session = session or requests.Session()

    def _request(self, method: str, params: Dict[str, Any]) -> Dict[str, Any]:
        params = {"apikey": self.api_key, "module": "contract", **params}
        try:
            if method == "POST":
                response = self.session.post(self.api_url, data=params, timeout=30)
            else:
                response = self.session.get(self.api_url, params=params, timeout=30)
        except requests.RequestException as e:
            raise VerificationFailure(f"Network error during verification request: {e}") from e

        # Check for HTTP errors
        if response.status_code != 200:
            raise VerificationFailure(
                f"Verification request failed with status {response.status_code}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise VerificationFailure("Block explorer returned a non-JSON response") from e

    def verify(
        self,
        address: str,
        constructor_args: Sequence[Any],
        contract_name: str = MARKETPLACE_CONTRACT,
    ) -> None:
        """
        Verify a deployed contract's source code.

        Succeeds without resubmitting when the explorer reports the contract as
        already verified.

        Args:
            address: Deployed contract address
            constructor_args: Arguments the contract was deployed with
            contract_name: Contract name used to locate artifacts

        Raises:
            VerificationFailure: If submission or verification fails
            ContractNotFoundError: If compiler artifacts are missing
            DefectiveDeploymentError: If compiler artifacts are malformed
        """
        artifact_path, debug_path = get_artifact_paths(contract_name, self.project_root)
        artifact = parse_artifact(artifact_path)
        build_info = parse_build_info(debug_path)

        result = self._request(
            "POST",
            {
                "action": "verifysourcecode",
                "contractaddress": address,
                "sourceCode": json.dumps(build_info["input"]),
                "codeformat": "solidity-standard-json-input",
                "contractname": f"{artifact['source_name']}:{artifact['contract_name']}",
                "compilerversion": f"v{build_info['solc_version']}",
                # Etherscan's parameter name is misspelled
                "constructorArguements": encode_constructor_args(
                    artifact["abi"], constructor_args
                ),
            },
        )

        if result.get("status") != "1":
            message = str(result.get("result", ""))
            if ALREADY_VERIFIED in message.lower():
                logger.info("contract_already_verified", address=address)
                return
            raise VerificationFailure(f"Verification submission rejected: {message}")

        self._wait_for_result(result["result"], address)

    def _wait_for_result(self, guid: str, address: str) -> None:
        for _ in range(self.max_polls):
            time.sleep(self.poll_interval)
            result = self._request("GET", {"action": "checkverifystatus", "guid": guid})
            message = str(result.get("result", ""))

            if result.get("status") == "1" or ALREADY_VERIFIED in message.lower():
                logger.info("contract_verified", address=address, result=message)
                return
            if "pending" not in message.lower():
                raise VerificationFailure(f"Verification of {address} failed: {message}")

        raise VerificationFailure(
            f"Verification of {address} still pending after {self.max_polls} checks (guid {guid})"
        )
