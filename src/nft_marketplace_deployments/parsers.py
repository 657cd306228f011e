"""Deployment file and compiler artifact parsers for nft-marketplace-deployments library."""

import json
from pathlib import Path
from typing import Any, Dict

from .exceptions import ContractNotFoundError, DefectiveDeploymentError
from .types import DeploymentRecord


def parse_hardhat_deployment(file_path: Path) -> Dict[str, Any]:
    """
    Parse a hardhat-deploy JSON file.

    Args:
        file_path: Path to contract deployment JSON file

    Returns:
        Dictionary with canonical field names:
        - Required: address, abi, constructor_args
        - Optional: block, confirmations, transaction_hash, bytecode,
          deployed_bytecode, solc_input_hash, num_deployments

    Raises:
        DefectiveDeploymentError: If address or ABI is missing from deployment file
    """
    with open(file_path) as f:
        data = json.load(f)

    if "address" not in data or "abi" not in data:
        raise DefectiveDeploymentError(
            f"Missing address or abi in hardhat deployment file: {file_path}"
        )

    result: Dict[str, Any] = {
        "address": data["address"],
        "abi": data["abi"],
        "constructor_args": data.get("args", []),
    }

    # Try to get block number from receipt first, fall back to top-level
    receipt = data.get("receipt", {})
    if "blockNumber" in receipt:
        result["block"] = receipt["blockNumber"]
    elif "blockNumber" in data:
        result["block"] = data["blockNumber"]
    if "confirmations" in receipt:
        result["confirmations"] = receipt["confirmations"]

    # Extract optional fields if present
    if "transactionHash" in data:
        result["transaction_hash"] = data["transactionHash"]
    if "bytecode" in data:
        result["bytecode"] = data["bytecode"]
    if "deployedBytecode" in data:
        result["deployed_bytecode"] = data["deployedBytecode"]
    if "solcInputHash" in data:
        result["solc_input_hash"] = data["solcInputHash"]
    if "numDeployments" in data:
        result["num_deployments"] = data["numDeployments"]

    return result


def serialize_hardhat_deployment(record: DeploymentRecord) -> Dict[str, Any]:
    """
    Convert a deployment record to hardhat-deploy JSON layout.

    Inverse of parse_hardhat_deployment for the fields this library tracks.
    """
    data: Dict[str, Any] = {
        "address": record.address,
        "abi": record.abi,
        "args": list(record.constructor_args),
        "receipt": {"confirmations": record.confirmations_waited},
    }

    if record.transaction_hash is not None:
        data["transactionHash"] = record.transaction_hash
        data["receipt"]["transactionHash"] = record.transaction_hash
    if record.block is not None:
        data["receipt"]["blockNumber"] = record.block
    if record.bytecode is not None:
        data["bytecode"] = record.bytecode
    if record.deployed_bytecode is not None:
        data["deployedBytecode"] = record.deployed_bytecode
    if record.solc_input_hash is not None:
        data["solcInputHash"] = record.solc_input_hash
    if record.num_deployments is not None:
        data["numDeployments"] = record.num_deployments

    return data


def parse_artifact(file_path: Path) -> Dict[str, Any]:
    """
    Parse a hardhat compiler artifact.

    Args:
        file_path: Path to artifacts/contracts/{Name}.sol/{Name}.json

    Returns:
        Dictionary with contract_name, source_name, abi, bytecode, deployed_bytecode

    Raises:
        ContractNotFoundError: If the artifact does not exist
        DefectiveDeploymentError: If the artifact is not valid JSON or lacks a field
    """
    try:
        with open(file_path) as f:
            data = json.load(f)
        return {
            "contract_name": data["contractName"],
            "source_name": data["sourceName"],
            "abi": data["abi"],
            "bytecode": data["bytecode"],
            "deployed_bytecode": data.get("deployedBytecode"),
        }
    except FileNotFoundError as e:
        raise ContractNotFoundError(
            f"Compiler artifact not found at {file_path}. Run `npx hardhat compile` first."
        ) from e
    except (KeyError, TypeError, ValueError) as e:
        raise DefectiveDeploymentError(f"Malformed compiler artifact {file_path}: {e!r}") from e


def parse_build_info(debug_path: Path) -> Dict[str, Any]:
    """
    Resolve and parse the build-info referenced by an artifact's .dbg.json file.

    Args:
        debug_path: Path to artifacts/contracts/{Name}.sol/{Name}.dbg.json

    Returns:
        Dictionary with solc_version (long form, e.g. "0.8.7+commit.e28d00a7")
        and input (standard JSON compiler input)

    Raises:
        ContractNotFoundError: If the debug file or build-info is missing
        DefectiveDeploymentError: If either file is not valid JSON or lacks a field
    """
    try:
        with open(debug_path) as f:
            debug = json.load(f)
        build_info_path = (debug_path.parent / debug["buildInfo"]).resolve()
        with open(build_info_path) as f:
            build_info = json.load(f)
        solc_version = build_info.get("solcLongVersion") or build_info["solcVersion"]
        return {"solc_version": solc_version, "input": build_info["input"]}
    except FileNotFoundError as e:
        raise ContractNotFoundError(f"Build info not found for {debug_path}") from e
    except (KeyError, TypeError, ValueError) as e:
        raise DefectiveDeploymentError(f"Malformed build info for {debug_path}: {e!r}") from e
