"""Command line entry points for the deployment and mint-and-list workflows."""

import argparse
import sys
from typing import Any, Callable, List, Optional

import structlog

from .chain import ChainClient, connect
from .config import WorkflowConfig, load_workflow_config
from .constants import DEFAULT_CONFIRMATION_TIMEOUT
from .deploy import deploy_marketplace
from .logs import configure_logging
from .mint_and_list import mint_and_list

logger = structlog.get_logger(__name__)

Workflow = Callable[[WorkflowConfig, ChainClient], Any]

COMMANDS = {
    "deploy": ("Deploy the NFTMarketplace contract", deploy_marketplace),
    "mint-and-list": ("Mint a BasicNFT and list it on the marketplace", mint_and_list),
}


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--network",
        default="hardhat",
        help="Network name (hardhat, localhost, sepolia, mainnet)",
    )
    parser.add_argument(
        "--project-root",
        default=None,
        help="Hardhat project root holding artifacts/ and deployments/ (default: cwd)",
    )
    parser.add_argument("--rpc-url", default=None, help="Override the network's RPC URL")
    parser.add_argument(
        "--confirmations",
        type=int,
        default=None,
        help="Block confirmations to wait for after deployment",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_CONFIRMATION_TIMEOUT,
        help="Seconds to wait for each transaction to be confirmed",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. DEBUG, INFO, WARNING)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines")


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, description="NFT marketplace deployment scripts")
    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, (help_text, _) in COMMANDS.items():
        add_common_arguments(subparsers.add_parser(name, help=help_text))
    return parser


def run_workflow(workflow: Workflow, args: argparse.Namespace) -> int:
    """
    Run a workflow and translate its outcome into an exit code.

    Returns:
        0 on success, 1 after logging any error
    """
    try:
        configure_logging(args.log_level, args.json_logs)
        config = load_workflow_config(
            args.network,
            project_root=args.project_root,
            rpc_url=args.rpc_url,
            block_confirmations=args.confirmations,
            confirmation_timeout=args.timeout,
        )
        workflow(config, connect(config))
    except Exception as e:
        state = getattr(e, "state", None)
        logger.error(
            "workflow_failed",
            error=str(e),
            error_type=type(e).__name__,
            state=getattr(state, "value", state),
            exc_info=True,
        )
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _, workflow = COMMANDS[args.command]
    return run_workflow(workflow, args)


def _single_command_main(command: str, argv: Optional[List[str]]) -> int:
    help_text, workflow = COMMANDS[command]
    parser = argparse.ArgumentParser(description=help_text)
    add_common_arguments(parser)
    return run_workflow(workflow, parser.parse_args(argv))


def deploy_main(argv: Optional[List[str]] = None) -> int:
    """Entry point for nft-marketplace-deploy."""
    return _single_command_main("deploy", argv)


def mint_and_list_main(argv: Optional[List[str]] = None) -> int:
    """Entry point for nft-mint-and-list."""
    return _single_command_main("mint-and-list", argv)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
