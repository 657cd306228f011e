"""Configuration constants for nft-marketplace-deployments library."""

MARKETPLACE_CONTRACT = "NFTMarketplace"
BASIC_NFT_CONTRACT = "BasicNFT"

# Local networks are never sent to a block explorer for verification
DEVELOPMENT_CHAINS = ("hardhat", "localhost")

# Environment variable holding the block explorer API key
VERIFICATION_API_KEY_ENV = "ETHERSCAN_API_KEY"
PRIVATE_KEY_ENV = "PRIVATE_KEY"
BLOCK_CONFIRMATIONS_ENV = "BLOCK_CONFIRMATIONS"

# Price of a listing created by the mint-and-list workflow, in ether
LISTING_PRICE_ETHER = "0.1"

DEFAULT_BLOCK_CONFIRMATIONS = 1
DEFAULT_CONFIRMATION_TIMEOUT = 120.0  # seconds
DEFAULT_POLL_INTERVAL = 1.0  # seconds
DEFAULT_CONFIRMATION_RETRIES = 3

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Network configuration based on ethereum-lists/chains and hardhat.config
NETWORK_CONFIG = {
    "hardhat": {
        "chain_id": 31337,
        "chain_name": "Hardhat Network",
        "default_rpc_url": "http://127.0.0.1:8545",
        "default_rpc_env": "HARDHAT_RPC_URL",
    },
    "localhost": {
        "chain_id": 31337,
        "chain_name": "Localhost",
        "default_rpc_url": "http://127.0.0.1:8545",
        "default_rpc_env": "LOCALHOST_RPC_URL",
    },
    "sepolia": {
        "chain_id": 11155111,
        "chain_name": "Sepolia",
        "default_rpc_env": "SEPOLIA_RPC_URL",
        "block_confirmations": 6,
        "block_explorer_url": "https://sepolia.etherscan.io",
        "block_explorer_api_url": "https://api-sepolia.etherscan.io/api",
    },
    "mainnet": {
        "chain_id": 1,
        "chain_name": "Ethereum Mainnet",
        "default_rpc_env": "MAINNET_RPC_URL",
        "block_confirmations": 6,
        "block_explorer_url": "https://etherscan.io",
        "block_explorer_api_url": "https://api.etherscan.io/api",
    },
}
