"""Blockchain contract address constants and pipeline policy values."""

from decimal import Decimal
from typing import Any

# Debt is always half of the deposited principal.
LOAN_TO_VALUE = Decimal("0.5")

# alUSD and alETH are both 18-decimal tokens on every supported chain
SYNTH_DECIMALS = 18

DEFAULT_MAINNET_RPC_URL = "https://eth.drpc.org"
DEFAULT_OPTIMISM_RPC_URL = "https://mainnet.optimism.io"
DEFAULT_ARBITRUM_RPC_URL = "https://arb1.arbitrum.io/rpc"

DEFAULT_TOPUP_API_URL = "https://apicore.holyheld.com"
DEFAULT_RATE_API_URL = "https://api.alchemix.fi"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Chain display name (lower-cased) -> top-up provider network identifier
PROVIDER_NETWORKS: dict[str, str] = {
    "arbitrum one": "arbitrum",
    "arbitrum": "arbitrum",
    "polygon": "polygon",
    "ethereum": "ethereum",
    "optimism": "optimism",
    "op mainnet": "optimism",
}

# Raw per-chain tables; validated by loan_to_card.chains at load time.
OPTIMISM_CHAIN: dict[str, Any] = {
    "id": 10,
    "name": "OP Mainnet",
    "native_currency": {"name": "Ether", "symbol": "ETH", "decimals": 18},
    "tokens": {
        "USDC": {"address": "0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85", "decimals": 6},
        "DAI": {"address": "0xDA10009cBd5D07dd0CeCc66161FC93D7c9000da1", "decimals": 18},
        "USDT": {"address": "0x94b008aA00579c1307B0EF2c499aD98a8ce58e58", "decimals": 6},
        "WETH": {"address": "0x4200000000000000000000000000000000000006", "decimals": 18},
    },
    "vaults": {
        "0x4186Eb285b1efdf372AC5896a08C346c7E373cC4": {
            "label": "Aave USDC",
            "underlying_symbol": "USDC",
            "yield_symbol": "aOptUSDC",
        },
        "0x43A502D7e947c8A2eBBaf7627E104Ddcc253aBc6": {
            "label": "Aave DAI",
            "underlying_symbol": "DAI",
            "yield_symbol": "aOptDAI",
        },
        "0x2680b58945A31602E4B6122C965c2849Eb81bB89": {
            "label": "Aave USDT",
            "underlying_symbol": "USDT",
            "yield_symbol": "aOptUSDT",
        },
        "0x337B4B933d60F40CB57DD19AE834Af103F049810": {
            "label": "Aave WETH",
            "underlying_symbol": "WETH",
            "yield_symbol": "aOptWETH",
            "weth_gateway": "0xDB3fE4Da32c2A79654D98e5a41B22173a0AF3933",
        },
        "0x1F32b1c2345538c0c6f582fCB022739c4A194Ebb": {
            "label": "Lido wstETH",
            "underlying_symbol": "WETH",
            "yield_symbol": "wstETH",
            "weth_gateway": "0xDB3fE4Da32c2A79654D98e5a41B22173a0AF3933",
        },
    },
    "alchemists": [
        {"address": "0x10294d57A419C8eb78C648372c5bAA27fD1484af", "synth_type": "alUSD"},
        {"address": "0xe04Bb5B4de60FA2fBa69a93adE13A8B3B569d5B4", "synth_type": "alETH"},
    ],
    "synth_tokens": {
        "alUSD": "0xCB8FA9a76b8e203D8C3797bF438d8FB81Ea3326A",
        "alETH": "0x3E29D3A9316dAB217754d13b28646B76607c5f04",
    },
}

ARBITRUM_CHAIN: dict[str, Any] = {
    "id": 42161,
    "name": "Arbitrum One",
    "native_currency": {"name": "Ether", "symbol": "ETH", "decimals": 18},
    "tokens": {
        "USDC": {"address": "0xaf88d065e77c8cC2239327C5EDb3A432268e5831", "decimals": 6},
        "DAI": {"address": "0xDA10009cBd5D07dd0CeCc66161FC93D7c9000da1", "decimals": 18},
        "USDT": {"address": "0xFd086bC7CD5C481DCC9C85ebE478A1C0b69FCbb9", "decimals": 6},
        "WETH": {"address": "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1", "decimals": 18},
    },
    "vaults": {
        "0x248a431116c6f6FCD5Fe1097d16d0597E24100f5": {
            "label": "Aave USDC",
            "underlying_symbol": "USDC",
            "yield_symbol": "aArbUSDC",
        },
        "0x5979D7b546E38E414F7E9822514be443A4800529": {
            "label": "Lido wstETH",
            "underlying_symbol": "WETH",
            "yield_symbol": "wstETH",
            "weth_gateway": "0xDBBd7F9B0C0F2dB2B4B0A1E8D2f6a1fB3d8c7E21",
        },
    },
    "alchemists": [
        {"address": "0xb46eE2E4165F629b4aBCE04B7Eb4237f951AC66F", "synth_type": "alUSD"},
        {"address": "0x654e16a0b161b150F5d1C8a5ba6E7A7B7760703A", "synth_type": "alETH"},
    ],
    "synth_tokens": {
        "alUSD": "0xCB8FA9a76b8e203D8C3797bF438d8FB81Ea3326A",
        "alETH": "0x17573150d67d820542EFb24210371545a4868B03",
    },
}

MAINNET_CHAIN: dict[str, Any] = {
    "id": 1,
    "name": "Ethereum",
    "native_currency": {"name": "Ether", "symbol": "ETH", "decimals": 18},
    "tokens": {
        "USDC": {"address": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48", "decimals": 6},
        "DAI": {"address": "0x6B175474E89094C44Da98b954EedeAC495271d0F", "decimals": 18},
        "USDT": {"address": "0xdAC17F958D2ee523a2206206994597C13D831ec7", "decimals": 6},
        "WETH": {"address": "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2", "decimals": 18},
    },
    "vaults": {
        "0xa354F35829Ae975e850e23e9615b11Da1B3dC4DE": {
            "label": "Yearn USDC",
            "underlying_symbol": "USDC",
            "yield_symbol": "yvUSDC",
        },
        "0xdA816459F1AB5631232FE5e97a05BBBb94970c95": {
            "label": "Yearn DAI",
            "underlying_symbol": "DAI",
            "yield_symbol": "yvDAI",
        },
        "0xa258C4606Ca8206D8aA700cE2143D7db854D168c": {
            "label": "Yearn WETH",
            "underlying_symbol": "WETH",
            "yield_symbol": "yvWETH",
            "weth_gateway": "0xA22a7ec2d82A471B1DAcC4B37345Cf428E76D67A",
        },
        "0x7f39C581F595B53c5cb19bD0b3f8dA6c935E2Ca0": {
            "label": "Lido wstETH",
            "underlying_symbol": "WETH",
            "yield_symbol": "wstETH",
            "apr_source": False,
        },
    },
    "alchemists": [
        {"address": "0x5C6374a2ac4EBC38DeA0Fc1F8716e5Ea1AdD94dd", "synth_type": "alUSD"},
        {"address": "0x062Bf725dC4cDF947aa79Ca2aaCCD4F385b13b5c", "synth_type": "alETH"},
    ],
    "synth_tokens": {
        "alUSD": "0xBC6DA0FE9aD5f3b0d58160288917AA56653660E9",
        "alETH": "0x0100546F2cD4C9D97f798fFC9755E47865FF7Ee6",
    },
}

CHAIN_TABLES: dict[int, dict[str, Any]] = {
    OPTIMISM_CHAIN["id"]: OPTIMISM_CHAIN,
    ARBITRUM_CHAIN["id"]: ARBITRUM_CHAIN,
    MAINNET_CHAIN["id"]: MAINNET_CHAIN,
}
