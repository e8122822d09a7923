"""Common configuration constants used across the migration."""

# Snapshot
MIGRATION_HEIGHT = 23_170_000
"""Legacy block height the 1.0 state snapshot was exported at"""

DEFAULT_STATE_DIR = "../state_1.0"
"""Root directory of the exported 1.0 snapshots (one sub-directory per height)"""

DEFAULT_OUTPUT_DIR = "./res"
"""Root directory of the generated documents"""

AUX_DIR_NAME = "aux"
"""Sub-directory of the output root holding the per-stage audit documents"""

GENESIS_PARAMS_PATH = "2.0/genesis_builder_params.json"
"""Consolidated genesis parameters, relative to the output root"""

# Snapshot file names
ACCOUNTS_FILE = "assets.json"
ASSETS_TOTAL_FILE = "assets-total.json"
INTENTIONS_FILE = "intentions.json"
VALIDATOR_WEIGHTS_FILE = "vote-weight-nodes.json"
NOMINATORS_FILE = "vote-weight-accounts.json"
MINERS_FILE = "deposit-weight-accounts.json"
MINING_ASSETS_FILE = "deposit-weight-nodes.json"

# Balances
MINIMUM_ACTIVE_REWARD_POT_BALANCE = 100_000_000
"""1 PCX. Reward pots below this are considered dying"""

MAX_BALANCE = 2**64 - 1
"""Upper bound of the legacy Balance type (u64)"""

SETTLEMENT_ASSET = "PCX"
BRIDGED_ASSET = "BTC"
VERIFIED_ASSETS = ("PCX", "BTC", "L-BTC", "SDOT")
"""Assets whose per-account sums are checked against the on-chain totals"""

MINING_ASSET = "xbtc"
MINING_ASSETS = ("xbtc", "lbtc", "sdot")

# Address encoding
SS58_PREFIX = 44
"""ChainX network identifier"""

PUBLIC_KEY_LENGTH = 32

# Well-known legacy accounts

# 5RzDbX1ZiQZuAuxMGBn6WzvZiJnGEoainSWj9VWe27K6EcLz
LEGACY_COUNCIL_ACCOUNT = (
    "0x67df26a755e0c31ac81e2ed530d147d7f2b9a3f5a570619048c562b1ed00dfdd"
)

# 5RqxsaJpkqP8CHyiVUrLWL4HDaHNX3ytte7fo8sAD8Jnh8sy
LEGACY_TEAM_ACCOUNT = (
    "0x6193a00c655f836f9d8a62ed407096381f02f8272ea3ea0df0fd66c08c53af81"
)

# 5T5oFEBXxgjkjtUKM926ZPJzNVf4w8baTgEa1JKLA1bD9J6D
LEGACY_SDOT_ACCOUNT = (
    "0x985ce3564a5e74bff91a742388cbb392fd98994b22109fef6efe8d0792662d30"
)

# 5Pr1XZ817z5S8p1dsSQZXQgMqQAobwKM4bWQpczEyj9BzfJA
LEGACY_LBTC_ACCOUNT = (
    "0x0924185f379c26ecafc4313236df0053a206f9762f982ef60ff3f8aeec0d2976"
)

# 5S92a9mNMMaRN9KDp582p54DYNqBADVUUv6jxmt3AC2tat4g
LEGACY_XBTC_ACCOUNT = (
    "0x6e97404385fde81240956d6a67cb59f07d12445438f0a28aa091c3f8a016e27a"
)

SYSTEM_ACCOUNTS = (
    LEGACY_COUNCIL_ACCOUNT,
    LEGACY_LBTC_ACCOUNT,
    LEGACY_SDOT_ACCOUNT,
)
"""Accounts whose PCX is redirected to the treasury. The first one receives it"""


__all__ = [
    "ACCOUNTS_FILE",
    "ASSETS_TOTAL_FILE",
    "AUX_DIR_NAME",
    "BRIDGED_ASSET",
    "DEFAULT_OUTPUT_DIR",
    "DEFAULT_STATE_DIR",
    "GENESIS_PARAMS_PATH",
    "INTENTIONS_FILE",
    "LEGACY_COUNCIL_ACCOUNT",
    "LEGACY_LBTC_ACCOUNT",
    "LEGACY_SDOT_ACCOUNT",
    "LEGACY_TEAM_ACCOUNT",
    "LEGACY_XBTC_ACCOUNT",
    "MAX_BALANCE",
    "MIGRATION_HEIGHT",
    "MINERS_FILE",
    "MINIMUM_ACTIVE_REWARD_POT_BALANCE",
    "MINING_ASSET",
    "MINING_ASSETS",
    "MINING_ASSETS_FILE",
    "NOMINATORS_FILE",
    "PUBLIC_KEY_LENGTH",
    "SETTLEMENT_ASSET",
    "SS58_PREFIX",
    "SYSTEM_ACCOUNTS",
    "VALIDATOR_WEIGHTS_FILE",
    "VERIFIED_ASSETS",
]
