# src/yieldstake/ledger/constants.py
from __future__ import annotations

"""Reward accrual constants.

- Reward token precision: 18 decimals (1 YIELD = 1e18 units)
- Reward rate is quoted in whole YIELD per asset per day
- Admin-settable rate range: 1..1000
"""

# Reward token precision (1 YIELD = 1e18 units)
REWARD_DECIMALS: int = 18
SCALE: int = 10**REWARD_DECIMALS

SECONDS_PER_DAY: int = 86_400

# Inclusive bounds for an admin-configured reward rate
MIN_REWARD_RATE: int = 1
MAX_REWARD_RATE: int = 1_000

# Assets created per mint call
MAX_MINT_PER_CALL: int = 10

REWARD_TOKEN_NAME: str = "YIELD"
REWARD_TOKEN_SYMBOL: str = "YIELD"

# Default identity the collection mints reward tokens under
DEFAULT_MINTER_ID: str = "COLLECTION"
