# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.


"""Well-known Solana accounts, used to label filters in log output"""

from typing import Iterable

KNOWN_ACCOUNTS = {
    "usdc": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    "usdt": "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB",
    "pump_fun": "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P",
    "pump_fun_amm": "pAMMBay6oceH9fJKBRHGP5D4bD4sWpmSwMn52FMfXEA",
    "spl_token": "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA",
    "jupiter_v6": "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4",
    "vote": "Vote111111111111111111111111111111111111111",
}


def get_account_label(pubkey: str) -> str:
    for name, key in KNOWN_ACCOUNTS.items():
        if key == pubkey:
            return name
    return pubkey


def describe_accounts(pubkeys: Iterable[str]) -> str:
    return ",".join(get_account_label(key) for key in sorted(pubkeys))
