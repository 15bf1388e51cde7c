# Copyright (C) 2025, Ionic.

# This program is licensed under the Apache License 2.0.
# See LICENSE or go to <https://www.apache.org/licenses/LICENSE-2.0> for full license details.

"""Transaction records returned by searchTransactions, one shape per detail level."""
from typing import Any, Generic, Literal, Optional, TypeVar, Union

from msgspec import Struct, field

from ultrasearch_client.search.token import Cursor, PaginationToken


class UiTokenAmount(Struct, omit_defaults=True):
    amount: str

    decimals: int

    uiAmountString: Optional[str] = None

    uiAmount: float | None = None


class TokenBalance(Struct):
    accountIndex: int

    mint: str

    uiTokenAmount: UiTokenAmount

    owner: str | None = None

    programId: str | None = None


class Reward(Struct):
    pubkey: str

    lamports: int  # i64

    postBalance: int  # u64

    rewardType: str | None = None

    commission: int | None = None  # u8


class Instruction(Struct):
    programIdIndex: int | None = None

    programId: str | None = None

    accounts: Any = None
    """Account indexes, or base-58 keys when the server returns parsed instructions"""

    data: str | None = None

    parsed: dict | str | None = None

    stackHeight: int | None = None


class InnerInstruction(Struct):
    index: int

    instructions: list[Instruction]


class LoadedAddresses(Struct):
    writable: list[str] = field(default_factory=list)

    readonly: list[str] = field(default_factory=list)


class TransactionMessage(Struct):
    accountKeys: list[Any]
    """Base-58 keys, or `{pubkey, signer, writable, source}` objects for parsed encodings"""

    recentBlockhash: str

    instructions: list[Instruction]

    header: dict[str, int] | None = None

    addressTableLookups: list[dict] | None = None


class Transaction(Struct):
    signatures: list[str]

    message: TransactionMessage


class TransactionMeta(Struct):
    fee: int

    err: Any = None
    """None for a successful transaction, otherwise the runtime error object"""

    preBalances: list[int] = field(default_factory=list)

    postBalances: list[int] = field(default_factory=list)

    preTokenBalances: list[TokenBalance] | None = field(default_factory=list)

    postTokenBalances: list[TokenBalance] | None = field(default_factory=list)

    logMessages: list[str] | None = field(default_factory=list)

    innerInstructions: list[InnerInstruction] | None = field(default_factory=list)

    rewards: list[Reward] | None = field(default_factory=list)

    loadedAddresses: LoadedAddresses | None = None

    computeUnitsConsumed: int | None = None  # u64


class SignatureRecord(Struct):
    """Lightweight record returned in `signatures` mode."""

    signature: str

    slot: int

    transactionIndex: int | None = None

    err: Any = None

    memo: str | None = None

    blockTime: int | None = None  # i64

    confirmationStatus: str | None = None

    @property
    def main_signature(self) -> str:
        return self.signature

    @property
    def is_successful(self) -> bool:
        return self.err is None

    @property
    def position(self) -> Cursor:
        return Cursor(self.slot, self.transactionIndex if self.transactionIndex is not None else -1)


class FullTransactionRecord(Struct):
    """Complete record returned in `full` mode.

    The live endpoint nests the message under `transaction`, while parts of its
    documentation show it flattened at the top level. Both forms decode.
    """

    slot: int

    blockTime: int | None = None  # i64

    transactionIndex: int | None = None

    version: Literal["legacy"] | int | None = None

    signature: str | None = None

    transaction: Transaction | None = None

    message: TransactionMessage | None = None

    meta: TransactionMeta | None = None

    @property
    def main_signature(self) -> str | None:
        if self.signature:
            return self.signature
        if self.transaction and self.transaction.signatures:
            return self.transaction.signatures[0]
        return None

    @property
    def transaction_message(self) -> TransactionMessage | None:
        if self.message is not None:
            return self.message
        return self.transaction.message if self.transaction else None

    @property
    def is_successful(self) -> bool:
        return self.meta is None or self.meta.err is None

    @property
    def position(self) -> Cursor:
        return Cursor(self.slot, self.transactionIndex if self.transactionIndex is not None else -1)


TransactionRecord = Union[SignatureRecord, FullTransactionRecord]

R = TypeVar("R")


class ResultPage(Struct, Generic[R]):
    """One round-trip worth of records. `next_token` of None means the results are exhausted."""

    records: list[R]

    next_token: Optional[PaginationToken] = None

    @property
    def is_last(self) -> bool:
        return self.next_token is None
