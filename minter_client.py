"""
Python client for the NFT Minter registry contract.

Wraps Beaker's ApplicationClient with typed calls and typed records:
  - mutations are submitted as atomic groups and rejected calls raise
    MinterError carrying the contract's ErrorCode
  - queries read global state and boxes straight from algod, without
    sending a transaction
"""

import base64
import hashlib
import logging
import math
import re
import secrets
from dataclasses import dataclass
from typing import Optional, Sequence

from algosdk import abi as sdk_abi
from algosdk import encoding
from algosdk.atomic_transaction_composer import (
    AtomicTransactionComposer,
    TransactionSigner,
    TransactionWithSigner,
)
from algosdk.error import AlgodHTTPError
from algosdk.source_map import SourceMap
from algosdk.transaction import PaymentTxn
from algosdk.v2client import algod
from beaker.client import ApplicationClient, LogicException

import nft_minter
from nft_minter import ErrorCode

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────
#  RECORD CODECS
# ─────────────────────────────────────────────

COLLECTION_CODEC = sdk_abi.ABIType.from_string(str(nft_minter.CollectionRecord().type_spec()))
TOKEN_CODEC      = sdk_abi.ABIType.from_string(str(nft_minter.TokenRecord().type_spec()))
UPDATE_CODEC     = sdk_abi.ABIType.from_string(str(nft_minter.CollectionUpdateRecord().type_spec()))

ZERO_ADDRESS = encoding.encode_address(bytes(32))

BOX_IO_BUDGET          = 1024   # bytes of box I/O granted per box reference
MAX_REFERENCES_PER_TXN = 8
NAME_BOX_SIZE          = 8
MAX_APP_ARGS_SIZE      = 2048   # total application argument bytes per transaction
APP_CALL_BUDGET        = 700    # opcodes each app call adds to the group's pool
BATCH_BASE_COST        = 1400   # upper bound on a batch call's fixed opcode cost
BATCH_ITEM_COST        = 700    # upper bound on the opcode cost of one batch item
RECORD_BUDGET_CALLS    = 1      # extra app calls for create, update and single mint

BATCH_ARRAY_CODECS = [
    sdk_abi.ABIType.from_string(type_str) for type_str in ("byte[][]", "string[]", "string[]", "string[]")
]


@dataclass(frozen=True)
class GlobalConfig:
    next_collection_id: int
    next_token_id: int
    max_collections: int
    mint_fee: int
    paused: bool
    authority: Optional[str]


@dataclass(frozen=True)
class Collection:
    id: int
    name: str
    edition_cap: int
    edition_count: int
    royalty_percent: int
    royalty_recipient: str
    creator: str
    base_uri: str
    collectible_type: str
    timestamp: int
    active: bool
    collaborators: tuple[str, ...]
    collab_splits: tuple[int, ...]


@dataclass(frozen=True)
class Token:
    id: int
    collection_id: int
    content_hash: bytes
    title: str
    description: str
    metadata: Optional[str]
    owner: str
    minted_at: int


@dataclass(frozen=True)
class CollectionUpdate:
    collection_id: int
    new_name: str
    new_edition_cap: int
    new_royalty_percent: int
    updated_at: int
    updated_by: str


@dataclass(frozen=True)
class BatchMintResult:
    collection_id: int
    count: int


def decode_collection(collection_id: int, raw: bytes) -> Collection:
    (name, cap, count, royalty, recipient, creator, base_uri, kind,
     timestamp, active, collaborators, splits) = COLLECTION_CODEC.decode(raw)
    return Collection(
        id=collection_id,
        name=name,
        edition_cap=cap,
        edition_count=count,
        royalty_percent=royalty,
        royalty_recipient=recipient,
        creator=creator,
        base_uri=base_uri,
        collectible_type=kind,
        timestamp=timestamp,
        active=active,
        collaborators=tuple(collaborators),
        collab_splits=tuple(splits),
    )


def decode_token(token_id: int, raw: bytes) -> Token:
    collection_id, content_hash, title, description, metadata, owner, minted_at = TOKEN_CODEC.decode(raw)
    return Token(
        id=token_id,
        collection_id=collection_id,
        content_hash=bytes(content_hash),
        title=title,
        description=description,
        metadata=metadata or None,
        owner=owner,
        minted_at=minted_at,
    )


def decode_update(collection_id: int, raw: bytes) -> CollectionUpdate:
    new_name, new_cap, new_royalty, updated_at, updated_by = UPDATE_CODEC.decode(raw)
    return CollectionUpdate(
        collection_id=collection_id,
        new_name=new_name,
        new_edition_cap=new_cap,
        new_royalty_percent=new_royalty,
        updated_at=updated_at,
        updated_by=updated_by,
    )


def decode_global_state(entries: Sequence[dict]) -> GlobalConfig:
    """Turns algod's global-state key/value list into a GlobalConfig."""
    values: dict[str, object] = {}
    for entry in entries:
        key = base64.b64decode(entry["key"]).decode()
        value = entry["value"]
        if value["type"] == 1:
            values[key] = base64.b64decode(value.get("bytes", ""))
        else:
            values[key] = value.get("uint", 0)

    authority = values.get("authority", b"")
    return GlobalConfig(
        next_collection_id=values.get("next_collection_id", 0),
        next_token_id=values.get("next_token_id", 0),
        max_collections=values.get("max_collections", nft_minter.DEFAULT_MAX_COLLECTIONS),
        mint_fee=values.get("mint_fee", nft_minter.DEFAULT_MINT_FEE),
        paused=bool(values.get("paused", 0)),
        authority=encoding.encode_address(authority) if len(authority) == 32 else None,
    )


# ─────────────────────────────────────────────
#  BOX NAMES & SIZES
# ─────────────────────────────────────────────

def _itob(value: int) -> bytes:
    return value.to_bytes(8, "big")


def collection_box_name(collection_id: int) -> bytes:
    return nft_minter.COLLECTION_BOX_PREFIX + _itob(collection_id)


def token_box_name(token_id: int) -> bytes:
    return nft_minter.TOKEN_BOX_PREFIX + _itob(token_id)


def update_box_name(collection_id: int) -> bytes:
    return nft_minter.UPDATE_BOX_PREFIX + _itob(collection_id)


def name_box_name(name: str) -> bytes:
    return nft_minter.NAME_BOX_PREFIX + hashlib.sha256(name.encode()).digest()


def collection_box_size(name: str, base_uri: str, collectible_type: str, collaborator_count: int) -> int:
    return (
        nft_minter.COLLECTION_HEAD_SIZE
        + 2 + len(name.encode())
        + 2 + len(base_uri.encode())
        + 2 + len(collectible_type.encode())
        + 2 + 32 * collaborator_count
        + 2 + 8 * collaborator_count
    )


def token_box_size(content_hash: bytes, title: str, description: str, metadata: str) -> int:
    return (
        nft_minter.TOKEN_HEAD_SIZE
        + 2 + len(content_hash)
        + 2 + len(title.encode())
        + 2 + len(description.encode())
        + 2 + len(metadata.encode())
    )


def update_box_size(new_name: str) -> int:
    return nft_minter.UPDATE_HEAD_SIZE + 2 + len(new_name.encode())


def plan_box_references(boxes: dict[bytes, int]) -> list[list[tuple[int, bytes]]]:
    """
    Spreads the box references an operation needs over transactions.

    Every touched box is referenced by name; empty-name references are added
    until the group's I/O quota covers the total bytes touched. Each inner
    list fits one transaction.
    """
    references = [(0, name) for name in boxes]
    needed = math.ceil(sum(boxes.values()) / BOX_IO_BUDGET)
    references.extend((0, b"") for _ in range(needed - len(references)))
    chunks = [
        references[start:start + MAX_REFERENCES_PER_TXN]
        for start in range(0, len(references), MAX_REFERENCES_PER_TXN)
    ]
    return chunks or [[]]


# ─────────────────────────────────────────────
#  ERRORS
# ─────────────────────────────────────────────

_ERROR_TAG = re.compile(r"ERR:(\d+)")
_FAILED_PC = re.compile(r"pc=(\d+)")


class MinterError(Exception):
    """A registry call rejected by the contract with a known ErrorCode."""

    def __init__(self, code: ErrorCode, detail: str = "") -> None:
        message = f"{code.name} ({int(code)})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.code = code


def failed_pc(exc: Exception) -> Optional[int]:
    pc = getattr(exc, "pc", None)
    if isinstance(pc, int):
        return pc
    match = _FAILED_PC.search(str(exc))
    return int(match.group(1)) if match else None


def error_code_at(teal_lines: Sequence[str], line_no: int) -> Optional[ErrorCode]:
    """Reads the ErrorCode tag on a failing TEAL line, or on the line just above it."""
    for candidate in (line_no, line_no - 1):
        if 0 <= candidate < len(teal_lines):
            match = _ERROR_TAG.search(teal_lines[candidate])
            if match:
                return ErrorCode(int(match.group(1)))
    return None


# ─────────────────────────────────────────────
#  BATCH LIMITS
# ─────────────────────────────────────────────

def batch_budget_calls(size: int) -> int:
    """Extra app calls whose pooled opcode budget covers a batch of `size` items."""
    cost = BATCH_BASE_COST + size * BATCH_ITEM_COST
    return max(0, math.ceil((cost - APP_CALL_BUDGET) / APP_CALL_BUDGET))


def batch_args_size(
    content_hashes: Sequence[bytes],
    titles: Sequence[str],
    descriptions: Sequence[str],
    metadatas: Sequence[str],
) -> int:
    """Application argument bytes of a batch_mint_nfts call: selector, collection id, then the four arrays."""
    arrays = (list(content_hashes), list(titles), list(descriptions), list(metadatas))
    return 4 + 8 + sum(len(codec.encode(values)) for codec, values in zip(BATCH_ARRAY_CODECS, arrays))


def check_batch_args(
    content_hashes: Sequence[bytes],
    titles: Sequence[str],
    descriptions: Sequence[str],
    metadatas: Sequence[str],
) -> None:
    size = batch_args_size(content_hashes, titles, descriptions, metadatas)
    if size > MAX_APP_ARGS_SIZE:
        raise MinterError(
            ErrorCode.INVALID_BATCH_SIZE,
            f"arguments encode to {size} bytes, a transaction carries at most {MAX_APP_ARGS_SIZE}",
        )


# ─────────────────────────────────────────────
#  CLIENT
# ─────────────────────────────────────────────

class MinterClient:
    def __init__(
        self,
        algod_client: algod.AlgodClient,
        signer: Optional[TransactionSigner],
        sender: Optional[str],
        app_id: int = 0,
    ) -> None:
        self._algod  = algod_client
        self._signer = signer
        self.sender  = sender
        self._app    = ApplicationClient(algod_client, nft_minter.app, app_id=app_id, signer=signer, sender=sender)
        self._teal_lines: Optional[list[str]] = None
        self._source_map: Optional[SourceMap] = None

    @property
    def app_id(self) -> int:
        return self._app.app_id

    @property
    def app_address(self) -> str:
        return self._app.app_addr

    def as_caller(self, signer: TransactionSigner, sender: str) -> "MinterClient":
        """Same application, different signing account."""
        other = MinterClient(self._algod, signer, sender, app_id=self.app_id)
        other._teal_lines = self._teal_lines
        other._source_map = self._source_map
        return other

    # ── lifecycle ──────────────────────────────

    def deploy(self) -> int:
        app_id, app_address, tx_id = self._app.create()
        logger.info("created application %s (%s) in %s", app_id, app_address, tx_id)
        return app_id

    def fund(self, amount: int) -> None:
        """Funds the application account; box storage minimum balance is drawn from it."""
        self._app.fund(amount)
        logger.info("funded application %s with %s microALGO", self.app_id, amount)

    # ── authority configuration ────────────────

    def set_authority(self, principal: str) -> bool:
        return self._call("set_authority", {}, principal=principal)

    def set_mint_fee(self, fee: int) -> bool:
        return self._call("set_mint_fee", {}, fee=fee)

    def set_max_collections(self, limit: int) -> bool:
        return self._call("set_max_collections", {}, limit=limit)

    def pause(self) -> bool:
        return self._call("pause", {})

    def unpause(self) -> bool:
        return self._call("unpause", {})

    # ── collections ────────────────────────────

    def create_collection(
        self,
        name: str,
        edition_cap: int,
        royalty_percent: int,
        royalty_recipient: str,
        base_uri: str,
        collectible_type: str,
        collaborators: Sequence[str] = (),
        collab_splits: Sequence[int] = (),
    ) -> int:
        """
        Creates a collection owned by this client's account and returns its id.

        The mint fee is paid in the same atomic group: a payment of the
        configured fee from the caller to the authority. If the contract
        rejects the call, the payment is rejected with it.
        """
        config = self.get_config()
        sp = self._algod.suggested_params()
        fee_payment = TransactionWithSigner(
            txn=PaymentTxn(
                sender=self.sender,
                sp=sp,
                receiver=config.authority or ZERO_ADDRESS,
                amt=config.mint_fee,
            ),
            signer=self._signer,
        )
        boxes = {
            collection_box_name(config.next_collection_id): collection_box_size(
                name, base_uri, collectible_type, len(collaborators)
            ),
            name_box_name(name): NAME_BOX_SIZE,
        }
        return self._call(
            "create_collection",
            boxes,
            budget_calls=RECORD_BUDGET_CALLS,
            name=name,
            edition_cap=edition_cap,
            royalty_percent=royalty_percent,
            royalty_recipient=royalty_recipient,
            base_uri=base_uri,
            collectible_type=collectible_type,
            collaborators=list(collaborators),
            collab_splits=list(collab_splits),
            fee_payment=fee_payment,
        )

    def update_collection(
        self,
        collection_id: int,
        new_name: str,
        new_edition_cap: int,
        new_royalty_percent: int,
    ) -> bool:
        current = self.get_collection(collection_id)
        boxes = {collection_box_name(collection_id): 0}
        if current is not None:
            old_size = collection_box_size(
                current.name, current.base_uri, current.collectible_type, len(current.collaborators)
            )
            new_size = collection_box_size(
                new_name, current.base_uri, current.collectible_type, len(current.collaborators)
            )
            boxes[collection_box_name(collection_id)] = old_size + new_size
            boxes[name_box_name(current.name)] = NAME_BOX_SIZE
        boxes[name_box_name(new_name)] = NAME_BOX_SIZE
        previous = self.get_collection_update(collection_id)
        boxes[update_box_name(collection_id)] = update_box_size(new_name) + (
            update_box_size(previous.new_name) if previous is not None else 0
        )
        return self._call(
            "update_collection",
            boxes,
            budget_calls=RECORD_BUDGET_CALLS,
            collection_id=collection_id,
            new_name=new_name,
            new_edition_cap=new_edition_cap,
            new_royalty_percent=new_royalty_percent,
        )

    def set_collection_status(self, collection_id: int, active: bool) -> bool:
        return self._call(
            "set_collection_status",
            {collection_box_name(collection_id): self._collection_size(collection_id)},
            collection_id=collection_id,
            active=active,
        )

    # ── minting ────────────────────────────────

    def mint_nft(
        self,
        collection_id: int,
        content_hash: bytes,
        title: str,
        description: str = "",
        metadata: Optional[str] = None,
    ) -> int:
        """Mints one token into a collection owned by this account and returns the token id."""
        metadata = metadata or ""
        config = self.get_config()
        boxes = {
            collection_box_name(collection_id): self._collection_size(collection_id),
            token_box_name(config.next_token_id): token_box_size(content_hash, title, description, metadata),
        }
        return self._call(
            "mint_nft",
            boxes,
            budget_calls=RECORD_BUDGET_CALLS,
            collection_id=collection_id,
            content_hash=content_hash,
            title=title,
            description=description,
            metadata=metadata,
        )

    def batch_mint_nfts(
        self,
        collection_id: int,
        content_hashes: Sequence[bytes],
        titles: Sequence[str],
        descriptions: Sequence[str],
        metadatas: Sequence[Optional[str]],
    ) -> BatchMintResult:
        """
        Mints every item or none of them. Lists are matched by position.

        Raises MinterError(INVALID_BATCH_SIZE) before submitting when the
        arguments exceed the per-transaction argument size.
        """
        metadatas = [metadata or "" for metadata in metadatas]
        check_batch_args(content_hashes, titles, descriptions, metadatas)
        config = self.get_config()
        boxes = {collection_box_name(collection_id): self._collection_size(collection_id)}
        for offset, item in enumerate(zip(content_hashes, titles, descriptions, metadatas)):
            boxes[token_box_name(config.next_token_id + offset)] = token_box_size(*item)
        collection, count = self._call(
            "batch_mint_nfts",
            boxes,
            budget_calls=batch_budget_calls(len(content_hashes)),
            collection_id=collection_id,
            content_hashes=list(content_hashes),
            titles=list(titles),
            descriptions=list(descriptions),
            metadatas=metadatas,
        )
        return BatchMintResult(collection_id=collection, count=count)

    # ── queries ────────────────────────────────

    def get_config(self) -> GlobalConfig:
        info = self._algod.application_info(self.app_id)
        return decode_global_state(info["params"].get("global-state", []))

    def collection_count(self) -> int:
        return self.get_config().next_collection_id

    def token_count(self) -> int:
        return self.get_config().next_token_id

    def collection_exists(self, name: str) -> bool:
        return self._read_box(name_box_name(name)) is not None

    def get_collection(self, collection_id: int) -> Optional[Collection]:
        raw = self._read_box(collection_box_name(collection_id))
        return decode_collection(collection_id, raw) if raw is not None else None

    def get_token(self, token_id: int) -> Optional[Token]:
        raw = self._read_box(token_box_name(token_id))
        return decode_token(token_id, raw) if raw is not None else None

    def get_collection_update(self, collection_id: int) -> Optional[CollectionUpdate]:
        raw = self._read_box(update_box_name(collection_id))
        return decode_update(collection_id, raw) if raw is not None else None

    # ── internals ──────────────────────────────

    def _read_box(self, name: bytes) -> Optional[bytes]:
        try:
            response = self._algod.application_box_by_name(self.app_id, name)
        except AlgodHTTPError as exc:
            if exc.code == 404:
                return None
            raise
        return base64.b64decode(response["value"])

    def _collection_size(self, collection_id: int) -> int:
        raw = self._read_box(collection_box_name(collection_id))
        return len(raw) if raw is not None else 0

    def _call(self, method: str, boxes: dict[bytes, int], budget_calls: int = 0, **kwargs):
        references = plan_box_references(boxes)
        atc = AtomicTransactionComposer()
        for index in range(max(len(references) - 1, budget_calls)):
            self._app.add_method_call(
                atc,
                "extend_box_quota",
                boxes=references[index + 1] if index + 1 < len(references) else [],
                note=f"quota:{index}:{secrets.token_hex(4)}".encode(),
            )

        logger.debug("calling %s on application %s", method, self.app_id)
        try:
            result = self._app.call(method, boxes=references[0], atc=atc, **kwargs)
        except (LogicException, AlgodHTTPError) as exc:
            code = self._error_code(exc)
            if code is None:
                raise
            logger.info("%s rejected with %s (%s)", method, code.name, int(code))
            raise MinterError(code, method) from exc
        return result.return_value

    def _error_code(self, exc: Exception) -> Optional[ErrorCode]:
        pc = failed_pc(exc)
        if pc is None:
            return None
        if self._source_map is None:
            teal = nft_minter.app.build().approval_program
            compiled = self._algod.compile(teal, source_map=True)
            self._teal_lines = teal.split("\n")
            self._source_map = SourceMap(compiled["sourcemap"])
        line_no = self._source_map.get_line_for_pc(pc)
        if line_no is None:
            return None
        return error_code_at(self._teal_lines, line_no)
