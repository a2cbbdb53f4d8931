from __future__ import annotations

import base64
import hashlib

import pytest
from algosdk import account, encoding

import minter_client
import nft_minter
from minter_client import (
    COLLECTION_CODEC,
    TOKEN_CODEC,
    UPDATE_CODEC,
    MinterError,
    collection_box_name,
    collection_box_size,
    decode_collection,
    decode_global_state,
    decode_token,
    decode_update,
    error_code_at,
    failed_pc,
    name_box_name,
    plan_box_references,
    token_box_name,
    token_box_size,
    update_box_size,
)
from nft_minter import ErrorCode


def _address() -> str:
    return account.generate_account()[1]


def _uint_entry(key: str, value: int) -> dict:
    return {"key": base64.b64encode(key.encode()).decode(), "value": {"type": 2, "uint": value, "bytes": ""}}


def _bytes_entry(key: str, value: bytes) -> dict:
    return {
        "key": base64.b64encode(key.encode()).decode(),
        "value": {"type": 1, "uint": 0, "bytes": base64.b64encode(value).decode()},
    }


def test_collection_layout_matches_contract_offsets() -> None:
    recipient, creator, collaborator = _address(), _address(), _address()
    raw = COLLECTION_CODEC.encode(
        ["ArtCollection", 100, 7, 10, recipient, creator, "ipfs://QmABC/", "art", 42, True, [collaborator], [100]]
    )

    assert len(raw) == collection_box_size("ArtCollection", "ipfs://QmABC/", "art", 1)
    count_offset = nft_minter.EDITION_COUNT_OFFSET
    assert raw[count_offset:count_offset + 8] == (7).to_bytes(8, "big")
    assert raw[nft_minter.ACTIVE_OFFSET] == 0x80


def test_decode_collection() -> None:
    recipient, creator, a, b = _address(), _address(), _address(), _address()
    raw = COLLECTION_CODEC.encode(
        ["ArtCollection", 100, 0, 10, recipient, creator, "ipfs://QmABC/", "art", 5, False, [a, b], [50, 50]]
    )

    collection = decode_collection(3, raw)

    assert collection.id == 3
    assert collection.name == "ArtCollection"
    assert collection.edition_cap == 100
    assert collection.edition_count == 0
    assert collection.royalty_recipient == recipient
    assert collection.creator == creator
    assert collection.active is False
    assert collection.collaborators == (a, b)
    assert collection.collab_splits == (50, 50)


def test_token_layout_and_absent_metadata() -> None:
    owner = _address()
    content_hash = hashlib.sha256(b"drop").digest()
    raw = TOKEN_CODEC.encode([2, content_hash, "Drop #1", "", "", owner, 9])

    assert len(raw) == token_box_size(content_hash, "Drop #1", "", "")
    token = decode_token(11, raw)
    assert token.id == 11
    assert token.collection_id == 2
    assert token.content_hash == content_hash
    assert token.metadata is None
    assert token.owner == owner
    assert token.minted_at == 9


def test_token_metadata_is_kept_when_present() -> None:
    raw = TOKEN_CODEC.encode([0, bytes(32), "t", "d", '{"trait":"gold"}', _address(), 1])
    assert decode_token(0, raw).metadata == '{"trait":"gold"}'


def test_decode_update() -> None:
    actor = _address()
    raw = UPDATE_CODEC.encode(["Renamed", 50, 5, 77, actor])

    assert len(raw) == update_box_size("Renamed")
    update = decode_update(4, raw)
    assert update.collection_id == 4
    assert update.new_name == "Renamed"
    assert update.new_edition_cap == 50
    assert update.new_royalty_percent == 5
    assert update.updated_at == 77
    assert update.updated_by == actor


def test_decode_global_state() -> None:
    authority = _address()

    config = decode_global_state(
        [
            _uint_entry("next_collection_id", 2),
            _uint_entry("next_token_id", 9),
            _uint_entry("max_collections", 1000),
            _uint_entry("mint_fee", 500),
            _uint_entry("paused", 1),
            _bytes_entry("authority", encoding.decode_address(authority)),
        ]
    )

    assert config.next_collection_id == 2
    assert config.next_token_id == 9
    assert config.mint_fee == 500
    assert config.paused is True
    assert config.authority == authority


def test_decode_global_state_without_authority() -> None:
    config = decode_global_state([_bytes_entry("authority", b""), _uint_entry("paused", 0)])
    assert config.authority is None
    assert config.paused is False
    assert config.max_collections == nft_minter.DEFAULT_MAX_COLLECTIONS
    assert config.mint_fee == nft_minter.DEFAULT_MINT_FEE


def test_box_names() -> None:
    assert collection_box_name(1) == b"c" + (1).to_bytes(8, "big")
    assert token_box_name(258) == b"t" + (258).to_bytes(8, "big")
    assert name_box_name("ArtCollection") == b"n" + hashlib.sha256(b"ArtCollection").digest()
    assert len(name_box_name("x" * 100)) <= 64


def test_plan_box_references_small_operation() -> None:
    plan = plan_box_references({b"c1": 300, b"n1": 8})
    assert plan == [[(0, b"c1"), (0, b"n1")]]


def test_plan_box_references_pads_io_quota() -> None:
    plan = plan_box_references({b"c1": 3000})
    assert plan == [[(0, b"c1"), (0, b""), (0, b"")]]


def test_plan_box_references_spreads_over_transactions() -> None:
    boxes = {f"t{i}".encode(): 200 for i in range(10)}
    plan = plan_box_references(boxes)

    assert [len(chunk) for chunk in plan] == [8, 2]
    assert all(len(chunk) <= minter_client.MAX_REFERENCES_PER_TXN for chunk in plan)


def test_plan_box_references_without_boxes() -> None:
    assert plan_box_references({}) == [[]]


def test_error_code_at_reads_failing_line() -> None:
    teal = [
        "txn Sender",
        "global CreatorAddress",
        "==",
        "assert // ERR:100 NOT_AUTHORIZED",
        "int 1",
    ]
    assert error_code_at(teal, 3) == ErrorCode.NOT_AUTHORIZED


def test_error_code_at_falls_back_to_previous_line() -> None:
    teal = ["assert // ERR:111 PAUSED", "int 1"]
    assert error_code_at(teal, 1) == ErrorCode.PAUSED


def test_error_code_at_untagged_line() -> None:
    assert error_code_at(["int 0", "return"], 1) is None
    assert error_code_at([], 0) is None


class _LogicFailure(Exception):
    def __init__(self, pc: int) -> None:
        super().__init__("logic eval error")
        self.pc = pc


def test_failed_pc() -> None:
    assert failed_pc(_LogicFailure(17)) == 17
    assert failed_pc(Exception("transaction ABC: logic eval error: assert failed pc=204. Details: ...")) == 204
    assert failed_pc(Exception("overspend")) is None


def test_minter_error_carries_code() -> None:
    error = MinterError(ErrorCode.EDITION_CAP_EXCEEDED, "mint_nft")

    assert error.code is ErrorCode.EDITION_CAP_EXCEEDED
    assert str(error) == "EDITION_CAP_EXCEEDED (109): mint_nft"
    with pytest.raises(MinterError):
        raise error


def test_logic_errors_are_beakers() -> None:
    from beaker.client import LogicException

    assert minter_client.LogicException is LogicException


def test_batch_budget_grows_with_every_item() -> None:
    calls = [minter_client.batch_budget_calls(size) for size in range(1, nft_minter.MAX_BATCH_SIZE + 1)]

    assert calls == sorted(calls)
    assert calls[0] >= 1
    for size, extra in enumerate(calls, start=1):
        pooled = minter_client.APP_CALL_BUDGET * (1 + extra)
        assert pooled >= minter_client.BATCH_BASE_COST + size * minter_client.BATCH_ITEM_COST


def test_batch_args_size_counts_encoded_arrays() -> None:
    hashes = [bytes(32)] * 10
    titles = ["t" * 100] * 10
    descriptions = ["d" * 100] * 10
    metadatas = [""] * 10

    # selector + collection id, then each array: length prefix, offsets, per-item length prefix
    expected = 4 + 8 + (2 + 20 + 10 * 34) + 2 * (2 + 20 + 10 * 102) + (2 + 20 + 10 * 2)
    assert minter_client.batch_args_size(hashes, titles, descriptions, metadatas) == expected


def test_oversized_batch_is_rejected_before_submitting() -> None:
    with pytest.raises(MinterError) as excinfo:
        minter_client.check_batch_args(
            [bytes(32)] * 10,
            ["t" * 100] * 10,
            ["d" * 100] * 10,
            [""] * 10,
        )

    assert excinfo.value.code is ErrorCode.INVALID_BATCH_SIZE
    assert "2048" in str(excinfo.value)


def test_typical_batch_fits_argument_limit() -> None:
    minter_client.check_batch_args(
        [hashlib.sha256(str(i).encode()).digest() for i in range(10)],
        [f"Drop #{i}" for i in range(10)],
        [""] * 10,
        [""] * 10,
    )
