from __future__ import annotations

import re

import pytest

import nft_minter
from nft_minter import ErrorCode


@pytest.fixture(scope="module")
def app_spec():
    return nft_minter.app.build()


def _signature(app_spec, name: str) -> str:
    return app_spec.contract.get_method_by_name(name).get_signature()


def _tag_position(teal: str, code: ErrorCode) -> int:
    position = teal.find(f"ERR:{int(code)} ")
    assert position >= 0, f"{code.name} never raised"
    return position


def test_abi_signatures(app_spec) -> None:
    collection = "(string,uint64,uint64,uint64,address,address,string,string,uint64,bool,address[],uint64[])"
    token = "(uint64,byte[],string,string,string,address,uint64)"

    assert _signature(app_spec, "set_authority") == "set_authority(address)bool"
    assert _signature(app_spec, "set_mint_fee") == "set_mint_fee(uint64)bool"
    assert _signature(app_spec, "set_max_collections") == "set_max_collections(uint64)bool"
    assert _signature(app_spec, "pause") == "pause()bool"
    assert _signature(app_spec, "unpause") == "unpause()bool"
    assert _signature(app_spec, "create_collection") == (
        "create_collection(string,uint64,uint64,address,string,string,address[],uint64[],pay)uint64"
    )
    assert _signature(app_spec, "mint_nft") == "mint_nft(uint64,byte[],string,string,string)uint64"
    assert _signature(app_spec, "batch_mint_nfts") == (
        "batch_mint_nfts(uint64,byte[][],string[],string[],string[])(uint64,uint64)"
    )
    assert _signature(app_spec, "update_collection") == "update_collection(uint64,string,uint64,uint64)bool"
    assert _signature(app_spec, "set_collection_status") == "set_collection_status(uint64,bool)bool"
    assert _signature(app_spec, "extend_box_quota") == "extend_box_quota()void"
    assert _signature(app_spec, "get_collection_count") == "get_collection_count()uint64"
    assert _signature(app_spec, "get_token_count") == "get_token_count()uint64"
    assert _signature(app_spec, "collection_exists") == "collection_exists(string)bool"
    assert _signature(app_spec, "get_collection") == f"get_collection(uint64){collection}"
    assert _signature(app_spec, "get_token") == f"get_token(uint64){token}"


def test_record_type_strings() -> None:
    assert str(nft_minter.CollectionRecord().type_spec()) == (
        "(string,uint64,uint64,uint64,address,address,string,string,uint64,bool,address[],uint64[])"
    )
    assert str(nft_minter.TokenRecord().type_spec()) == "(uint64,byte[],string,string,string,address,uint64)"
    assert str(nft_minter.CollectionUpdateRecord().type_spec()) == "(string,uint64,uint64,uint64,address)"


def test_every_rejection_is_tagged_with_a_known_code(app_spec) -> None:
    teal = app_spec.approval_program
    raised = {ErrorCode(int(code)) for code in re.findall(r"ERR:(\d+)", teal)}

    reserved = {
        ErrorCode.INVALID_TIMESTAMP,
        ErrorCode.BATCH_LIMIT_EXCEEDED,
        ErrorCode.COLLECTION_UPDATE_NOT_ALLOWED,
    }
    assert raised == set(ErrorCode) - reserved


def test_error_tags_carry_code_names() -> None:
    assert nft_minter.error_comment(ErrorCode.PAUSED) == "ERR:111 PAUSED"
    assert nft_minter.error_comment(ErrorCode.TOKEN_NOT_FOUND) == "ERR:126 TOKEN_NOT_FOUND"


def test_error_codes_are_stable() -> None:
    assert ErrorCode.NOT_AUTHORIZED == 100
    assert ErrorCode.COLLECTION_NOT_FOUND == 108
    assert ErrorCode.INVALID_BATCH_SIZE == 124
    assert ErrorCode.COLLECTION_UPDATE_NOT_ALLOWED == 125
    assert [int(code) for code in ErrorCode] == list(range(100, 127))


def test_create_collection_checks_run_in_order(app_spec) -> None:
    teal = app_spec.approval_program
    ordered = [
        ErrorCode.MAX_COLLECTIONS_EXCEEDED,
        ErrorCode.INVALID_ROYALTY_RECIPIENT,
        ErrorCode.INVALID_BASE_URI,
        ErrorCode.INVALID_COLLECTIBLE_TYPE,
        ErrorCode.INVALID_COLLABORATORS,
        ErrorCode.INVALID_COLLAB_SPLIT,
        ErrorCode.INVALID_MINT_FEE,
    ]
    positions = [_tag_position(teal, code) for code in ordered]
    assert positions == sorted(positions)


def test_global_state_schema(app_spec) -> None:
    schema = app_spec.global_state_schema
    assert schema.num_uints == 5
    assert schema.num_byte_slices == 1


def test_limits() -> None:
    assert nft_minter.MAX_BATCH_SIZE == 10
    assert nft_minter.MAX_COLLABORATORS == 10
    assert nft_minter.COLLECTIBLE_TYPES == ("art", "music", "collectible")
    assert nft_minter.DEFAULT_MAX_COLLECTIONS == 1000
    assert nft_minter.DEFAULT_MINT_FEE == 500
