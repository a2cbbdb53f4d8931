from __future__ import annotations

import pytest
from algosdk.v2client import algod
from beaker import localnet

from minter_client import MinterClient

LOCALNET_ADDRESS = "http://localhost:4001"
LOCALNET_TOKEN = "a" * 64

# Box storage minimum balance for a test registry
APP_FUNDING = 20_000_000


@pytest.fixture(scope="session")
def algod_client() -> algod.AlgodClient:
    client = algod.AlgodClient(LOCALNET_TOKEN, LOCALNET_ADDRESS)
    try:
        client.status()
    except Exception as e:  # pragma: no cover
        pytest.skip(f"no localnet at {LOCALNET_ADDRESS} ({e!r}); run `algokit localnet start`")
    return client


@pytest.fixture(scope="session")
def accounts(algod_client: algod.AlgodClient) -> list[localnet.LocalAccount]:
    funded = localnet.get_accounts()
    if len(funded) < 3:  # pragma: no cover
        pytest.skip("localnet needs at least three funded accounts")
    return funded


@pytest.fixture
def authority(accounts: list[localnet.LocalAccount]) -> localnet.LocalAccount:
    return accounts[0]


@pytest.fixture
def creator(accounts: list[localnet.LocalAccount]) -> localnet.LocalAccount:
    return accounts[1]


@pytest.fixture
def outsider(accounts: list[localnet.LocalAccount]) -> localnet.LocalAccount:
    return accounts[2]


@pytest.fixture
def bare_registry(algod_client: algod.AlgodClient, authority: localnet.LocalAccount) -> MinterClient:
    """A freshly created and funded registry with no authority registered yet."""
    client = MinterClient(algod_client, authority.signer, authority.address)
    client.deploy()
    client.fund(APP_FUNDING)
    return client


@pytest.fixture
def registry(bare_registry: MinterClient, authority: localnet.LocalAccount) -> MinterClient:
    """Registry client signing as the registered authority."""
    bare_registry.set_authority(authority.address)
    return bare_registry


@pytest.fixture
def as_creator(registry: MinterClient, creator: localnet.LocalAccount) -> MinterClient:
    return registry.as_caller(creator.signer, creator.address)
