"""
╔══════════════════════════════════════════════════════════════════╗
║       NFT Minter — Deployment & Client Script                   ║
║       deploy_and_interact.py                                    ║
║                                                                  ║
║  Usage:                                                          ║
║    python deploy_and_interact.py deploy                          ║
║    python deploy_and_interact.py create-collection --name Art    ║
║    python deploy_and_interact.py mint --collection 0 --title X   ║
║    python deploy_and_interact.py collection --id 0               ║
╚══════════════════════════════════════════════════════════════════╝
"""

import argparse
import hashlib
import json
import os
from typing import Optional

from algosdk import account, mnemonic
from algosdk.atomic_transaction_composer import AccountTransactionSigner
from algosdk.v2client import algod

from minter_client import MinterClient, MinterError

# ─────────────────────────────────────────────
#  CONFIGURATION
# ─────────────────────────────────────────────

# AlgoKit localnet defaults; point at testnet with ALGOD_ADDRESS / ALGOD_TOKEN
ALGOD_ADDRESS = os.environ.get("ALGOD_ADDRESS", "http://localhost:4001")
ALGOD_TOKEN   = os.environ.get("ALGOD_TOKEN", "a" * 64)

# App ID after first deploy (update this once you deploy)
APP_ID = int(os.environ.get("MINTER_APP_ID", "0"))

# Box storage minimum balance for the app account after deploy
INITIAL_APP_FUNDING = 10_000_000


# ─────────────────────────────────────────────
#  CLIENTS
# ─────────────────────────────────────────────
def get_algod() -> algod.AlgodClient:
    return algod.AlgodClient(ALGOD_TOKEN, ALGOD_ADDRESS)


def load_account(env_var: str = "MINTER_MNEMONIC") -> tuple[str, str]:
    """
    Load an Algorand account from a mnemonic stored in env variable.
    Returns (private_key, address)
    """
    mn = os.environ.get(env_var)
    if not mn:
        private_key, address = account.generate_account()
        print(f"\n⚠  No {env_var} set. Generated fresh account:")
        print(f"   Address  : {address}")
        print(f"   Mnemonic : {mnemonic.from_private_key(private_key)}")
        print(f"\n   Fund this address, then set: export {env_var}='<your mnemonic>'\n")
        return private_key, address
    private_key = mnemonic.to_private_key(mn)
    address     = account.address_from_private_key(private_key)
    return private_key, address


def get_minter(private_key: str, address: str, app_id: int = APP_ID) -> MinterClient:
    return MinterClient(get_algod(), AccountTransactionSigner(private_key), address, app_id=app_id)


def get_reader(app_id: int = APP_ID) -> MinterClient:
    """Client for read-only queries; no account is needed to read state and boxes."""
    return MinterClient(get_algod(), None, None, app_id=app_id)


# ─────────────────────────────────────────────
#  DEPLOY
# ─────────────────────────────────────────────
def deploy(private_key: str, address: str, authority: Optional[str] = None) -> int:
    """Create the registry, fund its box storage and register the authority."""
    minter = get_minter(private_key, address, app_id=0)

    print("🔨 Compiling and creating NFT Minter...")
    app_id = minter.deploy()
    print(f"✅ Deployed! App ID: {app_id}")
    print(f"   App address: {minter.app_address}")

    minter.fund(INITIAL_APP_FUNDING)
    print(f"   Funded with {INITIAL_APP_FUNDING / 1_000_000} ALGO for box storage")

    minter.set_authority(authority or address)
    print(f"   Authority: {authority or address}")
    print(f"   Set: export MINTER_APP_ID={app_id}")
    return app_id


# ─────────────────────────────────────────────
#  AUTHORITY CONFIGURATION
# ─────────────────────────────────────────────
def configure(private_key: str, address: str, cmd: str, value: Optional[int] = None) -> None:
    minter = get_minter(private_key, address)
    if cmd == "set-fee":
        minter.set_mint_fee(value)
        print(f"✅ Mint fee set to {value} microALGO")
    elif cmd == "set-max":
        minter.set_max_collections(value)
        print(f"✅ Collection cap set to {value}")
    elif cmd == "pause":
        minter.pause()
        print("⏸  Registry paused")
    elif cmd == "unpause":
        minter.unpause()
        print("▶  Registry resumed")


def set_authority(private_key: str, address: str, principal: str) -> None:
    get_minter(private_key, address).set_authority(principal)
    print(f"✅ Authority registered: {principal}")


# ─────────────────────────────────────────────
#  COLLECTIONS
# ─────────────────────────────────────────────
def create_collection(
    private_key: str,
    address: str,
    name: str,
    edition_cap: int,
    royalty_percent: int,
    royalty_recipient: str,
    base_uri: str,
    collectible_type: str,
    collaborators: list[dict],
) -> int:
    """
    Register a collection and pay the mint fee to the authority.

    Args:
        collaborators: List of dicts with keys:
                       - address (str): Algorand address
                       - split (int): share of royalty in percent; all splits sum to 100

    Example:
        collaborators = [
            {"address": "ABC...", "split": 60},
            {"address": "DEF...", "split": 40},
        ]
    """
    minter = get_minter(private_key, address)
    fee = minter.get_config().mint_fee

    print(f"🎨 Creating collection '{name}' (cap {edition_cap}, royalty {royalty_percent}%)...")
    print(f"   Mint fee: {fee} microALGO")
    collection_id = minter.create_collection(
        name=name,
        edition_cap=edition_cap,
        royalty_percent=royalty_percent,
        royalty_recipient=royalty_recipient,
        base_uri=base_uri,
        collectible_type=collectible_type,
        collaborators=[c["address"] for c in collaborators],
        collab_splits=[int(c["split"]) for c in collaborators],
    )
    print(f"✅ Created! Collection ID: {collection_id}")
    return collection_id


def update_collection(
    private_key: str,
    address: str,
    collection_id: int,
    name: str,
    edition_cap: int,
    royalty_percent: int,
) -> None:
    minter = get_minter(private_key, address)
    print(f"✏️  Updating collection {collection_id}...")
    minter.update_collection(collection_id, name, edition_cap, royalty_percent)
    print(f"✅ Collection {collection_id} is now '{name}' (cap {edition_cap}, royalty {royalty_percent}%)")


def set_status(private_key: str, address: str, collection_id: int, active: bool) -> None:
    get_minter(private_key, address).set_collection_status(collection_id, active)
    print(f"✅ Collection {collection_id} {'activated' if active else 'deactivated'}")


# ─────────────────────────────────────────────
#  MINT
# ─────────────────────────────────────────────
def content_digest(content_file: Optional[str], fallback: str) -> bytes:
    """SHA-256 of the content file, or of the fallback text when no file is given."""
    if content_file:
        with open(content_file, "rb") as fh:
            return hashlib.sha256(fh.read()).digest()
    return hashlib.sha256(fallback.encode()).digest()


def mint_nft(
    private_key: str,
    address: str,
    collection_id: int,
    title: str,
    description: str,
    metadata: Optional[str],
    content_file: Optional[str] = None,
) -> int:
    """
    Mint a single token into a collection you created.

    Args:
        title:        Token title (1-100 chars)
        description:  Up to 500 chars
        metadata:     Optional metadata string (e.g. ARC-69 JSON), up to 1000 chars
        content_file: File whose SHA-256 becomes the content hash

    Returns:
        The new token id
    """
    minter = get_minter(private_key, address)
    content_hash = content_digest(content_file, title)

    print(f"🎨 Minting '{title}' into collection {collection_id}...")
    token_id = minter.mint_nft(collection_id, content_hash, title, description, metadata)
    print(f"✅ Minted! Token ID: {token_id}")
    print(f"   Content hash: {content_hash.hex()}")
    return token_id


def mint_batch(
    private_key: str,
    address: str,
    collection_id: int,
    items: list[dict],
) -> int:
    """
    Mint up to 10 tokens atomically.

    Args:
        items: List of dicts with keys title, description (optional),
               metadata (optional) and content_file (optional)

    Returns:
        Number of tokens minted
    """
    minter = get_minter(private_key, address)
    hashes = [content_digest(item.get("content_file"), item["title"]) for item in items]

    print(f"📦 Batch minting {len(items)} tokens into collection {collection_id}...")
    result = minter.batch_mint_nfts(
        collection_id,
        hashes,
        [item["title"] for item in items],
        [item.get("description", "") for item in items],
        [item.get("metadata") for item in items],
    )
    print(f"✅ Batch complete! Minted {result.count} tokens")
    return result.count


# ─────────────────────────────────────────────
#  QUERY
# ─────────────────────────────────────────────
def query_collection(collection_id: int) -> None:
    minter = get_reader()
    collection = minter.get_collection(collection_id)
    if collection is None:
        print(f"❌ Collection {collection_id} not found")
        return

    print(f"\n📋 Collection {collection.id}: {collection.name}")
    print(f"   Type      : {collection.collectible_type}")
    print(f"   Editions  : {collection.edition_count}/{collection.edition_cap}")
    print(f"   Royalty   : {collection.royalty_percent}% → {collection.royalty_recipient}")
    print(f"   Creator   : {collection.creator}")
    print(f"   Base URI  : {collection.base_uri}")
    print(f"   Status    : {'active' if collection.active else 'inactive'}")
    print(f"   Round     : {collection.timestamp}")
    for collaborator, split in zip(collection.collaborators, collection.collab_splits):
        print(f"   Collab    : {collaborator} ({split}%)")

    update = minter.get_collection_update(collection_id)
    if update is not None:
        print(f"   Last update: round {update.updated_at} by {update.updated_by}")


def query_token(token_id: int) -> None:
    minter = get_reader()
    token = minter.get_token(token_id)
    if token is None:
        print(f"❌ Token {token_id} not found")
        return

    print(f"\n🖼  Token {token.id}: {token.title}")
    print(f"   Collection  : {token.collection_id}")
    print(f"   Owner       : {token.owner}")
    print(f"   Content hash: {token.content_hash.hex()}")
    print(f"   Minted round: {token.minted_at}")
    if token.description:
        print(f"   Description : {token.description}")
    if token.metadata is not None:
        print(f"   Metadata    : {token.metadata}")


def query_stats() -> None:
    minter = get_reader()
    config = minter.get_config()

    print("\n📊 Registry Stats")
    print(f"   Collections     : {config.next_collection_id} / {config.max_collections}")
    print(f"   Tokens minted   : {config.next_token_id}")
    print(f"   Mint fee        : {config.mint_fee} microALGO")
    print(f"   Paused          : {'yes' if config.paused else 'no'}")
    print(f"   Authority       : {config.authority or 'not set'}")


# ─────────────────────────────────────────────
#  CLI
# ─────────────────────────────────────────────
def main() -> None:
    parser = argparse.ArgumentParser(
        description="NFT Minter — collection registry CLI for Algorand",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Deploy the registry (the deployer becomes the authority)
  python deploy_and_interact.py deploy

  # Configure
  python deploy_and_interact.py set-fee --value 1000
  python deploy_and_interact.py set-max --value 500
  python deploy_and_interact.py pause

  # Create a collection with two collaborators
  python deploy_and_interact.py create-collection \\
      --name "ArtCollection" \\
      --cap 100 \\
      --royalty 10 \\
      --recipient ROYALTY_ADDRESS \\
      --base-uri "ipfs://QmABC.../" \\
      --type art \\
      --collaborators '[{"address":"ABC...","split":50},{"address":"DEF...","split":50}]'

  # Mint
  python deploy_and_interact.py mint --collection 0 --title "Drop #1" --file art.png

  # Batch mint (JSON)
  python deploy_and_interact.py batch-mint --collection 0 \\
      --items '[{"title":"Drop #2"},{"title":"Drop #3","metadata":"{}"}]'

  # Rename / re-cap
  python deploy_and_interact.py update-collection --id 0 --name "ArtCollection II" --cap 200 --royalty 12

  # Query
  python deploy_and_interact.py collection --id 0
  python deploy_and_interact.py token --id 0
  python deploy_and_interact.py stats
"""
    )

    sub = parser.add_subparsers(dest="cmd")

    # deploy
    p_deploy = sub.add_parser("deploy", help="Deploy the registry contract")
    p_deploy.add_argument("--authority", default=None, help="Authority address (default: deployer)")

    # authority configuration
    p_auth = sub.add_parser("set-authority", help="Register the authority (first caller wins)")
    p_auth.add_argument("--address", required=True)

    p_fee = sub.add_parser("set-fee", help="Set the collection mint fee (authority only)")
    p_fee.add_argument("--value", type=int, required=True, help="Fee in microALGO")

    p_max = sub.add_parser("set-max", help="Set the collection cap (authority only)")
    p_max.add_argument("--value", type=int, required=True)

    sub.add_parser("pause", help="Pause the registry (authority only)")
    sub.add_parser("unpause", help="Resume the registry (authority only)")

    # create-collection
    p_create = sub.add_parser("create-collection", help="Create a collection")
    p_create.add_argument("--name",          required=True)
    p_create.add_argument("--cap",           type=int, default=100)
    p_create.add_argument("--royalty",       type=int, default=10)
    p_create.add_argument("--recipient",     required=True, help="Royalty recipient (not yourself)")
    p_create.add_argument("--base-uri",      required=True)
    p_create.add_argument("--type",          default="art", choices=["art", "music", "collectible"])
    p_create.add_argument("--collaborators", default="[]", help="JSON array of {address, split}")

    # update-collection
    p_update = sub.add_parser("update-collection", help="Rename / re-cap / re-royalty a collection")
    p_update.add_argument("--id",      type=int, required=True)
    p_update.add_argument("--name",    required=True)
    p_update.add_argument("--cap",     type=int, required=True)
    p_update.add_argument("--royalty", type=int, required=True)

    # set-status
    p_status = sub.add_parser("set-status", help="Activate or deactivate a collection")
    p_status.add_argument("--id", type=int, required=True)
    p_status.add_argument("--active", choices=["yes", "no"], required=True)

    # mint
    p_mint = sub.add_parser("mint", help="Mint a token")
    p_mint.add_argument("--collection",  type=int, required=True)
    p_mint.add_argument("--title",       required=True)
    p_mint.add_argument("--description", default="")
    p_mint.add_argument("--metadata",    default=None)
    p_mint.add_argument("--file",        default=None, help="Content file to hash")

    # batch-mint
    p_batch = sub.add_parser("batch-mint", help="Mint up to 10 tokens atomically")
    p_batch.add_argument("--collection", type=int, required=True)
    p_batch.add_argument("--items",      required=True, help="JSON array of token entries")

    # queries
    p_col = sub.add_parser("collection", help="Query a collection")
    p_col.add_argument("--id", type=int, required=True)

    p_tok = sub.add_parser("token", help="Query a token")
    p_tok.add_argument("--id", type=int, required=True)

    sub.add_parser("stats", help="View registry configuration and counters")

    args = parser.parse_args()

    if not args.cmd:
        parser.print_help()
        return

    if args.cmd == "collection":
        query_collection(args.id)
        return
    if args.cmd == "token":
        query_token(args.id)
        return
    if args.cmd == "stats":
        query_stats()
        return

    private_key, address = load_account()
    print(f"\n👛 Wallet: {address}")
    print(f"   App ID: {APP_ID}\n")

    try:
        if args.cmd == "deploy":
            deploy(private_key, address, args.authority)

        elif args.cmd == "set-authority":
            set_authority(private_key, address, args.address)

        elif args.cmd in ("set-fee", "set-max"):
            configure(private_key, address, args.cmd, args.value)

        elif args.cmd in ("pause", "unpause"):
            configure(private_key, address, args.cmd)

        elif args.cmd == "create-collection":
            create_collection(
                private_key, address,
                name=args.name, edition_cap=args.cap,
                royalty_percent=args.royalty, royalty_recipient=args.recipient,
                base_uri=args.base_uri, collectible_type=args.type,
                collaborators=json.loads(args.collaborators),
            )

        elif args.cmd == "update-collection":
            update_collection(private_key, address, args.id, args.name, args.cap, args.royalty)

        elif args.cmd == "set-status":
            set_status(private_key, address, args.id, args.active == "yes")

        elif args.cmd == "mint":
            mint_nft(
                private_key, address,
                collection_id=args.collection, title=args.title,
                description=args.description, metadata=args.metadata,
                content_file=args.file,
            )

        elif args.cmd == "batch-mint":
            mint_batch(private_key, address, args.collection, json.loads(args.items))

    except MinterError as exc:
        print(f"❌ Rejected: {exc}")
        raise SystemExit(int(exc.code))


if __name__ == "__main__":
    main()
