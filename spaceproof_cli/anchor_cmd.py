"""Anchor commands: hash, root."""
import json
import sys

import click

from spaceproof.anchor.hash import dual_hash
from spaceproof.anchor.merkle import merkle_root
from spaceproof.core.receipt import EncodingError, ReceiptFormatError
from spaceproof.ledger.store import LedgerStore

from .output import error_box, success_box


@click.group()
def anchor():
    """Dual-hash and Merkle operations."""
    pass


@anchor.command()
@click.argument('data')
@click.option('--json', 'as_json', is_flag=True, help='Parse DATA as JSON before hashing')
def hash(data: str, as_json: bool):
    """Compute dual hash (SHA256:BLAKE3)."""
    try:
        value = json.loads(data) if as_json else data
        result = dual_hash(value)
    except (json.JSONDecodeError, EncodingError) as e:
        error_box("Hash: ERROR", str(e))
        sys.exit(2)

    sha256_hex, blake3_hex = result.split(":")
    success_box("Dual Hash", [
        ("Input", data[:40]),
        ("SHA256", sha256_hex[:32]),
        ("BLAKE3", blake3_hex[:32]),
    ])
    click.echo(result)
    sys.exit(0)


@anchor.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
def root(file: str):
    """Merkle root over the payload hashes of an export."""
    try:
        receipts = LedgerStore(file).read_all()
    except ReceiptFormatError as e:
        error_box("Merkle: ERROR", str(e))
        sys.exit(2)

    result = merkle_root([r.payload_hash for r in receipts])
    success_box("Merkle Root", [
        ("Receipts", str(len(receipts))),
        ("Root", result[:40]),
    ], f"spaceproof ledger verify {file}")
    click.echo(result)
    sys.exit(0)
