"""Ledger commands: verify, stats, show."""
import logging
import sys

import click

from spaceproof.core.receipt import ReceiptFormatError
from spaceproof.ledger.emit import format_receipt_for_display
from spaceproof.ledger.store import LedgerStore
from spaceproof.ledger.verify import chain_stats, verify_chain

from .output import error_box, print_json, success_box, table

logger = logging.getLogger("spaceproof.cli")


def _load(file: str):
    return LedgerStore(file).read_all()


@click.group()
def ledger():
    """Inspect exported receipt ledgers (JSONL)."""
    pass


@ledger.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--links-only', is_flag=True, help='Skip payload hash recomputation')
@click.option('--json', 'as_json', is_flag=True, help='Print result as JSON')
def verify(file: str, links_only: bool, as_json: bool):
    """Replay an export and check every chain link."""
    try:
        result = verify_chain(_load(file), check_payloads=not links_only)
    except ReceiptFormatError as e:
        error_box("Ledger Verify: ERROR", str(e))
        sys.exit(2)

    if as_json:
        print_json(result.to_dict())
        sys.exit(0 if result.valid else 1)

    if result.valid:
        success_box("Ledger Verify: VALID", [
            ("File", file),
            ("Receipts", str(result.total_receipts)),
            ("Checks", "links" if links_only else "links+payloads"),
            ("Root", result.merkle_root[:40]),
        ], f"spaceproof ledger stats {file}")
        sys.exit(0)

    violation = result.violation
    logger.warning("%s in %s", violation.message, file)
    error_box("Ledger Verify: TAMPERED", violation.message)
    click.echo(f"Expected: {violation.expected}")
    click.echo(f"Found:    {violation.found}")
    sys.exit(1)


@ledger.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--json', 'as_json', is_flag=True, help='Print stats as JSON')
def stats(file: str, as_json: bool):
    """Receipt counts by type, Merkle root and chain validity."""
    try:
        summary = chain_stats(_load(file))
    except ReceiptFormatError as e:
        error_box("Ledger Stats: ERROR", str(e))
        sys.exit(2)

    if as_json:
        print_json(summary)
        sys.exit(0)

    rows = [
        ("Receipts", str(summary["total_receipts"])),
        ("Chain", "VALID" if summary["chain_valid"] else "BROKEN"),
        ("Root", summary["merkle_root"][:40]),
        ("Last", str(summary["last_receipt_ts"])),
    ]
    rows += [(f"  {rtype}", str(count)) for rtype, count in sorted(summary["by_type"].items())]
    success_box("Ledger Stats", rows)
    sys.exit(0)


@ledger.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--limit', default=0, type=int, help='Show only the last N receipts')
def show(file: str, limit: int):
    """List receipts with hash prefixes and chain links."""
    try:
        receipts = _load(file)
    except ReceiptFormatError as e:
        error_box("Ledger Show: ERROR", str(e))
        sys.exit(2)

    start = max(0, len(receipts) - limit) if limit > 0 else 0
    rows = []
    for idx in range(start, len(receipts)):
        shown = format_receipt_for_display(receipts[idx])
        rows.append([str(idx), shown["type"], shown["timestamp"], shown["hash"], shown["chain_link"]])

    table(["#", "Type", "Timestamp", "Hash", "Prev"], rows)
    sys.exit(0)
