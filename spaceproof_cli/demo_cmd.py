"""Demo commands: run."""
import random
import sys

import click

from spaceproof.demo import DemoSession, render_artifact
from spaceproof.ledger.chain import ReceiptLedger
from spaceproof.ledger.store import LedgerStore

from .output import success_box


@click.group()
def demo():
    """Scripted terrestrial-to-orbital verification demo."""
    pass


@demo.command()
@click.option('--seed', type=int, default=None, help='Seed for component generation and noise')
@click.option('--tenant', default=None, help='Tenant ID stamped on receipts')
@click.option('--out', type=click.Path(dir_okay=False), default=None, help='Write JSONL export here')
@click.option('--report', type=click.Path(dir_okay=False), default=None, help='Write text report here')
def run(seed: int | None, tenant: str | None, out: str | None, report: str | None):
    """Run every act once and print the audit artifact summary."""
    ledger = ReceiptLedger(tenant_id=tenant) if tenant else ReceiptLedger()
    artifact = DemoSession(ledger, rng=random.Random(seed)).run()

    if out:
        LedgerStore(out).write_all(ledger.export_ledger())
    if report:
        with open(report, "w", encoding="utf-8") as f:
            f.write(render_artifact(artifact) + "\n")

    stats = ledger.get_stats()
    success_box("Demo: COMPLETE", [
        ("Component", artifact["component_id"]),
        ("Verdict", artifact["summary"]["verdict"]),
        ("Orbital", artifact["summary"]["confidence_orbital"]),
        ("Receipts", str(stats["total_receipts"])),
        ("Chain", "VALID" if stats["chain_valid"] else "BROKEN"),
        ("Root", stats["merkle_root"][:40]),
    ], f"spaceproof ledger verify {out}" if out else None)
    sys.exit(0)
