"""
Entry point for running SpaceProof as a module.

Usage:
    python -m spaceproof [command] [options]

Example:
    python -m spaceproof demo run --seed 42 --out receipts.jsonl
    python -m spaceproof ledger verify receipts.jsonl
"""

from spaceproof_cli.main import cli

if __name__ == "__main__":
    cli()
