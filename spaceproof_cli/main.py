"""SpaceProof CLI entry point - assembles all command groups."""
import logging

import click

from . import __version__
from .anchor_cmd import anchor
from .demo_cmd import demo
from .ledger_cmd import ledger


@click.group()
@click.version_option(version=__version__)
@click.option('-v', '--verbose', is_flag=True, help='Log every receipt as it is emitted')
def cli(verbose: bool):
    """SpaceProof: receipts for orbital hardware verification."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


cli.add_command(demo)
cli.add_command(ledger)
cli.add_command(anchor)


if __name__ == "__main__":
    cli()
