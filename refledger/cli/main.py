"""Main CLI application using Cyclopts.

The CLI plays the role of the external dispatch collaborator: each call
builds a container, runs one operation and exits.
"""

import cyclopts

from refledger.cli.commands import config, ledger

app = cyclopts.App(
    name="refledger",
    help="Referral ledger - records with status and department indexes",
)

app.command(config.app, name="config")
app.command(ledger.invoke)
app.command(ledger.query)
app.command(ledger.operations)
app.command(ledger.init_db, name="init-db")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
