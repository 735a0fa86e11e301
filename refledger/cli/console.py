"""Console output for the CLI.

Provides a Console class that wraps rich for consistent, polished output.
Raw invocation payloads bypass rich entirely so they stay byte-exact on stdout.
"""

import sys
from typing import Any

from rich.console import Console as RichConsole
from rich.table import Table

from refledger.domain.referral.model.aggregate import Referral


class Console:
    """CLI output manager wrapping rich."""

    def __init__(self, *, force_terminal: bool | None = None) -> None:
        self._console = RichConsole(force_terminal=force_terminal, stderr=False)
        self._err_console = RichConsole(force_terminal=force_terminal, stderr=True)

    # -------------------------------------------------------------------------
    # Status messages
    # -------------------------------------------------------------------------

    def success(self, message: str) -> None:
        """Print a success message."""
        self._err_console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {message}", markup=True, highlight=False)
        if hint:
            self._err_console.print(f"  [dim]{hint}[/dim]")

    def warning(self, message: str) -> None:
        """Print a warning message."""
        self._err_console.print(f"[yellow]⚠[/yellow] {message}")

    def info(self, message: str) -> None:
        """Print an info message."""
        self._err_console.print(f"[dim]{message}[/dim]")

    # -------------------------------------------------------------------------
    # Structured output
    # -------------------------------------------------------------------------

    def payload(self, value: bytes | None) -> None:
        """Write an invocation result to stdout unchanged."""
        if value is None:
            return
        sys.stdout.write(value.decode("utf-8"))
        sys.stdout.write("\n")
        sys.stdout.flush()

    def table(
        self,
        rows: list[dict[str, Any]],
        columns: list[tuple[str, str]],  # (key, header)
        *,
        title: str | None = None,
    ) -> None:
        table = Table(title=title, show_header=True, header_style="bold")
        for _, header in columns:
            table.add_column(header)
        for row in rows:
            table.add_row(*[str(row.get(key, "")) for key, _ in columns])
        self._console.print(table)

    def referrals(self, referrals: list[Referral], *, title: str) -> None:
        """Print search results as a table."""
        if not referrals:
            self.warning(f"No referrals in {title}")
            return
        rows = [
            {
                "id": r.referral_id,
                "customer": r.customer_name,
                "status": r.status,
                "departments": ", ".join(r.departments),
                "mortgage": r.mortgage.mortgage_number if r.mortgage else "",
            }
            for r in referrals
        ]
        self.table(
            rows,
            [
                ("id", "Referral"),
                ("customer", "Customer"),
                ("status", "Status"),
                ("departments", "Departments"),
                ("mortgage", "Mortgage"),
            ],
            title=title,
        )


# Module-level default instance for convenience
_default: Console | None = None


def get_console() -> Console:
    """Get the default console instance."""
    global _default
    if _default is None:
        _default = Console()
    return _default
