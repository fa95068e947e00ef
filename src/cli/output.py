"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output:
colored status messages, page and space tables, and page trees. Supports
verbosity levels and the --no-color flag.
"""

from typing import Iterable, List

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from src.access_control.service import PageTreeNode
from src.models.remote_page import RemotePage, Space


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Operation completed")
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.console = Console(
            force_terminal=not no_color,
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        """Display success message in green."""
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        """Display error message in red."""
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def warning(self, message: str) -> None:
        """Display warning message in yellow."""
        self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message)

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{message}[/dim]")

    def print(self, message: str) -> None:
        """Display message without formatting."""
        self.console.print(message)

    def print_pages_table(self, pages: Iterable[RemotePage], title: str = "Pages") -> None:
        """Display pages as a table sorted by title.

        Args:
            pages: Pages to list
            title: Table caption
        """
        rows: List[RemotePage] = sorted(pages, key=lambda p: (p.title.lower(), p.id))
        if not rows:
            self.console.print("[yellow]No pages[/yellow]")
            return

        table = Table(title=f"{escape(title)} ({len(rows)})")
        table.add_column("ID", no_wrap=True)
        table.add_column("Space", no_wrap=True)
        table.add_column("Title")
        table.add_column("Updated", no_wrap=True)
        for page in rows:
            table.add_row(
                page.id,
                escape(page.space_key or "-"),
                escape(page.title),
                page.updated_at.strftime("%Y-%m-%d") if page.updated_at else "-",
            )
        self.console.print(table)

    def print_page_tree(self, roots: List[PageTreeNode], title: str = "Pages") -> None:
        """Display pages as a parent/child tree."""
        if not roots:
            self.console.print("[yellow]No pages[/yellow]")
            return

        tree = Tree(f"[bold]{escape(title)}[/bold]")

        def _add(branch: Tree, node: PageTreeNode) -> None:
            child_branch = branch.add(f"{escape(node.title)} [dim]({node.page_id})[/dim]")
            for child in node.children:
                _add(child_branch, child)

        for root in roots:
            _add(tree, root)
        self.console.print(tree)

    def print_page_details(self, page: RemotePage, show_content: bool = False) -> None:
        """Display one page's metadata and, optionally, its body."""
        self.console.print(f"[bold]{escape(page.title)}[/bold]")
        self.console.print(f"  ID: {page.id}")
        self.console.print(f"  Space: {escape(page.space_key or '-')}")
        self.console.print(f"  Parent: {page.parent_id or '-'}")
        self.console.print(f"  Status: {page.status}")
        self.console.print(f"  Author: {escape(page.author_name)}")
        if page.created_at:
            self.console.print(f"  Created: {page.created_at.isoformat()}")
        if page.updated_at:
            self.console.print(f"  Updated: {page.updated_at.isoformat()}")
        if page.url:
            self.console.print(f"  URL: {escape(page.url)}")
        if show_content and page.content:
            self.console.print("")
            self.console.print(escape(page.content), soft_wrap=True)

    def print_spaces_table(self, spaces: Iterable[Space]) -> None:
        """Display spaces as a table sorted by key."""
        rows = sorted(spaces, key=lambda s: s.key)
        if not rows:
            self.console.print("[yellow]No spaces[/yellow]")
            return

        table = Table(title=f"Spaces ({len(rows)})")
        table.add_column("Key", no_wrap=True)
        table.add_column("Name")
        table.add_column("Type", no_wrap=True)
        table.add_column("ID", no_wrap=True)
        for space in rows:
            table.add_row(
                escape(space.key),
                escape(space.name or "-"),
                space.type or "-",
                space.id,
            )
        self.console.print(table)
