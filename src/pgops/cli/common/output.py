"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import questionary
from prompt_toolkit.styles import Style
from rich.console import Console
from rich.table import Table
from rich.theme import Theme

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

# Questionary runs on prompt_toolkit; destructive prompts are red.
QUESTIONARY_STYLE_CONFIRM = Style.from_dict(
    {
        "question": "bold ansibrightred",
        "answer": "bold ansibrightred",
        "instruction": "ansibrightblack",
        "error": "bold ansired",
    }
)

console = Console(theme=_THEME)


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def _q_try(self, fn, *args, **kwargs):
        """Call questionary prompts and drop unsupported kwargs on older versions."""
        try:
            return fn(*args, **kwargs)
        except TypeError:
            kwargs.pop("auto_enter", None)
            return fn(*args, **kwargs)

    def _q(self, message: str) -> str:
        """Prefix Questionary prompts to be PG-OPS consistent."""
        return f"[PG-OPS] {message}"

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {v}")

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """
        Ask the user for confirmation using a standardized Questionary prompt.

        Args:
            message: Confirmation question shown to the user.
            default: Default answer if the user just presses enter.

        Returns:
            True if the user confirms, False otherwise.
        """
        # Printed on its own line; questionary renders `instruction=` inline.
        console.print("[meta]Use y/n then Enter[/]")

        prompt = self._q_try(
            questionary.confirm,
            self._q(message),
            default=default,
            style=QUESTIONARY_STYLE_CONFIRM,
            qmark="✦",
            auto_enter=False,
        )
        return bool(prompt.ask())

    def confirm_typed(self, message: str, expected: str) -> bool:
        """Ask the user to type ``expected`` verbatim (for irreversible actions)."""
        answer = questionary.text(
            self._q(f"{message} Type '{expected}' to continue:"),
            style=QUESTIONARY_STYLE_CONFIRM,
            qmark="✦",
        ).ask()
        return answer == expected

    def schemas_table(self, schemas: Iterable[Any], title: str = "Schemas") -> None:
        """
        Render schemas.

        Accepts strings or objects with `.name` and optional `.owner`.
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Schema", style="ok")
        t.add_column("Owner", style="meta")

        for s in schemas:
            if isinstance(s, str):
                t.add_row(s, "")
            else:
                t.add_row(str(s.name), str(getattr(s, "owner", "") or ""))

        console.print(t)

    def schema_drop_results_table(
        self, results: Iterable[Any], title: str = "Schema drop results"
    ) -> None:
        """Render results of an erase (dropped or only planned per schema)."""
        t = Table(title=title, show_lines=False)
        t.add_column("Schema", style="ok")
        t.add_column("Result")

        for r in results:
            state = "[ok]dropped[/]" if r.dropped else "[warn]planned[/]"
            t.add_row(str(r.schema), state)

        console.print(t)

    def text_columns_table(self, columns: Iterable[Any], title: str = "Text columns") -> None:
        """Expects objects with .name and .data_type (ColumnDescriptor)."""
        t = Table(title=title, show_lines=False)
        t.add_column("Column", style="ok")
        t.add_column("Type", style="meta")

        for c in columns:
            data_type = getattr(c.data_type, "value", c.data_type)
            t.add_row(str(c.name), str(data_type))

        console.print(t)

    def lowercase_results_table(
        self, results: Iterable[Any], title: str = "Lower-case results"
    ) -> None:
        """Expects ColumnLowercaseResult objects."""
        t = Table(title=title, show_lines=False)
        t.add_column("Column", style="ok")
        t.add_column("Rows updated", justify="right")

        for r in results:
            rows = "-" if r.rows_updated is None else str(r.rows_updated)
            t.add_row(f"{r.schema}.{r.table}.{r.column}", rows)

        console.print(t)

    def tables_table(self, tables: Iterable[Any], title: str = "Tables") -> None:
        """Expects objects with `.full_name` and optional `.table_type`."""
        t = Table(title=title, show_lines=False)
        t.add_column("Full name", style="ok")
        t.add_column("Type", style="meta")

        for item in tables:
            t.add_row(item.full_name, str(getattr(item, "table_type", "") or ""))

        console.print(t)

    def columns_table(self, columns: Iterable[Any], title: str = "Columns") -> None:
        """Expects ColumnInfo objects."""
        t = Table(title=title, show_lines=False)
        t.add_column("#", style="meta", justify="right")
        t.add_column("Column", style="ok")
        t.add_column("Type")
        t.add_column("Nullable", style="meta")

        for c in columns:
            t.add_row(str(c.position), c.name, c.data_type, "yes" if c.nullable else "no")

        console.print(t)

    def primary_key_table(self, columns: Iterable[Any], title: str = "Primary key") -> None:
        t = Table(title=title, show_lines=False)
        t.add_column("Column", style="ok")
        t.add_column("Type")

        for c in columns:
            t.add_row(c.name, c.type)

        console.print(t)

    def views_table(self, views: Iterable[Any], title: str = "Views") -> None:
        t = Table(title=title, show_lines=False)
        t.add_column("Schema", style="meta")
        t.add_column("View", style="ok")

        for v in views:
            t.add_row(v.schema, v.name)

        console.print(t)

    def grants_table(self, targets: Iterable[Any], title: str = "Read-only grants") -> None:
        """Expects (GrantTarget, GrantState) tuples."""
        t = Table(title=title, show_lines=False)
        t.add_column("Schema", style="ok")
        t.add_column("Role", style="meta")
        t.add_column("State")

        for target, state in targets:
            value = getattr(state, "value", str(state))
            style = "ok" if value == "GRANT_APPLIED" else "warn"
            t.add_row(target.schema, target.role, f"[{style}]{value}[/{style}]")

        console.print(t)


out = Out()
