"""Opening sources and resolving schemas for CLI commands."""

from __future__ import annotations

import sys
from contextlib import ExitStack
from dataclasses import dataclass

from dbdiff.cli.common.exits import EXIT_USAGE, die, exit_from_exc, warn_exit
from dbdiff.cli.common.output import out
from dbdiff.cli.tui import select_schema
from dbdiff.core.auth import AuthError
from dbdiff.core.errors import DiffError, SourceError
from dbdiff.core.model import Database, Schema
from dbdiff.core.sources import (
    SourceSpec,
    open_database,
    parse_source,
    resolve_schema,
    schema_full_names,
)


@dataclass
class OpenedSource:
    """A parsed source together with its opened Database."""

    spec: SourceSpec
    database: Database

    @property
    def label(self) -> str:
        return self.spec.display


def _interactive() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


class SourceContext:
    """
    Opens sources for one command invocation and closes them on exit.

    Core errors are turned into CLI exits here: invalid input exits with 2,
    anything failing at runtime with 1.
    """

    def __init__(self, profile: str | None = None) -> None:
        self.profile = profile
        self._stack = ExitStack()

    def __enter__(self) -> SourceContext:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._stack.close()

    def open(self, text: str) -> OpenedSource:
        """Parse and open one source."""
        try:
            spec = parse_source(text)
        except SourceError as exc:
            exit_from_exc(exc, message=str(exc), code=EXIT_USAGE)

        try:
            with out.status(f"Opening {spec.display}..."):
                database = open_database(spec, default_profile=self.profile)
        except AuthError as exc:
            exit_from_exc(exc, message=str(exc))
        except SourceError as exc:
            exit_from_exc(exc, message=str(exc), code=EXIT_USAGE)
        except DiffError as exc:
            exit_from_exc(exc, message=f"Could not open {spec.display}: {exc}")

        self._stack.callback(database.close)
        return OpenedSource(spec=spec, database=database)

    def open_all(self, texts: list[str]) -> list[OpenedSource]:
        return [self.open(text) for text in texts]

    def schema(self, source: OpenedSource, default_ref: str | None = None) -> Schema:
        """
        Resolve the schema to compare for `source`.

        Precedence: the source's own `#schema`, then `default_ref`, then the
        only schema of the database, then an interactive pick.
        """
        ref = source.spec.schema or default_ref
        try:
            if ref:
                return resolve_schema(source.database, ref)

            with out.status(f"Loading schemas of {source.label}..."):
                names = schema_full_names(source.database)
            if not names:
                die(f"No schemas found in {source.label}.")
            if len(names) == 1:
                return resolve_schema(source.database, names[0])
            if not _interactive():
                die(
                    f"Missing schema for {source.label}. "
                    "Use 'source#schema' or --schema.",
                    code=EXIT_USAGE,
                )

            picked = select_schema(names, source=source.label)
            if not picked:
                warn_exit("No schema selected.")
            return resolve_schema(source.database, picked)
        except SourceError as exc:
            exit_from_exc(exc, message=str(exc), code=EXIT_USAGE)
        except DiffError as exc:
            exit_from_exc(exc, message=f"Could not read {source.label}: {exc}")
