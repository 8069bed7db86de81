# ruff: noqa: I001
"""CLI for the ``payment_reconciliation`` package.

Command handlers (``cmd_*``) return a process exit code and print failures
as ``Error: ...`` on stderr; the Typer commands below only translate options
and exit with that code. Environment variables (``DATABASE_URL``,
``PAYMENT_RECON_BUSINESS_ID``, ``PAYMENT_RECON_CREATED_BY``,
``PAYMENT_RECON_LOG_LEVEL``) are loaded from a local ``.env`` by the root
callback before any subcommand runs.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from prompt_toolkit import PromptSession
from rich.console import Console
from rich.markup import escape
from sqlalchemy.exc import SQLAlchemyError
from typer.models import OptionInfo

from .errors import ImportFailedError, PaymentImportError
from .logging_setup import configure_logging
from .workflows.import_flow import ImportSession

console = Console()


def _fail(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def _prepare(
    business_id: str,
    main_csv: str,
    subs_csv: str | None,
    database_url: str | None,
) -> ImportSession:
    session = ImportSession(database_url=database_url)
    session.select_business(business_id)
    session.load_main_file(main_csv)
    if subs_csv:
        session.load_subs_file(subs_csv)
    session.process()
    return session


# ---- Command handlers ---------------------------------------------------------


def cmd_businesses(*, database_url: str | None = None) -> int:
    """Print ``id<TAB>name`` for every business."""

    from db.client import session_scope

    from .suppliers import list_businesses

    try:
        with session_scope(database_url=database_url) as s:
            businesses = list_businesses(s)
    except (RuntimeError, SQLAlchemyError) as e:
        return _fail(f"failed to list businesses: {e}")

    if not businesses:
        print("No businesses found.")
    for b in businesses:
        print(f"{b.id}\t{b.name}")
    return 0


def cmd_preview(
    business_id: str | None,
    main_csv: str,
    subs_csv: str | None = None,
    *,
    database_url: str | None = None,
) -> int:
    """Reconcile both files and print the review report without writing."""

    from .report import render_payments, render_summary

    if not business_id:
        return _fail("no business selected (--business-id or PAYMENT_RECON_BUSINESS_ID)")
    try:
        session = _prepare(business_id, main_csv, subs_csv, database_url)
    except (PaymentImportError, RuntimeError, SQLAlchemyError) as e:
        return _fail(str(e))

    assert session.result is not None
    render_payments(console, session.payments, session.roster)
    render_summary(console, session.summary(), session.result.errors)
    return 0


def cmd_import(
    business_id: str | None,
    main_csv: str,
    subs_csv: str | None = None,
    *,
    database_url: str | None = None,
    created_by: str | None = None,
    review: bool = False,
    assume_yes: bool = False,
    prompt_session: PromptSession | None = None,
) -> int:
    """Reconcile, optionally review interactively, confirm, then import.

    Returns ``1`` when the import is blocked (for example by unmatched
    suppliers), declined, or fails part-way.
    """

    from .report import render_payments, render_summary
    from .importer import success_message
    from .term_ui import confirm_import, prompt_rows_to_remove

    if not business_id:
        return _fail("no business selected (--business-id or PAYMENT_RECON_BUSINESS_ID)")
    try:
        session = _prepare(business_id, main_csv, subs_csv, database_url)
    except (PaymentImportError, RuntimeError, SQLAlchemyError) as e:
        return _fail(str(e))

    assert session.result is not None
    if review and session.payments:
        render_payments(console, session.payments, session.roster)
        # Remove from the end so earlier row numbers stay valid
        for idx in reversed(prompt_rows_to_remove(len(session.payments), session=prompt_session)):
            removed = session.remove_payment(idx)
            console.print(f"Removed: {escape(removed.supplier_name)} {removed.payment_date}")

    render_summary(console, session.summary(), session.result.errors)

    if not assume_yes and session.payments and not session.result.unmatched_suppliers:
        if not confirm_import(len(session.payments), session=prompt_session):
            print("Import cancelled.")
            return 1

    try:
        result = session.run_import(
            created_by=created_by,
            on_progress=lambda line: console.print(escape(line)),
        )
    except ImportFailedError as e:
        print(
            f"Error: {e} ({e.result.inserted} payment(s) committed before the failure)",
            file=sys.stderr,
        )
        return 1
    except (PaymentImportError, RuntimeError, SQLAlchemyError) as e:
        return _fail(str(e))

    console.print(escape(success_message(result)))
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Reconcile main and sub-payments CSV exports into supplier payments "
        "and import them into the back office. Loads .env before running."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Optional ones take their default with ``=`` at the parameter.
MAIN_CSV_OPTION: OptionInfo = typer.Option(
    ...,
    "--main-csv",
    help="Main payments CSV export.",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files
)
SUBS_CSV_OPTION: OptionInfo = typer.Option(
    "--subs-csv",
    help="Sub-payments (installments) CSV export.",
    dir_okay=False,
    file_okay=True,
    exists=False,
)
BUSINESS_ID_OPTION: OptionInfo = typer.Option(
    "--business-id",
    envvar="PAYMENT_RECON_BUSINESS_ID",
    help="Business to import into.",
)
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    "--database-url", help="Override DATABASE_URL (falls back to env var)."
)


@app.command("businesses")
def businesses_cmd(
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """List businesses (id and name)."""

    raise typer.Exit(cmd_businesses(database_url=database_url))


@app.command("preview")
def preview_cmd(
    main_csv: Annotated[Path, MAIN_CSV_OPTION],
    subs_csv: Annotated[Path | None, SUBS_CSV_OPTION] = None,
    business_id: Annotated[str | None, BUSINESS_ID_OPTION] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """Reconcile the files and show the review report; nothing is written."""

    raise typer.Exit(
        cmd_preview(
            business_id,
            str(main_csv),
            str(subs_csv) if subs_csv else None,
            database_url=database_url,
        )
    )


@app.command("import")
def import_cmd(
    main_csv: Annotated[Path, MAIN_CSV_OPTION],
    subs_csv: Annotated[Path | None, SUBS_CSV_OPTION] = None,
    business_id: Annotated[str | None, BUSINESS_ID_OPTION] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
    created_by: Annotated[
        str | None,
        typer.Option("--created-by", envvar="PAYMENT_RECON_CREATED_BY", help="Operator id stored on payments."),
    ] = None,
    review: Annotated[bool, typer.Option("--review", help="Remove rows interactively before importing.")] = False,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt.")] = False,
) -> None:
    """Reconcile the files and import the payments."""

    raise typer.Exit(
        cmd_import(
            business_id,
            str(main_csv),
            str(subs_csv) if subs_csv else None,
            database_url=database_url,
            created_by=created_by,
            review=review,
            assume_yes=yes,
        )
    )


@app.callback()
def _root() -> None:
    """Load ``.env`` from the working directory and configure logging."""

    # override=False keeps already-set environment variables
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    app()
