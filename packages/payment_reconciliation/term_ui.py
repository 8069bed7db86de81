"""Terminal prompts for reviewing a reconciled payment list (prompt_toolkit).

Kept apart from the workflow so the prompts can be tested with a pipe input
and a dummy output.
"""

from __future__ import annotations

from prompt_toolkit import PromptSession
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.validation import ValidationError, Validator

_YES = {"y", "yes", "כ", "כן"}
_NO = {"n", "no", "ל", "לא"}


def parse_row_selection(text: str, total: int) -> list[int]:
    """Parse ``"1, 3, 5-7"`` (1-based) into sorted, unique 0-based indexes.

    Raises ``ValueError`` for malformed parts or rows outside ``1..total``.
    Blank input selects nothing.
    """

    picked: set[int] = set()
    for part in text.replace(" ", "").split(","):
        if not part:
            continue
        lo_s, sep, hi_s = part.partition("-")
        if not lo_s.isdigit() or (sep and not hi_s.isdigit()):
            raise ValueError(f"invalid row selection: {part!r}")
        lo = int(lo_s)
        hi = int(hi_s) if sep else lo
        if lo > hi:
            lo, hi = hi, lo
        if lo < 1 or hi > total:
            raise ValueError(f"row out of range 1..{total}: {part!r}")
        picked.update(range(lo - 1, hi))
    return sorted(picked)


class _RowSelectionValidator(Validator):
    def __init__(self, total: int) -> None:
        self._total = total

    def validate(self, document) -> None:
        try:
            parse_row_selection(document.text, self._total)
        except ValueError as exc:
            raise ValidationError(message=str(exc)) from exc


class _YesNoValidator(Validator):
    def validate(self, document) -> None:
        answer = document.text.strip().lower()
        if answer and answer not in _YES | _NO:
            raise ValidationError(message="Answer y or n")


def _session(session: PromptSession | None, kb: KeyBindings) -> PromptSession:
    if session is None:
        return PromptSession(key_bindings=kb)
    return PromptSession(
        input=getattr(session, "input", None),
        output=getattr(session, "output", None),
        key_bindings=kb,
    )


def prompt_rows_to_remove(
    total: int,
    *,
    session: PromptSession | None = None,
    message: str = "Rows to remove (e.g. 2,5-7; Enter to keep all): ",
) -> list[int]:
    """Ask which of ``total`` listed payments to drop; returns 0-based indexes.

    Ctrl+C keeps all rows.
    """

    kb = KeyBindings()

    @kb.add("c-c", eager=True)
    def _(event) -> None:  # pragma: no cover - exercised indirectly
        event.app.exit(result="")

    sess = _session(session, kb)
    text = sess.prompt(
        message,
        validator=_RowSelectionValidator(total),
        validate_while_typing=False,
        key_bindings=kb,
    )
    return parse_row_selection(text or "", total)


def confirm_import(
    count: int,
    *,
    session: PromptSession | None = None,
    default: bool = False,
) -> bool:
    """Ask for a go-ahead before writing ``count`` payments."""

    kb = KeyBindings()

    @kb.add("c-c", eager=True)
    def _(event) -> None:  # pragma: no cover - exercised indirectly
        event.app.exit(result="n")

    hint = "Y/n" if default else "y/N"
    sess = _session(session, kb)
    answer = sess.prompt(
        f"Import {count} payment(s)? [{hint}] ",
        validator=_YesNoValidator(),
        validate_while_typing=False,
        key_bindings=kb,
    )
    answer = (answer or "").strip().lower()
    if not answer:
        return default
    return answer in _YES


__all__ = ["parse_row_selection", "prompt_rows_to_remove", "confirm_import"]
