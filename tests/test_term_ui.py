import contextlib

import pytest
from prompt_toolkit import PromptSession
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput

from payment_reconciliation.term_ui import confirm_import, parse_row_selection, prompt_rows_to_remove


@contextlib.contextmanager
def pipe_session():
    with create_pipe_input() as pipe:
        sess = PromptSession(input=pipe, output=DummyOutput())
        yield pipe, sess


def test_parse_row_selection_lists_and_ranges():
    assert parse_row_selection("1, 3, 5-7", 8) == [0, 2, 4, 5, 6]
    assert parse_row_selection("4-2,3", 5) == [1, 2, 3]
    assert parse_row_selection("", 5) == []
    assert parse_row_selection(" , ", 5) == []


@pytest.mark.parametrize("text", ["0", "6", "2-9", "a", "1-", "-2", "1.5"])
def test_parse_row_selection_rejects_bad_input(text):
    with pytest.raises(ValueError):
        parse_row_selection(text, 5)


def test_prompt_rows_to_remove_returns_zero_based_indexes():
    with pipe_session() as (pipe, sess):
        pipe.send_text("2,4-5\r")
        assert prompt_rows_to_remove(5, session=sess) == [1, 3, 4]


def test_prompt_rows_to_remove_enter_keeps_all():
    with pipe_session() as (pipe, sess):
        pipe.send_text("\r")
        assert prompt_rows_to_remove(3, session=sess) == []


def test_prompt_rows_to_remove_revalidates_after_bad_entry():
    # An out-of-range row is rejected; clear the buffer and enter a valid one.
    with pipe_session() as (pipe, sess):
        pipe.send_text("9\r")
        pipe.send_text("\x01\x0b2\r")
        assert prompt_rows_to_remove(3, session=sess) == [1]


@pytest.mark.parametrize(("typed", "expected"), [("y\r", True), ("כן\r", True), ("n\r", False), ("\r", False)])
def test_confirm_import(typed, expected):
    with pipe_session() as (pipe, sess):
        pipe.send_text(typed)
        assert confirm_import(4, session=sess) is expected


def test_confirm_import_default_yes():
    with pipe_session() as (pipe, sess):
        pipe.send_text("\r")
        assert confirm_import(4, session=sess, default=True) is True
