import csv
import textwrap

import pytest

from payment_reconciliation.ingest.csv_reader import parse_csv_text, read_payments_csv


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n")


def test_reads_path_with_bom_and_blank_lines(tmp_path):
    path = tmp_path / "main.csv"
    text = _dedent(
        """
        ספק , unique id,הערות

        ACME,U1,"first, with comma"
        ,,
        Bazaar,U2,
        """
    )
    path.write_bytes(b"\xef\xbb\xbf" + text.encode("utf-8"))

    parsed = read_payments_csv(path)

    assert parsed.name == "main.csv"
    assert parsed.headers == ("ספק", "unique id", "הערות")
    assert len(parsed) == 2
    assert parsed.rows[0] == {"ספק": "ACME", "unique id": "U1", "הערות": "first, with comma"}
    assert parsed.rows[1]["ספק"] == "Bazaar"


def test_tab_delimited_bytes():
    data = "Supplier name\tAmount\nACME\t1,200\n".encode()
    parsed = read_payments_csv(data, name="upload.tsv")
    assert parsed.headers == ("Supplier name", "Amount")
    assert parsed.rows[0]["Amount"] == "1,200"
    assert parsed.name == "upload.tsv"


def test_short_rows_padded_and_extra_cells_dropped():
    parsed = parse_csv_text("a,b,c\n1\n1,2,3,4\n")
    assert parsed.rows[0] == {"a": "1", "b": "", "c": ""}
    assert parsed.rows[1] == {"a": "1", "b": "2", "c": "3"}


def test_repeated_header_keeps_first_column():
    parsed = parse_csv_text("x,x\nfirst,second\n")
    assert parsed.headers == ("x", "x")
    assert parsed.rows[0] == {"x": "first"}


def test_header_only_file_is_an_error():
    with pytest.raises(csv.Error, match="no data rows"):
        parse_csv_text("a,b\n\n")


def test_empty_file_is_an_error():
    with pytest.raises(csv.Error, match="no header row"):
        read_payments_csv(b"\n\n", name="empty.csv")


def test_undecodable_bytes_are_an_error():
    with pytest.raises(csv.Error, match="not valid UTF-8"):
        read_payments_csv(b"a,b\n\xff\xfe,1\n", name="bad.csv")
