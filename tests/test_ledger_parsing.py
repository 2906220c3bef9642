import textwrap
from pathlib import Path

import pytest

from btc_cost_basis.errors import LedgerReadError
from btc_cost_basis.ledger import load_ledger_text, parse_records, read_ledger, split_line


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n").rstrip()


def test_parse_records_returns_one_record_per_data_line_keyed_by_header():
    text = _dedent(
        """
        DATE,TYPE,INCURRENCY,INAMOUNT
        2024-01-15T10:00:00Z,deposit,BTC,0.5
        2024-02-01T00:00:00Z,withdrawal,BTC,0.1
        2024-03-01T00:00:00Z,deposit,ETH,2
        """
    )

    records = parse_records(text)

    assert len(records) == 3
    for rec in records:
        assert list(rec) == ["DATE", "TYPE", "INCURRENCY", "INAMOUNT"]
    assert records[0] == {
        "DATE": "2024-01-15T10:00:00Z",
        "TYPE": "deposit",
        "INCURRENCY": "BTC",
        "INAMOUNT": "0.5",
    }
    assert [r["TYPE"] for r in records] == ["deposit", "withdrawal", "deposit"]


def test_quoted_field_keeps_embedded_delimiter_and_drops_quotes():
    text = 'DATE,NOTE,INAMOUNT\n2024-01-15,"Bought, then moved to cold storage",0.25\n'

    (rec,) = parse_records(text)

    assert rec["NOTE"] == "Bought, then moved to cold storage"
    assert rec["INAMOUNT"] == "0.25"


def test_short_rows_are_padded_and_extra_values_dropped():
    text = "A,B,C\n1\n1,2,3,4\n"

    records = parse_records(text)

    assert records == [{"A": "1", "B": "", "C": ""}, {"A": "1", "B": "2", "C": "3"}]


def test_header_only_and_empty_text_yield_no_records():
    assert parse_records("DATE,TYPE\n") == []
    assert parse_records("") == []
    assert parse_records("\n\n") == []


def test_blank_lines_and_crlf_endings_are_tolerated():
    text = "DATE,TYPE\r\n2024-01-01,deposit\r\n\r\n2024-01-02,withdrawal\r\n"

    records = parse_records(text)

    assert records == [
        {"DATE": "2024-01-01", "TYPE": "deposit"},
        {"DATE": "2024-01-02", "TYPE": "withdrawal"},
    ]


def test_malformed_quotes_do_not_raise():
    # Unbalanced quote swallows the rest of the line into one field.
    (rec,) = parse_records('A,B,C\n"x,y,z\n')

    assert rec == {"A": "x,y,z", "B": "", "C": ""}


def test_tab_delimited_text_keeps_leading_empty_column():
    text = "\tDATE\tTYPE\n0\t2024-01-01\tdeposit\n"

    records = parse_records(text, delimiter="\t")

    assert records == [{"": "0", "DATE": "2024-01-01", "TYPE": "deposit"}]


def test_tab_delimited_row_of_empty_values_is_kept():
    records = parse_records("A\tB\n\t\n1\t2\n", delimiter="\t")

    assert records == [{"A": "", "B": ""}, {"A": "1", "B": "2"}]


@pytest.mark.parametrize(
    ("line", "delimiter", "quote", "expected"),
    [
        ("a,b,c", ",", '"', ["a", "b", "c"]),
        ("a,,c,", ",", '"', ["a", "", "c", ""]),
        ('"a,b",c', ",", '"', ["a,b", "c"]),
        # Doubled quotes are toggles, not escapes.
        ('"say ""hi""",x', ",", '"', ["say hi", "x"]),
        ("a;'b;c';d", ";", "'", ["a", "b;c", "d"]),
    ],
)
def test_split_line(line, delimiter, quote, expected):
    assert split_line(line, delimiter=delimiter, quote=quote) == expected


def test_read_ledger_reads_utf8_file_with_bom(tmp_path: Path):
    path = tmp_path / "ledger.csv"
    path.write_bytes("\ufeffDATE,TYPE\n2024-01-01,deposit\n".encode())

    assert read_ledger(path) == [{"DATE": "2024-01-01", "TYPE": "deposit"}]


def test_read_ledger_missing_file_raises_ledger_read_error(tmp_path: Path):
    missing = tmp_path / "nope.csv"

    with pytest.raises(LedgerReadError) as excinfo:
        read_ledger(missing)

    assert excinfo.value.reason == "CSV file not found"
    assert str(missing) in str(excinfo.value)


def test_load_ledger_text_rejects_directories_and_bad_encoding(tmp_path: Path):
    with pytest.raises(LedgerReadError):
        load_ledger_text(tmp_path)

    bad = tmp_path / "latin1.csv"
    bad.write_bytes(b"DATE,NOTE\n2024-01-01,caf\xe9\n")
    with pytest.raises(LedgerReadError) as excinfo:
        load_ledger_text(bad)
    assert "not valid UTF-8" in excinfo.value.reason
