import csv
import json
from datetime import datetime

from advisor_scraper.sink import CSV_HEADER, csv_row, timestamp_for_filename, write_results


NOW = datetime(2024, 3, 5, 14, 7, 9)


def test_timestamp_has_no_colons():
    assert timestamp_for_filename(NOW) == "2024-03-05T14-07-09"


def test_csv_rows_grow_with_sites(make_record):
    two_sites = make_record("A", phone_no="5551234567", sites=["https://a.example", "https://b.example"])
    one_site = make_record("B", email="b@example.com", sites=["https://c.example"])

    row_a, row_b = csv_row(two_sites), csv_row(one_site)

    assert len(row_a) == 8
    assert len(row_b) == 7
    assert row_a[:6] == ["A", "", "", "", "", "5551234567"]
    assert row_b[:6] == ["B", "b@example.com", "", "", "", ""]
    assert row_a[6:] == ["https://a.example", "https://b.example"]


def test_csv_row_without_sites(make_record):
    assert csv_row(make_record("C")) == ["C", "", "", "", "", ""]


def test_write_results(tmp_path, make_record):
    records = [
        make_record("A", city="Springfield", sites=["https://a.example", "https://b.example"]),
        make_record("B", sites=["https://c.example"]),
    ]

    json_path, csv_path = write_results(records, str(tmp_path / "results"), now=NOW)

    assert json_path == tmp_path / "results" / "json" / "advisors 2024-03-05T14-07-09.json"
    assert csv_path == tmp_path / "results" / "csv" / "advisors 2024-03-05T14-07-09.csv"

    data = json.loads(json_path.read_text())
    assert data[0] == {
        "name": "A",
        "email": None,
        "address": None,
        "city": "Springfield",
        "state": None,
        "phoneNo": None,
        "sites": ["https://a.example", "https://b.example"],
    }
    assert data[1]["name"] == "B"

    with open(csv_path, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == CSV_HEADER
    assert rows[0] == ["Name", "Email", "Address", "City", "State", "Phone Number", "Website(s)"]
    assert rows[1] == ["A", "", "", "Springfield", "", "", "https://a.example", "https://b.example"]
    assert rows[2] == ["B", "", "", "", "", "", "https://c.example"]


def test_write_results_with_no_records(tmp_path):
    json_path, csv_path = write_results([], str(tmp_path), now=NOW)

    assert json.loads(json_path.read_text()) == []
    assert csv_path.read_text().strip() == ",".join(CSV_HEADER)
