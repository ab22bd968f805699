"""
Tests for the URL-list reader, the JSON writer and the CLI helpers.
"""

import datetime
import json

import pytest

from errors import IOFailure
from main import (
    build_parser,
    calculate_execution_time,
    parse_urls,
    read_urls_from_file,
    save_to_file,
    summarize_records,
)
from records import GameDetailRecord, ListingRecord


def test_parse_urls_skips_blanks_comments_and_non_urls():
    lines = [
        "https://store.playstation.com/en-rs/product/A",
        "",
        "   ",
        "# https://store.playstation.com/en-rs/product/commented",
        "not a url",
        "  https://store.playstation.com/en-rs/product/B  ",
    ]
    assert parse_urls(lines) == [
        "https://store.playstation.com/en-rs/product/A",
        "https://store.playstation.com/en-rs/product/B",
    ]


def test_read_urls_from_file_preserves_order(tmp_path):
    input_file = tmp_path / "games.txt"
    input_file.write_text("# games\nhttps://x.test/2\nhttps://x.test/1\n", encoding="utf-8")

    assert read_urls_from_file(str(input_file)) == ["https://x.test/2", "https://x.test/1"]


def test_missing_input_file_raises_io_failure(tmp_path):
    with pytest.raises(IOFailure) as excinfo:
        read_urls_from_file(str(tmp_path / "missing.txt"))
    assert excinfo.value.path.endswith("missing.txt")


def test_save_to_file_writes_pretty_utf8_json(tmp_path):
    output_file = tmp_path / "out" / "scraped-games.json"
    records = [
        GameDetailRecord(url="https://x.test/1", title="Pokémon", price="₺1.249,00", all_prices=["₺1.249,00"]),
        GameDetailRecord.error_record("https://x.test/2", "Target closed"),
    ]

    save_to_file(records, str(output_file))

    text = output_file.read_text(encoding="utf-8")
    data = json.loads(text)
    assert "Pokémon" in text
    assert '\n  {' in text
    assert data[0]["title"] == "Pokémon"
    assert set(data[1]) == {"url", "error", "scraped_at"}


def test_save_listing_records(tmp_path):
    output_file = tmp_path / "playstation-games.json"
    save_to_file([ListingRecord("Game", "€9.99", "https://x.test/p", "N/A")], str(output_file))
    assert json.loads(output_file.read_text(encoding="utf-8"))[0]["price"] == "€9.99"


def test_unwritable_output_raises_io_failure(tmp_path):
    with pytest.raises(IOFailure):
        save_to_file([], str(tmp_path))


def test_summarize_records():
    records = [
        GameDetailRecord(url="https://x.test/1", title="A", price="€1.00"),
        GameDetailRecord.error_record("https://x.test/2", "boom"),
    ]
    assert summarize_records(records) == (2, 1, 1)


def test_parser_defaults_and_flags(monkeypatch):
    monkeypatch.delenv("INPUT_FILE", raising=False)
    monkeypatch.delenv("HEADLESS", raising=False)
    args = build_parser().parse_args(["--search", "gran turismo", "--limit", "5", "--headed"])

    assert args.input == "games.txt"
    assert args.search == "gran turismo"
    assert args.limit == 5
    assert args.headed is True
    assert args.category == "games"


def test_calculate_execution_time():
    start = datetime.datetime(2026, 1, 1, 10, 0, 0)
    assert calculate_execution_time(start, start + datetime.timedelta(hours=1, minutes=2, seconds=3)) == "1h 2m 3s"
    assert calculate_execution_time(42) == "42s"
    assert calculate_execution_time(datetime.timedelta(days=1, seconds=61)) == "1d 0h 1m 1s"
