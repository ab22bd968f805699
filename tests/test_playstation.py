"""
Tests for the PlayStationScraper facade with a fake browser session.
"""

from conftest import FakeContext, FakeSession, timeout_error
from PlayStation import (
    ALTERNATIVE_CATEGORY,
    ALTERNATIVE_SETTLE_WAIT,
    RESCAN_AFTER_SCROLL_WAIT,
    RESCAN_AFTER_TOP_WAIT,
    RESCAN_INITIAL_WAIT,
    PlayStationScraper,
)

GAME_URL = "https://store.playstation.com/en-rs/product/EP0000-TEST00000_00-GAME000000000000"

PAID_PAGE = """
<h1 data-qa="mfe-game-title#name">Ratchet &amp; Clank</h1>
<span data-qa="price-standard">€69.99</span>
<span data-qa="price-addon">€9.99</span>
"""

FREE_PAGE = '<h1 data-qa="mfe-game-title#name">Trial Game</h1><span data-qa="price">Free</span>'

RESCAN_PAGE = FREE_PAGE + '<div class="psw-pdp-card-anchor"><label>Full Game €39.99</label></div>'

LISTING_PAGE = """
<a href="/en-rs/product/A"><span data-qa="tile#title">Game A</span><span data-qa="tile#price">€59.99</span></a>
<a href="/en-rs/product/B"><span data-qa="tile#title">Game B</span><span data-qa="tile#price">Free</span></a>
"""


def make_scraper(contexts, sleep):
    session = FakeSession(contexts)
    return PlayStationScraper(session=session, sleep=sleep, locale="en-rs"), session


def test_scrape_game_details_success(sleep):
    scraper, _ = make_scraper([FakeContext(html=PAID_PAGE)], sleep)
    record = scraper.scrape_game_details(GAME_URL)

    assert not record.is_error
    assert record.title == "Ratchet & Clank"
    assert record.price == "€69.99"
    assert record.all_prices == ["€69.99", "€9.99"]


def test_free_price_triggers_rescan(sleep):
    context = FakeContext(html=[FREE_PAGE, RESCAN_PAGE])
    scraper, _ = make_scraper([context], sleep)

    record = scraper.scrape_game_details(GAME_URL)

    assert record.price == "€39.99"
    assert record.all_prices == ["Free", "€39.99"]
    assert sleep.calls[-3:] == [RESCAN_INITIAL_WAIT, RESCAN_AFTER_SCROLL_WAIT, RESCAN_AFTER_TOP_WAIT]
    assert ("scroll", 1 / 3) in context.calls


def test_free_price_without_rescan_result_stays_free(sleep):
    scraper, _ = make_scraper([FakeContext(html=FREE_PAGE)], sleep)
    assert scraper.scrape_game_details(GAME_URL).price == "Free"


def test_navigation_failure_becomes_error_record(sleep):
    scraper, _ = make_scraper([FakeContext(goto_errors=[timeout_error()])], sleep)
    record = scraper.scrape_game_details(GAME_URL)

    assert record.is_error
    assert "Timeout" in record.error
    assert record.price is None


def test_scrape_games_isolates_failures(sleep):
    context = FakeContext(html=PAID_PAGE, goto_errors=[None, timeout_error(), None])
    scraper, _ = make_scraper([context], sleep)

    records = scraper.scrape_games([GAME_URL + "1", GAME_URL + "2", GAME_URL + "3"], delay=1.5)

    assert [record.is_error for record in records] == [False, True, False]
    assert sleep.calls.count(1.5) == 2


def test_listing_urls(sleep):
    scraper, _ = make_scraper([], sleep)

    assert scraper.build_listing_url(search_term="gran turismo") == "https://store.playstation.com/en-rs/search/gran%20turismo"
    assert scraper.build_listing_url(category="games") == "https://store.playstation.com/en-rs/category/games"


def test_scrape_game_prices_reads_listing(sleep):
    context = FakeContext(html=LISTING_PAGE)
    scraper, _ = make_scraper([context], sleep)

    games = scraper.scrape_game_prices(category="games", limit=20)

    assert [(game.title, game.price) for game in games] == [("Game A", "€59.99"), ("Game B", "Free")]
    assert games[0].link == "https://store.playstation.com/en-rs/product/A"
    assert context.calls[0][1] == "https://store.playstation.com/en-rs/category/games"


def test_alternative_listing_uses_curated_category(sleep):
    tiles = '<div class="product-tile"><span>Tile Game</span><span class="price">€4.99</span></div>'
    context = FakeContext(html=tiles)
    scraper, _ = make_scraper([context], sleep)

    games = scraper.scrape_alternative_listing(limit=20)

    assert [game.title for game in games] == ["Tile Game"]
    assert context.calls[0][1].endswith(f"/category/{ALTERNATIVE_CATEGORY}")
    assert sleep.calls == [ALTERNATIVE_SETTLE_WAIT]


def test_launch_and_close_delegate_to_session(sleep):
    scraper, session = make_scraper([], sleep)
    scraper.launch_browser()
    scraper.close_browser()

    assert session.launched and session.closed
