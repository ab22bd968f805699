"""
================================================================================
PlayStation Store Web Scraper
================================================================================
Created     : 2026-10-17
Description :
    This module provides a PlayStationScraper class for scraping game
    information from PlayStation Store pages. It composes the browser session,
    the navigation controller and the execution guard, and hands rendered
    HTML snapshots to the extraction engines.

    Key features include:
        - Game detail pages: title, price (with every price candidate kept
          for auditing), original price, discount, description, rating,
          platform, publisher, release date, genres and hero image
        - A second settle-and-rescan pass when the price is missing or free
        - Batch scraping of many detail pages with a delay between them
        - Catalog listings by search term or category, with a fallback
          against a curated category when the first pass finds nothing

Usage:
    1. Import the PlayStationScraper class in your main script.
    2. Launch the browser:
            scraper = PlayStationScraper(headless=True)
            scraper.launch_browser()
    3. Scrape detail pages or listings:
            records = scraper.scrape_games(["https://store.playstation.com/en-rs/product/..."])
            games = scraper.scrape_game_prices(search_term="spider-man")
    4. Close the browser:
            scraper.close_browser()

Dependencies:
    - Python >= 3.8
    - playwright
    - beautifulsoup4
    - lxml
    - colorama
    - tqdm

Assumptions & Notes:
    - Website structure may change over time
    - Only one page is scraped at a time
"""

import os  # For reading the store locale
import time  # For delays during page rendering
from batch import DEFAULT_INTER_DELAY, run_batch  # For batch scraping
from browser_session import CHROME_EXECUTABLE_PATH, HEADLESS, BrowserSession  # For the browser process
from colorama import Style  # For coloring the terminal
from errors import ExecutionFailure, NavigationFailure  # For per-target failures
from execution_context import ExecutionContext  # For type hints
from execution_guard import ExecutionGuard  # For guarded page calls
from extraction import extract_game_details, parse_html  # For detail page extraction
from listing import DEFAULT_LISTING_LIMIT, TILE_LAYOUT, dedupe_by_title, list_candidates, read_cards  # For catalog listings
from navigation import NavigationController  # For navigating and settling pages
from price_resolver import apply_rescan, needs_rescan, rescan_offer_labels  # For the price rescan pass
from records import GameDetailRecord, ListingRecord  # For output records
from terminal import BackgroundColors, verbose_output, warning_output  # For terminal output
from typing import Any, Callable, List, Optional, Sequence  # For type hints
from urllib.parse import quote  # For encoding search terms


# Store Constants:
BASE_URL = "https://store.playstation.com"  # Store origin
STORE_LOCALE = os.getenv("STORE_LOCALE", "en-rs")  # Locale segment of every store address
DEFAULT_CATEGORY = "games"  # Category read in listing mode
ALTERNATIVE_CATEGORY = "44d8bb20-653e-431e-8ad0-c0a365f68d2f"  # Curated category used when the first listing pass is empty
ALTERNATIVE_SETTLE_WAIT = 5.0  # Seconds to wait on the curated category

# Rescan Constants (seconds):
RESCAN_INITIAL_WAIT = 3.0  # Wait before the second settle
RESCAN_SCROLL_FRACTION = 1 / 3  # Fraction of the document height scrolled to
RESCAN_AFTER_SCROLL_WAIT = 2.0  # Wait after scrolling down
RESCAN_AFTER_TOP_WAIT = 1.0  # Wait after scrolling back to the top


# Classes Definitions:

class PlayStationScraper:
    """
    Web scraper class for extracting game information from the PlayStation Store.

    :param headless: Run the browser without a window
    :param executable_path: Optional Chrome executable
    :param locale: Store locale segment, such as "en-rs"
    :param session: Optional BrowserSession (tests pass a fake one)
    :param sleep: Callable used for waits (seconds)
    """


    def __init__(self, headless: bool = HEADLESS, executable_path: str = CHROME_EXECUTABLE_PATH, locale: str = STORE_LOCALE, session: Optional[Any] = None, sleep: Callable[[float], Any] = time.sleep) -> None:
        self.locale = locale  # Locale segment of store addresses
        self.sleep = sleep  # Wait function shared by every component
        self.session = session if session is not None else BrowserSession(headless=headless, executable_path=executable_path)  # Browser process
        self.guard = ExecutionGuard(sleep=sleep)  # Guard for every in-page call
        self.navigator = NavigationController(self.session, guard=self.guard, sleep=sleep)  # Sole owner of the execution context


    def launch_browser(self) -> None:
        """
        Launches the browser session.

        :return: None
        """

        self.session.launch()  # Start Playwright and Chromium


    def close_browser(self) -> None:
        """
        Closes the browser session.

        :return: None
        """

        self.session.close()  # Close Chromium and stop Playwright


    def build_listing_url(self, search_term: str = "", category: str = DEFAULT_CATEGORY) -> str:
        """
        Builds the address of a search or category page.

        :param search_term: Search term (takes priority over the category)
        :param category: Category name or identifier
        :return: Absolute catalog address
        """

        if search_term:  # Search results page
            return f"{BASE_URL}/{self.locale}/search/{quote(search_term, safe='')}"
        return f"{BASE_URL}/{self.locale}/category/{category}"  # Category page


    def get_rendered_html(self, context: ExecutionContext) -> str:
        """
        Reads the rendered HTML of the page through the guard.

        :param context: Settled execution context
        :return: HTML content
        """

        return self.guard.guarded_run(context, lambda ctx: ctx.content())  # Snapshot the live document


    def rescan_price(self, context: ExecutionContext, details: Any) -> Any:
        """
        Runs a shorter second settle and rescans the offer labels for a price.

        :param context: Context of the detail page
        :param details: ExtractedDetails from the first pass
        :return: PriceResolution, overridden when the rescan found a non-free price
        """

        warning_output("  Price not found or free, trying again...")
        self.sleep(RESCAN_INITIAL_WAIT)  # Let late widgets mount
        self.guard.guarded_run(context, lambda ctx: ctx.scroll_to_fraction(RESCAN_SCROLL_FRACTION))  # Bring the offer cards into view
        self.sleep(RESCAN_AFTER_SCROLL_WAIT)  # Let the cards render
        self.guard.guarded_run(context, lambda ctx: ctx.scroll_to_top())  # Scroll back to the top
        self.sleep(RESCAN_AFTER_TOP_WAIT)  # Let the page settle

        rescanned = rescan_offer_labels(parse_html(self.get_rendered_html(context)))  # Narrow scan of the offer labels
        resolution = apply_rescan(details.price_resolution, rescanned)  # Override when a non-free price was found
        if resolution is not details.price_resolution:  # The rescan changed the result
            print(f"{BackgroundColors.GREEN}  Price found: {BackgroundColors.CYAN}{resolution.price}{Style.RESET_ALL}")
        return resolution  # Return the final resolution


    def scrape_game_details(self, url: str) -> GameDetailRecord:
        """
        Scrapes one game detail page.

        :param url: Absolute address of the detail page
        :return: Success record, or error record when the page could not be loaded or read
        """

        try:  # Navigation and guarded reads may fail for this target only
            context = self.navigator.settle_at(url)  # Navigate and settle
            details = extract_game_details(self.get_rendered_html(context), url)  # First extraction pass

            if details.all_prices:  # Show every candidate for auditing
                print(f"  Found prices: {', '.join(details.all_prices)}")

            resolution = details.price_resolution  # First-pass price
            if needs_rescan(details.price):  # Missing or free price
                resolution = self.rescan_price(context, details)
        except (NavigationFailure, ExecutionFailure) as e:  # Failure confined to this target
            print(f"{BackgroundColors.RED}Error while loading details: {e.message}{Style.RESET_ALL}")
            return GameDetailRecord.error_record(url, e.message)

        return GameDetailRecord(
            url=url,
            title=details.title,
            price=resolution.price,
            all_prices=list(resolution.all_prices),
            original_price=details.original_price,
            discount=details.discount,
            description=details.description,
            rating=details.rating,
            platform=details.platform,
            publisher=details.publisher,
            release_date=details.release_date,
            genres=details.genres,
            image=details.image,
        )


    def scrape_games(self, targets: Sequence[str], delay: float = DEFAULT_INTER_DELAY) -> List[GameDetailRecord]:
        """
        Scrapes every detail page in order.

        :param targets: Ordered detail page addresses
        :param delay: Seconds to wait between pages
        :return: One record per target, in input order
        """

        print(f"Found {len(targets)} URLs to scrape.")
        return run_batch(targets, self.scrape_game_details, inter_delay=delay, sleep=self.sleep)  # One record per target


    def scrape_game_prices(self, search_term: str = "", category: str = DEFAULT_CATEGORY, limit: int = DEFAULT_LISTING_LIMIT) -> List[ListingRecord]:
        """
        Reads game cards from a search or category page.

        :param search_term: Search term (takes priority over the category)
        :param category: Category name or identifier
        :param limit: Maximum number of cards returned
        :return: ListingRecords deduplicated by title
        :raises NavigationFailure: When the catalog page cannot be loaded
        :raises ExecutionFailure: When the page content cannot be read
        """

        print(f"Searching for: {search_term or 'all games'}...")
        url = self.build_listing_url(search_term, category)  # Catalog address
        context = self.navigator.open_listing(url)  # Load the catalog page
        games = list_candidates(self.get_rendered_html(context), limit=limit, base_url=url)  # Read the cards
        verbose_output(f"{BackgroundColors.GREEN}Listing returned {BackgroundColors.CYAN}{len(games)}{BackgroundColors.GREEN} games{Style.RESET_ALL}")
        return games  # Return the listing


    def scrape_alternative_listing(self, limit: int = DEFAULT_LISTING_LIMIT) -> List[ListingRecord]:
        """
        Reads game tiles from the curated category page.

        :param limit: Maximum number of cards returned
        :return: ListingRecords deduplicated by title
        """

        url = self.build_listing_url(category=ALTERNATIVE_CATEGORY)  # Curated category address
        context = self.navigator.open_listing(url, settle_wait=ALTERNATIVE_SETTLE_WAIT)  # Slower page, longer wait
        soup = parse_html(self.get_rendered_html(context))  # Parse the snapshot
        return dedupe_by_title(read_cards(soup, TILE_LAYOUT, url))[:limit]  # Tile layout only
