"""
================================================================================
PlayStation Store Game Scraper
================================================================================
Created     : <2026-10-17>
Description :
    This script scrapes game information from the PlayStation Store. When the
    input file lists detail page URLs, every page is scraped in order and the
    results are written to a JSON file. Otherwise a catalog listing (search
    results or a category) is scraped instead.

    Key features include:
        - Detail page scraping with retries on detached or closed pages
        - Price resolution with every candidate kept for auditing
        - Catalog listing by search term or category
        - Logging and error handling for robust operation

Usage:
    1. Optionally configure the .env file (see .env.example).
    2. List one game URL per line in games.txt (lines starting with # are ignored).
    3. Run the script:
            $ python main.py
            $ python main.py --input games.txt --output scraped-games.json --verbose
            $ python main.py --search "gran turismo" --limit 10
    4. Verify the JSON output file and the ./Logs/ directory.

Outputs:
    - scraped-games.json (detail pages) or playstation-games.json (listing)
    - Logs in ./Logs/ for execution details

Dependencies:
    - Python >= 3.8
    - playwright, beautifulsoup4, lxml for scraping
    - colorama for terminal coloring
    - python-dotenv for environment variables
    - tqdm for progress bars

Assumptions & Notes:
    - Websites' structures may change; updates may be needed for selectors
    - Per-game failures are written to the output file as error records
"""

import argparse  # For command-line arguments
import datetime  # For getting the current date and time
import json  # For writing the results file
import os  # For environment variables and file paths
import sys  # For system-specific parameters and functions
from colorama import Style  # For coloring the terminal
from dotenv import load_dotenv  # For loading environment variables
from errors import IOFailure  # For input and output failures
from Logger import Logger  # For logging output to both terminal and file
from pathlib import Path  # For handling file paths
from PlayStation import DEFAULT_CATEGORY, PlayStationScraper  # Import the PlayStationScraper class
from listing import DEFAULT_LISTING_LIMIT  # For the default listing size
from terminal import BackgroundColors, set_verbose, verbose_output  # For terminal output


# File Path Constants:
ENV_PATH = "./.env"  # The path to the .env file
INPUT_FILE = "games.txt"  # Default input file with one URL per line
OUTPUT_FILE = "scraped-games.json"  # Default output file for detail pages
LISTING_OUTPUT_FILE = "playstation-games.json"  # Default output file for listings
LOGS_DIRECTORY = "./Logs/"  # The path to the logs directory

# Delay Constants:
DELAY_BETWEEN_REQUESTS = 3  # Seconds to wait between detail pages

# URL Constants:
URL_SCHEME_PREFIX = "http"  # Lines must start with this prefix to count as URLs


# Functions Definitions:


def verify_filepath_exists(filepath):
    """
    Verify if a file or folder exists at the specified path.

    :param filepath: Path to the file or folder
    :return: True if the file or folder exists, False otherwise
    """

    verbose_output(
        f"{BackgroundColors.GREEN}Verifying if the file or folder exists at the path: {BackgroundColors.CYAN}{filepath}{Style.RESET_ALL}"
    )  # Output the verbose message

    return os.path.exists(filepath)  # Return True if the file or folder exists, False otherwise


def parse_urls(lines):
    """
    Filters raw input lines down to target URLs.

    :param lines: Iterable of raw lines
    :return: List of URLs in input order
    """

    urls = []  # URLs in input order
    for line in lines:  # Read each line
        line = line.strip()  # Strip whitespace
        if not line or line.startswith("#"):  # Blank lines and comments
            continue  # Skip the line
        if not line.startswith(URL_SCHEME_PREFIX):  # Not a URL
            continue  # Skip the line
        urls.append(line)  # Keep the URL
    return urls  # Return the URLs


def read_urls_from_file(input_file=INPUT_FILE):
    """
    Reads the target URLs from the input file.

    :param input_file: Path to the input file
    :return: List of URLs in input order
    :raises IOFailure: When the file does not exist or cannot be read
    """

    if not verify_filepath_exists(input_file):  # The file must exist
        raise IOFailure(input_file, "file does not exist")

    try:  # Attempt to read the file
        with open(input_file, "r", encoding="utf-8") as fh:  # Open the input file with UTF-8 encoding
            return parse_urls(fh.read().splitlines())  # Keep only URL lines
    except (OSError, UnicodeDecodeError) as e:  # Unreadable file
        raise IOFailure(input_file, str(e)) from e


def save_to_file(records, output_file):
    """
    Writes records to a pretty-printed UTF-8 JSON file.

    :param records: Records exposing to_dict()
    :param output_file: Path to the output file
    :return: None
    :raises IOFailure: When the file cannot be written
    """

    data = [record.to_dict() for record in records]  # Serialize every record
    try:  # Attempt to write the file
        output_dir = os.path.dirname(output_file)  # Directory of the output file
        if output_dir:  # Create missing parent directories
            os.makedirs(output_dir, exist_ok=True)
        with open(output_file, "w", encoding="utf-8") as fh:  # Open the output file with UTF-8 encoding
            json.dump(data, fh, indent=2, ensure_ascii=False)  # Keep non-ASCII titles readable
    except OSError as e:  # Unwritable path
        raise IOFailure(output_file, str(e)) from e

    print(f"{BackgroundColors.GREEN}Data saved to {BackgroundColors.CYAN}{output_file}{Style.RESET_ALL}")


def summarize_records(records):
    """
    Counts successful and failed records.

    :param records: GameDetailRecord list
    :return: Tuple (total, successful, failed)
    """

    failed = sum(1 for record in records if record.is_error)  # Error records
    return len(records), len(records) - failed, failed  # Totals


def print_summary(records):
    """
    Prints the batch results summary.

    :param records: GameDetailRecord list
    :return: None
    """

    total, successful, failed = summarize_records(records)  # Count the outcomes
    print(f"\n{BackgroundColors.BOLD}=== Results ==={Style.RESET_ALL}")
    print(f"{BackgroundColors.GREEN}Total scraped: {BackgroundColors.CYAN}{total}{BackgroundColors.GREEN} games{Style.RESET_ALL}")
    print(f"{BackgroundColors.GREEN}Successful: {BackgroundColors.CYAN}{successful}{Style.RESET_ALL}")
    print(f"{BackgroundColors.RED}Failed: {BackgroundColors.CYAN}{failed}{Style.RESET_ALL}")


def print_listing(games):
    """
    Prints a numbered listing.

    :param games: ListingRecord list
    :return: None
    """

    print(f"\n{BackgroundColors.GREEN}Found {BackgroundColors.CYAN}{len(games)}{BackgroundColors.GREEN} games:{Style.RESET_ALL}")
    for index, game in enumerate(games, 1):  # Numbered from one
        print(f"{index}. {game.title} - {game.price}")


def env_flag(name, default=False):
    return os.getenv(name, str(default)).strip().lower() in ("1", "true", "yes")  # Boolean environment variable


def build_parser():
    """
    Builds the command-line parser. Defaults come from the environment.

    :return: argparse.ArgumentParser
    """

    parser = argparse.ArgumentParser(description="Scrape game information from the PlayStation Store.")
    parser.add_argument("--input", default=os.getenv("INPUT_FILE", INPUT_FILE), help="File with one game URL per line")
    parser.add_argument("--output", default=os.getenv("OUTPUT_FILE", OUTPUT_FILE), help="JSON file for detail page results")
    parser.add_argument("--listing-output", default=os.getenv("LISTING_OUTPUT_FILE", LISTING_OUTPUT_FILE), help="JSON file for listing results")
    parser.add_argument("--delay", type=float, default=float(os.getenv("DELAY_BETWEEN_REQUESTS", DELAY_BETWEEN_REQUESTS)), help="Seconds to wait between detail pages")
    parser.add_argument("--search", default="", help="Search term for listing mode")
    parser.add_argument("--category", default=DEFAULT_CATEGORY, help="Category for listing mode")
    parser.add_argument("--limit", type=int, default=DEFAULT_LISTING_LIMIT, help="Maximum number of games in listing mode")
    parser.add_argument("--headed", action="store_true", default=not env_flag("HEADLESS", True), help="Show the browser window")
    parser.add_argument("--verbose", action="store_true", default=env_flag("VERBOSE"), help="Print detailed messages")
    return parser  # Return the configured parser


def load_targets(input_file):
    """
    Loads the target URLs, returning an empty list when the input file is missing or unreadable.

    :param input_file: Path to the input file
    :return: List of URLs
    """

    try:  # The input file is optional
        return read_urls_from_file(input_file)
    except IOFailure as e:  # Fall back to listing mode
        print(f"{BackgroundColors.YELLOW}Could not read {BackgroundColors.CYAN}{e.path}{BackgroundColors.YELLOW} ({e.message}). Using listing mode.{Style.RESET_ALL}")
        return []


def run_listing_mode(scraper, args):
    """
    Scrapes a catalog listing, with the curated category as fallback.

    :param scraper: Launched PlayStationScraper
    :param args: Parsed command-line arguments
    :return: None
    """

    print(f"\n{BackgroundColors.BOLD}=== Scraping popular games ==={Style.RESET_ALL}")
    games = scraper.scrape_game_prices(args.search, args.category, args.limit)  # First listing pass

    if not games:  # Nothing found, try the curated category
        print(f"{BackgroundColors.YELLOW}No games found. Trying the alternative approach...{Style.RESET_ALL}")
        games = scraper.scrape_alternative_listing(args.limit)

    if not games:  # Still nothing
        print(f"{BackgroundColors.YELLOW}Still no games found. The store may be blocking scrapers or the selectors need updating.{Style.RESET_ALL}")
        return

    print_listing(games)  # Show the listing
    save_to_file(games, args.listing_output)  # Persist the listing


def run_batch_mode(scraper, targets, args):
    """
    Scrapes every target URL and writes the records.

    :param scraper: Launched PlayStationScraper
    :param targets: Target URLs
    :param args: Parsed command-line arguments
    :return: None
    """

    print(f"\n{BackgroundColors.BOLD}=== Scraping games from {BackgroundColors.CYAN}{args.input}{BackgroundColors.GREEN} ==={Style.RESET_ALL}")
    records = scraper.scrape_games(targets, delay=args.delay)  # One record per target
    save_to_file(records, args.output)  # Persist every record, failures included
    print_summary(records)  # Show the totals


def to_seconds(obj):
    """
    Converts various time-like objects to seconds.

    :param obj: The object to convert (can be int, float, timedelta, datetime, etc.)
    :return: The equivalent time in seconds as a float, or None if conversion fails
    """

    if obj is None:  # None can't be converted
        return None  # Signal failure to convert
    if isinstance(obj, (int, float)):  # Already numeric (seconds or timestamp)
        return float(obj)  # Return as float seconds
    if hasattr(obj, "total_seconds"):  # Timedelta-like objects
        return float(obj.total_seconds())  # Use the total_seconds() method
    if hasattr(obj, "timestamp"):  # Datetime-like objects
        return float(obj.timestamp())  # Use timestamp() to get seconds since epoch
    return None  # Couldn't convert


def calculate_execution_time(start_time, finish_time=None):
    """
    Calculates the execution time and returns a human-readable string.

    Accepts either two datetimes or timestamps, or a single timedelta or
    number of seconds. Returns a string like "1h 2m 3s".
    """

    if finish_time is None:  # Single-argument mode: start_time already represents a duration
        total_seconds = to_seconds(start_time) or 0.0
    else:  # Two-argument mode: compute finish_time - start_time
        start_seconds = to_seconds(start_time)  # Convert start to seconds
        finish_seconds = to_seconds(finish_time)  # Convert finish to seconds
        total_seconds = finish_seconds - start_seconds if start_seconds is not None and finish_seconds is not None else 0.0

    total_seconds = abs(total_seconds)  # Normalize negative durations

    days = int(total_seconds // 86400)  # Compute full days
    hours = int((total_seconds % 86400) // 3600)  # Compute remaining hours
    minutes = int((total_seconds % 3600) // 60)  # Compute remaining minutes
    seconds = int(total_seconds % 60)  # Compute remaining seconds

    if days > 0:  # Include days when present
        return f"{days}d {hours}h {minutes}m {seconds}s"
    if hours > 0:  # Include hours when present
        return f"{hours}h {minutes}m {seconds}s"
    if minutes > 0:  # Include minutes when present
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"  # Fallback: only seconds


def main(argv=None):
    """
    Main function.

    :param argv: Optional argument list (defaults to sys.argv)
    :return: None
    """

    load_dotenv(ENV_PATH)  # Load environment variables before reading settings
    args = build_parser().parse_args(argv)  # Parse the command-line arguments
    set_verbose(args.verbose)  # Apply the verbose flag to every module

    logger = Logger(f"{LOGS_DIRECTORY}{Path(__file__).stem}.log", clean=True)  # Create a Logger instance
    sys.stdout = logger  # Redirect stdout to the logger
    sys.stderr = logger  # Redirect stderr to the logger

    print(
        f"{BackgroundColors.CLEAR_TERMINAL}{BackgroundColors.BOLD}{BackgroundColors.GREEN}Welcome to the {BackgroundColors.CYAN}PlayStation Store Game Scraper{BackgroundColors.GREEN} program!{Style.RESET_ALL}",
        end="\n",
    )  # Output the welcome message
    start_time = datetime.datetime.now()  # Get the start time of the program

    scraper = PlayStationScraper(
        headless=not args.headed,
        executable_path=os.getenv("CHROME_EXECUTABLE_PATH", ""),
        locale=os.getenv("STORE_LOCALE", "en-rs"),
    )  # Settings read after the .env file was loaded

    try:  # The browser must be closed whatever happens
        scraper.launch_browser()  # Start the browser
        targets = load_targets(args.input)  # URLs to scrape, empty in listing mode
        if targets:  # Batch mode
            run_batch_mode(scraper, targets, args)
        else:  # Listing mode
            run_listing_mode(scraper, args)
    except Exception as e:  # Uncaught top-level failure
        print(f"{BackgroundColors.RED}Error: {e}{Style.RESET_ALL}")
    finally:  # Always release the browser
        scraper.close_browser()

    finish_time = datetime.datetime.now()  # Get the finish time of the program
    print(
        f"{BackgroundColors.GREEN}Execution time: {BackgroundColors.CYAN}{calculate_execution_time(start_time, finish_time)}{Style.RESET_ALL}"
    )  # Output the execution time
    print(
        f"{BackgroundColors.BOLD}{BackgroundColors.GREEN}Program finished.{Style.RESET_ALL}"
    )  # Output the end of the program message

    sys.stdout = sys.__stdout__  # Restore the terminal streams
    sys.stderr = sys.__stderr__
    logger.close()  # Flush and close the log file


if __name__ == "__main__":
    """
    This is the standard boilerplate that calls the main() function.

    :return: None
    """

    main()  # Call the main function
