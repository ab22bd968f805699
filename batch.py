"""
================================================================================
Batch Orchestrator
================================================================================
Created     : 2026-10-17
Description :
    Runs a scrape callable over an ordered list of target addresses, one
    target at a time, with a fixed delay between targets. Every target yields
    exactly one record, in input order; an exception raised for one target
    becomes an error record for that target and the batch moves on, unless
    the browser session itself is gone (SessionFailure), which ends the run.

Usage:
    records = run_batch(urls, scraper.scrape_game_details, inter_delay=3.0)
"""

import sys  # For writing the progress bar to the real terminal
import time  # For the delay between targets
from colorama import Style  # For coloring the terminal
from errors import SessionFailure  # Failures that end the whole batch
from records import GameDetailRecord  # For error records
from terminal import BackgroundColors  # For terminal output
from tqdm import tqdm  # Progress bar for target processing
from typing import Any, Callable, List, Sequence  # For type hints


DEFAULT_INTER_DELAY = 3.0  # Seconds to wait between targets


def run_batch(targets: Sequence[str], scrape_target: Callable[[str], GameDetailRecord], inter_delay: float = DEFAULT_INTER_DELAY, sleep: Callable[[float], Any] = time.sleep) -> List[GameDetailRecord]:
    """
    Scrapes every target in order.

    :param targets: Ordered target addresses
    :param scrape_target: Callable returning the record of one target
    :param inter_delay: Seconds to wait between two targets (not after the last one)
    :param sleep: Callable used for waits, replaceable in tests
    :return: One record per target, in input order
    """

    records = []  # Records in input order
    total = len(targets)  # Number of targets

    pbar = tqdm(
        targets,
        desc=f"{BackgroundColors.GREEN}Scraping games{Style.RESET_ALL}",
        unit="game",
        ncols=100,
        bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}, {rate_fmt}]",
        file=sys.__stdout__,
    )
    for index, target in enumerate(pbar, 1):  # One target at a time
        pbar.set_description(f"{BackgroundColors.GREEN}Processing {BackgroundColors.CYAN}{index}{BackgroundColors.GREEN}/{BackgroundColors.CYAN}{total}{Style.RESET_ALL}")
        print(f"\n[{index}/{total}] Scraping: {target}")

        try:  # A failing target must not stop the batch
            record = scrape_target(target)
        except SessionFailure:  # A dead browser fails every remaining target, stop the run
            pbar.close()  # Release the progress bar before leaving
            raise
        except Exception as e:  # Turn the failure into data for this target
            print(f"{BackgroundColors.RED}Error while scraping {BackgroundColors.CYAN}{target}{BackgroundColors.RED}: {e}{Style.RESET_ALL}")
            record = GameDetailRecord.error_record(target, str(e) or type(e).__name__)
        records.append(record)  # Keep input order

        if record.is_error:  # Report the outcome of the target
            print(f"{BackgroundColors.RED}✗ Failed: {record.error}{Style.RESET_ALL}")
        else:
            print(f"{BackgroundColors.GREEN}✓ {BackgroundColors.CYAN}{record.title}{BackgroundColors.GREEN} - {BackgroundColors.CYAN}{record.price}{Style.RESET_ALL}")

        if index < total:  # No delay after the last target
            sleep(inter_delay)

    pbar.close()  # Release the progress bar
    return records  # Return the records in input order
