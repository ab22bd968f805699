"""
terminal.py — Terminal colors and verbose output helpers

Created     : 2026-10-17
Description :
    Single home for the terminal color palette and the `verbose_output`
    helper shared by every scraper module. `VERBOSE` is read from the
    environment once and can be toggled at runtime with `set_verbose`
    (the CLI `--verbose` flag does this).

Usage:
    from terminal import BackgroundColors, verbose_output
    verbose_output(f"{BackgroundColors.GREEN}Detail message{Style.RESET_ALL}")

Dependencies:
    - colorama
"""

import os  # For reading the VERBOSE environment variable
from colorama import Style  # For resetting terminal colors


# Macros:
class BackgroundColors:  # Colors for the terminal
    CYAN = "\033[96m"  # Cyan
    GREEN = "\033[92m"  # Green
    YELLOW = "\033[93m"  # Yellow
    RED = "\033[91m"  # Red
    BOLD = "\033[1m"  # Bold
    UNDERLINE = "\033[4m"  # Underline
    CLEAR_TERMINAL = "\033[H\033[J"  # Clear the terminal


# Execution Constants:
VERBOSE = os.getenv("VERBOSE", "False").lower() == "true"  # Set to True to output verbose messages


# Functions Definitions:


def set_verbose(enabled=True):
    """
    Enables or disables verbose messages for every module.

    :param enabled: True to print verbose messages
    :return: None
    """

    global VERBOSE  # Module-wide flag read by verbose_output
    VERBOSE = bool(enabled)  # Store the new flag value


def verbose_output(true_string="", false_string=""):
    """
    Outputs a message if the VERBOSE constant is set to True.

    :param true_string: The string to be outputted if the VERBOSE constant is set to True.
    :param false_string: The string to be outputted if the VERBOSE constant is set to False.
    :return: None
    """

    if VERBOSE and true_string != "":  # If VERBOSE is True and a true_string was provided
        print(true_string)  # Output the true statement string
    elif false_string != "":  # If a false_string was provided
        print(false_string)  # Output the false statement string


def warning_output(message=""):
    """
    Prints a yellow warning line.

    :param message: The warning text
    :return: None
    """

    print(f"{BackgroundColors.YELLOW}{message}{Style.RESET_ALL}")  # Output the warning in yellow


def error_output(message=""):
    """
    Prints a red error line.

    :param message: The error text
    :return: None
    """

    print(f"{BackgroundColors.RED}{message}{Style.RESET_ALL}")  # Output the error in red
