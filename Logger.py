"""
Logger.py — Mirror terminal output into a log file

Created     : 2026-10-17
Description :
    File-like object meant to replace `sys.stdout` and `sys.stderr`. Every
    write goes to the original terminal stream and to a log file; ANSI color
    codes are stripped from the file copy so the log stays readable.

Usage:
    from Logger import Logger
    logger = Logger("./Logs/main.log", clean=True)
    sys.stdout = logger
    sys.stderr = logger

Dependencies:
    - Python standard library: `os`, `re`, `sys`
"""

import os  # For creating the log directory
import re  # For stripping ANSI color codes
import sys  # For the original terminal stream


ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")  # Matches terminal color and cursor sequences


class Logger:
    """
    Tee writer that sends output to the terminal and to a log file.

    :param logfile_path: Path to the log file
    :param clean: When True the log file is truncated on creation
    """


    def __init__(self, logfile_path, clean=False):
        self.logfile_path = logfile_path  # Store the log file path
        self.terminal = sys.__stdout__  # Keep the real terminal stream for console output

        log_directory = os.path.dirname(logfile_path)  # Directory that will hold the log file
        if log_directory:  # Only create when the path has a directory part
            os.makedirs(log_directory, exist_ok=True)  # Create the log directory if it does not exist

        mode = "w" if clean else "a"  # Truncate or append depending on the clean flag
        self.logfile = open(logfile_path, mode, encoding="utf-8")  # Open the log file


    def write(self, message):
        """
        Writes a message to the terminal and to the log file.

        :param message: Text to write
        :return: None
        """

        if self.terminal is not None:  # The terminal stream may be missing in detached processes
            self.terminal.write(message)  # Write the colored message to the terminal
        self.logfile.write(ANSI_ESCAPE_PATTERN.sub("", message))  # Write the uncolored message to the log file
        self.logfile.flush()  # Keep the log file current in case the process dies


    def flush(self):
        """
        Flushes both streams.

        :return: None
        """

        if self.terminal is not None:  # Skip when no terminal stream exists
            self.terminal.flush()  # Flush the terminal stream
        self.logfile.flush()  # Flush the log file


    def isatty(self):
        return False  # Log output is never an interactive terminal


    def close(self):
        """
        Closes the log file.

        :return: None
        """

        if not self.logfile.closed:  # Avoid closing twice
            self.logfile.close()  # Close the log file handle
