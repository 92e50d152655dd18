"""HTML parsing and querying with CSS selectors, with a command-line tool."""

__version__ = "0.23.1"