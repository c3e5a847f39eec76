from __future__ import annotations


class M3UParseError(Exception):
    """Base class for fatal parse failures."""


class InvalidSource(M3UParseError):
    def __init__(self, reason: str = "source is missing or does not start with #EXTM3U"):
        super().__init__(reason)
        self.reason = reason


class EmptyResult(M3UParseError):
    def __init__(self) -> None:
        super().__init__("the playlist contains no valid media entries")


class UnusableLocator(M3UParseError):
    """
    A locator line could not be normalized under the current strictness.

    Raised only after every line has been processed; `count` is the number
    of locator lines that failed, `line`/`text` identify the first one.
    """

    def __init__(self, line: int, text: str, count: int = 1):
        msg = f"line {line}: unusable locator {text!r}"
        if count > 1:
            msg += f" (and {count - 1} more)"
        super().__init__(msg)
        self.line = line
        self.text = text
        self.count = count
