"""SQL identifier quoting.

Every place that embeds an object name into SQL text goes through a
``Quoter`` instance handed to it by the caller, so the quoting character
can be swapped per dialect. Both databases are trusted; this keeps reserved
words and odd names from breaking statements, nothing more.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Quoter:
    """Quote identifiers with a dialect-specific delimiter pair."""

    open_char: str = '"'
    close_char: str = '"'

    def __call__(self, identifier: str) -> str:
        return self.quote(identifier)

    def quote(self, identifier: str) -> str:
        """Quote a single identifier, doubling embedded closing delimiters."""
        escaped = identifier.replace(self.close_char, self.close_char * 2)
        return f"{self.open_char}{escaped}{self.close_char}"

    def quote_all(self, identifiers: list[str]) -> str:
        """Quote and comma-join a list of identifiers."""
        return ", ".join(self.quote(i) for i in identifiers)


SQLITE_QUOTER = Quoter('"', '"')
BACKTICK_QUOTER = Quoter("`", "`")
