"""
Commands parser.

Studio One's shortcut export is a flat HTML page:

    <h2>Section</h2>
    <table>
        <tr><td>Command</td><td>Shortcut</td></tr>
        ...
    </table>

Each <h2> owns the first <table> that follows it as a sibling. A heading
with no following table contributes nothing.
"""

from typing import List, Union

from bs4 import BeautifulSoup

from studio_helpers.commands.models import CommandRecord
from studio_helpers.errors import ParseError


SOURCE_NAME = "shortcuts export"


def _decode(markup: Union[str, bytes]) -> str:
    if isinstance(markup, bytes):
        try:
            return markup.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError(SOURCE_NAME, f"not UTF-8 text ({e})") from e
    if not isinstance(markup, str):
        raise ParseError(SOURCE_NAME, f"expected text, got {type(markup).__name__}")
    return markup


def parse_commands(markup: Union[str, bytes]) -> List[CommandRecord]:
    """
    Extract command records in document order.

    Args:
        markup: HTML text (bytes are decoded as UTF-8)

    Returns:
        One CommandRecord per table row that has at least one cell

    Raises:
        ParseError: If the input cannot be read as markup at all
    """
    text = _decode(markup)
    try:
        soup = BeautifulSoup(text, "html.parser")
    except Exception as e:
        raise ParseError(SOURCE_NAME, str(e)) from e

    commands: List[CommandRecord] = []
    for header in soup.find_all("h2"):
        section_name = header.get_text().strip()
        table = header.find_next_sibling("table")
        if table is None:
            continue

        for tr in table.find_all("tr"):
            cells = tr.find_all("td")
            if not cells:
                continue
            commands.append(CommandRecord(
                section_name=section_name,
                command_name=cells[0].get_text().strip(),
                shortcut=cells[1].get_text().strip() if len(cells) > 1 else "",
            ))

    return commands
