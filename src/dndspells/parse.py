"""Parse the text of a wikidot spell page into a SpellRecord.

Expected page text (as produced by fetch.extract_page_text):

    Fireball
    Source: Player's Handbook
    3rd-level evocation
    Casting Time: 1 action
    Range: 150 feet
    Components: V, S, M (a tiny ball of bat guano and sulfur)
    Duration: Instantaneous
    A bright streak flashes from your pointing finger...
    At Higher Levels. When you cast this spell using a spell slot of 4th level or higher, ...
    Spell Lists. Sorcerer, Wizard

The parser is a pure function of its input and is safe to call from many
threads at once.
"""

import re

from rich.console import Console

from .models import SpellRecord

console = Console()

# Content that is deliberately left out of the database
EXCLUDED_TITLE_MARKER = "(UA)"
EXCLUDED_SOURCE_MARKER = "Acquisitions Inc."

# Header lines, in the order the wiki emits them
HEADER_FIELDS = ("castingTime", "range", "components", "duration")

# A level line where a header line should be means the block is shifted
LEVEL_LINE_MARKERS = ("cantrip", "1st", "2nd", "3rd", "4th", "5th")

HIGHER_LEVEL_PREFIX = "At Higher Levels. "
CLASS_LIST_PREFIX = "Spell Lists. "
OPTIONAL_MARKER = "(Optional)"


class ParseError(Exception):
    """Raised when page text does not have the expected spell layout."""


class SpellExcluded(ParseError):
    """Raised for pages that are well-formed but out of scope (UA, Acquisitions Inc.)."""


def to_camel_case(s: str) -> str:
    """Convert a field label to a lower-camel identifier.

    Examples:
        "Casting Time" -> "castingTime"
        "Duration" -> "duration"
    """
    parts = re.sub(r"([a-z])([A-Z])", r"\1 \2", s).split(" ")
    return "".join(
        p[:1].upper() + p[1:].lower() if i else p.lower() for i, p in enumerate(parts)
    )


def looks_like_level_line(line: str) -> bool:
    """Check if a line reads like a '3rd-level evocation' / 'cantrip' header."""
    return any(marker in line for marker in LEVEL_LINE_MARKERS)


def parse_header_fields(lines: list[str]) -> dict[str, str]:
    """Parse the four 'Key: Value' header lines.

    Args:
        lines: Exactly the header lines, in page order

    Returns:
        Dict keyed by HEADER_FIELDS names

    Raises:
        ParseError: If a line has no colon, or a field is unknown or missing
    """
    fields: dict[str, str] = {}
    for line in lines:
        key, sep, value = line.partition(":")
        if not sep:
            raise ParseError(f"Header line has no ':' separator: {line!r}")
        name = to_camel_case(key.strip())
        if name not in HEADER_FIELDS:
            raise ParseError(f"Unexpected header field {key.strip()!r}")
        fields[name] = value.strip()

    missing = [name for name in HEADER_FIELDS if name not in fields]
    if missing:
        raise ParseError(f"Missing header fields: {', '.join(missing)}")
    return fields


def parse_level_and_school(header: str) -> tuple[str, str]:
    """Split a level/school header into (level, school).

    "3rd-level evocation" -> ("3rd Level", "Evocation")
    "Evocation cantrip"   -> ("Cantrip", "Evocation")
    """
    tokens = header.split()
    if len(tokens) < 2:
        raise ParseError(f"Level/school header too short: {header!r}")

    first, second = tokens[0], tokens[1]
    if second == "cantrip":
        return "Cantrip", first
    return f"{first.split('-')[0]} Level", second[:1].upper() + second[1:].lower()


def parse_class_list(line: str) -> tuple[str, ...]:
    """Parse the 'Spell Lists. ' line into class names, in order."""
    if not line.startswith(CLASS_LIST_PREFIX):
        raise ParseError(f"Last line is not a class list: {line!r}")

    classes = []
    for entry in line[len(CLASS_LIST_PREFIX) :].split(","):
        entry = entry.strip()
        if entry.endswith(OPTIONAL_MARKER):
            entry = entry[: -len(OPTIONAL_MARKER)].rstrip()
        if entry:
            classes.append(entry)

    if not classes:
        raise ParseError("Class list is empty")
    return tuple(classes)


def split_body(body: list[str]) -> tuple[str, str, tuple[str, ...]]:
    """Separate body lines into (description, higher_level, classes).

    The last line is the class list. The line before it is the higher-level
    paragraph when it starts with 'At Higher Levels.'.

    Raises:
        ParseError: If the body is too short or the trailer lines are missing
    """
    if not body:
        raise ParseError("Page has no body after the header block")

    classes = parse_class_list(body[-1])

    higher_level = ""
    description_end = len(body) - 1
    if len(body) >= 2 and body[-2].startswith(HIGHER_LEVEL_PREFIX.rstrip()):
        higher_level = body[-2][len(HIGHER_LEVEL_PREFIX) :]
        description_end = len(body) - 2

    if description_end < 1:
        raise ParseError("Page has no description text")

    return "\n".join(body[:description_end]), higher_level, classes


def extract_spell(raw_text: str) -> SpellRecord:
    """Parse spell page text into a SpellRecord.

    Args:
        raw_text: Title line, a discarded source line, then the content block

    Returns:
        Fully populated SpellRecord

    Raises:
        SpellExcluded: If the page is out of scope
        ParseError: If the page does not have the expected layout
    """
    lines = raw_text.split("\n")
    name = lines[0].strip()

    if EXCLUDED_TITLE_MARKER in name:
        raise SpellExcluded(f"Unofficial content: {name}")
    if EXCLUDED_SOURCE_MARKER in raw_text:
        raise SpellExcluded(f"{EXCLUDED_SOURCE_MARKER} spell: {name}")

    if not name:
        raise ParseError("Page has no title")

    # Drop the title and the source/breadcrumb line
    content = lines[2:]
    if len(content) < 1 + len(HEADER_FIELDS):
        raise ParseError(f"Page too short: {len(lines)} lines")

    if looks_like_level_line(content[1]):
        raise ParseError(f"Irregular header block, level line where casting time expected: {content[1]!r}")

    header_end = 1 + len(HEADER_FIELDS)
    try:
        fields = parse_header_fields(content[1:header_end])
        level, school = parse_level_and_school(content[0])
        description, higher_level, classes = split_body(content[header_end:])

        return SpellRecord(
            name=name,
            level=level,
            school=school,
            description=description,
            higherLevel=higher_level,
            classes=classes,
            **fields,
        )
    except (ValueError, IndexError) as e:
        raise ParseError(f"Failed to build record for {name}: {e}") from e


def parse_spell(raw_text: str) -> SpellRecord | None:
    """Parse spell page text, returning None for rejected pages.

    Malformed and excluded pages are expected; they are logged and skipped,
    never raised.
    """
    try:
        return extract_spell(raw_text)
    except SpellExcluded as e:
        console.print(f"[dim]⊘ {e}[/dim]")
    except ParseError as e:
        console.print(f"[yellow]⚠[/yellow] Could not parse spell: {e}")
        console.print(raw_text.split("\n"), style="dim")
    return None
