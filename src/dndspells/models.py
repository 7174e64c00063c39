"""Pydantic model for a parsed spell.

Attributes are snake_case in Python; the serialized names are lower-camel
(castingTime, higherLevel, ...), which is also what the parser produces from
the page's header labels.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SpellRecord(BaseModel):
    """A single spell, fully populated from one wiki page."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    name: str = Field(description="Page title (e.g., 'Fireball')")
    level: str = Field(description="'Cantrip' or '<ordinal> Level' (e.g., '3rd Level')")
    school: str = Field(description="School of magic (e.g., 'Evocation')")
    casting_time: str
    range: str
    components: str
    duration: str
    description: str = Field(description="Body text, newline-joined")
    higher_level: str = Field(default="", description="'At Higher Levels.' text, empty if absent")
    classes: tuple[str, ...] = Field(description="Class spell lists, in page order")

    def to_json_dict(self) -> dict:
        """Convert to JSON file format (camelCase keys)."""
        return self.model_dump(by_alias=True, mode="json")
