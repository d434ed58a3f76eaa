"""
Category styling for evidence map elements and connections.

Every element carries an "element type" attribute. The known types map to a
fixed fill color and radius; anything else (including a missing type) falls
back to the UNKNOWN style, so the lookup is total.

Connections carry a free-form "connection type". Only "++" (strong positive
influence) is drawn heavier than the rest.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ElementCategory(Enum):
    CORE_STORY = "Core Story"
    AUTHORITARIANISM_POPULISM = "Authoritarianism/Populism"
    DEMOCRACY = "Democracy"
    INFORMATION_CONFUSION = "Information Confusion"
    JOURNALISM = "Journalism"
    MEDIA_GROWTH = "Media Growth"
    UNKNOWN = "unknown"

    @classmethod
    def from_raw(cls, value: Optional[str]) -> "ElementCategory":
        """Map a raw "element type" string to a category, defaulting to UNKNOWN."""
        if not isinstance(value, str):
            return cls.UNKNOWN
        value = value.strip()
        for member in cls:
            if member is not cls.UNKNOWN and member.value == value:
                return member
        return cls.UNKNOWN


@dataclass(frozen=True)
class CategoryStyle:
    color: str
    radius: float
    label_font_size: int
    label_offset: float


_CORE_STYLE = CategoryStyle(color='#ff0064', radius=15.0, label_font_size=12, label_offset=20.0)

ELEMENT_STYLES = {
    ElementCategory.CORE_STORY: _CORE_STYLE,
    ElementCategory.AUTHORITARIANISM_POPULISM: CategoryStyle('#373737', 10.0, 10, 15.0),
    ElementCategory.DEMOCRACY: CategoryStyle('#143cff', 10.0, 10, 15.0),
    ElementCategory.INFORMATION_CONFUSION: CategoryStyle('#50f5c8', 10.0, 10, 15.0),
    ElementCategory.JOURNALISM: CategoryStyle('#dcf500', 10.0, 10, 15.0),
    ElementCategory.MEDIA_GROWTH: CategoryStyle('#e1e1e1', 10.0, 10, 15.0),
    ElementCategory.UNKNOWN: CategoryStyle('#dedede', 10.0, 10, 15.0),  # neutral gray
}

# Link styling
STRONG_CONNECTION_TYPE = '++'
LINK_COLOR = '#999999'
SELECTED_LINK_COLOR = '#007AFF'
SELECTED_LINK_WIDTH = 3.0


def style_for(category: ElementCategory) -> CategoryStyle:
    return ELEMENT_STYLES.get(category, ELEMENT_STYLES[ElementCategory.UNKNOWN])


def link_stroke_width(connection_type: Optional[str], emphasized: bool = False) -> float:
    """
    Stroke width for a connection type.

    "++" links are one unit heavier than everything else; hover emphasis adds
    one more unit on top of the base width.
    """
    base = 2.0 if connection_type == STRONG_CONNECTION_TYPE else 1.0
    return base + 1.0 if emphasized else base
