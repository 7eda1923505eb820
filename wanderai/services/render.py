from typing import Iterable, List

from wanderai.core.segmenter import segment
from wanderai.models.domain import RenderedSection, Section

BULLET_PREFIXES = ("- ", "* ")
BULLET_GLYPH = "•"


def is_bullet(line: str) -> bool:
    return line.startswith(BULLET_PREFIXES)


def render_line(line: str) -> str:
    """Swaps a leading "- " or "* " for a bullet glyph. Display only."""
    if is_bullet(line):
        return f"{BULLET_GLYPH} {line[2:].strip()}"
    return line


def render_section(section: Section) -> RenderedSection:
    paragraphs, bullets = [], []
    for line in section.content:
        if is_bullet(line):
            bullets.append(line[2:].strip())
        elif line.strip():
            paragraphs.append(line.strip())
    return RenderedSection(
        title=section.title,
        icon_tag=section.icon_tag,
        is_day_section=section.is_day_section,
        paragraphs=paragraphs,
        bullets=bullets,
    )


def layout(sections: Iterable[Section]) -> List[RenderedSection]:
    """General sections first, then the day-by-day plan, each in text order."""
    sections = list(sections)
    ordered = [s for s in sections if not s.is_day_section] + [
        s for s in sections if s.is_day_section
    ]
    return [render_section(s) for s in ordered]


def render_itinerary(text: str) -> List[RenderedSection]:
    return layout(segment(text))
