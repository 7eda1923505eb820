"""
Splits free-form itinerary text into titled sections for display.

The model is asked to write headings such as "Day 1: Arrival", "Food:" or
"Local Tips:". Each non-blank line is checked against HEADING_PATTERNS in
order; a match starts a new section, anything else is content of the
section currently open. Text before the first heading is grouped under
"Overview".
"""

import re
from typing import List, NamedTuple, Optional, Pattern

from wanderai.models.domain import IconTag, Section

OVERVIEW_TITLE = "Overview"
FALLBACK_TITLE = "Generated Itinerary"


class HeadingPattern(NamedTuple):
    matcher: Pattern[str]
    title: Optional[str]  # None: use the matched line itself
    icon_tag: IconTag
    is_day: bool = False


def _label(label: str, title: str, icon_tag: IconTag) -> HeadingPattern:
    return HeadingPattern(
        re.compile(rf"^({re.escape(label)})\b:?", re.IGNORECASE), title, icon_tag
    )


HEADING_PATTERNS: List[HeadingPattern] = [
    HeadingPattern(
        re.compile(r"^(Day \d+.*)", re.IGNORECASE), None, IconTag.CALENDAR, True
    ),
    _label("Activities", "Activities & Attractions", IconTag.ATTRACTIONS),
    _label("Attractions", "Activities & Attractions", IconTag.ATTRACTIONS),
    _label("Food Recommendations", "Food Recommendations", IconTag.FOOD),
    _label("Food", "Food Recommendations", IconTag.FOOD),
    _label("Hotel Suggestions", "Hotel Suggestions", IconTag.HOTEL),
    _label("Accommodation", "Hotel Suggestions", IconTag.HOTEL),
    _label("Hotels", "Hotel Suggestions", IconTag.HOTEL),
    _label("Local Tips", "Local Tips & Advice", IconTag.TIPS),
    _label("Tips", "Local Tips & Advice", IconTag.TIPS),
    _label("Transportation", "Transportation", IconTag.TRANSPORTATION),
]


def match_heading(line: str) -> Optional[Section]:
    """Returns a freshly opened section if `line` is a heading, else None."""
    for pattern in HEADING_PATTERNS:
        match = pattern.matcher.match(line)
        if not match:
            continue

        if pattern.is_day:
            title = match.group(1)
            if title.endswith(":"):
                title = title[:-1]
            title = title.strip()
        else:
            title = pattern.title

        section = Section(
            title=title, icon_tag=pattern.icon_tag, is_day_section=pattern.is_day
        )
        remainder = line[match.end():].strip()
        if remainder:
            section.content.append(remainder)
        return section
    return None


def segment(text: str) -> List[Section]:
    lines = [line.strip() for line in (text or "").splitlines() if line.strip()]

    sections: List[Section] = []
    current: Optional[Section] = None

    for line in lines:
        heading = match_heading(line)
        if heading:
            if current:
                sections.append(current)
            current = heading
            continue

        if current is None:
            current = Section(title=OVERVIEW_TITLE, icon_tag=IconTag.OVERVIEW)
        current.content.append(line)

    if current:
        sections.append(current)

    if not sections and lines:
        sections = [
            Section(title=FALLBACK_TITLE, icon_tag=IconTag.OVERVIEW, content=list(lines))
        ]
    return sections
