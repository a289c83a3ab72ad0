"""
reading_links.py - The "reading" section at the top of a lesson body

In the CSV layout a lesson's reading links are spread over fixed
link_N_text / link_N_url column pairs. In the JSON snapshot they live in a
Markdown section at the start of the lesson content:

    ### 讀經

    - [Genesis 1](https://...)
     - [NIV](https://...) | [KJV](https://...)
    - [Psalm 1](https://...)
     - [NIV](https://...)

Slots come in groups of LINK_GROUP_SIZE: the first slot of a group is a
standalone bullet, the rest of the group share one pipe-separated sub-item.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import markdown
from bs4 import BeautifulSoup

LINK_SLOT_COUNT = 8
LINK_GROUP_SIZE = 4

BULLET_LINE = re.compile(r"^\s*[-*+]\s")
# [text](url) with one level of nested brackets in the text
INLINE_LINK = re.compile(r'\[((?:[^\[\]]|\[[^\[\]]*\])*)\]\(\s*<?([^\s()<>]+)>?(?:\s+"[^"]*")?\s*\)')


@dataclass(frozen=True)
class ReadingLink:
    text: str
    url: str

    def as_markdown(self) -> str:
        return f"[{self.text}]({self.url})"


Slot = Optional[ReadingLink]


def link_columns(slot_count: int = LINK_SLOT_COUNT) -> List[str]:
    """CSV header names for the link slots, in column order."""
    columns = []
    for i in range(1, slot_count + 1):
        columns.extend([f"link_{i}_text", f"link_{i}_url"])
    return columns


def read_link_slots(record: Dict[str, str], slot_count: int = LINK_SLOT_COUNT) -> List[Slot]:
    """Collect the link slots of one CSV record; half-filled pairs count as empty."""
    slots: List[Slot] = []
    for i in range(1, slot_count + 1):
        text = record.get(f"link_{i}_text", "")
        url = record.get(f"link_{i}_url", "")
        slots.append(ReadingLink(text, url) if text and url else None)
    return slots


def build_reading_section(slots: Sequence[Slot], heading: str) -> str:
    """
    Render populated slots as the Markdown reading section.

    Returns "" when no slot is populated so callers never insert a bare
    heading.
    """
    if not any(slots):
        return ""

    lines = [heading, ""]
    for start in range(0, len(slots), LINK_GROUP_SIZE):
        lead = slots[start]
        if lead:
            lines.append(f"- {lead.as_markdown()}")
        rest = [s for s in slots[start + 1:start + LINK_GROUP_SIZE] if s]
        if rest:
            lines.append(" - " + " | ".join(s.as_markdown() for s in rest))
    return "\n".join(lines) + "\n\n"


def prepend_reading_section(content: str, slots: Sequence[Slot], heading: str) -> str:
    section = build_reading_section(slots, heading)
    if not section:
        return content
    return section + content.strip()


def _heading_regex(heading: str) -> "re.Pattern[str]":
    match = re.match(r"^(#+)\s*(.*)$", heading.strip())
    if match:
        hashes, title = match.groups()
    else:
        hashes, title = "###", heading.strip()
    return re.compile(r"^\s*" + re.escape(hashes) + r"\s*" + re.escape(title) + r"\s*$")


def extract_links(markdown_text: str) -> List[ReadingLink]:
    """
    All links in a Markdown fragment, in document order.

    The rendered HTML decides which links exist; their text is taken from
    the Markdown source so inline formatting like *emphasis* is kept.
    Links with no inline source form (autolinks, references) use the
    rendered text.
    """
    source_texts: Dict[str, List[str]] = {}
    for text, url in INLINE_LINK.findall(markdown_text):
        source_texts.setdefault(url, []).append(text)

    html = markdown.markdown(markdown_text)
    soup = BeautifulSoup(html, "lxml")
    links = []
    for a in soup.find_all("a", href=True):
        texts = source_texts.get(a["href"])
        links.append(ReadingLink(texts.pop(0) if texts else a.get_text(), a["href"]))
    return links


def extract_reading_section(content: str, heading: str) -> Tuple[str, List[ReadingLink]]:
    """
    Remove the reading section from a lesson body.

    The section is the heading line plus the bullet and blank lines right
    after it; the first other line (a heading, the weekly block, prose)
    ends it. Returns the remaining body (stripped) and the section's links.
    A body without the section comes back unchanged with no links.
    """
    lines = content.split("\n")
    heading_re = _heading_regex(heading)
    start = next((i for i, line in enumerate(lines) if heading_re.match(line)), None)
    if start is None:
        return content, []

    end = start + 1
    while end < len(lines) and (not lines[end].strip() or BULLET_LINE.match(lines[end])):
        end += 1

    links = extract_links("\n".join(lines[start + 1:end]))
    remaining = "\n".join(lines[:start] + lines[end:]).strip()
    return remaining, links


def place_links(links: Sequence[ReadingLink], slot_count: int = LINK_SLOT_COUNT) -> List[Slot]:
    """
    Lay links out over the CSV slots.

    Links fill from the first slot, except that exactly one group's worth
    of links goes into the last group. Links past the last slot are dropped.
    """
    slots: List[Slot] = [None] * slot_count
    offset = 0
    if len(links) == LINK_GROUP_SIZE and slot_count > LINK_GROUP_SIZE:
        offset = slot_count - LINK_GROUP_SIZE
    for i, link in enumerate(links[:slot_count - offset]):
        slots[offset + i] = link
    return slots
