"""Text-level scanning of ``<esi:include>`` directives."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

OPEN_TAG = "<esi:include"
FULL_CLOSE = "</esi:include>"
SELF_CLOSE = "/>"


@dataclass(slots=True, frozen=True)
class IncludeDirective:
    """A located include tag and the ``src`` extracted from it."""

    start: int
    end: int
    text: str
    src: str
    form: str = "explicit"

    @property
    def self_closing(self) -> bool:
        return self.form == "self-closing"


def _bounded(open_marker: str, close_marker: str) -> Callable[[str], str]:
    def extract(tag: str) -> str:
        before = tag.find(open_marker)
        if before == -1:
            return ""
        fragment = tag[before + len(open_marker) :]
        after = fragment.find(close_marker)
        if after == -1:
            return ""
        return fragment[:after]

    return extract


double_quoted_src = _bounded('src="', '"')
single_quoted_src = _bounded("src='", "'")
_unquoted_raw = _bounded("src=", ">")


def unquoted_src(tag: str) -> str:
    # unquoted attribute values end at the first whitespace as well
    value = _unquoted_raw(tag).strip()
    return value.split(None, 1)[0] if value else ""


def extract_src(tag: str) -> str:
    """Return the first non-empty ``src`` value: double, single, then unquoted."""

    for extractor in (double_quoted_src, single_quoted_src, unquoted_src):
        value = extractor(tag)
        if value:
            return value
    return ""


def find_include_tags(html: str) -> list[IncludeDirective]:
    """Locate every top-level include directive, left to right.

    An opener followed by neither closer is taken up to its own ``>``; one
    without even that is malformed and ends the scan, leaving the text as-is.
    """

    directives: list[IncludeDirective] = []
    position = 0
    while True:
        start = html.find(OPEN_TAG, position)
        if start == -1:
            break
        full_close = html.find(FULL_CLOSE, start)
        self_close = html.find(SELF_CLOSE, start)
        if full_close == -1 and self_close == -1:
            # a bare opening tag spans up to its own ">"
            tag_end = html.find(">", start)
            if tag_end == -1:
                break
            end = tag_end + 1
            form = "unclosed"
        elif full_close != -1 and (self_close == -1 or full_close <= self_close):
            end = full_close + len(FULL_CLOSE)
            form = "explicit"
        else:
            end = self_close + len(SELF_CLOSE)
            form = "self-closing"
        text = html[start:end]
        directives.append(
            IncludeDirective(
                start=start,
                end=end,
                text=text,
                src=extract_src(text),
                form=form,
            )
        )
        position = end
    return directives


def has_include_tag(html: str) -> bool:
    return bool(find_include_tags(html))


def splice(html: str, directives: list[IncludeDirective], replacements: list[str]) -> str:
    """Rebuild ``html`` with each directive span swapped for its replacement.

    Directives must come from a single :func:`find_include_tags` call on the
    same ``html``; slot ``i`` of the output is filled by ``replacements[i]``.
    """

    if len(directives) != len(replacements):
        raise ValueError("Each directive needs exactly one replacement")
    parts: list[str] = []
    cursor = 0
    for directive, replacement in zip(directives, replacements):
        if directive.start < cursor:
            raise ValueError(f"Overlapping include directive at offset {directive.start}")
        parts.append(html[cursor : directive.start])
        parts.append(replacement)
        cursor = directive.end
    parts.append(html[cursor:])
    return "".join(parts)


__all__ = [
    "IncludeDirective",
    "extract_src",
    "find_include_tags",
    "has_include_tag",
    "splice",
]
