"""Markdown reference-link usage scanning."""

import re
from typing import Set

# [text][ref], [ref][] and bare [ref]; inline [text](url) is captured so it can be ignored.
_LINK_USAGE = re.compile(r"(?<!!)\[([^\]]+)\](?:\[([^\]]*)\]|\((.*?)\))?")


def find_referenced_links(text: str) -> Set[str]:
    """
    Collect the names of reference-style links used in ``text``.

    Recognised usages are ``[text][ref]`` (adds ``ref``), the collapsed form
    ``[ref][]`` and a bare ``[ref]``. Image links, inline ``[text](url)`` links
    and link definitions (``[ref]: url``) are not usages.
    """
    referenced: Set[str] = set()
    for match in _LINK_USAGE.finditer(text):
        label, ref, inline = match.group(1), match.group(2), match.group(3)
        if inline is not None:
            continue
        if ref:
            referenced.add(ref)
            continue
        if ref is None and text.startswith(":", match.end()):
            continue
        referenced.add(label)
    return referenced
