"""Two-phase template projection with link-reference pruning."""

import re
from typing import Callable, Dict, Mapping, Optional, Set

from ..logging_config import logger
from .links import find_referenced_links

UsageBuilder = Callable[[], str]
DefinitionBuilder = Callable[[Set[str]], str]


def _section_pattern(name: str) -> "re.Pattern[str]":
    # SECTION-SDKS must not match inside SECTION-SDKSFOO and vice versa.
    return re.compile(rf"(?<![A-Z0-9-]){re.escape(name)}(?![A-Z0-9-])")


def replace_scalars(template: str, values: Mapping[str, Optional[str]]) -> str:
    """
    Replace ``{NAME}`` placeholders.

    Keys of ``values`` are bare names (``"LATEST-SDK"``); every occurrence gets
    the same value. Placeholders without a value are left untouched.
    """
    content = template
    for name, value in values.items():
        content = content.replace(f"{{{name}}}", value if value is not None else "")
    return content


def replace_section(content: str, name: str, builder: Callable[[], str]) -> str:
    """Replace every ``name`` token; ``builder`` runs only when the token is present."""
    pattern = _section_pattern(name)
    if not pattern.search(content):
        return content
    fragment = builder()
    return pattern.sub(lambda _match: fragment, content)


class DocumentProjector:
    """
    Populates a markdown template from release data.

    Projection runs in a fixed order:

    1. ``{NAME}`` scalar placeholders
    2. usage sections (fragments that may introduce link usages)
    3. a scan of the text for reference-link usages
    4. definition sections, which receive the referenced names and emit only
       the definitions that are used

    Because definitions are computed after every usage is known, no dangling
    definitions are emitted and re-projecting the output changes nothing.
    """

    def project(
        self,
        template: str,
        values: Optional[Mapping[str, Optional[str]]] = None,
        usage_sections: Optional[Dict[str, UsageBuilder]] = None,
        definition_sections: Optional[Dict[str, DefinitionBuilder]] = None,
    ) -> str:
        content = replace_scalars(template, values or {})

        for name, builder in (usage_sections or {}).items():
            content = replace_section(content, name, builder)

        if not definition_sections:
            return content

        referenced = find_referenced_links(content)
        logger.debug(f"Found {len(referenced)} referenced link(s) in projected document")

        for name, definition_builder in definition_sections.items():
            content = replace_section(content, name, lambda b=definition_builder: b(referenced))

        return content
