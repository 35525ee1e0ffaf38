"""Template projection: scalar placeholders, section fragments and link pruning.

Example:
    from release_notes_updater._projection import DocumentProjector

    content = DocumentProjector().project(
        template,
        values={"RUNTIME-VERSION": "8.0.15"},
        usage_sections={"SECTION-ADDEDSDK": lambda: added_sdk_list(latest, sdks)},
        definition_sections={"SECTION-SDKS": lambda refs: sdk_definitions(latest, runtime, sdks, refs)},
    )
"""

from .links import find_referenced_links
from .projector import DocumentProjector, replace_scalars, replace_section
from .sections import (
    added_sdk_list,
    channel_min_vs_version,
    component_definitions,
    csharp_version,
    merge_cve_references,
    packages_table,
    release_vs_version,
    sdk_definitions,
    security_section,
)

__all__ = [
    "DocumentProjector",
    "find_referenced_links",
    "replace_scalars",
    "replace_section",
    # Fragments
    "added_sdk_list",
    "sdk_definitions",
    "component_definitions",
    "packages_table",
    "security_section",
    "merge_cve_references",
    # Derived values
    "release_vs_version",
    "channel_min_vs_version",
    "csharp_version",
]
