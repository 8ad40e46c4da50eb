"""Default documentation for newly catalogued entities.

Markdown uses the catalog's component vocabulary (``<NodeGraph />``,
``<SchemaViewer />``, ``<MessageTable />``) and the ``{frontmatter.*}``
placeholders the catalog site resolves at build time.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Final

from catalogsync.domain.model import EntityKind
from catalogsync.domain.ports import Badge, DefaultContent

if TYPE_CHECKING:
    from catalogsync.domain.model import EntityRevision

# Structured schema formats get the interactive viewer, everything else the raw view.
_VIEWER_SUFFIXES: Final[frozenset[str]] = frozenset({".json", ".avsc", ".avro"})

_MESSAGE_TEMPLATE: Final[str] = """\
## Architecture diagram

A visual representation of the {{frontmatter.name}} {label}.

<NodeGraph />
"""

_SCHEMA_TEMPLATE: Final[str] = """
---

## Schema

This is the schema for the {{frontmatter.name}} {label}.

{component}
"""

_SERVICE_TEMPLATE: Final[str] = """\
This documentation is for the {frontmatter.name} service.

:::tip
You can edit this markdown file, the generator will keep your changes and keep the schemas in sync.
:::

## Architecture diagram

The architecture diagram below shows the {frontmatter.name} service and its dependencies.

<NodeGraph />
"""

_DOMAIN_TEMPLATE: Final[str] = """\
This is the {frontmatter.name} domain.

### Domain architecture

The following is the architecture diagram for all the messages and services in the \
{frontmatter.name} domain.

<NodeGraph />

### Messages

<MessageTable limit={10} showChannels={true} />
"""

_CHANNEL_TEMPLATE: Final[str] = """\
This is the {frontmatter.name} channel.

<ChannelInformation />

## Architecture diagram

<NodeGraph />
"""


def schema_component(schema_path: str) -> str:
    suffix = PurePosixPath(schema_path).suffix.lower()
    tag = "SchemaViewer" if suffix in _VIEWER_SUFFIXES else "Schema"
    return f'<{tag} file="{schema_path}" />'


def _message_markdown(revision: EntityRevision) -> str:
    label = revision.message_type.value if revision.message_type else "message"
    markdown = _MESSAGE_TEMPLATE.format(label=label)
    schema_path = revision.source_fields.get("schemaPath")
    if isinstance(schema_path, str) and schema_path:
        markdown += _SCHEMA_TEMPLATE.format(label=label, component=schema_component(schema_path))
    return markdown


def _badges(revision: EntityRevision) -> tuple[Badge, ...]:
    tags = revision.source_fields.get("tags")
    if isinstance(tags, str) or not isinstance(tags, Sequence):
        return ()
    return tuple(Badge(content=str(tag)) for tag in tags if str(tag).strip())


def _summary(revision: EntityRevision) -> str:
    description = revision.source_fields.get("description")
    if isinstance(description, str) and description.strip():
        return description.strip()
    label = revision.message_type or revision.kind
    return f"{label.value.capitalize()} {revision.id}"


def render_defaults(revision: EntityRevision) -> DefaultContent:
    match revision.kind:
        case EntityKind.MESSAGE:
            markdown = _message_markdown(revision)
        case EntityKind.SERVICE:
            markdown = _SERVICE_TEMPLATE
        case EntityKind.DOMAIN:
            markdown = _DOMAIN_TEMPLATE
        case EntityKind.CHANNEL:
            markdown = _CHANNEL_TEMPLATE
    return DefaultContent(markdown=markdown, badges=_badges(revision), summary=_summary(revision))
