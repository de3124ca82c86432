"""Shape crawled document records into their final output form."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import yaml

from gdocs_source.crawl.paths import PATH_SEPARATOR, path_segments
from gdocs_source.drive.models import (
    FIELD_DESCRIPTION,
    FIELD_ID,
    FIELD_NAME,
    RECORD_BREADCRUMB,
    RECORD_PATH,
)

logger = logging.getLogger(__name__)

INDEX_NAME = "index"

Record = dict[str, Any]
FieldRule = Callable[[Record], Record]


@dataclass(frozen=True)
class MetadataParse:
    """Outcome of reading a description as YAML.

    ``error`` is set when the text is not valid YAML or holds a value the
    loader cannot build (such as an impossible date), ``values`` when it
    parsed to a mapping. Both are None for scalars and lists.
    """

    values: dict[str, Any] | None = None
    error: Exception | None = None


def parse_metadata(text: str) -> MetadataParse:
    """Parse ``text`` as YAML, keeping only mapping results."""
    try:
        parsed = yaml.safe_load(text)
    except (yaml.YAMLError, ValueError) as exc:
        # ValueError: timestamp-like scalars such as "2024-02-30".
        return MetadataParse(error=exc)
    if isinstance(parsed, dict):
        return MetadataParse(values=parsed)
    return MetadataParse()


def collapse_index(record: Record, breadcrumb: list[str]) -> None:
    """Let an ``index`` document stand in for the folder containing it.

    Drops the last breadcrumb segment, then pops the next one and uses it
    verbatim as the record name. Mutates both arguments.
    """
    if record.get(FIELD_NAME) != INDEX_NAME or not breadcrumb:
        return
    breadcrumb.pop()
    name = breadcrumb.pop() if breadcrumb else ""
    record[FIELD_NAME] = name
    if breadcrumb:
        record[RECORD_PATH] = f"/{PATH_SEPARATOR.join(breadcrumb)}/{name}"
    else:
        record[RECORD_PATH] = f"/{name}"


def default_rule(fields_default: Mapping[str, Any]) -> FieldRule:
    def apply(record: Record) -> Record:
        record.update(fields_default)
        return record

    return apply


def rename_rule(fields_mapper: Mapping[str, str]) -> FieldRule:
    def apply(record: Record) -> Record:
        for old_key, new_key in fields_mapper.items():
            record[new_key] = record.get(old_key)
            record.pop(old_key, None)
        return record

    return apply


def merge_description_metadata(record: Record) -> Record:
    """Merge YAML key/values found in the description onto the record."""
    description = record.get(FIELD_DESCRIPTION)
    if not description or not isinstance(description, str):
        return record
    result = parse_metadata(description)
    if result.error is not None:
        # Plain-text descriptions are expected; keep them as-is.
        logger.debug(
            "[merge_description_metadata] description is not YAML; id:%s", record.get(FIELD_ID)
        )
        return record
    if result.values:
        record.update(result.values)
    return record


class RecordProjector:
    """Apply index collapsing and an ordered list of field rules to records.

    Rules run in this order: defaults, renames, description metadata.
    ``breadcrumb`` is attached last and wins over any rule output.
    """

    def __init__(
        self,
        fields_default: Mapping[str, Any] | None = None,
        fields_mapper: Mapping[str, str] | None = None,
    ) -> None:
        self.rules: list[FieldRule] = [
            default_rule(fields_default or {}),
            rename_rule(fields_mapper or {}),
            merge_description_metadata,
        ]

    def project(self, record: Mapping[str, Any]) -> Record:
        """Return a projected copy of ``record``; the input is left untouched."""
        output: Record = dict(record)
        breadcrumb = path_segments(output.get(RECORD_PATH, ""))
        collapse_index(output, breadcrumb)
        for rule in self.rules:
            output = rule(output)
        output[RECORD_BREADCRUMB] = breadcrumb
        return output


def project_record(
    record: Mapping[str, Any],
    fields_default: Mapping[str, Any] | None = None,
    fields_mapper: Mapping[str, str] | None = None,
) -> Record:
    return RecordProjector(fields_default, fields_mapper).project(record)
