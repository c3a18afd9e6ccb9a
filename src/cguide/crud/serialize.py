"""Document (de)serialization at the storage boundary: JSON load/dump, legacy block keys, export envelopes"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from cguide.core.merge import merge_guidelines
from cguide.core.models import Guidelines
from cguide.errors import InvalidDocumentError


logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"
DEFAULT_NAMESPACES = ("core", "woocommerce", "jetpack")


def repair_block_key(key: str, namespaces: Iterable[str] = DEFAULT_NAMESPACES) -> Optional[str]:
    """Re-insert the namespace separator into a block key that lost it in storage.

    "coreparagraph" -> "core/paragraph" when "core" is a known namespace.
    Returns None for a key that matches no known namespace; the caller drops it.
    """
    if "/" in key:
        return key
    for ns in namespaces:
        if key.startswith(ns) and len(key) > len(ns):
            return f"{ns}/{key[len(ns):]}"
    logger.warning("Dropping block key %r: no known namespace matches", key)
    return None


def repair_block_keys(blocks: Mapping[str, Any], namespaces: Iterable[str] = DEFAULT_NAMESPACES) -> dict[str, Any]:
    namespaces = tuple(namespaces)
    repaired = {}
    for key, value in blocks.items():
        fixed = repair_block_key(key, namespaces)
        if fixed is None:
            continue
        if fixed != key:
            logger.info("Repaired legacy block key %r -> %r", key, fixed)
        repaired[fixed] = value
    return repaired


def load_guidelines(
    data: Union[str, bytes, Mapping[str, Any], None],
    namespaces: Iterable[str] = DEFAULT_NAMESPACES,
    ) -> Guidelines:
    """Parse stored or imported data into a Guidelines document.

    Accepts a JSON string or a mapping. An empty object stored as [] is
    read as {}, at any level. Raises InvalidDocumentError for anything that
    is not a valid document.
    """
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise InvalidDocumentError(f"Invalid JSON: {e}") from e
    if data == []:
        data = {}
    if not isinstance(data, Mapping):
        raise InvalidDocumentError(f"Expected a JSON object, got {type(data).__name__}")

    data = dict(data)
    if isinstance(data.get("blocks"), Mapping):
        data["blocks"] = repair_block_keys(data["blocks"], namespaces)
    try:
        return Guidelines.model_validate(data)
    except ValidationError as e:
        raise InvalidDocumentError(f"Invalid guidelines document: {e}") from e


def dump_guidelines(document: Guidelines) -> dict[str, Any]:
    """JSON-ready dict of the full document."""
    return document.model_dump(mode="json")


def dumps(document: Guidelines, indent: Optional[int] = 2) -> str:
    return json.dumps(dump_guidelines(document), indent=indent, ensure_ascii=False)


def export_envelope(
    document: Guidelines,
    site_url: str = "",
    include_meta: bool = True,
    now: Optional[datetime] = None,
    ) -> dict[str, Any]:
    """Wrap a document for export: {guidelines, version, exported_at, site_url}."""
    export: dict[str, Any] = {"guidelines": dump_guidelines(document)}
    if include_meta:
        export["version"] = EXPORT_VERSION
        export["exported_at"] = (now or datetime.now(timezone.utc)).isoformat(timespec="seconds")
        if site_url:
            export["site_url"] = site_url
    return export


def read_import(
    data: Union[str, bytes, Mapping[str, Any]],
    existing: Optional[Guidelines] = None,
    namespaces: Iterable[str] = DEFAULT_NAMESPACES,
    ) -> Guidelines:
    """Parse an export envelope or a bare document; merge it into existing when given."""
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise InvalidDocumentError(f"Invalid import data: {e}") from e
    if not isinstance(data, Mapping):
        raise InvalidDocumentError("Invalid import data format.")

    payload = data.get("guidelines", data)
    imported = load_guidelines(payload, namespaces)
    if existing is None:
        return imported
    return merge_guidelines(existing, imported)
