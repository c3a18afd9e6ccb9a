"""Pure document transforms. Each returns a new Guidelines; inputs are never modified."""

from typing import Any, Mapping, Optional, Union

from cguide.core.models import BlockGuidelines, Guidelines, coalesce


def _merge_dicts(existing: Mapping[str, Any], incoming: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(existing)
    for key, value in incoming.items():
        current = merged.get(key)
        if isinstance(value, list) and isinstance(current, list):
            merged[key] = [*current, *value]
        elif isinstance(value, dict) and isinstance(current, dict):
            merged[key] = _merge_dicts(current, value)
        else:
            merged[key] = value
    return merged


def merge_guidelines(existing: Guidelines, incoming: Union[Guidelines, Mapping[str, Any]]) -> Guidelines:
    """Layer incoming over existing: lists append, mappings merge recursively, scalars replace.

    Only fields actually present in incoming take part, so a partial document
    never blanks out existing values.
    """
    if isinstance(incoming, Guidelines):
        incoming = incoming.model_dump(mode="json", exclude_unset=True)
    return Guidelines.model_validate(_merge_dicts(existing.model_dump(mode="json"), incoming))


def with_block(
    document: Guidelines,
    block_name: str,
    block: Union[BlockGuidelines, Mapping[str, Any]],
    ) -> Guidelines:
    """Return document with the rules for block_name replaced by block."""
    blocks = {**document.blocks, block_name: BlockGuidelines.model_validate(block)}
    return Guidelines.model_validate({**dict(document), "blocks": blocks})


def seed_draft(draft: Optional[Guidelines], active: Optional[Guidelines]) -> Guidelines:
    """The document an edit starts from: the draft, else a copy of active, else the default."""
    if draft is not None:
        return draft
    return coalesce(active)
