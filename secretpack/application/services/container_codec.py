"""
Application service: blob payload <-> SecretContainer / MetadataDocument.

A container is the decoded JSON object of one blob: key name -> string value.
The reserved METADATA_KEY entry holds a second, stringified JSON object that
maps key name -> {"created", "created_by", "version"}, so the container stays
a flat map of strings.
"""

import json
import re
from datetime import datetime, timezone

from secretpack.domain.entities.secret import MetadataRecord
from secretpack.domain.errors import EncodingFailureError, MalformedContainerError

METADATA_KEY = "_chamber_metadata"

SecretContainer = dict[str, str]
MetadataDocument = dict[str, MetadataRecord]

# RFC 3339 with optional fractional seconds of any precision.
_TIMESTAMP_RE = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>Z|[+-]\d{2}:\d{2})$"
)


def decode_container(payload: str) -> SecretContainer:
    """Parse a blob payload into a key -> value mapping.

    Raises:
        MalformedContainerError: if the payload is not a JSON object of strings.
    """
    try:
        obj = json.loads(payload)
    except ValueError as exc:
        raise MalformedContainerError(f"blob payload is not valid JSON: {exc}") from exc

    if not isinstance(obj, dict):
        raise MalformedContainerError("blob payload must be a JSON object")
    for key, value in obj.items():
        if not isinstance(value, str):
            raise MalformedContainerError(f"value for {key!r} must be a string")
    return obj


def encode_container(container: SecretContainer) -> str:
    try:
        return json.dumps(container, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise EncodingFailureError(f"cannot encode container: {exc}") from exc


def decode_metadata(container: SecretContainer) -> MetadataDocument:
    """Read the metadata document embedded in *container*.

    A container without the reserved key (e.g. a brand-new service) yields an
    empty document.
    """
    raw = container.get(METADATA_KEY)
    if raw is None:
        return {}

    try:
        obj = json.loads(raw)
    except ValueError as exc:
        raise MalformedContainerError(f"metadata is not valid JSON: {exc}") from exc
    if not isinstance(obj, dict):
        raise MalformedContainerError("metadata must be a JSON object")

    return {key: _record_from_json(key, entry) for key, entry in obj.items()}


def encode_metadata(metadata: MetadataDocument) -> str:
    try:
        obj = {key: _record_to_json(record) for key, record in metadata.items()}
        return json.dumps(obj, sort_keys=True, separators=(",", ":"))
    except (AttributeError, TypeError, ValueError) as exc:
        raise EncodingFailureError(f"cannot encode metadata: {exc}") from exc


def embed_metadata(container: SecretContainer, metadata: MetadataDocument) -> str:
    """Store *metadata* under the reserved key and return the full payload."""
    container[METADATA_KEY] = encode_metadata(metadata)
    return encode_container(container)


def format_timestamp(value: datetime) -> str:
    utc = value.astimezone(timezone.utc)
    return utc.isoformat().replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC 3339 timestamp; nanosecond fractions are truncated."""
    match = _TIMESTAMP_RE.match(value)
    if not match:
        raise MalformedContainerError(f"invalid timestamp: {value!r}")

    text = match.group("base")
    fraction = match.group("fraction")
    if fraction:
        text += "." + fraction[:6].ljust(6, "0")
    offset = match.group("offset")
    text += "+00:00" if offset == "Z" else offset
    return datetime.fromisoformat(text).astimezone(timezone.utc)


def _record_from_json(key: str, entry: object) -> MetadataRecord:
    if not isinstance(entry, dict):
        raise MalformedContainerError(f"metadata for {key!r} must be a JSON object")
    try:
        version = entry["version"]
        created = entry["created"]
        created_by = entry.get("created_by", "")
    except KeyError as exc:
        raise MalformedContainerError(f"metadata for {key!r} is missing {exc}") from exc
    if not isinstance(version, int) or isinstance(version, bool):
        raise MalformedContainerError(f"metadata version for {key!r} must be an integer")
    if not isinstance(created, str):
        raise MalformedContainerError(f"metadata timestamp for {key!r} must be a string")

    return MetadataRecord(
        created=parse_timestamp(created),
        created_by=str(created_by),
        version=version,
    )


def _record_to_json(record: MetadataRecord) -> dict:
    return {
        "created": format_timestamp(record.created),
        "created_by": record.created_by,
        "version": record.version,
    }
