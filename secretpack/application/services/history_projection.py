"""
Application service: project whole-blob snapshots onto one key's history.

The backend versions the service blob as a whole; a key's own version number
only exists inside the embedded metadata. Each snapshot therefore says at most
"key K was at version N, written at T by U". Many snapshots repeat the same
(K, N) because another key changed, so events are deduplicated by version.
"""

from collections.abc import Iterable

from secretpack.application.services.container_codec import SecretContainer, decode_metadata
from secretpack.domain.entities.secret import ChangeEvent, ChangeEventType


def project_key_history(snapshots: Iterable[SecretContainer], key: str) -> list[ChangeEvent]:
    """Return one ChangeEvent per distinct version of *key*, oldest first.

    Snapshot order is not trusted; the first snapshot seen for a version wins.
    Snapshots in which the key has no metadata record are skipped.
    """
    events: dict[int, ChangeEvent] = {}
    for container in snapshots:
        record = decode_metadata(container).get(key)
        if record is None or record.version in events:
            continue
        events[record.version] = ChangeEvent(
            type=ChangeEventType.for_version(record.version),
            time=record.created,
            user=record.created_by,
            version=record.version,
        )
    return [events[version] for version in sorted(events)]
