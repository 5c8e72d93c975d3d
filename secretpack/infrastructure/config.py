"""
Runtime settings for the AWS-backed secret store, read from the environment.

    AWS_REGION / AWS_DEFAULT_REGION      region for both clients (us-east-1)
    SECRETPACK_RETRIES                   botocore max_attempts (10)
    SECRETPACK_ENDPOINT_URL              endpoint override, e.g. LocalStack
    SECRETPACK_VERIFY_EXPECTED_VERSION   best-effort conditional writes (false)
    SECRETPACK_HISTORY_LABELS            history label ring size, 0 to 18 (18)
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

DEFAULT_REGION = "us-east-1"
DEFAULT_RETRIES = 10
DEFAULT_HISTORY_LABELS = 18

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class SecretStoreSettings:
    region: str = DEFAULT_REGION
    retries: int = DEFAULT_RETRIES
    endpoint_url: Optional[str] = None
    verify_expected_version: bool = False
    history_labels: int = DEFAULT_HISTORY_LABELS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SecretStoreSettings":
        """Build settings from *environ* (defaults to os.environ).

        Raises:
            ValueError: if a numeric or boolean variable cannot be parsed.
        """
        env = os.environ if environ is None else environ
        return cls(
            region=env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION") or DEFAULT_REGION,
            retries=_parse_int(env, "SECRETPACK_RETRIES", DEFAULT_RETRIES),
            endpoint_url=env.get("SECRETPACK_ENDPOINT_URL") or None,
            verify_expected_version=_parse_bool(env, "SECRETPACK_VERIFY_EXPECTED_VERSION"),
            history_labels=_parse_int(
                env, "SECRETPACK_HISTORY_LABELS", DEFAULT_HISTORY_LABELS, maximum=DEFAULT_HISTORY_LABELS
            ),
        )


def _parse_int(
    env: Mapping[str, str], name: str, default: int, maximum: int | None = None
) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    if maximum is not None and value > maximum:
        raise ValueError(f"{name} must be at most {maximum}, got {value}")
    return value


def _parse_bool(env: Mapping[str, str], name: str) -> bool:
    raw = env.get(name, "").strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")
