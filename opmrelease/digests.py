"""Deterministic digests of a release's source, config, rendered output and inventory."""

from __future__ import annotations

import hashlib
import json
import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class DigestSet:
    """The four digests compared to detect a no-op reconcile."""

    source: str = ""
    config: str = ""
    render: str = ""
    inventory: str = ""


def _sha256(data: bytes) -> str:
    return "sha256:" + hashlib.sha256(data).hexdigest()


_STRING_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _encode_string(text: str) -> str:
    parts = ['"']
    for ch in text:
        escaped = _STRING_ESCAPES.get(ch)
        if escaped is not None:
            parts.append(escaped)
        elif ch < " ":
            parts.append(f"\\u{ord(ch):04x}")
        elif "\ud800" <= ch <= "\udfff":
            parts.append("\ufffd")
        else:
            parts.append(ch)
    parts.append('"')
    return "".join(parts)


def _encode_float(value: float) -> str:
    if not math.isfinite(value):
        raise ValueError(f"unsupported value: {value!r}")
    text = repr(value)
    magnitude = abs(value)
    if magnitude != 0 and (magnitude < 1e-6 or magnitude >= 1e21):
        mantissa, exponent = text.split("e")
        power = int(exponent)
        return f"{mantissa}e{'-' if power < 0 else '+'}{abs(power)}"
    if "e" in text:
        text = format(Decimal(text), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _encode(value: Any) -> str:
    """Compact JSON with sorted keys, in the canonical form used for digests."""
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return _encode_string(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _encode_float(value)
    if isinstance(value, Mapping):
        items = []
        for key in sorted(value):
            if not isinstance(key, str):
                raise TypeError(f"object key must be a string, not {type(key).__name__}")
            items.append(f"{_encode_string(key)}:{_encode(value[key])}")
        return "{" + ",".join(items) + "}"
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return "[" + ",".join(_encode(item) for item in value) + "]"
    raise TypeError(f"unsupported type: {type(value).__name__}")


def _finite(text: str) -> float:
    number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"number out of range: {text}")
    return number


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON literal: {name}")


def module_source_digest(module_path: str, module_version: str) -> str:
    """Digest identifying a module path at a version."""
    return _sha256(f"{module_path}@{module_version}".encode())


def config_digest(values: bytes | str | None) -> str:
    """Digest of raw JSON values in canonical form.

    None or empty input hashes the empty string; input that is not valid
    JSON is hashed as it stands.
    """
    if values is None or len(values) == 0:
        return _sha256(b"")
    raw = values.encode() if isinstance(values, str) else bytes(values)
    try:
        parsed = json.loads(
            raw.decode("utf-8", errors="replace"),
            parse_int=_finite,
            parse_float=_finite,
            parse_constant=_reject_constant,
        )
        canonical = _encode(parsed)
    except (ValueError, TypeError):
        return _sha256(raw)
    return _sha256(canonical.encode())


def _sort_key(resource: Mapping[str, Any]) -> tuple[str, str, str, str]:
    group = str(resource.get("apiVersion", "")).rpartition("/")[0]
    metadata = resource.get("metadata") or {}
    return (
        group,
        str(resource.get("kind", "")),
        str(metadata.get("namespace", "")),
        str(metadata.get("name", "")),
    )


def render_digest(resources: Iterable[Mapping[str, Any]] | None) -> str:
    """Digest of rendered resources, independent of their order.

    Resources are sorted by group, kind, namespace and name, serialized to
    canonical JSON and hashed together. Raises ValueError if a resource
    cannot be serialized.
    """
    ordered = sorted(resources or (), key=_sort_key)
    digest = hashlib.sha256()
    for resource in ordered:
        try:
            digest.update(_encode(resource).encode())
        except (TypeError, ValueError) as exc:
            raise ValueError(f"render digest: {exc}") from exc
    return "sha256:" + digest.hexdigest()


def is_noop(current: DigestSet, last_applied: DigestSet) -> bool:
    """True when every digest matches a complete last-applied set."""
    if not all(
        (last_applied.source, last_applied.config, last_applied.render, last_applied.inventory)
    ):
        return False
    return current == last_applied