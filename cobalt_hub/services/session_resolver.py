"""Session id resolution.

The session id can reach a step three ways: as an explicit parameter, through
the record the upstream trigger node emitted, or on the current input record.
Branching and tool-calling paths often lose the first one, so the resolver
walks an ordered list of lookup strategies and takes the first hit.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from cobalt_hub.infra.config import config
from cobalt_hub.infra.error_handler import MissingSessionIdError

logger = logging.getLogger(__name__)

SessionLookup = Callable[[], Optional[str]]

# Outputs of named upstream nodes: node name -> emitted records
UpstreamOutputs = Mapping[str, List[Dict[str, Any]]]


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def from_parameter(value: Optional[str]) -> SessionLookup:
    """Use an explicitly configured session id."""
    return lambda: _clean(value)


def from_upstream_node(upstream: Optional[UpstreamOutputs], node_name: str) -> SessionLookup:
    """Read sessionId from the first record the named upstream node emitted."""
    def lookup() -> Optional[str]:
        if not upstream:
            return None
        records = upstream.get(node_name)
        if not records:
            return None
        first = records[0]
        # Records are either the raw json or wrapped as {"json": {...}}
        if isinstance(first, dict) and isinstance(first.get("json"), dict):
            first = first["json"]
        return _clean(first.get("sessionId"))
    return lookup


def from_input_record(record: Optional[Mapping[str, Any]]) -> SessionLookup:
    """Read sessionId directly off the current input record."""
    return lambda: _clean(record.get("sessionId")) if record else None


def first_success(strategies: Iterable[SessionLookup]) -> Optional[str]:
    """
    Run lookups in order and return the first non-empty result.

    A lookup that raises is treated as a miss.
    """
    for lookup in strategies:
        try:
            result = lookup()
        except Exception as e:
            logger.debug("Session lookup failed", extra={"error": str(e)})
            continue
        if result:
            return result
    return None


def resolve_session_id(
    explicit: Optional[str],
    upstream: Optional[UpstreamOutputs],
    record: Optional[Mapping[str, Any]],
    trigger_node: Optional[str] = None,
) -> str:
    """
    Resolve the session id for one input item.

    Args:
        explicit: Session id parameter, may be empty
        upstream: Outputs of upstream nodes keyed by node name
        record: The current input record
        trigger_node: Upstream node to consult (defaults to the configured trigger)

    Returns:
        The session id

    Raises:
        MissingSessionIdError: If no strategy yields a session id
    """
    session_id = first_success([
        from_parameter(explicit),
        from_upstream_node(upstream, trigger_node or config.TRIGGER_NODE_NAME),
        from_input_record(record),
    ])
    if session_id is None:
        raise MissingSessionIdError()
    return session_id
