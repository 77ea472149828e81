"""Batch aggregation: conflicts and execution order across tickets.

Applies the object/field conflict notion of the impact analyzer at batch
scope: two tickets writing the same field on the same object conflict.
Execution order follows the metadata deployment order (objects before
fields, fields before rules, ... profiles last).
"""

from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Tuple

from ..config import DEFAULT_CONFIG, AnalyzerConfig
from ..exceptions import InvalidArgumentError
from ..logging_config import get_logger
from .models import BatchAnalysis, BatchReport, BatchValidationResult, TicketChange

logger = get_logger(__name__)

CHANGE_TYPE_PRIORITY: Dict[str, int] = {
    "CUSTOM_OBJECT": 1,
    "FIELD": 2,
    "VALIDATION_RULE": 3,
    "LAYOUT": 4,
    "FLOW": 5,
    "APEX": 6,
    "TRIGGER": 7,
    "PERMISSION_SET": 8,
    "PROFILE": 9,
}
UNKNOWN_PRIORITY = 99


def _as_tickets(ticket_changes: Any) -> List[TicketChange]:
    if not isinstance(ticket_changes, (list, tuple)):
        return []
    result: List[TicketChange] = []
    for raw in ticket_changes:
        if isinstance(raw, TicketChange):
            result.append(raw)
        elif isinstance(raw, Mapping):
            result.append(TicketChange.from_dict(raw))
        else:
            logger.debug("Skipping ticket entry of type %s", type(raw).__name__)
    return result


def _ticket_label(ticket: TicketChange, position: int) -> str:
    # Tickets are told apart by position; the id is only for display
    return ticket.ticket_id or f"#{position + 1}"


def change_priority(change_type: Optional[str]) -> int:
    if not change_type:
        return UNKNOWN_PRIORITY
    return CHANGE_TYPE_PRIORITY.get(change_type.upper(), UNKNOWN_PRIORITY)


class BatchAggregator:
    """Cross-ticket checks for one batch."""

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        self.config = config or DEFAULT_CONFIG

    def detect_batch_conflicts(self, ticket_changes: Any) -> List[str]:
        """One message per object/field pair written by two or more tickets."""
        key = self.config.name_key
        writers: Dict[Tuple[str, str], Dict[int, str]] = {}
        labels: Dict[Tuple[str, str], Tuple[str, str]] = {}

        for position, ticket in enumerate(_as_tickets(ticket_changes)):
            for obj in ticket.object_names:
                for fld in ticket.field_names:
                    pair = (key(obj), key(fld))
                    labels.setdefault(pair, (obj, fld))
                    writers.setdefault(pair, {})[position] = _ticket_label(ticket, position)

        conflicts: List[str] = []
        for pair, by_position in writers.items():
            if len(by_position) < 2:
                continue
            obj, fld = labels[pair]
            conflicts.append(
                f'Multiple tickets modify field "{fld}" on object "{obj}" '
                f"({', '.join(by_position.values())})"
            )
        return conflicts

    def determine_execution_order(self, ticket_changes: Any) -> List[str]:
        """Ticket ids sorted by change-type priority; ties keep input order."""
        tickets = _as_tickets(ticket_changes)
        ordered = sorted(tickets, key=lambda t: change_priority(t.change_type))
        return [t.ticket_id for t in ordered]

    def identify_common_changes(self, ticket_changes: Any) -> List[str]:
        """Changes requested by more than one ticket, as ``"<change> (<n> tickets)"``."""
        seen_in: Dict[str, set] = {}
        for position, ticket in enumerate(_as_tickets(ticket_changes)):
            for change in ticket.changes:
                normalized = change.lower().strip()
                if normalized:
                    seen_in.setdefault(normalized, set()).add(position)

        return [
            f"{change} ({len(positions)} tickets)"
            for change, positions in seen_in.items()
            if len(positions) > 1
        ]

    def analyze_batch(self, ticket_changes: Any) -> BatchAnalysis:
        tickets = _as_tickets(ticket_changes)
        analysis = BatchAnalysis(
            conflicts=self.detect_batch_conflicts(tickets),
            common_changes=self.identify_common_changes(tickets),
            execution_order=self.determine_execution_order(tickets),
        )
        logger.debug(
            "Batch of %d tickets: %d conflicts, %d common changes",
            len(tickets),
            len(analysis.conflicts),
            len(analysis.common_changes),
        )
        return analysis

    def validate_batch(self, ticket_changes: Any) -> BatchValidationResult:
        """Size limits are errors (too small) or warnings (too large); conflicts warn."""
        tickets = _as_tickets(ticket_changes)
        sizes = self.config.batch
        result = BatchValidationResult()

        if len(tickets) < sizes.min_batch_size:
            result.is_valid = False
            result.errors.append(
                f"Batch has {len(tickets)} tickets, minimum is {sizes.min_batch_size}"
            )
        if len(tickets) > sizes.max_batch_size:
            result.warnings.append(
                f"Batch has {len(tickets)} tickets, maximum recommended is {sizes.max_batch_size}"
            )

        result.warnings.extend(self.detect_batch_conflicts(tickets))
        return result

    def preview_batch(self, ticket_changes: Any) -> BatchReport:
        """Analysis plus validation, the pair shown before a batch is processed."""
        tickets = _as_tickets(ticket_changes)
        return BatchReport(
            analysis=self.analyze_batch(tickets), validation=self.validate_batch(tickets)
        )

    def split_batch(self, ticket_ids: List[str], max_size: Optional[int] = None) -> List[List[str]]:
        """Consecutive chunks of at most ``max_size`` ticket ids."""
        size = self.config.batch.max_batch_size if max_size is None else max_size
        if size < 1:
            raise InvalidArgumentError("max_size", "must be at least 1", size)
        ids = list(ticket_ids or [])
        return [ids[i : i + size] for i in range(0, len(ids), size)]


_default = BatchAggregator()


def detect_batch_conflicts(ticket_changes: Any) -> List[str]:
    return _default.detect_batch_conflicts(ticket_changes)


def determine_execution_order(ticket_changes: Any) -> List[str]:
    return _default.determine_execution_order(ticket_changes)


def identify_common_changes(ticket_changes: Any) -> List[str]:
    return _default.identify_common_changes(ticket_changes)


def analyze_batch(ticket_changes: Any) -> BatchAnalysis:
    return _default.analyze_batch(ticket_changes)


def validate_batch(ticket_changes: Any) -> BatchValidationResult:
    return _default.validate_batch(ticket_changes)


def preview_batch(ticket_changes: Any) -> BatchReport:
    return _default.preview_batch(ticket_changes)


def split_batch(ticket_ids: List[str], max_size: Optional[int] = None) -> List[List[str]]:
    return _default.split_batch(ticket_ids, max_size)
