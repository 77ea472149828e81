"""Batch layer: cross-ticket conflict detection and ordering."""

from .aggregator import (
    CHANGE_TYPE_PRIORITY,
    BatchAggregator,
    analyze_batch,
    determine_execution_order,
    detect_batch_conflicts,
    identify_common_changes,
    preview_batch,
    split_batch,
    validate_batch,
)
from .models import BatchAnalysis, BatchReport, BatchValidationResult, TicketChange

__all__ = [
    "CHANGE_TYPE_PRIORITY",
    "BatchAggregator",
    "BatchAnalysis",
    "BatchReport",
    "BatchValidationResult",
    "TicketChange",
    "analyze_batch",
    "preview_batch",
    "detect_batch_conflicts",
    "determine_execution_order",
    "identify_common_changes",
    "split_batch",
    "validate_batch",
]
