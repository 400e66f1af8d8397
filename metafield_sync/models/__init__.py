"""Domain models for the metafield sync pipeline."""

from .attribute import (
    ATTRIBUTE_DEFINITIONS,
    AttributeDefinition,
    AttributeTemplate,
    ResolvedAttribute,
    ValueKind,
)
from .config_models import ShopifySettings, SyncConfig
from .error_record import ErrorRecord
from .file_node import GenericFileNode, MediaImageNode, UnknownFileNode, parse_file_node
from .row_data import RowData
from .run_outcome import RowFailure, RowResult, RowStatus, RunOutcome, RunOutcomeAccumulator

__all__ = [
    # Configuration models
    "ShopifySettings",
    "SyncConfig",
    # Attribute models
    "ATTRIBUTE_DEFINITIONS",
    "AttributeDefinition",
    "AttributeTemplate",
    "ResolvedAttribute",
    "ValueKind",
    # Remote file nodes
    "GenericFileNode",
    "MediaImageNode",
    "UnknownFileNode",
    "parse_file_node",
    # Processing models
    "RowData",
    "ErrorRecord",
    "RowFailure",
    "RowResult",
    "RowStatus",
    "RunOutcome",
    "RunOutcomeAccumulator",
]
