"""Position resolution: sell or redeem positions in resolved markets."""

from copy_trade_engine.services.resolution.position_resolver import (
    PositionResolutionService,
    PositionStatus,
    ResolutionSummary,
    ResolveMethod,
    ResolveResult,
    classify_position,
)

__all__ = [
    "PositionResolutionService",
    "PositionStatus",
    "ResolutionSummary",
    "ResolveMethod",
    "ResolveResult",
    "classify_position",
]
