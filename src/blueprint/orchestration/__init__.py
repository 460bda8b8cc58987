"""Orchestration layer for Blueprint.

Usage:
    from blueprint.orchestration import FlowContext, FlowOrchestrator

    decision = FlowOrchestrator().detect(FlowContext(stage, data), "let's continue")
"""

from blueprint.orchestration.defaults import propose_minimal
from blueprint.orchestration.orchestrator import FlowOrchestrator
from blueprint.orchestration.types import (
    IDEATION_ORDER,
    FlowAction,
    FlowContext,
    FlowDecision,
    IdeationStep,
    Stage,
)

__all__ = [
    "FlowAction",
    "FlowContext",
    "FlowDecision",
    "FlowOrchestrator",
    "IDEATION_ORDER",
    "IdeationStep",
    "Stage",
    "propose_minimal",
]
