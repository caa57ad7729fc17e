from services.automation.orchestrator import AutomationOrchestrator
from services.automation.registry import ACTION_SPECS, ActionRegistry, ActionSpec
from services.automation.types import ActionKind, ActionOutcome, DispatchResult

__all__ = [
    "ACTION_SPECS",
    "ActionKind",
    "ActionOutcome",
    "ActionRegistry",
    "ActionSpec",
    "AutomationOrchestrator",
    "DispatchResult",
]
