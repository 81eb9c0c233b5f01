"""Agent stages and the pipeline that sequences them."""

from .models import (
    PipelineResult,
    PlanChange,
    PlanComponent,
    StageEvent,
    UIPlan,
    UserIntent,
    ValidationResult,
)
from .registry import ALLOWED_COMPONENTS, COMPONENT_REGISTRY, get_component
from .validator import validate_code, validate_plan
from .intent import IntentClassifier
from .planner import Planner
from .generator import CodeGenerator
from .explainer import Explainer
from .pipeline import Pipeline, PLACEHOLDER_CODE

__all__ = [
    "PipelineResult",
    "PlanChange",
    "PlanComponent",
    "StageEvent",
    "UIPlan",
    "UserIntent",
    "ValidationResult",
    "ALLOWED_COMPONENTS",
    "COMPONENT_REGISTRY",
    "get_component",
    "validate_code",
    "validate_plan",
    "IntentClassifier",
    "Planner",
    "CodeGenerator",
    "Explainer",
    "Pipeline",
    "PLACEHOLDER_CODE",
]
