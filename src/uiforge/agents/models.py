"""Pipeline Data Models."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


IntentKind = Literal["create", "modify", "explain"]
IntentAction = Literal["add", "remove", "update", "replace", "restructure", "create", "none"]
PlanAction = Literal["create", "modify"]
StageName = Literal["intent", "planning", "generating", "explaining"]
StageStatus = Literal["running", "done"]

INTENT_ACTIONS: tuple[str, ...] = ("add", "remove", "update", "replace", "restructure", "create", "none")


class UserIntent(BaseModel):
    """Classified and sanitized user request."""

    model_config = ConfigDict(frozen=True)

    intent: IntentKind
    discard_existing: bool = False
    action: IntentAction = "none"
    target: str = "unknown"
    sanitized_request: str = ""
    blocked_items: tuple[str, ...] = ()
    is_completely_blocked: bool = False

    @model_validator(mode="after")
    def _blocked_items_present(self) -> "UserIntent":
        if self.is_completely_blocked and not self.blocked_items:
            raise ValueError("a completely blocked request must list its blocked items")
        return self


class PlanComponent(BaseModel):
    """One node of a planned component tree."""

    model_config = ConfigDict(extra="ignore")

    type: str
    purpose: str | None = None
    props: dict[str, Any] | None = None
    children: list["PlanComponent"] | None = None


class PlanChange(BaseModel):
    """One directed edit against existing code."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["add", "remove", "update"]
    target: str | None = None
    component: str | None = None
    props: dict[str, Any] | None = None
    location: str | None = None
    note: str | None = None

    def as_component(self) -> PlanComponent | None:
        """The component this change introduces, or None for removals."""
        if self.type == "remove" or not self.component:
            return None
        return PlanComponent(type=self.component, purpose=self.note or self.location, props=self.props)


class UIPlan(BaseModel):
    """Structured plan: a full tree (create) or an edit list (modify)."""

    model_config = ConfigDict(extra="ignore")

    action: PlanAction
    description: str = ""
    layout: str | None = None
    components: list[PlanComponent] | None = None
    changes: list[PlanChange] | None = None

    @model_validator(mode="before")
    @classmethod
    def _one_shape_per_action(cls, data: Any) -> Any:
        # create carries components only, modify carries changes only
        if isinstance(data, dict):
            data = dict(data)
            if data.get("action") == "create":
                data.pop("changes", None)
            elif data.get("action") == "modify":
                data.pop("components", None)
        return data

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict without unset optional fields."""
        return self.model_dump(exclude_none=True)


class ValidationResult(BaseModel):
    """Outcome of one validation pass."""

    valid: bool
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: list[str]) -> "ValidationResult":
        return cls(valid=not errors, errors=errors)


class StageEvent(BaseModel):
    """Progress notification emitted by the pipeline."""

    model_config = ConfigDict(frozen=True)

    stage: StageName
    status: StageStatus
    plan: UIPlan | None = None
    code: str | None = None
    explanation: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class PipelineResult(BaseModel):
    """Terminal output of one pipeline run."""

    model_config = ConfigDict(frozen=True)

    plan: UIPlan
    code: str
    explanation: str


PlanComponent.model_rebuild()
