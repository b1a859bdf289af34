"""Pydantic models and enums for the Boost Seminario wizard API."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class WizardStep(IntEnum):
    """Enumerate the fifteen wizard steps in order."""

    PROFILE = 1
    THEME_EXPLORATION = 2
    DISCIPLINARY_SCOPE = 3
    PERSONAL_CONTRIBUTION = 4
    DESIGN_OPPORTUNITY = 5
    USER_RESEARCH = 6
    RESEARCH_QUESTION = 7
    HYPOTHESIS = 8
    GENERAL_OBJECTIVE = 9
    SPECIFIC_OBJECTIVES = 10
    REFERENCE_ANALYSIS = 11
    PROJECT_PROPOSAL = 12
    EVALUATION = 13
    WORK_PLAN = 14
    FINAL_REPORT = 15


TOTAL_STEPS = len(WizardStep)


# ---------------------------------------------------------------------------
# Domain records
# ---------------------------------------------------------------------------


class Profile(BaseModel):
    """Student profile persisted under the ``perfil`` key."""

    nombre: str
    pronombres: str
    preferencias: str = ""


class Reference(BaseModel):
    name: str
    author: str
    source: str
    description: str
    relevance: str


class WorkPlanTask(BaseModel):
    id: int
    text: str = ""


class UserResearchData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    persona: str
    needs: str = ""
    behaviors: str = ""
    pains: str = ""
    qualitative_guide: str = Field(default="", alias="qualitativeGuide")
    quantitative_guide: str = Field(default="", alias="quantitativeGuide")


class ReferenceAnalysisData(BaseModel):
    categories: List[str]
    references: List[Reference]
    benchmark: str


class EvaluationData(BaseModel):
    evaluation: str
    brechas: str = ""


class WorkPlanData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tasks: List[WorkPlanTask]
    gantt_chart: str = Field(alias="ganttChart")


class ProjectData(BaseModel):
    """Aggregate of accepted step outputs used as prompt context.

    Only values whose step has been accepted are ever filled in.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    profile: Optional[Profile] = None
    topic: str = ""
    theme_exploration_ai_response: str = Field(default="", alias="themeExplorationAiResponse")
    disciplinary_scope_user_input: str = Field(default="", alias="disciplinaryScopeUserInput")
    disciplinary_scope_ai_response: str = Field(default="", alias="disciplinaryScopeAiResponse")
    personal_contribution: str = Field(default="", alias="personalContribution")
    personal_contribution_ai_response: str = Field(default="", alias="personalContributionAiResponse")
    project_gap_analysis: str = Field(default="", alias="projectGapAnalysis")
    user_research_data: Optional[UserResearchData] = Field(default=None, alias="userResearchData")
    research_question: str = Field(default="", alias="researchQuestion")
    hypothesis: str = ""
    general_objective: str = Field(default="", alias="generalObjective")
    specific_objectives: List[str] = Field(default_factory=lambda: ["", "", ""], alias="specificObjectives")
    reference_analysis: Optional[ReferenceAnalysisData] = Field(default=None, alias="referenceAnalysis")
    project_proposal: str = Field(default="", alias="projectProposal")
    project_evaluation: Optional[EvaluationData] = Field(default=None, alias="projectEvaluation")
    work_plan: Optional[WorkPlanData] = Field(default=None, alias="workPlan")

    def as_prompt_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class ProfileRequest(BaseModel):
    """Payload for step 1."""

    name: str = Field(default="", description="How the student wants to be called.")
    pronoun: str = Field(default="", description="Pronouns used to address the student.")
    preference: str = Field(default="", description="Optional learning preference.")


class TextInput(BaseModel):
    text: str = ""


class IterationRequest(BaseModel):
    iteration: bool = False


class FieldInput(BaseModel):
    key: str
    value: str = ""


class IndexInput(BaseModel):
    index: int


class CategoryInput(BaseModel):
    index: int = Field(..., ge=0, le=2)
    value: str = ""


class TaskInput(BaseModel):
    id: int = Field(..., ge=1, le=3)
    text: str = ""


class ResearchInputs(BaseModel):
    needs: Optional[str] = None
    behaviors: Optional[str] = None
    pains: Optional[str] = None


class ObjectiveInput(BaseModel):
    index: int = Field(..., ge=0, le=2)
    value: str = ""


class RobustifyRequest(BaseModel):
    robustify: bool = False


class SessionRequest(BaseModel):
    """Optional client-chosen id for a new wizard session."""

    session_id: Optional[str] = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class StepDefinition(BaseModel):
    """Expose step metadata to the UI."""

    number: int
    title: str
    subtitle: str


class StepSnapshot(BaseModel):
    """State of one step as the UI needs it."""

    step: int
    title: str
    phase: str
    is_animating: bool
    accepted: bool
    error: Optional[Dict[str, str]] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class EditStart(BaseModel):
    """Plain text handed to the editor when editing starts."""

    text: str


class TimerState(BaseModel):
    visible: bool
    duration: int
    remaining: int
    expired: bool


class WizardSnapshot(BaseModel):
    """Aggregate state of a wizard session."""

    session_id: str
    current_step: int
    total_steps: int
    title: str
    subtitle: str
    accepted_steps: Dict[int, bool]
    next_disabled: bool
    prev_disabled: bool
    profile: Optional[Profile] = None
    show_design_portals_popup: bool = False
    timer: TimerState
    step: StepSnapshot
