"""Per-step action endpoints.

Every action answers with the refreshed wizard snapshot. Actions that call the AI
are plain ``def`` endpoints so they run in the threadpool and the step is seen in
its ``generating`` phase by concurrent readers.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..journey import Wizard
from ..schemas import (
    CategoryInput,
    EditStart,
    FieldInput,
    IndexInput,
    IterationRequest,
    ObjectiveInput,
    ProfileRequest,
    ResearchInputs,
    RobustifyRequest,
    TaskInput,
    TextInput,
    WizardSnapshot,
)
from ..steps.builder import OptionBuilderStep, SentenceBuilderStep, SpecificObjectivesStep
from ..steps.content import ContentStep, ProfileStep
from ..steps.evaluation import ProjectEvaluationStep
from ..steps.opportunity import DesignOpportunityStep
from ..steps.proposal import ProjectProposalStep
from ..steps.references import ReferenceAnalysisStep
from ..steps.report import FinalReportStep
from ..steps.research import UserResearchStep
from ..steps.workplan import WorkPlanStep
from .dependencies import get_wizard, step_of


router = APIRouter(prefix="/wizard/sessions/{session_id}/steps", tags=["steps"])


# ---------------------------------------------------------------------------
# Shared edit / accept
# ---------------------------------------------------------------------------


@router.post("/{step}/edit", response_model=EditStart)
async def begin_edit(step: int, target: str = "main", wizard: Wizard = Depends(get_wizard)) -> EditStart:
    """Switch a formatted text into its plain-text editor."""

    return EditStart(text=wizard.component(step).begin_edit(target))


@router.post("/{step}/edit/save", response_model=WizardSnapshot)
async def save_edit(
    step: int, payload: TextInput, target: str = "main", wizard: Wizard = Depends(get_wizard)
) -> WizardSnapshot:
    wizard.component(step).save_edit(payload.text, target)
    return wizard.snapshot()


@router.post("/{step}/edit/cancel", response_model=WizardSnapshot)
async def cancel_edit(step: int, target: str = "main", wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    wizard.component(step).cancel_edit(target)
    return wizard.snapshot()


@router.post("/{step}/accept", response_model=WizardSnapshot)
async def accept_step(step: int, wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    wizard.component(step).accept()
    return wizard.snapshot()


@router.post("/{step}/reopen", response_model=WizardSnapshot)
async def reopen_step(step: int, target: str = "main", wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    wizard.component(step).reopen(target)
    return wizard.snapshot()


# ---------------------------------------------------------------------------
# Steps 1-4
# ---------------------------------------------------------------------------


@router.post("/1/profile", response_model=WizardSnapshot)
def submit_profile(payload: ProfileRequest, wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 1, ProfileStep).submit(payload.name, payload.pronoun, payload.preference)
    return wizard.snapshot()


@router.put("/{step}/draft", response_model=WizardSnapshot)
async def set_draft(step: int, payload: TextInput, wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, step, ContentStep).set_draft(payload.text)
    return wizard.snapshot()


@router.post("/{step}/generate", response_model=WizardSnapshot)
def generate_content(
    step: int, payload: IterationRequest | None = None, wizard: Wizard = Depends(get_wizard)
) -> WizardSnapshot:
    step_of(wizard, step, ContentStep).generate(iteration=bool(payload and payload.iteration))
    return wizard.snapshot()


# ---------------------------------------------------------------------------
# Step 5
# ---------------------------------------------------------------------------


@router.put("/5/gap", response_model=WizardSnapshot)
async def set_gap(payload: TextInput, wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 5, DesignOpportunityStep).set_gap(payload.text)
    return wizard.snapshot()


@router.post("/5/variants", response_model=WizardSnapshot)
def generate_variants(wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 5, DesignOpportunityStep).generate_variants()
    return wizard.snapshot()


@router.post("/5/variants/select", response_model=WizardSnapshot)
def select_variant(payload: IndexInput, wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 5, DesignOpportunityStep).select_variant(payload.index)
    return wizard.snapshot()


@router.post("/5/iterate", response_model=WizardSnapshot)
def iterate_concept(wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 5, DesignOpportunityStep).iterate()
    return wizard.snapshot()


# ---------------------------------------------------------------------------
# Step 6
# ---------------------------------------------------------------------------


@router.post("/6/summary", response_model=WizardSnapshot)
def generate_summary(wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 6, UserResearchStep).generate_summary()
    return wizard.snapshot()


@router.put("/6/inputs", response_model=WizardSnapshot)
async def set_research_inputs(payload: ResearchInputs, wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 6, UserResearchStep).set_inputs(payload.needs, payload.behaviors, payload.pains)
    return wizard.snapshot()


@router.post("/6/persona", response_model=WizardSnapshot)
def generate_persona(
    payload: IterationRequest | None = None, wizard: Wizard = Depends(get_wizard)
) -> WizardSnapshot:
    step_of(wizard, 6, UserResearchStep).generate_persona(iteration=bool(payload and payload.iteration))
    return wizard.snapshot()


@router.post("/6/persona/accept", response_model=WizardSnapshot)
async def accept_persona(wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 6, UserResearchStep).accept_persona()
    return wizard.snapshot()


@router.post("/6/guides/{kind}", response_model=WizardSnapshot)
def generate_guide(
    kind: str, payload: RobustifyRequest | None = None, wizard: Wizard = Depends(get_wizard)
) -> WizardSnapshot:
    step_of(wizard, 6, UserResearchStep).generate_guide(kind, robustify=bool(payload and payload.robustify))
    return wizard.snapshot()


@router.post("/6/guides/{kind}/accept", response_model=WizardSnapshot)
async def accept_guide(kind: str, wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 6, UserResearchStep).accept_guide(kind)
    return wizard.snapshot()


# ---------------------------------------------------------------------------
# Steps 7-10
# ---------------------------------------------------------------------------


@router.put("/{step}/fields", response_model=WizardSnapshot)
async def set_field(step: int, payload: FieldInput, wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, step, SentenceBuilderStep).set_field(payload.key, payload.value)
    return wizard.snapshot()


@router.post("/{step}/improve", response_model=WizardSnapshot)
def improve_sentence(step: int, wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, step, SentenceBuilderStep).improve()
    return wizard.snapshot()


@router.post("/{step}/robustify", response_model=WizardSnapshot)
def robustify_sentence(step: int, wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, step, SentenceBuilderStep).robustify()
    return wizard.snapshot()


@router.post("/{step}/options/select", response_model=WizardSnapshot)
async def select_option(step: int, payload: IndexInput, wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, step, OptionBuilderStep).select_option(payload.index)
    return wizard.snapshot()


@router.put("/10/objectives", response_model=WizardSnapshot)
async def set_objective(payload: ObjectiveInput, wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 10, SpecificObjectivesStep).set_objective(payload.index, payload.value)
    return wizard.snapshot()


@router.post("/10/correct", response_model=WizardSnapshot)
def correct_objectives(wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 10, SpecificObjectivesStep).correct_syntax()
    return wizard.snapshot()


@router.post("/10/refine", response_model=WizardSnapshot)
def refine_objectives(wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 10, SpecificObjectivesStep).refine()
    return wizard.snapshot()


# ---------------------------------------------------------------------------
# Step 11
# ---------------------------------------------------------------------------


@router.put("/11/categories", response_model=WizardSnapshot)
async def set_category(payload: CategoryInput, wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 11, ReferenceAnalysisStep).set_category(payload.index, payload.value)
    return wizard.snapshot()


@router.post("/11/search", response_model=WizardSnapshot)
def search_references(payload: IndexInput, wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 11, ReferenceAnalysisStep).search(payload.index)
    return wizard.snapshot()


@router.post("/11/benchmark", response_model=WizardSnapshot)
def generate_benchmark(
    payload: IterationRequest | None = None, wizard: Wizard = Depends(get_wizard)
) -> WizardSnapshot:
    step_of(wizard, 11, ReferenceAnalysisStep).generate_benchmark(iteration=bool(payload and payload.iteration))
    return wizard.snapshot()


# ---------------------------------------------------------------------------
# Steps 12-15
# ---------------------------------------------------------------------------


@router.post("/12/intro", response_model=WizardSnapshot)
def generate_proposal_intro(wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 12, ProjectProposalStep).generate_intro()
    return wizard.snapshot()


@router.put("/12/value-proposition", response_model=WizardSnapshot)
async def set_value_proposition(payload: TextInput, wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 12, ProjectProposalStep).set_value_proposition(payload.text)
    return wizard.snapshot()


@router.post("/12/articulate", response_model=WizardSnapshot)
def articulate_proposal(
    payload: IterationRequest | None = None, wizard: Wizard = Depends(get_wizard)
) -> WizardSnapshot:
    step_of(wizard, 12, ProjectProposalStep).articulate(iteration=bool(payload and payload.iteration))
    return wizard.snapshot()


@router.post("/13/evaluate", response_model=WizardSnapshot)
def evaluate_project(wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 13, ProjectEvaluationStep).evaluate()
    return wizard.snapshot()


@router.post("/13/brechas", response_model=WizardSnapshot)
def identify_brechas(reprioritize: bool = False, wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 13, ProjectEvaluationStep).identify_brechas(reprioritize=reprioritize)
    return wizard.snapshot()


@router.put("/14/tasks", response_model=WizardSnapshot)
async def set_task(payload: TaskInput, wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 14, WorkPlanStep).set_task(payload.id, payload.text)
    return wizard.snapshot()


@router.post("/14/activities", response_model=WizardSnapshot)
def generate_activities(wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 14, WorkPlanStep).generate_activities()
    return wizard.snapshot()


@router.post("/14/plan", response_model=WizardSnapshot)
def generate_plan(wizard: Wizard = Depends(get_wizard)) -> WizardSnapshot:
    step_of(wizard, 14, WorkPlanStep).generate_plan()
    return wizard.snapshot()


@router.post("/15/report", response_model=WizardSnapshot)
def generate_report(
    payload: RobustifyRequest | None = None, wizard: Wizard = Depends(get_wizard)
) -> WizardSnapshot:
    step_of(wizard, 15, FinalReportStep).generate(robustify=bool(payload and payload.robustify))
    return wizard.snapshot()
