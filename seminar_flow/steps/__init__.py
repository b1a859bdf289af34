"""Step components of the wizard, keyed by step number."""

from __future__ import annotations

from typing import Dict, Type

from .base import StepComponent, StepEnvironment, TextStage
from .builder import GeneralObjectiveStep, HypothesisStep, ResearchQuestionStep, SpecificObjectivesStep
from .content import DisciplinaryScopeStep, PersonalContributionStep, ProfileStep, ThemeExplorationStep
from .evaluation import ProjectEvaluationStep
from .opportunity import DesignOpportunityStep
from .proposal import ProjectProposalStep
from .references import ReferenceAnalysisStep
from .report import FinalReportStep
from .research import UserResearchStep
from .workplan import WorkPlanStep

STEP_COMPONENTS: Dict[int, Type[StepComponent]] = {
    component.number: component
    for component in (
        ProfileStep,
        ThemeExplorationStep,
        DisciplinaryScopeStep,
        PersonalContributionStep,
        DesignOpportunityStep,
        UserResearchStep,
        ResearchQuestionStep,
        HypothesisStep,
        GeneralObjectiveStep,
        SpecificObjectivesStep,
        ReferenceAnalysisStep,
        ProjectProposalStep,
        ProjectEvaluationStep,
        WorkPlanStep,
        FinalReportStep,
    )
}

__all__ = ["STEP_COMPONENTS", "StepComponent", "StepEnvironment", "TextStage"]
