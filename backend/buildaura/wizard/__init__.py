"""Guided wizard core: flow definitions, step machine, results presenter."""

from buildaura.wizard.controller import WizardController, WizardPhase, WizardState
from buildaura.wizard.flows import (
    FLOWS,
    IDEA_FLOW,
    PLAN_FLOW,
    TASKS_FLOW,
    TOOLKIT_FLOW,
    get_flow,
)
from buildaura.wizard.notifications import Notifier, Toast
from buildaura.wizard.presenter import (
    ResultItem,
    ResultSection,
    ResultsPresenter,
    ResultView,
    filter_items,
)
from buildaura.wizard.steps import FlowDefinition, StepDefinition
