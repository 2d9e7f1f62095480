"""WizardController: the step machine behind every guided flow.

States are ``Editing(1..N)``, ``Submitting`` and ``Results``::

    Editing(1) -advance-> ... -advance-> Editing(N) -submit-> Submitting
    Submitting -ok-> Results           Submitting -error-> Editing(N)
    Results / Editing(k) -restart-> Editing(1)

Validation is silent: ``advance`` and ``submit`` do nothing while a required
field of the relevant step is blank or longer than the step's ``max_length``.
Generation failures become toasts;
nothing is retried.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from buildaura.client.gateway import GenerationGateway
from buildaura.client.session import SessionContext
from buildaura.errors import GenerationError, InvalidTransition
from buildaura.wizard.notifications import Notifier
from buildaura.wizard.steps import FlowDefinition, StepDefinition

logger = logging.getLogger(__name__)


class WizardPhase(str, enum.Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"
    RESULTS = "results"


@dataclass
class WizardState:
    """In-memory wizard state; never persisted."""

    total_steps: int
    fields: Dict[str, str] = field(default_factory=dict)
    current_step_index: int = 0
    is_submitting: bool = False
    result: Optional[Any] = None

    @property
    def phase(self) -> WizardPhase:
        if self.is_submitting:
            return WizardPhase.SUBMITTING
        if self.current_step_index >= self.total_steps:
            return WizardPhase.RESULTS
        return WizardPhase.EDITING

    @property
    def step_number(self) -> int:
        """1-based step shown to the user."""
        return self.current_step_index + 1


class WizardController:
    """Drives one flow from the first input step to its results.

    Args:
        flow: The flow definition (steps and tool name).
        gateway: Gateway used by ``submit``.
        session: Current session; an anonymous session blocks ``submit``.
        notifier: Toast sink (a private one is created when omitted).
        context: Extra request keys sent with the fields, e.g. the
            ``idea_context`` of an idea chosen on a results view.
    """

    def __init__(
        self,
        flow: FlowDefinition,
        gateway: GenerationGateway,
        session: SessionContext,
        notifier: Optional[Notifier] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.flow = flow
        self.gateway = gateway
        self.session = session
        self.notifier = notifier or Notifier()
        self.context = dict(context or {})
        self.state = WizardState(
            total_steps=flow.total_steps, fields=flow.initial_fields()
        )

    # -- Introspection ------------------------------------------------------

    @property
    def phase(self) -> WizardPhase:
        return self.state.phase

    @property
    def current_step(self) -> Optional[StepDefinition]:
        if self.state.current_step_index >= self.flow.total_steps:
            return None
        return self.flow.steps[self.state.current_step_index]

    @property
    def is_last_step(self) -> bool:
        return self.state.current_step_index == self.flow.total_steps - 1

    # -- Editing actions ----------------------------------------------------

    def set_field(self, name: str, value: str) -> None:
        self.state.fields[name] = value

    def advance(self) -> bool:
        """Move to the next input step. Returns True when the index changed."""
        if self.phase is not WizardPhase.EDITING or self.is_last_step:
            return False
        step = self.current_step
        if step.missing(self.state.fields) or step.too_long(self.state.fields):
            return False
        self.state.current_step_index += 1
        return True

    def retreat(self) -> bool:
        """Move to the previous input step, floored at the first one."""
        if self.phase is not WizardPhase.EDITING or self.state.current_step_index == 0:
            return False
        self.state.current_step_index -= 1
        return True

    def restart(self) -> None:
        """Return to the first step with fields reset to the flow defaults."""
        if self.phase is WizardPhase.SUBMITTING:
            raise InvalidTransition("Cannot restart while a generation is in flight")
        self.state = WizardState(
            total_steps=self.flow.total_steps, fields=self.flow.initial_fields()
        )

    # -- Submission ---------------------------------------------------------

    async def submit(self):
        """Generate the flow's entity from the collected fields.

        Returns the entity on success, otherwise ``None`` (blank required
        or overlong fields, no session, or a reported generation failure).
        ``is_submitting`` is cleared on every exit, cancellation included.

        Raises:
            InvalidTransition: Not on the last input step, or already submitting.
        """
        if self.phase is not WizardPhase.EDITING or not self.is_last_step:
            raise InvalidTransition(
                f"submit() is only allowed on step {self.flow.total_steps} "
                f"(phase={self.phase.value}, step={self.state.step_number})"
            )
        if self.flow.missing(self.state.fields) or self.flow.too_long(self.state.fields):
            return None

        if not self.session.is_authenticated:
            self.notifier.error(
                f"Please log in to use the {self.flow.title}.",
                title="Authentication Required",
            )
            return None

        self.state.is_submitting = True
        try:
            entity = await self.gateway.generate(
                self.flow.tool_name, dict(self.state.fields), context=self.context
            )
        except GenerationError as e:
            logger.warning("%s generation failed: %s", self.flow.tool_name, e)
            self.notifier.error(e.user_message)
            return None
        finally:
            self.state.is_submitting = False

        self.state.result = entity
        self.state.current_step_index = self.flow.total_steps
        self.notifier.notify(self.flow.success_title, self.flow.success_description)
        return entity
