"""Step and flow definitions for the guided wizards.

Flows are plain data: each step lists the fields it collects, which of them
must be non-blank before the user may leave the step, the longest value
any of its fields may hold, and any pre-filled defaults.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Tuple

DEFAULT_MAX_LENGTH = 2000


@dataclass(frozen=True)
class StepDefinition:
    """One input step of a wizard."""

    key: str
    title: str
    required: Tuple[str, ...] = ()
    optional: Tuple[str, ...] = ()
    defaults: Mapping[str, str] = field(default_factory=dict)
    max_length: int = DEFAULT_MAX_LENGTH

    @property
    def field_names(self) -> Tuple[str, ...]:
        return self.required + self.optional

    def missing(self, fields: Mapping[str, str]) -> List[str]:
        """Required field names whose value is absent or blank."""
        return [name for name in self.required if not (fields.get(name) or "").strip()]

    def too_long(self, fields: Mapping[str, str]) -> List[str]:
        """Field names of this step whose value exceeds ``max_length``."""
        return [
            name for name in self.field_names if len(fields.get(name) or "") > self.max_length
        ]


@dataclass(frozen=True)
class FlowDefinition:
    """An ordered list of input steps bound to one generation tool."""

    name: str
    tool_name: str
    title: str
    steps: Tuple[StepDefinition, ...]
    success_title: str = "Generated!"
    success_description: str = "Your results are ready."

    def __post_init__(self) -> None:
        if not self.steps:
            raise ValueError(f"Flow {self.name!r} needs at least one step")
        seen = set()
        for step in self.steps:
            for name in step.field_names:
                if name in seen:
                    raise ValueError(f"Field {name!r} appears twice in flow {self.name!r}")
                seen.add(name)

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(name for step in self.steps for name in step.field_names)

    def initial_fields(self) -> Dict[str, str]:
        """Every field of the flow, blank unless a step supplies a default."""
        fields = {name: "" for name in self.field_names}
        for step in self.steps:
            fields.update(step.defaults)
        return fields

    def missing(self, fields: Mapping[str, str]) -> List[str]:
        return [name for step in self.steps for name in step.missing(fields)]

    def too_long(self, fields: Mapping[str, str]) -> List[str]:
        return [name for step in self.steps for name in step.too_long(fields)]
