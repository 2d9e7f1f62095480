"""ResultsPresenter: read-only views of generated entities plus per-item deletes.

The presenter keeps the entity it was given as a local cache.  Deletes and
task toggles go to the server first; the cache changes only after the
server confirms, so a failed call leaves what the user sees unchanged.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from buildaura.client.records import RecordsClient
from buildaura.errors import GenerationError, PersistenceFailed
from buildaura.models.generation import IdeaSet, PlanSections, TaskList, ToolkitBundle
from buildaura.wizard.notifications import Notifier

logger = logging.getLogger(__name__)

# Remote collection holding each entity kind
_COLLECTION_BY_KIND = {
    "ideas": "ideas",
    "plan": "plans",
    "toolkit": "launch-assets",
    "tasks": "tasks",
}

_ITEM_LABEL_BY_KIND = {
    "ideas": "Idea",
    "plan": "Business plan",
    "toolkit": "Launch toolkit",
    "tasks": "Task",
}


@dataclass(frozen=True)
class ResultSection:
    heading: str
    body: str


@dataclass(frozen=True)
class ResultItem:
    id: str
    title: str
    summary: str = ""
    details: Tuple[Tuple[str, str], ...] = ()

    def text(self) -> str:
        parts = [self.title, self.summary]
        parts.extend(value for _, value in self.details)
        return "\n".join(p for p in parts if p)


@dataclass(frozen=True)
class ResultView:
    kind: str
    title: str
    sections: Tuple[ResultSection, ...] = ()
    items: Tuple[ResultItem, ...] = ()


def _as_uuid(item_id: Union[str, uuid.UUID]) -> uuid.UUID:
    return item_id if isinstance(item_id, uuid.UUID) else uuid.UUID(str(item_id))


def _details(*pairs: Tuple[str, Optional[str]]) -> Tuple[Tuple[str, str], ...]:
    return tuple((label, value) for label, value in pairs if value)


def filter_items(items: Iterable[Any], query: Optional[str]) -> List[Any]:
    """Case-insensitive substring filter over result items or record dicts."""
    items = list(items)
    needle = (query or "").strip().lower()
    if not needle:
        return items

    def haystack(item: Any) -> str:
        if isinstance(item, ResultItem):
            return item.text()
        if isinstance(item, Mapping):
            return " ".join(str(v) for v in item.values() if isinstance(v, str))
        return str(item)

    return [item for item in items if needle in haystack(item).lower()]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _render_ideas(entity: IdeaSet) -> ResultView:
    items = tuple(
        ResultItem(
            id=str(idea.id),
            title=idea.name,
            summary=idea.description,
            details=_details(
                ("Problem", idea.problem),
                ("Solution", idea.solution),
                ("Target Audience", idea.target_audience),
                ("Monetization", idea.monetization),
                ("Why It Matches You", idea.why_match),
            ),
        )
        for idea in entity.ideas
    )
    return ResultView(kind=entity.kind, title="Your Business Ideas", items=items)


def _render_plan(entity: PlanSections) -> ResultView:
    sections = tuple(
        ResultSection(heading=heading, body=body)
        for heading, body in entity.sections.items()
    )
    return ResultView(kind=entity.kind, title=entity.business_name, sections=sections)


def _render_toolkit(entity: ToolkitBundle) -> ResultView:
    sections = []
    if entity.name_alternatives:
        lines = []
        for alt in entity.name_alternatives:
            line = alt.name
            if alt.domain:
                status = {True: "available", False: "taken"}.get(alt.available, "unknown")
                line += f" ({alt.domain}, {status})"
            if alt.rationale:
                line += f": {alt.rationale}"
            lines.append(line)
        sections.append(ResultSection("Name Alternatives", "\n".join(lines)))
    if entity.logo_ideas:
        sections.append(
            ResultSection(
                "Logo Concepts",
                "\n".join(
                    " | ".join(p for p in (logo.concept, logo.style, logo.elements) if p)
                    for logo in entity.logo_ideas
                ),
            )
        )
    if entity.brand_colors:
        sections.append(
            ResultSection(
                "Brand Colors",
                "\n".join(
                    f"{c.name} {c.hex}" + (f": {c.usage}" if c.usage else "")
                    for c in entity.brand_colors
                ),
            )
        )
    if entity.taglines:
        sections.append(ResultSection("Taglines", "\n".join(entity.taglines)))
    voice = " | ".join(p for p in (entity.brand_voice.tone, entity.brand_voice.style) if p)
    if voice:
        sections.append(ResultSection("Brand Voice", voice))
    return ResultView(kind=entity.kind, title=entity.business_name, sections=tuple(sections))


def _render_tasks(entity: TaskList) -> ResultView:
    items = tuple(
        ResultItem(
            id=str(task.id),
            title=task.title,
            summary=task.description,
            details=_details(
                ("Priority", task.priority),
                ("Due", task.due_date.isoformat() if task.due_date else None),
                ("Status", "Completed" if task.completed else "Open"),
            ),
        )
        for task in entity.tasks
    )
    return ResultView(kind=entity.kind, title="Your Weekly Tasks", items=items)


_RENDERERS = {
    "ideas": _render_ideas,
    "plan": _render_plan,
    "toolkit": _render_toolkit,
    "tasks": _render_tasks,
}


class ResultsPresenter:
    """Renders one generated entity and applies user edits to it."""

    def __init__(
        self,
        records: RecordsClient,
        entity: Optional[Any] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.records = records
        self.entity = entity
        self.notifier = notifier or Notifier()

    def render(self, entity: Optional[Any] = None) -> ResultView:
        """Build the read-only view of *entity* (or of the cached entity)."""
        target = entity if entity is not None else self.entity
        if target is None:
            raise ValueError("No generated entity to render")
        return _RENDERERS[target.kind](target)

    async def delete(self, item_id: Union[str, uuid.UUID]) -> None:
        """Delete an item remotely, then drop it from the cache.

        For plans and toolkits the item is the whole entity, so *item_id*
        must be that entity's id.

        Raises:
            ValueError: No entity is loaded, *item_id* is not a UUID, or it
                names a plan or toolkit other than the loaded one.
            PersistenceFailed: The server refused or the call failed; the cache
                is left unchanged.
        """
        if self.entity is None:
            raise ValueError("No generated entity loaded")
        target = _as_uuid(item_id)
        kind = self.entity.kind
        label = _ITEM_LABEL_BY_KIND[kind]
        if isinstance(self.entity, (PlanSections, ToolkitBundle)) and target != self.entity.id:
            raise ValueError(f"{label} {target} is not the loaded {kind}")

        try:
            await self.records.delete(_COLLECTION_BY_KIND[kind], target)
        except GenerationError as e:
            logger.error("Deleting %s %s failed: %s", kind, target, e)
            self.notifier.error(f"Failed to delete {label.lower()}.")
            if isinstance(e, PersistenceFailed):
                raise
            raise PersistenceFailed(f"Could not delete {kind} {target}") from e

        self._drop_from_cache(target)
        self.notifier.notify(f"{label} Deleted", f"The {label.lower()} has been removed.")

    async def set_task_completed(
        self, task_id: Union[str, uuid.UUID], completed: bool
    ) -> None:
        """Toggle a task remotely, then mirror the change in the cache."""
        target = _as_uuid(task_id)
        try:
            await self.records.update_task(target, completed)
        except GenerationError as e:
            logger.error("Updating task %s failed: %s", target, e)
            self.notifier.error("Failed to update task.")
            if isinstance(e, PersistenceFailed):
                raise
            raise PersistenceFailed(f"Could not update task {target}") from e

        if isinstance(self.entity, TaskList):
            self.entity = self.entity.model_copy(
                update={
                    "tasks": [
                        t.model_copy(update={"completed": completed})
                        if t.id == target
                        else t
                        for t in self.entity.tasks
                    ]
                }
            )

    def _drop_from_cache(self, item_id: uuid.UUID) -> None:
        entity = self.entity
        if isinstance(entity, IdeaSet):
            remaining = [i for i in entity.ideas if i.id != item_id]
            self.entity = entity.model_copy(update={"ideas": remaining}) if remaining else None
        elif isinstance(entity, TaskList):
            remaining = [t for t in entity.tasks if t.id != item_id]
            self.entity = entity.model_copy(update={"tasks": remaining}) if remaining else None
        elif entity.id == item_id:
            self.entity = None
