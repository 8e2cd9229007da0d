"""Order config sections into phases that respect `depends_on`."""

from dataclasses import dataclass, field

from ..config import Config
from ..errors import PlanError
from ..managers.registry import SectionType

MANAGERS_PHASE = "managers"

_SECTION_TYPES = {
    "brew": SectionType.BREW,
    "mas": SectionType.MAS,
    "npm": SectionType.NPM,
    "cargo": SectionType.CARGO,
    "install": SectionType.INSTALL,
    "system": SectionType.SYSTEM,
}


@dataclass(frozen=True)
class Phase:
    name: str
    section_type: SectionType
    depends_on: tuple[str, ...] = ()


@dataclass(frozen=True)
class ExecutionPlan:
    phases: tuple[Phase, ...] = field(default_factory=tuple)

    def names(self) -> list[str]:
        return [phase.name for phase in self.phases]

    def __len__(self) -> int:
        return len(self.phases)

    def __iter__(self):
        return iter(self.phases)


def section_type_for(name: str) -> SectionType:
    return _SECTION_TYPES.get(name, SectionType.CUSTOM)


def create_execution_plan(config: Config) -> ExecutionPlan:
    """Build the phase order for ``config``.

    Sections are scanned repeatedly in canonical order; a section is
    scheduled once everything it depends on is scheduled. ``brew`` counts
    as satisfied from the start since the managers phase provides it.

    Raises:
        PlanError: If some sections can never be scheduled
    """
    remaining = {name: section.depends_on for name, section in config.sections().items()}
    satisfied = {"brew"}
    phases = [Phase(MANAGERS_PHASE, SectionType.MANAGERS)]

    while remaining:
        progressed = False
        for name in list(remaining):
            depends_on = remaining[name]
            if set(depends_on) <= satisfied:
                phases.append(Phase(name, section_type_for(name), tuple(depends_on)))
                satisfied.add(name)
                del remaining[name]
                progressed = True

        if not progressed:
            names = sorted(remaining)
            raise PlanError(
                f"Circular or unresolvable dependencies: {', '.join(names)}",
                sections=names,
            )

    return ExecutionPlan(tuple(phases))


def render_plan(plan: ExecutionPlan, config: Config | None = None) -> str:
    lines = ["Execution Plan:", ""]
    for i, phase in enumerate(plan.phases, 1):
        line = f"  {i}. {phase.name}"
        if config is not None:
            section = config.get_section(phase.name)
            if section is not None:
                count = len(section.package_ids())
                line += f" ({count} item{'s' if count != 1 else ''})"
        lines.append(line)
        if phase.depends_on:
            lines.append(f"     depends on: {', '.join(phase.depends_on)}")
    return "\n".join(lines)


__all__ = [
    "MANAGERS_PHASE",
    "Phase",
    "ExecutionPlan",
    "section_type_for",
    "create_execution_plan",
    "render_plan",
]
