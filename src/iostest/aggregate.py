"""Merge collaborator contributions into one target description."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from iostest.errors import InternalConsistencyError
from iostest.models import Artifact, Capability, CapabilityKind, TargetDescription
from iostest.nestedset import EMPTY, OrderedArtifactSet, OrderedArtifactSetBuilder


@dataclass(frozen=True, slots=True)
class Contribution:
    source: str
    files: OrderedArtifactSet = EMPTY
    capabilities: tuple[Capability, ...] = ()
    extras: tuple[object, ...] = ()
    executable: Artifact | None = None

    @classmethod
    def of(
        cls,
        source: str,
        *,
        files: Iterable[Artifact] | OrderedArtifactSet = (),
        capabilities: Iterable[Capability] = (),
        extras: Iterable[object] = (),
        executable: Artifact | None = None,
    ) -> Contribution:
        if not isinstance(files, OrderedArtifactSet):
            files = OrderedArtifactSet(files)
        return cls(
            source=source,
            files=files,
            capabilities=tuple(capabilities),
            extras=tuple(extras),
            executable=executable,
        )


def aggregate(label: str, contributions: Sequence[Contribution]) -> TargetDescription:
    """Merge *contributions* in order.

    Files are unioned with first-seen ordering. Each built-in capability kind
    and the executable may come from at most one contribution; a second
    supplier raises :class:`InternalConsistencyError` before any description
    is built. Extra capabilities are concatenated as given.
    """
    files = OrderedArtifactSetBuilder()
    capabilities: dict[CapabilityKind, Capability] = {}
    suppliers: dict[CapabilityKind, str] = {}
    extras: list[object] = []
    executable: Artifact | None = None
    executable_source: str | None = None

    for contribution in contributions:
        files.add_transitive(contribution.files)
        for capability in contribution.capabilities:
            kind = capability.kind
            if kind in capabilities:
                raise InternalConsistencyError(
                    f"Capability `{kind}` was supplied more than once.",
                    context={
                        "target": label,
                        "first": suppliers[kind],
                        "second": contribution.source,
                    },
                )
            capabilities[kind] = capability
            suppliers[kind] = contribution.source
        if contribution.executable is not None:
            if executable is not None:
                raise InternalConsistencyError(
                    "Executable entry point was supplied more than once.",
                    context={
                        "target": label,
                        "first": executable_source or "",
                        "second": contribution.source,
                    },
                )
            executable = contribution.executable
            executable_source = contribution.source
        extras.extend(contribution.extras)

    return TargetDescription(
        label=label,
        files_to_build=files.build(),
        capabilities=capabilities,
        extras=tuple(extras),
        executable=executable,
    )


__all__ = ["Contribution", "aggregate"]
