"""Compiled resource outputs that a test target always builds."""

from __future__ import annotations

from iostest.models import Artifact, LibraryInfo, TargetAttributes

INTERMEDIATE_DIR = "_objs"


def compiled_storyboard_zip(attributes: TargetAttributes, storyboard: Artifact) -> Artifact:
    stem = storyboard.basename.removesuffix(".storyboard")
    return Artifact(_intermediate(attributes, f"{stem}.storyboard.zip"))


def xcdatamodel_zip(attributes: TargetAttributes, model: Artifact) -> Artifact:
    stem = model.basename
    for suffix in (".xcdatamodeld", ".xcdatamodel"):
        stem = stem.removesuffix(suffix)
    return Artifact(_intermediate(attributes, f"{stem}.xcdatamodel.zip"))


def resource_files_to_build(
    attributes: TargetAttributes, library: LibraryInfo
) -> tuple[Artifact, ...]:
    """Data model zips first, then one compiled zip per storyboard."""
    outputs = [xcdatamodel_zip(attributes, model) for model in library.xcdatamodels]
    outputs.extend(compiled_storyboard_zip(attributes, sb) for sb in library.storyboards)
    return tuple(dict.fromkeys(outputs))


def _intermediate(attributes: TargetAttributes, filename: str) -> str:
    parts = [attributes.package, INTERMEDIATE_DIR, attributes.name, filename]
    return "/".join(part for part in parts if part)


__all__ = ["compiled_storyboard_zip", "resource_files_to_build", "xcdatamodel_zip"]
