import pytest

from iostest.aggregate import Contribution, aggregate
from iostest.errors import InternalConsistencyError
from iostest.models import (
    Artifact,
    CapabilityKind,
    CoverageToolInfo,
    ExecutionInfo,
    InstrumentedFiles,
    ProductType,
    Runfiles,
    TestRunnerInfo,
    XcodeInfo,
)

IPA = Artifact("app/tests.ipa")
SCRIPT = Artifact("app/tests_test_script")
PROJECT = Artifact("app/tests.xcodeproj/project.pbxproj")


def test_files_are_merged_in_contribution_order_without_duplicates() -> None:
    description = aggregate(
        "//app:tests",
        [
            Contribution.of("bundling", files=(IPA,)),
            Contribution.of("ide", files=(PROJECT, IPA)),
            Contribution.of("tests", files=(SCRIPT, PROJECT)),
        ],
    )
    assert description.files_to_build.to_tuple() == (IPA, PROJECT, SCRIPT)


def test_builtin_capabilities_are_keyed_by_kind() -> None:
    xcode = XcodeInfo(label="//app:tests", product_type=ProductType.UNIT_TEST)
    runfiles = Runfiles(workspace_name="__main__", executable=SCRIPT)
    description = aggregate(
        "//app:tests",
        [
            Contribution.of("ide", capabilities=(xcode,)),
            Contribution.of("tests", capabilities=(runfiles, InstrumentedFiles()), executable=SCRIPT),
            Contribution.of("exec", capabilities=(ExecutionInfo({"requires-darwin": ""}),)),
        ],
    )
    assert description.xcode is xcode
    assert description.runfiles is runfiles
    assert description.instrumented_files == InstrumentedFiles()
    assert description.execution_info == ExecutionInfo({"requires-darwin": ""})
    assert description.executable == SCRIPT
    assert set(description.capabilities) == set(CapabilityKind)


def test_duplicate_builtin_kind_is_an_internal_consistency_error() -> None:
    first = XcodeInfo(label="//app:tests", product_type=ProductType.UNIT_TEST)
    second = XcodeInfo(label="//app:tests", product_type=ProductType.APPLICATION)
    with pytest.raises(InternalConsistencyError) as excinfo:
        aggregate(
            "//app:tests",
            [
                Contribution.of("ide", capabilities=(first,)),
                Contribution.of("bundling", capabilities=(second,)),
            ],
        )
    assert excinfo.value.context["first"] == "ide"
    assert excinfo.value.context["second"] == "bundling"


def test_duplicate_executable_is_an_internal_consistency_error() -> None:
    with pytest.raises(InternalConsistencyError):
        aggregate(
            "//app:tests",
            [
                Contribution.of("tests", executable=SCRIPT),
                Contribution.of("other", executable=Artifact("app/other")),
            ],
        )


def test_extras_are_concatenated_and_read_back_by_type() -> None:
    runner = TestRunnerInfo(runner=Artifact("tools/runner"))
    coverage = CoverageToolInfo(tool=Artifact("tools/mcov"))
    again = TestRunnerInfo(runner=Artifact("tools/runner"))
    description = aggregate(
        "//app:tests",
        [
            Contribution.of("a", extras=(runner, coverage)),
            Contribution.of("b", extras=(again,)),
        ],
    )
    assert description.extras == (runner, coverage, again)
    assert description.extras_of(TestRunnerInfo) == (runner, again)
    assert description.extras_of(CoverageToolInfo) == (coverage,)


def test_capabilities_mapping_is_read_only() -> None:
    description = aggregate("//app:tests", [Contribution.of("exec", capabilities=(ExecutionInfo(),))])
    with pytest.raises(TypeError):
        description.capabilities[CapabilityKind.RUNFILES] = Runfiles(workspace_name="x")  # type: ignore[index]
