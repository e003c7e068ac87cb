from autoschema.models.enums import ArtifactStatus, ErrorKind
from autoschema.models.result import ArtifactReport, GenerationResult, ItemError


def _artifact(status: ArtifactStatus = ArtifactStatus.WRITTEN) -> ArtifactReport:
    return ArtifactReport(path="/out/User.ts", status=status, size_bytes=10)


def test_result_without_discoveries_is_not_successful() -> None:
    assert not GenerationResult().success


def test_result_without_analyzed_entities_is_not_successful() -> None:
    result = GenerationResult(
        discovered=["app.models.Broken"],
        errors=[ItemError(kind=ErrorKind.ANALYSIS, item="app.models.Broken", message="bad")],
    )

    assert not result.success


def test_analysis_errors_alone_do_not_fail_the_run() -> None:
    result = GenerationResult(
        discovered=["app.models.User", "app.models.Broken"],
        analyzed=["User"],
        artifacts=[_artifact()],
        errors=[ItemError(kind=ErrorKind.ANALYSIS, item="app.models.Broken", message="bad")],
    )

    assert result.success
    assert len(result.errors_of(ErrorKind.ANALYSIS)) == 1
    assert result.errors_of(ErrorKind.RENDER) == []


def test_render_errors_fail_the_run() -> None:
    result = GenerationResult(
        discovered=["app.models.User"],
        analyzed=["User"],
        artifacts=[_artifact(ArtifactStatus.FAILED)],
        errors=[ItemError(kind=ErrorKind.RENDER, item="/out/User.ts", message="disk full")],
    )

    assert not result.success


def test_item_error_string() -> None:
    error = ItemError(kind=ErrorKind.RESOLUTION, item="Ghost", message="not found")

    assert str(error) == "resolution error for Ghost: not found"
