from __future__ import annotations

from pathlib import Path

import pytest

from adapters.manifest_file import parse_manifest, read_manifest
from core.errors import DependencyInstallError, ManifestIncompleteError
from core.services.dependencies import DependencyInstaller
from fakes import FakeRunner, freeze_output, is_pip

PACKAGES = ["notebook", "pandas", "vaderSentiment", "scikit-learn"]
FROZEN = (
    "notebook==7.2.1",
    "pandas==2.2.2",
    "vadersentiment==3.3.2",
    "scikit_learn==1.5.0",
    "numpy==2.0.0",
    "pip==24.1",
)


@pytest.fixture
def python(tmp_path: Path) -> Path:
    return tmp_path / ".venv" / "bin" / "python"


def test_manifest_lists_every_requested_package(tmp_path: Path, python: Path, runner: FakeRunner) -> None:
    runner.on(is_pip("list"), freeze_output(*FROZEN))
    manifest_path = tmp_path / "requirements.txt"

    report = DependencyInstaller(runner).install(python, PACKAGES, manifest_path=manifest_path)

    written = read_manifest(manifest_path)
    assert written is not None
    for name in PACKAGES:
        entry = written.get(name)
        assert entry is not None and entry.version
    assert report.requested == PACKAGES
    assert not report.pinned
    assert runner.calls[0][3:5] == ["install", "--upgrade"]
    assert runner.calls[0][-len(PACKAGES):] == PACKAGES


def test_manifest_is_overwritten_not_appended(tmp_path: Path, python: Path, runner: FakeRunner) -> None:
    manifest_path = tmp_path / "requirements.txt"
    manifest_path.write_text("oldpkg==0.1\n", encoding="utf-8")
    runner.on(is_pip("list"), freeze_output(*FROZEN))

    DependencyInstaller(runner).install(python, PACKAGES, manifest_path=manifest_path)

    lines = manifest_path.read_text(encoding="utf-8").splitlines()
    assert "oldpkg==0.1" not in lines
    assert all("==" in line for line in lines)
    assert lines == sorted(lines, key=str.lower)


def test_existing_complete_manifest_is_installed_pinned(tmp_path: Path, python: Path, runner: FakeRunner) -> None:
    manifest_path = tmp_path / "requirements.txt"
    manifest_path.write_text("\n".join(FROZEN) + "\n", encoding="utf-8")
    runner.on(is_pip("list"), freeze_output(*FROZEN))

    report = DependencyInstaller(runner).install(python, PACKAGES, manifest_path=manifest_path)

    assert report.pinned
    assert runner.calls[0][-2:] == ["-r", str(manifest_path)]
    assert "--upgrade" not in runner.calls[0]


def test_manifest_missing_a_request_falls_back_to_floating(tmp_path: Path, python: Path, runner: FakeRunner) -> None:
    manifest_path = tmp_path / "requirements.txt"
    manifest_path.write_text("pandas==2.2.2\n", encoding="utf-8")
    runner.on(is_pip("list"), freeze_output(*FROZEN))

    report = DependencyInstaller(runner).install(python, PACKAGES, manifest_path=manifest_path)

    assert not report.pinned
    assert "--upgrade" in runner.calls[0]


def test_unpinned_mode_ignores_manifest(tmp_path: Path, python: Path, runner: FakeRunner) -> None:
    manifest_path = tmp_path / "requirements.txt"
    manifest_path.write_text("\n".join(FROZEN) + "\n", encoding="utf-8")
    runner.on(is_pip("list"), freeze_output(*FROZEN))

    report = DependencyInstaller(runner).install(python, PACKAGES, manifest_path=manifest_path, pinned=False)

    assert not report.pinned
    assert "-r" not in runner.calls[0]


def test_optional_package_failure_is_skipped(tmp_path: Path, python: Path, runner: FakeRunner) -> None:
    runner.fail_on(lambda c: is_pip("install")(c) and c[-1] == "wordcloud", "No matching distribution found")
    runner.on(is_pip("list"), freeze_output(*FROZEN))

    report = DependencyInstaller(runner).install(
        python, PACKAGES, manifest_path=tmp_path / "requirements.txt", optional=["wordcloud"]
    )

    assert report.skipped == ["wordcloud"]


def test_network_failure_is_fatal_and_verbatim(tmp_path: Path, python: Path, runner: FakeRunner) -> None:
    message = "ERROR: Could not find a version that satisfies the requirement pandas (from versions: none)"
    runner.fail_on(is_pip("install"), message)

    with pytest.raises(DependencyInstallError) as excinfo:
        DependencyInstaller(runner).install(python, PACKAGES, manifest_path=tmp_path / "requirements.txt")

    assert message in str(excinfo.value)
    assert not (tmp_path / "requirements.txt").exists()
    assert len(runner.calls) == 1


def test_incomplete_snapshot_raises(tmp_path: Path, python: Path, runner: FakeRunner) -> None:
    runner.on(is_pip("list"), freeze_output("notebook==7.2.1", "pandas==2.2.2"))

    with pytest.raises(ManifestIncompleteError) as excinfo:
        DependencyInstaller(runner).install(python, PACKAGES, manifest_path=tmp_path / "requirements.txt")

    assert excinfo.value.missing == ["scikit-learn", "vaderSentiment"]


def test_parse_manifest_skips_non_pins() -> None:
    manifest = parse_manifest(
        "# comment\n"
        "pandas==2.2.2\n"
        "-e git+https://example.invalid/repo.git#egg=thing\n"
        "local @ file:///tmp/local\n"
        "\n"
        "Scikit_Learn==1.5.0\n"
    )

    assert [p.as_line() for p in manifest.packages] == ["pandas==2.2.2", "Scikit_Learn==1.5.0"]
    assert manifest.get("scikit-learn") is not None
    assert manifest.get("scikit-learn[alldeps]>=1.0") is not None


def test_pinned_install_keeps_optional_pins(tmp_path: Path, python: Path, runner: FakeRunner) -> None:
    manifest_path = tmp_path / "requirements.txt"
    manifest_path.write_text("\n".join(FROZEN + ("wordcloud==1.9.3",)) + "\n", encoding="utf-8")
    runner.on(is_pip("list"), freeze_output(*FROZEN, "wordcloud==1.9.3"))

    report = DependencyInstaller(runner).install(
        python, PACKAGES, manifest_path=manifest_path, optional=["wordcloud"]
    )

    assert report.pinned
    optional_call = runner.calls[1]
    assert optional_call[-1] == "wordcloud==1.9.3"
    assert "--upgrade" not in optional_call


def test_optional_package_missing_from_manifest_floats(tmp_path: Path, python: Path, runner: FakeRunner) -> None:
    manifest_path = tmp_path / "requirements.txt"
    manifest_path.write_text("\n".join(FROZEN) + "\n", encoding="utf-8")
    runner.on(is_pip("list"), freeze_output(*FROZEN))

    DependencyInstaller(runner).install(python, PACKAGES, manifest_path=manifest_path, optional=["wordcloud"])

    assert runner.calls[1][-2:] == ["--upgrade", "wordcloud"]
