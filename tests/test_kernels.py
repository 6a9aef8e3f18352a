from __future__ import annotations

import json
from pathlib import Path

import pytest

from core.errors import KernelNotFoundError, KernelRegistrationError
from core.services.kernels import KernelRegistrar, build_kernel_json


def test_register_list_remove_round_trip(registrar: KernelRegistrar, tmp_path: Path) -> None:
    python = tmp_path / ".venv" / "bin" / "python"

    entry = registrar.register("social_media_sentiment", "Python (Social Media Sentiment)", python)

    assert entry.resource_dir is not None and (entry.resource_dir / "kernel.json").is_file()
    listed = {k.name: k for k in registrar.list_kernels()}
    assert "social_media_sentiment" in listed
    assert listed["social_media_sentiment"].python == str(python)

    registrar.remove("social_media_sentiment")

    assert "social_media_sentiment" not in {k.name for k in registrar.list_kernels()}


def test_reregistering_overwrites(registrar: KernelRegistrar, tmp_path: Path) -> None:
    registrar.register("social_media_sentiment", "Old label", tmp_path / "old" / "python")
    registrar.register("social_media_sentiment", "New label", tmp_path / "new" / "python")

    entries = registrar.list_kernels()

    assert len(entries) == 1
    assert entries[0].display_name == "New label"
    assert entries[0].python == str(tmp_path / "new" / "python")


def test_trust_store_is_carried_in_kernel_env(registrar: KernelRegistrar, tmp_path: Path, ca_bundle: Path) -> None:
    registrar.register("sent", "Sent", tmp_path / "python", env={"SSL_CERT_FILE": str(ca_bundle)})

    entry = registrar.get("sent")

    assert entry is not None
    assert entry.env == {"SSL_CERT_FILE": str(ca_bundle)}
    spec = json.loads((entry.resource_dir / "kernel.json").read_text(encoding="utf-8"))  # type: ignore[operator]
    assert spec["argv"][1:3] == ["-m", "ipykernel_launcher"]


def test_names_are_stored_lowercase(registrar: KernelRegistrar, tmp_path: Path) -> None:
    entry = registrar.register("Social_Media_Sentiment", "Label", tmp_path / "python")

    assert entry.name == "social_media_sentiment"
    assert registrar.get("SOCIAL_MEDIA_SENTIMENT") is not None


def test_invalid_name_is_rejected(registrar: KernelRegistrar, tmp_path: Path) -> None:
    with pytest.raises(KernelRegistrationError):
        registrar.register("social media", "Label", tmp_path / "python")


def test_removing_unknown_kernel_is_an_error(registrar: KernelRegistrar) -> None:
    with pytest.raises(KernelNotFoundError) as excinfo:
        registrar.remove("does_not_exist")

    assert excinfo.value.name == "does_not_exist"


def test_build_kernel_json_omits_empty_env(tmp_path: Path) -> None:
    spec = build_kernel_json(tmp_path / "python", "Label")

    assert "env" not in spec
    assert spec["argv"][-2:] == ["-f", "{connection_file}"]  # type: ignore[index]


def test_relative_interpreter_is_registered_absolute(
    registrar: KernelRegistrar, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)

    entry = registrar.register("sent", "Sent", Path(".venv") / "bin" / "python")

    assert entry.python is not None and Path(entry.python).is_absolute()
    assert entry.python == str(Path.cwd() / ".venv" / "bin" / "python")


def test_name_with_trailing_newline_is_rejected(registrar: KernelRegistrar, tmp_path: Path) -> None:
    with pytest.raises(KernelRegistrationError, match="Invalid kernel name"):
        registrar.register("sent\n", "Sent", tmp_path / "python")
