"""
Tests for the command-line entry point.
"""

import pytest

import main


@pytest.fixture(autouse=True)
def no_env_file(monkeypatch):
    monkeypatch.delenv("AI_GRADER_GEMINI_API_KEY", raising=False)
    monkeypatch.setattr(main, "setup_structured_logging", lambda **kwargs: None)


def test_no_command_prints_help():
    assert main.main([]) == 0


def test_missing_input_file_fails(tmp_path):
    missing = tmp_path / "missing.pdf"

    assert main.main(["grade", str(missing), str(tmp_path / "page.jpg")]) == 1


def test_read_files(tmp_path):
    path = tmp_path / "page.jpg"
    path.write_bytes(b"photo")

    assert main.read_files([str(path)]) == [b"photo"]


def test_confidence_style():
    assert main.confidence_style(1.0) == "green"
    assert main.confidence_style(0.6) == "yellow"
    assert main.confidence_style(0.2) == "red"


@pytest.mark.parametrize("flag", ["--runs", "--concurrency"])
@pytest.mark.parametrize("value", ["0", "-2", "many"])
def test_multipass_counts_must_be_positive(tmp_path, flag, value):
    with pytest.raises(SystemExit) as exc_info:
        main.main(["grade", str(tmp_path / "q.pdf"), str(tmp_path / "p.jpg"), "--multipass", flag, value])

    assert exc_info.value.code == 2


def test_positive_int():
    assert main.positive_int("3") == 3
