"""Tests for the console selection menu and install flow."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from handheldkit.config.settings import DtbConfig
from handheldkit.domain.models import ConsoleOption
from handheldkit.dtb.selector import (
    ConsoleSelector,
    SourceNotFoundError,
    find_option,
    install,
    options_from_config,
)


@pytest.fixture
def options() -> list[ConsoleOption]:
    return options_from_config(DtbConfig().consoles)


def make_selector(options: list[ConsoleOption], answers: list[str]) -> tuple[ConsoleSelector, list[str]]:
    feed = iter(answers)
    output: list[str] = []

    def fake_input(prompt: str) -> str:
        try:
            return next(feed)
        except StopIteration:
            raise EOFError from None

    return ConsoleSelector(options, input_fn=fake_input, output_fn=output.append), output


class TestReadChoice:
    @pytest.mark.parametrize("word", ["q", "Q", "quit", "EXIT", " q "])
    def test_quit_words(self, options: list[ConsoleOption], word: str) -> None:
        selector, _ = make_selector(options, [word])
        assert selector.read_choice("> ") == 0

    def test_retries_on_garbage(self, options: list[ConsoleOption]) -> None:
        selector, output = make_selector(options, ["abc", "", "3"])
        assert selector.read_choice("> ") == 3
        assert output.count("Enter a number, or q to quit") == 2

    def test_eof_propagates(self, options: list[ConsoleOption]) -> None:
        selector, _ = make_selector(options, [])
        with pytest.raises(EOFError):
            selector.read_choice("> ")


class TestSelect:
    def test_menu_is_one_based(self, options: list[ConsoleOption]) -> None:
        selector, output = make_selector(options, ["2"])
        selected = selector.select()
        assert selected is not None
        assert selected.real == "r36max"
        assert "  1. XiFan Mymini" in output
        assert "  0. Exit (or q)" in output

    def test_zero_quits(self, options: list[ConsoleOption]) -> None:
        selector, _ = make_selector(options, ["0"])
        assert selector.select() is None

    def test_out_of_range_reprompts(self, options: list[ConsoleOption]) -> None:
        selector, output = make_selector(options, ["9", "-1", "8"])
        selected = selector.select()
        assert selected is not None
        assert selected.display == "XiFan DC35V"
        assert output.count("Invalid choice, try again.") == 2


class TestFindOption:
    def test_by_real_name(self, options: list[ConsoleOption]) -> None:
        assert find_option(options, "R36PRO").display == "XiFan R36Pro"

    def test_by_display_name(self, options: list[ConsoleOption]) -> None:
        assert find_option(options, "xifan xf40v").display == "XiFan XF40V"

    def test_shared_directory_returns_first(self, options: list[ConsoleOption]) -> None:
        assert find_option(options, "dc40v").display == "XiFan XF40V"

    def test_unknown(self, options: list[ConsoleOption]) -> None:
        assert find_option(options, "gameboy") is None


class TestInstall:
    def test_copies_console_logo_and_marker(self, consoles_dir: Path, tmp_path: Path) -> None:
        target = tmp_path / "boot"
        option = ConsoleOption(display="XiFan R36Max", real="r36max", logo="logo/720P/")
        report = install(option, consoles_dir, target)
        assert report.files_copied == 3
        assert report.logo_copied
        assert (target / "logo.bmp").read_bytes() == b"BM720"
        assert report.marker_path == target / ".cn"
        assert (target / ".cn").read_bytes() == b""

    def test_missing_logo_is_skipped(self, consoles_dir: Path, tmp_path: Path) -> None:
        option = ConsoleOption(display="X", real="r36max", logo="logo/1080P/")
        report = install(option, consoles_dir, tmp_path / "boot")
        assert not report.logo_copied
        assert report.files_copied == 2

    def test_no_logo(self, consoles_dir: Path, tmp_path: Path) -> None:
        option = ConsoleOption(display="X", real="r36max")
        report = install(option, consoles_dir, tmp_path / "boot")
        assert not report.logo_copied

    def test_marker_truncates(self, consoles_dir: Path, tmp_path: Path) -> None:
        target = tmp_path / "boot"
        target.mkdir()
        (target / ".cn").write_text("stale")
        install(ConsoleOption(display="X", real="r36max"), consoles_dir, target)
        assert (target / ".cn").read_bytes() == b""

    def test_marker_disabled(self, consoles_dir: Path, tmp_path: Path) -> None:
        target = tmp_path / "boot"
        report = install(ConsoleOption(display="X", real="r36max"), consoles_dir, target, marker=None)
        assert report.marker_path is None
        assert not (target / ".cn").exists()

    def test_missing_console_dir(self, consoles_dir: Path, tmp_path: Path) -> None:
        target = tmp_path / "boot"
        with pytest.raises(SourceNotFoundError) as exc_info:
            install(ConsoleOption(display="X", real="xf35h"), consoles_dir, target)
        assert exc_info.value.step == "console"
        assert not (target / ".cn").exists()


class TestDefaultIo:
    def test_uses_builtins_patched_after_construction(
        self, options: list[ConsoleOption], capsys: pytest.CaptureFixture[str],
    ) -> None:
        selector = ConsoleSelector(options)
        with patch("builtins.input", return_value="2"):
            selected = selector.select()
        assert selected is not None
        assert selected.real == "r36max"
        assert "XiFan R36Max" in capsys.readouterr().out
