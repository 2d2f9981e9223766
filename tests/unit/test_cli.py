from __future__ import annotations

import argparse
from typing import TYPE_CHECKING

import pytest

from purpleifypdf import cli
from purpleifypdf.exceptions import DependencyError, RenderError
from purpleifypdf.settings import Settings
from purpleifypdf.typing.enums import Quality
from purpleifypdf.typing.models import Color, PageRange

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def cli_settings(mocker) -> Settings:
    settings = Settings(DEFAULT_QUALITY="low", DEFAULT_BACKGROUND_COLOR="#010203")
    mocker.patch("purpleifypdf.cli.get_settings", return_value=settings)
    mocker.patch("purpleifypdf.cli.configure_logging")
    mocker.patch("purpleifypdf.cli.ensure_render_dependencies")
    return settings


def test_build_parser_parses_transform_arguments(tmp_path: Path) -> None:
    args = cli.build_parser().parse_args(
        [
            "transform",
            "--input",
            str(tmp_path / "in.pdf"),
            "--output",
            str(tmp_path / "out.pdf"),
            "--quality",
            "High",
            "--background",
            "#00ff00",
            "--page-start",
            "2",
            "--page-count",
            "3",
        ],
    )

    assert args.command == "transform"
    assert args.quality is Quality.HIGH
    assert args.background_color == Color(r=0, g=255, b=0)
    assert cli._build_page_range(args) == PageRange(starting_index=2, count=3)  # noqa: SLF001


def test_build_parser_rejects_unknown_quality(capsys) -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["page", "--input", "a", "--output", "b", "--page", "0", "--quality", "ultra"])

    assert "Unsupported Quality value" in capsys.readouterr().err


def test_build_page_range_defaults_to_every_page() -> None:
    args = argparse.Namespace(page_start=0, page_count=None)
    assert cli._build_page_range(args) is None  # noqa: SLF001


def test_build_page_range_requires_count_with_start() -> None:
    args = argparse.Namespace(page_start=1, page_count=None)
    with pytest.raises(argparse.ArgumentTypeError, match="--page-count"):
        cli._build_page_range(args)  # noqa: SLF001


def test_main_without_command_prints_help(cli_settings: Settings, capsys) -> None:
    assert cli.main([]) == 0
    assert "usage" in capsys.readouterr().out.lower()


def test_main_dispatches_with_settings(cli_settings: Settings, mocker, tmp_path: Path) -> None:
    run_transform = mocker.patch("purpleifypdf.cli._run_transform")

    code = cli.main(["transform", "--input", str(tmp_path / "in.pdf"), "--output", str(tmp_path / "out.pdf")])

    assert code == 0
    args, settings = run_transform.call_args.args
    assert settings is cli_settings
    assert args.quality is None


def test_main_returns_error_code_on_package_error(cli_settings: Settings, mocker, tmp_path: Path) -> None:
    mocker.patch("purpleifypdf.cli._run_page", side_effect=RenderError())

    code = cli.main(["page", "--input", str(tmp_path / "in.pdf"), "--output", str(tmp_path / "o.png"), "--page", "0"])

    assert code == 1


def test_main_returns_error_code_on_missing_input(cli_settings: Settings, tmp_path: Path) -> None:
    code = cli.main(["images", "--input", str(tmp_path / "missing.pdf"), "--output", str(tmp_path / "o.bin")])
    assert code == 1


def test_main_reports_page_start_without_count(cli_settings: Settings, tmp_path: Path, capsys) -> None:
    (tmp_path / "in.pdf").write_bytes(b"%PDF")

    with pytest.raises(SystemExit) as exc_info:
        cli.main(
            ["transform", "--input", str(tmp_path / "in.pdf"), "--output", str(tmp_path / "o.pdf"), "--page-start", "1"],
        )

    assert exc_info.value.code == 2
    assert "--page-count is required" in capsys.readouterr().err


@pytest.mark.parametrize(("page_start", "page_count"), [(0, -1), (-1, 2)])
def test_build_page_range_rejects_negative_values(page_start: int, page_count: int) -> None:
    args = argparse.Namespace(page_start=page_start, page_count=page_count)
    with pytest.raises(argparse.ArgumentTypeError, match="must not be negative"):
        cli._build_page_range(args)


def test_main_reports_negative_page_count_as_usage_error(cli_settings: Settings, tmp_path: Path, capsys) -> None:
    (tmp_path / "in.pdf").write_bytes(b"%PDF")

    with pytest.raises(SystemExit) as exc_info:
        cli.main(
            ["transform", "--input", str(tmp_path / "in.pdf"), "--output", str(tmp_path / "o.pdf"), "--page-count", "-1"],
        )

    assert exc_info.value.code == 2
    assert "must not be negative" in capsys.readouterr().err
    assert not (tmp_path / "o.pdf").exists()


def test_main_propagates_missing_dependencies(mocker) -> None:
    mocker.patch("purpleifypdf.cli.get_settings", return_value=Settings())
    mocker.patch("purpleifypdf.cli.configure_logging")
    mocker.patch(
        "purpleifypdf.cli.ensure_render_dependencies",
        side_effect=DependencyError(missing_package=["pymupdf"], message="render"),
    )

    with pytest.raises(DependencyError):
        cli.main(["port"])


def test_main_runs_port_on_standard_streams(cli_settings: Settings, mocker) -> None:
    port = mocker.patch("purpleifypdf.cli.Port")

    assert cli.main(["port"]) == 0
    port.return_value.serve.assert_called_once_with()


def test_run_page_uses_settings_defaults(cli_settings: Settings, mocker, tmp_path: Path) -> None:
    (tmp_path / "in.pdf").write_bytes(b"%PDF")
    render = mocker.patch("purpleifypdf.cli.transform_page_png", return_value=b"\x89PNG")

    code = cli.main(["page", "--input", str(tmp_path / "in.pdf"), "--output", str(tmp_path / "p.png"), "--page", "2"])

    assert code == 0
    render.assert_called_once_with(b"%PDF", 2, Quality.LOW, Color(r=1, g=2, b=3))
    assert (tmp_path / "p.png").read_bytes() == b"\x89PNG"
