"""Tests for the tether CLI: argument parsing and the routes listing."""

import textwrap
from pathlib import Path

import pytest

from tether.cli import main
from tether.cli._resolve import list_routes, resolve_target

MODULE = textwrap.dedent(
    """
    from tether import define_route, define_router, server_routes, AsgiApp

    api = define_router(
        {
            "projects": {
                "list": define_route("GET", "/projects", summary="List projects"),
                "get": define_route("GET", "/projects/{project_id}", deprecated=True),
            },
        }
    )
    empty = define_router({})
    app = AsgiApp(
        server_routes(api)
        .handle("projects.list", lambda request: [])
        .handle("projects.get", lambda request: {})
        .build()
    )


    def make_api():
        return api


    not_routes = 42
    """
)


@pytest.fixture
def target_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    name = f"cli_target_{tmp_path.name.replace('-', '_')}"
    (tmp_path / f"{name}.py").write_text(MODULE)
    monkeypatch.syspath_prepend(str(tmp_path))
    return name


class TestMain:
    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        assert "tether" in capsys.readouterr().out

    def test_routes_table(self, target_module: str, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", f"{target_module}:api"])
        out = capsys.readouterr().out
        assert "METHOD" in out
        assert "/projects/{project_id}" in out
        assert "projects.list" in out
        assert "List projects" in out
        assert "[deprecated]" in out

    def test_default_attribute_is_api(self, target_module: str, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", target_module])
        assert "projects.get" in capsys.readouterr().out

    def test_colon_style(self, target_module: str, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", f"{target_module}:api", "--style", "colon"])
        assert "/projects/:project_id" in capsys.readouterr().out

    def test_empty_tree(self, target_module: str, capsys: pytest.CaptureFixture[str]) -> None:
        main(["routes", f"{target_module}:empty"])
        assert "No routes declared." in capsys.readouterr().out

    def test_bad_target(self, target_module: str, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["routes", f"{target_module}:not_routes"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_missing_module(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            main(["routes", "definitely_not_a_module_xyz:api"])
        assert "Error:" in capsys.readouterr().err


class TestResolve:
    def test_resolve_target(self, target_module: str) -> None:
        assert isinstance(resolve_target(f"{target_module}:not_routes"), int)

    def test_app_and_factory(self, target_module: str) -> None:
        from_app = [key for key, _ in list_routes(f"{target_module}:app")]
        from_factory = [key for key, _ in list_routes(f"{target_module}:make_api")]
        assert sorted(from_app) == ["projects.get", "projects.list"]
        assert from_factory == ["projects.list", "projects.get"]
