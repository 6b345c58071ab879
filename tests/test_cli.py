import json
import os
from pathlib import Path

import frontmatter
import httpx
import pytest
from typer.testing import CliRunner

from confluence_tools import cli
from confluence_tools import config as config_module
from confluence_tools.confluence.client import ConfluenceAuth, ConfluenceClient

from conftest import BASE_URL, RecordingHandler, page_payload


runner = CliRunner()
CREDENTIALS = ["--base-url", BASE_URL, "--pat", "token"]


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_PATHS", (tmp_path / "missing.toml",))
    monkeypatch.setattr(os, "environ", {k: v for k, v in os.environ.items() if not k.startswith("CONFLUENCE_")})


@pytest.fixture()
def routes(monkeypatch):
    table: dict = {}
    handler = RecordingHandler(table)

    def _create_client(*, base_url, pat=None, email=None, api_token=None):
        return ConfluenceClient(
            base_url=base_url,
            auth=ConfluenceAuth(pat=pat, email=email, api_token=api_token),
            transport=httpx.MockTransport(handler),
        )

    monkeypatch.setattr(cli, "create_client", _create_client)
    table["handler"] = handler
    return table


def test_convert_from_stdin():
    result = runner.invoke(cli.app, ["convert"], input="# Title\n\nSome *text*.")
    assert result.exit_code == 0
    assert result.stdout.strip() == "<h1>Title</h1><p>Some <em>text</em>.</p>"


def test_convert_file_to_output(tmp_path: Path):
    source = tmp_path / "doc.md"
    source.write_text("- one\n- two\n\nDone", encoding="utf-8")
    target = tmp_path / "doc.xhtml"

    result = runner.invoke(cli.app, ["convert", str(source), "--output", str(target)])

    assert result.exit_code == 0
    assert target.read_text(encoding="utf-8") == "<ul><li>one</li><li>two</li></ul><p>Done</p>"


def test_convert_missing_file(tmp_path: Path):
    result = runner.invoke(cli.app, ["convert", str(tmp_path / "nope.md")])
    assert result.exit_code != 0


def test_init_writes_page(tmp_path: Path):
    result = runner.invoke(cli.app, ["init", "--directory", str(tmp_path), "--title", "Guide", "-s", "DOCS"])
    assert result.exit_code == 0
    post = frontmatter.load(tmp_path / "page.md")
    assert post.metadata["title"] == "Guide"
    assert post.metadata["space_key"] == "DOCS"

    again = runner.invoke(cli.app, ["init", "--directory", str(tmp_path), "--title", "Guide"])
    assert again.exit_code != 0


def test_read_by_id(routes):
    routes[("GET", "/wiki/api/v2/pages/123")] = lambda request: httpx.Response(
        200, json=page_payload(value="<h1>Hi</h1><ul><li>a</li></ul>")
    )
    result = runner.invoke(cli.app, ["read", "--page-id", "123", "--format", "markdown", *CREDENTIALS])
    assert result.exit_code == 0, result.output
    assert "# Hi" in result.stdout
    assert "- a" in result.stdout
    assert routes["handler"].requests[0].headers["Authorization"] == "Bearer token"


def test_read_requires_identifier():
    result = runner.invoke(cli.app, ["read", *CREDENTIALS])
    assert result.exit_code != 0


def test_read_without_credentials():
    result = runner.invoke(cli.app, ["read", "--page-id", "123"])
    assert result.exit_code == 1
    assert "MISSING_CREDENTIALS" in result.output


def test_update_reports_conflict(routes, tmp_path: Path):
    source = tmp_path / "doc.md"
    source.write_text("New body", encoding="utf-8")
    routes[("GET", "/wiki/api/v2/pages/123")] = lambda request: httpx.Response(200, json=page_payload())
    routes[("PUT", "/wiki/api/v2/pages/123")] = lambda request: httpx.Response(409, json={"message": "stale"})

    result = runner.invoke(cli.app, ["update", "--page-id", "123", "--file", str(source), *CREDENTIALS])

    assert result.exit_code == 1
    assert "CONFLICT_ERROR" in result.output


def test_create_page(routes, tmp_path: Path):
    source = tmp_path / "doc.md"
    source.write_text("Hello", encoding="utf-8")
    routes[("POST", "/wiki/api/v2/pages")] = lambda request: httpx.Response(
        200, json=page_payload("55", title="Fresh", version=1)
    )

    result = runner.invoke(
        cli.app,
        ["create", "--title", "Fresh", "--file", str(source), "--space-id", "9001", *CREDENTIALS],
    )

    assert result.exit_code == 0, result.output
    assert "Created page" in result.stdout
    request = routes["handler"].requests[0]
    assert b"<p>Hello</p>" in request.content


def test_publish_creates_page(routes, tmp_path: Path):
    runner.invoke(cli.app, ["init", "--directory", str(tmp_path), "--title", "Fresh"])
    routes[("POST", "/wiki/api/v2/pages")] = lambda request: httpx.Response(
        200, json=page_payload("55", title="Fresh", version=1)
    )

    result = runner.invoke(cli.app, ["publish", str(tmp_path), "--space-id", "9001", *CREDENTIALS])

    assert result.exit_code == 0, result.output
    post = frontmatter.load(tmp_path / "page.md")
    assert post.metadata["page_id"] == "55"
    assert post.metadata["version"] == 1


def test_create_space_key_option_overrides_configured_space_id(routes, tmp_path: Path):
    config_file = tmp_path / "settings.toml"
    config_file.write_text(
        f'[credentials]\nbase_url = "{BASE_URL}"\npat = "token"\n\n[defaults]\nspace_id = "111"\n',
        encoding="utf-8",
    )
    source = tmp_path / "doc.md"
    source.write_text("Hello", encoding="utf-8")
    routes[("GET", "/wiki/api/v2/spaces")] = lambda request: httpx.Response(200, json={"results": [{"id": 222}]})
    routes[("POST", "/wiki/api/v2/pages")] = lambda request: httpx.Response(
        200, json=page_payload("55", title="Fresh", version=1)
    )

    result = runner.invoke(
        cli.app,
        ["--config", str(config_file), "create", "--title", "Fresh", "--file", str(source), "--space-key", "OTHER"],
    )

    assert result.exit_code == 0, result.output
    post = routes["handler"].requests[-1]
    assert post.method == "POST"
    assert json.loads(post.content)["spaceId"] == "222"


def test_malformed_base_url_is_reported():
    result = runner.invoke(cli.app, ["read", "--page-id", "123", "--base-url", "not a url", "--pat", "token"])

    assert result.exit_code == 1
    assert "VALIDATION_ERROR" in result.output
