import io
import json
import sys

import pytest

from elpick_core import cli

HTML = """<html><body>
<div id="x" class="a b">hello</div>
<ul><li>One</li><li title="second">Two</li></ul>
</body></html>"""


@pytest.fixture
def page(tmp_path):
    path = tmp_path / "page.html"
    path.write_text(HTML, encoding="utf-8")
    return str(path)


def test_path(page, capsys):
    assert cli.main(["path", page, "-s", "#x"]) == 0
    assert capsys.readouterr().out.strip() == "#x"


def test_path_json(page, capsys):
    assert cli.main(["path", page, "-s", "li[title]", "--json"]) == 0
    assert json.loads(capsys.readouterr().out) == {"path": "html > body > ul > li:nth-of-type(2)"}


def test_filters_text_output(page, capsys):
    assert cli.main(["filters", page, "-s", "#x", "--domain", "example.com"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "example.com##div#x\t# By ID (strongest)"
    assert any(line.startswith("example.com##div.a.b\t") for line in lines)


def test_filters_domain_from_url(page, capsys):
    assert cli.main(["filters", page, "-s", "li[title]", "--url", "https://news.example.net/a", "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["domain"] == "news.example.net"
    assert 'news.example.net##li[title="second"]' in [f["rule"] for f in data["filters"]]


def test_inspect(page, capsys):
    assert cli.main(["inspect", page, "-s", "#x", "--domain", "example.com"]) == 0
    out = capsys.readouterr().out
    assert "Tag: <div> | ID: #x | Class: .a.b" in out
    assert "CSS Path: #x" in out
    assert "example.com##div:has-text(/hello/)" in out
    assert '<div id="x" class="a b">hello</div>' in out


def test_stdin_source(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO(HTML))
    assert cli.main(["path", "-", "-s", "li"]) == 0
    assert capsys.readouterr().out.strip() == "html > body > ul > li:nth-of-type(1)"


def test_missing_element(page, capsys):
    assert cli.main(["path", page, "-s", "table"]) == 1
    assert "No element matches" in capsys.readouterr().err


def test_missing_file(tmp_path, capsys):
    assert cli.main(["path", str(tmp_path / "nope.html"), "-s", "p"]) == 1
    assert "Cannot read" in capsys.readouterr().err


def test_prefs_set_get_reset(tmp_path, capsys):
    prefs = str(tmp_path / "prefs.json")
    assert cli.main(["prefs", "--file", prefs, "set", "ui.compact", "true"]) == 0
    assert json.loads(capsys.readouterr().out) is True

    assert cli.main(["prefs", "--file", prefs, "get", "ui.compact"]) == 0
    assert json.loads(capsys.readouterr().out) is True

    assert cli.main(["prefs", "--file", prefs, "set", "ui.theme", "dark"]) == 0
    assert json.loads(capsys.readouterr().out) == "dark"

    assert cli.main(["prefs", "--file", prefs, "reset"]) == 0
    assert json.loads(capsys.readouterr().out)["ui"]["theme"] == "glass"


def test_prefs_get_requires_key(tmp_path, capsys):
    assert cli.main(["prefs", "--file", str(tmp_path / "p.json"), "get"]) == 1
    assert "needs a KEY" in capsys.readouterr().err
