"""Unit tests for actionqa.cli — the list and run commands."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from actionqa import __version__
from actionqa.cli.app import app
from actionqa.cli.suite import SuiteLoadError, load_suite, resolve_config
from actionqa.dsl import Automation

from conftest import FakeDOM, FakeElement

runner = CliRunner()

SUITE = """\
def install(qa):
    ok = qa.element("ok-button", "#ok")
    message = qa.element("message", "#msg")
    qa.test("click-ok", lambda: qa.click(ok))
    qa.test("greeting", lambda: qa.assert_that(message).text_is("Hello"))
"""


@pytest.fixture
def fast_config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.dump({"base_url": "http://app.test/", "step_delay_ms": 0, "resolve_delay_ms": 0, "max_tries": 1}),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def fake_browser(monkeypatch):
    """Replace the Playwright session with a FakeDOM holding #ok and #msg."""
    dom = FakeDOM()
    dom.add(FakeElement("button", id="ok"))
    message = dom.add(FakeElement("span", id="msg", text="Hello"))

    async def _run_in_browser(automation, test_ids):
        automation.attach(dom)
        for test_id in test_ids:
            await automation.run_test(test_id)

    monkeypatch.setattr("actionqa.cli.run._run_in_browser", _run_in_browser)
    dom.message = message
    return dom


# ---------------------------------------------------------------------------
# 1. Global options
# ---------------------------------------------------------------------------


class TestApp:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "list" in result.output
        assert "run" in result.output


# ---------------------------------------------------------------------------
# 2. Suite loading
# ---------------------------------------------------------------------------


class TestSuiteLoading:
    def test_load_suite_registers_tests(self, write_suite):
        automation = load_suite(write_suite(SUITE), Automation())
        assert [t.id for t in automation.registry.tests] == ["click-ok", "greeting"]

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(SuiteLoadError, match="not found"):
            load_suite(tmp_path / "nope.py", Automation())

    def test_missing_install(self, write_suite):
        with pytest.raises(SuiteLoadError, match="no install"):
            load_suite(write_suite("X = 1\n"), Automation())

    def test_import_error_wrapped(self, write_suite):
        with pytest.raises(SuiteLoadError, match="Failed to import"):
            load_suite(write_suite("raise RuntimeError('broken')\n"), Automation())

    def test_resolve_config_finds_project_dir(self, tmp_project_dir: Path, monkeypatch):
        nested = tmp_project_dir.parent / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        assert resolve_config(None).base_url == "http://localhost:3000"

    def test_resolve_config_defaults(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert resolve_config(None).base_url == ""


# ---------------------------------------------------------------------------
# 3. actionqa list
# ---------------------------------------------------------------------------


class TestListCommand:
    def test_lists_tests(self, write_suite):
        result = runner.invoke(app, ["list", str(write_suite(SUITE))])
        assert result.exit_code == 0
        assert "click-ok" in result.output
        assert "greeting" in result.output

    def test_lists_steps(self, write_suite):
        result = runner.invoke(app, ["list", str(write_suite(SUITE)), "--steps"])
        assert result.exit_code == 0
        assert "Click in ok-button" in result.output

    def test_bad_suite_exits_2(self, tmp_path: Path):
        result = runner.invoke(app, ["list", str(tmp_path / "missing.py")])
        assert result.exit_code == 2
        assert "Suite Error" in result.output


# ---------------------------------------------------------------------------
# 4. actionqa run
# ---------------------------------------------------------------------------


class TestRunCommand:
    def test_all_tests_pass(self, write_suite, fast_config_file, fake_browser):
        result = runner.invoke(app, ["run", str(write_suite(SUITE)), "--config", str(fast_config_file)])
        assert result.exit_code == 0, result.output
        assert "ALL TESTS PASSED" in result.output
        assert fake_browser.query_all(None, "#ok")[0].clicks == 1

    def test_failure_exits_1(self, write_suite, fast_config_file, fake_browser):
        fake_browser.message.text = "Goodbye"
        result = runner.invoke(app, ["run", str(write_suite(SUITE)), "--config", str(fast_config_file)])
        assert result.exit_code == 1
        assert "TESTS FAILED" in result.output

    def test_select_single_test(self, write_suite, fast_config_file, fake_browser):
        fake_browser.message.text = "Goodbye"
        result = runner.invoke(
            app, ["run", str(write_suite(SUITE)), "--config", str(fast_config_file), "--test", "click-ok"]
        )
        assert result.exit_code == 0

    def test_unknown_test_exits_2(self, write_suite, fast_config_file, fake_browser):
        result = runner.invoke(
            app, ["run", str(write_suite(SUITE)), "--config", str(fast_config_file), "--test", "nope"]
        )
        assert result.exit_code == 2
        assert "not found" in result.output

    def test_json_output(self, write_suite, fast_config_file, fake_browser):
        result = runner.invoke(app, ["run", str(write_suite(SUITE)), "--config", str(fast_config_file), "--json"])
        assert result.exit_code == 0
        assert '"passed": true' in result.output

    def test_junit_xml_written(self, write_suite, fast_config_file, fake_browser, tmp_path: Path):
        junit = tmp_path / "junit.xml"
        runner.invoke(
            app, ["run", str(write_suite(SUITE)), "--config", str(fast_config_file), "--junit-xml", str(junit)]
        )
        content = junit.read_text(encoding="utf-8")
        assert 'tests="2"' in content
        assert 'failures="0"' in content

    def test_missing_url_exits_2(self, write_suite, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["run", str(write_suite(SUITE))])
        assert result.exit_code == 2
        assert "No URL" in result.output

    def test_bad_speed_exits_2(self, write_suite, fast_config_file):
        result = runner.invoke(
            app, ["run", str(write_suite(SUITE)), "--config", str(fast_config_file), "--speed", "warp"]
        )
        assert result.exit_code == 2
        assert "Unknown speed" in result.output
