import json

import pytest
from click.testing import CliRunner

from spread_check.factory import ProviderFactory
from spread_check.history import HISTORY_KEY
from spread_check.main import cli
from spread_check.providers.yahoo import YahooProvider

CHECK_ARGS = [
  "check",
  "--isin", "us0378331005",
  "--units", "10",
  "--total-paid", "1005",
  "--fees", "5",
  "--date", "2024-03-15",
  "--hour", "15",
  "--minute", "30",
  "--offset", "60",
]


@pytest.fixture
def history_path(tmp_path, monkeypatch):
  path = tmp_path / "history.json"
  monkeypatch.setenv("SPREAD_CHECK_HISTORY_PATH", str(path))
  monkeypatch.delenv("SPREAD_CHECK_LOG_LEVEL", raising=False)
  monkeypatch.chdir(tmp_path)
  return path


@pytest.fixture
def provider(fake_fetcher, monkeypatch):
  yahoo = YahooProvider(fetcher=fake_fetcher)
  monkeypatch.setattr(ProviderFactory, "create", lambda self, name, settings=None: yahoo)
  return yahoo


def _saved_entries(path):
  return json.loads(json.loads(path.read_text(encoding="utf-8"))[HISTORY_KEY])


def test_check_prints_result_and_records_history(history_path, provider):
  result = CliRunner().invoke(cli, CHECK_ARGS)

  assert result.exit_code == 0, result.output
  assert "Apple Inc. (AAPL)" in result.output
  assert "100.0000 USD at 15:30 UTC+01:00 (exact minute)" in result.output
  assert "+0.5000 USD (+0.500%)" in result.output
  assert "more than the market price" in result.output

  saved = _saved_entries(history_path)
  assert len(saved) == 1
  assert saved[0]["isin"] == "US0378331005"
  assert saved[0]["spreadPct"] == pytest.approx(0.5)


def test_check_closes_provider_connections(history_path, provider, fake_fetcher):
  assert CliRunner().invoke(cli, CHECK_ARGS).exit_code == 0
  fake_fetcher.close.assert_called_once()


def test_check_without_history(history_path, provider):
  result = CliRunner().invoke(cli, CHECK_ARGS + ["--no-history"])

  assert result.exit_code == 0, result.output
  assert not history_path.exists()


def test_check_rejects_invalid_input(history_path, provider, fake_fetcher):
  args = [arg if arg != "15" else "25" for arg in CHECK_ARGS]

  result = CliRunner().invoke(cli, args)

  assert result.exit_code == 1
  fake_fetcher.fetch.assert_not_called()


def test_check_reports_lookup_failure(history_path, provider, fake_fetcher):
  fake_fetcher.fetch.side_effect = [{"quotes": []}]

  result = CliRunner().invoke(cli, CHECK_ARGS)

  assert result.exit_code == 1
  assert not history_path.exists()
  fake_fetcher.close.assert_called_once()


def test_history_list_remove_clear(history_path, provider, fake_fetcher):
  runner = CliRunner()
  assert runner.invoke(cli, CHECK_ARGS).exit_code == 0

  listed = runner.invoke(cli, ["history", "list"])
  assert listed.exit_code == 0
  assert "Apple Inc." in listed.output
  assert "Average: +0.500% over 1 checks" in listed.output

  assert runner.invoke(cli, ["history", "remove", "3"]).exit_code == 1
  assert len(_saved_entries(history_path)) == 1

  removed = runner.invoke(cli, ["history", "remove", "0"])
  assert removed.exit_code == 0
  assert _saved_entries(history_path) == []

  assert "No history yet." in runner.invoke(cli, ["history", "list"]).output


def test_history_clear_asks_for_confirmation(history_path, provider):
  runner = CliRunner()
  runner.invoke(cli, CHECK_ARGS)

  declined = runner.invoke(cli, ["history", "clear"], input="n\n")
  assert declined.exit_code == 0
  assert len(_saved_entries(history_path)) == 1

  cleared = runner.invoke(cli, ["history", "clear", "--yes"])
  assert cleared.exit_code == 0
  assert _saved_entries(history_path) == []


def test_history_export_writes_csv(history_path, provider, tmp_path):
  runner = CliRunner()
  runner.invoke(cli, CHECK_ARGS)

  result = runner.invoke(cli, ["history", "export", "--filename", "out.csv"])

  assert result.exit_code == 0, result.output
  csv_text = (tmp_path / "csv" / "out.csv").read_text(encoding="utf-8")
  assert "spread_pct" in csv_text.splitlines()[0]
  assert "US0378331005" in csv_text
