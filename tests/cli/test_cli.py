"""Tests for the CLI."""

import json
import signal
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from logq import __version__
from logq.cli.commands.stream.main import StreamOptions, complete_dataset
from logq.cli.config import settings
from logq.cli.core.api_client import UnauthenticatedError
from logq.cli.datasets.api_client import Dataset, QueryMatch, QueryResult
from logq.cli.exceptions import CLIError
from logq.cli.main import app
from logq.cli.stream import OutputMode


@pytest.fixture
def runner():
    """Create a Typer CLI test runner."""
    return CliRunner()


class FakeDatasetsClient:
    """Stands in for DatasetsClient; interrupts the stream after ``stop_after`` queries."""

    def __init__(self, matches=(), error=None, stop_after=1):
        self.matches = list(matches)
        self.error = error
        self.stop_after = stop_after
        self.calls = []
        self.init_kwargs = None

    def __call__(self, **kwargs):
        self.init_kwargs = kwargs
        return self

    async def query(self, dataset, start, end, *, streaming_duration=None, timeout=30.0):
        self.calls.append((dataset, start, end, streaming_duration, timeout))
        if self.error is not None:
            raise self.error
        if len(self.calls) >= self.stop_after:
            signal.raise_signal(signal.SIGINT)
        return QueryResult(matches=self.matches if len(self.calls) == 1 else [])

    async def list_datasets(self):
        return [Dataset(name="http-logs")]


def test_help(runner):
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "stream" in result.stdout


def test_version(runner):
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout

    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert f"logq version {__version__}" in result.stdout


def test_stream_command_help(runner):
    result = runner.invoke(app, ["stream", "--help"])
    assert result.exit_code == 0
    assert "--format" in result.stdout
    assert "--api-key" in result.stdout
    assert "--api-url" in result.stdout


def test_stream_without_token_exits_with_auth_code(runner):
    result = runner.invoke(app, ["stream", "http-logs", "--api-key", ""])

    assert result.exit_code == 4
    assert "Not authenticated" in result.output


def test_stream_rejects_unknown_format(runner):
    result = runner.invoke(app, ["stream", "http-logs", "--format", "yaml"])
    assert result.exit_code == 2


def test_stream_writes_json_lines_until_interrupted(runner):
    fake = FakeDatasetsClient(
        matches=[
            QueryMatch(time=1, data={"status": 200}),
            QueryMatch(time=2, data={"status": 503}),
        ]
    )

    with patch("logq.cli.commands.stream.main.DatasetsClient", fake):
        result = runner.invoke(
            app,
            [
                "stream",
                "http-logs",
                "--format",
                "json",
                "--api-url",
                "http://localhost:3000",
                "--api-key",
                "secret-token",
            ],
        )

    assert result.exit_code == 0, result.output
    records = [
        json.loads(line)
        for line in result.stdout.splitlines()
        if line.startswith("{")
    ]
    assert records == [{"status": 200}, {"status": 503}]

    dataset, start, end, streaming_duration, timeout = fake.calls[0]
    assert dataset == "http-logs"
    assert start < end
    assert streaming_duration == timeout == 2.0
    assert fake.init_kwargs["api_url"] == "http://localhost:3000"
    assert fake.init_kwargs["api_key"] == "secret-token"


def test_stream_with_invalid_token(runner):
    fake = FakeDatasetsClient(error=UnauthenticatedError("401"))

    with patch("logq.cli.commands.stream.main.DatasetsClient", fake):
        result = runner.invoke(app, ["stream", "http-logs"])

    assert result.exit_code == 1
    assert "Invalid API token" in result.output


def test_stream_fatal_query_error(runner):
    fake = FakeDatasetsClient(error=RuntimeError("boom"))

    with patch("logq.cli.commands.stream.main.DatasetsClient", fake):
        result = runner.invoke(app, ["stream", "http-logs"])

    assert result.exit_code == 1
    assert "Error streaming dataset: boom" in result.output


def test_stream_without_dataset_or_terminal(runner):
    fake = FakeDatasetsClient()

    with patch("logq.cli.commands.stream.main.DatasetsClient", fake):
        result = runner.invoke(app, ["stream"])

    assert result.exit_code == 2
    assert "missing dataset" in result.output
    assert fake.calls == []


@pytest.mark.asyncio
async def test_complete_dataset_keeps_an_explicit_dataset():
    client = AsyncMock()
    opts = StreamOptions(dataset="audit", output_mode=OutputMode.STRUCTURED)

    completed = await complete_dataset(opts, client, ask=None)

    assert completed is opts
    client.list_datasets.assert_not_called()


@pytest.mark.asyncio
async def test_complete_dataset_asks_among_listed_datasets():
    client = AsyncMock()
    client.list_datasets.return_value = [Dataset(name="a"), Dataset(name="b")]
    asked = []

    def ask(names):
        asked.append(names)
        return "b"

    opts = StreamOptions(output_mode=OutputMode.STRUCTURED)
    completed = await complete_dataset(opts, client, ask)

    assert asked == [["a", "b"]]
    assert completed.dataset == "b"
    assert completed.output_mode is OutputMode.STRUCTURED
    assert opts.dataset is None


@pytest.mark.asyncio
async def test_complete_dataset_without_any_datasets():
    client = AsyncMock()
    client.list_datasets.return_value = []

    with pytest.raises(CLIError, match="missing dataset"):
        await complete_dataset(StreamOptions(), client, ask=lambda names: names[0])


def test_stream_options_are_immutable():
    opts = StreamOptions(dataset="a")
    with pytest.raises(Exception):
        opts.dataset = "b"


def test_api_key_from_the_command_line_is_redacted_in_the_log_file(
    runner, monkeypatch, tmp_path
):
    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path))
    monkeypatch.setattr(settings, "TOKEN", "")
    fake = FakeDatasetsClient(error=RuntimeError("rejected key cli-key-77"))

    with patch("logq.cli.commands.stream.main.DatasetsClient", fake):
        result = runner.invoke(
            app, ["stream", "http-logs", "--api-key", "cli-key-77"]
        )

    assert result.exit_code == 1
    content = (tmp_path / "logq.log").read_text()
    assert "Error streaming dataset" in content
    assert "cli-key-77" not in content
