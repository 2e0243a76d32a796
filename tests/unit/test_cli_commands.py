"""Unit tests for the CLI — Typer command registration and behavior.

Cluster access is replaced by the in-memory fakes from conftest through
``clients_from_config``.
"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from buildwatch.cli.app import app
from buildwatch.cli.commands import _common
from buildwatch.models.build import BuildPhase

runner = CliRunner()


@pytest.fixture
def cluster(monkeypatch, tmp_path, fake_build_client, fake_ist_client):
    """Route the CLI's cluster clients to the fakes."""
    seen: dict[str, str] = {}

    def _clients(config, namespace=None, session=None):
        seen["namespace"] = namespace
        return fake_build_client, fake_ist_client

    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("BUILDWATCH_NAMESPACE", raising=False)
    monkeypatch.delenv("JOB_SPEC", raising=False)
    monkeypatch.setattr(_common, "clients_from_config", _clients)
    return seen


def _json_line(output: str) -> dict:
    for line in output.splitlines():
        if line.startswith("{"):
            return json.loads(line)
    raise AssertionError(f"no JSON document in output:\n{output}")


# ---------------------------------------------------------------------------
# Test: CLI help and registration
# ---------------------------------------------------------------------------


class TestCliApp:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        # Typer's no_args_is_help may exit with 0 or 2 depending on version
        assert result.exit_code in (0, 2)
        assert "usage" in result.output.lower()

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("source", "wait", "logs", "exists"):
            assert command in result.output

    @pytest.mark.parametrize("command", ["source", "wait", "logs", "exists"])
    def test_command_help(self, command):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0


# ---------------------------------------------------------------------------
# Test: source
# ---------------------------------------------------------------------------


class TestSourceCommand:
    def test_dry_run_prints_build(self, cluster, fake_build_client, job_spec_json):
        result = runner.invoke(
            app,
            ["source", "--from", "root", "--to", "src", "--dry-run", "--job-spec", job_spec_json],
        )
        assert result.exit_code == 0, result.output
        doc = _json_line(result.output)
        assert doc["metadata"]["name"] == "src"
        assert doc["metadata"]["labels"]["creates"] == "src"
        assert fake_build_client.create_calls == []

    def test_job_spec_from_environment(self, cluster, job_spec_json):
        result = runner.invoke(
            app,
            ["source", "--from", "root", "--to", "src", "--dry-run"],
            env={"JOB_SPEC": job_spec_json},
        )
        assert result.exit_code == 0, result.output
        assert _json_line(result.output)["kind"] == "Build"

    def test_missing_job_spec(self, cluster):
        result = runner.invoke(app, ["source", "--from", "root", "--to", "src", "--dry-run"])
        assert result.exit_code == 1
        assert "No job spec" in result.output

    def test_invalid_job_spec(self, cluster):
        result = runner.invoke(
            app,
            ["source", "--from", "root", "--to", "src", "--dry-run", "--job-spec", "{oops"],
        )
        assert result.exit_code == 1
        assert "Invalid job spec" in result.output

    def test_requires_namespace_for_real_run(self, cluster, job_spec_json):
        result = runner.invoke(
            app, ["source", "--from", "root", "--to", "src", "--job-spec", job_spec_json]
        )
        assert result.exit_code == 1
        assert "No namespace" in result.output

    def test_skips_existing_target(self, cluster, fake_build_client, fake_ist_client, job_spec_json):
        fake_ist_client.tags.add("pipeline:src")
        result = runner.invoke(
            app,
            ["source", "--from", "root", "--to", "src", "-n", "ns", "--job-spec", job_spec_json],
        )
        assert result.exit_code == 0, result.output
        assert "already exists" in result.output
        assert fake_build_client.create_calls == []

    def test_builds_and_waits(self, cluster, fake_build_client, make_build, job_spec_json):
        fake_build_client.snapshots = [[make_build(phase=BuildPhase.COMPLETE, namespace="ns")]]
        result = runner.invoke(
            app,
            ["source", "--from", "root", "--to", "src", "-n", "ns", "--job-spec", job_spec_json],
        )
        assert result.exit_code == 0, result.output
        assert cluster["namespace"] == "ns"
        assert fake_build_client.builds["src"].namespace == "ns"
        assert "Built" in result.output

    def test_failed_build_exits_nonzero(self, cluster, fake_build_client, make_build, job_spec_json):
        fake_build_client.snapshots = [[make_build(phase=BuildPhase.FAILED, namespace="ns")]]
        fake_build_client.log_payload = b"compile error\n"
        result = runner.invoke(
            app,
            ["source", "--from", "root", "--to", "src", "-n", "ns", "--force", "--job-spec", job_spec_json],
        )
        assert result.exit_code == 1
        assert "Build failed" in result.output
        assert "compile error" in result.output


# ---------------------------------------------------------------------------
# Test: wait / logs / exists
# ---------------------------------------------------------------------------


class TestWaitCommand:
    def test_complete(self, cluster, fake_build_client, make_build):
        fake_build_client.snapshots = [[make_build(phase=BuildPhase.COMPLETE)]]
        result = runner.invoke(app, ["wait", "src", "-n", "ns"])
        assert result.exit_code == 0, result.output
        assert "completed" in result.output

    def test_failed(self, cluster, fake_build_client, make_build):
        fake_build_client.snapshots = [[make_build(phase=BuildPhase.ERROR)]]
        result = runner.invoke(app, ["wait", "src", "-n", "ns"])
        assert result.exit_code == 1
        assert "Build failed" in result.output

    def test_not_found(self, cluster, fake_build_client):
        result = runner.invoke(app, ["wait", "missing", "-n", "ns"])
        assert result.exit_code == 1
        assert "Cannot wait" in result.output


class TestLogsCommand:
    def test_prints_logs(self, cluster, fake_build_client):
        fake_build_client.log_payload = b"hello from the build\n"
        result = runner.invoke(app, ["logs", "src", "-n", "ns"])
        assert result.exit_code == 0, result.output
        assert "hello from the build" in result.output
        _, options = fake_build_client.log_calls[0]
        assert options.no_wait is True
        assert options.timestamps is True


class TestExistsCommand:
    def test_exists(self, cluster, fake_ist_client):
        fake_ist_client.tags.add("pipeline:src")
        result = runner.invoke(app, ["exists", "src", "-n", "ns"])
        assert result.exit_code == 0
        assert "exists" in result.output

    def test_missing(self, cluster):
        result = runner.invoke(app, ["exists", "src", "-n", "ns"])
        assert result.exit_code == 1
        assert "not found" in result.output
