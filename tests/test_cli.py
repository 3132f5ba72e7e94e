"""Tests for the hmacsign command line."""

import json

import pytest
from click.testing import CliRunner

from hmacsign.cli import cli

from conftest import reference_signature

SIGN_ARGS = [
    "--key", "abc123",
    "--secret", "s3cr3t",
    "--method", "POST",
    "--payload", '{"a":1}',
    "--timestamp", "1000",
]


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


class TestSignCommand:
    """Test the sign command."""

    def test_prints_signature(self, runner, sample_inputs):
        result = runner.invoke(cli, ["sign", *SIGN_ARGS])

        assert result.exit_code == 0, result.output
        assert result.output.strip() == reference_signature(**sample_inputs)

    def test_json_output_masks_secret(self, runner, sample_inputs):
        result = runner.invoke(cli, ["sign", *SIGN_ARGS, "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["signature"] == reference_signature(**sample_inputs)
        assert data["timestamp"] == 1000
        assert data["method"] == "POST"
        assert data["secret"] == "***"

    def test_json_output_show_secret(self, runner):
        result = runner.invoke(cli, ["sign", *SIGN_ARGS, "--json", "--show-secret"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["secret"] == "s3cr3t"

    def test_missing_method(self, runner):
        result = runner.invoke(
            cli, ["sign", "--key", "abc123", "--secret", "s3cr3t", "--payload", "x"]
        )

        assert result.exit_code == 2
        assert "Method" in result.output

    def test_payload_file(self, runner, tmp_path, sample_inputs):
        body = tmp_path / "body.json"
        body.write_text('{"a":1}', encoding="utf-8")

        result = runner.invoke(
            cli,
            [
                "sign",
                "--key", "abc123",
                "--secret", "s3cr3t",
                "--method", "POST",
                "--payload-file", str(body),
                "--timestamp", "1000",
            ],
        )

        assert result.exit_code == 0, result.output
        assert result.output.strip() == reference_signature(**sample_inputs)

    def test_config_defaults(self, runner, tmp_path, sample_inputs):
        config = tmp_path / "hmacsign.json"
        config.write_text(json.dumps({"cli": {"key": "abc123", "secret": "s3cr3t"}}))

        result = runner.invoke(
            cli,
            ["--config", str(config), "sign", "-m", "POST", "-p", '{"a":1}', "-t", "1000"],
        )

        assert result.exit_code == 0, result.output
        assert result.output.strip() == reference_signature(**sample_inputs)

    def test_missing_config(self, runner, tmp_path):
        result = runner.invoke(cli, ["--config", str(tmp_path / "nope.json"), "sign"])
        assert result.exit_code == 2

    def test_non_ascii_rejected(self, runner):
        result = runner.invoke(
            cli,
            ["sign", "-k", "abc123", "-s", "s3cr3t", "-m", "POST", "-p", "café", "-t", "1000"],
        )

        assert result.exit_code == 2
        assert "Payload" in result.output

    def test_replace_mode(self, runner):
        args = ["-k", "abc123", "-s", "s3cr3t", "-m", "POST", "-t", "1000"]
        replaced = runner.invoke(cli, ["--encoding-errors", "replace", "sign", *args, "-p", "café"])
        plain = runner.invoke(cli, ["sign", *args, "-p", "caf?"])

        assert replaced.exit_code == 0, replaced.output
        assert replaced.output == plain.output

    def test_allow_empty_payload(self, runner, sample_inputs):
        args = ["-k", "abc123", "-s", "s3cr3t", "-m", "GET", "-p", "", "-t", "1000"]

        rejected = runner.invoke(cli, ["sign", *args])
        accepted = runner.invoke(cli, ["--allow-empty-payload", "sign", *args])

        assert rejected.exit_code == 2
        assert accepted.exit_code == 0, accepted.output
        expected = reference_signature(**{**sample_inputs, "method": "GET"})
        assert accepted.output.strip() == expected


class TestVerifyCommand:
    """Test the verify command."""

    def test_valid(self, runner, sample_inputs):
        signature = reference_signature(**sample_inputs)
        result = runner.invoke(cli, ["verify", *SIGN_ARGS, "--signature", signature])

        assert result.exit_code == 0, result.output
        assert "valid" in result.output

    def test_invalid(self, runner):
        result = runner.invoke(cli, ["verify", *SIGN_ARGS, "--signature", "AAAA"])

        assert result.exit_code == 1
        assert "invalid" in result.output

    def test_timestamp_required(self, runner):
        result = runner.invoke(
            cli,
            ["verify", "-k", "a", "-s", "b", "-m", "GET", "-p", "x", "--signature", "AAAA"],
        )

        assert result.exit_code == 2
        assert "TimeStamp" in result.output


class TestCanonicalCommand:
    """Test the canonical command."""

    def test_get_canonical(self, runner):
        result = runner.invoke(
            cli, ["canonical", "-k", "abc123", "-s", "s3cr3t", "-m", "get", "-p", "x", "-t", "1000"]
        )

        assert result.exit_code == 0, result.output
        assert "abc123:1000" in result.output.splitlines()

    def test_post_canonical(self, runner):
        result = runner.invoke(cli, ["canonical", *SIGN_ARGS])

        assert result.exit_code == 0, result.output
        assert any(line.startswith("abc123:1000:") for line in result.output.splitlines())


class TestMetricsCommand:
    """Test the metrics command."""

    def test_metrics_exposed(self, runner):
        runner.invoke(cli, ["sign", *SIGN_ARGS])
        result = runner.invoke(cli, ["metrics"])

        assert result.exit_code == 0
        assert "hmacsign_signatures_total" in result.output


class TestPayloadFileBytes:
    """The payload file is signed exactly as stored."""

    def test_crlf_preserved(self, runner, tmp_path):
        body = tmp_path / "body.txt"
        body.write_bytes(b"line1\r\nline2")

        result = runner.invoke(
            cli,
            ["sign", "-k", "abc123", "-s", "s3cr3t", "-m", "POST", "--payload-file", str(body), "-t", "1"],
        )

        assert result.exit_code == 0, result.output
        expected = reference_signature("abc123", "s3cr3t", "POST", "line1\r\nline2", 1)
        assert result.output.strip() == expected
        assert expected != reference_signature("abc123", "s3cr3t", "POST", "line1\nline2", 1)

    def test_invalid_utf8_rejected(self, runner, tmp_path):
        body = tmp_path / "body.bin"
        body.write_bytes(b"\xff\xfe")

        result = runner.invoke(
            cli,
            ["sign", "-k", "abc123", "-s", "s3cr3t", "-m", "POST", "--payload-file", str(body), "-t", "1"],
        )

        assert result.exit_code == 2
        assert "UTF-8" in result.output


class TestConfigTypes:
    """Config values of the wrong type are reported as invalid input."""

    def test_numeric_key(self, runner, tmp_path):
        config = tmp_path / "c.json"
        config.write_text(json.dumps({"key": 12345, "secret": "s"}))

        result = runner.invoke(cli, ["--config", str(config), "sign", "-m", "POST", "-p", "x", "-t", "1"])

        assert result.exit_code == 2
        assert "Key" in result.output
        assert "must be a string" in result.output


class TestCanonicalWithoutSecret:
    """The canonical string does not depend on the secret."""

    def test_secret_optional(self, runner):
        result = runner.invoke(cli, ["canonical", "-k", "abc123", "-m", "GET", "-p", "x", "-t", "1000"])

        assert result.exit_code == 0, result.output
        assert "abc123:1000" in result.output.splitlines()

    def test_key_still_required(self, runner):
        result = runner.invoke(cli, ["canonical", "-m", "GET", "-p", "x", "-t", "1000"])

        assert result.exit_code == 2
        assert "Key" in result.output
