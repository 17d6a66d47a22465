"""
Tests for the quiz-analysis command line tool.
"""
import json

import pytest

from quiz_analysis import cli
from quiz_analysis.cli import (
    EXIT_ANALYSIS_ERROR,
    EXIT_CONFIG_ERROR,
    EXIT_INPUT_ERROR,
    EXIT_SUCCESS,
    InputError,
    main,
    parse_override_args,
)


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    """Keep main() from reconfiguring logging for the rest of the session."""
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)


@pytest.fixture
def files(tmp_path, engine, quiz, response):
    paths = {
        "engine": tmp_path / "engine.json",
        "quiz": tmp_path / "quiz.json",
        "response": tmp_path / "response.json",
    }
    paths["engine"].write_text(engine.model_dump_json(by_alias=True))
    paths["quiz"].write_text(quiz.model_dump_json(by_alias=True))
    paths["response"].write_text(response.model_dump_json(by_alias=True))
    return paths


def _analyze_args(files, *extra):
    return [
        "analyze",
        "--engine",
        str(files["engine"]),
        "--quiz",
        str(files["quiz"]),
        "--response",
        str(files["response"]),
        *extra,
    ]


class TestParseOverrideArgs:
    def test_json_values(self):
        assert parse_override_args(["beta=2", "disableSecondaryPoints=true", "x=abc"]) == {
            "beta": 2,
            "disableSecondaryPoints": True,
            "x": "abc",
        }

    def test_dashes_become_underscores(self):
        assert parse_override_args(["max-ending-results=3"]) == {"max_ending_results": 3}

    def test_none(self):
        assert parse_override_args(None) == {}

    def test_missing_equals(self):
        with pytest.raises(InputError, match="key=value"):
            parse_override_args(["beta"])


class TestAnalyzeCommand:
    def test_prints_ranked_distribution(self, files, capsys):
        assert main(_analyze_args(files)) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "engine-1 v1.0.0" in out
        assert "Scored 2 of 3 questions" in out
        assert " 71.8%" in out
        assert " 28.2%" in out
        assert out.index("71.8%") < out.index("28.2%")

    def test_json_output(self, files, capsys):
        assert main(_analyze_args(files, "--json")) == EXIT_SUCCESS

        payload = json.loads(capsys.readouterr().out)
        assert payload["engineId"] == "engine-1"
        assert payload["engineVersion"]["semver"] == "1.0.0"
        assert [e["endingId"] for e in payload["endingResults"]] == ["a", "b"]

    def test_overrides(self, files, capsys):
        code = main(_analyze_args(files, "--override", "maxEndingResults=1", "--json"))
        assert code == EXIT_SUCCESS
        payload = json.loads(capsys.readouterr().out)
        assert len(payload["endingResults"]) == 1
        assert payload["metadata"]["config_override"] == {"max_ending_results": 1}

    def test_separation_choice(self, files, capsys):
        assert main(_analyze_args(files, "--separation", "softmax", "--json")) == EXIT_SUCCESS
        assert json.loads(capsys.readouterr().out)["metadata"]["separation"] == "softmax"

    def test_invalid_override_is_config_error(self, files):
        assert main(_analyze_args(files, "--override", "beta=-1")) == EXIT_CONFIG_ERROR

    def test_missing_file_is_input_error(self, files, tmp_path):
        files["quiz"] = tmp_path / "missing.json"
        assert main(_analyze_args(files)) == EXIT_INPUT_ERROR

    def test_invalid_json_is_input_error(self, files):
        files["response"].write_text("{not json")
        assert main(_analyze_args(files)) == EXIT_INPUT_ERROR

    def test_invalid_payload_is_input_error(self, files):
        files["response"].write_text(json.dumps({"id": "r"}))
        assert main(_analyze_args(files)) == EXIT_INPUT_ERROR

    def test_mismatch_is_analysis_error(self, files, make_response):
        stray = make_response({"q1": 5}, quiz_id="quiz-2")
        files["response"].write_text(stray.model_dump_json(by_alias=True))
        assert main(_analyze_args(files)) == EXIT_ANALYSIS_ERROR

    def test_invalid_engine_scoring_config_is_config_error(self, files):
        engine = json.loads(files["engine"].read_text())
        engine["scoringConfig"]["beta"] = 0
        files["engine"].write_text(json.dumps(engine))
        assert main(_analyze_args(files)) == EXIT_CONFIG_ERROR


class TestResolveConfigCommand:
    def test_prints_resolved_config(self, files, capsys):
        code = main(
            ["resolve-config", "--engine", str(files["engine"]), "--override", "beta=2.5"]
        )
        assert code == EXIT_SUCCESS
        payload = json.loads(capsys.readouterr().out)
        assert payload["beta"] == 2.5
        assert payload["primaryPointValue"] == 10.0

    def test_missing_scoring_config_uses_defaults(self, files, capsys):
        engine = json.loads(files["engine"].read_text())
        del engine["scoringConfig"]
        files["engine"].write_text(json.dumps(engine))

        assert main(["resolve-config", "--engine", str(files["engine"])]) == EXIT_SUCCESS
        payload = json.loads(capsys.readouterr().out)
        assert payload["maxEndingResults"] == 10

    def test_requires_a_command(self):
        with pytest.raises(SystemExit):
            main([])
