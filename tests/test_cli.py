from __future__ import annotations

from typing import Any, Dict, List

import pytest
from click.testing import CliRunner

from eb_deploy_kit import cli
from eb_deploy_kit.config import DeployConfig


ENV = {
    "EB_APP_NAME": "foo",
    "EB_ENV_NAME": "foo-env",
    "EB_CODE_PACKAGE": "./build/foo.zip",
    "EB_SOLUTION_STACK": "64bit Amazon Linux 2023 v6.1.0 running Node.js 20",
    "EB_VERSION": "2.0.0",
}


class _FakeDeployer:
    def __init__(self, cfg: DeployConfig, error: Exception | None = None) -> None:
        self.cfg = cfg
        self.error = error

    def deploy(self) -> Dict[str, Any]:
        if self.error is not None:
            raise self.error
        return {
            "EnvironmentName": self.cfg.env_name,
            "VersionLabel": self.cfg.version,
            "Status": "Launching",
            "CNAME": "foo-env.eu-west-1.elasticbeanstalk.com",
        }


def _invoke(tmp_path, *args: str):
    runner = CliRunner()
    return runner.invoke(cli.main, ["-C", str(tmp_path), *args], env=ENV)


def test_deploy_prints_summary(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    seen: List[DeployConfig] = []

    def fake_init(cfg: DeployConfig) -> _FakeDeployer:
        seen.append(cfg)
        return _FakeDeployer(cfg)

    monkeypatch.setattr(cli, "init", fake_init)

    result = _invoke(tmp_path, "deploy", "--version", "3.1.0")

    assert result.exit_code == 0, result.output
    assert seen[0].version == "3.1.0"
    assert "Deploy summary" in result.output
    assert "- version_label: 3.1.0" in result.output
    assert "foo-env.eu-west-1.elasticbeanstalk.com" in result.output


def test_deploy_failure_exits_1(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        cli,
        "init",
        lambda cfg: _FakeDeployer(cfg, RuntimeError('currently "Updating"')),
    )

    result = _invoke(tmp_path, "deploy")

    assert result.exit_code == 1
    assert "Updating" in result.output


def test_plan_shows_derived_object(tmp_path) -> None:
    result = _invoke(tmp_path, "plan")

    assert result.exit_code == 0, result.output
    assert "s3://foo/2.0.0-foo.zip" in result.output


def test_check_exits_1_on_critical_issue(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "check_all", lambda cfg: ("# Deploy pre-check\n- boom", True))

    result = _invoke(tmp_path, "check")

    assert result.exit_code == 1
    assert "# Deploy pre-check" in result.output


def test_plan_never_prints_credentials(tmp_path) -> None:
    (tmp_path / ".env.deploy").write_text(
        "AWS_ACCESS_KEY_ID=AKIAEXAMPLE\nAWS_SECRET_ACCESS_KEY=topsecret\n", encoding="utf-8"
    )
    runner = CliRunner()
    # load_dotenv 가 os.environ 에 쓰므로 invoke 가 끝나면 복원되도록 env 로 키를 미리 지정한다.
    env = dict(ENV, AWS_ACCESS_KEY_ID="placeholder", AWS_SECRET_ACCESS_KEY="placeholder")

    result = runner.invoke(cli.main, ["-C", str(tmp_path), "plan"], env=env)

    assert result.exit_code == 0, result.output
    assert "topsecret" not in result.output
    assert "AKIAEXAMPLE" not in result.output


def test_plan_has_no_env_dump_option(tmp_path) -> None:
    result = _invoke(tmp_path, "plan", "--all")

    assert result.exit_code != 0
