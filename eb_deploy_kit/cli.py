import sys
from dataclasses import replace
from typing import Any, Dict, Optional

import click

from .config import load_env_files, DeployConfig
from .logging_utils import setup_logging, get_logger
from .orchestrator import check_all, init, plan_all


logger = get_logger(__name__)


@click.group()
@click.option(
    "-C",
    "--chdir",
    "chdir",
    type=click.Path(file_okay=False, dir_okay=True, exists=True),
    default=".",
    help="작업 디렉토리 (.env 파일 위치, 기본: 현재 디렉토리)",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="로그 레벨을 DEBUG로 올립니다. (-vv 는 botocore 로그까지 출력)",
)
@click.pass_context
def main(ctx: click.Context, chdir: str, verbose: int) -> None:
    """AWS Elastic Beanstalk 배포용 CLI"""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["chdir"] = chdir
    ctx.obj["verbose"] = verbose


def _load_config_from_ctx(ctx: click.Context) -> DeployConfig:
    base_dir: str = ctx.obj["chdir"]
    load_env_files(base_dir)
    cfg = DeployConfig.from_env()
    logger.debug("Config loaded: %s", replace(cfg, secret_access_key="***" if cfg.secret_access_key else None))
    return cfg


def _deploy_summary(cfg: DeployConfig, result: Dict[str, Any]) -> str:
    lines: list[str] = []
    lines.append("# Deploy summary")
    lines.append(f"- application: {cfg.app_name}")
    lines.append(f"- environment: {result.get('EnvironmentName', cfg.env_name)}")
    lines.append(f"- version_label: {result.get('VersionLabel', cfg.version)}")
    lines.append(f"- status: {result.get('Status', '(unknown)')}")
    if result.get("CNAME"):
        lines.append(f"- cname: {result['CNAME']}")
    return "\n".join(lines)


@main.command()
@click.pass_context
def plan(ctx: click.Context) -> None:
    """현재 설정으로 만들어질 배포 파라미터와 단계를 출력 (AWS 호출 없음)"""
    try:
        cfg = _load_config_from_ctx(ctx)
        report = plan_all(cfg)
    except Exception as e:  # noqa: BLE001
        click.echo(f"[ERROR] 설정 로드 실패: {e}", err=True)
        sys.exit(1)

    click.echo(report)


@main.command(name="deploy")
@click.option(
    "--version",
    "version",
    type=str,
    default=None,
    help="애플리케이션 버전 라벨. 기본 동작은 EB_VERSION (없으면 1.0.0) 을 사용합니다.",
)
@click.pass_context
def deploy(ctx: click.Context, version: Optional[str]) -> None:
    """패키지를 업로드하고 Elastic Beanstalk 환경을 생성/업데이트"""
    try:
        cfg = _load_config_from_ctx(ctx)
        if version:
            cfg = replace(cfg, version=version)
        deployer = init(cfg)
    except Exception as e:  # noqa: BLE001
        click.echo(f"[ERROR] 설정 로드 실패: {e}", err=True)
        sys.exit(1)

    try:
        result = deployer.deploy()
    except Exception as e:  # noqa: BLE001
        # traceback 은 deploy() 에서 이미 로깅된다.
        click.echo(f"[ERROR] 배포 실패: {e}", err=True)
        sys.exit(1)

    click.echo(_deploy_summary(cfg, result))


@main.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """
    배포 전에 S3 버킷 / 애플리케이션 버전 / 환경 상태를 점검한다.
    (실제 리소스 생성/변경은 하지 않는다)
    """
    try:
        cfg = _load_config_from_ctx(ctx)
    except Exception as e:  # noqa: BLE001
        click.echo(f"[ERROR] 설정 로드 실패: {e}", err=True)
        sys.exit(1)

    try:
        report, has_issues = check_all(cfg)
    except Exception as e:  # noqa: BLE001
        logger.exception("사전 체크 중 오류 발생")
        click.echo(f"[ERROR] 체크 실패: {e}", err=True)
        sys.exit(1)

    click.echo(report)

    # 크리티컬 이슈가 있으면 exit 1 로 종료하여 CI 등에서 감지 가능하게 한다.
    if has_issues:
        sys.exit(1)
