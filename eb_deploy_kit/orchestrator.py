from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

import click

from .config import CHECK_CRITICAL, CHECK_WARNING, DeployConfig, StatusLogger
from .logging_utils import get_logger
from .params import DeployParams
from . import (
    aws_session,
    aws_s3,
    aws_beanstalk,
)


logger = get_logger(__name__)

# plan 출력 등에서 사용하는 단계 이름 (실행 순서)
ALL_STEPS: List[str] = [
    "validate",
    "bucket",
    "upload",
    "app_version",
    "environment",
]

DeployCallback = Callable[[Dict[str, Any]], Any]


class Deployer:
    """
    설정/파생 파라미터/API 클라이언트를 인스턴스 필드로 가지는 배포 핸들.

    s3_client / eb_client 를 넘기면 그대로 사용하고,
    넘기지 않으면 설정(profile, access key, HTTPS_PROXY)에 맞춰 새로 만든다.
    """

    def __init__(
        self,
        cfg: DeployConfig,
        *,
        s3_client: Any = None,
        eb_client: Any = None,
    ) -> None:
        self.cfg = cfg
        self.params = DeployParams.from_config(cfg)
        # 상태 메시지는 기본으로 stdout 에 바로 쓴다. (logging 설정 여부와 무관)
        self.log: StatusLogger = cfg.logger or click.echo

        if s3_client is None or eb_client is None:
            session = aws_session.build_session(cfg)
            if s3_client is None:
                s3_client = aws_session.make_client(session, "s3")
            if eb_client is None:
                eb_client = aws_session.make_client(session, "elasticbeanstalk")
        self.s3 = s3_client
        self.eb = eb_client

        logger.debug("params: %s", json.dumps(self.params.as_dict(), default=str))

    def validate(self) -> None:
        """네트워크 호출 전에 설정 오류를 걸러낸다."""
        if not self.params.environment_name:
            raise ValueError('Missing "env_name" config')
        error = self.cfg.platform_error()
        if error:
            raise ValueError(error)

    def run_steps(self) -> Dict[str, Any]:
        self.validate()
        aws_s3.ensure_bucket(self.s3, self.params, log=self.log)
        aws_s3.upload_package(self.s3, self.params, self.cfg.code_package, log=self.log)
        aws_beanstalk.ensure_application_version(self.eb, self.params, log=self.log)
        return aws_beanstalk.create_or_update_environment(self.eb, self.params, log=self.log)

    def deploy(self, callback: Optional[DeployCallback] = None) -> Dict[str, Any]:
        """
        전체 배포를 순서대로 실행한다.

        성공하면 마지막 환경 생성/업데이트 응답을 callback 에 넘기고 그대로 리턴한다.
        어느 단계든 실패하면 로그(traceback 포함)를 남긴 뒤 예외를 다시 던진다.
        """
        try:
            result = self.run_steps()
        except Exception as e:
            self.log(f"Deploy failed: {e}")
            logger.exception("배포 실패: %s/%s", self.params.application_name, self.params.environment_name)
            raise

        if callback is not None:
            callback(result)
        return result


def init(
    cfg: DeployConfig,
    *,
    s3_client: Any = None,
    eb_client: Any = None,
) -> Deployer:
    """
    설정을 검증/정규화하고 Deployer 를 만든다. 네트워크 호출은 하지 않는다.
    """
    return Deployer(cfg, s3_client=s3_client, eb_client=eb_client)


def plan_all(cfg: DeployConfig) -> str:
    """
    현재 설정에서 파생된 파라미터와 실행될 단계를 요약 텍스트로 리턴한다.
    실제 AWS 호출은 하지 않는다.
    """
    params = DeployParams.from_config(cfg)

    lines: List[str] = []
    lines.append("# Deploy plan")
    lines.append(f"- application: {params.application_name}")
    lines.append(f"- environment: {params.environment_name or '(not set)'}")
    lines.append(f"- region: {cfg.region or '(default)'}")
    lines.append("")

    lines.append("## Config summary")
    lines.append(f"- code_package: {cfg.code_package}")
    lines.append(f"- version_label: {params.version_label}")
    lines.append(f"- s3_object: s3://{params.s3_bucket}/{params.s3_key}")
    lines.append(f"- solution_stack: {params.solution_stack_name or '(not set)'}")
    lines.append(f"- template: {params.template_name or '(not set)'}")
    lines.append(f"- tier: {params.tier['Name']} ({params.tier['Type']})")
    lines.append(f"- tags: {len(params.tags or [])}")
    lines.append(f"- option_settings: {len(params.option_settings or [])}")
    lines.append(f"- https_proxy: {aws_session.https_proxy() or '(not set)'}")

    errors = [e for e in (
        None if params.environment_name else 'Missing "env_name" config',
        cfg.platform_error(),
    ) if e]
    if errors:
        lines.append("")
        for e in errors:
            lines.append(f"[ERROR] {e}")

    lines.append("")
    lines.append("## Steps")
    for i, name in enumerate(ALL_STEPS, start=1):
        lines.append(f"{i}. {name}")

    return "\n".join(lines)


def check_all(
    cfg: DeployConfig,
    *,
    s3_client: Any = None,
    eb_client: Any = None,
) -> tuple[str, bool]:
    """
    실제 리소스 생성 없이, 현재 설정과 AWS 리소스 상태를 점검한다.

    Returns:
        summary: 사람이 읽기 좋은 텍스트 요약
        has_issues: 배포가 실패할 것이 확실한 이슈가 있는지 여부
    """
    deployer = init(cfg, s3_client=s3_client, eb_client=eb_client)
    params = deployer.params

    lines: List[str] = []
    critical: List[str] = []
    warnings: List[str] = []

    def record(kind: str, text: str) -> None:
        lines.append(f"- {text}")
        if kind == CHECK_CRITICAL:
            critical.append(text)
        elif kind == CHECK_WARNING:
            warnings.append(text)

    lines.append("# Deploy pre-check")
    lines.append(f"- application: {params.application_name}")
    lines.append(f"- environment: {params.environment_name or '(not set)'}")
    lines.append("")

    # 1) 설정 및 로컬 패키지
    lines.append("## Config")
    try:
        deployer.validate()
        lines.append("- 설정 OK")
    except ValueError as e:
        record(CHECK_CRITICAL, str(e))
    record(*aws_s3.check_package(cfg.code_package))
    lines.append("")

    # 2) S3
    lines.append("## S3")
    record(*aws_s3.check_bucket(deployer.s3, params))
    lines.append("")

    # 3) Elastic Beanstalk
    lines.append("## Elastic Beanstalk")
    record(*aws_beanstalk.check_application_version(deployer.eb, params))
    if params.environment_name:
        record(*aws_beanstalk.check_environment(deployer.eb, params))
    lines.append("")

    lines.append("## Summary")
    if critical:
        lines.append("- 상태: 크리티컬 이슈가 있습니다. 배포 전 반드시 해결해야 합니다.")
        lines.append("")
        lines.append("### Critical issues")
        for i in critical:
            lines.append(f"- {i}")
    elif warnings:
        lines.append("- 상태: 경고만 있습니다. 배포 시 일부 리소스가 새로 생성됩니다.")
    else:
        lines.append("- 상태: 주요 이슈 없음 (배포 가능 상태로 보입니다)")

    if warnings:
        lines.append("")
        lines.append("### Warnings (리소스가 새로 생성될 예정)")
        for i in warnings:
            lines.append(f"- {i}")

    return "\n".join(lines), bool(critical)
