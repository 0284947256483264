"""
aws_beanstalk
-------------

Elastic Beanstalk 애플리케이션 버전 등록과 환경 생성/업데이트를 담당하는 모듈.

환경 상태는 조회만 한다. Ready 가 아니면 기다리거나 재시도하지 않고 바로 실패한다.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import click
from botocore.exceptions import BotoCoreError, ClientError

from .config import CHECK_CRITICAL, CHECK_OK, CHECK_WARNING, StatusLogger
from .logging_utils import get_logger
from .params import DeployParams


logger = get_logger(__name__)

READY = "Ready"

_CREDENTIALS_HINT = "Check your AWS credentials and permissions."
_PASS_ROLE_HINT = "Check your iam:PassRole permissions."


def find_application_version(
    eb: Any, params: DeployParams, *, log: StatusLogger = click.echo
) -> Optional[Dict[str, Any]]:
    log(
        f'Checking for application "{params.application_name}" '
        f'version "{params.version_label}"...'
    )
    try:
        data = eb.describe_application_versions(
            ApplicationName=params.application_name,
            VersionLabels=[params.version_label],
        )
    except (ClientError, BotoCoreError) as e:
        log(f"ElasticBeanstalk.describe_application_versions request failed. {_CREDENTIALS_HINT}")
        raise RuntimeError(f"애플리케이션 버전 조회 실패: {e}") from e

    versions = data.get("ApplicationVersions") or []
    return versions[0] if versions else None


def create_application_version(
    eb: Any, params: DeployParams, *, log: StatusLogger = click.echo
) -> Dict[str, Any]:
    log(
        f'Creating application "{params.application_name}" '
        f'version "{params.version_label}"...'
    )
    try:
        return eb.create_application_version(**params.application_version_request())
    except (ClientError, BotoCoreError) as e:
        log(f"Create application version failed. {_PASS_ROLE_HINT}")
        raise RuntimeError(f"애플리케이션 버전 생성 실패: {e}") from e


def ensure_application_version(
    eb: Any, params: DeployParams, *, log: StatusLogger = click.echo
) -> Optional[Dict[str, Any]]:
    """
    버전이 없을 때만 생성한다. 이미 있으면 건너뛰고 None 을 리턴한다.
    """
    if find_application_version(eb, params, log=log) is not None:
        log(f'Application version "{params.version_label}" already exists, skipping.')
        return None
    return create_application_version(eb, params, log=log)


def find_environment(
    eb: Any, params: DeployParams, *, log: StatusLogger = click.echo
) -> Optional[Dict[str, Any]]:
    log(f'Checking for environment "{params.environment_name}"...')
    try:
        data = eb.describe_environments(
            ApplicationName=params.application_name,
            EnvironmentNames=[params.environment_name],
            IncludeDeleted=False,
        )
    except (ClientError, BotoCoreError) as e:
        log(f"ElasticBeanstalk.describe_environments request failed. {_CREDENTIALS_HINT}")
        raise RuntimeError(f"환경 조회 실패: {e}") from e

    environments = data.get("Environments") or []
    return environments[0] if environments else None


def create_environment(
    eb: Any, params: DeployParams, *, log: StatusLogger = click.echo
) -> Dict[str, Any]:
    log(f'Creating environment "{params.environment_name}"...')
    try:
        data = eb.create_environment(**params.create_environment_request())
    except (ClientError, BotoCoreError) as e:
        log(f"Create environment failed. {_PASS_ROLE_HINT}")
        raise RuntimeError(f"환경 생성 실패: {e}") from e
    log(f'Environment "{params.environment_name}" created and is now being launched.')
    return data


def update_environment(
    eb: Any, params: DeployParams, *, log: StatusLogger = click.echo
) -> Dict[str, Any]:
    log(f'Updating environment "{params.environment_name}"...')
    try:
        data = eb.update_environment(**params.update_environment_request())
    except (ClientError, BotoCoreError) as e:
        log(f"Update environment failed. {_PASS_ROLE_HINT}")
        raise RuntimeError(f"환경 업데이트 실패: {e}") from e
    log(f'Environment "{params.environment_name}" updated and is now being launched.')
    return data


def not_ready_message(status: str) -> str:
    return (
        f'Environment is currently not in "{READY}" status (currently "{status}"). '
        "Please resolve/wait and try again."
    )


def create_or_update_environment(
    eb: Any, params: DeployParams, *, log: StatusLogger = click.echo
) -> Dict[str, Any]:
    """
    환경이 없으면 생성, Ready 면 업데이트, 그 외 상태면 RuntimeError.
    """
    env = find_environment(eb, params, log=log)
    if env is None:
        return create_environment(eb, params, log=log)

    status = env.get("Status")
    if status != READY:
        message = not_ready_message(str(status))
        log(message)
        raise RuntimeError(message)

    return update_environment(eb, params, log=log)


def check_application_version(eb: Any, params: DeployParams) -> Tuple[str, str]:
    """(분류, 설명) 을 리턴한다. 분류는 config.CHECK_* 중 하나."""
    label = params.version_label
    try:
        data = eb.describe_application_versions(
            ApplicationName=params.application_name,
            VersionLabels=[label],
        )
    except (ClientError, BotoCoreError) as e:
        return CHECK_CRITICAL, f"Application version: 조회 실패 ({label}): {e}"
    if data.get("ApplicationVersions"):
        return CHECK_OK, f"Application version: 이미 존재함, 등록을 건너뜀 ({label})"
    return CHECK_WARNING, f"Application version: 없음 (새로 등록됨) ({label})"


def check_environment(eb: Any, params: DeployParams) -> Tuple[str, str]:
    name = params.environment_name
    try:
        data = eb.describe_environments(
            ApplicationName=params.application_name,
            EnvironmentNames=[name],
            IncludeDeleted=False,
        )
    except (ClientError, BotoCoreError) as e:
        return CHECK_CRITICAL, f"Environment: 조회 실패 ({name}): {e}"
    environments = data.get("Environments") or []
    if not environments:
        return CHECK_WARNING, f"Environment: 없음 (새로 생성됨) ({name})"
    status = environments[0].get("Status")
    if status == READY:
        return CHECK_OK, f"Environment: {READY} (업데이트 예정) ({name})"
    # Ready 가 아닌 환경은 이번 배포에서 업데이트할 수 없다.
    return CHECK_CRITICAL, f"Environment: {READY} 아님 (현재 {status}) ({name})"
