from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from dotenv import load_dotenv


ENV_FILES_DEFAULT_ORDER = [".env", ".env.deploy", ".env.secrets"]

DEFAULT_VERSION = "1.0.0"
TIERS = ("WebServer", "Worker")

StatusLogger = Callable[[str], None]

# check 결과 분류
CHECK_OK = "ok"
CHECK_WARNING = "warning"  # 배포 시 새로 생성됨
CHECK_CRITICAL = "critical"


def load_env_files(base_dir: str = ".",
                   files: Optional[List[str]] = None) -> None:
    """
    주어진 디렉토리에서 .env 계열 파일을 순서대로 로드한다.
    후순위 파일이 같은 키를 덮어쓴다.
    """
    order = files or ENV_FILES_DEFAULT_ORDER
    for name in order:
        path = os.path.join(base_dir, name)
        if os.path.exists(path):
            load_dotenv(path, override=True)


def _parse_tags(raw: Optional[str]) -> Optional[Dict[str, str]]:
    """`Key=Value,Key2=Value2` 형식을 dict 로 변환한다."""
    if raw is None or not raw.strip():
        return None
    tags: Dict[str, str] = {}
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if "=" not in part:
            raise ValueError(
                f"EB_ENVIRONMENT_TAGS 형식이 잘못되었습니다 (Key=Value 필요): {part!r}"
            )
        key, value = part.split("=", 1)
        tags[key.strip()] = value.strip()
    return tags


def _parse_settings(raw: Optional[str]) -> Optional[List[Dict[str, Any]]]:
    """
    EB_ENVIRONMENT_SETTINGS 는 Elastic Beanstalk OptionSettings 형태의 JSON 리스트.
    예: [{"Namespace": "aws:autoscaling:launchconfiguration",
          "OptionName": "InstanceType", "Value": "t3.small"}]
    """
    if raw is None or not raw.strip():
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"EB_ENVIRONMENT_SETTINGS 가 올바른 JSON 이 아닙니다: {e}") from e
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise ValueError("EB_ENVIRONMENT_SETTINGS 는 객체(JSON object) 리스트여야 합니다.")
    return value


@dataclass
class DeployConfig:
    # 필수
    app_name: str
    code_package: str

    env_name: Optional[str] = None
    description: Optional[str] = None
    version: Optional[str] = DEFAULT_VERSION

    # 업로드 대상 버킷 (기본: app_name 소문자)
    s3_bucket: Optional[str] = None

    # solution_stack / template 중 정확히 하나
    solution_stack: Optional[str] = None
    template: Optional[str] = None

    tier: str = "WebServer"
    environment_tags: Optional[Mapping[str, str]] = None
    environment_settings: Optional[List[Dict[str, Any]]] = None

    # AWS 자격증명
    region: Optional[str] = None
    profile: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None

    # 단계별 상태 메시지를 받을 콜백 (기본: logging)
    logger: Optional[StatusLogger] = None

    def __post_init__(self) -> None:
        if self.version is None:
            self.version = DEFAULT_VERSION
        if not self.tier:
            self.tier = "WebServer"

    def platform_error(self) -> Optional[str]:
        """
        solution_stack / template 조합이 잘못된 경우 에러 메시지를, 정상이면 None 을 리턴한다.
        """
        if not self.solution_stack and not self.template:
            return 'Missing either "solution_stack" or "template" config'
        if self.solution_stack and self.template:
            return (
                'Provided both "solution_stack" and "template" config; '
                "only one or the other supported"
            )
        return None

    @classmethod
    def from_env(cls) -> "DeployConfig":
        # 필수값
        missing: List[str] = []
        def req(name: str) -> str:
            val = os.getenv(name)
            if not val:
                missing.append(name)
            return val or ""

        app_name = req("EB_APP_NAME")
        code_package = req("EB_CODE_PACKAGE")

        if missing:
            raise ValueError(
                "필수 환경변수가 누락되었습니다: " + ", ".join(sorted(set(missing)))
            )

        cfg = cls(
            app_name=app_name,
            code_package=code_package,
            env_name=os.getenv("EB_ENV_NAME"),
            description=os.getenv("EB_DESCRIPTION"),
            version=os.getenv("EB_VERSION") or DEFAULT_VERSION,
            s3_bucket=os.getenv("EB_S3_BUCKET"),
            solution_stack=os.getenv("EB_SOLUTION_STACK"),
            template=os.getenv("EB_TEMPLATE"),
            tier=os.getenv("EB_TIER") or "WebServer",
            environment_tags=_parse_tags(os.getenv("EB_ENVIRONMENT_TAGS")),
            environment_settings=_parse_settings(os.getenv("EB_ENVIRONMENT_SETTINGS")),
            region=os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION"),
            profile=os.getenv("AWS_PROFILE"),
            access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
            secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        )

        if cfg.tier not in TIERS:
            raise ValueError(
                f"EB_TIER 값이 잘못되었습니다: {cfg.tier!r} (WebServer | Worker 중 하나)"
            )

        return cfg
