"""
params
------

DeployConfig 로부터 S3 / Elastic Beanstalk API 요청 형태의 파라미터를 만든다.
init 시점에 한 번 계산되고, 배포 중에는 읽기 전용으로만 사용한다.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from .config import DEFAULT_VERSION, DeployConfig, TIERS


def _pick(src: Dict[str, Any], keys: Iterable[str]) -> Dict[str, Any]:
    """keys 에 해당하는 항목만 골라내고, 값이 None 인 항목은 버린다."""
    return {k: src[k] for k in keys if src.get(k) is not None}


def _tier(name: str) -> Dict[str, str]:
    return {
        "Name": name,
        "Type": "SQS/HTTP" if name == "Worker" else "Standard",
        "Version": "1.0",
    }


@dataclass(frozen=True)
class DeployParams:
    application_name: str
    environment_name: Optional[str]
    description: Optional[str]
    version_label: str
    s3_bucket: str
    s3_key: str
    solution_stack_name: Optional[str]
    template_name: Optional[str]
    tier: Dict[str, str]
    tags: Optional[List[Dict[str, str]]]
    option_settings: Optional[List[Dict[str, Any]]]
    auto_create_application: bool = True

    @classmethod
    def from_config(cls, cfg: DeployConfig) -> "DeployParams":
        missing = [
            name
            for name, value in (("code_package", cfg.code_package), ("app_name", cfg.app_name))
            if not value
        ]
        if missing:
            raise ValueError("필수 설정이 누락되었습니다: " + ", ".join(missing))

        if cfg.tier not in TIERS:
            raise ValueError(
                f"tier 값이 잘못되었습니다: {cfg.tier!r} (WebServer | Worker 중 하나)"
            )

        version = cfg.version if cfg.version is not None else DEFAULT_VERSION
        package_name = os.path.basename(cfg.code_package)

        tags = None
        if cfg.environment_tags is not None:
            tags = [{"Key": k, "Value": v} for k, v in cfg.environment_tags.items()]

        return cls(
            application_name=cfg.app_name,
            environment_name=cfg.env_name,
            description=cfg.description,
            version_label=version,
            s3_bucket=(cfg.s3_bucket or cfg.app_name).lower(),
            s3_key=f"{version}-{package_name}",
            solution_stack_name=cfg.solution_stack,
            template_name=cfg.template,
            tier=_tier(cfg.tier),
            tags=tags,
            option_settings=cfg.environment_settings,
        )

    def as_dict(self) -> Dict[str, Any]:
        """API 필드 이름 기준의 전체 파라미터 (plan/디버그 출력용)."""
        return {
            "ApplicationName": self.application_name,
            "EnvironmentName": self.environment_name,
            "Description": self.description,
            "VersionLabel": self.version_label,
            "SourceBundle": self.source_bundle(),
            "AutoCreateApplication": self.auto_create_application,
            "SolutionStackName": self.solution_stack_name,
            "TemplateName": self.template_name,
            "Tier": self.tier,
            "Tags": self.tags,
            "OptionSettings": self.option_settings,
        }

    def source_bundle(self) -> Dict[str, str]:
        return {"S3Bucket": self.s3_bucket, "S3Key": self.s3_key}

    def application_version_request(self) -> Dict[str, Any]:
        return _pick(
            self.as_dict(),
            ["ApplicationName", "Description", "AutoCreateApplication", "VersionLabel", "SourceBundle"],
        )

    def create_environment_request(self) -> Dict[str, Any]:
        return _pick(
            self.as_dict(),
            [
                "ApplicationName",
                "EnvironmentName",
                "Description",
                "OptionSettings",
                "SolutionStackName",
                "TemplateName",
                "VersionLabel",
                "Tier",
                "Tags",
            ],
        )

    def update_environment_request(self) -> Dict[str, Any]:
        return _pick(
            self.as_dict(),
            [
                "EnvironmentName",
                "Description",
                "OptionSettings",
                "SolutionStackName",
                "TemplateName",
                "VersionLabel",
            ],
        )
