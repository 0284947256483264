"""
aws_session
-----------

boto3 세션 및 S3 / Elastic Beanstalk 클라이언트 생성을 담당하는 모듈.

클라이언트 생성 자체는 네트워크 호출을 하지 않는다.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config

from .config import DeployConfig
from .logging_utils import get_logger


logger = get_logger(__name__)


def https_proxy() -> Optional[str]:
    return os.getenv("HTTPS_PROXY") or os.getenv("https_proxy") or None


def client_config() -> Optional[Config]:
    """
    HTTPS_PROXY 가 설정되어 있으면 모든 API 트래픽을 해당 프록시로 보내는 Config 를 만든다.
    """
    proxy = https_proxy()
    if not proxy:
        return None
    logger.info("HTTPS 프록시를 사용합니다: %s", proxy)
    return Config(proxies={"https": proxy})


def build_session(cfg: DeployConfig) -> boto3.session.Session:
    """
    named profile 또는 명시적 access key 로 boto3 세션을 만든다.
    둘 다 없으면 boto3 기본 자격증명 체인을 따른다.
    """
    kwargs: Dict[str, Any] = {}
    if cfg.region:
        kwargs["region_name"] = cfg.region
    if cfg.profile:
        logger.debug("AWS profile 사용: %s", cfg.profile)
        kwargs["profile_name"] = cfg.profile
    if cfg.access_key_id and cfg.secret_access_key:
        logger.debug("명시적 AWS access key 사용")
        kwargs["aws_access_key_id"] = cfg.access_key_id
        kwargs["aws_secret_access_key"] = cfg.secret_access_key
    return boto3.session.Session(**kwargs)


def make_client(session: boto3.session.Session, service: str) -> Any:
    """
    세션에서 service ("s3" | "elasticbeanstalk") 클라이언트를 만든다. 프록시 설정이 적용된다.
    """
    return session.client(service, config=client_config())
