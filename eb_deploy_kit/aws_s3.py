"""
aws_s3
------

코드 패키지를 올릴 S3 버킷 확인/생성 및 업로드를 담당하는 모듈.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Tuple

import click
from botocore.exceptions import BotoCoreError, ClientError

from .config import CHECK_CRITICAL, CHECK_OK, CHECK_WARNING, StatusLogger
from .logging_utils import get_logger
from .params import DeployParams


logger = get_logger(__name__)

PACKAGE_CONTENT_TYPE = "binary/octet-stream"

_NOT_FOUND_CODES = {"404", "NoSuchBucket", "NotFound"}


def is_not_found(error: ClientError) -> bool:
    err = error.response.get("Error", {})
    status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return str(err.get("Code")) in _NOT_FOUND_CODES or status == 404


def bucket_exists(s3: Any, bucket: str, *, log: StatusLogger = click.echo) -> bool:
    """
    head_bucket 으로 버킷 존재 여부를 확인한다.
    404 는 '없음'으로 보고 False, 그 외 오류는 그대로 다시 던진다.
    """
    log(f'Checking for S3 bucket "{bucket}"...')
    try:
        s3.head_bucket(Bucket=bucket)
    except ClientError as e:
        if is_not_found(e):
            log(f'S3 bucket "{bucket}" does not exist.')
            return False
        log("S3.head_bucket request failed. Check your AWS credentials and permissions.")
        raise
    log(f'S3 bucket "{bucket}" exists.')
    return True


def create_bucket(s3: Any, bucket: str, *, log: StatusLogger = click.echo) -> Dict[str, Any]:
    log(f'Creating S3 bucket "{bucket}"...')
    kwargs: Dict[str, Any] = {"Bucket": bucket}
    # us-east-1 은 LocationConstraint 를 받지 않는다.
    region = s3.meta.region_name
    if region and region != "us-east-1":
        kwargs["CreateBucketConfiguration"] = {"LocationConstraint": region}
    try:
        return s3.create_bucket(**kwargs)
    except (ClientError, BotoCoreError) as e:
        log(f'Create S3 bucket "{bucket}" failed.')
        raise RuntimeError(f'S3 버킷 생성 실패 ({bucket}): {e}') from e


def ensure_bucket(s3: Any, params: DeployParams, *, log: StatusLogger = click.echo) -> bool:
    """
    버킷이 없으면 생성한다. 새로 생성했으면 True 를 리턴한다.
    """
    if bucket_exists(s3, params.s3_bucket, log=log):
        return False
    create_bucket(s3, params.s3_bucket, log=log)
    return True


def read_package(path: str) -> bytes:
    """코드 패키지 파일 전체를 메모리로 읽는다."""
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise RuntimeError(f'Error reading specified package "{path}"') from e


def upload_package(
    s3: Any,
    params: DeployParams,
    code_package: str,
    *,
    log: StatusLogger = click.echo,
) -> Dict[str, Any]:
    log(f'Uploading code to S3 bucket "{params.s3_bucket}"...')
    body = read_package(code_package)
    logger.debug("패키지 크기: %d bytes (key=%s)", len(body), params.s3_key)
    try:
        return s3.put_object(
            Bucket=params.s3_bucket,
            Key=params.s3_key,
            Body=body,
            ContentType=PACKAGE_CONTENT_TYPE,
        )
    except (ClientError, BotoCoreError) as e:
        log(f'Upload of "{code_package}" to S3 bucket failed.')
        raise RuntimeError(
            f"패키지 업로드 실패: s3://{params.s3_bucket}/{params.s3_key}: {e}"
        ) from e


def check_package(path: str) -> Tuple[str, str]:
    """파일을 읽지 않고 크기만 확인한다."""
    try:
        size = os.path.getsize(path)
    except OSError as e:
        return CHECK_CRITICAL, f'패키지를 읽을 수 없습니다: "{path}" ({e.strerror or e})'
    return CHECK_OK, f"패키지: {path} ({size} bytes)"


def check_bucket(s3: Any, params: DeployParams) -> Tuple[str, str]:
    """
    버킷 존재 여부를 확인만 하고, 생성하지 않는다.
    (분류, 설명) 을 리턴하며 분류는 config.CHECK_* 중 하나.
    """
    bucket = params.s3_bucket
    try:
        s3.head_bucket(Bucket=bucket)
    except ClientError as e:
        if is_not_found(e):
            return CHECK_WARNING, f"S3: 버킷 없음 (생성이 필요함) ({bucket})"
        return CHECK_CRITICAL, f"S3: 버킷 조회 실패 ({bucket}): {e}"
    return CHECK_OK, f"S3: 버킷 존재함 ({bucket})"
