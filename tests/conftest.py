"""
pytest 설정:

로컬 작업 환경에 설치된 다른 버전의 eb_deploy_kit 패키지가 존재할 때,
`pytest` 실행 시 site-packages 쪽이 먼저 import 되어 테스트가 깨질 수 있다.

테스트는 항상 현재 레포의 소스를 대상으로 해야 하므로, repo root 를 sys.path 최상단에 고정한다.

여기에 S3 / Elastic Beanstalk 클라이언트 대역(fake)도 둔다.
모든 호출은 공유 리스트 `calls` 에 (메서드 이름, kwargs) 로 기록된다.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest
from botocore.exceptions import ClientError


def pytest_configure() -> None:
    repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


Call = Tuple[str, Dict[str, Any]]


def make_client_error(status: int, code: str, operation: str) -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": f"{code} ({status})"},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


class FakeS3:
    def __init__(self, calls: List[Call], region: str = "us-east-1") -> None:
        self.calls = calls
        self.meta = SimpleNamespace(region_name=region)
        self.bucket_exists = True
        self.head_error: Optional[Exception] = None
        self.put_error: Optional[Exception] = None

    def head_bucket(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("head_bucket", kwargs))
        if self.head_error is not None:
            raise self.head_error
        if not self.bucket_exists:
            raise make_client_error(404, "404", "HeadBucket")
        return {}

    def create_bucket(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("create_bucket", kwargs))
        self.bucket_exists = True
        return {"Location": f"/{kwargs['Bucket']}"}

    def put_object(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("put_object", kwargs))
        if self.put_error is not None:
            raise self.put_error
        return {"ETag": '"etag"'}


class FakeBeanstalk:
    def __init__(self, calls: List[Call]) -> None:
        self.calls = calls
        self.versions: List[Dict[str, Any]] = []
        self.environments: List[Dict[str, Any]] = []
        self.create_environment_error: Optional[Exception] = None

    def describe_application_versions(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("describe_application_versions", kwargs))
        return {"ApplicationVersions": list(self.versions)}

    def create_application_version(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("create_application_version", kwargs))
        return {"ApplicationVersion": {"VersionLabel": kwargs["VersionLabel"]}}

    def describe_environments(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("describe_environments", kwargs))
        return {"Environments": list(self.environments)}

    def create_environment(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("create_environment", kwargs))
        if self.create_environment_error is not None:
            raise self.create_environment_error
        return {
            "EnvironmentName": kwargs["EnvironmentName"],
            "VersionLabel": kwargs.get("VersionLabel"),
            "Status": "Launching",
        }

    def update_environment(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(("update_environment", kwargs))
        return {
            "EnvironmentName": kwargs["EnvironmentName"],
            "VersionLabel": kwargs.get("VersionLabel"),
            "Status": "Updating",
        }


@pytest.fixture
def calls() -> List[Call]:
    return []


@pytest.fixture
def fake_s3(calls: List[Call]) -> FakeS3:
    return FakeS3(calls)


@pytest.fixture
def fake_eb(calls: List[Call]) -> FakeBeanstalk:
    return FakeBeanstalk(calls)


@pytest.fixture
def package(tmp_path: Path) -> str:
    build = tmp_path / "build"
    build.mkdir()
    path = build / "foo.zip"
    path.write_bytes(b"PK\x03\x04fake-zip")
    return str(path)


@pytest.fixture
def client_error() -> Callable[[int, str, str], ClientError]:
    return make_client_error
