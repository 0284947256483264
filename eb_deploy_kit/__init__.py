"""
eb_deploy_kit
-------------

AWS Elastic Beanstalk 배포 CLI/라이브러리 패키지.
코드 패키지를 S3 에 올리고, 애플리케이션 버전을 등록한 뒤
환경을 생성하거나 (Ready 상태면) 업데이트하는 과정을 한 번에 수행한다.
"""

__all__ = [
    "config",
    "orchestrator",
]
