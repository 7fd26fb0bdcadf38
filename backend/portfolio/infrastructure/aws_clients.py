from __future__ import annotations

from functools import lru_cache

import boto3
from botocore.config import Config

from ..settings import settings


@lru_cache(maxsize=1)
def botocore_config() -> Config:
    # Conservative timeouts; adaptive retries.
    return Config(
        retries={"max_attempts": 5, "mode": "adaptive"},
        connect_timeout=2,
        read_timeout=10,
    )


@lru_cache(maxsize=1)
def dsql_client():
    return boto3.client("dsql", region_name=settings.aws_region, config=botocore_config())


def generate_dsql_auth_token(*, hostname: str, user: str, expires_in: int = 3600) -> str:
    """
    IAM auth token used as the PostgreSQL password for an Aurora DSQL cluster.

    The ``admin`` role needs the admin variant of the token.
    """
    client = dsql_client()
    if str(user or "").strip() == "admin":
        return client.generate_db_connect_admin_auth_token(
            Hostname=hostname, Region=settings.aws_region, ExpiresIn=expires_in
        )
    return client.generate_db_connect_auth_token(
        Hostname=hostname, Region=settings.aws_region, ExpiresIn=expires_in
    )
