"""AWS session helpers.

A *session factory* turns the resolved region into a ``boto3`` session. The
loader carries one per instance so tests and advanced credential setups can
swap it without touching process-wide state.
"""

from __future__ import annotations

from collections.abc import Callable

import boto3

from ecsconf.kernel.logging import get_logger

logger = get_logger(__name__)

SessionFactory = Callable[[str], boto3.session.Session]

DEFAULT_ROLE_SESSION_NAME = "ecsconf"


def default_session_factory(region: str) -> boto3.session.Session:
    """Build a session from the standard credential provider chain.

    The resolved region is the only explicit option; an empty region lets
    botocore fall back to its own configuration files.
    """
    return boto3.session.Session(region_name=region or None)


def assume_role_session(
    session: boto3.session.Session,
    role_arn: str,
    session_name: str = DEFAULT_ROLE_SESSION_NAME,
) -> boto3.session.Session:
    """Return a new session using STS assume-role credentials.

    This performs one blocking STS round-trip without retry or timeout of
    its own.
    """
    logger.info("assume role: {arn}", arn=role_arn)
    sts = session.client("sts")
    credentials = sts.assume_role(RoleArn=role_arn, RoleSessionName=session_name)["Credentials"]
    return boto3.session.Session(
        aws_access_key_id=credentials["AccessKeyId"],
        aws_secret_access_key=credentials["SecretAccessKey"],
        aws_session_token=credentials["SessionToken"],
        region_name=session.region_name,
    )
