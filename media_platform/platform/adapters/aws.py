import boto3
from botocore.client import Config
from media_platform.core.config import Settings

def boto_config(settings: Settings, **extra) -> Config:
    # every AWS client gets explicit timeouts; the SDK defaults wait for a minute
    return Config(
        connect_timeout=settings.AWS_CONNECT_TIMEOUT_SECONDS,
        read_timeout=settings.AWS_READ_TIMEOUT_SECONDS,
        retries={"max_attempts": 3, "mode": "standard"},
        **extra,
    )

def make_client(service: str, settings: Settings, *, endpoint_url: str | None = None, **config):
    session = boto3.session.Session(region_name=settings.AWS_REGION)
    return session.client(service, endpoint_url=endpoint_url, config=boto_config(settings, **config))
