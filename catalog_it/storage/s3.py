# catalog-it S3 Storage
# Amazon S3 backend with streamed multipart uploads

import logging
from typing import Any, BinaryIO, Optional

import boto3
from boto3.s3.transfer import TransferConfig
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError

from catalog_it.errors import ConfigurationError

logger = logging.getLogger(__name__)

# S3 rejects multipart parts below 5 MiB except for the last one
MULTIPART_CHUNK_SIZE = 8 * 1024 * 1024

CANNED_ACLS = (
    "private",
    "public-read",
    "public-read-write",
    "authenticated-read",
)


class S3Storage:
    """
    Amazon S3 storage backend for archived datasets.

    Uploads stream from a readable object through s3transfer, which splits
    large payloads into parts and sends up to ``concurrency`` of them at once.
    """

    def __init__(
        self,
        bucket: str,
        *,
        acl: str = "private",
        profile: Optional[str] = None,
        region: Optional[str] = None,
        timeout: float = 300.0,
        client: Any = None,
    ):
        """
        Initialize S3 storage backend.

        Args:
            bucket: S3 bucket name.
            acl: Canned ACL for the bucket and uploaded objects.
            profile: Named AWS credentials profile. Default credential chain if None.
            region: AWS region. Resolved from the profile/environment if None.
            timeout: Connect and read timeout in seconds.
            client: Pre-built S3 client (used instead of creating one).

        Raises:
            ConfigurationError: If no bucket is given or the ACL is unknown.
        """
        if not bucket:
            raise ConfigurationError("No storage bucket provided.")
        if acl not in CANNED_ACLS:
            raise ConfigurationError(f"Unknown access policy '{acl}'. Choose one of: {', '.join(CANNED_ACLS)}")

        self.bucket = bucket
        self.acl = acl
        self.profile = profile
        self.region = region
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> Any:
        """Get the S3 client, creating it on first use."""
        if self._client is None:
            session = boto3.Session(profile_name=self.profile, region_name=self.region)
            self._client = session.client(
                "s3",
                config=BotoConfig(
                    connect_timeout=self.timeout,
                    read_timeout=self.timeout,
                    retries={"max_attempts": 1},
                ),
            )
        return self._client

    def prepare(self) -> None:
        """Create the bucket, tolerating one that already exists and is ours."""
        params: dict[str, Any] = {"Bucket": self.bucket, "ACL": self.acl}
        region = self.region or self.client.meta.region_name
        if region and region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": region}

        try:
            self.client.create_bucket(**params)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code != "BucketAlreadyOwnedByYou":
                raise
            logger.debug("Bucket already exists: %s", self.bucket)
            return
        logger.info("Created bucket: %s", self.bucket)

    def upload(
        self,
        key: str,
        fileobj: BinaryIO,
        *,
        concurrency: int = 1,
        content_encoding: Optional[str] = None,
    ) -> str:
        """Stream an object into the bucket and return its s3:// URI."""
        extra_args = {"ACL": self.acl}
        if content_encoding:
            extra_args["ContentEncoding"] = content_encoding

        config = TransferConfig(
            multipart_threshold=MULTIPART_CHUNK_SIZE,
            multipart_chunksize=MULTIPART_CHUNK_SIZE,
            max_concurrency=concurrency,
            use_threads=concurrency > 1,
        )

        logger.debug("Uploading to s3://%s/%s", self.bucket, key)
        self.client.upload_fileobj(fileobj, self.bucket, key, ExtraArgs=extra_args, Config=config)
        return f"s3://{self.bucket}/{key}"
