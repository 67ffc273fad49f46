import boto3
from typing import List, Optional
from urllib.parse import quote
from botocore.exceptions import ClientError
from image_gallery.settings import Settings, settings as default_settings
import logging

log = logging.getLogger(__name__)

# -------------------------
# S3 Service
# -------------------------
class S3Service:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.bucket = self.settings.s3_bucket

        session = boto3.session.Session(region_name=self.settings.aws_region)
        kwargs = {
            "aws_access_key_id": self.settings.aws_access_key_id,
            "aws_secret_access_key": self.settings.aws_secret_access_key,
        }
        if self.settings.aws_endpoint_url:
            kwargs["endpoint_url"] = self.settings.aws_endpoint_url

        self.client = session.client("s3", **kwargs)
        log.info("Initialized S3 client for bucket %s", self.bucket)

        if self.settings.create_resources:
            self.ensure_bucket()

    def ensure_bucket(self):
        try:
            self.client.head_bucket(Bucket=self.bucket)
            log.debug("Bucket %s already exists", self.bucket)
        except ClientError as e:
            error_code = str(e.response["Error"]["Code"])
            if error_code not in ("404", "NoSuchBucket"):
                log.error("Failed to check bucket: %s", e)
                raise
            create_kwargs = {"Bucket": self.bucket}
            if self.settings.aws_region != "us-east-1":
                create_kwargs["CreateBucketConfiguration"] = {
                    "LocationConstraint": self.settings.aws_region
                }
            self.client.create_bucket(**create_kwargs)
            log.info("Created bucket %s", self.bucket)

    def upload(self, fileobj, key: str, content_type: str):
        extra_args = {"ContentType": content_type}
        if self.settings.s3_object_acl:
            extra_args["ACL"] = self.settings.s3_object_acl
        self.client.upload_fileobj(
            Fileobj=fileobj,
            Bucket=self.bucket,
            Key=key,
            ExtraArgs=extra_args,
        )
        log.debug("Uploaded s3://%s/%s", self.bucket, key)

    def list_keys(self) -> List[str]:
        # Single page only; buckets past the listing limit are truncated
        resp = self.client.list_objects_v2(Bucket=self.bucket)
        if resp.get("IsTruncated"):
            log.warning("Listing of bucket %s is truncated", self.bucket)
        return [obj["Key"] for obj in resp.get("Contents", [])]

    def object_url(self, key: str) -> str:
        quoted = quote(key)
        if self.settings.public_base_url:
            return f"{self.settings.public_base_url.rstrip('/')}/{self.bucket}/{quoted}"
        return f"https://{self.bucket}.s3.amazonaws.com/{quoted}"

    def close(self):
        log.info("Closed S3 client")
