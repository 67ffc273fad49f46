import boto3
from typing import Optional, Dict, Any, List
from botocore.exceptions import ClientError
from image_gallery.settings import Settings, settings as default_settings
import logging

log = logging.getLogger(__name__)

def dynamodb_resource(settings: Settings):
    """Builds a DynamoDB resource from the AWS settings."""
    session = boto3.session.Session(region_name=settings.aws_region)
    kwargs = {
        "aws_access_key_id": settings.aws_access_key_id,
        "aws_secret_access_key": settings.aws_secret_access_key,
    }
    if settings.aws_endpoint_url:
        kwargs["endpoint_url"] = settings.aws_endpoint_url
    return session.resource("dynamodb", **kwargs)

# Refer here: https://boto3.amazonaws.com/v1/documentation/api/latest/reference/services/dynamodb/client/create_table.html
def ensure_table(resource, table_name: str, hash_key: str):
    """Creates a single-hash-key table unless it already exists."""
    try:
        table = resource.Table(table_name)
        table.load()
    except ClientError as e:
        if e.response["Error"]["Code"] != "ResourceNotFoundException":
            raise
        table = resource.create_table(
            TableName=table_name,
            KeySchema=[{"AttributeName": hash_key, "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": hash_key, "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        table.wait_until_exists()
        log.info("Created table %s", table_name)
    return table

def _to_metadata(item: Dict[str, Any]) -> Dict[str, Any]:
    """Maps a stored row onto metadata fields, defaulting absent attributes."""
    return {
        "title": item.get("Title", ""),
        "description": item.get("Description", ""),
        "tags": sorted(item.get("Tags", set())),
        "upload_time": item.get("UploadTime", ""),
    }

# -------------------------
# DynamoDB Service
# -------------------------
class DynamoDBService:
    """Image metadata rows keyed by S3 object key."""

    KEY_ATTRIBUTE = "s3Key"

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.resource = dynamodb_resource(self.settings)
        # Called from threadpool workers; only the client is thread-safe
        self.client = self.resource.meta.client
        self.table_name = self.settings.images_table
        log.info("Initialized DynamoDB resource for table %s", self.table_name)

        if self.settings.create_resources:
            self.ensure_table()

    def ensure_table(self):
        ensure_table(self.resource, self.table_name, self.KEY_ATTRIBUTE)

    def put_metadata(
        self,
        key: str,
        title: str,
        description: str,
        tags: List[str],
        upload_time: str,
    ):
        item = {
            self.KEY_ATTRIBUTE: key,
            "Title": title,
            "Description": description,
            "UploadTime": upload_time,
        }
        # DynamoDB rejects empty sets
        if tags:
            item["Tags"] = set(tags)
        self.client.put_item(TableName=self.table_name, Item=item)
        log.debug("Inserted metadata %s", key)

    def get_metadata(self, key: str) -> Optional[Dict[str, Any]]:
        resp = self.client.get_item(TableName=self.table_name, Key={self.KEY_ATTRIBUTE: key})
        item = resp.get("Item")
        if item is None:
            return None
        return _to_metadata(item)

    def scan_metadata(self) -> List[Dict[str, Any]]:
        scan_kwargs = {"TableName": self.table_name}
        rows = []
        while True:
            resp = self.client.scan(**scan_kwargs)
            for item in resp.get("Items", []):
                row = _to_metadata(item)
                row["key"] = item[self.KEY_ATTRIBUTE]
                rows.append(row)
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                return rows
            scan_kwargs["ExclusiveStartKey"] = last_key

    def close(self):
        log.info("Closed DynamoDB resource")
