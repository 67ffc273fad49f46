from typing import Optional, Dict, Any
from botocore.exceptions import ClientError
from image_gallery.settings import Settings, settings as default_settings
from image_gallery.storage.dynamodb import dynamodb_resource, ensure_table
from image_gallery.exceptions import UserAlreadyExistsException
import logging

log = logging.getLogger(__name__)

# -------------------------
# User Store
# -------------------------
class UserStore:
    """User rows keyed by username, holding a password hash."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.resource = dynamodb_resource(self.settings)
        self.client = self.resource.meta.client
        self.table_name = self.settings.users_table
        log.info("Initialized user store for table %s", self.table_name)

        if self.settings.create_resources:
            self.ensure_table()

    def ensure_table(self):
        ensure_table(self.resource, self.table_name, "username")

    def create_user(self, username: str, password_hash: str):
        try:
            self.client.put_item(
                TableName=self.table_name,
                Item={"username": username, "password": password_hash},
                ConditionExpression="attribute_not_exists(username)",
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                raise UserAlreadyExistsException(username)
            raise
        log.info("Created user %s", username)

    def get_user(self, username: str) -> Optional[Dict[str, Any]]:
        resp = self.client.get_item(TableName=self.table_name, Key={"username": username})
        return resp.get("Item")

    def close(self):
        log.info("Closed user store")
