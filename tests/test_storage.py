import io
from concurrent.futures import ThreadPoolExecutor
import boto3
import pytest
from moto import mock_aws

from image_gallery.settings import Settings
from image_gallery.storage.s3 import S3Service
from image_gallery.storage.dynamodb import DynamoDBService
from image_gallery.storage.users import UserStore
from image_gallery.exceptions import UserAlreadyExistsException


@pytest.fixture(scope="function")
def fresh_aws(aws_credentials):
    """Empty moto account; the services create their own resources."""
    with mock_aws():
        yield


# ------------------------------
# S3Service
# ------------------------------

def test_s3_creates_bucket_and_lists_keys(fresh_aws):
    s3 = S3Service(Settings(s3_bucket="fresh-bucket"))
    assert s3.list_keys() == []

    s3.upload(io.BytesIO(b"data"), "1-a.png", "image/png")
    s3.upload(io.BytesIO(b"data"), "2-b.png", "image/png")
    assert sorted(s3.list_keys()) == ["1-a.png", "2-b.png"]

    head = boto3.client("s3", region_name="us-east-1").head_object(Bucket="fresh-bucket", Key="1-a.png")
    assert head["ContentType"] == "image/png"


def test_s3_defaults_to_module_settings(fresh_aws):
    s3 = S3Service()
    assert s3.bucket == "image-gallery-bucket"
    assert s3.list_keys() == []


def test_s3_object_url(fresh_aws):
    s3 = S3Service(Settings(s3_bucket="fresh-bucket"))
    assert s3.object_url("1-my cat.png") == "https://fresh-bucket.s3.amazonaws.com/1-my%20cat.png"


def test_s3_object_url_public_base(fresh_aws):
    s3 = S3Service(Settings(s3_bucket="fresh-bucket", public_base_url="http://localhost:4566/"))
    assert s3.object_url("1-a.png") == "http://localhost:4566/fresh-bucket/1-a.png"


# ------------------------------
# DynamoDBService
# ------------------------------

def test_dynamodb_put_and_get_metadata(fresh_aws):
    db = DynamoDBService(Settings(images_table="fresh_images"))
    db.put_metadata("1-a.png", "T", "D", ["b", "a"], "2024-05-01T10:00:00.000Z")

    assert db.get_metadata("1-a.png") == {
        "title": "T",
        "description": "D",
        "tags": ["a", "b"],
        "upload_time": "2024-05-01T10:00:00.000Z",
    }


def test_dynamodb_empty_tags_are_omitted(fresh_aws):
    db = DynamoDBService(Settings(images_table="fresh_images"))
    db.put_metadata("1-a.png", "", "", [], "t")

    raw = boto3.resource("dynamodb", region_name="us-east-1").Table("fresh_images").get_item(
        Key={"s3Key": "1-a.png"}
    )["Item"]
    assert "Tags" not in raw
    assert db.get_metadata("1-a.png")["tags"] == []


def test_dynamodb_concurrent_writes_and_reads(fresh_aws):
    db = DynamoDBService(Settings(images_table="fresh_images"))
    assert db.client is db.resource.meta.client
    keys = [f"{i}-img.png" for i in range(20)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda k: db.put_metadata(k, k, "", ["t"], "t"), keys))
        rows = list(pool.map(db.get_metadata, keys))

    assert [row["title"] for row in rows] == keys


def test_dynamodb_missing_row(fresh_aws):
    db = DynamoDBService(Settings(images_table="fresh_images"))
    assert db.get_metadata("nope") is None


def test_dynamodb_scan_metadata(fresh_aws):
    db = DynamoDBService(Settings(images_table="fresh_images"))
    db.put_metadata("1-a.png", "A", "", ["x"], "t1")
    db.put_metadata("2-b.png", "B", "", [], "t2")

    rows = sorted(db.scan_metadata(), key=lambda r: r["key"])
    assert [r["key"] for r in rows] == ["1-a.png", "2-b.png"]
    assert rows[0]["tags"] == ["x"]
    assert rows[1]["title"] == "B"


# ------------------------------
# UserStore
# ------------------------------

def test_users_create_and_get(fresh_aws):
    users = UserStore(Settings(users_table="fresh_users"))
    users.create_user("alice", "hash")
    assert users.get_user("alice") == {"username": "alice", "password": "hash"}
    assert users.get_user("bob") is None


def test_users_duplicate(fresh_aws):
    users = UserStore(Settings(users_table="fresh_users"))
    users.create_user("alice", "hash")
    with pytest.raises(UserAlreadyExistsException):
        users.create_user("alice", "other")
    assert users.get_user("alice")["password"] == "hash"
