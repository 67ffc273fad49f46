import os
import pytest
from moto import mock_aws
from fastapi.testclient import TestClient
import boto3

# Dummy AWS credentials for moto, set BEFORE importing app modules
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_SECURITY_TOKEN"] = "testing"
os.environ["AWS_SESSION_TOKEN"] = "testing"
os.environ["AWS_REGION"] = "us-east-1"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["S3_BUCKET"] = "image-gallery-bucket"
os.environ["IMAGES_TABLE"] = "image_info"
os.environ["USERS_TABLE"] = "users"
# Clear the AWS_ENDPOINT_URL so moto mocks are used instead of localstack
os.environ.pop("AWS_ENDPOINT_URL", None)

from image_gallery.main import create_app
from image_gallery.settings import Settings

BUCKET = "image-gallery-bucket"
IMAGES_TABLE = "image_info"
USERS_TABLE = "users"


@pytest.fixture(scope="function")
def aws_credentials():
    """Mocked AWS Credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"


@pytest.fixture(scope="function")
def aws(aws_credentials):
    """Bucket and both tables inside a moto context."""
    with mock_aws():
        s3 = boto3.client("s3", region_name="us-east-1")
        s3.create_bucket(Bucket=BUCKET)

        dynamodb = boto3.client("dynamodb", region_name="us-east-1")
        for table_name, hash_key in ((IMAGES_TABLE, "s3Key"), (USERS_TABLE, "username")):
            dynamodb.create_table(
                TableName=table_name,
                KeySchema=[{"AttributeName": hash_key, "KeyType": "HASH"}],
                AttributeDefinitions=[{"AttributeName": hash_key, "AttributeType": "S"}],
                BillingMode="PAY_PER_REQUEST",
            )
        yield s3


@pytest.fixture(scope="function")
def s3_client(aws):
    """Raw boto3 S3 client, for writing objects behind the app's back."""
    return aws


@pytest.fixture(scope="function")
def test_client(aws):
    app = create_app(Settings())
    with TestClient(app) as client:
        yield client


@pytest.fixture(scope="function")
def open_client(aws):
    """Client for a deployment with auth_required disabled."""
    app = create_app(Settings(auth_required=False))
    with TestClient(app) as client:
        yield client


@pytest.fixture(scope="function")
def logged_in_client(test_client):
    test_client.post("/register", json={"username": "alice", "password": "secret123"})
    resp = test_client.post("/login", json={"username": "alice", "password": "secret123"})
    assert resp.status_code == 200
    return test_client
