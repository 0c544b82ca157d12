import io

import boto3
import pytest
from botocore.exceptions import EndpointConnectionError
from botocore.stub import Stubber

from commons.exceptions import ConflictError, StorageError
from files.services.s3_client import S3Gateway


@pytest.fixture
def stubbed():
    client = boto3.client(
        "s3", region_name="us-east-1",
        aws_access_key_id="test", aws_secret_access_key="test",
    )
    with Stubber(client) as stubber:
        yield S3Gateway(client=client, public_url="https://cdn.test"), stubber
        stubber.assert_no_pending_responses()


def test_upload_puts_object_when_missing(stubbed):
    gateway, stubber = stubbed
    stubber.add_client_error("head_object", service_error_code="404", http_status_code=404)
    stubber.add_response("put_object", {}, {
        "Bucket": "mission", "Key": "c1/1_m.json", "Body": b"{}",
        "CacheControl": "max-age=3600", "ContentType": "application/json",
    })

    url = gateway.upload("mission", "c1/1_m.json", io.BytesIO(b"{}"), content_type="application/json")
    assert url == "https://cdn.test/mission/c1/1_m.json"


def test_upload_never_overwrites(stubbed):
    gateway, stubber = stubbed
    stubber.add_response("head_object", {}, {"Bucket": "mission", "Key": "c1/1_m.json"})

    with pytest.raises(ConflictError):
        gateway.upload("mission", "c1/1_m.json", io.BytesIO(b"{}"))


def test_list_strips_folder_and_follows_pages(stubbed):
    gateway, stubber = stubbed
    stubber.add_response(
        "list_objects_v2",
        {"Contents": [{"Key": "c1/a.json", "Size": 3}], "IsTruncated": True, "NextContinuationToken": "t"},
        {"Bucket": "mission", "Prefix": "c1/", "Delimiter": "/"},
    )
    stubber.add_response(
        "list_objects_v2",
        {"Contents": [{"Key": "c1/b.json", "Size": 5}], "IsTruncated": False},
        {"Bucket": "mission", "Prefix": "c1/", "Delimiter": "/", "ContinuationToken": "t"},
    )

    objects = gateway.list("mission", "c1")
    assert [(o.name, o.size) for o in objects] == [("a.json", 3), ("b.json", 5)]


def test_list_missing_bucket_is_empty(stubbed):
    gateway, stubber = stubbed
    stubber.add_client_error("list_objects_v2", service_error_code="NoSuchBucket", http_status_code=404)
    assert gateway.list("mission", "c1") == []


def test_remove_reports_storage_errors(stubbed):
    gateway, stubber = stubbed
    stubber.add_response(
        "delete_objects",
        {"Errors": [{"Key": "c1/a.json", "Code": "AccessDenied", "Message": "denied"}]},
        {"Bucket": "mission", "Delete": {"Objects": [{"Key": "c1/a.json"}], "Quiet": True}},
    )
    with pytest.raises(StorageError, match="denied"):
        gateway.remove("mission", ["c1/a.json"])


def test_ensure_bucket_creates_when_missing(stubbed):
    gateway, stubber = stubbed
    stubber.add_client_error("head_bucket", service_error_code="404", http_status_code=404)
    stubber.add_response("create_bucket", {}, {"Bucket": "pemfile"})
    assert gateway.ensure_bucket("pemfile") is True


def test_ensure_bucket_existing(stubbed):
    gateway, stubber = stubbed
    stubber.add_response("head_bucket", {}, {"Bucket": "pemfile"})
    assert gateway.ensure_bucket("pemfile") is False


def test_storage_failure_maps_to_storage_error(stubbed):
    gateway, stubber = stubbed
    stubber.add_client_error("head_object", service_error_code="404", http_status_code=404)
    stubber.add_client_error("put_object", service_error_code="AccessDenied", http_status_code=403)
    with pytest.raises(StorageError):
        gateway.upload("mission", "c1/x.json", io.BytesIO(b"x"))


def test_public_url_fallbacks():
    gateway = S3Gateway(client=object(), endpoint_url="http://minio:9000/")
    assert gateway.public_url("image", "c1/a b.png") == "http://minio:9000/image/c1/a%20b.png"

    aws = S3Gateway(client=object(), region="eu-west-1")
    assert aws.public_url("image", "c1/a.png") == "https://image.s3.eu-west-1.amazonaws.com/c1/a.png"


class UnreachableClient:
    """Cliente S3 cuyo endpoint no responde."""

    def head_bucket(self, **kwargs):
        raise EndpointConnectionError(endpoint_url="http://minio:9000")

    def head_object(self, **kwargs):
        raise EndpointConnectionError(endpoint_url="http://minio:9000")


def test_unreachable_endpoint_is_storage_error():
    gateway = S3Gateway(client=UnreachableClient())

    with pytest.raises(StorageError, match="check bucket"):
        gateway.ensure_bucket("pemfile")
    with pytest.raises(StorageError, match="check object"):
        gateway.upload("mission", "c1/x.json", io.BytesIO(b"x"))
