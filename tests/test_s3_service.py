import unittest
from datetime import datetime, timezone
from unittest import mock

import boto3
from botocore.exceptions import ProfileNotFound
from botocore.stub import Stubber

from s3tree.services import s3_service
from s3tree.tree import ObjectRecord


def make_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="x",
        aws_secret_access_key="y",
    )


STAMP = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TestListObjects(unittest.TestCase):
    def test_records_from_single_page(self) -> None:
        client = make_client()
        with Stubber(client) as stubber:
            stubber.add_response(
                "list_objects_v2",
                {
                    "Contents": [
                        {"Key": "photos/a.jpg", "Size": 10, "LastModified": STAMP},
                        {"Key": "photos/sub/", "Size": 0, "LastModified": STAMP},
                    ],
                    "IsTruncated": False,
                },
                expected_params={"Bucket": "my-bucket", "Prefix": "photos/"},
            )
            records = s3_service.list_objects(client, "my-bucket", "photos/")

        self.assertEqual(
            records,
            [
                ObjectRecord(key="photos/a.jpg", size=10, modified_at=STAMP),
                ObjectRecord(key="photos/sub/", size=0, modified_at=STAMP),
            ],
        )

    def test_no_prefix_and_empty_bucket(self) -> None:
        client = make_client()
        with Stubber(client) as stubber:
            stubber.add_response("list_objects_v2", {"IsTruncated": False}, expected_params={"Bucket": "my-bucket"})
            records = s3_service.list_objects(client, "my-bucket")
        self.assertEqual(records, [])

    def test_truncated_listing_is_reported(self) -> None:
        client = make_client()
        with Stubber(client) as stubber:
            stubber.add_response(
                "list_objects_v2",
                {
                    "Contents": [{"Key": "a.txt", "Size": 1, "LastModified": STAMP}],
                    "IsTruncated": True,
                    "NextContinuationToken": "next",
                },
                expected_params={"Bucket": "my-bucket"},
            )
            with self.assertLogs("s3tree.services.s3_service", level="WARNING") as logs:
                records = s3_service.list_objects(client, "my-bucket")

        self.assertEqual(len(records), 1)
        self.assertIn("truncated", logs.output[0])


class TestCreateClient(unittest.TestCase):
    def test_missing_profile_is_value_error(self) -> None:
        with mock.patch.object(s3_service.boto3.session, "Session", side_effect=ProfileNotFound(profile="nope")):
            with self.assertRaises(ValueError):
                s3_service.create_s3_client(profile="nope")

    def test_session_arguments(self) -> None:
        with mock.patch.object(s3_service.boto3.session, "Session") as session_cls:
            s3_service.create_s3_client(profile="dev", region="eu-west-1", endpoint_url="http://localhost:9000")

        session_cls.assert_called_once_with(profile_name="dev", region_name="eu-west-1")
        args, kwargs = session_cls.return_value.client.call_args
        self.assertEqual(args, ("s3",))
        self.assertEqual(kwargs["endpoint_url"], "http://localhost:9000")


if __name__ == "__main__":
    unittest.main()
