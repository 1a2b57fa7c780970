"""Tests for the S3 key listing adapter."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError, EndpointConnectionError
import pytest

from docbackfill.adapters.storage.s3 import (
    KeyPage,
    S3Config,
    S3KeyLister,
    S3ListingError,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_config() -> S3Config:
    return S3Config(bucket="seller-docs-stage", region="us-west-2")


def _make_lister(response: dict | None = None) -> tuple[S3KeyLister, MagicMock]:
    client = MagicMock()
    client.list_objects_v2.return_value = response or {}
    return S3KeyLister(_make_config(), client=client), client


# ---------------------------------------------------------------------------
# Request shaping
# ---------------------------------------------------------------------------


class TestListPageRequest:
    def test_first_page_has_no_continuation_token(self):
        lister, client = _make_lister({"Contents": [], "IsTruncated": False})

        lister.list_page(prefix="seller/", max_keys=20)

        client.list_objects_v2.assert_called_once_with(
            Bucket=lister.bucket,
            Prefix="seller/",
            MaxKeys=20,
        )
        assert lister.bucket == "seller-docs-stage"

    def test_continuation_token_forwarded(self):
        lister, client = _make_lister({"Contents": [], "IsTruncated": False})

        lister.list_page(prefix="seller/", max_keys=20, continuation_token="abc")

        call_kwargs = client.list_objects_v2.call_args.kwargs
        assert call_kwargs["ContinuationToken"] == "abc"

    @pytest.mark.parametrize("max_keys", [0, 1001])
    def test_rejects_out_of_range_max_keys(self, max_keys: int):
        lister, client = _make_lister()

        with pytest.raises(ValueError, match="max_keys"):
            lister.list_page(prefix="", max_keys=max_keys)

        client.list_objects_v2.assert_not_called()

    @patch("docbackfill.adapters.storage.s3.boto3")
    def test_client_built_lazily_for_region(self, mock_boto3):
        mock_client = MagicMock()
        mock_client.list_objects_v2.return_value = {"IsTruncated": False}
        mock_boto3.client.return_value = mock_client
        lister = S3KeyLister(_make_config())

        lister.list_page(prefix="", max_keys=5)
        lister.list_page(prefix="", max_keys=5)

        mock_boto3.client.assert_called_once_with("s3", region_name="us-west-2")
        assert mock_client.list_objects_v2.call_count == 2


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


class TestListPageResponse:
    def test_truncated_page(self):
        lister, _ = _make_lister(
            {
                "Contents": [{"Key": "seller/1/a"}, {"Key": "seller/2/b"}],
                "IsTruncated": True,
                "NextContinuationToken": "next-1",
            }
        )

        page = lister.list_page(prefix="seller/", max_keys=2)

        assert page == KeyPage(
            keys=["seller/1/a", "seller/2/b"],
            is_truncated=True,
            next_continuation_token="next-1",
        )

    def test_last_page(self):
        lister, _ = _make_lister(
            {"Contents": [{"Key": "seller/3/c"}], "IsTruncated": False}
        )

        page = lister.list_page(prefix="seller/", max_keys=2)

        assert page.keys == ["seller/3/c"]
        assert page.is_truncated is False
        assert page.next_continuation_token is None

    def test_empty_prefix_without_contents(self):
        lister, _ = _make_lister({"IsTruncated": False, "KeyCount": 0})

        page = lister.list_page(prefix="missing/", max_keys=20)

        assert page == KeyPage()

    def test_truncated_without_token_is_an_error(self):
        lister, _ = _make_lister(
            {"Contents": [{"Key": "seller/1/a"}], "IsTruncated": True}
        )

        with pytest.raises(S3ListingError, match="no continuation token"):
            lister.list_page(prefix="seller/", max_keys=1)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestListPageErrors:
    def test_client_error_wrapped(self):
        lister, client = _make_lister()
        client.list_objects_v2.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "forbidden"}},
            "ListObjectsV2",
        )

        with pytest.raises(S3ListingError, match="Failed to list 'seller/'"):
            lister.list_page(prefix="seller/", max_keys=20)

    def test_botocore_error_wrapped(self):
        lister, client = _make_lister()
        client.list_objects_v2.side_effect = EndpointConnectionError(
            endpoint_url="https://s3.us-west-2.amazonaws.com"
        )

        with pytest.raises(S3ListingError) as exc_info:
            lister.list_page(prefix="", max_keys=20)

        assert isinstance(exc_info.value.__cause__, EndpointConnectionError)
