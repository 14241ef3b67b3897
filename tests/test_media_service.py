from io import BytesIO

import pytest
from botocore.exceptions import ClientError
from PIL import Image

from app.core.exceptions import ValidationFailed
from app.services.media_service import MediaError, MediaGateway, UploadedImage


def _client_error(operation: str) -> ClientError:
    return ClientError({"Error": {"Code": "500", "Message": "boom"}}, operation)


def _upload(data: bytes, filename: str = "ring.png", content_type: str = "image/png") -> UploadedImage:
    return UploadedImage(filename=filename, content_type=content_type, data=data)


class TestValidate:
    """Tests for checks that run before any storage call."""

    def test_accepts_allowed_extension(self, media, make_image):
        media.validate(_upload(make_image()))

    def test_rejects_unknown_extension(self, media):
        with pytest.raises(ValidationFailed) as exc_info:
            media.validate(_upload(b"text", filename="notes.txt", content_type="text/plain"))

        assert exc_info.value.status_code == 400
        assert "Unsupported file format: txt" in exc_info.value.message

    def test_rejects_oversized_file(self, make_gateway, make_image):
        gateway = make_gateway(MAX_IMAGE_SIZE=10)

        with pytest.raises(ValidationFailed):
            gateway.validate(_upload(make_image()))


class TestTransform:
    """Tests for width limiting with Pillow."""

    def test_wide_image_is_downscaled(self, media, make_image):
        body, fmt, width, height = media.transform(make_image(2400, 600))

        assert (fmt, width, height) == ("png", 1200, 300)
        with Image.open(BytesIO(body)) as img:
            assert img.size == (1200, 300)

    def test_small_image_is_not_upscaled(self, media, make_image):
        data = make_image(300, 200, "JPEG")

        body, fmt, width, height = media.transform(data)

        assert body == data
        assert (fmt, width, height) == ("jpeg", 300, 200)

    def test_not_an_image(self, media):
        with pytest.raises(MediaError):
            media.transform(b"definitely not an image")


class TestUpload:
    """Tests for uploads to the bucket."""

    def test_upload_puts_object_and_returns_public_url(self, media, s3_client, make_image):
        result = media.upload(_upload(make_image(40, 20)), "products")

        s3_client.put_object.assert_called_once()
        kwargs = s3_client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "test-bucket"
        assert kwargs["Key"].startswith("jewelry/products/")
        assert kwargs["Key"].endswith(".png")
        assert kwargs["ContentType"] == "image/png"
        assert result.public_id == kwargs["Key"]
        assert result.url == f"https://cdn.test/{kwargs['Key']}"
        assert (result.format, result.width, result.height) == ("png", 40, 20)

    def test_jpeg_key_extension(self, media, s3_client, make_image):
        result = media.upload(_upload(make_image(fmt="JPEG"), filename="ring.jpg"), "categories")

        assert result.public_id.startswith("jewelry/categories/")
        assert result.public_id.endswith(".jpg")

    def test_url_from_endpoint_without_public_base(self, make_gateway, make_image):
        gateway = make_gateway(MEDIA_PUBLIC_BASE_URL="", S3_ENDPOINT_URL="http://minio:9000/")

        result = gateway.upload(_upload(make_image()), "products")

        assert result.url == f"http://minio:9000/test-bucket/{result.public_id}"

    def test_unconfigured_storage_raises(self, offline_media, s3_client, make_image):
        with pytest.raises(MediaError):
            offline_media.upload(_upload(make_image()), "products")

        s3_client.put_object.assert_not_called()

    def test_storage_error_raises_media_error(self, media, s3_client, make_image):
        s3_client.put_object.side_effect = _client_error("PutObject")

        with pytest.raises(MediaError):
            media.upload(_upload(make_image()), "products")


class TestDelete:
    """Tests for best-effort deletes."""

    def test_delete_calls_storage(self, media, s3_client):
        assert media.delete("jewelry/products/1.png") is True

        s3_client.delete_object.assert_called_once_with(
            Bucket="test-bucket", Key="jewelry/products/1.png"
        )

    @pytest.mark.parametrize("public_id", [None, "", "base64_1700000000000_0"])
    def test_skips_empty_and_inline_keys(self, media, s3_client, public_id):
        assert media.delete(public_id) is False

        s3_client.delete_object.assert_not_called()

    def test_errors_are_swallowed(self, media, s3_client):
        s3_client.delete_object.side_effect = _client_error("DeleteObject")

        assert media.delete("jewelry/products/1.png") is False

    def test_unconfigured_storage_is_skipped(self, offline_media, s3_client):
        assert offline_media.delete("jewelry/products/1.png") is False

        s3_client.delete_object.assert_not_called()


class TestInline:
    def test_inline_data_uri(self):
        uri = MediaGateway.inline(_upload(b"abc"))

        assert uri == "data:image/png;base64,YWJj"

    def test_inline_key_prefix(self):
        assert MediaGateway.inline_key(2).startswith("base64_")
        assert MediaGateway.inline_key(2).endswith("_2")

