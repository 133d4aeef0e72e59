"""Screenshot storage: local directory in development, S3 in production."""
import logging
import os
import boto3
from botocore.config import Config as BotoConfig
from flask import current_app

logger = logging.getLogger(__name__)


def _backend():
    return current_app.config["STORAGE_BACKEND"]


def _get_client():
    return boto3.client(
        "s3",
        endpoint_url=current_app.config["S3_ENDPOINT_URL"] or None,
        aws_access_key_id=current_app.config["S3_ACCESS_KEY"],
        aws_secret_access_key=current_app.config["S3_SECRET_KEY"],
        region_name=current_app.config["S3_REGION"],
        config=BotoConfig(signature_version="s3v4"),
    )


def local_path(storage_key):
    """Absolute path for a key under SCREENSHOT_DIR; rejects traversal."""
    root = os.path.abspath(current_app.config["SCREENSHOT_DIR"])
    path = os.path.abspath(os.path.join(root, storage_key))
    if os.path.commonpath([root, path]) != root:
        raise ValueError(f"Invalid storage key: {storage_key}")
    return path


def upload(storage_key, data, content_type="image/png"):
    """Store bytes under ``storage_key``."""
    if _backend() == "s3":
        _get_client().put_object(
            Bucket=current_app.config["S3_BUCKET_NAME"],
            Key=storage_key,
            Body=data,
            ContentType=content_type,
            ACL="public-read",
        )
        return

    path = local_path(storage_key)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as fh:
        fh.write(data)


def get_public_url(storage_key):
    """Return the URL a browser can load the stored file from."""
    if _backend() == "s3":
        base = current_app.config["S3_PUBLIC_URL"].rstrip("/")
        return f"{base}/{storage_key}"
    return "/screenshots/" + storage_key.split("/", 1)[-1]


def delete(storage_key):
    """Delete a stored file. Missing local files are not an error."""
    if _backend() == "s3":
        _get_client().delete_object(
            Bucket=current_app.config["S3_BUCKET_NAME"], Key=storage_key
        )
        return True

    path = local_path(storage_key)
    if not os.path.exists(path):
        return False
    os.remove(path)
    return True


def delete_many(storage_keys):
    """Delete several files; returns (deleted, failed) counts.

    Failures are counted, not raised.
    """
    deleted = failed = 0
    for key in storage_keys:
        try:
            if delete(key):
                deleted += 1
        except Exception:
            logger.exception("Failed to delete stored file %s", key)
            failed += 1
    return deleted, failed
