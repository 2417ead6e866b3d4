# -*- coding: utf-8 -*-
"""
Object storage for uploaded proofs (payment screenshots, ID documents).

Production uses an S3-compatible bucket (Cloudflare R2) through boto3. Routes
receive an ``ObjectStorage`` through ``Depends(get_storage)`` so it can be
swapped out in tests.
"""

import io
import logging
import os
from datetime import datetime
from typing import BinaryIO, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from intothewild import config
from intothewild.image_utils import process_proof_image

logger = logging.getLogger(__name__)

ALLOWED_DOCUMENT_TYPES = ("application/pdf",)


class StorageError(Exception):
    """Upload, URL or delete operation against the object store failed."""


class ObjectStorage:
    """Minimal object store contract used by the workflow."""

    def upload(self, path: str, data: BinaryIO, content_type: str) -> str:
        raise NotImplementedError

    def get_public_url(self, path: str) -> str:
        raise NotImplementedError

    def delete(self, path: str) -> None:
        raise NotImplementedError


class S3Storage(ObjectStorage):

    def __init__(self, endpoint_url, access_key_id, secret_access_key, bucket_name, public_bucket_url):
        self.bucket_name = bucket_name
        self.public_bucket_url = public_bucket_url.rstrip('/')
        self.client = boto3.client(
            's3',
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name="auto",
        )

    def upload(self, path, data, content_type):
        try:
            self.client.upload_fileobj(data, self.bucket_name, path, ExtraArgs={'ContentType': content_type})
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Upload to bucket failed for {path}: {e}")
            raise StorageError(str(e)) from e
        return path

    def get_public_url(self, path):
        return f"{self.public_bucket_url}/{path}"

    def delete(self, path):
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=path)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(str(e)) from e


def get_storage() -> ObjectStorage:
    settings = [
        config.S3_ENDPOINT_URL,
        config.AWS_ACCESS_KEY_ID,
        config.AWS_SECRET_ACCESS_KEY,
        config.S3_BUCKET_NAME,
        config.PUBLIC_BUCKET_URL,
    ]
    if not all(settings):
        raise StorageError("Cloud storage configuration is incomplete.")
    return S3Storage(*settings)


def build_object_path(prefix: str, *parts, filename: str = "") -> str:
    """
    ``payment-proofs/<user>/<trek>/<timestamp>_<name>``: keyed by owner, subject and time.
    """
    base_filename, ext = os.path.splitext(filename or "upload")
    safe_name = base_filename.strip().replace(' ', '_') or "upload"
    stamp = int(datetime.utcnow().timestamp() * 1000)
    keys = "/".join(str(p) for p in parts)
    return f"{prefix}/{keys}/{stamp}_{safe_name}{ext.lower()}"


def prepare_upload(file_obj: BinaryIO, content_type: str) -> Tuple[BinaryIO, str, str]:
    """
    Normalises an uploaded proof before storing it.

    Images are re-encoded as bounded JPEGs, PDFs are kept as they are.
    Returns ``(stream, content_type, extension)``; raises ValueError for
    empty, oversized or unsupported files.
    """
    raw = file_obj.read(config.MAX_UPLOAD_BYTES + 1)
    if not raw:
        raise ValueError("The uploaded file is empty.")
    if len(raw) > config.MAX_UPLOAD_BYTES:
        raise ValueError("The uploaded file is too large.")

    content_type = (content_type or "").lower()
    if content_type in ALLOWED_DOCUMENT_TYPES:
        return io.BytesIO(raw), content_type, ".pdf"

    if content_type.startswith("image/"):
        processed, mime_type = process_proof_image(io.BytesIO(raw))
        if processed is None:
            raise ValueError("The uploaded image could not be read.")
        return processed, mime_type, ".jpg"

    raise ValueError("Only images and PDF files are accepted.")


def store_file(storage: ObjectStorage, prefix: str, parts, file_obj: BinaryIO, filename: str, content_type: str) -> Tuple[str, str]:
    """
    Validates, uploads and returns ``(path, public_url)`` of a proof file.
    """
    stream, mime_type, ext = prepare_upload(file_obj, content_type)
    base_filename, _ = os.path.splitext(filename or "upload")
    path = build_object_path(prefix, *parts, filename=f"{base_filename}{ext}")
    storage.upload(path, stream, mime_type)
    return path, storage.get_public_url(path)
