import os
from flask import current_app
import boto3
from botocore.client import Config


def _ensure_local_dir():
    d = current_app.config['LOCAL_STORAGE_DIR']
    os.makedirs(d, exist_ok=True)
    return d


def _s3_client():
    # endpoint_url is empty for AWS-managed S3 and set for R2/MinIO
    s3_kwargs = {}
    endpoint = current_app.config.get('S3_ENDPOINT')
    if endpoint:
        s3_kwargs['endpoint_url'] = endpoint
    region = current_app.config.get('S3_REGION')
    if region:
        s3_kwargs['region_name'] = region
    return boto3.client(
        's3',
        aws_access_key_id=current_app.config.get('S3_ACCESS_KEY'),
        aws_secret_access_key=current_app.config.get('S3_SECRET_KEY'),
        config=Config(signature_version='s3v4', s3={'addressing_style': 'virtual'}),
        **s3_kwargs,
    )


def _save_local(file_storage, key):
    d = _ensure_local_dir()
    path = os.path.join(d, key)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    stream = getattr(file_storage, 'stream', file_storage)
    try:
        stream.seek(0)
    except Exception:
        pass
    file_storage.save(path)
    return f"file://{os.path.abspath(path)}"


def save_file(file_storage, key):
    """Store an uploaded werkzeug FileStorage under ``key`` and return its URL."""
    backend = current_app.config.get('STORAGE_BACKEND', 'local')

    if backend == 's3':
        s3 = _s3_client()
        bucket = current_app.config.get('S3_BUCKET')
        stream = getattr(file_storage, 'stream', file_storage)
        extra = {}
        if getattr(file_storage, 'mimetype', None):
            extra['ContentType'] = file_storage.mimetype
        try:
            s3.upload_fileobj(stream, bucket, key, ExtraArgs=extra or None)
            return f"s3://{bucket}/{key}"
        except Exception as e:
            current_app.logger.exception('S3 upload failed, falling back to local storage: %s', e)
            return _save_local(file_storage, key)
    return _save_local(file_storage, key)


def download_bytes(url: str) -> bytes:
    if url.startswith('s3://'):
        bucket, key = url.replace('s3://', '').split('/', 1)
        obj = _s3_client().get_object(Bucket=bucket, Key=key)
        return obj['Body'].read()
    elif url.startswith('file://'):
        path = url.replace('file://', '')
        with open(path, 'rb') as f:
            return f.read()
    else:
        raise ValueError("Unsupported URL scheme")
