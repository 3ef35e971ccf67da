from app.core.config import settings
from app.core.exceptions import ExternalServiceError
from app.schemas.upload import PresignResponse
import boto3
from botocore.exceptions import BotoCoreError, ClientError
import logging
import mimetypes
import uuid
from pathlib import PurePosixPath

logger = logging.getLogger(__name__)


class S3Service:
    """Presigns direct-to-bucket uploads. The core only ever stores the returned key."""

    def __init__(self):
        self.s3_client = boto3.client('s3', region_name=settings.AWS_REGION)
        self.bucket_name = settings.S3_BUCKET_NAME
        self.expires_in = settings.PRESIGNED_URL_EXPIRE_SECONDS

    def build_key(self, folder: str, filename: str) -> str:
        extension = PurePosixPath(filename).suffix.lower() or mimetypes.guess_extension(
            mimetypes.guess_type(filename)[0] or ''
        ) or ''
        return f"{folder}/{uuid.uuid4().hex}{extension}"

    def presign_upload(self, *, folder: str, filename: str, content_type: str) -> PresignResponse:
        key = self.build_key(folder, filename)
        try:
            url = self.s3_client.generate_presigned_url(
                'put_object',
                Params={
                    'Bucket': self.bucket_name,
                    'Key': key,
                    'ContentType': content_type,
                },
                ExpiresIn=self.expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to presign upload for {key}: {e}")
            raise ExternalServiceError("Could not create upload URL")
        return PresignResponse(upload_url=url, key=key, expires_in=self.expires_in)
