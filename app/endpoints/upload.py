from fastapi import APIRouter, Depends

from app.core.constants import RoleEnum
from app.schemas.response import APIResponse
from app.schemas.upload import PresignRequest, PresignResponse
from app.schemas.user import UserContext
from app.services.s3_service import S3Service
from app.utils import deps

router = APIRouter()

s3_service = S3Service()


@router.post("/presign", response_model=APIResponse[PresignResponse])
async def presign_upload(
    presign_in: PresignRequest,
    context: UserContext = Depends(deps.require_role(RoleEnum.TEACHER, RoleEnum.ADMIN))
):
    """Hand the client a short-lived URL to PUT the file straight into the bucket."""
    data = s3_service.presign_upload(
        folder=presign_in.folder,
        filename=presign_in.filename,
        content_type=presign_in.content_type,
    )
    return APIResponse(message="Upload URL created successfully", data=data)
