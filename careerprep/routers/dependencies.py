from typing import Optional

from fastapi import Header

from careerprep.utils.exceptions import ValidationError


async def get_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Caller identity from the X-User-ID header; authentication happens upstream"""
    if not x_user_id or not x_user_id.strip():
        raise ValidationError("X-User-ID header is required", field="X-User-ID")
    return x_user_id.strip()
