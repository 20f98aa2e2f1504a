from pydantic import EmailStr
from media_platform.modules.media.schemas import CamelModel

class ShareIn(CamelModel):
    target_email: EmailStr

class ShareOut(CamelModel):
    message: str
    view_url: str
