import base64
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr

INVALID_JSON = "Invalid JSON format"
UNKNOWN_COMMAND = "Unknown command"
PROCESSING_ERROR = "Error processing command"


class CommandEnvelope(BaseModel):
    """Inbound frame. Keys are lower-cased before validation."""
    model_config = ConfigDict(extra="ignore")

    type: Optional[StrictStr] = None
    command: Optional[StrictStr] = None


class PhotoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["photo"] = "photo"
    file_path: str = Field(alias="filePath")
    image_data: str = Field(alias="imageData")  # base64

    @classmethod
    def from_capture(cls, file_path: str, image_bytes: bytes) -> "PhotoResponse":
        return cls(file_path=file_path, image_data=base64.b64encode(image_bytes).decode("ascii"))


class FlashResponse(BaseModel):
    type: Literal["flash"] = "flash"
    status: Literal["on", "off"]


class ErrorResponse(BaseModel):
    type: Literal["error"] = "error"
    message: str


Response = PhotoResponse | FlashResponse | ErrorResponse


def to_frame(resp: Response) -> str:
    return resp.model_dump_json(by_alias=True)
