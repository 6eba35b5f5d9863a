from pydantic import BaseModel, ConfigDict
from typing import List, Literal, Optional

from touchup.models import EditInstruction as DrawInstruction, EditKind


class UploadResponse(BaseModel):
    filename: str


class EditInstruction(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    page: int     # 0-based
    x: float      # page-space points, origin bottom-left
    y: float
    width: Optional[float] = None
    height: Optional[float] = None
    type: Literal["blur", "erase", "text"]
    text: Optional[str] = None

    def to_draw(self) -> DrawInstruction:
        return DrawInstruction(
            page=self.page,
            kind=EditKind(self.type),
            x=self.x,
            y=self.y,
            width=self.width,
            height=self.height,
            text=self.text,
        )


class ProcessRequest(BaseModel):
    filename: str
    edits: List[EditInstruction] = []


class ProcessResponse(BaseModel):
    filename: str
