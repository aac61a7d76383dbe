"""Request models shared by several routers."""

from pydantic import BaseModel

from src.backend.ledger.use_cases.attachments import Attachment


class AttachmentIn(BaseModel):
    """A file sent inline as base64 (plain or a `data:` URL)."""

    file_name: str
    mime_type: str = "application/octet-stream"
    base64_data: str

    def to_attachment(self) -> Attachment:
        return Attachment(
            file_name=self.file_name,
            mime_type=self.mime_type,
            base64_data=self.base64_data,
        )
