from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass

from src.backend.ledger.integrations.row_store_client import RowStoreClient


@dataclass(frozen=True, slots=True)
class Attachment:
    file_name: str
    mime_type: str
    base64_data: str

    def validate(self) -> None:
        if not self.file_name.strip():
            raise ValueError("Attachment file name is required")
        data = self.base64_data
        # Accept a full data URL as produced by FileReader.readAsDataURL.
        if data.startswith("data:") and "," in data:
            data = data.split(",", 1)[1]
        try:
            base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Attachment {self.file_name} is not valid base64") from e

    @property
    def payload(self) -> str:
        if self.base64_data.startswith("data:") and "," in self.base64_data:
            return self.base64_data.split(",", 1)[1]
        return self.base64_data


def upload_attachment(
    row_store: RowStoreClient,
    attachment: Attachment | None,
    *,
    folder_id: str,
    file_name: str | None = None,
) -> str:
    """Upload `attachment` (if any) and return its link, else ''."""

    if attachment is None:
        return ""
    attachment.validate()
    uploaded = row_store.upload_file(
        file_name=file_name or attachment.file_name,
        base64_data=attachment.payload,
        mime_type=attachment.mime_type,
        folder_id=folder_id,
    )
    return uploaded.file_url
