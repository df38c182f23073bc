####################################
# --- Storage schemas --- #
####################################

from datetime import datetime
from typing import List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)

DEFAULT_LISTING_LIMIT = 1000


class ObjectEntry(BaseModel):
    """One stored object as reported by a storage listing."""
    key: str = Field(
        description="The full key of the object.",
        json_schema_extra={"example": "someone_example_com_gen/download_1718000000000.html"},
    )
    uploaded: Optional[datetime] = Field(
        None,
        description="When the object was uploaded, if the backend reports it.",
    )


class ObjectListing(BaseModel):
    """Objects found under a key prefix."""
    objects: List[ObjectEntry] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "objects": [
                    {
                        "key": "someone_example_com_gen/download_1718000000000.html",
                        "uploaded": "2024-06-10T06:13:20Z",
                    }
                ],
            }
        }
    )

    @property
    def is_empty(self) -> bool:
        return len(self.objects) == 0


class StoredObject(BaseModel):
    """Body of a fetched object."""
    key: str
    body: bytes
    content_type: Optional[str] = None
