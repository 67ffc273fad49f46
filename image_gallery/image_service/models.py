from typing import List
from pydantic import BaseModel, ConfigDict, Field

class ImageUpload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(alias="imageUrl")
    title: str = ""
    description: str = ""
    tags: List[str] = []
    upload_time: str = Field(alias="uploadTime")

class ImageMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    description: str = ""
    tags: List[str] = []
    upload_time: str = Field("", alias="uploadTime")

class ImageListing(BaseModel):
    key: str
    url: str
    metadata: ImageMetadata
