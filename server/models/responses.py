from pydantic import BaseModel, ConfigDict, Field


class UploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    document_id: str = Field(alias="documentId")


class ChatResponse(BaseModel):
    message: str
    response: str


class HealthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    vector_store: str = Field(alias="vectorStore")
    entries: int | None = None
