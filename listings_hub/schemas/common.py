from pydantic import BaseModel, ConfigDict, Field


class IdResponse(BaseModel):
    id: str


class PaginationOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    page: int
    limit: int
    total_pages: int = Field(alias="totalPages")
