from pydantic import BaseModel, ConfigDict, Field


class StateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class MunicipalityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    state_id: int
    name: str


class GeoImport(BaseModel):
    states: list[StateOut] = Field(default_factory=list)
    municipalities: list[MunicipalityOut] = Field(default_factory=list)


class GeoImportOut(BaseModel):
    states: int
    municipalities: int
