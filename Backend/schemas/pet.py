from datetime import datetime

from pydantic import BaseModel, Field


class PetCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    species: str = Field(min_length=1, max_length=50)
    breed: str | None = Field(default=None, max_length=100)
    age: str | None = Field(default=None, max_length=30)
    weight: str | None = Field(default=None, max_length=30)
    photo: str | None = Field(default=None, max_length=500)


class PetUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)
    species: str | None = Field(default=None, min_length=1, max_length=50)
    breed: str | None = Field(default=None, max_length=100)
    age: str | None = Field(default=None, max_length=30)
    weight: str | None = Field(default=None, max_length=30)
    photo: str | None = Field(default=None, max_length=500)


class PetOut(BaseModel):
    id: int
    name: str
    species: str
    breed: str | None
    age: str | None
    weight: str | None
    photo: str | None
    created_at: datetime | None

    class Config:
        from_attributes = True
