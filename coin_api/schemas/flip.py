from pydantic import BaseModel, Field


class FlipResult(BaseModel):
    heads: int = Field(ge=0)
    tails: int = Field(ge=0)


class RandomFlipResult(FlipResult):
    message: str


class CurrentCounts(BaseModel):
    heads: int
    tails: int
    total_flips: int


class FlipStats(BaseModel):
    total_flips: int
    heads: int
    tails: int
    heads_percentage: str = Field(examples=["50.00%"])
    tails_percentage: str = Field(examples=["50.00%"])


class FlipError(BaseModel):
    error: str
