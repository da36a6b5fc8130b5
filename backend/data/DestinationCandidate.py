from typing import List

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class DestinationCandidate(BaseModel):
    """A destination proposed by the suggestion source, not yet priced."""

    model_config = ConfigDict(populate_by_name=True)

    city: str = Field(..., min_length=1)
    iata_code: str = Field(..., min_length=1, alias="iataCode")


# validates the whole suggestion payload in one go
CandidateList = TypeAdapter(List[DestinationCandidate])
