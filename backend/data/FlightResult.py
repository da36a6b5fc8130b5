from pydantic import BaseModel, Field


class FlightResult(BaseModel):
    destination: str
    price: float = Field(..., ge=0)
