from typing import Any, Optional

from pydantic import BaseModel, Field


class FlightSearchQuery(BaseModel):
    # Left untyped so any bad value is rejected as a 400 by the
    # pipeline instead of a 422 from request validation
    numberOfDays: Optional[Any] = Field(
        None,
        description="Length of the trip in days"
    )

    departureAirport: Optional[Any] = Field(
        None,
        description="IATA code of the departure airport"
    )
