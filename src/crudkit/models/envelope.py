"""
Error envelope: the JSON body of every failed response.
"""

from pydantic import BaseModel, Field

from crudkit.errors import CrudKitError

UNKNOWN_ERROR = "Unknown error"


class ErrorEnvelope(BaseModel):
    status_code: int = Field(default=500, alias="statusCode")
    message: str = UNKNOWN_ERROR

    model_config = {"populate_by_name": True}

    @classmethod
    def from_error(cls, error: CrudKitError) -> "ErrorEnvelope":
        return cls(status_code=error.status, message=error.message or UNKNOWN_ERROR)

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)
