"""
ValidationFailure model representing one failing field of an object save (ephemeral).
"""

from pydantic import BaseModel, Field

# Suffix the editor uses to map an error message back to its form field
FIELD_NAME_MARKER = "fieldname="


class ValidationFailure(BaseModel):
    """
    A single field that did not satisfy its rule.

    At most one failure is produced per field and evaluation pass.

    Attributes:
        field_name: Field that failed
        message: Custom message of the rule, or the default text of the failing check
    """

    field_name: str = Field("", alias="fieldName")
    message: str

    class Config:
        populate_by_name = True
        frozen = True
        json_schema_extra = {
            "example": {
                "fieldName": "sku",
                "message": "Minimum length is 3"
            }
        }

    def encode(self) -> str:
        """Encode as "<message> fieldname=<field>" for the host's failure channel."""
        return f"{self.message} {FIELD_NAME_MARKER}{self.field_name}"

    def with_field_name(self, field_name: str) -> "ValidationFailure":
        return self.model_copy(update={"field_name": field_name})
