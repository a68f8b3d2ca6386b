"""Reusable base models for configuration documents and protocol records."""

from pathlib import Path
from typing import Any, Self

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    A base model that converts field names to camel case when serializing.

    For example, the field name `parent_hash` in a Python model will be
    represented as `parentHash` in JSON, which is the convention of
    Ethereum chain specification files.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_default=True,
        arbitrary_types_allowed=True,
    )

    def copy(self: Self, **kwargs: Any) -> Self:
        """Create a copy of the model with the updated fields that are validated."""
        return self.__class__(**(self.model_dump(exclude_unset=True) | kwargs))


class ConfigModel(CamelModel):
    """
    An immutable model for operator-supplied configuration documents.

    Validation is lax so numeric strings and hex strings can be coerced by
    field validators. Unknown keys are ignored, as other clients may emit
    fields this package does not interpret.
    """

    model_config = CamelModel.model_config | {
        "extra": "ignore",
        "frozen": True,
    }

    def to_json(self, indent: int | None = 4) -> str:
        """Serialize with wire aliases."""
        return self.model_dump_json(by_alias=True, indent=indent)

    @classmethod
    def from_json(cls, content: str | bytes) -> Self:
        """Parse and validate a JSON document."""
        return cls.model_validate_json(content)

    @classmethod
    def from_json_file(cls, path: Path | str) -> Self:
        """
        Load a JSON document from a file.

        Raises:
            FileNotFoundError: If the file does not exist.
            pydantic.ValidationError: If the data fails validation.
        """
        return cls.from_json(Path(path).read_bytes())


class StrictBaseModel(CamelModel):
    """A strict, immutable pydantic base model for records built in code."""

    model_config = CamelModel.model_config | {
        "extra": "forbid",
        "frozen": True,
        "strict": True,
    }
