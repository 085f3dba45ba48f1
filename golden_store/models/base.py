from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def gen_id() -> str:
    return str(uuid4())


class StoreModel(BaseModel):
    """
    Base for persisted records.

    Field names are snake_case in Python and camelCase on disk and in the
    export bundle (``by_alias=True``). The remote table store uses the plain
    snake_case field names.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    def to_row(self) -> dict:
        return self.model_dump(mode="json")
