"""Base model for persisted app documents.

App documents are stored as camelCase JSON (``textValue``, ``lastExecution``)
so documents written by the web editor load unchanged.  Python code uses the
snake_case attribute names; both spellings are accepted on input.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DocumentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        """Dump as a JSON-compatible dict using the persisted (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True)
