from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Any, ClassVar, Dict, Optional, Type, TypeVar

M = TypeVar("M", bound="DocumentModel")


class DocumentModel(BaseModel):
    """
    Base class for models mirroring Firestore documents.

    Python attributes are snake_case; stored keys are camelCase via aliases.
    ``id_field`` names the attribute carrying the document ID, which is not
    written into the document body.
    """

    id_field: ClassVar[str] = "id"

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @classmethod
    def from_document(cls: Type[M], doc_id: str, data: Optional[Dict[str, Any]]) -> M:
        payload = dict(data or {})
        payload[cls.id_field] = doc_id
        return cls.model_validate(payload)

    @classmethod
    def from_snapshot(cls: Type[M], snapshot) -> Optional[M]:
        """Build from a DocumentSnapshot; None when the document is missing."""
        if snapshot is None or not snapshot.exists:
            return None
        return cls.from_document(snapshot.id, snapshot.to_dict())

    @property
    def document_id(self) -> str:
        return getattr(self, self.id_field)

    def to_document(self, exclude_none: bool = False) -> Dict[str, Any]:
        return self.model_dump(
            by_alias=True,
            exclude={self.id_field},
            exclude_none=exclude_none,
        )
