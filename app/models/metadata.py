"""Dataset metadata record."""

from dataclasses import dataclass, field

from app.exceptions import ParseError


@dataclass
class DataMetadata:
    """Contents of ``metadata/last-updated.json``."""

    last_updated: str
    updated_by: str = ""
    version: str = ""
    data_version: dict[str, str] = field(default_factory=dict)
    notes: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "DataMetadata":
        try:
            return cls(
                last_updated=data["lastUpdated"],
                updated_by=data.get("updatedBy") or "",
                version=data.get("version") or "",
                data_version=dict(data.get("dataVersion") or {}),
                notes=data.get("notes") or "",
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ParseError(f"Malformed metadata document: {e!r}") from e

    def to_dict(self) -> dict:
        return {
            "lastUpdated": self.last_updated,
            "updatedBy": self.updated_by,
            "version": self.version,
            "dataVersion": self.data_version,
            "notes": self.notes,
        }
