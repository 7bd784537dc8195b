from typing import Any, Dict, Optional

from sqlmodel import Field, SQLModel


class TeamTemplate(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    template: str = Field(index=True, unique=True)  # Lowercase template key
    name: str  # Display name
    bracketname: str
    shortname: str
    page: Optional[str] = Field(default=None)

    def to_raw(self) -> Dict[str, Any]:
        return {
            "bracketname": self.bracketname,
            "name": self.name,
            "page": self.page,
            "shortname": self.shortname,
        }
