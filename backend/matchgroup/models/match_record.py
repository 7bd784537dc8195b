from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, SQLModel


class MatchRecord(SQLModel, table=True):
    """One stored match of a bracket or matchlist, in the flat record shape."""

    __table_args__ = (SAUniqueConstraint("match2id", name="uq_matchrecord_match2id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    match2id: str = Field(index=True)  # "<bracket id>_R01-M001" or "<bracket id>_0001"
    match2bracketid: str = Field(index=True)

    date: Optional[str] = Field(default=None)
    dateexact: Optional[str] = Field(default=None)  # "true" | "false" | "1" | "0"
    finished: Optional[str] = Field(default=None)
    mode: Optional[str] = Field(default=None)
    type: Optional[str] = Field(default=None)
    resulttype: Optional[str] = Field(default=None)  # "default" | "draw" | "np"
    walkover: Optional[str] = Field(default=None)  # "L" | "FF" | "DQ"
    winner: Optional[str] = Field(default=None)
    vod: Optional[str] = Field(default=None)

    # Nested data kept in the stored shape (0-based indexes, legacy fields)
    match2bracketdata: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    match2opponents: Optional[List[Dict[str, Any]]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    match2games: Optional[List[Dict[str, Any]]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    extradata: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    links: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    stream: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))

    created_at: datetime = Field(default_factory=datetime.utcnow)

    def to_record(self) -> Dict[str, Any]:
        """Flat record as consumed by the match group builders."""
        return {
            "match2id": self.match2id,
            "match2bracketid": self.match2bracketid,
            "date": self.date,
            "dateexact": self.dateexact,
            "finished": self.finished,
            "mode": self.mode,
            "type": self.type,
            "resulttype": self.resulttype,
            "walkover": self.walkover,
            "winner": self.winner,
            "vod": self.vod,
            "match2bracketdata": self.match2bracketdata,
            "match2opponents": self.match2opponents,
            "match2games": self.match2games,
            "extradata": self.extradata,
            "links": self.links,
            "stream": self.stream,
        }
