import re

from pydantic import BaseModel, ConfigDict, field_validator

# GitHub owner and repository names: letters, digits, '-', '_', '.'
_NAME_RE = re.compile(r"[A-Za-z0-9_.\-]+")


class RepositoryIdentity(BaseModel):
    """``owner/name`` of a hosted repository, taken from the request path."""

    model_config = ConfigDict(frozen=True)

    owner: str
    name: str

    @field_validator("owner", "name")
    @classmethod
    def _safe_segment(cls, v: str) -> str:
        if not _NAME_RE.fullmatch(v) or v in {".", ".."}:
            raise ValueError(f"invalid repository path segment: {v!r}")
        return v

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


class LanguageStat(BaseModel):
    language: str
    code: int = 0
    comments: int = 0
    blanks: int = 0
