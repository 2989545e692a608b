import re
from typing import Optional
from pydantic import BaseModel, field_validator

from badgeguide.core.settings import DEFAULT_REPO_NAME

_USERNAME_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,38})$")

def _clean_username(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip().lstrip("@")
    if v and not _USERNAME_RE.match(v):
        raise ValueError("Usuario de GitHub inválido (letras, números y -; máx. 39)")
    return v

class AppConfig(BaseModel):
    repoName: str = DEFAULT_REPO_NAME
    githubUsername: str = ""
    includeHeroImage: bool = True
    includeSearchData: bool = True

    @field_validator("githubUsername")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return _clean_username(v)

class AppConfigUpdate(BaseModel):
    repoName: Optional[str] = None
    githubUsername: Optional[str] = None
    includeHeroImage: Optional[bool] = None
    includeSearchData: Optional[bool] = None

    @field_validator("githubUsername")
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        return _clean_username(v)

class SessionOut(BaseModel):
    id: str
    step: str
    statusMessage: str
    progress: int
    isGenerating: bool
    config: AppConfig
    badgeCount: int
    ownedCount: int
    # el resultado completo (data URI incluida) se sirve aparte en /result
    hasMarkdown: bool
    hasHeroImage: bool
    hasSearchContext: bool
    alert: Optional[str] = None

class SessionResultOut(BaseModel):
    id: str
    step: str
    markdown: str
    heroImageUrl: Optional[str] = None
    searchContext: Optional[str] = None

