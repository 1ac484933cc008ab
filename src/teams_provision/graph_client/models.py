"""Pydantic models for Microsoft Graph entities."""

from typing import Any

from pydantic import BaseModel, Field


class User(BaseModel):
    """Directory user (subset of fields)."""

    id: str
    user_principal_name: str | None = Field(default=None, alias="userPrincipalName")
    display_name: str | None = Field(default=None, alias="displayName")
    mail: str | None = None

    model_config = {"populate_by_name": True, "extra": "ignore"}


class Group(BaseModel):
    """Directory group (subset of fields)."""

    id: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    mail_nickname: str | None = Field(default=None, alias="mailNickname")
    mail: str | None = None
    description: str | None = None
    group_types: list[str] = Field(default_factory=list, alias="groupTypes")
    visibility: str | None = None

    model_config = {"populate_by_name": True, "extra": "ignore"}


class DirectoryObject(BaseModel):
    """Any object returned from a membership listing."""

    id: str
    odata_type: str | None = Field(default=None, alias="@odata.type")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class Team(BaseModel):
    """Team bound to a unified group."""

    id: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    web_url: str | None = Field(default=None, alias="webUrl")
    is_archived: bool | None = Field(default=None, alias="isArchived")
    member_settings: dict[str, Any] | None = Field(default=None, alias="memberSettings")

    model_config = {"populate_by_name": True, "extra": "ignore"}
