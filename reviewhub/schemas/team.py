"""Team & User Schemas — /team and /users request bodies and response shapes.

Invariants:
    - user_id, username, team_name are non-empty after stripping
    - team_name is "" in UserOut when the user has no team
"""

from pydantic import BaseModel, Field

from reviewhub.core.domain_types import Team, TeamMember, User, UserId
from reviewhub.schemas.common import StrictRequest


class TeamMemberIn(StrictRequest):
    user_id: str = Field(min_length=1, max_length=255)
    username: str = Field(min_length=1, max_length=255)
    is_active: bool = True

    def to_member(self) -> TeamMember:
        return TeamMember(
            user_id=UserId(self.user_id),
            username=self.username,
            is_active=self.is_active,
        )


class TeamCreate(StrictRequest):
    team_name: str = Field(min_length=1, max_length=255)
    members: list[TeamMemberIn] = Field(default_factory=list)


class SetIsActive(StrictRequest):
    user_id: str = Field(min_length=1, max_length=255)
    is_active: bool


class TeamMemberOut(BaseModel):
    user_id: str
    username: str
    is_active: bool


class TeamOut(BaseModel):
    team_name: str
    members: list[TeamMemberOut]

    @classmethod
    def from_team(cls, team: Team) -> "TeamOut":
        return cls(
            team_name=team.name,
            members=[
                TeamMemberOut(
                    user_id=m.user_id, username=m.username, is_active=m.is_active,
                )
                for m in team.members
            ],
        )


class UserOut(BaseModel):
    user_id: str
    username: str
    team_name: str
    is_active: bool

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(
            user_id=user.id,
            username=user.username,
            team_name=user.team_name or "",
            is_active=user.is_active,
        )


class TeamResponse(BaseModel):
    team: TeamOut


class UserResponse(BaseModel):
    user: UserOut
