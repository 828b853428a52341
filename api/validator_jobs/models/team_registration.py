from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from validator_jobs.models.team import Team


class TeamRegistrationRequest(BaseModel):
    """Arguments of ``createTeamValidator`` on the team manager contract."""

    model_config = ConfigDict(populate_by_name=True)

    team_name: str = Field(..., alias="teamName")
    members: list[str]
    github_usernames: list[str] = Field(..., alias="githubUsernames")
    reputation_scores: list[int] = Field(..., alias="reputationScores")
    roles: list[str]

    @classmethod
    def from_team(cls, team: Team, team_name: str) -> TeamRegistrationRequest:
        technical = {op.wallet_address for op in team.roles.technical}
        roles: list[str] = []
        for member in team.members:
            if member.wallet_address == team.roles.leader.wallet_address:
                roles.append("leader")
            elif member.wallet_address in technical:
                roles.append("technical")
            elif member.wallet_address == team.roles.financial.wallet_address:
                roles.append("financial")
            else:
                roles.append("member")
        return cls(
            team_name=team_name,
            members=[m.wallet_address for m in team.members],
            github_usernames=[m.github_username for m in team.members],
            reputation_scores=[m.reputation_score for m in team.members],
            roles=roles,
        )


class TeamRegistration(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    team_id: str = Field(..., alias="teamId")
    ovm_address: str = Field(..., alias="ovmAddress")
    tx_hash: str = Field(..., alias="txHash")
