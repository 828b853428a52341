"""Greedy, reputation-ordered team formation.

Operators are sorted by reputation (stable, descending) and each unused
operator at or above the leader threshold seeds a team. The seed pulls in
one technical operator, one financial operator, then the strongest
remaining operators until the team is full. A tentative team is kept only
when it is large enough and its mean reputation clears the acceptance bar.
Operators drawn into a rejected team stay consumed unless
``release_rejected`` is set.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional, Sequence

from validator_jobs.models.team import Operator, OperatorRole, Team, TeamRoles
from validator_jobs.services.errors import InvalidInputError

logger = logging.getLogger(__name__)

LEADER_MIN_REPUTATION = 600
TECHNICAL_MIN_REPUTATION = 500
FINANCIAL_MIN_REPUTATION = 450
MEMBER_MIN_REPUTATION = 400
TEAM_MIN_AVERAGE = 600

TECHNICAL_SKILLS = frozenset({"solidity", "ethereum"})
FINANCIAL_SKILLS = frozenset({"defi", "treasury"})

ROLE_COUNT = len(OperatorRole)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def is_technical(operator: Operator) -> bool:
    return operator.preferred_role == OperatorRole.TECHNICAL or any(
        skill in TECHNICAL_SKILLS for skill in operator.skills
    )


def is_financial(operator: Operator) -> bool:
    return operator.preferred_role == OperatorRole.FINANCIAL or any(
        skill in FINANCIAL_SKILLS for skill in operator.skills
    )


def _first_unused(
    ranked: Sequence[Operator],
    used: set[str],
    min_reputation: int,
    predicate: Optional[Callable[[Operator], bool]] = None,
) -> Optional[Operator]:
    for candidate in ranked:
        if candidate.wallet_address in used or candidate.reputation_score < min_reputation:
            continue
        if predicate is None or predicate(candidate):
            return candidate
    return None


def team_strength(members: Sequence[Operator]) -> int:
    """Score 0-100 blending mean reputation, reputation spread, role and skill coverage."""
    if not members:
        return 0
    reputations = [m.reputation_score for m in members]
    avg = sum(reputations) / len(reputations)
    variance = sum((rep - avg) ** 2 for rep in reputations) / len(reputations)
    diversity_score = max(0.0, 100 - math.sqrt(variance) / 10)

    role_coverage = len({m.preferred_role for m in members}) / ROLE_COUNT * 100
    skill_diversity = min(len({skill for m in members for skill in m.skills}) * 10, 100)

    strength = (avg / 10) * 0.5 + diversity_score * 0.2 + role_coverage * 0.15 + skill_diversity * 0.15
    return max(0, min(_round_half_up(min(strength, 100)), 100))


def _assign_roles(leader: Operator, members: list[Operator]) -> TeamRoles:
    financial = next((m for m in members if is_financial(m)), members[-1])
    return TeamRoles(
        leader=leader,
        technical=[m for m in members if is_technical(m)],
        financial=financial,
    )


def _require_operators(operator_count: int, min_team_size: int) -> None:
    if operator_count < min_team_size:
        raise InvalidInputError(f"At least {min_team_size} operators required for team matching")


def match_teams(
    operators: Sequence[Operator],
    min_team_size: int = 3,
    max_team_size: int = 5,
    *,
    release_rejected: bool = False,
) -> list[Team]:
    _require_operators(len(operators), min_team_size)

    ranked = sorted(operators, key=lambda op: op.reputation_score, reverse=True)
    used: set[str] = set()
    teams: list[Team] = []

    for leader in ranked:
        if leader.wallet_address in used or leader.reputation_score < LEADER_MIN_REPUTATION:
            continue

        members = [leader]
        used.add(leader.wallet_address)

        technical = _first_unused(ranked, used, TECHNICAL_MIN_REPUTATION, is_technical)
        if technical is not None:
            members.append(technical)
            used.add(technical.wallet_address)

        financial = _first_unused(ranked, used, FINANCIAL_MIN_REPUTATION, is_financial)
        if financial is not None:
            members.append(financial)
            used.add(financial.wallet_address)

        while len(members) < max_team_size:
            extra = _first_unused(ranked, used, MEMBER_MIN_REPUTATION)
            if extra is None:
                break
            members.append(extra)
            used.add(extra.wallet_address)

        average = sum(m.reputation_score for m in members) / len(members)
        if len(members) >= min_team_size and average >= TEAM_MIN_AVERAGE:
            teams.append(
                Team(
                    team_id=f"team_{len(teams) + 1}",
                    members=members,
                    average_reputation=_round_half_up(average),
                    team_strength=team_strength(members),
                    roles=_assign_roles(leader, members),
                )
            )
            continue

        logger.debug(
            "team_rejected leader=%s size=%s average=%.2f release=%s",
            leader.wallet_address,
            len(members),
            average,
            release_rejected,
        )
        if release_rejected:
            # The leader stays consumed so the outer loop always advances.
            for member in members[1:]:
                used.discard(member.wallet_address)

    return teams
