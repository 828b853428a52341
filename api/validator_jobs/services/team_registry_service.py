from __future__ import annotations

import logging
import os

from validator_jobs.models.team import OperatorRole
from validator_jobs.models.team_registration import TeamRegistration, TeamRegistrationRequest
from validator_jobs.services.errors import InvalidInputError
from validator_jobs.services.team_registry_provider import (
    EvmTeamRegistryConfig,
    EvmTeamRegistryProvider,
    MisconfiguredTeamRegistryProvider,
    SimulatedTeamRegistryProvider,
    TeamRegistryProvider,
    is_valid_address,
)

logger = logging.getLogger(__name__)

_ROLE_VALUES = {role.value for role in OperatorRole}


def provider_from_env() -> TeamRegistryProvider:
    backend = (os.getenv("TEAM_REGISTRY_BACKEND") or "simulated").strip().lower()
    if backend in {"", "simulated", "mock"}:
        return SimulatedTeamRegistryProvider()
    if backend in {"evm", "evm_native"}:
        try:
            return EvmTeamRegistryProvider(EvmTeamRegistryConfig.from_env())
        except Exception as exc:
            return MisconfiguredTeamRegistryProvider(f"team_registry_misconfigured:{exc}")
    return MisconfiguredTeamRegistryProvider(f"unsupported_team_registry_backend:{backend}")


def validate_registration(request: TeamRegistrationRequest) -> None:
    if not request.team_name.strip():
        raise InvalidInputError("Team name is required")
    if not request.members:
        raise InvalidInputError("At least one team member is required")
    lengths = {
        len(request.members),
        len(request.github_usernames),
        len(request.reputation_scores),
        len(request.roles),
    }
    if len(lengths) != 1:
        raise InvalidInputError("members, githubUsernames, reputationScores and roles must have equal length")
    bad = [addr for addr in request.members if not is_valid_address(addr)]
    if bad:
        raise InvalidInputError(f"Invalid member address: {bad[0]}")
    if len({addr.lower() for addr in request.members}) != len(request.members):
        raise InvalidInputError("Duplicate member address")
    if any(score < 0 for score in request.reputation_scores):
        raise InvalidInputError("Reputation scores must be non-negative")
    unknown = [role for role in request.roles if role not in _ROLE_VALUES]
    if unknown:
        raise InvalidInputError(f"Unknown role: {unknown[0]}")


class TeamRegistryService:
    """Record a matched team with the on-chain team manager.

    Default backend is simulated. To submit real transactions set:
    - TEAM_REGISTRY_BACKEND=evm
    - TEAM_REGISTRY_RPC_URL
    - TEAM_REGISTRY_CHAIN_ID
    - TEAM_REGISTRY_PRIVATE_KEY
    - TEAM_REGISTRY_CONTRACT_ADDRESS
    """

    def __init__(self, provider: TeamRegistryProvider | None = None):
        self._provider: TeamRegistryProvider = provider or provider_from_env()

    @property
    def backend(self) -> str:
        return getattr(self._provider, "backend", self._provider.__class__.__name__)

    async def register(self, request: TeamRegistrationRequest) -> TeamRegistration:
        validate_registration(request)
        result = await self._provider.create_team(request)
        logger.info(
            "team_registered name=%s members=%s team_id=%s ovm=%s tx=%s",
            request.team_name,
            len(request.members),
            result.team_id,
            result.ovm_address,
            result.tx_hash,
        )
        return result
