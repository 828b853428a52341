from __future__ import annotations

import asyncio
import hashlib
import os
import re
import time
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
from eth_abi import decode as abi_decode
from eth_abi import encode as abi_encode
from eth_account import Account
from eth_utils import keccak, to_checksum_address

from validator_jobs.models.team_registration import TeamRegistration, TeamRegistrationRequest
from validator_jobs.services.errors import TeamRegistrationError, UpstreamUnavailableError


HEX_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")

CREATE_TEAM_SIGNATURE = "createTeamValidator(string,address[],string[],uint256[],string[])"
CREATE_TEAM_ARG_TYPES = ["string", "address[]", "string[]", "uint256[]", "string[]"]
TEAM_CREATED_SIGNATURE = "TeamCreated(uint256,string,address[],address,uint256)"
TEAM_CREATED_DATA_TYPES = ["string", "address[]", "address", "uint256"]


def is_valid_address(value: str) -> bool:
    return bool(HEX_ADDRESS_RE.fullmatch(value or ""))


def _selector(signature: str) -> bytes:
    return keccak(text=signature)[:4]


def _topic(signature: str) -> str:
    return f"0x{keccak(text=signature).hex()}"


def encode_create_team_call(request: TeamRegistrationRequest) -> str:
    args = abi_encode(
        CREATE_TEAM_ARG_TYPES,
        [
            request.team_name,
            [to_checksum_address(addr) for addr in request.members],
            list(request.github_usernames),
            list(request.reputation_scores),
            list(request.roles),
        ],
    )
    return f"0x{(_selector(CREATE_TEAM_SIGNATURE) + args).hex()}"


def _hex_to_bytes(value: str) -> bytes:
    raw = value[2:] if value.startswith("0x") else value
    return bytes.fromhex(raw)


def decode_team_created(receipt: dict[str, Any], contract_address: str) -> tuple[str, str]:
    """Return (team_id, ovm_address) from the TeamCreated log of a receipt."""
    expected_topic = _topic(TEAM_CREATED_SIGNATURE).lower()
    for log in receipt.get("logs") or []:
        if not isinstance(log, dict):
            continue
        if str(log.get("address", "")).lower() != contract_address.lower():
            continue
        topics = [str(t).lower() for t in log.get("topics") or []]
        if len(topics) < 2 or topics[0] != expected_topic:
            continue
        team_id = int(topics[1], 16)
        _, _, ovm_address, _ = abi_decode(TEAM_CREATED_DATA_TYPES, _hex_to_bytes(str(log.get("data", "0x"))))
        return str(team_id), to_checksum_address(ovm_address)
    raise TeamRegistrationError("team_created_event_not_found")


class TeamRegistryProvider(Protocol):
    backend: str

    async def create_team(self, request: TeamRegistrationRequest) -> TeamRegistration:
        ...


class SimulatedTeamRegistryProvider:
    """Deterministic stand-in for the team manager contract."""

    backend = "simulated"

    def __init__(self) -> None:
        self._next_team_id = 1

    async def create_team(self, request: TeamRegistrationRequest) -> TeamRegistration:
        seed = ":".join(
            [request.team_name, ",".join(request.members), ",".join(str(s) for s in request.reputation_scores)]
        )
        tx_digest = hashlib.sha256(f"tx:{seed}".encode("utf-8")).hexdigest()
        ovm_digest = hashlib.sha256(f"ovm:{seed}".encode("utf-8")).hexdigest()
        team_id = self._next_team_id
        self._next_team_id += 1
        return TeamRegistration(
            team_id=str(team_id),
            ovm_address=to_checksum_address(f"0x{ovm_digest[:40]}"),
            tx_hash=f"0x{tx_digest}",
        )


class MisconfiguredTeamRegistryProvider:
    backend = "misconfigured"

    def __init__(self, error_message: str):
        self._error_message = error_message

    async def create_team(self, request: TeamRegistrationRequest) -> TeamRegistration:
        raise UpstreamUnavailableError(self._error_message)


@dataclass(frozen=True)
class EvmTeamRegistryConfig:
    rpc_url: str
    chain_id: int
    private_key: str
    contract_address: str
    gas_limit: int = 3_000_000
    confirm_timeout_seconds: float = 90.0
    confirm_poll_seconds: float = 3.0
    rpc_timeout_seconds: float = 10.0

    @classmethod
    def from_env(cls) -> EvmTeamRegistryConfig:
        required = {
            "TEAM_REGISTRY_RPC_URL": (os.getenv("TEAM_REGISTRY_RPC_URL") or "").strip(),
            "TEAM_REGISTRY_CHAIN_ID": (os.getenv("TEAM_REGISTRY_CHAIN_ID") or "").strip(),
            "TEAM_REGISTRY_PRIVATE_KEY": (os.getenv("TEAM_REGISTRY_PRIVATE_KEY") or "").strip(),
            "TEAM_REGISTRY_CONTRACT_ADDRESS": (os.getenv("TEAM_REGISTRY_CONTRACT_ADDRESS") or "").strip(),
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            joined = ",".join(sorted(missing))
            raise ValueError(f"missing_required_env:{joined}")
        if not is_valid_address(required["TEAM_REGISTRY_CONTRACT_ADDRESS"]):
            raise ValueError("invalid_contract_address")

        return cls(
            rpc_url=required["TEAM_REGISTRY_RPC_URL"],
            chain_id=int(required["TEAM_REGISTRY_CHAIN_ID"]),
            private_key=required["TEAM_REGISTRY_PRIVATE_KEY"],
            contract_address=required["TEAM_REGISTRY_CONTRACT_ADDRESS"],
            gas_limit=int((os.getenv("TEAM_REGISTRY_GAS_LIMIT") or "3000000").strip()),
            confirm_timeout_seconds=float((os.getenv("TEAM_REGISTRY_CONFIRM_TIMEOUT_SECONDS") or "90").strip()),
            confirm_poll_seconds=float((os.getenv("TEAM_REGISTRY_CONFIRM_POLL_SECONDS") or "3").strip()),
            rpc_timeout_seconds=float((os.getenv("UPSTREAM_TIMEOUT_SECONDS") or "10").strip()),
        )


class EvmTeamRegistryProvider:
    """Submit ``createTeamValidator`` over JSON-RPC and read back the TeamCreated log."""

    backend = "evm"

    def __init__(self, config: EvmTeamRegistryConfig, account: Any = Account):
        self._config = config
        self._account = account
        self._sender_address = str(self._account.from_key(config.private_key).address)

    async def create_team(self, request: TeamRegistrationRequest) -> TeamRegistration:
        tx_hash = await self._send_transaction(encode_create_team_call(request))
        receipt = await self._wait_for_receipt(tx_hash)
        status = self._hex_or_int_to_int(receipt.get("status"))
        if status != 1:
            raise TeamRegistrationError("team_registration_reverted")
        team_id, ovm_address = decode_team_created(receipt, self._config.contract_address)
        return TeamRegistration(team_id=team_id, ovm_address=ovm_address, tx_hash=tx_hash)

    async def _send_transaction(self, data: str) -> str:
        nonce = await self._rpc_int("eth_getTransactionCount", [self._sender_address, "pending"])
        gas_price = await self._rpc_int("eth_gasPrice", [])
        tx = {
            "chainId": self._config.chain_id,
            "nonce": nonce,
            "to": to_checksum_address(self._config.contract_address),
            "value": 0,
            "gas": self._config.gas_limit,
            "gasPrice": gas_price,
            "data": data,
        }
        signed = self._account.sign_transaction(tx, self._config.private_key)
        raw_tx = getattr(signed, "raw_transaction", None) or getattr(signed, "rawTransaction", None)
        if raw_tx is None:
            raise TeamRegistrationError("evm_signing_failed_missing_raw_transaction")
        if isinstance(raw_tx, (bytes, bytearray)):
            raw_hex = f"0x{raw_tx.hex()}"
        else:
            raw_hex = str(raw_tx)
            if not raw_hex.startswith("0x"):
                raw_hex = f"0x{raw_hex}"

        tx_hash = await self._rpc("eth_sendRawTransaction", [raw_hex])
        if not isinstance(tx_hash, str) or not tx_hash.startswith("0x"):
            raise TeamRegistrationError("evm_send_failed_invalid_tx_hash")
        return tx_hash

    async def _wait_for_receipt(self, tx_hash: str) -> dict[str, Any]:
        deadline = time.monotonic() + self._config.confirm_timeout_seconds
        while time.monotonic() < deadline:
            receipt = await self._rpc("eth_getTransactionReceipt", [tx_hash])
            if receipt:
                if not isinstance(receipt, dict):
                    raise TeamRegistrationError("evm_rpc_invalid_receipt")
                return receipt
            await asyncio.sleep(self._config.confirm_poll_seconds)
        raise UpstreamUnavailableError("team_registration_confirmation_timeout")

    async def _rpc_int(self, method: str, params: list[Any]) -> int:
        result = await self._rpc(method, params)
        return self._hex_or_int_to_int(result)

    async def _rpc(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        try:
            async with httpx.AsyncClient(timeout=self._config.rpc_timeout_seconds) as client:
                response = await client.post(self._config.rpc_url, json=payload)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as exc:
            raise UpstreamUnavailableError(f"evm_rpc_unavailable:{exc.__class__.__name__}") from exc

        if not isinstance(body, dict):
            raise TeamRegistrationError("evm_rpc_invalid_response")
        if body.get("error") is not None:
            code = body["error"].get("code") if isinstance(body["error"], dict) else "unknown"
            raise TeamRegistrationError(f"evm_rpc_error:{code}")
        return body.get("result")

    def _hex_or_int_to_int(self, value: Any) -> int:
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            raw = value.strip()
            if raw.startswith("0x"):
                return int(raw, 16)
            return int(raw)
        raise TeamRegistrationError("evm_rpc_invalid_numeric_value")
