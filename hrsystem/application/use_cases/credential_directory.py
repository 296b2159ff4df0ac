"""
Credential Directory - Candidate registration and authentication.
"""

import logging
from typing import Optional

from hrsystem.application.interfaces import KeyConflictError, StoragePort
from hrsystem.domain.entities import Candidate
from hrsystem.domain.value_objects import Credentials
from hrsystem.infrastructure.security import CryptoService
from .results import OperationResult, Outcome


logger = logging.getLogger(__name__)


class CredentialDirectory:
    """
    Manages candidate identity records.

    Credentials are kept as scrypt digests; an unknown username and a wrong
    credential look the same to the caller.
    """

    def __init__(self, storage: StoragePort, crypto: CryptoService) -> None:
        self.storage = storage
        self.crypto = crypto
        self._dummy_digest: Optional[str] = None

    async def register(self, username: str, credential: str) -> OperationResult[int]:
        """
        Register a new candidate.

        Returns:
            Result holding the new candidate id, CONFLICT if the username is
            taken, INVALID_INPUT if username or credential is empty.
        """
        try:
            credentials = Credentials(username=username, password=credential)
        except ValueError as e:
            return OperationResult.failure(Outcome.INVALID_INPUT, str(e))

        async with self.storage.candidates.lock(credentials.username):
            if await self.storage.find_candidate(credentials.username) is not None:
                return self._username_taken(credentials.username)

            candidate = Candidate(
                username=credentials.username,
                credential=await self.crypto.hash_credential_async(credentials.password),
            )
            try:
                candidate_id = await self.storage.candidates.add(candidate)
            except KeyConflictError:
                return self._username_taken(credentials.username)

        logger.info(f"Registered candidate {credentials.username} (id={candidate_id})")
        return OperationResult.success(candidate_id)

    def _username_taken(self, username: str) -> OperationResult[int]:
        logger.info(f"Registration refused, username {username} is taken")
        return OperationResult.failure(Outcome.CONFLICT, f"Username '{username}' is already taken")

    async def authenticate(self, username: str, credential: str) -> Optional[Candidate]:
        """
        Check a username/credential pair.

        Returns:
            The candidate on an exact credential match, None otherwise.
        """
        candidate = await self.storage.find_candidate(username) if username else None
        if candidate is None:
            # Spend the same hashing work as a real check
            await self.crypto.verify_credential_async(credential, await self._get_dummy_digest())
            return None

        if not await self.crypto.verify_credential_async(credential, candidate.credential):
            return None
        return candidate

    async def get_by_username(self, username: str) -> Optional[Candidate]:
        return await self.storage.find_candidate(username)

    async def _get_dummy_digest(self) -> str:
        if self._dummy_digest is None:
            self._dummy_digest = await self.crypto.hash_credential_async("")
        return self._dummy_digest
