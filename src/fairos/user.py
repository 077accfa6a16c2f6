"""User account operations: signup, login, import, logout and account info."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from mnemonic import Mnemonic

from fairos_core.errors import UserError

from fairos.base import BaseClient
from fairos.schemas import (
    ImportResponse,
    LoggedInResponse,
    MessageResponse,
    PresentResponse,
    SignupResponse,
    UserExportResponse,
    UserStatResponse,
)

logger = logging.getLogger(__name__)

DOMAIN = "user"

MNEMONIC_ENTROPY_BYTES = 16


def generate_mnemonic(entropy: Optional[bytes] = None) -> str:
    """
    Generate a 12-word BIP-39 English mnemonic usable with signup().

    Args:
        entropy: 16 bytes of entropy (default: os.urandom). Passing the same
                 entropy always yields the same phrase.

    Raises:
        ValueError: entropy is not 16 bytes long
    """
    if entropy is None:
        entropy = os.urandom(MNEMONIC_ENTROPY_BYTES)
    elif len(entropy) != MNEMONIC_ENTROPY_BYTES:
        raise ValueError(
            f"Mnemonic entropy must be {MNEMONIC_ENTROPY_BYTES} bytes, got {len(entropy)}"
        )
    return Mnemonic("english").to_mnemonic(entropy)


@dataclass(frozen=True)
class UserExport:
    username: str
    address: str


@dataclass(frozen=True)
class UserInfo:
    username: str
    address: str


class UserOperations(BaseClient):
    """User endpoints. Session-creating calls store the returned token."""

    generate_mnemonic = staticmethod(generate_mnemonic)

    def _store_session(self, username: str, token: Optional[str], path: str) -> None:
        if not token:
            raise UserError(
                f"Service did not return a session cookie for '{username}'",
                context={"api_endpoint": path, "username": username},
            )
        self.set_cookie(username, token)
        logger.info("Session stored", extra={"username": username, "api_endpoint": path})

    async def signup(
        self,
        username: str,
        password: str,
        mnemonic: Optional[str] = None,
    ) -> tuple[str, Optional[str]]:
        """
        Create an account and log it in.

        Args:
            username: New account name
            password: Account password
            mnemonic: Existing 12-word mnemonic (None = the service generates one)

        Returns:
            (address, mnemonic). The mnemonic is only returned when the
            service generated it.

        Raises:
            UsernameAlreadyExistsError: Account name is taken
            UserError: Any other rejection, or no session cookie returned
        """
        res, token = await self._post(
            DOMAIN,
            "/user/signup",
            {"user_name": username, "password": password, "mnemonic": mnemonic},
            model=SignupResponse,
        )
        self._store_session(username, token, "/user/signup")
        return res.address, res.mnemonic

    async def login(self, username: str, password: str) -> None:
        """
        Raises:
            InvalidUsernameError: Unknown account
            InvalidPasswordError: Wrong password
            UserError: Any other rejection
        """
        _, token = await self._post(
            DOMAIN,
            "/user/login",
            {"user_name": username, "password": password},
        )
        self._store_session(username, token, "/user/login")

    async def import_with_address(self, username: str, password: str, address: str) -> str:
        """Import an existing account by its address. Returns the address."""
        res, token = await self._post(
            DOMAIN,
            "/user/import",
            {"user_name": username, "password": password, "address": address},
            model=ImportResponse,
        )
        self._store_session(username, token, "/user/import")
        return res.address

    async def import_with_mnemonic(self, username: str, password: str, mnemonic: str) -> str:
        """Import an existing account from its mnemonic. Returns the address."""
        res, token = await self._post(
            DOMAIN,
            "/user/import",
            {"user_name": username, "password": password, "mnemonic": mnemonic},
            model=ImportResponse,
        )
        self._store_session(username, token, "/user/import")
        return res.address

    async def delete_user(self, username: str, password: str) -> None:
        await self._delete(DOMAIN, "/user/delete", {"password": password}, username=username)
        self.remove_cookie(username)

    async def user_exists(self, username: str) -> bool:
        res = await self._get(
            DOMAIN, "/user/present", {"user_name": username}, model=PresentResponse
        )
        return res.present

    async def is_logged_in(self, username: str) -> bool:
        res = await self._get(
            DOMAIN, "/user/isloggedin", {"user_name": username}, model=LoggedInResponse
        )
        return res.loggedin

    async def logout(self, username: str) -> None:
        await self._post(DOMAIN, "/user/logout", username=username, model=MessageResponse)
        self.remove_cookie(username)

    async def export_user(self, username: str) -> UserExport:
        res, _ = await self._post(
            DOMAIN, "/user/export", username=username, model=UserExportResponse
        )
        return UserExport(username=res.user_name, address=res.address)

    async def user_info(self, username: str) -> UserInfo:
        res = await self._get(DOMAIN, "/user/stat", username=username, model=UserStatResponse)
        return UserInfo(username=res.user_name, address=res.address)


__all__ = ["UserExport", "UserInfo", "UserOperations", "generate_mnemonic"]
