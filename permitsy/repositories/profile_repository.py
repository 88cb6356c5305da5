"""User profile role repository."""

from loguru import logger

from permitsy.constants import Tables, UserRoles
from permitsy.core.exceptions import BackendError
from permitsy.models.backend import BackendClient


class ProfileRepository:
    """Reads and changes the role stored on a user's profile."""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def set_role(self, user_id: str, role: str) -> bool:
        """
        Set the role of a user.

        Args:
            user_id: Profile ID (same as the auth user ID)
            role: New role

        Returns:
            True if the update was accepted
        """
        if not user_id:
            return False
        try:
            await (
                self.backend.table(Tables.PROFILES)
                .update({"role": role}, returning=False)
                .eq("id", user_id)
                .execute()
            )
        except BackendError as e:
            logger.error(f"Error setting role of user {user_id}: {e}")
            return False
        logger.info(f"User {user_id} now has role '{role}'")
        return True

    async def set_user_as_admin(self, user_id: str) -> bool:
        """Grant the admin role to an existing user."""
        return await self.set_role(user_id, UserRoles.ADMIN)

    async def is_admin(self, user_id: str) -> bool:
        """
        Whether a user holds the admin role.

        Args:
            user_id: Profile ID

        Returns:
            False when the profile is missing or cannot be read
        """
        if not user_id:
            return False
        try:
            row = await (
                self.backend.table(Tables.PROFILES)
                .select("role")
                .eq("id", user_id)
                .single()
                .execute()
            )
        except BackendError as e:
            logger.error(f"Error reading role of user {user_id}: {e}")
            return False
        return (row or {}).get("role") == UserRoles.ADMIN
