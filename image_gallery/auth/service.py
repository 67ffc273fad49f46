from datetime import datetime, timedelta, timezone
from typing import Optional
import logging
import jwt
from fastapi import Request
from passlib.context import CryptContext
from botocore.exceptions import BotoCoreError, ClientError

from image_gallery.storage.users import UserStore
from image_gallery.settings import Settings
from image_gallery.exceptions import AuthenticationException, DynamoDBException

log = logging.getLogger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

SESSION_USER_KEY = "username"

class AuthService:
    """
        Username/password accounts backed by the users table.

        A successful login stores the username in the signed session cookie,
        which is what gates the upload routes. The JWT returned alongside it
        is issued for clients but no route verifies it.
    """

    def __init__(self, users: UserStore, settings: Settings):
        self.users = users
        self.settings = settings

    def register(self, username: str, password: str):
        """Creates a user with a bcrypt password hash."""
        password_hash = pwd_context.hash(password)
        try:
            self.users.create_user(username, password_hash)
        except (BotoCoreError, ClientError) as e:
            log.error("Error registering user %s: %s", username, e)
            raise DynamoDBException("Registration failed")

    def authenticate(self, username: str, password: str) -> str:
        """Returns the username when the password matches the stored hash."""
        user = self._lookup(username)
        if not user or not pwd_context.verify(password, user["password"]):
            log.info("Failed login for %s", username)
            raise AuthenticationException("Invalid username or password")
        return user["username"]

    def issue_token(self, username: str) -> str:
        """Signs a JWT carrying the username."""
        expire = datetime.now(timezone.utc) + timedelta(minutes=self.settings.jwt_expire_minutes)
        payload = {"username": username, "exp": expire}
        return jwt.encode(payload, self.settings.jwt_secret, algorithm=self.settings.jwt_algorithm)

    def login(self, request: Request, username: str):
        request.session[SESSION_USER_KEY] = username

    def logout(self, request: Request):
        request.session.clear()

    def current_user(self, request: Request) -> Optional[str]:
        """Username of the session, if it still belongs to an existing user."""
        username = request.session.get(SESSION_USER_KEY)
        if not username:
            return None
        if not self._lookup(username):
            log.warning("Session refers to unknown user %s", username)
            request.session.pop(SESSION_USER_KEY, None)
            return None
        return username

    def _lookup(self, username: str):
        try:
            return self.users.get_user(username)
        except (BotoCoreError, ClientError) as e:
            log.error("Error fetching user %s: %s", username, e)
            raise DynamoDBException("Failed to fetch user")
