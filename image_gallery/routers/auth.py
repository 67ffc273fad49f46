from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
import logging

from image_gallery.auth.models import Credentials, RegisterResponse, TokenResponse
from image_gallery.auth.service import AuthService
from image_gallery.dependencies.dependencies import get_auth_service, get_settings
from image_gallery.settings import Settings

log = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(credentials: Credentials, auth: AuthService = Depends(get_auth_service)):
    """Registers a new user."""
    auth.register(credentials.username, credentials.password)
    return RegisterResponse(message="User registered successfully")

@router.post("/login", response_model=TokenResponse)
def login(
    credentials: Credentials,
    request: Request,
    auth: AuthService = Depends(get_auth_service),
):
    """Checks credentials, opens a session and returns a signed token."""
    username = auth.authenticate(credentials.username, credentials.password)
    auth.login(request, username)
    log.info("User %s logged in", username)
    return TokenResponse(token=auth.issue_token(username))

@router.post("/logout")
def logout(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """Ends the session and redirects to the login page."""
    auth.logout(request)
    return RedirectResponse(url=settings.logout_redirect_url, status_code=302)

@router.get("/user")
def current_user(request: Request, auth: AuthService = Depends(get_auth_service)):
    """Returns the logged in username, or an empty object."""
    username = auth.current_user(request)
    if username is None:
        return {}
    return {"username": username}
