from fastapi import Depends, Request
from image_gallery.auth.service import AuthService
from image_gallery.exceptions import AuthenticationException
from image_gallery.image_service.service import UploadFlow, ListingFlow
from image_gallery.settings import Settings

def get_settings(request: Request) -> Settings:
    """Dependency provider for the application Settings"""
    return request.app.state.settings

def get_upload_flow(request: Request) -> UploadFlow:
    """Dependency provider for UploadFlow"""
    return UploadFlow(s3=request.app.state.s3, db=request.app.state.db)

def get_listing_flow(request: Request) -> ListingFlow:
    """Dependency provider for ListingFlow"""
    return ListingFlow(s3=request.app.state.s3, db=request.app.state.db)

def get_auth_service(request: Request) -> AuthService:
    """Dependency provider for AuthService"""
    return AuthService(users=request.app.state.users, settings=request.app.state.settings)

def require_user(
    request: Request,
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """Rejects anonymous requests when auth_required is enabled."""
    if not settings.auth_required:
        return None
    username = auth.current_user(request)
    if username is None:
        raise AuthenticationException()
    return username
