from pydantic import BaseModel, Field

class Credentials(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

class RegisterResponse(BaseModel):
    message: str

class TokenResponse(BaseModel):
    token: str
