from pydantic import BaseModel


class SignupRequest(BaseModel):
    email: str = ""
    password: str = ""
    name: str = ""


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class AccountResponse(BaseModel):
    id: str
    email: str
    name: str
    isNewUser: bool
