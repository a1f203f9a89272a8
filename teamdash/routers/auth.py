import logging
from fastapi import APIRouter, Depends, status

from teamdash.core.exceptions import AuthenticationError
from teamdash.core.schemas import ApiResponse
from teamdash.dependencies import get_auth_gateway, require_bearer_token
from teamdash.gateways import AuthGateway, Failure, unwrap
from teamdash.schemas.auth import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, auth: AuthGateway = Depends(get_auth_gateway)):
    result = auth.sign_up(
        data.email,
        data.password,
        {"full_name": data.full_name, "role": data.role.value},
    )
    created = unwrap(result, "Registration failed")

    logger.info(f"Registered {data.email} as {data.role.value}")
    return ApiResponse.ok(created, message="User registered successfully").to_response(status.HTTP_201_CREATED)


@router.post("/login")
def login(data: LoginRequest, auth: AuthGateway = Depends(get_auth_gateway)):
    result = auth.sign_in(data.email, data.password)
    if isinstance(result, Failure):
        raise AuthenticationError("Invalid credentials", body=result.body)

    session = result.payload or {}
    return ApiResponse.ok(
        {
            "access_token": session.get("access_token"),
            "refresh_token": session.get("refresh_token"),
            "expires_in": session.get("expires_in"),
            "user": session.get("user"),
        },
        message="Login successful",
    ).to_response()


@router.get("/me")
def get_me(
    token: str = Depends(require_bearer_token),
    auth: AuthGateway = Depends(get_auth_gateway),
):
    result = auth.resolve_user(token)
    if isinstance(result, Failure):
        raise AuthenticationError("Unauthorized", body=result.body)
    return ApiResponse.ok(result.payload).to_response()


@router.post("/logout")
def logout():
    # Tokens are stateless; the client discards them.
    return ApiResponse.ok(message="Logged out successfully. Clear tokens on client side.").to_response()
