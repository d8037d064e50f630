"""HTTP route definitions for the account service."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from ..domain.account import Account
from ..domain.contracts import CreateAccountInput, UpdateAccountInput
from ..domain.errors import (
    AccountInactiveError,
    AccountNotFoundError,
    AccountStateConflictError,
    DuplicateEmailError,
    InvalidCredentialsError,
)
from ..domain.service import AccountService
from .visibility import normalize

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1")


EMAIL_MAX_LENGTH = 180


def _check_name(value: str | None) -> str | None:
    if value is not None and not value.strip():
        raise ValueError("must not be blank")
    return value


def _check_email(value: str | None) -> str | None:
    if value is not None and len(value) > EMAIL_MAX_LENGTH:
        raise ValueError(f"must be at most {EMAIL_MAX_LENGTH} characters")
    return value


class AccountResponse(BaseModel):
    """Serialised ``account:read`` representation of an `Account` aggregate."""

    account_id: str
    name: str
    email: str
    phone_number: str | None
    roles: list[str]
    has_password: bool
    state: str
    created_at: datetime
    activated_at: datetime | None
    deactivated_at: datetime | None
    last_seen_at: datetime | None
    confirmation_token: str | None

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        """Build a response model from the domain aggregate."""
        return cls(**normalize(account))


class CreateAccountRequest(BaseModel):
    """``account:write`` payload accepted when registering an account."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=3, max_length=255)
    email: EmailStr
    phone_number: str | None = Field(default=None, max_length=30)
    password: str = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str | None) -> str | None:
        return _check_name(value)

    @field_validator("email")
    @classmethod
    def email_fits_column(cls, value: str | None) -> str | None:
        return _check_email(value)


class UpdateAccountRequest(BaseModel):
    """Partial ``account:write`` payload; an explicit ``null`` phone number clears it."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=3, max_length=255)
    email: EmailStr | None = None
    phone_number: str | None = Field(default=None, max_length=30)
    password: str | None = Field(default=None, min_length=1)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str | None) -> str | None:
        return _check_name(value)

    @field_validator("email")
    @classmethod
    def email_fits_column(cls, value: str | None) -> str | None:
        return _check_email(value)

    @model_validator(mode="after")
    def only_phone_number_clears(self) -> "UpdateAccountRequest":
        nulled = sorted(
            name
            for name in self.model_fields_set - {"phone_number"}
            if getattr(self, name) is None
        )
        if nulled:
            raise ValueError(f"{', '.join(nulled)} cannot be null")
        return self


class ConfirmAccountRequest(BaseModel):
    token: str = Field(..., min_length=1)


class ReplaceRolesRequest(BaseModel):
    roles: list[str]


class TokenRequest(BaseModel):
    """Login credentials exchanged for a bearer token."""

    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    account_id: str


def get_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


@router.post("/accounts", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def register_account(
    payload: CreateAccountRequest,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Register an unconfirmed account."""
    try:
        account = service.register_account(
            CreateAccountInput(
                name=payload.name,
                email=payload.email,
                password=payload.password,
                phone_number=payload.phone_number,
            )
        )
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return AccountResponse.from_domain(account)


@router.post("/accounts/confirm", response_model=AccountResponse)
def confirm_account(
    payload: ConfirmAccountRequest,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Activate the account holding the given confirmation token."""
    try:
        account = service.confirm(payload.token)
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return AccountResponse.from_domain(account)


@router.get("/accounts/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: str,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    account = service.get_account(account_id)
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="account not found")
    return AccountResponse.from_domain(account)


@router.patch("/accounts/{account_id}", response_model=AccountResponse)
def update_account(
    account_id: str,
    payload: UpdateAccountRequest,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Update profile fields through the write profile."""
    clear = frozenset(
        name for name in payload.model_fields_set if getattr(payload, name) is None
    )
    try:
        account = service.update_account(
            account_id,
            UpdateAccountInput(
                name=payload.name,
                email=payload.email,
                password=payload.password,
                phone_number=payload.phone_number,
                clear=clear,
            ),
        )
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return AccountResponse.from_domain(account)


@router.delete("/accounts/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(
    account_id: str,
    service: AccountService = Depends(get_service),
) -> Response:
    try:
        service.delete_account(account_id)
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/accounts/{account_id}/activate", response_model=AccountResponse)
def activate_account(
    account_id: str,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    try:
        account = service.activate(account_id)
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return AccountResponse.from_domain(account)


@router.post("/accounts/{account_id}/deactivate", response_model=AccountResponse)
def deactivate_account(
    account_id: str,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    try:
        account = service.deactivate(account_id)
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return AccountResponse.from_domain(account)


@router.post("/accounts/{account_id}/confirmation-token", response_model=AccountResponse)
def regenerate_confirmation_token(
    account_id: str,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    try:
        account = service.regenerate_confirmation_token(account_id)
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return AccountResponse.from_domain(account)


@router.put("/accounts/{account_id}/roles", response_model=AccountResponse)
def replace_roles(
    account_id: str,
    payload: ReplaceRolesRequest,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    try:
        account = service.set_roles(account_id, payload.roles)
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return AccountResponse.from_domain(account)


@router.post("/accounts/{account_id}/seen", response_model=AccountResponse)
def record_activity(
    account_id: str,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Stamp ``last_seen_at`` with the current time."""
    try:
        account = service.record_activity(account_id)
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return AccountResponse.from_domain(account)


@router.post("/token", response_model=TokenResponse)
def issue_token(
    payload: TokenRequest,
    service: AccountService = Depends(get_service),
) -> TokenResponse:
    """Exchange email and password of an active account for a signed access token."""
    try:
        issued = service.issue_token(payload.email, payload.password)
    except ValueError as exc:
        raise _http_error_from_value_error(exc) from exc
    return TokenResponse(
        access_token=issued.access_token,
        expires_in=issued.expires_in,
        account_id=issued.account.account_id,
    )


def _http_error_from_value_error(exc: ValueError) -> HTTPException:
    status_code = status.HTTP_400_BAD_REQUEST
    if isinstance(exc, AccountNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (DuplicateEmailError, AccountStateConflictError)):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, InvalidCredentialsError):
        status_code = status.HTTP_401_UNAUTHORIZED
    elif isinstance(exc, AccountInactiveError):
        status_code = status.HTTP_403_FORBIDDEN
    else:
        logger.warning("unmapped account error: %s", exc)
    return HTTPException(status_code=status_code, detail=str(exc))
