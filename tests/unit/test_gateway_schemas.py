"""Unit tests for bt_gateway Pydantic schemas."""

import pytest
from pydantic import ValidationError

from src.bt_gateway.user.schemas import LoginRequest, RegisterRequest


class TestRegisterRequest:
    def test_valid_input(self) -> None:
        req = RegisterRequest(name="  Alice ", email="alice@example.com", password="swap4life")
        assert req.name == "Alice"

    def test_blank_name(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(name="   ", email="a@b.com", password="swap4life")

    def test_name_too_long(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(name="a" * 101, email="a@b.com", password="swap4life")

    def test_invalid_email(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(name="Alice", email="not-an-email", password="swap4life")

    def test_password_too_short(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(name="Alice", email="a@b.com", password="ab1")

    def test_password_over_bcrypt_limit(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(name="Alice", email="a@b.com", password="a1" * 37)

    def test_password_needs_letter(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(name="Alice", email="a@b.com", password="12345678")

    def test_password_needs_digit(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(name="Alice", email="a@b.com", password="nodigitshere")


class TestLoginRequest:
    def test_email_required(self) -> None:
        with pytest.raises(ValidationError):
            LoginRequest(email="alice", password="x")
