"""
Token authentication for the API.

Clients send ``Authorization: Bearer <jwt>``.  Tokens are signed
simplejwt access tokens that additionally carry the user's ``email``,
``role`` and ``name`` so the front-end can render without a round trip.
Keeping the class here, away from any view, avoids circular imports
when DRF loads authentication classes during start-up.
"""
from __future__ import annotations

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.tokens import RefreshToken


class BearerJWTAuthentication(JWTAuthentication):
    """simplejwt authentication with a stable import path for settings."""

    www_authenticate_realm = 'clinic'


def issue_tokens(user) -> RefreshToken:
    """Return a refresh token whose access token embeds the user's claims."""
    refresh = RefreshToken.for_user(user)
    refresh['email'] = user.email
    refresh['role'] = user.role
    refresh['name'] = user.display_name
    return refresh
