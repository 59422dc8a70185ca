"""
Use Cases

Organized by area:
- auth/: Registration, login and emailed-token flows
- two_factor/: TOTP enrollment
- users/: Self-service account and session management
"""
