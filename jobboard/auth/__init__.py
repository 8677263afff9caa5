"""
Authentication module for the job board.

This module provides authentication functionality including:
- Job seeker and employer registration
- Per-role and unified login with JWT tokens
- Current user lookup and password change
- Password reset by emailed token
"""
