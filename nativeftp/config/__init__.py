"""Configuration module for nativeftp.

This module handles client settings, credentials and saved sessions:
- SettingsManager: JSON-based settings persistence
- CredentialManager: Secure credential storage via keyring
- SessionStore: Saved connection records
- Paths: Application data directories
"""
