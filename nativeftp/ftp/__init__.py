"""FTP session module for nativeftp.

This module handles the FTP session itself:
- Connector: Opens connections
- Connection: Session state machine over one control channel
- Authentication: Login credentials
- Command: Raw command results
- Transport: ftplib-backed primitive operations
- Exceptions: FTP-specific error types
"""
