"""Artifact resolution and integrity-attestation core."""
