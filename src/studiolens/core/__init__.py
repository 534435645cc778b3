"""
Core modules for studiolens.

This package contains the core business logic for:
- Configuration management
- Lens and preset catalogs
- Generation settings
- Prompt composition
- Gemini transport and response classification
- API key storage
"""
