# SPDX-License-Identifier: LGPL-3.0-only
# Copyright (c) 2026 Mirrowel

"""
Fixed names, endpoints and timing values shared by the usage_quota package.
"""

# =============================================================================
# REMOTE USAGE ENDPOINT
# =============================================================================

USAGE_URL = "https://api.anthropic.com/api/oauth/usage"
USAGE_BETA_HEADER = "oauth-2025-04-20"
HTTP_TIMEOUT = 5.0  # seconds

# =============================================================================
# CACHE
# =============================================================================

CACHE_TTL_OK = 60  # seconds a successful fetch is trusted
CACHE_TTL_FAIL = 15  # seconds a failed fetch suppresses retries
CACHE_FILE_PREFIX = "claudeline-usage"

# =============================================================================
# CREDENTIALS
# =============================================================================

CONFIG_DIR_ENV = "CLAUDE_CONFIG_DIR"
DEFAULT_CONFIG_SUBDIR = ".claude"
CREDENTIALS_FILENAME = ".credentials.json"
KEYCHAIN_SERVICE_BASE = "Claude Code-credentials"
KEYCHAIN_BINARY = "/usr/bin/security"
KEYCHAIN_TIMEOUT = 5  # seconds
