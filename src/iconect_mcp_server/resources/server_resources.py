"""
Server Resources for Iconect MCP Server

Provides the server status resource: configuration state, advertised
commands and authentication status.
"""

import time

from .. import __version__


def server_status(dispatcher) -> str:
    """Current server status as markdown."""
    timestamp = time.strftime("%Y-%m-%d %H:%M:%S UTC", time.gmtime())
    commands = dispatcher.list_commands()
    session = dispatcher.session

    if session is None:
        return f"""# Iconect Server Status

**Status**: Not configured
**Timestamp**: {timestamp}
**Version**: {__version__}

## Commands
- **Advertised**: {len(commands)} (call `iconect_configure` to unlock the rest)
"""

    info = session.config.get_server_info()
    auth_status = session.auth.current_status()
    if auth_status["authenticated"]:
        auth_lines = [
            "- **Authenticated**: yes",
            f"- **Token expired**: {'yes' if auth_status['isExpired'] else 'no'}",
            f"- **Expires at**: {auth_status['expiresAt']}",
            f"- **Refresh token**: {'present' if auth_status['hasRefreshToken'] else 'absent'}",
        ]
        if auth_status.get("subject"):
            auth_lines.append(f"- **Subject**: {auth_status['subject']}")
    else:
        auth_lines = ["- **Authenticated**: no"]

    return f"""# Iconect Server Status

**Status**: Configured
**Timestamp**: {timestamp}
**Version**: {__version__}

## Configuration
- **Base URL**: {info['base_url']}
- **Client ID**: {info['client_id']}
- **Client type**: {'confidential' if info['confidential_client'] else 'public'}
- **Timeout**: {info['timeout_ms']}ms
- **Max retries**: {info['max_retries']}
- **Retry delay**: {info['retry_delay_ms']}ms
- **Log level**: {info['log_level']}

## Commands
- **Advertised**: {len(commands)}

## Authentication
{chr(10).join(auth_lines)}
"""
