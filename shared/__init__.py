"""
Shared module for cross-cutting concerns used by the chat relay.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging

- shared.infrastructure: Runtime plumbing
  - correlation.py: Per-connection log correlation

- shared.utils: Utilities
  - exceptions.py: Relay error taxonomy with auto-logging

IMPORT EXAMPLES:
    from shared.config.settings import settings
    from shared.config.logging import get_logger
    from shared.utils.exceptions import NotNamedError, InvalidInputError
"""
