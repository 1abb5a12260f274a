"""Encrypted Sessions Meta information.
   Encrypted Sessions encrypts session payloads at rest using keys derived
   from the session identifier itself.
"""
__title__ = 'encrypted_sessions'
__description__ = (
   'Transparent encryption adapter for server-side session storage, '
   'keyed by the session identifier.'
)
__version__ = '0.1.0'
__copyright__ = 'Copyright (c) 2026 Encrypted Sessions Contributors'
__author__ = 'Encrypted Sessions Contributors'
__author_email__ = 'maintainers@encrypted-sessions.dev'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/encrypted-sessions/encrypted-sessions'
