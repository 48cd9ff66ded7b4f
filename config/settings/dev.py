"""Development settings for the travel inventory service.

This module extends the base settings with development specific
configuration, such as enabling debug and allowing all hosts. Do not
use these settings in production!
"""

from .base import *  # noqa: F401,F403

# Enable debug mode for development
DEBUG = True

# Allow all hosts in development
ALLOWED_HOSTS = ['*']
