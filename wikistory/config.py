"""
Application configuration and environment variables
"""
import os

# Wikipedia API configuration
WIKIPEDIA_API_URL = os.environ.get('WIKIPEDIA_API_URL', 'https://en.wikipedia.org/w/api.php')
USER_AGENT = os.environ.get('USER_AGENT', 'WikipediaStoryBuilder/1.0 (Educational Project)')

# HTTP client configuration
HTTP_CONNECT_TIMEOUT = float(os.environ.get('HTTP_CONNECT_TIMEOUT', '5.0'))
HTTP_READ_TIMEOUT = float(os.environ.get('HTTP_READ_TIMEOUT', '30.0'))  # Wikipedia can be slow
HTTP_MAX_CONNECTIONS = int(os.environ.get('HTTP_MAX_CONNECTIONS', '100'))
HTTP_MAX_KEEPALIVE = int(os.environ.get('HTTP_MAX_KEEPALIVE', '20'))

# Retry configuration for transient network failures
MAX_RETRIES = int(os.environ.get('MAX_RETRIES', '3'))
BACKOFF_FACTOR = float(os.environ.get('BACKOFF_FACTOR', '0.5'))

# Number of alternative topics offered when a topic cannot be found
SUGGESTION_LIMIT = int(os.environ.get('SUGGESTION_LIMIT', '10'))

# API configuration
API_TITLE = "Wikipedia Story Builder API"
API_VERSION = "1.0.0"
RATE_LIMIT = os.environ.get('RATE_LIMIT', '20/minute')
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

# CORS origins
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        'CORS_ORIGINS',
        'http://localhost:8000,http://127.0.0.1:8000'
    ).split(',')
    if origin.strip()
]
