"""Quotient: hybrid search and relevance filtering over Farcaster builders."""

from dotenv import load_dotenv

# Settings are read from os.environ on every get_settings() call, so values
# from .env must be in place before the first request.
load_dotenv()
