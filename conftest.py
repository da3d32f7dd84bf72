"""Global pytest configuration."""

import os

# Generation credentials for tests before any imports; never used for real calls
os.environ.setdefault("GENERATION_API_KEYS", "test-key-1,test-key-2,test-key-3")
