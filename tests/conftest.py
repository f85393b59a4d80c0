"""Shared test setup.

main.py validates the environment at import time, so the required variables
are set here before any test module imports the app.
"""
import os

os.environ.setdefault("SCOUT_API_KEY", "test-scout-key")
os.environ.setdefault("SCOUT_WORKFLOW_ID", "wf_test_workflow")
os.environ.setdefault("SCOUT_API_BASE_URL", "https://scout.test")
