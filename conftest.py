"""
Root-level conftest — sets environment variables BEFORE pydantic-settings
loads any module.
"""
import os
import tempfile

# Must be set before any regbridge module is imported
os.environ["TELEGRAM_BOT_TOKEN"] = "123456:test-token"
os.environ["TELEGRAM_WEBHOOK_SECRET"] = ""
os.environ["TELEGRAM_WEBHOOK_URL"] = ""
os.environ["TELEGRAM_POLLING"] = "false"
os.environ["LEDGER_SWEEP_INTERVAL_SECONDS"] = "0"
os.environ["REGISTRATION_BACKEND_URL"] = ""
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="regbridge-test-")
