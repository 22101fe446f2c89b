import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./easyinvoices.db")

# CSRF double-submit check for the backend API (disable only for local testing)
CSRF_ENABLED = os.getenv("CSRF_ENABLED", "true").lower() == "true"

# Rendered invoice artifacts
INVOICES_DIR = Path(os.getenv("INVOICES_DIR", "./storage/invoices")).resolve()
# Site-relative (or absolute) URL prefix under which INVOICES_DIR is served
INVOICES_BASE_URL = os.getenv("INVOICES_BASE_URL", "/storage/invoices").rstrip("/")

# Company details printed on invoices and used as email sender name
COMPANY_NAME = os.getenv("COMPANY_NAME", "Easy!Invoices")
COMPANY_EMAIL = os.getenv("COMPANY_EMAIL", "")

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", f"{COMPANY_NAME} <noreply@easyinvoices.org>")

# Admin page settings
BACKEND_BASE_URL = os.getenv("BACKEND_BASE_URL", "http://localhost:8000")
# One of DMY, MDY, YMD
DATE_FORMAT = os.getenv("DATE_FORMAT", "DMY")
