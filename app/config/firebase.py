"""
Firebase Firestore initialization.
Single-source-of-truth Firestore client for Vita.
"""

import json
import logging
import os
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore, initialize_app

from app.core.settings import settings

logger = logging.getLogger(__name__)

db: Optional[firestore.Client] = None

REQUIRED_CREDENTIAL_FIELDS = ["type", "project_id", "private_key", "client_email"]


def _validate_credentials_file(cred_path: str) -> None:
    """Fail early with a readable message instead of an opaque SDK error."""
    if not os.path.exists(cred_path):
        raise FileNotFoundError(
            f"Firebase credentials file not found: {cred_path} "
            f"(cwd: {os.getcwd()})"
        )

    try:
        with open(cred_path, "r") as f:
            cred_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Firebase credentials file is not valid JSON: {e}")

    missing_fields = [field for field in REQUIRED_CREDENTIAL_FIELDS if field not in cred_data]
    if missing_fields:
        raise ValueError(f"Firebase credentials file is missing required fields: {missing_fields}")

    logger.info(f"[FIRESTORE] Credentials file validated for project {cred_data.get('project_id', 'N/A')}")


def initialize_firestore() -> firestore.Client:
    global db

    if db is not None:
        return db

    if settings.USE_MOCK_DB:
        from app.config.mock_firestore import get_mock_db
        db = get_mock_db(settings.MOCK_DB_PATH)
        logger.info("[FIRESTORE] USING MOCK DATABASE")
        return db

    try:
        if not firebase_admin._apps:
            if settings.FIREBASE_CREDENTIALS_PATH:
                _validate_credentials_file(settings.FIREBASE_CREDENTIALS_PATH)
                cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
                initialize_app(cred)
                logger.info("[FIRESTORE] Firebase Admin SDK initialized with service account")
            else:
                logger.info("[FIRESTORE] No credentials path set, using Application Default Credentials")
                initialize_app()

        db = firestore.client()
        logger.info(f"[FIRESTORE] USING REAL FIRESTORE DATABASE (project: {settings.FIREBASE_PROJECT_ID or 'default'})")
        return db

    except FileNotFoundError as e:
        raise RuntimeError(
            f"Firestore initialization FAILED - Credentials file not found.\n{e}\n"
            f"SOLUTION: Check FIREBASE_CREDENTIALS_PATH in your .env file, or set USE_MOCK_DB=true."
        )
    except ValueError as e:
        raise RuntimeError(
            f"Firestore initialization FAILED - Invalid credentials file.\n{e}\n"
            f"SOLUTION: Download a fresh service account key from Firebase Console."
        )
    except Exception as e:
        raise RuntimeError(
            f"Firestore initialization FAILED. Error: {e}\n"
            f"Please check your Firebase credentials and configuration."
        )


def get_db() -> firestore.Client:
    """
    Get the initialized Firestore client.

    Raises RuntimeError if Firestore has not been initialized.
    """
    if db is None:
        try:
            initialize_firestore()
        except Exception as e:
            raise RuntimeError(
                f"Firestore not initialized and initialization failed: {e}. "
                "Please check your Firebase credentials and configuration."
            )
    return db


def reset_db() -> None:
    """Forget the cached client so the next get_db() re-initializes (tests, seeding)."""
    global db
    db = None
