"""Shared Firebase context, config and errors for the admin scripts.

Every script builds one AdminContext, passes it to the operations it runs,
and closes it before exiting. Nothing talks to Firebase except through it.

Config comes from the environment (or a .env file):
    FIREBASE_CREDENTIALS     path to the service account key
                             (default: serviceAccountKey.json next to this file)
    FIREBASE_STORAGE_BUCKET  storage bucket (default: <project_id>.appspot.com)
    EXPECTED_PROJECT_ID      project the mobile app talks to, used for warnings
    ADMIN_UID                default account for the claim scripts
"""
import argparse
import os
from datetime import datetime
from pathlib import Path

import firebase_admin
from dotenv import load_dotenv
from firebase_admin import auth, credentials, firestore, storage
from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError

load_dotenv()

BASE_DIR = Path(__file__).parent
DEFAULT_CREDENTIALS_FILE = BASE_DIR / "serviceAccountKey.json"

PRODUCTS_COLLECTION = "products"
PUBLIC_URL_TEMPLATE = "https://storage.googleapis.com/{bucket}/{path}"


def ts():
    return datetime.now().strftime("%H:%M:%S")


# ============================================================
# ERRORS
# ============================================================

class AdminScriptError(Exception):
    """Base for every failure a script reports to the operator."""


class CredentialsMissing(AdminScriptError):
    pass


class ArgumentError(AdminScriptError):
    pass


class AccountNotFound(AdminScriptError):
    def __init__(self, identifier: str):
        super().__init__(f"User {identifier} does not exist in Firebase Auth")
        self.identifier = identifier


class InvalidIdentifier(AdminScriptError):
    def __init__(self, identifier: str, reason: str = ""):
        message = f"Invalid user identifier: {identifier!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.identifier = identifier


class ProductNotFound(AdminScriptError):
    def __init__(self, product_id: str):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class InvalidImageIndex(AdminScriptError):
    def __init__(self, product_id: str, index: int, count: int):
        super().__init__(f"Invalid image index {index}. Product has {count} images.")
        self.product_id = product_id
        self.index = index
        self.count = count


class DownloadFailed(AdminScriptError):
    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to download {url}: {reason}")
        self.url = url
        self.reason = reason


class UploadFailed(AdminScriptError):
    def __init__(self, storage_path: str, reason: str):
        super().__init__(f"Failed to upload {storage_path}: {reason}")
        self.storage_path = storage_path
        self.reason = reason


# ============================================================
# CONFIG / CLI HELPERS
# ============================================================

class ScriptArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises ArgumentError instead of exiting with status 2."""

    def error(self, message):
        raise ArgumentError(message)


def target_uid(uid: str | None = None) -> str:
    """Return the account the claim scripts operate on.

    Explicit value wins, then ADMIN_UID. There is no built-in default.
    """
    uid = (uid or os.getenv("ADMIN_UID") or "").strip()
    if not uid:
        raise ArgumentError("No target UID given (pass --uid or set ADMIN_UID in .env)")
    return uid


def expected_project_id() -> str | None:
    return os.getenv("EXPECTED_PROJECT_ID") or None


def print_credentials_help(error: CredentialsMissing):
    print(f"Error: {error}")
    print("   Download it from Firebase Console > Project Settings > Service Accounts")
    print("   > Generate New Private Key, then save it as serviceAccountKey.json")
    print("   or point FIREBASE_CREDENTIALS at it.")


def public_url(bucket_name: str, storage_path: str) -> str:
    return PUBLIC_URL_TEMPLATE.format(bucket=bucket_name, path=storage_path)


# ============================================================
# CONTEXT
# ============================================================

class AdminContext:
    """One initialized Firebase app plus the handful of remote calls the scripts need.

    Usage:
        with AdminContext() as ctx:
            ctx.get_account(uid)

    open() validates the key file before anything touches the network and
    raises CredentialsMissing if it is absent or unreadable.
    """

    def __init__(self, credentials_path: Path | None = None, bucket_name: str | None = None):
        self.credentials_path = Path(
            credentials_path or os.getenv("FIREBASE_CREDENTIALS") or DEFAULT_CREDENTIALS_FILE
        )
        self.bucket_name = bucket_name or os.getenv("FIREBASE_STORAGE_BUCKET")
        self.project_id = None
        self.app = None
        self._db = None
        self._bucket = None

    def open(self) -> "AdminContext":
        if self.app is not None:
            return self
        if not self.credentials_path.is_file():
            raise CredentialsMissing(f"Could not find {self.credentials_path}")
        try:
            cred = credentials.Certificate(str(self.credentials_path))
        except (ValueError, OSError) as e:
            raise CredentialsMissing(f"Could not load {self.credentials_path}: {e}") from e

        self.project_id = cred.project_id
        if not self.bucket_name:
            self.bucket_name = f"{self.project_id}.appspot.com"
        # Named app so several contexts can coexist in one process (tests, REPL)
        self.app = firebase_admin.initialize_app(
            cred, {"storageBucket": self.bucket_name}, name=f"admin-scripts-{id(self)}"
        )
        return self

    def close(self):
        if self.app is not None:
            firebase_admin.delete_app(self.app)
        self.app = None
        self._db = None
        self._bucket = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # --- Auth ---

    def get_account(self, uid: str):
        try:
            return auth.get_user(uid, app=self.app)
        except auth.UserNotFoundError as e:
            raise AccountNotFound(uid) from e
        except ValueError as e:
            raise InvalidIdentifier(uid, str(e)) from e

    def get_account_by_email(self, email: str):
        try:
            return auth.get_user_by_email(email, app=self.app)
        except auth.UserNotFoundError as e:
            raise AccountNotFound(email) from e
        except ValueError as e:
            raise InvalidIdentifier(email, str(e)) from e

    def set_custom_claims(self, uid: str, claims: dict):
        try:
            auth.set_custom_user_claims(uid, claims, app=self.app)
        except auth.UserNotFoundError as e:
            raise AccountNotFound(uid) from e
        except ValueError as e:
            raise InvalidIdentifier(uid, str(e)) from e

    # --- Firestore ---

    @property
    def db(self):
        if self._db is None:
            self._db = firestore.client(app=self.app)
        return self._db

    def list_products(self):
        """Yield (product_id, data) for every product document."""
        for doc in self.db.collection(PRODUCTS_COLLECTION).stream():
            yield doc.id, doc.to_dict() or {}

    def get_product(self, product_id: str) -> dict | None:
        snapshot = self.db.collection(PRODUCTS_COLLECTION).document(product_id).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    def update_product_images(self, product_id: str, images: list[str]):
        """Replace the whole images array in one write."""
        self.db.collection(PRODUCTS_COLLECTION).document(product_id).update({"images": list(images)})

    # --- Storage ---

    @property
    def bucket(self):
        if self._bucket is None:
            self._bucket = storage.bucket(self.bucket_name, app=self.app)
        return self._bucket

    def upload_public_file(self, local_path: Path, storage_path: str, content_type: str,
                           cache_control: str | None = None) -> str:
        """Upload a local file, make it world-readable, return its public URL."""
        blob = self.bucket.blob(storage_path)
        if cache_control:
            blob.cache_control = cache_control
        try:
            blob.upload_from_filename(str(local_path), content_type=content_type)
            blob.make_public()
        except (GoogleAPIError, GoogleAuthError, OSError) as e:
            raise UploadFailed(storage_path, str(e)) from e
        return public_url(self.bucket_name, storage_path)
