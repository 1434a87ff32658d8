"""
Pytest configuration and shared fixtures.

FakeContext stands in for admin_context.AdminContext: same method names,
in-memory accounts/products, and a log of every write and upload so tests
can assert on what reached the backend.
"""
import copy
import io
import sys
import tempfile
from pathlib import Path

import httpx
import pytest
from PIL import Image

BASE_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BASE_DIR))
sys.path.insert(0, str(BASE_DIR / "scripts"))

from admin_context import AccountNotFound, UploadFailed, public_url  # noqa: E402
from product_images import make_http_client  # noqa: E402


class FakeUser:
    def __init__(self, uid, email=None, custom_claims=None):
        self.uid = uid
        self.email = email
        self.custom_claims = custom_claims


class FakeContext:
    def __init__(self, users=None, products=None, project_id="test-project"):
        self.users = {u.uid: u for u in users or []}
        self.products = copy.deepcopy(products or {})
        self.project_id = project_id
        self.bucket_name = f"{project_id}.appspot.com"
        self.writes = []
        self.claim_writes = []
        self.uploads = []
        self.fail_uploads = False
        self.closed = False

    def open(self):
        return self

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False

    def _copy_user(self, user):
        return FakeUser(user.uid, user.email, copy.deepcopy(user.custom_claims))

    def get_account(self, uid):
        if uid not in self.users:
            raise AccountNotFound(uid)
        return self._copy_user(self.users[uid])

    def get_account_by_email(self, email):
        for user in self.users.values():
            if user.email == email:
                return self._copy_user(user)
        raise AccountNotFound(email)

    def set_custom_claims(self, uid, claims):
        if uid not in self.users:
            raise AccountNotFound(uid)
        self.users[uid].custom_claims = dict(claims)
        self.claim_writes.append((uid, dict(claims)))

    def list_products(self):
        for product_id, data in list(self.products.items()):
            yield product_id, copy.deepcopy(data)

    def get_product(self, product_id):
        if product_id not in self.products:
            return None
        return copy.deepcopy(self.products[product_id])

    def update_product_images(self, product_id, images):
        self.writes.append((product_id, list(images)))
        self.products[product_id]["images"] = list(images)

    def upload_public_file(self, local_path, storage_path, content_type, cache_control=None):
        if self.fail_uploads:
            raise UploadFailed(storage_path, "bucket unavailable")
        self.uploads.append({
            "path": storage_path,
            "content_type": content_type,
            "cache_control": cache_control,
            "data": Path(local_path).read_bytes(),
        })
        return public_url(self.bucket_name, storage_path)


def image_bytes(fmt: str = "PNG") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), (200, 30, 90)).save(buf, fmt)
    return buf.getvalue()


@pytest.fixture
def fake_ctx():
    return FakeContext()


@pytest.fixture
def png_bytes():
    return image_bytes("PNG")


@pytest.fixture
def jpeg_bytes():
    return image_bytes("JPEG")


@pytest.fixture
def http_client():
    """Build a real httpx client (same settings as production) over a mock handler."""
    clients = []

    def _make(handler):
        client = make_http_client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture
def temp_dir(tmp_path, monkeypatch):
    """Send tempfile output to an isolated directory so leftovers are visible."""
    work = tmp_path / "tmp"
    work.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(work))
    return work
