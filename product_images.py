"""Product image migration into Firebase Storage.

Each image URL on a product is one of:
- hosted:    already in our bucket, left alone
- blocked:   Pinterest and friends refuse server-side fetches, left for manual work
- fetchable: everything else, downloaded and re-uploaded

Products are processed one at a time. A product is written back only if at
least one of its URLs changed, and always with the full images array.
"""
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

import httpx
from PIL import Image
from tqdm import tqdm

from admin_context import DownloadFailed, InvalidImageIndex, ProductNotFound, UploadFailed

HOSTED_MARKERS = ("firebasestorage.googleapis.com", "storage.googleapis.com")
BLOCKED_MARKERS = ("pinimg.com", "pinterest.com")

HOSTED = "hosted"
BLOCKED = "blocked"
FETCHABLE = "fetchable"

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
MAX_REDIRECTS = 5
HTTP_TIMEOUT = 30.0
CACHE_CONTROL = "public, max-age=31536000"
STORAGE_PREFIX = "products"

# Pillow format -> (content type, extension)
IMAGE_TYPES = {
    "JPEG": ("image/jpeg", "jpg"),
    "PNG": ("image/png", "png"),
    "WEBP": ("image/webp", "webp"),
    "GIF": ("image/gif", "gif"),
}
DEFAULT_IMAGE_TYPE = IMAGE_TYPES["JPEG"]


@dataclass
class MigrationSummary:
    migrated: int = 0
    skipped: int = 0
    failed: int = 0
    hosted: int = 0
    products_updated: int = 0


@dataclass
class BlockedProduct:
    id: str
    name: str
    images: list[tuple[int, str]] = field(default_factory=list)


def classify_url(url) -> str:
    if not isinstance(url, str):
        return BLOCKED
    if any(marker in url for marker in HOSTED_MARKERS):
        return HOSTED
    if any(marker in url for marker in BLOCKED_MARKERS):
        return BLOCKED
    return FETCHABLE


def make_http_client(**kwargs) -> httpx.Client:
    """Client for image fetches. Redirects are followed up to MAX_REDIRECTS hops."""
    return httpx.Client(
        timeout=HTTP_TIMEOUT,
        follow_redirects=True,
        max_redirects=MAX_REDIRECTS,
        headers={"User-Agent": USER_AGENT},
        **kwargs,
    )


def storage_path(product_id: str, index: int, ext: str = "jpg") -> str:
    return f"{STORAGE_PREFIX}/{product_id}-{index}.{ext}"


# ============================================================
# DOWNLOAD -> UPLOAD PIPELINE
# ============================================================

def download_image(client: httpx.Client, url: str, dest: Path) -> Path:
    """Stream url into dest. Raises DownloadFailed on transport errors or non-2xx."""
    try:
        with client.stream("GET", url) as response:
            if not response.is_success:
                raise DownloadFailed(url, f"HTTP {response.status_code}")
            with open(dest, "wb") as f:
                for chunk in response.iter_bytes():
                    f.write(chunk)
    except httpx.TooManyRedirects as e:
        raise DownloadFailed(url, f"more than {MAX_REDIRECTS} redirects") from e
    except httpx.HTTPError as e:
        raise DownloadFailed(url, str(e) or type(e).__name__) from e
    except (httpx.InvalidURL, ValueError) as e:
        # Malformed URL or hostname, rejected before any request goes out
        raise DownloadFailed(url, f"invalid URL ({e})") from e
    except OSError as e:
        raise DownloadFailed(url, f"could not write {dest} ({e})") from e
    return dest


def detect_image_type(path: Path, url: str = "") -> tuple[str, str]:
    """Return (content_type, extension) for a downloaded file.

    Hosts sometimes answer 200 with an HTML page; that is a failed download.
    """
    try:
        with Image.open(path) as img:
            fmt = img.format
            img.verify()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise DownloadFailed(url or str(path), f"not an image ({e})") from e
    return IMAGE_TYPES.get(fmt, DEFAULT_IMAGE_TYPE)


def migrate_image(ctx, client: httpx.Client, product_id: str, index: int, url: str) -> str:
    """Download one image and re-host it. Returns the new public URL.

    The temp file is always removed before returning or raising.
    """
    fd, tmp_name = tempfile.mkstemp(prefix=f"migrate-{product_id}-{index}-", suffix=".download")
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        download_image(client, url, tmp_path)
        content_type, ext = detect_image_type(tmp_path, url)
        return ctx.upload_public_file(
            tmp_path, storage_path(product_id, index, ext), content_type, cache_control=CACHE_CONTROL
        )
    finally:
        tmp_path.unlink(missing_ok=True)


# ============================================================
# MIGRATION
# ============================================================

def migrate_product(ctx, client: httpx.Client, product_id: str, product: dict,
                    summary: MigrationSummary) -> bool:
    """Migrate every fetchable image of one product. Returns True if it was written."""
    name = product.get("name", "(unnamed)")
    images = product.get("images") or []
    print(f"\nProcessing: {name} ({product_id})")

    if not images:
        print("   No images found")
        return False

    new_images = []
    changed = False
    for i, url in enumerate(images):
        kind = classify_url(url)

        if kind == HOSTED:
            print(f"   Image {i}: already on Firebase Storage")
            new_images.append(url)
            summary.hosted += 1
            continue

        if kind == BLOCKED:
            if isinstance(url, str):
                print(f"   Image {i}: blocked host, skipping (manual download required)")
            else:
                print(f"   Image {i}: not a URL ({url!r}), skipping")
            new_images.append(url)
            summary.skipped += 1
            continue

        print(f"   Image {i}: downloading {url}")
        try:
            new_url = migrate_image(ctx, client, product_id, i, url)
        except (DownloadFailed, UploadFailed) as e:
            print(f"   Image {i}: FAILED - {e}")
            new_images.append(url)
            summary.failed += 1
            continue

        print(f"   Image {i}: migrated -> {new_url}")
        new_images.append(new_url)
        summary.migrated += 1
        changed = True

    if changed:
        ctx.update_product_images(product_id, new_images)
        summary.products_updated += 1
        print("   Updated product document")
    return changed


def migrate_products(ctx, client: httpx.Client) -> MigrationSummary:
    summary = MigrationSummary()
    for product_id, product in ctx.list_products():
        migrate_product(ctx, client, product_id, product, summary)
    return summary


def find_blocked_images(ctx, progress: bool = True) -> list[BlockedProduct]:
    """Read-only scan for products holding at least one blocked-host image."""
    found = []
    products = ctx.list_products()
    if progress:
        products = tqdm(products, desc="Scanning products", unit="product")
    for product_id, product in products:
        blocked = [
            (i, url) for i, url in enumerate(product.get("images") or [])
            if isinstance(url, str) and classify_url(url) == BLOCKED
        ]
        if blocked:
            found.append(BlockedProduct(product_id, product.get("name", "(unnamed)"), blocked))
    return found


# ============================================================
# SINGLE RECORD PATCH
# ============================================================

def update_product_image(ctx, product_id: str, index: int, new_url: str) -> tuple[str, str]:
    """Replace images[index] on one product. Returns (product_name, old_url).

    The new URL is trusted as-is; nothing is fetched.
    """
    product = ctx.get_product(product_id)
    if product is None:
        raise ProductNotFound(product_id)

    images = list(product.get("images") or [])
    if index < 0 or index >= len(images):
        raise InvalidImageIndex(product_id, index, len(images))

    old_url = images[index]
    images[index] = new_url
    ctx.update_product_images(product_id, images)
    return product.get("name", "(unnamed)"), old_url
