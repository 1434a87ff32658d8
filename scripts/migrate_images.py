#!/usr/bin/env python3
"""Move product images from third-party hosts into Firebase Storage.

For every product, each image URL is either left alone (already in our
bucket, or a blocked host like Pinterest) or downloaded and re-uploaded to
products/<productId>-<index>.<ext>. Failed images keep their old URL.

Usage:
    python scripts/migrate_images.py           # migrate everything
    python scripts/migrate_images.py --list    # list blocked-host images only (read-only)

Blocked images have to be downloaded by hand; fix them afterwards with
scripts/update_product_image.py.
"""
import sys
from pathlib import Path

BASE_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BASE_DIR))
from admin_context import (
    AdminContext,
    ArgumentError,
    CredentialsMissing,
    ScriptArgumentParser,
    print_credentials_help,
    ts,
)
from product_images import find_blocked_images, make_http_client, migrate_products


def list_blocked(ctx):
    print("Listing all blocked-host image URLs...\n")
    products = find_blocked_images(ctx)

    if not products:
        print("No blocked-host images found!")
        return

    print(f"\nFound {len(products)} products with blocked-host images:\n")
    for n, product in enumerate(products, 1):
        print(f"{n}. {product.name} (ID: {product.id})")
        for index, url in product.images:
            print(f"   Image {index}: {url}")
        print()

    print("These hosts refuse server-side downloads.")
    print("Download the images by hand, upload them to Firebase Storage, then run:")
    print("  python scripts/update_product_image.py <productId> <imageIndex> <newUrl>")


def migrate(ctx):
    print(f"{'='*60}")
    print("IMAGE MIGRATION")
    print(f"{'='*60}")
    print(f"Bucket: {ctx.bucket_name}")
    print("Blocked-host images are skipped; list them with --list")
    print(f"{'='*60}")
    print(f"[{ts()}] Starting")

    with make_http_client() as client:
        summary = migrate_products(ctx, client)

    print(f"\n[{ts()}] Migration summary:")
    print(f"   Migrated: {summary.migrated} images")
    print(f"   Skipped:  {summary.skipped} images (blocked host)")
    print(f"   Failed:   {summary.failed} images")
    print(f"   Already hosted: {summary.hosted} images")
    print(f"   Products updated: {summary.products_updated}")
    print("\nRun with --list to see images that need manual migration.")
    return summary


def main(argv=None) -> int:
    parser = ScriptArgumentParser(description="Migrate product images into Firebase Storage")
    parser.add_argument(
        "--list", "-l",
        action="store_true",
        help="Only list products with blocked-host images (no writes)",
    )
    try:
        args = parser.parse_args(argv)
    except ArgumentError as e:
        parser.print_usage()
        print(f"Error: {e}")
        return 1

    try:
        ctx = AdminContext().open()
    except CredentialsMissing as e:
        print_credentials_help(e)
        return 1

    try:
        if args.list:
            list_blocked(ctx)
        else:
            migrate(ctx)
        return 0
    except Exception as e:
        print(f"\nError: {e}")
        return 1
    finally:
        ctx.close()


if __name__ == "__main__":
    raise SystemExit(main())
