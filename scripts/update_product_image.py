#!/usr/bin/env python3
"""Replace one image URL on one product.

Usage:
    python scripts/update_product_image.py <productId> <imageIndex> <newUrl>

Example:
    python scripts/update_product_image.py M9zIWUL0D8IZLwT0K7Lo 0 "https://storage.googleapis.com/..."

imageIndex is zero-based. The new URL is written as-is (nothing is
downloaded). Get product IDs and indices from:
    python scripts/migrate_images.py --list
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
)
from product_images import update_product_image


def main(argv=None) -> int:
    parser = ScriptArgumentParser(description="Replace a single product image URL")
    parser.add_argument("product_id", help="Firestore document ID of the product")
    parser.add_argument("image_index", type=int, help="Zero-based index of the image to replace")
    parser.add_argument("new_url", help="New image URL (Firebase Storage)")
    try:
        args = parser.parse_args(argv)
    except ArgumentError as e:
        print(__doc__)
        print(f"Error: {e}")
        return 1

    try:
        ctx = AdminContext().open()
    except CredentialsMissing as e:
        print_credentials_help(e)
        return 1

    # Failures below are reported but do not change the exit code
    try:
        name, old_url = update_product_image(ctx, args.product_id, args.image_index, args.new_url)
        print(f"Updated product: {name}")
        print(f"   Old URL: {old_url}")
        print(f"   New URL: {args.new_url}")
    except Exception as e:
        print(f"Error: {e}")
    finally:
        ctx.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
