#!/usr/bin/env python3
"""Set the `admin` custom claim on a Firebase Auth user.

Usage:
    python scripts/set_admin_claim.py <uid>
    python scripts/set_admin_claim.py admin@example.com
    python scripts/set_admin_claim.py            # uses ADMIN_UID from .env

Other custom claims already on the account are kept.
"""
import sys
from pathlib import Path

BASE_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BASE_DIR))
from admin_context import (
    AccountNotFound,
    AdminContext,
    ArgumentError,
    CredentialsMissing,
    InvalidIdentifier,
    ScriptArgumentParser,
    print_credentials_help,
    target_uid,
)
from account_claims import (
    grant_admin_claim,
    is_email,
    print_account_not_found,
    print_project_banner,
    print_sign_in_steps,
    resolve_account,
)


def main(argv=None) -> int:
    parser = ScriptArgumentParser(description="Set the admin custom claim on a user")
    parser.add_argument("identifier", nargs="?", help="User UID or email (default: ADMIN_UID)")
    try:
        args = parser.parse_args(argv)
        identifier = args.identifier or target_uid()
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
        print("Firebase Admin SDK initialized")
        print_project_banner(ctx)
        print(f"\nSetting admin claim for: {identifier} ({'Email' if is_email(identifier) else 'UID'})\n")

        user = resolve_account(ctx, identifier)
        print(f"Found user: {user.email} (UID: {user.uid})")

        claims = grant_admin_claim(ctx, user)
        print(f"\nSUCCESS! Admin claim set for UID: {user.uid}")
        print(f"   Email: {user.email}")
        print(f"   Claims: {claims}")
        print_sign_in_steps()
        return 0
    except AccountNotFound as e:
        print_account_not_found(ctx, e)
        return 1
    except InvalidIdentifier as e:
        print(f"\nERROR: {e}")
        print("   UIDs are non-empty strings of at most 128 characters; emails must be well-formed.")
        return 1
    except Exception as e:
        print(f"\nERROR: {e}")
        return 1
    finally:
        ctx.close()


if __name__ == "__main__":
    raise SystemExit(main())
