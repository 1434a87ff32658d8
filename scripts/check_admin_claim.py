#!/usr/bin/env python3
"""Check whether the admin custom claim is set on the target account.

Read-only. Run this first, before trying to set the claim.

Usage:
    python scripts/check_admin_claim.py --uid <uid>
    python scripts/check_admin_claim.py            # uses ADMIN_UID from .env

Exit code is 0 for both PASS and FAIL; 1 only if the check could not run.
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
    ScriptArgumentParser,
    print_credentials_help,
    target_uid,
)
from account_claims import check_admin_claim, print_account_not_found, print_sign_in_steps


def main(argv=None) -> int:
    parser = ScriptArgumentParser(description="Check the admin custom claim on a user")
    parser.add_argument("--uid", help="User UID (default: ADMIN_UID)")
    try:
        args = parser.parse_args(argv)
        uid = target_uid(args.uid)
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
        print("\nCHECKING ADMIN CLAIM STATUS...\n")
        user, passed = check_admin_claim(ctx, uid)

        print(f"Project ID: {ctx.project_id}")
        print(f"User Email: {user.email}")
        print(f"User UID: {user.uid}")
        print(f"Custom Claims: {user.custom_claims or 'none (no claims set)'}")
        print("\n" + "=" * 70)
        if passed:
            print("PASS: admin claim is set")
            print_sign_in_steps()
        else:
            print("FAIL: admin claim is NOT set")
            print("\nTo fix this, run:")
            print(f"  python scripts/set_admin_claim.py {uid}")
            print("or the combined script:")
            print(f"  python scripts/set_and_verify_admin.py --uid {uid}")
        print("=" * 70 + "\n")
        return 0
    except AccountNotFound as e:
        print_account_not_found(ctx, e)
        return 1
    except Exception as e:
        print(f"\nERROR: {e}")
        return 1
    finally:
        ctx.close()


if __name__ == "__main__":
    raise SystemExit(main())
