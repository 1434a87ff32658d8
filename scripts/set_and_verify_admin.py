#!/usr/bin/env python3
"""Set the admin claim and read it straight back.

Catches the wrong-project / wrong-UID mistakes before you go and sign in
on the device.

Usage:
    python scripts/set_and_verify_admin.py --uid <uid>
    python scripts/set_and_verify_admin.py         # uses ADMIN_UID from .env
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
from account_claims import (
    check_admin_claim,
    grant_admin_claim,
    print_account_not_found,
    print_project_banner,
    print_sign_in_steps,
)


def main(argv=None) -> int:
    parser = ScriptArgumentParser(description="Set the admin claim and verify it immediately")
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
        print("\nSETTING ADMIN CLAIM...\n")
        print_project_banner(ctx)
        print(f"Target UID: {uid}")

        grant_admin_claim(ctx, ctx.get_account(uid))
        print("\nset_custom_user_claims() completed")

        print("\nVERIFYING...\n")
        user, passed = check_admin_claim(ctx, uid)
        print(f"User Email: {user.email}")
        print(f"Custom Claims: {user.custom_claims}")
        print("\n" + "=" * 70)
        if passed:
            print("PASS: admin claim verified immediately")
            print_sign_in_steps()
        else:
            print("FAIL: claim not visible immediately after setting")
            print("\nPossible causes:")
            print(f"  1. Wrong Firebase project (key is for '{ctx.project_id}')")
            print(f"  2. Wrong UID (used '{uid}')")
            print("\nRun scripts/check_admin_claim.py to check again")
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
