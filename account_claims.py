"""Admin custom-claim helpers shared by the claim scripts.

Claims are written read-merge-write: whatever else is on the account
(roles, tiers) survives, only the `admin` key is touched.
"""
from admin_context import AccountNotFound, InvalidIdentifier, expected_project_id

ADMIN_CLAIM = "admin"


def is_email(identifier: str) -> bool:
    return "@" in identifier


def resolve_account(ctx, identifier: str):
    """Look up a user by email (contains '@') or UID."""
    identifier = (identifier or "").strip()
    if not identifier:
        raise InvalidIdentifier(identifier, "empty")
    if is_email(identifier):
        return ctx.get_account_by_email(identifier)
    return ctx.get_account(identifier)


def grant_admin_claim(ctx, user) -> dict:
    """Set admin=True on the user, keeping existing claims. Returns the claims written."""
    claims = dict(user.custom_claims or {})
    claims[ADMIN_CLAIM] = True
    ctx.set_custom_claims(user.uid, claims)
    return claims


def has_admin_claim(claims) -> bool:
    """True only if the claim is present and exactly boolean True."""
    if not isinstance(claims, dict):
        return False
    return claims.get(ADMIN_CLAIM) is True


def check_admin_claim(ctx, uid: str) -> tuple:
    """Fresh read of the account. Returns (user, passed)."""
    user = ctx.get_account(uid)
    return user, has_admin_claim(user.custom_claims)


# ============================================================
# OPERATOR OUTPUT
# ============================================================

def print_project_banner(ctx):
    print(f"Project ID: {ctx.project_id}")
    expected = expected_project_id()
    if expected and expected != ctx.project_id:
        print(f"WARNING: the app uses project '{expected}' but this key is for '{ctx.project_id}'.")
        print("   You are probably using the WRONG service account key!")


def print_account_not_found(ctx, error: AccountNotFound):
    print(f"\nERROR: {error}")
    print("This usually means one of:")
    print("  - The user really does not exist. Create it first or check the identifier.")
    project = getattr(ctx, "project_id", None)
    expected = expected_project_id()
    if expected:
        print(f"  - The key is from a different project: app uses '{expected}', key is '{project}'.")
    else:
        print(f"  - The key is from a different project (key is '{project}').")
    print("    Download the service account key from the CORRECT project.")


def print_sign_in_steps():
    print("\nNEXT STEPS:")
    print("  1. SIGN OUT of the app completely")
    print("  2. SIGN IN again (forces an ID token refresh)")
    print("  3. The ID token claims must now show admin: true")
    print("  4. If it is still missing, check the project ID above and force a token refresh")
