"""Utility for resolving account names to IDs."""

from paramiyonet.domain.account import AccountService
from paramiyonet.domain.errors import AccountNotFound


def resolve_account(account_service: AccountService, user_id: str, account: str) -> str:
    """Resolve account name or ID to account ID.

    An ID owned by the user wins, then an exact name, then a name that
    matches case-insensitively and uniquely.

    Args:
        account_service: AccountService instance
        user_id: Owning user ID
        account: Account name or ID

    Returns:
        Account ID

    Raises:
        AccountNotFound: If no account (or more than one) matches
    """
    account_obj = account_service.get_account(account)
    if account_obj is not None and account_obj.user_id == user_id:
        return account_obj.id

    accounts = account_service.list_accounts(user_id, include_inactive=True)
    for acc in accounts:
        if acc.name == account:
            return acc.id

    matches = [acc for acc in accounts if acc.name.casefold() == account.casefold()]
    if len(matches) == 1:
        return matches[0].id
    if matches:
        raise AccountNotFound(f"Account name '{account}' is ambiguous; use the account ID")

    raise AccountNotFound(f"Account '{account}' not found")
