from mcpresso.oauthstore.model.tokens import AuthorizationCode as AuthorizationCodeRow
from mcpresso.oauthstore.store.grants import GrantStore
from mcpresso.oauthstore.store.types import AuthorizationCode


class AuthorizationCodeStore(GrantStore[AuthorizationCodeRow, AuthorizationCode]):
    """Single-use authorization codes.

    The engine deletes a code right after redeeming it; expired codes that
    were never redeemed are left to cleanup_expired.
    """

    row_class = AuthorizationCodeRow
    entity_class = AuthorizationCode
    key_column = "code"
    label = "authorization code"
