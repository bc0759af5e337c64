"""
身分初始化

啟動時取得一個不透明的身分令牌：有設定 INITIAL_AUTH_TOKEN 時使用自訂令牌，
否則產生匿名令牌。令牌本身不做驗證，只用於標記寫入來源。
"""

import hashlib
import secrets
from dataclasses import dataclass
from typing import Optional
import structlog

from src.vcardqr.core.exceptions import AuthBootstrapError

logger = structlog.get_logger()


@dataclass(frozen=True)
class AuthSession:
    """身分令牌"""
    uid: str
    token: str
    anonymous: bool


class IdentityProvider:
    """身分提供者"""

    def __init__(self, custom_token: Optional[str] = None):
        self.custom_token = custom_token

    def bootstrap(self) -> AuthSession:
        """
        取得身分令牌

        Raises:
            AuthBootstrapError: 自訂令牌為空白字串
        """
        if self.custom_token is not None:
            token = self.custom_token.strip()
            if not token:
                logger.error("Configured auth token is blank")
                raise AuthBootstrapError(details={"reason": "blank_token"})
            uid = hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]
            logger.info("Signed in with custom token", uid=uid)
            return AuthSession(uid=uid, token=token, anonymous=False)

        session = AuthSession(
            uid=f"anon-{secrets.token_hex(8)}",
            token=secrets.token_urlsafe(32),
            anonymous=True,
        )
        logger.info("Signed in anonymously", uid=session.uid)
        return session
