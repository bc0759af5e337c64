"""QR Code 產生工具"""

import base64
from io import BytesIO
from typing import Optional, Tuple
from urllib.parse import quote

import qrcode
from qrcode.constants import ERROR_CORRECT_H
from qrcode.exceptions import DataOverflowError
import structlog

from src.vcardqr.core.exceptions import QRRenderError

logger = structlog.get_logger()

QR_DARK_COLOR = "#1f2937"
QR_LIGHT_COLOR = "#ffffff"

# URL 參數中不跳脫的標點
_URI_COMPONENT_SAFE = "!~*'()"


def build_card_url(origin: str, path: str, contact_id: str, template_key: str) -> str:
    """
    組出名片頁網址

    格式：<origin><path>?id=<urlencoded ID>&t=<templateKey>
    """
    return f"{origin}{path}?id={quote(contact_id, safe=_URI_COMPONENT_SAFE)}&t={template_key}"


class QRRenderer:
    """QR Code PNG 產生器"""

    def __init__(self, box_size: int = 4, border: int = 2):
        self.box_size = box_size
        self.border = border

    def render_png(self, text: str) -> bytes:
        qr = qrcode.QRCode(
            version=None,  # 依資料量自動決定
            error_correction=ERROR_CORRECT_H,
            box_size=self.box_size,
            border=self.border,
        )
        qr.add_data(text)
        qr.make(fit=True)

        img = qr.make_image(fill_color=QR_DARK_COLOR, back_color=QR_LIGHT_COLOR)
        buffer = BytesIO()
        img.save(buffer, "PNG")
        return buffer.getvalue()

    def render_data_uri(self, text: str) -> str:
        """產生可直接嵌入 <img src> 的 data URI"""
        encoded = base64.b64encode(self.render_png(text)).decode("ascii")
        return f"data:image/png;base64,{encoded}"

    def render_card_qr(
        self,
        origin: str,
        path: str,
        contact_id: Optional[str],
        template_key: str,
    ) -> Optional[Tuple[str, str]]:
        """
        產生指向名片頁的 QR Code

        Returns:
            (url, data_uri)；沒有 ID 的聯絡人回傳 None

        Raises:
            QRRenderError: 網址超出 QR Code 容量
        """
        if not contact_id:
            logger.warning("Skipping QR code for contact without ID")
            return None
        url = build_card_url(origin, path, contact_id, template_key)
        try:
            return url, self.render_data_uri(url)
        except (ValueError, DataOverflowError) as e:
            # 超過 version 40 時 qrcode 拋出 ValueError 或 DataOverflowError
            raise QRRenderError(contact_id, details={"url_length": len(url), "error": str(e)}) from e
