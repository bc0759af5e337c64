"""
自定義異常類別，用於詳細的錯誤分類和用戶友善的錯誤訊息
"""

from typing import Optional, Dict, Any


class VCardQRException(Exception):
    """基礎異常類別"""

    def __init__(self, message: str, user_message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.user_message = user_message  # 顯示給用戶的訊息
        self.details = details or {}  # 額外的除錯資訊


# ==================== CSV 解析相關異常 ====================


class RowRejectedError(VCardQRException):
    """CSV 資料列被拒絕的基礎異常"""

    pass


class MalformedRowError(RowRejectedError):
    """欄位數與標題數不符"""

    def __init__(self, line_index: int, cell_count: int, header_count: int, details: Optional[Dict[str, Any]] = None):
        message = f"Row {line_index} has {cell_count} cells, expected {header_count}"
        user_message = f"第 {line_index} 列欄位數量不符（{cell_count} / {header_count}）"
        super().__init__(message, user_message, details)
        self.line_index = line_index


class InsufficientContactDataError(RowRejectedError):
    """資料列缺少姓名、電話與 Email"""

    def __init__(self, line_index: int, details: Optional[Dict[str, Any]] = None):
        message = f"Row {line_index} has no Name, Phone or Email"
        user_message = f"第 {line_index} 列缺少姓名、電話或 Email"
        super().__init__(message, user_message, details)
        self.line_index = line_index


class SerializationPreconditionError(VCardQRException):
    """聯絡人缺少識別資訊，無法產生 vCard"""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        message = "Cannot serialize a contact without Name, Phone or Email"
        user_message = "📇 聯絡人缺少姓名、電話與 Email，無法產生名片"
        super().__init__(message, user_message, details)


class QRRenderError(VCardQRException):
    """QR Code 產生失敗（通常是網址超出 QR 容量）"""

    def __init__(self, contact_id: str, details: Optional[Dict[str, Any]] = None):
        message = f"Failed to render QR code for contact ({len(contact_id)} chars)"
        user_message = "🔳 聯絡人 ID 過長，無法產生 QR Code"
        super().__init__(message, user_message, details)
        self.contact_id = contact_id


class InvalidUploadError(VCardQRException):
    """上傳檔案無效"""

    def __init__(self, reason: str, details: Optional[Dict[str, Any]] = None):
        message = f"Invalid CSV upload: {reason}"
        user_message = {
            "missing": "Please select a CSV file.",
            "too_large": "The uploaded file is too large.",
            "encoding": "The uploaded file is not valid UTF-8 text.",
        }.get(reason, "The uploaded file could not be read.")
        super().__init__(message, user_message, details)
        self.reason = reason


# ==================== 範本相關異常 ====================


class UnknownTemplateError(VCardQRException):
    """未知的名片範本"""

    def __init__(self, template_key: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        message = f"Unknown card template: {template_key!r}"
        user_message = "Error: Invalid template selected."
        super().__init__(message, user_message, details)
        self.template_key = template_key


# ==================== 儲存相關異常 ====================


class StorageError(VCardQRException):
    """儲存層基礎異常"""

    pass


class StorageUnavailableError(StorageError):
    """無法建立儲存連線"""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        message = "Contact storage backend is unavailable"
        user_message = "Failed to initialize database connection."
        super().__init__(message, user_message, details)


class StorageWriteError(StorageError):
    """寫入聯絡人失敗"""

    def __init__(self, contact_id: str, details: Optional[Dict[str, Any]] = None):
        message = f"Failed to save contact {contact_id}"
        user_message = f"Failed to save contact {contact_id}."
        super().__init__(message, user_message, details)
        self.contact_id = contact_id


class StorageReadError(StorageError):
    """讀取聯絡人失敗"""

    def __init__(self, contact_id: str, details: Optional[Dict[str, Any]] = None):
        message = f"Failed to load contact {contact_id}"
        user_message = "Database Load Error"
        if details and details.get("error"):
            user_message += f": {details['error']}"
        super().__init__(message, user_message, details)
        self.contact_id = contact_id


class ContactNotFoundError(StorageError):
    """找不到聯絡人"""

    def __init__(self, contact_id: str, details: Optional[Dict[str, Any]] = None):
        message = f"Contact {contact_id} not found"
        user_message = f'Error: Contact with ID "{contact_id}" not found in the database.'
        super().__init__(message, user_message, details)
        self.contact_id = contact_id


# ==================== 身分驗證相關異常 ====================


class AuthBootstrapError(VCardQRException):
    """身分初始化失敗"""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        message = "Identity bootstrap failed"
        user_message = "Auth Error: unable to obtain an identity token."
        super().__init__(message, user_message, details)


# ==================== 輔助函數 ====================


def get_user_friendly_message(exception: Exception, verbose: bool = False) -> str:
    """
    從異常中提取用戶友善的錯誤訊息

    Args:
        exception: 異常物件
        verbose: 是否顯示詳細的技術錯誤訊息（開發模式）

    Returns:
        用戶友善的錯誤訊息
    """
    if isinstance(exception, VCardQRException):
        message = exception.user_message
        if verbose:
            message += f"\n\n[{type(exception).__name__}] {str(exception)}"
            if exception.details:
                message += f"\n{exception.details}"
        return message

    # 非自定義異常，返回預設訊息
    if verbose:
        return f"Error: {type(exception).__name__}: {str(exception)}"
    else:
        return "Error: something went wrong, please try again."
