"""
名片頁範本

TemplateKind 為封閉列舉，每個成員對應一個渲染函數：
- A: Teal 主題（專業、滿版橫幅）
- B: Blue 主題（極簡）
- C: Indigo 主題（圖示、線條）
"""

from enum import Enum
from typing import Callable, Dict, Optional
from flask import render_template, url_for

from src.vcardqr.core.models.card import StoredContact
from src.vcardqr.core.exceptions import UnknownTemplateError


class TemplateKind(str, Enum):
    A = "A"
    B = "B"
    C = "C"

    @classmethod
    def parse(cls, key: Optional[str]) -> "TemplateKind":
        """解析範本代號，未知代號拋出 UnknownTemplateError"""
        try:
            return cls((key or "").strip().upper())
        except ValueError:
            raise UnknownTemplateError(key) from None


TEMPLATE_LABELS = {
    TemplateKind.A: "Template A: Teal Theme (Professional)",
    TemplateKind.B: "Template B: Blue Theme (Minimalist)",
    TemplateKind.C: "Template C: Indigo Theme (Iconic)",
}


def _initial(value: Optional[str], fallback: str) -> str:
    return (value or fallback)[0]


def _render(template_name: str, contact: StoredContact, **extra) -> str:
    return render_template(
        template_name,
        contact=contact,
        download_url=url_for("cards.download", contact_id=contact.ID),
        **extra
    )


def render_template_a(contact: StoredContact) -> str:
    return _render(
        "cards/template_a.html",
        contact,
        avatar=_initial(contact.Name, "C"),
        banner=contact.Organization or "Business Contact",
    )


def render_template_b(contact: StoredContact) -> str:
    return _render("cards/template_b.html", contact, avatar=_initial(contact.Name, "C"))


def render_template_c(contact: StoredContact) -> str:
    # C 範本頭像使用公司名稱首字
    return _render("cards/template_c.html", contact, avatar=_initial(contact.Organization, "O"))


TEMPLATE_RENDERERS: Dict[TemplateKind, Callable[[StoredContact], str]] = {
    TemplateKind.A: render_template_a,
    TemplateKind.B: render_template_b,
    TemplateKind.C: render_template_c,
}


def render_contact_page(kind: TemplateKind, contact: StoredContact) -> str:
    return TEMPLATE_RENDERERS[kind](contact)
